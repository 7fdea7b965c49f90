import logging
from fastapi import APIRouter, Depends, HTTPException, Request
from app.core.errors import SigningError
from app.domain.schemas import IssueRequest, SignedCredential
from app.livekit.tokens import SigningContext, issue

logger = logging.getLogger(__name__)

router = APIRouter()


def get_signing_context(request: Request) -> SigningContext:
    return request.app.state.signing_context


async def read_issue_request(request: Request) -> IssueRequest:
    # Bad JSON, a missing body or a non-object body all mean "no fields"
    try:
        body = await request.json()
    except (ValueError, RecursionError):
        body = None
    if not isinstance(body, dict):
        body = {}
    return IssueRequest.model_validate(body)


def _respond(req: IssueRequest, ctx: SigningContext) -> SignedCredential:
    try:
        result = issue(req, ctx)
    except SigningError as e:
        logger.error(f"Token issuance failed: {e}")
        raise HTTPException(status_code=500, detail="Failed to issue token")

    cred = result.credential
    for warning in result.warnings:
        logger.warning(f"{warning} (identity={cred.identity}, room={cred.room})")
    logger.info(f"Issued {cred.role} token for {cred.identity} in room {cred.room}")
    return cred


@router.post("/token", response_model=SignedCredential)
async def create_token(
    req: IssueRequest = Depends(read_issue_request),
    ctx: SigningContext = Depends(get_signing_context),
):
    return _respond(req, ctx)


@router.post("/token/host", response_model=SignedCredential)
async def create_host_token(
    req: IssueRequest = Depends(read_issue_request),
    ctx: SigningContext = Depends(get_signing_context),
):
    return _respond(req.with_role("host"), ctx)


@router.post("/token/viewer", response_model=SignedCredential)
async def create_viewer_token(
    req: IssueRequest = Depends(read_issue_request),
    ctx: SigningContext = Depends(get_signing_context),
):
    return _respond(req.with_role("viewer"), ctx)
