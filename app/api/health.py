from fastapi import APIRouter, Depends
from app.api.tokens import get_signing_context
from app.domain.schemas import HealthOut
from app.livekit.tokens import SigningContext

router = APIRouter()


@router.get("/health", response_model=HealthOut)
async def health(ctx: SigningContext = Depends(get_signing_context)):
    return HealthOut(ok=True, url=ctx.url)
