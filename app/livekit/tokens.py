import json
import random
import string
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any, Optional, Tuple

from livekit import api
from livekit.api.access_token import Claims

from app.core.config import DEFAULT_TOKEN_TTL, Settings
from app.core.errors import SigningError
from app.domain.schemas import CapabilityGrant, IssueRequest, IssueResult, SignedCredential

DEFAULT_ROOM = "broadcast"
MAX_NAME_LENGTH = 64
GUEST_PREFIX = "guest-"
GUEST_SUFFIX_LENGTH = 6
GUEST_ALPHABET = string.ascii_lowercase + string.digits


@dataclass(frozen=True)
class SigningContext:
    """Key pair, TTL and media URL shared read-only by every issuance."""
    url: str
    api_key: str
    api_secret: str = field(repr=False)
    ttl: int = DEFAULT_TOKEN_TTL

    @classmethod
    def from_settings(cls, settings: Settings) -> "SigningContext":
        return cls(
            url=settings.LIVEKIT_URL,
            api_key=settings.LIVEKIT_API_KEY,
            api_secret=settings.LIVEKIT_API_SECRET,
            ttl=settings.TOKEN_TTL,
        )


def normalize_room(room: Any) -> str:
    if isinstance(room, str) and room:
        return room
    return DEFAULT_ROOM


def guest_identity(rng: Optional[random.Random] = None) -> str:
    # Display label only, collisions between concurrent guests are fine
    rng = rng or random
    suffix = "".join(rng.choice(GUEST_ALPHABET) for _ in range(GUEST_SUFFIX_LENGTH))
    return GUEST_PREFIX + suffix


def derive_identity(name: Any, rng: Optional[random.Random] = None) -> str:
    if name:
        identity = str(name)[:MAX_NAME_LENGTH]
        if identity:
            return identity
    return guest_identity(rng)


def serialize_metadata(metadata: Any) -> Tuple[Optional[str], Optional[str]]:
    """Returns (metadata, warning). Exactly one of them is None."""
    if isinstance(metadata, str):
        return metadata, None
    try:
        return json.dumps(metadata, separators=(",", ":"), ensure_ascii=False, allow_nan=False), None
    except (TypeError, ValueError, RecursionError) as e:
        return None, f"metadata dropped, not serializable: {type(e).__name__}"


def issue(request: IssueRequest, context: SigningContext, rng: Optional[random.Random] = None) -> IssueResult:
    room = normalize_room(request.room)
    is_host = isinstance(request.role, str) and request.role == "host"
    identity = derive_identity(request.name, rng)
    grant = CapabilityGrant(room=room, can_publish=is_host)

    warnings = []
    metadata = None
    if request.has_metadata:
        metadata, warning = serialize_metadata(request.metadata)
        if warning:
            warnings.append(warning)

    # AccessToken falls back to LIVEKIT_* env vars when given blanks;
    # only the injected context may sign
    if not context.api_key or not context.api_secret:
        raise SigningError("signing context has no api key or secret")

    try:
        at = api.AccessToken(context.api_key, context.api_secret) \
            .with_identity(identity) \
            .with_name(identity) \
            .with_ttl(timedelta(seconds=context.ttl)) \
            .with_grants(grant.to_video_grants())
        if metadata is not None:
            at = at.with_metadata(metadata)
        token = at.to_jwt()
    except Exception as e:
        raise SigningError(f"failed to sign credential: {type(e).__name__}") from e

    credential = SignedCredential(
        url=context.url,
        token=token,
        identity=identity,
        role="host" if is_host else "viewer",
        room=room,
    )
    return IssueResult(credential=credential, grant=grant, warnings=warnings)


def verify_token(token: str, context: SigningContext) -> Claims:
    return api.TokenVerifier(context.api_key, context.api_secret).verify(token)
