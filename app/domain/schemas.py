from __future__ import annotations

from typing import Any, List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field
from livekit import api


Role = Literal["host", "viewer"]


# -------------------------
# Issuance input
# -------------------------

class IssueRequest(BaseModel):
    """Caller supplied fields. Nothing here is trusted or validated.

    Every field takes any JSON value so a request is never rejected; the
    issuer decides what each value means.
    """
    model_config = ConfigDict(extra="ignore")

    room: Any = None
    name: Any = None
    role: Any = None
    metadata: Any = None

    @property
    def has_metadata(self) -> bool:
        # explicit null counts as present, only an absent key does not
        return "metadata" in self.model_fields_set

    def with_role(self, role: Role) -> "IssueRequest":
        return self.model_copy(update={"role": role})


# -------------------------
# Grants / credentials
# -------------------------

class CapabilityGrant(BaseModel):
    room: str
    room_join: bool = True
    can_publish: bool = False
    can_subscribe: bool = True
    # Not set by the issuer; None keeps them out of the token
    can_publish_data: Optional[bool] = None
    ingress_admin: Optional[bool] = None
    room_admin: Optional[bool] = None

    def to_video_grants(self) -> api.VideoGrants:
        return api.VideoGrants(
            room=self.room,
            room_join=self.room_join,
            can_publish=self.can_publish,
            can_subscribe=self.can_subscribe,
            can_publish_data=self.can_publish_data,
            ingress_admin=self.ingress_admin,
            room_admin=self.room_admin,
        )


class SignedCredential(BaseModel):
    url: str
    token: str
    identity: str
    role: Role
    room: str


class IssueResult(BaseModel):
    credential: SignedCredential
    grant: CapabilityGrant
    warnings: List[str] = Field(default_factory=list)


# -------------------------
# API Schemas
# -------------------------

class HealthOut(BaseModel):
    ok: bool = True
    url: str
