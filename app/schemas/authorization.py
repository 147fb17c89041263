"""Authorization API schemas: decision requests, decisions and simulation rows."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from app.domain.enums import PrincipalType


class PrincipalRef(BaseModel):
    type: PrincipalType = PrincipalType.USER
    id: str = Field(..., min_length=1)


class AccessContextRequest(BaseModel):
    """Request facts. Omitted fields fall back to the HTTP request (clock, client IP, headers)."""

    now: datetime | None = None
    organization_id: str | None = None
    ip_address: str | None = None
    mfa_verified: bool | None = None
    attributes: dict[str, Any] = Field(default_factory=dict)


class AuthorizeRequest(BaseModel):
    principal: PrincipalRef
    action: str = Field(..., min_length=1, max_length=64)
    resource_type: str = Field(..., min_length=1, max_length=255)
    resource_id: str = Field(..., min_length=1, max_length=1000)
    context: AccessContextRequest = Field(default_factory=AccessContextRequest)


class DecisionResponse(BaseModel):
    effect: str
    allowed: bool
    reason: str
    effective_role_ids: list[str]
    resource_grant: bool
    deciding_priority: int | None
    matched_allows: int
    matched_denies: int


class SimulateRequest(BaseModel):
    principal: PrincipalRef
    context: AccessContextRequest = Field(default_factory=AccessContextRequest)


class SimulatedPermissionResponse(BaseModel):
    scope: str
    resource: str
    action: str
    allowed: bool
    role_id: str
    source: str
    policy_id: str | None = None
    conditions: Any = None


class EffectiveRolesResponse(BaseModel):
    principal_type: str
    principal_id: str
    organization_id: str | None
    role_ids: list[str]
    earliest_expiry: datetime | None
