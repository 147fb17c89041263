"""Grant API schemas: user role grants, group role grants and group membership."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class UserRoleAssign(BaseModel):
    """Request body for granting a role to a user."""

    role_id: str = Field(..., min_length=1)
    is_temporary: bool = False
    expires_at: datetime | None = None
    requires_approval: bool = False
    approval_reason: str | None = Field(default=None, max_length=1000)


class ApprovalDecision(BaseModel):
    """Request body for approving or rejecting a pending grant."""

    reason: str | None = Field(default=None, max_length=1000)


class UserRoleResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    role_id: str
    is_temporary: bool
    expires_at: datetime | None
    granted_by: str | None
    approval_status: str
    approval_reason: str | None
    granted_at: datetime | None = None


class GroupRoleAssign(BaseModel):
    role_id: str = Field(..., min_length=1)


class GroupRoleResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    group_id: str
    role_id: str
    granted_by: str | None
    granted_at: datetime | None = None


class GroupMemberAdd(BaseModel):
    user_id: str = Field(..., min_length=1)


class GroupMemberResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    group_id: str
    user_id: str
    created_at: datetime | None = None


class PurgeExpiredResponse(BaseModel):
    deleted: int
