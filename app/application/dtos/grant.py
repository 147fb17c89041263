"""DTOs for role grants (user and group) and group membership."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class UserRoleResult:
    """User -> role grant read-model."""

    id: str
    user_id: str
    role_id: str
    is_temporary: bool
    expires_at: datetime | None
    granted_by: str | None
    approval_status: str
    approval_reason: str | None
    granted_at: datetime | None = None


@dataclass(frozen=True)
class GroupRoleResult:
    """Group -> role grant read-model."""

    id: str
    group_id: str
    role_id: str
    granted_by: str | None
    granted_at: datetime | None = None


@dataclass(frozen=True)
class GroupMemberResult:
    id: str
    group_id: str
    user_id: str
    created_at: datetime | None = None


@dataclass(frozen=True)
class AssignRoleCommand:
    """Input for granting a role to a user."""

    user_id: str
    role_id: str
    granted_by: str | None = None
    is_temporary: bool = False
    expires_at: datetime | None = None
    requires_approval: bool = False
    approval_reason: str | None = None
