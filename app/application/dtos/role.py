"""DTOs for role use cases (no dependency on ORM)."""

from dataclasses import dataclass
from datetime import datetime
from typing import Any


@dataclass(frozen=True)
class RoleResult:
    """Role read-model (result of get_by_id, list_visible, create_role, etc.)."""

    id: str
    name: str
    description: str | None
    type: str
    parent_role_id: str | None
    priority: int
    organization_id: str | None
    is_active: bool
    is_default: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass(frozen=True)
class RolePermissionResult:
    """Per-role permission row (scope, resource pattern, action, allow/deny, conditions)."""

    id: str
    role_id: str
    scope: str
    resource: str
    action: str
    is_allow: bool
    conditions: list[dict[str, Any]] | None
    created_at: datetime | None = None


@dataclass(frozen=True)
class RoleResourceResult:
    """Resource-scoped grant: actions a role may take on one concrete resource."""

    id: str
    role_id: str
    resource_type: str
    resource_id: str
    allowed_actions: list[str]
    created_at: datetime | None = None
