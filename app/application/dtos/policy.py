"""DTOs for policies and role-policy attachments."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass(frozen=True)
class PolicyResult:
    """Policy read-model. permissions and conditions are returned exactly as stored."""

    id: str
    name: str
    description: str | None
    is_template: bool
    permissions: list[dict[str, Any]]
    conditions: dict[str, Any]
    organization_id: str | None
    created_by: str | None
    is_active: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass(frozen=True)
class PolicyCreate:
    """Input for creating a policy."""

    name: str
    description: str | None = None
    is_template: bool = False
    permissions: list[dict[str, Any]] = field(default_factory=list)
    conditions: dict[str, Any] = field(default_factory=dict)
    organization_id: str | None = None
    created_by: str | None = None


@dataclass(frozen=True)
class RolePolicyResult:
    id: str
    role_id: str
    policy_id: str
    attached_by: str | None
    attached_at: datetime | None = None
