"""Repository interfaces (ports) for the application layer.

Protocols define contracts that infrastructure implementations must fulfill (DIP).
All types reference application DTOs only; no infrastructure imports.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from app.application.dtos.audit_log import AuditLogEntryCreate, AuditLogResult
    from app.application.dtos.grant import (
        GroupMemberResult,
        GroupRoleResult,
        UserRoleResult,
    )
    from app.application.dtos.policy import (
        PolicyCreate,
        PolicyResult,
        RolePolicyResult,
    )
    from app.application.dtos.principal import GroupResult, UserResult
    from app.application.dtos.role import (
        RolePermissionResult,
        RoleResourceResult,
        RoleResult,
    )


# Role repository interface
class IRoleRepository(Protocol):
    """Protocol for role repository (DIP)."""

    async def get_by_id(self, role_id: str) -> RoleResult | None:
        """Return role by ID."""

    async def get_by_ids(self, role_ids: Iterable[str]) -> list[RoleResult]:
        """Return the roles that exist among role_ids (any order)."""

    async def get_by_name(
        self, name: str, organization_id: str | None
    ) -> RoleResult | None:
        """Return role by name within an organization (None = system-wide)."""

    async def list_roles(
        self,
        organization_id: str | None = None,
        *,
        include_inactive: bool = False,
        skip: int = 0,
        limit: int = 100,
    ) -> list[RoleResult]:
        """List roles visible in organization (org match or system-wide), priority desc then name."""

    async def list_children(self, role_id: str) -> list[RoleResult]:
        """Return roles whose parent is role_id."""

    async def create_role(
        self,
        name: str,
        description: str | None = None,
        *,
        type: str = "custom",
        parent_role_id: str | None = None,
        priority: int = 0,
        organization_id: str | None = None,
        is_active: bool = True,
        is_default: bool = False,
    ) -> RoleResult:
        """Create a role; return created read-model DTO."""

    async def update_role(
        self, role_id: str, changes: dict[str, Any]
    ) -> RoleResult | None:
        """Apply column changes; return updated role or None if not found."""

    async def delete_role(self, role_id: str) -> bool:
        """Delete role by ID; True if a row was removed."""

    async def detach_children(self, role_id: str) -> int:
        """Clear parent_role_id on children of role_id; return count."""


# User role grant repository interface
class IUserRoleRepository(Protocol):
    """Protocol for user -> role grants (DIP)."""

    async def get_by_id(self, grant_id: str) -> UserRoleResult | None:
        """Return grant by ID."""

    async def get_by_user_and_role(
        self, user_id: str, role_id: str
    ) -> UserRoleResult | None:
        """Return the grant of role to user if it exists."""

    async def list_by_user(self, user_id: str) -> list[UserRoleResult]:
        """Return every grant of the user (any status, including expired)."""

    async def list_pending(self, skip: int = 0, limit: int = 100) -> list[UserRoleResult]:
        """Return grants awaiting approval, oldest first."""

    async def count_by_role(self, role_id: str) -> int:
        """Return number of user grants referencing role."""

    async def create(
        self,
        user_id: str,
        role_id: str,
        *,
        granted_by: str | None = None,
        is_temporary: bool = False,
        expires_at: datetime | None = None,
        approval_status: str = "approved",
        approval_reason: str | None = None,
    ) -> UserRoleResult:
        """Create a grant. Raises DuplicateAssignmentException if (user, role) exists."""

    async def update_approval(
        self, grant_id: str, approval_status: str, approval_reason: str | None
    ) -> UserRoleResult | None:
        """Set approval status/reason; return updated grant or None."""

    async def delete(self, grant_id: str) -> bool:
        """Delete grant by ID."""

    async def delete_by_role(self, role_id: str) -> int:
        """Delete every user grant of role; return count."""

    async def delete_expired(self, now: datetime) -> int:
        """Delete temporary grants with expires_at <= now (or no expiry); return count."""


# Group role grant repository interface
class IGroupRoleRepository(Protocol):
    """Protocol for group -> role grants (DIP)."""

    async def get_by_group_and_role(
        self, group_id: str, role_id: str
    ) -> GroupRoleResult | None:
        """Return the grant of role to group if it exists."""

    async def list_by_groups(self, group_ids: Iterable[str]) -> list[GroupRoleResult]:
        """Return grants of every listed group."""

    async def count_by_role(self, role_id: str) -> int:
        """Return number of group grants referencing role."""

    async def create(
        self, group_id: str, role_id: str, granted_by: str | None = None
    ) -> GroupRoleResult:
        """Create a group grant. Raises DuplicateAssignmentException if it exists."""

    async def delete(self, group_id: str, role_id: str) -> bool:
        """Delete the grant of role to group."""

    async def delete_by_role(self, role_id: str) -> int:
        """Delete every group grant of role; return count."""


# Resource-scoped grant repository interface
class IRoleResourceRepository(Protocol):
    """Protocol for role -> concrete resource grants (DIP)."""

    async def get_by_id(self, role_resource_id: str) -> RoleResourceResult | None:
        """Return resource grant by ID."""

    async def get_by_key(
        self, role_id: str, resource_type: str, resource_id: str
    ) -> RoleResourceResult | None:
        """Return the grant for (role, resource type, resource id)."""

    async def list_for_resource(
        self, role_ids: Iterable[str], resource_type: str, resource_id: str
    ) -> list[RoleResourceResult]:
        """Return grants of any listed role on the resource."""

    async def list_by_roles(self, role_ids: Iterable[str]) -> list[RoleResourceResult]:
        """Return every resource grant of the listed roles."""

    async def create(
        self,
        role_id: str,
        resource_type: str,
        resource_id: str,
        allowed_actions: list[str],
    ) -> RoleResourceResult:
        """Create a resource grant."""

    async def update_actions(
        self, role_resource_id: str, allowed_actions: list[str]
    ) -> RoleResourceResult | None:
        """Replace allowed_actions; return updated grant or None."""

    async def delete(self, role_resource_id: str) -> bool:
        """Delete resource grant by ID."""

    async def delete_by_role(self, role_id: str) -> int:
        """Delete every resource grant of role; return count."""


# Policy repository interface (policies and role attachments)
class IPolicyRepository(Protocol):
    """Protocol for policy repository and role-policy attachments (DIP)."""

    async def get_by_id(self, policy_id: str) -> PolicyResult | None:
        """Return policy by ID."""

    async def list_policies(
        self,
        organization_id: str | None = None,
        *,
        is_template: bool | None = None,
        include_inactive: bool = False,
        skip: int = 0,
        limit: int = 100,
    ) -> list[PolicyResult]:
        """List policies visible in organization (org match or global)."""

    async def create(self, data: PolicyCreate) -> PolicyResult:
        """Create a policy; permissions and conditions stored verbatim."""

    async def update(
        self, policy_id: str, changes: dict[str, Any]
    ) -> PolicyResult | None:
        """Apply column changes; return updated policy or None."""

    async def delete(self, policy_id: str) -> bool:
        """Delete policy (and its attachments)."""

    async def list_for_roles(
        self, role_ids: Iterable[str]
    ) -> list[tuple[str, PolicyResult]]:
        """Return (role_id, policy) for every policy attached to a listed role."""

    async def attach(
        self, role_id: str, policy_id: str, attached_by: str | None = None
    ) -> RolePolicyResult:
        """Attach policy to role. Raises DuplicateAssignmentException if attached."""

    async def detach(self, role_id: str, policy_id: str) -> bool:
        """Detach policy from role."""

    async def delete_attachments_for_role(self, role_id: str) -> int:
        """Remove every policy attachment of role; return count."""


# Role permission repository interface
class IRolePermissionRepository(Protocol):
    """Protocol for per-role permission rows (DIP)."""

    async def get_by_id(self, permission_id: str) -> RolePermissionResult | None:
        """Return role permission by ID."""

    async def list_by_roles(
        self, role_ids: Iterable[str]
    ) -> list[RolePermissionResult]:
        """Return permission rows of every listed role."""

    async def create(
        self,
        role_id: str,
        scope: str,
        resource: str,
        action: str,
        *,
        is_allow: bool = True,
        conditions: list[dict[str, Any]] | None = None,
    ) -> RolePermissionResult:
        """Create a permission row for role."""

    async def delete(self, permission_id: str) -> bool:
        """Delete role permission by ID."""

    async def delete_by_role(self, role_id: str) -> int:
        """Delete every permission row of role; return count."""


# Principal directory interface
class IPrincipalRepository(Protocol):
    """Protocol for users, groups and group membership (DIP)."""

    async def get_user(self, user_id: str) -> UserResult | None:
        """Return user by ID."""

    async def get_group(self, group_id: str) -> GroupResult | None:
        """Return group by ID."""

    async def list_group_ids_for_user(self, user_id: str) -> list[str]:
        """Return IDs of every group the user belongs to."""

    async def list_members(self, group_id: str) -> list[GroupMemberResult]:
        """Return memberships of group."""

    async def add_member(self, group_id: str, user_id: str) -> GroupMemberResult:
        """Add user to group. Raises DuplicateAssignmentException if already a member."""

    async def remove_member(self, group_id: str, user_id: str) -> bool:
        """Remove user from group."""

    async def create_user(
        self,
        username: str,
        email: str | None = None,
        organization_id: str | None = None,
        *,
        user_id: str | None = None,
    ) -> UserResult:
        """Create a directory user (seeding and sync)."""

    async def create_group(
        self, name: str, organization_id: str | None = None
    ) -> GroupResult:
        """Create a directory group."""


# Audit log repository interface (append-only)
class IAuditLogRepository(Protocol):
    """Protocol for RBAC audit log repository (DIP). Append-only."""

    async def create(self, entry: AuditLogEntryCreate) -> AuditLogResult:
        """Append one audit log entry; return created record."""

    async def list(
        self,
        organization_id: str | None = None,
        *,
        skip: int = 0,
        limit: int = 100,
        resource_type: str | None = None,
        user_id: str | None = None,
        from_timestamp: datetime | None = None,
        to_timestamp: datetime | None = None,
    ) -> list[AuditLogResult]:
        """List audit log entries with optional filters (newest first, paginated)."""
