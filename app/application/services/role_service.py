"""Role application service: role CRUD, re-parenting, role permissions and policy attachments."""

from __future__ import annotations

from typing import Any

from app.application.dtos.policy import PolicyResult, RolePolicyResult
from app.application.dtos.role import RolePermissionResult, RoleResult
from app.application.interfaces.repositories import (
    IGroupRoleRepository,
    IPolicyRepository,
    IRolePermissionRepository,
    IRoleRepository,
    IRoleResourceRepository,
    IUserRoleRepository,
)
from app.application.interfaces.services import IApiAuditLogService, ICacheService
from app.application.services.base import RbacWriteService
from app.application.services.role_hierarchy_service import RoleHierarchyService
from app.domain.entities.role import RoleEntity
from app.domain.enums import RoleType
from app.domain.exceptions import (
    ConditionEvaluationException,
    CycleDetectedException,
    ResourceNotFoundException,
    RoleInUseException,
    ValidationException,
)
from app.domain.value_objects.conditions import parse_rule_conditions
from app.domain.value_objects.core import PermissionRule
from app.shared.enums import AuditAction
from app.shared.telemetry.logging import get_logger

logger = get_logger(__name__)

UPDATABLE_FIELDS = frozenset(
    {"name", "description", "parent_role_id", "priority", "is_active", "is_default"}
)


class RoleService(RbacWriteService):
    """Administrative writes on roles. Every write is audited and clears the role cache."""

    def __init__(
        self,
        role_repo: IRoleRepository,
        user_role_repo: IUserRoleRepository,
        group_role_repo: IGroupRoleRepository,
        role_resource_repo: IRoleResourceRepository,
        role_permission_repo: IRolePermissionRepository,
        policy_repo: IPolicyRepository,
        hierarchy: RoleHierarchyService,
        *,
        delete_cascade: bool = True,
        audit_service: IApiAuditLogService | None = None,
        cache: ICacheService | None = None,
    ) -> None:
        super().__init__(audit_service=audit_service, cache=cache)
        self._role_repo = role_repo
        self._user_role_repo = user_role_repo
        self._group_role_repo = group_role_repo
        self._role_resource_repo = role_resource_repo
        self._role_permission_repo = role_permission_repo
        self._policy_repo = policy_repo
        self._hierarchy = hierarchy
        self._delete_cascade = delete_cascade

    async def get_role(self, role_id: str) -> RoleResult:
        return await self._hierarchy.get_role(role_id)

    async def list_roles(
        self,
        organization_id: str | None = None,
        *,
        include_inactive: bool = False,
        skip: int = 0,
        limit: int = 100,
    ) -> list[RoleResult]:
        return await self._role_repo.list_roles(
            organization_id, include_inactive=include_inactive, skip=skip, limit=limit
        )

    async def get_ancestors(self, role_id: str) -> list[RoleResult]:
        return await self._hierarchy.get_ancestors(role_id)

    async def create_role(
        self,
        actor_id: str | None,
        name: str,
        description: str | None = None,
        *,
        type: RoleType = RoleType.CUSTOM,
        parent_role_id: str | None = None,
        priority: int = 0,
        organization_id: str | None = None,
        is_active: bool = True,
        is_default: bool = False,
    ) -> RoleResult:
        """Create a role.

        Raises:
            ValidationException: If the name is empty or already used in the organization.
            ResourceNotFoundException: If parent_role_id does not exist.
        """
        if not name or not name.strip():
            raise ValidationException("Role name is required", field="name")
        if await self._role_repo.get_by_name(name, organization_id):
            raise ValidationException(f"Role '{name}' already exists", field="name")
        if parent_role_id is not None:
            await self._hierarchy.get_role(parent_role_id)
        created = await self._role_repo.create_role(
            name=name,
            description=description,
            type=RoleType(type).value,
            parent_role_id=parent_role_id,
            priority=priority,
            organization_id=organization_id,
            is_active=is_active,
            is_default=is_default,
        )
        await self._record(
            actor_id, AuditAction.CREATED, "role", created.id,
            new_values=created, organization_id=organization_id,
        )
        return created

    async def update_role(
        self, actor_id: str | None, role_id: str, changes: dict[str, Any]
    ) -> RoleResult:
        """Apply partial changes, re-parenting with a cycle check.

        Raises:
            ValidationException: On unknown fields or an empty name.
            ResourceNotFoundException: If the role or new parent does not exist.
            CycleDetectedException: If the new parent would create a loop.
        """
        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise ValidationException(
                f"Cannot update fields: {', '.join(sorted(unknown))}", field=sorted(unknown)[0]
            )
        current = await self._hierarchy.get_role(role_id)
        if "name" in changes:
            RoleEntity(id=role_id, name=changes["name"])
        if changes.get("parent_role_id") is not None:
            parent_id = changes["parent_role_id"]
            await self._hierarchy.get_role(parent_id)
            if await self._hierarchy.would_create_cycle(role_id, parent_id):
                raise CycleDetectedException(
                    role_id, [role_id, parent_id], self._hierarchy.max_depth
                )
        updated = await self._role_repo.update_role(role_id, dict(changes))
        if updated is None:
            raise ResourceNotFoundException("role", role_id)
        await self._record(
            actor_id, AuditAction.UPDATED, "role", role_id,
            old_values=current, new_values=updated,
            organization_id=updated.organization_id,
        )
        return updated

    async def set_active(self, actor_id: str | None, role_id: str, active: bool) -> RoleResult:
        current = await self._hierarchy.get_role(role_id)
        updated = await self._role_repo.update_role(role_id, {"is_active": active})
        if updated is None:
            raise ResourceNotFoundException("role", role_id)
        await self._record(
            actor_id,
            AuditAction.ACTIVATED if active else AuditAction.DEACTIVATED,
            "role",
            role_id,
            old_values=current,
            new_values=updated,
            organization_id=updated.organization_id,
        )
        return updated

    async def delete_role(
        self, actor_id: str | None, role_id: str, *, cascade: bool | None = None
    ) -> None:
        """Delete a role.

        Cascading deletes revoke every user and group grant of the role. Without
        cascade the delete is refused while grants exist. Resource grants,
        role permissions and policy attachments always go with the role;
        child roles are detached.

        Raises:
            ResourceNotFoundException: If the role does not exist.
            RoleInUseException: If cascade is off and grants reference the role.
        """
        role = await self._hierarchy.get_role(role_id)
        cascade = self._delete_cascade if cascade is None else cascade
        grant_count = await self._user_role_repo.count_by_role(
            role_id
        ) + await self._group_role_repo.count_by_role(role_id)
        if grant_count and not cascade:
            raise RoleInUseException(role_id, grant_count)
        revoked_users = await self._user_role_repo.delete_by_role(role_id)
        revoked_groups = await self._group_role_repo.delete_by_role(role_id)
        await self._role_resource_repo.delete_by_role(role_id)
        await self._role_permission_repo.delete_by_role(role_id)
        await self._policy_repo.delete_attachments_for_role(role_id)
        detached = await self._role_repo.detach_children(role_id)
        await self._role_repo.delete_role(role_id)
        logger.info(
            "Deleted role %s (revoked %s user and %s group grants, detached %s children)",
            role_id, revoked_users, revoked_groups, detached,
        )
        await self._record(
            actor_id, AuditAction.DELETED, "role", role_id,
            old_values=role, organization_id=role.organization_id,
        )

    async def list_permissions(self, role_id: str) -> list[RolePermissionResult]:
        await self._hierarchy.get_role(role_id)
        return await self._role_permission_repo.list_by_roles([role_id])

    async def add_permission(
        self,
        actor_id: str | None,
        role_id: str,
        scope: str,
        resource: str,
        action: str,
        *,
        is_allow: bool = True,
        conditions: list[dict[str, Any]] | None = None,
    ) -> RolePermissionResult:
        """Add a permission row to a role; conditions are validated before storing.

        Raises:
            ResourceNotFoundException: If the role does not exist.
            ValidationException: If the entry or its conditions are malformed.
        """
        await self._hierarchy.get_role(role_id)
        try:
            PermissionRule(scope, resource, action, is_allow)
        except ValueError as e:
            raise ValidationException(str(e), field="permission") from e
        try:
            parse_rule_conditions(conditions)
        except ConditionEvaluationException as e:
            raise ValidationException(e.message, field="conditions") from e
        created = await self._role_permission_repo.create(
            role_id, scope, resource, action, is_allow=is_allow, conditions=conditions
        )
        await self._record(
            actor_id, AuditAction.CREATED, "role_permission", created.id, new_values=created
        )
        return created

    async def remove_permission(
        self, actor_id: str | None, role_id: str, permission_id: str
    ) -> None:
        existing = await self._role_permission_repo.get_by_id(permission_id)
        if existing is None or existing.role_id != role_id:
            raise ResourceNotFoundException("role_permission", permission_id)
        await self._role_permission_repo.delete(permission_id)
        await self._record(
            actor_id, AuditAction.DELETED, "role_permission", permission_id,
            old_values=existing,
        )

    async def list_policies(self, role_id: str) -> list[PolicyResult]:
        await self._hierarchy.get_role(role_id)
        return [p for _, p in await self._policy_repo.list_for_roles([role_id])]

    async def attach_policy(
        self, actor_id: str | None, role_id: str, policy_id: str
    ) -> RolePolicyResult:
        """Attach a policy to a role.

        Raises:
            ResourceNotFoundException: If the role or policy does not exist.
            ValidationException: If the policy is a template.
            DuplicateAssignmentException: If already attached.
        """
        await self._hierarchy.get_role(role_id)
        policy = await self._policy_repo.get_by_id(policy_id)
        if policy is None:
            raise ResourceNotFoundException("policy", policy_id)
        if policy.is_template:
            raise ValidationException(
                "Templates cannot be attached; clone the template first", field="policy_id"
            )
        attachment = await self._policy_repo.attach(role_id, policy_id, actor_id)
        await self._record(
            actor_id, AuditAction.ATTACHED, "role_policy", attachment.id,
            new_values=attachment,
        )
        return attachment

    async def detach_policy(self, actor_id: str | None, role_id: str, policy_id: str) -> None:
        if not await self._policy_repo.detach(role_id, policy_id):
            raise ResourceNotFoundException("role_policy", f"{role_id}/{policy_id}")
        await self._record(
            actor_id, AuditAction.DETACHED, "role_policy", None,
            old_values={"role_id": role_id, "policy_id": policy_id},
        )
