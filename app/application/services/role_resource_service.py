"""Resource-scoped grants: which actions a role may take on one concrete resource."""

from __future__ import annotations

from app.application.dtos.role import RoleResourceResult
from app.application.interfaces.repositories import IRoleResourceRepository
from app.application.interfaces.services import IApiAuditLogService, ICacheService
from app.application.services.base import RbacWriteService
from app.application.services.role_hierarchy_service import RoleHierarchyService
from app.domain.entities.role import RoleResourceEntity
from app.domain.exceptions import ResourceNotFoundException
from app.shared.enums import AuditAction


class RoleResourceService(RbacWriteService):
    """Grant, list and revoke RoleResource rows."""

    def __init__(
        self,
        role_resource_repo: IRoleResourceRepository,
        hierarchy: RoleHierarchyService,
        *,
        audit_service: IApiAuditLogService | None = None,
        cache: ICacheService | None = None,
    ) -> None:
        super().__init__(audit_service=audit_service, cache=cache)
        self._repo = role_resource_repo
        self._hierarchy = hierarchy

    async def list_by_role(self, role_id: str) -> list[RoleResourceResult]:
        await self._hierarchy.get_role(role_id)
        return await self._repo.list_by_roles([role_id])

    async def grant(
        self,
        actor_id: str | None,
        role_id: str,
        resource_type: str,
        resource_id: str,
        allowed_actions: list[str],
    ) -> RoleResourceResult:
        """Create or replace the role's grant on the resource.

        Raises:
            ValidationException: If allowed_actions is empty.
            ResourceNotFoundException: If the role does not exist.
        """
        actions = list(dict.fromkeys(allowed_actions))
        RoleResourceEntity(role_id, resource_type, resource_id, actions)
        await self._hierarchy.get_role(role_id)
        existing = await self._repo.get_by_key(role_id, resource_type, resource_id)
        if existing is None:
            result = await self._repo.create(role_id, resource_type, resource_id, actions)
            action = AuditAction.CREATED
        else:
            updated = await self._repo.update_actions(existing.id, actions)
            if updated is None:
                raise ResourceNotFoundException("role_resource", existing.id)
            result = updated
            action = AuditAction.UPDATED
        await self._record(
            actor_id, action, "role_resource", result.id,
            old_values=existing, new_values=result,
        )
        return result

    async def revoke(self, actor_id: str | None, role_id: str, role_resource_id: str) -> None:
        existing = await self._repo.get_by_id(role_resource_id)
        if existing is None or existing.role_id != role_id:
            raise ResourceNotFoundException("role_resource", role_resource_id)
        await self._repo.delete(role_resource_id)
        await self._record(
            actor_id, AuditAction.DELETED, "role_resource", role_resource_id,
            old_values=existing,
        )
