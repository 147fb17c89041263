"""RolePermission repository: per-role allow/deny rows."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.dtos.role import RolePermissionResult
from app.infrastructure.persistence.models.role import RolePermission
from app.infrastructure.persistence.repositories.base import BaseRepository


def _role_permission_to_result(p: RolePermission) -> RolePermissionResult:
    return RolePermissionResult(
        id=p.id,
        role_id=p.role_id,
        scope=p.scope,
        resource=p.resource,
        action=p.action,
        is_allow=p.is_allow,
        conditions=p.conditions,
        created_at=p.created_at,
    )


class RolePermissionRepository(BaseRepository[RolePermission]):
    """Implements IRolePermissionRepository."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, RolePermission)

    async def get_by_id(self, permission_id: str) -> RolePermissionResult | None:
        row = await self.get_entity(permission_id)
        return _role_permission_to_result(row) if row else None

    async def list_by_roles(
        self, role_ids: Iterable[str]
    ) -> list[RolePermissionResult]:
        ids = list(set(role_ids))
        if not ids:
            return []
        result = await self.db.execute(
            select(RolePermission)
            .where(RolePermission.role_id.in_(ids))
            .order_by(RolePermission.created_at)
        )
        return [_role_permission_to_result(p) for p in result.scalars().all()]

    async def create(  # type: ignore[override]
        self,
        role_id: str,
        scope: str,
        resource: str,
        action: str,
        *,
        is_allow: bool = True,
        conditions: list[dict[str, Any]] | None = None,
    ) -> RolePermissionResult:
        row = RolePermission(
            role_id=role_id,
            scope=scope,
            resource=resource,
            action=action,
            is_allow=is_allow,
            conditions=conditions,
        )
        return _role_permission_to_result(await super().create(row))

    async def delete(self, permission_id: str) -> bool:
        return await self._delete_where(RolePermission.id == permission_id) > 0

    async def delete_by_role(self, role_id: str) -> int:
        return await self._delete_where(RolePermission.role_id == role_id)
