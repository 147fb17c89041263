"""RoleResource repository: resource-scoped grants."""

from __future__ import annotations

from collections.abc import Iterable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.dtos.role import RoleResourceResult
from app.infrastructure.persistence.models.role import RoleResource
from app.infrastructure.persistence.repositories.base import BaseRepository


def _role_resource_to_result(r: RoleResource) -> RoleResourceResult:
    return RoleResourceResult(
        id=r.id,
        role_id=r.role_id,
        resource_type=r.resource_type,
        resource_id=r.resource_id,
        allowed_actions=list(r.allowed_actions or []),
        created_at=r.created_at,
    )


class RoleResourceRepository(BaseRepository[RoleResource]):
    """Implements IRoleResourceRepository."""

    duplicate_assignment_type = "role_resource"

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, RoleResource)

    async def get_by_id(self, role_resource_id: str) -> RoleResourceResult | None:
        row = await self.get_entity(role_resource_id)
        return _role_resource_to_result(row) if row else None

    async def get_by_key(
        self, role_id: str, resource_type: str, resource_id: str
    ) -> RoleResourceResult | None:
        result = await self.db.execute(
            select(RoleResource).where(
                RoleResource.role_id == role_id,
                RoleResource.resource_type == resource_type,
                RoleResource.resource_id == resource_id,
            )
        )
        row = result.scalar_one_or_none()
        return _role_resource_to_result(row) if row else None

    async def list_for_resource(
        self, role_ids: Iterable[str], resource_type: str, resource_id: str
    ) -> list[RoleResourceResult]:
        ids = list(set(role_ids))
        if not ids:
            return []
        result = await self.db.execute(
            select(RoleResource).where(
                RoleResource.role_id.in_(ids),
                RoleResource.resource_type == resource_type,
                RoleResource.resource_id == resource_id,
            )
        )
        return [_role_resource_to_result(r) for r in result.scalars().all()]

    async def list_by_roles(self, role_ids: Iterable[str]) -> list[RoleResourceResult]:
        ids = list(set(role_ids))
        if not ids:
            return []
        result = await self.db.execute(
            select(RoleResource)
            .where(RoleResource.role_id.in_(ids))
            .order_by(RoleResource.resource_type, RoleResource.resource_id)
        )
        return [_role_resource_to_result(r) for r in result.scalars().all()]

    async def create(  # type: ignore[override]
        self,
        role_id: str,
        resource_type: str,
        resource_id: str,
        allowed_actions: list[str],
    ) -> RoleResourceResult:
        row = RoleResource(
            role_id=role_id,
            resource_type=resource_type,
            resource_id=resource_id,
            allowed_actions=list(allowed_actions),
        )
        created = await super().create(
            row, role_id=role_id, resource_type=resource_type, resource_id=resource_id
        )
        return _role_resource_to_result(created)

    async def update_actions(
        self, role_resource_id: str, allowed_actions: list[str]
    ) -> RoleResourceResult | None:
        row = await self.get_entity(role_resource_id)
        if row is None:
            return None
        updated = await self.update(row, {"allowed_actions": list(allowed_actions)})
        return _role_resource_to_result(updated)

    async def delete(self, role_resource_id: str) -> bool:
        return await self._delete_where(RoleResource.id == role_resource_id) > 0

    async def delete_by_role(self, role_id: str) -> int:
        return await self._delete_where(RoleResource.role_id == role_id)
