"""GroupRole repository: group -> role grants (no expiry, no approval)."""

from __future__ import annotations

from collections.abc import Iterable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.dtos.grant import GroupRoleResult
from app.infrastructure.persistence.models.grant import GroupRole
from app.infrastructure.persistence.repositories.base import BaseRepository


def _group_role_to_result(g: GroupRole) -> GroupRoleResult:
    return GroupRoleResult(
        id=g.id,
        group_id=g.group_id,
        role_id=g.role_id,
        granted_by=g.granted_by,
        granted_at=g.granted_at,
    )


class GroupRoleRepository(BaseRepository[GroupRole]):
    """Group -> role link table. Implements IGroupRoleRepository."""

    duplicate_assignment_type = "group_role"

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, GroupRole)

    async def get_by_group_and_role(
        self, group_id: str, role_id: str
    ) -> GroupRoleResult | None:
        result = await self.db.execute(
            select(GroupRole).where(
                GroupRole.group_id == group_id, GroupRole.role_id == role_id
            )
        )
        row = result.scalar_one_or_none()
        return _group_role_to_result(row) if row else None

    async def list_by_groups(self, group_ids: Iterable[str]) -> list[GroupRoleResult]:
        ids = list(set(group_ids))
        if not ids:
            return []
        result = await self.db.execute(
            select(GroupRole).where(GroupRole.group_id.in_(ids)).order_by(GroupRole.granted_at)
        )
        return [_group_role_to_result(g) for g in result.scalars().all()]

    async def count_by_role(self, role_id: str) -> int:
        return await self._count_where(GroupRole.role_id == role_id)

    async def create(  # type: ignore[override]
        self, group_id: str, role_id: str, granted_by: str | None = None
    ) -> GroupRoleResult:
        grant = GroupRole(group_id=group_id, role_id=role_id, granted_by=granted_by)
        created = await super().create(grant, group_id=group_id, role_id=role_id)
        return _group_role_to_result(created)

    async def delete(self, group_id: str, role_id: str) -> bool:
        return (
            await self._delete_where(
                GroupRole.group_id == group_id, GroupRole.role_id == role_id
            )
            > 0
        )

    async def delete_by_role(self, role_id: str) -> int:
        return await self._delete_where(GroupRole.role_id == role_id)
