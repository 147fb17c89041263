"""Role repository. Read methods return RoleResult (DTO); implements IRoleRepository."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from sqlalchemy import or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.dtos.role import RoleResult
from app.infrastructure.persistence.models.role import Role
from app.infrastructure.persistence.repositories.base import BaseRepository


def _role_to_result(r: Role) -> RoleResult:
    """Map ORM Role to application RoleResult."""
    return RoleResult(
        id=r.id,
        name=r.name,
        description=r.description,
        type=r.type,
        parent_role_id=r.parent_role_id,
        priority=r.priority,
        organization_id=r.organization_id,
        is_active=r.is_active,
        is_default=r.is_default,
        created_at=r.created_at,
        updated_at=r.updated_at,
    )


class RoleRepository(BaseRepository[Role]):
    """Role repository."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, Role)

    async def get_by_id(self, role_id: str) -> RoleResult | None:
        role = await self.get_entity(role_id)
        return _role_to_result(role) if role else None

    async def get_by_ids(self, role_ids: Iterable[str]) -> list[RoleResult]:
        return [_role_to_result(r) for r in await self.get_entities(role_ids)]

    async def get_by_name(
        self, name: str, organization_id: str | None
    ) -> RoleResult | None:
        org_clause = (
            Role.organization_id.is_(None)
            if organization_id is None
            else Role.organization_id == organization_id
        )
        result = await self.db.execute(select(Role).where(Role.name == name, org_clause))
        row = result.scalar_one_or_none()
        return _role_to_result(row) if row else None

    async def list_roles(
        self,
        organization_id: str | None = None,
        *,
        include_inactive: bool = False,
        skip: int = 0,
        limit: int = 100,
    ) -> list[RoleResult]:
        q = select(Role)
        if organization_id is None:
            q = q.where(Role.organization_id.is_(None))
        else:
            q = q.where(
                or_(Role.organization_id == organization_id, Role.organization_id.is_(None))
            )
        if not include_inactive:
            q = q.where(Role.is_active.is_(True))
        q = q.order_by(Role.priority.desc(), Role.name).offset(skip).limit(limit)
        result = await self.db.execute(q)
        return [_role_to_result(r) for r in result.scalars().all()]

    async def list_children(self, role_id: str) -> list[RoleResult]:
        result = await self.db.execute(
            select(Role).where(Role.parent_role_id == role_id).order_by(Role.name)
        )
        return [_role_to_result(r) for r in result.scalars().all()]

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
        """Create a role; return read-model DTO."""
        role = Role(
            name=name,
            description=description,
            type=type,
            parent_role_id=parent_role_id,
            priority=priority,
            organization_id=organization_id,
            is_active=is_active,
            is_default=is_default,
        )
        created = await self.create(role)
        return _role_to_result(created)

    async def update_role(
        self, role_id: str, changes: dict[str, Any]
    ) -> RoleResult | None:
        role = await self.get_entity(role_id)
        if role is None:
            return None
        return _role_to_result(await self.update(role, changes))

    async def delete_role(self, role_id: str) -> bool:
        return await self._delete_where(Role.id == role_id) > 0

    async def detach_children(self, role_id: str) -> int:
        result = await self.db.execute(
            update(Role).where(Role.parent_role_id == role_id).values(parent_role_id=None)
        )
        await self.db.flush()
        return result.rowcount or 0
