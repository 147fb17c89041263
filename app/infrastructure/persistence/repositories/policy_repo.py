"""Policy repository: rbac_policy rows and role_policy attachments."""

from __future__ import annotations

import copy
from collections.abc import Iterable
from typing import Any

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.dtos.policy import PolicyCreate, PolicyResult, RolePolicyResult
from app.infrastructure.persistence.models.policy import RbacPolicy, RolePolicy
from app.infrastructure.persistence.repositories.base import BaseRepository


def _policy_to_result(p: RbacPolicy) -> PolicyResult:
    return PolicyResult(
        id=p.id,
        name=p.name,
        description=p.description,
        is_template=p.is_template,
        permissions=copy.deepcopy(p.permissions) if p.permissions is not None else [],
        conditions=copy.deepcopy(p.conditions) if p.conditions is not None else {},
        organization_id=p.organization_id,
        created_by=p.created_by,
        is_active=p.is_active,
        created_at=p.created_at,
        updated_at=p.updated_at,
    )


def _attachment_to_result(a: RolePolicy) -> RolePolicyResult:
    return RolePolicyResult(
        id=a.id,
        role_id=a.role_id,
        policy_id=a.policy_id,
        attached_by=a.attached_by,
        attached_at=a.attached_at,
    )


class _RolePolicyRepository(BaseRepository[RolePolicy]):
    duplicate_assignment_type = "role_policy"

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, RolePolicy)


class PolicyRepository(BaseRepository[RbacPolicy]):
    """Implements IPolicyRepository. JSON columns round-trip unchanged."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, RbacPolicy)
        self._attachments = _RolePolicyRepository(db)

    async def get_by_id(self, policy_id: str) -> PolicyResult | None:
        row = await self.get_entity(policy_id)
        return _policy_to_result(row) if row else None

    async def list_policies(
        self,
        organization_id: str | None = None,
        *,
        is_template: bool | None = None,
        include_inactive: bool = False,
        skip: int = 0,
        limit: int = 100,
    ) -> list[PolicyResult]:
        q = select(RbacPolicy)
        if organization_id is not None:
            q = q.where(
                or_(
                    RbacPolicy.organization_id == organization_id,
                    RbacPolicy.organization_id.is_(None),
                )
            )
        if is_template is not None:
            q = q.where(RbacPolicy.is_template.is_(is_template))
        if not include_inactive:
            q = q.where(RbacPolicy.is_active.is_(True))
        q = q.order_by(RbacPolicy.name).offset(skip).limit(limit)
        result = await self.db.execute(q)
        return [_policy_to_result(p) for p in result.scalars().all()]

    async def create(self, data: PolicyCreate) -> PolicyResult:  # type: ignore[override]
        row = RbacPolicy(
            name=data.name,
            description=data.description,
            is_template=data.is_template,
            permissions=copy.deepcopy(data.permissions),
            conditions=copy.deepcopy(data.conditions),
            organization_id=data.organization_id,
            created_by=data.created_by,
            is_active=True,
        )
        return _policy_to_result(await super().create(row))

    async def update(  # type: ignore[override]
        self, policy_id: str, changes: dict[str, Any]
    ) -> PolicyResult | None:
        row = await self.get_entity(policy_id)
        if row is None:
            return None
        updated = await super().update(row, copy.deepcopy(changes))
        return _policy_to_result(updated)

    async def delete(self, policy_id: str) -> bool:
        await self._attachments._delete_where(RolePolicy.policy_id == policy_id)
        return await self._delete_where(RbacPolicy.id == policy_id) > 0

    async def list_for_roles(
        self, role_ids: Iterable[str]
    ) -> list[tuple[str, PolicyResult]]:
        ids = list(set(role_ids))
        if not ids:
            return []
        result = await self.db.execute(
            select(RolePolicy.role_id, RbacPolicy)
            .join(RbacPolicy, RbacPolicy.id == RolePolicy.policy_id)
            .where(RolePolicy.role_id.in_(ids))
            .order_by(RolePolicy.role_id, RbacPolicy.name)
        )
        return [(role_id, _policy_to_result(policy)) for role_id, policy in result.all()]

    async def attach(
        self, role_id: str, policy_id: str, attached_by: str | None = None
    ) -> RolePolicyResult:
        row = RolePolicy(role_id=role_id, policy_id=policy_id, attached_by=attached_by)
        created = await self._attachments.create(row, role_id=role_id, policy_id=policy_id)
        return _attachment_to_result(created)

    async def detach(self, role_id: str, policy_id: str) -> bool:
        removed = await self._attachments._delete_where(
            RolePolicy.role_id == role_id, RolePolicy.policy_id == policy_id
        )
        return removed > 0

    async def delete_attachments_for_role(self, role_id: str) -> int:
        return await self._attachments._delete_where(RolePolicy.role_id == role_id)
