"""UserRole repository: user -> role grants with expiry and approval status."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import and_, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.dtos.grant import UserRoleResult
from app.domain.enums import ApprovalStatus
from app.infrastructure.persistence.models.grant import UserRole
from app.infrastructure.persistence.repositories.base import BaseRepository


def _user_role_to_result(g: UserRole) -> UserRoleResult:
    return UserRoleResult(
        id=g.id,
        user_id=g.user_id,
        role_id=g.role_id,
        is_temporary=g.is_temporary,
        expires_at=g.expires_at,
        granted_by=g.granted_by,
        approval_status=g.approval_status,
        approval_reason=g.approval_reason,
        granted_at=g.granted_at,
    )


class UserRoleRepository(BaseRepository[UserRole]):
    """User -> role link table. Implements IUserRoleRepository."""

    duplicate_assignment_type = "user_role"

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, UserRole)

    async def get_by_id(self, grant_id: str) -> UserRoleResult | None:
        grant = await self.get_entity(grant_id)
        return _user_role_to_result(grant) if grant else None

    async def get_by_user_and_role(
        self, user_id: str, role_id: str
    ) -> UserRoleResult | None:
        result = await self.db.execute(
            select(UserRole).where(UserRole.user_id == user_id, UserRole.role_id == role_id)
        )
        row = result.scalar_one_or_none()
        return _user_role_to_result(row) if row else None

    async def list_by_user(self, user_id: str) -> list[UserRoleResult]:
        result = await self.db.execute(
            select(UserRole)
            .where(UserRole.user_id == user_id)
            .order_by(UserRole.granted_at)
        )
        return [_user_role_to_result(g) for g in result.scalars().all()]

    async def list_pending(self, skip: int = 0, limit: int = 100) -> list[UserRoleResult]:
        result = await self.db.execute(
            select(UserRole)
            .where(UserRole.approval_status == ApprovalStatus.PENDING.value)
            .order_by(UserRole.granted_at)
            .offset(skip)
            .limit(limit)
        )
        return [_user_role_to_result(g) for g in result.scalars().all()]

    async def count_by_role(self, role_id: str) -> int:
        return await self._count_where(UserRole.role_id == role_id)

    async def create(  # type: ignore[override]
        self,
        user_id: str,
        role_id: str,
        *,
        granted_by: str | None = None,
        is_temporary: bool = False,
        expires_at: datetime | None = None,
        approval_status: str = ApprovalStatus.APPROVED.value,
        approval_reason: str | None = None,
    ) -> UserRoleResult:
        grant = UserRole(
            user_id=user_id,
            role_id=role_id,
            granted_by=granted_by,
            is_temporary=is_temporary,
            expires_at=expires_at,
            approval_status=approval_status,
            approval_reason=approval_reason,
        )
        created = await super().create(grant, user_id=user_id, role_id=role_id)
        return _user_role_to_result(created)

    async def update_approval(
        self, grant_id: str, approval_status: str, approval_reason: str | None
    ) -> UserRoleResult | None:
        grant = await self.get_entity(grant_id)
        if grant is None:
            return None
        updated = await self.update(
            grant,
            {"approval_status": approval_status, "approval_reason": approval_reason},
        )
        return _user_role_to_result(updated)

    async def delete(self, grant_id: str) -> bool:
        return await self._delete_where(UserRole.id == grant_id) > 0

    async def delete_by_role(self, role_id: str) -> int:
        return await self._delete_where(UserRole.role_id == role_id)

    async def delete_expired(self, now: datetime) -> int:
        return await self._delete_where(
            and_(
                UserRole.is_temporary.is_(True),
                or_(UserRole.expires_at.is_(None), UserRole.expires_at <= now),
            )
        )
