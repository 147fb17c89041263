"""Principal directory repository: users, groups and memberships."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.dtos.grant import GroupMemberResult
from app.application.dtos.principal import GroupResult, UserResult
from app.infrastructure.persistence.models.user import GroupMember, User, UserGroup
from app.infrastructure.persistence.repositories.base import BaseRepository


def _user_to_result(u: User) -> UserResult:
    return UserResult(
        id=u.id,
        username=u.username,
        email=u.email,
        organization_id=u.organization_id,
        is_active=u.is_active,
    )


def _group_to_result(g: UserGroup) -> GroupResult:
    return GroupResult(id=g.id, name=g.name, organization_id=g.organization_id)


def _member_to_result(m: GroupMember) -> GroupMemberResult:
    return GroupMemberResult(
        id=m.id, group_id=m.group_id, user_id=m.user_id, created_at=m.created_at
    )


class _GroupMemberRepository(BaseRepository[GroupMember]):
    duplicate_assignment_type = "group_member"

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, GroupMember)


class PrincipalRepository(BaseRepository[User]):
    """Implements IPrincipalRepository."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, User)
        self._groups = BaseRepository(db, UserGroup)
        self._members = _GroupMemberRepository(db)

    async def get_user(self, user_id: str) -> UserResult | None:
        user = await self.get_entity(user_id)
        return _user_to_result(user) if user else None

    async def get_group(self, group_id: str) -> GroupResult | None:
        group = await self._groups.get_entity(group_id)
        return _group_to_result(group) if group else None

    async def list_group_ids_for_user(self, user_id: str) -> list[str]:
        result = await self.db.execute(
            select(GroupMember.group_id).where(GroupMember.user_id == user_id)
        )
        return list(result.scalars().all())

    async def list_members(self, group_id: str) -> list[GroupMemberResult]:
        result = await self.db.execute(
            select(GroupMember)
            .where(GroupMember.group_id == group_id)
            .order_by(GroupMember.created_at)
        )
        return [_member_to_result(m) for m in result.scalars().all()]

    async def add_member(self, group_id: str, user_id: str) -> GroupMemberResult:
        created = await self._members.create(
            GroupMember(group_id=group_id, user_id=user_id),
            group_id=group_id,
            user_id=user_id,
        )
        return _member_to_result(created)

    async def remove_member(self, group_id: str, user_id: str) -> bool:
        removed = await self._members._delete_where(
            GroupMember.group_id == group_id, GroupMember.user_id == user_id
        )
        return removed > 0

    async def create_user(
        self,
        username: str,
        email: str | None = None,
        organization_id: str | None = None,
        *,
        user_id: str | None = None,
    ) -> UserResult:
        user = User(username=username, email=email, organization_id=organization_id)
        if user_id is not None:
            user.id = user_id
        return _user_to_result(await self.create(user))

    async def create_group(
        self, name: str, organization_id: str | None = None
    ) -> GroupResult:
        group = await self._groups.create(UserGroup(name=name, organization_id=organization_id))
        return _group_to_result(group)

    async def get_user_by_username(self, username: str) -> UserResult | None:
        result = await self.db.execute(select(User).where(User.username == username))
        user = result.scalar_one_or_none()
        return _user_to_result(user) if user else None
