"""Grant application service: user and group role grants, approval and membership."""

from __future__ import annotations

from datetime import datetime

from app.application.dtos.grant import (
    AssignRoleCommand,
    GroupMemberResult,
    GroupRoleResult,
    UserRoleResult,
)
from app.application.interfaces.repositories import (
    IGroupRoleRepository,
    IPrincipalRepository,
    IUserRoleRepository,
)
from app.application.interfaces.services import IApiAuditLogService, ICacheService
from app.application.services.base import RbacWriteService
from app.application.services.grant_resolver import to_grant_entity
from app.application.services.role_hierarchy_service import RoleHierarchyService
from app.domain.entities.grant import UserRoleGrantEntity
from app.domain.enums import ApprovalStatus
from app.domain.exceptions import (
    PrincipalNotFoundException,
    ResourceNotFoundException,
)
from app.shared.enums import AuditAction
from app.shared.telemetry.logging import get_logger
from app.shared.utils.datetime import utc_now

logger = get_logger(__name__)


class GrantService(RbacWriteService):
    """Grant, approve, reject and revoke roles; manage group membership."""

    def __init__(
        self,
        user_role_repo: IUserRoleRepository,
        group_role_repo: IGroupRoleRepository,
        principal_repo: IPrincipalRepository,
        hierarchy: RoleHierarchyService,
        *,
        audit_service: IApiAuditLogService | None = None,
        cache: ICacheService | None = None,
    ) -> None:
        super().__init__(audit_service=audit_service, cache=cache)
        self._user_role_repo = user_role_repo
        self._group_role_repo = group_role_repo
        self._principal_repo = principal_repo
        self._hierarchy = hierarchy

    async def _require_user(self, user_id: str) -> None:
        if await self._principal_repo.get_user(user_id) is None:
            raise PrincipalNotFoundException("user", user_id)

    async def _require_group(self, group_id: str) -> None:
        if await self._principal_repo.get_group(group_id) is None:
            raise PrincipalNotFoundException("group", group_id)

    async def list_user_roles(self, user_id: str) -> list[UserRoleResult]:
        await self._require_user(user_id)
        return await self._user_role_repo.list_by_user(user_id)

    async def list_pending(self, skip: int = 0, limit: int = 100) -> list[UserRoleResult]:
        return await self._user_role_repo.list_pending(skip=skip, limit=limit)

    async def assign_role(
        self,
        command: AssignRoleCommand,
        now: datetime | None = None,
    ) -> UserRoleResult:
        """Grant a role to a user.

        Idempotent for a live grant: a pending or currently effective grant is
        returned unchanged. A rejected or expired grant is replaced by a new one.

        Raises:
            PrincipalNotFoundException: If the user is unknown.
            ResourceNotFoundException: If the role does not exist.
            InvalidGrantException: If a temporary grant lacks a future expires_at.
        """
        now = now or utc_now()
        await self._require_user(command.user_id)
        await self._hierarchy.get_role(command.role_id)
        existing = await self._user_role_repo.get_by_user_and_role(
            command.user_id, command.role_id
        )
        if existing is not None:
            live = to_grant_entity(existing)
            if live.approval_status == ApprovalStatus.PENDING or live.is_effective(now):
                logger.debug(
                    "User %s already holds grant %s for role %s",
                    command.user_id, existing.id, command.role_id,
                )
                return existing
        UserRoleGrantEntity.validate_new(command.is_temporary, command.expires_at, now)
        if existing is not None:
            logger.info(
                "Replacing %s grant %s of role %s for user %s",
                existing.approval_status, existing.id, command.role_id, command.user_id,
            )
            await self._user_role_repo.delete(existing.id)
            await self._record(
                command.granted_by, AuditAction.UNASSIGNED, "user_role", existing.id,
                old_values=existing,
            )
        status = (
            ApprovalStatus.PENDING if command.requires_approval else ApprovalStatus.APPROVED
        )
        created = await self._user_role_repo.create(
            command.user_id,
            command.role_id,
            granted_by=command.granted_by,
            is_temporary=command.is_temporary,
            expires_at=command.expires_at if command.is_temporary else None,
            approval_status=status.value,
            approval_reason=command.approval_reason,
        )
        await self._record(
            command.granted_by, AuditAction.ASSIGNED, "user_role", created.id,
            new_values=created,
        )
        return created

    async def _decide_approval(
        self,
        actor_id: str | None,
        grant_id: str,
        approve: bool,
        reason: str | None,
    ) -> UserRoleResult:
        grant = await self._user_role_repo.get_by_id(grant_id)
        if grant is None:
            raise ResourceNotFoundException("user_role", grant_id)
        entity = to_grant_entity(grant)
        if approve:
            entity.approve(reason)
        else:
            entity.reject(reason)
        updated = await self._user_role_repo.update_approval(
            grant_id, entity.approval_status.value, entity.approval_reason
        )
        if updated is None:
            raise ResourceNotFoundException("user_role", grant_id)
        await self._record(
            actor_id,
            AuditAction.APPROVED if approve else AuditAction.REJECTED,
            "user_role",
            grant_id,
            old_values=grant,
            new_values=updated,
        )
        return updated

    async def approve(
        self, actor_id: str | None, grant_id: str, reason: str | None = None
    ) -> UserRoleResult:
        """pending -> approved.

        Raises:
            ResourceNotFoundException: If the grant does not exist.
            InvalidGrantException: If the grant is not pending.
        """
        return await self._decide_approval(actor_id, grant_id, True, reason)

    async def reject(
        self, actor_id: str | None, grant_id: str, reason: str | None = None
    ) -> UserRoleResult:
        """pending -> rejected.

        Raises:
            ResourceNotFoundException: If the grant does not exist.
            InvalidGrantException: If the grant is not pending.
        """
        return await self._decide_approval(actor_id, grant_id, False, reason)

    async def revoke_user_role(self, actor_id: str | None, user_id: str, role_id: str) -> None:
        grant = await self._user_role_repo.get_by_user_and_role(user_id, role_id)
        if grant is None:
            raise ResourceNotFoundException("user_role", f"{user_id}/{role_id}")
        await self._user_role_repo.delete(grant.id)
        await self._record(
            actor_id, AuditAction.UNASSIGNED, "user_role", grant.id, old_values=grant
        )

    async def list_group_roles(self, group_id: str) -> list[GroupRoleResult]:
        await self._require_group(group_id)
        return await self._group_role_repo.list_by_groups([group_id])

    async def assign_group_role(
        self, actor_id: str | None, group_id: str, role_id: str
    ) -> GroupRoleResult:
        """Grant a role to a group. Idempotent."""
        await self._require_group(group_id)
        await self._hierarchy.get_role(role_id)
        existing = await self._group_role_repo.get_by_group_and_role(group_id, role_id)
        if existing is not None:
            return existing
        created = await self._group_role_repo.create(group_id, role_id, actor_id)
        await self._record(
            actor_id, AuditAction.ASSIGNED, "group_role", created.id, new_values=created
        )
        return created

    async def revoke_group_role(self, actor_id: str | None, group_id: str, role_id: str) -> None:
        if not await self._group_role_repo.delete(group_id, role_id):
            raise ResourceNotFoundException("group_role", f"{group_id}/{role_id}")
        await self._record(
            actor_id, AuditAction.UNASSIGNED, "group_role", None,
            old_values={"group_id": group_id, "role_id": role_id},
        )

    async def list_members(self, group_id: str) -> list[GroupMemberResult]:
        await self._require_group(group_id)
        return await self._principal_repo.list_members(group_id)

    async def add_member(
        self, actor_id: str | None, group_id: str, user_id: str
    ) -> GroupMemberResult:
        """Add a user to a group.

        Raises:
            PrincipalNotFoundException: If the group or user is unknown.
            DuplicateAssignmentException: If the user is already a member.
        """
        await self._require_group(group_id)
        await self._require_user(user_id)
        member = await self._principal_repo.add_member(group_id, user_id)
        await self._record(
            actor_id, AuditAction.ASSIGNED, "group_member", member.id, new_values=member
        )
        return member

    async def remove_member(self, actor_id: str | None, group_id: str, user_id: str) -> None:
        if not await self._principal_repo.remove_member(group_id, user_id):
            raise ResourceNotFoundException("group_member", f"{group_id}/{user_id}")
        await self._record(
            actor_id, AuditAction.UNASSIGNED, "group_member", None,
            old_values={"group_id": group_id, "user_id": user_id},
        )

    async def purge_expired(self, actor_id: str | None, now: datetime | None = None) -> int:
        """Delete temporary grants that are no longer effective by expiry. Housekeeping only."""
        now = now or utc_now()
        count = await self._user_role_repo.delete_expired(now)
        logger.info("Purged %s expired temporary grants", count)
        if count:
            await self._record(
                actor_id, AuditAction.PURGED, "user_role", None,
                new_values={"purged": count, "before": now.isoformat()},
            )
        return count
