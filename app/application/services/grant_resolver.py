"""Grant resolution: a principal's effective roles at an instant.

User: effective direct grants + grants of every group the user belongs to,
expanded with ancestors. Group: its own grants, expanded the same way.
Inactive roles and roles of another organization are dropped after
expansion (the walk still passes through them).
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from app.application.dtos.decision import EffectiveRoles
from app.application.dtos.grant import UserRoleResult
from app.application.interfaces.repositories import (
    IGroupRoleRepository,
    IPrincipalRepository,
    IUserRoleRepository,
)
from app.application.interfaces.services import ICacheService
from app.application.services.role_hierarchy_service import (
    RoleHierarchyService,
    role_contributes,
)
from app.domain.entities.grant import UserRoleGrantEntity
from app.domain.enums import ApprovalStatus, PrincipalType
from app.domain.exceptions import PrincipalNotFoundException
from app.domain.value_objects.core import Principal
from app.shared.telemetry.logging import get_logger
from app.shared.telemetry.tracing import traced
from app.shared.utils.datetime import ensure_utc

logger = get_logger(__name__)

EFFECTIVE_ROLES_PREFIX = "rbac:roles"
EFFECTIVE_ROLES_PATTERN = f"{EFFECTIVE_ROLES_PREFIX}:*"
CACHE_KEY_SEP = ":"
_NO_ORG = "-"


def effective_roles_key(principal: Principal, organization_id: str | None) -> str:
    """Cache key for a principal's effective roles in an organization.

    Raises:
        ValueError: If a component contains the key separator.
    """
    org = organization_id or _NO_ORG
    for value, name in ((principal.id, "principal_id"), (org, "organization_id")):
        if CACHE_KEY_SEP in value:
            raise ValueError(
                f"Cache key component {name!r} must not contain separator {CACHE_KEY_SEP!r}"
            )
    return CACHE_KEY_SEP.join(
        [EFFECTIVE_ROLES_PREFIX, principal.type.value, principal.id, org]
    )


async def invalidate_effective_roles(cache: ICacheService | None) -> None:
    """Drop every cached effective-role set (any admin write may change them)."""
    if cache and cache.is_available():
        deleted = await cache.delete_pattern(EFFECTIVE_ROLES_PATTERN)
        logger.debug("Invalidated %s effective-role cache entries", deleted)


def to_grant_entity(grant: UserRoleResult) -> UserRoleGrantEntity:
    return UserRoleGrantEntity(
        id=grant.id,
        user_id=grant.user_id,
        role_id=grant.role_id,
        is_temporary=grant.is_temporary,
        expires_at=grant.expires_at,
        approval_status=ApprovalStatus(grant.approval_status),
        approval_reason=grant.approval_reason,
    )


class GrantResolver:
    """Resolves effective roles; caches role IDs when a cache is available."""

    def __init__(
        self,
        hierarchy: RoleHierarchyService,
        user_role_repo: IUserRoleRepository,
        group_role_repo: IGroupRoleRepository,
        principal_repo: IPrincipalRepository,
        cache: ICacheService | None = None,
        cache_ttl: int = 300,
    ) -> None:
        self.hierarchy = hierarchy
        self.user_role_repo = user_role_repo
        self.group_role_repo = group_role_repo
        self.principal_repo = principal_repo
        self.cache = cache
        self.cache_ttl = cache_ttl

    async def effective_roles_for(
        self,
        principal: Principal,
        now: datetime,
        organization_id: str | None = None,
    ) -> frozenset[str]:
        """Return IDs of the principal's effective roles at now.

        Raises:
            PrincipalNotFoundException: If the directory does not know the principal.
            CycleDetectedException: If a granted role's hierarchy loops.
        """
        detail = await self.effective_roles_detail(principal, now, organization_id)
        return detail.role_ids

    @traced("rbac.effective_roles")
    async def effective_roles_detail(
        self,
        principal: Principal,
        now: datetime,
        organization_id: str | None = None,
    ) -> EffectiveRoles:
        """Return effective roles (priority desc, then name) and the earliest grant expiry."""
        now = ensure_utc(now)
        cached = await self._read_cache(principal, now, organization_id)
        if cached is not None:
            return cached

        await self._require_principal(principal)
        role_ids, earliest_expiry = await self._granted_role_ids(principal, now)
        expanded = await self.hierarchy.expand(role_ids)
        roles = sorted(
            (r for r in expanded.values() if role_contributes(r, organization_id)),
            key=lambda r: (-r.priority, r.name, r.id),
        )
        result = EffectiveRoles(roles=tuple(roles), earliest_expiry=earliest_expiry)
        await self._write_cache(principal, now, organization_id, result)
        return result

    async def _require_principal(self, principal: Principal) -> None:
        if principal.type == PrincipalType.USER:
            found: Any = await self.principal_repo.get_user(principal.id)
        else:
            found = await self.principal_repo.get_group(principal.id)
        if found is None:
            raise PrincipalNotFoundException(principal.type.value, principal.id)

    async def _granted_role_ids(
        self, principal: Principal, now: datetime
    ) -> tuple[set[str], datetime | None]:
        role_ids: set[str] = set()
        earliest_expiry: datetime | None = None
        if principal.type == PrincipalType.USER:
            for grant in await self.user_role_repo.list_by_user(principal.id):
                if not to_grant_entity(grant).is_effective(now):
                    continue
                role_ids.add(grant.role_id)
                if grant.is_temporary and grant.expires_at is not None:
                    expiry = ensure_utc(grant.expires_at)
                    if earliest_expiry is None or expiry < earliest_expiry:
                        earliest_expiry = expiry
            group_ids = await self.principal_repo.list_group_ids_for_user(principal.id)
        else:
            group_ids = [principal.id]
        if group_ids:
            for group_grant in await self.group_role_repo.list_by_groups(group_ids):
                role_ids.add(group_grant.role_id)
        return role_ids, earliest_expiry

    async def _read_cache(
        self, principal: Principal, now: datetime, organization_id: str | None
    ) -> EffectiveRoles | None:
        if not (self.cache and self.cache.is_available()):
            return None
        key = effective_roles_key(principal, organization_id)
        cached = await self.cache.get(key)
        if not isinstance(cached, dict):
            return None
        computed_at = datetime.fromisoformat(cached["computed_at"])
        expiry_raw = cached.get("earliest_expiry")
        earliest_expiry = datetime.fromisoformat(expiry_raw) if expiry_raw else None
        # The cached set is only valid between computation and the first expiry.
        if now < computed_at or (earliest_expiry is not None and now >= earliest_expiry):
            return None
        roles = await self.hierarchy.role_repo.get_by_ids(cached["role_ids"])
        roles = sorted(
            (r for r in roles if role_contributes(r, organization_id)),
            key=lambda r: (-r.priority, r.name, r.id),
        )
        logger.debug("Effective roles cache hit for %s", key)
        return EffectiveRoles(roles=tuple(roles), earliest_expiry=earliest_expiry)

    async def _write_cache(
        self,
        principal: Principal,
        now: datetime,
        organization_id: str | None,
        result: EffectiveRoles,
    ) -> None:
        if not (self.cache and self.cache.is_available()):
            return
        ttl = self.ttl_for(result, now)
        if ttl <= 0:
            return
        await self.cache.set(
            effective_roles_key(principal, organization_id),
            {
                "role_ids": sorted(result.role_ids),
                "computed_at": now.isoformat(),
                "earliest_expiry": (
                    result.earliest_expiry.isoformat() if result.earliest_expiry else None
                ),
            },
            ttl=ttl,
        )

    def ttl_for(self, result: EffectiveRoles, now: datetime) -> int:
        """Cache TTL in whole seconds; never outlives the earliest temporary grant."""
        ttl = self.cache_ttl
        if result.earliest_expiry is not None:
            remaining = int((result.earliest_expiry - ensure_utc(now)).total_seconds())
            ttl = min(ttl, remaining)
        return ttl
