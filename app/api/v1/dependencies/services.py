"""Application service wiring (composition root).

Read endpoints get services over a plain session; write endpoints get
services over the transactional session so the RBAC change and its audit
entry commit together.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.services import (
    AuthorizationService,
    GrantResolver,
    GrantService,
    PolicyService,
    RoleHierarchyService,
    RoleResourceService,
    RoleService,
)
from app.core.config import get_settings
from app.infrastructure.cache import CacheService
from app.infrastructure.persistence.repositories import (
    AuditLogRepository,
    GroupRoleRepository,
    PolicyRepository,
    PrincipalRepository,
    RolePermissionRepository,
    RoleRepository,
    RoleResourceRepository,
    UserRoleRepository,
)
from app.infrastructure.services.api_audit_log_service import ApiAuditLogService

from .db import ReadSession, WriteSession, get_audit_service, get_cache

Cache = Annotated[CacheService | None, Depends(get_cache)]
AuditService = Annotated[ApiAuditLogService, Depends(get_audit_service)]


def _hierarchy(db: AsyncSession) -> RoleHierarchyService:
    return RoleHierarchyService(
        RoleRepository(db), max_depth=get_settings().role_hierarchy_max_depth
    )


def build_authorization_service(
    db: AsyncSession, cache: CacheService | None = None
) -> AuthorizationService:
    """Wire the decision engine over one session."""
    settings = get_settings()
    resolver = GrantResolver(
        hierarchy=_hierarchy(db),
        user_role_repo=UserRoleRepository(db),
        group_role_repo=GroupRoleRepository(db),
        principal_repo=PrincipalRepository(db),
        cache=cache,
        cache_ttl=settings.cache_ttl_effective_roles,
    )
    return AuthorizationService(
        grant_resolver=resolver,
        role_resource_repo=RoleResourceRepository(db),
        policy_repo=PolicyRepository(db),
        role_permission_repo=RolePermissionRepository(db),
    )


async def get_authorization_service(db: ReadSession, cache: Cache) -> AuthorizationService:
    """Decision engine for /authorize and admin gating (read session, optional cache)."""
    return build_authorization_service(db, cache)


def _role_service(
    db: AsyncSession,
    audit_service: ApiAuditLogService | None,
    cache: CacheService | None,
) -> RoleService:
    return RoleService(
        role_repo=RoleRepository(db),
        user_role_repo=UserRoleRepository(db),
        group_role_repo=GroupRoleRepository(db),
        role_resource_repo=RoleResourceRepository(db),
        role_permission_repo=RolePermissionRepository(db),
        policy_repo=PolicyRepository(db),
        hierarchy=_hierarchy(db),
        delete_cascade=get_settings().role_delete_cascade,
        audit_service=audit_service,
        cache=cache,
    )


async def get_role_service(db: ReadSession) -> RoleService:
    """Role service for reads (no audit, no cache invalidation)."""
    return _role_service(db, None, None)


async def get_role_service_for_write(
    db: WriteSession, audit_service: AuditService, cache: Cache
) -> RoleService:
    return _role_service(db, audit_service, cache)


def _grant_service(
    db: AsyncSession,
    audit_service: ApiAuditLogService | None,
    cache: CacheService | None,
) -> GrantService:
    return GrantService(
        user_role_repo=UserRoleRepository(db),
        group_role_repo=GroupRoleRepository(db),
        principal_repo=PrincipalRepository(db),
        hierarchy=_hierarchy(db),
        audit_service=audit_service,
        cache=cache,
    )


async def get_grant_service(db: ReadSession) -> GrantService:
    return _grant_service(db, None, None)


async def get_grant_service_for_write(
    db: WriteSession, audit_service: AuditService, cache: Cache
) -> GrantService:
    return _grant_service(db, audit_service, cache)


async def get_policy_service(db: ReadSession) -> PolicyService:
    return PolicyService(PolicyRepository(db))


async def get_policy_service_for_write(
    db: WriteSession, audit_service: AuditService, cache: Cache
) -> PolicyService:
    return PolicyService(PolicyRepository(db), audit_service=audit_service, cache=cache)


async def get_role_resource_service(db: ReadSession) -> RoleResourceService:
    return RoleResourceService(RoleResourceRepository(db), _hierarchy(db))


async def get_role_resource_service_for_write(
    db: WriteSession, audit_service: AuditService, cache: Cache
) -> RoleResourceService:
    return RoleResourceService(
        RoleResourceRepository(db),
        _hierarchy(db),
        audit_service=audit_service,
        cache=cache,
    )


async def get_audit_log_repo(db: ReadSession) -> AuditLogRepository:
    return AuditLogRepository(db)
