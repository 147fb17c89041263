"""Seed the bootstrap super-admin role and grant it to a user.

Usage:
    uv run python -m scripts.seed_rbac <username> [organization_id]
Creates the user if missing, a system role `super_admin` holding every
action on the admin resource (system, rbac), and grants the role. Safe to
re-run. Requires Postgres. All imports use app.*.
"""

import asyncio
import sys

import app.infrastructure.persistence.database as database
from app.application.dtos.grant import AssignRoleCommand
from app.application.services import (
    GrantService,
    RoleHierarchyService,
    RoleResourceService,
    RoleService,
)
from app.core.config import get_settings
from app.domain.enums import PermissionAction, RoleType
from app.infrastructure.cache import CacheService
from app.infrastructure.persistence.repositories import (
    GroupRoleRepository,
    PolicyRepository,
    PrincipalRepository,
    RolePermissionRepository,
    RoleRepository,
    RoleResourceRepository,
    UserRoleRepository,
)
from app.infrastructure.services.api_audit_log_service import ApiAuditLogService

SUPER_ADMIN_ROLE = "super_admin"
SUPER_ADMIN_PRIORITY = 1000
SEED_ACTOR = "system:seed"


async def main() -> None:
    """Create (or reuse) the super-admin role and grant it to the given user."""
    if len(sys.argv) < 2:
        print(
            "Usage: uv run python -m scripts.seed_rbac <username> [organization_id]",
            file=sys.stderr,
        )
        sys.exit(1)
    username = sys.argv[1]
    organization_id = sys.argv[2] if len(sys.argv) > 2 else None

    settings = get_settings()
    database._ensure_engine()
    if database.AsyncSessionLocal is None:
        print("AsyncSessionLocal not configured", file=sys.stderr)
        sys.exit(1)

    cache = CacheService(settings=settings) if settings.redis_enabled else None
    if cache is not None:
        await cache.connect()

    try:
        async with database.AsyncSessionLocal() as session:
            async with session.begin():
                audit = ApiAuditLogService(session)
                role_repo = RoleRepository(session)
                principals = PrincipalRepository(session)
                hierarchy = RoleHierarchyService(
                    role_repo, max_depth=settings.role_hierarchy_max_depth
                )
                roles = RoleService(
                    role_repo=role_repo,
                    user_role_repo=UserRoleRepository(session),
                    group_role_repo=GroupRoleRepository(session),
                    role_resource_repo=RoleResourceRepository(session),
                    role_permission_repo=RolePermissionRepository(session),
                    policy_repo=PolicyRepository(session),
                    hierarchy=hierarchy,
                    audit_service=audit,
                    cache=cache,
                )
                resources = RoleResourceService(
                    RoleResourceRepository(session), hierarchy, audit_service=audit, cache=cache
                )
                grants = GrantService(
                    UserRoleRepository(session),
                    GroupRoleRepository(session),
                    principals,
                    hierarchy,
                    audit_service=audit,
                    cache=cache,
                )

                user = await principals.get_user_by_username(username)
                if user is None:
                    user = await principals.create_user(username, organization_id=organization_id)
                    print(f"Created user {user.id} ({username})")

                role = await role_repo.get_by_name(SUPER_ADMIN_ROLE, None)
                if role is None:
                    role = await roles.create_role(
                        SEED_ACTOR,
                        SUPER_ADMIN_ROLE,
                        "Bootstrap administrator of the RBAC admin API",
                        type=RoleType.SYSTEM,
                        priority=SUPER_ADMIN_PRIORITY,
                    )
                    print(f"Created role {role.id} ({SUPER_ADMIN_ROLE})")

                await resources.grant(
                    SEED_ACTOR,
                    role.id,
                    settings.admin_resource_type,
                    settings.admin_resource_id,
                    [
                        PermissionAction.READ.value,
                        PermissionAction.MODIFY.value,
                        PermissionAction.ADMIN.value,
                    ],
                )
                grant = await grants.assign_role(
                    AssignRoleCommand(user_id=user.id, role_id=role.id, granted_by=SEED_ACTOR)
                )
                print(f"Granted {SUPER_ADMIN_ROLE} to {username} (grant {grant.id})")
    finally:
        if cache is not None:
            await cache.disconnect()


if __name__ == "__main__":
    asyncio.run(main())
