"""Delete temporary user role grants whose expiry has passed.

Usage:
    uv run python -m scripts.purge_expired_grants
Expired grants are already ignored by the engine; this only keeps the
user_role table small. Requires Postgres.
"""

import asyncio
import sys

import app.infrastructure.persistence.database as database
from app.application.services import GrantService, RoleHierarchyService
from app.core.config import get_settings
from app.infrastructure.cache import CacheService
from app.infrastructure.persistence.repositories import (
    GroupRoleRepository,
    PrincipalRepository,
    RoleRepository,
    UserRoleRepository,
)
from app.infrastructure.services.api_audit_log_service import ApiAuditLogService
from app.shared.telemetry.logging import setup_logging
from app.shared.utils.datetime import utc_now


async def main() -> None:
    settings = get_settings()
    setup_logging()
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
                service = GrantService(
                    UserRoleRepository(session),
                    GroupRoleRepository(session),
                    PrincipalRepository(session),
                    RoleHierarchyService(RoleRepository(session)),
                    audit_service=ApiAuditLogService(session),
                    cache=cache,
                )
                deleted = await service.purge_expired("system:purge", utc_now())
        print(f"Purged {deleted} expired grant(s)")
    finally:
        if cache is not None:
            await cache.disconnect()


if __name__ == "__main__":
    asyncio.run(main())
