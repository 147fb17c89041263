"""DB session, cache and audit service dependencies (composition root)."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.infrastructure.cache import CacheService
from app.infrastructure.persistence.database import get_db, get_db_transactional
from app.infrastructure.services.api_audit_log_service import ApiAuditLogService

ReadSession = Annotated[AsyncSession, Depends(get_db)]
WriteSession = Annotated[AsyncSession, Depends(get_db_transactional)]


def get_cache(request: Request) -> CacheService | None:
    """Effective-role cache set in app lifespan; None when Redis is disabled."""
    return getattr(request.app.state, "cache", None)


async def get_audit_service(db: WriteSession) -> ApiAuditLogService:
    """Audit log writer bound to the request's write transaction."""
    return ApiAuditLogService(db)
