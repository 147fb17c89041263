"""Audit log API: list RBAC change entries (who did what, when)."""

from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, Query

from app.api.v1.dependencies import Reader, get_audit_log_repo
from app.infrastructure.persistence.repositories.audit_log_repo import AuditLogRepository
from app.schemas.audit_log import AuditLogEntryResponse, AuditLogListResponse

router = APIRouter()


@router.get("", response_model=AuditLogListResponse)
async def list_audit_log(
    _actor: Reader,
    audit_repo: Annotated[AuditLogRepository, Depends(get_audit_log_repo)],
    organization_id: str | None = Query(None, description="Filter by organization"),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    resource_type: str | None = Query(None, description="Filter by resource type"),
    user_id: str | None = Query(None, description="Filter by acting user id"),
    from_timestamp: datetime | None = Query(None, description="From (inclusive) ISO8601"),
    to_timestamp: datetime | None = Query(None, description="To (inclusive) ISO8601"),
):
    """List audit log entries (newest first, optional filters)."""
    items = await audit_repo.list(
        organization_id,
        skip=skip,
        limit=limit,
        resource_type=resource_type,
        user_id=user_id,
        from_timestamp=from_timestamp,
        to_timestamp=to_timestamp,
    )
    return AuditLogListResponse(
        items=[AuditLogEntryResponse.model_validate(e) for e in items],
        skip=skip,
        limit=limit,
    )
