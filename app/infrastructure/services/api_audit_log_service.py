"""API audit log service: writes RBAC changes to the audit_log table."""

from __future__ import annotations

from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from app.application.dtos.audit_log import AuditLogEntryCreate
from app.infrastructure.persistence.repositories.audit_log_repo import AuditLogRepository
from app.shared.context import get_current_request_id


class ApiAuditLogService:
    """Logs RBAC writes to audit_log in the caller's transaction."""

    def __init__(self, db: AsyncSession) -> None:
        self._repo = AuditLogRepository(db)

    async def log_action(
        self,
        user_id: str | None,
        action: str,
        resource_type: str,
        resource_id: str | None,
        old_values: dict[str, Any] | None = None,
        new_values: dict[str, Any] | None = None,
        organization_id: str | None = None,
        request_id: str | None = None,
        success: bool = True,
        error_message: str | None = None,
    ) -> None:
        """Append one audit log entry. request_id defaults to the current request's."""
        entry = AuditLogEntryCreate(
            organization_id=organization_id,
            user_id=user_id,
            action=action,
            resource_type=resource_type,
            resource_id=resource_id,
            old_values=old_values,
            new_values=new_values,
            request_id=request_id or get_current_request_id(),
            success=success,
            error_message=error_message,
        )
        await self._repo.create(entry)
