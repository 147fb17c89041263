"""Infrastructure implementations of application service interfaces."""

from app.infrastructure.services.api_audit_log_service import ApiAuditLogService

__all__ = ["ApiAuditLogService"]
