"""Shared plumbing for RBAC write services: audit entry + cache invalidation."""

from __future__ import annotations

import dataclasses
from datetime import datetime
from typing import Any

from app.application.interfaces.services import IApiAuditLogService, ICacheService
from app.application.services.grant_resolver import invalidate_effective_roles
from app.shared.enums import AuditAction


def snapshot(value: Any) -> dict[str, Any] | None:
    """JSON-safe dict of a result DTO for audit old/new values."""
    if value is None:
        return None
    raw = dataclasses.asdict(value) if dataclasses.is_dataclass(value) else dict(value)
    return {
        k: v.isoformat() if isinstance(v, datetime) else v for k, v in raw.items()
    }


class RbacWriteService:
    """Base for services that mutate RBAC stores."""

    def __init__(
        self,
        audit_service: IApiAuditLogService | None = None,
        cache: ICacheService | None = None,
    ) -> None:
        self.audit_service = audit_service
        self.cache = cache

    async def _record(
        self,
        actor_id: str | None,
        action: AuditAction,
        resource_type: str,
        resource_id: str | None,
        *,
        old_values: Any = None,
        new_values: Any = None,
        organization_id: str | None = None,
    ) -> None:
        """Append an audit entry and drop cached effective roles."""
        if self.audit_service is not None:
            await self.audit_service.log_action(
                user_id=actor_id,
                action=action.value,
                resource_type=resource_type,
                resource_id=resource_id,
                old_values=snapshot(old_values),
                new_values=snapshot(new_values),
                organization_id=organization_id,
            )
        await invalidate_effective_roles(self.cache)
