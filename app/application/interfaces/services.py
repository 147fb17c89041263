"""Service interfaces (ports) for the application layer.

Protocols define contracts for application services (DIP).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from app.application.dtos.decision import Decision
    from app.domain.value_objects.core import AccessContext, Principal


# Decision engine interface
class IAuthorizationService(Protocol):
    """Protocol for the authorization decision engine."""

    async def decide(
        self,
        principal: Principal,
        action: str,
        resource_type: str,
        resource_id: str,
        context: AccessContext,
    ) -> Decision:
        """Return the verdict for principal performing action on the resource."""

    async def check(
        self,
        principal: Principal,
        action: str,
        resource_type: str,
        resource_id: str,
        context: AccessContext,
    ) -> bool:
        """Return True only on Allow; any error counts as deny."""


# API audit log service interface (audit_log table)
class IApiAuditLogService(Protocol):
    """Protocol for logging RBAC writes to the audit_log table."""

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
        """Append one audit log entry (who did what, when, to which entity)."""


# Cache service interface
class ICacheService(Protocol):
    """Minimal cache protocol for effective-role caching (DIP)."""

    def is_available(self) -> bool:
        """Return True if cache is connected."""

    async def get(self, key: str) -> Any:
        """Return cached value or None."""

    async def set(self, key: str, value: Any, ttl: int = 300) -> bool:
        """Store value with TTL. Returns True on success."""

    async def delete(self, key: str) -> bool:
        """Delete key. Returns True on success."""

    async def delete_pattern(self, pattern: str) -> int:
        """Delete keys matching pattern. Returns count deleted."""
