"""Shared enumerations for the Gatekeeper application.

Cross-cutting enums used by application and infrastructure (e.g. audit,
actor type). RBAC domain enums (e.g. ApprovalStatus) live in
app.domain.enums.
"""

from enum import Enum


class _ValuesMixin:
    """Mixin that adds a values() classmethod to str Enums."""

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid values as strings."""
        return [member.value for member in cls]


class ActorType(_ValuesMixin, str, Enum):
    """Actor type for audit tracking (who performed the action)."""

    USER = "user"
    SYSTEM = "system"


class AuditAction(_ValuesMixin, str, Enum):
    """Audit action types for RBAC writes."""

    CREATED = "created"
    UPDATED = "updated"
    DELETED = "deleted"
    ACTIVATED = "activated"
    DEACTIVATED = "deactivated"
    ASSIGNED = "assigned"
    UNASSIGNED = "unassigned"
    APPROVED = "approved"
    REJECTED = "rejected"
    ATTACHED = "attached"
    DETACHED = "detached"
    PURGED = "purged"
