"""Domain enumerations for Gatekeeper.

Enums represent fixed sets of RBAC domain values (role type, grant approval
status, principal kind, decision effect and reason).
"""

from enum import Enum


class _ValuesMixin:
    """Mixin that adds a values() classmethod to str Enums."""

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid values as strings (e.g. for validation or serialization)."""
        return [member.value for member in cls]


class RoleType(_ValuesMixin, str, Enum):
    """Role origin: shipped by the platform or created by an administrator."""

    SYSTEM = "system"
    CUSTOM = "custom"


class ApprovalStatus(_ValuesMixin, str, Enum):
    """User role grant approval lifecycle.

    pending -> approved | rejected. Only approved grants can be effective.
    """

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"

    def is_terminal(self) -> bool:
        """Return True for states with no outgoing transition."""
        return self is not ApprovalStatus.PENDING


class PrincipalType(_ValuesMixin, str, Enum):
    """Kind of principal being authorized."""

    USER = "user"
    GROUP = "group"


class ResourceScope(_ValuesMixin, str, Enum):
    """Well-known resource scopes. Permission entries may use any string."""

    SYSTEM = "system"
    ORGANIZATION = "organization"
    DATABASE = "database"
    SCHEMA = "schema"
    TABLE = "table"
    QUERY = "query"


class PermissionAction(_ValuesMixin, str, Enum):
    """Well-known actions. Permission entries may use any string or '*'."""

    READ = "read"
    EXECUTE = "execute"
    MODIFY = "modify"
    DELETE = "delete"
    ADMIN = "admin"


class Effect(_ValuesMixin, str, Enum):
    """Authorization verdict."""

    ALLOW = "allow"
    DENY = "deny"


class DecisionReason(_ValuesMixin, str, Enum):
    """Why the engine reached its verdict."""

    DEFAULT_DENY = "default_deny"
    EXPLICIT_DENY = "explicit_deny"
    POLICY_ALLOW = "policy_allow"
    RESOURCE_GRANT = "resource_grant"
    CONDITION_FAILED = "condition_failed"
    CONDITION_ERROR = "condition_error"
    PRINCIPAL_NOT_FOUND = "principal_not_found"


class EntrySource(_ValuesMixin, str, Enum):
    """Where a matched permission entry came from."""

    POLICY = "policy"
    ROLE_PERMISSION = "role_permission"
    RESOURCE_GRANT = "resource_grant"
