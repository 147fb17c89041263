"""Domain value objects for Gatekeeper.

Value objects are immutable types that represent domain concepts with
self-validation. They have no identity, only value.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, ClassVar

from app.domain.enums import PrincipalType

WILDCARD = "*"


def _require_non_empty(value: str, field_name: str) -> None:
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"{field_name} must be a non-empty string")


@dataclass(frozen=True)
class Principal:
    """The user or group being authorized."""

    type: PrincipalType
    id: str

    def __post_init__(self) -> None:
        _require_non_empty(self.id, "Principal id")

    @classmethod
    def user(cls, user_id: str) -> "Principal":
        return cls(PrincipalType.USER, user_id)

    @classmethod
    def group(cls, group_id: str) -> "Principal":
        return cls(PrincipalType.GROUP, group_id)

    @property
    def is_user(self) -> bool:
        return self.type == PrincipalType.USER


@dataclass(frozen=True)
class AccessContext:
    """Request facts used by the engine: evaluation instant, organization and condition inputs.

    `now` is passed in (never read from the clock inside the engine) so that a
    decision is a pure function of its inputs.
    """

    now: datetime
    organization_id: str | None = None
    ip_address: str | None = None
    mfa_verified: bool | None = None
    attributes: Mapping[str, Any] = field(default_factory=dict)


def matches_resource(pattern: str, resource: str) -> bool:
    """Return True if a permission resource pattern covers resource.

    '*' matches everything, an exact string matches itself, and a pattern
    ending in '*' matches by prefix ('db:*' matches 'db:sales').
    """
    if pattern == WILDCARD or pattern == resource:
        return True
    if pattern.endswith(WILDCARD):
        return resource.startswith(pattern[:-1])
    return False


@dataclass(frozen=True)
class PermissionRule:
    """One allow/deny rule: (scope, resource pattern, action, is_allow).

    Shared shape of policy permission entries and per-role permission rows.
    """

    scope: str
    resource: str
    action: str
    is_allow: bool

    # Scopes that apply to every resource type.
    GLOBAL_SCOPES: ClassVar[frozenset[str]] = frozenset({WILDCARD, "system"})

    def __post_init__(self) -> None:
        _require_non_empty(self.scope, "Permission scope")
        _require_non_empty(self.resource, "Permission resource")
        _require_non_empty(self.action, "Permission action")

    def matches(self, resource_type: str, resource_id: str, action: str) -> bool:
        """Return True if this rule applies to the requested action on the resource."""
        if self.scope not in self.GLOBAL_SCOPES and self.scope != resource_type:
            return False
        if self.action != WILDCARD and self.action != action:
            return False
        return matches_resource(self.resource, resource_id)

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "PermissionRule":
        """Build from a stored JSON entry ({scope, resource, action, is_allow}).

        Raises:
            ValueError: If a key is missing or has the wrong type.
        """
        try:
            scope = raw["scope"]
            resource = raw["resource"]
            action = raw["action"]
        except KeyError as e:
            raise ValueError(f"Permission entry missing key: {e.args[0]}") from None
        is_allow = raw.get("is_allow", True)
        if not all(isinstance(v, str) for v in (scope, resource, action)):
            raise ValueError("Permission scope, resource and action must be strings")
        if not isinstance(is_allow, bool):
            raise ValueError("Permission is_allow must be a boolean")
        return cls(scope=scope, resource=resource, action=action, is_allow=is_allow)

    def to_dict(self) -> dict[str, Any]:
        return {
            "scope": self.scope,
            "resource": self.resource,
            "action": self.action,
            "is_allow": self.is_allow,
        }
