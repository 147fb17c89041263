"""DTOs produced by the authorization engine."""

from dataclasses import dataclass, field
from datetime import datetime

from app.application.dtos.role import RoleResult
from app.domain.enums import DecisionReason, Effect, EntrySource


@dataclass(frozen=True)
class Decision:
    """Outcome of one authorization decision."""

    effect: Effect
    reason: DecisionReason
    effective_role_ids: frozenset[str] = frozenset()
    resource_grant: bool = False
    deciding_priority: int | None = None
    matched_allows: int = 0
    matched_denies: int = 0

    @property
    def allowed(self) -> bool:
        return self.effect == Effect.ALLOW


@dataclass(frozen=True)
class EffectiveRoles:
    """Effective roles of a principal plus the earliest expiry among contributing temporary grants."""

    roles: tuple[RoleResult, ...] = ()
    earliest_expiry: datetime | None = None

    @property
    def role_ids(self) -> frozenset[str]:
        return frozenset(r.id for r in self.roles)


@dataclass(frozen=True)
class MatchedEntry:
    """One permission entry that matched a request, with the priority of its role."""

    is_allow: bool
    priority: int
    role_id: str
    source: EntrySource
    policy_id: str | None = None


@dataclass(frozen=True)
class SimulatedPermission:
    """One row of a principal's reachable permission set."""

    scope: str
    resource: str
    action: str
    allowed: bool
    role_id: str
    source: EntrySource
    policy_id: str | None = None
    conditions: dict | list | None = field(default=None, compare=False)
