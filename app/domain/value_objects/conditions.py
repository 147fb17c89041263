"""Typed policy conditions (closed set of tagged variants).

Stored JSON is parsed into one of TimeWindowCondition, IpRangeCondition,
MfaCondition or AttributeCondition at decision time. Anything that cannot be
parsed or evaluated raises ConditionEvaluationException; callers treat that
as deny.

Stored shapes:
    policy conditions:   {"time": {...}, "ip": {...}, "mfa": {...}, "attribute": {...}}
    role permission:     [{"type": "time", "config": {...}}, ...]
"""

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import UTC, tzinfo
from ipaddress import IPv4Network, IPv6Network, ip_address, ip_network
from typing import Any, ClassVar
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from app.domain.exceptions import ConditionEvaluationException
from app.domain.value_objects.core import AccessContext

_MISSING = object()


def _int_list(kind: str, value: Any, name: str, low: int, high: int) -> tuple[int, ...]:
    if not isinstance(value, list) or not all(
        isinstance(v, int) and not isinstance(v, bool) for v in value
    ):
        raise ConditionEvaluationException(kind, f"{name} must be a list of integers")
    for v in value:
        if v < low or v > high:
            raise ConditionEvaluationException(kind, f"{name} values must be {low}-{high}")
    return tuple(value)


def _hour(kind: str, value: Any, name: str) -> int:
    if not isinstance(value, int) or isinstance(value, bool) or not 0 <= value <= 23:
        raise ConditionEvaluationException(kind, f"{name} must be an integer 0-23")
    return value


@dataclass(frozen=True)
class TimeWindowCondition:
    """Allow only on some weekdays and/or within an hour window (inclusive).

    Days use 0=Sunday .. 6=Saturday. A window whose start is after its end
    wraps past midnight (22-6).
    """

    kind: ClassVar[str] = "time"

    allowed_days: tuple[int, ...] | None = None
    start_hour: int | None = None
    end_hour: int | None = None
    timezone: str = "UTC"

    @classmethod
    def parse(cls, config: Mapping[str, Any]) -> "TimeWindowCondition":
        days = config.get("allowed_days")
        start = config.get("start_hour")
        end = config.get("end_hour")
        if (start is None) != (end is None):
            raise ConditionEvaluationException(
                cls.kind, "start_hour and end_hour must be set together"
            )
        tz = config.get("timezone", "UTC")
        if not isinstance(tz, str):
            raise ConditionEvaluationException(cls.kind, "timezone must be a string")
        return cls(
            allowed_days=None if days is None else _int_list(cls.kind, days, "allowed_days", 0, 6),
            start_hour=None if start is None else _hour(cls.kind, start, "start_hour"),
            end_hour=None if end is None else _hour(cls.kind, end, "end_hour"),
            timezone=tz,
        )

    def _zone(self) -> tzinfo:
        if self.timezone == "UTC":
            return UTC
        try:
            return ZoneInfo(self.timezone)
        except (ZoneInfoNotFoundError, ValueError):
            raise ConditionEvaluationException(
                self.kind, f"unknown timezone {self.timezone!r}"
            ) from None

    def evaluate(self, context: AccessContext) -> bool:
        zone = self._zone()
        now = context.now
        if now.tzinfo is None:
            now = now.replace(tzinfo=UTC)
        local = now.astimezone(zone)
        if self.allowed_days is not None:
            sunday_first = (local.weekday() + 1) % 7
            if sunday_first not in self.allowed_days:
                return False
        if self.start_hour is not None and self.end_hour is not None:
            hour = local.hour
            if self.start_hour <= self.end_hour:
                return self.start_hour <= hour <= self.end_hour
            return hour >= self.start_hour or hour <= self.end_hour
        return True


@dataclass(frozen=True)
class IpRangeCondition:
    """Allow only from listed addresses/networks and never from denied ones."""

    kind: ClassVar[str] = "ip"

    allowed: tuple[IPv4Network | IPv6Network, ...] = ()
    denied: tuple[IPv4Network | IPv6Network, ...] = ()

    @classmethod
    def _networks(cls, value: Any, name: str) -> tuple[IPv4Network | IPv6Network, ...]:
        if value is None:
            return ()
        if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
            raise ConditionEvaluationException(cls.kind, f"{name} must be a list of strings")
        try:
            return tuple(ip_network(v, strict=False) for v in value)
        except ValueError as e:
            raise ConditionEvaluationException(cls.kind, str(e)) from None

    @classmethod
    def parse(cls, config: Mapping[str, Any]) -> "IpRangeCondition":
        return cls(
            allowed=cls._networks(config.get("allowed_ips"), "allowed_ips"),
            denied=cls._networks(config.get("denied_ips"), "denied_ips"),
        )

    def evaluate(self, context: AccessContext) -> bool:
        if not self.allowed and not self.denied:
            return True
        if not context.ip_address:
            raise ConditionEvaluationException(self.kind, "request has no client IP address")
        try:
            addr = ip_address(context.ip_address)
        except ValueError:
            raise ConditionEvaluationException(
                self.kind, f"invalid client IP address {context.ip_address!r}"
            ) from None
        if any(addr in net for net in self.denied):
            return False
        if self.allowed:
            return any(addr in net for net in self.allowed)
        return True


@dataclass(frozen=True)
class MfaCondition:
    """Require the request to carry a verified second factor."""

    kind: ClassVar[str] = "mfa"

    require_mfa: bool = True

    @classmethod
    def parse(cls, config: Mapping[str, Any]) -> "MfaCondition":
        required = config.get("require_mfa", True)
        if not isinstance(required, bool):
            raise ConditionEvaluationException(cls.kind, "require_mfa must be a boolean")
        return cls(require_mfa=required)

    def evaluate(self, context: AccessContext) -> bool:
        if not self.require_mfa:
            return True
        return context.mfa_verified is True


@dataclass(frozen=True)
class AttributeCondition:
    """Require every listed request attribute to equal the configured value."""

    kind: ClassVar[str] = "attribute"

    equals: tuple[tuple[str, Any], ...] = ()

    @classmethod
    def parse(cls, config: Mapping[str, Any]) -> "AttributeCondition":
        equals = config.get("equals")
        if not isinstance(equals, Mapping) or not equals:
            raise ConditionEvaluationException(cls.kind, "equals must be a non-empty object")
        return cls(equals=tuple(sorted(equals.items(), key=lambda kv: kv[0])))

    def evaluate(self, context: AccessContext) -> bool:
        return all(
            context.attributes.get(key, _MISSING) == expected
            for key, expected in self.equals
        )


Condition = TimeWindowCondition | IpRangeCondition | MfaCondition | AttributeCondition

CONDITION_TYPES: dict[str, type[Condition]] = {
    TimeWindowCondition.kind: TimeWindowCondition,
    IpRangeCondition.kind: IpRangeCondition,
    MfaCondition.kind: MfaCondition,
    AttributeCondition.kind: AttributeCondition,
}


def parse_condition(kind: str, config: Any) -> Condition:
    """Parse one condition of the given kind. Raises ConditionEvaluationException."""
    if not isinstance(kind, str):
        raise ConditionEvaluationException(repr(kind), "condition type must be a string")
    condition_type = CONDITION_TYPES.get(kind)
    if condition_type is None:
        raise ConditionEvaluationException(str(kind), "unsupported condition type")
    if not isinstance(config, Mapping):
        raise ConditionEvaluationException(kind, "config must be an object")
    return condition_type.parse(config)


def parse_policy_conditions(raw: Mapping[str, Any] | None) -> list[Condition]:
    """Parse a policy's conditions mapping ({kind: config}). Empty or None means no conditions."""
    if not raw:
        return []
    if not isinstance(raw, Mapping):
        raise ConditionEvaluationException("policy", "conditions must be an object")
    return [parse_condition(kind, config) for kind, config in raw.items()]


def parse_rule_conditions(raw: list[Any] | None) -> list[Condition]:
    """Parse a role permission's conditions list ([{type, config}]). Empty or None means none."""
    if not raw:
        return []
    if not isinstance(raw, list):
        raise ConditionEvaluationException("permission", "conditions must be a list")
    parsed: list[Condition] = []
    for item in raw:
        if not isinstance(item, Mapping) or "type" not in item:
            raise ConditionEvaluationException("permission", "each condition needs a type")
        parsed.append(parse_condition(item["type"], item.get("config", {})))
    return parsed


def evaluate_all(conditions: list[Condition], context: AccessContext) -> bool:
    """Return True if every condition passes. Propagates ConditionEvaluationException."""
    return all(condition.evaluate(context) for condition in conditions)
