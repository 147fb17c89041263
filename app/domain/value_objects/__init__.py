"""Domain value objects and shared value types."""

from app.domain.value_objects.conditions import (
    AttributeCondition,
    Condition,
    IpRangeCondition,
    MfaCondition,
    TimeWindowCondition,
    evaluate_all,
    parse_condition,
    parse_policy_conditions,
    parse_rule_conditions,
)
from app.domain.value_objects.core import (
    AccessContext,
    PermissionRule,
    Principal,
    matches_resource,
)

__all__ = [
    "AccessContext",
    "AttributeCondition",
    "Condition",
    "IpRangeCondition",
    "MfaCondition",
    "PermissionRule",
    "Principal",
    "TimeWindowCondition",
    "evaluate_all",
    "matches_resource",
    "parse_condition",
    "parse_policy_conditions",
    "parse_rule_conditions",
]
