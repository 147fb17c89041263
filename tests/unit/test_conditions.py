"""Tests for typed policy conditions and the fail-closed ConditionEvaluator."""

from datetime import UTC, datetime

import pytest

from app.application.services.condition_evaluator import (
    ConditionEvaluator,
    ConditionOutcome,
)
from app.domain.exceptions import ConditionEvaluationException
from app.domain.value_objects.conditions import (
    AttributeCondition,
    IpRangeCondition,
    MfaCondition,
    TimeWindowCondition,
    parse_policy_conditions,
    parse_rule_conditions,
)
from app.domain.value_objects.core import AccessContext

# Monday 2026-10-19
MONDAY_10AM = datetime(2026, 10, 19, 10, 0, tzinfo=UTC)


def _ctx(**kwargs) -> AccessContext:
    kwargs.setdefault("now", MONDAY_10AM)
    return AccessContext(**kwargs)


def test_time_window_weekdays_sunday_first() -> None:
    weekdays = TimeWindowCondition.parse({"allowed_days": [1, 2, 3, 4, 5]})
    assert weekdays.evaluate(_ctx()) is True
    sunday = datetime(2026, 10, 18, 10, 0, tzinfo=UTC)
    assert weekdays.evaluate(_ctx(now=sunday)) is False


def test_time_window_hours_inclusive() -> None:
    office = TimeWindowCondition.parse({"start_hour": 9, "end_hour": 17})
    assert office.evaluate(_ctx()) is True
    assert office.evaluate(_ctx(now=MONDAY_10AM.replace(hour=17))) is True
    assert office.evaluate(_ctx(now=MONDAY_10AM.replace(hour=18))) is False


def test_time_window_wraps_past_midnight() -> None:
    night = TimeWindowCondition.parse({"start_hour": 22, "end_hour": 6})
    assert night.evaluate(_ctx(now=MONDAY_10AM.replace(hour=23))) is True
    assert night.evaluate(_ctx(now=MONDAY_10AM.replace(hour=3))) is True
    assert night.evaluate(_ctx(now=MONDAY_10AM.replace(hour=12))) is False


@pytest.mark.parametrize(
    "config",
    [
        {"start_hour": 9},
        {"start_hour": 9, "end_hour": 24},
        {"allowed_days": [7]},
        {"allowed_days": "mon"},
        {"timezone": 5},
    ],
)
def test_time_window_rejects_bad_config(config: dict) -> None:
    with pytest.raises(ConditionEvaluationException):
        TimeWindowCondition.parse(config)


def test_time_window_unknown_timezone_is_an_error() -> None:
    condition = TimeWindowCondition.parse({"timezone": "Nowhere/Special"})
    with pytest.raises(ConditionEvaluationException):
        condition.evaluate(_ctx())


def test_ip_range_allowed_and_denied() -> None:
    condition = IpRangeCondition.parse(
        {"allowed_ips": ["10.0.0.0/8"], "denied_ips": ["10.0.0.5"]}
    )
    assert condition.evaluate(_ctx(ip_address="10.1.2.3")) is True
    assert condition.evaluate(_ctx(ip_address="10.0.0.5")) is False
    assert condition.evaluate(_ctx(ip_address="192.168.1.1")) is False


def test_ip_range_without_client_address_is_an_error() -> None:
    condition = IpRangeCondition.parse({"allowed_ips": ["10.0.0.0/8"]})
    with pytest.raises(ConditionEvaluationException):
        condition.evaluate(_ctx())
    with pytest.raises(ConditionEvaluationException):
        condition.evaluate(_ctx(ip_address="not-an-ip"))


def test_ip_range_rejects_bad_network() -> None:
    with pytest.raises(ConditionEvaluationException):
        IpRangeCondition.parse({"allowed_ips": ["10.0.0.0/99"]})


def test_mfa_condition() -> None:
    required = MfaCondition.parse({})
    assert required.evaluate(_ctx(mfa_verified=True)) is True
    assert required.evaluate(_ctx(mfa_verified=False)) is False
    assert required.evaluate(_ctx()) is False
    assert MfaCondition.parse({"require_mfa": False}).evaluate(_ctx()) is True


def test_attribute_condition_requires_every_key() -> None:
    condition = AttributeCondition.parse({"equals": {"team": "data", "env": "prod"}})
    assert condition.evaluate(_ctx(attributes={"team": "data", "env": "prod"})) is True
    assert condition.evaluate(_ctx(attributes={"team": "data"})) is False
    with pytest.raises(ConditionEvaluationException):
        AttributeCondition.parse({"equals": {}})


def test_parse_shapes() -> None:
    assert parse_policy_conditions(None) == []
    assert parse_rule_conditions([]) == []
    parsed = parse_rule_conditions([{"type": "mfa", "config": {"require_mfa": True}}])
    assert parsed == [MfaCondition(require_mfa=True)]
    with pytest.raises(ConditionEvaluationException):
        parse_policy_conditions({"geo": {"country": "UG"}})
    with pytest.raises(ConditionEvaluationException):
        parse_rule_conditions([{"config": {}}])
    with pytest.raises(ConditionEvaluationException):
        parse_rule_conditions([{"type": ["time"], "config": {}}])


def test_evaluator_outcomes() -> None:
    evaluator = ConditionEvaluator()
    assert evaluator.evaluate_policy("p1", None, _ctx()) == ConditionOutcome.PASSED
    assert (
        evaluator.evaluate_policy("p1", {"mfa": {"require_mfa": True}}, _ctx(mfa_verified=False))
        == ConditionOutcome.FAILED
    )
    assert (
        evaluator.evaluate_policy("p1", {"geo": {}}, _ctx()) == ConditionOutcome.ERROR
    )
    assert (
        evaluator.evaluate_rule(
            "perm1", [{"type": "ip", "config": {"allowed_ips": ["10.0.0.0/8"]}}], _ctx()
        )
        == ConditionOutcome.ERROR
    )
