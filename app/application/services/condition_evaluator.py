"""Fail-closed evaluation of stored condition JSON."""

from __future__ import annotations

from collections.abc import Callable
from enum import Enum

from app.domain.exceptions import ConditionEvaluationException
from app.domain.value_objects.conditions import (
    Condition,
    evaluate_all,
    parse_policy_conditions,
    parse_rule_conditions,
)
from app.domain.value_objects.core import AccessContext
from app.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


class ConditionOutcome(str, Enum):
    PASSED = "passed"
    FAILED = "failed"
    ERROR = "error"


class ConditionEvaluator:
    """Parses and evaluates conditions; parse or evaluation errors become ERROR."""

    def _run(
        self,
        parse: Callable[[], list[Condition]],
        context: AccessContext,
        owner: str,
    ) -> ConditionOutcome:
        try:
            conditions = parse()
            if not conditions:
                return ConditionOutcome.PASSED
            passed = evaluate_all(conditions, context)
        except ConditionEvaluationException as e:
            logger.warning("Condition error on %s: %s", owner, e.message)
            return ConditionOutcome.ERROR
        if not passed:
            logger.debug("Conditions of %s not satisfied", owner)
            return ConditionOutcome.FAILED
        return ConditionOutcome.PASSED

    def evaluate_policy(
        self, policy_id: str, conditions: dict | None, context: AccessContext
    ) -> ConditionOutcome:
        """Evaluate a policy's {kind: config} conditions."""
        return self._run(
            lambda: parse_policy_conditions(conditions), context, f"policy {policy_id}"
        )

    def evaluate_rule(
        self, permission_id: str, conditions: list | None, context: AccessContext
    ) -> ConditionOutcome:
        """Evaluate a role permission's [{type, config}] conditions."""
        return self._run(
            lambda: parse_rule_conditions(conditions),
            context,
            f"role permission {permission_id}",
        )
