"""Policy domain entity."""

from dataclasses import dataclass, field
from typing import Any

from app.domain.exceptions import (
    ConditionEvaluationException,
    ValidationException,
)
from app.domain.value_objects.conditions import Condition, parse_policy_conditions
from app.domain.value_objects.core import PermissionRule


@dataclass
class PolicyEntity:
    """A named bundle of allow/deny rules plus global conditions.

    Templates are blueprints for cloning and never apply to a decision.
    """

    id: str
    name: str
    permissions: list[dict[str, Any]] = field(default_factory=list)
    conditions: dict[str, Any] = field(default_factory=dict)
    is_template: bool = False
    is_active: bool = True
    organization_id: str | None = None

    def applies_in(self, organization_id: str | None) -> bool:
        """Return True if the policy may contribute to a decision in the organization."""
        if self.is_template or not self.is_active:
            return False
        return self.organization_id is None or self.organization_id == organization_id

    def rules(self) -> list[PermissionRule]:
        """Parse stored permission entries. Raises ValueError on a malformed entry."""
        return [PermissionRule.from_dict(entry) for entry in self.permissions]

    def parsed_conditions(self) -> list[Condition]:
        """Parse stored conditions. Raises ConditionEvaluationException."""
        return parse_policy_conditions(self.conditions)

    def validate(self) -> None:
        """Validate entries and conditions on write. Raises ValidationException."""
        if not self.name or not self.name.strip():
            raise ValidationException("Policy name is required", field="name")
        try:
            self.rules()
        except (ValueError, TypeError) as e:
            raise ValidationException(str(e), field="permissions") from e
        try:
            self.parsed_conditions()
        except ConditionEvaluationException as e:
            raise ValidationException(e.message, field="conditions") from e
