"""Condition schemas: typed configs for time, ip, mfa and attribute conditions.

Role-permission conditions are a list of {type, config}; the `type` tag
selects the config model. Policy conditions are a mapping keyed by kind and
validated against the same config models.
"""

from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator


class TimeConditionConfig(BaseModel):
    """Days use 0=Sunday..6=Saturday. Hours are inclusive; start > end wraps midnight."""

    model_config = ConfigDict(extra="forbid")

    allowed_days: list[Annotated[int, Field(ge=0, le=6)]] | None = None
    start_hour: int | None = Field(default=None, ge=0, le=23)
    end_hour: int | None = Field(default=None, ge=0, le=23)
    timezone: str = "UTC"

    @model_validator(mode="after")
    def hours_together(self) -> "TimeConditionConfig":
        if (self.start_hour is None) != (self.end_hour is None):
            raise ValueError("start_hour and end_hour must be set together")
        return self


class IpConditionConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    allowed_ips: list[str] | None = None
    denied_ips: list[str] | None = None


class MfaConditionConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    require_mfa: bool = True


class AttributeConditionConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    equals: dict[str, Any] = Field(..., min_length=1)


class TimeRuleCondition(BaseModel):
    type: Literal["time"]
    config: TimeConditionConfig


class IpRuleCondition(BaseModel):
    type: Literal["ip"]
    config: IpConditionConfig


class MfaRuleCondition(BaseModel):
    type: Literal["mfa"]
    config: MfaConditionConfig = Field(default_factory=MfaConditionConfig)


class AttributeRuleCondition(BaseModel):
    type: Literal["attribute"]
    config: AttributeConditionConfig


RuleCondition = Annotated[
    TimeRuleCondition | IpRuleCondition | MfaRuleCondition | AttributeRuleCondition,
    Field(discriminator="type"),
]


class PolicyConditions(BaseModel):
    """Policy conditions keyed by kind. Unknown kinds are rejected."""

    model_config = ConfigDict(extra="forbid")

    time: TimeConditionConfig | None = None
    ip: IpConditionConfig | None = None
    mfa: MfaConditionConfig | None = None
    attribute: AttributeConditionConfig | None = None

    def to_json(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)
