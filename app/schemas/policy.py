"""Policy API schemas."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from app.schemas.condition import PolicyConditions


class PolicyPermission(BaseModel):
    """One allow/deny entry of a policy."""

    scope: str = Field(..., min_length=1, max_length=255)
    resource: str = Field(..., min_length=1, max_length=1000)
    action: str = Field(..., min_length=1, max_length=64)
    is_allow: bool = True


class PolicyCreateRequest(BaseModel):
    """Request body for creating a policy or template."""

    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = Field(default=None, max_length=1000)
    is_template: bool = False
    permissions: list[PolicyPermission] = Field(default_factory=list, max_length=500)
    conditions: PolicyConditions = Field(default_factory=PolicyConditions)
    organization_id: str | None = None


class PolicyUpdate(BaseModel):
    """Partial update. permissions/conditions replace the stored values wholesale."""

    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = Field(default=None, max_length=1000)
    permissions: list[PolicyPermission] | None = Field(default=None, max_length=500)
    conditions: PolicyConditions | None = None
    is_active: bool | None = None

    def changes(self) -> dict[str, Any]:
        data: dict[str, Any] = {}
        for name in self.model_fields_set:
            if name == "permissions" and self.permissions is not None:
                data[name] = [p.model_dump() for p in self.permissions]
            elif name == "conditions" and self.conditions is not None:
                data[name] = self.conditions.to_json()
            else:
                data[name] = getattr(self, name)
        return data


class PolicyClone(BaseModel):
    """Request body for instantiating a template."""

    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = Field(default=None, max_length=1000)
    organization_id: str | None = None


class PolicyResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    description: str | None
    is_template: bool
    permissions: list[dict[str, Any]]
    conditions: dict[str, Any]
    organization_id: str | None
    created_by: str | None
    is_active: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None


class RolePolicyResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    role_id: str
    policy_id: str
    attached_by: str | None
    attached_at: datetime | None = None
