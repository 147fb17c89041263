"""Role API schemas: roles, role permissions and resource grants."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from app.domain.enums import RoleType
from app.schemas.condition import RuleCondition


class RoleCreate(BaseModel):
    """Request body for creating a role."""

    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = Field(default=None, max_length=1000)
    type: RoleType = RoleType.CUSTOM
    parent_role_id: str | None = None
    priority: int = Field(default=0, ge=-1_000_000, le=1_000_000)
    organization_id: str | None = None
    is_active: bool = True
    is_default: bool = False


class RoleUpdate(BaseModel):
    """Request body for updating a role (partial). parent_role_id=null detaches."""

    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = Field(default=None, max_length=1000)
    parent_role_id: str | None = None
    priority: int | None = Field(default=None, ge=-1_000_000, le=1_000_000)
    is_active: bool | None = None
    is_default: bool | None = None

    def changes(self) -> dict[str, Any]:
        """Fields the client actually sent."""
        return {name: getattr(self, name) for name in self.model_fields_set}


class RoleResponse(BaseModel):
    """Role list/detail response."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    description: str | None
    type: str
    parent_role_id: str | None
    priority: int
    organization_id: str | None
    is_active: bool
    is_default: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None


class RolePermissionCreate(BaseModel):
    """Request body for adding an allow/deny row to a role."""

    scope: str = Field(..., min_length=1, max_length=255)
    resource: str = Field(..., min_length=1, max_length=1000)
    action: str = Field(..., min_length=1, max_length=64)
    is_allow: bool = True
    conditions: list[RuleCondition] | None = None

    def conditions_json(self) -> list[dict[str, Any]] | None:
        if self.conditions is None:
            return None
        return [c.model_dump(exclude_none=True) for c in self.conditions]


class RolePermissionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    role_id: str
    scope: str
    resource: str
    action: str
    is_allow: bool
    conditions: list[dict[str, Any]] | None = None
    created_at: datetime | None = None


class RoleResourceGrant(BaseModel):
    """Request body for granting a role actions on one concrete resource."""

    resource_type: str = Field(..., min_length=1, max_length=255)
    resource_id: str = Field(..., min_length=1, max_length=1000)
    allowed_actions: list[str] = Field(..., min_length=1, max_length=50)


class RoleResourceResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    role_id: str
    resource_type: str
    resource_id: str
    allowed_actions: list[str]
    created_at: datetime | None = None
