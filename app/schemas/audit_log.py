"""Response schemas for the RBAC change history (GET /audit-logs)."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class AuditLogEntryResponse(BaseModel):
    """One RBAC write: who changed which role, policy, grant or resource grant.

    old_values/new_values hold the row before and after the change; a grant
    replaced on reassignment shows up as `unassigned` followed by `assigned`.
    """

    model_config = ConfigDict(from_attributes=True)

    id: str
    organization_id: str | None
    user_id: str | None = Field(None, description="Actor (token sub) who made the change")
    action: str = Field(..., description="created | updated | deleted | assigned | approved | ...")
    resource_type: str = Field(
        ...,
        description="role | role_permission | role_resource | policy | role_policy"
        " | user_role | group_role | group_member",
    )
    resource_id: str | None
    old_values: dict[str, Any] | None = None
    new_values: dict[str, Any] | None = None
    request_id: str | None = None
    timestamp: datetime
    success: bool
    error_message: str | None = None


class AuditLogListResponse(BaseModel):
    """Page of RBAC changes, newest first; no total count."""

    items: list[AuditLogEntryResponse]
    skip: int
    limit: int
