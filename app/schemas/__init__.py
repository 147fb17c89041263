"""Pydantic request/response schemas for the API."""

from app.schemas.audit_log import AuditLogEntryResponse, AuditLogListResponse
from app.schemas.authorization import AuthorizeRequest, DecisionResponse
from app.schemas.grant import UserRoleAssign, UserRoleResponse
from app.schemas.health import HealthResponse
from app.schemas.policy import PolicyCreateRequest, PolicyResponse
from app.schemas.role import RoleCreate, RoleResponse

__all__ = [
    "AuditLogEntryResponse",
    "AuditLogListResponse",
    "AuthorizeRequest",
    "DecisionResponse",
    "HealthResponse",
    "PolicyCreateRequest",
    "PolicyResponse",
    "RoleCreate",
    "RoleResponse",
    "UserRoleAssign",
    "UserRoleResponse",
]
