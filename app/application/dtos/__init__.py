"""Application DTOs (no ORM dependency)."""

from app.application.dtos.audit_log import AuditLogEntryCreate, AuditLogResult
from app.application.dtos.decision import (
    Decision,
    EffectiveRoles,
    MatchedEntry,
    SimulatedPermission,
)
from app.application.dtos.grant import (
    AssignRoleCommand,
    GroupMemberResult,
    GroupRoleResult,
    UserRoleResult,
)
from app.application.dtos.policy import PolicyCreate, PolicyResult, RolePolicyResult
from app.application.dtos.principal import GroupResult, UserResult
from app.application.dtos.role import (
    RolePermissionResult,
    RoleResourceResult,
    RoleResult,
)

__all__ = [
    "AssignRoleCommand",
    "AuditLogEntryCreate",
    "AuditLogResult",
    "Decision",
    "EffectiveRoles",
    "GroupMemberResult",
    "GroupResult",
    "GroupRoleResult",
    "MatchedEntry",
    "PolicyCreate",
    "PolicyResult",
    "RolePermissionResult",
    "RolePolicyResult",
    "RoleResourceResult",
    "RoleResult",
    "SimulatedPermission",
    "UserResult",
    "UserRoleResult",
]
