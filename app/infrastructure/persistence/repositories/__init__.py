"""Persistence repositories. Re-exports for dependency injection."""

from app.infrastructure.persistence.repositories.audit_log_repo import AuditLogRepository
from app.infrastructure.persistence.repositories.base import BaseRepository
from app.infrastructure.persistence.repositories.group_role_repo import GroupRoleRepository
from app.infrastructure.persistence.repositories.policy_repo import PolicyRepository
from app.infrastructure.persistence.repositories.principal_repo import PrincipalRepository
from app.infrastructure.persistence.repositories.role_permission_repo import (
    RolePermissionRepository,
)
from app.infrastructure.persistence.repositories.role_repo import RoleRepository
from app.infrastructure.persistence.repositories.role_resource_repo import (
    RoleResourceRepository,
)
from app.infrastructure.persistence.repositories.user_role_repo import UserRoleRepository

__all__ = [
    "AuditLogRepository",
    "BaseRepository",
    "GroupRoleRepository",
    "PolicyRepository",
    "PrincipalRepository",
    "RolePermissionRepository",
    "RoleRepository",
    "RoleResourceRepository",
    "UserRoleRepository",
]
