"""Persistence models: ORM entities and mixins."""

from app.infrastructure.persistence.models.audit_log import AuditLog
from app.infrastructure.persistence.models.grant import GroupRole, UserRole
from app.infrastructure.persistence.models.mixins import (
    CreatedAtMixin,
    CuidMixin,
    OrganizationMixin,
    OrganizationScopedModel,
    TimestampMixin,
)
from app.infrastructure.persistence.models.policy import RbacPolicy, RolePolicy
from app.infrastructure.persistence.models.role import Role, RolePermission, RoleResource
from app.infrastructure.persistence.models.user import GroupMember, User, UserGroup

__all__ = [
    "AuditLog",
    "GroupMember",
    "GroupRole",
    "RbacPolicy",
    "Role",
    "RolePermission",
    "RolePolicy",
    "RoleResource",
    "User",
    "UserGroup",
    "UserRole",
    "CreatedAtMixin",
    "CuidMixin",
    "OrganizationMixin",
    "OrganizationScopedModel",
    "TimestampMixin",
]
