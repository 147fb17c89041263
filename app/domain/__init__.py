"""Domain layer: entities, value objects, enums, and exceptions.

No dependencies on infrastructure or presentation. Used by application
and infrastructure layers.
"""

from app.domain.entities import (
    PolicyEntity,
    RoleEntity,
    RoleResourceEntity,
    UserRoleGrantEntity,
)
from app.domain.enums import (
    ApprovalStatus,
    DecisionReason,
    Effect,
    PrincipalType,
    RoleType,
)
from app.domain.exceptions import (
    AuthenticationException,
    AuthorizationException,
    ConditionEvaluationException,
    CycleDetectedException,
    GatekeeperException,
    InvalidGrantException,
    PrincipalNotFoundException,
    ResourceNotFoundException,
    ValidationException,
)
from app.domain.value_objects import AccessContext, PermissionRule, Principal

__all__ = [
    # Entities
    "PolicyEntity",
    "RoleEntity",
    "RoleResourceEntity",
    "UserRoleGrantEntity",
    # Enums
    "ApprovalStatus",
    "DecisionReason",
    "Effect",
    "PrincipalType",
    "RoleType",
    # Exceptions
    "AuthenticationException",
    "AuthorizationException",
    "ConditionEvaluationException",
    "CycleDetectedException",
    "GatekeeperException",
    "InvalidGrantException",
    "PrincipalNotFoundException",
    "ResourceNotFoundException",
    "ValidationException",
    # Value objects
    "AccessContext",
    "PermissionRule",
    "Principal",
]
