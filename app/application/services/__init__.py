"""Application services: decision engine, hierarchy, grant resolution and RBAC writes."""

from app.application.services.authorization_service import AuthorizationService
from app.application.services.condition_evaluator import (
    ConditionEvaluator,
    ConditionOutcome,
)
from app.application.services.grant_resolver import (
    GrantResolver,
    effective_roles_key,
    invalidate_effective_roles,
)
from app.application.services.grant_service import GrantService
from app.application.services.policy_service import PolicyService
from app.application.services.role_hierarchy_service import RoleHierarchyService
from app.application.services.role_resource_service import RoleResourceService
from app.application.services.role_service import RoleService

__all__ = [
    "AuthorizationService",
    "ConditionEvaluator",
    "ConditionOutcome",
    "GrantResolver",
    "GrantService",
    "PolicyService",
    "RoleHierarchyService",
    "RoleResourceService",
    "RoleService",
    "effective_roles_key",
    "invalidate_effective_roles",
]
