"""Presentation-layer dependency injection (composition root).

Routes depend only on these dependencies, never on infrastructure directly.
"""

from .access import Admin, Modifier, Reader, context_from_request, require_access
from .auth import get_current_actor_id
from .db import get_audit_service, get_cache
from .services import (
    build_authorization_service,
    get_audit_log_repo,
    get_authorization_service,
    get_grant_service,
    get_grant_service_for_write,
    get_policy_service,
    get_policy_service_for_write,
    get_role_resource_service,
    get_role_resource_service_for_write,
    get_role_service,
    get_role_service_for_write,
)

__all__ = [
    "Admin",
    "Modifier",
    "Reader",
    "build_authorization_service",
    "context_from_request",
    "get_audit_log_repo",
    "get_audit_service",
    "get_authorization_service",
    "get_cache",
    "get_current_actor_id",
    "get_grant_service",
    "get_grant_service_for_write",
    "get_policy_service",
    "get_policy_service_for_write",
    "get_role_resource_service",
    "get_role_resource_service_for_write",
    "get_role_service",
    "get_role_service_for_write",
    "require_access",
]
