"""API v1 router aggregation.

Includes all endpoint modules with consistent prefix and tags. All routes
use dependencies from app.api.v1.dependencies (no manual repo/service construction).
"""

from fastapi import APIRouter

from app.api.v1.endpoints import (
    audit_log,
    authorization,
    groups,
    health,
    policies,
    roles,
    user_roles,
)

api_router = APIRouter()

api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(authorization.router, prefix="/authorize", tags=["authorization"])
api_router.include_router(roles.router, prefix="/roles", tags=["roles"])
api_router.include_router(user_roles.users_router, prefix="/users", tags=["user-roles"])
api_router.include_router(user_roles.router, prefix="/user-roles", tags=["user-roles"])
api_router.include_router(groups.router, prefix="/groups", tags=["groups"])
api_router.include_router(policies.router, prefix="/policies", tags=["policies"])
api_router.include_router(audit_log.router, prefix="/audit-logs", tags=["audit-log"])
