"""Application layer: interfaces, DTOs and services.

Depends only on domain and protocol definitions (DIP).
Infrastructure implements the interfaces (repos, cache, audit).
"""

from app.application.interfaces import (
    IApiAuditLogService,
    IAuthorizationService,
    ICacheService,
    IGroupRoleRepository,
    IPolicyRepository,
    IPrincipalRepository,
    IRolePermissionRepository,
    IRoleRepository,
    IRoleResourceRepository,
    IUserRoleRepository,
)
from app.application.services import (
    AuthorizationService,
    GrantResolver,
    GrantService,
    PolicyService,
    RoleHierarchyService,
    RoleResourceService,
    RoleService,
)

__all__ = [
    "AuthorizationService",
    "GrantResolver",
    "GrantService",
    "IApiAuditLogService",
    "IAuthorizationService",
    "ICacheService",
    "IGroupRoleRepository",
    "IPolicyRepository",
    "IPrincipalRepository",
    "IRolePermissionRepository",
    "IRoleRepository",
    "IRoleResourceRepository",
    "IUserRoleRepository",
    "PolicyService",
    "RoleHierarchyService",
    "RoleResourceService",
    "RoleService",
]
