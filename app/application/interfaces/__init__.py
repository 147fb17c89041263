"""Application interfaces (ports): repository and service protocols.

Define contracts for infrastructure implementations (DIP).
No runtime imports from app.infrastructure or app.api.
"""

from app.application.interfaces.repositories import (
    IAuditLogRepository,
    IGroupRoleRepository,
    IPolicyRepository,
    IPrincipalRepository,
    IRolePermissionRepository,
    IRoleRepository,
    IRoleResourceRepository,
    IUserRoleRepository,
)
from app.application.interfaces.services import (
    IApiAuditLogService,
    IAuthorizationService,
    ICacheService,
)

__all__ = [
    "IApiAuditLogService",
    "IAuditLogRepository",
    "IAuthorizationService",
    "ICacheService",
    "IGroupRoleRepository",
    "IPolicyRepository",
    "IPrincipalRepository",
    "IRolePermissionRepository",
    "IRoleRepository",
    "IRoleResourceRepository",
    "IUserRoleRepository",
]
