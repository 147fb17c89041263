"""Domain entities and aggregates.

Pure domain models; no ORM or persistence concerns.
"""

from app.domain.entities.grant import UserRoleGrantEntity
from app.domain.entities.policy import PolicyEntity
from app.domain.entities.role import RoleEntity, RoleResourceEntity

__all__ = [
    "PolicyEntity",
    "RoleEntity",
    "RoleResourceEntity",
    "UserRoleGrantEntity",
]
