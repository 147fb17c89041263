"""Role domain entities.

Represents roles and their resource-scoped grants, independent of persistence.
"""

from dataclasses import dataclass, field

from app.domain.enums import RoleType
from app.domain.exceptions import ValidationException


@dataclass
class RoleEntity:
    """Domain entity for an RBAC role.

    A role may point at a parent; holding the role implies holding every
    ancestor. Higher priority wins when policies conflict.
    """

    id: str
    name: str
    type: RoleType = RoleType.CUSTOM
    parent_role_id: str | None = None
    priority: int = 0
    organization_id: str | None = None
    is_active: bool = True
    is_default: bool = False

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        """Validate role rules. Raises ValidationException if invalid."""
        if not self.id:
            raise ValidationException("Role ID is required", field="id")
        if not self.name or not self.name.strip():
            raise ValidationException("Role name is required", field="name")
        if self.parent_role_id is not None and self.parent_role_id == self.id:
            raise ValidationException("A role cannot be its own parent", field="parent_role_id")

    def visible_in(self, organization_id: str | None) -> bool:
        """Return True if the role applies to the given organization.

        System-wide roles (no organization) apply everywhere; organization
        roles only inside their own organization, never in a request that
        names none.
        """
        return self.organization_id is None or self.organization_id == organization_id

    def can_contribute(self, organization_id: str | None) -> bool:
        return self.is_active and self.visible_in(organization_id)

    def reparent(self, parent_role_id: str | None) -> None:
        if parent_role_id is not None and parent_role_id == self.id:
            raise ValidationException("A role cannot be its own parent", field="parent_role_id")
        self.parent_role_id = parent_role_id

    def deactivate(self) -> None:
        self.is_active = False

    def activate(self) -> None:
        self.is_active = True


@dataclass
class RoleResourceEntity:
    """A role's allowed actions on one concrete resource."""

    role_id: str
    resource_type: str
    resource_id: str
    allowed_actions: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.resource_type or not self.resource_id:
            raise ValidationException(
                "Resource type and id are required", field="resource_id"
            )
        if not self.allowed_actions or not all(
            isinstance(a, str) and a.strip() for a in self.allowed_actions
        ):
            raise ValidationException(
                "allowed_actions must be a non-empty list of actions",
                field="allowed_actions",
            )

    def allows(self, action: str) -> bool:
        return action in self.allowed_actions or "*" in self.allowed_actions
