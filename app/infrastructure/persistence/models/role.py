"""Role ORM models: roles, resource-scoped grants and per-role permission rows."""

from typing import Any

from sqlalchemy import (
    JSON,
    Boolean,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column

from app.infrastructure.persistence.database import Base
from app.infrastructure.persistence.models.mixins import (
    CreatedAtMixin,
    CuidMixin,
    OrganizationScopedModel,
)


class Role(OrganizationScopedModel, Base):
    """Role. Table: role. Unique (organization_id, name).

    parent_role_id is a self reference without a cycle constraint; the
    hierarchy walk guards against loops at read time.
    """

    __tablename__ = "role"

    name: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    type: Mapped[str] = mapped_column(
        String, nullable=False, server_default=text("'custom'")
    )
    parent_role_id: Mapped[str | None] = mapped_column(
        String, ForeignKey("role.id", ondelete="SET NULL"), nullable=True, index=True
    )
    priority: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default=text("0")
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    is_default: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    __table_args__ = (
        UniqueConstraint("organization_id", "name", name="uq_role_organization_name"),
    )


class RoleResource(CuidMixin, CreatedAtMixin, Base):
    """Resource-scoped grant. Table: role_resource. Unique (role_id, resource_type, resource_id)."""

    __tablename__ = "role_resource"

    role_id: Mapped[str] = mapped_column(
        String, ForeignKey("role.id", ondelete="CASCADE"), nullable=False
    )
    resource_type: Mapped[str] = mapped_column(String, nullable=False)
    resource_id: Mapped[str] = mapped_column(String, nullable=False)
    allowed_actions: Mapped[list[str]] = mapped_column(JSON, nullable=False)

    __table_args__ = (
        UniqueConstraint(
            "role_id", "resource_type", "resource_id", name="uq_role_resource"
        ),
        Index("ix_role_resource_lookup", "resource_type", "resource_id"),
    )


class RolePermission(CuidMixin, CreatedAtMixin, Base):
    """Per-role allow/deny row with optional conditions. Table: role_permission."""

    __tablename__ = "role_permission"

    role_id: Mapped[str] = mapped_column(
        String, ForeignKey("role.id", ondelete="CASCADE"), nullable=False, index=True
    )
    scope: Mapped[str] = mapped_column(String, nullable=False)
    resource: Mapped[str] = mapped_column(String, nullable=False)
    action: Mapped[str] = mapped_column(String, nullable=False)
    is_allow: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    conditions: Mapped[list[dict[str, Any]] | None] = mapped_column(JSON, nullable=True)
