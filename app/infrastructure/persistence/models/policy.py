"""Policy ORM models: rbac_policy and role_policy attachments."""

from datetime import datetime
from typing import Any

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    ForeignKey,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from app.infrastructure.persistence.database import Base
from app.infrastructure.persistence.models.mixins import (
    CuidMixin,
    OrganizationScopedModel,
)


class RbacPolicy(OrganizationScopedModel, Base):
    """Named bundle of allow/deny entries plus conditions. Table: rbac_policy.

    permissions and conditions are stored verbatim as JSON.
    """

    __tablename__ = "rbac_policy"

    name: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_template: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, index=True
    )
    permissions: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False)
    conditions: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)
    created_by: Mapped[str | None] = mapped_column(String, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)


class RolePolicy(CuidMixin, Base):
    """Policy attached to a role. Table: role_policy. Unique (role_id, policy_id)."""

    __tablename__ = "role_policy"

    role_id: Mapped[str] = mapped_column(
        String, ForeignKey("role.id", ondelete="CASCADE"), nullable=False, index=True
    )
    policy_id: Mapped[str] = mapped_column(
        String, ForeignKey("rbac_policy.id", ondelete="CASCADE"), nullable=False, index=True
    )
    attached_by: Mapped[str | None] = mapped_column(String, nullable=True)
    attached_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    __table_args__ = (UniqueConstraint("role_id", "policy_id", name="uq_role_policy"),)
