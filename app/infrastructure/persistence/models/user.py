"""Principal directory ORM models: users, groups and group membership."""

from sqlalchemy import Boolean, ForeignKey, String, UniqueConstraint, text
from sqlalchemy.orm import Mapped, mapped_column

from app.infrastructure.persistence.database import Base
from app.infrastructure.persistence.models.mixins import (
    CreatedAtMixin,
    CuidMixin,
    OrganizationScopedModel,
)


class User(OrganizationScopedModel, Base):
    """User model. Table: app_user. Unique username."""

    __tablename__ = "app_user"

    username: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    email: Mapped[str | None] = mapped_column(String, nullable=True)
    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, server_default=text("true")
    )


class UserGroup(OrganizationScopedModel, Base):
    """Group of users. Table: user_group. Unique (organization_id, name)."""

    __tablename__ = "user_group"

    name: Mapped[str] = mapped_column(String, nullable=False)

    __table_args__ = (
        UniqueConstraint("organization_id", "name", name="uq_user_group_organization_name"),
    )


class GroupMember(CuidMixin, CreatedAtMixin, Base):
    """Group membership. Table: group_member. Unique (group_id, user_id)."""

    __tablename__ = "group_member"

    group_id: Mapped[str] = mapped_column(
        String, ForeignKey("user_group.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[str] = mapped_column(
        String, ForeignKey("app_user.id", ondelete="CASCADE"), nullable=False, index=True
    )

    __table_args__ = (UniqueConstraint("group_id", "user_id", name="uq_group_member"),)
