"""DTOs for the principal directory (users, groups)."""

from dataclasses import dataclass


@dataclass(frozen=True)
class UserResult:
    id: str
    username: str
    email: str | None
    organization_id: str | None
    is_active: bool


@dataclass(frozen=True)
class GroupResult:
    id: str
    name: str
    organization_id: str | None
