"""Grant domain entities.

User role grants carry the temporary-expiry and approval rules; group role
grants are always effective once they exist.
"""

from dataclasses import dataclass
from datetime import UTC, datetime

from app.domain.enums import ApprovalStatus
from app.domain.exceptions import InvalidGrantException, ValidationException


def _aware(value: datetime) -> datetime:
    return value if value.tzinfo is not None else value.replace(tzinfo=UTC)


@dataclass
class UserRoleGrantEntity:
    """Domain entity for a user -> role grant.

    Effective iff approved and (permanent or not yet expired). A temporary
    grant with no expiry is never effective.
    """

    id: str
    user_id: str
    role_id: str
    is_temporary: bool = False
    expires_at: datetime | None = None
    approval_status: ApprovalStatus = ApprovalStatus.APPROVED
    approval_reason: str | None = None

    def __post_init__(self) -> None:
        if not self.user_id:
            raise ValidationException("User ID is required", field="user_id")
        if not self.role_id:
            raise ValidationException("Role ID is required", field="role_id")

    def is_effective(self, now: datetime) -> bool:
        """Return whether the grant confers its role at instant now."""
        if self.approval_status != ApprovalStatus.APPROVED:
            return False
        if not self.is_temporary:
            return True
        if self.expires_at is None:
            return False
        return _aware(self.expires_at) > _aware(now)

    def _transition(self, target: ApprovalStatus, reason: str | None) -> None:
        if self.approval_status.is_terminal():
            raise InvalidGrantException(
                f"Grant is already {self.approval_status.value}",
                grant_id=self.id,
                approval_status=self.approval_status.value,
            )
        self.approval_status = target
        if reason is not None:
            self.approval_reason = reason

    def approve(self, reason: str | None = None) -> None:
        """Move pending -> approved.

        Raises:
            InvalidGrantException: If the grant is not pending.
        """
        self._transition(ApprovalStatus.APPROVED, reason)

    def reject(self, reason: str | None = None) -> None:
        """Move pending -> rejected.

        Raises:
            InvalidGrantException: If the grant is not pending.
        """
        self._transition(ApprovalStatus.REJECTED, reason)

    @staticmethod
    def validate_new(
        is_temporary: bool, expires_at: datetime | None, now: datetime
    ) -> None:
        """Check write-time rules for a new grant.

        Raises:
            InvalidGrantException: If a temporary grant lacks a future expiry.
        """
        if not is_temporary:
            return
        if expires_at is None:
            raise InvalidGrantException("Temporary grants require expires_at")
        if _aware(expires_at) <= _aware(now):
            raise InvalidGrantException(
                "expires_at must be in the future", expires_at=expires_at.isoformat()
            )
