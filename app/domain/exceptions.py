"""Domain exceptions for Gatekeeper.

Defines domain-level exceptions that represent business rule violations.
These exceptions are independent of infrastructure concerns. Presentation
layer maps them to HTTP responses in exception handlers.
"""

from typing import Any


class GatekeeperException(Exception):
    """Base exception for all Gatekeeper application errors.

    All custom exceptions should inherit from this class to allow
    consistent error handling and logging. Presentation layer maps
    these to HTTP responses using message, error_code, and details.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code.
        details: Additional error context (e.g. field, resource_id).
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Optional machine-readable code; defaults to class name.
            details: Optional dict of extra context.
        """
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON body used by the API exception handler."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class ValidationException(GatekeeperException):
    """Raised when input validation fails (e.g. invalid format or range)."""

    def __init__(self, message: str, field: str | None = None) -> None:
        """Initialize with message and optional field name.

        Args:
            message: Description of the validation failure.
            field: Optional field or attribute that failed validation.
        """
        details = {"field": field} if field else {}
        super().__init__(message, "VALIDATION_ERROR", details)


class AuthenticationException(GatekeeperException):
    """Raised when authentication fails (e.g. missing or invalid token)."""

    def __init__(self, message: str = "Authentication failed") -> None:
        super().__init__(message, "AUTHENTICATION_ERROR")


class AuthorizationException(GatekeeperException):
    """Raised when the engine denies the caller the requested action."""

    def __init__(
        self,
        resource: str | None = None,
        action: str | None = None,
        message: str = "Permission denied",
        reason: str | None = None,
    ) -> None:
        """Initialize with optional resource, action, message and decision reason.

        Args:
            resource: Optional resource (e.g. 'system:rbac', 'database:sales').
            action: Optional action that was attempted (e.g. 'read', 'admin').
            message: Human-readable message; default used when resource/action omitted.
            reason: Optional decision reason (e.g. 'explicit_deny').
        """
        if resource and action:
            message = f"Permission denied: {action} on {resource}"
        details: dict[str, Any] = {}
        if resource:
            details["resource"] = resource
        if action:
            details["action"] = action
        if reason:
            details["reason"] = reason
        super().__init__(message, "PERMISSION_DENIED", details)


class ResourceNotFoundException(GatekeeperException):
    """Raised when a referenced id does not exist."""

    def __init__(self, resource_type: str, resource_id: str) -> None:
        """Initialize with resource type and id.

        Args:
            resource_type: Type of resource (e.g. 'role', 'policy').
            resource_id: The ID that was not found.
        """
        super().__init__(
            f"{resource_type} not found: {resource_id}",
            "RESOURCE_NOT_FOUND",
            {"resource_type": resource_type, "resource_id": resource_id},
        )


class PrincipalNotFoundException(GatekeeperException):
    """Raised when the user or group being authorized is unknown."""

    def __init__(self, principal_type: str, principal_id: str) -> None:
        super().__init__(
            f"{principal_type} not found: {principal_id}",
            "PRINCIPAL_NOT_FOUND",
            {"principal_type": principal_type, "principal_id": principal_id},
        )


class CycleDetectedException(GatekeeperException):
    """Raised when the role hierarchy loops or exceeds the maximum depth."""

    def __init__(self, role_id: str, path: list[str], max_depth: int) -> None:
        """Initialize with the starting role and the walked path.

        Args:
            role_id: Role whose ancestors were being resolved.
            path: Role ids visited before the walk was aborted.
            max_depth: Configured hierarchy depth limit.
        """
        super().__init__(
            f"Role hierarchy cycle detected starting at role {role_id}",
            "CYCLE_DETECTED",
            {"role_id": role_id, "path": path, "max_depth": max_depth},
        )


class ConditionEvaluationException(GatekeeperException):
    """Raised when a policy condition cannot be evaluated (treated as deny)."""

    def __init__(self, condition_type: str, reason: str) -> None:
        super().__init__(
            f"Cannot evaluate '{condition_type}' condition: {reason}",
            "CONDITION_EVALUATION_ERROR",
            {"condition_type": condition_type, "reason": reason},
        )


class InvalidGrantException(GatekeeperException):
    """Raised for grant writes that break grant rules (e.g. approving a terminal grant)."""

    def __init__(self, message: str, grant_id: str | None = None, **details_extra: Any) -> None:
        details: dict[str, Any] = dict(details_extra)
        if grant_id:
            details["grant_id"] = grant_id
        super().__init__(message, "INVALID_GRANT", details)


class RoleInUseException(GatekeeperException):
    """Raised when deleting a role that grants still reference (non-cascading delete)."""

    def __init__(self, role_id: str, grant_count: int) -> None:
        super().__init__(
            f"Role {role_id} is still referenced by {grant_count} grant(s)",
            "ROLE_IN_USE",
            {"role_id": role_id, "grant_count": grant_count},
        )


class DuplicateAssignmentException(GatekeeperException):
    """Raised when an assignment already exists (unique constraint)."""

    def __init__(self, message: str, assignment_type: str, details_extra: dict[str, Any] | None = None) -> None:
        """Initialize with message and assignment context.

        Args:
            message: Human-readable description (e.g. 'Policy already attached to role').
            assignment_type: 'role_policy', 'group_member', etc.
            details_extra: Optional extra keys (e.g. role_id, policy_id).
        """
        details = details_extra or {}
        details["assignment_type"] = assignment_type
        super().__init__(message, "DUPLICATE_ASSIGNMENT", details)


class SqlNotConfiguredException(GatekeeperException):
    """Raised when an operation requires Postgres but the database is not configured."""

    def __init__(self) -> None:
        super().__init__(
            message="This operation requires a SQL database that is not configured.",
            error_code="SERVICE_UNAVAILABLE",
        )
