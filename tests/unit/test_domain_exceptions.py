"""Tests for domain exceptions (error_code, message, details)."""

from app.domain.exceptions import (
    AuthenticationException,
    AuthorizationException,
    CycleDetectedException,
    DuplicateAssignmentException,
    GatekeeperException,
    PrincipalNotFoundException,
    ResourceNotFoundException,
    RoleInUseException,
    SqlNotConfiguredException,
    ValidationException,
)


def test_gatekeeper_exception_default_error_code() -> None:
    """Base GatekeeperException uses class name as error_code when not provided."""
    exc = GatekeeperException("Something failed")
    assert exc.message == "Something failed"
    assert exc.error_code == "GatekeeperException"
    assert exc.details == {}
    assert exc.to_dict() == {
        "error": "GatekeeperException",
        "message": "Something failed",
        "details": {},
    }


def test_validation_exception() -> None:
    exc = ValidationException("Invalid format", field="name")
    assert exc.error_code == "VALIDATION_ERROR"
    assert exc.details == {"field": "name"}
    assert ValidationException("No field").details == {}


def test_authentication_exception_default_message() -> None:
    exc = AuthenticationException()
    assert exc.message == "Authentication failed"
    assert exc.error_code == "AUTHENTICATION_ERROR"


def test_authorization_exception_with_resource_action_and_reason() -> None:
    exc = AuthorizationException(resource="system:rbac", action="admin", reason="default_deny")
    assert exc.message == "Permission denied: admin on system:rbac"
    assert exc.error_code == "PERMISSION_DENIED"
    assert exc.details == {
        "resource": "system:rbac",
        "action": "admin",
        "reason": "default_deny",
    }


def test_not_found_exceptions() -> None:
    exc = ResourceNotFoundException("role", "r-1")
    assert exc.error_code == "RESOURCE_NOT_FOUND"
    assert exc.details == {"resource_type": "role", "resource_id": "r-1"}
    principal = PrincipalNotFoundException("user", "u-1")
    assert principal.error_code == "PRINCIPAL_NOT_FOUND"
    assert principal.details["principal_id"] == "u-1"


def test_cycle_detected_exception_carries_path() -> None:
    exc = CycleDetectedException("a", ["a", "b", "a"], 64)
    assert exc.error_code == "CYCLE_DETECTED"
    assert exc.details == {"role_id": "a", "path": ["a", "b", "a"], "max_depth": 64}


def test_role_in_use_and_duplicate_assignment() -> None:
    assert RoleInUseException("r1", 3).details == {"role_id": "r1", "grant_count": 3}
    dup = DuplicateAssignmentException(
        "Policy already attached to role", "role_policy", {"role_id": "r1"}
    )
    assert dup.error_code == "DUPLICATE_ASSIGNMENT"
    assert dup.details == {"role_id": "r1", "assignment_type": "role_policy"}


def test_sql_not_configured_exception() -> None:
    exc = SqlNotConfiguredException()
    assert exc.error_code == "SERVICE_UNAVAILABLE"
