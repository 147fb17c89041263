"""Tests for domain entities (grants, roles, resource grants, policies) and enums."""

from datetime import UTC, datetime, timedelta

import pytest

from app.domain.entities.grant import UserRoleGrantEntity
from app.domain.entities.policy import PolicyEntity
from app.domain.entities.role import RoleEntity, RoleResourceEntity
from app.domain.enums import ApprovalStatus, DecisionReason, PrincipalType, RoleType
from app.domain.exceptions import InvalidGrantException, ValidationException

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=UTC)


def _grant(**kwargs) -> UserRoleGrantEntity:
    return UserRoleGrantEntity(id="g1", user_id="u1", role_id="r1", **kwargs)


def test_enum_values() -> None:
    assert RoleType.values() == ["system", "custom"]
    assert PrincipalType.values() == ["user", "group"]
    assert "explicit_deny" in DecisionReason.values()
    assert ApprovalStatus.PENDING.is_terminal() is False
    assert ApprovalStatus.REJECTED.is_terminal() is True


def test_permanent_approved_grant_is_effective() -> None:
    assert _grant().is_effective(NOW) is True


def test_temporary_grant_expiry_boundary() -> None:
    """Effective strictly before expires_at, not at or after it."""
    grant = _grant(is_temporary=True, expires_at=NOW + timedelta(hours=1))
    assert grant.is_effective(NOW) is True
    assert grant.is_effective(NOW + timedelta(hours=1)) is False
    assert grant.is_effective(NOW + timedelta(hours=2)) is False


def test_temporary_grant_without_expiry_is_never_effective() -> None:
    assert _grant(is_temporary=True, expires_at=None).is_effective(NOW) is False


def test_naive_expiry_is_treated_as_utc() -> None:
    grant = _grant(is_temporary=True, expires_at=datetime(2026, 10, 19, 13, 0))
    assert grant.is_effective(NOW) is True


@pytest.mark.parametrize("status", [ApprovalStatus.PENDING, ApprovalStatus.REJECTED])
def test_unapproved_grant_is_not_effective(status: ApprovalStatus) -> None:
    assert _grant(approval_status=status).is_effective(NOW) is False


def test_approve_and_reject_from_pending() -> None:
    grant = _grant(approval_status=ApprovalStatus.PENDING)
    grant.approve("ticket 42")
    assert grant.approval_status == ApprovalStatus.APPROVED
    assert grant.approval_reason == "ticket 42"

    other = _grant(approval_status=ApprovalStatus.PENDING)
    other.reject()
    assert other.approval_status == ApprovalStatus.REJECTED


@pytest.mark.parametrize("status", [ApprovalStatus.APPROVED, ApprovalStatus.REJECTED])
def test_transitions_from_terminal_state_raise(status: ApprovalStatus) -> None:
    grant = _grant(approval_status=status)
    with pytest.raises(InvalidGrantException) as exc_info:
        grant.approve()
    assert exc_info.value.details["approval_status"] == status.value
    with pytest.raises(InvalidGrantException):
        grant.reject()


def test_validate_new_temporary_grant() -> None:
    UserRoleGrantEntity.validate_new(False, None, NOW)
    UserRoleGrantEntity.validate_new(True, NOW + timedelta(minutes=5), NOW)
    with pytest.raises(InvalidGrantException):
        UserRoleGrantEntity.validate_new(True, None, NOW)
    with pytest.raises(InvalidGrantException):
        UserRoleGrantEntity.validate_new(True, NOW, NOW)


def test_role_entity_validation() -> None:
    with pytest.raises(ValidationException):
        RoleEntity(id="r1", name=" ")
    with pytest.raises(ValidationException):
        RoleEntity(id="r1", name="Analyst", parent_role_id="r1")
    role = RoleEntity(id="r1", name="Analyst", organization_id="org-a")
    assert role.visible_in("org-a")
    assert not role.visible_in("org-b")
    assert not role.visible_in(None)
    assert RoleEntity(id="r2", name="Global").visible_in(None)
    role.deactivate()
    assert not role.can_contribute("org-a")


def test_role_resource_entity() -> None:
    rr = RoleResourceEntity("r1", "database", "sales", ["read"])
    assert rr.allows("read")
    assert not rr.allows("modify")
    assert RoleResourceEntity("r1", "database", "sales", ["*"]).allows("admin")
    with pytest.raises(ValidationException):
        RoleResourceEntity("r1", "database", "sales", [])


def test_policy_entity_applies_and_validates() -> None:
    policy = PolicyEntity(
        id="p1",
        name="Readers",
        permissions=[{"scope": "table", "resource": "*", "action": "read"}],
        organization_id="org-a",
    )
    policy.validate()
    assert policy.applies_in("org-a")
    assert not policy.applies_in("org-b")
    assert not policy.applies_in(None)
    policy.is_template = True
    assert not policy.applies_in("org-a")

    with pytest.raises(ValidationException) as exc_info:
        PolicyEntity(id="p2", name="Bad", permissions=[{"scope": "table"}]).validate()
    assert exc_info.value.details == {"field": "permissions"}
    with pytest.raises(ValidationException) as exc_info:
        PolicyEntity(id="p3", name="Bad", conditions={"geo": {}}).validate()
    assert exc_info.value.details == {"field": "conditions"}
