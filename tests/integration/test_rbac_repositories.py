"""RBAC repository integration tests. Require Postgres; session is rolled back after each test."""

import uuid
from datetime import UTC, datetime, timedelta

import pytest

from app.application.dtos.audit_log import AuditLogEntryCreate
from app.application.dtos.policy import PolicyCreate
from app.domain.exceptions import DuplicateAssignmentException
from app.infrastructure.persistence.repositories import (
    AuditLogRepository,
    PolicyRepository,
    PrincipalRepository,
    RoleRepository,
    RoleResourceRepository,
    UserRoleRepository,
)


def _name(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:8]}"


@pytest.mark.requires_db
async def test_create_role_and_get_by_name(db_session) -> None:
    repo = RoleRepository(db_session)
    parent = await repo.create_role(_name("viewer"), priority=1)
    child = await repo.create_role(
        _name("analyst"), "Reads", parent_role_id=parent.id, priority=5, organization_id="org-a"
    )

    found = await repo.get_by_name(child.name, "org-a")
    assert found is not None and found.id == child.id
    assert await repo.get_by_name(child.name, None) is None
    assert [r.id for r in await repo.list_children(parent.id)] == [child.id]
    assert await repo.detach_children(parent.id) == 1
    assert (await repo.get_by_id(child.id)).parent_role_id is None


@pytest.mark.requires_db
async def test_user_grants_and_expiry_purge(db_session) -> None:
    principals = PrincipalRepository(db_session)
    roles = RoleRepository(db_session)
    grants = UserRoleRepository(db_session)
    user = await principals.create_user(_name("user"))
    role = await roles.create_role(_name("oncall"))
    other = await roles.create_role(_name("viewer"))
    now = datetime.now(UTC)

    await grants.create(user.id, role.id, is_temporary=True, expires_at=now - timedelta(minutes=1))
    await grants.create(user.id, other.id, approval_status="pending")
    with pytest.raises(DuplicateAssignmentException):
        await grants.create(user.id, other.id)

    assert {g.role_id for g in await grants.list_by_user(user.id)} == {role.id, other.id}
    assert other.id in {g.role_id for g in await grants.list_pending()}
    assert await grants.delete_expired(now) >= 1
    assert [g.role_id for g in await grants.list_by_user(user.id)] == [other.id]


@pytest.mark.requires_db
async def test_policy_attachments_and_resource_grants(db_session) -> None:
    roles = RoleRepository(db_session)
    policies = PolicyRepository(db_session)
    resources = RoleResourceRepository(db_session)
    role = await roles.create_role(_name("dba"))
    policy = await policies.create(
        PolicyCreate(
            name=_name("dbs"),
            permissions=[{"scope": "database", "resource": "*", "action": "read", "is_allow": True}],
            conditions={"mfa": {"require_mfa": True}},
        )
    )

    await policies.attach(role.id, policy.id, "admin")
    with pytest.raises(DuplicateAssignmentException):
        await policies.attach(role.id, policy.id)
    attached = await policies.list_for_roles([role.id])
    assert [(r, p.id) for r, p in attached] == [(role.id, policy.id)]
    assert attached[0][1].conditions == {"mfa": {"require_mfa": True}}

    grant = await resources.create(role.id, "database", "sales", ["read"])
    assert [g.id for g in await resources.list_for_resource([role.id], "database", "sales")] == [
        grant.id
    ]
    assert await resources.list_for_resource([role.id], "database", "hr") == []

    assert await policies.delete(policy.id) is True
    assert await policies.list_for_roles([role.id]) == []


@pytest.mark.requires_db
async def test_audit_log_records_rbac_writes_and_filters(db_session) -> None:
    repo = AuditLogRepository(db_session)
    actor = _name("actor")

    def _entry(action: str, resource_type: str, **values) -> AuditLogEntryCreate:
        return AuditLogEntryCreate(
            organization_id="org-a",
            user_id=actor,
            action=action,
            resource_type=resource_type,
            resource_id=_name(resource_type),
            old_values=values.get("old"),
            new_values=values.get("new"),
            request_id=None,
        )

    assigned = await repo.create(_entry("assigned", "user_role", new={"role_id": "dba"}))
    await repo.create(_entry("created", "role", new={"name": "dba"}))

    assert assigned.new_values == {"role_id": "dba"} and assigned.success is True
    grants = await repo.list(user_id=actor, resource_type="user_role")
    assert [e.id for e in grants] == [assigned.id]
    assert {e.action for e in await repo.list("org-a", user_id=actor)} == {"assigned", "created"}
    assert await repo.list("org-b", user_id=actor) == []
