"""Unit tests for GrantService: user/group grants, approval workflow, membership and purge."""

from datetime import UTC, datetime, timedelta

import pytest

from app.application.dtos.grant import AssignRoleCommand
from app.domain.exceptions import (
    DuplicateAssignmentException,
    InvalidGrantException,
    PrincipalNotFoundException,
    ResourceNotFoundException,
)
from app.domain.value_objects.core import AccessContext, Principal
from tests.fakes import FakeCache, RbacStore, entry

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=UTC)


async def _setup(store: RbacStore) -> None:
    await store.user("alice")
    await store.role("admin", priority=100)
    await store.attach("admin", await store.policy("all", [entry("*", "*", "*")]))


async def test_assign_role_is_idempotent(store: RbacStore) -> None:
    await _setup(store)
    service = store.grant_service()
    first = await service.assign_role(
        AssignRoleCommand(user_id="alice", role_id="admin", granted_by="root")
    )
    again = await service.assign_role(AssignRoleCommand(user_id="alice", role_id="admin"))
    assert again == first
    assert first.approval_status == "approved"
    assert store.audit.actions() == [("assigned", "user_role")]


async def test_assign_role_validates_references(store: RbacStore) -> None:
    await _setup(store)
    service = store.grant_service()
    with pytest.raises(PrincipalNotFoundException):
        await service.assign_role(AssignRoleCommand(user_id="ghost", role_id="admin"))
    with pytest.raises(ResourceNotFoundException):
        await service.assign_role(AssignRoleCommand(user_id="alice", role_id="missing"))


async def test_temporary_grant_needs_future_expiry(store: RbacStore) -> None:
    await _setup(store)
    service = store.grant_service()
    with pytest.raises(InvalidGrantException):
        await service.assign_role(
            AssignRoleCommand(user_id="alice", role_id="admin", is_temporary=True), now=NOW
        )
    with pytest.raises(InvalidGrantException):
        await service.assign_role(
            AssignRoleCommand(
                user_id="alice", role_id="admin", is_temporary=True, expires_at=NOW
            ),
            now=NOW,
        )
    grant = await service.assign_role(
        AssignRoleCommand(
            user_id="alice",
            role_id="admin",
            is_temporary=True,
            expires_at=NOW + timedelta(hours=4),
        ),
        now=NOW,
    )
    assert grant.is_temporary and grant.expires_at == NOW + timedelta(hours=4)


async def test_expires_at_dropped_for_permanent_grants(store: RbacStore) -> None:
    await _setup(store)
    grant = await store.grant_service().assign_role(
        AssignRoleCommand(user_id="alice", role_id="admin", expires_at=NOW + timedelta(days=1))
    )
    assert grant.expires_at is None


async def test_approval_gate(store: RbacStore) -> None:
    """A pending grant confers nothing until approved; approval is one-way."""
    await _setup(store)
    service = store.grant_service()
    ctx = AccessContext(now=NOW)
    pending = await service.assign_role(
        AssignRoleCommand(user_id="alice", role_id="admin", requires_approval=True)
    )
    assert pending.approval_status == "pending"
    assert [g.id for g in await service.list_pending()] == [pending.id]
    assert not await store.engine.check(Principal.user("alice"), "admin", "system", "rbac", ctx)

    approved = await service.approve("root", pending.id, "change ticket 7")
    assert approved.approval_status == "approved"
    assert approved.approval_reason == "change ticket 7"
    assert await store.engine.check(Principal.user("alice"), "admin", "system", "rbac", ctx)

    with pytest.raises(InvalidGrantException):
        await service.reject("root", pending.id)
    with pytest.raises(ResourceNotFoundException):
        await service.approve("root", "missing")


async def test_reject_pending_grant(store: RbacStore) -> None:
    await _setup(store)
    service = store.grant_service()
    pending = await service.assign_role(
        AssignRoleCommand(user_id="alice", role_id="admin", requires_approval=True)
    )
    rejected = await service.reject("root", pending.id, "not justified")
    assert rejected.approval_status == "rejected"
    with pytest.raises(InvalidGrantException):
        await service.approve("root", pending.id)
    assert store.audit.actions()[-1] == ("rejected", "user_role")


async def test_reassigning_a_rejected_or_expired_grant_replaces_it(store: RbacStore) -> None:
    await _setup(store)
    service = store.grant_service()
    alice = Principal.user("alice")
    pending = await service.assign_role(
        AssignRoleCommand(user_id="alice", role_id="admin", requires_approval=True), now=NOW
    )
    await service.reject("root", pending.id)

    regranted = await service.assign_role(
        AssignRoleCommand(user_id="alice", role_id="admin", granted_by="root"), now=NOW
    )
    assert regranted.id != pending.id
    assert regranted.approval_status == "approved"
    assert await store.resolver.effective_roles_for(alice, NOW) == {"admin"}
    assert [g.id for g in await service.list_user_roles("alice")] == [regranted.id]
    assert store.audit.actions()[-2:] == [("unassigned", "user_role"), ("assigned", "user_role")]

    await service.revoke_user_role("root", "alice", "admin")
    temporary = await service.assign_role(
        AssignRoleCommand(
            user_id="alice", role_id="admin", is_temporary=True,
            expires_at=NOW + timedelta(hours=1),
        ),
        now=NOW,
    )
    later = NOW + timedelta(hours=2)
    renewed = await service.assign_role(
        AssignRoleCommand(
            user_id="alice", role_id="admin", is_temporary=True,
            expires_at=later + timedelta(hours=1),
        ),
        now=later,
    )
    assert renewed.id != temporary.id
    assert await store.resolver.effective_roles_for(alice, later) == {"admin"}


async def test_revoke_user_role(store: RbacStore) -> None:
    await _setup(store)
    service = store.grant_service()
    await service.assign_role(AssignRoleCommand(user_id="alice", role_id="admin"))
    await service.revoke_user_role("root", "alice", "admin")
    assert await service.list_user_roles("alice") == []
    with pytest.raises(ResourceNotFoundException):
        await service.revoke_user_role("root", "alice", "admin")


async def test_group_roles_and_membership(cached_store: RbacStore, cache: FakeCache) -> None:
    store = cached_store
    await _setup(store)
    await store.group("ops")
    service = store.grant_service()

    grant = await service.assign_group_role("root", "ops", "admin")
    assert await service.assign_group_role("root", "ops", "admin") == grant
    assert [g.role_id for g in await service.list_group_roles("ops")] == ["admin"]

    member = await service.add_member("root", "ops", "alice")
    assert [m.id for m in await service.list_members("ops")] == [member.id]
    with pytest.raises(DuplicateAssignmentException):
        await service.add_member("root", "ops", "alice")
    with pytest.raises(PrincipalNotFoundException):
        await service.add_member("root", "ops", "ghost")
    with pytest.raises(PrincipalNotFoundException):
        await service.list_group_roles("no-such-group")

    await service.remove_member("root", "ops", "alice")
    await service.revoke_group_role("root", "ops", "admin")
    with pytest.raises(ResourceNotFoundException):
        await service.revoke_group_role("root", "ops", "admin")
    with pytest.raises(ResourceNotFoundException):
        await service.remove_member("root", "ops", "alice")
    assert cache.deleted_patterns.count("rbac:roles:*") == 4


async def test_purge_expired(store: RbacStore) -> None:
    await _setup(store)
    await store.role("viewer")
    await store.grant("alice", "admin", is_temporary=True, expires_at=NOW - timedelta(minutes=1))
    await store.grant("alice", "viewer", is_temporary=True, expires_at=NOW + timedelta(days=1))
    service = store.grant_service()

    assert await service.purge_expired("system", NOW) == 1
    assert [g.role_id for g in await service.list_user_roles("alice")] == ["viewer"]
    assert store.audit.actions() == [("purged", "user_role")]
    assert await service.purge_expired("system", NOW) == 0
    assert len(store.audit.entries) == 1
