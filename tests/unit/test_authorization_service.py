"""Decision engine tests: tie-break, grants, hierarchy, conditions and the reference scenarios."""

from datetime import UTC, datetime, timedelta

import pytest

from app.domain.enums import DecisionReason, Effect, EntrySource
from app.domain.exceptions import AuthorizationException, CycleDetectedException
from app.domain.value_objects.core import AccessContext, Principal
from tests.fakes import RbacStore, entry

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=UTC)
CTX = AccessContext(now=NOW)
ALICE = Principal.user("alice")


async def _user_with_roles(store: RbacStore, user_id: str, *role_ids: str) -> Principal:
    await store.user(user_id)
    for role_id in role_ids:
        await store.grant(user_id, role_id)
    return Principal.user(user_id)


async def test_default_deny_without_roles(store: RbacStore) -> None:
    await store.user("alice")
    decision = await store.engine.decide(ALICE, "read", "table", "orders", CTX)
    assert decision.effect == Effect.DENY
    assert decision.reason == DecisionReason.DEFAULT_DENY
    assert decision.effective_role_ids == frozenset()


async def test_default_deny_when_nothing_matches(store: RbacStore) -> None:
    await store.role("analyst")
    await store.attach("analyst", await store.policy("p", [entry("table", "orders", "read")]))
    principal = await _user_with_roles(store, "alice", "analyst")

    decision = await store.engine.decide(principal, "modify", "table", "orders", CTX)
    assert decision.reason == DecisionReason.DEFAULT_DENY
    assert decision.effective_role_ids == {"analyst"}


async def test_unknown_principal_is_denied(store: RbacStore) -> None:
    decision = await store.engine.decide(Principal.user("ghost"), "read", "table", "x", CTX)
    assert decision.effect == Effect.DENY
    assert decision.reason == DecisionReason.PRINCIPAL_NOT_FOUND


async def test_higher_priority_deny_wins_analyst_auditor(store: RbacStore) -> None:
    """Analyst (1) allows read on orders, Auditor (10) denies it: deny."""
    await store.role("analyst", priority=1)
    await store.role("auditor", priority=10)
    await store.attach("analyst", await store.policy("allow", [entry("table", "orders", "read")]))
    await store.attach(
        "auditor", await store.policy("deny", [entry("table", "orders", "read", False)])
    )
    principal = await _user_with_roles(store, "alice", "analyst", "auditor")

    decision = await store.engine.decide(principal, "read", "table", "orders", CTX)
    assert decision.effect == Effect.DENY
    assert decision.reason == DecisionReason.EXPLICIT_DENY
    assert decision.deciding_priority == 10
    assert (decision.matched_allows, decision.matched_denies) == (1, 1)


async def test_equal_priority_deny_wins(store: RbacStore) -> None:
    await store.role("a", priority=5)
    await store.role("b", priority=5)
    await store.attach("a", await store.policy("allow", [entry("table", "orders", "read")]))
    await store.attach("b", await store.policy("deny", [entry("table", "orders", "read", False)]))
    principal = await _user_with_roles(store, "alice", "a", "b")

    decision = await store.engine.decide(principal, "read", "table", "orders", CTX)
    assert decision.reason == DecisionReason.EXPLICIT_DENY


async def test_higher_priority_allow_beats_lower_deny(store: RbacStore) -> None:
    await store.role("owner", priority=20)
    await store.role("restricted", priority=2)
    await store.attach("owner", await store.policy("allow", [entry("table", "*", "*")]))
    await store.attach(
        "restricted", await store.policy("deny", [entry("table", "orders", "read", False)])
    )
    principal = await _user_with_roles(store, "alice", "owner", "restricted")

    decision = await store.engine.decide(principal, "read", "table", "orders", CTX)
    assert decision.effect == Effect.ALLOW
    assert decision.reason == DecisionReason.POLICY_ALLOW
    assert decision.deciding_priority == 20


async def test_pending_admin_grant_is_denied(store: RbacStore) -> None:
    await store.role("admin", priority=100)
    await store.attach("admin", await store.policy("all", [entry("*", "*", "*")]))
    await store.user("alice")
    await store.grant("alice", "admin", approval_status="pending")

    for action in ("read", "admin", "delete"):
        decision = await store.engine.decide(ALICE, action, "system", "rbac", CTX)
        assert decision.effect == Effect.DENY
        assert decision.reason == DecisionReason.DEFAULT_DENY


async def test_group_role_applies_to_members(store: RbacStore) -> None:
    """Engineering holds Developer; a member with no own grants is allowed."""
    await store.role("developer")
    await store.attach(
        "developer", await store.policy("dev", [entry("database", "staging", "execute")])
    )
    await store.group("engineering")
    await store.group_roles.create("engineering", "developer")
    await store.user("alice")
    await store.principals.add_member("engineering", "alice")

    decision = await store.engine.decide(ALICE, "execute", "database", "staging", CTX)
    assert decision.effect == Effect.ALLOW
    assert decision.effective_role_ids == {"developer"}

    group_decision = await store.engine.decide(
        Principal.group("engineering"), "execute", "database", "staging", CTX
    )
    assert group_decision.allowed


async def test_child_role_inherits_ancestor_policies(store: RbacStore) -> None:
    await store.role("viewer", priority=1)
    await store.role("analyst", parent="viewer", priority=5)
    await store.attach("viewer", await store.policy("view", [entry("table", "*", "read")]))
    principal = await _user_with_roles(store, "alice", "analyst")

    decision = await store.engine.decide(principal, "read", "table", "orders", CTX)
    assert decision.allowed
    assert decision.effective_role_ids == {"viewer", "analyst"}
    # The parent does not inherit from the child.
    await _user_with_roles(store, "bob", "viewer")
    await store.attach("analyst", await store.policy("edit", [entry("table", "*", "modify")]))
    bob = await store.engine.decide(Principal.user("bob"), "modify", "table", "orders", CTX)
    assert not bob.allowed


async def test_temporary_grant_expires(store: RbacStore) -> None:
    await store.role("oncall")
    await store.attach("oncall", await store.policy("ops", [entry("database", "prod", "admin")]))
    await store.user("alice")
    await store.grant("alice", "oncall", is_temporary=True, expires_at=NOW + timedelta(hours=1))

    before = AccessContext(now=NOW + timedelta(minutes=59))
    at_expiry = AccessContext(now=NOW + timedelta(hours=1))
    assert (await store.engine.decide(ALICE, "admin", "database", "prod", before)).allowed
    assert not (await store.engine.decide(ALICE, "admin", "database", "prod", at_expiry)).allowed


async def test_cycle_raises_from_decide_and_denies_in_check_and_require(store: RbacStore) -> None:
    await store.role("a", parent="b")
    await store.role("b", parent="a")
    principal = await _user_with_roles(store, "alice", "a")

    with pytest.raises(CycleDetectedException):
        await store.engine.decide(principal, "read", "table", "orders", CTX)
    assert await store.engine.check(principal, "read", "table", "orders", CTX) is False
    with pytest.raises(AuthorizationException) as exc_info:
        await store.engine.require(principal, "read", "table", "orders", CTX)
    assert exc_info.value.details["reason"] == "cycle_detected"


async def test_resource_grant_allows_only_its_resource(store: RbacStore) -> None:
    await store.role("sales-reader", priority=3)
    await store.resources.create("sales-reader", "database", "sales", ["read", "execute"])
    principal = await _user_with_roles(store, "alice", "sales-reader")

    decision = await store.engine.decide(principal, "read", "database", "sales", CTX)
    assert decision.allowed
    assert decision.reason == DecisionReason.RESOURCE_GRANT
    assert decision.resource_grant is True

    other = await store.engine.decide(principal, "read", "database", "hr", CTX)
    assert other.reason == DecisionReason.DEFAULT_DENY
    assert other.resource_grant is False
    wrong_action = await store.engine.decide(principal, "delete", "database", "sales", CTX)
    assert not wrong_action.allowed


async def test_broad_policy_does_not_imply_a_resource_grant(store: RbacStore) -> None:
    await store.role("dba")
    await store.attach("dba", await store.policy("dbs", [entry("database", "*", "read")]))
    await store.resources.create("dba", "database", "sales", ["read"])
    principal = await _user_with_roles(store, "alice", "dba")

    hr = await store.engine.decide(principal, "read", "database", "hr", CTX)
    assert hr.allowed and hr.resource_grant is False
    sales = await store.engine.decide(principal, "read", "database", "sales", CTX)
    assert sales.allowed and sales.resource_grant is True
    assert sales.reason == DecisionReason.POLICY_ALLOW


async def test_explicit_deny_overrides_resource_grant_at_same_priority(store: RbacStore) -> None:
    await store.role("mixed", priority=4)
    await store.resources.create("mixed", "table", "salaries", ["read"])
    await store.attach(
        "mixed", await store.policy("no", [entry("table", "salaries", "read", False)])
    )
    principal = await _user_with_roles(store, "alice", "mixed")

    decision = await store.engine.decide(principal, "read", "table", "salaries", CTX)
    assert decision.reason == DecisionReason.EXPLICIT_DENY
    assert decision.resource_grant is True


async def test_templates_inactive_and_foreign_policies_never_apply(store: RbacStore) -> None:
    await store.role("r")
    template = await store.policy("tpl", [entry("table", "*", "read")], is_template=True)
    await store.attach("r", template)
    inactive = await store.policy("off", [entry("table", "*", "read")])
    await store.policies.update(inactive.id, {"is_active": False})
    await store.attach("r", inactive)
    await store.attach(
        "r", await store.policy("org-b", [entry("table", "*", "read")], organization_id="org-b")
    )
    principal = await _user_with_roles(store, "alice", "r")

    ctx = AccessContext(now=NOW, organization_id="org-a")
    decision = await store.engine.decide(principal, "read", "table", "orders", ctx)
    assert decision.reason == DecisionReason.DEFAULT_DENY
    # The org-b policy applies when the request is made in org-b.
    ctx_b = AccessContext(now=NOW, organization_id="org-b")
    assert (await store.engine.decide(principal, "read", "table", "orders", ctx_b)).allowed


async def test_inactive_role_contributes_nothing(store: RbacStore) -> None:
    await store.role("disabled", is_active=False)
    await store.attach("disabled", await store.policy("p", [entry("*", "*", "*")]))
    await store.resources.create("disabled", "database", "sales", ["read"])
    principal = await _user_with_roles(store, "alice", "disabled")

    decision = await store.engine.decide(principal, "read", "database", "sales", CTX)
    assert decision.reason == DecisionReason.DEFAULT_DENY


async def test_policy_conditions_gate_an_allow(store: RbacStore) -> None:
    await store.role("secure")
    await store.attach(
        "secure",
        await store.policy("mfa", [entry("database", "prod", "read")], {"mfa": {"require_mfa": True}}),
    )
    principal = await _user_with_roles(store, "alice", "secure")

    without = await store.engine.decide(principal, "read", "database", "prod", CTX)
    assert without.effect == Effect.DENY
    assert without.reason == DecisionReason.CONDITION_FAILED
    with_mfa = AccessContext(now=NOW, mfa_verified=True)
    assert (await store.engine.decide(principal, "read", "database", "prod", with_mfa)).allowed


async def test_unevaluable_policy_condition_fails_closed(store: RbacStore) -> None:
    await store.role("net")
    await store.attach(
        "net",
        await store.policy(
            "office", [entry("database", "prod", "read")], {"ip": {"allowed_ips": ["10.0.0.0/8"]}}
        ),
    )
    await store.role("geo")
    await store.attach(
        "geo", await store.policy("geo", [entry("database", "eu", "read")], {"geo": {"region": "eu"}})
    )
    principal = await _user_with_roles(store, "alice", "net", "geo")

    no_ip = await store.engine.decide(principal, "read", "database", "prod", CTX)
    assert no_ip.reason == DecisionReason.CONDITION_ERROR
    unknown_kind = await store.engine.decide(principal, "read", "database", "eu", CTX)
    assert unknown_kind.reason == DecisionReason.CONDITION_ERROR
    office = AccessContext(now=NOW, ip_address="10.2.3.4")
    assert (await store.engine.decide(principal, "read", "database", "prod", office)).allowed


async def test_role_permission_rows_and_their_conditions(store: RbacStore) -> None:
    await store.role("ops", priority=2)
    await store.permissions.create(
        "ops", "database", "prod", "modify",
        conditions=[{"type": "mfa", "config": {"require_mfa": True}}],
    )
    await store.permissions.create(
        "ops", "database", "prod", "delete", is_allow=False,
        conditions=[{"type": "ip", "config": {"allowed_ips": ["10.0.0.0/8"]}}],
    )
    await store.resources.create("ops", "database", "prod", ["delete"])
    principal = await _user_with_roles(store, "alice", "ops")

    failed = await store.engine.decide(principal, "modify", "database", "prod", CTX)
    assert failed.reason == DecisionReason.DEFAULT_DENY
    mfa = AccessContext(now=NOW, mfa_verified=True)
    assert (await store.engine.decide(principal, "modify", "database", "prod", mfa)).allowed
    # A deny whose condition cannot be evaluated still denies.
    deny = await store.engine.decide(principal, "delete", "database", "prod", CTX)
    assert deny.reason == DecisionReason.EXPLICIT_DENY


async def test_unreadable_role_permission_rows_fail_closed(store: RbacStore) -> None:
    await store.role("ops", priority=2)
    await store.permissions.create(
        "ops", "table", "orders", "read", conditions=[{"type": ["time"]}]
    )
    await store.permissions.create(
        "ops", "table", "orders", "modify", is_allow=False, conditions=[{"type": {"k": 1}}]
    )
    await store.permissions.create("ops", " ", "orders", "delete")
    await store.resources.create("ops", "table", "orders", ["modify"])
    principal = await _user_with_roles(store, "alice", "ops")

    read = await store.engine.decide(principal, "read", "table", "orders", CTX)
    assert read.reason == DecisionReason.DEFAULT_DENY
    modify = await store.engine.decide(principal, "modify", "table", "orders", CTX)
    assert modify.reason == DecisionReason.EXPLICIT_DENY
    delete = await store.engine.decide(principal, "delete", "table", "orders", CTX)
    assert delete.reason == DecisionReason.DEFAULT_DENY


async def test_malformed_policy_entries_are_skipped(store: RbacStore) -> None:
    await store.role("r")
    await store.attach(
        "r",
        await store.policy("mixed", [{"scope": "table"}, entry("table", "orders", "read")]),
    )
    principal = await _user_with_roles(store, "alice", "r")
    assert (await store.engine.decide(principal, "read", "table", "orders", CTX)).allowed


async def test_decisions_are_deterministic(store: RbacStore) -> None:
    await store.role("a", priority=3)
    await store.role("b", priority=3)
    await store.attach("a", await store.policy("pa", [entry("table", "*", "read")]))
    await store.attach("b", await store.policy("pb", [entry("table", "orders", "read", False)]))
    principal = await _user_with_roles(store, "alice", "a", "b")

    first = await store.engine.decide(principal, "read", "table", "orders", CTX)
    for _ in range(5):
        assert await store.engine.decide(principal, "read", "table", "orders", CTX) == first


async def test_check_and_require(store: RbacStore) -> None:
    await store.role("reader")
    await store.attach("reader", await store.policy("p", [entry("system", "rbac", "read")]))
    principal = await _user_with_roles(store, "alice", "reader")

    assert await store.engine.check(principal, "read", "system", "rbac", CTX) is True
    assert await store.engine.check(principal, "admin", "system", "rbac", CTX) is False
    decision = await store.engine.require(principal, "read", "system", "rbac", CTX)
    assert decision.allowed
    with pytest.raises(AuthorizationException) as exc_info:
        await store.engine.require(principal, "admin", "system", "rbac", CTX)
    assert exc_info.value.details == {
        "resource": "system:rbac",
        "action": "admin",
        "reason": "default_deny",
    }


async def test_simulate_lists_reachable_entries(store: RbacStore) -> None:
    await store.role("viewer")
    await store.role("analyst", parent="viewer")
    policy = await store.policy("view", [entry("table", "*", "read")])
    await store.attach("viewer", policy)
    await store.permissions.create("analyst", "table", "orders", "modify", is_allow=False)
    await store.resources.create("analyst", "database", "sales", ["read"])
    await store.attach(
        "analyst", await store.policy("tpl", [entry("*", "*", "*")], is_template=True)
    )
    principal = await _user_with_roles(store, "alice", "analyst")

    rows = await store.engine.simulate(principal, CTX)
    summary = [(r.scope, r.resource, r.action, r.allowed, r.source) for r in rows]
    assert summary == [
        ("database", "sales", "read", True, EntrySource.RESOURCE_GRANT),
        ("table", "*", "read", True, EntrySource.POLICY),
        ("table", "orders", "modify", False, EntrySource.ROLE_PERMISSION),
    ]
    assert rows[1].policy_id == policy.id


async def test_organization_admin_has_no_rights_outside_an_organization(store: RbacStore) -> None:
    await store.role("acme_admin", priority=100, organization_id="acme")
    await store.attach(
        "acme_admin", await store.policy("rbac-admin", [entry("system", "rbac", "admin")])
    )
    await store.resources.create("acme_admin", "system", "rbac", ["admin"])
    principal = await _user_with_roles(store, "mallory", "acme_admin")

    decision = await store.engine.decide(principal, "admin", "system", "rbac", CTX)
    assert decision.effect == Effect.DENY
    assert decision.reason == DecisionReason.DEFAULT_DENY
    assert decision.effective_role_ids == frozenset()

    in_acme = AccessContext(now=NOW, organization_id="acme")
    assert (await store.engine.decide(principal, "admin", "system", "rbac", in_acme)).allowed
    assert await store.hierarchy.list_effective_roles(None) == []
    assert [r.id for r in await store.hierarchy.list_effective_roles("acme")] == ["acme_admin"]


async def test_organization_policy_on_global_role_needs_its_organization(
    store: RbacStore,
) -> None:
    await store.role("reader")
    await store.attach(
        "reader",
        await store.policy("acme-tables", [entry("table", "*", "read")], organization_id="acme"),
    )
    principal = await _user_with_roles(store, "alice", "reader")

    assert not (await store.engine.decide(principal, "read", "table", "orders", CTX)).allowed
    in_acme = AccessContext(now=NOW, organization_id="acme")
    assert (await store.engine.decide(principal, "read", "table", "orders", in_acme)).allowed
