"""Tests for GrantResolver: effective roles, expiry, approval gate and the role cache."""

from datetime import UTC, datetime, timedelta

import pytest

from app.application.dtos.decision import EffectiveRoles
from app.application.services import effective_roles_key
from app.domain.exceptions import PrincipalNotFoundException
from app.domain.value_objects.core import Principal
from tests.fakes import FakeCache, RbacStore

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=UTC)


async def test_user_gets_direct_group_and_inherited_roles(store: RbacStore) -> None:
    await store.user("alice")
    await store.group("engineering")
    await store.role("viewer")
    await store.role("analyst", parent="viewer", priority=5)
    await store.role("developer", priority=3)
    await store.grant("alice", "analyst")
    await store.principals.add_member("engineering", "alice")
    await store.group_roles.create("engineering", "developer")

    roles = await store.resolver.effective_roles_for(Principal.user("alice"), NOW)
    assert roles == {"viewer", "analyst", "developer"}


async def test_roles_sorted_by_priority_then_name(store: RbacStore) -> None:
    await store.user("alice")
    await store.role("b-low", priority=1)
    await store.role("a-low", priority=1)
    await store.role("high", priority=9)
    for role_id in ("b-low", "a-low", "high"):
        await store.grant("alice", role_id)

    detail = await store.resolver.effective_roles_detail(Principal.user("alice"), NOW)
    assert [r.id for r in detail.roles] == ["high", "a-low", "b-low"]


async def test_group_principal_uses_group_grants_only(store: RbacStore) -> None:
    await store.group("engineering")
    await store.role("developer")
    await store.group_roles.create("engineering", "developer")

    roles = await store.resolver.effective_roles_for(Principal.group("engineering"), NOW)
    assert roles == {"developer"}


async def test_expired_and_unapproved_grants_are_ignored(store: RbacStore) -> None:
    await store.user("bob")
    for role_id in ("expired", "pending", "rejected", "no-expiry", "valid"):
        await store.role(role_id)
    await store.grant("bob", "expired", is_temporary=True, expires_at=NOW - timedelta(seconds=1))
    await store.grant("bob", "pending", approval_status="pending")
    await store.grant("bob", "rejected", approval_status="rejected")
    await store.grant("bob", "no-expiry", is_temporary=True)
    await store.grant("bob", "valid", is_temporary=True, expires_at=NOW + timedelta(hours=1))

    detail = await store.resolver.effective_roles_detail(Principal.user("bob"), NOW)
    assert detail.role_ids == {"valid"}
    assert detail.earliest_expiry == NOW + timedelta(hours=1)


async def test_inactive_and_foreign_org_roles_are_dropped(store: RbacStore) -> None:
    await store.user("carol")
    await store.role("root-admin", is_active=False)
    await store.role("child", parent="root-admin")
    await store.role("org-b-only", organization_id="org-b")
    await store.role("org-a-only", organization_id="org-a")
    for role_id in ("child", "org-b-only", "org-a-only"):
        await store.grant("carol", role_id)

    roles = await store.resolver.effective_roles_for(Principal.user("carol"), NOW, "org-a")
    assert roles == {"child", "org-a-only"}


async def test_unknown_principal_raises(store: RbacStore) -> None:
    with pytest.raises(PrincipalNotFoundException):
        await store.resolver.effective_roles_for(Principal.user("ghost"), NOW)
    with pytest.raises(PrincipalNotFoundException):
        await store.resolver.effective_roles_for(Principal.group("ghost"), NOW)


def test_effective_roles_key() -> None:
    assert effective_roles_key(Principal.user("u1"), None) == "rbac:roles:user:u1:-"
    assert effective_roles_key(Principal.group("g1"), "org-a") == "rbac:roles:group:g1:org-a"
    with pytest.raises(ValueError):
        effective_roles_key(Principal.user("bad:id"), None)


def test_ttl_never_outlives_a_temporary_grant(store: RbacStore) -> None:
    assert store.resolver.ttl_for(EffectiveRoles(), NOW) == 300
    soon = EffectiveRoles(earliest_expiry=NOW + timedelta(seconds=42))
    assert store.resolver.ttl_for(soon, NOW) == 42
    later = EffectiveRoles(earliest_expiry=NOW + timedelta(hours=2))
    assert store.resolver.ttl_for(later, NOW) == 300


async def test_cache_round_trip_and_hit(cached_store: RbacStore, cache: FakeCache) -> None:
    await cached_store.user("dave")
    await cached_store.role("analyst")
    await cached_store.grant("dave", "analyst")
    principal = Principal.user("dave")

    first = await cached_store.resolver.effective_roles_for(principal, NOW)
    key = "rbac:roles:user:dave:-"
    assert cache.data[key]["role_ids"] == ["analyst"]
    assert cache.ttls[key] == 300

    # A grant removed behind the cache's back is still served until invalidation.
    cached_store.user_roles.rows.clear()
    assert await cached_store.resolver.effective_roles_for(principal, NOW) == first


async def test_cached_entry_ignored_after_earliest_expiry(
    cached_store: RbacStore, cache: FakeCache
) -> None:
    await cached_store.user("erin")
    await cached_store.role("oncall")
    await cached_store.grant(
        "erin", "oncall", is_temporary=True, expires_at=NOW + timedelta(minutes=1)
    )
    principal = Principal.user("erin")

    assert await cached_store.resolver.effective_roles_for(principal, NOW) == {"oncall"}
    assert cache.ttls["rbac:roles:user:erin:-"] == 60

    later = NOW + timedelta(minutes=1)
    assert await cached_store.resolver.effective_roles_for(principal, later) == frozenset()


async def test_unavailable_cache_is_bypassed() -> None:
    cache = FakeCache(available=False)
    store = RbacStore(cache=cache)
    await store.user("frank")
    await store.role("viewer")
    await store.grant("frank", "viewer")

    assert await store.resolver.effective_roles_for(Principal.user("frank"), NOW) == {"viewer"}
    assert cache.data == {}


async def test_request_without_organization_keeps_only_system_wide_roles(store: RbacStore) -> None:
    await store.user("mallory")
    await store.role("global-viewer")
    await store.role("acme-admin", parent="global-viewer", organization_id="acme")
    await store.grant("mallory", "acme-admin")

    assert await store.resolver.effective_roles_for(Principal.user("mallory"), NOW) == {
        "global-viewer"
    }
    in_acme = await store.resolver.effective_roles_for(Principal.user("mallory"), NOW, "acme")
    assert in_acme == {"acme-admin", "global-viewer"}
