"""Authorization and admin API tests over in-memory stores (no Postgres).

The decision engine and write services are swapped in with FastAPI
dependency overrides; JWT authentication runs for real.
"""

import pytest
from httpx import AsyncClient

from app.api.v1.dependencies import (
    get_authorization_service,
    get_role_service,
    get_role_service_for_write,
)
from tests.fakes import RbacStore, entry

ADMIN = "admin-user"
READER = "reader-user"


@pytest.fixture
async def api_store(store: RbacStore, override_dependencies) -> RbacStore:
    """Store with an admin (read/modify/admin on system:rbac) and a read-only caller."""
    await store.role("super_admin", priority=1000)
    await store.resources.create("super_admin", "system", "rbac", ["read", "modify", "admin"])
    await store.role("rbac_reader", priority=1)
    await store.resources.create("rbac_reader", "system", "rbac", ["read"])
    await store.user(ADMIN)
    await store.grant(ADMIN, "super_admin")
    await store.user(READER)
    await store.grant(READER, "rbac_reader")

    override_dependencies(get_authorization_service, lambda: store.engine)
    override_dependencies(get_role_service, lambda: store.role_service())
    override_dependencies(get_role_service_for_write, lambda: store.role_service())
    return store


async def test_authorize_requires_a_token(client: AsyncClient, api_store: RbacStore) -> None:
    response = await client.post(
        "/api/v1/authorize",
        json={
            "principal": {"type": "user", "id": READER},
            "action": "read",
            "resource_type": "table",
            "resource_id": "orders",
        },
    )
    assert response.status_code == 401
    assert response.json()["error"] == "AUTHENTICATION_ERROR"

    bad = await client.post(
        "/api/v1/authorize",
        headers={"Authorization": "Bearer not-a-jwt"},
        json={
            "principal": {"type": "user", "id": READER},
            "action": "read",
            "resource_type": "table",
            "resource_id": "orders",
        },
    )
    assert bad.status_code == 401


async def test_authorize_returns_decision(
    client: AsyncClient, api_store: RbacStore, bearer
) -> None:
    await api_store.role("analyst", priority=1)
    await api_store.role("auditor", priority=10)
    await api_store.attach("analyst", await api_store.policy("a", [entry("table", "orders", "read")]))
    await api_store.attach(
        "auditor", await api_store.policy("b", [entry("table", "orders", "read", False)])
    )
    await api_store.user("alice")
    await api_store.grant("alice", "analyst")

    body = {
        "principal": {"type": "user", "id": "alice"},
        "action": "read",
        "resource_type": "table",
        "resource_id": "orders",
    }
    allowed = await client.post("/api/v1/authorize", headers=bearer(READER), json=body)
    assert allowed.status_code == 200
    assert allowed.json()["allowed"] is True
    assert allowed.json()["reason"] == "policy_allow"
    assert allowed.json()["effective_role_ids"] == ["analyst"]

    await api_store.grant("alice", "auditor")
    denied = await client.post("/api/v1/authorize", headers=bearer(READER), json=body)
    data = denied.json()
    assert (data["effect"], data["reason"], data["deciding_priority"]) == (
        "deny",
        "explicit_deny",
        10,
    )


async def test_authorize_reads_mfa_header(
    client: AsyncClient, api_store: RbacStore, bearer
) -> None:
    await api_store.role("secure")
    await api_store.attach(
        "secure",
        await api_store.policy(
            "mfa", [entry("database", "prod", "modify")], {"mfa": {"require_mfa": True}}
        ),
    )
    await api_store.user("alice")
    await api_store.grant("alice", "secure")
    body = {
        "principal": {"type": "user", "id": "alice"},
        "action": "modify",
        "resource_type": "database",
        "resource_id": "prod",
    }

    without = await client.post("/api/v1/authorize", headers=bearer(READER), json=body)
    assert without.json()["reason"] == "condition_failed"
    with_mfa = await client.post(
        "/api/v1/authorize",
        headers={**bearer(READER), "X-MFA-Verified": "true"},
        json=body,
    )
    assert with_mfa.json()["allowed"] is True


async def test_authorize_unknown_principal_and_cycle(
    client: AsyncClient, api_store: RbacStore, bearer
) -> None:
    unknown = await client.post(
        "/api/v1/authorize",
        headers=bearer(READER),
        json={
            "principal": {"type": "group", "id": "nobody"},
            "action": "read",
            "resource_type": "table",
            "resource_id": "orders",
        },
    )
    assert unknown.status_code == 200
    assert unknown.json()["reason"] == "principal_not_found"

    await api_store.role("loop-a", parent="loop-b")
    await api_store.role("loop-b", parent="loop-a")
    await api_store.user("looper")
    await api_store.grant("looper", "loop-a")
    cycle = await client.post(
        "/api/v1/authorize",
        headers=bearer(READER),
        json={
            "principal": {"type": "user", "id": "looper"},
            "action": "read",
            "resource_type": "table",
            "resource_id": "orders",
        },
    )
    assert cycle.status_code == 409
    assert cycle.json()["error"] == "CYCLE_DETECTED"


async def test_effective_roles_endpoint_is_gated(
    client: AsyncClient, api_store: RbacStore, bearer
) -> None:
    ok = await client.get(
        f"/api/v1/authorize/effective-roles/user/{ADMIN}", headers=bearer(READER)
    )
    assert ok.status_code == 200
    assert ok.json()["role_ids"] == ["super_admin"]

    await api_store.user("outsider")
    forbidden = await client.get(
        f"/api/v1/authorize/effective-roles/user/{ADMIN}", headers=bearer("outsider")
    )
    assert forbidden.status_code == 403
    assert forbidden.json()["details"]["reason"] == "default_deny"


async def test_role_writes_need_modify_and_deletes_need_admin(
    client: AsyncClient, api_store: RbacStore, bearer
) -> None:
    refused = await client.post(
        "/api/v1/roles", headers=bearer(READER), json={"name": "Analyst"}
    )
    assert refused.status_code == 403

    created = await client.post(
        "/api/v1/roles",
        headers=bearer(ADMIN),
        json={"name": "Analyst", "priority": 5, "organization_id": "org-a"},
    )
    assert created.status_code == 201
    role = created.json()
    assert (role["name"], role["priority"], role["type"]) == ("Analyst", 5, "custom")

    listed = await client.get(
        "/api/v1/roles", headers=bearer(READER), params={"organization_id": "org-a"}
    )
    assert role["id"] in [r["id"] for r in listed.json()]

    duplicate = await client.post(
        "/api/v1/roles",
        headers=bearer(ADMIN),
        json={"name": "Analyst", "organization_id": "org-a"},
    )
    assert duplicate.status_code == 400

    not_admin = await client.delete(f"/api/v1/roles/{role['id']}", headers=bearer(READER))
    assert not_admin.status_code == 403
    deleted = await client.delete(f"/api/v1/roles/{role['id']}", headers=bearer(ADMIN))
    assert deleted.status_code == 204
    missing = await client.get(f"/api/v1/roles/{role['id']}", headers=bearer(READER))
    assert missing.status_code == 404
    assert [a for a, _ in api_store.audit.actions()] == ["created", "deleted"]


async def test_admin_gate_takes_mfa_from_the_token_not_headers(
    client: AsyncClient, api_store: RbacStore, bearer
) -> None:
    await api_store.role("mfa_reader", priority=1)
    await api_store.attach(
        "mfa_reader",
        await api_store.policy(
            "rbac-read-mfa", [entry("system", "rbac", "read")], {"mfa": {"require_mfa": True}}
        ),
    )
    await api_store.user("operator")
    await api_store.grant("operator", "mfa_reader")

    header_only = await client.get(
        "/api/v1/roles", headers={**bearer("operator"), "X-MFA-Verified": "true"}
    )
    assert header_only.status_code == 403
    assert header_only.json()["details"]["reason"] == "condition_failed"

    string_claim = await client.get("/api/v1/roles", headers=bearer("operator", mfa="true"))
    assert string_claim.status_code == 403

    signed = await client.get("/api/v1/roles", headers=bearer("operator", mfa=True))
    assert signed.status_code == 200
