"""Unit tests for PolicyService: validation on write, updates, templates and cloning."""

import pytest

from app.application.dtos.policy import PolicyCreate
from app.domain.exceptions import ResourceNotFoundException, ValidationException
from tests.fakes import RbacStore, entry

READ_ALL = [entry("table", "*", "read")]


async def test_create_policy_stores_entries_verbatim(store: RbacStore) -> None:
    service = store.policy_service()
    policy = await service.create_policy(
        PolicyCreate(
            name="Readers",
            permissions=READ_ALL,
            conditions={"time": {"allowed_days": [1, 2, 3, 4, 5]}},
            created_by="admin",
        )
    )
    assert policy.permissions == READ_ALL
    assert policy.conditions == {"time": {"allowed_days": [1, 2, 3, 4, 5]}}
    assert store.audit.actions() == [("created", "policy")]
    assert store.audit.entries[0]["user_id"] == "admin"


@pytest.mark.parametrize(
    ("permissions", "conditions", "field"),
    [
        ([{"scope": "table", "action": "read"}], {}, "permissions"),
        (READ_ALL, {"geo": {"region": "eu"}}, "conditions"),
        (READ_ALL, {"time": {"start_hour": 9}}, "conditions"),
    ],
)
async def test_create_policy_rejects_malformed_content(
    store: RbacStore, permissions: list, conditions: dict, field: str
) -> None:
    with pytest.raises(ValidationException) as exc_info:
        await store.policy_service().create_policy(
            PolicyCreate(name="Bad", permissions=permissions, conditions=conditions)
        )
    assert exc_info.value.details == {"field": field}
    assert store.policies.rows == {}


async def test_update_policy_validates_merged_result(store: RbacStore) -> None:
    service = store.policy_service()
    policy = await service.create_policy(PolicyCreate(name="Readers", permissions=READ_ALL))

    updated = await service.update_policy("admin", policy.id, {"description": "All tables"})
    assert updated.description == "All tables"
    assert updated.permissions == READ_ALL

    with pytest.raises(ValidationException):
        await service.update_policy("admin", policy.id, {"conditions": {"mfa": {"require_mfa": 1}}})
    with pytest.raises(ValidationException):
        await service.update_policy("admin", policy.id, {"organization_id": "org-b"})
    with pytest.raises(ResourceNotFoundException):
        await service.update_policy("admin", "missing", {"name": "x"})


async def test_set_active_and_delete(store: RbacStore) -> None:
    service = store.policy_service()
    policy = await service.create_policy(PolicyCreate(name="Readers", permissions=READ_ALL))
    await store.role("r")
    await store.attach("r", policy)

    assert (await service.set_active("admin", policy.id, False)).is_active is False
    assert await service.list_policies() == []
    assert [p.id for p in await service.list_policies(include_inactive=True)] == [policy.id]

    await service.delete_policy("admin", policy.id)
    assert store.policies.attachments == {}
    with pytest.raises(ResourceNotFoundException):
        await service.get_policy(policy.id)


async def test_templates_are_listed_separately(store: RbacStore) -> None:
    service = store.policy_service()
    await service.create_policy(PolicyCreate(name="Binding", permissions=READ_ALL))
    template = await service.create_policy(
        PolicyCreate(name="Tpl", permissions=READ_ALL, is_template=True)
    )
    assert [p.name for p in await service.list_policies()] == ["Binding"]
    assert [p.id for p in await service.list_templates()] == [template.id]


async def test_clone_template(store: RbacStore) -> None:
    service = store.policy_service()
    template = await service.create_policy(
        PolicyCreate(
            name="Office hours",
            description="Weekdays only",
            permissions=READ_ALL,
            conditions={"time": {"allowed_days": [1, 2, 3, 4, 5]}},
            is_template=True,
        )
    )
    clone = await service.clone_template("admin", template.id, "Org A office", organization_id="org-a")

    assert clone.id != template.id
    assert clone.is_template is False
    assert clone.organization_id == "org-a"
    assert clone.description == "Weekdays only"
    assert clone.permissions == template.permissions
    assert clone.permissions is not template.permissions
    assert clone.created_by == "admin"

    with pytest.raises(ValidationException):
        await service.clone_template("admin", clone.id, "Clone of clone")
    with pytest.raises(ResourceNotFoundException):
        await service.clone_template("admin", "missing", "x")
