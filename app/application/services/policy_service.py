"""Policy application service: CRUD, templates and cloning."""

from __future__ import annotations

import copy
from typing import Any

from app.application.dtos.policy import PolicyCreate, PolicyResult
from app.application.interfaces.repositories import IPolicyRepository
from app.application.interfaces.services import IApiAuditLogService, ICacheService
from app.application.services.base import RbacWriteService
from app.domain.entities.policy import PolicyEntity
from app.domain.exceptions import ResourceNotFoundException, ValidationException
from app.shared.enums import AuditAction

UPDATABLE_FIELDS = frozenset(
    {"name", "description", "permissions", "conditions", "is_active", "is_template"}
)


def _validate(
    name: str,
    permissions: list[dict[str, Any]],
    conditions: dict[str, Any],
    is_template: bool,
) -> None:
    PolicyEntity(
        id="",
        name=name,
        permissions=permissions,
        conditions=conditions,
        is_template=is_template,
    ).validate()


class PolicyService(RbacWriteService):
    """Administrative writes on policies."""

    def __init__(
        self,
        policy_repo: IPolicyRepository,
        *,
        audit_service: IApiAuditLogService | None = None,
        cache: ICacheService | None = None,
    ) -> None:
        super().__init__(audit_service=audit_service, cache=cache)
        self._policy_repo = policy_repo

    async def get_policy(self, policy_id: str) -> PolicyResult:
        policy = await self._policy_repo.get_by_id(policy_id)
        if policy is None:
            raise ResourceNotFoundException("policy", policy_id)
        return policy

    async def list_policies(
        self,
        organization_id: str | None = None,
        *,
        include_inactive: bool = False,
        skip: int = 0,
        limit: int = 100,
    ) -> list[PolicyResult]:
        return await self._policy_repo.list_policies(
            organization_id,
            is_template=False,
            include_inactive=include_inactive,
            skip=skip,
            limit=limit,
        )

    async def list_templates(
        self, organization_id: str | None = None, *, skip: int = 0, limit: int = 100
    ) -> list[PolicyResult]:
        return await self._policy_repo.list_policies(
            organization_id, is_template=True, include_inactive=True, skip=skip, limit=limit
        )

    async def create_policy(self, data: PolicyCreate) -> PolicyResult:
        """Create a policy after validating its entries and conditions.

        Raises:
            ValidationException: If an entry or condition is malformed.
        """
        _validate(data.name, data.permissions, data.conditions, data.is_template)
        created = await self._policy_repo.create(data)
        await self._record(
            data.created_by, AuditAction.CREATED, "policy", created.id,
            new_values=created, organization_id=created.organization_id,
        )
        return created

    async def update_policy(
        self, actor_id: str | None, policy_id: str, changes: dict[str, Any]
    ) -> PolicyResult:
        """Apply partial changes; the merged policy is validated before storing."""
        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise ValidationException(
                f"Cannot update fields: {', '.join(sorted(unknown))}", field=sorted(unknown)[0]
            )
        current = await self.get_policy(policy_id)
        _validate(
            changes.get("name", current.name),
            changes.get("permissions", current.permissions),
            changes.get("conditions", current.conditions),
            changes.get("is_template", current.is_template),
        )
        updated = await self._policy_repo.update(policy_id, dict(changes))
        if updated is None:
            raise ResourceNotFoundException("policy", policy_id)
        await self._record(
            actor_id, AuditAction.UPDATED, "policy", policy_id,
            old_values=current, new_values=updated,
            organization_id=updated.organization_id,
        )
        return updated

    async def set_active(
        self, actor_id: str | None, policy_id: str, active: bool
    ) -> PolicyResult:
        current = await self.get_policy(policy_id)
        updated = await self._policy_repo.update(policy_id, {"is_active": active})
        if updated is None:
            raise ResourceNotFoundException("policy", policy_id)
        await self._record(
            actor_id,
            AuditAction.ACTIVATED if active else AuditAction.DEACTIVATED,
            "policy",
            policy_id,
            old_values=current,
            new_values=updated,
            organization_id=updated.organization_id,
        )
        return updated

    async def clone_template(
        self,
        actor_id: str | None,
        template_id: str,
        name: str,
        *,
        description: str | None = None,
        organization_id: str | None = None,
    ) -> PolicyResult:
        """Create a binding policy from a template's entries and conditions.

        Raises:
            ResourceNotFoundException: If the template does not exist.
            ValidationException: If the source policy is not a template.
        """
        template = await self.get_policy(template_id)
        if not template.is_template:
            raise ValidationException(
                f"Policy {template_id} is not a template", field="template_id"
            )
        return await self.create_policy(
            PolicyCreate(
                name=name,
                description=description if description is not None else template.description,
                is_template=False,
                permissions=copy.deepcopy(template.permissions),
                conditions=copy.deepcopy(template.conditions),
                organization_id=(
                    organization_id if organization_id is not None else template.organization_id
                ),
                created_by=actor_id,
            )
        )

    async def delete_policy(self, actor_id: str | None, policy_id: str) -> None:
        current = await self.get_policy(policy_id)
        await self._policy_repo.delete(policy_id)
        await self._record(
            actor_id, AuditAction.DELETED, "policy", policy_id,
            old_values=current, organization_id=current.organization_id,
        )
