"""Policies API: CRUD, templates and cloning a template into a policy."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, Response

from app.api.v1.dependencies import (
    Admin,
    Modifier,
    Reader,
    get_policy_service,
    get_policy_service_for_write,
)
from app.application.dtos.policy import PolicyCreate
from app.application.services import PolicyService
from app.core.limiter import limit_writes
from app.schemas.policy import (
    PolicyClone,
    PolicyCreateRequest,
    PolicyResponse,
    PolicyUpdate,
)

router = APIRouter()

ReadPolicies = Annotated[PolicyService, Depends(get_policy_service)]
WritePolicies = Annotated[PolicyService, Depends(get_policy_service_for_write)]


@router.post("", response_model=PolicyResponse, status_code=201)
@limit_writes
async def create_policy(
    request: Request,
    body: PolicyCreateRequest,
    actor_id: Modifier,
    service: WritePolicies,
):
    """Create a policy (or a template when is_template is true)."""
    created = await service.create_policy(
        PolicyCreate(
            name=body.name,
            description=body.description,
            is_template=body.is_template,
            permissions=[p.model_dump() for p in body.permissions],
            conditions=body.conditions.to_json(),
            organization_id=body.organization_id,
            created_by=actor_id,
        )
    )
    return PolicyResponse.model_validate(created)


@router.get("", response_model=list[PolicyResponse])
async def list_policies(
    _actor: Reader,
    service: ReadPolicies,
    organization_id: str | None = Query(None, description="Organization policies plus global ones"),
    include_inactive: bool = False,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
):
    """List non-template policies."""
    policies = await service.list_policies(
        organization_id, include_inactive=include_inactive, skip=skip, limit=limit
    )
    return [PolicyResponse.model_validate(p) for p in policies]


@router.get("/templates", response_model=list[PolicyResponse])
async def list_policy_templates(
    _actor: Reader,
    service: ReadPolicies,
    organization_id: str | None = None,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
):
    templates = await service.list_templates(organization_id, skip=skip, limit=limit)
    return [PolicyResponse.model_validate(p) for p in templates]


@router.get("/{policy_id}", response_model=PolicyResponse)
async def get_policy(policy_id: str, _actor: Reader, service: ReadPolicies):
    return PolicyResponse.model_validate(await service.get_policy(policy_id))


@router.patch("/{policy_id}", response_model=PolicyResponse)
@limit_writes
async def update_policy(
    request: Request,
    policy_id: str,
    body: PolicyUpdate,
    actor_id: Modifier,
    service: WritePolicies,
):
    updated = await service.update_policy(actor_id, policy_id, body.changes())
    return PolicyResponse.model_validate(updated)


@router.post("/{policy_id}/clone", response_model=PolicyResponse, status_code=201)
@limit_writes
async def clone_policy_template(
    request: Request,
    policy_id: str,
    body: PolicyClone,
    actor_id: Modifier,
    service: WritePolicies,
):
    """Instantiate a template as a regular, attachable policy."""
    created = await service.clone_template(
        actor_id,
        policy_id,
        body.name,
        description=body.description,
        organization_id=body.organization_id,
    )
    return PolicyResponse.model_validate(created)


@router.delete("/{policy_id}", status_code=204)
@limit_writes
async def delete_policy(
    request: Request,
    policy_id: str,
    actor_id: Admin,
    service: WritePolicies,
):
    """Delete a policy and detach it from every role."""
    await service.delete_policy(actor_id, policy_id)
    return Response(status_code=204)
