"""Roles API: CRUD, ancestors, role permissions, policy attachments and resource grants."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, Response

from app.api.v1.dependencies import (
    Admin,
    Modifier,
    Reader,
    get_role_resource_service,
    get_role_resource_service_for_write,
    get_role_service,
    get_role_service_for_write,
)
from app.application.services import RoleResourceService, RoleService
from app.core.limiter import limit_writes
from app.schemas.policy import PolicyResponse, RolePolicyResponse
from app.schemas.role import (
    RoleCreate,
    RolePermissionCreate,
    RolePermissionResponse,
    RoleResourceGrant,
    RoleResourceResponse,
    RoleResponse,
    RoleUpdate,
)

router = APIRouter()

ReadRoles = Annotated[RoleService, Depends(get_role_service)]
WriteRoles = Annotated[RoleService, Depends(get_role_service_for_write)]


@router.post("", response_model=RoleResponse, status_code=201)
@limit_writes
async def create_role(
    request: Request,
    body: RoleCreate,
    actor_id: Modifier,
    service: WriteRoles,
):
    """Create a role. parent_role_id must exist."""
    created = await service.create_role(
        actor_id,
        body.name,
        body.description,
        type=body.type,
        parent_role_id=body.parent_role_id,
        priority=body.priority,
        organization_id=body.organization_id,
        is_active=body.is_active,
        is_default=body.is_default,
    )
    return RoleResponse.model_validate(created)


@router.get("", response_model=list[RoleResponse])
async def list_roles(
    _actor: Reader,
    service: ReadRoles,
    organization_id: str | None = Query(None, description="Organization roles plus global roles; global roles only when omitted"),
    include_inactive: bool = False,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
):
    """List roles (priority desc, then name)."""
    roles = await service.list_roles(
        organization_id, include_inactive=include_inactive, skip=skip, limit=limit
    )
    return [RoleResponse.model_validate(r) for r in roles]


@router.get("/{role_id}", response_model=RoleResponse)
async def get_role(role_id: str, _actor: Reader, service: ReadRoles):
    return RoleResponse.model_validate(await service.get_role(role_id))


@router.get("/{role_id}/ancestors", response_model=list[RoleResponse])
async def get_role_ancestors(role_id: str, _actor: Reader, service: ReadRoles):
    """Ancestors of the role, nearest parent first (409 if the chain loops)."""
    return [RoleResponse.model_validate(r) for r in await service.get_ancestors(role_id)]


@router.patch("/{role_id}", response_model=RoleResponse)
@limit_writes
async def update_role(
    request: Request,
    role_id: str,
    body: RoleUpdate,
    actor_id: Modifier,
    service: WriteRoles,
):
    """Partial update. Re-parenting is refused when it would create a cycle."""
    updated = await service.update_role(actor_id, role_id, body.changes())
    return RoleResponse.model_validate(updated)


@router.post("/{role_id}/activate", response_model=RoleResponse)
@limit_writes
async def activate_role(request: Request, role_id: str, actor_id: Modifier, service: WriteRoles):
    return RoleResponse.model_validate(await service.set_active(actor_id, role_id, True))


@router.post("/{role_id}/deactivate", response_model=RoleResponse)
@limit_writes
async def deactivate_role(request: Request, role_id: str, actor_id: Modifier, service: WriteRoles):
    return RoleResponse.model_validate(await service.set_active(actor_id, role_id, False))


@router.delete("/{role_id}", status_code=204)
@limit_writes
async def delete_role(
    request: Request,
    role_id: str,
    actor_id: Admin,
    service: WriteRoles,
    cascade: bool | None = Query(
        None, description="Revoke grants of the role; default from ROLE_DELETE_CASCADE"
    ),
):
    """Delete a role. Without cascade the delete is refused (409) while grants exist."""
    await service.delete_role(actor_id, role_id, cascade=cascade)
    return Response(status_code=204)


@router.get("/{role_id}/permissions", response_model=list[RolePermissionResponse])
async def list_role_permissions(role_id: str, _actor: Reader, service: ReadRoles):
    return [RolePermissionResponse.model_validate(p) for p in await service.list_permissions(role_id)]


@router.post("/{role_id}/permissions", response_model=RolePermissionResponse, status_code=201)
@limit_writes
async def add_role_permission(
    request: Request,
    role_id: str,
    body: RolePermissionCreate,
    actor_id: Modifier,
    service: WriteRoles,
):
    created = await service.add_permission(
        actor_id,
        role_id,
        body.scope,
        body.resource,
        body.action,
        is_allow=body.is_allow,
        conditions=body.conditions_json(),
    )
    return RolePermissionResponse.model_validate(created)


@router.delete("/{role_id}/permissions/{permission_id}", status_code=204)
@limit_writes
async def remove_role_permission(
    request: Request,
    role_id: str,
    permission_id: str,
    actor_id: Modifier,
    service: WriteRoles,
):
    await service.remove_permission(actor_id, role_id, permission_id)
    return Response(status_code=204)


@router.get("/{role_id}/policies", response_model=list[PolicyResponse])
async def list_role_policies(role_id: str, _actor: Reader, service: ReadRoles):
    return [PolicyResponse.model_validate(p) for p in await service.list_policies(role_id)]


@router.put("/{role_id}/policies/{policy_id}", response_model=RolePolicyResponse, status_code=201)
@limit_writes
async def attach_policy(
    request: Request,
    role_id: str,
    policy_id: str,
    actor_id: Modifier,
    service: WriteRoles,
):
    """Attach a policy (409 if already attached, 400 for templates)."""
    attachment = await service.attach_policy(actor_id, role_id, policy_id)
    return RolePolicyResponse.model_validate(attachment)


@router.delete("/{role_id}/policies/{policy_id}", status_code=204)
@limit_writes
async def detach_policy(
    request: Request,
    role_id: str,
    policy_id: str,
    actor_id: Modifier,
    service: WriteRoles,
):
    await service.detach_policy(actor_id, role_id, policy_id)
    return Response(status_code=204)


@router.get("/{role_id}/resources", response_model=list[RoleResourceResponse])
async def list_role_resources(
    role_id: str,
    _actor: Reader,
    service: Annotated[RoleResourceService, Depends(get_role_resource_service)],
):
    return [RoleResourceResponse.model_validate(r) for r in await service.list_by_role(role_id)]


@router.put("/{role_id}/resources", response_model=RoleResourceResponse)
@limit_writes
async def grant_role_resource(
    request: Request,
    role_id: str,
    body: RoleResourceGrant,
    actor_id: Modifier,
    service: Annotated[RoleResourceService, Depends(get_role_resource_service_for_write)],
):
    """Create or replace the role's actions on one resource."""
    result = await service.grant(
        actor_id, role_id, body.resource_type, body.resource_id, body.allowed_actions
    )
    return RoleResourceResponse.model_validate(result)


@router.delete("/{role_id}/resources/{role_resource_id}", status_code=204)
@limit_writes
async def revoke_role_resource(
    request: Request,
    role_id: str,
    role_resource_id: str,
    actor_id: Modifier,
    service: Annotated[RoleResourceService, Depends(get_role_resource_service_for_write)],
):
    await service.revoke(actor_id, role_id, role_resource_id)
    return Response(status_code=204)
