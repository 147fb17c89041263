"""Groups API: group role grants and membership."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, Response

from app.api.v1.dependencies import (
    Modifier,
    Reader,
    get_grant_service,
    get_grant_service_for_write,
)
from app.application.services import GrantService
from app.core.limiter import limit_writes
from app.schemas.grant import (
    GroupMemberAdd,
    GroupMemberResponse,
    GroupRoleAssign,
    GroupRoleResponse,
)

router = APIRouter()

ReadGrants = Annotated[GrantService, Depends(get_grant_service)]
WriteGrants = Annotated[GrantService, Depends(get_grant_service_for_write)]


@router.get("/{group_id}/roles", response_model=list[GroupRoleResponse])
async def list_group_roles(group_id: str, _actor: Reader, service: ReadGrants):
    return [GroupRoleResponse.model_validate(g) for g in await service.list_group_roles(group_id)]


@router.post("/{group_id}/roles", response_model=GroupRoleResponse, status_code=201)
@limit_writes
async def assign_group_role(
    request: Request,
    group_id: str,
    body: GroupRoleAssign,
    actor_id: Modifier,
    service: WriteGrants,
):
    """Grant a role to every member of the group (idempotent)."""
    grant = await service.assign_group_role(actor_id, group_id, body.role_id)
    return GroupRoleResponse.model_validate(grant)


@router.delete("/{group_id}/roles/{role_id}", status_code=204)
@limit_writes
async def revoke_group_role(
    request: Request,
    group_id: str,
    role_id: str,
    actor_id: Modifier,
    service: WriteGrants,
):
    await service.revoke_group_role(actor_id, group_id, role_id)
    return Response(status_code=204)


@router.get("/{group_id}/members", response_model=list[GroupMemberResponse])
async def list_group_members(group_id: str, _actor: Reader, service: ReadGrants):
    return [GroupMemberResponse.model_validate(m) for m in await service.list_members(group_id)]


@router.post("/{group_id}/members", response_model=GroupMemberResponse, status_code=201)
@limit_writes
async def add_group_member(
    request: Request,
    group_id: str,
    body: GroupMemberAdd,
    actor_id: Modifier,
    service: WriteGrants,
):
    member = await service.add_member(actor_id, group_id, body.user_id)
    return GroupMemberResponse.model_validate(member)


@router.delete("/{group_id}/members/{user_id}", status_code=204)
@limit_writes
async def remove_group_member(
    request: Request,
    group_id: str,
    user_id: str,
    actor_id: Modifier,
    service: WriteGrants,
):
    await service.remove_member(actor_id, group_id, user_id)
    return Response(status_code=204)
