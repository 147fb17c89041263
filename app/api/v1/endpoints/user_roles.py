"""User role grants API: list/assign/revoke, approval workflow and expiry purge."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, Response

from app.api.v1.dependencies import (
    Admin,
    Modifier,
    Reader,
    get_grant_service,
    get_grant_service_for_write,
)
from app.application.dtos.grant import AssignRoleCommand
from app.application.services import GrantService
from app.core.limiter import limit_writes
from app.schemas.grant import (
    ApprovalDecision,
    PurgeExpiredResponse,
    UserRoleAssign,
    UserRoleResponse,
)

# Mounted at /users: /users/{user_id}/roles
users_router = APIRouter()
# Mounted at /user-roles: approval workflow on grant IDs
router = APIRouter()

ReadGrants = Annotated[GrantService, Depends(get_grant_service)]
WriteGrants = Annotated[GrantService, Depends(get_grant_service_for_write)]


@users_router.get("/{user_id}/roles", response_model=list[UserRoleResponse])
async def list_user_roles(user_id: str, _actor: Reader, service: ReadGrants):
    """All grants of a user, including pending, rejected and expired ones."""
    return [UserRoleResponse.model_validate(g) for g in await service.list_user_roles(user_id)]


@users_router.post("/{user_id}/roles", response_model=UserRoleResponse, status_code=201)
@limit_writes
async def assign_user_role(
    request: Request,
    user_id: str,
    body: UserRoleAssign,
    actor_id: Modifier,
    service: WriteGrants,
):
    """Grant a role. Returns the existing grant if the user already holds the role."""
    grant = await service.assign_role(
        AssignRoleCommand(
            user_id=user_id,
            role_id=body.role_id,
            granted_by=actor_id,
            is_temporary=body.is_temporary,
            expires_at=body.expires_at,
            requires_approval=body.requires_approval,
            approval_reason=body.approval_reason,
        )
    )
    return UserRoleResponse.model_validate(grant)


@users_router.delete("/{user_id}/roles/{role_id}", status_code=204)
@limit_writes
async def revoke_user_role(
    request: Request,
    user_id: str,
    role_id: str,
    actor_id: Modifier,
    service: WriteGrants,
):
    await service.revoke_user_role(actor_id, user_id, role_id)
    return Response(status_code=204)


@router.get("/pending", response_model=list[UserRoleResponse])
async def list_pending_grants(
    _actor: Reader,
    service: ReadGrants,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
):
    return [
        UserRoleResponse.model_validate(g)
        for g in await service.list_pending(skip=skip, limit=limit)
    ]


@router.post("/{grant_id}/approve", response_model=UserRoleResponse)
@limit_writes
async def approve_grant(
    request: Request,
    grant_id: str,
    body: ApprovalDecision,
    actor_id: Admin,
    service: WriteGrants,
):
    """Approve a pending grant (409 if it is already approved or rejected)."""
    return UserRoleResponse.model_validate(await service.approve(actor_id, grant_id, body.reason))


@router.post("/{grant_id}/reject", response_model=UserRoleResponse)
@limit_writes
async def reject_grant(
    request: Request,
    grant_id: str,
    body: ApprovalDecision,
    actor_id: Admin,
    service: WriteGrants,
):
    return UserRoleResponse.model_validate(await service.reject(actor_id, grant_id, body.reason))


@router.post("/purge-expired", response_model=PurgeExpiredResponse)
@limit_writes
async def purge_expired_grants(request: Request, actor_id: Admin, service: WriteGrants):
    """Delete temporary grants whose expiry has passed (housekeeping)."""
    return PurgeExpiredResponse(deleted=await service.purge_expired(actor_id))
