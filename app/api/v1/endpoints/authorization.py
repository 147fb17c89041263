"""Authorization API: decisions, permission simulation and effective roles.

Any authenticated caller may ask for a decision; the answer is the product.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from app.api.v1.dependencies import (
    Reader,
    context_from_request,
    get_authorization_service,
    get_current_actor_id,
)
from app.application.dtos.decision import Decision
from app.application.services import AuthorizationService
from app.core.limiter import limit_authorize
from app.domain.enums import PrincipalType
from app.domain.value_objects import Principal
from app.schemas.authorization import (
    AuthorizeRequest,
    DecisionResponse,
    EffectiveRolesResponse,
    SimulatedPermissionResponse,
    SimulateRequest,
)

router = APIRouter()


def _decision_response(decision: Decision) -> DecisionResponse:
    return DecisionResponse(
        effect=decision.effect.value,
        allowed=decision.allowed,
        reason=decision.reason.value,
        effective_role_ids=sorted(decision.effective_role_ids),
        resource_grant=decision.resource_grant,
        deciding_priority=decision.deciding_priority,
        matched_allows=decision.matched_allows,
        matched_denies=decision.matched_denies,
    )


@router.post("", response_model=DecisionResponse)
@limit_authorize
async def authorize(
    request: Request,
    body: AuthorizeRequest,
    _actor: Annotated[str, Depends(get_current_actor_id)],
    auth_svc: Annotated[AuthorizationService, Depends(get_authorization_service)],
):
    """Decide whether the principal may perform action on (resource_type, resource_id).

    Unknown principals get a deny; a hierarchy cycle answers 409.
    """
    decision = await auth_svc.decide(
        Principal(body.principal.type, body.principal.id),
        body.action,
        body.resource_type,
        body.resource_id,
        context_from_request(request, body.context),
    )
    return _decision_response(decision)


@router.post("/simulate", response_model=list[SimulatedPermissionResponse])
async def simulate(
    request: Request,
    body: SimulateRequest,
    _actor: Reader,
    auth_svc: Annotated[AuthorizationService, Depends(get_authorization_service)],
):
    """List every permission entry reachable from the principal's effective roles."""
    rows = await auth_svc.simulate(
        Principal(body.principal.type, body.principal.id),
        context_from_request(request, body.context),
    )
    return [
        SimulatedPermissionResponse(
            scope=r.scope,
            resource=r.resource,
            action=r.action,
            allowed=r.allowed,
            role_id=r.role_id,
            source=r.source.value,
            policy_id=r.policy_id,
            conditions=r.conditions,
        )
        for r in rows
    ]


@router.get(
    "/effective-roles/{principal_type}/{principal_id}",
    response_model=EffectiveRolesResponse,
)
async def effective_roles(
    request: Request,
    principal_type: PrincipalType,
    principal_id: str,
    _actor: Reader,
    auth_svc: Annotated[AuthorizationService, Depends(get_authorization_service)],
):
    """Effective role IDs of a user or group right now (404 for unknown principals)."""
    context = context_from_request(request)
    result = await auth_svc.effective_roles(Principal(principal_type, principal_id), context)
    return EffectiveRolesResponse(
        principal_type=principal_type.value,
        principal_id=principal_id,
        organization_id=context.organization_id,
        role_ids=[r.id for r in result.roles],
        earliest_expiry=result.earliest_expiry,
    )
