"""Admin API gating: the caller must be allowed an action on the RBAC admin resource."""

from __future__ import annotations

from dataclasses import replace
from typing import Annotated, Any

from fastapi import Depends, Request

from app.application.services import AuthorizationService
from app.core.config import get_settings
from app.domain.value_objects import AccessContext, Principal
from app.schemas.authorization import AccessContextRequest
from app.shared.utils.datetime import ensure_utc, utc_now

from .auth import get_current_actor_id, get_token_claims, token_mfa_verified
from .services import get_authorization_service

_TRUE_VALUES = frozenset({"1", "true", "yes"})


def context_from_request(
    request: Request, body: AccessContextRequest | None = None
) -> AccessContext:
    """Build the AccessContext for a request.

    Explicit body fields win; otherwise the clock, the client address and the
    organization / MFA headers are used. Only /authorize passes these through;
    admin gating replaces the MFA flag with the token's claim.
    """
    settings = get_settings()
    body = body or AccessContextRequest()
    organization_id = body.organization_id or request.headers.get(
        settings.organization_header_name
    )
    ip_address = body.ip_address or (request.client.host if request.client else None)
    mfa_verified = body.mfa_verified
    if mfa_verified is None:
        header = request.headers.get(settings.mfa_header_name)
        if header is not None:
            mfa_verified = header.strip().lower() in _TRUE_VALUES
    return AccessContext(
        now=ensure_utc(body.now) if body.now else utc_now(),
        organization_id=organization_id or None,
        ip_address=ip_address,
        mfa_verified=mfa_verified,
        attributes=dict(body.attributes),
    )


def require_access(action: str):
    """Dependency factory: authenticated caller must be allowed `action` on the admin resource.

    MFA comes from the verified token claim, never from request headers.
    Returns the actor ID. Raises AuthorizationException (403) on deny.
    """

    async def _require(
        request: Request,
        actor_id: Annotated[str, Depends(get_current_actor_id)],
        claims: Annotated[dict[str, Any], Depends(get_token_claims)],
        auth_svc: Annotated[AuthorizationService, Depends(get_authorization_service)],
    ) -> str:
        settings = get_settings()
        await auth_svc.require(
            Principal.user(actor_id),
            action,
            settings.admin_resource_type,
            settings.admin_resource_id,
            replace(context_from_request(request), mfa_verified=token_mfa_verified(claims)),
        )
        return actor_id

    return _require


Reader = Annotated[str, Depends(require_access("read"))]
Modifier = Annotated[str, Depends(require_access("modify"))]
Admin = Annotated[str, Depends(require_access("admin"))]
