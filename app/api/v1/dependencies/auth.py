"""Caller authentication: JWT bearer token -> verified claims and actor ID."""

from __future__ import annotations

from typing import Annotated, Any

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.domain.exceptions import AuthenticationException
from app.infrastructure.security.jwt import MFA_CLAIM, verify_token
from app.shared.context import set_current_user
from app.shared.enums import ActorType

_http_bearer = HTTPBearer(auto_error=False)


async def get_token_claims(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(_http_bearer)],
) -> dict[str, Any]:
    """Return the verified claims of the bearer token; 401 when missing or invalid."""
    if credentials is None:
        raise AuthenticationException("Not authenticated")
    try:
        return verify_token(credentials.credentials)
    except ValueError as e:
        raise AuthenticationException(str(e)) from None


async def get_current_actor_id(
    request: Request,
    claims: Annotated[dict[str, Any], Depends(get_token_claims)],
) -> str:
    """Return the `sub` claim of a valid bearer token.

    Binds the actor to the request context for audit entries.
    """
    actor_id = str(claims["sub"])
    set_current_user(
        actor_id,
        ActorType.USER,
        ip_address=request.client.host if request.client else None,
    )
    return actor_id


def token_mfa_verified(claims: dict[str, Any]) -> bool:
    """True only when the signed token carries `mfa: true`."""
    return claims.get(MFA_CLAIM) is True
