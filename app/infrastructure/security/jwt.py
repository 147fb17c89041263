"""JWT token creation and verification for admin API callers.

The `sub` claim is the actor ID recorded in audit entries and checked
against the admin resource. The `mfa` claim, set by the issuer after a second
factor, is the only MFA signal trusted for admin API gating. Uses
app.core.config for secret and algorithm.
"""

from datetime import UTC, datetime, timedelta
from typing import Any, cast

from jose import JWTError, jwt

from app.core.config import Settings, get_settings

MFA_CLAIM = "mfa"


def create_access_token(
    subject: str,
    extra_claims: dict[str, Any] | None = None,
    expires_delta: timedelta | None = None,
    settings: Settings | None = None,
) -> str:
    """Create a signed access token for subject.

    Args:
        subject: Actor ID placed in the `sub` claim.
        extra_claims: Optional additional claims (e.g. organization_id, mfa).
        expires_delta: Optional TTL; else uses settings.access_token_expire_minutes.
        settings: Optional settings override (scripts, tests).

    Returns:
        Encoded JWT string.
    """
    settings = settings or get_settings()
    if not subject:
        raise ValueError("Token subject is required")
    to_encode: dict[str, Any] = dict(extra_claims or {})
    to_encode["sub"] = subject
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.access_token_expire_minutes)
    to_encode["exp"] = datetime.now(UTC) + expires_delta
    encoded = jwt.encode(
        to_encode,
        settings.secret_key.get_secret_value(),
        algorithm=settings.algorithm,
    )
    return cast(str, encoded)


def verify_token(token: str, settings: Settings | None = None) -> dict[str, Any]:
    """Verify and decode a JWT. Returns the payload.

    Raises:
        ValueError: If token is invalid, expired, or missing exp/sub.
    """
    settings = settings or get_settings()
    try:
        payload = jwt.decode(
            token,
            settings.secret_key.get_secret_value(),
            algorithms=[settings.algorithm],
            options={"require_exp": True, "require_sub": True},
        )
    except JWTError as e:
        raise ValueError(f"Invalid token: {e!s}") from e
    if not payload.get("sub"):
        raise ValueError("Token missing required claim: sub")
    return payload
