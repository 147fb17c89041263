"""Request context management using contextvars.

Provides async-safe storage for request-scoped data such as the current
actor and request ID. Similar to Flask's `g` or Django's request.user.

Usage:
    set_current_user(user_id="user123", actor_type=ActorType.USER)
    user_id = get_current_actor_id()
    request_id = get_current_request_id()
"""

from contextvars import ContextVar
from dataclasses import dataclass

from app.shared.enums import ActorType

_current_user_id: ContextVar[str | None] = ContextVar("current_user_id", default=None)
_current_actor_type: ContextVar[ActorType] = ContextVar(
    "current_actor_type", default=ActorType.SYSTEM
)
_current_ip_address: ContextVar[str | None] = ContextVar(
    "current_ip_address", default=None
)
_current_request_id: ContextVar[str | None] = ContextVar(
    "current_request_id", default=None
)


@dataclass(frozen=True)
class ActorContext:
    """Immutable snapshot of the current actor context."""

    user_id: str | None
    actor_type: ActorType
    ip_address: str | None = None
    request_id: str | None = None


def set_current_user(
    user_id: str | None,
    actor_type: ActorType = ActorType.USER,
    ip_address: str | None = None,
) -> None:
    """Set the current user context for this request.

    Call in dependency injection after authentication. Context is scoped to
    the current async task.

    Raises:
        ValueError: If actor_type is USER and user_id is None or empty.
    """
    if actor_type == ActorType.USER and not user_id:
        raise ValueError("user_id is required when actor_type is USER")
    _current_user_id.set(user_id)
    _current_actor_type.set(actor_type)
    _current_ip_address.set(ip_address)


def clear_current_user() -> None:
    """Clear the current user context."""
    _current_user_id.set(None)
    _current_actor_type.set(ActorType.SYSTEM)
    _current_ip_address.set(None)


def set_current_request_id(request_id: str | None) -> None:
    """Bind the request ID (set by the request ID middleware)."""
    _current_request_id.set(request_id)


def get_current_request_id() -> str | None:
    return _current_request_id.get()


def get_current_actor_id() -> str | None:
    """Return the current user ID, or None if not authenticated."""
    return _current_user_id.get()


def get_current_actor_type() -> ActorType:
    """Return the current actor type (defaults to SYSTEM if not set)."""
    return _current_actor_type.get()


def get_current_ip_address() -> str | None:
    """Return the current request IP address."""
    return _current_ip_address.get()


def get_actor_context() -> ActorContext:
    """Return a snapshot of the current actor context."""
    return ActorContext(
        user_id=_current_user_id.get(),
        actor_type=_current_actor_type.get(),
        ip_address=_current_ip_address.get(),
        request_id=_current_request_id.get(),
    )
