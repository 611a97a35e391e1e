"""
Request-scoped actor context.

The authentication dependency records who is acting; the auditable
repositories read it back when writing audit log rows.

Usage:
    set_current_user(user_id="user123", ip_address="10.0.0.1")
    user_id = get_current_actor_id()  # "user123", or None for system actions
"""

from contextvars import ContextVar
from dataclasses import dataclass

_current_user_id: ContextVar[str | None] = ContextVar("current_user_id", default=None)
_current_ip_address: ContextVar[str | None] = ContextVar("current_ip_address", default=None)


@dataclass(frozen=True)
class ActorContext:
    """Immutable snapshot of the current actor context."""

    user_id: str | None
    ip_address: str | None = None


def set_current_user(user_id: str | None, ip_address: str | None = None) -> None:
    """Set the current user context for this request."""
    _current_user_id.set(user_id)
    _current_ip_address.set(ip_address)


def clear_current_user() -> None:
    _current_user_id.set(None)
    _current_ip_address.set(None)


def get_current_actor_id() -> str | None:
    """Get the current user ID, or None if not authenticated."""
    return _current_user_id.get()


def get_actor_context() -> ActorContext:
    return ActorContext(
        user_id=_current_user_id.get(),
        ip_address=_current_ip_address.get(),
    )
