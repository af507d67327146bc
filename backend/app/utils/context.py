# backend/app/utils/context.py
"""
Request-scoped context: correlation ID and the signed-in user.

Backed by contextvars, so values follow a request through async calls and
into the threads FastAPI runs sync endpoints on. The logging filter reads
both values and stamps them on every record.

Usage:
    token = set_correlation_id("abc-123")
    ...
    reset_correlation_id(token)
"""

from contextvars import ContextVar, Token

_correlation_id_var: ContextVar[str | None] = ContextVar("correlation_id", default=None)
_user_id_var: ContextVar[int | None] = ContextVar("user_id", default=None)


# =============================================================================
# CORRELATION ID
# =============================================================================

def get_correlation_id() -> str | None:
    return _correlation_id_var.get()


def set_correlation_id(correlation_id: str) -> Token:
    """Set the correlation ID; returns the token needed to restore the previous one."""
    return _correlation_id_var.set(correlation_id)


def reset_correlation_id(token: Token) -> None:
    _correlation_id_var.reset(token)


# =============================================================================
# CURRENT USER
# =============================================================================

def get_user_id() -> int | None:
    return _user_id_var.get()


def set_user_id(user_id: int | None) -> Token:
    """Called once the session cookie resolves to a user."""
    return _user_id_var.set(user_id)
