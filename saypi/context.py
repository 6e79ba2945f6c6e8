"""
Request-scoped context objects.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional
import contextvars


@dataclass(frozen=True)
class AuthContext:
    user_id: str


@dataclass(frozen=True)
class RequestContext:
    request_id: str
    method: Optional[str] = None
    path: Optional[str] = None
    user_id: Optional[str] = None


_CURRENT_REQUEST_CONTEXT: contextvars.ContextVar[Optional["RequestContext"]] = contextvars.ContextVar(
    "saypi_request_context",
    default=None,
)


def get_current_request_context() -> Optional["RequestContext"]:
    return _CURRENT_REQUEST_CONTEXT.get()


def set_current_request_context(context: Optional["RequestContext"]) -> contextvars.Token:
    return _CURRENT_REQUEST_CONTEXT.set(context)


def reset_current_request_context(token: contextvars.Token) -> None:
    _CURRENT_REQUEST_CONTEXT.reset(token)


def current_request_id() -> Optional[str]:
    context = _CURRENT_REQUEST_CONTEXT.get()
    return context.request_id if context else None


__all__ = [
    "AuthContext",
    "RequestContext",
    "get_current_request_context",
    "set_current_request_context",
    "reset_current_request_context",
    "current_request_id",
]
