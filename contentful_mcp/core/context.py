"""Ambient tenant context.

A ContextVar holds the TenantContext of the running call. asyncio copies
the current context into every task it creates, so work spawned inside a
scope sees that scope's tenant and concurrent scopes never see each other.
"""

from __future__ import annotations

import inspect
from contextlib import contextmanager
from contextvars import ContextVar
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Iterator, TypeVar

from ..external.errors import configuration_error

if TYPE_CHECKING:
    from .tenant import TenantContext


T = TypeVar("T")

_current_context: ContextVar["TenantContext | None"] = ContextVar("contentful_tenant_context", default=None)


@contextmanager
def context_scope(context: "TenantContext") -> Iterator["TenantContext"]:
    token = _current_context.set(context)
    try:
        yield context
    finally:
        _current_context.reset(token)


async def run_with_context(
    context: "TenantContext",
    func: Callable[..., T | Awaitable[T]],
    *args: Any,
    **kwargs: Any,
) -> T:
    """Call ``func`` with ``context`` bound, awaiting the result if needed."""
    with context_scope(context):
        result = func(*args, **kwargs)
        if inspect.isawaitable(result):
            result = await result
        return result


def get_current_context() -> "TenantContext | None":
    return _current_context.get()


def require_current_context() -> "TenantContext":
    context = _current_context.get()
    if context is None:
        raise configuration_error("No tenant context is active for this call")
    return context
