# Copyright (c) 2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Conditional middleware for continuation-passing hosts.

Handlers look like ``async handler(ctx, next)`` where ``next()`` runs the
rest of the pipeline. Each handler decides for itself whether to call
``next``. Exceptions are not caught here; they travel up through the
awaiting handlers to the host like in any other async middleware stack.

Example::

    from condware import koa

    api = koa.conditional(
        lambda request: request.path.startswith("/api"),
        [rate_limit, authenticate],
    )
    await api(ctx, next)
"""

from __future__ import annotations

import functools
from collections.abc import Awaitable, Callable, Iterable, Mapping
from typing import Any

from ._errors import ConfigurationError
from .gate import Gate
from .ln import maybe_await
from .predicate import Predicate
from .scope import create_context as _create_context
from .steps import ErrorHandler

__all__ = (
    "chain_middleware",
    "conditional",
    "create_context",
    "request_view",
)

Continuation = Callable[[], Awaitable[Any]]
KoaMiddleware = Callable[[Any, Callable[[], Any]], Awaitable[Any]]


def request_view(ctx: Any) -> Any:
    """Return what the predicate sees: ``ctx.request``, if there is one."""
    if isinstance(ctx, Mapping):
        return ctx.get("request")
    return getattr(ctx, "request", None)


def chain_middleware(ctx: Any) -> Callable[[Callable[[], Any], Any], Continuation]:
    """Build a right-fold reducer turning handlers into nested continuations.

    Use with ``functools.reduce(reducer, reversed(handlers), next)``; calling
    the result starts the first handler with the next one as its ``next``.
    """

    def reducer(inner: Callable[[], Any], middleware: Any) -> Continuation:
        async def continuation() -> Any:
            return await maybe_await(middleware(ctx, inner))

        return continuation

    return reducer


def _resume(next: Callable[[], Any]) -> Continuation:
    async def resume() -> Any:
        return await maybe_await(next())

    return resume


def conditional(
    predicate: Predicate,
    middlewares: Callable[..., Any] | Iterable[Any],
    scope: str | None = None,
) -> KoaMiddleware:
    """Wrap ``middlewares`` behind ``predicate(ctx.request)``.

    Args:
        predicate: Called with the request view; may return a bool or an
            awaitable.
        middlewares: Handler or handlers to run, in order, when it is true.
        scope: Optional scope token shared with sibling gates.

    Returns:
        ``async middleware(ctx, next)`` returning whatever the chain returns.

    Raises:
        ConfigurationError: If a handler is declared as an error handler;
            this style has no error-handler slot.
    """
    gate = Gate.build(predicate, middlewares, scope)
    for step in gate.steps:
        if isinstance(step, ErrorHandler):
            raise ConfigurationError(
                "Error handlers are not supported by continuation-style gates",
                details={"handler": repr(step.fn)},
            )

    async def middleware(ctx: Any, next: Callable[[], Any]) -> Any:
        decision = await gate.admit(ctx, request_view(ctx))
        resume = _resume(next)
        if not decision.admitted:
            return await resume()

        run = functools.reduce(chain_middleware(ctx), reversed(gate.steps), resume)
        return await run()

    middleware.gate = gate
    return middleware


def create_context(fn: Callable[[Callable[..., KoaMiddleware]], Any]) -> None:
    """Call ``fn`` with a ``conditional`` builder sharing one fresh scope."""
    _create_context(fn, conditional)
