# Copyright (c) 2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Conditional middleware for error-first callback hosts.

Handlers look like ``handler(req, res, next)`` and report completion
through ``next(err=None, result=None)``. Error handlers look like
``handler(err, req, res, next)``: any callable with exactly four positional
parameters, or one declared with ``error_handler``. They only run once an
earlier handler in the same chain has failed.

Example::

    from condware import connect, error_handler

    auth = connect.conditional(
        lambda req: req["path"].startswith("/admin"),
        [check_session, load_user, error_handler(render_login)],
    )
    await auth(req, res, next)
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Iterable
from typing import Any

from ._errors import failure_reason
from .deferred import promisify
from .gate import Gate
from .ln import maybe_await
from .predicate import Predicate
from .scope import create_context as _create_context
from .steps import ErrorHandler, Step, as_step

__all__ = (
    "chain_middleware",
    "conditional",
    "create_context",
    "run_chain",
)

ConnectMiddleware = Callable[[Any, Any, Callable[..., Any]], Awaitable[None]]


async def _run_step(
    step: Step, req: Any, res: Any, failure: Exception | None, value: Any
) -> Any:
    """Run one step against the outcome so far; raise to fail."""
    if failure is None:
        if isinstance(step, ErrorHandler):
            return value
        return await promisify(step.fn)(req, res)
    if isinstance(step, ErrorHandler):
        return await promisify(step.fn)(failure_reason(failure), req, res)
    raise failure


def chain_middleware(
    req: Any, res: Any
) -> Callable[[Awaitable[Any], Any], Awaitable[Any]]:
    """Build a left-fold reducer chaining steps onto a pending result.

    Use with ``functools.reduce(reducer, steps, Deferred.resolved())``.
    A failure skips every normal step until an error handler takes it; the
    error handler's own outcome then replaces the failure. Untagged
    four-parameter callables count as error handlers.
    """

    async def _link(previous: Awaitable[Any], step: Any) -> Any:
        step = as_step(step, arity_dispatch=True)
        try:
            value = await previous
        except Exception as exc:
            return await _run_step(step, req, res, exc, None)
        return await _run_step(step, req, res, None, value)

    def reducer(previous: Awaitable[Any], step: Any) -> Awaitable[Any]:
        return _link(previous, step)

    return reducer


async def run_chain(steps: Iterable[Any], req: Any, res: Any) -> Any:
    """Run ``steps`` in order with the same rules as ``chain_middleware``.

    Steps are awaited one after another from a single coroutine, so chain
    length does not grow the call stack.
    """
    failure: Exception | None = None
    value: Any = None
    for step in steps:
        step = as_step(step, arity_dispatch=True)
        if failure is not None and not isinstance(step, ErrorHandler):
            continue
        try:
            value = await _run_step(step, req, res, failure, value)
        except Exception as exc:
            failure = exc
        else:
            failure = None
    if failure is not None:
        raise failure
    return value


def conditional(
    predicate: Predicate,
    middlewares: Callable[..., Any] | Iterable[Any],
    scope: str | None = None,
) -> ConnectMiddleware:
    """Wrap ``middlewares`` behind ``predicate(req)``.

    Args:
        predicate: Called with the request; may return a bool or an awaitable.
        middlewares: Handler or handlers to run, in order, when it is true.
        scope: Optional scope token shared with sibling gates.

    Returns:
        ``async middleware(req, res, next)``. ``next`` is called exactly once:
        with no arguments when the gate is skipped or the chain succeeds,
        with the failure reason when the predicate or the chain fails.
    """
    gate = Gate.build(predicate, middlewares, scope, arity_dispatch=True)

    async def middleware(req: Any, res: Any, next: Callable[..., Any]) -> None:
        try:
            decision = await gate.admit(req, req)
        except Exception as exc:
            return await maybe_await(next(exc))

        if not decision.admitted:
            return await maybe_await(next())

        try:
            await run_chain(gate.steps, req, res)
        except Exception as exc:
            return await maybe_await(next(failure_reason(exc)))
        return await maybe_await(next())

    middleware.gate = gate
    return middleware


def create_context(fn: Callable[[Callable[..., ConnectMiddleware]], Any]) -> None:
    """Call ``fn`` with a ``conditional`` builder sharing one fresh scope."""
    _create_context(fn, conditional)
