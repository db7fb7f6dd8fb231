# Copyright (c) 2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Single-resolution results and the error-first callback adapter.

``Deferred`` is the engine's unit of "eventually success or failure". It is
backend neutral (asyncio/trio) through AnyIO: the underlying event is only
created when someone actually waits on a still-pending result, so settled
results can be built and awaited without any suspension.

``promisify`` turns a connect-style function whose last parameter is an
error-first completion callback into an async function returning the
callback's outcome.
"""

from __future__ import annotations

import functools
import logging
from collections.abc import Awaitable, Callable
from enum import Enum
from typing import Any, Generic, TypeVar

import anyio

from ._errors import HandlerFailure
from .config import settings
from .ln import maybe_await

T = TypeVar("T")

logger = logging.getLogger(__name__)

__all__ = (
    "Deferred",
    "DeferredState",
    "promisify",
)


class DeferredState(str, Enum):
    PENDING = "pending"
    RESOLVED = "resolved"
    REJECTED = "rejected"


class Deferred(Generic[T]):
    """A value settled exactly once, by ``resolve`` or ``reject``.

    Awaiting a resolved Deferred returns its value; awaiting a rejected one
    raises the failure reason (wrapped in ``HandlerFailure`` when the reason
    is not an exception). Any number of waiters may await it. Settling an
    already settled Deferred is a no-op that returns ``False``.

    Example:
        >>> d = Deferred()
        >>> d.resolve(42)
        True
        >>> await d
        42
    """

    __slots__ = ("_state", "_value", "_event")

    def __init__(self) -> None:
        self._state = DeferredState.PENDING
        self._value: Any = None
        self._event: anyio.Event | None = None

    @classmethod
    def resolved(cls, value: T | None = None) -> Deferred[T]:
        deferred = cls()
        deferred.resolve(value)
        return deferred

    @classmethod
    def rejected(cls, reason: Any) -> Deferred[Any]:
        deferred = cls()
        deferred.reject(reason)
        return deferred

    @property
    def state(self) -> DeferredState:
        return self._state

    @property
    def done(self) -> bool:
        return self._state is not DeferredState.PENDING

    def resolve(self, value: T | None = None) -> bool:
        return self._settle(DeferredState.RESOLVED, value)

    def reject(self, reason: Any) -> bool:
        return self._settle(DeferredState.REJECTED, reason)

    def _settle(self, state: DeferredState, value: Any) -> bool:
        if self.done:
            return False
        self._state = state
        self._value = value
        if self._event is not None:
            self._event.set()
        return True

    async def wait(self) -> T:
        if not self.done:
            if self._event is None:
                self._event = anyio.Event()
            await self._event.wait()
        if self._state is DeferredState.REJECTED:
            if isinstance(self._value, BaseException):
                raise self._value
            raise HandlerFailure(self._value)
        return self._value

    def __await__(self):
        return self.wait().__await__()

    def __repr__(self) -> str:
        if self.done:
            return f"Deferred({self._state.value}: {self._value!r})"
        return "Deferred(pending)"


def promisify(fn: Callable[..., Any]) -> Callable[..., Awaitable[Any]]:
    """Convert an error-first callback function into an async function.

    The wrapped function is called with the supplied arguments plus a
    ``callback(err=None, result=None)``. A truthy ``err`` fails the result,
    anything else succeeds it with ``result``. Coroutine functions are
    awaited before waiting on the callback, and exceptions raised while
    calling ``fn`` fail the result the same way ``callback(exc)`` would.

    Args:
        fn: Function whose last parameter is the completion callback.

    Returns:
        Async function taking ``fn``'s leading arguments.
    """
    name = getattr(fn, "__qualname__", None) or repr(fn)

    @functools.wraps(fn)
    async def wrapper(*args: Any) -> Any:
        deferred: Deferred[Any] = Deferred()

        def callback(err: Any = None, result: Any = None) -> None:
            settled = deferred.reject(err) if err else deferred.resolve(result)
            if not settled and settings.WARN_ON_REPEATED_CALLBACK:
                logger.warning(
                    f"Completion callback of {name} called more than once; "
                    "keeping the first outcome"
                )

        try:
            await maybe_await(fn(*args, callback))
        except Exception as exc:
            if not deferred.reject(exc):
                # already completed, nothing left to fail
                raise
        return await deferred

    return wrapper
