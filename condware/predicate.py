# Copyright (c) 2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import inspect
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from .ln import is_coro_func

__all__ = (
    "Predicate",
    "Immediate",
    "Awaiting",
    "PredicateOutcome",
    "evaluate_predicate",
)

Predicate = Callable[[Any], bool | Awaitable[Any]]


@dataclass(frozen=True, slots=True)
class Immediate:
    """Predicate answered synchronously."""

    value: bool

    async def resolve(self) -> bool:
        return self.value


@dataclass(frozen=True, slots=True)
class Awaiting:
    """Predicate answer still has to be awaited."""

    awaitable: Awaitable[Any]

    async def resolve(self) -> bool:
        return bool(await self.awaitable)


PredicateOutcome = Immediate | Awaiting


def evaluate_predicate(predicate: Predicate, view: Any) -> PredicateOutcome:
    """Call ``predicate(view)`` and classify the answer.

    Coroutine functions always give ``Awaiting``. A plain function that hands
    back an awaitable (``lambda req: check(req)`` over an async ``check``) is
    ``Awaiting`` too; any other return value is taken for its truthiness.
    Exceptions raised by the call propagate to the caller.
    """
    if is_coro_func(predicate):
        return Awaiting(predicate(view))

    result = predicate(view)
    if inspect.isawaitable(result):
        return Awaiting(result)
    return Immediate(bool(result))
