# Copyright (c) 2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Scope tokens and the per-carrier record of which scopes already fired.

Gates built with the same scope token share one "already satisfied" flag
per request: once any of them admits a request, the others skip it without
evaluating their own predicate. The flag lives in a ``ScopeState`` stored
on the carrier under ``settings.SCOPE_STATE_FIELD``.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, MutableMapping
from typing import Any
from uuid import uuid4

from ._errors import ConfigurationError
from .config import settings

logger = logging.getLogger(__name__)

__all__ = (
    "ScopeState",
    "scope_state",
    "new_scope_token",
    "create_context",
)


class ScopeState:
    """Set of scope tokens satisfied for one carrier.

    Tokens only ever move from unsatisfied to satisfied; there is no way
    to clear one for the lifetime of the carrier.
    """

    __slots__ = ("_satisfied",)

    def __init__(self) -> None:
        self._satisfied: set[str] = set()

    def mark(self, token: str) -> None:
        self._satisfied.add(token)

    def is_satisfied(self, token: str) -> bool:
        return token in self._satisfied

    @property
    def satisfied(self) -> frozenset[str]:
        return frozenset(self._satisfied)

    def __contains__(self, token: object) -> bool:
        return token in self._satisfied

    def __repr__(self) -> str:
        return f"ScopeState({sorted(self._satisfied)!r})"


def scope_state(carrier: Any) -> ScopeState:
    """Return the carrier's ScopeState, attaching a fresh one on first use.

    Mapping carriers keep it under a reserved key, other objects under a
    reserved attribute.

    Raises:
        ConfigurationError: If the carrier cannot hold the reserved field.
    """
    field = settings.SCOPE_STATE_FIELD

    if isinstance(carrier, MutableMapping):
        state = carrier.get(field)
        if state is None:
            state = carrier[field] = ScopeState()
        return state

    state = getattr(carrier, field, None)
    if state is None:
        state = ScopeState()
        try:
            setattr(carrier, field, state)
        except (AttributeError, TypeError) as exc:
            raise ConfigurationError(
                "Carrier cannot hold scope state",
                details={"carrier": type(carrier).__name__, "field": field},
                cause=exc,
            )
    return state


def new_scope_token() -> str:
    """Allocate a fresh, collision-resistant scope token."""
    return f"{settings.SCOPE_TOKEN_PREFIX}{uuid4().hex}"


def create_context(
    fn: Callable[[Callable[..., Any]], Any],
    factory: Callable[..., Any] | None = None,
) -> None:
    """Call ``fn`` once with a gate builder bound to a fresh scope token.

    ``fn`` receives ``builder(predicate, middlewares)``; every gate it builds
    shares the token, so at most one of them runs its chain per request.

    Args:
        fn: Receives the bound builder, synchronously, exactly once.
        factory: Gate factory taking ``(predicate, middlewares, scope)``.
            Defaults to the connect-style ``conditional``.
    """
    if factory is None:
        from .connect import conditional as factory

    token = new_scope_token()
    logger.debug(f"Created scope {token}")

    def builder(predicate: Callable[..., Any], middlewares: Any) -> Any:
        return factory(predicate, middlewares, scope=token)

    fn(builder)
