# Copyright (c) 2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from enum import Enum
from typing import Any

from ._errors import ConfigurationError
from .predicate import Predicate, evaluate_predicate
from .scope import scope_state
from .steps import Step, to_steps

logger = logging.getLogger(__name__)

__all__ = ("Gate", "GateDecision")


class GateDecision(str, Enum):
    SKIPPED_BY_SCOPE = "skipped_by_scope"
    SKIPPED_BY_CONDITION = "skipped_by_condition"
    ADMITTED = "admitted"

    @property
    def admitted(self) -> bool:
        return self is GateDecision.ADMITTED


@dataclass(frozen=True, slots=True)
class Gate:
    """A predicate guarding a handler chain, optionally bound to a scope.

    The gate holds no per-request state. Whether a scope already fired is
    read from and written to the carrier passed to ``admit``.
    """

    predicate: Predicate
    steps: tuple[Step, ...]
    scope: str | None = None

    @classmethod
    def build(
        cls,
        predicate: Predicate,
        middlewares: Callable[..., Any] | Iterable[Any],
        scope: str | None = None,
        *,
        arity_dispatch: bool = False,
    ) -> Gate:
        if not callable(predicate):
            raise ConfigurationError.from_value(
                predicate, expected="callable predicate"
            )
        return cls(
            predicate=predicate,
            steps=to_steps(middlewares, arity_dispatch=arity_dispatch),
            scope=scope,
        )

    async def admit(self, carrier: Any, view: Any) -> GateDecision:
        """Decide whether the chain runs for this carrier.

        The scope flag is read before the predicate runs and set before any
        handler runs, so a nested or later gate on the same scope sees it.
        Predicate exceptions propagate.
        """
        if self.scope and scope_state(carrier).is_satisfied(self.scope):
            logger.debug(f"Gate skipped by scope {self.scope}")
            return GateDecision.SKIPPED_BY_SCOPE

        outcome = evaluate_predicate(self.predicate, view)
        if not await outcome.resolve():
            logger.debug("Gate skipped by condition")
            return GateDecision.SKIPPED_BY_CONDITION

        if self.scope:
            scope_state(carrier).mark(self.scope)
        logger.debug(f"Gate admitted, running {len(self.steps)} step(s)")
        return GateDecision.ADMITTED
