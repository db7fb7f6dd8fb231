# Copyright (c) 2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Handler roles, tagged when a chain is built.

A chain element is either a ``Normal`` step, run on the success path, or an
``ErrorHandler`` step, run only after a preceding failure. Plain callables
become ``Normal``, except that callback-style chains tag four-parameter
callables ``(err, req, res, next)`` as ``ErrorHandler``. ``error_handler``
declares one explicitly.
"""

from __future__ import annotations

import inspect
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any

from ._errors import ConfigurationError

__all__ = (
    "Step",
    "Normal",
    "ErrorHandler",
    "as_step",
    "error_handler",
    "to_steps",
)

ERROR_HANDLER_ARITY = 4


@dataclass(frozen=True, slots=True)
class Normal:
    """Runs as ``fn(*carriers, next)`` while the chain is succeeding."""

    fn: Callable[..., Any]

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        return self.fn(*args, **kwargs)


@dataclass(frozen=True, slots=True)
class ErrorHandler:
    """Runs as ``fn(err, *carriers, next)`` once the chain has failed."""

    fn: Callable[..., Any]

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        return self.fn(*args, **kwargs)


Step = Normal | ErrorHandler


def error_handler(fn: Callable[..., Any]) -> ErrorHandler:
    """Declare ``fn`` as an error handler.

    Example:
        >>> @error_handler
        ... def recover(err, req, res, next):
        ...     res["status"] = 500
        ...     next()
    """
    if isinstance(fn, ErrorHandler):
        return fn
    if isinstance(fn, Normal):
        fn = fn.fn
    if not callable(fn):
        raise ConfigurationError.from_value(fn, expected="callable")
    return ErrorHandler(fn)


def _positional_arity(fn: Callable[..., Any]) -> int | None:
    """Count leading positional parameters without defaults, or None."""
    try:
        params = inspect.signature(fn).parameters.values()
    except (TypeError, ValueError):
        return None
    count = 0
    for param in params:
        if param.kind not in (param.POSITIONAL_ONLY, param.POSITIONAL_OR_KEYWORD):
            break
        if param.default is not param.empty:
            break
        count += 1
    return count


def as_step(item: Any, *, arity_dispatch: bool = False) -> Step:
    """Tag one handler.

    With ``arity_dispatch`` an untagged callable taking exactly four
    positional parameters, ``(err, req, res, next)``, becomes an
    ``ErrorHandler``. Explicit ``Normal``/``ErrorHandler`` tags always win.
    """
    if isinstance(item, Normal | ErrorHandler):
        return item
    if arity_dispatch and _positional_arity(item) == ERROR_HANDLER_ARITY:
        return ErrorHandler(item)
    return Normal(item)


def to_steps(
    handlers: Callable[..., Any] | Iterable[Any],
    *,
    arity_dispatch: bool = False,
) -> tuple[Step, ...]:
    """Normalize a handler list into an immutable tuple of tagged steps.

    Accepts a single callable or an iterable of callables/steps. Arity is
    read once here, never while the chain runs.

    Raises:
        ConfigurationError: If any element is not callable.
    """
    if isinstance(handlers, Normal | ErrorHandler) or callable(handlers):
        handlers = [handlers]

    try:
        items = list(handlers)
    except TypeError as exc:
        raise ConfigurationError(
            "middlewares must be a callable or an iterable of callables",
            details={"type": type(handlers).__name__},
            cause=exc,
        )

    steps: list[Step] = []
    for idx, item in enumerate(items):
        if callable(item):
            steps.append(as_step(item, arity_dispatch=arity_dispatch))
        else:
            raise ConfigurationError.from_value(
                item, expected="callable", index=idx
            )
    return tuple(steps)
