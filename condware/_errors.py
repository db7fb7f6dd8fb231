# Copyright (c) 2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

from typing import Any, ClassVar

__all__ = (
    "CondwareError",
    "ConfigurationError",
    "HandlerFailure",
    "failure_reason",
)


class CondwareError(Exception):
    default_message: ClassVar[str] = "condware error"
    __slots__ = ("message", "details")

    def __init__(
        self,
        message: str | None = None,
        *,
        details: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message or self.default_message)
        if cause:
            self.__cause__ = cause  # preserves traceback
        self.message = message or self.default_message
        self.details = details or {}

    def to_dict(self, *, include_cause: bool = False) -> dict[str, Any]:
        data = {
            "error": self.__class__.__name__,
            "message": self.message,
            **({"details": self.details} if self.details else {}),
        }
        if include_cause and (cause := self.get_cause()):
            data["cause"] = repr(cause)
        return data

    def get_cause(self) -> Exception | None:
        """Get the cause of this error, if any."""
        return self.__cause__ if hasattr(self, "__cause__") else None


class ConfigurationError(CondwareError):
    """Raised when a gate is built from invalid parts."""

    default_message = "Invalid gate configuration"
    __slots__ = ()

    @classmethod
    def from_value(
        cls,
        value: Any,
        *,
        expected: str | None = None,
        message: str | None = None,
        **extra: Any,
    ):
        details = {
            "value": repr(value),
            "type": type(value).__name__,
            **({"expected": expected} if expected else {}),
            **extra,
        }
        return cls(message=message, details=details)


class HandlerFailure(CondwareError):
    """Carries a failure reason that is not itself an exception.

    Connect-style handlers may fail with any truthy value
    (``next("error")``, ``next({"message": ...})``). Awaiting a rejected
    ``Deferred`` raises the reason directly when it is an exception and
    wraps it in ``HandlerFailure`` otherwise.
    """

    default_message = "Handler failed"
    __slots__ = ("reason",)

    def __init__(self, reason: Any):
        super().__init__(f"Handler failed: {reason!r}")
        self.reason = reason


def failure_reason(exc: BaseException) -> Any:
    """Return the value a handler originally failed with."""
    if isinstance(exc, HandlerFailure):
        return exc.reason
    return exc
