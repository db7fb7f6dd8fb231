# tests/conftest.py
"""Shared fixtures for condware tests.

Async tests run on both asyncio and trio through AnyIO's pytest plugin.
The ``harness`` fixture lets one behavioural test drive either host style.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest

from condware import connect, koa


@pytest.fixture(params=["asyncio", "trio"])
def anyio_backend(request):
    return request.param


class StepFailed(Exception):
    """Raised by koa-style test handlers to signal failure."""

    def __init__(self, reason: Any):
        super().__init__(reason)
        self.reason = reason


class ConnectHarness:
    """Drives ``async middleware(req, res, next)`` gates."""

    name = "connect"
    module = connect

    def carrier(self) -> dict:
        return {}

    def step(self, body: Callable[[dict], Any]) -> Callable[..., Any]:
        """Handler running ``body(req)``; a truthy return value fails it."""

        def middleware(req, res, next):
            next(body(req))

        return middleware

    async def run(self, middleware, carrier: dict) -> Any:
        calls: list[Any] = []

        def done(err=None):
            calls.append(err)

        await middleware(carrier, {}, done)
        assert len(calls) == 1, "next must be called exactly once"
        return calls[0]


class KoaHarness:
    """Drives ``async middleware(ctx, next)`` gates."""

    name = "koa"
    module = koa

    def carrier(self) -> dict:
        return {}

    def step(self, body: Callable[[dict], Any]) -> Callable[..., Any]:
        """Handler running ``body(ctx)``; a truthy return value fails it."""

        async def middleware(ctx, next):
            if err := body(ctx):
                raise StepFailed(err)
            return await next()

        return middleware

    async def run(self, middleware, carrier: dict) -> Any:
        reached: list[bool] = []

        async def done():
            reached.append(True)

        try:
            await middleware(carrier, done)
        except StepFailed as exc:
            return exc.reason
        assert reached == [True], "next must be called exactly once"
        return None


@pytest.fixture(params=[ConnectHarness, KoaHarness], ids=["connect", "koa"])
def harness(request):
    return request.param()
