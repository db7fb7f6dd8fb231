"""Tests for continuation-passing (koa-style) gates."""

import functools
from types import SimpleNamespace

import pytest

from condware import ConfigurationError, error_handler
from condware.koa import chain_middleware, conditional, request_view


@pytest.mark.anyio
class TestChainMiddleware:
    async def test_creates_function_wrappers(self):
        """Each continuation calls its handler with the context."""
        context = {}

        def middleware(ctx, next):
            assert ctx is context
            return next()

        reducer = chain_middleware(context)
        mw = functools.reduce(reducer, [middleware], lambda: "DONE")
        assert await mw() == "DONE"

    async def test_right_fold_order(self):
        """Reversed handlers fold into a chain running front to back."""
        seen = []

        def make(name):
            async def middleware(ctx, next):
                seen.append(name)
                return await next()

            return middleware

        async def last():
            seen.append("end")

        handlers = [make("a"), make("b"), make("c")]
        run = functools.reduce(chain_middleware({}), reversed(handlers), last)
        await run()
        assert seen == ["a", "b", "c", "end"]

    async def test_handler_can_stop_chain(self):
        """A handler that does not call next ends the chain there."""
        seen = []

        async def stop(ctx, next):
            seen.append("stop")
            return "stopped"

        async def after(ctx, next):
            seen.append("after")
            return await next()

        run = functools.reduce(chain_middleware({}), reversed([stop, after]), lambda: None)
        assert await run() == "stopped"
        assert seen == ["stop"]


@pytest.mark.anyio
class TestConditional:
    async def test_returns_downstream_result(self):
        """The gate returns what the chain returns."""

        async def passthrough(ctx, next):
            return await next()

        async def downstream():
            return "response"

        mw = conditional(lambda req: True, [passthrough])
        assert await mw({}, downstream) == "response"

    async def test_code_after_next_runs_after_downstream(self):
        """Handlers wrap the rest of the pipeline."""
        seen = []

        async def wrap(ctx, next):
            seen.append("before")
            await next()
            seen.append("after")

        async def downstream():
            seen.append("downstream")

        await conditional(lambda req: True, [wrap])({}, downstream)
        assert seen == ["before", "downstream", "after"]

    async def test_handler_exception_propagates(self):
        """Handler errors surface to the host untouched."""

        async def fail(ctx, next):
            raise RuntimeError("handler failed")

        async def downstream():
            raise AssertionError("downstream must not run")

        with pytest.raises(RuntimeError, match="handler failed"):
            await conditional(lambda req: True, [fail])({}, downstream)

    async def test_predicate_exception_propagates(self):
        """Predicate errors surface to the host untouched."""

        async def predicate(req):
            raise LookupError("no user")

        async def downstream():
            raise AssertionError("downstream must not run")

        with pytest.raises(LookupError):
            await conditional(predicate, [])({}, downstream)

    async def test_sync_next_accepted(self):
        """A plain-function next works when the gate is skipped or run."""
        resumed = []

        async def passthrough(ctx, next):
            return await next()

        def nxt():
            resumed.append(True)
            return "sync"

        assert await conditional(lambda req: False, [])({}, nxt) == "sync"
        assert await conditional(lambda req: True, [passthrough])({}, nxt) == "sync"
        assert resumed == [True, True]

    async def test_predicate_receives_request_view(self):
        """The predicate sees ctx.request."""
        seen = []
        request = SimpleNamespace(path="/api")
        ctx = SimpleNamespace(request=request)

        async def downstream():
            return None

        await conditional(lambda req: seen.append(req) or False, [])(ctx, downstream)
        assert seen == [request]

    async def test_scope_stored_on_object_carrier(self):
        """Scopes work on attribute-style contexts too."""
        ctx = SimpleNamespace(request=None)
        ran = []

        async def record(c, next):
            ran.append(1)
            return await next()

        async def downstream():
            return None

        first = conditional(lambda req: True, [record], scope="s")
        second = conditional(lambda req: True, [record], scope="s")
        await first(ctx, downstream)
        await second(ctx, downstream)
        assert ran == [1]


class TestRequestView:
    def test_mapping_context(self):
        """Mapping contexts expose their 'request' key."""
        assert request_view({"request": "r"}) == "r"
        assert request_view({}) is None

    def test_object_context(self):
        """Object contexts expose their request attribute."""
        assert request_view(SimpleNamespace(request="r")) == "r"
        assert request_view(object()) is None


class TestBuild:
    def test_error_handler_rejected(self):
        """Continuation chains have no error-handler slot."""

        @error_handler
        def recover(err, ctx, next):
            return next()

        with pytest.raises(ConfigurationError):
            conditional(lambda req: True, [recover])
