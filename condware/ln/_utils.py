import inspect
from collections.abc import Callable
from functools import lru_cache
from typing import Any

__all__ = ("is_coro_func", "maybe_await")

COROUTINE_CHECK_CACHE_SIZE = 1024


@lru_cache(maxsize=COROUTINE_CHECK_CACHE_SIZE)
def _is_coro_func(func: Callable[..., Any]) -> bool:
    if inspect.iscoroutinefunction(func):
        return True

    # callable objects with an async __call__
    call = getattr(func, "__call__", None)
    return call is not None and inspect.iscoroutinefunction(call)


def is_coro_func(func: Callable[..., Any]) -> bool:
    """Check if a function is a coroutine function, with caching for performance."""
    try:
        return _is_coro_func(func)
    except TypeError:
        # unhashable callables skip the cache
        return _is_coro_func.__wrapped__(func)


async def maybe_await(value: Any) -> Any:
    """Await ``value`` if it is awaitable, else return it unchanged."""
    if inspect.isawaitable(value):
        return await value
    return value
