# Copyright (c) 2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

from ._utils import is_coro_func, maybe_await

__all__ = ("is_coro_func", "maybe_await")
