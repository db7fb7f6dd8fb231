# Copyright (c) 2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

import logging

from . import connect, koa
from ._errors import (
    CondwareError,
    ConfigurationError,
    HandlerFailure,
    failure_reason,
)
from .config import settings
from .connect import conditional
from .deferred import Deferred, DeferredState, promisify
from .gate import Gate, GateDecision
from .predicate import Awaiting, Immediate, evaluate_predicate
from .scope import ScopeState, create_context, new_scope_token, scope_state
from .steps import ErrorHandler, Normal, error_handler
from .version import __version__

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)

__all__ = (
    "__version__",
    "Awaiting",
    "CondwareError",
    "ConfigurationError",
    "Deferred",
    "DeferredState",
    "ErrorHandler",
    "Gate",
    "GateDecision",
    "HandlerFailure",
    "Immediate",
    "Normal",
    "ScopeState",
    "conditional",
    "connect",
    "create_context",
    "error_handler",
    "evaluate_predicate",
    "failure_reason",
    "koa",
    "logger",
    "new_scope_token",
    "promisify",
    "scope_state",
    "settings",
)
