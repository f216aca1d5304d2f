"""
Streams - the Signal adapter on top of reactivex.

Provides:
- Signal / as_signal / to_signal: shared, never-failing, primary-context streams
- observe_on_context / complete_on_error: the operators a Signal is built from
- ExecutionContext schedulers and the primary context registry
- VirtualTimeContext: deterministic clock for tests
"""
from .context import (
    ExecutionContext,
    MainQueueContext,
    AsyncioContext,
    is_current,
    create_context,
    get_primary_context,
    set_primary_context,
    reset_primary_context,
    primary_context,
)
from .operators import observe_on_context, complete_on_error
from .scheduler import VirtualTimeContext
from .signal import Signal, as_signal, to_signal

__all__ = [
    "ExecutionContext",
    "MainQueueContext",
    "AsyncioContext",
    "is_current",
    "create_context",
    "get_primary_context",
    "set_primary_context",
    "reset_primary_context",
    "primary_context",
    "observe_on_context",
    "complete_on_error",
    "VirtualTimeContext",
    "Signal",
    "as_signal",
    "to_signal",
]
