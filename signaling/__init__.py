"""
signaling - shared, main-thread-delivering event streams for ViewModels.

Provides:
- Signal: hot, multicast, never-failing stream delivered on the primary context
- as_signal(): wrap a reactivex Observable, optionally replacing failures with a fallback
- Emitter / Signaling: private-emit, public-subscribe event channels
- Execution contexts (main queue, asyncio, Qt) and a virtual-time context

Usage:
    from reactivex.disposable import CompositeDisposable
    from signaling import Signaling

    class ViewModel:
        actions = Signaling()

        def close(self):
            self._actions.send("close")

    bag = CompositeDisposable()
    vm = ViewModel()
    bag.add(vm.actions.subscribe(on_value=print))
"""
from loguru import logger

from signaling.core import (
    SignalingError,
    ContextError,
    ConfigManager,
    SignalingConfig,
    get_config_manager,
    configure,
    setup_logging,
)
from signaling.streams import (
    Signal,
    as_signal,
    to_signal,
    ExecutionContext,
    MainQueueContext,
    AsyncioContext,
    VirtualTimeContext,
    get_primary_context,
    set_primary_context,
    reset_primary_context,
    primary_context,
)
from signaling.mvvm import Emitter, Signaling

# Library default: silent until the application calls setup_logging()
logger.disable("signaling")

__version__ = "0.1.0"

__all__ = [
    "SignalingError",
    "ContextError",
    "ConfigManager",
    "SignalingConfig",
    "get_config_manager",
    "configure",
    "setup_logging",
    "Signal",
    "as_signal",
    "to_signal",
    "ExecutionContext",
    "MainQueueContext",
    "AsyncioContext",
    "VirtualTimeContext",
    "get_primary_context",
    "set_primary_context",
    "reset_primary_context",
    "primary_context",
    "Emitter",
    "Signaling",
]
