"""
Execution Contexts.

An execution context is a reactivex scheduler that can also tell whether the
caller is already running inside it. Signals use that to deliver in the same
turn when they can, and schedule onto the context otherwise.

Provides:
- ExecutionContext: mixin adding is_current() to a scheduler.
- MainQueueContext: FIFO dispatch queue drained by its owning thread.
- AsyncioContext: thread-safe scheduling onto an asyncio event loop.
- A process-wide primary context registry.

Usage:
    from signaling.streams import MainQueueContext, set_primary_context

    main = MainQueueContext()
    set_primary_context(main)
    ...
    main.run_pending()  # from the main thread, e.g. once per frame
"""
import asyncio
import heapq
import itertools
import queue
import threading
import time
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Any, Callable, Iterator, List, Optional, Tuple

from loguru import logger
from reactivex import abc, typing
from reactivex.disposable import BooleanDisposable, CompositeDisposable, SingleAssignmentDisposable
from reactivex.scheduler.eventloop import AsyncIOThreadSafeScheduler
from reactivex.scheduler.periodicscheduler import PeriodicScheduler

from signaling.core.errors import ContextError

Callback = Callable[[], None]


class ExecutionContext(ABC):
    """Scheduler mixin for the place where Signal deliveries happen."""

    name = "context"

    @abstractmethod
    def is_current(self) -> bool:
        """True when called from inside this context."""

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}>"


def is_current(scheduler: abc.SchedulerBase) -> bool:
    """True when `scheduler` is an ExecutionContext and the caller runs inside it."""
    return isinstance(scheduler, ExecutionContext) and scheduler.is_current()


def _run_guarded(fn: Callback, context_name: str) -> None:
    try:
        fn()
    except Exception as e:
        logger.error(f"Callback on {context_name} failed: {e}")


class MainQueueContext(PeriodicScheduler, ExecutionContext):
    """
    Dispatch queue bound to one thread (the interpreter's main thread by default).

    Any thread may schedule; only the owning thread drains the queue, either
    from its own loop via `run_pending()` or blocking via `run_until()`.
    """

    name = "main_queue"

    def __init__(self, thread: Optional[threading.Thread] = None):
        super().__init__()
        self._thread = thread or threading.main_thread()
        # None entries only wake up a blocked run_until()
        self._queue: "queue.Queue[Optional[Callback]]" = queue.Queue()
        self._timers: List[Tuple[float, int, Callback]] = []
        self._timers_lock = threading.Lock()
        self._sequence = itertools.count()

    @property
    def thread(self) -> threading.Thread:
        return self._thread

    def is_current(self) -> bool:
        return threading.get_ident() == self._thread.ident

    def schedule(
        self, action: typing.ScheduledAction[Any], state: Any = None
    ) -> abc.DisposableBase:
        invoke, disposable = self._prepare(action, state)
        self._queue.put(invoke)
        return disposable

    def schedule_relative(
        self,
        duetime: typing.RelativeTime,
        action: typing.ScheduledAction[Any],
        state: Any = None,
    ) -> abc.DisposableBase:
        seconds = self.to_seconds(duetime)
        if seconds <= 0:
            return self.schedule(action, state)

        invoke, disposable = self._prepare(action, state)
        with self._timers_lock:
            heapq.heappush(self._timers, (time.monotonic() + seconds, next(self._sequence), invoke))
        self._queue.put(None)
        return disposable

    def schedule_absolute(
        self,
        duetime: typing.AbsoluteTime,
        action: typing.ScheduledAction[Any],
        state: Any = None,
    ) -> abc.DisposableBase:
        return self.schedule_relative(self.to_datetime(duetime) - self.now, action, state)

    def _prepare(self, action: typing.ScheduledAction[Any], state: Any):
        sad = SingleAssignmentDisposable()
        cancelled = BooleanDisposable()

        def invoke():
            if not cancelled.is_disposed:
                sad.disposable = self.invoke_action(action, state=state)

        return invoke, CompositeDisposable(sad, cancelled)

    def run_pending(self) -> int:
        """
        Run every action that is ready now.

        Returns:
            Number of scheduled actions executed.
        """
        self._check_owner()
        self._release_due_timers()
        executed = 0
        while True:
            try:
                fn = self._queue.get_nowait()
            except queue.Empty:
                return executed
            if fn is None:
                continue
            _run_guarded(fn, self.name)
            executed += 1

    def run_until(self, predicate: Callable[[], bool], timeout: float = 5.0) -> bool:
        """
        Drain the queue until `predicate()` holds or `timeout` expires.

        Returns:
            The final value of `predicate()`.
        """
        self._check_owner()
        deadline = time.monotonic() + timeout
        while not predicate():
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                break
            self._release_due_timers()
            try:
                fn = self._queue.get(timeout=min(remaining, self._next_timer_wait()))
            except queue.Empty:
                continue
            if fn is not None:
                _run_guarded(fn, self.name)
        return predicate()

    def _check_owner(self) -> None:
        if not self.is_current():
            raise ContextError(
                f"{type(self).__name__} can only be drained from thread '{self._thread.name}'"
            )

    def _release_due_timers(self) -> None:
        now = time.monotonic()
        with self._timers_lock:
            while self._timers and self._timers[0][0] <= now:
                _, _, fn = heapq.heappop(self._timers)
                self._queue.put(fn)

    def _next_timer_wait(self) -> float:
        with self._timers_lock:
            if not self._timers:
                return 0.05
            return max(0.0, min(0.05, self._timers[0][0] - time.monotonic()))


class AsyncioContext(AsyncIOThreadSafeScheduler, ExecutionContext):
    """
    Deliver on an asyncio event loop.

    Current when called from inside the loop while it runs; scheduling from
    any thread goes through `loop.call_soon_threadsafe`.
    """

    name = "asyncio"

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        if loop is None:
            try:
                loop = asyncio.get_running_loop()
            except RuntimeError:
                raise ContextError("AsyncioContext needs a loop or a running event loop")
        super().__init__(loop)

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        return self._loop

    def is_current(self) -> bool:
        try:
            return asyncio.get_running_loop() is self._loop
        except RuntimeError:
            return False


# --- Primary context registry ---
_primary: Optional[abc.SchedulerBase] = None
_primary_lock = threading.Lock()


def create_context(kind: str) -> ExecutionContext:
    """
    Build a context by configuration name.

    Args:
        kind: "main_queue", "asyncio" or "qt"
    """
    if kind == "main_queue":
        return MainQueueContext()
    if kind == "asyncio":
        return AsyncioContext()
    if kind == "qt":
        from signaling.qt import QtMainContext
        return QtMainContext()
    raise ValueError(f"Unknown execution context kind: {kind}")


def get_primary_context() -> abc.SchedulerBase:
    """Return the primary context, building it from configuration on first use."""
    global _primary
    with _primary_lock:
        if _primary is None:
            from signaling.core.config import get_config_manager
            kind = get_config_manager().data.context.primary
            _primary = create_context(kind)
            logger.debug(f"Primary execution context created: {_primary!r}")
        return _primary


def set_primary_context(context: Optional[abc.SchedulerBase]) -> Optional[abc.SchedulerBase]:
    """Install `context` as primary and return the previous one."""
    global _primary
    with _primary_lock:
        previous, _primary = _primary, context
    return previous


def reset_primary_context() -> None:
    set_primary_context(None)


@contextmanager
def primary_context(context: abc.SchedulerBase) -> Iterator[abc.SchedulerBase]:
    """Temporarily install `context` as the primary context."""
    previous = set_primary_context(context)
    try:
        yield context
    finally:
        set_primary_context(previous)
