"""
Signal - hot, shared, never-failing stream delivered on the primary context.

A Signal wraps exactly one reactivex Observable and adds three guarantees:
- every value is delivered on the primary execution context (synchronously
  when produced there, scheduled otherwise), in source order;
- all subscribers share one upstream subscription and only see values
  emitted after they attached;
- completion is delivered on the primary context too, after the values
  that preceded it.

Signals have no error channel. Sources that can fail are converted with
`as_signal(source, fallback)`, which substitutes the fallback for a failure.
A failure that still reaches a Signal is logged and ends it with completion.

Usage:
    from reactivex.subject import Subject
    from signaling.streams import as_signal

    subject = Subject()
    signal = as_signal(subject)
    handle = signal.subscribe(on_value=print, on_complete=lambda: print("done"))
"""
import threading
from typing import Any, Callable, Generic, Optional, TypeVar

import reactivex
from loguru import logger
from reactivex import Observable, abc
from reactivex import operators as ops
from reactivex.disposable import Disposable

from .context import get_primary_context
from .operators import complete_on_error, observe_on_context

T = TypeVar('T')
R = TypeVar('R')

_MISSING = object()


class Signal(Generic[T]):
    """Shared, never-failing stream bound to one execution context."""

    def __init__(
        self,
        source: Observable[T],
        context: Optional[abc.SchedulerBase] = None,
        always_async: Optional[bool] = None,
    ):
        self._context = context or get_primary_context()
        if always_async is None:
            from signaling.core.config import get_config_manager
            always_async = get_config_manager().data.context.always_async
        self._always_async = always_async
        # Serializes connect/disconnect of the shared upstream
        self._lock = threading.RLock()
        self._shared: Observable[T] = source.pipe(
            complete_on_error(),
            observe_on_context(self._context, always_async),
            ops.share(),
        )

    @property
    def context(self) -> abc.SchedulerBase:
        return self._context

    @property
    def observable(self) -> Observable[T]:
        """The shared, context-bound Observable, for composing with reactivex operators."""
        return self._shared

    @classmethod
    def never(cls, context: Optional[abc.SchedulerBase] = None) -> "Signal[T]":
        """A signal that never emits and never completes."""
        return cls(reactivex.never(), context)

    @classmethod
    def just(cls, value: T, context: Optional[abc.SchedulerBase] = None) -> "Signal[T]":
        """A signal emitting `value` once, then completing."""
        return cls(reactivex.just(value), context)

    def subscribe(
        self,
        on_value: Optional[Callable[[T], Any]] = None,
        on_complete: Optional[Callable[[], Any]] = None,
    ) -> abc.DisposableBase:
        """
        Observe the signal.

        Args:
            on_value: Called on the primary context with each value.
            on_complete: Called on the primary context when the stream ends.

        Returns:
            Disposable that stops delivery to this subscriber only.
        """
        with self._lock:
            subscription = self._shared.subscribe(
                on_next=_guarded(on_value, "on_value"),
                on_completed=_guarded(on_complete, "on_complete"),
            )

        def dispose():
            with self._lock:
                subscription.dispose()

        return Disposable(dispose)

    # RxCocoa spelling
    emit = subscribe

    def map(self, fn: Callable[[T], R]) -> "Signal[R]":
        return Signal(self._shared.pipe(ops.map(fn)), self._context, self._always_async)

    def filter(self, predicate: Callable[[T], bool]) -> "Signal[T]":
        return Signal(self._shared.pipe(ops.filter(predicate)), self._context, self._always_async)

    def __repr__(self) -> str:
        return f"<Signal on {self._context!r}>"


def _guarded(fn: Optional[Callable[..., Any]], role: str) -> Optional[Callable[..., None]]:
    """Isolate subscriber failures so one subscriber cannot starve the others."""
    if fn is None:
        return None

    def call(*args: Any) -> None:
        try:
            fn(*args)
        except Exception as e:
            logger.error(f"Signal subscriber {role} failed: {e}")

    return call


def as_signal(
    source: Observable[T],
    fallback: Any = _MISSING,
    context: Optional[abc.SchedulerBase] = None,
) -> Signal[T]:
    """
    Wrap `source` in a Signal.

    Args:
        source: Observable to wrap. Without `fallback` it must never fail.
        fallback: Value substituted for a failure, after which the signal completes.
        context: Delivery context; defaults to the primary context.
    """
    if fallback is not _MISSING:
        source = source.pipe(ops.catch(reactivex.just(fallback)))
    return Signal(source, context)


def to_signal(
    fallback: Any = _MISSING, context: Optional[abc.SchedulerBase] = None
) -> Callable[[Observable[T]], Signal[T]]:
    """Operator form of `as_signal`, for the end of a `pipe` chain."""

    def _to_signal(source: Observable[T]) -> Signal[T]:
        return as_signal(source, fallback, context)

    return _to_signal
