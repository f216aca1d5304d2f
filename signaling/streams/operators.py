"""
Signal operators built on reactivex.

Provides:
- observe_on_context: deliver values and completion on an execution
  context, in the same turn when the producer already runs there.
- complete_on_error: end a stream with a logged completion instead of a failure.

Both follow the reactivex operator shape: call with arguments, then apply
to an Observable directly or through `pipe`.

Usage:
    shared = source.pipe(
        complete_on_error(),
        observe_on_context(context),
        ops.share(),
    )
"""
import threading
from typing import Any, Callable, Optional, TypeVar

from loguru import logger
from reactivex import Observable, abc
from reactivex.disposable import BooleanDisposable, CompositeDisposable

from .context import is_current

T = TypeVar('T')


def observe_on_context(
    context: abc.SchedulerBase, always_async: bool = False
) -> Callable[[Observable[T]], Observable[T]]:
    """
    Deliver values and completion on `context`.

    An event produced on the context itself is delivered synchronously when
    nothing earlier is still queued or being delivered. Otherwise it is
    scheduled on the context, so delivery order always equals production
    order, also when a subscriber emits again while handling a value.
    With `always_async`, or when `context` cannot tell whether it is current,
    every event is scheduled.

    Disposing the subscription drops events that are already queued.
    """

    def _observe_on_context(source: Observable[T]) -> Observable[T]:
        def subscribe(
            observer: abc.ObserverBase[T], scheduler: Optional[abc.SchedulerBase] = None
        ) -> abc.DisposableBase:
            lock = threading.Lock()
            cancelled = BooleanDisposable()
            # Events queued or being delivered right now
            pending = 0

            def finish() -> None:
                nonlocal pending
                with lock:
                    pending -= 1

            def deliver(handler: Callable[..., Any], *args: Any) -> None:
                nonlocal pending
                with lock:
                    synchronous = not always_async and pending == 0 and is_current(context)
                    pending += 1

                if synchronous:
                    try:
                        handler(*args)
                    finally:
                        finish()
                    return

                def action(_scheduler: abc.SchedulerBase, _state: Any = None) -> None:
                    try:
                        if not cancelled.is_disposed:
                            handler(*args)
                    finally:
                        finish()

                logger.trace(f"Scheduling delivery on {context!r}")
                context.schedule(action)

            subscription = source.subscribe(
                lambda value: deliver(observer.on_next, value),
                observer.on_error,
                lambda: deliver(observer.on_completed),
                scheduler=scheduler,
            )
            return CompositeDisposable(subscription, cancelled)

        return Observable(subscribe)

    return _observe_on_context


def complete_on_error() -> Callable[[Observable[T]], Observable[T]]:
    """Replace a failure with completion, logging it at ERROR level."""

    def _complete_on_error(source: Observable[T]) -> Observable[T]:
        def subscribe(
            observer: abc.ObserverBase[T], scheduler: Optional[abc.SchedulerBase] = None
        ) -> abc.DisposableBase:
            def on_error(error: Exception) -> None:
                logger.error(
                    f"Signal source failed without a fallback, completing instead: {error!r}"
                )
                observer.on_completed()

            return source.subscribe(
                observer.on_next, on_error, observer.on_completed, scheduler=scheduler
            )

        return Observable(subscribe)

    return _complete_on_error
