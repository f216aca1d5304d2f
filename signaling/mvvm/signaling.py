"""
Emit/observe pairs for ViewModels.

`Signaling` declares an event channel on a class. The owner emits through a
private Emitter, everyone else subscribes to a public read-only Signal:
- `_name` to emit events
- `name` to subscribe to events from outside

Example:

    class ViewModel:
        class Action(Enum):
            SHOW_ALERT = "show_alert"

        actions = Signaling[Action]()

        def on_tap_button(self):
            self._actions.send(ViewModel.Action.SHOW_ALERT)

    class Coordinator:
        def __init__(self):
            self.view_model = ViewModel()
            self.bag = CompositeDisposable()
            self.bag.add(self.view_model.actions.subscribe(self.handle))
"""
import threading
from typing import Any, Generic, Optional, Type, TypeVar

from reactivex import abc
from reactivex.subject import Subject

from signaling.streams.signal import Signal

T = TypeVar('T')


class Emitter(Generic[T]):
    """
    Write side of an event channel backed by one Subject.

    `signal` is the shared read side; `send()` without a value emits None,
    for channels that carry no payload.
    """

    def __init__(self, context: Optional[abc.SchedulerBase] = None):
        self._subject: Subject[T] = Subject()
        self._signal: Signal[T] = Signal(self._subject, context)

    @property
    def signal(self) -> Signal[T]:
        return self._signal

    def send(self, value: Optional[T] = None) -> None:
        self._subject.on_next(value)

    # RxRelay spelling
    accept = send

    def close(self) -> None:
        """Complete the channel; later sends are ignored."""
        self._subject.on_completed()


class Signaling(Generic[T]):
    """
    Descriptor declaring an emit/observe pair on a class.

    Accessing the attribute returns the read-only Signal; the Emitter lives
    under the same name prefixed with an underscore. Each instance gets its
    own Emitter, created on first access and released with the instance.

    Args:
        context: Delivery context for the signal. Defaults to the primary context.
    """

    _creation_lock = threading.Lock()

    def __init__(self, context: Optional[abc.SchedulerBase] = None):
        self._context = context
        self._public_name: str = ""
        self._emitter_name: str = ""

    def __set_name__(self, owner: type, name: str) -> None:
        """Called when the descriptor is assigned to a class attribute."""
        self._public_name = name
        self._emitter_name = f"_{name}"
        if self._emitter_name in owner.__dict__:
            raise TypeError(
                f"{owner.__name__}.{self._emitter_name} already exists; cannot declare Signaling '{name}'"
            )
        setattr(owner, self._emitter_name, _EmitterAccessor(self))

    def emitter(self, obj: Any) -> Emitter[T]:
        """Return the Emitter of `obj`, creating it on first use."""
        emitter = obj.__dict__.get(self._emitter_name)
        if emitter is not None:
            return emitter
        with self._creation_lock:
            emitter = obj.__dict__.get(self._emitter_name)
            if emitter is None:
                emitter = Emitter(self._context)
                obj.__dict__[self._emitter_name] = emitter
        return emitter

    def __get__(self, obj: Any, objtype: Optional[Type] = None):
        if obj is None:
            return self
        return self.emitter(obj).signal

    def __set__(self, obj: Any, value: Any) -> None:
        raise AttributeError(
            f"'{self._public_name}' is read-only; emit through '{self._emitter_name}.send()'"
        )


class _EmitterAccessor:
    """Class-level `_name` attribute that materialises the instance Emitter."""

    def __init__(self, signaling: Signaling):
        self._signaling = signaling

    def __get__(self, obj: Any, objtype: Optional[Type] = None):
        if obj is None:
            return self
        return self._signaling.emitter(obj)
