"""
Qt main-thread execution context.

A reactivex QtScheduler that hands every action to the thread owning the
QCoreApplication through a queued signal connection, so Signals deliver on
the GUI thread no matter which thread produced the value.

Usage:
    app = QApplication(sys.argv)
    set_primary_context(QtMainContext(app))
"""
from typing import Any, Callable, Optional

from PySide6 import QtCore
from PySide6.QtCore import QCoreApplication, QObject, QThread, Qt, Signal, Slot
from loguru import logger
from reactivex import abc, typing
from reactivex.disposable import BooleanDisposable, CompositeDisposable, SingleAssignmentDisposable
from reactivex.scheduler.mainloop import QtScheduler

from signaling.core.errors import ContextError
from signaling.streams.context import ExecutionContext

Callback = Callable[[], None]


class _Invoker(QObject):
    """QObject living in the application thread that runs posted callables."""

    invoke = Signal(object)

    def __init__(self):
        super().__init__()
        self.invoke.connect(self._run, Qt.ConnectionType.QueuedConnection)

    @Slot(object)
    def _run(self, fn: Callback) -> None:
        try:
            fn()
        except Exception as e:
            logger.error(f"Callback on qt main thread failed: {e}")


class QtMainContext(QtScheduler, ExecutionContext):
    """
    Scheduler bound to the Qt application (GUI) thread.

    Immediate actions are queued through one QObject, in FIFO order, even
    when scheduled from the GUI thread itself. Delayed actions arm their
    QTimer on the GUI thread, where it can fire.
    """

    name = "qt"

    def __init__(self, app: Optional[QCoreApplication] = None):
        app = app or QCoreApplication.instance()
        if app is None:
            raise ContextError("QtMainContext requires a QCoreApplication instance")
        super().__init__(QtCore)
        self._app = app
        self._invoker = _Invoker()
        if self._invoker.thread() != app.thread():
            self._invoker.moveToThread(app.thread())

    def is_current(self) -> bool:
        return QThread.currentThread() == self._app.thread()

    def schedule(
        self, action: typing.ScheduledAction[Any], state: Any = None
    ) -> abc.DisposableBase:
        sad = SingleAssignmentDisposable()
        cancelled = BooleanDisposable()

        def invoke():
            if not cancelled.is_disposed:
                sad.disposable = self.invoke_action(action, state=state)

        self._invoker.invoke.emit(invoke)
        return CompositeDisposable(sad, cancelled)

    def schedule_relative(
        self,
        duetime: typing.RelativeTime,
        action: typing.ScheduledAction[Any],
        state: Any = None,
    ) -> abc.DisposableBase:
        if self.to_seconds(duetime) <= 0:
            return self.schedule(action, state)

        timer = SingleAssignmentDisposable()

        def arm():
            timer.disposable = QtScheduler.schedule_relative(self, duetime, action, state)

        self._invoker.invoke.emit(arm)
        return timer
