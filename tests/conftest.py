import sys

import pytest
import reactivex
from loguru import logger
from reactivex import operators as ops
from reactivex.disposable import CompositeDisposable
from reactivex.scheduler import ThreadPoolScheduler

from signaling.core.config import configure
from signaling.streams import (
    MainQueueContext,
    VirtualTimeContext,
    reset_primary_context,
    set_primary_context,
)


@pytest.fixture(autouse=True)
def isolated_signaling():
    """Fresh configuration and no primary context for every test."""
    configure(None)
    reset_primary_context()
    yield
    reset_primary_context()


@pytest.fixture
def restore_logger():
    """Undo any logging setup a test performed."""
    yield
    logger.remove()
    logger.add(sys.stderr)
    logger.disable("signaling")


@pytest.fixture
def main_queue():
    """Primary context bound to the main thread (the pytest thread)."""
    context = MainQueueContext()
    set_primary_context(context)
    return context


@pytest.fixture
def scheduler():
    return VirtualTimeContext()


@pytest.fixture
def background():
    """Single worker producer scheduler, like a serial background queue."""
    pool = ThreadPoolScheduler(max_workers=1)
    yield pool
    pool.executor.shutdown(wait=True)


@pytest.fixture
def bag():
    bag = CompositeDisposable()
    yield bag
    bag.dispose()


@pytest.fixture
def delayed_source(scheduler):
    """Build an Observable emitting `value` after `delay_ms` of virtual time, for each pair."""
    def build(pairs):
        return reactivex.merge(*(
            reactivex.timer(delay_ms / 1000, scheduler=scheduler).pipe(ops.map(lambda _, v=value: v))
            for value, delay_ms in pairs
        ))
    return build


@pytest.fixture(scope="session")
def qapp():
    """
    Ensure a QCoreApplication exists for tests that use QObjects.
    """
    QtCore = pytest.importorskip("PySide6.QtCore")
    app = QtCore.QCoreApplication.instance()
    if app is None:
        app = QtCore.QCoreApplication([])
    yield app
