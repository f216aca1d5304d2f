"""
Qt integration - deliver Signals on the PySide6 application thread.
"""
from signaling.qt.context import QtMainContext

__all__ = ["QtMainContext"]
