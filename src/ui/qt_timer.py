# -*- coding: utf-8 -*-
"""
Qt Timer Adapter

Runs notification expiry on the Qt event loop, so the scheduler's timer
callbacks execute on the same thread as every other UI-driven mutation.

Design Principles:
- The core layer stays pure Python and only knows the ITimerFactory port.
- Qt specifics live in the UI layer.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from PyQt6.QtCore import QCoreApplication, QObject, QTimer

logger = logging.getLogger(__name__)


class QtTimerHandle:
    def __init__(self, timer: QTimer):
        self._timer = timer
        self._done = False

    def cancel(self) -> None:
        if self._done:
            return
        self._done = True
        self._timer.stop()
        self._timer.deleteLater()

    def _mark_fired(self) -> None:
        self._done = True
        self._timer.deleteLater()

    @property
    def active(self) -> bool:
        return not self._done and self._timer.isActive()


class QtTimerFactory(QObject):
    """Qt one-shot timer factory

    Usage Example:
        app = QApplication(sys.argv)
        notifications = NotificationService(QtTimerFactory())
    """

    def __init__(self, parent: Optional[QObject] = None):
        """Initialize the factory.

        Raises:
            RuntimeError: If no Qt application instance is running.
        """
        if QCoreApplication.instance() is None:
            raise RuntimeError(
                "QtTimerFactory requires a running QCoreApplication instance. "
                "Please create the Qt application before the timer factory."
            )
        super().__init__(parent)

    def start(self, delay_ms: int, callback: Callable[[], None]) -> QtTimerHandle:
        timer = QTimer(self)
        timer.setSingleShot(True)
        handle = QtTimerHandle(timer)
        timer.timeout.connect(lambda: self._on_timeout(handle, callback))
        timer.start(max(0, int(delay_ms)))
        return handle

    def _on_timeout(self, handle: QtTimerHandle, callback: Callable[[], None]) -> None:
        handle._mark_fired()
        try:
            callback()
        except Exception as e:
            # Exceptions must not escape into the Qt event loop
            logger.error("Qt timer callback execution failed: %s", e)
