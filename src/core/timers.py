# -*- coding: utf-8 -*-
"""
Timer Implementations

Pure Python one-shot timers for the notification scheduler.

- ThreadingTimerFactory: wall-clock timers on background threads
- VirtualTimerFactory: deterministic virtual time, advanced explicitly

The Qt event-loop implementation lives in ui/qt_timer.py.
"""

from __future__ import annotations

import heapq
import itertools
import logging
import threading
from typing import Callable, List, Tuple

logger = logging.getLogger(__name__)


class ThreadingTimerHandle:
    def __init__(self, timer: threading.Timer):
        self._timer = timer

    def cancel(self) -> None:
        self._timer.cancel()

    @property
    def active(self) -> bool:
        return self._timer.is_alive() and not self._timer.finished.is_set()


class ThreadingTimerFactory:
    """Starts daemon threading.Timer instances

    Callbacks run on the timer thread; callers are expected to guard shared
    state with a lock.
    """

    def start(self, delay_ms: int, callback: Callable[[], None]) -> ThreadingTimerHandle:
        timer = threading.Timer(max(0, delay_ms) / 1000.0, callback)
        timer.daemon = True
        timer.start()
        return ThreadingTimerHandle(timer)


class VirtualTimerHandle:
    def __init__(self, due_ms: int):
        self.due_ms = due_ms
        self._cancelled = False
        self._fired = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def active(self) -> bool:
        return not (self._cancelled or self._fired)


class VirtualTimerFactory:
    """
    Virtual Time Timer Factory

    Timers only fire when advance() moves the virtual clock past their due
    time. Timers due at the same instant fire in start order, and a timer
    started by a firing callback is eligible within the same advance() call.

    Example:
        timers = VirtualTimerFactory()
        timers.start(3000, on_expire)
        timers.advance(2999)   # nothing
        timers.advance(1)      # on_expire() runs
    """

    def __init__(self) -> None:
        self._now_ms = 0
        self._seq = itertools.count()
        self._pending: List[Tuple[int, int, VirtualTimerHandle, Callable[[], None]]] = []

    @property
    def now_ms(self) -> int:
        return self._now_ms

    @property
    def pending_count(self) -> int:
        """Number of timers still waiting to fire"""
        return sum(1 for _, _, handle, _ in self._pending if handle.active)

    def start(self, delay_ms: int, callback: Callable[[], None]) -> VirtualTimerHandle:
        handle = VirtualTimerHandle(self._now_ms + max(0, delay_ms))
        heapq.heappush(self._pending, (handle.due_ms, next(self._seq), handle, callback))
        return handle

    def advance(self, ms: int) -> int:
        """
        Move virtual time forward and fire every timer that becomes due

        Args:
            ms: Milliseconds to advance

        Returns:
            int: Number of callbacks fired
        """
        target = self._now_ms + max(0, ms)
        fired = 0
        while self._pending and self._pending[0][0] <= target:
            due_ms, _, handle, callback = heapq.heappop(self._pending)
            if not handle.active:
                continue
            self._now_ms = due_ms
            handle._fired = True
            callback()
            fired += 1
        self._now_ms = target
        return fired
