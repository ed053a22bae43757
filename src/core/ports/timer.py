# -*- coding: utf-8 -*-
"""
Timer Port Interface

One-shot timers are injected into the notification scheduler so tests can
drive expiry with virtual time instead of sleeping.
"""

from __future__ import annotations

from typing import Callable, Protocol, runtime_checkable


@runtime_checkable
class ITimerHandle(Protocol):
    """Handle of a started one-shot timer"""

    def cancel(self) -> None:
        """Cancel the timer; the callback will not run afterwards"""
        ...

    @property
    def active(self) -> bool:
        """Whether the timer is still pending"""
        ...


@runtime_checkable
class ITimerFactory(Protocol):
    """Starts one-shot timers

    Implementations: ThreadingTimerFactory, VirtualTimerFactory (core.timers),
    QtTimerFactory (ui.qt_timer).
    """

    def start(self, delay_ms: int, callback: Callable[[], None]) -> ITimerHandle:
        """Run callback once after delay_ms milliseconds

        Args:
            delay_ms: Delay in milliseconds
            callback: Function to call on expiry

        Returns:
            Handle used to cancel the timer
        """
        ...
