"""
Notification Service Module

Serializes transient and permanent user-facing messages.

One notification is active at a time. Transient notifications are shown in
arrival order, each for a fixed display window; a permanent notification is
shown whenever no transient occupies the screen and survives transient cycles
until it is replaced or dismissed.
"""

from __future__ import annotations

from collections import deque
from contextlib import contextmanager
from typing import Optional, Tuple
import logging
import threading

from core.event_bus import EventBus, EventType
from core.ports.timer import ITimerFactory, ITimerHandle
from models.notification import (
    Notification,
    NotificationKind,
    NotificationPersistence,
    NotificationState,
)

logger = logging.getLogger(__name__)

DEFAULT_TRANSIENT_DURATION_MS = 3000


class NotificationService:
    """
    Notification Scheduler

    States:
        Idle: nothing active, backlog empty
        ShowingTransient: a transient is active and its timer runs
        ShowingPermanent: the permanent notification is active, no timer

    Example:
        notifications = NotificationService(VirtualTimerFactory())

        notifications.add_notification("Catalog failed to load",
                                       NotificationKind.ERROR,
                                       NotificationPersistence.PERMANENT)
        notifications.add_notification("Queue ready: 12 techniques")
        notifications.active_notification.text   # "Queue ready: 12 techniques"
    """

    def __init__(
        self,
        timer_factory: ITimerFactory,
        event_bus: Optional[EventBus] = None,
        transient_duration_ms: int = DEFAULT_TRANSIENT_DURATION_MS,
    ):
        self._timers = timer_factory
        self._event_bus = event_bus
        self._duration_ms = int(transient_duration_ms)

        # Expiry callbacks may arrive from a timer thread
        self._lock = threading.RLock()
        self._state = NotificationState()
        self._timer: Optional[ITimerHandle] = None
        self._timer_generation = 0

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def active_notification(self) -> Optional[Notification]:
        with self._lock:
            return self._state.active

    @property
    def permanent_notification(self) -> Optional[Notification]:
        with self._lock:
            return self._state.permanent

    @property
    def backlog(self) -> Tuple[Notification, ...]:
        with self._lock:
            return tuple(self._state.backlog)

    @property
    def is_transient_showing(self) -> bool:
        with self._lock:
            return self._state.is_transient_showing

    @property
    def has_notifications(self) -> bool:
        with self._lock:
            return bool(
                self._state.backlog
                or self._state.active is not None
                or self._state.permanent is not None
            )

    @property
    def transient_duration_ms(self) -> int:
        return self._duration_ms

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def add_notification(
        self,
        text: str,
        kind: NotificationKind = NotificationKind.STATUS,
        persistence: NotificationPersistence = NotificationPersistence.TRANSIENT,
    ) -> Notification:
        """
        Add a notification

        Args:
            text: Message text
            kind: Status or error
            persistence: Transient (timed) or permanent

        Returns:
            Notification: The created notification (its id can be used to dismiss it)
        """
        notification = Notification(text=text, kind=kind, persistence=persistence)

        with self._transition():
            if notification.is_permanent:
                # Only the newest permanent notification is kept
                self._state.permanent = notification
                # A transient already on screen finishes its window first
                if not self._state.is_transient_showing:
                    self._state.active = notification
                logger.debug("Permanent notification set: %s", text)
            else:
                self._state.backlog.append(notification)
                logger.debug("Transient notification queued: %s", text)
                if not self._state.is_transient_showing:
                    self._process_queue_locked()

        return notification

    def notify_status(self, text: str, permanent: bool = False) -> Notification:
        return self.add_notification(text, NotificationKind.STATUS, self._persistence(permanent))

    def notify_error(self, text: str, permanent: bool = False) -> Notification:
        return self.add_notification(text, NotificationKind.ERROR, self._persistence(permanent))

    def process_queue(self) -> None:
        """Show the next backlog entry if no transient is showing (idempotent)"""
        with self._transition():
            self._process_queue_locked()

    def dismiss_notification(self, notification_id: Optional[str] = None) -> None:
        """
        Dismiss notifications

        Args:
            notification_id: Dismiss only the matching notification. When omitted or empty,
                everything is cleared and the timer is cancelled.
        """
        with self._transition():
            state = self._state

            if not notification_id:
                self._cancel_timer()
                state.active = None
                state.permanent = None
                state.backlog.clear()
                state.is_transient_showing = False
                return

            if state.active is not None and state.active.id == notification_id:
                if state.is_transient_showing:
                    self._cancel_timer()
                state.is_transient_showing = False

                if state.permanent is not None and state.permanent.id != notification_id:
                    state.active = state.permanent
                else:
                    state.active = None
                    state.permanent = None

                self._process_queue_locked()

            if state.permanent is not None and state.permanent.id == notification_id:
                state.permanent = None
                if state.active is not None and state.active.id == notification_id:
                    state.active = None
                    self._process_queue_locked()

            state.backlog = deque(n for n in state.backlog if n.id != notification_id)

    def cleanup(self) -> None:
        """Cancel the pending timer without touching what is displayed"""
        with self._lock:
            self._cancel_timer()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @staticmethod
    def _persistence(permanent: bool) -> NotificationPersistence:
        return NotificationPersistence.PERMANENT if permanent else NotificationPersistence.TRANSIENT

    @contextmanager
    def _transition(self):
        """Run a transition under the lock and announce a changed active slot"""
        with self._lock:
            before = self._state.active
            yield
            after = self._state.active
        if after is not before and self._event_bus is not None:
            self._event_bus.publish_sync(EventType.NOTIFICATION_CHANGED, after)

    def _process_queue_locked(self) -> None:
        state = self._state
        if not state.backlog or state.is_transient_showing:
            return

        state.active = state.backlog.popleft()
        state.is_transient_showing = True

        self._timer_generation += 1
        generation = self._timer_generation
        self._timer = self._timers.start(
            self._duration_ms, lambda: self._on_transient_expired(generation)
        )

    def _on_transient_expired(self, generation: int) -> None:
        with self._transition():
            # A cancelled threading timer can still race past cancel()
            if generation != self._timer_generation or not self._state.is_transient_showing:
                return

            self._timer = None
            self._state.is_transient_showing = False
            self._state.active = self._state.permanent
            self._process_queue_locked()

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        # Invalidate callbacks of timers that already fired on another thread
        self._timer_generation += 1
