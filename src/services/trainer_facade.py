# -*- coding: utf-8 -*-
"""
Trainer Facade Module

Provides the use-case surface the playback widget and the preference editor
talk to, narrowing the dependency surface on the services.

Design Principles:
- UI components should only depend on this Facade, not directly on underlying services.
- The Facade only exposes "use-case level methods" actually needed by the UI.
- Preference changes regenerate the queue; the end of the queue regenerates it too.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Callable, List, Optional

from core.event_bus import EventType

if TYPE_CHECKING:
    from core.event_bus import EventBus
    from models.notification import Notification
    from models.preferences import PreferenceSelection
    from models.technique import Technique
    from services.catalog_service import CatalogService
    from services.notification_service import NotificationService
    from services.play_queue_service import PlayQueueService
    from services.preferences_service import PreferencesService

logger = logging.getLogger(__name__)


class TrainerFacade:
    """Trainer Application Facade

    Usage Example:
        facade.start()
        technique = facade.current_technique
        # ... the playback widget plays it ...
        facade.on_playback_started()
        next_technique = facade.on_playback_ended()
    """

    def __init__(
        self,
        catalog_service: "CatalogService",
        preferences: "PreferencesService",
        play_queue: "PlayQueueService",
        notifications: "NotificationService",
        event_bus: "EventBus",
    ):
        self._catalog_service = catalog_service
        self._preferences = preferences
        self._play_queue = play_queue
        self._notifications = notifications
        self._event_bus = event_bus

        self._sub_ids: List[str] = [
            event_bus.subscribe(EventType.PREFERENCES_CHANGED, self.on_preferences_changed),
        ]

    # === Lifecycle ===

    def start(self, force_regenerate: bool = False) -> bool:
        """Load the catalog if needed and restore or build the queue.

        Args:
            force_regenerate: Build a fresh queue even when a saved one exists.

        Returns:
            True if there is something to play.
        """
        if self._catalog_service.catalog.is_empty:
            self._catalog_service.load()

        return self._play_queue.initialize_queue(
            self._catalog_service.catalog,
            force_regenerate=force_regenerate or self._catalog_service.is_new_version,
        )

    def shutdown(self) -> None:
        """Unsubscribe and stop the notification timer."""
        for sub_id in self._sub_ids:
            self._event_bus.unsubscribe(sub_id)
        self._sub_ids.clear()
        self._notifications.cleanup()

    # === Queue ===

    @property
    def current_technique(self) -> Optional["Technique"]:
        return self._play_queue.current_technique

    @property
    def queue(self) -> List["Technique"]:
        return self._play_queue.queue

    @property
    def is_playing(self) -> bool:
        return self._play_queue.is_playing

    def regenerate_queue(self) -> bool:
        """Build a new shuffled queue from the current preferences."""
        state = self._play_queue.generate_queue(
            self._catalog_service.catalog, self._preferences.selection
        )
        return not state.is_empty

    def on_preferences_changed(self, selection: "PreferenceSelection") -> None:
        if self._catalog_service.catalog.is_empty:
            return
        self._play_queue.generate_queue(self._catalog_service.catalog, selection)

    # === Playback collaborator ===

    def on_playback_started(self) -> None:
        self._play_queue.set_playing(True)

    def on_playback_failed(self, error: str = "") -> None:
        logger.warning("Playback failed: %s", error)
        self._play_queue.set_playing(False)
        self._notifications.notify_error("Could not play technique")

    def on_playback_ended(self) -> Optional["Technique"]:
        """Advance after a technique finished playing.

        Returns:
            The next technique; at the end of the queue a new queue is
            generated and its first technique returned.
        """
        self._play_queue.set_playing(False)
        technique = self._play_queue.next_track()
        if technique is not None:
            return technique

        if self._catalog_service.catalog.is_empty:
            return None
        logger.info("Play queue exhausted, generating a new one")
        self.regenerate_queue()
        return self._play_queue.current_technique

    # === Notifications ===

    @property
    def active_notification(self) -> Optional["Notification"]:
        return self._notifications.active_notification

    @property
    def has_pending_notifications(self) -> bool:
        """True while a transient is showing or waiting in the backlog."""
        return self._notifications.is_transient_showing or bool(self._notifications.backlog)

    def dismiss_notification(self, notification_id: Optional[str] = None) -> None:
        self._notifications.dismiss_notification(notification_id)

    # === Events ===

    def subscribe(self, event_type: EventType, callback: Callable[[Any], None]) -> str:
        return self._event_bus.subscribe(event_type, callback)

    def unsubscribe(self, subscription_id: str) -> bool:
        return self._event_bus.unsubscribe(subscription_id)
