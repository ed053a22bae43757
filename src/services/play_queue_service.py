"""
Play Queue Service Module

Builds a shuffled queue of techniques from the catalog and the user's
preferences, walks through it one technique at a time and mirrors every
change into persistent storage.
"""

from typing import Callable, List, Optional
import logging
import random
import threading

from core.event_bus import EventBus, EventType
from core.key_value_store import StorageError
from models.catalog import Catalog
from models.play_queue import QueueState
from models.preferences import PreferenceSelection
from models.technique import Technique
from services.notification_service import NotificationService
from services.queue_persistence_service import QueuePersistenceService
from services.technique_filter import filter_techniques

logger = logging.getLogger(__name__)


class PlayQueueService:
    """
    Play Queue Service

    Owns the queue state (techniques, cursor, playing flag). The playback
    widget asks for the next technique when a clip ends; reaching the end of
    the queue is reported by a None result and the caller decides whether to
    generate a new one.

    Example:
        queue = PlayQueueService(persistence, notifications,
                                 preference_provider=lambda: prefs.selection)

        queue.initialize_queue(catalog)
        queue.current_technique      # first technique
        queue.next_track()           # advance, or None at the end
    """

    def __init__(
        self,
        persistence: QueuePersistenceService,
        notifications: NotificationService,
        event_bus: Optional[EventBus] = None,
        preference_provider: Optional[Callable[[], PreferenceSelection]] = None,
        rng: Optional[random.Random] = None,
    ):
        self._persistence = persistence
        self._notifications = notifications
        self._event_bus = event_bus
        self._preference_provider = preference_provider
        self._rng = rng or random.Random()

        self._lock = threading.RLock()
        self._state = QueueState()

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def state(self) -> QueueState:
        """Snapshot of the queue state"""
        with self._lock:
            return self._state.copy()

    @property
    def queue(self) -> List[Technique]:
        with self._lock:
            return list(self._state.items)

    @property
    def cursor(self) -> Optional[int]:
        with self._lock:
            return self._state.cursor

    @property
    def is_playing(self) -> bool:
        with self._lock:
            return self._state.is_playing

    @property
    def current_technique(self) -> Optional[Technique]:
        """Technique at the cursor, or None"""
        with self._lock:
            return self._state.current_technique

    @property
    def is_exhausted(self) -> bool:
        """True when the cursor sits on the last technique or the queue is empty"""
        with self._lock:
            return self._state.is_empty or self._state.is_at_end

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def generate_queue(
        self,
        catalog: Catalog,
        preference: Optional[PreferenceSelection] = None,
    ) -> QueueState:
        """
        Generate a new shuffled queue

        Args:
            catalog: Technique catalog
            preference: Preference snapshot; the injected provider's current
                selection is used when omitted

        Returns:
            QueueState: Snapshot of the new queue
        """
        if preference is None:
            if self._preference_provider is None:
                raise ValueError("No preference selection given and no provider configured")
            preference = self._preference_provider()

        techniques = self._shuffle(filter_techniques(catalog, preference))

        with self._lock:
            self._state = QueueState(
                items=techniques,
                cursor=0 if techniques else None,
                is_playing=False,
            )
            snapshot = self._state.copy()

        logger.info("Generated play queue with %s of %s techniques", len(techniques), len(catalog))
        self._persist(snapshot)

        if techniques:
            noun = "technique" if len(techniques) == 1 else "techniques"
            self._notifications.notify_status(f"Queue ready: {len(techniques)} {noun}")
        else:
            self._notifications.notify_error("No techniques match the current preferences")

        self._publish_queue_changed(snapshot)
        return snapshot

    def initialize_queue(self, catalog: Optional[Catalog], force_regenerate: bool = False) -> bool:
        """
        Restore the saved queue or generate a new one

        Args:
            catalog: Technique catalog; nothing happens while it is empty
            force_regenerate: Skip restoring and always generate

        Returns:
            bool: True if the queue holds at least one technique afterwards
        """
        if catalog is None or catalog.is_empty:
            logger.debug("Catalog not loaded yet, queue initialization deferred")
            return False

        if not force_regenerate and self._restore(catalog):
            return True

        return not self.generate_queue(catalog).is_empty

    def next_track(self) -> Optional[Technique]:
        """
        Advance to the next technique

        Returns:
            Technique: The new current technique, or None when the queue is
            empty or already at its last technique (state unchanged)
        """
        with self._lock:
            if self._state.is_empty or self._state.is_at_end:
                return None
            self._state.cursor += 1
            snapshot = self._state.copy()

        self._persist(snapshot)
        self._publish(EventType.CURRENT_TECHNIQUE_CHANGED, snapshot.current_technique)
        return snapshot.current_technique

    def set_playing(self, playing: bool) -> None:
        """Record whether the playback widget is playing (never used to resume)"""
        with self._lock:
            if playing and self._state.is_empty:
                logger.warning("Ignoring playing flag for an empty queue")
                return
            if self._state.is_playing == playing:
                return
            self._state.is_playing = playing
            snapshot = self._state.copy()

        self._persist(snapshot)
        self._publish(EventType.PLAYING_CHANGED, playing)

    def reset_queue(self) -> None:
        """Clear the queue"""
        with self._lock:
            self._state = QueueState()
            snapshot = self._state.copy()

        logger.info("Play queue reset")
        self._persist(snapshot)
        self._publish_queue_changed(snapshot)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _shuffle(self, techniques: List[Technique]) -> List[Technique]:
        """Fisher-Yates shuffle of a copy"""
        shuffled = list(techniques)
        for i in range(len(shuffled) - 1, 0, -1):
            j = self._rng.randint(0, i)
            shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
        return shuffled

    def _restore(self, catalog: Catalog) -> bool:
        try:
            stored = self._persistence.load()
        except StorageError as e:
            logger.error("Failed to load saved play queue: %s", e)
            self._notifications.notify_error("Failed to load saved play queue")
            return False

        if stored is None or not stored.technique_ids:
            return False

        techniques: List[Technique] = []
        seen = set()
        for technique_id in stored.technique_ids:
            technique = catalog.get_by_id(technique_id)
            if technique is None or technique_id in seen:
                continue
            seen.add(technique_id)
            techniques.append(technique)

        dropped = len(stored.technique_ids) - len(techniques)
        if not techniques:
            logger.error("None of the %s saved technique ids exist in the catalog", dropped)
            self._notifications.notify_error("Saved play queue no longer matches the catalog")
            return False
        if dropped:
            logger.warning("Dropped %s saved technique ids missing from the catalog", dropped)

        cursor = stored.cursor
        if cursor >= len(techniques):
            logger.warning("Saved cursor %s clamped to %s", cursor, len(techniques) - 1)
            cursor = len(techniques) - 1
        elif cursor < 0:
            cursor = 0

        with self._lock:
            # Playback is never resumed automatically
            self._state = QueueState(items=techniques, cursor=cursor, is_playing=False)
            snapshot = self._state.copy()

        logger.info("Restored play queue with %s techniques at position %s", len(techniques), cursor)
        self._persist(snapshot)
        self._publish_queue_changed(snapshot)
        return True

    def _persist(self, snapshot: QueueState) -> None:
        try:
            self._persistence.save(snapshot)
        except StorageError as e:
            logger.error("Failed to save play queue: %s", e)
            self._notifications.notify_error("Failed to save play queue")

    def _publish_queue_changed(self, snapshot: QueueState) -> None:
        self._publish(EventType.QUEUE_CHANGED, snapshot)
        self._publish(EventType.CURRENT_TECHNIQUE_CHANGED, snapshot.current_technique)

    def _publish(self, event_type: EventType, data) -> None:
        if self._event_bus is not None:
            self._event_bus.publish_sync(event_type, data)
