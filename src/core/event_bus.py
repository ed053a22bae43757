# -*- coding: utf-8 -*-
"""
Event Bus Module - Publish-Subscribe Pattern Implementation

Lets UI surfaces observe queue, notification, catalog and preference changes
without the services knowing about them.

Design Notes:
- Pure Python, does not depend on any UI framework
- Callbacks run synchronously on the publishing thread
- One instance is created by the composition root; there is no global instance
"""

from typing import Dict, Callable, Any
from enum import Enum
import threading
import uuid
import logging

logger = logging.getLogger(__name__)


class EventType(Enum):
    """Event type enumeration"""

    # Play queue events
    QUEUE_CHANGED = "queue_changed"
    CURRENT_TECHNIQUE_CHANGED = "current_technique_changed"
    PLAYING_CHANGED = "playing_changed"

    # Catalog events
    CATALOG_LOADED = "catalog_loaded"

    # Preference events
    PREFERENCES_CHANGED = "preferences_changed"

    # Notification events
    NOTIFICATION_CHANGED = "notification_changed"


class EventBus:
    """
    Event Bus

    Usage example:
        event_bus = EventBus()

        def on_queue_changed(state):
            logger.info("Queue now holds %s techniques", len(state.items))

        sub_id = event_bus.subscribe(EventType.QUEUE_CHANGED, on_queue_changed)
        event_bus.publish_sync(EventType.QUEUE_CHANGED, state)
        event_bus.unsubscribe(sub_id)
    """

    def __init__(self):
        self._subscribers: Dict[EventType, Dict[str, Callable]] = {}
        self._sub_lock = threading.Lock()

    def subscribe(
        self,
        event_type: EventType,
        callback: Callable[[Any], None]
    ) -> str:
        """
        Subscribe to event

        Args:
            event_type: Event type
            callback: Callback function, receiving event data as an argument

        Returns:
            str: Subscription ID, used for unsubscription
        """
        subscription_id = str(uuid.uuid4())

        with self._sub_lock:
            if event_type not in self._subscribers:
                self._subscribers[event_type] = {}
            self._subscribers[event_type][subscription_id] = callback

        return subscription_id

    def unsubscribe(self, subscription_id: str) -> bool:
        """
        Unsubscribe

        Args:
            subscription_id: The ID returned when subscribing

        Returns:
            bool: Whether the unsubscription was successful
        """
        with self._sub_lock:
            for event_type in self._subscribers:
                if subscription_id in self._subscribers[event_type]:
                    del self._subscribers[event_type][subscription_id]
                    return True
        return False

    def publish_sync(self, event_type: EventType, data: Any = None) -> None:
        """
        Publish event synchronously

        All callbacks are executed in the current thread, in subscription order.

        Args:
            event_type: Event type
            data: Event data
        """
        with self._sub_lock:
            callbacks = list(self._subscribers.get(event_type, {}).values())

        for callback in callbacks:
            self._safe_call(callback, data)

    def _safe_call(self, callback: Callable, data: Any) -> None:
        """Safely call a callback function"""
        try:
            callback(data)
        except Exception as e:
            # Subscriber faults must not break the publishing state machine
            logger.error("Event callback execution error: %s", e)

    def clear(self) -> None:
        """Clear all subscriptions"""
        with self._sub_lock:
            self._subscribers.clear()
