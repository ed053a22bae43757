"""
Shodan Trainer Core Module
"""

from .event_bus import EventBus, EventType
from .database import DatabaseManager
from .key_value_store import SqliteKeyValueStore, StorageError
from .timers import ThreadingTimerFactory, VirtualTimerFactory

__all__ = [
    'EventBus',
    'EventType',
    'DatabaseManager',
    'SqliteKeyValueStore',
    'StorageError',
    'ThreadingTimerFactory',
    'VirtualTimerFactory',
]
