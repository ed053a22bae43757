"""
Data Models Module
"""

from .technique import Technique
from .catalog import Catalog
from .preferences import PreferenceSelection, UserPreferences
from .play_queue import QueueState, StoredQueueState
from .notification import (
    Notification,
    NotificationKind,
    NotificationPersistence,
    NotificationState,
)

__all__ = [
    'Technique',
    'Catalog',
    'PreferenceSelection',
    'UserPreferences',
    'QueueState',
    'StoredQueueState',
    'Notification',
    'NotificationKind',
    'NotificationPersistence',
    'NotificationState',
]
