"""
Service Layer Module
"""

from .config_service import ConfigService
from .technique_filter import filter_technique, filter_techniques
from .notification_service import NotificationService
from .queue_persistence_service import QueuePersistenceService
from .play_queue_service import PlayQueueService
from .catalog_service import CatalogService, CatalogError, parse_catalog
from .preferences_service import PreferencesService
from .trainer_facade import TrainerFacade

__all__ = [
    'ConfigService',
    'filter_technique',
    'filter_techniques',
    'NotificationService',
    'QueuePersistenceService',
    'PlayQueueService',
    'CatalogService',
    'CatalogError',
    'parse_catalog',
    'PreferencesService',
    'TrainerFacade',
]
