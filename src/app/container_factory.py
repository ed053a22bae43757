# -*- coding: utf-8 -*-
"""
Container Factory Module

Responsible for creating and assembling all application dependencies.

This is the **only** instance creation point (Composition Root) for the application.
All service instance creation should be done here, not within individual services.
"""

from __future__ import annotations

import logging
import random
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from app.container import AppContainer
    from app.protocols import ITimerFactory

logger = logging.getLogger(__name__)


class AppContainerFactory:
    """Application Container Factory

    Usage Example:
        # In main.py (Qt event loop drives notification expiry)
        container = AppContainerFactory.create(use_qt_timer=True)

        # In tests (virtual time, in-memory database)
        container = AppContainerFactory.create_for_testing(config_path)
        container.timers.advance(3000)
    """

    @staticmethod
    def create(
        config_path: str = "config/default_config.yaml",
        use_qt_timer: bool = True,
    ) -> "AppContainer":
        """Create Application Container

        Args:
            config_path: Configuration file path
            use_qt_timer: Whether notification timers run on the Qt event loop
                          - True: QtTimerFactory (requires a QCoreApplication)
                          - False: ThreadingTimerFactory

        Returns:
            A configured AppContainer instance
        """
        from core.database import DatabaseManager
        from services.config_service import ConfigService

        logger.info("Creating application container...")

        config = ConfigService(config_path)
        db = DatabaseManager(config.get("storage.db_path") or None)

        timers: "ITimerFactory"
        if use_qt_timer:
            try:
                from ui.qt_timer import QtTimerFactory
                timers = QtTimerFactory()
                logger.debug("Using QtTimerFactory")
            except (ImportError, RuntimeError) as e:
                from core.timers import ThreadingTimerFactory
                logger.warning("Qt timers unavailable (%s), using threading timers", e)
                timers = ThreadingTimerFactory()
        else:
            from core.timers import ThreadingTimerFactory
            timers = ThreadingTimerFactory()
            logger.debug("Using ThreadingTimerFactory (Non-Qt mode)")

        container = AppContainerFactory._assemble(config, db, timers)
        logger.info("Application container creation complete")
        return container

    @staticmethod
    def create_for_testing(
        config_path: str = "config/default_config.yaml",
        db_path: str = ":memory:",
        rng: Optional[random.Random] = None,
    ) -> "AppContainer":
        """Create a container for testing

        Uses an in-memory database and virtual-time timers, independent of Qt.

        Args:
            config_path: Configuration file path
            db_path: Database path (defaults to in-memory database)
            rng: Random source for shuffling (seed it for reproducible queues)

        Returns:
            A configured test AppContainer instance
        """
        from core.database import DatabaseManager
        from core.timers import VirtualTimerFactory
        from services.config_service import ConfigService

        logger.info("Creating test application container...")

        config = ConfigService(config_path)
        db = DatabaseManager(db_path)
        return AppContainerFactory._assemble(config, db, VirtualTimerFactory(), rng)

    @staticmethod
    def _assemble(config, db, timers, rng: Optional[random.Random] = None) -> "AppContainer":
        from app.container import AppContainer
        from core.event_bus import EventBus
        from core.key_value_store import SqliteKeyValueStore
        from services.catalog_service import CatalogService
        from services.notification_service import NotificationService
        from services.play_queue_service import PlayQueueService
        from services.preferences_service import PreferencesService
        from services.queue_persistence_service import QueuePersistenceService
        from services.trainer_facade import TrainerFacade

        # === 1. Infrastructure Layer ===
        event_bus = EventBus()
        store = SqliteKeyValueStore(db)

        # === 2. Notifications (every other service reports through it) ===
        notifications = NotificationService(
            timers,
            event_bus=event_bus,
            transient_duration_ms=config.get("notifications.transient_duration_ms", 3000),
        )

        # === 3. Service Layer ===
        catalog = CatalogService(store, notifications, config=config, event_bus=event_bus)
        preferences = PreferencesService(store, notifications, config=config, event_bus=event_bus)
        play_queue = PlayQueueService(
            QueuePersistenceService(store, config=config),
            notifications,
            event_bus=event_bus,
            preference_provider=lambda: preferences.selection,
            rng=rng,
        )

        # === 4. Facade ===
        facade = TrainerFacade(
            catalog_service=catalog,
            preferences=preferences,
            play_queue=play_queue,
            notifications=notifications,
            event_bus=event_bus,
        )

        return AppContainer(
            config=config,
            event_bus=event_bus,
            store=store,
            timers=timers,
            facade=facade,
            _db=db,
            _notifications=notifications,
            _catalog=catalog,
            _preferences=preferences,
            _play_queue=play_queue,
        )
