# -*- coding: utf-8 -*-
"""
Application Container Module

Defines the dependency container for the application, holding all service instances centrally.

Design Principles:
- Only the entry point holds the complete AppContainer
- Collaborators (playback widget, preference editor) access services via the facade
- Each piece of state (queue, notifications) has exactly one owning service
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from app.protocols import IConfigService, IEventBus, IKeyValueStore, ITimerFactory
    from core.database import DatabaseManager
    from services.trainer_facade import TrainerFacade


@dataclass
class AppContainer:
    """Application Dependency Container

    Holds all service instances centrally, serving as the composition root for dependency injection.

    Usage Example:
        container = AppContainerFactory.create()
        container.facade.start()
    """

    # === Public Attributes ===
    config: "IConfigService"
    event_bus: "IEventBus"
    store: "IKeyValueStore"
    timers: "ITimerFactory"
    facade: "TrainerFacade"

    # === Internal Service References ===
    _db: "DatabaseManager" = field(default=None, repr=False)
    _notifications: Any = field(default=None, repr=False)
    _catalog: Any = field(default=None, repr=False)
    _preferences: Any = field(default=None, repr=False)
    _play_queue: Any = field(default=None, repr=False)

    def cleanup(self) -> None:
        """Clean up all resources

        Should be called when the application exits.
        """
        if self.facade is not None:
            self.facade.shutdown()

        if self.event_bus is not None and hasattr(self.event_bus, 'clear'):
            self.event_bus.clear()

        if self._db is not None:
            self._db.close()
