"""
Preferences Service Module

Loads, validates, updates and persists the user's preference selection.
Only the user's choices are stored; the available levels and sources always
come from configuration.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Any, Iterable, Optional, Tuple
import json
import logging

from core.event_bus import EventBus, EventType
from core.key_value_store import StorageError
from core.ports.storage import IKeyValueStore
from models.preferences import PreferenceSelection, UserPreferences
from services.config_service import ConfigService
from services.notification_service import NotificationService

logger = logging.getLogger(__name__)

_UNSET = object()


class PreferencesService:
    """
    Preferences Service

    Every effective change is saved once and announced with
    PREFERENCES_CHANGED carrying the new PreferenceSelection.

    Example:
        prefs = PreferencesService(store, notifications, config, event_bus)
        prefs.update_selected_levels([5, 4])
        prefs.batch_update(selected_source="aikicircle", include_unclassified=True)
        prefs.selection.selected_levels     # frozenset({4, 5})
    """

    DEFAULT_KEY = "shodan.preferences"

    def __init__(
        self,
        store: IKeyValueStore,
        notifications: NotificationService,
        config: Optional[ConfigService] = None,
        event_bus: Optional[EventBus] = None,
    ):
        self._store = store
        self._notifications = notifications
        self._event_bus = event_bus
        config = config or ConfigService()

        self._key = config.get("storage.keys.preferences", self.DEFAULT_KEY)
        self._available_levels: Tuple[int, ...] = tuple(config.get("catalog.levels", [6, 5, 4, 3, 2, 1]))
        self._available_sources: Tuple[str, ...] = tuple(config.get("catalog.sources", ["aikikai", "aikicircle"]))

        default_source = config.get("preferences.default_source", self._available_sources[0])
        if default_source not in self._available_sources:
            default_source = self._available_sources[0]
        self._defaults = UserPreferences(
            selected_levels=frozenset(self._available_levels),
            selected_source=default_source,
            include_unclassified=bool(config.get("preferences.default_include_unclassified", False)),
        )

        self._prefs = self._load()

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def selection(self) -> PreferenceSelection:
        """Sealed snapshot for queue generation"""
        return PreferenceSelection.from_user_preferences(
            self._prefs, self._available_levels, self._available_sources
        )

    @property
    def user_preferences(self) -> UserPreferences:
        return self._prefs

    @property
    def available_levels(self) -> Tuple[int, ...]:
        return self._available_levels

    @property
    def available_sources(self) -> Tuple[str, ...]:
        return self._available_sources

    @property
    def is_valid(self) -> bool:
        return bool(self._prefs.selected_levels) and self._prefs.selected_source in self._available_sources

    # ------------------------------------------------------------------
    # Updates
    # ------------------------------------------------------------------

    def update_selected_levels(self, levels: Iterable[int]) -> bool:
        """
        Select levels

        Unknown levels are dropped. An empty result is rejected.

        Returns:
            bool: True if the selection was accepted
        """
        return self.batch_update(selected_levels=levels)

    def update_selected_source(self, source: str) -> bool:
        """Select the grading source; unknown sources are rejected"""
        return self.batch_update(selected_source=source)

    def set_include_unclassified(self, value: bool) -> None:
        self.batch_update(include_unclassified=value)

    def toggle_include_unclassified(self) -> None:
        self.batch_update(include_unclassified=not self._prefs.include_unclassified)

    def reset_to_defaults(self) -> None:
        self._apply(self._defaults)

    def batch_update(
        self,
        selected_levels: Any = _UNSET,
        selected_source: Any = _UNSET,
        include_unclassified: Any = _UNSET,
    ) -> bool:
        """
        Update several fields with a single save and a single event

        Returns:
            bool: False if any provided value was rejected (nothing is changed then)
        """
        changes = {}

        if selected_levels is not _UNSET:
            levels = frozenset(lvl for lvl in selected_levels if lvl in self._available_levels)
            if not levels:
                logger.warning("Rejected empty level selection: %r", selected_levels)
                return False
            changes["selected_levels"] = levels

        if selected_source is not _UNSET:
            if selected_source not in self._available_sources:
                logger.warning("Rejected unknown grading source: %r", selected_source)
                return False
            changes["selected_source"] = selected_source

        if include_unclassified is not _UNSET:
            changes["include_unclassified"] = bool(include_unclassified)

        self._apply(replace(self._prefs, **changes))
        return True

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def _apply(self, prefs: UserPreferences) -> None:
        if prefs == self._prefs:
            return
        self._prefs = prefs
        self._save()
        if self._event_bus is not None:
            self._event_bus.publish_sync(EventType.PREFERENCES_CHANGED, self.selection)

    def _load(self) -> UserPreferences:
        try:
            raw = self._store.get_item(self._key)
            if raw is not None:
                prefs = self._validate(json.loads(raw))
                if prefs is not None:
                    return prefs
                logger.warning("Stored preferences are invalid, using defaults")
        except (StorageError, ValueError) as e:
            logger.error("Error loading preferences from storage: %s", e)
            self._notifications.notify_error("Failed to load preferences from storage")

        # Defaults are written back immediately
        self._prefs = self._defaults
        self._save()
        return self._defaults

    def _validate(self, data: Any) -> Optional[UserPreferences]:
        if not isinstance(data, dict):
            return None

        levels = data.get("selected_levels")
        source = data.get("selected_source")
        include = data.get("include_unclassified")
        if not isinstance(levels, list) or not isinstance(source, str) or not isinstance(include, bool):
            return None

        valid_levels = frozenset(lvl for lvl in levels if lvl in self._available_levels)
        if not valid_levels or source not in self._available_sources:
            return None

        return UserPreferences(
            selected_levels=valid_levels,
            selected_source=source,
            include_unclassified=include,
        )

    def _save(self) -> None:
        try:
            self._store.set_item(self._key, json.dumps(self._prefs.to_dict()))
        except StorageError as e:
            logger.error("Error saving preferences to storage: %s", e)
            self._notifications.notify_error("Failed to save preferences to storage")
