"""
Catalog Service Module

Loads the technique catalog document and remembers which catalog version the
user last saw, so a newer catalog can force a fresh queue.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional
import json
import logging

from core.event_bus import EventBus, EventType
from core.key_value_store import StorageError
from core.ports.storage import IKeyValueStore
from models.catalog import Catalog
from models.notification import NotificationKind, NotificationPersistence
from models.technique import Technique
from services.config_service import ConfigService
from services.notification_service import NotificationService

logger = logging.getLogger(__name__)


class CatalogError(Exception):
    """Raised when a catalog document cannot be parsed."""


def parse_catalog(document: Any, sources: Iterable[str]) -> Catalog:
    """
    Build a Catalog from a decoded catalog document

    Args:
        document: Decoded JSON, {"version": int, "techniques": [...]}
            ("items" is accepted in place of "techniques")
        sources: Known grading sources

    Raises:
        CatalogError: If the document shape is invalid or ids repeat
    """
    if not isinstance(document, dict):
        raise CatalogError("Catalog document is not an object")

    version = document.get("version", 0)
    if isinstance(version, bool) or not isinstance(version, int):
        raise CatalogError(f"Invalid catalog version: {version!r}")

    entries = document.get("techniques", document.get("items"))
    if not isinstance(entries, list):
        raise CatalogError("Catalog document has no technique list")

    sources = list(sources)
    techniques: List[Technique] = []
    seen = set()
    for entry in entries:
        if not isinstance(entry, dict):
            raise CatalogError(f"Invalid technique entry: {entry!r}")
        try:
            technique = Technique.from_dict(entry, sources)
        except ValueError as e:
            raise CatalogError(str(e)) from e
        if technique.id in seen:
            raise CatalogError(f"Duplicate technique id: {technique.id}")
        seen.add(technique.id)
        techniques.append(technique)

    return Catalog(version=version, techniques=tuple(techniques))


class CatalogService:
    """
    Catalog Service

    Example:
        catalog_service = CatalogService(store, notifications, config)
        if catalog_service.load():
            catalog_service.catalog.get_by_id(12)
    """

    DEFAULT_VERSION_KEY = "shodan.catalog_version"

    def __init__(
        self,
        store: IKeyValueStore,
        notifications: NotificationService,
        config: Optional[ConfigService] = None,
        event_bus: Optional[EventBus] = None,
    ):
        self._store = store
        self._notifications = notifications
        self._config = config or ConfigService()
        self._event_bus = event_bus

        self._version_key = self._config.get("storage.keys.catalog_version", self.DEFAULT_VERSION_KEY)
        self._sources = list(self._config.get("catalog.sources", []))

        self._catalog = Catalog()
        self._is_new_version = False
        self._is_loading = False
        self._error: Optional[str] = None

    @property
    def catalog(self) -> Catalog:
        return self._catalog

    @property
    def version(self) -> int:
        return self._catalog.version

    @property
    def is_new_version(self) -> bool:
        """True if the last load brought a newer version than the one stored"""
        return self._is_new_version

    @property
    def is_loading(self) -> bool:
        return self._is_loading

    @property
    def error(self) -> Optional[str]:
        return self._error

    def get_technique_by_id(self, technique_id: int) -> Optional[Technique]:
        return self._catalog.get_by_id(technique_id)

    def load(self, path: Optional[str] = None) -> bool:
        """
        Load the catalog document from disk

        Args:
            path: Catalog file; defaults to the "catalog.path" setting

        Returns:
            bool: True if the catalog was loaded
        """
        catalog_path = Path(path or self._config.get("catalog.path", "data/techniques.json"))
        self._is_loading = True
        self._error = None
        try:
            with open(catalog_path, "r", encoding="utf-8") as f:
                document = json.load(f)
            return self.load_document(document)
        except (OSError, ValueError) as e:
            # json.JSONDecodeError is a ValueError
            self._fail(f"Failed to read catalog {catalog_path}: {e}")
            return False
        finally:
            self._is_loading = False

    def load_document(self, document: Dict[str, Any]) -> bool:
        """Install an already decoded catalog document"""
        try:
            catalog = parse_catalog(document, self._sources)
        except CatalogError as e:
            self._fail(f"Invalid catalog document: {e}")
            return False

        self._catalog = catalog
        self._error = None

        stored_version = self._read_stored_version()
        self._is_new_version = stored_version is not None and catalog.version > stored_version
        self._write_stored_version(catalog.version)

        logger.info(
            "Loaded catalog version %s with %s techniques%s",
            catalog.version,
            len(catalog),
            " (new version)" if self._is_new_version else "",
        )
        if self._event_bus is not None:
            self._event_bus.publish_sync(EventType.CATALOG_LOADED, catalog)
        return True

    def _fail(self, message: str) -> None:
        logger.error(message)
        self._error = "Failed to load techniques data"
        self._notifications.add_notification(
            self._error,
            NotificationKind.ERROR,
            NotificationPersistence.PERMANENT,
        )

    def _read_stored_version(self) -> Optional[int]:
        try:
            raw = self._store.get_item(self._version_key)
        except StorageError as e:
            logger.error("Failed to read stored catalog version: %s", e)
            self._notifications.notify_error("Failed to read stored catalog version")
            return None

        if raw is None:
            return None
        try:
            return int(raw)
        except ValueError:
            logger.warning("Ignoring malformed stored catalog version: %r", raw)
            return None

    def _write_stored_version(self, version: int) -> None:
        try:
            self._store.set_item(self._version_key, str(version))
        except StorageError as e:
            logger.error("Failed to save catalog version: %s", e)
            self._notifications.notify_error("Failed to save catalog version")
