"""
Key-Value Store Module

Persists string values in the app_state table, the same table the services
use for any state that has to survive a restart.
"""

from typing import Mapping, Optional
import sqlite3
import logging

from core.database import DatabaseManager

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """Raised when the persistent store cannot be read or written."""


class SqliteKeyValueStore:
    """
    SQLite-backed key-value store

    Example:
        store = SqliteKeyValueStore(DatabaseManager(":memory:"))
        store.set_item("shodan.play_queue", "[1, 2, 3]")
        store.get_item("shodan.play_queue")   # '[1, 2, 3]'
    """

    def __init__(self, db: DatabaseManager):
        self._db = db

    def get_item(self, key: str) -> Optional[str]:
        try:
            row = self._db.fetch_one("SELECT value FROM app_state WHERE key = ?", (key,))
        except sqlite3.Error as e:
            raise StorageError(f"Failed to read '{key}': {e}") from e
        if not row:
            return None
        return row.get("value")

    def set_item(self, key: str, value: str) -> None:
        try:
            self._db.execute(
                "INSERT OR REPLACE INTO app_state(key, value, updated_at) VALUES(?, ?, CURRENT_TIMESTAMP)",
                (key, value),
            )
        except sqlite3.Error as e:
            raise StorageError(f"Failed to write '{key}': {e}") from e

    def set_items(self, items: Mapping[str, str]) -> None:
        """Write all items in one transaction"""
        try:
            with self._db.transaction():
                for key, value in items.items():
                    self._db.execute(
                        "INSERT OR REPLACE INTO app_state(key, value, updated_at) VALUES(?, ?, CURRENT_TIMESTAMP)",
                        (key, value),
                    )
        except sqlite3.Error as e:
            raise StorageError(f"Failed to write {sorted(items)}: {e}") from e

    def remove_item(self, key: str) -> None:
        try:
            self._db.execute("DELETE FROM app_state WHERE key = ?", (key,))
        except sqlite3.Error as e:
            raise StorageError(f"Failed to remove '{key}': {e}") from e
