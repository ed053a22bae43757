"""
Database Management Module

Provides a small SQLite encapsulation backing the persistent key-value store.
"""

import sqlite3
import os
import sys
from typing import Optional, List, Dict, Any
from pathlib import Path
import threading
from contextlib import contextmanager
import logging

logger = logging.getLogger(__name__)


class DatabaseManager:
    """
    Database Manager

    Owns a single SQLite connection guarded by a re-entrant lock. One instance
    is created by the composition root and handed to the store; there is no
    process-wide singleton.

    Example:
        db = DatabaseManager("trainer.db")

        row = db.fetch_one("SELECT value FROM app_state WHERE key = ?", ("k",))

        with db.transaction():
            db.execute("INSERT OR REPLACE INTO app_state(key, value) VALUES(?, ?)", ("k", "v"))
    """

    def __init__(self, db_path: Optional[str] = None):
        self._db_path = db_path or self._get_default_db_path()
        self._lock = threading.RLock()
        self._in_transaction = False
        self._connection: Optional[sqlite3.Connection] = None
        self._init_schema()

    @staticmethod
    def _get_default_db_path() -> str:
        """Get the default database path in the user data directory"""
        if sys.platform == "win32":
            base = Path(os.environ.get("APPDATA", Path.home() / "AppData" / "Roaming"))
        elif sys.platform == "darwin":
            base = Path.home() / "Library" / "Application Support"
        else:
            base = Path(os.environ.get("XDG_DATA_HOME", Path.home() / ".local" / "share"))

        db_dir = base / "shodan-trainer"
        db_dir.mkdir(parents=True, exist_ok=True)
        return str(db_dir / "trainer_state.db")

    @property
    def path(self) -> str:
        return self._db_path

    @property
    def _conn(self) -> sqlite3.Connection:
        """Get the shared connection, opening it lazily"""
        if self._connection is None:
            # check_same_thread=False: timer threads may read state; the lock serializes access
            self._connection = sqlite3.connect(self._db_path, timeout=30.0, check_same_thread=False)
            self._connection.row_factory = sqlite3.Row
            if self._db_path != ":memory:":
                self._connection.execute("PRAGMA journal_mode=WAL")
                self._connection.execute("PRAGMA synchronous=NORMAL")
        return self._connection

    @contextmanager
    def transaction(self):
        """Transaction context manager

        Write operations within this context are not automatically committed,
        but are committed or rolled back collectively when the context ends.
        """
        with self._lock:
            conn = self._conn
            self._in_transaction = True
            try:
                yield conn
                conn.commit()
            except Exception:
                conn.rollback()
                raise
            finally:
                self._in_transaction = False

    def execute(self, sql: str, params: tuple = ()) -> sqlite3.Cursor:
        """Execute SQL statement

        Commits immediately unless called inside transaction().
        """
        with self._lock:
            cursor = self._conn.execute(sql, params)
            if not self._in_transaction and not sql.lstrip().upper().startswith("SELECT"):
                self._conn.commit()
            return cursor

    def fetch_one(self, sql: str, params: tuple = ()) -> Optional[Dict[str, Any]]:
        """Fetch single record"""
        with self._lock:
            row = self.execute(sql, params).fetchone()
            return dict(row) if row else None

    def fetch_all(self, sql: str, params: tuple = ()) -> List[Dict[str, Any]]:
        """Fetch all records"""
        with self._lock:
            return [dict(row) for row in self.execute(sql, params).fetchall()]

    def commit(self) -> None:
        """Commit the pending transaction"""
        with self._lock:
            self._conn.commit()

    def _init_schema(self) -> None:
        """Initialize database Schema"""
        from core.schema import get_all_schema_statements

        for statement in get_all_schema_statements():
            self.execute(statement.strip())
        logger.debug("Database schema ready: %s", self._db_path)

    def close(self) -> None:
        """Close the connection"""
        with self._lock:
            if self._connection is not None:
                self._connection.close()
                self._connection = None
