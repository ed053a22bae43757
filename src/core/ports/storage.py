# -*- coding: utf-8 -*-
"""
Storage Port Interface

Defines the synchronous string key-value store the services persist into.
"""

from __future__ import annotations

from typing import Mapping, Optional, Protocol, runtime_checkable


@runtime_checkable
class IKeyValueStore(Protocol):
    """Persistent Key-Value Store Interface

    Current implementation: SqliteKeyValueStore (app_state table).
    Any method may raise StorageError on quota or corruption problems.
    """

    def get_item(self, key: str) -> Optional[str]:
        """Read a value

        Args:
            key: Storage key

        Returns:
            The stored string, or None when the key is absent
        """
        ...

    def set_item(self, key: str, value: str) -> None:
        """Write a value, replacing any previous one

        Args:
            key: Storage key
            value: String value
        """
        ...

    def set_items(self, items: Mapping[str, str]) -> None:
        """Write several values atomically

        Either every key is written or none is.

        Args:
            items: Mapping of storage key to string value
        """
        ...

    def remove_item(self, key: str) -> None:
        """Delete a key (no-op when absent)"""
        ...
