"""
Play Queue Persistence Service

Serializes the play queue into the key-value store and reads it back.

- The queue is stored as an ordered list of technique ids
- The play state (cursor + diagnostic playing flag) is stored under its own key
- Every save rewrites the whole projection
"""

from __future__ import annotations

from typing import Any, Optional
import json
import logging

from core.key_value_store import StorageError
from core.ports.storage import IKeyValueStore
from models.play_queue import QueueState, StoredQueueState
from services.config_service import ConfigService

logger = logging.getLogger(__name__)


class QueuePersistenceService:
    DEFAULT_QUEUE_KEY = "shodan.play_queue"
    DEFAULT_STATE_KEY = "shodan.play_state"

    def __init__(self, store: IKeyValueStore, config: Optional[ConfigService] = None):
        self._store = store
        config = config or ConfigService()
        self._queue_key = config.get("storage.keys.play_queue", self.DEFAULT_QUEUE_KEY)
        self._state_key = config.get("storage.keys.play_state", self.DEFAULT_STATE_KEY)

    def save(self, state: QueueState) -> None:
        """
        Persist the queue projection

        Raises:
            StorageError: If the store rejects a write
        """
        stored = StoredQueueState.from_state(state)
        self._store.set_items({
            self._queue_key: json.dumps(stored.technique_ids),
            self._state_key: json.dumps({"current_index": stored.cursor, "is_playing": stored.is_playing}),
        })

    def load(self) -> Optional[StoredQueueState]:
        """
        Read the persisted queue projection

        Returns:
            StoredQueueState, or None when no queue was ever saved

        Raises:
            StorageError: If the store fails or holds malformed data
        """
        raw_ids = self._store.get_item(self._queue_key)
        if raw_ids is None:
            return None

        ids_data = self._decode(self._queue_key, raw_ids)
        if not isinstance(ids_data, list):
            raise StorageError(f"'{self._queue_key}' does not hold a list")

        technique_ids = [i for i in ids_data if isinstance(i, int) and not isinstance(i, bool)]
        if ids_data and not technique_ids:
            raise StorageError(f"'{self._queue_key}' holds no technique ids")
        if len(technique_ids) != len(ids_data):
            logger.warning("Dropped %s non-integer ids from the saved queue",
                           len(ids_data) - len(technique_ids))

        cursor, is_playing = self._load_play_state()
        return StoredQueueState(technique_ids=technique_ids, cursor=cursor, is_playing=is_playing)

    def _load_play_state(self) -> tuple:
        raw_state = self._store.get_item(self._state_key)
        if raw_state is None:
            return (-1, False)

        data = self._decode(self._state_key, raw_state)

        # Older layouts stored the bare cursor integer
        if isinstance(data, int) and not isinstance(data, bool):
            return (data, False)

        if not isinstance(data, dict):
            raise StorageError(f"'{self._state_key}' does not hold a play state")

        cursor = data.get("current_index")
        if isinstance(cursor, bool) or not isinstance(cursor, int):
            cursor = -1
        return (cursor, bool(data.get("is_playing", False)))

    @staticmethod
    def _decode(key: str, raw: str) -> Any:
        try:
            return json.loads(raw)
        except ValueError as e:
            raise StorageError(f"'{key}' holds malformed JSON: {e}") from e
