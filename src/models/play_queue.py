"""
Play queue data models
"""

from dataclasses import dataclass, field
from typing import List, Optional

from .technique import Technique


@dataclass
class QueueState:
    """
    Play queue state

    Invariants: an empty queue has cursor None and is not playing; otherwise
    0 <= cursor < len(items).
    """

    items: List[Technique] = field(default_factory=list)
    cursor: Optional[int] = None
    is_playing: bool = False

    @property
    def current_technique(self) -> Optional[Technique]:
        """Technique at the cursor, or None"""
        if self.cursor is None or not (0 <= self.cursor < len(self.items)):
            return None
        return self.items[self.cursor]

    @property
    def is_empty(self) -> bool:
        return not self.items

    @property
    def is_at_end(self) -> bool:
        return self.cursor is not None and self.cursor >= len(self.items) - 1

    def copy(self) -> "QueueState":
        return QueueState(items=list(self.items), cursor=self.cursor, is_playing=self.is_playing)


@dataclass
class StoredQueueState:
    """Persisted projection of QueueState (ids instead of techniques)"""

    technique_ids: List[int] = field(default_factory=list)
    cursor: int = -1
    is_playing: bool = False

    @classmethod
    def from_state(cls, state: QueueState) -> "StoredQueueState":
        return cls(
            technique_ids=[t.id for t in state.items],
            cursor=state.cursor if state.cursor is not None else -1,
            is_playing=state.is_playing,
        )
