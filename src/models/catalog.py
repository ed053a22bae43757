"""
Catalog data model
"""

from dataclasses import dataclass, field
from typing import Dict, Iterator, Optional, Tuple

from .technique import Technique


@dataclass(frozen=True)
class Catalog:
    """
    Immutable technique catalog

    Holds the ordered techniques of one catalog document version.
    """

    version: int = 0
    techniques: Tuple[Technique, ...] = ()
    _by_id: Dict[int, Technique] = field(default_factory=dict, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "techniques", tuple(self.techniques))
        object.__setattr__(self, "_by_id", {t.id: t for t in self.techniques})

    def __len__(self) -> int:
        return len(self.techniques)

    def __iter__(self) -> Iterator[Technique]:
        return iter(self.techniques)

    @property
    def is_empty(self) -> bool:
        return not self.techniques

    def get_by_id(self, technique_id: int) -> Optional[Technique]:
        return self._by_id.get(technique_id)
