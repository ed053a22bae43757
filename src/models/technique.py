"""
Technique data model
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Mapping, Optional


@dataclass(frozen=True)
class Technique:
    """
    Technique data model

    One short audio clip of the catalog. `levels` maps a grading source
    (e.g. "aikikai") to the kyu level the technique is graded at there;
    a technique without any level is unclassified.
    """

    id: int
    filename: str = ""
    category: str = ""
    attack: str = ""
    technique: Optional[str] = None
    levels: Mapping[str, int] = field(default_factory=dict)

    def __hash__(self) -> int:
        return hash(self.id)

    def level_for(self, source: str) -> Optional[int]:
        """Level for a grading source, or None"""
        return self.levels.get(source)

    def is_unclassified(self, sources: Iterable[str]) -> bool:
        """True when the technique carries no level for any of the given sources"""
        return all(source not in self.levels for source in sources)

    @property
    def display_name(self) -> str:
        """Display name"""
        parts = [p for p in (self.attack, self.technique or self.category) if p]
        return " ".join(parts) if parts else self.filename

    @classmethod
    def from_dict(cls, data: Dict[str, Any], sources: Iterable[str]) -> "Technique":
        """
        Create from a catalog document entry

        Level attributes appear as top-level keys named after the sources.

        Raises:
            ValueError: If the entry has no integer id
        """
        raw_id = data.get("id")
        if isinstance(raw_id, bool) or not isinstance(raw_id, int):
            raise ValueError(f"Technique entry without integer id: {data!r}")

        levels = {}
        for source in sources:
            value = data.get(source)
            if isinstance(value, int) and not isinstance(value, bool):
                levels[source] = value

        return cls(
            id=raw_id,
            filename=str(data.get("filename", "")),
            category=str(data.get("category", "")),
            attack=str(data.get("attack", "")),
            technique=data.get("technique"),
            levels=levels,
        )
