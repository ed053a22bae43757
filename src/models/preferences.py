"""
Preference data models
"""

from dataclasses import dataclass
from typing import FrozenSet, Tuple


@dataclass(frozen=True)
class UserPreferences:
    """
    The user-editable part of the preferences

    This is the projection that gets persisted; the available options are
    supplied fresh on every load.
    """

    selected_levels: FrozenSet[int]
    selected_source: str
    include_unclassified: bool = False

    def to_dict(self) -> dict:
        return {
            "selected_levels": sorted(self.selected_levels, reverse=True),
            "selected_source": self.selected_source,
            "include_unclassified": self.include_unclassified,
        }


@dataclass(frozen=True)
class PreferenceSelection:
    """
    Sealed preference snapshot used to filter the catalog

    Raises:
        ValueError: If no level is selected or the selected source is not available
    """

    available_levels: Tuple[int, ...]
    available_sources: Tuple[str, ...]
    selected_levels: FrozenSet[int]
    selected_source: str
    include_unclassified: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "available_levels", tuple(self.available_levels))
        object.__setattr__(self, "available_sources", tuple(self.available_sources))
        object.__setattr__(self, "selected_levels", frozenset(self.selected_levels))
        if not self.selected_levels:
            raise ValueError("At least one level must be selected")
        if self.selected_source not in self.available_sources:
            raise ValueError(f"Unknown grading source: {self.selected_source!r}")

    @property
    def user_preferences(self) -> UserPreferences:
        return UserPreferences(
            selected_levels=self.selected_levels,
            selected_source=self.selected_source,
            include_unclassified=self.include_unclassified,
        )

    @classmethod
    def from_user_preferences(
        cls,
        prefs: UserPreferences,
        available_levels: Tuple[int, ...],
        available_sources: Tuple[str, ...],
    ) -> "PreferenceSelection":
        return cls(
            available_levels=available_levels,
            available_sources=available_sources,
            selected_levels=prefs.selected_levels,
            selected_source=prefs.selected_source,
            include_unclassified=prefs.include_unclassified,
        )
