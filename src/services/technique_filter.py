"""
Technique filtering by user preferences
"""

from typing import Iterable, List

from models.preferences import PreferenceSelection
from models.technique import Technique


def filter_technique(technique: Technique, selection: PreferenceSelection) -> bool:
    """
    Decide whether a technique belongs in the queue

    Args:
        technique: The technique to check
        selection: Sealed preference snapshot

    Returns:
        bool: True if the technique is graded at a selected level for the
        selected source, or if unclassified techniques are included and the
        technique has no level for any known source.
    """
    level = technique.level_for(selection.selected_source)
    if level is not None:
        return level in selection.selected_levels

    if selection.include_unclassified:
        return technique.is_unclassified(selection.available_sources)

    return False


def filter_techniques(techniques: Iterable[Technique], selection: PreferenceSelection) -> List[Technique]:
    """Techniques passing filter_technique, in catalog order"""
    return [t for t in techniques if filter_technique(t, selection)]
