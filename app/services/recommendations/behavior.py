"""
Behavioral statistics derived from a user's interaction history
"""
from collections import Counter
from datetime import datetime
from typing import Dict, List, Optional, Sequence

import numpy as np

from app.services.recommendations.models import BehaviorSummary, InteractionRecord
from app.services.utils.constants import (
    BEHAVIOR_INTERACTION_TYPES,
    CONVERSION_INTERACTIONS,
    DECISION_INTERACTIONS,
    INTERACTION_SEARCH,
    INTERACTION_VIEW,
)

SEARCH_REFINEMENT_WINDOW_SECONDS = 300


def build_behavior_vector(history: Sequence[InteractionRecord]) -> List[float]:
    """
    Frequency of each interaction type, one slot per BEHAVIOR_INTERACTION_TYPES

    Entries sum to 1 when every interaction has a known type, less otherwise.
    """
    vector = np.zeros(len(BEHAVIOR_INTERACTION_TYPES))
    if not history:
        return vector.tolist()

    counts = Counter(record.interaction_type for record in history)
    for index, interaction_type in enumerate(BEHAVIOR_INTERACTION_TYPES):
        vector[index] = counts.get(interaction_type, 0)

    return (vector / len(history)).tolist()


def conversion_rate(history: Sequence[InteractionRecord]) -> float:
    """Share of interactions that are a like, save or book"""
    if not history:
        return 0.0
    converted = sum(1 for record in history if record.interaction_type in CONVERSION_INTERACTIONS)
    return converted / len(history)


def average_decision_seconds(history: Sequence[InteractionRecord]) -> Optional[float]:
    """
    Mean time from first view to the first later decision on the same item

    Items never viewed, or never decided on after the view, are ignored.
    Returns None when no item qualifies.
    """
    first_view: Dict[str, datetime] = {}
    for record in history:
        if record.interaction_type == INTERACTION_VIEW and record.timestamp is not None:
            seen = first_view.get(record.item_id)
            if seen is None or record.timestamp < seen:
                first_view[record.item_id] = record.timestamp

    first_decision: Dict[str, datetime] = {}
    for record in history:
        if record.interaction_type not in DECISION_INTERACTIONS or record.timestamp is None:
            continue
        viewed_at = first_view.get(record.item_id)
        if viewed_at is None or record.timestamp < viewed_at:
            continue
        decided = first_decision.get(record.item_id)
        if decided is None or record.timestamp < decided:
            first_decision[record.item_id] = record.timestamp

    if not first_decision:
        return None

    gaps = [(first_decision[item_id] - first_view[item_id]).total_seconds() for item_id in first_decision]
    return float(np.mean(gaps))


def search_refinement_rate(history: Sequence[InteractionRecord]) -> float:
    """Fraction of consecutive searches at most five minutes apart"""
    searches = sorted(
        record.timestamp for record in history
        if record.interaction_type == INTERACTION_SEARCH and record.timestamp is not None
    )
    if len(searches) < 2:
        return 0.0

    refined = sum(
        1 for earlier, later in zip(searches, searches[1:])
        if (later - earlier).total_seconds() <= SEARCH_REFINEMENT_WINDOW_SECONDS
    )
    return refined / (len(searches) - 1)


def summarize_behavior(history: Sequence[InteractionRecord]) -> BehaviorSummary:
    """Compute all behavioral statistics for a history"""
    return BehaviorSummary(
        conversion_rate=conversion_rate(history),
        average_decision_seconds=average_decision_seconds(history),
        search_refinement_rate=search_refinement_rate(history),
        item_type_counts=dict(Counter(record.item_type for record in history)),
    )
