"""
User profile models
"""
from typing import List, Dict, Set, Optional
from dataclasses import dataclass, field
from datetime import datetime

from app.services.utils.constants import BEHAVIOR_INTERACTION_TYPES, SEEN_INTERACTIONS


@dataclass(frozen=True)
class InteractionRecord:
    """Single entry of a user's interaction history"""
    item_id: str
    item_type: str
    interaction_type: str
    weight: float
    timestamp: Optional[datetime] = None


@dataclass
class BehaviorSummary:
    """Statistics derived from the interaction history"""
    conversion_rate: float = 0.0
    average_decision_seconds: Optional[float] = None
    search_refinement_rate: float = 0.0
    item_type_counts: Dict[str, int] = field(default_factory=dict)


@dataclass
class UserProfile:
    """
    User profile for recommendations

    preferences maps "<type>:<value>" to a confidence in [0, 1].
    behavior_vector holds interaction-type frequencies (fixed length,
    one slot per BEHAVIOR_INTERACTION_TYPES entry).
    interaction_history is most-recent-first.
    """
    user_id: str
    preferences: Dict[str, float] = field(default_factory=dict)
    behavior_vector: List[float] = field(
        default_factory=lambda: [0.0] * len(BEHAVIOR_INTERACTION_TYPES)
    )
    cluster_ids: Set[str] = field(default_factory=set)
    interaction_history: List[InteractionRecord] = field(default_factory=list)
    behavior: BehaviorSummary = field(default_factory=BehaviorSummary)

    @classmethod
    def empty(cls, user_id: str) -> "UserProfile":
        """Low-confidence baseline profile for unknown users or failed fetches"""
        return cls(user_id=user_id)

    @property
    def is_empty(self) -> bool:
        return not self.preferences and not self.interaction_history and not self.cluster_ids

    def preference(self, preference_type: str, value: str) -> Optional[float]:
        """Confidence for a preference key, None if the user has none"""
        return self.preferences.get(f"{preference_type}:{value}")

    def has_interacted_with(self, item_id: str) -> bool:
        """True if the user meaningfully interacted with the item (view/like/save/book)"""
        return any(
            record.item_id == item_id and record.interaction_type in SEEN_INTERACTIONS
            for record in self.interaction_history
        )
