"""
Base classes and interfaces for scoring strategies
"""
from abc import ABC, abstractmethod
from typing import List

from app.services.recommendations.models import (
    CatalogItem,
    RecommendationContext,
    ScoredRecommendation,
    UserProfile,
)

PREFERENCE_COMPLETENESS_TARGET = 20
HISTORY_RICHNESS_TARGET = 50


def calculate_confidence(score: float, profile: UserProfile) -> float:
    """
    How much to trust a personal score given how much we know about the user

    Args:
        score: Normalized strategy score
        profile: User profile the score was computed for

    Returns:
        Confidence in [0.1, 1.0]
    """
    base = min(0.9, score)
    completeness = min(1.0, len(profile.preferences) / PREFERENCE_COMPLETENESS_TARGET)
    richness = min(1.0, len(profile.interaction_history) / HISTORY_RICHNESS_TARGET)
    confidence = base * (0.5 + 0.3 * completeness + 0.2 * richness)
    return max(0.1, min(1.0, confidence))


class ScoringStrategy(ABC):
    """
    Abstract base class for scoring strategies

    A strategy scores a shared, read-only candidate set for one profile.
    It returns only the items it has a positive opinion about, with scores
    normalized to [0, 1]; an empty list is a valid answer.
    """

    def __init__(self, name: str):
        self.name = name

    @abstractmethod
    async def score_candidates(
        self,
        candidates: List[CatalogItem],
        profile: UserProfile,
        context: RecommendationContext
    ) -> List[ScoredRecommendation]:
        """
        Score candidates for a user

        Args:
            candidates: Eligible catalog items
            profile: Target user profile
            context: Recommendation context

        Returns:
            Scored recommendations sorted by score (descending)
        """
        pass

    def get_info(self) -> dict:
        """Get information about the strategy"""
        return {
            "name": self.name,
            "type": self.__class__.__name__
        }
