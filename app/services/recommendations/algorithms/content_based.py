"""
Content-based scoring
Matches item attributes against the user's stated and learned preferences
"""
import logging
from typing import List, Optional, Tuple

from app.services.recommendations.base import ScoringStrategy, calculate_confidence
from app.services.recommendations.features import (
    extract_item_features,
    extract_user_vector,
    cosine_similarity,
    haversine_distance,
)
from app.services.recommendations.models import (
    CatalogItem,
    RecommendationContext,
    RecommendationReasoning,
    RecommendationSource,
    ReasoningFactor,
    ScoredRecommendation,
    UserProfile,
)
from app.services.utils.constants import (
    STRATEGY_CONTENT_BASED,
    MIN_STRATEGY_SCORE,
    WEIGHT_FEATURE_SIMILARITY,
    WEIGHT_CATEGORY,
    WEIGHT_LOCATION,
    WEIGHT_BUDGET,
    NEUTRAL_SCORE,
    MAX_PROXIMITY_METERS,
    UNDER_BUDGET_SCORE,
    PREF_DESTINATION_CATEGORY,
    MAX_MATCHING_PREFERENCES,
)

logger = logging.getLogger(__name__)


def category_score(item: CatalogItem, profile: UserProfile) -> float:
    """Average destination-category preference over the item's tags, 0.5 without overlap"""
    scores = [
        score for score in (profile.preference(PREF_DESTINATION_CATEGORY, tag) for tag in item.features)
        if score is not None
    ]
    if not scores:
        return NEUTRAL_SCORE
    return sum(scores) / len(scores)


def location_score(item: CatalogItem, context: RecommendationContext) -> Optional[float]:
    """Linear proximity score, None when either location is missing"""
    if context.current_location is None or item.location is None:
        return None

    distance = haversine_distance(
        context.current_location.lat, context.current_location.lng,
        item.location.lat, item.location.lng
    )
    return max(0.0, 1.0 - distance / MAX_PROXIMITY_METERS)


def budget_score(item: CatalogItem, context: RecommendationContext) -> Optional[float]:
    """
    Budget compatibility, None when budget or price is missing

    In range: 1.0. Under the minimum: 0.8. Over the maximum: decays to 0
    as the overage reaches the width of the budget range.
    """
    budget = context.budget
    if budget is None or item.price is None:
        return None

    if item.price.currency != budget.currency:
        return NEUTRAL_SCORE

    price = item.price.amount
    if budget.min <= price <= budget.max:
        return 1.0
    if price < budget.min:
        return UNDER_BUDGET_SCORE

    width = budget.max - budget.min
    if width <= 0:
        return 0.0
    return max(0.0, 1.0 - (price - budget.max) / width)


def matching_preferences(item: CatalogItem, profile: UserProfile) -> List[Tuple[str, float]]:
    """Destination-category preferences the item matches, strongest first"""
    matches = [
        (tag, score) for tag, score in (
            (tag, profile.preference(PREF_DESTINATION_CATEGORY, tag)) for tag in item.features
        )
        if score is not None
    ]
    matches.sort(key=lambda match: (-match[1], match[0]))
    return matches


class ContentBasedScorer(ScoringStrategy):
    """
    Content-based scoring

    Weighted mean of four sub-scores:
        feature cosine (0.4), category preference (0.3),
        proximity (0.2, needs both locations), budget fit (0.1, needs budget and price).
    Sub-scores whose inputs are missing are left out of the denominator.
    """

    def __init__(self):
        super().__init__(name=STRATEGY_CONTENT_BASED)

    def score(self, item: CatalogItem, profile: UserProfile, context: RecommendationContext) -> float:
        """Score one item in [0, 1]"""
        return self._score_with_similarity(item, profile, context)[0]

    def _score_with_similarity(
        self,
        item: CatalogItem,
        profile: UserProfile,
        context: RecommendationContext
    ) -> Tuple[float, float]:
        similarity = cosine_similarity(extract_item_features(item), extract_user_vector(profile))

        weighted = [
            (WEIGHT_FEATURE_SIMILARITY, similarity),
            (WEIGHT_CATEGORY, category_score(item, profile)),
        ]

        proximity = location_score(item, context)
        if proximity is not None:
            weighted.append((WEIGHT_LOCATION, proximity))

        budget_fit = budget_score(item, context)
        if budget_fit is not None:
            weighted.append((WEIGHT_BUDGET, budget_fit))

        total_weight = sum(weight for weight, _ in weighted)
        value = sum(weight * sub_score for weight, sub_score in weighted) / total_weight
        return max(0.0, min(1.0, value)), similarity

    async def score_candidates(
        self,
        candidates: List[CatalogItem],
        profile: UserProfile,
        context: RecommendationContext
    ) -> List[ScoredRecommendation]:
        recommendations = []

        for item in candidates:
            score, similarity = self._score_with_similarity(item, profile, context)
            if score <= MIN_STRATEGY_SCORE:
                continue

            factors = [
                ReasoningFactor(
                    factor=f"preference_{PREF_DESTINATION_CATEGORY}",
                    weight=0.4,
                    contribution=preference,
                    explanation=f"Matches your preference for {tag}",
                )
                for tag, preference in matching_preferences(item, profile)[:MAX_MATCHING_PREFERENCES]
            ]

            recommendations.append(ScoredRecommendation(
                item=item,
                score=score,
                confidence=calculate_confidence(score, profile),
                reasoning=RecommendationReasoning(factors=factors, content_similarity=similarity),
                source=RecommendationSource.CONTENT_BASED,
                strategy_scores={self.name: score},
            ))

        recommendations.sort(key=lambda rec: (-rec.score, rec.item_id))
        logger.debug("Content-based: %d of %d candidates scored", len(recommendations), len(candidates))
        return recommendations
