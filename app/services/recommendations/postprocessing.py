"""
Post-processing of fused recommendations: personalization, exclusion,
diversity and freshness
"""
import logging
from dataclasses import replace
from datetime import datetime
from typing import Callable, List, Optional

from app.services.recommendations.features import jaccard_similarity
from app.services.recommendations.models import (
    CatalogItem,
    RecommendationContext,
    RecommendationOptions,
    RecommendationSource,
    ScoredRecommendation,
    UserProfile,
)
from app.services.recommendations.parsers import utcnow
from app.services.utils.constants import (
    PERSONALIZATION_PREFERENCE_TYPES,
    PERSONALIZATION_BOOST,
    TRAVEL_STYLE_BOOST,
    CROSS_TYPE_SIMILARITY,
    FRESH_WEEK_BOOST,
    FRESH_MONTH_BOOST,
)

logger = logging.getLogger(__name__)


def personalized_factor(item: CatalogItem, profile: UserProfile) -> float:
    """Mean confidence of the preferences matching the item's tags, 0 if none"""
    matches = [
        score
        for tag in item.features
        for score in (profile.preference(kind, tag) for kind in PERSONALIZATION_PREFERENCE_TYPES)
        if score
    ]
    if not matches:
        return 0.0
    return sum(matches) / len(matches)


def item_similarity(a: CatalogItem, b: CatalogItem) -> float:
    """Tag overlap for items of the same type, a fixed low value across types"""
    if a.type != b.type:
        return CROSS_TYPE_SIMILARITY
    return jaccard_similarity(a.features, b.features)


def _by_score(recommendations: List[ScoredRecommendation]) -> List[ScoredRecommendation]:
    return sorted(recommendations, key=lambda rec: (-rec.score, rec.item_id))


class PostProcessor:
    """
    Applies the post-fusion transformations in order

    Every step returns new ScoredRecommendation values; the input list is
    left untouched.
    """

    def __init__(self, clock: Callable[[], datetime] = utcnow):
        self._clock = clock

    def apply_personalization_boost(
        self,
        recommendations: List[ScoredRecommendation],
        profile: UserProfile,
        context: RecommendationContext
    ) -> List[ScoredRecommendation]:
        boosted = []
        for rec in recommendations:
            factor = 1.0 + personalized_factor(rec.item, profile) * PERSONALIZATION_BOOST
            if context.travel_style and context.travel_style in rec.item.features:
                factor *= TRAVEL_STYLE_BOOST

            boosted.append(replace(rec, score=rec.score * factor, source=RecommendationSource.PERSONALIZED))

        return _by_score(boosted)

    def exclude_interacted(
        self,
        recommendations: List[ScoredRecommendation],
        profile: UserProfile,
        context: Optional[RecommendationContext] = None
    ) -> List[ScoredRecommendation]:
        """Drop items the user already viewed, liked, saved or booked"""
        booked = set(context.previous_booking_ids) if context is not None else set()
        return [
            rec for rec in recommendations
            if rec.item_id not in booked and not profile.has_interacted_with(rec.item_id)
        ]

    def apply_diversity_filter(
        self,
        recommendations: List[ScoredRecommendation],
        diversity_factor: float
    ) -> List[ScoredRecommendation]:
        """
        Greedy selection keeping items dissimilar to everything already kept

        A candidate is accepted when its similarity to every accepted item is
        below 1 - diversity_factor. The top item is always accepted.
        A factor of 0 returns the input unchanged.
        """
        if diversity_factor == 0:
            return recommendations

        threshold = 1.0 - diversity_factor
        selected: List[ScoredRecommendation] = []
        for rec in _by_score(recommendations):
            if not selected or all(item_similarity(rec.item, kept.item) < threshold for kept in selected):
                selected.append(rec)

        return selected

    def boost_fresh_content(self, recommendations: List[ScoredRecommendation]) -> List[ScoredRecommendation]:
        """Boost items created in the last week (10%) or month (5%)"""
        now = self._clock()
        boosted = []
        for rec in recommendations:
            created_at = rec.item.created_at
            factor = 1.0
            if created_at is not None:
                age_days = (now - created_at).total_seconds() / 86400
                if age_days <= 7:
                    factor = FRESH_WEEK_BOOST
                elif age_days <= 30:
                    factor = FRESH_MONTH_BOOST
            boosted.append(replace(rec, score=rec.score * factor) if factor != 1.0 else rec)

        return _by_score(boosted)

    def finalize(
        self,
        recommendations: List[ScoredRecommendation],
        min_score: float,
        max_results: int
    ) -> List[ScoredRecommendation]:
        """Apply the score floor, sort and truncate"""
        kept = [rec for rec in recommendations if rec.score >= min_score]
        return _by_score(kept)[:max_results]

    def process(
        self,
        recommendations: List[ScoredRecommendation],
        profile: UserProfile,
        context: RecommendationContext,
        options: RecommendationOptions
    ) -> List[ScoredRecommendation]:
        """
        Run the full post-processing chain

        Args:
            recommendations: Fused recommendations
            profile: Target user profile
            context: Recommendation context
            options: Call options

        Returns:
            Final ranked list
        """
        results = self.apply_personalization_boost(recommendations, profile, context)
        if options.exclude_interacted:
            results = self.exclude_interacted(results, profile, context)
        results = self.apply_diversity_filter(results, options.diversity_factor)
        if options.boost_fresh_content:
            results = self.boost_fresh_content(results)

        final = self.finalize(results, options.min_score, options.max_results)
        logger.debug(
            "Post-processing for %s: %d fused -> %d final",
            profile.user_id, len(recommendations), len(final)
        )
        return final
