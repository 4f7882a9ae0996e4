"""
Trending scoring
Population-wide popularity over a trailing window, independent of the user
"""
import logging
from typing import List

import pandas as pd

from app.services.recommendations.base import ScoringStrategy
from app.services.recommendations.features import min_max_normalize
from app.services.recommendations.models import (
    CatalogItem,
    RecommendationContext,
    RecommendationReasoning,
    RecommendationSource,
    ReasoningFactor,
    ScoredRecommendation,
    UserProfile,
)
from app.services.recommendations.repository import RecommendationRepository
from app.services.utils.constants import (
    STRATEGY_TRENDING,
    STRATEGY_WEIGHTS,
    MIN_STRATEGY_SCORE,
    TRENDING_INTERACTIONS,
    INTERACTION_WEIGHTS,
    DEFAULT_INTERACTION_WEIGHT,
    TRENDING_TIME_DECAY,
    TRENDING_CONFIDENCE,
)

logger = logging.getLogger(__name__)


class TrendingScorer(ScoringStrategy):
    """
    Trending scoring

    Weighted interaction counts per item (dislikes and skips subtract),
    multiplied by a flat time decay and min-max normalized over the
    candidate set. Confidence is fixed.
    """

    def __init__(self, repository: RecommendationRepository, window_days: int = 7):
        super().__init__(name=STRATEGY_TRENDING)
        self.repository = repository
        self.window_days = window_days

    async def score_candidates(
        self,
        candidates: List[CatalogItem],
        profile: UserProfile,
        context: RecommendationContext
    ) -> List[ScoredRecommendation]:
        if not candidates:
            return []

        try:
            counts = await self.repository.get_recent_interaction_counts(
                self.window_days, TRENDING_INTERACTIONS
            )
        except Exception as e:
            logger.warning("Trending counts fetch failed: %s", e)
            return []

        candidate_ids = [item.id for item in candidates]
        frame = pd.DataFrame(
            [
                (str(item_id), interaction_type, count)
                for item_id, by_type in (counts or {}).items()
                for interaction_type, count in by_type.items()
            ],
            columns=["item_id", "interaction_type", "count"]
        )
        frame = frame[frame["item_id"].isin(candidate_ids)]
        if frame.empty:
            return []

        frame = frame.assign(
            weighted=frame["count"] * frame["interaction_type"].map(
                lambda kind: INTERACTION_WEIGHTS.get(kind, DEFAULT_INTERACTION_WEIGHT)
            )
        )
        totals = frame.groupby("item_id")["weighted"].sum() * TRENDING_TIME_DECAY

        raw_scores = {item_id: float(totals.get(item_id, 0.0)) for item_id in candidate_ids}
        normalized = min_max_normalize(raw_scores)

        strategy_weight = STRATEGY_WEIGHTS[self.name]
        recommendations = []
        for item in candidates:
            score = normalized.get(item.id, 0.0)
            if score <= MIN_STRATEGY_SCORE:
                continue

            recommendations.append(ScoredRecommendation(
                item=item,
                score=score,
                confidence=TRENDING_CONFIDENCE,
                reasoning=RecommendationReasoning(factors=[ReasoningFactor(
                    factor="trending",
                    weight=strategy_weight,
                    contribution=score * strategy_weight,
                    explanation="Currently popular and trending",
                )]),
                source=RecommendationSource.TRENDING,
                strategy_scores={self.name: score},
            ))

        recommendations.sort(key=lambda rec: (-rec.score, rec.item_id))
        logger.debug("Trending: %d of %d candidates scored", len(recommendations), len(candidates))
        return recommendations
