"""
Weighted fusion of strategy outputs
"""
from dataclasses import replace
from typing import Dict, List, Optional

from app.services.recommendations.models import (
    RecommendationReasoning,
    RecommendationSource,
    ScoredRecommendation,
)
from app.services.utils.constants import STRATEGY_WEIGHTS


class FusionEngine:
    """
    Combines the ranked lists of several strategies into one

    Each item's fused score is sum(strategy_score * strategy_weight) over
    the strategies that returned it. Items returned by more than one
    strategy become `hybrid`.
    """

    def __init__(self, weights: Optional[Dict[str, float]] = None):
        self.weights = dict(weights if weights is not None else STRATEGY_WEIGHTS)

    def combine(self, results: Dict[str, List[ScoredRecommendation]]) -> List[ScoredRecommendation]:
        """
        Fuse strategy results

        Args:
            results: Strategy name -> that strategy's recommendations.
                Missing or empty strategies contribute nothing.

        Returns:
            Fused recommendations sorted by score (descending, ties by item id)
        """
        fused: Dict[str, ScoredRecommendation] = {}

        # Fixed strategy order keeps factor order and ties deterministic
        ordered = [name for name in self.weights if name in results]
        ordered += sorted(name for name in results if name not in self.weights)

        for name in ordered:
            weight = self.weights.get(name, 0.0)
            for rec in results.get(name) or []:
                existing = fused.get(rec.item_id)

                if existing is None:
                    fused[rec.item_id] = replace(
                        rec,
                        score=rec.score * weight,
                        reasoning=replace(rec.reasoning, factors=list(rec.reasoning.factors)),
                        strategy_scores={name: rec.score},
                    )
                    continue

                existing.score += rec.score * weight
                existing.source = RecommendationSource.HYBRID
                existing.confidence = max(existing.confidence, rec.confidence)
                existing.strategy_scores[name] = rec.score
                existing.reasoning.factors.extend(
                    replace(factor, weight=factor.weight * weight)
                    for factor in rec.reasoning.factors
                )
                existing.reasoning = _merge_reasoning(existing.reasoning, rec.reasoning)

        return sorted(fused.values(), key=lambda rec: (-rec.score, rec.item_id))


def _merge_reasoning(
    current: RecommendationReasoning,
    incoming: RecommendationReasoning
) -> RecommendationReasoning:
    if current.similar_users is None and incoming.similar_users is not None:
        current.similar_users = incoming.similar_users
    if current.content_similarity is None and incoming.content_similarity is not None:
        current.content_similarity = incoming.content_similarity
    return current
