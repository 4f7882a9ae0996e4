"""
Data models for recommendations
"""
from enum import Enum
from typing import Optional, Dict, Any, List
from dataclasses import dataclass, field

from app.services.recommendations.models.catalog import CatalogItem


class RecommendationSource(str, Enum):
    """Which part of the pipeline produced the current score"""
    CONTENT_BASED = "content_based"
    COLLABORATIVE = "collaborative"
    TRENDING = "trending"
    HYBRID = "hybrid"
    PERSONALIZED = "personalized"


@dataclass
class ReasoningFactor:
    """One contributing factor of a recommendation"""
    factor: str
    weight: float
    contribution: float
    explanation: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "factor": self.factor,
            "weight": round(self.weight, 4),
            "contribution": round(self.contribution, 4),
            "explanation": self.explanation,
        }


@dataclass
class RecommendationReasoning:
    """Structured justification attached to a recommendation"""
    factors: List[ReasoningFactor] = field(default_factory=list)
    personalized_factors: List[str] = field(default_factory=list)
    similar_users: Optional[str] = None
    content_similarity: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "factors": [f.to_dict() for f in self.factors],
            "personalized_factors": list(self.personalized_factors),
            "similar_users": self.similar_users,
            "content_similarity": (
                round(self.content_similarity, 4) if self.content_similarity is not None else None
            ),
        }


@dataclass
class ScoredRecommendation:
    """
    A catalog item with its score for one query

    Created by a scoring strategy, then updated in place by fusion
    (score combined) and post-processing (boosts, source retag).
    strategy_scores keeps each contributing strategy's own score.
    """
    item: CatalogItem
    score: float
    confidence: float = 0.5
    reasoning: RecommendationReasoning = field(default_factory=RecommendationReasoning)
    source: RecommendationSource = RecommendationSource.CONTENT_BASED
    strategy_scores: Dict[str, float] = field(default_factory=dict)

    @property
    def item_id(self) -> str:
        return self.item.id

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            "item": self.item.to_dict(),
            "score": round(self.score, 4),
            "confidence": round(self.confidence, 4),
            "reasoning": self.reasoning.to_dict(),
            "source": self.source.value,
            "strategy_scores": {k: round(v, 4) for k, v in self.strategy_scores.items()},
        }
