"""
Human-readable justification of final recommendations
"""
from dataclasses import replace
from typing import List

from app.services.recommendations.algorithms.content_based import matching_preferences
from app.services.recommendations.models import (
    RecommendationReasoning,
    ReasoningFactor,
    ScoredRecommendation,
    UserProfile,
)
from app.services.utils.constants import (
    STRATEGY_CONTENT_BASED,
    STRATEGY_COLLABORATIVE,
    STRATEGY_TRENDING,
    STRATEGY_WEIGHTS,
    PREF_DESTINATION_CATEGORY,
    HIGH_CONFIDENCE_PREFERENCE,
    FREQUENT_TYPE_INTERACTIONS,
    QUICK_DECISION_SECONDS,
    MAX_PERSONALIZED_FACTORS,
    MAX_MATCHING_PREFERENCES,
)


class ExplanationGenerator:
    """
    Builds the reasoning attached to each final recommendation

    Factors come from the strategies recorded in strategy_scores, so the
    explanation survives the source being retagged as personalized.
    Annotation never touches scores.
    """

    def explain(self, rec: ScoredRecommendation, profile: UserProfile) -> RecommendationReasoning:
        factors: List[ReasoningFactor] = []

        if STRATEGY_CONTENT_BASED in rec.strategy_scores:
            matches = matching_preferences(rec.item, profile)[:MAX_MATCHING_PREFERENCES]
            factors.extend(
                ReasoningFactor(
                    factor=f"preference_{PREF_DESTINATION_CATEGORY}",
                    weight=0.4,
                    contribution=score,
                    explanation=f"Matches your preference for {tag}",
                )
                for tag, score in matches
            )
            if not matches:
                weight = STRATEGY_WEIGHTS[STRATEGY_CONTENT_BASED]
                factors.append(ReasoningFactor(
                    factor="content_similarity",
                    weight=weight,
                    contribution=rec.strategy_scores[STRATEGY_CONTENT_BASED] * weight,
                    explanation="Similar to what you have shown interest in",
                ))

        if STRATEGY_COLLABORATIVE in rec.strategy_scores:
            weight = STRATEGY_WEIGHTS[STRATEGY_COLLABORATIVE]
            factors.append(ReasoningFactor(
                factor="similar_users",
                weight=weight,
                contribution=rec.strategy_scores[STRATEGY_COLLABORATIVE] * weight,
                explanation="Popular among users with similar preferences",
            ))

        if STRATEGY_TRENDING in rec.strategy_scores:
            weight = STRATEGY_WEIGHTS[STRATEGY_TRENDING]
            factors.append(ReasoningFactor(
                factor="trending",
                weight=weight,
                contribution=rec.strategy_scores[STRATEGY_TRENDING] * weight,
                explanation="Currently popular and trending",
            ))

        return RecommendationReasoning(
            factors=factors,
            personalized_factors=self.personalized_factors(rec, profile),
            similar_users=rec.reasoning.similar_users,
            content_similarity=rec.reasoning.content_similarity,
        )

    def personalized_factors(self, rec: ScoredRecommendation, profile: UserProfile) -> List[str]:
        """Strong preference matches first, then behavioral patterns, at most five"""
        strong_values = {
            key.partition(":")[2]
            for key, score in profile.preferences.items()
            if score > HIGH_CONFIDENCE_PREFERENCE
        }
        notes = [f"Strong preference for {tag}" for tag in sorted(rec.item.features) if tag in strong_values]

        type_count = profile.behavior.item_type_counts.get(rec.item.type, 0)
        if type_count > FREQUENT_TYPE_INTERACTIONS:
            notes.append(f"Frequently engages with {rec.item.type} content")

        decision = profile.behavior.average_decision_seconds
        if decision is not None and decision < QUICK_DECISION_SECONDS and type_count > 0:
            notes.append(f"Usually decides quickly on {rec.item.type} options")

        return notes[:MAX_PERSONALIZED_FACTORS]

    def annotate(
        self,
        recommendations: List[ScoredRecommendation],
        profile: UserProfile
    ) -> List[ScoredRecommendation]:
        """Attach reasoning to every recommendation, order and scores unchanged"""
        return [replace(rec, reasoning=self.explain(rec, profile)) for rec in recommendations]
