"""Explanation generator tests."""

from app.services.recommendations.explanations import ExplanationGenerator
from app.services.recommendations.models import (
    BehaviorSummary,
    RecommendationSource,
    ScoredRecommendation,
)

from tests.conftest import make_item, make_profile


def _rec(item, strategy_scores, score=0.5):
    return ScoredRecommendation(
        item=item,
        score=score,
        source=RecommendationSource.PERSONALIZED,
        strategy_scores=strategy_scores,
    )


class TestExplanationGenerator:

    def test_factors_follow_contributing_strategies(self):
        profile = make_profile(preferences={"destination_category:beach": 0.9})
        rec = _rec(make_item("x", features=["beach"]), {"content_based": 0.8, "collaborative": 0.5, "trending": 1.0})

        reasoning = ExplanationGenerator().explain(rec, profile)

        assert [factor.factor for factor in reasoning.factors] == [
            "preference_destination_category", "similar_users", "trending",
        ]
        assert reasoning.factors[0].contribution == 0.9
        assert reasoning.factors[1].contribution == 0.5 * 0.4
        assert reasoning.factors[2].explanation == "Currently popular and trending"
        assert reasoning.personalized_factors == ["Strong preference for beach"]

    def test_content_without_preference_match(self):
        rec = _rec(make_item("x", features=["city"]), {"content_based": 0.5})
        reasoning = ExplanationGenerator().explain(rec, make_profile())

        assert [factor.factor for factor in reasoning.factors] == ["content_similarity"]
        assert reasoning.personalized_factors == []

    def test_behavioral_patterns(self):
        profile = make_profile(behavior=BehaviorSummary(
            average_decision_seconds=30.0,
            item_type_counts={"activity": 6},
        ))
        rec = _rec(make_item("x", "activity"), {"trending": 0.5})

        notes = ExplanationGenerator().explain(rec, profile).personalized_factors

        assert notes == [
            "Frequently engages with activity content",
            "Usually decides quickly on activity options",
        ]

    def test_personalized_factors_are_capped(self):
        tags = ["beach", "city", "culture", "food", "nature", "luxury"]
        profile = make_profile(
            preferences={f"destination_category:{tag}": 0.95 for tag in tags},
            behavior=BehaviorSummary(item_type_counts={"destination": 10}),
        )
        rec = _rec(make_item("x", features=tags), {"content_based": 0.9})

        assert len(ExplanationGenerator().explain(rec, profile).personalized_factors) == 5

    def test_annotate_keeps_scores_and_order(self):
        recs = [
            _rec(make_item("a"), {"trending": 1.0}, score=0.9),
            _rec(make_item("b"), {"trending": 0.5}, score=0.4),
        ]

        annotated = ExplanationGenerator().annotate(recs, make_profile())

        assert [(rec.item_id, rec.score) for rec in annotated] == [("a", 0.9), ("b", 0.4)]
