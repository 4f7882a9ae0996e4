"""Content-based scoring tests."""

import pytest

from app.services.recommendations.algorithms import ContentBasedScorer
from app.services.recommendations.algorithms.content_based import (
    budget_score,
    category_score,
    location_score,
)
from app.services.recommendations.models import Budget, GeoPoint, RecommendationContext

from tests.conftest import make_item, make_profile


def _context(**kwargs) -> RecommendationContext:
    return RecommendationContext(user_id="user-1", **kwargs)


class TestBudgetScore:

    @pytest.mark.parametrize("price", [0, 50, 99.99, 100])
    def test_inside_range_is_exactly_one(self, price):
        item = make_item("a", price=price)
        assert budget_score(item, _context(budget=Budget(0, 100))) == 1.0

    def test_under_minimum(self):
        item = make_item("a", price=20)
        assert budget_score(item, _context(budget=Budget(50, 150))) == 0.8

    def test_over_maximum_decays_with_range_width(self):
        context = _context(budget=Budget(100, 200))
        assert budget_score(make_item("a", price=250), context) == pytest.approx(0.5)
        assert budget_score(make_item("b", price=300), context) == 0.0
        assert budget_score(make_item("c", price=1000), context) == 0.0

    def test_currency_mismatch_is_neutral(self):
        item = make_item("a", price=80, currency="EUR")
        assert budget_score(item, _context(budget=Budget(0, 100, "USD"))) == 0.5

    def test_missing_inputs(self):
        assert budget_score(make_item("a"), _context(budget=Budget(0, 100))) is None
        assert budget_score(make_item("a", price=10), _context()) is None


class TestSubScores:

    def test_location_score(self):
        context = _context(current_location=GeoPoint(41.0, 29.0))

        assert location_score(make_item("a", location=(41.0, 29.0)), context) == pytest.approx(1.0)
        assert location_score(make_item("b", location=(43.0, 29.0)), context) == 0.0
        assert location_score(make_item("c"), context) is None
        assert location_score(make_item("d", location=(41.0, 29.0)), _context()) is None

    def test_category_score_neutral_without_overlap(self):
        profile = make_profile(preferences={"destination_category:beach": 0.9})
        assert category_score(make_item("a", features=["mountain"]), profile) == 0.5

    def test_category_score_averages_matching_tags(self):
        profile = make_profile(preferences={
            "destination_category:beach": 0.9,
            "destination_category:food": 0.5,
        })
        item = make_item("a", features=["beach", "food", "nightlife"])
        assert category_score(item, profile) == pytest.approx(0.7)


class TestContentBasedScorer:

    def test_only_applicable_weights_count(self):
        scorer = ContentBasedScorer()
        score = scorer.score(make_item("a"), make_profile(), _context())

        # cosine 0 (weight 0.4) and neutral category 0.5 (weight 0.3) only
        assert score == pytest.approx(0.3 * 0.5 / 0.7)

    def test_score_is_within_unit_range(self):
        scorer = ContentBasedScorer()
        profile = make_profile(preferences={"destination_category:beach": 1.0})
        item = make_item("a", features=["beach"], price=50, location=(0.0, 0.0))
        context = _context(budget=Budget(0, 100), current_location=GeoPoint(0.0, 0.0))

        assert 0.0 <= scorer.score(item, profile, context) <= 1.0

    async def test_beach_preference_ranks_beach_first(self, beach_destination, mountain_activity):
        scorer = ContentBasedScorer()
        profile = make_profile(preferences={"destination_category:beach": 0.9})
        context = _context(budget=Budget(0, 100))

        results = await scorer.score_candidates([mountain_activity, beach_destination], profile, context)

        assert [rec.item_id for rec in results] == ["beach-1", "mountain-1"]
        assert results[0].strategy_scores == {"content_based": results[0].score}
        explanations = [factor.explanation for factor in results[0].reasoning.factors]
        assert explanations == ["Matches your preference for beach"]
        assert 0.1 <= results[0].confidence <= 1.0
