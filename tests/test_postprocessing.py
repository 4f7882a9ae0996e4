"""Personalization, exclusion, diversity and freshness tests."""

from datetime import timedelta

import pytest

from app.services.recommendations.models import (
    InteractionRecord,
    RecommendationContext,
    RecommendationOptions,
    RecommendationSource,
    ScoredRecommendation,
)
from app.services.recommendations.postprocessing import PostProcessor, item_similarity, personalized_factor

from tests.conftest import FIXED_NOW, make_item, make_profile

CONTEXT = RecommendationContext(user_id="user-1")


def _rec(item, score):
    return ScoredRecommendation(item=item, score=score, source=RecommendationSource.HYBRID)


@pytest.fixture
def processor(clock):
    return PostProcessor(clock=clock)


class TestItemSimilarity:

    def test_different_types_without_shared_tags(self):
        a = make_item("a", "destination", ["beach"])
        b = make_item("b", "activity", ["food"])
        assert item_similarity(a, b) == 0.2

    def test_same_type_uses_jaccard(self):
        a = make_item("a", "destination", ["beach", "food"])
        b = make_item("b", "destination", ["beach"])
        assert item_similarity(a, b) == pytest.approx(0.5)


class TestPersonalization:

    def test_personalized_factor_averages_all_preference_types(self):
        profile = make_profile(preferences={
            "destination_category:beach": 0.8,
            "activity_type:food": 0.4,
        })
        assert personalized_factor(make_item("a", features=["beach", "food"]), profile) == pytest.approx(0.6)
        assert personalized_factor(make_item("b", features=["city"]), profile) == 0.0

    def test_boost_and_travel_style(self, processor):
        profile = make_profile(preferences={"destination_category:beach": 0.5})
        context = RecommendationContext(user_id="user-1", travel_style="luxury")
        recs = [
            _rec(make_item("a", features=["beach"]), 0.5),
            _rec(make_item("b", features=["luxury"]), 0.5),
        ]

        boosted = {rec.item_id: rec for rec in processor.apply_personalization_boost(recs, profile, context)}

        assert boosted["a"].score == pytest.approx(0.5 * 1.1)
        assert boosted["b"].score == pytest.approx(0.5 * 1.15)
        assert all(rec.source == RecommendationSource.PERSONALIZED for rec in boosted.values())
        assert recs[0].score == 0.5


class TestExclusionAndDiversity:

    def test_identity_when_diversity_is_zero(self, processor):
        recs = [
            _rec(make_item("a", features=["beach"]), 0.9),
            _rec(make_item("b", features=["beach"]), 0.8),
            _rec(make_item("c", features=["beach"]), 0.7),
        ]
        assert processor.apply_diversity_filter(recs, 0) == recs

    def test_near_duplicates_are_dropped(self, processor):
        recs = [
            _rec(make_item("a", "destination", ["beach"]), 0.9),
            _rec(make_item("b", "destination", ["beach"]), 0.8),
            _rec(make_item("c", "activity", ["beach"]), 0.7),
        ]
        kept = processor.apply_diversity_filter(recs, 0.3)
        assert [rec.item_id for rec in kept] == ["a", "c"]

    def test_booked_items_are_excluded(self, processor):
        profile = make_profile(interaction_history=[
            InteractionRecord(item_id="booked", item_type="destination", interaction_type="book", weight=1.0),
            InteractionRecord(item_id="skipped", item_type="destination", interaction_type="skip", weight=-0.3),
        ])
        recs = [_rec(make_item("booked"), 0.9), _rec(make_item("skipped"), 0.8), _rec(make_item("new"), 0.7)]

        kept = processor.exclude_interacted(recs, profile, CONTEXT)

        assert [rec.item_id for rec in kept] == ["skipped", "new"]

    def test_previous_bookings_in_context_are_excluded(self, processor):
        context = RecommendationContext(user_id="user-1", previous_booking_ids=("old",))
        kept = processor.exclude_interacted([_rec(make_item("old"), 0.9)], make_profile(), context)
        assert kept == []


class TestFreshnessAndFinalize:

    def test_freshness_boost(self, processor):
        recs = [
            _rec(make_item("week", created_at=FIXED_NOW - timedelta(days=3)), 0.5),
            _rec(make_item("month", created_at=FIXED_NOW - timedelta(days=20)), 0.5),
            _rec(make_item("old", created_at=FIXED_NOW - timedelta(days=60)), 0.5),
            _rec(make_item("unknown"), 0.5),
        ]

        scores = {rec.item_id: rec.score for rec in processor.boost_fresh_content(recs)}

        assert scores["week"] == pytest.approx(0.55)
        assert scores["month"] == pytest.approx(0.525)
        assert scores["old"] == 0.5
        assert scores["unknown"] == 0.5

    def test_finalize_applies_floor_and_limit(self, processor):
        recs = [_rec(make_item(str(i)), i / 10) for i in range(10)]
        final = processor.finalize(recs, min_score=0.3, max_results=3)
        assert [rec.item_id for rec in final] == ["9", "8", "7"]

    def test_process_never_returns_booked_items(self, processor):
        profile = make_profile(interaction_history=[
            InteractionRecord(item_id="x", item_type="destination", interaction_type="book", weight=1.0),
        ])
        recs = [_rec(make_item("x", features=["beach"]), 0.9), _rec(make_item("y", features=["city"]), 0.5)]

        final = processor.process(recs, profile, CONTEXT, RecommendationOptions())

        assert "x" not in [rec.item_id for rec in final]
