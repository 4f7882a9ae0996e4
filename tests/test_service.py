"""Recommendations service helper tests."""

import pytest

from app.core.config import settings
from app.services import recommendations_service
from app.services.recommendations.models import RecommendationSource, ScoredRecommendation

from tests.conftest import make_item


class TestServiceHelpers:

    def test_default_options_follow_settings(self):
        options = recommendations_service.default_options()

        assert options.max_results == settings.RECOMMENDATION_MAX_RESULTS
        assert options.geographic_radius_meters == settings.RECOMMENDATION_GEO_RADIUS_METERS

    def test_default_options_overrides_keep_false(self):
        options = recommendations_service.default_options(include_explanations=False, min_score=None)

        assert options.include_explanations is False
        assert options.min_score == settings.RECOMMENDATION_MIN_SCORE

    def test_mask_user_id(self):
        assert recommendations_service.mask_user_id("abcdefghijk") == "abcdefgh***"

    def test_summarize(self):
        recs = [
            ScoredRecommendation(make_item("a"), 0.9, 0.85, source=RecommendationSource.HYBRID,
                                 strategy_scores={"content_based": 0.9, "trending": 0.5}),
            ScoredRecommendation(make_item("b"), 0.5, 0.55, source=RecommendationSource.TRENDING,
                                 strategy_scores={"trending": 0.5}),
        ]

        meta = recommendations_service.summarize(recs)

        assert meta["total_results"] == 2
        assert meta["high_confidence_results"] == 1
        assert meta["sources"] == ["content_based", "trending"]
        assert meta["average_score"] == pytest.approx(0.7)
        assert meta["average_confidence"] == pytest.approx(0.7)

    def test_summarize_empty(self):
        assert recommendations_service.summarize([])["average_score"] == 0

    async def test_cached_lookup_uses_repository(self, fake_repo):
        await fake_repo.write_cached_recommendations("u1", [{"item": {"id": "x"}}], 3600)

        payload = await recommendations_service.get_cached_recommendations(fake_repo, "u1")

        assert payload["recommendations"] == [{"item": {"id": "x"}}]
        assert await recommendations_service.get_cached_recommendations(fake_repo, "u2") is None
