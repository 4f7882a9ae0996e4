"""Collaborative scoring tests."""

import pytest

from app.services.recommendations.algorithms import CollaborativeScorer
from app.services.recommendations.algorithms.collaborative import preference_similarity
from app.services.recommendations.cache import ProfileCache
from app.services.recommendations.models import RecommendationContext, RecommendationSource
from app.services.recommendations.profile_builder import UserProfileBuilder

from tests.conftest import make_item


@pytest.fixture
def scorer(fake_repo):
    builder = UserProfileBuilder(fake_repo, ProfileCache())
    return CollaborativeScorer(fake_repo, builder, max_similar_users=10, similarity_threshold=0.3)


@pytest.fixture
def two_peers(fake_repo):
    """User A booked item x; user B (target) shares A's cluster and tastes."""
    for user in ("user-a", "user-b"):
        fake_repo.add_to_cluster(user, "c1")
        fake_repo.add_preference(user, "destination_category", "beach", 0.9)
    fake_repo.add_interaction("user-a", "x", "book")
    return fake_repo


class TestPreferenceSimilarity:

    def test_identical_maps(self):
        prefs = {"destination_category:beach": 0.8, "activity_type:food": 0.4}
        assert preference_similarity(prefs, dict(prefs)) == 1.0

    def test_min_over_max_on_shared_keys(self):
        a = {"destination_category:beach": 0.8, "destination_category:city": 0.5}
        b = {"destination_category:beach": 0.4}
        assert preference_similarity(a, b) == pytest.approx(0.5)

    def test_no_shared_keys(self):
        assert preference_similarity({"a:b": 1.0}, {"c:d": 1.0}) == 0.0


class TestCollaborativeScorer:

    async def test_peer_booking_is_recommended(self, scorer, two_peers):
        builder = scorer.profile_builder
        profile = await builder.build_profile("user-b")
        candidates = [make_item("x"), make_item("y")]

        results = await scorer.score_candidates(candidates, profile, RecommendationContext(user_id="user-b"))

        assert [rec.item_id for rec in results] == ["x"]
        assert results[0].score > 0
        assert results[0].source == RecommendationSource.COLLABORATIVE
        assert results[0].reasoning.similar_users == "Based on 1 similar users"

    async def test_similar_users_exclude_self_and_rank(self, scorer, two_peers):
        two_peers.add_to_cluster("user-c", "c1")
        two_peers.add_preference("user-c", "destination_category", "beach", 0.6)

        profile = await scorer.profile_builder.build_profile("user-b")
        similar = await scorer.find_similar_users(profile)

        assert [user for user, _ in similar] == ["user-a", "user-c"]
        assert similar[0][1] > similar[1][1] > 0.3

    async def test_dissimilar_peers_are_dropped(self, scorer, fake_repo):
        fake_repo.add_to_cluster("user-a", "c1")
        fake_repo.add_to_cluster("user-b", "c1")
        fake_repo.add_preference("user-a", "destination_category", "city", 0.9)
        fake_repo.add_interaction("user-a", "x", "book")

        profile = await scorer.profile_builder.build_profile("user-b")

        assert await scorer.find_similar_users(profile) == []
        assert await scorer.score_candidates([make_item("x")], profile, RecommendationContext(user_id="user-b")) == []

    async def test_no_clusters_contributes_nothing(self, scorer, fake_repo):
        profile = await scorer.profile_builder.build_profile("loner")
        results = await scorer.score_candidates([make_item("x")], profile, RecommendationContext(user_id="loner"))

        assert results == []
        assert "get_cluster_members" not in fake_repo.calls

    async def test_peer_interaction_failure_yields_empty(self, scorer, two_peers):
        two_peers.failing.add("get_interactions_for_users")
        profile = await scorer.profile_builder.build_profile("user-b")

        results = await scorer.score_candidates([make_item("x")], profile, RecommendationContext(user_id="user-b"))

        assert results == []
