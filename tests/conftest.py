"""Test configuration and shared fixtures."""

import asyncio
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Sequence

import pytest

from app.services.recommendations import RecommendationEngine, ProfileCache
from app.services.recommendations.models import (
    CatalogItem,
    ItemLocation,
    Price,
    RecommendationContext,
    UserProfile,
)
from app.services.recommendations.parsers import utcnow
from app.services.recommendations.repository import RecommendationRepository, within_radius


FIXED_NOW = datetime(2026, 1, 15, 12, 0, 0)


# ============================================================================
# Fake data access
# ============================================================================

class FakeRepository(RecommendationRepository):
    """In-memory repository for tests.

    Add an operation name to `failing` to make it raise, or to `delays`
    (seconds) to make it slow.
    """

    def __init__(self):
        self.preferences: Dict[str, List[Dict[str, Any]]] = {}
        self.interactions: Dict[str, List[Dict[str, Any]]] = {}
        self.clusters: Dict[str, List[str]] = {}
        self.items: List[CatalogItem] = []
        self.trending_counts: Dict[str, Dict[str, int]] = {}
        self.cached: Dict[str, Dict[str, Any]] = {}
        self.failing = set()
        self.delays: Dict[str, float] = {}
        self.calls: Dict[str, int] = {}

    async def _enter(self, operation: str) -> None:
        self.calls[operation] = self.calls.get(operation, 0) + 1
        if operation in self.delays:
            await asyncio.sleep(self.delays[operation])
        if operation in self.failing:
            raise ConnectionError(f"{operation} unavailable")

    # -- helpers used by tests --

    def add_preference(self, user_id: str, pref_type: str, value: str, confidence: float) -> None:
        self.preferences.setdefault(user_id, []).append(
            {"type": pref_type, "value": value, "confidence": confidence}
        )

    def add_interaction(
        self,
        user_id: str,
        item_id: str,
        interaction_type: str,
        item_type: str = "destination",
        timestamp: Optional[datetime] = None
    ) -> None:
        rows = self.interactions.setdefault(user_id, [])
        rows.insert(0, {
            "user_id": user_id,
            "target_id": item_id,
            "target_type": item_type,
            "interaction_type": interaction_type,
            "timestamp": timestamp or FIXED_NOW,
        })

    def add_to_cluster(self, user_id: str, cluster_id: str) -> None:
        self.clusters.setdefault(user_id, []).append(cluster_id)

    # -- repository interface --

    async def get_user_preferences(self, user_id):
        await self._enter("get_user_preferences")
        return sorted(self.preferences.get(user_id, []), key=lambda row: -row["confidence"])

    async def get_user_interactions(self, user_id, limit):
        await self._enter("get_user_interactions")
        return list(self.interactions.get(user_id, []))[:limit]

    async def get_user_clusters(self, user_id):
        await self._enter("get_user_clusters")
        return list(self.clusters.get(user_id, []))

    async def get_cluster_members(self, cluster_ids: Sequence[str]):
        await self._enter("get_cluster_members")
        wanted = set(cluster_ids)
        return sorted(user for user, clusters in self.clusters.items() if wanted & set(clusters))

    async def get_candidate_items(self, context: RecommendationContext, radius_meters: float):
        await self._enter("get_candidate_items")
        return [item for item in self.items if within_radius(item, context, radius_meters)]

    async def get_interactions_for_users(self, user_ids, interaction_types):
        await self._enter("get_interactions_for_users")
        return [
            row
            for user_id in user_ids
            for row in self.interactions.get(user_id, [])
            if row["interaction_type"] in interaction_types
        ]

    async def get_recent_interaction_counts(self, window_days, interaction_types):
        await self._enter("get_recent_interaction_counts")
        return {
            item_id: {kind: count for kind, count in by_type.items() if kind in interaction_types}
            for item_id, by_type in self.trending_counts.items()
        }

    async def write_cached_recommendations(self, user_id, recommendations, ttl_seconds, context_hash="default"):
        await self._enter("write_cached_recommendations")
        self.cached[user_id] = {
            "recommendations": recommendations,
            "context_hash": context_hash,
            "expires_at": utcnow() + timedelta(seconds=ttl_seconds),
        }

    async def get_cached_recommendations(self, user_id, now):
        await self._enter("get_cached_recommendations")
        payload = self.cached.get(user_id)
        if payload is None or payload["expires_at"] <= now:
            return None
        return payload

    async def delete_expired_recommendations(self, now):
        await self._enter("delete_expired_recommendations")
        expired = [user for user, payload in self.cached.items() if payload["expires_at"] <= now]
        for user in expired:
            del self.cached[user]
        return len(expired)


# ============================================================================
# Builders
# ============================================================================

def make_item(
    item_id: str,
    item_type: str = "destination",
    features: Sequence[str] = (),
    price: Optional[float] = None,
    rating: Optional[float] = None,
    location: Optional[tuple] = None,
    created_at: Optional[datetime] = None,
    currency: str = "USD"
) -> CatalogItem:
    return CatalogItem(
        id=item_id,
        type=item_type,
        title=f"Item {item_id}",
        price=Price(amount=price, currency=currency) if price is not None else None,
        rating=rating,
        location=ItemLocation(lat=location[0], lng=location[1]) if location else None,
        features=frozenset(features),
        created_at=created_at,
    )


def make_profile(user_id: str = "user-1", **kwargs) -> UserProfile:
    return UserProfile(user_id=user_id, **kwargs)


# ============================================================================
# Fixtures
# ============================================================================

@pytest.fixture
def fake_repo() -> FakeRepository:
    return FakeRepository()


@pytest.fixture
def clock():
    return lambda: FIXED_NOW


@pytest.fixture
def engine(fake_repo, clock) -> RecommendationEngine:
    """Engine over the fake repository, with a fixed clock and no deadline."""
    return RecommendationEngine(fake_repo, ProfileCache(), timeout_seconds=None, clock=clock)


@pytest.fixture
def beach_destination() -> CatalogItem:
    return make_item("beach-1", "destination", ["beach"], price=80, rating=4.5)


@pytest.fixture
def mountain_activity() -> CatalogItem:
    return make_item("mountain-1", "activity", ["mountain"], price=200)
