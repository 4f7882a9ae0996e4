"""
Data access for the recommendation engine

The engine only talks to RecommendationRepository; SqlRecommendationRepository
is the PostgreSQL implementation used by the HTTP service.
"""
import logging
import math
from abc import ABC, abstractmethod
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy import select, delete, func, and_
from sqlalchemy.ext.asyncio import async_sessionmaker

from app.models.models import (
    UserPreference,
    UserInteraction,
    UserCluster,
    Place,
    Trip,
    PersonalizedRecommendation,
)
from app.services.recommendations.features import haversine_distance
from app.services.recommendations.models import CatalogItem, RecommendationContext
from app.services.recommendations.parsers import place_to_item, trip_to_item, utcnow
from app.services.utils.constants import (
    EARTH_RADIUS_METERS,
    GENERATION_ALGORITHM,
    RECOMMENDATION_TYPE_HYBRID,
)

logger = logging.getLogger(__name__)

TRIP_STATUS_GENERATED = "generated"


class RecommendationRepository(ABC):
    """
    Everything the engine reads from or writes to storage

    Row-shaped results are plain dicts:
        preferences:  {type, value, confidence}
        interactions: {user_id, target_id, target_type, interaction_type, timestamp}
    """

    @abstractmethod
    async def get_user_preferences(self, user_id: str) -> List[Dict[str, Any]]:
        """Preference rows ordered by confidence descending"""

    @abstractmethod
    async def get_user_interactions(self, user_id: str, limit: int) -> List[Dict[str, Any]]:
        """Most recent interaction rows first, at most `limit`"""

    @abstractmethod
    async def get_user_clusters(self, user_id: str) -> List[str]:
        """Cluster ids the user belongs to"""

    @abstractmethod
    async def get_cluster_members(self, cluster_ids: Sequence[str]) -> List[str]:
        """Distinct user ids belonging to any of the clusters"""

    @abstractmethod
    async def get_candidate_items(
        self,
        context: RecommendationContext,
        radius_meters: float
    ) -> List[CatalogItem]:
        """Eligible catalog items, geo-filtered when the context has a location"""

    @abstractmethod
    async def get_interactions_for_users(
        self,
        user_ids: Sequence[str],
        interaction_types: Sequence[str]
    ) -> List[Dict[str, Any]]:
        """Interaction rows of several users restricted to the given types"""

    @abstractmethod
    async def get_recent_interaction_counts(
        self,
        window_days: int,
        interaction_types: Sequence[str]
    ) -> Dict[str, Dict[str, int]]:
        """Map item_id -> {interaction_type: count} over the trailing window"""

    @abstractmethod
    async def write_cached_recommendations(
        self,
        user_id: str,
        recommendations: List[Dict[str, Any]],
        ttl_seconds: int,
        context_hash: str = "default"
    ) -> None:
        """Replace the user's cached recommendations"""

    @abstractmethod
    async def get_cached_recommendations(
        self,
        user_id: str,
        now: datetime
    ) -> Optional[Dict[str, Any]]:
        """Newest unexpired cache payload or None"""

    @abstractmethod
    async def delete_expired_recommendations(self, now: datetime) -> int:
        """Delete expired cache rows, return how many were removed"""


def bounding_box(lat: float, lng: float, radius_meters: float) -> Dict[str, float]:
    """
    Lat/lng box that contains the circle of `radius_meters` around a point

    Used as an index-friendly SQL prefilter; callers still apply the exact
    haversine check.
    """
    d_lat = math.degrees(radius_meters / EARTH_RADIUS_METERS)
    cos_lat = math.cos(math.radians(lat))
    if cos_lat < 1e-6:
        d_lng = 180.0
    else:
        d_lng = min(180.0, math.degrees(radius_meters / (EARTH_RADIUS_METERS * cos_lat)))

    return {
        "min_lat": max(-90.0, lat - d_lat),
        "max_lat": min(90.0, lat + d_lat),
        "min_lng": lng - d_lng,
        "max_lng": lng + d_lng,
    }


def within_radius(item: CatalogItem, context: RecommendationContext, radius_meters: float) -> bool:
    """
    True if the item is eligible for the context's geo filter

    Without a context location every item passes; with one, items without
    coordinates are dropped.
    """
    origin = context.current_location
    if origin is None:
        return True
    if item.location is None:
        return False
    distance = haversine_distance(origin.lat, origin.lng, item.location.lat, item.location.lng)
    return distance <= radius_meters


class SqlRecommendationRepository(RecommendationRepository):
    """
    SQLAlchemy implementation over the service database

    The engine calls several methods concurrently, and an AsyncSession must
    not be shared between tasks, so every method opens its own session from
    `session_factory`.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker,
        max_places: int = 100,
        max_trips: int = 50
    ):
        self.session_factory = session_factory
        self.max_places = max_places
        self.max_trips = max_trips

    async def get_user_preferences(self, user_id: str) -> List[Dict[str, Any]]:
        async with self.session_factory() as db:
            result = await db.execute(
                select(
                    UserPreference.preference_type,
                    UserPreference.preference_value,
                    UserPreference.confidence_score
                )
                .where(UserPreference.user_id == user_id)
                .order_by(UserPreference.confidence_score.desc())
            )
            rows = result.all()
        return [
            {"type": row.preference_type, "value": row.preference_value, "confidence": row.confidence_score}
            for row in rows
        ]

    async def get_user_interactions(self, user_id: str, limit: int) -> List[Dict[str, Any]]:
        async with self.session_factory() as db:
            result = await db.execute(
                select(UserInteraction)
                .where(UserInteraction.user_id == user_id)
                .order_by(UserInteraction.timestamp.desc())
                .limit(limit)
            )
            return [_interaction_row(row) for row in result.scalars().all()]

    async def get_user_clusters(self, user_id: str) -> List[str]:
        async with self.session_factory() as db:
            result = await db.execute(
                select(UserCluster.cluster_id).where(UserCluster.user_id == user_id)
            )
            return [row.cluster_id for row in result.all()]

    async def get_cluster_members(self, cluster_ids: Sequence[str]) -> List[str]:
        if not cluster_ids:
            return []

        async with self.session_factory() as db:
            result = await db.execute(
                select(UserCluster.user_id)
                .where(UserCluster.cluster_id.in_(list(cluster_ids)))
                .distinct()
                .order_by(UserCluster.user_id)
            )
            return [row.user_id for row in result.all()]

    async def get_candidate_items(
        self,
        context: RecommendationContext,
        radius_meters: float
    ) -> List[CatalogItem]:
        places_query = select(Place).order_by(Place.rating.desc().nulls_last(), Place.id)
        if context.current_location is not None:
            box = bounding_box(context.current_location.lat, context.current_location.lng, radius_meters)
            places_query = places_query.where(
                and_(
                    Place.latitude.between(box["min_lat"], box["max_lat"]),
                    Place.longitude.between(box["min_lng"], box["max_lng"]),
                )
            )

        async with self.session_factory() as db:
            places_result = await db.execute(places_query.limit(self.max_places))
            items = [place_to_item(row) for row in places_result.scalars().all()]

            trips_result = await db.execute(
                select(Trip)
                .where(Trip.status == TRIP_STATUS_GENERATED)
                .order_by(Trip.created_at.desc(), Trip.id)
                .limit(self.max_trips)
            )
            items.extend(trip_to_item(row) for row in trips_result.scalars().all())

        candidates = [item for item in items if within_radius(item, context, radius_meters)]
        logger.debug(
            "Candidate fetch for %s: %d places/trips read, %d within radius",
            context.user_id, len(items), len(candidates)
        )
        return candidates

    async def get_interactions_for_users(
        self,
        user_ids: Sequence[str],
        interaction_types: Sequence[str]
    ) -> List[Dict[str, Any]]:
        if not user_ids:
            return []

        async with self.session_factory() as db:
            result = await db.execute(
                select(UserInteraction)
                .where(
                    UserInteraction.user_id.in_(list(user_ids)),
                    UserInteraction.interaction_type.in_(list(interaction_types))
                )
                .order_by(UserInteraction.timestamp.desc())
            )
            return [_interaction_row(row) for row in result.scalars().all()]

    async def get_recent_interaction_counts(
        self,
        window_days: int,
        interaction_types: Sequence[str]
    ) -> Dict[str, Dict[str, int]]:
        since = utcnow() - timedelta(days=window_days)
        async with self.session_factory() as db:
            result = await db.execute(
                select(
                    UserInteraction.target_id,
                    UserInteraction.interaction_type,
                    func.count(UserInteraction.id).label("count")
                )
                .where(
                    UserInteraction.timestamp >= since,
                    UserInteraction.interaction_type.in_(list(interaction_types))
                )
                .group_by(UserInteraction.target_id, UserInteraction.interaction_type)
            )
            rows = result.all()

        counts: Dict[str, Dict[str, int]] = {}
        for row in rows:
            counts.setdefault(row.target_id, {})[row.interaction_type] = int(row.count)
        return counts

    async def write_cached_recommendations(
        self,
        user_id: str,
        recommendations: List[Dict[str, Any]],
        ttl_seconds: int,
        context_hash: str = "default"
    ) -> None:
        now = utcnow()
        async with self.session_factory() as db:
            try:
                await db.execute(
                    delete(PersonalizedRecommendation).where(PersonalizedRecommendation.user_id == user_id)
                )
                db.add(PersonalizedRecommendation(
                    user_id=user_id,
                    recommendation_type=RECOMMENDATION_TYPE_HYBRID,
                    context_hash=context_hash,
                    recommendations=recommendations,
                    confidence_scores=[rec.get("confidence") for rec in recommendations],
                    generation_algorithm=GENERATION_ALGORITHM,
                    expires_at=now + timedelta(seconds=ttl_seconds),
                    created_at=now,
                ))
                await db.commit()
            except Exception:
                await db.rollback()
                raise

    async def get_cached_recommendations(
        self,
        user_id: str,
        now: datetime
    ) -> Optional[Dict[str, Any]]:
        async with self.session_factory() as db:
            result = await db.execute(
                select(PersonalizedRecommendation)
                .where(
                    PersonalizedRecommendation.user_id == user_id,
                    PersonalizedRecommendation.expires_at > now
                )
                .order_by(PersonalizedRecommendation.created_at.desc())
                .limit(1)
            )
            row = result.scalar_one_or_none()

        if row is None:
            return None

        return {
            "user_id": row.user_id,
            "recommendation_type": row.recommendation_type,
            "context_hash": row.context_hash,
            "recommendations": row.recommendations,
            "confidence_scores": row.confidence_scores,
            "generation_algorithm": row.generation_algorithm,
            "created_at": row.created_at.isoformat() if row.created_at else None,
            "expires_at": row.expires_at.isoformat(),
        }

    async def delete_expired_recommendations(self, now: datetime) -> int:
        async with self.session_factory() as db:
            try:
                result = await db.execute(
                    delete(PersonalizedRecommendation).where(PersonalizedRecommendation.expires_at <= now)
                )
                await db.commit()
            except Exception:
                await db.rollback()
                raise
        return result.rowcount or 0


def _interaction_row(row: UserInteraction) -> Dict[str, Any]:
    return {
        "user_id": row.user_id,
        "target_id": row.target_id,
        "target_type": row.target_type,
        "interaction_type": row.interaction_type,
        "timestamp": row.timestamp,
    }
