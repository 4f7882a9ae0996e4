"""
User profile construction
"""
import asyncio
import logging
from typing import Any, Dict, List, Optional

from app.services.recommendations.behavior import build_behavior_vector, summarize_behavior
from app.services.recommendations.cache import ProfileCache
from app.services.recommendations.models import UserProfile, InteractionRecord
from app.services.recommendations.parsers import parse_datetime
from app.services.recommendations.repository import RecommendationRepository
from app.services.utils.constants import INTERACTION_WEIGHTS, DEFAULT_INTERACTION_WEIGHT

logger = logging.getLogger(__name__)


def _clamp_unit(value: Any) -> float:
    try:
        value = float(value)
    except (TypeError, ValueError):
        return 0.0
    if value != value:
        return 0.0
    return max(0.0, min(1.0, value))


def preferences_from_rows(rows: List[Dict[str, Any]]) -> Dict[str, float]:
    """Preference rows -> {"type:value": confidence}, confidences clamped to [0, 1]"""
    preferences: Dict[str, float] = {}
    for row in rows:
        if not row.get("type") or not row.get("value"):
            continue
        key = f"{row['type']}:{row['value']}"
        score = _clamp_unit(row.get("confidence"))
        preferences[key] = max(score, preferences.get(key, 0.0))
    return preferences


def interactions_from_rows(rows: List[Dict[str, Any]]) -> List[InteractionRecord]:
    """Interaction rows -> history records weighted by interaction type"""
    return [
        InteractionRecord(
            item_id=str(row["target_id"]),
            item_type=row.get("target_type") or "",
            interaction_type=row["interaction_type"],
            weight=INTERACTION_WEIGHTS.get(row["interaction_type"], DEFAULT_INTERACTION_WEIGHT),
            timestamp=parse_datetime(row.get("timestamp")),
        )
        for row in rows
        if row.get("target_id") is not None and row.get("interaction_type")
    ]


class UserProfileBuilder:
    """
    Builds UserProfile objects from stored preferences, interactions and clusters

    A failed fetch degrades the profile (that part stays empty) instead of
    failing the call. Only fully fetched profiles are cached.
    """

    def __init__(
        self,
        repository: RecommendationRepository,
        cache: Optional[ProfileCache] = None,
        history_limit: int = 100
    ):
        self.repository = repository
        self.cache = cache
        self.history_limit = history_limit

    async def build_profile(self, user_id: str, use_cache: bool = True) -> UserProfile:
        """
        Build (or fetch from cache) the profile of a user

        Args:
            user_id: User identifier
            use_cache: Read and write the profile cache

        Returns:
            UserProfile, possibly empty
        """
        if use_cache and self.cache is not None:
            cached = self.cache.get(user_id)
            if cached is not None:
                return cached

        preference_rows, interaction_rows, cluster_ids = await asyncio.gather(
            self.repository.get_user_preferences(user_id),
            self.repository.get_user_interactions(user_id, self.history_limit),
            self.repository.get_user_clusters(user_id),
            return_exceptions=True
        )

        degraded = False
        fetched = []
        for name, value in (
            ("preferences", preference_rows),
            ("interactions", interaction_rows),
            ("clusters", cluster_ids),
        ):
            if isinstance(value, Exception):
                logger.warning("Profile fetch of %s failed for user %s: %s", name, user_id, value)
                degraded = True
                value = []
            fetched.append(value or [])
        preference_rows, interaction_rows, cluster_ids = fetched

        history = interactions_from_rows(interaction_rows)
        profile = UserProfile(
            user_id=user_id,
            preferences=preferences_from_rows(preference_rows),
            behavior_vector=build_behavior_vector(history),
            cluster_ids={str(cluster_id) for cluster_id in cluster_ids},
            interaction_history=history,
            behavior=summarize_behavior(history),
        )

        logger.debug(
            "Built profile for %s: %d preferences, %d interactions, %d clusters",
            user_id, len(profile.preferences), len(history), len(profile.cluster_ids)
        )

        if use_cache and self.cache is not None and not degraded:
            self.cache.set(profile)

        return profile

    def invalidate(self, user_id: str) -> None:
        """Forget the cached profile of a user"""
        if self.cache is not None:
            self.cache.invalidate(user_id)
