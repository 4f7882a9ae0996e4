"""
Persists top recommendations for later reuse
"""
import logging
from typing import List

from app.services.recommendations.models import RecommendationContext, ScoredRecommendation
from app.services.recommendations.repository import RecommendationRepository

logger = logging.getLogger(__name__)


class RecommendationCacheWriter:
    """Best-effort writer: failures are logged, never raised"""

    def __init__(self, repository: RecommendationRepository, ttl_seconds: int = 86400, top_n: int = 10):
        self.repository = repository
        self.ttl_seconds = ttl_seconds
        self.top_n = top_n

    async def write(
        self,
        user_id: str,
        recommendations: List[ScoredRecommendation],
        context: RecommendationContext
    ) -> bool:
        """
        Store the top-N of a result list

        Returns:
            True if the write succeeded
        """
        if not recommendations:
            return False

        payload = [rec.to_dict() for rec in recommendations[:self.top_n]]
        try:
            await self.repository.write_cached_recommendations(
                user_id, payload, self.ttl_seconds, context.context_hash()
            )
        except Exception as e:
            logger.warning("Cache write failed for user %s: %s", user_id, e)
            return False

        logger.debug("Cached %d recommendations for %s", len(payload), user_id)
        return True
