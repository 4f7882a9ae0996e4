"""
Candidate retrieval
"""
import logging
from typing import List

from app.services.recommendations.models import CatalogItem, RecommendationContext
from app.services.recommendations.repository import RecommendationRepository

logger = logging.getLogger(__name__)


class CandidateSource:
    """Fetches the bounded set of items eligible for one call"""

    def __init__(self, repository: RecommendationRepository):
        self.repository = repository

    async def get_candidates(
        self,
        context: RecommendationContext,
        radius_meters: float
    ) -> List[CatalogItem]:
        """
        Get eligible items for a context

        Duplicate ids keep their first occurrence. A failing repository
        yields an empty list.
        """
        try:
            items = await self.repository.get_candidate_items(context, radius_meters)
        except Exception as e:
            logger.warning("Candidate fetch failed for user %s: %s", context.user_id, e)
            return []

        seen = set()
        candidates = []
        for item in items or []:
            if item.id in seen:
                continue
            seen.add(item.id)
            candidates.append(item)

        return candidates
