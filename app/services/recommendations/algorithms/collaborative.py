"""
Collaborative scoring
Recommends what similar users in the same peer clusters engaged with
"""
import asyncio
import logging
from typing import Dict, List, Tuple

import numpy as np
import pandas as pd
from sklearn.metrics.pairwise import cosine_similarity as pairwise_cosine

from app.services.recommendations.base import ScoringStrategy, calculate_confidence
from app.services.recommendations.features import min_max_normalize
from app.services.recommendations.models import (
    CatalogItem,
    RecommendationContext,
    RecommendationReasoning,
    RecommendationSource,
    ReasoningFactor,
    ScoredRecommendation,
    UserProfile,
)
from app.services.recommendations.profile_builder import UserProfileBuilder
from app.services.recommendations.repository import RecommendationRepository
from app.services.utils.constants import (
    STRATEGY_COLLABORATIVE,
    STRATEGY_WEIGHTS,
    MIN_STRATEGY_SCORE,
    HIGH_VALUE_INTERACTIONS,
    INTERACTION_WEIGHTS,
    DEFAULT_INTERACTION_WEIGHT,
    PREFERENCE_SIMILARITY_WEIGHT,
    BEHAVIOR_SIMILARITY_WEIGHT,
)

logger = logging.getLogger(__name__)


def preference_similarity(a: Dict[str, float], b: Dict[str, float]) -> float:
    """
    Overlap of two preference maps

    Mean of min/max over the keys both users hold with a positive score;
    0.0 when they share none.
    """
    ratios = []
    for key in a.keys() & b.keys():
        if a[key] > 0 and b[key] > 0:
            ratios.append(min(a[key], b[key]) / max(a[key], b[key]))

    if not ratios:
        return 0.0
    return sum(ratios) / len(ratios)


class CollaborativeScorer(ScoringStrategy):
    """
    Collaborative scoring over cluster peers

    1. Peers are the members of the user's clusters.
    2. Similarity = 0.6 * preference overlap + 0.4 * behavior cosine;
       peers above the threshold are ranked and truncated.
    3. Peer like/save/book/share interactions are summed per candidate with
       interaction-type weights, then min-max normalized.
    """

    def __init__(
        self,
        repository: RecommendationRepository,
        profile_builder: UserProfileBuilder,
        max_similar_users: int = 10,
        similarity_threshold: float = 0.3
    ):
        super().__init__(name=STRATEGY_COLLABORATIVE)
        self.repository = repository
        self.profile_builder = profile_builder
        self.max_similar_users = max_similar_users
        self.similarity_threshold = similarity_threshold

    async def find_similar_users(self, profile: UserProfile) -> List[Tuple[str, float]]:
        """
        Find the most similar peers of a user

        Args:
            profile: Target user profile

        Returns:
            (user_id, similarity) pairs, most similar first
        """
        if not profile.cluster_ids:
            return []

        try:
            members = await self.repository.get_cluster_members(sorted(profile.cluster_ids))
        except Exception as e:
            logger.warning("Cluster member fetch failed for user %s: %s", profile.user_id, e)
            return []

        peer_ids = sorted({str(member) for member in members} - {profile.user_id})
        if not peer_ids:
            return []

        built = await asyncio.gather(
            *(self.profile_builder.build_profile(peer_id) for peer_id in peer_ids),
            return_exceptions=True
        )
        peers = []
        for peer_id, peer in zip(peer_ids, built):
            if isinstance(peer, Exception):
                logger.warning("Peer profile build failed for %s: %s", peer_id, peer)
                continue
            peers.append(peer)

        if not peers:
            return []

        behavior_matrix = np.array([peer.behavior_vector for peer in peers], dtype=float)
        target_behavior = np.array([profile.behavior_vector], dtype=float)
        behavior_scores = pairwise_cosine(target_behavior, behavior_matrix)[0]

        similar = []
        for peer, behavior in zip(peers, behavior_scores):
            combined = (
                PREFERENCE_SIMILARITY_WEIGHT * preference_similarity(profile.preferences, peer.preferences)
                + BEHAVIOR_SIMILARITY_WEIGHT * float(behavior)
            )
            if combined > self.similarity_threshold:
                similar.append((peer.user_id, combined))

        similar.sort(key=lambda pair: (-pair[1], pair[0]))
        return similar[:self.max_similar_users]

    async def score_candidates(
        self,
        candidates: List[CatalogItem],
        profile: UserProfile,
        context: RecommendationContext
    ) -> List[ScoredRecommendation]:
        if not candidates:
            return []

        similar_users = await self.find_similar_users(profile)
        if not similar_users:
            logger.debug("Collaborative: no similar users for %s", profile.user_id)
            return []

        peer_ids = [user_id for user_id, _ in similar_users]
        try:
            rows = await self.repository.get_interactions_for_users(peer_ids, HIGH_VALUE_INTERACTIONS)
        except Exception as e:
            logger.warning("Peer interaction fetch failed for user %s: %s", profile.user_id, e)
            return []

        candidate_ids = [item.id for item in candidates]
        interactions = pd.DataFrame(
            rows, columns=["user_id", "target_id", "target_type", "interaction_type", "timestamp"]
        )
        interactions = interactions[
            interactions["target_id"].astype(str).isin(candidate_ids)
            & interactions["interaction_type"].isin(HIGH_VALUE_INTERACTIONS)
        ]
        if interactions.empty:
            return []

        interactions = interactions.assign(
            target_id=interactions["target_id"].astype(str),
            weight=interactions["interaction_type"].map(
                lambda kind: INTERACTION_WEIGHTS.get(kind, DEFAULT_INTERACTION_WEIGHT)
            ),
        )
        totals = interactions.groupby("target_id")["weight"].sum()
        contributors = interactions.groupby("target_id")["user_id"].nunique()

        raw_scores = {item_id: float(totals.get(item_id, 0.0)) for item_id in candidate_ids}
        normalized = min_max_normalize(raw_scores)

        strategy_weight = STRATEGY_WEIGHTS[self.name]
        recommendations = []
        for item in candidates:
            score = normalized.get(item.id, 0.0)
            if score <= MIN_STRATEGY_SCORE:
                continue

            peer_count = int(contributors.get(item.id, 0))
            recommendations.append(ScoredRecommendation(
                item=item,
                score=score,
                confidence=calculate_confidence(score, profile),
                reasoning=RecommendationReasoning(
                    factors=[ReasoningFactor(
                        factor="similar_users",
                        weight=strategy_weight,
                        contribution=score * strategy_weight,
                        explanation="Popular among users with similar preferences",
                    )],
                    similar_users=f"Based on {peer_count} similar users",
                ),
                source=RecommendationSource.COLLABORATIVE,
                strategy_scores={self.name: score},
            ))

        recommendations.sort(key=lambda rec: (-rec.score, rec.item_id))
        logger.debug(
            "Collaborative: %d similar users, %d items scored for %s",
            len(similar_users), len(recommendations), profile.user_id
        )
        return recommendations
