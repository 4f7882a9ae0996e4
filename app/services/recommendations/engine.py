"""
Main recommendation engine
Coordinates profile building, candidate retrieval, scoring strategies,
fusion, post-processing, explanations and result caching
"""
import asyncio
import logging
import time
from datetime import datetime
from typing import Callable, Dict, List, Optional

from app.services.recommendations.algorithms import (
    ContentBasedScorer,
    CollaborativeScorer,
    TrendingScorer,
)
from app.services.recommendations.base import ScoringStrategy
from app.services.recommendations.cache import ProfileCache
from app.services.recommendations.cache_writer import RecommendationCacheWriter
from app.services.recommendations.candidates import CandidateSource
from app.services.recommendations.explanations import ExplanationGenerator
from app.services.recommendations.fusion import FusionEngine
from app.services.recommendations.models import (
    CatalogItem,
    RecommendationContext,
    RecommendationOptions,
    ScoredRecommendation,
    UserProfile,
)
from app.services.recommendations.parsers import utcnow
from app.services.recommendations.postprocessing import PostProcessor
from app.services.recommendations.profile_builder import UserProfileBuilder
from app.services.recommendations.repository import RecommendationRepository
from app.services.recommendations.validators import validate_context, validate_options

logger = logging.getLogger(__name__)


class RecommendationEngine:
    """
    Main recommendation engine

    One instance per repository (e.g. per request in the HTTP service);
    the profile cache may be shared between instances. No other state
    survives a call.
    """

    def __init__(
        self,
        repository: RecommendationRepository,
        profile_cache: Optional[ProfileCache] = None,
        *,
        history_limit: int = 100,
        timeout_seconds: Optional[float] = 5.0,
        cache_ttl: int = 86400,
        cache_top_n: int = 10,
        max_similar_users: int = 10,
        similarity_threshold: float = 0.3,
        trending_window_days: int = 7,
        clock: Callable[[], datetime] = utcnow
    ):
        """
        Initialize recommendation engine

        Args:
            repository: Data access
            profile_cache: Optional shared profile cache
            history_limit: Interactions loaded per profile
            timeout_seconds: Default deadline for one call (None for no deadline)
            cache_ttl: Lifetime of cached results in seconds
            cache_top_n: Number of results cached per user
            max_similar_users: Peers used by collaborative scoring
            similarity_threshold: Minimum peer similarity
            trending_window_days: Trending window
            clock: Naive UTC time source used for freshness
        """
        self.repository = repository
        self.timeout_seconds = timeout_seconds

        self.profile_builder = UserProfileBuilder(repository, profile_cache, history_limit)
        self.candidate_source = CandidateSource(repository)
        self.strategies: List[ScoringStrategy] = [
            ContentBasedScorer(),
            CollaborativeScorer(
                repository,
                self.profile_builder,
                max_similar_users=max_similar_users,
                similarity_threshold=similarity_threshold
            ),
            TrendingScorer(repository, window_days=trending_window_days),
        ]
        self.fusion = FusionEngine()
        self.post_processor = PostProcessor(clock=clock)
        self.explanations = ExplanationGenerator()
        self.cache_writer = RecommendationCacheWriter(repository, ttl_seconds=cache_ttl, top_n=cache_top_n)

        self._stats = {
            "calls": 0,
            "timeouts": 0,
            "strategy_failures": 0,
        }

    async def generate_recommendations(
        self,
        context: RecommendationContext,
        options: Optional[RecommendationOptions] = None,
        timeout: Optional[float] = None
    ) -> List[ScoredRecommendation]:
        """
        Generate ranked recommendations for a context

        Args:
            context: Recommendation context
            options: Call options (defaults apply when None)
            timeout: Deadline in seconds, overrides the engine default

        Returns:
            Final ranked recommendations, possibly empty

        Raises:
            ContextValidationError: If context or options are malformed
        """
        options = options or RecommendationOptions()
        validate_context(context)
        validate_options(options)

        self._stats["calls"] += 1
        start_time = time.monotonic()
        budget = timeout if timeout is not None else self.timeout_seconds
        deadline = start_time + budget if budget is not None else None

        loaded = await self._load_inputs(context, options, deadline)
        if loaded is None:
            return []
        profile, candidates = loaded

        if not candidates:
            logger.info("No candidates for user %s", context.user_id)
            return []

        results = await self._run_strategies(candidates, profile, context, deadline)
        fused = self.fusion.combine(results)
        final = self.post_processor.process(fused, profile, context, options)

        if options.include_explanations:
            final = self.explanations.annotate(final, profile)

        await self.cache_writer.write(context.user_id, final, context)

        logger.info(
            "Generated %d recommendations for %s from %d candidates in %.1f ms",
            len(final), context.user_id, len(candidates), (time.monotonic() - start_time) * 1000
        )
        return final

    async def _load_inputs(
        self,
        context: RecommendationContext,
        options: RecommendationOptions,
        deadline: Optional[float]
    ) -> Optional[tuple]:
        """Profile and candidates, fetched concurrently; None if the deadline passed"""
        gathered = asyncio.gather(
            self.profile_builder.build_profile(context.user_id),
            self.candidate_source.get_candidates(context, options.geographic_radius_meters),
            return_exceptions=True
        )
        try:
            profile, candidates = await asyncio.wait_for(gathered, timeout=_remaining(deadline))
        except asyncio.TimeoutError:
            self._stats["timeouts"] += 1
            logger.warning("Deadline reached loading profile/candidates for user %s", context.user_id)
            return None

        if isinstance(profile, Exception):
            logger.warning("Profile build failed for user %s: %s", context.user_id, profile)
            profile = UserProfile.empty(context.user_id)
        if isinstance(candidates, Exception):
            logger.warning("Candidate retrieval failed for user %s: %s", context.user_id, candidates)
            candidates = []

        return profile, candidates

    async def _run_strategies(
        self,
        candidates: List[CatalogItem],
        profile: UserProfile,
        context: RecommendationContext,
        deadline: Optional[float]
    ) -> Dict[str, List[ScoredRecommendation]]:
        """Run all strategies concurrently; late or failing ones contribute nothing"""
        tasks = {
            asyncio.ensure_future(strategy.score_candidates(candidates, profile, context)): strategy.name
            for strategy in self.strategies
        }
        done, pending = await asyncio.wait(tasks.keys(), timeout=_remaining(deadline))

        for task in pending:
            task.cancel()
        if pending:
            self._stats["timeouts"] += 1
            logger.warning(
                "Deadline reached for user %s, dropping strategies: %s",
                context.user_id, sorted(tasks[task] for task in pending)
            )
            await asyncio.gather(*pending, return_exceptions=True)

        results: Dict[str, List[ScoredRecommendation]] = {}
        for task in done:
            name = tasks[task]
            error = task.exception()
            if error is not None:
                self._stats["strategy_failures"] += 1
                logger.warning("Strategy %s failed for user %s: %s", name, context.user_id, error)
                continue
            results[name] = task.result()
            logger.debug("Strategy %s returned %d items", name, len(results[name]))

        return results

    def invalidate_user(self, user_id: str) -> None:
        """Forget cached state of a user (call after the user interacted)"""
        self.profile_builder.invalidate(user_id)

    def get_stats(self) -> Dict:
        """Get engine statistics"""
        cache = self.profile_builder.cache
        return {
            **self._stats,
            "strategies": [strategy.get_info() for strategy in self.strategies],
            "fusion_weights": dict(self.fusion.weights),
            "profile_cache": cache.get_stats() if cache is not None else None,
        }


def _remaining(deadline: Optional[float]) -> Optional[float]:
    if deadline is None:
        return None
    return max(0.0, deadline - time.monotonic())
