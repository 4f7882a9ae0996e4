"""
Recommendations service - high-level business logic for recommendations
Wraps the recommendation engine with settings, response shaping and housekeeping
"""
import logging
import time
from dataclasses import replace
from typing import Any, Dict, List, Optional

from app.core.config import settings
from app.core.database import AsyncSessionLocal
from app.services.recommendations import (
    ProfileCache,
    RecommendationContext,
    RecommendationEngine,
    RecommendationOptions,
    RecommendationRepository,
    ScoredRecommendation,
    SqlRecommendationRepository,
)
from app.services.recommendations.models import GeoPoint, QUICK_OPTIONS_OVERRIDES
from app.services.recommendations.parsers import utcnow

logger = logging.getLogger(__name__)

HIGH_CONFIDENCE_THRESHOLD = 0.8


def create_profile_cache() -> ProfileCache:
    """Process-wide profile cache sized from settings"""
    return ProfileCache(max_size=settings.PROFILE_CACHE_MAX_SIZE, ttl=settings.PROFILE_CACHE_TTL)


def build_engine(
    repository: RecommendationRepository,
    profile_cache: Optional[ProfileCache] = None
) -> RecommendationEngine:
    """
    Create an engine configured from settings

    Args:
        repository: Data access for this engine
        profile_cache: Shared profile cache (optional)
    """
    return RecommendationEngine(
        repository,
        profile_cache,
        history_limit=settings.INTERACTION_HISTORY_LIMIT,
        timeout_seconds=settings.RECOMMENDATION_TIMEOUT_SECONDS,
        cache_ttl=settings.RECOMMENDATION_CACHE_TTL,
        cache_top_n=settings.RECOMMENDATION_CACHE_TOP_N,
        max_similar_users=settings.MAX_SIMILAR_USERS,
        similarity_threshold=settings.USER_SIMILARITY_THRESHOLD,
        trending_window_days=settings.TRENDING_WINDOW_DAYS,
    )


def default_options(**overrides) -> RecommendationOptions:
    """Options with defaults from settings, individual fields overridable"""
    options = RecommendationOptions(
        max_results=settings.RECOMMENDATION_MAX_RESULTS,
        min_score=settings.RECOMMENDATION_MIN_SCORE,
        diversity_factor=settings.RECOMMENDATION_DIVERSITY_FACTOR,
        geographic_radius_meters=settings.RECOMMENDATION_GEO_RADIUS_METERS,
    )
    overrides = {key: value for key, value in overrides.items() if value is not None}
    return replace(options, **overrides)


def mask_user_id(user_id: str) -> str:
    return f"{user_id[:8]}***"


def summarize(recommendations: List[ScoredRecommendation]) -> Dict[str, Any]:
    """
    Aggregate figures about a result list

    Sources are the strategies that contributed to any result.
    """
    count = len(recommendations)
    sources = sorted({name for rec in recommendations for name in rec.strategy_scores})
    return {
        "total_results": count,
        "high_confidence_results": sum(1 for rec in recommendations if rec.confidence > HIGH_CONFIDENCE_THRESHOLD),
        "sources": sources,
        "average_score": round(sum(rec.score for rec in recommendations) / count, 4) if count else 0,
        "average_confidence": round(sum(rec.confidence for rec in recommendations) / count, 4) if count else 0,
    }


async def get_recommendations(
    engine: RecommendationEngine,
    context: RecommendationContext,
    options: Optional[RecommendationOptions] = None
) -> Dict[str, Any]:
    """
    Generate recommendations and shape the API response

    Args:
        engine: Recommendation engine
        context: Recommendation context
        options: Call options (settings defaults when None)

    Returns:
        {
            "recommendations": [...],
            "context": {"user_id": "abcdefgh***", "requested_at", "processing_time_ms", "filters"},
            "meta": {"total_results", "high_confidence_results", "sources", ...}
        }

    Raises:
        ContextValidationError: If context or options are malformed
    """
    options = options or default_options()
    requested_at = utcnow()
    start_time = time.monotonic()

    recommendations = await engine.generate_recommendations(context, options)

    return {
        "recommendations": [rec.to_dict() for rec in recommendations],
        "context": {
            "user_id": mask_user_id(context.user_id),
            "requested_at": requested_at.isoformat(),
            "processing_time_ms": round((time.monotonic() - start_time) * 1000, 2),
            "filters": {
                "location": context.current_location is not None,
                "budget": context.budget is not None,
                "travel_style": context.travel_style,
                "max_results": options.max_results,
                "min_score": options.min_score,
                "diversity_factor": options.diversity_factor,
            },
        },
        "meta": summarize(recommendations),
    }


async def get_quick_recommendations(
    engine: RecommendationEngine,
    user_id: str,
    lat: Optional[float] = None,
    lng: Optional[float] = None,
    limit: int = 10
) -> Dict[str, Any]:
    """
    Fast preset: higher score floor, more diversity, no explanations

    Args:
        engine: Recommendation engine
        user_id: User identifier
        lat: Optional latitude (used only together with lng)
        lng: Optional longitude
        limit: Maximum number of results
    """
    location = GeoPoint(lat=lat, lng=lng) if lat is not None and lng is not None else None
    context = RecommendationContext(user_id=user_id, current_location=location)
    options = default_options(max_results=limit, **QUICK_OPTIONS_OVERRIDES)
    return await get_recommendations(engine, context, options)


async def get_cached_recommendations(
    repository: RecommendationRepository,
    user_id: str
) -> Optional[Dict[str, Any]]:
    """Unexpired cached payload of a user, None if there is none"""
    return await repository.get_cached_recommendations(user_id, utcnow())


async def purge_expired_recommendations() -> int:
    """
    Delete expired cached recommendations (scheduled job)

    Returns:
        Number of rows removed
    """
    repository = SqlRecommendationRepository(AsyncSessionLocal)
    removed = await repository.delete_expired_recommendations(utcnow())

    logger.info("Purged %d expired cached recommendation rows", removed)
    return removed
