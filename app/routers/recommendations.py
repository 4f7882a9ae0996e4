"""
Recommendations router - personalized travel recommendations
"""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from app.core.config import settings
from app.core.database import AsyncSessionLocal
from app.schemas.recommendations import RecommendationRequest
from app.services import recommendations_service
from app.services.recommendations import (
    ProfileCache,
    RecommendationEngine,
    RecommendationRepository,
    SqlRecommendationRepository,
)

router = APIRouter()


def get_repository() -> RecommendationRepository:
    """Repository over the service database, one session per query"""
    return SqlRecommendationRepository(
        AsyncSessionLocal,
        max_places=settings.MAX_CANDIDATE_PLACES,
        max_trips=settings.MAX_CANDIDATE_TRIPS
    )


def get_profile_cache(request: Request) -> ProfileCache:
    """Process-wide profile cache kept on the application state"""
    cache = getattr(request.app.state, "profile_cache", None)
    if cache is None:
        cache = recommendations_service.create_profile_cache()
        request.app.state.profile_cache = cache
    return cache


def get_engine(
    repository: RecommendationRepository = Depends(get_repository),
    profile_cache: ProfileCache = Depends(get_profile_cache)
) -> RecommendationEngine:
    return recommendations_service.build_engine(repository, profile_cache)


@router.post("")
async def create_recommendations(
    body: RecommendationRequest,
    engine: RecommendationEngine = Depends(get_engine)
):
    """
    Generate personalized recommendations

    Malformed context (e.g. budget min above max) is answered with 400.
    """
    data = await recommendations_service.get_recommendations(
        engine, body.to_context(), body.to_options()
    )
    return {"success": True, "data": data}


@router.get("/quick/{user_id}")
async def get_quick_recommendations(
    user_id: str,
    lat: Optional[float] = Query(None, ge=-90, le=90, description="Current latitude"),
    lng: Optional[float] = Query(None, ge=-180, le=180, description="Current longitude"),
    limit: int = Query(10, ge=1, le=50, description="Number of recommendations"),
    engine: RecommendationEngine = Depends(get_engine)
):
    """
    Quick recommendations: no explanations, stronger diversity
    """
    data = await recommendations_service.get_quick_recommendations(engine, user_id, lat, lng, limit)
    return {"success": True, "data": data}


@router.get("/cached/{user_id}")
async def get_cached_recommendations(
    user_id: str,
    repository: RecommendationRepository = Depends(get_repository)
):
    """
    Last cached recommendations of a user (valid for 24 hours)
    """
    payload = await recommendations_service.get_cached_recommendations(repository, user_id)
    if payload is None:
        raise HTTPException(status_code=404, detail="No cached recommendations")
    return {"success": True, "data": payload}
