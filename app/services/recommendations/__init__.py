"""
Recommendations module
Hybrid travel recommendations: content-based, collaborative and trending
scoring fused and post-processed per user context
"""
from .engine import RecommendationEngine
from .cache import ProfileCache
from .exceptions import RecommendationError, ContextValidationError
from .models import (
    RecommendationContext,
    RecommendationOptions,
    ScoredRecommendation,
    UserProfile,
)
from .repository import RecommendationRepository, SqlRecommendationRepository

__all__ = [
    "RecommendationEngine",
    "ProfileCache",
    "RecommendationError",
    "ContextValidationError",
    "RecommendationContext",
    "RecommendationOptions",
    "ScoredRecommendation",
    "UserProfile",
    "RecommendationRepository",
    "SqlRecommendationRepository"
]
