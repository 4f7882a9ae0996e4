"""
Models for recommendations
"""
from .catalog import CatalogItem, Price, ItemLocation
from .context import (
    GeoPoint,
    DateRange,
    Budget,
    RecommendationContext,
    RecommendationOptions,
    QUICK_OPTIONS_OVERRIDES,
)
from .recommendation import (
    RecommendationSource,
    ReasoningFactor,
    RecommendationReasoning,
    ScoredRecommendation,
)
from .user_profile import UserProfile, InteractionRecord, BehaviorSummary

__all__ = [
    "CatalogItem",
    "Price",
    "ItemLocation",
    "GeoPoint",
    "DateRange",
    "Budget",
    "RecommendationContext",
    "RecommendationOptions",
    "QUICK_OPTIONS_OVERRIDES",
    "RecommendationSource",
    "ReasoningFactor",
    "RecommendationReasoning",
    "ScoredRecommendation",
    "UserProfile",
    "InteractionRecord",
    "BehaviorSummary",
]
