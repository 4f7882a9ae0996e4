"""
Request bodies of the recommendations API
"""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from app.services.recommendations.models import (
    Budget,
    DateRange,
    GeoPoint,
    RecommendationContext,
    RecommendationOptions,
)
from app.services.recommendations.parsers import parse_datetime


class LocationIn(BaseModel):
    lat: float
    lng: float


class TravelDatesIn(BaseModel):
    start: datetime
    end: datetime


class BudgetIn(BaseModel):
    min: float
    max: float
    currency: str = "USD"


class ContextIn(BaseModel):
    current_location: Optional[LocationIn] = None
    travel_dates: Optional[TravelDatesIn] = None
    budget: Optional[BudgetIn] = None
    travel_style: Optional[str] = None
    group_size: Optional[int] = None
    previous_bookings: List[str] = Field(default_factory=list)
    search_query: Optional[str] = None


class OptionsIn(BaseModel):
    max_results: int = Field(20, ge=1, le=50)
    min_score: float = Field(0.1, ge=0, le=1)
    diversity_factor: float = Field(0.3, ge=0, le=1)
    include_explanations: bool = True
    exclude_interacted: bool = True
    boost_fresh_content: bool = True
    geographic_radius_meters: float = Field(50000, ge=1000, le=100000)


class RecommendationRequest(BaseModel):
    user_id: str = Field(..., min_length=1)
    context: ContextIn = Field(default_factory=ContextIn)
    options: OptionsIn = Field(default_factory=OptionsIn)

    def to_context(self) -> RecommendationContext:
        """Build the engine context (semantic checks happen in the engine)"""
        ctx = self.context
        return RecommendationContext(
            user_id=self.user_id,
            current_location=GeoPoint(lat=ctx.current_location.lat, lng=ctx.current_location.lng)
            if ctx.current_location else None,
            travel_dates=DateRange(
                start=parse_datetime(ctx.travel_dates.start),
                end=parse_datetime(ctx.travel_dates.end)
            )
            if ctx.travel_dates else None,
            budget=Budget(min=ctx.budget.min, max=ctx.budget.max, currency=ctx.budget.currency)
            if ctx.budget else None,
            travel_style=ctx.travel_style,
            group_size=ctx.group_size,
            previous_booking_ids=tuple(ctx.previous_bookings),
            search_query=ctx.search_query,
        )

    def to_options(self) -> RecommendationOptions:
        return RecommendationOptions(**self.options.model_dump())
