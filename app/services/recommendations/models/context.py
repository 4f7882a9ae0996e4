"""
Request-side models: what the caller asks for and how
"""
import hashlib
import json
from dataclasses import dataclass, asdict
from datetime import datetime
from typing import Optional, Tuple, Dict, Any


@dataclass(frozen=True)
class GeoPoint:
    """Latitude/longitude in degrees"""
    lat: float
    lng: float


@dataclass(frozen=True)
class DateRange:
    start: datetime
    end: datetime


@dataclass(frozen=True)
class Budget:
    """Budget range in a single currency"""
    min: float
    max: float
    currency: str = "USD"


@dataclass(frozen=True)
class RecommendationContext:
    """
    The query for one recommendation call

    Immutable for the duration of the call. Validation happens at the
    engine boundary (see app.services.recommendations.validators).
    """
    user_id: str
    current_location: Optional[GeoPoint] = None
    travel_dates: Optional[DateRange] = None
    budget: Optional[Budget] = None
    travel_style: Optional[str] = None
    group_size: Optional[int] = None
    previous_booking_ids: Tuple[str, ...] = ()
    search_query: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        data = asdict(self)
        if self.travel_dates:
            data["travel_dates"] = {
                "start": self.travel_dates.start.isoformat(),
                "end": self.travel_dates.end.isoformat(),
            }
        data["previous_booking_ids"] = list(self.previous_booking_ids)
        return data

    def context_hash(self) -> str:
        """Short stable hash of the context, used to key cached results"""
        payload = json.dumps(self.to_dict(), sort_keys=True, separators=(",", ":"), default=str)
        return hashlib.sha1(payload.encode("utf-8")).hexdigest()[:16]


@dataclass(frozen=True)
class RecommendationOptions:
    """Per-call tuning of the pipeline"""
    max_results: int = 20
    min_score: float = 0.1
    diversity_factor: float = 0.3
    include_explanations: bool = True
    exclude_interacted: bool = True
    boost_fresh_content: bool = True
    geographic_radius_meters: float = 50000.0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


# Quick recommendations trade explanation detail for speed and variety
QUICK_OPTIONS_OVERRIDES: Dict[str, Any] = {
    "min_score": 0.2,
    "diversity_factor": 0.5,
    "include_explanations": False,
    "exclude_interacted": True,
    "boost_fresh_content": True,
}
