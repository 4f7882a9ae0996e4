"""
Catalog models: the recommendable entities
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, FrozenSet, Dict, Any


@dataclass(frozen=True)
class Price:
    amount: float
    currency: str = "USD"


@dataclass(frozen=True)
class ItemLocation:
    lat: float
    lng: float
    address: str = ""


@dataclass(frozen=True)
class CatalogItem:
    """
    A recommendable entity (destination, activity, lodging, flight, trip, itinerary)

    Fixed fields are typed; `metadata` carries pass-through data the
    pipeline never interprets. `features` is an unordered tag set.
    """
    id: str
    type: str
    title: str
    description: str = ""
    image_url: Optional[str] = None
    price: Optional[Price] = None
    rating: Optional[float] = None
    review_count: Optional[int] = None
    location: Optional[ItemLocation] = None
    features: FrozenSet[str] = frozenset()
    created_at: Optional[datetime] = None
    metadata: Dict[str, Any] = field(default_factory=dict, compare=False, hash=False)

    def __post_init__(self):
        if not isinstance(self.features, frozenset):
            object.__setattr__(self, "features", frozenset(self.features))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            "id": self.id,
            "type": self.type,
            "title": self.title,
            "description": self.description,
            "image_url": self.image_url,
            "price": {"amount": self.price.amount, "currency": self.price.currency} if self.price else None,
            "rating": self.rating,
            "review_count": self.review_count,
            "location": {
                "lat": self.location.lat,
                "lng": self.location.lng,
                "address": self.location.address,
            } if self.location else None,
            "features": sorted(self.features),
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "metadata": self.metadata,
        }
