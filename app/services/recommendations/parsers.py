"""
Row parsing helpers: database rows -> catalog models
"""
import json
import logging
from datetime import datetime, timezone
from typing import Any, Optional

from app.services.recommendations.models import CatalogItem, Price, ItemLocation
from app.services.utils.constants import ITEM_DESTINATION, ITEM_TRIP

logger = logging.getLogger(__name__)

PRICE_LEVEL_STEP_USD = 25.0


def utcnow() -> datetime:
    """Current time as naive UTC (the database stores naive timestamps)"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def safe_json_parse(json_string: Any, default_value: Any = None) -> Any:
    """
    Parse a JSON column that may arrive as text or as an already decoded value

    Args:
        json_string: String to parse or already parsed object
        default_value: Value to return on error (defaults to {})

    Returns:
        Parsed JSON or default value
    """
    if default_value is None:
        default_value = {}

    if json_string is None:
        return default_value

    try:
        return json.loads(json_string) if isinstance(json_string, str) else json_string
    except (TypeError, ValueError) as e:
        logger.warning("Error parsing JSON: %s", e)
        return default_value


def parse_datetime(value: Any) -> Optional[datetime]:
    """
    Parse a timestamp into a naive UTC datetime

    Args:
        value: String or datetime object

    Returns:
        Parsed datetime or None if parsing fails
    """
    if not value:
        return None

    if isinstance(value, datetime):
        if value.tzinfo:
            return value.astimezone(timezone.utc).replace(tzinfo=None)
        return value

    try:
        return datetime.strptime(value, '%Y-%m-%d %H:%M:%S')
    except (ValueError, TypeError):
        try:
            dt = datetime.fromisoformat(str(value).replace('Z', '+00:00'))
        except (ValueError, TypeError):
            logger.warning("Could not parse datetime: %s", value)
            return None
        if dt.tzinfo:
            dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
        return dt


def _location(lat: Any, lng: Any, address: Any = None) -> Optional[ItemLocation]:
    if lat is None or lng is None:
        return None
    return ItemLocation(lat=float(lat), lng=float(lng), address=address or "")


def place_to_item(row: Any) -> CatalogItem:
    """
    Convert a places row into a destination item

    Price level (1-4) is mapped to level * 25 USD; the category becomes
    the single feature tag.
    """
    price = None
    if row.price_level:
        price = Price(amount=row.price_level * PRICE_LEVEL_STEP_USD, currency="USD")

    return CatalogItem(
        id=str(row.id),
        type=ITEM_DESTINATION,
        title=row.name,
        description=row.description or "",
        image_url=row.photo_url,
        price=price,
        rating=row.rating,
        review_count=row.review_count,
        location=_location(row.latitude, row.longitude, row.address),
        features=[row.category] if row.category else [],
        created_at=parse_datetime(row.created_at),
        metadata={
            "source": row.source,
            "verified": bool(row.verified),
        },
    )


def trip_to_item(row: Any) -> CatalogItem:
    """
    Convert a trips row into a trip item

    The trip has no coordinates of its own; the first destination with
    lat/lng (if any) is used as its location.
    """
    destinations = safe_json_parse(row.destinations, default_value=[])
    if not isinstance(destinations, list):
        destinations = []

    location = None
    for destination in destinations:
        if isinstance(destination, dict):
            location = _location(destination.get("lat"), destination.get("lng"), destination.get("name"))
            if location:
                break

    price = None
    if row.budget_total is not None:
        price = Price(amount=float(row.budget_total), currency=row.budget_currency or "USD")

    return CatalogItem(
        id=str(row.id),
        type=ITEM_TRIP,
        title=row.title,
        price=price,
        location=location,
        features=[row.trip_type] if row.trip_type else [],
        created_at=parse_datetime(row.created_at),
        metadata={
            "destinations": destinations,
            "start_date": row.start_date.isoformat() if row.start_date else None,
            "end_date": row.end_date.isoformat() if row.end_date else None,
        },
    )
