"""Row parsing and geo-filter helper tests."""

from datetime import datetime, timezone
from types import SimpleNamespace

import pytest

from app.services.recommendations.features import haversine_distance
from app.services.recommendations.models import GeoPoint, RecommendationContext
from app.services.recommendations.parsers import parse_datetime, place_to_item, trip_to_item
from app.services.recommendations.repository import bounding_box, within_radius

from tests.conftest import make_item


def _place(**overrides):
    row = dict(
        id="p1", name="Kaputas Beach", description=None, category="beach", photo_url=None,
        price_level=3, rating=4.7, review_count=120, latitude=36.23, longitude=29.45,
        address="Kas", source="google", verified=True, created_at=datetime(2026, 1, 1),
    )
    row.update(overrides)
    return SimpleNamespace(**row)


class TestParsers:

    def test_place_to_item(self):
        item = place_to_item(_place())

        assert item.type == "destination"
        assert item.price.amount == 75.0
        assert item.features == frozenset({"beach"})
        assert item.location.lat == 36.23
        assert item.metadata == {"source": "google", "verified": True}

    def test_place_without_price_or_category(self):
        item = place_to_item(_place(price_level=None, category=None, latitude=None))

        assert item.price is None
        assert item.features == frozenset()
        assert item.location is None

    def test_trip_to_item_uses_first_located_destination(self):
        row = SimpleNamespace(
            id="t1", title="Aegean week", trip_type="culture", status="generated",
            budget_total=1200.0, budget_currency="EUR",
            destinations='[{"name": "Athens"}, {"name": "Izmir", "lat": 38.42, "lng": 27.14}]',
            start_date=None, end_date=None, created_at="2026-01-02T10:00:00Z",
        )

        item = trip_to_item(row)

        assert item.type == "trip"
        assert item.price.currency == "EUR"
        assert item.location.address == "Izmir"
        assert item.created_at == datetime(2026, 1, 2, 10, 0, 0)

    def test_parse_datetime_normalizes_to_naive_utc(self):
        aware = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)

        assert parse_datetime(aware) == datetime(2026, 1, 1, 12, 0)
        assert parse_datetime("2026-01-01 12:00:00") == datetime(2026, 1, 1, 12, 0)
        assert parse_datetime("2026-01-01T14:00:00+02:00") == datetime(2026, 1, 1, 12, 0)
        assert parse_datetime("not a date") is None
        assert parse_datetime(None) is None


class TestGeoFilter:

    def test_bounding_box_contains_radius(self):
        box = bounding_box(41.0, 29.0, 50000)
        north = box["max_lat"]

        assert haversine_distance(41.0, 29.0, north, 29.0) == pytest.approx(50000, rel=1e-6)
        assert box["min_lng"] < 29.0 < box["max_lng"]

    def test_within_radius(self):
        context = RecommendationContext(user_id="u1", current_location=GeoPoint(41.0, 29.0))

        assert within_radius(make_item("near", location=(41.1, 29.0)), context, 50000)
        assert not within_radius(make_item("far", location=(42.0, 29.0)), context, 50000)
        assert not within_radius(make_item("nowhere"), context, 50000)
        assert within_radius(make_item("nowhere"), RecommendationContext(user_id="u1"), 50000)
