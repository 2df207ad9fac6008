"""
Pytest fixtures for CardScout tests.

Provides common test fixtures including:
- Test configuration
- Card factories
- Fake geocoders
- Positions at known distances
"""

import math

import pytest

from cardscout.core.models import PlaceRecord, RewardCard, StoreLocation
from cardscout.detection.haversine import EARTH_RADIUS_M
from cardscout.detection.store_dictionary import StoreDictionary
from cardscout.services.geocoding import GeocodingError, StaticGeocodingProvider

LONDON = (51.5007, -0.1246)


@pytest.fixture
def test_config(tmp_path):
    """Test configuration dictionary."""
    return {
        "app": {"version": "0.1.0"},
        "storage": {
            "cards_file": str(tmp_path / "cards.json"),
            "storage_key": "@all_rewards_cards",
            "images_dir": str(tmp_path / "images"),
            "max_image_dimension": 64,
            "jpeg_quality": 90,
        },
        "detection": {
            "strategies": ["coordinates", "place_name"],
            "default_radius_m": 150,
            "min_fuzzy_word_length": 4,
        },
        "geocoding": {"provider": "static"},
        "location": {"provider": "static", "permission": "granted"},
        "stores": {"extra": {}},
    }


@pytest.fixture
def stores():
    """Built-in known-store dictionary."""
    return StoreDictionary()


def _offset_north(lat: float, lon: float, meters: float) -> tuple[float, float]:
    """Point the given distance due north along the meridian."""
    return lat + math.degrees(meters / EARTH_RADIUS_M), lon


def _make_card(
    store_name: str,
    locations: list[StoreLocation] | None = None,
    card_id: str | None = None,
) -> RewardCard:
    """Build a card record without going through the store."""
    return RewardCard(
        id=card_id or store_name.lower().replace(" ", "-"),
        store_name=store_name,
        image_uri=f"file:///cards/{store_name}.jpg",
        created_at=1_700_000_000_000,
        updated_at=1_700_000_000_000,
        store_locations=locations,
    )


def _card_near(
    store_name: str, meters: float, radius: float | None = None, origin=LONDON
) -> RewardCard:
    """Card with one store location the given distance north of origin."""
    lat, lon = _offset_north(*origin, meters)
    return _make_card(store_name, [StoreLocation(latitude=lat, longitude=lon, radius=radius)])


class FailingGeocoder:
    """Geocoder that always raises."""

    def __init__(self, error: Exception | None = None):
        self.error = error or GeocodingError("service unreachable")
        self.calls = 0

    def reverse_geocode(self, latitude: float, longitude: float) -> list[PlaceRecord]:
        self.calls += 1
        raise self.error


class RecordingGeocoder(StaticGeocodingProvider):
    """Static geocoder that counts lookups."""

    def __init__(self, places=None):
        super().__init__(places)
        self.calls = 0

    def reverse_geocode(self, latitude: float, longitude: float) -> list[PlaceRecord]:
        self.calls += 1
        return super().reverse_geocode(latitude, longitude)


def _geocoder_for(name: str | None = None, **fields) -> RecordingGeocoder:
    """Geocoder returning a single place record."""
    return RecordingGeocoder([PlaceRecord(name=name, **fields)])


@pytest.fixture
def london():
    """Reference user position (lat, lon)."""
    return LONDON


@pytest.fixture
def offset_north():
    """Factory for a point a given distance due north."""
    return _offset_north


@pytest.fixture
def make_card():
    """Factory for card records that bypass the card store."""
    return _make_card


@pytest.fixture
def card_near():
    """Factory for cards with one store location north of the reference position."""
    return _card_near


@pytest.fixture
def geocoder_for():
    """Factory for counting geocoders that return one place record."""
    return _geocoder_for


@pytest.fixture
def failing_geocoder():
    """Factory for geocoders that always raise."""
    return FailingGeocoder


@pytest.fixture
def recording_geocoder():
    """Factory for counting geocoders over a list of places."""
    return RecordingGeocoder
