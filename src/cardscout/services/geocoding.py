"""
Reverse geocoding provider abstraction.

Provides a unified interface for turning coordinates into place records:
- Nominatim (OpenStreetMap) via geopy
- Static records for offline use and tests
"""

import logging
from typing import Any, Protocol, Sequence, runtime_checkable

from geopy.exc import GeopyError
from geopy.geocoders import Nominatim

from ..core.models import PlaceRecord

logger = logging.getLogger(__name__)

# Nominatim address keys that name the place itself rather than the street
_PLACE_NAME_KEYS = ("shop", "amenity", "building", "tourism", "leisure", "office", "retail")
_DISTRICT_KEYS = ("suburb", "city_district", "neighbourhood", "quarter")
_SUBREGION_KEYS = ("county", "state_district")
_CITY_KEYS = ("city", "town", "village", "hamlet")


class GeocodingError(Exception):
    """Raised when a reverse geocoding lookup fails."""


@runtime_checkable
class GeocodingProvider(Protocol):
    """Protocol for reverse geocoding providers."""

    def reverse_geocode(self, latitude: float, longitude: float) -> list[PlaceRecord]:
        """Return place records for a position, best first. May raise GeocodingError."""
        ...


def _first(address: dict[str, Any], keys: Sequence[str]) -> str | None:
    for key in keys:
        value = address.get(key)
        if value:
            return str(value)
    return None


def place_from_nominatim(raw: dict[str, Any]) -> PlaceRecord:
    """Convert a raw Nominatim result into a PlaceRecord."""
    address = raw.get("address") or {}
    return PlaceRecord(
        name=raw.get("name") or _first(address, _PLACE_NAME_KEYS),
        street=address.get("road"),
        street_number=address.get("house_number"),
        district=_first(address, _DISTRICT_KEYS),
        subregion=_first(address, _SUBREGION_KEYS),
        city=_first(address, _CITY_KEYS),
    )


def format_address(place: PlaceRecord) -> str:
    """Human-readable "name, street, city" label for a place."""
    parts = [place.name, place.street, place.city]
    return ", ".join(part for part in parts if part)


class NominatimGeocodingProvider:
    """
    Reverse geocoding through OpenStreetMap Nominatim.

    Nominatim's usage policy requires an identifying user agent and at
    most one request per second; callers trigger lookups on location
    updates only.
    """

    def __init__(self, config: dict[str, Any] | None = None):
        """
        Initialize Nominatim provider.

        Args:
            config: Geocoding configuration dict with keys:
                - user_agent: Identifying user agent string
                - timeout: Request timeout in seconds, or None for geopy's default
                - language: Preferred result language
                - domain: Alternate Nominatim host (optional)
        """
        config = config or {}
        self.user_agent = config.get("user_agent", "cardscout")
        self.timeout = config.get("timeout")
        self.language = config.get("language", "en")

        kwargs: dict[str, Any] = {"user_agent": self.user_agent}
        if config.get("domain"):
            kwargs["domain"] = config["domain"]
        self._geolocator = Nominatim(**kwargs)

    def reverse_geocode(self, latitude: float, longitude: float) -> list[PlaceRecord]:
        kwargs: dict[str, Any] = {"exactly_one": False, "language": self.language}
        if self.timeout is not None:
            kwargs["timeout"] = self.timeout

        try:
            locations = self._geolocator.reverse((latitude, longitude), **kwargs)
        except GeopyError as e:
            raise GeocodingError(f"Nominatim reverse lookup failed: {e}") from e

        if not locations:
            return []
        return [place_from_nominatim(location.raw) for location in locations]


class StaticGeocodingProvider:
    """Returns the same configured place records for every position."""

    def __init__(self, places: Sequence[PlaceRecord | dict[str, Any]] | None = None):
        self.places = [
            place if isinstance(place, PlaceRecord) else PlaceRecord(**place)
            for place in places or []
        ]

    def reverse_geocode(self, latitude: float, longitude: float) -> list[PlaceRecord]:
        return list(self.places)


def get_geocoding_provider(config: dict[str, Any] | None = None) -> GeocodingProvider:
    """
    Factory function to get the configured geocoding provider.

    Args:
        config: Geocoding configuration dictionary. "provider" selects
            "nominatim" (default) or "static"; the static provider reads
            its records from "static_places".

    Returns:
        GeocodingProvider instance.
    """
    config = config or {}
    provider = config.get("provider", "nominatim")

    if provider == "static":
        logger.info("Using StaticGeocodingProvider")
        return StaticGeocodingProvider(config.get("static_places") or [])

    if provider != "nominatim":
        logger.warning(f"Unknown geocoding provider {provider!r}, using Nominatim")

    logger.info("Using NominatimGeocodingProvider")
    return NominatimGeocodingProvider(config)
