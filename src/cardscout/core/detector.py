"""
Nearby card detector orchestrator.

Runs the configured detection strategies in order:
1. Coordinates - nearest saved store location within its radius
2. Place name - reverse-geocoded place text matched against store names

The first strategy to find a card wins.
"""

import logging
import time
from typing import Any, Sequence

from ..detection.coordinate_matcher import CoordinateMatcher
from ..detection.place_matcher import PlaceNameMatcher
from ..detection.store_dictionary import StoreDictionary
from ..services.geocoding import GeocodingProvider
from ..services.location_provider import LocationProvider, PermissionState
from .models import RewardCard, UserLocation
from .result import DetectionMethod, DetectionStatus, NearbyCardResult

logger = logging.getLogger(__name__)

DEFAULT_STRATEGIES = ("coordinates", "place_name")


class NearbyCardDetector:
    """
    Main detector class orchestrating the detection strategies.

    Usage:
        detector = NearbyCardDetector(config.as_dict, geocoder)
        result = detector.detect(user_location, cards)
        if result.matched:
            show(result.card)
    """

    def __init__(
        self,
        config: dict[str, Any],
        geocoder: GeocodingProvider,
        stores: StoreDictionary | None = None,
    ):
        """
        Initialize detector with configuration.

        Args:
            config: Full configuration dictionary containing:
                - detection: Strategy order, default radius, fuzzy word length
                - stores: Extra known-store entries
            geocoder: Reverse geocoding provider for the place-name strategy
            stores: Known-store dictionary, or None to build it from config
        """
        self.config = config
        detection_config = config.get("detection") or {}

        self.stores = stores if stores is not None else StoreDictionary.from_config(
            config.get("stores")
        )
        self.coordinate_matcher = CoordinateMatcher(detection_config)
        self.place_matcher = PlaceNameMatcher(geocoder, self.stores, detection_config)

        strategies = detection_config.get("strategies") or list(DEFAULT_STRATEGIES)
        self.strategies: list[DetectionMethod] = []
        for name in strategies:
            try:
                self.strategies.append(DetectionMethod(name))
            except ValueError:
                logger.warning(f"Ignoring unknown detection strategy: {name}")

    def detect(
        self, user_location: UserLocation, cards: Sequence[RewardCard]
    ) -> NearbyCardResult:
        """
        Detect the card for the store the user is at.

        Args:
            user_location: Current GPS fix
            cards: Stored cards in insertion order

        Returns:
            NearbyCardResult; MATCHED with the card, NO_MATCH, or
            LOOKUP_FAILED when the last strategy tried could not complete
        """
        start_time = time.perf_counter()
        result = NearbyCardResult(status=DetectionStatus.NO_MATCH)

        for method in self.strategies:
            if method == DetectionMethod.COORDINATES:
                result = self._detect_by_coordinates(user_location, cards)
            else:
                result = self.place_matcher.detect(
                    user_location.latitude, user_location.longitude, cards
                )
            if result.matched:
                break

        result.processing_time_ms = (time.perf_counter() - start_time) * 1000

        if result.matched:
            logger.info(
                f"Detected card {result.card.id} ({result.card.store_name}) "
                f"via {result.method}"
            )
        elif result.status == DetectionStatus.LOOKUP_FAILED:
            logger.warning(f"Detection incomplete: {result.error}")

        return result

    def _detect_by_coordinates(
        self, user_location: UserLocation, cards: Sequence[RewardCard]
    ) -> NearbyCardResult:
        match = self.coordinate_matcher.find_nearest(user_location, cards)
        if match is None:
            return NearbyCardResult(
                status=DetectionStatus.NO_MATCH, method=DetectionMethod.COORDINATES
            )
        return NearbyCardResult(
            status=DetectionStatus.MATCHED,
            card=match.card,
            method=DetectionMethod.COORDINATES,
            store_location=match.store_location,
            distance_m=match.distance_m,
        )

    def detect_current(
        self, location_provider: LocationProvider, cards: Sequence[RewardCard]
    ) -> NearbyCardResult:
        """
        Detect using the current position from a location provider.

        Permission denial and a missing fix are reported as states; no
        detection is run for either.
        """
        if location_provider.permission_state() != PermissionState.GRANTED:
            if not location_provider.request_permission():
                logger.info("Location permission denied, detection skipped")
                return NearbyCardResult(status=DetectionStatus.PERMISSION_DENIED)

        try:
            user_location = location_provider.get_current_position()
        except Exception as e:
            logger.warning(f"Error getting location: {e}")
            return NearbyCardResult(status=DetectionStatus.LOOKUP_FAILED, error=str(e))

        if user_location is None:
            return NearbyCardResult(status=DetectionStatus.NO_FIX)

        return self.detect(user_location, cards)

    def find_nearby_card(
        self, user_location: UserLocation, cards: Sequence[RewardCard]
    ) -> RewardCard | None:
        """Coordinate strategy only; nearest in-radius card or None."""
        return self.coordinate_matcher.find_nearby_card(user_location, cards)

    def detect_nearby_card_by_place_name(
        self, latitude: float, longitude: float, cards: Sequence[RewardCard]
    ) -> RewardCard | None:
        """Place-name strategy only; matching card or None, never raises."""
        return self.place_matcher.detect_nearby_card_by_place_name(latitude, longitude, cards)
