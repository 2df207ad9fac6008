"""
Coordinate-based nearby card matching.

Finds the card whose saved store location is closest to the user,
considering only store locations whose detection radius contains the user.
"""

import logging
from dataclasses import dataclass
from typing import Any, Iterable

import numpy as np

from ..core.models import RewardCard, StoreLocation, UserLocation
from .haversine import haversine_distances

logger = logging.getLogger(__name__)

DEFAULT_DETECTION_RADIUS_M = 150.0


@dataclass
class CoordinateMatch:
    """Nearest in-radius store location and the card it belongs to."""

    card: RewardCard
    store_location: StoreLocation
    distance_m: float
    radius_m: float


class CoordinateMatcher:
    """
    Matches the user's position against saved store coordinates.

    A (card, store location) pair is a candidate when its distance is
    within the location's radius, inclusive. The card of the closest
    candidate across all cards wins. When several candidates share the
    minimal distance any one of them may be returned.

    Usage:
        matcher = CoordinateMatcher(config['detection'])
        card = matcher.find_nearby_card(user_location, cards)
    """

    def __init__(self, config: dict[str, Any] | None = None):
        """
        Initialize matcher.

        Args:
            config: Detection configuration dictionary containing:
                - default_radius_m: Radius for store locations without one
        """
        config = config or {}
        self.default_radius_m = float(
            config.get("default_radius_m", DEFAULT_DETECTION_RADIUS_M)
        )

    def find_nearest(
        self, user_location: UserLocation, cards: Iterable[RewardCard]
    ) -> CoordinateMatch | None:
        """
        Find the nearest in-radius store location.

        Args:
            user_location: Current GPS fix
            cards: Cards to consider, any order

        Returns:
            CoordinateMatch for the closest candidate, or None
        """
        pairs: list[tuple[RewardCard, StoreLocation]] = []
        for card in cards:
            if not card.store_locations:
                continue
            for location in card.store_locations:
                pairs.append((card, location))

        if not pairs:
            return None

        lats = np.array([loc.latitude for _, loc in pairs], dtype=np.float64)
        lons = np.array([loc.longitude for _, loc in pairs], dtype=np.float64)
        radii = np.array(
            [
                loc.radius if loc.radius is not None else self.default_radius_m
                for _, loc in pairs
            ],
            dtype=np.float64,
        )

        distances = haversine_distances(
            user_location.latitude, user_location.longitude, lats, lons
        )
        in_radius = distances <= radii
        if not np.any(in_radius):
            return None

        masked = np.where(in_radius, distances, np.inf)
        best = int(np.argmin(masked))
        card, location = pairs[best]

        logger.debug(
            f"Nearest store for card {card.id} ({card.store_name}): "
            f"{distances[best]:.1f}m within {radii[best]:.0f}m"
        )

        return CoordinateMatch(
            card=card,
            store_location=location,
            distance_m=float(distances[best]),
            radius_m=float(radii[best]),
        )

    def find_nearby_card(
        self, user_location: UserLocation, cards: Iterable[RewardCard]
    ) -> RewardCard | None:
        """Return the card of the nearest in-radius store location, or None."""
        match = self.find_nearest(user_location, cards)
        return match.card if match else None
