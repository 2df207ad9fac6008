"""
Detection result data structures.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any

from .models import RewardCard, StoreLocation


class DetectionStatus(Enum):
    """Outcome of a nearby-card detection attempt."""

    MATCHED = "MATCHED"
    NO_MATCH = "NO_MATCH"
    LOOKUP_FAILED = "LOOKUP_FAILED"
    PERMISSION_DENIED = "PERMISSION_DENIED"
    NO_FIX = "NO_FIX"

    def __str__(self) -> str:
        return self.value


class DetectionMethod(Enum):
    """Strategy that produced a detection."""

    COORDINATES = "coordinates"
    PLACE_NAME = "place_name"

    def __str__(self) -> str:
        return self.value


class MatchRule(Enum):
    """Place-name rule that matched a card."""

    EXACT = "exact"
    KEYWORD = "keyword"
    FUZZY = "fuzzy"

    def __str__(self) -> str:
        return self.value


@dataclass
class NearbyCardResult:
    """
    Complete result of a nearby-card detection.

    Keeps "no match" and "lookup failed" apart so callers and logs can tell
    them apart, even though the public helpers collapse both to None.

    Attributes:
        status: Outcome of the attempt
        card: Matched card, when status is MATCHED
        method: Strategy that matched or was last attempted
        rule: Place-name rule that fired (place-name matches only)
        store_location: Matched store location (coordinate matches only)
        distance_m: Distance to the matched store location in meters
        search_text: Lowercased place text the place-name rules ran against
        error: Description of the failure for LOOKUP_FAILED
        processing_time_ms: Time taken for detection in milliseconds
    """

    status: DetectionStatus
    card: RewardCard | None = None
    method: DetectionMethod | None = None
    rule: MatchRule | None = None
    store_location: StoreLocation | None = None
    distance_m: float | None = None
    search_text: str | None = None
    error: str | None = None
    processing_time_ms: float = 0.0

    @property
    def matched(self) -> bool:
        return self.status == DetectionStatus.MATCHED and self.card is not None

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dictionary."""
        return {
            "status": self.status.value,
            "card": self.card.to_dict() if self.card else None,
            "method": self.method.value if self.method else None,
            "rule": self.rule.value if self.rule else None,
            "store_location": self.store_location.to_dict() if self.store_location else None,
            "distance_m": round(self.distance_m, 2) if self.distance_m is not None else None,
            "search_text": self.search_text,
            "error": self.error,
            "processing_time_ms": round(self.processing_time_ms, 2),
        }
