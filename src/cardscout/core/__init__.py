"""Core components for CardScout."""

from .config import Config
from .models import CardFields, PlaceRecord, RewardCard, StoreLocation, UserLocation
from .result import DetectionMethod, DetectionStatus, MatchRule, NearbyCardResult
from .detector import NearbyCardDetector

__all__ = [
    "Config",
    "CardFields",
    "PlaceRecord",
    "RewardCard",
    "StoreLocation",
    "UserLocation",
    "DetectionMethod",
    "DetectionStatus",
    "MatchRule",
    "NearbyCardResult",
    "NearbyCardDetector",
]
