"""
CardScout - Loyalty Card Wallet

Stores photos of loyalty and reward cards and surfaces the right one
when the user is near the matching store.
"""

__version__ = "0.1.0"
__author__ = "CardScout Team"

from .core.detector import NearbyCardDetector
from .core.models import RewardCard, StoreLocation, UserLocation
from .core.result import DetectionStatus, NearbyCardResult

__all__ = [
    "NearbyCardDetector",
    "RewardCard",
    "StoreLocation",
    "UserLocation",
    "DetectionStatus",
    "NearbyCardResult",
    "__version__",
]
