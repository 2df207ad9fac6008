"""Nearby-store detection components for CardScout."""

from .haversine import EARTH_RADIUS_M, haversine_distance, haversine_distances
from .coordinate_matcher import CoordinateMatch, CoordinateMatcher, DEFAULT_DETECTION_RADIUS_M
from .store_dictionary import KNOWN_STORES, StoreDictionary
from .place_matcher import PlaceNameMatcher, build_search_text

__all__ = [
    "EARTH_RADIUS_M",
    "haversine_distance",
    "haversine_distances",
    "CoordinateMatch",
    "CoordinateMatcher",
    "DEFAULT_DETECTION_RADIUS_M",
    "KNOWN_STORES",
    "StoreDictionary",
    "PlaceNameMatcher",
    "build_search_text",
]
