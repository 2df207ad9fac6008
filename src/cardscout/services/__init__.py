"""
Platform collaborators for CardScout.

- Card persistence (JSON file)
- Card image storage
- Reverse geocoding
- Location provider
- Background detection worker
"""

from .card_store import CardStore, CardStoreError
from .image_store import ImageImportError, ImageStore
from .geocoding import (
    GeocodingError,
    GeocodingProvider,
    NominatimGeocodingProvider,
    StaticGeocodingProvider,
    format_address,
    get_geocoding_provider,
)
from .location_provider import (
    LocationProvider,
    PermissionState,
    StaticLocationProvider,
    get_location_provider,
)
from .detection_worker import DetectionWorker

__all__ = [
    "CardStore",
    "CardStoreError",
    "ImageImportError",
    "ImageStore",
    "GeocodingError",
    "GeocodingProvider",
    "NominatimGeocodingProvider",
    "StaticGeocodingProvider",
    "format_address",
    "get_geocoding_provider",
    "LocationProvider",
    "PermissionState",
    "StaticLocationProvider",
    "get_location_provider",
    "DetectionWorker",
]
