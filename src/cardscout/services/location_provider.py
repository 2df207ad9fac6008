"""
Location provider abstraction.

Location access is permission-gated. A denied permission is reported as a
state, never raised, so detection can simply be skipped.
"""

import logging
from enum import Enum
from typing import Any, Protocol, runtime_checkable

from ..core.models import UserLocation

logger = logging.getLogger(__name__)


class PermissionState(Enum):
    """Location permission state."""

    GRANTED = "granted"
    DENIED = "denied"
    UNDETERMINED = "undetermined"

    def __str__(self) -> str:
        return self.value


@runtime_checkable
class LocationProvider(Protocol):
    """Protocol for location providers."""

    def permission_state(self) -> PermissionState:
        """Current permission state, without prompting."""
        ...

    def request_permission(self) -> bool:
        """Ask for location access. Returns True when granted."""
        ...

    def get_current_position(self) -> UserLocation | None:
        """Current fix, or None when unavailable or not permitted."""
        ...


class StaticLocationProvider:
    """
    Location provider returning a fixed position.

    Used on desktop, from the command line and in tests, where no
    positioning hardware is available.
    """

    def __init__(
        self,
        location: UserLocation | None = None,
        permission: PermissionState = PermissionState.GRANTED,
    ):
        self.location = location
        self._permission = permission

    @classmethod
    def from_config(cls, config: dict[str, Any] | None = None) -> "StaticLocationProvider":
        """
        Build from location configuration.

        Args:
            config: Location configuration dict with keys:
                - latitude, longitude: Fixed position (both required for a fix)
                - accuracy: Accuracy in meters (optional)
                - permission: "granted", "denied" or "undetermined"
        """
        config = config or {}
        location = None
        if config.get("latitude") is not None and config.get("longitude") is not None:
            accuracy = config.get("accuracy")
            location = UserLocation(
                latitude=float(config["latitude"]),
                longitude=float(config["longitude"]),
                accuracy=float(accuracy) if accuracy is not None else None,
            )
        try:
            permission = PermissionState(config.get("permission", "granted"))
        except ValueError:
            logger.warning(f"Unknown permission state {config.get('permission')!r}, assuming denied")
            permission = PermissionState.DENIED
        return cls(location=location, permission=permission)

    def permission_state(self) -> PermissionState:
        return self._permission

    def request_permission(self) -> bool:
        # A fixed position has no prompt; an undetermined state resolves to granted
        if self._permission == PermissionState.UNDETERMINED:
            self._permission = PermissionState.GRANTED
        return self._permission == PermissionState.GRANTED

    def get_current_position(self) -> UserLocation | None:
        if self._permission != PermissionState.GRANTED and not self.request_permission():
            return None
        if self.location is None:
            logger.warning("No fixed location configured")
        return self.location


def get_location_provider(config: dict[str, Any] | None = None) -> LocationProvider:
    """Factory function to get the configured location provider."""
    config = config or {}
    provider = config.get("provider", "static")
    if provider != "static":
        logger.warning(f"Unknown location provider {provider!r}, using static provider")
    return StaticLocationProvider.from_config(config)
