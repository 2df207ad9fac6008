"""
Card and location data structures.

Cards serialize to the camelCase record shape used by the on-device card
file: ``id, storeName, imageUri, createdAt, updatedAt, storeLocations?``.
"""

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class StoreLocation:
    """
    A geographic point associated with a card's store.

    Attributes:
        latitude: Decimal degrees
        longitude: Decimal degrees
        address: Optional human-readable label, informational only
        radius: Detection radius in meters, or None for the system default
    """

    latitude: float
    longitude: float
    address: str | None = None
    radius: float | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dictionary (optional keys omitted when unset)."""
        data: dict[str, Any] = {"latitude": self.latitude, "longitude": self.longitude}
        if self.address is not None:
            data["address"] = self.address
        if self.radius is not None:
            data["radius"] = self.radius
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "StoreLocation":
        radius = data.get("radius")
        return cls(
            latitude=float(data["latitude"]),
            longitude=float(data["longitude"]),
            address=data.get("address"),
            radius=float(radius) if radius is not None else None,
        )


@dataclass
class RewardCard:
    """
    A user-owned loyalty card record.

    Attributes:
        id: Opaque unique identifier, assigned at creation
        store_name: Free-text display name
        image_uri: Reference to the locally stored card image
        created_at: Creation time in milliseconds since epoch
        updated_at: Last mutation time in milliseconds since epoch
        store_locations: Saved store coordinates, or None
    """

    id: str
    store_name: str
    image_uri: str
    created_at: int
    updated_at: int
    store_locations: list[StoreLocation] | None = None

    @property
    def has_locations(self) -> bool:
        """True when the card carries at least one store location."""
        return bool(self.store_locations)

    def to_dict(self) -> dict[str, Any]:
        """Convert to the persisted record shape."""
        data: dict[str, Any] = {
            "id": self.id,
            "storeName": self.store_name,
            "imageUri": self.image_uri,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }
        if self.store_locations is not None:
            data["storeLocations"] = [loc.to_dict() for loc in self.store_locations]
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RewardCard":
        locations = data.get("storeLocations")
        return cls(
            id=str(data["id"]),
            store_name=data["storeName"],
            image_uri=data["imageUri"],
            created_at=int(data["createdAt"]),
            updated_at=int(data["updatedAt"]),
            store_locations=(
                [StoreLocation.from_dict(loc) for loc in locations]
                if locations is not None
                else None
            ),
        )


@dataclass(frozen=True)
class UserLocation:
    """A momentary GPS fix. Accuracy is in meters, None when unknown."""

    latitude: float
    longitude: float
    accuracy: float | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "latitude": self.latitude,
            "longitude": self.longitude,
            "accuracy": self.accuracy,
        }


@dataclass(frozen=True)
class PlaceRecord:
    """One reverse-geocoding result. Every field is optional text."""

    name: str | None = None
    street: str | None = None
    street_number: str | None = None
    district: str | None = None
    subregion: str | None = None
    city: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "street": self.street,
            "streetNumber": self.street_number,
            "district": self.district,
            "subregion": self.subregion,
            "city": self.city,
        }


@dataclass
class CardFields:
    """
    Editable card fields supplied by the add and edit flows.

    Fields left as None in an update are not changed. Store locations
    use an empty list to clear saved coordinates.
    """

    store_name: str | None = None
    image_uri: str | None = None
    store_locations: list[StoreLocation] | None = field(default=None)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CardFields":
        for key in ("storeName", "imageUri"):
            if data.get(key) is not None and not isinstance(data[key], str):
                raise ValueError(f"{key} must be a string")
        locations = data.get("storeLocations")
        return cls(
            store_name=data.get("storeName"),
            image_uri=data.get("imageUri"),
            store_locations=(
                [StoreLocation.from_dict(loc) for loc in locations]
                if locations is not None
                else None
            ),
        )
