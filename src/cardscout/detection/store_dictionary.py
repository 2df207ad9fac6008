"""
Known-store dictionary.

Maps canonical store names, as users type them, to lowercase keywords
likely to appear in reverse-geocoded address data for that store.
"""

from collections.abc import Iterator, Mapping
from types import MappingProxyType
from typing import Any

KNOWN_STORES: Mapping[str, tuple[str, ...]] = MappingProxyType(
    {
        "Lidl": ("lidl",),
        "Tesco": ("tesco",),
        "Sainsbury's": ("sainsbury",),
        "Asda": ("asda",),
        "Morrisons": ("morrisons",),
        "Aldi": ("aldi",),
        "Waitrose": ("waitrose",),
        "Co-op": ("co-op", "coop"),
        "M&S": ("marks", "spencer", "m&s"),
        "Iceland": ("iceland",),
        "Boots": ("boots",),
        "Superdrug": ("superdrug",),
        "Holland & Barrett": ("holland", "barrett"),
        "Costa": ("costa",),
        "Starbucks": ("starbucks",),
        "Nando's": ("nandos", "nando"),
        "Greggs": ("greggs",),
        "Subway": ("subway",),
        "McDonald's": ("mcdonald", "mcdonalds"),
        "KFC": ("kfc",),
    }
)


class StoreDictionary(Mapping[str, tuple[str, ...]]):
    """
    Immutable store name -> keywords mapping.

    Lookups are by exact store name, matching how cards created from the
    quick-select list carry the canonical name. Keywords are stored
    lowercase.

    Usage:
        stores = StoreDictionary.from_config(config['stores'])
        keywords = stores.get("M&S", ())
    """

    def __init__(self, entries: Mapping[str, Any] | None = None):
        source = KNOWN_STORES if entries is None else entries
        self._entries: dict[str, tuple[str, ...]] = {
            name: tuple(str(keyword).lower() for keyword in keywords)
            for name, keywords in source.items()
        }

    @classmethod
    def from_config(cls, config: dict[str, Any] | None = None) -> "StoreDictionary":
        """
        Build the built-in dictionary merged with configured extras.

        Args:
            config: Stores configuration dictionary containing:
                - extra: Mapping of store name -> keyword list
        """
        config = config or {}
        entries: dict[str, Any] = dict(KNOWN_STORES)
        entries.update(config.get("extra") or {})
        return cls(entries)

    def __getitem__(self, name: str) -> tuple[str, ...]:
        return self._entries[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def store_names(self) -> list[str]:
        """Store names in dictionary order, for quick-select lists."""
        return list(self._entries)

    def detect_store_from_address(self, address: str) -> str | None:
        """
        Guess the store at an address.

        Returns:
            The first store, in dictionary order, with a keyword occurring
            in the lowercased address, or None
        """
        lowered = address.lower()
        for name, keywords in self._entries.items():
            for keyword in keywords:
                if keyword in lowered:
                    return name
        return None

    def to_dict(self) -> dict[str, list[str]]:
        return {name: list(keywords) for name, keywords in self._entries.items()}
