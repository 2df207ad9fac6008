"""
Place-name based nearby card matching.

Reverse-geocodes the user's position and matches the resulting place text
against each card's store name:

1. Exact: the lowercased store name occurs in the place text
2. Keyword: the store is in the known-store dictionary and one of its
   keywords occurs in the place text
3. Fuzzy: a word of the store name longer than three characters occurs
   in the place text

Cards are checked in the order given, all three rules per card before the
next card, and the first card that matches wins. Matching is by substring,
not word boundary, so "Lidl" matches "lidlexpress".
"""

import logging
import time
from typing import Any, Iterable, Sequence

from ..core.models import PlaceRecord, RewardCard
from ..core.result import DetectionMethod, DetectionStatus, MatchRule, NearbyCardResult
from ..services.geocoding import GeocodingProvider
from .store_dictionary import StoreDictionary

logger = logging.getLogger(__name__)

DEFAULT_MIN_FUZZY_WORD_LENGTH = 4


def build_search_text(place: PlaceRecord) -> str:
    """Lowercased name, street, street number, district and subregion, space-joined."""
    parts = [
        place.name,
        place.street,
        place.street_number,
        place.district,
        place.subregion,
    ]
    return " ".join(part for part in parts if part).lower()


class PlaceNameMatcher:
    """
    Detects the nearby card from the reverse-geocoded place description.

    Usage:
        matcher = PlaceNameMatcher(geocoder, stores, config['detection'])
        card = matcher.detect_nearby_card_by_place_name(lat, lon, cards)
    """

    def __init__(
        self,
        geocoder: GeocodingProvider,
        stores: StoreDictionary,
        config: dict[str, Any] | None = None,
    ):
        """
        Initialize matcher.

        Args:
            geocoder: Reverse geocoding provider
            stores: Known-store dictionary used by the keyword rule
            config: Detection configuration dictionary containing:
                - min_fuzzy_word_length: Shortest store-name word the fuzzy
                  rule may match on
        """
        config = config or {}
        self.geocoder = geocoder
        self.stores = stores
        self.min_fuzzy_word_length = int(
            config.get("min_fuzzy_word_length", DEFAULT_MIN_FUZZY_WORD_LENGTH)
        )

    def match_rule(self, search_text: str, card: RewardCard) -> MatchRule | None:
        """Return the highest-priority rule matching a card, or None."""
        card_name = card.store_name.lower()
        if not card_name.strip():
            return None

        if card_name in search_text:
            return MatchRule.EXACT

        for keyword in self.stores.get(card.store_name, ()):
            if keyword.lower() in search_text:
                return MatchRule.KEYWORD

        for word in card_name.split():
            if len(word) >= self.min_fuzzy_word_length and word in search_text:
                return MatchRule.FUZZY

        return None

    def match_card(
        self, search_text: str, cards: Iterable[RewardCard]
    ) -> tuple[RewardCard, MatchRule] | None:
        """
        Find the first card whose store name matches the place text.

        Args:
            search_text: Lowercased place description
            cards: Cards in caller order

        Returns:
            (card, rule) for the first matching card, or None
        """
        for card in cards:
            rule = self.match_rule(search_text, card)
            if rule is not None:
                return card, rule
        return None

    def detect(
        self, latitude: float, longitude: float, cards: Sequence[RewardCard]
    ) -> NearbyCardResult:
        """
        Reverse-geocode a position and match the first place against cards.

        Never raises. Geocoder failures are logged and reported as
        LOOKUP_FAILED; an empty geocoder response is NO_MATCH.
        """
        start_time = time.perf_counter()

        def finish(**kwargs: Any) -> NearbyCardResult:
            return NearbyCardResult(
                method=DetectionMethod.PLACE_NAME,
                processing_time_ms=(time.perf_counter() - start_time) * 1000,
                **kwargs,
            )

        try:
            places = self.geocoder.reverse_geocode(latitude, longitude)
        except Exception as e:
            logger.warning(f"Reverse geocoding failed for ({latitude}, {longitude}): {e}")
            return finish(status=DetectionStatus.LOOKUP_FAILED, error=str(e))

        if not places:
            logger.info(f"No places found at ({latitude}, {longitude})")
            return finish(status=DetectionStatus.NO_MATCH)

        search_text = build_search_text(places[0])
        logger.debug(f"Place search text: {search_text!r}")

        try:
            match = self.match_card(search_text, cards)
        except Exception as e:
            logger.error(f"Error matching place name: {e}")
            return finish(
                status=DetectionStatus.LOOKUP_FAILED, search_text=search_text, error=str(e)
            )

        if match is None:
            return finish(status=DetectionStatus.NO_MATCH, search_text=search_text)

        card, rule = match
        logger.info(f"Place name matched card {card.id} ({card.store_name}) by {rule} rule")
        return finish(
            status=DetectionStatus.MATCHED,
            card=card,
            rule=rule,
            search_text=search_text,
        )

    def detect_nearby_card_by_place_name(
        self, latitude: float, longitude: float, cards: Sequence[RewardCard]
    ) -> RewardCard | None:
        """Return the matching card, or None on no match or any failure."""
        return self.detect(latitude, longitude, cards).card
