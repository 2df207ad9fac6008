"""
Card persistence for CardScout.

Cards are kept as one JSON array of card records under a single
well-known key in a JSON document on disk. There is no schema version;
fields added later are simply optional.
"""

import json
import logging
import os
import tempfile
import threading
import time
import uuid
from pathlib import Path
from typing import Any

from ..core.models import CardFields, RewardCard

logger = logging.getLogger(__name__)

CARDS_STORAGE_KEY = "@all_rewards_cards"


class CardStoreError(Exception):
    """Raised when the card file cannot be read or written."""


def _now_ms() -> int:
    return int(time.time() * 1000)


class CardStore:
    """
    JSON-file backed store of reward cards.

    Features:
    - Cards listed in insertion order
    - Missing ids are a no-op: update returns None, delete returns False
    - Atomic writes via a temporary file in the same directory
    - Thread-safe read-modify-write cycles

    Usage:
        store = CardStore("data/cards.json")
        card = store.create(CardFields(store_name="Tesco", image_uri="file:///..."))
        store.delete(card.id)
    """

    def __init__(self, path: str | Path, storage_key: str = CARDS_STORAGE_KEY):
        """
        Initialize card store.

        Args:
            path: Path of the JSON document holding the cards.
            storage_key: Key the card array is stored under.
        """
        self.path = Path(path)
        self.storage_key = storage_key
        self._lock = threading.RLock()

    def _read_document(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, encoding="utf-8") as f:
                document = json.load(f)
        except (OSError, ValueError) as e:
            raise CardStoreError(f"Failed to read cards from {self.path}: {e}") from e
        if not isinstance(document, dict):
            raise CardStoreError(f"Unexpected card file layout in {self.path}")
        return document

    def _read_cards(self) -> list[RewardCard]:
        records = self._read_document().get(self.storage_key) or []
        try:
            return [RewardCard.from_dict(record) for record in records]
        except (KeyError, TypeError, ValueError) as e:
            raise CardStoreError(f"Malformed card record in {self.path}: {e}") from e

    def _write_cards(self, cards: list[RewardCard]) -> None:
        document = self._read_document()
        document[self.storage_key] = [card.to_dict() for card in cards]

        tmp_name = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(document, f, ensure_ascii=False, indent=2)
            os.replace(tmp_name, self.path)
        except OSError as e:
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise CardStoreError(f"Failed to write cards to {self.path}: {e}") from e

    def list(self) -> list[RewardCard]:
        """All cards in insertion order."""
        with self._lock:
            return self._read_cards()

    def get(self, card_id: str) -> RewardCard | None:
        """Card with the given id, or None."""
        with self._lock:
            for card in self._read_cards():
                if card.id == card_id:
                    return card
        return None

    def create(self, fields: CardFields) -> RewardCard:
        """
        Create and persist a new card.

        Args:
            fields: Store name and image URI are required.

        Returns:
            The stored card with its generated id and timestamps.

        Raises:
            ValueError: Store name or image URI missing.
            CardStoreError: The card file could not be written.
        """
        if not fields.store_name or not fields.store_name.strip():
            raise ValueError("Store name is required")
        if not fields.image_uri:
            raise ValueError("Card image is required")

        now = _now_ms()
        card = RewardCard(
            id=uuid.uuid4().hex,
            store_name=fields.store_name.strip(),
            image_uri=fields.image_uri,
            created_at=now,
            updated_at=now,
            store_locations=list(fields.store_locations) if fields.store_locations else None,
        )

        with self._lock:
            cards = self._read_cards()
            cards.append(card)
            self._write_cards(cards)

        logger.info(f"Card created: {card.id} ({card.store_name})")
        return card

    def update(self, card_id: str, fields: CardFields) -> RewardCard | None:
        """
        Apply edits to a card.

        Returns:
            The updated card, or None if no card has that id.

        Raises:
            ValueError: The new store name is blank.
            CardStoreError: The card file could not be written.
        """
        if fields.store_name is not None and not fields.store_name.strip():
            raise ValueError("Store name cannot be blank")

        with self._lock:
            cards = self._read_cards()
            for card in cards:
                if card.id == card_id:
                    break
            else:
                logger.info(f"Update skipped, card not found: {card_id}")
                return None

            if fields.store_name is not None:
                card.store_name = fields.store_name.strip()
            if fields.image_uri is not None:
                card.image_uri = fields.image_uri
            if fields.store_locations is not None:
                card.store_locations = list(fields.store_locations) or None
            card.updated_at = max(_now_ms(), card.created_at)

            self._write_cards(cards)

        logger.info(f"Card updated: {card.id} ({card.store_name})")
        return card

    def delete(self, card_id: str) -> bool:
        """
        Delete a card.

        Returns:
            True if a card was removed, False if no card had that id.

        Raises:
            CardStoreError: The card file could not be written.
        """
        with self._lock:
            cards = self._read_cards()
            remaining = [card for card in cards if card.id != card_id]
            if len(remaining) == len(cards):
                logger.info(f"Delete skipped, card not found: {card_id}")
                return False
            self._write_cards(remaining)

        logger.info(f"Card deleted: {card_id}")
        return True
