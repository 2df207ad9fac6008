"""
REST API routes for CardScout.

Provides JSON endpoints for:
- Card CRUD
- Known-store dictionary
- Nearby card detection
- Configuration (read-only subset)
"""

import json
import logging

from flask import Blueprint, current_app, jsonify, request

from ...core.models import CardFields, UserLocation
from ...services.card_store import CardStoreError
from ...services.image_store import ImageImportError

logger = logging.getLogger(__name__)

bp = Blueprint("api", __name__)


def _parse_fields() -> tuple[CardFields, str | None]:
    """
    Read card fields from a JSON body or a multipart form.

    A multipart form may carry the card photo as an "image" file part;
    it is imported into the image store and its URI used for the card.

    Returns:
        Tuple of (fields, URI of the imported upload or None)
    """
    if request.files:
        form = request.form
        locations = form.get("storeLocations")
        fields = CardFields.from_dict(
            {
                "storeName": form.get("storeName"),
                "imageUri": form.get("imageUri"),
                "storeLocations": json.loads(locations) if locations else None,
            }
        )
        upload = request.files.get("image")
        if upload is None:
            return fields, None
        fields.image_uri = current_app.config["image_store"].import_bytes(upload.read())
        return fields, fields.image_uri

    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValueError("No data provided")
    return CardFields.from_dict(data), None


def _discard_upload(uri: str | None) -> None:
    """Remove an imported upload whose card was never saved."""
    if uri is not None:
        current_app.config["image_store"].delete_image(uri)


@bp.errorhandler(CardStoreError)
def handle_store_error(e: CardStoreError):
    logger.error(f"Card store failure: {e}")
    return jsonify({"error": "Could not save cards, please try again"}), 500


@bp.route("/cards", methods=["GET"])
def list_cards():
    """
    List all cards in insertion order.

    Returns:
        JSON with card records
    """
    cards = current_app.config["card_store"].list()
    return jsonify({"cards": [card.to_dict() for card in cards]})


@bp.route("/cards", methods=["POST"])
def create_card():
    """
    Create a card.

    Accepts a JSON body with storeName, imageUri and optional
    storeLocations, or a multipart form with an "image" file part.

    Returns:
        JSON with the created card
    """
    uploaded = None
    try:
        fields, uploaded = _parse_fields()
        card = current_app.config["card_store"].create(fields)
    except ImageImportError as e:
        return jsonify({"error": str(e)}), 400
    except (ValueError, KeyError, TypeError) as e:
        _discard_upload(uploaded)
        return jsonify({"error": f"Invalid card: {e}"}), 400
    except CardStoreError:
        _discard_upload(uploaded)
        raise

    return jsonify(card.to_dict()), 201


@bp.route("/cards/<card_id>", methods=["GET"])
def get_card(card_id: str):
    card = current_app.config["card_store"].get(card_id)
    if card is None:
        return jsonify({"error": "Card not found"}), 404
    return jsonify(card.to_dict())


@bp.route("/cards/<card_id>", methods=["PUT", "PATCH"])
def update_card(card_id: str):
    """
    Edit a card. Fields not supplied are left unchanged.

    Returns:
        JSON with the updated card, or 404 if the id is unknown
    """
    store = current_app.config["card_store"]
    previous = store.get(card_id)
    if previous is None:
        return jsonify({"error": "Card not found"}), 404

    uploaded = None
    try:
        fields, uploaded = _parse_fields()
        card = store.update(card_id, fields)
    except ImageImportError as e:
        return jsonify({"error": str(e)}), 400
    except (ValueError, KeyError, TypeError) as e:
        _discard_upload(uploaded)
        return jsonify({"error": f"Invalid card: {e}"}), 400
    except CardStoreError:
        _discard_upload(uploaded)
        raise

    if card is None:
        _discard_upload(uploaded)
        return jsonify({"error": "Card not found"}), 404

    if previous.image_uri != card.image_uri:
        current_app.config["image_store"].delete_image(previous.image_uri)

    return jsonify(card.to_dict())


@bp.route("/cards/<card_id>", methods=["DELETE"])
def delete_card(card_id: str):
    """
    Delete a card and its stored image.

    Deleting an unknown id is not an error.

    Returns:
        JSON with "deleted" true if a card was removed
    """
    store = current_app.config["card_store"]
    card = store.get(card_id)
    deleted = store.delete(card_id)
    if deleted and card is not None:
        current_app.config["image_store"].delete_image(card.image_uri)
    return jsonify({"deleted": deleted})


@bp.route("/stores")
def list_stores():
    """
    Get the known-store dictionary.

    Returns:
        JSON with quick-select names and keywords per store
    """
    stores = current_app.config["detector"].stores
    return jsonify({"names": stores.store_names(), "keywords": stores.to_dict()})


@bp.route("/detect", methods=["POST"])
def detect():
    """
    Detect the card for the store at a position.

    Accepts JSON body {"latitude": .., "longitude": .., "accuracy": ..}.

    Returns:
        JSON detection result
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({"error": "No data provided"}), 400

    try:
        accuracy = data.get("accuracy")
        location = UserLocation(
            latitude=float(data["latitude"]),
            longitude=float(data["longitude"]),
            accuracy=float(accuracy) if accuracy is not None else None,
        )
    except (KeyError, TypeError, ValueError):
        return jsonify({"error": "latitude and longitude are required numbers"}), 400

    cards = current_app.config["card_store"].list()
    result = current_app.config["detector"].detect(location, cards)
    return jsonify(result.to_dict())


@bp.route("/config", methods=["GET"])
def get_config():
    """
    Get current configuration.

    Returns:
        JSON with a safe subset of the configuration
    """
    config = current_app.config["CARDSCOUT_CONFIG"]
    return jsonify({
        "detection": {
            "strategies": config.get("detection.strategies"),
            "default_radius_m": config.get("detection.default_radius_m"),
            "min_fuzzy_word_length": config.get("detection.min_fuzzy_word_length"),
        },
        "geocoding": {
            "provider": config.get("geocoding.provider"),
            "language": config.get("geocoding.language"),
        },
    })
