"""
Flask application factory for the CardScout local API.

Provides JSON endpoints for:
- Card management (list, create, edit, delete)
- Known-store quick-select data
- Nearby card detection
"""

import logging

from flask import Flask

from ..core.config import Config
from ..core.detector import NearbyCardDetector
from ..services.card_store import CardStore
from ..services.geocoding import GeocodingProvider, get_geocoding_provider
from ..services.image_store import ImageStore

logger = logging.getLogger(__name__)


def create_app(
    config: Config | None = None,
    geocoder: GeocodingProvider | None = None,
) -> Flask:
    """
    Application factory for Flask app.

    Args:
        config: CardScout configuration, or None to load defaults
        geocoder: Reverse geocoding provider, or None to build from config

    Returns:
        Configured Flask application
    """
    app = Flask(__name__)

    if config is None:
        config = Config()

    app.config["CARDSCOUT_CONFIG"] = config

    if geocoder is None:
        geocoder = get_geocoding_provider(config["geocoding"])

    storage = config["storage"]
    app.config["card_store"] = CardStore(
        storage.get("cards_file", "data/cards.json"),
        storage_key=storage.get("storage_key", "@all_rewards_cards"),
    )
    app.config["image_store"] = ImageStore(storage)
    app.config["detector"] = NearbyCardDetector(config.as_dict, geocoder)

    from .routes import api

    app.register_blueprint(api.bp, url_prefix="/api")

    @app.route("/health")
    def health() -> dict:
        """Health check endpoint."""
        return {"status": "ok", "version": config.get("app.version", "0.1.0")}

    logger.info("Flask app created")
    return app
