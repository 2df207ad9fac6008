"""
CardScout CLI entry point.

Usage:
    python -m cardscout --list                      # List stored cards
    python -m cardscout --detect --lat 51.5 --lon -0.1
    python -m cardscout --web                       # Start local API server
    python -m cardscout --help                      # Show help
"""

import argparse
import json
import logging
import os
import sys
from pathlib import Path

from .core.config import Config
from .core.detector import NearbyCardDetector
from .core.models import CardFields, StoreLocation, UserLocation
from .detection.store_dictionary import StoreDictionary
from .services.card_store import CardStore, CardStoreError
from .services.geocoding import get_geocoding_provider
from .services.image_store import ImageImportError, ImageStore
from .services.location_provider import (
    PermissionState,
    StaticLocationProvider,
    get_location_provider,
)


def setup_logging(config: Config) -> None:
    """Configure logging based on config."""
    log_config = config["logging"]
    level = getattr(logging, str(log_config.get("level", "INFO")).upper(), logging.INFO)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    log_file = log_config.get("file")
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=level,
        format=log_config.get("format", "%(asctime)s - %(name)s - %(levelname)s - %(message)s"),
        handlers=handlers,
    )


def build_card_store(config: Config) -> CardStore:
    storage = config["storage"]
    return CardStore(
        storage.get("cards_file", "data/cards.json"),
        storage_key=storage.get("storage_key", "@all_rewards_cards"),
    )


def parse_location(value: str) -> StoreLocation:
    """Parse "LAT,LON[,RADIUS]" into a StoreLocation."""
    parts = [p.strip() for p in value.split(",")]
    if len(parts) not in (2, 3):
        raise argparse.ArgumentTypeError("expected LAT,LON or LAT,LON,RADIUS")
    try:
        numbers = [float(p) for p in parts]
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"invalid number in {value!r}") from e
    return StoreLocation(
        latitude=numbers[0],
        longitude=numbers[1],
        radius=numbers[2] if len(numbers) == 3 else None,
    )


def run_detection(config: Config, args: argparse.Namespace) -> int:
    """Run one detection and print the result as JSON."""
    logger = logging.getLogger(__name__)

    if args.lat is not None and args.lon is not None:
        location_provider = StaticLocationProvider(
            UserLocation(latitude=args.lat, longitude=args.lon, accuracy=args.accuracy),
            PermissionState.GRANTED,
        )
    else:
        location_provider = get_location_provider(config["location"])

    detector = NearbyCardDetector(config.as_dict, get_geocoding_provider(config["geocoding"]))
    cards = build_card_store(config).list()
    logger.info(f"Checking {len(cards)} card(s)")

    result = detector.detect_current(location_provider, cards)
    print(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
    return 0 if result.matched else 1


def run_web_server(config: Config) -> None:
    """Start the Flask web server."""
    logger = logging.getLogger(__name__)
    logger.info("Starting web server...")

    from .web.app import create_app

    app = create_app(config)

    web_config = config["web"]
    host = web_config.get("host", "127.0.0.1")
    port = web_config.get("port", 5000)
    debug = config.get("app.debug", False)

    logger.info(f"Web server starting at http://{host}:{port}")
    app.run(host=host, port=port, debug=debug, threaded=True)


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="CardScout - loyalty card wallet with nearby store detection",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    python -m cardscout --list
    python -m cardscout --add Tesco --image card.jpg --location 51.50,-0.12,200
    python -m cardscout --detect --lat 51.5007 --lon -0.1246
    python -m cardscout --remove 3f2a...
    python -m cardscout --web
        """,
    )

    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("--web", action="store_true", help="Start the local API server")
    mode.add_argument("--detect", action="store_true", help="Detect the card for the current position")
    mode.add_argument("--list", action="store_true", help="List stored cards")
    mode.add_argument("--stores", action="store_true", help="List known stores and keywords")
    mode.add_argument("--add", metavar="STORE_NAME", help="Add a card for a store")
    mode.add_argument("--remove", metavar="CARD_ID", help="Delete a card")

    parser.add_argument("--image", type=str, help="Card photo to import (with --add)")
    parser.add_argument(
        "--location",
        type=parse_location,
        action="append",
        help="Store location LAT,LON[,RADIUS] (with --add, repeatable)",
    )
    parser.add_argument("--lat", type=float, help="Latitude (with --detect)")
    parser.add_argument("--lon", type=float, help="Longitude (with --detect)")
    parser.add_argument("--accuracy", type=float, help="Fix accuracy in meters (with --detect)")
    parser.add_argument("--config", type=str, help="Path to configuration directory")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")

    args = parser.parse_args(argv)

    config_dir = Path(args.config) if args.config else None
    config = Config(config_dir)

    if args.debug:
        os.environ["CARDSCOUT_LOGGING_LEVEL"] = "DEBUG"
        config.reload()

    setup_logging(config)

    logger = logging.getLogger(__name__)
    logger.debug(f"Environment: {config.env}")

    try:
        if args.web:
            run_web_server(config)
            return 0

        if args.detect:
            return run_detection(config, args)

        if args.stores:
            for name, keywords in StoreDictionary.from_config(config["stores"]).items():
                print(f"{name}: {', '.join(keywords)}")
            return 0

        store = build_card_store(config)

        if args.add:
            if not args.image:
                parser.error("--add requires --image")
            image_uri = ImageStore(config["storage"]).import_image(args.image)
            card = store.create(
                CardFields(store_name=args.add, image_uri=image_uri, store_locations=args.location)
            )
            print(json.dumps(card.to_dict(), indent=2, ensure_ascii=False))
            return 0

        if args.remove:
            card = store.get(args.remove)
            if not store.delete(args.remove):
                print(f"No card with id {args.remove}")
                return 1
            if card is not None:
                ImageStore(config["storage"]).delete_image(card.image_uri)
            print(f"Deleted {args.remove}")
            return 0

        for card in store.list():
            locations = len(card.store_locations or [])
            print(f"{card.id}  {card.store_name}  ({locations} location(s))")
        return 0

    except (CardStoreError, ImageImportError, ValueError) as e:
        logger.error(str(e))
        return 1


if __name__ == "__main__":
    sys.exit(main())
