"""Local HTTP API for CardScout."""

from .app import create_app

__all__ = ["create_app"]
