"""
Card image storage.

Copies picked card photos into the application's image directory,
normalized to JPEG and capped in size, and hands back a file URI for the
card record.
"""

import logging
import uuid
from pathlib import Path
from typing import Any
from urllib.parse import unquote, urlparse

import cv2
import numpy as np

logger = logging.getLogger(__name__)


class ImageImportError(Exception):
    """Raised when an image cannot be decoded or stored."""


class ImageStore:
    """
    Stores card images on disk.

    Usage:
        images = ImageStore(config['storage'])
        uri = images.import_image("/path/to/photo.png")
        images.delete_image(uri)
    """

    def __init__(self, config: dict[str, Any] | None = None):
        """
        Initialize image store.

        Args:
            config: Storage configuration dict with keys:
                - images_dir: Directory for stored images
                - max_image_dimension: Longest side of stored images in pixels
                - jpeg_quality: JPEG quality 0-100
        """
        config = config or {}
        self.images_dir = Path(config.get("images_dir", "data/images"))
        self.max_dimension = int(config.get("max_image_dimension", 1600))
        self.jpeg_quality = int(config.get("jpeg_quality", 90))

    def import_image(self, source: str | Path) -> str:
        """
        Copy an image file into the store.

        Args:
            source: Path of the picked image

        Returns:
            file:// URI of the stored JPEG

        Raises:
            ImageImportError: The file is missing or not a decodable image.
        """
        image = cv2.imread(str(source), cv2.IMREAD_COLOR)
        if image is None:
            raise ImageImportError(f"Not a readable image: {source}")
        return self._store(image)

    def import_bytes(self, data: bytes) -> str:
        """Store an image supplied as encoded bytes (e.g. an upload)."""
        buffer = np.frombuffer(data, dtype=np.uint8)
        image = cv2.imdecode(buffer, cv2.IMREAD_COLOR) if buffer.size else None
        if image is None:
            raise ImageImportError("Uploaded data is not a readable image")
        return self._store(image)

    def _store(self, image: np.ndarray) -> str:
        image = self._fit(image)

        self.images_dir.mkdir(parents=True, exist_ok=True)
        path = (self.images_dir / f"{uuid.uuid4().hex}.jpg").resolve()

        ok = cv2.imwrite(str(path), image, [cv2.IMWRITE_JPEG_QUALITY, self.jpeg_quality])
        if not ok:
            raise ImageImportError(f"Failed to write image: {path}")

        logger.info(f"Card image stored: {path} ({image.shape[1]}x{image.shape[0]})")
        return path.as_uri()

    def _fit(self, image: np.ndarray) -> np.ndarray:
        """Downscale so the longest side is at most max_dimension."""
        height, width = image.shape[:2]
        longest = max(height, width)
        if longest <= self.max_dimension:
            return image
        scale = self.max_dimension / longest
        size = (max(1, round(width * scale)), max(1, round(height * scale)))
        return cv2.resize(image, size, interpolation=cv2.INTER_AREA)

    def path_for(self, uri: str) -> Path | None:
        """Local path for a file:// URI inside the image directory, else None."""
        parsed = urlparse(uri)
        if parsed.scheme != "file":
            return None
        path = Path(unquote(parsed.path))
        try:
            path.resolve().relative_to(self.images_dir.resolve())
        except ValueError:
            return None
        return path

    def delete_image(self, uri: str) -> bool:
        """
        Delete a stored image.

        Images outside the image directory are never touched.

        Returns:
            True if a file was removed.
        """
        path = self.path_for(uri)
        if path is None or not path.exists():
            return False
        path.unlink()
        logger.info(f"Card image deleted: {path}")
        return True
