"""
Unit tests for ImageStore.
"""

import cv2
import numpy as np
import pytest

from cardscout.services.image_store import ImageImportError, ImageStore


@pytest.fixture
def image_store(test_config):
    return ImageStore(test_config["storage"])


@pytest.fixture
def card_photo(tmp_path):
    """Synthetic 200x120 card photo."""
    img = np.full((120, 200, 3), 255, dtype=np.uint8)
    cv2.rectangle(img, (10, 10), (190, 110), (0, 0, 255), -1)
    path = tmp_path / "photo.png"
    cv2.imwrite(str(path), img)
    return path


class TestImageStore:
    """Tests for card image import and deletion."""

    def test_import_downscales(self, image_store, card_photo):
        uri = image_store.import_image(card_photo)
        assert uri.startswith("file://")

        stored = cv2.imread(str(image_store.path_for(uri)))
        assert stored is not None
        assert max(stored.shape[:2]) == 64
        assert stored.shape[1] > stored.shape[0]

    def test_small_image_kept(self, test_config, card_photo):
        test_config["storage"]["max_image_dimension"] = 1000
        uri = ImageStore(test_config["storage"]).import_image(card_photo)
        stored = cv2.imread(str(ImageStore(test_config["storage"]).path_for(uri)))
        assert stored.shape[:2] == (120, 200)

    def test_import_bytes(self, image_store, card_photo):
        uri = image_store.import_bytes(card_photo.read_bytes())
        assert image_store.path_for(uri).exists()

    def test_rejects_non_image(self, image_store, tmp_path):
        bogus = tmp_path / "notes.txt"
        bogus.write_text("not an image", encoding="utf-8")
        with pytest.raises(ImageImportError):
            image_store.import_image(bogus)

    def test_rejects_missing_file(self, image_store, tmp_path):
        with pytest.raises(ImageImportError):
            image_store.import_image(tmp_path / "missing.jpg")

    def test_rejects_empty_bytes(self, image_store):
        with pytest.raises(ImageImportError):
            image_store.import_bytes(b"")

    def test_delete(self, image_store, card_photo):
        uri = image_store.import_image(card_photo)
        assert image_store.delete_image(uri) is True
        assert not image_store.path_for(uri).exists()
        assert image_store.delete_image(uri) is False

    def test_never_deletes_outside_directory(self, image_store, card_photo):
        assert image_store.delete_image(card_photo.resolve().as_uri()) is False
        assert card_photo.exists()

    def test_non_file_uri(self, image_store):
        assert image_store.path_for("content://media/1") is None
