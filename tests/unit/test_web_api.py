"""
Unit tests for the Flask API.
"""

import io
import json

import cv2
import numpy as np
import pytest
import yaml

from cardscout.core.config import Config
from cardscout.services.card_store import CardStoreError
from cardscout.web.app import create_app


@pytest.fixture
def config(test_config, tmp_path, monkeypatch):
    monkeypatch.delenv("CARDSCOUT_ENV", raising=False)
    config_dir = tmp_path / "config"
    config_dir.mkdir()
    (config_dir / "default.yaml").write_text(yaml.safe_dump(test_config), encoding="utf-8")
    return Config(config_dir)


@pytest.fixture
def app(config, geocoder_for):
    app = create_app(config, geocoder=geocoder_for("Marks and Spencer", street="Oxford Street"))
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()


def _png_bytes() -> bytes:
    img = np.zeros((40, 60, 3), dtype=np.uint8)
    ok, buffer = cv2.imencode(".png", img)
    assert ok
    return buffer.tobytes()


def _post_card(client, name, **extra):
    body = {"storeName": name, "imageUri": f"file:///cards/{name}.jpg", **extra}
    return client.post("/api/cards", json=body)


def _create(client, name, **extra):
    response = _post_card(client, name, **extra)
    assert response.status_code == 201
    return response.get_json()


class TestCardsApi:
    """Tests for card CRUD endpoints."""

    def test_health(self, client):
        assert client.get("/health").get_json() == {"status": "ok", "version": "0.1.0"}

    def test_list_empty(self, client):
        assert client.get("/api/cards").get_json() == {"cards": []}

    def test_create_and_get(self, client):
        card = _create(client, "Tesco")
        assert card["storeName"] == "Tesco"

        fetched = client.get(f"/api/cards/{card['id']}").get_json()
        assert fetched == card

    def test_create_invalid(self, client):
        assert client.post("/api/cards", json={"storeName": "Tesco"}).status_code == 400
        assert client.post("/api/cards", data="nope").status_code == 400

    def test_create_with_upload(self, client, app):
        response = client.post(
            "/api/cards",
            data={
                "storeName": "Boots",
                "storeLocations": json.dumps([{"latitude": 51.5, "longitude": -0.1}]),
                "image": (io.BytesIO(_png_bytes()), "card.png"),
            },
            content_type="multipart/form-data",
        )
        assert response.status_code == 201
        card = response.get_json()
        assert card["imageUri"].startswith("file://")
        assert card["storeLocations"] == [{"latitude": 51.5, "longitude": -0.1}]
        assert app.config["image_store"].path_for(card["imageUri"]).exists()

    def test_rejected_upload_is_not_kept(self, client, app):
        response = client.post(
            "/api/cards",
            data={"storeName": "  ", "image": (io.BytesIO(_png_bytes()), "card.png")},
            content_type="multipart/form-data",
        )
        assert response.status_code == 400
        assert list(app.config["image_store"].images_dir.glob("*.jpg")) == []

    def test_rejected_update_upload_is_not_kept(self, client, app):
        card = _create(client, "Tesco")
        response = client.put(
            f"/api/cards/{card['id']}",
            data={"storeName": "  ", "image": (io.BytesIO(_png_bytes()), "card.png")},
            content_type="multipart/form-data",
        )
        assert response.status_code == 400
        assert list(app.config["image_store"].images_dir.glob("*.jpg")) == []
        assert client.get(f"/api/cards/{card['id']}").get_json() == card

    @pytest.mark.parametrize(
        "body",
        [
            {"storeName": 123, "imageUri": "file:///x.jpg"},
            {"storeName": "Tesco", "imageUri": ["file:///x.jpg"]},
        ],
    )
    def test_non_string_fields_rejected(self, client, body):
        response = client.post("/api/cards", json=body)
        assert response.status_code == 400
        assert client.get("/api/cards").get_json() == {"cards": []}

    def test_non_numeric_radius_rejected(self, client, london):
        location = {"latitude": 51.5, "longitude": -0.1, "radius": "near"}
        card = _create(client, "Tesco")

        assert _post_card(client, "Asda", storeLocations=[location]).status_code == 400
        update = client.put(f"/api/cards/{card['id']}", json={"storeLocations": [location]})
        assert update.status_code == 400

        response = client.post("/api/detect", json={"latitude": london[0], "longitude": london[1]})
        assert response.status_code == 200
        assert response.get_json()["status"] == "NO_MATCH"

    def test_numeric_string_radius_stored_as_number(self, client):
        card = _create(
            client, "Tesco", storeLocations=[{"latitude": 51.5, "longitude": -0.1, "radius": "120"}]
        )
        assert card["storeLocations"][0]["radius"] == 120.0

    def test_upload_rejects_non_image(self, client):
        response = client.post(
            "/api/cards",
            data={"storeName": "Boots", "image": (io.BytesIO(b"text"), "card.png")},
            content_type="multipart/form-data",
        )
        assert response.status_code == 400

    def test_get_missing(self, client):
        assert client.get("/api/cards/missing").status_code == 404

    def test_update(self, client):
        card = _create(client, "Tesco")
        response = client.put(f"/api/cards/{card['id']}", json={"storeName": "Tesco Extra"})
        assert response.status_code == 200
        updated = response.get_json()
        assert updated["storeName"] == "Tesco Extra"
        assert updated["createdAt"] == card["createdAt"]

    def test_update_missing(self, client):
        assert client.put("/api/cards/missing", json={"storeName": "X"}).status_code == 404

    def test_delete(self, client):
        card = _create(client, "Tesco")
        assert client.delete(f"/api/cards/{card['id']}").get_json() == {"deleted": True}
        assert client.get("/api/cards").get_json() == {"cards": []}

    def test_delete_missing_is_not_error(self, client):
        response = client.delete("/api/cards/missing")
        assert response.status_code == 200
        assert response.get_json() == {"deleted": False}

    def test_store_failure(self, client, app, monkeypatch):
        def fail(*args, **kwargs):
            raise CardStoreError("disk full")

        monkeypatch.setattr(app.config["card_store"], "create", fail)
        response = client.post("/api/cards", json={"storeName": "Tesco", "imageUri": "file:///x.jpg"})
        assert response.status_code == 500
        assert "try again" in response.get_json()["error"]


class TestDetectApi:
    """Tests for the detection endpoint."""

    def test_place_name_detection(self, client, london):
        _create(client, "Tesco")
        _create(client, "M&S")
        response = client.post("/api/detect", json={"latitude": london[0], "longitude": london[1]})
        data = response.get_json()
        assert data["status"] == "MATCHED"
        assert data["card"]["storeName"] == "M&S"
        assert data["rule"] == "keyword"

    def test_coordinate_detection(self, client, london, offset_north):
        lat, lon = offset_north(*london, 60)
        _create(client, "Lidl", storeLocations=[{"latitude": lat, "longitude": lon, "radius": 100}])
        data = client.post(
            "/api/detect", json={"latitude": london[0], "longitude": london[1], "accuracy": 8}
        ).get_json()
        assert data["method"] == "coordinates"
        assert data["distance_m"] == pytest.approx(60, abs=0.05)

    def test_no_match(self, client):
        _create(client, "Asda")
        data = client.post("/api/detect", json={"latitude": 0, "longitude": 0}).get_json()
        assert data["status"] == "NO_MATCH"
        assert data["card"] is None

    @pytest.mark.parametrize("body", [{}, {"latitude": 1}, {"latitude": "x", "longitude": 2}])
    def test_invalid_body(self, client, body):
        assert client.post("/api/detect", json=body).status_code == 400


class TestMiscApi:
    def test_stores(self, client):
        data = client.get("/api/stores").get_json()
        assert "M&S" in data["names"]
        assert data["keywords"]["Co-op"] == ["co-op", "coop"]

    def test_config(self, client):
        data = client.get("/api/config").get_json()
        assert data["detection"]["default_radius_m"] == 150
