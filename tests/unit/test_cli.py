"""
Unit tests for the command line entry point.
"""

import argparse
import json

import cv2
import numpy as np
import pytest
import yaml

from cardscout.__main__ import main, parse_location
from cardscout.core.models import StoreLocation


@pytest.fixture
def config_dir(test_config, tmp_path, monkeypatch):
    monkeypatch.delenv("CARDSCOUT_ENV", raising=False)
    test_config["logging"] = {"level": "WARNING", "file": None}
    test_config["geocoding"] = {"provider": "static", "static_places": [{"name": "Random Street"}]}
    directory = tmp_path / "config"
    directory.mkdir()
    (directory / "default.yaml").write_text(yaml.safe_dump(test_config), encoding="utf-8")
    return directory


@pytest.fixture
def photo(tmp_path):
    path = tmp_path / "card.png"
    cv2.imwrite(str(path), np.zeros((30, 50, 3), dtype=np.uint8))
    return path


class TestParseLocation:
    def test_lat_lon(self):
        assert parse_location("51.5,-0.1") == StoreLocation(51.5, -0.1)

    def test_with_radius(self):
        assert parse_location("51.5, -0.1, 250").radius == 250

    @pytest.mark.parametrize("value", ["51.5", "a,b", "1,2,3,4"])
    def test_invalid(self, value):
        with pytest.raises(argparse.ArgumentTypeError):
            parse_location(value)


class TestMain:
    """Tests for CLI flows against a temporary card file."""

    def test_add_list_detect_remove(self, config_dir, photo, capsys, london, offset_north):
        lat, lon = offset_north(*london, 30)
        assert main([
            "--config", str(config_dir),
            "--add", "Tesco",
            "--image", str(photo),
            "--location", f"{lat},{lon},100",
        ]) == 0
        card = json.loads(capsys.readouterr().out)
        assert card["storeName"] == "Tesco"

        assert main(["--config", str(config_dir), "--list"]) == 0
        assert "Tesco" in capsys.readouterr().out

        assert main([
            "--config", str(config_dir),
            "--detect", "--lat", str(london[0]), "--lon", str(london[1]),
        ]) == 0
        result = json.loads(capsys.readouterr().out)
        assert result["card"]["id"] == card["id"]
        assert result["method"] == "coordinates"

        assert main(["--config", str(config_dir), "--remove", card["id"]]) == 0
        assert main(["--config", str(config_dir), "--remove", card["id"]]) == 1

    def test_detect_no_match(self, config_dir, capsys):
        assert main(["--config", str(config_dir), "--detect", "--lat", "0", "--lon", "0"]) == 1
        assert json.loads(capsys.readouterr().out)["status"] == "NO_MATCH"

    def test_detect_without_fix(self, config_dir, capsys):
        assert main(["--config", str(config_dir), "--detect"]) == 1
        assert json.loads(capsys.readouterr().out)["status"] == "NO_FIX"

    def test_add_rejects_bad_image(self, config_dir, tmp_path):
        bogus = tmp_path / "bogus.jpg"
        bogus.write_text("nope", encoding="utf-8")
        assert main(["--config", str(config_dir), "--add", "Tesco", "--image", str(bogus)]) == 1

    def test_stores(self, config_dir, capsys):
        assert main(["--config", str(config_dir), "--stores"]) == 0
        assert "M&S: marks, spencer, m&s" in capsys.readouterr().out
