"""
Tests for settings loading and coordinate validation.

Run with: python -m pytest tests/test_config.py -v
"""

import logging

import pytest

from cloud_cover.config import (
    DEFAULT_HOURS,
    DEFAULT_LAT,
    DEFAULT_LON,
    Settings,
    clamp_hours,
    load_settings,
    require_coordinates,
    validate_coordinates,
)
from cloud_cover.errors import InvalidCoordinatesError

logging.basicConfig(level=logging.DEBUG)
logger = logging.getLogger(__name__)

ENV_VARS = (
    "CLOUD_COVER_LAT",
    "CLOUD_COVER_LON",
    "CLOUD_COVER_HOURS",
    "CLOUD_COVER_CACHE_TTL",
    "CLOUD_COVER_DIFF_THRESHOLD",
    "CLOUD_COVER_CACHE_DIR",
    "IPGEOLOCATION_API_KEY",
    "METNO_CONTACT",
)


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """Strip our variables; values loaded from .env are undone on teardown."""
    for name in ENV_VARS:
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    return tmp_path / ".env"


class TestLoadSettings:

    def test_defaults(self, clean_env):
        """No environment gives the built-in defaults."""
        settings = load_settings(clean_env)
        logger.info(f"[TEST] Settings: {settings}")

        assert settings.lat == DEFAULT_LAT
        assert settings.lon == DEFAULT_LON
        assert settings.hours == DEFAULT_HOURS
        assert settings.cache_ttl_seconds == 15 * 60
        assert settings.diff_threshold == 20
        assert settings.astro_api_key == ""

    def test_environment_overrides(self, clean_env, monkeypatch):
        """Environment values override defaults and are clamped."""
        monkeypatch.setenv("CLOUD_COVER_LAT", "40,7128")
        monkeypatch.setenv("CLOUD_COVER_LON", "-74.006")
        monkeypatch.setenv("CLOUD_COVER_HOURS", "500")
        monkeypatch.setenv("CLOUD_COVER_DIFF_THRESHOLD", "15")
        monkeypatch.setenv("IPGEOLOCATION_API_KEY", "abc123")

        settings = load_settings(clean_env)

        assert settings.lat == pytest.approx(40.7128)
        assert settings.lon == pytest.approx(-74.006)
        assert settings.hours == 168
        assert settings.diff_threshold == 15
        assert settings.astro_api_key == "abc123"

    def test_out_of_range_coordinates_fall_back(self, clean_env, monkeypatch):
        """Invalid configured coordinates fall back to the defaults."""
        monkeypatch.setenv("CLOUD_COVER_LAT", "95")

        settings = load_settings(clean_env)

        assert (settings.lat, settings.lon) == (DEFAULT_LAT, DEFAULT_LON)

    def test_invalid_numbers_ignored(self, clean_env, monkeypatch):
        """Non-numeric values are ignored."""
        monkeypatch.setenv("CLOUD_COVER_HOURS", "lots")
        monkeypatch.setenv("CLOUD_COVER_LON", "west")

        settings = load_settings(clean_env)

        assert settings.hours == DEFAULT_HOURS
        assert settings.lon == DEFAULT_LON

    def test_dotenv_file(self, clean_env):
        """Values are read from a .env file."""
        clean_env.write_text("CLOUD_COVER_HOURS=24\nMETNO_CONTACT=me@example.com\n")

        settings = load_settings(clean_env)

        assert settings.hours == 24
        assert settings.metno_contact == "me@example.com"


class TestValidation:

    @pytest.mark.parametrize("lat,lon,valid", [
        (0, 0, True),
        (90, 180, True),
        (-90, -180, True),
        (90.1, 0, False),
        (0, -180.5, False),
        ("51.9", "-8.47", True),
        ("north", 0, False),
        (None, 0, False),
    ])
    def test_validate_coordinates(self, lat, lon, valid):
        """Latitude and longitude ranges are inclusive."""
        assert validate_coordinates(lat, lon) is valid

    def test_require_coordinates_raises(self):
        """Out-of-range coordinates raise InvalidCoordinatesError."""
        with pytest.raises(InvalidCoordinatesError) as exc_info:
            require_coordinates(100, 0)
        assert "Invalid coordinates" in str(exc_info.value)

        with pytest.raises(ValueError):
            require_coordinates(0, 200)

    @pytest.mark.parametrize("requested,expected", [
        (0, 1), (-5, 1), (1, 1), (72, 72), (168, 168), (169, 168), ("24", 24), ("many", DEFAULT_HOURS),
    ])
    def test_clamp_hours(self, requested, expected):
        """Requested hours are clamped to 1..168."""
        assert clamp_hours(requested) == expected

    def test_cache_ttl_minimum(self):
        """Cache TTL never drops below one minute."""
        assert Settings(cache_ttl=0).cache_ttl_seconds == 60
