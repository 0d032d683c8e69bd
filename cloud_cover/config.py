"""
Settings for Cloud Cover Forecast

Values come from the environment (a .env file is loaded first), falling
back to the defaults below. Cork, Ireland is the default location.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from cloud_cover.errors import InvalidCoordinatesError

logger = logging.getLogger(__name__)

DEFAULT_LAT = 51.8986
DEFAULT_LON = -8.4756
DEFAULT_HOURS = 48
DEFAULT_CACHE_TTL_MINUTES = 15
DEFAULT_DIFF_THRESHOLD = 20

MIN_HOURS = 1
MAX_HOURS = 168


@dataclass
class Settings:
    lat: float = DEFAULT_LAT
    lon: float = DEFAULT_LON
    hours: int = DEFAULT_HOURS
    cache_ttl: int = DEFAULT_CACHE_TTL_MINUTES  # minutes
    diff_threshold: int = DEFAULT_DIFF_THRESHOLD  # percentage points
    astro_api_key: str = ""
    metno_contact: str = ""
    cache_dir: Path = Path("outputs/cache")

    @property
    def cache_ttl_seconds(self) -> int:
        return max(1, int(self.cache_ttl)) * 60


def clamp_hours(hours) -> int:
    """Clamp a requested hour count to 1-168."""
    try:
        hours = int(hours)
    except (TypeError, ValueError):
        return DEFAULT_HOURS
    return max(MIN_HOURS, min(MAX_HOURS, hours))


def validate_coordinates(lat, lon) -> bool:
    try:
        lat = float(lat)
        lon = float(lon)
    except (TypeError, ValueError):
        return False
    return -90 <= lat <= 90 and -180 <= lon <= 180


def require_coordinates(lat, lon) -> None:
    """Raise InvalidCoordinatesError unless lat/lon are in range."""
    if not validate_coordinates(lat, lon):
        raise InvalidCoordinatesError(lat, lon)


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        # Accept comma decimal separators ("51,8986")
        return float(raw.replace(",", "."))
    except ValueError:
        logger.warning(f"[load_settings] Ignoring invalid {name}={raw!r}")
        return default


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"[load_settings] Ignoring invalid {name}={raw!r}")
        return default


def load_settings(env_file: Optional[Path] = None) -> Settings:
    """Build Settings from the environment (after loading .env)."""
    load_dotenv(dotenv_path=env_file)

    settings = Settings(
        lat=_env_float("CLOUD_COVER_LAT", DEFAULT_LAT),
        lon=_env_float("CLOUD_COVER_LON", DEFAULT_LON),
        hours=clamp_hours(_env_int("CLOUD_COVER_HOURS", DEFAULT_HOURS)),
        cache_ttl=max(1, _env_int("CLOUD_COVER_CACHE_TTL", DEFAULT_CACHE_TTL_MINUTES)),
        diff_threshold=_env_int("CLOUD_COVER_DIFF_THRESHOLD", DEFAULT_DIFF_THRESHOLD),
        astro_api_key=os.getenv("IPGEOLOCATION_API_KEY", ""),
        metno_contact=os.getenv("METNO_CONTACT", ""),
        cache_dir=Path(os.getenv("CLOUD_COVER_CACHE_DIR", "outputs/cache")),
    )

    if not validate_coordinates(settings.lat, settings.lon):
        logger.warning(
            f"[load_settings] Configured coordinates ({settings.lat}, {settings.lon}) out of range, "
            f"using defaults"
        )
        settings.lat = DEFAULT_LAT
        settings.lon = DEFAULT_LON

    logger.debug(f"[load_settings] {settings}")
    return settings
