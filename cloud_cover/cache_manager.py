"""
File-backed TTL cache for Cloud Cover Forecast

Holds normalised provider results between runs so repeated lookups for the same
location do not hit the upstream APIs (Met.no in particular asks clients to
cache). One JSON file per key under CACHE_DIR.

The forecast core never touches the cache; only pipeline.py does.
"""

import hashlib
import json
import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

logger = logging.getLogger(__name__)

FORECAST_PREFIX = "ccf_"
GEOCODING_PREFIX = "ccf_geo_"
MOON_PREFIX = "ccf_moon_"


def cache_key(prefix: str, *parts: Any) -> str:
    """Stable key: prefix + md5 of the "|"-joined parts."""
    digest = hashlib.md5("|".join(str(p) for p in parts).encode("utf-8")).hexdigest()
    return f"{prefix}{digest}"


@dataclass
class CacheEntry:
    """Cached value with its write time and lifetime."""
    key: str
    timestamp: datetime
    ttl_seconds: int
    data: Any

    @property
    def age_seconds(self) -> float:
        return (datetime.now() - self.timestamp).total_seconds()

    @property
    def is_expired(self) -> bool:
        return self.age_seconds >= self.ttl_seconds


class ForecastCache:
    """
    JSON file cache with per-entry TTL.

    get() returns None on a miss, on expiry, or when the file cannot be
    read; a broken cache only costs a refetch.
    """

    def __init__(self, cache_dir: Path = Path("outputs/cache")):
        self.cache_dir = Path(cache_dir)
        self.cache_dir.mkdir(parents=True, exist_ok=True)

    def _cache_path(self, key: str) -> Path:
        return self.cache_dir / f"{key}.json"

    def load(self, key: str) -> Optional[CacheEntry]:
        path = self._cache_path(key)
        if not path.exists():
            return None

        try:
            with open(path, 'r', encoding='utf-8') as f:
                raw = json.load(f)
            return CacheEntry(
                key=raw["key"],
                timestamp=datetime.fromisoformat(raw["timestamp"]),
                ttl_seconds=int(raw["ttl_seconds"]),
                data=raw["data"],
            )
        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.warning(f"[ForecastCache] Failed to read {path.name}: {e}")
            return None

    def get(self, key: str) -> Optional[Any]:
        entry = self.load(key)
        if entry is None:
            logger.debug(f"[ForecastCache] MISS {key}")
            return None
        if entry.is_expired:
            logger.debug(f"[ForecastCache] EXPIRED {key} ({entry.age_seconds:.0f}s old)")
            return None
        logger.debug(f"[ForecastCache] HIT {key} ({entry.age_seconds:.0f}s old)")
        return entry.data

    def set(self, key: str, value: Any, ttl_seconds: int) -> None:
        cache_entry = {
            "key": key,
            "timestamp": datetime.now().isoformat(),
            "ttl_seconds": int(ttl_seconds),
            "data": value,
        }
        try:
            with open(self._cache_path(key), 'w', encoding='utf-8') as f:
                json.dump(cache_entry, f, indent=2, default=str)
            logger.debug(f"[ForecastCache] Saved {key} (ttl {ttl_seconds}s)")
        except OSError as e:
            logger.error(f"[ForecastCache] Failed to save {key}: {e}")

    def clear(self) -> int:
        """Remove every cached entry; returns how many files were deleted."""
        removed = 0
        for path in self.cache_dir.glob("*.json"):
            try:
                path.unlink()
                removed += 1
            except OSError as e:
                logger.warning(f"[ForecastCache] Could not remove {path.name}: {e}")
        logger.info(f"[ForecastCache] Cleared {removed} entries")
        return removed
