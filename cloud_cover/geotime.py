"""
Time resolution helpers for Cloud Cover Forecast

Both providers report times as strings, but not in the same convention:
Open-Meteo returns bare local wall-clock strings ("2024-06-01T20:00") for
the requested time zone, Met.no always returns UTC-qualified strings
("2024-06-01T20:00:00Z"). Everything downstream works in UTC epoch seconds,
so every provider string goes through resolve() exactly once.
"""

import logging
import re
from datetime import datetime, timedelta, timezone
from typing import Optional
from zoneinfo import ZoneInfo

import pandas as pd

logger = logging.getLogger(__name__)

HOUR_BUCKET_FORMAT = "%Y-%m-%d %H"
ISO_DATE_PREFIX = re.compile(r"^\d{4}-\d{2}-\d{2}")


def get_zone(timezone_name: str) -> Optional[ZoneInfo]:
    """Return the ZoneInfo for an IANA name, or None if it is unknown."""
    try:
        return ZoneInfo(timezone_name)
    except (KeyError, ValueError, TypeError):
        logger.warning(f"[geotime] Unknown timezone: {timezone_name!r}")
        return None


def resolve(time_string: Optional[str], timezone_name: str) -> Optional[int]:
    """
    Convert an ISO8601 string into UTC epoch seconds.

    Strings without an offset are read as wall-clock time in timezone_name.
    Strings carrying an offset or "Z" keep it and timezone_name is ignored.

    Returns:
        Epoch seconds, or None if the string (or zone) cannot be parsed
    """
    if not time_string or not ISO_DATE_PREFIX.match(str(time_string)):
        return None

    try:
        stamp = pd.Timestamp(time_string)
    except (ValueError, TypeError, OverflowError):
        logger.debug(f"[geotime] Unparsable time string: {time_string!r}")
        return None

    if pd.isna(stamp):
        return None

    if stamp.tzinfo is None:
        zone = get_zone(timezone_name)
        if zone is None:
            return None
        # Repeated hours resolve to the first occurrence; the spring-forward
        # gap shifts forward.
        stamp = stamp.tz_localize(zone, ambiguous=True, nonexistent="shift_forward")

    return int(stamp.timestamp())


def hour_bucket(ts: int) -> str:
    """UTC hour bucket key ("YYYY-MM-DD HH") used to align provider series."""
    return datetime.fromtimestamp(ts, tz=timezone.utc).strftime(HOUR_BUCKET_FORMAT)


def local_datetime(ts: int, timezone_name: str) -> datetime:
    """Aware datetime for an epoch timestamp in the given zone (UTC if unknown)."""
    zone = get_zone(timezone_name) or timezone.utc
    return datetime.fromtimestamp(ts, tz=zone)


def local_day_start(ts: int, timezone_name: str) -> int:
    """Epoch seconds of local midnight of the day containing ts."""
    local = local_datetime(ts, timezone_name)
    midnight = local.replace(hour=0, minute=0, second=0, microsecond=0)
    return int(midnight.timestamp())


def at_local_hour(ts: int, hour: int, timezone_name: str, days: int = 0) -> int:
    """
    Epoch seconds for hour:00 local time on the local date of ts, plus days.

    Day arithmetic is done on the wall clock so that a DST change between
    the two dates does not shift the hour.
    """
    local = local_datetime(ts, timezone_name)
    target = local.replace(hour=hour, minute=0, second=0, microsecond=0) + timedelta(days=days)
    return int(target.timestamp())


def clock_seconds(clock: Optional[str]) -> Optional[int]:
    """
    Seconds since midnight for an "HH:MM" (or "HH:MM:SS") clock string.

    The astronomy provider reports "-:-" when the moon does not rise or set
    on a date; that and any other malformed value returns None.
    """
    if not clock or not isinstance(clock, str):
        return None

    parts = clock.strip().split(":")
    if len(parts) < 2:
        return None

    try:
        hours = int(parts[0])
        minutes = int(parts[1])
    except ValueError:
        return None

    if not (0 <= hours <= 23 and 0 <= minutes <= 59):
        return None

    return hours * 3600 + minutes * 60


def format_clock(seconds: int) -> str:
    """Format seconds since midnight as "HH:MM"."""
    seconds = int(seconds) % 86400
    return f"{seconds // 3600:02d}:{(seconds % 3600) // 60:02d}"
