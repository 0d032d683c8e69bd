"""
Photography Time Calculator for Cloud Cover Forecast

Derives the named photography events of one night from its sunset and the
following sunrise. All offsets are fixed approximations (civil twilight is
~30 minutes after sunset, and so on) - good enough for planning a shoot,
not for navigation.

Milky Way core rise is a seasonal lookup tuned for mid-northern latitudes,
not an ephemeris computation.
"""

import logging
from typing import Dict

from cloud_cover.errors import PhotographyInputError
from cloud_cover.geotime import at_local_hour, local_datetime, resolve
from cloud_cover.models import PhotoTimes

logger = logging.getLogger(__name__)

MINUTE = 60

# Twilight depth -> minutes from the sun crossing the horizon
CIVIL_TWILIGHT_MIN = 30
NAUTICAL_TWILIGHT_MIN = 60
ASTRONOMICAL_TWILIGHT_MIN = 90

GOLDEN_HOUR_MIN = 60
BLUE_HOUR_NEAR_MIN = 15
BLUE_HOUR_FAR_MIN = 45

# Approximate local hour the galactic core becomes visible, by month
MILKY_WAY_CORE_RISE_HOURS: Dict[int, int] = {
    1: 6,    # January - early morning
    2: 5,
    3: 4,
    4: 3,
    5: 2,
    6: 1,    # June - best summer viewing
    7: 23,
    8: 22,
    9: 21,
    10: 20,
    11: 7,   # November - poor visibility
    12: 7,
}
DEFAULT_CORE_RISE_HOUR = 4


def get_milky_way_core_rise_hour(month: int) -> int:
    """Local hour (0-23) when the Milky Way core becomes visible in a month."""
    return MILKY_WAY_CORE_RISE_HOURS.get(month, DEFAULT_CORE_RISE_HOUR)


def milky_way_core_rise(sunset_ts: int, timezone: str) -> int:
    """
    Core-rise instant for the night beginning at sunset_ts.

    Built on the sunset's local calendar date; moved to the next day when
    that would put it before sunset.
    """
    sunset_local = local_datetime(sunset_ts, timezone)
    hour = get_milky_way_core_rise_hour(sunset_local.month)

    core_rise_ts = at_local_hour(sunset_ts, hour, timezone)
    if core_rise_ts < sunset_ts:
        core_rise_ts = at_local_hour(sunset_ts, hour, timezone, days=1)

    return core_rise_ts


def calculate_from_timestamps(sunrise_ts: int, sunset_ts: int, timezone: str = "UTC") -> PhotoTimes:
    """Photography events from epoch-second anchors."""
    times: PhotoTimes = {
        "sunset": sunset_ts,
        "sunrise": sunrise_ts,
        "civil_twilight_end": sunset_ts + CIVIL_TWILIGHT_MIN * MINUTE,
        "nautical_twilight_end": sunset_ts + NAUTICAL_TWILIGHT_MIN * MINUTE,
        "astronomical_twilight_end": sunset_ts + ASTRONOMICAL_TWILIGHT_MIN * MINUTE,
        "civil_twilight_start": sunrise_ts - CIVIL_TWILIGHT_MIN * MINUTE,
        "nautical_twilight_start": sunrise_ts - NAUTICAL_TWILIGHT_MIN * MINUTE,
        "astronomical_twilight_start": sunrise_ts - ASTRONOMICAL_TWILIGHT_MIN * MINUTE,
        "milky_way_core_rise": milky_way_core_rise(sunset_ts, timezone),
        "golden_hour_start": sunset_ts - GOLDEN_HOUR_MIN * MINUTE,
        "golden_hour_end": sunrise_ts + GOLDEN_HOUR_MIN * MINUTE,
        "sunrise_golden_hour_start": sunrise_ts - GOLDEN_HOUR_MIN * MINUTE,
        "blue_hour_start": sunset_ts + BLUE_HOUR_NEAR_MIN * MINUTE,
        "blue_hour_end": sunset_ts + BLUE_HOUR_FAR_MIN * MINUTE,
        "sunrise_blue_hour_start": sunrise_ts - BLUE_HOUR_FAR_MIN * MINUTE,
        "sunrise_blue_hour_end": sunrise_ts - BLUE_HOUR_NEAR_MIN * MINUTE,
    }
    return times


def calculate_photography_times(sunrise_time: str, sunset_time: str, timezone: str = "UTC") -> PhotoTimes:
    """
    Calculate twilight, golden/blue hour and Milky Way times for one night.

    Args:
        sunrise_time: Sunrise as ISO8601 (bare strings are local to timezone)
        sunset_time: Sunset as ISO8601
        timezone: IANA zone of the location

    Returns:
        PhotoTimes map of epoch seconds

    Raises:
        PhotographyInputError: if either anchor cannot be parsed
    """
    sunrise_ts = resolve(sunrise_time, timezone)
    sunset_ts = resolve(sunset_time, timezone)

    if sunrise_ts is None or sunset_ts is None:
        raise PhotographyInputError(
            f"Cannot derive photography times from sunrise={sunrise_time!r}, sunset={sunset_time!r}"
        )

    times = calculate_from_timestamps(sunrise_ts, sunset_ts, timezone)
    logger.debug(
        f"[calculate_photography_times] sunset={sunset_time} sunrise={sunrise_time} "
        f"core_rise_ts={times['milky_way_core_rise']}"
    )
    return times
