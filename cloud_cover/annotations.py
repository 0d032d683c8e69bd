"""
Per-hour photography annotations.

Marks each forecast hour with the event that happens in it (sunset,
moonrise, ...), the photography period it belongs to, and a plain sky
description. Hours are compared on the location's local clock, by hour of
day, the same way the forecast table is read.
"""

import logging
from typing import Any, Dict, List, Optional

from cloud_cover.geotime import clock_seconds, local_datetime
from cloud_cover.models import HourlyCloudRow, MoonData, PhotoTimes

logger = logging.getLogger(__name__)

# Checked in order; the first event whose hour matches wins
PHOTO_EVENTS = (
    ("sunrise", "Sunrise"),
    ("sunset", "Sunset"),
    ("astronomical_twilight_end", "Astro Dark"),
)


def _hour(ts: int, timezone: str) -> int:
    return local_datetime(ts, timezone).hour


def _moon_hour(clock: Optional[str]) -> Optional[int]:
    seconds = clock_seconds(clock)
    return None if seconds is None else seconds // 3600


def _spans(current: int, start: int, end: int) -> bool:
    """Strictly between start and end hours, wrapping past midnight."""
    if start > end:
        return current > start or current < end
    return start < current < end


def sky_condition(total_cloud: Optional[int]) -> str:
    cloud = 100 if total_cloud is None else total_cloud
    if cloud < 20:
        return "clear skies"
    if cloud < 50:
        return "partly cloudy"
    return "mostly cloudy"


def hour_event(
    ts: int,
    photo_times: Optional[PhotoTimes],
    moon: Optional[MoonData],
    timezone: str,
) -> Optional[str]:
    """Name of the event falling in this hour, if any."""
    current = _hour(ts, timezone)
    photo_times = photo_times or {}
    moon = moon or {}

    for key, label in PHOTO_EVENTS:
        if photo_times.get(key) and _hour(photo_times[key], timezone) == current:
            return label

    if _moon_hour(moon.get("moonrise")) == current:
        return "Moonrise"
    if _moon_hour(moon.get("moonset")) == current:
        return "Moonset"

    core_rise = photo_times.get("milky_way_core_rise")
    if core_rise and _hour(core_rise, timezone) == current:
        return "Milky Way"

    return None


def hour_period(ts: int, photo_times: Optional[PhotoTimes], timezone: str) -> Optional[str]:
    """
    Photography period for an hour:
    sunrise-golden-hour, sunset-golden-hour, astro-dark, nighttime or None.
    """
    if not photo_times:
        return None

    current = _hour(ts, timezone)

    golden_start = _hour(photo_times["sunrise_golden_hour_start"], timezone)
    golden_end = _hour(photo_times["golden_hour_end"], timezone)
    if golden_start <= current <= golden_end:
        return "sunrise-golden-hour"

    sunset_hour = _hour(photo_times["sunset"], timezone)
    if current == sunset_hour:
        return "sunset-golden-hour"

    astro_end = _hour(photo_times["astronomical_twilight_end"], timezone)
    astro_start = _hour(photo_times["astronomical_twilight_start"], timezone)
    if _spans(current, astro_end, astro_start):
        return "astro-dark"

    sunrise_hour = _hour(photo_times["sunrise"], timezone)
    if _spans(current, sunset_hour, sunrise_hour):
        return "nighttime"

    return None


def show_in_photography_mode(ts: int, photo_times: Optional[PhotoTimes], timezone: str) -> bool:
    """
    Whether an hour belongs in the night-focused view: from one hour before
    sunset until midnight, and from midnight through the sunrise hour.
    """
    if not photo_times:
        return True

    current = _hour(ts, timezone)
    one_hour_before_sunset = (_hour(photo_times["sunset"], timezone) - 1) % 24
    sunrise_hour = _hour(photo_times["sunrise"], timezone)

    return current >= one_hour_before_sunset or current <= sunrise_hour


def annotate_rows(
    rows: List[HourlyCloudRow],
    photo_times: Optional[PhotoTimes],
    moon: Optional[MoonData],
    timezone: str,
) -> List[Dict[str, Any]]:
    """One annotation dict per row, in row order."""
    annotations = []
    for row in rows:
        ts = row["ts"]
        annotations.append({
            "ts": ts,
            "event": hour_event(ts, photo_times, moon, timezone),
            "period": hour_period(ts, photo_times, timezone),
            "sky": sky_condition(row.get("total")),
            "photography_hour": show_in_photography_mode(ts, photo_times, timezone),
        })
    logger.debug(f"[annotate_rows] Annotated {len(annotations)} hours")
    return annotations
