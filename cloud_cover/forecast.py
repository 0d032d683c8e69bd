"""
Forecast assembly for Cloud Cover Forecast

Pure composition of the core steps over data already in hand:

    primary rows ─┐
                  ├─ trim to today .. selected sunrise ─ merge ─ stats
    Met.no map ───┘                                          │
    daily anchors ─ select_window ─ photography times ───────┤
    moon data ──────────────────────── ratings ──────────────┘

No I/O happens here; pipeline.py fetches and then calls build_forecast().
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

import numpy as np

from cloud_cover.annotations import annotate_rows
from cloud_cover.geotime import local_day_start
from cloud_cover.merger import DEFAULT_DIFF_THRESHOLD, ForecastMerger
from cloud_cover.models import (
    CLOUD_LEVELS,
    HourlyCloudRow,
    MoonData,
    PhotoTimes,
    PrimaryForecast,
    SecondaryHour,
    empty_moon_data,
)
from cloud_cover.photography import calculate_from_timestamps
from cloud_cover.ratings import PhotoRatings, rate_photography_conditions
from cloud_cover.window import SelectedWindow, select_window

logger = logging.getLogger(__name__)

HOUR_SECONDS = 3600


@dataclass
class ForecastResult:
    """Everything a renderer needs for one forecast lookup."""
    rows: List[HourlyCloudRow]
    stats: Dict[str, Any]
    window: SelectedWindow
    photo_times: Optional[PhotoTimes] = None
    photo_ratings: Optional[PhotoRatings] = None
    annotations: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def has_photography(self) -> bool:
        return self.photo_times is not None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rows": self.rows,
            "stats": self.stats,
            "photo_times": self.photo_times,
            "photo_ratings": self.photo_ratings.to_dict() if self.photo_ratings else None,
            "annotations": self.annotations,
        }


def average_level(rows: List[HourlyCloudRow], level: str) -> Optional[int]:
    """Mean of the non-null values of a level, rounded half-up; None if empty."""
    values = np.array([row[level] for row in rows if row.get(level) is not None], dtype=float)
    if values.size == 0:
        return None
    return int(np.floor(values.mean() + 0.5))


def hours_limit_for_window(
    hours: int,
    window: SelectedWindow,
    today_start: int,
) -> int:
    """
    Requested hour count, stretched so the table reaches one hour past the
    selected sunrise.
    """
    if window.sunrise and window.sunrise["ts"] > today_start:
        desired_end = window.sunrise["ts"] + HOUR_SECONDS
        hours_until_end = math.ceil((desired_end - today_start) / HOUR_SECONDS)
        return max(hours, hours_until_end)
    return hours


def trim_rows(
    rows: List[HourlyCloudRow],
    today_start: int,
    limit: int,
) -> List[HourlyCloudRow]:
    """Rows from local midnight today onwards, sorted, at most limit long."""
    kept = sorted((row for row in rows if row["ts"] >= today_start), key=lambda r: r["ts"])
    return kept[:limit]


def photography_anchors(
    primary: PrimaryForecast,
    window: SelectedWindow,
) -> SelectedWindow:
    """Selected pair, or the first daily pair when selection found nothing."""
    if window.is_complete:
        return window

    sunset = window.sunset or (primary["sunsets"][0] if primary["sunsets"] else None)
    sunrise = window.sunrise or (primary["sunrises"][0] if primary["sunrises"] else None)
    return SelectedWindow(sunset=sunset, sunrise=sunrise)


def build_stats(
    rows: List[HourlyCloudRow],
    primary: PrimaryForecast,
    window: SelectedWindow,
    diff_summary: Dict[str, Any],
    sources: Dict[str, Any],
    moon_today: MoonData,
    moon_tomorrow: MoonData,
    lat: Optional[float] = None,
    lon: Optional[float] = None,
) -> Dict[str, Any]:
    stats: Dict[str, Any] = {
        f"avg_{level}": average_level(rows, level) for level in CLOUD_LEVELS
    }
    stats.update({
        "first_time": rows[0]["time"] if rows else None,
        "last_time": rows[-1]["time"] if rows else None,
        "lat": lat,
        "lon": lon,
        "timezone": primary["timezone"],
        "timezone_abbr": primary["timezone_abbr"],
        "source_url": primary["source_url"],
        "sources": sources,
        "provider_diff_summary": diff_summary,
        "daily_times": primary["daily_times"],
        "daily_sunrise": [a["time"] for a in primary["sunrises"]],
        "daily_sunset": [a["time"] for a in primary["sunsets"]],
        "moon_today": moon_today,
        "moon_tomorrow": moon_tomorrow,
    })
    stats.update(window.to_dict())
    return stats


def build_forecast(
    primary: PrimaryForecast,
    secondary_hourly: Optional[Mapping[str, SecondaryHour]],
    now_ts: int,
    hours: int,
    threshold: int = DEFAULT_DIFF_THRESHOLD,
    moon_today: Optional[MoonData] = None,
    moon_tomorrow: Optional[MoonData] = None,
    sources: Optional[Dict[str, Any]] = None,
    lat: Optional[float] = None,
    lon: Optional[float] = None,
) -> ForecastResult:
    """
    Assemble the forecast for one request.

    Args:
        primary: Normalised Open-Meteo forecast
        secondary_hourly: Met.no values by UTC hour bucket, None if unavailable
        now_ts: Current instant (epoch seconds)
        hours: Requested hour count (already clamped to 1-168)
        threshold: Provider disagreement threshold in percentage points
        moon_today / moon_tomorrow: Moon data (empty shape if unknown)
        sources: Attribution / error info per provider

    Returns:
        ForecastResult; photo_times/photo_ratings are None when no
        sunrise/sunset pair is available (basic display)
    """
    timezone = primary["timezone"]
    moon_today = moon_today or empty_moon_data()
    moon_tomorrow = moon_tomorrow or empty_moon_data()

    window = select_window(primary["sunsets"], primary["sunrises"], now_ts)

    today_start = local_day_start(now_ts, timezone)
    limit = hours_limit_for_window(hours, window, today_start)
    rows = trim_rows(primary["rows"], today_start, limit)
    logger.info(f"[build_forecast] {len(rows)} rows from local midnight (limit {limit}, requested {hours})")

    merge = ForecastMerger(threshold).merge(rows, secondary_hourly)

    stats = build_stats(
        merge.rows,
        primary,
        window,
        merge.summary,
        sources or {"open_meteo": {"url": primary["source_url"]}},
        moon_today,
        moon_tomorrow,
        lat,
        lon,
    )

    result = ForecastResult(rows=merge.rows, stats=stats, window=window)

    anchors = photography_anchors(primary, window)
    if not anchors.is_complete:
        logger.warning("[build_forecast] No sunrise/sunset pair - photography data skipped")
        return result

    result.photo_times = calculate_from_timestamps(anchors.sunrise["ts"], anchors.sunset["ts"], timezone)
    result.photo_ratings = rate_photography_conditions(
        stats["avg_total"],
        stats["avg_high"],
        moon_today.get("moon_illumination"),
        moon_today.get("moonset"),
    )
    result.annotations = annotate_rows(merge.rows, result.photo_times, moon_today, timezone)

    return result
