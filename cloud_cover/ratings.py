"""
Photography Rating Engine for Cloud Cover Forecast

Turns cloud averages and moon data into 1-5 star ratings:

- Sunset / sunrise: clear-ish skies are good, and some high cloud under a
  not-overcast sky earns a bonus (high cloud catches the colour).
- Astrophotography: stricter cloud thresholds, minus a moon penalty.
- Milky Way: astro rating, plus one when the moon sets inside the dark
  window.

The "astronomical dark" window used here is the fixed clock range
23:42 -> 06:00, not the twilight instants computed in photography.py.
"""

import logging
from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

from cloud_cover.geotime import clock_seconds, format_clock

logger = logging.getLogger(__name__)

ASTRONOMICAL_DARK_SECONDS = 23 * 3600 + 42 * 60  # 23:42
DAWN_SECONDS = 6 * 3600                          # 06:00
DAY_SECONDS = 24 * 3600

# (threshold, rating): first "avg > threshold" wins, otherwise 5
GOLDEN_HOUR_CLOUD_STEPS = ((80, 1), (60, 2), (40, 3), (20, 4))
ASTRO_CLOUD_STEPS = ((70, 1), (50, 2), (30, 3), (15, 4))

QUALITY_BUMP = {"fair": "good", "good": "excellent"}


@dataclass
class AstroWindow:
    start_time: str
    end_time: str
    duration_hours: float
    quality: str


@dataclass
class PhotoRatings:
    sunset_rating: int
    sunrise_rating: int
    astro_rating: int
    milky_way_rating: int
    moon_interference: str
    optimal_astro_window: AstroWindow

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _step_rating(value: float, steps) -> int:
    for threshold, rating in steps:
        if value > threshold:
            return rating
    return 5


def moonset_in_dark_window(moonset: Optional[str]) -> bool:
    """True if the moonset clock time falls after 23:42 or before 06:00."""
    seconds = clock_seconds(moonset)
    if seconds is None:
        return False
    return seconds > ASTRONOMICAL_DARK_SECONDS or seconds < DAWN_SECONDS


def golden_hour_rating(avg_total: float, avg_high: float) -> int:
    """Sunset/sunrise rating; both sides of the night share the formula."""
    rating = _step_rating(avg_total, GOLDEN_HOUR_CLOUD_STEPS)
    if 20 < avg_high < 60 and avg_total < 50:
        rating = min(5, rating + 1)
    return rating


def astro_rating(avg_total: float, moon_illumination: float) -> int:
    rating = _step_rating(avg_total, ASTRO_CLOUD_STEPS)
    if moon_illumination > 80:
        rating = max(1, rating - 2)
    elif moon_illumination > 50:
        rating = max(1, rating - 1)
    return rating


def moon_interference(moon_illumination: float) -> str:
    if moon_illumination > 30:
        return "high"
    if moon_illumination > 10:
        return "medium"
    return "low"


def cloud_quality(avg_total: float) -> str:
    if avg_total < 10:
        return "excellent"
    if avg_total < 25:
        return "good"
    if avg_total < 50:
        return "fair"
    return "poor"


def find_optimal_astro_window(avg_total: Optional[float], moonset: Optional[str] = None) -> AstroWindow:
    """
    Best stretch of dark sky for the night.

    The base window is 23:42 -> 06:00. When the moon sets inside it the
    window starts at moonset instead, and the quality is bumped one step
    (fair -> good, good -> excellent; poor stays poor).
    """
    avg_total = 100 if avg_total is None else avg_total

    window_start = ASTRONOMICAL_DARK_SECONDS
    window_end = DAWN_SECONDS
    quality = cloud_quality(avg_total)

    if moonset_in_dark_window(moonset):
        window_start = clock_seconds(moonset)
        quality = QUALITY_BUMP.get(quality, quality)

    duration_seconds = (window_end - window_start) % DAY_SECONDS

    return AstroWindow(
        start_time=format_clock(window_start),
        end_time=format_clock(window_end),
        duration_hours=round(duration_seconds / 3600, 1),
        quality=quality,
    )


def rate_photography_conditions(
    avg_total_cloud: Optional[float],
    avg_high_cloud: Optional[float],
    moon_illumination: Optional[float],
    moonset: Optional[str] = None,
) -> PhotoRatings:
    """
    Rate sunset, sunrise, astro and Milky Way conditions.

    Args:
        avg_total_cloud: Mean total cloud % (None is treated as 100)
        avg_high_cloud: Mean high cloud % (None is treated as 0)
        moon_illumination: Moon illumination % (None is treated as 0)
        moonset: Moonset clock time "HH:MM", if known

    Returns:
        PhotoRatings
    """
    avg_total = 100 if avg_total_cloud is None else avg_total_cloud
    avg_high = 0 if avg_high_cloud is None else avg_high_cloud
    illumination = 0 if moon_illumination is None else moon_illumination

    sunset = golden_hour_rating(avg_total, avg_high)
    sunrise = golden_hour_rating(avg_total, avg_high)
    astro = astro_rating(avg_total, illumination)

    milky_way = astro
    if moonset_in_dark_window(moonset):
        milky_way = min(5, milky_way + 1)

    ratings = PhotoRatings(
        sunset_rating=sunset,
        sunrise_rating=sunrise,
        astro_rating=astro,
        milky_way_rating=milky_way,
        moon_interference=moon_interference(illumination),
        optimal_astro_window=find_optimal_astro_window(avg_total, moonset),
    )

    logger.info(
        f"[rate_photography_conditions] cloud={avg_total}% high={avg_high}% moon={illumination}% -> "
        f"sunset={sunset} sunrise={sunrise} astro={astro} milky_way={milky_way}"
    )
    return ratings
