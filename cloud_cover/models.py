"""
Record types shared across Cloud Cover Forecast.

These are TypedDicts so rows stay plain, JSON-serialisable dicts at runtime;
results with behaviour are dataclasses in their own modules.
"""

from typing import Dict, List, Optional, TypedDict

CLOUD_LEVELS = ("total", "low", "mid", "high")


class CloudLevels(TypedDict):
    total: Optional[int]
    low: Optional[int]
    mid: Optional[int]
    high: Optional[int]


class LevelDiff(TypedDict):
    difference: int
    primary: int
    secondary: int
    selected: str  # "primary" or "secondary"


class _HourlyCloudRowBase(TypedDict):
    time: str
    ts: int
    total: Optional[int]
    low: Optional[int]
    mid: Optional[int]
    high: Optional[int]


class HourlyCloudRow(_HourlyCloudRowBase, total=False):
    source_values: Dict[str, CloudLevels]
    provider_diff: Dict[str, LevelDiff]


class SecondaryHour(CloudLevels, total=False):
    ts: int


class DailyAnchor(TypedDict):
    time: str
    ts: int


class DiffSummary(TypedDict):
    rows_with_differences: int
    per_level: Dict[str, int]
    threshold: int


class PhotoTimes(TypedDict):
    sunset: int
    sunrise: int
    civil_twilight_end: int
    nautical_twilight_end: int
    astronomical_twilight_end: int
    civil_twilight_start: int
    nautical_twilight_start: int
    astronomical_twilight_start: int
    milky_way_core_rise: int
    golden_hour_start: int
    golden_hour_end: int
    sunrise_golden_hour_start: int
    blue_hour_start: int
    blue_hour_end: int
    sunrise_blue_hour_start: int
    sunrise_blue_hour_end: int


class MoonData(TypedDict):
    moon_illumination: Optional[int]
    moon_phase_name: str
    moonrise: Optional[str]
    moonset: Optional[str]
    moon_azimuth: Optional[float]
    moon_altitude: Optional[float]


class PrimaryForecast(TypedDict):
    """Open-Meteo payload normalised into records (see providers.open_meteo)."""
    rows: List[HourlyCloudRow]
    daily_times: List[str]
    sunrises: List[DailyAnchor]
    sunsets: List[DailyAnchor]
    timezone: str
    timezone_abbr: str
    source_url: str


def empty_moon_data() -> MoonData:
    """Moon data shape used whenever the astronomy provider has nothing."""
    return {
        "moon_illumination": None,
        "moon_phase_name": "Unknown",
        "moonrise": None,
        "moonset": None,
        "moon_azimuth": None,
        "moon_altitude": None,
    }
