"""
Shared fixtures: canned provider payloads for a UTC location.

Three days (2024-06-01 .. 2024-06-03) of hourly data, sunrise 04:00 and
sunset 20:00 every day. Met.no covers the first day only and disagrees
strongly at 2024-06-01 20:00.
"""

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from tests.helpers import utc_ts  # noqa: E402


@pytest.fixture
def now_ts():
    """Midday on the first forecast day."""
    return utc_ts(2024, 6, 1, 12)


@pytest.fixture
def open_meteo_payload():
    times = [f"2024-06-{day:02d}T{hour:02d}:00" for day in (1, 2, 3) for hour in range(24)]
    return {
        "latitude": 51.9,
        "longitude": -8.47,
        "timezone": "UTC",
        "timezone_abbreviation": "UTC",
        "hourly": {
            "time": times,
            "cloudcover": [10] * len(times),
            "cloudcover_low": [5] * len(times),
            "cloudcover_mid": [0] * len(times),
            "cloudcover_high": [30] * len(times),
        },
        "daily": {
            "time": ["2024-06-01", "2024-06-02", "2024-06-03"],
            "sunrise": ["2024-06-01T04:00", "2024-06-02T04:00", "2024-06-03T04:00"],
            "sunset": ["2024-06-01T20:00", "2024-06-02T20:00", "2024-06-03T20:00"],
        },
    }


@pytest.fixture
def metno_payload():
    timeseries = []
    for hour in range(24):
        timeseries.append({
            "time": f"2024-06-01T{hour:02d}:00:00Z",
            "data": {
                "instant": {
                    "details": {
                        "cloud_area_fraction": 90.0 if hour == 20 else 12.5,
                        "cloud_area_fraction_low": 0.0,
                        "cloud_area_fraction_medium": 0.0,
                        "cloud_area_fraction_high": 25.0,
                    }
                }
            },
        })
    return {
        "type": "Feature",
        "properties": {
            "meta": {"updated_at": "2024-06-01T10:00:00Z"},
            "timeseries": timeseries,
        },
    }


@pytest.fixture
def moon_payload():
    return {
        "date": "2024-06-01",
        "moon_illumination": "20.4",
        "moon_phase_name": "Waning Crescent",
        "moonrise": "03:10",
        "moonset": "02:30",
        "moon_azimuth": "120.5",
        "moon_altitude": "-12.25",
    }
