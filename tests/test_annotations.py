"""
Tests for per-hour photography annotations.

Night used throughout: UTC location, sunset 20:00, sunrise 04:00 next day.

Run with: python -m pytest tests/test_annotations.py -v
"""

import logging

import pytest

from cloud_cover.annotations import (
    annotate_rows,
    hour_event,
    hour_period,
    show_in_photography_mode,
    sky_condition,
)
from cloud_cover.photography import calculate_from_timestamps
from tests.helpers import utc_ts

logging.basicConfig(level=logging.DEBUG)
logger = logging.getLogger(__name__)


@pytest.fixture
def photo_times():
    return calculate_from_timestamps(utc_ts(2024, 6, 2, 4), utc_ts(2024, 6, 1, 20), "UTC")


@pytest.fixture
def moon():
    return {
        "moon_illumination": 40,
        "moon_phase_name": "First Quarter",
        "moonrise": "13:20",
        "moonset": "-:-",
        "moon_azimuth": None,
        "moon_altitude": None,
    }


class TestHourEvent:

    @pytest.mark.parametrize("hour,expected", [
        (20, "Sunset"),
        (4, "Sunrise"),
        (21, "Astro Dark"),
        (1, "Milky Way"),
        (13, "Moonrise"),
        (12, None),
    ])
    def test_events(self, photo_times, moon, hour, expected):
        """Each key instant labels the hour it falls in."""
        day = 2 if hour < 12 else 1
        assert hour_event(utc_ts(2024, 6, day, hour), photo_times, moon, "UTC") == expected

    def test_moon_beats_milky_way(self, photo_times):
        """Moon events take priority over the core rise in the same hour."""
        moon = {"moonrise": None, "moonset": "01:40"}
        assert hour_event(utc_ts(2024, 6, 2, 1), photo_times, moon, "UTC") == "Moonset"

    def test_no_data(self):
        """No photography times and no moon means no event."""
        assert hour_event(utc_ts(2024, 6, 1, 20), None, None, "UTC") is None


class TestHourPeriod:

    @pytest.mark.parametrize("hour,expected", [
        (3, "sunrise-golden-hour"),
        (5, "sunrise-golden-hour"),
        (20, "sunset-golden-hour"),
        (23, "astro-dark"),
        (1, "astro-dark"),
        (21, "nighttime"),
        (12, None),
    ])
    def test_periods(self, photo_times, hour, expected):
        """Hours map to golden hour, astro dark or nighttime by local clock."""
        assert hour_period(utc_ts(2024, 6, 1, hour), photo_times, "UTC") == expected

    def test_twilight_edge_is_nighttime(self):
        """Hours between sunset and astro dark are plain nighttime."""
        # Astro dark 22:30 -> 01:30 leaves 22:00 inside sunset..sunrise only
        times = calculate_from_timestamps(utc_ts(2024, 6, 2, 3), utc_ts(2024, 6, 1, 21), "UTC")
        assert hour_period(utc_ts(2024, 6, 1, 22), times, "UTC") == "nighttime"


class TestPhotographyMode:

    def test_night_hours_shown(self, photo_times):
        """Hours from golden hour to sunrise stay visible."""
        assert show_in_photography_mode(utc_ts(2024, 6, 1, 19), photo_times, "UTC")
        assert show_in_photography_mode(utc_ts(2024, 6, 1, 23), photo_times, "UTC")
        assert show_in_photography_mode(utc_ts(2024, 6, 2, 4), photo_times, "UTC")

    def test_day_hours_hidden(self, photo_times):
        """Midday and post-sunrise hours are filtered out."""
        assert not show_in_photography_mode(utc_ts(2024, 6, 1, 12), photo_times, "UTC")
        assert not show_in_photography_mode(utc_ts(2024, 6, 2, 5), photo_times, "UTC")

    def test_everything_shown_without_times(self):
        """Without photography times nothing is hidden."""
        assert show_in_photography_mode(utc_ts(2024, 6, 1, 12), None, "UTC")


class TestAnnotateRows:

    def test_sky_condition(self):
        """Total cloud buckets into a sky description."""
        assert sky_condition(5) == "clear skies"
        assert sky_condition(20) == "partly cloudy"
        assert sky_condition(50) == "mostly cloudy"
        assert sky_condition(None) == "mostly cloudy"

    def test_one_annotation_per_row(self, photo_times, moon):
        """annotate_rows returns one entry per row, in row order."""
        rows = [
            {"time": "2024-06-01T20:00", "ts": utc_ts(2024, 6, 1, 20), "total": 10, "low": 0, "mid": 0, "high": 0},
            {"time": "2024-06-01T12:00", "ts": utc_ts(2024, 6, 1, 12), "total": 70, "low": 0, "mid": 0, "high": 0},
        ]
        annotations = annotate_rows(rows, photo_times, moon, "UTC")
        logger.info(f"[TEST] Annotations: {annotations}")

        assert [a["ts"] for a in annotations] == [row["ts"] for row in rows]
        assert annotations[0]["event"] == "Sunset"
        assert annotations[0]["sky"] == "clear skies"
        assert annotations[0]["photography_hour"] is True
        assert annotations[1]["period"] is None
        assert annotations[1]["sky"] == "mostly cloudy"
