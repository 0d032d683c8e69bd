"""
Tests for forecast assembly (no network).

Run with: python -m pytest tests/test_forecast.py -v
"""

import json
import logging

import pytest

from cloud_cover.forecast import (
    average_level,
    build_forecast,
    hours_limit_for_window,
    photography_anchors,
    trim_rows,
)
from cloud_cover.models import empty_moon_data
from cloud_cover.providers.met_no import MetNoProvider
from cloud_cover.providers.open_meteo import normalize_open_meteo
from cloud_cover.window import SelectedWindow
from tests.helpers import utc_ts

logging.basicConfig(level=logging.DEBUG)
logger = logging.getLogger(__name__)


@pytest.fixture
def primary(open_meteo_payload):
    return normalize_open_meteo(open_meteo_payload, "https://example.test/forecast")


@pytest.fixture
def secondary(metno_payload):
    return MetNoProvider.normalize_timeseries(metno_payload)


class TestBuildForecast:

    def test_primary_only(self, primary, now_ts):
        """Primary data alone builds a full forecast."""
        result = build_forecast(primary, None, now_ts, 6)
        stats = result.stats
        logger.info(f"[TEST] {len(result.rows)} rows, {stats['first_time']} -> {stats['last_time']}")

        # Stretched from 6 hours to one hour past the 04:00 sunrise
        assert len(result.rows) == 29
        assert stats["first_time"] == "2024-06-01T00:00"
        assert stats["last_time"] == "2024-06-02T04:00"
        assert (stats["avg_total"], stats["avg_low"], stats["avg_mid"], stats["avg_high"]) == (10, 5, 0, 30)
        assert stats["provider_diff_summary"]["rows_with_differences"] == 0
        assert stats["selected_sunset"] == "2024-06-01T20:00"
        assert stats["selected_sunrise"] == "2024-06-02T04:00"
        assert stats["daily_sunset"][0] == "2024-06-01T20:00"
        assert stats["moon_today"] == empty_moon_data()

    def test_photography_attached(self, primary, now_ts):
        """Photography times, ratings and annotations are attached."""
        result = build_forecast(primary, None, now_ts, 48)

        assert result.has_photography
        assert result.photo_times["sunset"] == utc_ts(2024, 6, 1, 20)
        assert result.photo_times["milky_way_core_rise"] == utc_ts(2024, 6, 2, 1)
        assert result.photo_ratings.sunset_rating == 5
        assert result.photo_ratings.astro_rating == 5
        assert result.photo_ratings.optimal_astro_window.quality == "good"
        assert len(result.annotations) == len(result.rows)

    def test_requested_hours_win_when_longer(self, primary, now_ts):
        """A longer request is not cut back to the sunrise."""
        result = build_forecast(primary, None, now_ts, 60)
        assert len(result.rows) == 60

    def test_merge_with_secondary(self, primary, secondary, now_ts):
        """Met.no hours are merged worst-case and counted."""
        result = build_forecast(primary, secondary, now_ts, 24, threshold=20)
        by_time = {row["time"]: row for row in result.rows}

        assert by_time["2024-06-01T20:00"]["total"] == 90
        assert by_time["2024-06-01T20:00"]["provider_diff"]["total"]["selected"] == "secondary"
        assert by_time["2024-06-01T10:00"]["total"] == 13
        assert "source_values" not in by_time["2024-06-02T02:00"]

        summary = result.stats["provider_diff_summary"]
        assert summary["rows_with_differences"] == 1
        assert summary["per_level"]["total"] == 1

    def test_moon_feeds_ratings(self, primary, now_ts, moon_payload):
        """Moon illumination reaches the ratings."""
        from cloud_cover.providers.ipgeolocation import MoonProvider

        moon = MoonProvider.normalize(moon_payload)
        result = build_forecast(primary, None, now_ts, 24, moon_today=moon)

        assert result.photo_ratings.moon_interference == "medium"
        assert result.photo_ratings.optimal_astro_window.start_time == "02:30"
        assert result.stats["moon_today"]["moonset"] == "02:30"

    def test_without_anchors_is_basic(self, primary, now_ts):
        """No sunrise/sunset data gives a forecast without photography."""
        primary["sunsets"] = []
        primary["sunrises"] = []
        result = build_forecast(primary, None, now_ts, 6)

        assert not result.has_photography
        assert result.photo_ratings is None
        assert result.annotations == []
        assert len(result.rows) == 6

    def test_to_dict_is_json_serialisable(self, primary, secondary, now_ts):
        """to_dict() survives a JSON round trip."""
        data = build_forecast(primary, secondary, now_ts, 24).to_dict()
        decoded = json.loads(json.dumps(data))

        assert decoded["photo_ratings"]["astro_rating"] == 5
        assert decoded["stats"]["timezone"] == "UTC"


class TestHelpers:

    def test_average_level_rounds_half_up(self):
        """Averages skip nulls and round half up."""
        rows = [{"total": 10}, {"total": 11}, {"total": None}]
        assert average_level(rows, "total") == 11

    def test_average_level_empty(self):
        """An empty level averages to None."""
        assert average_level([], "total") is None
        assert average_level([{"total": None}], "total") is None

    def test_hours_limit_without_sunrise(self):
        """Without a sunrise the requested hours stand."""
        assert hours_limit_for_window(12, SelectedWindow(), 0) == 12

    def test_trim_rows_drops_past_days(self):
        """Rows before the start are dropped; the rest are sorted and limited."""
        rows = [{"ts": 30}, {"ts": 10}, {"ts": 20}, {"ts": 40}]
        assert trim_rows(rows, 20, 2) == [{"ts": 20}, {"ts": 30}]

    def test_photography_anchors_fallback(self, primary):
        """Without a selected window the first anchors are used."""
        anchors = photography_anchors(primary, SelectedWindow())

        assert anchors.sunset == primary["sunsets"][0]
        assert anchors.sunrise == primary["sunrises"][0]
