"""
Tests for sunset/sunrise window selection.

Run with: python -m pytest tests/test_window.py -v
"""

import logging

import pytest

from cloud_cover.window import SelectedWindow, select_window
from tests.helpers import utc_ts

logging.basicConfig(level=logging.DEBUG)
logger = logging.getLogger(__name__)


def anchor(*args):
    year, month, day, hour = args
    return {"time": f"{year}-{month:02d}-{day:02d}T{hour:02d}:00Z", "ts": utc_ts(*args)}


@pytest.fixture
def sunsets():
    return [anchor(2024, 6, 1, 20), anchor(2024, 6, 2, 20)]


@pytest.fixture
def sunrises():
    return [anchor(2024, 6, 2, 4), anchor(2024, 6, 3, 4)]


class TestSelectWindow:

    def test_inside_current_night(self, sunsets, sunrises):
        """Inside a night, that night is selected."""
        window = select_window(sunsets, sunrises, utc_ts(2024, 6, 2, 1))
        logger.info(f"[TEST] Selected: {window}")

        assert window.sunset == sunsets[0]
        assert window.sunrise == sunrises[0]

    def test_daytime_looks_ahead(self, sunsets, sunrises):
        """During the day the coming night is selected."""
        window = select_window(sunsets, sunrises, utc_ts(2024, 6, 2, 12))

        assert window.sunset == sunsets[1]
        assert window.sunrise == sunrises[1]

    def test_window_edges_are_inclusive(self, sunsets, sunrises):
        """Sunset and sunrise instants belong to the night."""
        at_sunset = select_window(sunsets, sunrises, sunsets[0]["ts"])
        at_sunrise = select_window(sunsets, sunrises, sunrises[0]["ts"])

        assert at_sunset.sunset == sunsets[0]
        assert at_sunrise.sunset == sunsets[0]
        assert at_sunrise.sunrise == sunrises[0]

    def test_before_first_sunset(self, sunsets, sunrises):
        """Before any sunset the first night is selected."""
        window = select_window(sunsets, sunrises, utc_ts(2024, 6, 1, 9))

        assert window.sunset == sunsets[0]
        assert window.sunrise == sunrises[0]

    def test_next_sunset_without_following_sunrise(self, sunsets):
        """A sunset with no later sunrise gives an incomplete window."""
        window = select_window(sunsets, [anchor(2024, 6, 2, 4)], utc_ts(2024, 6, 2, 12))

        assert window.sunset == sunsets[1]
        assert window.sunrise is None
        assert not window.is_complete

    def test_no_future_sunset_uses_last_night(self, sunsets, sunrises):
        """With nothing ahead the last night is kept."""
        # After the final sunrise nothing lies ahead; the last pair is kept
        window = select_window(sunsets[:1], sunrises[:1], utc_ts(2024, 6, 2, 12))

        assert window.sunset == sunsets[0]
        assert window.sunrise == sunrises[0]

    def test_nothing_usable(self):
        """No anchors give an empty window."""
        assert select_window([], [], utc_ts(2024, 6, 2, 12)) == SelectedWindow()
        assert select_window([anchor(2024, 6, 1, 20)], [], utc_ts(2024, 6, 2, 12)) == SelectedWindow()

    def test_unsorted_input(self, sunsets, sunrises):
        """Anchor order does not matter."""
        window = select_window(sunsets[::-1], sunrises[::-1], utc_ts(2024, 6, 2, 1))
        assert window.sunset == sunsets[0]

    def test_to_dict(self, sunsets, sunrises):
        """to_dict() exposes times and timestamps."""
        window = select_window(sunsets, sunrises, utc_ts(2024, 6, 2, 1))
        data = window.to_dict()

        assert data["selected_sunset_ts"] == sunsets[0]["ts"]
        assert data["selected_sunrise"] == sunrises[0]["time"]
        assert SelectedWindow().to_dict()["selected_sunset"] is None

    def test_repeatable(self, sunsets, sunrises):
        """Same anchors and instant always pick the same pair."""
        first = select_window(sunsets, sunrises, utc_ts(2024, 6, 2, 12))
        second = select_window(sunsets, sunrises, utc_ts(2024, 6, 2, 12))

        assert first == second
        assert first.to_dict() == second.to_dict()
