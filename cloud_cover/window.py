"""
Sunset/sunrise window selection.

Picks the one night that matters to the viewer right now: the night in
progress (if they are checking conditions after dark) or the coming night
(if they are planning during the day). Using "day 0" of the forecast breaks
around midnight and just before sunrise, when day 0's sunset is already
behind us but its night is not over yet.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from cloud_cover.models import DailyAnchor

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SelectedWindow:
    sunset: Optional[DailyAnchor] = None
    sunrise: Optional[DailyAnchor] = None

    @property
    def is_complete(self) -> bool:
        return self.sunset is not None and self.sunrise is not None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "selected_sunset": self.sunset["time"] if self.sunset else None,
            "selected_sunrise": self.sunrise["time"] if self.sunrise else None,
            "selected_sunset_ts": self.sunset["ts"] if self.sunset else None,
            "selected_sunrise_ts": self.sunrise["ts"] if self.sunrise else None,
        }


def _first_after(anchors: List[DailyAnchor], ts: int) -> Optional[DailyAnchor]:
    for anchor in anchors:
        if anchor["ts"] > ts:
            return anchor
    return None


def select_window(
    daily_sunsets: List[DailyAnchor],
    daily_sunrises: List[DailyAnchor],
    now_ts: int,
) -> SelectedWindow:
    """
    Choose the sunset -> sunrise pair to anchor the photography display.

    Priority:
    1. Inside last night's window (last sunset <= now <= following sunrise)
    2. The next sunset, with the first sunrise after it
    3. Last sunset with its sunrise when no future sunset is known
    4. Nothing
    """
    sunsets = sorted(daily_sunsets, key=lambda a: a["ts"])
    sunrises = sorted(daily_sunrises, key=lambda a: a["ts"])

    last_sunset: Optional[DailyAnchor] = None
    next_sunset: Optional[DailyAnchor] = None
    for sunset in sunsets:
        if sunset["ts"] <= now_ts:
            last_sunset = sunset
        elif next_sunset is None:
            next_sunset = sunset

    sunrise_after_last = _first_after(sunrises, last_sunset["ts"]) if last_sunset else None
    sunrise_after_next = _first_after(sunrises, next_sunset["ts"]) if next_sunset else None

    if (
        last_sunset
        and sunrise_after_last
        and last_sunset["ts"] <= now_ts <= sunrise_after_last["ts"]
    ):
        logger.debug(f"[select_window] Inside current night: {last_sunset['time']} -> {sunrise_after_last['time']}")
        return SelectedWindow(sunset=last_sunset, sunrise=sunrise_after_last)

    if next_sunset:
        sunrise = sunrise_after_next
        if sunrise is None and sunrise_after_last and sunrise_after_last["ts"] > next_sunset["ts"]:
            sunrise = sunrise_after_last
        logger.debug(f"[select_window] Upcoming night: {next_sunset['time']} -> {sunrise['time'] if sunrise else None}")
        return SelectedWindow(sunset=next_sunset, sunrise=sunrise)

    if sunrise_after_last:
        logger.debug("[select_window] No future sunset - using last night")
        return SelectedWindow(sunset=last_sunset, sunrise=sunrise_after_last)

    logger.warning("[select_window] No usable sunset/sunrise pair")
    return SelectedWindow()
