"""
IPGeolocation Astronomy Provider for Cloud Cover Forecast

Moon illumination, phase and moonrise/moonset ("HH:MM" local clock time)
for a date. Requires an API key; without one the provider reports the
empty MoonData shape and never calls out.
"""

import logging
from typing import Any, Dict, Optional

import httpx

from cloud_cover.models import MoonData, empty_moon_data
from cloud_cover.providers.base import get_json, to_int

logger = logging.getLogger(__name__)


def _to_float(value: Any) -> Optional[float]:
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


class MoonProvider:
    """Provider for daily moon data."""

    BASE_URL = "https://api.ipgeolocation.io/astronomy"
    PROVIDER_NAME = "IPGeolocation"

    def __init__(self, api_key: str = ""):
        self.api_key = api_key

    @property
    def enabled(self) -> bool:
        return bool(self.api_key)

    @staticmethod
    def normalize(data: Optional[Dict[str, Any]]) -> MoonData:
        """Map an astronomy response onto MoonData; anything missing stays empty."""
        moon = empty_moon_data()
        if not data:
            return moon

        moon["moon_illumination"] = to_int(_to_float(data.get("moon_illumination")))
        moon["moon_phase_name"] = data.get("moon_phase_name") or moon["moon_phase_name"]
        moon["moonrise"] = data.get("moonrise") or None
        moon["moonset"] = data.get("moonset") or None
        moon["moon_azimuth"] = _to_float(data.get("moon_azimuth"))
        moon["moon_altitude"] = _to_float(data.get("moon_altitude"))
        return moon

    async def fetch_moon_data(
        self,
        lat: float,
        lon: float,
        date: str,
        client: Optional[httpx.AsyncClient] = None,
    ) -> MoonData:
        """
        Fetch moon data for a YYYY-MM-DD date.

        Raises:
            httpx.HTTPError: on network / HTTP failures
        """
        if not self.enabled:
            logger.debug("[MoonProvider] No API key - returning empty moon data")
            return empty_moon_data()

        logger.info(f"[MoonProvider] Fetching moon data for {date}")
        data = await get_json(
            self.BASE_URL,
            params={"apiKey": self.api_key, "lat": lat, "long": lon, "date": date},
            timeout=10.0,
            client=client,
            provider_name=self.PROVIDER_NAME,
        )
        return self.normalize(data)
