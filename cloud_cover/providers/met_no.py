"""
Met.no (Norwegian Meteorological Institute) Provider for Cloud Cover Forecast

Secondary source, used only to cross-check and back-fill the Open-Meteo
cloud series. Uses Locationforecast 2.0 "complete", which carries the
low/medium/high cloud_area_fraction split.

Met.no terms require an identifying User-Agent with contact details, and
every timestamp in the response is UTC ("2024-06-01T20:00:00Z").
"""

import logging
from typing import Any, Dict, Optional

import httpx

from cloud_cover import __version__
from cloud_cover.errors import MalformedResponseError
from cloud_cover.geotime import hour_bucket, resolve
from cloud_cover.models import SecondaryHour
from cloud_cover.providers.base import get_json, to_percent

logger = logging.getLogger(__name__)


class MetNoProvider:
    """
    Provider for Met.no hourly cloud cover.

    fetch_hourly() returns:
        {
            "hourly": {"YYYY-MM-DD HH": {ts, total, low, mid, high}, ...},
            "source_url": str,
            "updated_at": str | None,
        }
    """

    BASE_URL = "https://api.met.no/weatherapi/locationforecast/2.0/complete"
    PROVIDER_NAME = "Met.no"

    def __init__(self, contact: str = ""):
        self.contact = contact
        self.headers = {
            "User-Agent": self.user_agent(),
            "Accept": "application/json",
        }

    def user_agent(self) -> str:
        if self.contact:
            return f"CloudCoverForecast/{__version__} (contact:{self.contact})"
        return f"CloudCoverForecast/{__version__}"

    def source_url(self, lat: float, lon: float) -> str:
        return str(httpx.URL(self.BASE_URL, params={"lat": lat, "lon": lon}))

    @staticmethod
    def normalize_timeseries(data: Dict[str, Any]) -> Dict[str, SecondaryHour]:
        """
        Key Met.no timeseries entries by UTC hour bucket.

        Raises:
            MalformedResponseError: if there is no timeseries
        """
        timeseries = ((data or {}).get("properties") or {}).get("timeseries") or []
        if not timeseries:
            raise MalformedResponseError("Met.no", "Malformed Met.no API response.")

        hourly: Dict[str, SecondaryHour] = {}
        for entry in timeseries:
            ts = resolve(entry.get("time"), "UTC")
            if ts is None:
                continue

            details = ((entry.get("data") or {}).get("instant") or {}).get("details") or {}
            hourly[hour_bucket(ts)] = {
                "ts": ts,
                "total": to_percent(details.get("cloud_area_fraction")),
                "low": to_percent(details.get("cloud_area_fraction_low")),
                "mid": to_percent(details.get("cloud_area_fraction_medium")),
                "high": to_percent(details.get("cloud_area_fraction_high")),
            }

        logger.info(f"[MetNoProvider] Normalised {len(hourly)} hourly records")
        return hourly

    async def fetch_hourly(
        self,
        lat: float,
        lon: float,
        client: Optional[httpx.AsyncClient] = None,
    ) -> Dict[str, Any]:
        """
        Fetch and normalise Met.no cloud cover for a location.

        Raises:
            httpx.HTTPError: on network / HTTP failures
            MalformedResponseError: on an empty timeseries
        """
        logger.info(f"[MetNoProvider] Fetching data from api.met.no for ({lat}, {lon})...")

        data = await get_json(
            self.BASE_URL,
            params={"lat": lat, "lon": lon},
            timeout=15.0,
            headers=self.headers,
            client=client,
            provider_name=self.PROVIDER_NAME,
        )

        return {
            "hourly": self.normalize_timeseries(data),
            "source_url": self.source_url(lat, lon),
            "updated_at": ((data.get("properties") or {}).get("meta") or {}).get("updated_at"),
        }
