"""
Open-Meteo Provider for Cloud Cover Forecast (primary source)

Fetches hourly total/low/mid/high cloud cover plus daily sunrise/sunset from
the Open-Meteo forecast API, and resolves place names with the Open-Meteo
geocoding API.

Open-Meteo is asked for timezone=auto, so every time string in the response
is bare local wall-clock time in the location's zone. The parallel columns
are normalised into HourlyCloudRow / DailyAnchor records here, once, right
after the fetch.
"""

import logging
from typing import Any, Dict, List, Optional

import httpx

from cloud_cover.errors import LocationNotFoundError, MalformedResponseError
from cloud_cover.geotime import resolve
from cloud_cover.models import DailyAnchor, HourlyCloudRow, PrimaryForecast
from cloud_cover.providers.base import get_json, to_int

logger = logging.getLogger(__name__)

FORECAST_URL = "https://api.open-meteo.com/v1/forecast"
GEOCODING_URL = "https://geocoding-api.open-meteo.com/v1/search"

PROVIDER_NAME = "Open-Meteo"


def forecast_params(lat: float, lon: float) -> Dict[str, Any]:
    return {
        "latitude": lat,
        "longitude": lon,
        "hourly": "cloudcover,cloudcover_low,cloudcover_mid,cloudcover_high",
        "daily": "sunrise,sunset",
        "timezone": "auto",
    }


def forecast_url(lat: float, lon: float) -> str:
    """Full request URL; also used as the cache key and the source link."""
    return str(httpx.URL(FORECAST_URL, params=forecast_params(lat, lon)))


def _column(block: Dict[str, Any], name: str) -> List[Any]:
    return block.get(name) or []


def _at(values: List[Any], i: int) -> Any:
    return values[i] if i < len(values) else None


def _parse_anchors(times: List[Optional[str]], timezone: str) -> List[DailyAnchor]:
    anchors: List[DailyAnchor] = []
    for time_str in times:
        ts = resolve(time_str, timezone)
        if ts is None:
            logger.debug(f"[open_meteo] Skipping unparsable anchor {time_str!r}")
            continue
        anchors.append({"time": time_str, "ts": ts})
    anchors.sort(key=lambda a: a["ts"])
    return anchors


def normalize_open_meteo(data: Dict[str, Any], source_url: str = "") -> PrimaryForecast:
    """
    Turn an Open-Meteo forecast payload into records.

    Args:
        data: Decoded JSON response
        source_url: Request URL, kept for attribution

    Returns:
        PrimaryForecast with rows sorted by ts

    Raises:
        MalformedResponseError: if there is no hourly time column
    """
    hourly = (data or {}).get("hourly") or {}
    times = _column(hourly, "time")
    if not times:
        raise MalformedResponseError(PROVIDER_NAME)

    timezone = data.get("timezone") or "UTC"
    timezone_abbr = data.get("timezone_abbreviation") or "UTC"

    tcc = _column(hourly, "cloudcover")
    lcc = _column(hourly, "cloudcover_low")
    mcc = _column(hourly, "cloudcover_mid")
    hcc = _column(hourly, "cloudcover_high")

    rows: List[HourlyCloudRow] = []
    skipped = 0
    for i, time_str in enumerate(times):
        ts = resolve(time_str, timezone)
        if ts is None:
            skipped += 1
            continue
        rows.append({
            "time": time_str,
            "ts": ts,
            "total": to_int(_at(tcc, i)),
            "low": to_int(_at(lcc, i)),
            "mid": to_int(_at(mcc, i)),
            "high": to_int(_at(hcc, i)),
        })

    rows.sort(key=lambda r: r["ts"])

    if skipped:
        logger.warning(f"[open_meteo] Skipped {skipped} hourly rows with unparsable times")

    daily = data.get("daily") or {}
    result: PrimaryForecast = {
        "rows": rows,
        "daily_times": list(_column(daily, "time")),
        "sunrises": _parse_anchors(_column(daily, "sunrise"), timezone),
        "sunsets": _parse_anchors(_column(daily, "sunset"), timezone),
        "timezone": timezone,
        "timezone_abbr": timezone_abbr,
        "source_url": source_url,
    }

    logger.info(
        f"[open_meteo] Normalised {len(rows)} hourly rows, "
        f"{len(result['sunsets'])} sunsets, {len(result['sunrises'])} sunrises ({timezone})"
    )
    return result


async def fetch_open_meteo(
    lat: float,
    lon: float,
    client: Optional[httpx.AsyncClient] = None,
) -> PrimaryForecast:
    """
    Fetch and normalise the primary cloud-cover forecast.

    Raises:
        httpx.HTTPError: on network / HTTP failures
        MalformedResponseError: if the payload lacks hourly data
    """
    logger.info(f"[fetch_open_meteo] Fetching forecast for ({lat}, {lon})")
    data = await get_json(
        FORECAST_URL,
        params=forecast_params(lat, lon),
        timeout=12.0,
        client=client,
        provider_name=PROVIDER_NAME,
    )
    return normalize_open_meteo(data, forecast_url(lat, lon))


def _geocode_result(result: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "lat": result["latitude"],
        "lon": result["longitude"],
        "name": result.get("name", ""),
        "country": result.get("country", ""),
        "admin1": result.get("admin1", ""),
        "admin2": result.get("admin2", ""),
        "timezone": result.get("timezone", ""),
    }


async def geocode_location(
    location_name: str,
    count: int = 5,
    client: Optional[httpx.AsyncClient] = None,
) -> List[Dict[str, Any]]:
    """
    Resolve a place name to candidate coordinates.

    Returns:
        List of {lat, lon, name, country, admin1, admin2, timezone}, best first

    Raises:
        ValueError: for an empty name
        LocationNotFoundError: when nothing matches
    """
    name = (location_name or "").strip()
    if not name:
        raise ValueError("Location name cannot be empty.")

    logger.info(f"[geocode_location] Searching for {name!r}")
    data = await get_json(
        GEOCODING_URL,
        params={"name": name, "count": count, "format": "json"},
        timeout=10.0,
        client=client,
        provider_name="Open-Meteo geocoding",
    )

    results = (data or {}).get("results") or []
    if not results:
        raise LocationNotFoundError(f"Location not found: {name}")

    matches = [_geocode_result(r) for r in results]
    logger.info(f"[geocode_location] {len(matches)} match(es), first: {matches[0]['name']}, {matches[0]['country']}")
    return matches
