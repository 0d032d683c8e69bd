"""
Cloud Cover Forecast Pipeline

Orchestrates one forecast lookup:
1. Validate coordinates
2. Fetch Open-Meteo, Met.no and moon data (today + tomorrow) concurrently,
   each with retry and the TTL cache in front
3. Hand everything to forecast.build_forecast()

Failure policy:
- Open-Meteo failing is fatal (ForecastUnavailableError)
- Met.no failing skips the merge; the error is kept under sources.met_no
- Moon data failing yields the empty moon shape
"""

import asyncio
import logging
import time
from datetime import datetime, timedelta, timezone
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple

import httpx

from cloud_cover.cache_manager import FORECAST_PREFIX, GEOCODING_PREFIX, MOON_PREFIX, ForecastCache, cache_key
from cloud_cover.config import Settings, clamp_hours, require_coordinates
from cloud_cover.errors import ForecastUnavailableError, LocationNotFoundError, LocationServiceError
from cloud_cover.forecast import ForecastResult, build_forecast
from cloud_cover.models import MoonData, empty_moon_data
from cloud_cover.providers.ipgeolocation import MoonProvider
from cloud_cover.providers.met_no import MetNoProvider
from cloud_cover.providers.open_meteo import fetch_open_meteo, forecast_url, geocode_location
from cloud_cover.resilience import DEFAULT_RETRY_CONFIG, RetryConfig, categorize_error, with_retry

logger = logging.getLogger(__name__)

MOON_TTL_SECONDS = 24 * 3600
GEOCODING_TTL_SECONDS = 15 * 60


async def fetch_with_retry(
    provider_name: str,
    fetch_func: Callable[..., Awaitable[Any]],
    cache: Optional[ForecastCache],
    key: str,
    ttl_seconds: int,
    retry_config: RetryConfig = DEFAULT_RETRY_CONFIG,
    *args,
    **kwargs
) -> Tuple[Optional[Any], Optional[str]]:
    """
    Fetch from a provider with the cache in front and retry behind it.

    Returns:
        (data, error_message): data is None when every attempt failed
    """
    if cache is not None:
        cached = cache.get(key)
        if cached is not None:
            logger.info(f"[fetch_with_retry] {provider_name}: CACHED")
            return cached, None

    start = time.time()

    @with_retry(config=retry_config, provider_name=provider_name)
    async def _fetch():
        return await fetch_func(*args, **kwargs)

    data = await _fetch()
    elapsed = time.time() - start

    if data is None:
        error = _fetch.last_error
        error_msg = categorize_error(error)[1] if error else "No data returned"
        logger.warning(f"[fetch_with_retry] {provider_name}: FAILED ({elapsed:.2f}s) - {error_msg}")
        return None, error_msg

    logger.info(f"[fetch_with_retry] {provider_name}: FRESH ({elapsed:.2f}s)")
    if cache is not None:
        cache.set(key, data, ttl_seconds)
    return data, None


async def fetch_moon(
    provider: MoonProvider,
    lat: float,
    lon: float,
    date: str,
    cache: Optional[ForecastCache],
    retry_config: RetryConfig,
    client: Optional[httpx.AsyncClient] = None,
) -> MoonData:
    """Moon data for a date; the empty shape on any failure or without a key."""
    if not provider.enabled:
        return empty_moon_data()

    data, _ = await fetch_with_retry(
        "IPGeolocation",
        provider.fetch_moon_data,
        cache,
        cache_key(MOON_PREFIX, lat, lon, date),
        MOON_TTL_SECONDS,
        retry_config,
        lat, lon, date,
        client=client,
    )
    return data if data is not None else empty_moon_data()


async def run_forecast(
    lat: float,
    lon: float,
    hours: int,
    settings: Optional[Settings] = None,
    cache: Optional[ForecastCache] = None,
    now_ts: Optional[int] = None,
    client: Optional[httpx.AsyncClient] = None,
    retry_config: RetryConfig = DEFAULT_RETRY_CONFIG,
) -> ForecastResult:
    """
    Fetch and assemble a cloud-cover + photography forecast.

    Raises:
        InvalidCoordinatesError: lat/lon out of range
        ForecastUnavailableError: the primary provider could not be reached
    """
    settings = settings or Settings()
    require_coordinates(lat, lon)
    lat = float(lat)
    lon = float(lon)
    hours = clamp_hours(hours)
    now_ts = int(time.time()) if now_ts is None else now_ts

    logger.info("=" * 60)
    logger.info(f"[run_forecast] ({lat}, {lon}) for {hours}h")
    logger.info("=" * 60)

    met_no = MetNoProvider(contact=settings.metno_contact)
    moon = MoonProvider(api_key=settings.astro_api_key)
    ttl = settings.cache_ttl_seconds

    now_utc = datetime.fromtimestamp(now_ts, tz=timezone.utc)
    today = now_utc.strftime("%Y-%m-%d")
    tomorrow = (now_utc + timedelta(days=1)).strftime("%Y-%m-%d")

    primary_url = forecast_url(lat, lon)
    metno_url = met_no.source_url(lat, lon)

    (primary, primary_error), (metno, metno_error), moon_today, moon_tomorrow = await asyncio.gather(
        fetch_with_retry(
            "Open-Meteo", fetch_open_meteo, cache,
            cache_key(FORECAST_PREFIX + "open_meteo_", primary_url), ttl, retry_config,
            lat, lon, client=client,
        ),
        fetch_with_retry(
            "Met.no", met_no.fetch_hourly, cache,
            cache_key(FORECAST_PREFIX + "metno_", metno_url), ttl, retry_config,
            lat, lon, client=client,
        ),
        fetch_moon(moon, lat, lon, today, cache, retry_config, client),
        fetch_moon(moon, lat, lon, tomorrow, cache, retry_config, client),
    )

    if primary is None:
        logger.error(f"[run_forecast] Primary forecast unavailable: {primary_error}")
        raise ForecastUnavailableError(
            f"Weather service temporarily unavailable. Please try again later. ({primary_error})"
        )

    sources: Dict[str, Any] = {"open_meteo": {"url": primary_url}}
    secondary_hourly = None
    if metno is not None:
        secondary_hourly = metno["hourly"]
        sources["met_no"] = {"url": metno["source_url"], "updated_at": metno.get("updated_at")}
    else:
        sources["met_no"] = {"url": metno_url, "error": metno_error}

    result = build_forecast(
        primary,
        secondary_hourly,
        now_ts,
        hours,
        threshold=settings.diff_threshold,
        moon_today=moon_today,
        moon_tomorrow=moon_tomorrow,
        sources=sources,
        lat=lat,
        lon=lon,
    )

    logger.info(
        f"[run_forecast] Complete: {len(result.rows)} rows, "
        f"{result.stats['provider_diff_summary']['rows_with_differences']} hours with provider variance, "
        f"photography={'yes' if result.has_photography else 'no'}"
    )
    return result


async def resolve_location(
    location_name: str,
    cache: Optional[ForecastCache] = None,
    client: Optional[httpx.AsyncClient] = None,
    retry_config: RetryConfig = DEFAULT_RETRY_CONFIG,
) -> Dict[str, Any]:
    """
    First geocoding match for a place name (cached for 15 minutes).

    Raises:
        ValueError: empty name
        LocationNotFoundError: no match
        LocationServiceError: geocoding unreachable after retries
    """
    name = (location_name or "").strip()
    if not name:
        raise ValueError("Location name cannot be empty.")

    async def _search():
        try:
            return await geocode_location(name, client=client)
        except LocationNotFoundError:
            return []

    matches, error = await fetch_with_retry(
        "Open-Meteo geocoding", _search, cache,
        cache_key(GEOCODING_PREFIX, name.lower()), GEOCODING_TTL_SECONDS, retry_config,
    )

    if matches is None:
        logger.error(f"[resolve_location] Geocoding unavailable for {name!r}: {error}")
        raise LocationServiceError(
            f"Location service temporarily unavailable. Please try again later. ({error})"
        )
    if not matches:
        raise LocationNotFoundError(f"Location not found: {name}")
    return matches[0]
