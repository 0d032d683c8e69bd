"""
Providers package for Cloud Cover Forecast

1. Open-Meteo - primary hourly cloud cover, daily sunrise/sunset, geocoding
2. Met.no     - secondary hourly cloud cover (cross-validation, fill-in)
3. IPGeolocation - moon illumination and moonrise/moonset (optional, API key)
"""

from cloud_cover.providers.open_meteo import (
    fetch_open_meteo,
    forecast_url,
    geocode_location,
    normalize_open_meteo,
)

from cloud_cover.providers.met_no import (
    MetNoProvider,
)

from cloud_cover.providers.ipgeolocation import (
    MoonProvider,
)

__all__ = [
    # Open-Meteo (primary)
    "fetch_open_meteo",
    "forecast_url",
    "geocode_location",
    "normalize_open_meteo",
    # Met.no (secondary)
    "MetNoProvider",
    # IPGeolocation (moon)
    "MoonProvider",
]
