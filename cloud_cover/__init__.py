"""
Cloud Cover Forecast

Cloud-cover and sun/moon forecasts for photographers. Hourly cloud cover
from two independent providers is merged worst-case, and the relevant night
is scored for sunset, sunrise, astrophotography and Milky Way shooting.

Architecture:
    providers/     - Data fetching:
                     * open_meteo.py    - primary cloud series, sunrise/sunset, geocoding
                     * met_no.py        - secondary cloud series (cross-validation)
                     * ipgeolocation.py - moon illumination, moonrise/moonset
    geotime.py     - ISO8601 + IANA zone -> UTC epoch seconds
    merger.py      - worst-case merge with per-level variance tracking
    window.py      - picks the sunset -> sunrise pair relevant "now"
    photography.py - twilight, golden/blue hour, Milky Way core rise
    ratings.py     - 1-5 star ratings and the optimal astro window
    annotations.py - per-hour event / period / sky markers
    forecast.py    - pure assembly of the above
    pipeline.py    - async fetch (retry + cache) then assembly

Entry Points:
    main.py                  - CLI (cloud_cover/cli.py)
    python -m cloud_cover    - same CLI
    pipeline.run_forecast()  - async API
"""

__version__ = "1.0.0"
__author__ = "Cloud Cover Forecast"
