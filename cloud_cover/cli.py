"""
Cloud Cover Forecast command line

Fetches the forecast for a location and prints a photographer's summary:
ratings for the selected night, key event times, the optimal astro window,
and a heads-up when the two providers disagree. --json dumps the full
structure instead.
"""

import argparse
import asyncio
import json
import logging
import os
import sys
from datetime import datetime
from typing import List, Optional

from colorama import Fore, Style, init

from cloud_cover.cache_manager import ForecastCache
from cloud_cover.config import Settings, load_settings
from cloud_cover.errors import CloudCoverError
from cloud_cover.forecast import ForecastResult
from cloud_cover.geotime import local_datetime
from cloud_cover.merger import describe_differences
from cloud_cover.pipeline import resolve_location, run_forecast

logger = logging.getLogger(__name__)

KEY_EVENTS = (
    ("golden_hour_start", "Golden hour"),
    ("sunset", "Sunset"),
    ("blue_hour_start", "Blue hour"),
    ("astronomical_twilight_end", "Astro dark"),
    ("milky_way_core_rise", "Milky Way core"),
    ("astronomical_twilight_start", "Astro twilight"),
    ("sunrise_blue_hour_start", "Blue hour (am)"),
    ("sunrise", "Sunrise"),
)


def log_handlers(json_output: bool = False) -> List[logging.Handler]:
    """Log file plus a console stream; stderr when stdout carries JSON."""
    os.makedirs("logs", exist_ok=True)
    return [
        logging.FileHandler("logs/cloud_cover.log", mode='a', encoding='utf-8'),
        logging.StreamHandler(sys.stderr if json_output else sys.stdout)
    ]


def configure_logging(json_output: bool = False) -> None:
    """Level from LOG_LEVEL."""
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "WARNING"),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=log_handlers(json_output)
    )


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description='Cloud Cover Forecast - cloud cover and sun/moon conditions for photographers'
    )
    parser.add_argument('--lat', type=float, help='Latitude (-90..90)')
    parser.add_argument('--lon', type=float, help='Longitude (-180..180)')
    parser.add_argument('--location', help='Place name to geocode (ignored when --lat/--lon are given)')
    parser.add_argument('--hours', type=int, help='Forecast hours to show (1-168)')
    parser.add_argument('--threshold', type=int, help='Provider disagreement threshold in percentage points')
    parser.add_argument('--json', action='store_true', help='Print the full forecast as JSON')
    return parser.parse_args(argv)


def stars(rating: int) -> str:
    return "★" * rating + "☆" * (5 - rating)


def print_banner(label: str) -> None:
    print(f"\n{Fore.CYAN}{'=' * 60}{Style.RESET_ALL}")
    print(f"{Fore.CYAN}   CLOUD COVER FORECAST{Style.RESET_ALL}")
    print(f"{Fore.CYAN}   {label}{Style.RESET_ALL}")
    print(f"{Fore.CYAN}{'=' * 60}{Style.RESET_ALL}")
    print()


def print_summary(result: ForecastResult) -> None:
    stats = result.stats
    tz = stats["timezone"]

    print(f"{Fore.WHITE}Hours: {stats['first_time']} -> {stats['last_time']} ({stats['timezone_abbr']}){Style.RESET_ALL}")
    print(
        f"Average cloud: total {stats['avg_total']}%  low {stats['avg_low']}%  "
        f"mid {stats['avg_mid']}%  high {stats['avg_high']}%"
    )

    summary = stats["provider_diff_summary"]
    levels = describe_differences(summary)
    if levels:
        print(
            f"{Fore.YELLOW}Heads-up: the forecast models disagree for {summary['rows_with_differences']} "
            f"hour(s) (difference above {summary['threshold']}%) on {', '.join(levels)} cloud.{Style.RESET_ALL}"
        )
    met_no = stats["sources"].get("met_no", {})
    if met_no.get("error"):
        print(f"{Fore.YELLOW}Met.no unavailable ({met_no['error']}) - showing Open-Meteo only.{Style.RESET_ALL}")

    if not result.has_photography:
        print(f"\n{Fore.RED}No sunrise/sunset data - photography summary unavailable.{Style.RESET_ALL}")
        return

    ratings = result.photo_ratings
    print(f"\n{Fore.GREEN}Photography ratings{Style.RESET_ALL}")
    print(f"  Sunset     {stars(ratings.sunset_rating)}")
    print(f"  Sunrise    {stars(ratings.sunrise_rating)}")
    print(f"  Astro      {stars(ratings.astro_rating)}")
    print(f"  Milky Way  {stars(ratings.milky_way_rating)}")
    print(f"  Moon interference: {ratings.moon_interference}")

    window = ratings.optimal_astro_window
    print(
        f"  Optimal astro window: {window.start_time} - {window.end_time} "
        f"({window.duration_hours}h, {window.quality})"
    )

    print(f"\n{Fore.GREEN}Key times{Style.RESET_ALL}")
    for key, label in KEY_EVENTS:
        when = local_datetime(result.photo_times[key], tz)
        print(f"  {label:<16} {when.strftime('%a %H:%M')}")

    moon = stats["moon_today"]
    if moon.get("moon_illumination") is not None:
        print(
            f"\n  Moon: {moon['moon_phase_name']} {moon['moon_illumination']}%, "
            f"rise {moon.get('moonrise') or '--'}, set {moon.get('moonset') or '--'}"
        )


async def run(args: argparse.Namespace, settings: Settings) -> int:
    cache = ForecastCache(settings.cache_dir)
    hours = args.hours if args.hours is not None else settings.hours
    if args.threshold is not None:
        settings.diff_threshold = args.threshold

    label = f"{settings.lat}, {settings.lon}"
    lat, lon = settings.lat, settings.lon
    if args.lat is not None and args.lon is not None:
        lat, lon = args.lat, args.lon
        label = args.location or f"{lat}, {lon}"
    elif args.location:
        place = await resolve_location(args.location, cache=cache)
        lat, lon = float(place["lat"]), float(place["lon"])
        label = ", ".join(p for p in (place["name"], place["country"]) if p)

    result = await run_forecast(lat, lon, hours, settings=settings, cache=cache)

    if args.json:
        print(json.dumps(result.to_dict(), indent=2, default=str))
        return 0

    print_banner(f"{label}  ({datetime.now().strftime('%Y-%m-%d %H:%M')})")
    print_summary(result)
    print()
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    init()
    args = parse_args(argv)
    configure_logging(json_output=args.json)
    settings = load_settings()

    try:
        return asyncio.run(run(args, settings))
    except (CloudCoverError, ValueError) as e:
        logger.error(f"[main] {e}")
        print(f"{Fore.RED}[ERROR] {e}{Style.RESET_ALL}", file=sys.stderr if args.json else sys.stdout)
        return 1


if __name__ == "__main__":
    sys.exit(main())
