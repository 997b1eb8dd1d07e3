"""Command line entry point: print tonight's hourly Messier timeline.

    messier-tonight --lat 51.5074 --lon -0.1278 --date 2024-10-01
"""

import argparse
import logging
import os
import sys
from datetime import datetime
from pathlib import Path

from dotenv import load_dotenv

from messiertonight.astronomy import ASTRONOMICAL_TWILIGHT_DEG
from messiertonight.catalog import MESSIER_CATALOG
from messiertonight.compute import VISIBILITY_THRESHOLD_DEG, build_timeline, observer_today
from messiertonight.geocode import resolve_location
from messiertonight.images import JsonFileCache, load_last_location, save_last_location
from messiertonight.models import InvalidLocation, ObserverLocation
from messiertonight.renderers.static import save_static_chart
from messiertonight.renderers.text import render_text_timeline

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Hourly Messier visibility during astronomical darkness")
    p.add_argument("--lat", type=float, help="Latitude in decimal degrees (N+)")
    p.add_argument("--lon", type=float, help="Longitude in decimal degrees (E+)")
    p.add_argument("--name", type=str, default=None, help="Display name of the location")
    p.add_argument("--tz", type=str, default=None, help="IANA timezone (default: looked up from coordinates)")
    p.add_argument("--date", type=str, default=None, help="Local date YYYY-MM-DD (default=today)")
    p.add_argument("--min-alt", type=float, default=VISIBILITY_THRESHOLD_DEG, help="Minimum altitude (deg)")
    p.add_argument(
        "--twilight-alt", type=float, default=ASTRONOMICAL_TWILIGHT_DEG, help="Solar altitude of darkness (deg)"
    )
    p.add_argument("--fallback", action="store_true", help="Use 18:00-06:00 local when there is no darkness")
    p.add_argument("--lookup-city", action="store_true", help="Reverse-geocode a city name (network)")
    p.add_argument("--png", type=Path, default=None, help="Also save an altitude chart PNG")
    return p.parse_args(argv)


def _location_from_args(args: argparse.Namespace) -> ObserverLocation:
    cache = JsonFileCache()
    if args.lat is None or args.lon is None:
        saved = load_last_location(cache)
        if saved is None:
            raise InvalidLocation("No saved location; pass --lat and --lon")
        logger.info("Using saved location %s", saved.label)
        return saved

    location = resolve_location(args.lat, args.lon, name=args.name, lookup_name=args.lookup_city)
    if args.tz:
        location = ObserverLocation(
            latitude=location.latitude,
            longitude=location.longitude,
            name=location.name,
            timezone_name=args.tz,
        )
    save_last_location(cache, location)
    return location


def main(argv: list[str] | None = None) -> int:
    load_dotenv()
    logging.basicConfig(
        level=os.environ.get("MESSIERTONIGHT_LOG_LEVEL", "INFO").upper(),
        format="%(levelname)s %(name)s: %(message)s",
    )
    args = parse_args(argv)

    try:
        if args.date:
            day = datetime.strptime(args.date, "%Y-%m-%d").date()
        location = _location_from_args(args)
    except ValueError as e:
        # InvalidLocation is a ValueError
        print(f"error: {e}", file=sys.stderr)
        return 2
    if not args.date:
        day = observer_today(location)

    timeline = build_timeline(
        day,
        location,
        MESSIER_CATALOG,
        threshold_deg=args.min_alt,
        twilight_altitude=args.twilight_alt,
        fallback=args.fallback,
    )
    print(render_text_timeline(timeline), end="")
    if args.png is not None:
        path = save_static_chart(timeline, args.png)
        print(f"Saved: {path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
