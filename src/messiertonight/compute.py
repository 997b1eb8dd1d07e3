"""Visibility computation layer — per-instant visible objects and the nightly hourly timeline."""

import logging
from collections import defaultdict
from datetime import date, datetime, time, timedelta, tzinfo

from pytz import timezone, utc

from messiertonight import astronomy
from messiertonight.catalog import MESSIER_CATALOG
from messiertonight.geocode import resolve_location
from messiertonight.models import (
    CelestialObject,
    InvalidLocation,
    NightlyTimeline,
    ObjectGroup,
    ObserverLocation,
    QueryInput,
    TimelineEntry,
    TwilightWindow,
    VisibilityRecord,
)

logger = logging.getLogger(__name__)

VISIBILITY_THRESHOLD_DEG = 15.0
FALLBACK_DUSK = time(18, 0)
FALLBACK_DAWN = time(6, 0)
_HOUR = timedelta(hours=1)


def local_timezone(location: ObserverLocation) -> tzinfo:
    """pytz timezone of the location, UTC when unknown."""
    if location.timezone_name is None:
        return utc
    return timezone(location.timezone_name)


def observer_today(location: ObserverLocation, now: datetime | None = None) -> date:
    """Calendar date at the observer's location, not the machine running the code."""
    now = now or datetime.now(utc)
    return now.astimezone(local_timezone(location)).date()


def compute_twilight_window(
    day: date,
    location: ObserverLocation,
    twilight_altitude: float = astronomy.ASTRONOMICAL_TWILIGHT_DEG,
) -> TwilightWindow:
    """Astronomical dusk on ``day`` and dawn the following morning at ``location``."""
    window = astronomy.twilight_window(
        day,
        location.latitude,
        location.longitude,
        twilight_altitude=twilight_altitude,
        tz=local_timezone(location),
    )
    logger.debug("Twilight window for %s on %s: %s", location.label, day, window)
    return window


def visible_objects(
    instant: datetime,
    location: ObserverLocation,
    catalog: tuple[CelestialObject, ...],
    threshold_deg: float = VISIBILITY_THRESHOLD_DEG,
) -> tuple[VisibilityRecord, ...]:
    """Catalog objects at or above ``threshold_deg`` at one instant.

    Args:
        instant: Query time (aware; naive is taken as UTC).
        location: Observer position.
        catalog: Objects to test.
        threshold_deg: Minimum altitude in degrees.

    Returns:
        Records sorted by altitude descending, ties by identifier ascending.
        Empty when nothing qualifies.
    """
    jd = astronomy.to_julian_day(instant)
    lst = astronomy.local_sidereal_time(jd, location.longitude)

    records = []
    for obj in catalog:
        alt = astronomy.altitude(obj.ra_deg, obj.dec_deg, location.latitude, lst)
        if alt >= threshold_deg:
            records.append(VisibilityRecord(object=obj, altitude_deg=alt))

    records.sort(key=lambda r: (-r.altitude_deg, r.object.messier_id))
    return tuple(records)


def compute_visible_objects(
    instant: datetime,
    location: ObserverLocation,
    catalog: tuple[CelestialObject, ...] = MESSIER_CATALOG,
    threshold_deg: float = VISIBILITY_THRESHOLD_DEG,
) -> tuple[VisibilityRecord, ...]:
    """Public entry point for :func:`visible_objects` with the Messier catalog as default."""
    return visible_objects(instant, location, catalog, threshold_deg)


def group_by_type(records: tuple[VisibilityRecord, ...]) -> tuple[ObjectGroup, ...]:
    """Group records by object type name, keys in alphabetical order.

    Record order inside each group is preserved.
    """
    grouped: dict[str, list[VisibilityRecord]] = defaultdict(list)
    for record in records:
        grouped[record.object.object_type.value].append(record)
    return tuple(
        ObjectGroup(object_type=name, records=tuple(grouped[name]))
        for name in sorted(grouped)
    )


def _round_up_to_hour(instant: datetime, tz: tzinfo) -> datetime:
    """Next whole local hour at or after ``instant``, returned in UTC."""
    local = instant.astimezone(tz)
    floored = local.replace(minute=0, second=0, microsecond=0)
    if floored < local:
        floored += _HOUR
    return floored.astimezone(utc)


def _window_bounds(
    day: date, window: TwilightWindow, tz: tzinfo
) -> tuple[datetime, datetime]:
    """Start/end of the observing window, 18:00/06:00 local standing in for missing ends."""
    start = window.dusk
    if start is None:
        start = tz.localize(datetime.combine(day, FALLBACK_DUSK))  # type: ignore[attr-defined]
    end = window.dawn
    if end is None:
        end = tz.localize(datetime.combine(day + timedelta(days=1), FALLBACK_DAWN))  # type: ignore[attr-defined]
    if end < start:
        end += timedelta(days=1)
    return start.astimezone(utc), end.astimezone(utc)


def build_timeline(
    day: date,
    location: ObserverLocation,
    catalog: tuple[CelestialObject, ...],
    threshold_deg: float = VISIBILITY_THRESHOLD_DEG,
    twilight_altitude: float = astronomy.ASTRONOMICAL_TWILIGHT_DEG,
    fallback: bool = False,
) -> NightlyTimeline:
    """Hour-by-hour visible objects from dusk to dawn.

    Steps start at the first whole local hour after dusk and continue while
    strictly before dawn. A night without astronomical darkness yields no
    entries unless ``fallback`` is set, in which case 18:00–06:00 local time
    is used instead.

    Args:
        day: Date of the evening.
        location: Observer position.
        catalog: Objects to test.
        threshold_deg: Minimum altitude in degrees.
        twilight_altitude: Solar altitude defining darkness.
        fallback: Use 18:00/06:00 local for a missing dusk/dawn.

    Returns:
        NightlyTimeline. Check ``no_darkness`` and ``too_short`` to tell the
        two empty cases apart.
    """
    tz = local_timezone(location)
    window = compute_twilight_window(day, location, twilight_altitude)

    if not window.is_dark_night and not fallback:
        logger.warning("No astronomical dark window for %s on %s", location.label, day)
        return NightlyTimeline(
            location=location,
            day=day,
            window=window,
            entries=(),
            threshold_deg=threshold_deg,
        )

    start, end = _window_bounds(day, window, tz)
    entries: list[TimelineEntry] = []
    current = _round_up_to_hour(start, tz)
    while current < end:
        records = visible_objects(current, location, catalog, threshold_deg)
        entries.append(TimelineEntry(instant=current, groups=group_by_type(records)))
        current += _HOUR

    logger.debug("Built %d hourly entries between %s and %s", len(entries), start, end)
    return NightlyTimeline(
        location=location,
        day=day,
        window=window,
        entries=tuple(entries),
        threshold_deg=threshold_deg,
        used_fallback=not window.is_dark_night,
    )


def build_nightly_timeline(
    day: date,
    location: ObserverLocation,
    catalog: tuple[CelestialObject, ...] = MESSIER_CATALOG,
    threshold_deg: float = VISIBILITY_THRESHOLD_DEG,
    fallback: bool = False,
) -> NightlyTimeline:
    """Public entry point for :func:`build_timeline` with the Messier catalog as default."""
    return build_timeline(day, location, catalog, threshold_deg, fallback=fallback)


def run(
    query: QueryInput,
    threshold_deg: float = VISIBILITY_THRESHOLD_DEG,
    fallback: bool = False,
    lookup_name: bool = False,
) -> NightlyTimeline:
    """Top-level entry point: takes a QueryInput and returns a NightlyTimeline.

    Args:
        query: User input (coordinate strings, date string, optional name).
        threshold_deg: Minimum altitude in degrees.
        fallback: Use 18:00/06:00 local when there is no darkness.
        lookup_name: Reverse-geocode a city name when ``query.name`` is empty.

    Returns:
        Fully computed NightlyTimeline.

    Raises:
        InvalidLocation: When the coordinates are not numbers or out of range.
        ValueError: When the date string is not "YYYY-MM-DD".
    """
    location = resolve_location(
        _parse_coordinate(query.lat, "latitude"),
        _parse_coordinate(query.lon, "longitude"),
        name=query.name.strip() or None,
        lookup_name=lookup_name,
    )
    day = datetime.strptime(query.day, "%Y-%m-%d").date()
    return build_nightly_timeline(
        day, location, threshold_deg=threshold_deg, fallback=fallback
    )


def _parse_coordinate(raw: str, what: str) -> float:
    try:
        return float(raw)
    except ValueError:
        raise InvalidLocation(f"Please enter a valid {what}: {raw!r}") from None
