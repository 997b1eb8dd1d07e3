"""Astronomy math — Julian Day, low-precision solar ephemeris, sidereal time, altitude, twilight.

All functions are pure. Angles are in degrees unless a name says otherwise.
The solar formulas are accurate to roughly one degree, which puts twilight
times within a few minutes: good enough for hourly buckets, not for
precise ephemerides.
"""

import math
from datetime import date, datetime, time, timedelta, tzinfo

from pytz import utc

from messiertonight.models import SunPosition, TwilightWindow

UNIX_EPOCH_JD = 2440587.5
J2000_JD = 2451545.0
MS_PER_DAY = 86_400_000
ASTRONOMICAL_TWILIGHT_DEG = -18.0
_ECCENTRICITY = 0.0167
_UNIX_EPOCH = datetime(1970, 1, 1, tzinfo=utc)


def _normalize(deg: float) -> float:
    """Wrap an angle into [0, 360)."""
    deg = deg % 360.0
    # -1e-15 % 360 rounds up to exactly 360.0
    return 0.0 if deg >= 360.0 else deg


def to_julian_day(instant: datetime) -> float:
    """Convert an instant to a Julian Day number.

    Naive datetimes are taken as UTC.
    """
    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=utc)
    epoch_ms = (instant - _UNIX_EPOCH) / timedelta(milliseconds=1)
    return epoch_ms / MS_PER_DAY + UNIX_EPOCH_JD


def from_julian_day(jd: float) -> datetime:
    """Inverse of :func:`to_julian_day`, rounded to the millisecond. Returns UTC."""
    epoch_ms = round((jd - UNIX_EPOCH_JD) * MS_PER_DAY)
    return _UNIX_EPOCH + timedelta(milliseconds=epoch_ms)


def days_since_j2000(jd: float) -> float:
    return jd - J2000_JD


def _mean_anomaly(d: float) -> float:
    return _normalize(357.529 + 0.98560028 * d)


def _mean_longitude(d: float) -> float:
    return _normalize(280.459 + 0.98564736 * d)


def _obliquity(d: float) -> float:
    return 23.439 - 0.00000036 * d


def sun_position(jd: float) -> SunPosition:
    """Compute the Sun's right ascension and declination.

    Args:
        jd: Julian Day of the instant.

    Returns:
        SunPosition with RA in [0, 360) and Dec in [-90, 90].
    """
    d = days_since_j2000(jd)
    g = math.radians(_mean_anomaly(d))
    q = _mean_longitude(d)
    ecliptic_lon = math.radians(q + 1.915 * math.sin(g) + 0.020 * math.sin(2 * g))
    eps = math.radians(_obliquity(d))

    ra = math.atan2(math.cos(eps) * math.sin(ecliptic_lon), math.cos(ecliptic_lon))
    dec = math.asin(math.sin(eps) * math.sin(ecliptic_lon))
    return SunPosition(ra_deg=_normalize(math.degrees(ra)), dec_deg=math.degrees(dec))


def greenwich_sidereal_time(jd: float) -> float:
    """Greenwich Mean Sidereal Time in degrees [0, 360)."""
    return _normalize(280.46061837 + 360.98564736629 * days_since_j2000(jd))


def local_sidereal_time(jd: float, longitude: float) -> float:
    """Local Sidereal Time in degrees [0, 360).

    Args:
        jd: Julian Day.
        longitude: Observer longitude (positive east).
    """
    return _normalize(greenwich_sidereal_time(jd) + longitude)


def hour_angle(lst: float, ra: float) -> float:
    return _normalize(lst - ra)


def altitude(ra: float, dec: float, latitude: float, lst: float) -> float:
    """Altitude of an equatorial position above the horizon.

    Args:
        ra: Right ascension (degrees).
        dec: Declination (degrees).
        latitude: Observer latitude (degrees).
        lst: Local sidereal time (degrees).

    Returns:
        Altitude in degrees, within [-90, 90].
    """
    h = math.radians(hour_angle(lst, ra))
    lat = math.radians(latitude)
    dec_r = math.radians(dec)
    sin_alt = math.sin(lat) * math.sin(dec_r) + math.cos(lat) * math.cos(dec_r) * math.cos(h)
    return math.degrees(math.asin(max(-1.0, min(1.0, sin_alt))))


def equation_of_time(jd: float) -> float:
    """Equation of time in minutes (apparent minus mean solar time)."""
    d = days_since_j2000(jd)
    mean_lon = math.radians(_mean_longitude(d))
    g = math.radians(_mean_anomaly(d))
    y = math.tan(math.radians(_obliquity(d)) / 2) ** 2
    e = _ECCENTRICITY
    eot = (
        y * math.sin(2 * mean_lon)
        - 2 * e * math.sin(g)
        + 4 * e * y * math.sin(g) * math.cos(2 * mean_lon)
        - 0.5 * y * y * math.sin(4 * mean_lon)
        - 1.25 * e * e * math.sin(2 * g)
    )
    return 4 * math.degrees(eot)


def twilight_window(
    day: date,
    latitude: float,
    longitude: float,
    twilight_altitude: float = ASTRONOMICAL_TWILIGHT_DEG,
    tz: tzinfo | None = None,
) -> TwilightWindow:
    """Estimate tonight's dusk and the following dawn.

    The Sun's declination is taken at local noon of ``day`` and assumed
    constant through the night. Transit is placed at 12:00 local mean time
    corrected by the equation of time, without iterating; the result is
    off by a few minutes, more near the solstices.

    Args:
        day: Calendar date of the evening.
        latitude: Observer latitude (degrees).
        longitude: Observer longitude (degrees, positive east).
        twilight_altitude: Solar altitude defining darkness (default -18).
        tz: pytz timezone defining "local noon". UTC if None.

    Returns:
        TwilightWindow with UTC dusk/dawn, or both None when the Sun never
        crosses ``twilight_altitude`` on that date.
    """
    tz = tz or utc
    noon = tz.localize(datetime.combine(day, time(12)))  # type: ignore[attr-defined]
    jd = to_julian_day(noon)
    sun = sun_position(jd)

    lat = math.radians(latitude)
    dec = math.radians(sun.dec_deg)
    denom = math.cos(lat) * math.cos(dec)
    if abs(denom) < 1e-12:
        return TwilightWindow(dusk=None, dawn=None)
    cos_h = (math.sin(math.radians(twilight_altitude)) - math.sin(lat) * math.sin(dec)) / denom
    if cos_h < -1.0 or cos_h > 1.0:
        return TwilightWindow(dusk=None, dawn=None)

    duration_hours = math.degrees(math.acos(cos_h)) / 15.0
    transit_utc = 12.0 - longitude / 15.0 - equation_of_time(jd) / 60.0

    midnight = utc.localize(datetime.combine(day, time(0)))
    return TwilightWindow(
        dusk=midnight + timedelta(hours=transit_utc + duration_hours),
        dawn=midnight + timedelta(hours=transit_utc - duration_hours + 24.0),
    )
