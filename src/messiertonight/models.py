"""Data model definitions — explicit boundaries between input, compute, and render layers."""

import math
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from enum import Enum

import pytz


class InvalidLocation(ValueError):
    """Observer latitude/longitude outside the valid range, or an unknown timezone."""


class ObjectType(str, Enum):
    """Deep-sky object classes used by the Messier catalog."""

    ASTERISM = "Asterism"
    DOUBLE_STAR = "Double Star"
    ELLIPTICAL_GALAXY = "Elliptical Galaxy"
    EMISSION_NEBULA = "Emission Nebula"
    GLOBULAR_CLUSTER = "Globular Cluster"
    IRREGULAR_GALAXY = "Irregular Galaxy"
    OPEN_CLUSTER = "Open Cluster"
    PLANETARY_NEBULA = "Planetary Nebula"
    REFLECTION_NEBULA = "Reflection Nebula"
    SPIRAL_GALAXY = "Spiral Galaxy"
    STAR_CLOUD = "Star Cloud"
    SUPERNOVA_REMNANT = "Supernova Remnant"


@dataclass(frozen=True)
class QueryInput:
    """Raw user input. Not yet validated."""

    lat: str  # Latitude as typed ("51.5074")
    lon: str  # Longitude as typed ("-0.1278")
    day: str  # "YYYY-MM-DD" format string
    name: str = ""  # Optional place name for display


@dataclass(frozen=True)
class ObserverLocation:
    """Observer position on Earth. Input to every sky computation."""

    latitude: float  # Decimal degrees, positive north
    longitude: float  # Decimal degrees, positive east
    name: str | None = None  # Display name (city)
    timezone_name: str | None = None  # IANA zone ("Europe/London"); None = UTC

    def __post_init__(self) -> None:
        if not math.isfinite(self.latitude) or not -90.0 <= self.latitude <= 90.0:
            raise InvalidLocation(f"Latitude out of range: {self.latitude}")
        if not math.isfinite(self.longitude) or not -180.0 <= self.longitude <= 180.0:
            raise InvalidLocation(f"Longitude out of range: {self.longitude}")
        if self.timezone_name is not None:
            try:
                pytz.timezone(self.timezone_name)
            except pytz.UnknownTimeZoneError:
                raise InvalidLocation(f"Unknown timezone: {self.timezone_name}") from None

    @property
    def label(self) -> str:
        """Coordinates for display, with the city name when known."""
        text = f"{self.latitude:.2f}°, {self.longitude:.2f}°"
        if self.name:
            text += f" ({self.name})"
        return text


@dataclass(frozen=True)
class CelestialObject:
    """A single catalog entry. Static reference data."""

    messier_id: str  # "M1" .. "M110"
    name: str  # Common name or NGC designation
    ra_deg: float  # Right ascension (degrees, J2000)
    dec_deg: float  # Declination (degrees, J2000)
    object_type: ObjectType
    magnitude: float  # Apparent visual magnitude
    size_arcmin: float  # Apparent angular size
    constellation: str
    image_url: str | None = None

    def __post_init__(self) -> None:
        if not 0.0 <= self.ra_deg < 360.0:
            raise ValueError(f"{self.messier_id}: right ascension out of range: {self.ra_deg}")
        if not -90.0 <= self.dec_deg <= 90.0:
            raise ValueError(f"{self.messier_id}: declination out of range: {self.dec_deg}")


@dataclass(frozen=True)
class SunPosition:
    """Apparent solar equatorial coordinates at one instant."""

    ra_deg: float
    dec_deg: float


@dataclass(frozen=True)
class TwilightWindow:
    """Astronomical dusk of a date and dawn of the following morning.

    Both ends are None when the sun never crosses the twilight altitude
    (polar day or polar night). That is a valid result, not an error.
    """

    dusk: datetime | None  # UTC
    dawn: datetime | None  # UTC

    @property
    def is_dark_night(self) -> bool:
        return self.dusk is not None and self.dawn is not None

    @property
    def duration(self) -> timedelta | None:
        if self.dusk is None or self.dawn is None:
            return None
        return self.dawn - self.dusk


@dataclass(frozen=True)
class VisibilityRecord:
    """Altitude of one catalog object at a query instant."""

    object: CelestialObject
    altitude_deg: float


@dataclass(frozen=True)
class ObjectGroup:
    """Visibility records of a single object type, highest first."""

    object_type: str  # ObjectType display value, used as the group key
    records: tuple[VisibilityRecord, ...]


@dataclass(frozen=True)
class TimelineEntry:
    """Objects above the threshold at one hourly step."""

    instant: datetime  # UTC
    groups: tuple[ObjectGroup, ...]  # Sorted alphabetically by type name

    @property
    def records(self) -> tuple[VisibilityRecord, ...]:
        return tuple(r for g in self.groups for r in g.records)

    @property
    def count(self) -> int:
        return sum(len(g.records) for g in self.groups)


@dataclass(frozen=True)
class NightlyTimeline:
    """The sole input to renderers. Fully computed state."""

    location: ObserverLocation
    day: date
    window: TwilightWindow
    entries: tuple[TimelineEntry, ...]
    threshold_deg: float
    used_fallback: bool = False  # 18:00–06:00 local stood in for a missing window

    @property
    def no_darkness(self) -> bool:
        """The sun never reaches astronomical twilight on this night."""
        return not self.window.is_dark_night

    @property
    def too_short(self) -> bool:
        """Darkness occurs but is shorter than one hourly step."""
        return self.window.is_dark_night and not self.entries
