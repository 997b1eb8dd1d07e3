"""Reference twilight times from skyfield, for measuring the approximate solver's error.

Needs the JPL DE421 ephemeris (about 17 MB). It is downloaded into the
package ``resources`` directory on first use.
"""

from datetime import date, datetime, time, timedelta
from pathlib import Path
from typing import Any

from skyfield import almanac
from skyfield.api import Loader, wgs84

from messiertonight.compute import compute_twilight_window, local_timezone
from messiertonight.models import ObserverLocation, TwilightWindow

_RESOURCES = Path(__file__).parent / "resources"
EPHEMERIS_FILE = "de421.bsp"
_loader = Loader(str(_RESOURCES))

# almanac.dark_twilight_day() states
_DARK = 0


def load_ephemeris() -> Any:
    return _loader(EPHEMERIS_FILE)


def reference_twilight_window(
    day: date, location: ObserverLocation, ephemeris: Any = None
) -> TwilightWindow:
    """Astronomical dusk/dawn searched from local noon of ``day`` to the next local noon.

    Args:
        day: Date of the evening.
        location: Observer position.
        ephemeris: Loaded skyfield ephemeris. DE421 is loaded if None.

    Returns:
        TwilightWindow in UTC; both ends None if the sky never gets fully dark.
    """
    eph = ephemeris if ephemeris is not None else load_ephemeris()
    tz = local_timezone(location)
    noon = tz.localize(datetime.combine(day, time(12)))  # type: ignore[attr-defined]

    ts = _loader.timescale()
    t0 = ts.from_datetime(noon)
    t1 = ts.from_datetime(noon + timedelta(days=1))
    topos = wgs84.latlon(latitude_degrees=location.latitude, longitude_degrees=location.longitude)
    times, states = almanac.find_discrete(t0, t1, almanac.dark_twilight_day(eph, topos))

    dusk: datetime | None = None
    dawn: datetime | None = None
    for t, state in zip(times, states):
        if dusk is None and state == _DARK:
            dusk = t.utc_datetime()
        elif dusk is not None and state > _DARK:
            dawn = t.utc_datetime()
            break
    if dusk is None or dawn is None:
        return TwilightWindow(dusk=None, dawn=None)
    return TwilightWindow(dusk=dusk, dawn=dawn)


def twilight_error_minutes(
    day: date, location: ObserverLocation, ephemeris: Any = None
) -> tuple[float, float] | None:
    """(dusk, dawn) error of the approximate window in minutes, approximate minus reference.

    Returns None when either method finds no darkness, since there is nothing
    to compare.
    """
    approx = compute_twilight_window(day, location)
    ref = reference_twilight_window(day, location, ephemeris)
    if approx.dusk is None or approx.dawn is None or ref.dusk is None or ref.dawn is None:
        return None
    return (
        (approx.dusk - ref.dusk).total_seconds() / 60.0,
        (approx.dawn - ref.dawn).total_seconds() / 60.0,
    )
