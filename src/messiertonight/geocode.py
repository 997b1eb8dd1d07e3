"""Location lookups — Nominatim geocoding and timezone resolution.

These are the only network-facing helpers for locations. The sky computation
itself never calls them; front ends resolve an ObserverLocation here first.
"""

import logging
import os

import httpx
from timezonefinder import TimezoneFinder

from messiertonight.models import ObserverLocation

logger = logging.getLogger(__name__)

NOMINATIM_URL = "https://nominatim.openstreetmap.org"
DEFAULT_USER_AGENT = "MessierTonight/1.0 (hourly Messier visibility planner)"
UNKNOWN_LOCATION = "Unknown Location"

_tf = TimezoneFinder()


class GeocodingError(Exception):
    """Geocoder call failure."""


def user_agent() -> str:
    return os.environ.get("NOMINATIM_USER_AGENT", DEFAULT_USER_AGENT)


def _get_json(client: httpx.Client | None, url: str, params: dict) -> object:
    """Single GET returning decoded JSON. Raises httpx.HTTPError on failure."""
    headers = {"User-Agent": user_agent()}
    if client is None:
        resp = httpx.get(url, params=params, headers=headers, timeout=10)
    else:
        resp = client.get(url, params=params, headers=headers, timeout=10)
    resp.raise_for_status()
    return resp.json()


def _reverse_nominatim(lat: float, lon: float, client: httpx.Client | None) -> str:
    """Nominatim reverse lookup. Returns the most specific settlement name."""
    params = {"format": "json", "lat": lat, "lon": lon, "zoom": 10}
    data = _get_json(client, f"{NOMINATIM_URL}/reverse", params)
    if not isinstance(data, dict):
        raise GeocodingError(f"Unexpected reverse geocoding response: {data!r}")
    if "error" in data:
        raise GeocodingError(f"nominatim error: {data['error']}")
    address = data.get("address") or {}
    for key in ("city", "town", "village", "county"):
        if address.get(key):
            return address[key]
    return UNKNOWN_LOCATION


def lookup_city_name(
    lat: float, lon: float, client: httpx.Client | None = None
) -> str | None:
    """Resolve a display name for coordinates.

    The name is decorative, so failures are logged and reported as None
    instead of raised.

    Args:
        lat: Latitude (decimal degrees).
        lon: Longitude (decimal degrees).
        client: Optional httpx client (for connection reuse or testing).

    Returns:
        City/town/village/county name, "Unknown Location" when Nominatim knows
        the place but not a settlement, or None when the lookup failed.
    """
    try:
        return _reverse_nominatim(lat, lon, client)
    except (httpx.HTTPError, GeocodingError, ValueError) as e:
        logger.warning("City name lookup failed for %.4f, %.4f: %s", lat, lon, e)
        return None


def timezone_for(lat: float, lon: float) -> str | None:
    """IANA timezone name at the given coordinates, None over open ocean."""
    return _tf.timezone_at(lat=lat, lng=lon)


def resolve_location(
    lat: float,
    lon: float,
    name: str | None = None,
    lookup_name: bool = False,
    client: httpx.Client | None = None,
) -> ObserverLocation:
    """Build a validated ObserverLocation with timezone and optional city name.

    Raises:
        InvalidLocation: When the coordinates are out of range.
    """
    # Validate before any lookup touches the coordinates
    location = ObserverLocation(latitude=lat, longitude=lon, name=name)
    if name is None and lookup_name:
        name = lookup_city_name(lat, lon, client)
    return ObserverLocation(
        latitude=location.latitude,
        longitude=location.longitude,
        name=name,
        timezone_name=timezone_for(lat, lon),
    )


def geocode_address(address: str, client: httpx.Client | None = None) -> ObserverLocation:
    """Resolve a free-text place name to an ObserverLocation.

    Args:
        address: Address or place name in any language.
        client: Optional httpx client.

    Returns:
        ObserverLocation with Nominatim's display name and the local timezone.

    Raises:
        GeocodingError: On API error or when the address cannot be found.
    """
    params = {"q": address, "format": "json", "limit": 1}
    try:
        results = _get_json(client, f"{NOMINATIM_URL}/search", params)
    except httpx.HTTPError as e:
        raise GeocodingError(f"nominatim request failed: {e}") from e
    if not results:
        raise GeocodingError(f"Address not found: {address}")
    r = results[0]  # type: ignore[index]
    lat, lon = float(r["lat"]), float(r["lon"])
    return resolve_location(lat, lon, name=r["display_name"])
