"""Thumbnail lookup and small key-value caching for front ends.

The cache is injected so neither the sky computation nor the renderers
depend on a particular storage mechanism.
"""

import json
import logging
import os
from pathlib import Path
from typing import Protocol

import httpx
from appdirs import user_cache_dir

from messiertonight.geocode import user_agent
from messiertonight.models import ObserverLocation

logger = logging.getLogger(__name__)

APP_ID = "messiertonight"
WIKIPEDIA_API = "https://en.wikipedia.org/w/api.php"
LOCATION_KEY = "messier_user_loc"


class ImageLookupError(Exception):
    """Unusable response from the Wikipedia API."""


class KeyValueCache(Protocol):
    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...


class MemoryCache:
    """Process-local cache. Lost on exit."""

    def __init__(self) -> None:
        self._data: dict[str, str] = {}

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value


class JsonFileCache:
    """Cache persisted as one JSON object on disk.

    The file is re-read on every ``get`` so several processes (the CLI and a
    running app) see each other's writes.
    """

    def __init__(self, path: Path | None = None) -> None:
        if path is None:
            path = default_cache_file()
        self.path = path

    def _read(self) -> dict[str, str]:
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return {}
        except json.JSONDecodeError:
            logger.warning("Ignoring corrupt cache file %s", self.path)
            return {}
        return data if isinstance(data, dict) else {}

    def get(self, key: str) -> str | None:
        return self._read().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data, ensure_ascii=False), encoding="utf-8")


def default_cache_file() -> Path:
    """``MESSIERTONIGHT_CACHE_FILE`` or cache.json in the per-user cache directory."""
    configured = os.environ.get("MESSIERTONIGHT_CACHE_FILE")
    if configured:
        return Path(configured)
    return Path(user_cache_dir(appname=APP_ID)) / "cache.json"


def _catalog_number(messier_id: str) -> str:
    return messier_id.strip().upper().removeprefix("M")


def wikipedia_url(messier_id: str) -> str:
    return f"https://en.wikipedia.org/wiki/Messier_{_catalog_number(messier_id)}"


def _query_thumbnail(messier_id: str, size: int, client: httpx.Client | None) -> str | None:
    params = {
        "action": "query",
        "titles": f"Messier_{_catalog_number(messier_id)}",
        "prop": "pageimages",
        "format": "json",
        "pithumbsize": size,
        "redirects": 1,
    }
    headers = {"User-Agent": user_agent()}
    if client is None:
        resp = httpx.get(WIKIPEDIA_API, params=params, headers=headers, timeout=10)
    else:
        resp = client.get(WIKIPEDIA_API, params=params, headers=headers, timeout=10)
    resp.raise_for_status()
    try:
        pages = resp.json()["query"]["pages"]
        page = next(iter(pages.values()))
    except (KeyError, StopIteration, AttributeError, ValueError) as e:
        raise ImageLookupError(f"Unexpected pageimages response for {messier_id}") from e
    thumbnail = page.get("thumbnail")
    return thumbnail["source"] if thumbnail else None


def fetch_thumbnail_url(
    messier_id: str,
    cache: KeyValueCache,
    client: httpx.Client | None = None,
    size: int = 128,
) -> str | None:
    """Thumbnail URL of the object's Wikipedia article, cached by identifier.

    Only found URLs are cached, so a later run retries objects that had no
    image or whose lookup failed.

    Args:
        messier_id: Catalog identifier ("M42").
        cache: Where resolved URLs are stored, under ``messier_img_<id>``.
        client: Optional httpx client.
        size: Requested thumbnail width in pixels.

    Returns:
        Image URL, or None when the article has no image or the lookup failed.
    """
    key = f"messier_img_{messier_id}"
    cached = cache.get(key)
    if cached:
        return cached
    try:
        url = _query_thumbnail(messier_id, size, client)
    except (httpx.HTTPError, ImageLookupError) as e:
        logger.warning("Failed to fetch image for %s: %s", messier_id, e)
        return None
    if url:
        cache.set(key, url)
    return url


def save_last_location(cache: KeyValueCache, location: ObserverLocation) -> None:
    payload = {
        "lat": location.latitude,
        "lon": location.longitude,
        "city": location.name,
        "timezone": location.timezone_name,
    }
    cache.set(LOCATION_KEY, json.dumps(payload))


def load_last_location(cache: KeyValueCache) -> ObserverLocation | None:
    """Previously saved location, or None if absent or unreadable."""
    raw = cache.get(LOCATION_KEY)
    if not raw:
        return None
    try:
        data = json.loads(raw)
        return ObserverLocation(
            latitude=float(data["lat"]),
            longitude=float(data["lon"]),
            name=data.get("city") or None,
            timezone_name=data.get("timezone"),
        )
    except (ValueError, KeyError, TypeError) as e:
        # InvalidLocation is a ValueError
        logger.warning("Discarding saved location %r: %s", raw, e)
        return None
