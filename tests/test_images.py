"""Unit tests for :mod:`messiertonight.images`, with Wikipedia mocked out."""

from __future__ import annotations

import json
from pathlib import Path

import httpx

from messiertonight.images import (
    LOCATION_KEY,
    JsonFileCache,
    MemoryCache,
    default_cache_file,
    fetch_thumbnail_url,
    load_last_location,
    save_last_location,
    wikipedia_url,
)
from messiertonight.models import ObserverLocation

_THUMB = "https://upload.wikimedia.org/thumb/Orion_Nebula.jpg/128px-Orion_Nebula.jpg"


class _CountingHandler:
    def __init__(self, payload: dict | None = None, status: int = 200) -> None:
        self.payload = payload
        self.status = status
        self.calls = 0

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.calls += 1
        assert request.url.params["titles"] == "Messier_42"
        assert request.url.params["prop"] == "pageimages"
        return httpx.Response(self.status, json=self.payload)


def _pages(page: dict) -> dict:
    return {"query": {"pages": {"12345": page}}}


def test_wikipedia_url__uses_catalog_number() -> None:
    assert wikipedia_url("M42") == "https://en.wikipedia.org/wiki/Messier_42"
    assert wikipedia_url("m1") == "https://en.wikipedia.org/wiki/Messier_1"


def test_fetch_thumbnail_url__caches_found_url() -> None:
    handler = _CountingHandler(_pages({"title": "Orion Nebula", "thumbnail": {"source": _THUMB}}))
    client = httpx.Client(transport=httpx.MockTransport(handler))
    cache = MemoryCache()

    first = fetch_thumbnail_url("M42", cache, client)
    second = fetch_thumbnail_url("M42", cache, client)

    assert first == second == _THUMB
    assert handler.calls == 1
    assert cache.get("messier_img_M42") == _THUMB


def test_fetch_thumbnail_url__without_thumbnail__returns_none_uncached() -> None:
    handler = _CountingHandler(_pages({"title": "Orion Nebula"}))
    cache = MemoryCache()

    assert fetch_thumbnail_url("M42", cache, httpx.Client(transport=httpx.MockTransport(handler))) is None
    assert cache.get("messier_img_M42") is None


def test_fetch_thumbnail_url__on_http_error__returns_none() -> None:
    handler = _CountingHandler({}, status=502)

    assert fetch_thumbnail_url("M42", MemoryCache(), httpx.Client(transport=httpx.MockTransport(handler))) is None


def test_fetch_thumbnail_url__on_malformed_response__returns_none() -> None:
    handler = _CountingHandler({"batchcomplete": ""})

    assert fetch_thumbnail_url("M42", MemoryCache(), httpx.Client(transport=httpx.MockTransport(handler))) is None


def test_json_file_cache__persists_between_instances(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "cache.json"

    JsonFileCache(path).set("a", "1")
    JsonFileCache(path).set("b", "2")

    reopened = JsonFileCache(path)
    assert reopened.get("a") == "1"
    assert reopened.get("b") == "2"
    assert reopened.get("c") is None


def test_json_file_cache__with_corrupt_file__starts_empty(tmp_path: Path) -> None:
    path = tmp_path / "cache.json"
    path.write_text("{not json", encoding="utf-8")
    cache = JsonFileCache(path)

    assert cache.get("a") is None
    cache.set("a", "1")
    assert json.loads(path.read_text(encoding="utf-8")) == {"a": "1"}


def test_default_cache_file__honours_environment(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setenv("MESSIERTONIGHT_CACHE_FILE", str(tmp_path / "x.json"))

    assert default_cache_file() == tmp_path / "x.json"


def test_last_location__round_trips_through_cache() -> None:
    cache = MemoryCache()
    location = ObserverLocation(51.5074, -0.1278, name="London", timezone_name="Europe/London")

    save_last_location(cache, location)

    assert load_last_location(cache) == location


def test_load_last_location__when_missing__returns_none() -> None:
    assert load_last_location(MemoryCache()) is None


def test_load_last_location__with_invalid_payload__returns_none() -> None:
    cache = MemoryCache()
    cache.set(LOCATION_KEY, json.dumps({"lat": 123.0, "lon": 0.0}))
    assert load_last_location(cache) is None

    cache.set(LOCATION_KEY, "garbage")
    assert load_last_location(cache) is None

    cache.set(LOCATION_KEY, json.dumps({"lon": 0.0}))
    assert load_last_location(cache) is None
