"""Shared fixtures for the test suite."""

from __future__ import annotations

import matplotlib
import pytest

from messiertonight.models import ObserverLocation

matplotlib.use("Agg")


@pytest.fixture
def london() -> ObserverLocation:
    return ObserverLocation(
        latitude=51.5074, longitude=-0.1278, name="London", timezone_name="Europe/London"
    )


@pytest.fixture
def null_island() -> ObserverLocation:
    return ObserverLocation(latitude=0.0, longitude=0.0)


@pytest.fixture(autouse=True)
def _isolated_cache(tmp_path, monkeypatch) -> None:
    """Keep every test away from the real per-user cache file."""
    monkeypatch.setenv("MESSIERTONIGHT_CACHE_FILE", str(tmp_path / "cache.json"))
