"""Unit tests for :mod:`messiertonight.models`."""

from __future__ import annotations

import dataclasses
from datetime import datetime, timedelta

import pytest
from pytz import utc

from messiertonight.models import (
    CelestialObject,
    InvalidLocation,
    ObjectGroup,
    ObjectType,
    ObserverLocation,
    TimelineEntry,
    TwilightWindow,
    VisibilityRecord,
)


@pytest.mark.parametrize(
    "lat, lon",
    [(90.5, 0.0), (-91.0, 0.0), (0.0, 180.01), (0.0, -181.0), (float("nan"), 0.0), (0.0, float("inf"))],
)
def test_observer_location__out_of_range__raises_invalid_location(lat: float, lon: float) -> None:
    with pytest.raises(InvalidLocation):
        ObserverLocation(latitude=lat, longitude=lon)


def test_observer_location__on_range_edges__is_accepted() -> None:
    for lat, lon in [(90.0, 180.0), (-90.0, -180.0), (0.0, 0.0)]:
        assert ObserverLocation(latitude=lat, longitude=lon).latitude == lat


def test_invalid_location__is_a_value_error() -> None:
    assert issubclass(InvalidLocation, ValueError)


def test_observer_location__is_immutable() -> None:
    location = ObserverLocation(latitude=10.0, longitude=20.0)

    with pytest.raises(dataclasses.FrozenInstanceError):
        location.latitude = 11.0  # type: ignore[misc]


def test_observer_location__label__includes_city_when_known() -> None:
    assert ObserverLocation(51.5074, -0.1278).label == "51.51°, -0.13°"
    assert ObserverLocation(51.5074, -0.1278, name="London").label == "51.51°, -0.13° (London)"


def test_celestial_object__with_bad_coordinates__raises_value_error() -> None:
    kwargs = dict(
        messier_id="M0",
        name="Nothing",
        object_type=ObjectType.ASTERISM,
        magnitude=1.0,
        size_arcmin=1.0,
        constellation="Nowhere",
    )
    with pytest.raises(ValueError):
        CelestialObject(ra_deg=360.0, dec_deg=0.0, **kwargs)
    with pytest.raises(ValueError):
        CelestialObject(ra_deg=10.0, dec_deg=-90.5, **kwargs)


def test_twilight_window__duration_and_darkness_flags() -> None:
    dusk = datetime(2024, 1, 5, 18, 8, tzinfo=utc)

    assert TwilightWindow(dusk=dusk, dawn=dusk + timedelta(hours=12)).duration == timedelta(hours=12)
    assert TwilightWindow(dusk=dusk, dawn=dusk).is_dark_night
    assert not TwilightWindow(dusk=None, dawn=None).is_dark_night


def test_timeline_entry__flattens_groups_in_order() -> None:
    def record(mid: str, alt: float, kind: ObjectType) -> VisibilityRecord:
        obj = CelestialObject(mid, mid, 0.0, 0.0, kind, 5.0, 1.0, "Test")
        return VisibilityRecord(object=obj, altitude_deg=alt)

    a = record("M1", 50.0, ObjectType.GLOBULAR_CLUSTER)
    b = record("M2", 40.0, ObjectType.GLOBULAR_CLUSTER)
    c = record("M3", 60.0, ObjectType.OPEN_CLUSTER)
    entry = TimelineEntry(
        instant=datetime(2024, 1, 5, 20, tzinfo=utc),
        groups=(ObjectGroup("Globular Cluster", (a, b)), ObjectGroup("Open Cluster", (c,))),
    )

    assert entry.records == (a, b, c)
    assert entry.count == 3


def test_observer_location__unknown_timezone__raises_invalid_location() -> None:
    with pytest.raises(InvalidLocation, match="Mars/Olympus"):
        ObserverLocation(latitude=51.5, longitude=0.0, timezone_name="Mars/Olympus")


def test_observer_location__known_timezone__is_accepted() -> None:
    assert ObserverLocation(51.5, 0.0, timezone_name="Europe/London").timezone_name == "Europe/London"
