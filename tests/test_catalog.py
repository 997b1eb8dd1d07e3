"""Unit tests for :mod:`messiertonight.catalog`."""

from __future__ import annotations

from pathlib import Path

import pytest

from messiertonight.catalog import MESSIER_CATALOG, find_object, load_catalog
from messiertonight.models import ObjectType

_HEADER = "messier_id,name,ra_deg,dec_deg,object_type,magnitude,size_arcmin,constellation\n"


def test_messier_catalog__has_all_110_objects() -> None:
    ids = [obj.messier_id for obj in MESSIER_CATALOG]

    assert len(ids) == 110
    assert set(ids) == {f"M{n}" for n in range(1, 111)}


def test_messier_catalog__coordinates_and_types_are_valid() -> None:
    for obj in MESSIER_CATALOG:
        assert 0.0 <= obj.ra_deg < 360.0
        assert -90.0 <= obj.dec_deg <= 90.0
        assert isinstance(obj.object_type, ObjectType)
        assert obj.constellation


def test_find_object__is_case_insensitive() -> None:
    m42 = find_object(MESSIER_CATALOG, "m42")

    assert m42.name == "Orion Nebula"
    assert m42.object_type is ObjectType.EMISSION_NEBULA
    assert m42.constellation == "Orion"


def test_find_object__with_unknown_id__raises_key_error() -> None:
    with pytest.raises(KeyError):
        find_object(MESSIER_CATALOG, "M111")


def test_load_catalog__with_duplicate_ids__raises_value_error(tmp_path: Path) -> None:
    path = tmp_path / "dup.csv"
    path.write_text(
        _HEADER
        + "M1,Crab Nebula,83.8221,22.0145,Supernova Remnant,8.4,7.0,Taurus\n"
        + "M1,Again,83.8221,22.0145,Supernova Remnant,8.4,7.0,Taurus\n",
        encoding="utf-8",
    )

    with pytest.raises(ValueError, match="Duplicate"):
        load_catalog(path)


def test_load_catalog__with_unknown_type__raises_value_error(tmp_path: Path) -> None:
    path = tmp_path / "bad.csv"
    path.write_text(_HEADER + "M1,Crab Nebula,83.8221,22.0145,Comet,8.4,7.0,Taurus\n", encoding="utf-8")

    with pytest.raises(ValueError):
        load_catalog(path)


def test_load_catalog__with_custom_file__keeps_file_order(tmp_path: Path) -> None:
    path = tmp_path / "mini.csv"
    path.write_text(
        _HEADER
        + "M45,Pleiades,56.85,24.1167,Open Cluster,1.6,110.0,Taurus\n"
        + "M31,Andromeda Galaxy,10.6847,41.2692,Spiral Galaxy,3.4,178.0,Andromeda\n",
        encoding="utf-8",
    )

    catalog = load_catalog(path)

    assert [obj.messier_id for obj in catalog] == ["M45", "M31"]
    assert catalog[1].magnitude == 3.4
