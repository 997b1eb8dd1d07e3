"""Tests for the ``messier-tonight`` command line entry point."""

from __future__ import annotations

from pathlib import Path

from messiertonight.cli import main
from messiertonight.images import JsonFileCache, load_last_location


def test_main__with_coordinates__prints_timeline_and_saves_location(capsys) -> None:
    code = main(["--lat", "51.5074", "--lon", "-0.1278", "--name", "London", "--date", "2024-01-05"])

    out = capsys.readouterr().out
    assert code == 0
    assert "Date: 2024-01-05" in out
    assert "(London)" in out
    assert "Objects" in out
    saved = load_last_location(JsonFileCache())
    assert saved is not None
    assert saved.name == "London"
    assert saved.timezone_name == "Europe/London"


def test_main__without_coordinates__reuses_saved_location(capsys) -> None:
    main(["--lat", "51.5074", "--lon", "-0.1278", "--name", "London", "--date", "2024-01-05"])
    capsys.readouterr()

    code = main(["--date", "2024-01-05"])

    assert code == 0
    assert "(London)" in capsys.readouterr().out


def test_main__without_coordinates_or_saved_location__fails(capsys) -> None:
    code = main(["--date", "2024-01-05"])

    assert code == 2
    assert "--lat" in capsys.readouterr().err


def test_main__out_of_range__fails(capsys) -> None:
    assert main(["--lat", "100", "--lon", "0"]) == 2
    assert "Latitude out of range" in capsys.readouterr().err


def test_main__with_png__writes_chart(tmp_path: Path, capsys) -> None:
    png = tmp_path / "chart.png"

    code = main(["--lat", "51.5074", "--lon", "-0.1278", "--date", "2024-01-05", "--png", str(png)])

    assert code == 0
    assert png.exists()
    assert f"Saved: {png}" in capsys.readouterr().out


def test_main__no_darkness_with_fallback__still_lists_hours(capsys) -> None:
    code = main(["--lat", "51.5074", "--lon", "-0.1278", "--date", "2024-06-21", "--fallback"])

    out = capsys.readouterr().out
    assert code == 0
    assert "No astronomical dark window" in out
    assert "18:00 —" in out


def test_main__malformed_date__fails_without_saving(capsys) -> None:
    code = main(["--lat", "51.5", "--lon", "0", "--date", "05/01/2024"])

    assert code == 2
    assert "does not match format" in capsys.readouterr().err
    assert load_last_location(JsonFileCache()) is None


def test_main__unknown_timezone__fails(capsys) -> None:
    code = main(["--lat", "51.5", "--lon", "0", "--tz", "Mars/Olympus", "--date", "2024-01-05"])

    assert code == 2
    assert "Unknown timezone: Mars/Olympus" in capsys.readouterr().err
