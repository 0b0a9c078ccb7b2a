# tests/test_session_reporting.py
"""
Session recording, reports schema, synthetic places, and the CLI run writing a report dir
(frames, weather popups, metadata, PNGs).
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path

import pytest

from popup_placer.core.engine import PopupManager
from popup_placer.core.mapview import StaticMapView
from popup_placer.core.reporting import frame_to_dict, status_to_dict
from popup_placer.core.runner import _parse_args, main, run
from popup_placer.core.session import Move, parse_moves, run_session, straight_pan
from popup_placer.core.synthetic import SyntheticWeather, synthetic_places
from popup_placer.core.types import PopupManagerOptions


def test_synthetic_places_deterministic_and_tiered() -> None:
    a = synthetic_places(100, seed=42)
    b = synthetic_places(100, seed=42)
    assert a == b
    assert [f["id"] for f in a] == list(range(1, 101))
    assert sorted(f["properties"]["rank"] for f in a) == list(range(1, 101))
    tier = {"city": 0, "town": 1, "village": 2}
    by_rank = sorted(a, key=lambda f: f["properties"]["rank"])
    tiers = [tier[f["properties"]["class"]] for f in by_rank]
    assert tiers == sorted(tiers)


def test_synthetic_places_empty() -> None:
    assert synthetic_places(0) == []


def test_parse_moves() -> None:
    assert parse_moves("40,0; 0,-10,0.5;bad;1") == [Move(40, 0), Move(0, -10, 0.5)]
    assert parse_moves("") == []


def test_straight_pan() -> None:
    moves = straight_pan(3, 25.0)
    assert moves == [Move(), Move(25.0, 0.0), Move(25.0, 0.0)]
    assert straight_pan(0, 10.0) == []


def test_session_records_not_ready_frames() -> None:
    view = StaticMapView(synthetic_places(50, seed=1), ready=False)
    manager = PopupManager(view)
    frames = run_session(manager, view, [Move(), Move(10, 0)])
    assert [f.status for f in frames] == [None, None]
    assert frame_to_dict(frames[0])["status"] is None


def test_session_zoom_move() -> None:
    view = StaticMapView(synthetic_places(50, seed=1), zoom=5.0)
    manager = PopupManager(view)
    frames = run_session(manager, view, [Move(), Move(dzoom=1.0)])
    assert frames[1].zoom == pytest.approx(6.0)


def test_status_to_dict_shape() -> None:
    view = StaticMapView(synthetic_places(80, seed=2), center=(2.0, 46.5), zoom=5)
    manager = PopupManager(view, PopupManagerOptions(popup_size=(100, 40)))
    status = manager.update()
    assert status is not None
    data = json.loads(json.dumps(status_to_dict(status)))
    assert set(data) == {"new", "updated", "removed"}
    assert data["new"], "expected popups on first frame"
    first = data["new"][0]
    for key in ("id", "position", "size", "feature"):
        assert key in first
    assert first["size"] == {"width": 100.0, "height": 40.0}
    assert set(first["feature"]) >= {"rank", "class", "layer", "lonlat", "name"}


def test_run_writes_reports_without_render(tmp_path: Path) -> None:
    report_dir, frames = run(
        "t_run",
        synthetic_places(120, seed=3),
        "synthetic",
        PopupManagerOptions(popup_size=(140, 70), popup_anchor="top", max_count=8),
        straight_pan(4, 50.0),
        tmp_path,
        viewport_px=(800, 600),
        center=(2.0, 46.5),
        zoom=5.5,
        render=False,
    )
    assert len(frames) == 4
    data = json.loads((report_dir / "frames.json").read_text(encoding="utf-8"))
    assert data["schema_version"] == "1.0"
    assert len(data["frames"]) == 4
    for f in data["frames"]:
        assert len(f["status"]["new"]) + len(f["status"]["updated"]) <= 8
        assert f["stats"]["n_accepted"] <= 8
    meta = json.loads((report_dir / "run_metadata.json").read_text(encoding="utf-8"))
    assert meta["options"]["max_count"] == 8
    assert meta["options"]["popup_anchor"] == "top"
    assert not list(report_dir.glob("*.png"))


def test_cli_main_renders_frames(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    main([
        "--repo-root", str(tmp_path),
        "--run-name", "cli",
        "--n-places", "60",
        "--frames", "2",
        "--viewport", "320x240",
        "--center", "2.0,46.5",
        "--zoom", "5",
        "--max", "5",
    ])
    report_dir = tmp_path / "reports" / "cli"
    assert (report_dir / "frames.json").exists()
    assert (report_dir / "run_metadata.json").exists()
    assert (report_dir / "popups.json").exists()
    assert (report_dir / "frame_000.png").exists()
    assert (report_dir / "frame_001.png").exists()
    out = capsys.readouterr().out
    assert "frames.json" in out
    assert "popups.json" in out


def test_run_writes_popups_shown_after_last_frame(tmp_path: Path) -> None:
    calls: list[tuple[float, float]] = []

    def sampler(lon: float, lat: float):
        calls.append((lon, lat))
        return SyntheticWeather(seed=1)(lon, lat)

    report_dir, frames = run(
        "t_popups",
        synthetic_places(150, seed=8),
        "synthetic",
        PopupManagerOptions(popup_size=(140, 70), popup_anchor="top"),
        straight_pan(5, 60.0),
        tmp_path,
        viewport_px=(800, 600),
        center=(2.0, 46.5),
        zoom=5.5,
        render=False,
        sampler=sampler,
        when=datetime(2024, 6, 21, 12, tzinfo=timezone.utc),
    )
    data = json.loads((report_dir / "popups.json").read_text(encoding="utf-8"))
    assert data["schema_version"] == "1.0"
    last = frames[-1].status
    assert last is not None
    assert [p["id"] for p in data["popups"]] == sorted(last.present())
    n_new = sum(len(f.status.new) for f in frames if f.status is not None)
    assert len(calls) == n_new
    for p in data["popups"]:
        assert p["icon"].startswith("weather-icons/day-")
        assert p["temperature"].endswith("°")


def test_cli_max_zero_means_no_cap() -> None:
    assert _parse_args(["--max", "0"]).max_count is None
    assert _parse_args(["--max", "3"]).max_count == 3
    assert _parse_args([]).max_count is None


@pytest.mark.parametrize("value", ["-1", "two"])
def test_cli_rejects_bad_max(value: str) -> None:
    with pytest.raises(SystemExit):
        _parse_args(["--max", value])
