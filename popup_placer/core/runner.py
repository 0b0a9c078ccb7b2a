# popup_placer/core/runner.py
"""
CLI entrypoint: load places (GeoJSON or synthetic), set the camera, run a pan/zoom
session through the popup engine and its weather popup layer, write frames.json,
popups.json, run_metadata.json and one PNG per frame.
"""

from __future__ import annotations

import argparse
import logging
from datetime import datetime
from pathlib import Path

from popup_placer.core.config import (
    APP_CLASSES,
    APP_LAYERS,
    APP_POPUP_ANCHOR,
    APP_POPUP_SIZE_PX,
    DEFAULT_CENTER_LONLAT,
    DEFAULT_FEATURES_PATH,
    DEFAULT_N_FRAMES,
    DEFAULT_PAN_STEP_PX,
    DEFAULT_VIEWPORT_PX,
    DEFAULT_ZOOM,
    LOG_LEVEL,
    POPUP_ANCHORS,
    REPORTS_DIR,
    SEED,
    SYNTHETIC_N_PLACES,
)
from popup_placer.core.engine import PopupManager
from popup_placer.core.io import load_features
from popup_placer.core.mapview import StaticMapView
from popup_placer.core.render import render_frame
from popup_placer.core.reporting import (
    ensure_report_dir,
    write_frames_json,
    write_popups_json,
    write_run_metadata_json,
)
from popup_placer.core.session import (
    FrameRecord,
    Move,
    parse_moves,
    run_session,
    straight_pan,
    visible_points_xy,
)
from popup_placer.core.synthetic import SyntheticWeather, synthetic_places
from popup_placer.core.types import PopupManagerOptions
from popup_placer.core.weather import WeatherSampler, weather_popup_layer

logger = logging.getLogger(__name__)


def _csv_or_none(s: str | None) -> tuple[str, ...] | None:
    """'a,b' -> ('a', 'b'); '' or None -> None; 'none' -> () (keep nothing)."""
    if s is None or not s.strip():
        return None
    if s.strip().lower() == "none":
        return ()
    return tuple(p.strip() for p in s.split(",") if p.strip())


def _parse_size(s: str) -> tuple[float, float]:
    parts = [p.strip() for p in s.lower().replace("x", ",").split(",") if p.strip()]
    if len(parts) != 2:
        raise argparse.ArgumentTypeError(f"Size must be 'WIDTHxHEIGHT', got {s!r}")
    try:
        return (float(parts[0]), float(parts[1]))
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"Size must be numeric, got {s!r}") from e


def _parse_max_count(s: str) -> int | None:
    """'0' = no cap, like the viewer; negatives are rejected."""
    try:
        n = int(s)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"Max must be an integer, got {s!r}") from e
    if n < 0:
        raise argparse.ArgumentTypeError(f"Max must be >= 0, got {s!r}")
    return n or None


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Place non-overlapping popups over ranked map places.")
    p.add_argument("--features", type=str, default=DEFAULT_FEATURES_PATH, help="GeoJSON FeatureCollection of places (default: synthetic)")
    p.add_argument("--n-places", type=int, default=SYNTHETIC_N_PLACES, dest="n_places", help="Synthetic places when no --features")
    p.add_argument("--seed", type=int, default=SEED, help="Random seed for synthetic places")
    p.add_argument("--layers", type=str, default=",".join(APP_LAYERS), help="Comma-separated layers ('' = all)")
    p.add_argument("--classes", type=str, default=",".join(APP_CLASSES), help="Comma-separated classes ('' = all, 'none' = keep nothing)")
    p.add_argument("--popup-size", type=_parse_size, default=APP_POPUP_SIZE_PX, dest="popup_size", help="Popup size 'WxH' px")
    p.add_argument("--anchor", type=str, default=APP_POPUP_ANCHOR, choices=POPUP_ANCHORS, help="Popup anchor")
    p.add_argument("--max", type=_parse_max_count, default=None, dest="max_count", help="Max popups shown at once (0 = no cap)")
    p.add_argument("--viewport", type=_parse_size, default=DEFAULT_VIEWPORT_PX, help="Viewport 'WxH' px")
    p.add_argument("--center", type=str, default=f"{DEFAULT_CENTER_LONLAT[0]},{DEFAULT_CENTER_LONLAT[1]}", help="Camera center 'lon,lat'")
    p.add_argument("--zoom", type=float, default=DEFAULT_ZOOM, help="Camera zoom")
    p.add_argument("--frames", type=int, default=DEFAULT_N_FRAMES, help="Frames for a straight pan")
    p.add_argument("--pan-step", type=float, default=DEFAULT_PAN_STEP_PX, dest="pan_step", help="Pan per frame (px, eastward)")
    p.add_argument("--moves", type=str, default="", help="Explicit moves 'dx,dy[,dzoom];...' (overrides --frames)")
    p.add_argument("--run-name", type=str, default="run", dest="run_name", help="Reports subdir name")
    p.add_argument("--output-dir", type=str, default=REPORTS_DIR, dest="output_dir", help="Output directory (repo-relative)")
    p.add_argument("--repo-root", type=str, default=None, dest="repo_root", help="Repo root (default: cwd)")
    p.add_argument("--when", type=datetime.fromisoformat, default=None, help="Popup time, ISO 8601 (default: now, UTC)")
    p.add_argument("--no-render", action="store_true", dest="no_render", help="Skip PNG rendering")
    return p.parse_args(argv)


def _parse_center(s: str) -> tuple[float, float]:
    parts = [p.strip() for p in s.split(",")]
    if len(parts) != 2:
        raise ValueError(f"Center must be 'lon,lat', got {s!r}")
    return (float(parts[0]), float(parts[1]))


def run(
    run_name: str,
    features: list[dict],
    features_source: str,
    options: PopupManagerOptions,
    moves: list[Move],
    repo_root: Path,
    viewport_px: tuple[int, int] = DEFAULT_VIEWPORT_PX,
    center: tuple[float, float] = DEFAULT_CENTER_LONLAT,
    zoom: float = DEFAULT_ZOOM,
    output_dir: str | None = None,
    render: bool = True,
    sampler: WeatherSampler | None = None,
    when: datetime | None = None,
) -> tuple[Path, list[FrameRecord]]:
    """
    Run one session and write its report directory. Returns (report_dir, frames).
    Each diff also drives a weather popup layer (sampler defaults to SyntheticWeather).
    """
    view = StaticMapView(features, width_px=viewport_px[0], height_px=viewport_px[1], center=center, zoom=zoom)
    manager = PopupManager(view, options)
    layer = weather_popup_layer(sampler if sampler is not None else SyntheticWeather(), when=when)
    report_dir = ensure_report_dir(repo_root, run_name, output_dir=output_dir)

    def _render(frame: FrameRecord, v: StaticMapView) -> None:
        if not render:
            return
        title = f"frame {frame.index}  zoom {frame.zoom:.2f}"
        render_frame(
            frame.status,
            visible_points_xy(v, options.layers),
            v.width_px,
            v.height_px,
            report_dir / f"frame_{frame.index:03d}.png",
            title=title,
        )

    frames = run_session(manager, view, moves, layer=layer, on_frame=_render)
    write_frames_json(report_dir, frames)
    write_popups_json(report_dir, layer.handles.values())
    write_run_metadata_json(report_dir, run_name, features_source, options, viewport_px, len(frames))
    for f in frames:
        if f.stats is not None:
            logger.info(
                "frame %d: %d queried, %d accepted, %d collided, %d capped",
                f.index, f.stats.n_queried, f.stats.n_accepted, f.stats.n_collided, f.stats.n_capped,
            )
    return report_dir, frames


def main(argv: list[str] | None = None) -> None:
    logging.basicConfig(level=getattr(logging, LOG_LEVEL, logging.INFO))
    args = _parse_args(argv)
    repo_root = Path(args.repo_root).resolve() if args.repo_root else Path.cwd().resolve()

    if args.features:
        features = load_features(args.features, repo_root=repo_root)
        features_source = args.features
    else:
        features = synthetic_places(args.n_places, seed=args.seed)
        features_source = f"synthetic:n={args.n_places},seed={args.seed}"

    options = PopupManagerOptions(
        layers=_csv_or_none(args.layers),
        classes=_csv_or_none(args.classes),
        popup_size=args.popup_size,
        popup_anchor=args.anchor,
        max_count=args.max_count,
    )
    moves = parse_moves(args.moves) if args.moves else straight_pan(args.frames, args.pan_step)
    viewport = (int(args.viewport[0]), int(args.viewport[1]))

    report_dir, frames = run(
        args.run_name,
        features,
        features_source,
        options,
        moves,
        repo_root,
        viewport_px=viewport,
        center=_parse_center(args.center),
        zoom=args.zoom,
        output_dir=args.output_dir,
        render=not args.no_render,
        sampler=SyntheticWeather(seed=args.seed),
        when=args.when,
    )

    print(report_dir / "frames.json")
    print(report_dir / "popups.json")
    print(report_dir / "run_metadata.json")
    if not args.no_render:
        for f in frames:
            print(report_dir / f"frame_{f.index:03d}.png")


if __name__ == "__main__":
    main()
