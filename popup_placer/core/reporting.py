# popup_placer/core/reporting.py
"""
Create reports/<run_name>/ and write frames.json (per-frame diffs), popups.json
(weather popups shown after the last frame) and run_metadata.json.
"""

from __future__ import annotations

import json
from dataclasses import asdict
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable

from popup_placer.core.config import (
    POPUP_VERTICAL_NUDGE_PX,
    REPORTS_DIR,
    SEED,
    TILE_SIZE_PX,
)
from popup_placer.core.session import FrameRecord
from popup_placer.core.types import Placement, PopupManagerOptions, PopupStatus
from popup_placer.core.weather import PopupHandle

SCHEMA_VERSION = "1.0"


def placement_to_dict(placement: Placement) -> dict:
    """One popup: id, box, and the feature it belongs to."""
    f = placement.feature
    return {
        "id": placement.id,
        "position": {"x": float(placement.position[0]), "y": float(placement.position[1])},
        "size": {"width": float(placement.size[0]), "height": float(placement.size[1])},
        "feature": {
            "rank": f.rank,
            "class": f.feature_class,
            "layer": f.layer,
            "lonlat": [f.lon, f.lat],
            "name": f.properties.get("name"),
        },
    }


def status_to_dict(status: PopupStatus) -> dict:
    """new/updated/removed as lists of placement dicts, in engine order."""
    return {
        "new": [placement_to_dict(p) for p in status.new.values()],
        "updated": [placement_to_dict(p) for p in status.updated.values()],
        "removed": [placement_to_dict(p) for p in status.removed.values()],
    }


def popup_handle_to_dict(handle: PopupHandle) -> dict:
    return {
        "id": handle.id,
        "name": handle.name,
        "translate": {"x": float(handle.x), "y": float(handle.y)},
        "icon": handle.content.icon,
        "temperature": handle.content.temperature_text,
    }


def frame_to_dict(frame: FrameRecord) -> dict:
    """One frame; status and stats are null when the source was not ready."""
    return {
        "index": frame.index,
        "camera": {"center": list(frame.center), "zoom": frame.zoom},
        "status": status_to_dict(frame.status) if frame.status is not None else None,
        "stats": asdict(frame.stats) if frame.stats is not None else None,
    }


def options_to_dict(options: PopupManagerOptions) -> dict:
    return {
        "layers": list(options.layers) if options.layers is not None else None,
        "classes": list(options.classes) if options.classes is not None else None,
        "popup_size": list(options.popup_size),
        "popup_anchor": options.popup_anchor,
        "max_count": options.max_count,
    }


def run_metadata_dict(
    run_name: str,
    features_source: str,
    options: PopupManagerOptions,
    viewport_px: tuple[int, int],
    n_frames: int,
) -> dict:
    """Timestamp and config snapshot for run_metadata.json."""
    return {
        "schema_version": SCHEMA_VERSION,
        "run_name": run_name,
        "timestamp_utc": datetime.now(timezone.utc).isoformat(),
        "features_source": features_source,
        "viewport_px": list(viewport_px),
        "n_frames": n_frames,
        "options": options_to_dict(options),
        "config": {
            "TILE_SIZE_PX": TILE_SIZE_PX,
            "POPUP_VERTICAL_NUDGE_PX": POPUP_VERTICAL_NUDGE_PX,
            "SEED": SEED,
        },
    }


def ensure_report_dir(
    repo_root: Path,
    run_name: str,
    output_dir: str | None = None,
) -> Path:
    """Create output_dir/<run_name>/ under repo_root; return path. Default output_dir from config."""
    base = output_dir if output_dir is not None else REPORTS_DIR
    out = (repo_root / base).resolve() / run_name
    out.mkdir(parents=True, exist_ok=True)
    return out


def write_frames_json(report_dir: Path, frames: list[FrameRecord]) -> Path:
    """Write frames.json to report_dir. Returns path to file."""
    path = report_dir / "frames.json"
    data = {
        "schema_version": SCHEMA_VERSION,
        "frames": [frame_to_dict(f) for f in frames],
    }
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")
    return path


def write_run_metadata_json(
    report_dir: Path,
    run_name: str,
    features_source: str,
    options: PopupManagerOptions,
    viewport_px: tuple[int, int],
    n_frames: int,
) -> Path:
    """Write run_metadata.json to report_dir."""
    path = report_dir / "run_metadata.json"
    data = run_metadata_dict(run_name, features_source, options, viewport_px, n_frames)
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")
    return path


def write_popups_json(report_dir: Path, handles: Iterable[PopupHandle]) -> Path:
    """Write popups.json (shown popups, by id) to report_dir."""
    path = report_dir / "popups.json"
    data = {
        "schema_version": SCHEMA_VERSION,
        "popups": [popup_handle_to_dict(h) for h in sorted(handles, key=lambda h: h.id)],
    }
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")
    return path
