# popup_placer/core/session.py
"""
Drive a PopupManager over a sequence of camera moves on a StaticMapView and
record every frame.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable

import numpy as np

from popup_placer.core.engine import PopupManager
from popup_placer.core.mapview import StaticMapView
from popup_placer.core.popup_layer import PopupLayer
from popup_placer.core.source import point_lonlat
from popup_placer.core.types import PopupStatus, UpdateStats


@dataclass(frozen=True)
class Move:
    """Camera change before a frame: pan (px) then zoom delta."""
    dx_px: float = 0.0
    dy_px: float = 0.0
    dzoom: float = 0.0


@dataclass
class FrameRecord:
    index: int
    center: tuple[float, float]
    zoom: float
    status: PopupStatus | None
    stats: UpdateStats | None


def parse_moves(s: str) -> list[Move]:
    """
    Parse moves like '40,0;40,0;0,0,0.5' (dx,dy[,dzoom] separated by ';').
    Malformed entries are skipped.
    """
    out: list[Move] = []
    for part in (s or "").split(";"):
        part = part.strip()
        if not part:
            continue
        try:
            values = [float(v) for v in part.split(",")]
        except ValueError:
            continue
        if len(values) == 2:
            out.append(Move(values[0], values[1]))
        elif len(values) == 3:
            out.append(Move(values[0], values[1], values[2]))
    return out


def straight_pan(n_frames: int, dx_px: float, dy_px: float = 0.0) -> list[Move]:
    """First frame at the initial camera, then n_frames - 1 equal pans."""
    if n_frames <= 0:
        return []
    return [Move()] + [Move(dx_px, dy_px) for _ in range(n_frames - 1)]


def visible_points_xy(view: StaticMapView, layers: tuple[str, ...] | None = None) -> np.ndarray:
    """(N, 2) screen px of the features the view currently renders."""
    features = view.query_rendered_features(layers) or []
    lonlats = [ll for ll in (point_lonlat(f.get("geometry")) for f in features) if ll is not None]
    if not lonlats:
        return np.zeros((0, 2))
    return view.project_many(np.array(lonlats))


def run_session(
    manager: PopupManager,
    view: StaticMapView,
    moves: list[Move],
    layer: PopupLayer[Any] | None = None,
    on_frame: Callable[[FrameRecord, StaticMapView], None] | None = None,
) -> list[FrameRecord]:
    """
    Apply each move to view, update manager, feed layer; one record per move.
    on_frame runs after each update, while the view still shows that frame.
    """
    frames: list[FrameRecord] = []
    for i, move in enumerate(moves):
        if move.dx_px or move.dy_px:
            view.pan_by(move.dx_px, move.dy_px)
        if move.dzoom:
            view.zoom_by(move.dzoom)
        status = manager.update()
        if layer is not None:
            layer.apply(status)
        record = FrameRecord(
            index=i,
            center=view.center,
            zoom=view.zoom,
            status=status,
            stats=manager.last_stats if status is not None else None,
        )
        frames.append(record)
        if on_frame is not None:
            on_frame(record, view)
    return frames
