# popup_placer/core/mapview.py
"""
In-memory map view: a CandidateSource over a list of point features with a
Web Mercator camera (center, zoom, viewport size in px).
Stands in for the map engine in the CLI, viewer and tests.
"""

from __future__ import annotations

import math
from typing import Any, Iterable, Mapping, Sequence

import numpy as np
import shapely

from popup_placer.core.config import (
    DEFAULT_CENTER_LONLAT,
    DEFAULT_VIEWPORT_PX,
    DEFAULT_ZOOM,
    MAX_LATITUDE,
    MAX_ZOOM,
    MIN_ZOOM,
    TILE_SIZE_PX,
)
from popup_placer.core.geometry import viewport_box
from popup_placer.core.source import point_lonlat


def _mercator_xy(lon: np.ndarray, lat: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    """Normalized Web Mercator coordinates in [0, 1] (y grows southward)."""
    lat = np.clip(lat, -MAX_LATITUDE, MAX_LATITUDE)
    mx = (lon + 180.0) / 360.0
    lat_rad = np.radians(lat)
    my = (1.0 - np.log(np.tan(np.pi / 4.0 + lat_rad / 2.0)) / np.pi) / 2.0
    return mx, my


class StaticMapView:
    """
    Camera over a fixed set of features. query_rendered_features returns None
    until ready is True, like a map whose style has not loaded.
    """

    def __init__(
        self,
        features: Iterable[Mapping[str, Any]] = (),
        width_px: int = DEFAULT_VIEWPORT_PX[0],
        height_px: int = DEFAULT_VIEWPORT_PX[1],
        center: tuple[float, float] = DEFAULT_CENTER_LONLAT,
        zoom: float = DEFAULT_ZOOM,
        ready: bool = True,
    ) -> None:
        if width_px <= 0 or height_px <= 0:
            raise ValueError(f"Viewport must be positive, got {width_px}x{height_px}")
        self.width_px = int(width_px)
        self.height_px = int(height_px)
        self.center = (float(center[0]), float(center[1]))
        self.zoom = float(np.clip(zoom, MIN_ZOOM, MAX_ZOOM))
        self.ready = ready
        self._features: list[Mapping[str, Any]] = []
        self.add_features(features)

    # ----- features -----

    @property
    def features(self) -> list[Mapping[str, Any]]:
        return list(self._features)

    def add_features(self, features: Iterable[Mapping[str, Any]]) -> None:
        self._features.extend(features)

    def clear_features(self) -> None:
        self._features = []

    # ----- projection -----

    @property
    def world_size_px(self) -> float:
        return TILE_SIZE_PX * (2.0 ** self.zoom)

    def project_many(self, lonlat: np.ndarray) -> np.ndarray:
        """(N, 2) lon/lat -> (N, 2) screen px."""
        lonlat = np.asarray(lonlat, dtype=float).reshape(-1, 2)
        mx, my = _mercator_xy(lonlat[:, 0], lonlat[:, 1])
        cmx, cmy = _mercator_xy(np.array([self.center[0]]), np.array([self.center[1]]))
        world = self.world_size_px
        x = (mx - cmx[0]) * world + self.width_px / 2.0
        y = (my - cmy[0]) * world + self.height_px / 2.0
        return np.column_stack([x, y])

    def project(self, lon: float, lat: float) -> tuple[float, float]:
        xy = self.project_many(np.array([[lon, lat]]))[0]
        return (float(xy[0]), float(xy[1]))

    def unproject(self, x: float, y: float) -> tuple[float, float]:
        """Screen px -> (lon, lat)."""
        cmx, cmy = _mercator_xy(np.array([self.center[0]]), np.array([self.center[1]]))
        world = self.world_size_px
        mx = (x - self.width_px / 2.0) / world + float(cmx[0])
        my = (y - self.height_px / 2.0) / world + float(cmy[0])
        lon = mx * 360.0 - 180.0
        lat = math.degrees(math.atan(math.sinh(math.pi * (1.0 - 2.0 * my))))
        return (lon, max(-MAX_LATITUDE, min(MAX_LATITUDE, lat)))

    # ----- camera -----

    def jump_to(self, lon: float, lat: float, zoom: float | None = None) -> None:
        self.center = (float(lon), float(max(-MAX_LATITUDE, min(MAX_LATITUDE, lat))))
        if zoom is not None:
            self.zoom = float(np.clip(zoom, MIN_ZOOM, MAX_ZOOM))

    def pan_by(self, dx_px: float, dy_px: float) -> None:
        """Move the camera by (dx, dy) screen px; content moves the opposite way."""
        lon, lat = self.unproject(self.width_px / 2.0 + dx_px, self.height_px / 2.0 + dy_px)
        self.jump_to(lon, lat)

    def zoom_by(self, delta: float) -> None:
        self.zoom = float(np.clip(self.zoom + delta, MIN_ZOOM, MAX_ZOOM))

    # ----- CandidateSource -----

    def query_rendered_features(
        self, layers: Sequence[str] | None = None
    ) -> list[Mapping[str, Any]] | None:
        """
        Features (from layers, if given) whose point is inside the viewport, in
        insertion order. Features without a readable point, non-mappings included,
        are passed through unfiltered; deciding what to do with them is the
        consumer's job.
        """
        if not self.ready:
            return None
        pool = [
            f for f in self._features
            if not isinstance(f, Mapping) or layers is None or f.get("layer") in layers
        ]
        if not pool:
            return []
        lonlats = [point_lonlat(f.get("geometry")) if isinstance(f, Mapping) else None for f in pool]
        idx = [i for i, ll in enumerate(lonlats) if ll is not None]
        visible = np.ones(len(pool), dtype=bool)
        if idx:
            xy = self.project_many(np.array([lonlats[i] for i in idx]))
            inside = shapely.covers(viewport_box(self.width_px, self.height_px), shapely.points(xy))
            visible[idx] = inside
        return [f for f, keep in zip(pool, visible) if keep]
