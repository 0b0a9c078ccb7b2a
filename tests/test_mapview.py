# tests/test_mapview.py
"""
StaticMapView: Web Mercator projection, camera moves, visible feature query.
"""

from __future__ import annotations

import numpy as np
import pytest

from popup_placer.core.config import MAX_ZOOM, TILE_SIZE_PX
from popup_placer.core.engine import PopupManager
from popup_placer.core.mapview import StaticMapView


def _pt(fid: int, lon: float, lat: float, layer: str = "City labels") -> dict:
    return {"id": fid, "layer": layer, "geometry": {"type": "Point", "coordinates": [lon, lat]}, "properties": {"rank": fid}}


def test_center_projects_to_viewport_middle() -> None:
    view = StaticMapView(width_px=800, height_px=600, center=(10.0, 45.0), zoom=6)
    x, y = view.project(10.0, 45.0)
    assert x == pytest.approx(400.0)
    assert y == pytest.approx(300.0)


def test_zoom_zero_world_width() -> None:
    view = StaticMapView(width_px=TILE_SIZE_PX, height_px=TILE_SIZE_PX, center=(0.0, 0.0), zoom=0)
    x_west, _ = view.project(-180.0, 0.0)
    x_east, _ = view.project(180.0, 0.0)
    assert x_east - x_west == pytest.approx(TILE_SIZE_PX)


def test_north_is_up() -> None:
    view = StaticMapView(center=(0.0, 0.0), zoom=3)
    _, y_north = view.project(0.0, 10.0)
    _, y_south = view.project(0.0, -10.0)
    assert y_north < y_south


def test_zoom_in_doubles_distances() -> None:
    view = StaticMapView(center=(0.0, 0.0), zoom=4)
    x1, _ = view.project(1.0, 0.0)
    d1 = x1 - view.width_px / 2
    view.zoom_by(1.0)
    x2, _ = view.project(1.0, 0.0)
    assert (x2 - view.width_px / 2) == pytest.approx(2 * d1)


def test_unproject_inverts_project() -> None:
    view = StaticMapView(width_px=1000, height_px=700, center=(5.0, 50.0), zoom=7.3)
    lon, lat = view.unproject(*view.project(6.2, 49.1))
    assert lon == pytest.approx(6.2, abs=1e-9)
    assert lat == pytest.approx(49.1, abs=1e-9)


def test_pan_by_moves_content_opposite() -> None:
    view = StaticMapView(width_px=800, height_px=600, center=(2.0, 48.0), zoom=8)
    before = np.array(view.project(2.5, 48.2))
    view.pan_by(100, -50)
    after = np.array(view.project(2.5, 48.2))
    assert after - before == pytest.approx([-100.0, 50.0], abs=1e-6)


def test_zoom_clamped() -> None:
    view = StaticMapView(zoom=MAX_ZOOM)
    view.zoom_by(5)
    assert view.zoom == MAX_ZOOM


def test_query_returns_only_visible_in_insertion_order() -> None:
    feats = [_pt(3, 0.1, 0.1), _pt(1, 170.0, 0.0), _pt(2, -0.1, -0.1)]
    view = StaticMapView(feats, width_px=400, height_px=400, center=(0.0, 0.0), zoom=6)
    out = view.query_rendered_features()
    assert out is not None
    assert [f["id"] for f in out] == [3, 2]


def test_query_filters_layers() -> None:
    feats = [_pt(1, 0.0, 0.0, layer="City labels"), _pt(2, 0.01, 0.0, layer="Roads")]
    view = StaticMapView(feats, center=(0.0, 0.0), zoom=6)
    out = view.query_rendered_features(["City labels"])
    assert out is not None
    assert [f["id"] for f in out] == [1]


def test_query_passes_unreadable_features_through() -> None:
    feats = [_pt(1, 0.0, 0.0), {"id": 2, "layer": "City labels", "geometry": None}, None, "junk"]
    view = StaticMapView(feats, center=(0.0, 0.0), zoom=6)
    out = view.query_rendered_features()
    assert out is not None
    assert [f["id"] for f in out[:2]] == [1, 2]
    assert out[2:] == [None, "junk"]
    assert view.query_rendered_features(["City labels"]) == out


def test_engine_skips_non_mapping_features_from_view() -> None:
    view = StaticMapView([_pt(1, 0.0, 0.0), None, "junk"], center=(0.0, 0.0), zoom=6)
    manager = PopupManager(view)
    status = manager.update()
    assert status is not None
    assert set(status.new) == {1}
    assert manager.last_stats is not None
    assert manager.last_stats.n_malformed == 2


def test_not_ready_returns_none() -> None:
    view = StaticMapView([_pt(1, 0.0, 0.0)], ready=False)
    assert view.query_rendered_features() is None
    view.ready = True
    assert view.query_rendered_features() is not None


def test_empty_view() -> None:
    assert StaticMapView().query_rendered_features() == []


def test_invalid_viewport() -> None:
    with pytest.raises(ValueError):
        StaticMapView(width_px=0, height_px=100)
