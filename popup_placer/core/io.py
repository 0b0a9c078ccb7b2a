# popup_placer/core/io.py
"""
Load point features from a GeoJSON FeatureCollection.
Non-point geometries are skipped; geometry is validated with shapely.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from shapely.errors import GeometryTypeError, ShapelyError
from shapely.geometry import Point, mapping, shape

logger = logging.getLogger(__name__)


def _resolve_path(path: str | Path, repo_root: Path | None) -> Path:
    """Resolve path; if relative, against repo_root (or cwd if repo_root is None)."""
    p = Path(path)
    if not p.is_absolute() and repo_root is not None:
        p = repo_root / p
    return p.resolve()


def load_geojson(path: str | Path, repo_root: Path | None = None) -> dict[str, Any]:
    """
    Read a GeoJSON FeatureCollection from a file.
    Raises FileNotFoundError if missing, ValueError if not a FeatureCollection.
    """
    resolved = _resolve_path(path, repo_root)
    if not resolved.exists():
        raise FileNotFoundError(f"Features file not found: {resolved}")
    try:
        data = json.loads(resolved.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ValueError(f"Features file is not valid JSON: {resolved}: {e}") from e
    if not isinstance(data, dict) or data.get("type") != "FeatureCollection":
        raise ValueError(f"Features file is not a GeoJSON FeatureCollection: {resolved}")
    if not isinstance(data.get("features"), list):
        raise ValueError(f"FeatureCollection has no features list: {resolved}")
    return data


def _feature_id(raw: dict[str, Any]) -> Any:
    """Top-level id, else a numeric properties.id, else None."""
    if raw.get("id") is not None:
        return raw["id"]
    pid = (raw.get("properties") or {}).get("id")
    if isinstance(pid, (int, float)) and not isinstance(pid, bool):
        return pid
    return None


def normalize_feature(raw: dict[str, Any], layer: str | None = None) -> dict[str, Any] | None:
    """
    Raw GeoJSON feature -> feature dict for StaticMapView, or None if it is not a point.
    Layer comes from the argument, else properties.layer.
    """
    geom_raw = raw.get("geometry")
    if not geom_raw:
        return None
    try:
        geom = shape(geom_raw)
    except (GeometryTypeError, ShapelyError, KeyError, TypeError, ValueError) as e:
        logger.warning("Skipping feature with unreadable geometry: %s", e)
        return None
    if not isinstance(geom, Point) or geom.is_empty:
        return None
    props = dict(raw.get("properties") or {})
    return {
        "id": _feature_id(raw),
        "layer": layer if layer is not None else props.get("layer"),
        "geometry": mapping(geom),
        "properties": props,
    }


def load_features(
    path: str | Path,
    layer: str | None = None,
    repo_root: Path | None = None,
) -> list[dict[str, Any]]:
    """Load point features from a FeatureCollection file, in file order."""
    data = load_geojson(path, repo_root)
    out: list[dict[str, Any]] = []
    skipped = 0
    for raw in data["features"]:
        if not isinstance(raw, dict):
            skipped += 1
            continue
        feature = normalize_feature(raw, layer=layer)
        if feature is None:
            skipped += 1
            continue
        out.append(feature)
    if skipped:
        logger.info("Skipped %d non-point features from %s", skipped, path)
    return out


def write_features(path: str | Path, features: list[dict[str, Any]]) -> Path:
    """Write feature dicts as a FeatureCollection (layer stored in properties)."""
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    collection = {
        "type": "FeatureCollection",
        "features": [
            {
                "type": "Feature",
                "id": f.get("id"),
                "geometry": f.get("geometry"),
                "properties": {**(f.get("properties") or {}), "layer": f.get("layer")},
            }
            for f in features
        ],
    }
    p.write_text(json.dumps(collection, indent=2), encoding="utf-8")
    return p
