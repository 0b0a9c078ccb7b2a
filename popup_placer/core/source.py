# popup_placer/core/source.py
"""
Candidate source boundary: what the engine needs from the map engine, and
normalization of its raw GeoJSON-like features into Candidates.
"""

from __future__ import annotations

import math
from typing import Any, Mapping, Protocol, Sequence

from popup_placer.core.types import Candidate


class CandidateSource(Protocol):
    """Map engine seen from the popup engine. Both calls are synchronous."""

    def query_rendered_features(
        self, layers: Sequence[str] | None = None
    ) -> list[Mapping[str, Any]] | None:
        """Visible point features (optionally only from layers); None if the view is not ready."""
        ...

    def project(self, lon: float, lat: float) -> tuple[float, float]:
        """Screen px of a geographic coordinate under the current viewport."""
        ...


def _as_int_id(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and math.isfinite(value) and value.is_integer():
        return int(value)
    return None


def _as_finite(value: Any) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    f = float(value)
    return f if math.isfinite(f) else None


def parse_rank(value: Any) -> float:
    """Numeric rank, or 0.0 when absent or unusable (0.0 means unranked)."""
    rank = _as_finite(value)
    return rank if rank is not None else 0.0


def point_lonlat(geometry: Any) -> tuple[float, float] | None:
    """(lon, lat) of a GeoJSON Point geometry mapping, or None."""
    if not isinstance(geometry, Mapping) or geometry.get("type") != "Point":
        return None
    coords = geometry.get("coordinates")
    if not isinstance(coords, Sequence) or isinstance(coords, str) or len(coords) < 2:
        return None
    lon, lat = _as_finite(coords[0]), _as_finite(coords[1])
    if lon is None or lat is None:
        return None
    return (lon, lat)


def candidate_from_feature(feature: Any) -> Candidate | None:
    """
    Normalize a raw feature into a Candidate. Returns None when the feature has no
    usable id or point coordinate; a missing rank is not malformed (rank 0.0).
    """
    if not isinstance(feature, Mapping):
        return None
    fid = _as_int_id(feature.get("id"))
    if fid is None:
        return None
    lonlat = point_lonlat(feature.get("geometry"))
    if lonlat is None:
        return None
    props = feature.get("properties") or {}
    if not isinstance(props, Mapping):
        props = {}
    cls = props.get("class")
    return Candidate(
        id=fid,
        rank=parse_rank(props.get("rank")),
        lon=lonlat[0],
        lat=lonlat[1],
        feature_class=cls if isinstance(cls, str) else None,
        layer=feature.get("layer") if isinstance(feature.get("layer"), str) else None,
        properties=dict(props),
    )
