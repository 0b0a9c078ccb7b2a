# popup_placer/core/types.py
"""
Dataclasses for candidates, placements, diff status and engine options.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Literal

from popup_placer.core.config import (
    DEFAULT_POPUP_ANCHOR,
    DEFAULT_POPUP_SIZE_PX,
    POPUP_ANCHORS,
)


PopupAnchor = Literal["center", "top", "bottom", "left", "right"]


@dataclass(frozen=True)
class Candidate:
    """A visible point feature eligible for a popup. Lower rank = higher priority."""
    id: int
    rank: float
    lon: float
    lat: float
    feature_class: str | None = None
    layer: str | None = None
    properties: dict[str, Any] = field(default_factory=dict, compare=False, hash=False)


@dataclass(frozen=True)
class Placement:
    """
    A popup box in screen px. position is the top-left corner (y grows downward),
    size is (width, height). feature points back to the originating candidate.
    """
    id: int
    position: tuple[float, float]
    size: tuple[float, float]
    feature: Candidate

    @property
    def bounds(self) -> tuple[float, float, float, float]:
        """Return (minx, miny, maxx, maxy)."""
        x, y = self.position
        w, h = self.size
        return (x, y, x + w, y + h)


@dataclass
class PopupStatus:
    """
    Diff of one update against the previous one, each mapping id -> Placement.
    removed carries the placement as it was last shown.
    """
    new: dict[int, Placement] = field(default_factory=dict)
    updated: dict[int, Placement] = field(default_factory=dict)
    removed: dict[int, Placement] = field(default_factory=dict)

    def present(self) -> dict[int, Placement]:
        """Accepted set of this update (new and updated)."""
        out = dict(self.new)
        out.update(self.updated)
        return out


@dataclass(frozen=True)
class UpdateStats:
    """Counts of what happened to the queried features during one update."""
    n_queried: int = 0
    n_malformed: int = 0
    n_unranked: int = 0
    n_filtered_class: int = 0
    n_capped: int = 0
    n_collided: int = 0
    n_duplicate: int = 0
    n_accepted: int = 0


@dataclass(frozen=True)
class PopupManagerOptions:
    """
    Construction-time engine options. Immutable.
    layers: style layers to query (None = all). classes: feature classes to keep
    (None = all, empty = none). max_count: cap on shown popups (None = no cap).
    """
    layers: tuple[str, ...] | None = None
    classes: tuple[str, ...] | None = None
    popup_size: tuple[float, float] = DEFAULT_POPUP_SIZE_PX
    popup_anchor: PopupAnchor = DEFAULT_POPUP_ANCHOR  # type: ignore[assignment]
    max_count: int | None = None

    def __post_init__(self) -> None:
        if self.layers is not None:
            object.__setattr__(self, "layers", tuple(self.layers))
        if self.classes is not None:
            object.__setattr__(self, "classes", tuple(self.classes))
        if len(self.popup_size) != 2:
            raise ValueError(f"popup_size must be (width, height), got {self.popup_size!r}")
        w, h = (float(v) for v in self.popup_size)
        if not (math.isfinite(w) and math.isfinite(h)) or w <= 0 or h <= 0:
            raise ValueError(f"popup_size must be positive and finite, got {self.popup_size!r}")
        object.__setattr__(self, "popup_size", (w, h))
        if self.popup_anchor not in POPUP_ANCHORS:
            raise ValueError(f"popup_anchor must be one of {POPUP_ANCHORS}, got {self.popup_anchor!r}")
        if self.max_count is not None:
            if isinstance(self.max_count, bool) or not isinstance(self.max_count, int) or self.max_count < 1:
                raise ValueError(f"max_count must be a positive int or None, got {self.max_count!r}")
