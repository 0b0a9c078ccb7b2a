# popup_placer/core/geometry.py
"""
Screen-space geometry helpers: anchor offsets, popup boxes, closed AABB overlap.
Screen px, origin top-left, y increasing downward.
"""

from __future__ import annotations

from typing import Iterable

from shapely.geometry import Polygon, box

from popup_placer.core.types import Placement


def anchor_offset(anchor: str, size: tuple[float, float]) -> tuple[float, float]:
    """
    Offset added to the projected point to get the popup's top-left corner.
    The anchor names the side of the popup that sits on the point.
    """
    w, h = size
    if anchor == "center":
        return (-w / 2.0, -h / 2.0)
    if anchor == "top":
        return (-w / 2.0, -h)
    if anchor == "bottom":
        return (-w / 2.0, 0.0)
    if anchor == "left":
        return (-w, -h / 2.0)
    if anchor == "right":
        return (0.0, -h)
    raise ValueError(f"Unknown popup anchor: {anchor!r}")


def rects_overlap(
    a: tuple[float, float, float, float],
    b: tuple[float, float, float, float],
) -> bool:
    """
    True unless one (minx, miny, maxx, maxy) box lies strictly left, right,
    above or below the other. Touching edges count as overlap.
    """
    return not (
        b[0] > a[2]
        or b[2] < a[0]
        or b[1] > a[3]
        or b[3] < a[1]
    )


def collides_with_any(placement: Placement, others: Iterable[Placement]) -> bool:
    """True if placement overlaps any of others."""
    bounds = placement.bounds
    for other in others:
        if rects_overlap(bounds, other.bounds):
            return True
    return False


def placement_box(placement: Placement) -> Polygon:
    """Shapely polygon of a popup box (for rendering and reports)."""
    return box(*placement.bounds)


def viewport_box(width_px: float, height_px: float) -> Polygon:
    """Closed screen rectangle [0, width] x [0, height]."""
    return box(0.0, 0.0, float(width_px), float(height_px))
