# popup_placer/core/render.py
"""
Matplotlib PNG rendering of one frame in screen space: visible candidate points
and new / updated / removed popup boxes.
"""

from __future__ import annotations

import warnings
from pathlib import Path
from typing import BinaryIO

import matplotlib.pyplot as plt
import numpy as np

from popup_placer.core.config import (
    COLOR_NEW,
    COLOR_REMOVED,
    COLOR_UPDATED,
    RENDER_DPI,
)
from popup_placer.core.geometry import placement_box
from popup_placer.core.types import Placement, PopupStatus


def _new_fig(width_px: int, height_px: int) -> tuple[plt.Figure, plt.Axes]:
    fig = plt.figure(
        figsize=(width_px / RENDER_DPI, height_px / RENDER_DPI),
        dpi=RENDER_DPI,
        constrained_layout=False,
    )
    ax = fig.add_axes([0, 0, 1, 1])  # full-canvas axes
    ax.set_xlim(0, width_px)
    ax.set_ylim(height_px, 0)  # screen y grows downward
    ax.set_aspect("equal", adjustable="box")
    ax.axis("off")
    return fig, ax


def _draw_boxes(
    ax: plt.Axes,
    placements: list[Placement],
    color: str,
    linestyle: str = "-",
    fill_alpha: float = 0.25,
    label: str | None = None,
) -> None:
    for i, p in enumerate(placements):
        xy = np.array(placement_box(p).exterior.coords)
        ax.fill(
            xy[:, 0], xy[:, 1],
            facecolor=color if fill_alpha > 0 else "none",
            edgecolor=color,
            linewidth=1,
            linestyle=linestyle,
            alpha=fill_alpha if fill_alpha > 0 else 1.0,
            label=label if i == 0 else None,
        )
        name = p.feature.properties.get("name") or str(p.id)
        x, y = p.position
        ax.text(x + 3, y + 3, name, fontsize=7, ha="left", va="top", color="black", zorder=6)


def render_frame(
    status: PopupStatus | None,
    candidates_xy: np.ndarray | None,
    width_px: int,
    height_px: int,
    output: str | Path | BinaryIO,
    title: str | None = None,
) -> None:
    """
    Render one frame to PNG (path or binary file object).
    candidates_xy: (N, 2) screen px of visible features, drawn as dots.
    """
    fig, ax = _new_fig(width_px, height_px)
    ax.add_patch(plt.Rectangle((0, 0), width_px, height_px, facecolor="#f4f1ea", edgecolor="none", zorder=0))

    if candidates_xy is not None and len(candidates_xy):
        pts = np.asarray(candidates_xy, dtype=float).reshape(-1, 2)
        ax.scatter(pts[:, 0], pts[:, 1], s=4, color="dimgray", alpha=0.6, zorder=2)

    if status is not None:
        _draw_boxes(ax, list(status.removed.values()), COLOR_REMOVED, linestyle="--", fill_alpha=0.0, label="removed")
        _draw_boxes(ax, list(status.updated.values()), COLOR_UPDATED, label="updated")
        _draw_boxes(ax, list(status.new.values()), COLOR_NEW, label="new")
        handles, labels = ax.get_legend_handles_labels()
        if handles:
            ax.legend(handles, labels, loc="lower right", fontsize=8)

    if title:
        ax.text(8, 8, title, fontsize=9, ha="left", va="top", color="black", zorder=7)

    with warnings.catch_warnings():
        warnings.filterwarnings("ignore", message=".*constrained_layout.*", category=UserWarning)
        fig.savefig(output, dpi=RENDER_DPI, facecolor="white", format="png")
    plt.close(fig)
