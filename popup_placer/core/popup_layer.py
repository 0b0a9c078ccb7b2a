# popup_placer/core/popup_layer.py
"""
Caller-side popup layer: keeps one visual handle per shown id and applies each
PopupStatus incrementally (destroy removed, patch updated, create new).
"""

from __future__ import annotations

import logging
from typing import Callable, Generic, TypeVar

from popup_placer.core.config import POPUP_VERTICAL_NUDGE_PX
from popup_placer.core.types import Placement, PopupStatus

logger = logging.getLogger(__name__)

H = TypeVar("H")


def popup_transform(placement: Placement) -> tuple[float, float]:
    """Screen translation at which to draw the popup box."""
    x, y = placement.position
    return (x, y - POPUP_VERTICAL_NUDGE_PX)


class PopupLayer(Generic[H]):
    """
    Handles keyed by popup id. create builds a handle for a new popup, update
    patches an existing handle in place, destroy releases a removed one.
    """

    def __init__(
        self,
        create: Callable[[Placement], H],
        update: Callable[[Placement, H], None],
        destroy: Callable[[H], None] | None = None,
    ) -> None:
        self._create = create
        self._update = update
        self._destroy = destroy
        self.handles: dict[int, H] = {}

    def __len__(self) -> int:
        return len(self.handles)

    def __contains__(self, pid: object) -> bool:
        return pid in self.handles

    def apply(self, status: PopupStatus | None) -> None:
        """Apply one diff. None (source not ready) leaves the layer as is."""
        if status is None:
            return
        for pid in status.removed:
            handle = self.handles.pop(pid, None)
            if handle is not None and self._destroy is not None:
                self._destroy(handle)
        for pid, placement in status.updated.items():
            if pid not in self.handles:
                logger.warning("Popup %s reported updated but has no handle; creating it", pid)
                self.handles[pid] = self._create(placement)
                continue
            self._update(placement, self.handles[pid])
        for pid, placement in status.new.items():
            self.handles[pid] = self._create(placement)

    def clear(self) -> None:
        """Destroy every handle."""
        if self._destroy is not None:
            for handle in self.handles.values():
                self._destroy(handle)
        self.handles = {}
