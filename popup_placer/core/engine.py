# popup_placer/core/engine.py
"""
Popup placement and diff engine.
Ranks visible candidates, greedily accepts non-colliding popup boxes in rank order
(optionally capped), and diffs the accepted ids against the previous update.
"""

from __future__ import annotations

import logging
import math

from popup_placer.core.config import POPUP_ENGINE_DEBUG
from popup_placer.core.error_codes import ADAPTER_UNAVAILABLE, MALFORMED_CANDIDATE
from popup_placer.core.geometry import anchor_offset, collides_with_any
from popup_placer.core.source import CandidateSource, candidate_from_feature
from popup_placer.core.types import (
    Candidate,
    Placement,
    PopupManagerOptions,
    PopupStatus,
    UpdateStats,
)

logger = logging.getLogger(__name__)


def rank_candidates(
    candidates: list[Candidate],
    classes: tuple[str, ...] | None = None,
    max_count: int | None = None,
) -> tuple[list[Candidate], int, int, int]:
    """
    Keep ranked candidates, sort by rank (stable), apply class allow-list, then cap.
    Returns (kept, n_unranked, n_filtered_class, n_capped).
    """
    ranked = [c for c in candidates if c.rank]
    n_unranked = len(candidates) - len(ranked)
    ranked.sort(key=lambda c: c.rank)

    n_filtered_class = 0
    if classes is not None:
        kept = [c for c in ranked if c.feature_class in classes]
        n_filtered_class = len(ranked) - len(kept)
        ranked = kept

    n_capped = 0
    if max_count is not None and len(ranked) > max_count:
        n_capped = len(ranked) - max_count
        ranked = ranked[:max_count]
    return ranked, n_unranked, n_filtered_class, n_capped


class PopupManager:
    """
    Computes which popups to show for the current viewport of a CandidateSource.

    Call update() on every relevant viewport event. The manager remembers the
    accepted set of its last update only, so ids shown on consecutive updates are
    reported as updated and an id is reported removed once, on the first update
    that no longer accepts it. Not re-entrant; the caller serializes calls.
    """

    def __init__(self, source: CandidateSource, options: PopupManagerOptions | None = None) -> None:
        self.source = source
        self.options = options if options is not None else PopupManagerOptions()
        self.anchor_offset = anchor_offset(self.options.popup_anchor, self.options.popup_size)
        self._last_present: dict[int, Placement] = {}
        self.last_stats: UpdateStats | None = None

    @property
    def present(self) -> dict[int, Placement]:
        """Accepted set of the last update (copy)."""
        return dict(self._last_present)

    def reset(self) -> None:
        """Forget the last accepted set; next update reports everything as new."""
        self._last_present = {}
        self.last_stats = None

    def _place(self, candidate: Candidate) -> Placement | None:
        x, y = self.source.project(candidate.lon, candidate.lat)
        x, y = float(x), float(y)
        if not (math.isfinite(x) and math.isfinite(y)):
            return None
        return Placement(
            id=candidate.id,
            position=(x + self.anchor_offset[0], y + self.anchor_offset[1]),
            size=self.options.popup_size,
            feature=candidate,
        )

    def update(self) -> PopupStatus | None:
        """
        Recompute popups for the current viewport.
        Returns None (state untouched) when the source cannot answer yet.
        """
        features = self.source.query_rendered_features(self.options.layers)
        if features is None:
            logger.debug("Popup update skipped: %s", ADAPTER_UNAVAILABLE)
            return None

        candidates: list[Candidate] = []
        n_malformed = 0
        for feature in features:
            candidate = candidate_from_feature(feature)
            if candidate is None:
                n_malformed += 1
                if POPUP_ENGINE_DEBUG:
                    logger.debug("Discarding feature (%s): %r", MALFORMED_CANDIDATE, feature)
                continue
            candidates.append(candidate)

        ordered, n_unranked, n_filtered_class, n_capped = rank_candidates(
            candidates, self.options.classes, self.options.max_count
        )

        accepted: dict[int, Placement] = {}
        n_collided = 0
        n_duplicate = 0
        for candidate in ordered:
            if candidate.id in accepted:
                n_duplicate += 1
                continue
            placement = self._place(candidate)
            if placement is None:
                n_malformed += 1
                if POPUP_ENGINE_DEBUG:
                    logger.debug("Discarding id=%s: projection is not finite", candidate.id)
                continue
            if collides_with_any(placement, accepted.values()):
                n_collided += 1
                if POPUP_ENGINE_DEBUG:
                    logger.debug("Discarding id=%s rank=%s: collides", candidate.id, candidate.rank)
                continue
            accepted[candidate.id] = placement

        status = PopupStatus()
        still_present: set[int] = set()
        for pid, placement in accepted.items():
            if pid in self._last_present:
                status.updated[pid] = placement
                still_present.add(pid)
            else:
                status.new[pid] = placement
        status.removed = {
            pid: placement
            for pid, placement in self._last_present.items()
            if pid not in still_present
        }

        self._last_present = accepted
        self.last_stats = UpdateStats(
            n_queried=len(features),
            n_malformed=n_malformed,
            n_unranked=n_unranked,
            n_filtered_class=n_filtered_class,
            n_capped=n_capped,
            n_collided=n_collided,
            n_duplicate=n_duplicate,
            n_accepted=len(accepted),
        )
        logger.debug(
            "Popup update: %d queried, %d accepted (new=%d updated=%d removed=%d)",
            len(features), len(accepted), len(status.new), len(status.updated), len(status.removed),
        )
        return status
