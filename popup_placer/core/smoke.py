# popup_placer/core/smoke.py
"""
Single entrypoint to verify the popup engine end-to-end: synthetic places, a short pan,
reports and rendering with run_name='smoke'. Does not run on import.
"""

from __future__ import annotations

from pathlib import Path

from popup_placer.core.config import (
    APP_CLASSES,
    APP_LAYERS,
    APP_POPUP_ANCHOR,
    APP_POPUP_SIZE_PX,
    DEFAULT_N_FRAMES,
    DEFAULT_PAN_STEP_PX,
    SEED,
    SYNTHETIC_N_PLACES,
)
from popup_placer.core.runner import run
from popup_placer.core.session import straight_pan
from popup_placer.core.synthetic import synthetic_places
from popup_placer.core.types import PopupManagerOptions


def main() -> None:
    """Run a synthetic pan session with the weather-map defaults."""
    repo_root = Path.cwd().resolve()
    options = PopupManagerOptions(
        layers=APP_LAYERS,
        classes=APP_CLASSES,
        popup_size=APP_POPUP_SIZE_PX,
        popup_anchor=APP_POPUP_ANCHOR,
    )
    report_dir, frames = run(
        "smoke",
        synthetic_places(SYNTHETIC_N_PLACES, seed=SEED),
        f"synthetic:n={SYNTHETIC_N_PLACES},seed={SEED}",
        options,
        straight_pan(DEFAULT_N_FRAMES, DEFAULT_PAN_STEP_PX),
        repo_root,
    )
    if not frames or frames[0].status is None:
        raise RuntimeError("Smoke run produced no popup status.")
    print(report_dir)


if __name__ == "__main__":
    main()
