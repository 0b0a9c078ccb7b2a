#!/usr/bin/env python3
"""
Generate GeoJSON place files for trying popup placement from the CLI.

Files:
places_small.geojson:  60 places over Benelux
places_france.geojson: 400 places over France (default synthetic bbox)
places_dense.geojson:  2000 places over a small area (heavy collisions)
places_ties.geojson:   places sharing ranks, to see input-order tie-breaks
"""

from __future__ import annotations

from pathlib import Path

from popup_placer.core.io import write_features
from popup_placer.core.synthetic import synthetic_places

# Output directory
OUTPUT_DIR = Path(__file__).parent.parent / "docs" / "assets" / "places"


def with_tied_ranks(features: list[dict], tie_every: int = 3) -> list[dict]:
    """Collapse ranks so each group of tie_every consecutive ids shares one rank."""
    out = []
    for f in features:
        props = dict(f["properties"])
        props["rank"] = 1 + (f["id"] - 1) // tie_every
        out.append({**f, "properties": props})
    return out


def main() -> None:
    OUTPUT_DIR.mkdir(parents=True, exist_ok=True)
    cases = {
        "places_small.geojson": synthetic_places(60, seed=1, bbox=(2.5, 49.5, 7.0, 53.5)),
        "places_france.geojson": synthetic_places(400, seed=42),
        "places_dense.geojson": synthetic_places(2000, seed=7, bbox=(1.5, 48.0, 3.5, 49.5)),
        "places_ties.geojson": with_tied_ranks(synthetic_places(90, seed=3, bbox=(4.0, 50.0, 6.0, 51.5))),
    }
    for name, features in cases.items():
        path = write_features(OUTPUT_DIR / name, features)
        print(f"Created: {path.name} ({len(features)} places)")


if __name__ == "__main__":
    main()
