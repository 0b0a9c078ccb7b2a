# popup_placer/core/synthetic.py
"""
Deterministic synthetic places (ranked points with class and layer) and a smooth
synthetic weather field for demos and tests.
"""

from __future__ import annotations

from typing import Any

import numpy as np

from popup_placer.core.config import (
    SEED,
    SYNTHETIC_BBOX,
    SYNTHETIC_CLASS_SHARES,
    SYNTHETIC_N_PLACES,
    SYNTHETIC_PRECIP_MAX_MM_H,
    SYNTHETIC_RADAR_MAX_DBZ,
    SYNTHETIC_TEMP_MEAN_C,
    SYNTHETIC_TEMP_PER_DEG_LAT,
    SYNTHETIC_TEMP_REF_LAT,
    SYNTHETIC_TEMP_WAVE_C,
    SYNTHETIC_WEATHER_WAVELENGTH_DEG,
)
from popup_placer.core.weather import WeatherSample


def synthetic_places(
    n: int = SYNTHETIC_N_PLACES,
    seed: int | None = SEED,
    bbox: tuple[float, float, float, float] = SYNTHETIC_BBOX,
) -> list[dict[str, Any]]:
    """
    n point features uniformly spread over bbox. Cities get the lowest ranks,
    then towns, then villages; ids are 1..n.
    """
    if n <= 0:
        return []
    rng = np.random.default_rng(seed)
    min_lon, min_lat, max_lon, max_lat = bbox
    lons = rng.uniform(min_lon, max_lon, n)
    lats = rng.uniform(min_lat, max_lat, n)

    shares = np.array([s for _, _, s in SYNTHETIC_CLASS_SHARES], dtype=float)
    kinds = rng.choice(len(SYNTHETIC_CLASS_SHARES), size=n, p=shares / shares.sum())
    # Rank within tier, tiers stacked so every city outranks every town, etc.
    ranks = np.zeros(n, dtype=int)
    offset = 0
    for k in range(len(SYNTHETIC_CLASS_SHARES)):
        members = np.flatnonzero(kinds == k)
        ranks[members] = offset + 1 + rng.permutation(len(members))
        offset += len(members)

    out: list[dict[str, Any]] = []
    for i in range(n):
        cls, layer, _ = SYNTHETIC_CLASS_SHARES[int(kinds[i])]
        out.append({
            "id": i + 1,
            "layer": layer,
            "geometry": {"type": "Point", "coordinates": [float(lons[i]), float(lats[i])]},
            "properties": {
                "name": f"{cls.title()} {i + 1}",
                "class": cls,
                "rank": int(ranks[i]),
            },
        })
    return out


class SyntheticWeather:
    """
    WeatherSampler over a smooth pattern: temperature falls with latitude, and a
    seeded wave field drives precipitation and radar. Dry spots have no radar value.
    """

    def __init__(self, seed: int | None = SEED) -> None:
        rng = np.random.default_rng(seed)
        self._phases = rng.uniform(0.0, 2 * np.pi, 3)

    def __call__(self, lon: float, lat: float) -> WeatherSample:
        k = 2 * np.pi / SYNTHETIC_WEATHER_WAVELENGTH_DEG
        p0, p1, p2 = self._phases
        wave = float(np.sin(k * lon + p0) * np.cos(k * lat + p1))
        temperature = (
            SYNTHETIC_TEMP_MEAN_C
            + SYNTHETIC_TEMP_PER_DEG_LAT * (lat - SYNTHETIC_TEMP_REF_LAT)
            + SYNTHETIC_TEMP_WAVE_C * float(np.sin(k * (lon + lat) + p2))
        )
        precip = round(SYNTHETIC_PRECIP_MAX_MM_H * wave * wave, 2) if wave > 0 else 0.0
        if precip <= 0:
            return WeatherSample(temperature_c=round(temperature, 1), precipitation_mm_h=0.0)
        return WeatherSample(
            temperature_c=round(temperature, 1),
            precipitation_mm_h=precip,
            radar_dbz=round(SYNTHETIC_RADAR_MAX_DBZ * wave, 1),
        )
