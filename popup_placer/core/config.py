# popup_placer/core/config.py
"""
Central configuration for popup placement over map point features.
All tunable values live here; no magic numbers in other modules.
"""

from __future__ import annotations
import os

# ----- Paths (repo-relative) -----
REPORTS_DIR: str = "reports"
DEFAULT_FEATURES_PATH: str | None = None
"""GeoJSON FeatureCollection of places; None means generate synthetic places."""

# ----- Popup geometry -----
DEFAULT_POPUP_SIZE_PX: tuple[float, float] = (150.0, 50.0)
"""Popup (width, height) in screen px when none is given."""

DEFAULT_POPUP_ANCHOR: str = "center"
"""Where the feature point sits on the popup box when none is given."""

POPUP_ANCHORS: tuple[str, ...] = ("center", "top", "bottom", "left", "right")

POPUP_VERTICAL_NUDGE_PX: float = 15.0
"""Upward shift applied when drawing a popup box at its placement."""

# ----- Map view (Web Mercator) -----
TILE_SIZE_PX: int = 512
"""World size at zoom 0 in px."""

MAX_LATITUDE: float = 85.051129
"""Web Mercator latitude limit (deg)."""

MIN_ZOOM: float = 0.0
MAX_ZOOM: float = 22.0

DEFAULT_VIEWPORT_PX: tuple[int, int] = (1024, 768)
DEFAULT_CENTER_LONLAT: tuple[float, float] = (2.35, 48.85)
DEFAULT_ZOOM: float = 5.0

# ----- Application defaults (weather map) -----
APP_LAYERS: tuple[str, ...] = ("City labels", "Place labels", "Town labels", "Village labels")
"""Style layers the weather map queries for popup candidates."""

APP_CLASSES: tuple[str, ...] = ("city", "village", "town")
APP_POPUP_SIZE_PX: tuple[float, float] = (140.0, 70.0)
APP_POPUP_ANCHOR: str = "top"

# ----- Weather popup content -----
RADAR_DBZ_MISSING: float = -20.0
"""Radar reflectivity assumed when the radar layer has no value."""

PRECIP_DRIZZLE_MM_H: float = 0.2
PRECIP_HEAVY_MM_H: float = 5.0
SNOW_BELOW_C: float = -1.0
RADAR_CLOUDY_DBZ: float = 10.0
RADAR_OVERCAST_DBZ: float = 20.0
WEATHER_ICON_DIR: str = "weather-icons/"

# ----- Rendering -----
RENDER_DPI: int = 100
COLOR_NEW: str = "tab:green"
COLOR_UPDATED: str = "tab:blue"
COLOR_REMOVED: str = "grey"

# ----- Synthetic places -----
SEED: int | None = 42
"""Random seed for synthetic places; None for non-deterministic."""

SYNTHETIC_N_PLACES: int = 400
SYNTHETIC_BBOX: tuple[float, float, float, float] = (-5.0, 42.0, 9.0, 51.5)
"""(min_lon, min_lat, max_lon, max_lat) for synthetic places."""

SYNTHETIC_CLASS_SHARES: tuple[tuple[str, str, float], ...] = (
    ("city", "City labels", 0.1),
    ("town", "Town labels", 0.3),
    ("village", "Village labels", 0.6),
)
"""(class, layer, share) of synthetic places; shares sum to 1."""

SYNTHETIC_TEMP_MEAN_C: float = 12.0
"""Synthetic weather: temperature at SYNTHETIC_TEMP_REF_LAT."""

SYNTHETIC_TEMP_REF_LAT: float = 46.5
SYNTHETIC_TEMP_PER_DEG_LAT: float = -0.8
SYNTHETIC_TEMP_WAVE_C: float = 5.0
SYNTHETIC_PRECIP_MAX_MM_H: float = 8.0
SYNTHETIC_RADAR_MAX_DBZ: float = 35.0
SYNTHETIC_WEATHER_WAVELENGTH_DEG: float = 3.0
"""Spatial period (degrees) of the synthetic weather pattern."""

# ----- Session -----
DEFAULT_PAN_STEP_PX: float = 40.0
DEFAULT_N_FRAMES: int = 6

# ----- Debug flags -----
LOG_LEVEL: str = os.environ.get("LOG_LEVEL", "INFO").upper()
"""Logging level for CLI and viewer entry points."""

POPUP_ENGINE_DEBUG: bool = os.environ.get("POPUP_ENGINE_DEBUG", "").lower() in ("1", "true", "yes")
"""Log every discarded candidate. Set env POPUP_ENGINE_DEBUG=1 to enable."""
