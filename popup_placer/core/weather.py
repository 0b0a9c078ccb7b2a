# popup_placer/core/weather.py
"""
What a weather popup shows: icon name from sampled radar/precipitation/temperature
and sun altitude, the temperature text, and the popup layer that builds both once
per new popup. Sampling is an external service passed in as a callable; sun
altitude comes from astral unless another callable is given.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Protocol

from astral import Observer
from astral.sun import elevation

from popup_placer.core.config import (
    PRECIP_DRIZZLE_MM_H,
    PRECIP_HEAVY_MM_H,
    RADAR_CLOUDY_DBZ,
    RADAR_DBZ_MISSING,
    RADAR_OVERCAST_DBZ,
    SNOW_BELOW_C,
    WEATHER_ICON_DIR,
)
from popup_placer.core.popup_layer import PopupLayer, popup_transform
from popup_placer.core.types import Placement


@dataclass(frozen=True)
class WeatherSample:
    """Values picked from the weather layers at one place. None = no data."""
    temperature_c: float | None = None
    precipitation_mm_h: float | None = None
    radar_dbz: float | None = None


@dataclass(frozen=True)
class PopupContent:
    id: int
    icon: str
    temperature_text: str


class WeatherSampler(Protocol):
    def __call__(self, lon: float, lat: float) -> WeatherSample: ...


class SunAltitude(Protocol):
    def __call__(self, when: datetime, lat: float, lon: float) -> float:
        """Sun altitude above the horizon in radians."""
        ...


def _sky_part(radar_dbz: float, precip: float) -> str:
    if radar_dbz < 0:
        return "cloudy-" if precip > PRECIP_DRIZZLE_MM_H else "clear-"
    if radar_dbz < RADAR_CLOUDY_DBZ:
        return "cloudy-"
    if radar_dbz < RADAR_OVERCAST_DBZ:
        return "overcast-"
    return "extreme-"


def _precip_part(precip: float, temperature: float) -> str:
    if precip > PRECIP_HEAVY_MM_H:
        return "snow" if temperature < SNOW_BELOW_C else "rain"
    if precip > PRECIP_DRIZZLE_MM_H:
        return "snow" if temperature < SNOW_BELOW_C else "drizzle"
    return "none"


def weather_icon_name(sample: WeatherSample, sun_altitude_rad: float) -> str:
    """
    Icon path, e.g. 'weather-icons/day-cloudy-drizzle.svg'.
    Missing (or zero) radar reads as RADAR_DBZ_MISSING; missing precipitation and temperature as 0.
    """
    radar_dbz = sample.radar_dbz or RADAR_DBZ_MISSING
    precip = sample.precipitation_mm_h or 0.0
    temperature = sample.temperature_c or 0.0
    name = "night-" if sun_altitude_rad < 0 else "day-"
    name += _sky_part(radar_dbz, precip)
    name += _precip_part(precip, temperature)
    return f"{WEATHER_ICON_DIR}{name}.svg"


def format_temperature(value: float | None) -> str:
    if value is None:
        return "--°"
    return f"{value:.1f}°"


def build_popup_content(
    placement: Placement,
    sampler: WeatherSampler,
    sun_altitude: SunAltitude,
    when: datetime,
) -> PopupContent:
    """Sample weather at the popup's feature and derive icon and temperature text."""
    lon, lat = placement.feature.lon, placement.feature.lat
    sample = sampler(lon, lat)
    altitude = sun_altitude(when, lat, lon)
    return PopupContent(
        id=placement.id,
        icon=weather_icon_name(sample, altitude),
        temperature_text=format_temperature(sample.temperature_c),
    )


def solar_altitude(when: datetime, lat: float, lon: float) -> float:
    """Sun altitude above the horizon in radians (naive datetimes are UTC)."""
    if when.tzinfo is None:
        when = when.replace(tzinfo=timezone.utc)
    degrees = elevation(Observer(latitude=lat, longitude=lon), when)
    return math.radians(degrees)


@dataclass
class PopupHandle:
    """A shown weather popup: content is fixed at creation, x/y follow the map."""
    id: int
    name: str
    x: float
    y: float
    content: PopupContent


def weather_popup_layer(
    sampler: WeatherSampler,
    sun_altitude: SunAltitude = solar_altitude,
    when: datetime | None = None,
) -> PopupLayer[PopupHandle]:
    """
    PopupLayer that samples weather once per new popup and only moves updated ones.
    when=None uses the current UTC time at creation.
    """

    def create(placement: Placement) -> PopupHandle:
        at = when if when is not None else datetime.now(timezone.utc)
        x, y = popup_transform(placement)
        return PopupHandle(
            id=placement.id,
            name=str(placement.feature.properties.get("name", "")),
            x=x,
            y=y,
            content=build_popup_content(placement, sampler, sun_altitude, at),
        )

    def move(placement: Placement, handle: PopupHandle) -> None:
        handle.x, handle.y = popup_transform(placement)

    return PopupLayer(create, move)
