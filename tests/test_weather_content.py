# tests/test_weather_content.py
"""
Weather popup content: icon naming rules, temperature text, sun altitude and the
weather popup layer.
"""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from popup_placer.core.config import POPUP_VERTICAL_NUDGE_PX
from popup_placer.core.synthetic import SyntheticWeather
from popup_placer.core.types import Candidate, Placement, PopupStatus
from popup_placer.core.weather import (
    WeatherSample,
    build_popup_content,
    format_temperature,
    solar_altitude,
    weather_icon_name,
    weather_popup_layer,
)


@pytest.mark.parametrize(
    "sample, altitude, expected",
    [
        (WeatherSample(), 0.5, "weather-icons/day-clear-none.svg"),
        (WeatherSample(), -0.1, "weather-icons/night-clear-none.svg"),
        (WeatherSample(precipitation_mm_h=1.0, temperature_c=8.0), 0.5, "weather-icons/day-cloudy-drizzle.svg"),
        (WeatherSample(radar_dbz=5.0), 0.5, "weather-icons/day-cloudy-none.svg"),
        (WeatherSample(radar_dbz=15.0, precipitation_mm_h=6.0, temperature_c=3.0), 0.5, "weather-icons/day-overcast-rain.svg"),
        (WeatherSample(radar_dbz=30.0, precipitation_mm_h=6.0, temperature_c=-5.0), -1.0, "weather-icons/night-extreme-snow.svg"),
        (WeatherSample(radar_dbz=12.0, precipitation_mm_h=0.5, temperature_c=-2.0), 0.2, "weather-icons/day-overcast-snow.svg"),
        (WeatherSample(radar_dbz=-5.0, precipitation_mm_h=0.1), 0.2, "weather-icons/day-clear-none.svg"),
    ],
)
def test_weather_icon_name(sample: WeatherSample, altitude: float, expected: str) -> None:
    assert weather_icon_name(sample, altitude) == expected


def test_zero_radar_reads_as_missing() -> None:
    # 0 dBz is treated like no radar data, i.e. clear sky when dry
    assert weather_icon_name(WeatherSample(radar_dbz=0.0), 1.0) == "weather-icons/day-clear-none.svg"


def test_format_temperature() -> None:
    assert format_temperature(12.345) == "12.3°"
    assert format_temperature(-0.04) == "-0.0°"
    assert format_temperature(None) == "--°"


def test_build_popup_content_samples_at_feature() -> None:
    seen: dict = {}

    def sampler(lon: float, lat: float) -> WeatherSample:
        seen["sample"] = (lon, lat)
        return WeatherSample(temperature_c=21.04, precipitation_mm_h=0.0, radar_dbz=None)

    def sun(when: datetime, lat: float, lon: float) -> float:
        seen["sun"] = (lat, lon)
        return 0.3

    placement = Placement(
        id=12, position=(0, 0), size=(140, 70),
        feature=Candidate(id=12, rank=1, lon=2.35, lat=48.85, feature_class="city"),
    )
    content = build_popup_content(placement, sampler, sun, datetime(2024, 6, 1, 12, tzinfo=timezone.utc))
    assert content.id == 12
    assert content.icon == "weather-icons/day-clear-none.svg"
    assert content.temperature_text == "21.0°"
    assert seen == {"sample": (2.35, 48.85), "sun": (48.85, 2.35)}


def test_solar_altitude_day_and_night_in_paris() -> None:
    noon = solar_altitude(datetime(2024, 6, 21, 12, tzinfo=timezone.utc), 48.85, 2.35)
    midnight = solar_altitude(datetime(2024, 6, 21, 0, tzinfo=timezone.utc), 48.85, 2.35)
    assert noon == pytest.approx(1.12, abs=0.03)  # about 64 degrees
    assert midnight < 0
    # naive datetimes are read as UTC
    assert solar_altitude(datetime(2024, 6, 21, 12), 48.85, 2.35) == pytest.approx(noon)


def _placement(pid: int, x: float, y: float) -> Placement:
    return Placement(
        id=pid, position=(x, y), size=(140, 70),
        feature=Candidate(id=pid, rank=pid, lon=float(pid), lat=45.0, properties={"name": f"P{pid}"}),
    )


def test_weather_popup_layer_samples_new_popups_only() -> None:
    calls: list[tuple[float, float]] = []

    def sampler(lon: float, lat: float) -> WeatherSample:
        calls.append((lon, lat))
        return WeatherSample(temperature_c=lon)

    layer = weather_popup_layer(sampler, sun_altitude=lambda when, lat, lon: -0.5, when=datetime(2024, 1, 1))
    layer.apply(PopupStatus(new={1: _placement(1, 10, 20), 2: _placement(2, 300, 20)}))
    assert calls == [(1.0, 45.0), (2.0, 45.0)]
    handle = layer.handles[1]
    assert handle.name == "P1"
    assert (handle.x, handle.y) == (10, 20 - POPUP_VERTICAL_NUDGE_PX)
    assert handle.content.icon == "weather-icons/night-clear-none.svg"
    assert handle.content.temperature_text == "1.0°"

    layer.apply(PopupStatus(updated={1: _placement(1, 50, 60)}, removed={2: _placement(2, 300, 20)}))
    assert calls == [(1.0, 45.0), (2.0, 45.0)]
    assert layer.handles[1] is handle
    assert (handle.x, handle.y) == (50, 60 - POPUP_VERTICAL_NUDGE_PX)
    assert 2 not in layer


def test_synthetic_weather_is_deterministic_and_dry_spots_have_no_radar() -> None:
    a, b = SyntheticWeather(seed=7), SyntheticWeather(seed=7)
    grid = [(lon * 0.5, 42.0 + lat * 0.5) for lon in range(-10, 18) for lat in range(0, 19)]
    samples = [a(lon, lat) for lon, lat in grid]
    assert samples == [b(lon, lat) for lon, lat in grid]
    for s in samples:
        assert s.temperature_c is not None
        assert s.precipitation_mm_h is not None and s.precipitation_mm_h >= 0
        if s.precipitation_mm_h == 0:
            assert s.radar_dbz is None
    assert any(s.radar_dbz is not None for s in samples)
