"""
Synthetic climate model.

Plausible weather values from latitude, desert flag and date/time. Used to fill
gaps in partially valid provider payloads and as the last-resort data source
when every provider fails. Random components are deliberate; pass a seeded
numpy Generator for reproducible output.
"""
import math
from datetime import date, datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

import numpy as np
import pandas as pd

from src.weather.conditions import (
    calculate_feels_like,
    get_weather_code,
    get_weather_conditions,
)

SIMULATION_SOURCE = "NASA Climate Simulation"
SIMULATION_QUALITY = "Simulated (climate model)"
FORECAST_DAYS = 7


def _get_rng(rng: Optional[np.random.Generator]) -> np.random.Generator:
    return rng if rng is not None else np.random.default_rng()


def _seasonal_term(month: int) -> float:
    return math.sin((month - 6) * math.pi / 6) * 8


def _diurnal_term(hour: int) -> float:
    return math.sin((hour - 12) * math.pi / 12) * 10


# ---------------------------------------------------------------------------
# Individual variables
# ---------------------------------------------------------------------------


def realistic_temperature(lat: float, is_desert: bool, month: int, hour: int) -> float:
    """Deterministic base temperature (C).

    Desert: 35 C (|lat| < 25) or 30 C, plus seasonal and diurnal terms.
    Elsewhere: latitude band base plus seasonal term only.
    """
    abs_lat = abs(lat)
    if is_desert:
        base = 35 if abs_lat < 25 else 30
        return base + _seasonal_term(month) + _diurnal_term(hour)

    if abs_lat < 15:
        base = 28
    elif abs_lat < 35:
        base = 22
    elif abs_lat < 55:
        base = 15
    else:
        base = 5
    return base + _seasonal_term(month)


def realistic_temperature_range(
    temperature: float, is_desert: bool, rng: Optional[np.random.Generator] = None
) -> tuple[float, float]:
    """Return (max, min). Desert spread +12..+17 / -15..-20, otherwise +5..+8 / -3..-5."""
    rng = _get_rng(rng)
    if is_desert:
        t_max = temperature + 12 + rng.uniform(0, 5)
        t_min = temperature - (15 + rng.uniform(0, 5))
    else:
        t_max = temperature + 5 + rng.uniform(0, 3)
        t_min = temperature - (3 + rng.uniform(0, 2))
    return t_max, t_min


def realistic_humidity(lat: float, is_desert: bool, rng: Optional[np.random.Generator] = None) -> float:
    """Relative humidity (%)."""
    rng = _get_rng(rng)
    if is_desert:
        return rng.uniform(20, 45)
    abs_lat = abs(lat)
    if abs_lat < 15:
        return rng.uniform(70, 90)
    if abs_lat < 35:
        return rng.uniform(50, 75)
    if abs_lat < 55:
        return rng.uniform(55, 80)
    return rng.uniform(60, 85)


def realistic_wind_speed(lat: float, is_desert: bool, rng: Optional[np.random.Generator] = None) -> float:
    """Wind speed at 10 m (m/s)."""
    rng = _get_rng(rng)
    if is_desert:
        return rng.uniform(3.5, 6.5)
    abs_lat = abs(lat)
    if abs_lat < 15:
        return rng.uniform(1.5, 4.0)
    if abs_lat < 35:
        return rng.uniform(2.5, 5.5)
    if abs_lat < 55:
        return rng.uniform(3.5, 7.5)
    return rng.uniform(4.5, 9.0)


def realistic_precipitation(lat: float, is_desert: bool, rng: Optional[np.random.Generator] = None) -> float:
    """Daily precipitation (mm). Desert: 3% chance of 0-1 mm, else dry."""
    rng = _get_rng(rng)
    if is_desert:
        return rng.uniform(0, 1) if rng.random() < 0.03 else 0.0
    abs_lat = abs(lat)
    if abs_lat < 15:
        return rng.uniform(0, 15) if rng.random() < 0.40 else 0.0
    if abs_lat < 35:
        return rng.uniform(0, 8) if rng.random() < 0.25 else 0.0
    return rng.uniform(0, 6) if rng.random() < 0.30 else 0.0


def realistic_cloud_cover(lat: float, is_desert: bool, rng: Optional[np.random.Generator] = None) -> float:
    """Cloud cover (%)."""
    rng = _get_rng(rng)
    if is_desert:
        return rng.uniform(5, 25)
    if abs(lat) < 15:
        return rng.uniform(40, 90)
    return rng.uniform(20, 80)


def realistic_pressure(lat: float, is_desert: bool, rng: Optional[np.random.Generator] = None) -> float:
    """Sea-level pressure (hPa)."""
    rng = _get_rng(rng)
    if is_desert:
        return rng.uniform(1008, 1018)
    if abs(lat) < 15:
        return rng.uniform(1008, 1015)
    return rng.uniform(1005, 1025)


def realistic_solar_radiation(lat: float, is_desert: bool, rng: Optional[np.random.Generator] = None) -> float:
    """All-sky surface shortwave (kWh/m^2/day)."""
    rng = _get_rng(rng)
    if is_desert:
        return rng.uniform(6, 8)
    if abs(lat) < 35:
        return rng.uniform(4, 6.5)
    return rng.uniform(2, 5)


# ---------------------------------------------------------------------------
# Full records
# ---------------------------------------------------------------------------


def build_synthetic_snapshot(
    lat: float,
    is_desert: bool,
    month: int,
    hour: int,
    rng: Optional[np.random.Generator] = None,
    temperature_offset: float = 0.0,
) -> Dict[str, Any]:
    """One complete WeatherSnapshot from the climate model."""
    rng = _get_rng(rng)
    temperature = realistic_temperature(lat, is_desert, month, hour) + temperature_offset
    t_max, t_min = realistic_temperature_range(temperature, is_desert, rng)
    humidity = realistic_humidity(lat, is_desert, rng)
    wind_speed = realistic_wind_speed(lat, is_desert, rng)
    precipitation = realistic_precipitation(lat, is_desert, rng)

    return {
        "temperature": temperature,
        "temperature_max": t_max,
        "temperature_min": t_min,
        "humidity": humidity,
        "wind_speed": wind_speed,
        "wind_speed_50m": wind_speed * 1.3,
        "precipitation": precipitation,
        "pressure": realistic_pressure(lat, is_desert, rng),
        "solar_radiation": realistic_solar_radiation(lat, is_desert, rng),
        "cloud_cover": realistic_cloud_cover(lat, is_desert, rng),
        "conditions": get_weather_conditions(precipitation, humidity, is_desert),
        "weather_code": get_weather_code(precipitation, humidity),
        "feels_like": calculate_feels_like(temperature, humidity, wind_speed, is_desert),
        "data_quality": SIMULATION_QUALITY,
    }


def generate_synthetic_forecast(
    lat: float,
    is_desert: bool,
    start: date,
    rng: Optional[np.random.Generator] = None,
    days: int = FORECAST_DAYS,
) -> List[Dict[str, Any]]:
    """Seven daily records starting at `start`, smoothly varying day to day."""
    rng = _get_rng(rng)
    forecast = []
    for i in range(days):
        day = start + timedelta(days=i)
        offset = math.sin(i * math.pi / 3.5) * 1.5 + rng.uniform(-1, 1)
        record = build_synthetic_snapshot(lat, is_desert, day.month, 12, rng, temperature_offset=offset)
        record["date"] = day.isoformat()
        record["confidence"] = round(max(0.5, 0.85 - 0.05 * i), 2)
        forecast.append(record)
    return forecast


def generate_synthetic_weather(
    lat: float,
    lon: float,
    is_desert: bool,
    now: Optional[datetime] = None,
    rng: Optional[np.random.Generator] = None,
    data_source: str = SIMULATION_SOURCE,
) -> Dict[str, Any]:
    """
    Full current + 7-day forecast from the climate model.

    Returns:
        dict with keys current, forecast, data_source, data_quality
    """
    now = now or datetime.now(timezone.utc)
    rng = _get_rng(rng)

    current = build_synthetic_snapshot(lat, is_desert, now.month, now.hour, rng)
    current["data_source"] = data_source
    current["observed_at"] = now.isoformat()
    current["location"] = {"lat": lat, "lon": lon}

    return {
        "current": current,
        "forecast": generate_synthetic_forecast(lat, is_desert, now.date(), rng),
        "data_source": data_source,
        "data_quality": SIMULATION_QUALITY,
    }


def generate_historical_series(
    lat: float,
    is_desert: bool,
    days: int = 365,
    end_date: Optional[date] = None,
    rng: Optional[np.random.Generator] = None,
) -> pd.DataFrame:
    """
    Synthetic daily history ending at `end_date` (default today).

    Columns: date, temperature, precipitation, wind_speed. Regenerated per
    call; never cached.
    """
    rng = _get_rng(rng)
    end_date = end_date or datetime.now(timezone.utc).date()
    dates = pd.date_range(end=pd.Timestamp(end_date), periods=days, freq="D")

    rows = []
    for ts in dates:
        temperature = realistic_temperature(lat, is_desert, ts.month, 12) + rng.normal(0, 2)
        rows.append(
            {
                "date": ts.date().isoformat(),
                "temperature": temperature,
                "precipitation": realistic_precipitation(lat, is_desert, rng),
                "wind_speed": realistic_wind_speed(lat, is_desert, rng),
            }
        )
    return pd.DataFrame(rows, columns=["date", "temperature", "precipitation", "wind_speed"])
