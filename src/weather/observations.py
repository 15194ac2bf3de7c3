"""
Historical observation analysis from NASA POWER daily records.

For a location and calendar date, pulls ~30 years of daily T2M_MAX,
PRECTOTCORR and WS10M in one request, keeps samples within +/-2 days of the
date's day-of-year, and summarizes them. Unlike the weather adapters this
module raises on upstream failure: there is no synthetic fallback here.

Response keys are snake_case. Clients of the legacy camelCase payload map
dataAnalysis -> analysis, rawData -> raw_data, avgMaxTemp -> avg_max_temp,
changeOfPrecip -> chance_of_precip, changeOfExtremeHeat ->
chance_of_extreme_heat, avgWindSpeed -> avg_wind_speed and avgAirQuality ->
avg_air_quality.
"""
import logging
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional

import pandas as pd
import requests

from src.common.config import ProviderSettings
from src.weather.formatter import round_half_up
from src.weather.validation import SENTINEL_FLOOR

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)

OBSERVATION_PARAMETERS = "T2M_MAX,PRECTOTCORR,WS10M"
DAY_WINDOW = 2
PRECIP_DAY_THRESHOLD_MM = 0.5
EXTREME_HEAT_THRESHOLD_C = 35
AIR_QUALITY_PLACEHOLDER = "N/A"


class NoHistoricalData(Exception):
    """No samples survive the day-of-year window and sentinel filters."""


class InvalidObservationPayload(ValueError):
    """POWER response lacks the expected parameter structure."""


def fetch_power_history(
    lat: float,
    lon: float,
    settings: Optional[ProviderSettings] = None,
    today: Optional[date] = None,
) -> Dict[str, Dict[str, Any]]:
    """
    Fetch the daily POWER series for the last `observation_years` years.

    Returns:
        properties.parameter block: {"T2M_MAX": {...}, "PRECTOTCORR": {...}, "WS10M": {...}}

    Raises:
        requests.RequestException: On transport failure or non-2xx status
        InvalidObservationPayload: If the payload or T2M_MAX is not an object
    """
    settings = settings or ProviderSettings()
    today = today or datetime.now(timezone.utc).date()
    params = {
        "parameters": OBSERVATION_PARAMETERS,
        "community": "RE",
        "longitude": lon,
        "latitude": lat,
        "start": f"{today.year - settings.observation_years}0101",
        "end": f"{today.year}1231",
        "format": "JSON",
    }
    resp = requests.get(settings.power.url, params=params, timeout=settings.observation_timeout_seconds)
    resp.raise_for_status()
    payload = resp.json()
    properties = payload.get("properties") if isinstance(payload, dict) else None
    parameter = properties.get("parameter") if isinstance(properties, dict) else None
    if not isinstance(parameter, dict) or not isinstance(parameter.get("T2M_MAX"), dict) or not parameter["T2M_MAX"]:
        raise InvalidObservationPayload("Invalid data structure fetched from NASA POWER API")
    for name in ("PRECTOTCORR", "WS10M"):
        if not isinstance(parameter.get(name), (dict, type(None))):
            raise InvalidObservationPayload(f"Invalid {name} structure fetched from NASA POWER API")
    return parameter


def select_window(parameter: Dict[str, Dict[str, Any]], target: date) -> pd.DataFrame:
    """
    Samples within +/-2 days of target's day-of-year, sentinels removed.

    The window does not wrap across the year boundary. Columns: date, year,
    max_temp, precipitation, wind_speed (the last two may be NaN when absent).
    """
    t2m = parameter["T2M_MAX"]
    frame = pd.DataFrame({"date": list(t2m.keys())})
    frame["max_temp"] = pd.to_numeric(pd.Series(list(t2m.values())), errors="coerce")
    frame["precipitation"] = pd.to_numeric(frame["date"].map(parameter.get("PRECTOTCORR") or {}), errors="coerce")
    frame["wind_speed"] = pd.to_numeric(frame["date"].map(parameter.get("WS10M") or {}), errors="coerce")

    stamps = pd.to_datetime(frame["date"], format="%Y%m%d", errors="coerce")
    frame = frame[stamps.notna()].copy()
    stamps = stamps[stamps.notna()]
    frame["year"] = stamps.dt.year
    frame["day_of_year"] = stamps.dt.dayofyear

    target_doy = target.timetuple().tm_yday
    frame = frame[(frame["day_of_year"] - target_doy).abs() <= DAY_WINDOW]
    frame = frame[frame["max_temp"] > SENTINEL_FLOOR]
    frame = frame[frame["precipitation"].isna() | (frame["precipitation"] > SENTINEL_FLOOR)]
    return frame.reset_index(drop=True)


def _none_if_nan(value: Any) -> Optional[float]:
    return None if pd.isna(value) else float(value)


def summarize_window(frame: pd.DataFrame) -> Dict[str, Any]:
    """Averages and exceedance chances over the windowed samples."""
    if frame.empty:
        raise NoHistoricalData("No historical data found for the selected date and location.")

    total = len(frame)
    precip_days = int((frame["precipitation"] > PRECIP_DAY_THRESHOLD_MM).sum())
    heat_days = int((frame["max_temp"] > EXTREME_HEAT_THRESHOLD_C).sum())
    wind = frame["wind_speed"].dropna()

    analysis = {
        "avg_max_temp": f"{frame['max_temp'].mean():.1f}",
        "chance_of_precip": str(int(round_half_up(precip_days * 100 / total))),
        "chance_of_extreme_heat": str(int(round_half_up(heat_days * 100 / total))),
        "avg_wind_speed": f"{wind.mean():.1f}" if not wind.empty else "N/A",
        "avg_air_quality": AIR_QUALITY_PLACEHOLDER,
        "sample_count": total,
    }
    raw_data: List[Dict[str, Any]] = [
        {
            "date": row.date,
            "year": int(row.year),
            "max_temp": float(row.max_temp),
            "precipitation": _none_if_nan(row.precipitation),
            "wind_speed": _none_if_nan(row.wind_speed),
            "air_quality": AIR_QUALITY_PLACEHOLDER,
        }
        for row in frame.itertuples(index=False)
    ]
    return {"analysis": analysis, "raw_data": raw_data}


def analyze_observations(
    lat: float,
    lon: float,
    target: date,
    settings: Optional[ProviderSettings] = None,
    today: Optional[date] = None,
) -> Dict[str, Any]:
    """Fetch, window and summarize. Raises NoHistoricalData when nothing survives."""
    parameter = fetch_power_history(lat, lon, settings=settings, today=today)
    frame = select_window(parameter, target)
    logger.info(f"Observation window for ({lat}, {lon}) on {target.isoformat()}: {len(frame)} samples")
    return summarize_window(frame)
