"""
Provider adapters and the ordered fallback chain.

Adapters are tried strictly in order NASA POWER -> NASA GMAO -> NASA Worldview;
the first one returning a result wins. Each adapter makes a single outbound
request with its own timeout and returns None on any transport, HTTP status or
payload-structure failure. When every adapter returns None the synthetic
climate model supplies the full response.

Every adapter returns a dict with keys:
    current       WeatherSnapshot dict
    forecast      list of 7 daily dicts (each with "date")
    data_source   provider label
    data_quality  provider quality label
"""
import logging
import math
from datetime import date, datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional, Tuple

import numpy as np
import requests

from src.common.config import ProviderSettings
from src.weather.climate_model import (
    FORECAST_DAYS,
    SIMULATION_SOURCE,
    build_synthetic_snapshot,
    generate_synthetic_weather,
)
from src.weather.conditions import (
    calculate_feels_like,
    get_power_conditions,
    get_power_weather_code,
    get_weather_code,
    get_weather_conditions,
)
from src.weather.validation import is_valid_nasa_value, resolve_value

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)

POWER_SOURCE = "NASA POWER"
POWER_QUALITY = "NASA POWER Satellite Data"
GMAO_SOURCE = "NASA GMAO"
GMAO_QUALITY = "NASA GMAO Model Forecast"
WORLDVIEW_SOURCE = "NASA Worldview + Climate Model"
WORLDVIEW_QUALITY = "Satellite-verified location, climate model values"

POWER_PARAMETERS = "T2M,T2M_MAX,T2M_MIN,RH2M,WS10M,WS50M,PRECTOTCORR,PS,ALLSKY_SFC_SW_DWN,CLOUD_AMT"
POWER_LOOKBACK_DAYS = 7
WORLDVIEW_LAYER = "MODIS_Terra_CorrectedReflectance_TrueColor"

# Soft failures: converted to None, never raised to the caller.
SOFT_FAILURES = (requests.RequestException, ValueError, KeyError, TypeError, AttributeError)

Adapter = Callable[..., Optional[Dict[str, Any]]]


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def _get_rng(rng: Optional[np.random.Generator]) -> np.random.Generator:
    return rng if rng is not None else np.random.default_rng()


def _parse_power_date(key: str) -> date:
    return datetime.strptime(key, "%Y%m%d").date()


# ============================================================================
# NASA POWER
# ============================================================================


def _fetch_power_payload(lat: float, lon: float, today: date, settings: ProviderSettings) -> Dict[str, Any]:
    params = {
        "parameters": POWER_PARAMETERS,
        "community": "RE",
        "longitude": lon,
        "latitude": lat,
        "start": (today - timedelta(days=POWER_LOOKBACK_DAYS)).strftime("%Y%m%d"),
        "end": (today - timedelta(days=1)).strftime("%Y%m%d"),
        "format": "JSON",
    }
    resp = requests.get(settings.power.url, params=params, timeout=settings.power.timeout_seconds)
    resp.raise_for_status()
    return resp.json()


def _latest_valid_key(series: Dict[str, Any]) -> Optional[str]:
    """Most recent YYYYMMDD key whose value is not a sentinel."""
    for key in sorted(series.keys(), reverse=True):
        if is_valid_nasa_value(series[key]):
            return key
    return None


def parse_power_current(
    parameter: Dict[str, Dict[str, Any]],
    lat: float,
    lon: float,
    is_desert: bool,
    now: datetime,
    rng: Optional[np.random.Generator] = None,
) -> Optional[Dict[str, Any]]:
    """
    Map a POWER `properties.parameter` block into a WeatherSnapshot.

    Fields carrying the sentinel are filled from the climate model and listed
    in `filled_fields`. Returns None when no day has a usable T2M.
    """
    t2m = parameter.get("T2M")
    if not isinstance(t2m, dict) or not t2m:
        return None
    key = _latest_valid_key(t2m)
    if key is None:
        return None

    def raw(name: str) -> Any:
        series = parameter.get(name) or {}
        return series.get(key)

    defaults = build_synthetic_snapshot(lat, is_desert, now.month, now.hour, rng)
    filled: List[str] = []

    def pick(name: str, field: str, fallback: float) -> float:
        value = raw(name)
        if not is_valid_nasa_value(value):
            filled.append(field)
        return float(resolve_value(value, fallback))

    temperature = pick("T2M", "temperature", defaults["temperature"])
    humidity = pick("RH2M", "humidity", defaults["humidity"])
    wind_speed = pick("WS10M", "wind_speed", defaults["wind_speed"])
    precipitation = pick("PRECTOTCORR", "precipitation", defaults["precipitation"])
    cloud_cover = pick("CLOUD_AMT", "cloud_cover", defaults["cloud_cover"])

    # PS is reported in kPa
    surface_pressure = raw("PS")
    if is_valid_nasa_value(surface_pressure):
        pressure = float(surface_pressure) * 10
    else:
        filled.append("pressure")
        pressure = defaults["pressure"]

    return {
        "temperature": temperature,
        "temperature_max": pick("T2M_MAX", "temperature_max", defaults["temperature_max"]),
        "temperature_min": pick("T2M_MIN", "temperature_min", defaults["temperature_min"]),
        "humidity": humidity,
        "wind_speed": wind_speed,
        "wind_speed_50m": pick("WS50M", "wind_speed_50m", wind_speed * 1.3),
        "precipitation": precipitation,
        "pressure": pressure,
        "solar_radiation": pick("ALLSKY_SFC_SW_DWN", "solar_radiation", defaults["solar_radiation"]),
        "cloud_cover": cloud_cover,
        "conditions": get_power_conditions(precipitation, cloud_cover, humidity, is_desert),
        "weather_code": get_power_weather_code(precipitation, cloud_cover),
        "feels_like": calculate_feels_like(temperature, humidity, wind_speed, is_desert),
        "data_quality": POWER_QUALITY if not filled else f"{POWER_QUALITY} (gap-filled)",
        "data_source": POWER_SOURCE,
        "observation_date": _parse_power_date(key).isoformat(),
        "filled_fields": filled,
        "location": {"lat": lat, "lon": lon},
    }


def build_power_forecast(
    current: Dict[str, Any],
    is_desert: bool,
    start: date,
    rng: Optional[np.random.Generator] = None,
    days: int = FORECAST_DAYS,
) -> List[Dict[str, Any]]:
    """Perturb one POWER reading into a 7-day outlook (sinusoid + jitter per day)."""
    rng = _get_rng(rng)
    forecast = []
    for i in range(days):
        delta = math.sin(i * math.pi / 3) * 2 + rng.uniform(-1.5, 1.5)
        temperature = current["temperature"] + delta
        humidity = _clamp(current["humidity"] + rng.uniform(-8, 8), 0, 100)
        wind_speed = max(0.0, current["wind_speed"] + rng.uniform(-1, 1))
        precipitation = max(0.0, current["precipitation"] * rng.uniform(0.5, 1.5) + rng.uniform(-0.5, 0.5))
        cloud_cover = _clamp(current["cloud_cover"] + rng.uniform(-15, 15), 0, 100)
        forecast.append(
            {
                "date": (start + timedelta(days=i)).isoformat(),
                "temperature": temperature,
                "temperature_max": current["temperature_max"] + delta + rng.uniform(-1, 1),
                "temperature_min": current["temperature_min"] + delta + rng.uniform(-1, 1),
                "humidity": humidity,
                "wind_speed": wind_speed,
                "wind_speed_50m": wind_speed * 1.3,
                "precipitation": precipitation,
                "pressure": current["pressure"] + rng.uniform(-3, 3),
                "cloud_cover": cloud_cover,
                "conditions": get_power_conditions(precipitation, cloud_cover, humidity, is_desert),
                "weather_code": get_power_weather_code(precipitation, cloud_cover),
                "feels_like": calculate_feels_like(temperature, humidity, wind_speed, is_desert),
                "confidence": round(rng.uniform(0.75, 0.95), 2),
                "data_quality": POWER_QUALITY,
            }
        )
    return forecast


def fetch_power_weather(
    lat: float,
    lon: float,
    is_desert: bool,
    settings: Optional[ProviderSettings] = None,
    now: Optional[datetime] = None,
    rng: Optional[np.random.Generator] = None,
) -> Optional[Dict[str, Any]]:
    settings = settings or ProviderSettings()
    now = now or datetime.now(timezone.utc)
    try:
        payload = _fetch_power_payload(lat, lon, now.date(), settings)
        parameter = payload["properties"]["parameter"]
        current = parse_power_current(parameter, lat, lon, is_desert, now, rng)
        if current is None:
            logger.warning("NASA POWER returned no usable T2M values")
            return None
        return {
            "current": current,
            "forecast": build_power_forecast(current, is_desert, now.date(), rng),
            "data_source": POWER_SOURCE,
            "data_quality": current["data_quality"],
        }
    except SOFT_FAILURES as e:
        logger.warning(f"NASA POWER fetch failed: {e}")
        return None


# ============================================================================
# NASA GMAO
# ============================================================================


def parse_gmao_day(
    entry: Dict[str, Any],
    index: int,
    lat: float,
    is_desert: bool,
    start: date,
    rng: Optional[np.random.Generator] = None,
) -> Dict[str, Any]:
    """Map one GMAO forecast entry; sentinel fields come from the climate model."""
    day = start + timedelta(days=index)
    if entry.get("date"):
        day = date.fromisoformat(str(entry["date"])[:10])
    defaults = build_synthetic_snapshot(lat, is_desert, day.month, 12, rng)

    temperature = float(resolve_value(entry.get("t2m"), defaults["temperature"]))
    humidity = float(resolve_value(entry.get("rh2m"), defaults["humidity"]))
    wind_speed = float(resolve_value(entry.get("ws10m"), defaults["wind_speed"]))
    precipitation = float(resolve_value(entry.get("precip"), defaults["precipitation"]))
    return {
        "date": day.isoformat(),
        "temperature": temperature,
        "temperature_max": float(resolve_value(entry.get("t2m_max"), defaults["temperature_max"])),
        "temperature_min": float(resolve_value(entry.get("t2m_min"), defaults["temperature_min"])),
        "humidity": humidity,
        "wind_speed": wind_speed,
        "wind_speed_50m": float(resolve_value(entry.get("ws50m"), wind_speed * 1.3)),
        "precipitation": precipitation,
        "pressure": float(resolve_value(entry.get("slp"), defaults["pressure"])),
        "cloud_cover": float(resolve_value(entry.get("cldtot"), defaults["cloud_cover"])),
        "conditions": get_weather_conditions(precipitation, humidity, is_desert),
        "weather_code": get_weather_code(precipitation, humidity),
        "feels_like": calculate_feels_like(temperature, humidity, wind_speed, is_desert),
        "data_quality": GMAO_QUALITY,
    }


def fetch_gmao_weather(
    lat: float,
    lon: float,
    is_desert: bool,
    settings: Optional[ProviderSettings] = None,
    now: Optional[datetime] = None,
    rng: Optional[np.random.Generator] = None,
) -> Optional[Dict[str, Any]]:
    settings = settings or ProviderSettings()
    now = now or datetime.now(timezone.utc)
    params = {"lat": lat, "lon": lon, "days": FORECAST_DAYS}
    try:
        resp = requests.get(settings.gmao.url, params=params, timeout=settings.gmao.timeout_seconds)
        resp.raise_for_status()
        entries = resp.json().get("forecast")
        if not isinstance(entries, list) or not entries:
            logger.warning("NASA GMAO response has no forecast array")
            return None

        forecast = [parse_gmao_day(entry, i, lat, is_desert, now.date(), rng) for i, entry in enumerate(entries)]
        current = {key: value for key, value in forecast[0].items() if key != "date"}
        current["data_source"] = GMAO_SOURCE
        current["observation_date"] = forecast[0]["date"]
        current["location"] = {"lat": lat, "lon": lon}
        return {
            "current": current,
            "forecast": forecast,
            "data_source": GMAO_SOURCE,
            "data_quality": GMAO_QUALITY,
        }
    except SOFT_FAILURES as e:
        logger.warning(f"NASA GMAO fetch failed: {e}")
        return None


# ============================================================================
# NASA Worldview
# ============================================================================


def fetch_worldview_weather(
    lat: float,
    lon: float,
    is_desert: bool,
    settings: Optional[ProviderSettings] = None,
    now: Optional[datetime] = None,
    rng: Optional[np.random.Generator] = None,
) -> Optional[Dict[str, Any]]:
    """
    Request a Worldview snapshot for the location.

    The image is not parsed: a successful response only confirms imagery
    coverage, and the values come from the climate model.
    """
    settings = settings or ProviderSettings()
    now = now or datetime.now(timezone.utc)
    params = {
        "REQUEST": "GetSnapshot",
        "TIME": (now.date() - timedelta(days=1)).isoformat(),
        "BBOX": f"{lat - 1},{lon - 1},{lat + 1},{lon + 1}",
        "CRS": "EPSG:4326",
        "LAYERS": WORLDVIEW_LAYER,
        "FORMAT": "image/jpeg",
        "WIDTH": 256,
        "HEIGHT": 256,
    }
    try:
        resp = requests.get(settings.worldview.url, params=params, timeout=settings.worldview.timeout_seconds)
        resp.raise_for_status()
    except SOFT_FAILURES as e:
        logger.warning(f"NASA Worldview fetch failed: {e}")
        return None

    weather = generate_synthetic_weather(lat, lon, is_desert, now=now, rng=rng, data_source=WORLDVIEW_SOURCE)
    weather["data_quality"] = WORLDVIEW_QUALITY
    weather["current"]["data_quality"] = WORLDVIEW_QUALITY
    return weather


# ============================================================================
# Fallback chain
# ============================================================================

PROVIDER_CHAIN: Tuple[Tuple[str, Adapter], ...] = (
    (POWER_SOURCE, fetch_power_weather),
    (GMAO_SOURCE, fetch_gmao_weather),
    ("NASA Worldview", fetch_worldview_weather),
)


def fetch_weather_with_fallback(
    lat: float,
    lon: float,
    is_desert: bool,
    settings: Optional[ProviderSettings] = None,
    now: Optional[datetime] = None,
    rng: Optional[np.random.Generator] = None,
    chain: Tuple[Tuple[str, Adapter], ...] = PROVIDER_CHAIN,
) -> Dict[str, Any]:
    """
    Try each adapter in order, stopping at the first result.

    Falls back to the synthetic climate model when every adapter fails.
    The result carries `providers_attempted` (names, in call order).
    """
    settings = settings or ProviderSettings()
    now = now or datetime.now(timezone.utc)
    attempted: List[str] = []

    for name, adapter in chain:
        attempted.append(name)
        try:
            result = adapter(lat, lon, is_desert, settings=settings, now=now, rng=rng)
        except Exception as e:
            logger.warning(f"{name} adapter raised unexpectedly: {e}")
            result = None
        if result is not None:
            logger.info(f"Weather for ({lat}, {lon}) served by {name}")
            result["providers_attempted"] = attempted
            return result

    logger.warning(f"All providers failed for ({lat}, {lon}); using {SIMULATION_SOURCE}")
    result = generate_synthetic_weather(lat, lon, is_desert, now=now, rng=rng)
    result["providers_attempted"] = attempted
    return result
