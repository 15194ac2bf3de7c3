"""
Response formatting and export.

Numeric fields are rounded half-up to one decimal place; humidity and cloud cover
become percent strings ("65%"). Formatting an already formatted record is a
no-op.
"""
import io
from decimal import ROUND_FLOOR, Decimal
from typing import Any, Dict, List, Optional

import pandas as pd

ONE_DECIMAL_FIELDS = (
    "temperature",
    "temperature_max",
    "temperature_min",
    "feels_like",
    "wind_speed",
    "wind_speed_50m",
    "precipitation",
    "pressure",
    "solar_radiation",
)
PERCENT_FIELDS = ("humidity", "cloud_cover")

CSV_COLUMNS = [
    "Date",
    "Temperature_C",
    "Temperature_Max_C",
    "Temperature_Min_C",
    "Humidity_Percent",
    "Wind_Speed_ms",
    "Precipitation_mm",
    "Pressure_hPa",
    "Conditions",
]


def round_half_up(value: Any, digits: int = 0) -> float:
    """Round ties upward (64.5 -> 65, 0.25 -> 0.3) instead of to the even neighbour."""
    scaled = Decimal(repr(float(value))).scaleb(digits) + Decimal("0.5")
    return float(scaled.to_integral_value(rounding=ROUND_FLOOR).scaleb(-digits))


def _round_one(value: Any) -> Any:
    if value is None or isinstance(value, (str, bool)):
        return value
    return round_half_up(value, 1)


def _to_percent(value: Any) -> Any:
    if value is None or isinstance(value, str):
        return value
    return f"{int(round_half_up(value))}%"


def format_snapshot(record: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """Return a formatted copy of one current/forecast record."""
    if record is None:
        return None
    formatted = dict(record)
    for field in ONE_DECIMAL_FIELDS:
        if field in formatted:
            formatted[field] = _round_one(formatted[field])
    for field in PERCENT_FIELDS:
        if field in formatted:
            formatted[field] = _to_percent(formatted[field])
    return formatted


def format_weather_data(weather: Dict[str, Any]) -> Dict[str, Any]:
    """Apply format_snapshot to `current` and every `forecast` day."""
    formatted = dict(weather)
    if "current" in weather:
        formatted["current"] = format_snapshot(weather["current"])
    if "forecast" in weather:
        formatted["forecast"] = [format_snapshot(day) for day in weather.get("forecast") or []]
    return formatted


def _strip_percent(value: Any) -> Any:
    if isinstance(value, str):
        return value.rstrip("%")
    return value


def forecast_to_dataframe(forecast: List[Dict[str, Any]]) -> pd.DataFrame:
    rows = [
        {
            "Date": day.get("date"),
            "Temperature_C": day.get("temperature"),
            "Temperature_Max_C": day.get("temperature_max"),
            "Temperature_Min_C": day.get("temperature_min"),
            "Humidity_Percent": _strip_percent(day.get("humidity")),
            "Wind_Speed_ms": day.get("wind_speed"),
            "Precipitation_mm": day.get("precipitation"),
            "Pressure_hPa": day.get("pressure"),
            "Conditions": day.get("conditions"),
        }
        for day in forecast
    ]
    return pd.DataFrame(rows, columns=CSV_COLUMNS)


def forecast_to_csv(forecast: List[Dict[str, Any]]) -> str:
    """CSV export of formatted forecast days, header row first."""
    buffer = io.StringIO()
    forecast_to_dataframe(forecast).to_csv(buffer, index=False, lineterminator="\n")
    return buffer.getvalue()
