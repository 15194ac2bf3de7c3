"""
Sentinel handling for provider payloads.

NASA sources encode "no data" as -999; anything below -900 is treated as
the same marker.
"""
import math
from typing import Any

MISSING_DATA_SENTINEL = -999
SENTINEL_FLOOR = -900


def is_valid_nasa_value(value: Any) -> bool:
    """True unless value is None, NaN, the -999 sentinel, or below -900."""
    if value is None or isinstance(value, bool):
        return False
    try:
        number = float(value)
    except (TypeError, ValueError):
        return False
    if math.isnan(number):
        return False
    if number == MISSING_DATA_SENTINEL:
        return False
    return number >= SENTINEL_FLOOR


def resolve_value(value: Any, fallback: float) -> float:
    """Return value unchanged if valid, otherwise fallback."""
    return value if is_valid_nasa_value(value) else fallback
