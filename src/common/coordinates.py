"""
Coordinate parsing for query-string input.

Longitude wraps into [-180, 180); latitude outside [-90, 90] is rejected.
"""
import math
from typing import Any, Optional


def validate_coordinate(value: Any, kind: str) -> Optional[float]:
    """
    Parse and validate a latitude or longitude.

    Args:
        value: Raw value (string from the query string, or a number)
        kind: 'lat' or 'lon'

    Returns:
        The validated float (longitude normalized), or None if invalid.

    Example:
        validate_coordinate(190, "lon") -> -170.0
        validate_coordinate(91, "lat") -> None
    """
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number) or math.isinf(number):
        return None

    if kind == "lat":
        if number < -90 or number > 90:
            return None
        return number
    if kind == "lon":
        if -180 <= number <= 180:
            return number
        return ((number + 180) % 360) - 180
    raise ValueError(f"Unknown coordinate kind: {kind!r} (expected 'lat' or 'lon')")
