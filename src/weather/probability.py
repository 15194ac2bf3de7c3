"""
Threshold exceedance probabilities from (synthetic) historical series.

For each threshold the caller supplies, the share of historical samples
strictly greater than the threshold, as a whole percent.
"""
import math
from typing import Any, Dict, Mapping, Optional, Sequence

import numpy as np
from pydantic import BaseModel, ConfigDict, Field

from src.weather.climate_model import generate_historical_series

# threshold field -> (series column, output key)
DIMENSIONS = {
    "temperature": ("temperature", "temperature_above"),
    "precipitation": ("precipitation", "precipitation_above"),
    "wind_speed": ("wind_speed", "wind_speed_above"),
}


class ThresholdSet(BaseModel):
    """User thresholds; an absent key means no probability for that dimension."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    temperature: Optional[float] = None
    precipitation: Optional[float] = None
    wind_speed: Optional[float] = Field(default=None, alias="windSpeed")

    def present(self) -> Dict[str, float]:
        return {name: value for name, value in self.model_dump().items() if value is not None}


def percent_above(samples: Sequence[float], threshold: float) -> int:
    """Percent (half-up rounded) of samples strictly greater than threshold."""
    values = np.asarray(samples, dtype=float)
    if values.size == 0:
        return 0
    share = np.count_nonzero(values > threshold) / values.size
    return int(math.floor(share * 100 + 0.5))


def estimate_probabilities(
    thresholds: ThresholdSet,
    historical: Optional[Mapping[str, Sequence[float]]] = None,
    lat: float = 0.0,
    is_desert: bool = False,
    days: int = 365,
    rng: Optional[np.random.Generator] = None,
) -> Dict[str, int]:
    """
    Estimate exceedance probabilities for each present threshold.

    Args:
        thresholds: Parsed ThresholdSet
        historical: Mapping of column -> samples (dict of lists or DataFrame).
            Dimensions missing here are generated from the climate model.
        lat, is_desert: Location inputs for generated series
        days: Length of generated series

    Returns:
        dict like {"temperature_above": 40}; absent thresholds produce no key.
    """
    requested = thresholds.present()
    if not requested:
        return {}

    generated: Any = None
    result: Dict[str, int] = {}
    for name, threshold in requested.items():
        column, output_key = DIMENSIONS[name]
        samples = historical.get(column) if historical is not None else None
        if samples is None:
            if generated is None:
                generated = generate_historical_series(lat, is_desert, days=days, rng=rng)
            samples = generated[column]
        result[output_key] = percent_above(samples, threshold)
    return result
