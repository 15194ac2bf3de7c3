"""Tests for threshold exceedance probabilities."""
import pandas as pd
import pytest
from pydantic import ValidationError

from src.weather.probability import ThresholdSet, estimate_probabilities, percent_above


class TestPercentAbove:
    def test_strictly_greater(self):
        assert percent_above([1, 2, 3, 4, 5], 3) == 40

    def test_rounds_half_up(self):
        # 1 of 8 = 12.5%
        assert percent_above([1, 1, 1, 1, 1, 1, 1, 9], 5) == 13

    def test_empty_series(self):
        assert percent_above([], 3) == 0


class TestThresholdSet:
    def test_camel_case_wind_alias(self):
        thresholds = ThresholdSet(**{"windSpeed": 5})
        assert thresholds.present() == {"wind_speed": 5.0}

    def test_unknown_keys_ignored(self):
        assert ThresholdSet(**{"temperature": 30, "uv": 9}).present() == {"temperature": 30.0}

    def test_non_numeric_rejected(self):
        with pytest.raises(ValidationError):
            ThresholdSet(**{"temperature": "hot"})


class TestEstimateProbabilities:
    def test_supplied_series(self):
        result = estimate_probabilities(ThresholdSet(temperature=3), {"temperature": [1, 2, 3, 4, 5]})
        assert result == {"temperature_above": 40}

    def test_absent_thresholds_produce_no_key(self):
        result = estimate_probabilities(ThresholdSet(precipitation=0.5), {"precipitation": [0, 0, 1, 2]})
        assert result == {"precipitation_above": 50}
        assert "temperature_above" not in result
        assert "wind_speed_above" not in result

    def test_no_thresholds(self):
        assert estimate_probabilities(ThresholdSet(), {"temperature": [1, 2]}) == {}

    def test_dataframe_series(self):
        frame = pd.DataFrame({"temperature": [10, 20, 30, 40], "wind_speed": [1, 2, 3, 4]})
        result = estimate_probabilities(ThresholdSet(temperature=25, wind_speed=0), frame)
        assert result == {"temperature_above": 50, "wind_speed_above": 100}

    def test_missing_dimension_is_generated(self, rng):
        result = estimate_probabilities(
            ThresholdSet(temperature=1000, precipitation=-1),
            {"temperature": [1, 2, 3]},
            lat=25,
            is_desert=True,
            rng=rng,
        )
        assert result == {"temperature_above": 0, "precipitation_above": 100}

    def test_generated_without_history(self, rng):
        result = estimate_probabilities(ThresholdSet(windSpeed=3.0), lat=25, is_desert=True, rng=rng)
        # desert wind is always 3.5-6.5 m/s
        assert result == {"wind_speed_above": 100}

    def test_percent_in_range(self, rng):
        result = estimate_probabilities(ThresholdSet(temperature=20), lat=45, rng=rng)
        assert 0 <= result["temperature_above"] <= 100
