"""Shared fixtures: seeded RNG, fixed clock, fake HTTP responses."""
from datetime import datetime, timezone
from unittest.mock import MagicMock

import numpy as np
import pytest
import requests


@pytest.fixture
def rng():
    return np.random.default_rng(42)


@pytest.fixture
def fixed_now():
    return datetime(2025, 7, 15, 14, 0, tzinfo=timezone.utc)


def make_response(payload=None, status_code=200):
    """MagicMock standing in for requests.Response."""
    resp = MagicMock()
    resp.status_code = status_code
    resp.ok = status_code < 400
    resp.json.return_value = payload
    if status_code >= 400:
        resp.raise_for_status.side_effect = requests.HTTPError(f"{status_code} Error", response=resp)
    else:
        resp.raise_for_status.return_value = None
    return resp


@pytest.fixture
def power_payload():
    """POWER daily point response; the latest day is all sentinel."""
    return {
        "properties": {
            "parameter": {
                "T2M": {"20250712": 22.0, "20250713": 25.3, "20250714": -999},
                "T2M_MAX": {"20250713": 30.1, "20250714": -999},
                "T2M_MIN": {"20250713": 18.2, "20250714": -999},
                "RH2M": {"20250713": 55.0, "20250714": -999},
                "WS10M": {"20250713": 3.2, "20250714": -999},
                "WS50M": {"20250713": -999, "20250714": -999},
                "PRECTOTCORR": {"20250713": 0.0, "20250714": -999},
                "PS": {"20250713": 101.3, "20250714": -999},
                "ALLSKY_SFC_SW_DWN": {"20250713": 6.1, "20250714": -999},
                "CLOUD_AMT": {"20250713": 40.0, "20250714": -999},
            }
        }
    }


@pytest.fixture
def gmao_payload():
    return {
        "forecast": [
            {
                "date": f"2025-07-{15 + i:02d}",
                "t2m": 20.0 + i,
                "t2m_max": 26.0 + i,
                "t2m_min": 14.0 + i,
                "rh2m": 60.0,
                "ws10m": 4.0,
                "ws50m": 6.0,
                "precip": 0.0 if i else 7.5,
                "slp": 1012.0,
                "cldtot": -999 if i == 3 else 50.0,
            }
            for i in range(7)
        ]
    }
