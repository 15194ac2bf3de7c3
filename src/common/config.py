"""Configuration loaders with Pydantic validation (error types JSON, provider YAML)."""
import json
import os
from pathlib import Path
from typing import Dict, Union

import yaml
from pydantic import BaseModel, Field

PROJECT_ROOT = Path(__file__).parent.parent.parent
CONFIG_DIR = PROJECT_ROOT / "config"


class ErrorSpec(BaseModel):
    """One entry of the error-type table, keyed by error name."""
    HTTP_ERR_CODE: int
    ERR_MESSAGE: str

    def to_body(self) -> Dict[str, Union[int, str]]:
        return {"HTTP_ERR_CODE": self.HTTP_ERR_CODE, "ERR_MESSAGE": self.ERR_MESSAGE}


class ProviderConfig(BaseModel):
    """Outbound data source endpoint."""
    url: str
    timeout_seconds: float


class GeocoderConfig(BaseModel):
    url: str = "https://nominatim.openstreetmap.org/search"
    timeout_seconds: float = 10
    user_agent: str = "nasa-weather-backend/1.0"
    limit: int = 5


class ProviderSettings(BaseModel):
    """Complete provider configuration from YAML."""
    power: ProviderConfig = Field(
        default_factory=lambda: ProviderConfig(
            url="https://power.larc.nasa.gov/api/temporal/daily/point",
            timeout_seconds=15,
        )
    )
    gmao: ProviderConfig = Field(
        default_factory=lambda: ProviderConfig(
            url="https://fluid.nccs.nasa.gov/api/gmao/forecast",
            timeout_seconds=15,
        )
    )
    worldview: ProviderConfig = Field(
        default_factory=lambda: ProviderConfig(
            url="https://wvs.earthdata.nasa.gov/api/v1/snapshot",
            timeout_seconds=10,
        )
    )
    observation_timeout_seconds: float = 30
    observation_years: int = 30
    historical_days: int = 365
    geocoder: GeocoderConfig = Field(default_factory=GeocoderConfig)


def get_error_types_path() -> Path:
    return Path(os.getenv("ERROR_TYPES_PATH", CONFIG_DIR / "error_types.json"))


def get_provider_settings_path() -> Path:
    return Path(os.getenv("PROVIDER_SETTINGS_PATH", CONFIG_DIR / "providers.yaml"))


def load_error_types(config_path: Union[str, Path, None] = None) -> Dict[str, ErrorSpec]:
    """Load and validate the error-type table from a JSON file."""
    config_path = Path(config_path) if config_path else get_error_types_path()
    if not config_path.exists():
        raise FileNotFoundError(f"Error type config not found: {config_path}")

    with open(config_path, encoding="utf-8") as f:
        raw = json.load(f)

    return {name: ErrorSpec(**spec) for name, spec in raw.items()}


def load_provider_settings(config_path: Union[str, Path, None] = None) -> ProviderSettings:
    """Load and validate provider settings from a YAML file.

    An empty document yields the defaults.
    """
    config_path = Path(config_path) if config_path else get_provider_settings_path()
    if not config_path.exists():
        raise FileNotFoundError(f"Provider settings not found: {config_path}")

    with open(config_path, encoding="utf-8") as f:
        raw_config = yaml.safe_load(f) or {}

    return ProviderSettings(**raw_config)
