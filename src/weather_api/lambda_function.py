"""
Weather API Lambda: HTTP surface for the weather pipeline.

Invoked through API Gateway (REST proxy or HTTP API). Routes, with an optional
/api/v1 prefix:
    GET /weather            current + 7-day forecast (+ threshold probabilities)
    GET /weather/download   forecast export as CSV or JSON attachment
    GET /weather/observe    POWER historical analysis for a calendar date
    GET /search             city search (alias: /utils/search)
    GET /, /health          monitor

The error-type table and provider settings are loaded once per container at
import time; a missing config file fails the cold start.
"""
import json
import logging
import os
from datetime import date, datetime, timezone
from typing import Any, Callable, Dict, Optional

import numpy as np
import requests
from pydantic import ValidationError

from src.common.config import load_error_types, load_provider_settings
from src.common.coordinates import validate_coordinate
from src.common.desert_regions import find_desert_region
from src.weather.climate_model import generate_synthetic_weather
from src.weather.formatter import forecast_to_csv, format_weather_data
from src.weather.geocoding import search_locations
from src.weather.observations import NoHistoricalData, analyze_observations
from src.weather.probability import ThresholdSet, estimate_probabilities
from src.weather.providers import fetch_weather_with_fallback

logger = logging.getLogger(__name__)
logger.setLevel(os.environ.get("LOG_LEVEL", "INFO"))

# ============================================================================
# Configuration
# ============================================================================
ERR = load_error_types()
SETTINGS = load_provider_settings()

API_PREFIX = "/api/v1"
EXPORT_FORMATS = ("csv", "json")
CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET,OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}


class ClientInputError(Exception):
    """Bad query input; `error_name` is a key of the error-type table."""

    def __init__(self, error_name: str):
        super().__init__(error_name)
        self.error_name = error_name


# ============================================================================
# Response helpers
# ============================================================================


def _response(status_code: int, body: Any, headers: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
    merged = {**CORS_HEADERS, "Content-Type": "application/json"}
    merged.update(headers or {})
    return {
        "statusCode": status_code,
        "headers": merged,
        "body": body if isinstance(body, str) else json.dumps(body, default=str),
    }


def _error_response(error_name: str, reason: Optional[str] = None) -> Dict[str, Any]:
    spec = ERR[error_name]
    body = spec.to_body()
    if reason:
        body["ERR_REASON"] = reason
    return _response(spec.HTTP_ERR_CODE, body)


def _query_params(event: Dict[str, Any]) -> Dict[str, str]:
    return event.get("queryStringParameters") or {}


def _request_path(event: Dict[str, Any]) -> str:
    path = event.get("rawPath") or event.get("path") or "/"
    if path.startswith(API_PREFIX):
        path = path[len(API_PREFIX):]
    path = path.rstrip("/")
    return path or "/"


def _request_method(event: Dict[str, Any]) -> str:
    method = event.get("httpMethod") or ((event.get("requestContext") or {}).get("http") or {}).get("method")
    return (method or "GET").upper()


# ============================================================================
# Input parsing
# ============================================================================


def parse_location(params: Dict[str, str]) -> tuple[float, float]:
    """Return validated (lat, lon); longitude is wrapped into range."""
    raw_lat = params.get("lat")
    raw_lon = params.get("lon")
    if not raw_lat or not raw_lon:
        raise ClientInputError("QUERY_MISSING_ERR")
    lat = validate_coordinate(raw_lat, "lat")
    lon = validate_coordinate(raw_lon, "lon")
    if lat is None or lon is None:
        raise ClientInputError("INVALID_COORDINATES")
    return lat, lon


def parse_thresholds(raw: Optional[str]) -> Optional[ThresholdSet]:
    """Parse the `thresholds` query parameter (a JSON object)."""
    if not raw:
        return None
    try:
        decoded = json.loads(raw)
    except ValueError:
        raise ClientInputError("INVALID_THRESHOLDS")
    if not isinstance(decoded, dict):
        raise ClientInputError("INVALID_THRESHOLDS")
    try:
        return ThresholdSet(**decoded)
    except ValidationError:
        raise ClientInputError("INVALID_THRESHOLDS")


# ============================================================================
# Pipeline
# ============================================================================


def build_weather_response(
    lat: float,
    lon: float,
    thresholds: Optional[ThresholdSet] = None,
    now: Optional[datetime] = None,
    rng: Optional[np.random.Generator] = None,
) -> Dict[str, Any]:
    """Desert lookup -> provider fallback -> probabilities -> formatting."""
    now = now or datetime.now(timezone.utc)
    region = find_desert_region(lat, lon)
    is_desert = region is not None

    weather = fetch_weather_with_fallback(lat, lon, is_desert, settings=SETTINGS, now=now, rng=rng)
    formatted = format_weather_data(weather)

    body: Dict[str, Any] = {
        "location": {
            "lat": lat,
            "lon": lon,
            "is_desert_region": is_desert,
            "desert_region": region.name if region else None,
        },
        "current": formatted["current"],
        "forecast": formatted["forecast"],
        "data_source": weather["data_source"],
        "data_quality": weather["data_quality"],
        "metadata": {
            "generated_at": now.isoformat(),
            "data_source": weather["data_source"],
            "providers_attempted": weather.get("providers_attempted", []),
            "forecast_days": len(formatted["forecast"]),
        },
    }
    if thresholds is not None:
        body["probabilities"] = estimate_probabilities(
            thresholds,
            lat=lat,
            is_desert=is_desert,
            days=SETTINGS.historical_days,
            rng=rng,
        )
    return body


def build_degraded_response(lat: float, lon: float, now: Optional[datetime] = None) -> Dict[str, Any]:
    """Synthetic full weather used when the pipeline itself fails."""
    now = now or datetime.now(timezone.utc)
    region = find_desert_region(lat, lon)
    weather = format_weather_data(generate_synthetic_weather(lat, lon, region is not None, now=now))
    return {
        "location": {
            "lat": lat,
            "lon": lon,
            "is_desert_region": region is not None,
            "desert_region": region.name if region else None,
        },
        "current": weather["current"],
        "forecast": weather["forecast"],
        "data_source": weather["data_source"],
        "data_quality": weather["data_quality"],
        "metadata": {
            "generated_at": now.isoformat(),
            "data_source": weather["data_source"],
            "providers_attempted": [],
            "forecast_days": len(weather["forecast"]),
            "degraded": True,
        },
    }


def _weather_or_degraded(lat: float, lon: float, thresholds: Optional[ThresholdSet]) -> Dict[str, Any]:
    try:
        return build_weather_response(lat, lon, thresholds)
    except Exception as e:
        logger.error(f"Weather pipeline failed for ({lat}, {lon}): {e}", exc_info=True)
        return build_degraded_response(lat, lon)


# ============================================================================
# Route handlers
# ============================================================================


def handle_health(params: Dict[str, str]) -> Dict[str, Any]:
    return _response(200, {"status": "ok"})


def handle_weather(params: Dict[str, str]) -> Dict[str, Any]:
    lat, lon = parse_location(params)
    thresholds = parse_thresholds(params.get("thresholds"))
    body = _weather_or_degraded(lat, lon, thresholds)
    logger.info(f"Weather Endpoint: sent data for ({lat}, {lon}) from {body['data_source']}")
    return _response(200, body)


def handle_download(params: Dict[str, str]) -> Dict[str, Any]:
    lat, lon = parse_location(params)
    export_format = (params.get("format") or "csv").lower()
    if export_format not in EXPORT_FORMATS:
        raise ClientInputError("UNSUPPORTED_FORMAT")

    body = _weather_or_degraded(lat, lon, None)
    filename = f"weather_{lat}_{lon}.{export_format}"
    disposition = {"Content-Disposition": f'attachment; filename="{filename}"'}
    if export_format == "csv":
        return _response(200, forecast_to_csv(body["forecast"]), {"Content-Type": "text/csv", **disposition})
    return _response(200, json.dumps(body, indent=2, default=str), disposition)


def handle_observe(params: Dict[str, str]) -> Dict[str, Any]:
    if not params.get("date"):
        raise ClientInputError("QUERY_MISSING_ERR")
    lat, lon = parse_location(params)
    try:
        target = date.fromisoformat(params["date"])
    except ValueError:
        raise ClientInputError("INVALID_DATE")

    try:
        result = analyze_observations(lat, lon, target, settings=SETTINGS)
    except NoHistoricalData:
        logger.warning(f"Observe Endpoint: no historical data for ({lat}, {lon}) on {target}")
        return _error_response("NO_HISTORICAL_DATA")
    except (requests.RequestException, ValueError, KeyError, TypeError, AttributeError) as e:
        logger.error(f"Observe Endpoint: upstream error: {e}")
        return _error_response("API_FETCH_FAILED", str(e))

    logger.info("Observe Endpoint: sent observation data")
    return _response(200, result)


def handle_search(params: Dict[str, str]) -> Dict[str, Any]:
    query = params.get("citySrch")
    if not query:
        raise ClientInputError("CITY_QUERY_MISSING")
    try:
        results = search_locations(query, SETTINGS.geocoder)
    except (requests.RequestException, ValueError, KeyError, TypeError, AttributeError) as e:
        logger.error(f"Search Endpoint: {query}: {e}")
        return _error_response("API_FETCH_FAILED", str(e))
    return _response(200, {"results": results})


ROUTES: Dict[str, Callable[[Dict[str, str]], Dict[str, Any]]] = {
    "/": handle_health,
    "/health": handle_health,
    "/weather": handle_weather,
    "/weather/download": handle_download,
    "/weather/observe": handle_observe,
    "/search": handle_search,
    "/utils/search": handle_search,
}


def lambda_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    path = _request_path(event)
    method = _request_method(event)

    if method == "OPTIONS":
        return {"statusCode": 204, "headers": dict(CORS_HEADERS), "body": ""}

    handler = ROUTES.get(path)
    if handler is None or method != "GET":
        logger.warning(f"The route endpoint {method} {path} does not exist")
        return _error_response("NON_EXISTENT_ENDPOINT")

    try:
        return handler(_query_params(event))
    except ClientInputError as e:
        spec = ERR[e.error_name]
        logger.warning(f"{path}: HTTP_Code: {spec.HTTP_ERR_CODE}, ERR_MSG: {spec.ERR_MESSAGE}")
        return _error_response(e.error_name)
