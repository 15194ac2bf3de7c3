"""Tests for the weather API Lambda handler (API Gateway proxy events)."""
import json
from unittest.mock import patch

import pytest
import requests

from src.weather_api.lambda_function import lambda_handler
from tests.conftest import make_response


class MockContext:
    function_name = "weather_api_test"
    aws_request_id = "test-request-id"


def invoke(path, params=None, method="GET"):
    event = {"httpMethod": method, "path": path, "queryStringParameters": params}
    return lambda_handler(event, MockContext())


def body_of(response):
    return json.loads(response["body"])


@pytest.fixture
def network_down():
    with patch("requests.get", side_effect=requests.ConnectionError("network down")) as mock_get:
        yield mock_get


class TestWeatherEndpoint:
    def test_all_providers_down_still_200(self, network_down):
        response = invoke("/weather", {"lat": "48.85", "lon": "2.35"})
        assert response["statusCode"] == 200

        body = body_of(response)
        assert body["data_source"] == "NASA Climate Simulation"
        assert body["metadata"]["providers_attempted"] == ["NASA POWER", "NASA GMAO", "NASA Worldview"]
        assert len(body["forecast"]) == 7
        for field in ("temperature", "humidity", "wind_speed", "pressure", "conditions", "weather_code", "feels_like"):
            assert body["current"][field] is not None
        assert network_down.call_count == 3

    def test_response_is_formatted(self, network_down):
        body = body_of(invoke("/weather", {"lat": "48.85", "lon": "2.35"}))
        assert body["current"]["humidity"].endswith("%")
        assert all(day["cloud_cover"].endswith("%") for day in body["forecast"])
        assert body["current"]["temperature"] == round(body["current"]["temperature"], 1)

    def test_desert_location_flagged(self, network_down):
        body = body_of(invoke("/weather", {"lat": "24.47", "lon": "54.60"}))
        assert body["location"]["is_desert_region"] is True
        assert body["location"]["desert_region"] == "Arabian"

    def test_longitude_normalized(self, network_down):
        body = body_of(invoke("/weather", {"lat": "10", "lon": "190"}))
        assert body["location"]["lon"] == -170

    def test_missing_coordinates(self):
        response = invoke("/weather", {"lat": "10"})
        assert response["statusCode"] == 400
        assert body_of(response)["HTTP_ERR_CODE"] == 400
        assert "ERR_MESSAGE" in body_of(response)

    def test_no_query_string(self):
        assert invoke("/weather", None)["statusCode"] == 400

    def test_latitude_out_of_range(self):
        response = invoke("/weather", {"lat": "91", "lon": "10"})
        assert response["statusCode"] == 400
        assert "Invalid coordinates" in body_of(response)["ERR_MESSAGE"]

    def test_thresholds_probabilities(self, network_down):
        thresholds = json.dumps({"temperature": 20, "windSpeed": 3})
        body = body_of(invoke("/weather", {"lat": "45", "lon": "7", "thresholds": thresholds}))
        assert set(body["probabilities"]) == {"temperature_above", "wind_speed_above"}
        assert all(0 <= v <= 100 for v in body["probabilities"].values())

    def test_no_thresholds_no_probabilities(self, network_down):
        assert "probabilities" not in body_of(invoke("/weather", {"lat": "45", "lon": "7"}))

    @pytest.mark.parametrize("raw", ["not-json", "[1, 2]", '{"temperature": "hot"}'])
    def test_invalid_thresholds(self, raw):
        response = invoke("/weather", {"lat": "45", "lon": "7", "thresholds": raw})
        assert response["statusCode"] == 400
        assert "thresholds" in body_of(response)["ERR_MESSAGE"]

    def test_pipeline_crash_degrades_to_synthetic(self):
        with patch(
            "src.weather_api.lambda_function.fetch_weather_with_fallback",
            side_effect=RuntimeError("unexpected"),
        ):
            response = invoke("/weather", {"lat": "48.85", "lon": "2.35"})

        assert response["statusCode"] == 200
        body = body_of(response)
        assert body["data_source"] == "NASA Climate Simulation"
        assert body["metadata"]["degraded"] is True
        assert len(body["forecast"]) == 7

    def test_api_prefix_and_cors(self, network_down):
        response = invoke("/api/v1/weather/", {"lat": "1", "lon": "1"})
        assert response["statusCode"] == 200
        assert response["headers"]["Access-Control-Allow-Origin"] == "*"


class TestDownloadEndpoint:
    def test_csv_export(self, network_down):
        response = invoke("/weather/download", {"lat": "48.85", "lon": "2.35", "format": "csv"})
        assert response["statusCode"] == 200
        assert response["headers"]["Content-Type"] == "text/csv"
        assert "attachment" in response["headers"]["Content-Disposition"]

        lines = response["body"].splitlines()
        assert lines[0].split(",") == [
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
        assert len(lines) == 8
        assert "%" not in response["body"]

    def test_csv_is_default(self, network_down):
        response = invoke("/weather/download", {"lat": "48.85", "lon": "2.35"})
        assert response["headers"]["Content-Type"] == "text/csv"

    def test_json_export(self, network_down):
        response = invoke("/weather/download", {"lat": "48.85", "lon": "2.35", "format": "JSON"})
        assert response["statusCode"] == 200
        assert response["headers"]["Content-Disposition"].endswith('.json"')
        assert len(body_of(response)["forecast"]) == 7

    def test_unsupported_format(self):
        response = invoke("/weather/download", {"lat": "48.85", "lon": "2.35", "format": "xml"})
        assert response["statusCode"] == 400
        assert body_of(response)["HTTP_ERR_CODE"] == 400


class TestObserveEndpoint:
    def test_missing_date(self):
        assert invoke("/weather/observe", {"lat": "30", "lon": "31"})["statusCode"] == 400

    def test_invalid_date(self):
        response = invoke("/weather/observe", {"lat": "30", "lon": "31", "date": "15/07/2025"})
        assert response["statusCode"] == 400
        assert "YYYY-MM-DD" in body_of(response)["ERR_MESSAGE"]

    def test_no_historical_data(self):
        payload = {"properties": {"parameter": {"T2M_MAX": {"20220101": 10.0}}}}
        with patch("requests.get", return_value=make_response(payload)):
            response = invoke("/weather/observe", {"lat": "30", "lon": "31", "date": "2025-07-15"})
        assert response["statusCode"] == 404

    def test_upstream_failure(self, network_down):
        response = invoke("/weather/observe", {"lat": "30", "lon": "31", "date": "2025-07-15"})
        assert response["statusCode"] == 502
        assert "network down" in body_of(response)["ERR_REASON"]

    @pytest.mark.parametrize(
        "payload",
        [
            [{"properties": {}}],
            {"properties": {"parameter": {"T2M_MAX": [36.0, 34.0]}}},
        ],
    )
    def test_malformed_payload(self, payload):
        with patch("requests.get", return_value=make_response(payload)):
            response = invoke("/weather/observe", {"lat": "30", "lon": "31", "date": "2025-07-15"})
        assert response["statusCode"] == 502
        assert "Invalid data structure" in body_of(response)["ERR_REASON"]
        assert response["headers"]["Access-Control-Allow-Origin"] == "*"

    def test_success(self):
        payload = {"properties": {"parameter": {"T2M_MAX": {"20220715": 36.0, "20230716": 34.0}}}}
        with patch("requests.get", return_value=make_response(payload)):
            response = invoke("/weather/observe", {"lat": "30", "lon": "31", "date": "2025-07-15"})
        assert response["statusCode"] == 200
        assert body_of(response)["analysis"]["avg_max_temp"] == "35.0"


class TestSearchEndpoint:
    def test_missing_query(self):
        response = invoke("/search", {})
        assert response["statusCode"] == 400
        assert "citySrch" in body_of(response)["ERR_MESSAGE"]

    def test_results(self):
        places = [{"display_name": f"Cairo {i}", "lat": "30.04", "lon": "31.23", "osm_id": i} for i in range(7)]
        with patch("requests.get", return_value=make_response(places)) as mock_get:
            response = invoke("/api/v1/utils/search", {"citySrch": "Cairo"})

        assert response["statusCode"] == 200
        results = body_of(response)["results"]
        assert len(results) == 5
        assert results[0] == {"name": "Cairo 0", "lat": "30.04", "lon": "31.23"}
        params = mock_get.call_args.kwargs["params"]
        assert params == {"q": "Cairo", "format": "json", "limit": 5}
        assert "User-Agent" in mock_get.call_args.kwargs["headers"]

    def test_upstream_failure(self, network_down):
        response = invoke("/search", {"citySrch": "Cairo"})
        assert response["statusCode"] == 502
        assert body_of(response)["ERR_REASON"]


class TestRouting:
    def test_health(self):
        assert invoke("/")["statusCode"] == 200
        assert body_of(invoke("/health")) == {"status": "ok"}

    def test_unknown_route(self):
        response = invoke("/nope")
        assert response["statusCode"] == 404
        assert body_of(response)["HTTP_ERR_CODE"] == 404

    def test_non_get_method(self):
        assert invoke("/weather", {"lat": "1", "lon": "1"}, method="POST")["statusCode"] == 404

    def test_preflight(self):
        response = invoke("/weather", method="OPTIONS")
        assert response["statusCode"] == 204
        assert response["headers"]["Access-Control-Allow-Origin"] == "*"

    def test_http_api_v2_event(self, network_down):
        event = {
            "rawPath": "/weather",
            "requestContext": {"http": {"method": "GET"}},
            "queryStringParameters": {"lat": "1", "lon": "1"},
        }
        assert lambda_handler(event, MockContext())["statusCode"] == 200

    def test_null_http_context_defaults_to_get(self):
        event = {"rawPath": "/health", "requestContext": {"http": None}}
        response = lambda_handler(event, MockContext())
        assert response["statusCode"] == 200
        assert body_of(response) == {"status": "ok"}
