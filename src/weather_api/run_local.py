"""
Run the weather API Lambda handler locally.

Run from repo root:
    PYTHONPATH=. python src/weather_api/run_local.py [path] [key=value ...]

Examples:
    PYTHONPATH=. python src/weather_api/run_local.py /weather lat=24.5 lon=54.4
    PYTHONPATH=. python src/weather_api/run_local.py /weather/download lat=51.5 lon=-0.1 format=csv
    PYTHONPATH=. python src/weather_api/run_local.py /search citySrch=Cairo
"""
import json
import logging
import sys

from dotenv import load_dotenv


class MockContext:
    def __init__(self):
        self.function_name = "weather_api_local"
        self.memory_limit_in_mb = 256
        self.invoked_function_arn = "arn:aws:lambda:local:0:function:weather_api"
        self.aws_request_id = "local-weather-request-id"


def build_event(path: str, params: dict) -> dict:
    return {
        "httpMethod": "GET",
        "path": path,
        "headers": {"Accept": "application/json"},
        "queryStringParameters": params or None,
        "body": None,
    }


if __name__ == "__main__":
    load_dotenv()
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    # Import after load_dotenv so ERROR_TYPES_PATH / PROVIDER_SETTINGS_PATH apply
    from src.weather_api.lambda_function import lambda_handler

    path = sys.argv[1] if len(sys.argv) > 1 else "/weather"
    params = dict(arg.split("=", 1) for arg in sys.argv[2:] if "=" in arg)
    if path.startswith("/weather") and not params:
        params = {"lat": "24.4672", "lon": "54.6031"}
        print("ℹ️  No query parameters given; using example coordinates (Abu Dhabi).")
        print()

    event = build_event(path, params)

    print("=" * 60)
    print("Weather API Lambda (local)")
    print("=" * 60)
    print(f"GET {path} {json.dumps(params)}")
    print("=" * 60)

    response = lambda_handler(event, MockContext())
    print("\nResponse:")
    body = response.get("body", "")
    try:
        response["body"] = json.loads(body)
    except ValueError:
        pass
    print(json.dumps(response, indent=2, ensure_ascii=False))
