"""
City search via OpenStreetMap Nominatim.

Returns at most `limit` candidates as {name, lat, lon}. Raises on upstream
failure; the HTTP surface maps that to API_FETCH_FAILED.
"""
import logging
from typing import Any, Dict, List, Optional

import requests

from src.common.config import GeocoderConfig

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)


def search_locations(query: str, config: Optional[GeocoderConfig] = None) -> List[Dict[str, Any]]:
    config = config or GeocoderConfig()
    params = {"q": query, "format": "json", "limit": config.limit}
    headers = {"User-Agent": config.user_agent}
    resp = requests.get(config.url, params=params, headers=headers, timeout=config.timeout_seconds)
    resp.raise_for_status()

    locations = [
        {"name": loc.get("display_name"), "lat": loc.get("lat"), "lon": loc.get("lon")}
        for loc in resp.json()[: config.limit]
    ]
    logger.info(f"Search results for query: {query} ({len(locations)} found)")
    return locations
