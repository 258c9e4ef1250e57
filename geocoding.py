# geocoding.py
import logging
from typing import Optional

import requests

logger = logging.getLogger(__name__)

# Base URL for the OpenStreetMap Nominatim API
BASE_URL = "https://nominatim.openstreetmap.org/search"

# OSM policy requires a User-Agent with a valid contact email
USER_AGENT = "PublicToiletFinder/1.0 (your_email@example.com)"

REQUEST_TIMEOUT = 10  # seconds


def geocode_address(address: str) -> Optional[dict]:
    """
    Takes a string address and sends it to the OpenStreetMap Nominatim API.
    Returns a dictionary with the full formatted address, latitude, and longitude,
    or None if the address could not be found.
    """
    params = {
        "q": address,
        "format": "json",
        "limit": 1,
    }
    headers = {"User-Agent": USER_AGENT}

    response = requests.get(BASE_URL, params=params, headers=headers, timeout=REQUEST_TIMEOUT)

    # Raise an error if the request failed (e.g., bad connection, 500 error)
    response.raise_for_status()

    data = response.json()
    if not data:
        logger.info("No geocoding result for %r", address)
        return None

    result = data[0]
    return {
        "display_name": result.get("display_name"),
        "lat": float(result["lat"]),
        "lon": float(result["lon"]),
    }
