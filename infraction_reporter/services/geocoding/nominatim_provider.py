import logging
from typing import Dict, Any

import requests

from infraction_reporter.models.geocoding import GeocodingResult
from .base import GeocodingProvider, LOOKUP_FAILED_ERROR, NOT_DETERMINED_ERROR

logger = logging.getLogger(__name__)


class NominatimProvider(GeocodingProvider):
    """
    OpenStreetMap Nominatim reverse-geocoding provider.

    - No API key required.
    - Includes a User-Agent header as required by Nominatim usage policy.
    - Builds "<road> <house_number>" when available, otherwise falls back
      to the full display name.
    - Never raises upstream exceptions.
    """

    name = "nominatim"
    DEFAULT_URL = "https://nominatim.openstreetmap.org/reverse"

    def __init__(
        self,
        base_url: str = DEFAULT_URL,
        timeout: float = 3.0,
        user_agent: str = "infraction-reporter/0.1",
    ):
        self.base_url = base_url
        self.timeout = timeout
        self.user_agent = user_agent

    def reverse_geocode(self, latitude: float, longitude: float) -> GeocodingResult:
        try:
            params = {
                "lat": latitude,
                "lon": longitude,
                "format": "json",
                "addressdetails": 1,
            }
            headers = {
                "User-Agent": self.user_agent,
            }
            resp = requests.get(self.base_url, params=params, headers=headers, timeout=self.timeout)
            if resp.status_code != 200:
                logger.warning(f"Nominatim reverse-geocode failed with status {resp.status_code}")
                return GeocodingResult(error=LOOKUP_FAILED_ERROR)

            data: Dict[str, Any] = resp.json()
        except (requests.RequestException, ValueError) as e:
            logger.warning(f"Nominatim reverse-geocode error: {e}")
            return GeocodingResult(error=LOOKUP_FAILED_ERROR)

        if not isinstance(data, dict):
            return GeocodingResult(error=NOT_DETERMINED_ERROR)

        address = data.get("address") or {}
        road = address.get("road") or address.get("pedestrian")
        if road:
            return GeocodingResult(direccion=f"{road} {address.get('house_number') or ''}".strip())

        if data.get("display_name"):
            return GeocodingResult(direccion=data["display_name"])

        return GeocodingResult(error=NOT_DETERMINED_ERROR)
