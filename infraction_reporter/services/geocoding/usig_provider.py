import logging
from typing import Any

import requests

from infraction_reporter.models.geocoding import GeocodingResult
from .base import GeocodingProvider, LOOKUP_FAILED_ERROR, result_from_payload

logger = logging.getLogger(__name__)


class USIGProvider(GeocodingProvider):
    """
    Buenos Aires city street normalizer (USIG) reverse-geocoding provider.

    - No API key required.
    - The response carries the address under one of three layouts; see
      base.parse_address_payload.
    - Never raises upstream exceptions; failures come back as `error`.
    """

    name = "usig"
    DEFAULT_URL = "https://servicios.usig.buenosaires.gob.ar/normalizar/"

    def __init__(self, base_url: str = DEFAULT_URL, timeout: float = 3.0):
        self.base_url = base_url
        self.timeout = timeout

    def reverse_geocode(self, latitude: float, longitude: float) -> GeocodingResult:
        params = {
            "lng": longitude,
            "lat": latitude,
            "tipoResultado": "calle_altura_calle_y_calle",
        }
        try:
            logger.info(f"Querying USIG geocoding for ({latitude}, {longitude})")
            resp = requests.get(self.base_url, params=params, timeout=self.timeout)
            if not resp.ok:
                logger.warning(f"USIG reverse-geocode failed with status {resp.status_code}")
                return GeocodingResult(error=LOOKUP_FAILED_ERROR)

            data: Any = resp.json()
        except (requests.RequestException, ValueError) as e:
            # Transport faults and unparseable bodies both degrade to an error field
            logger.warning(f"USIG reverse-geocode error: {e}")
            return GeocodingResult(error=LOOKUP_FAILED_ERROR)

        return result_from_payload(data, self.name)
