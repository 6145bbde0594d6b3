import asyncio
import logging
from typing import Optional

from infraction_reporter.core.settings import settings
from infraction_reporter.models.geocoding import GeocodingResult
from .base import GeocodingProvider
from .nominatim_provider import NominatimProvider
from .usig_provider import USIGProvider

logger = logging.getLogger(__name__)

_provider_instance: Optional[GeocodingProvider] = None


def get_geocoding_provider() -> GeocodingProvider:
    """
    Resolve the active geocoding provider based on settings.

    Rules:
    - Default: USIG street normalizer.
    - GEOCODING_PROVIDER='nominatim' selects OpenStreetMap.
    - Unknown names log a warning and fall back to USIG.
    """
    global _provider_instance
    if _provider_instance is not None:
        return _provider_instance

    provider_name = (settings.GEOCODING_PROVIDER or "usig").lower()

    if provider_name == "nominatim":
        _provider_instance = NominatimProvider(
            base_url=settings.NOMINATIM_URL,
            timeout=settings.GEOCODING_TIMEOUT_SECONDS,
        )
    else:
        if provider_name != "usig":
            logger.warning(f"Unknown GEOCODING_PROVIDER '{provider_name}', falling back to usig")
        _provider_instance = USIGProvider(
            base_url=settings.GEOCODING_URL,
            timeout=settings.GEOCODING_TIMEOUT_SECONDS,
        )

    logger.info(f"Geocoding provider initialized: {_provider_instance.name}")
    return _provider_instance


def reset_geocoding_provider() -> None:
    """Forget the cached provider so the next call re-reads settings."""
    global _provider_instance
    _provider_instance = None


async def reverse_geocode_async(
    latitude: float,
    longitude: float,
    provider: Optional[GeocodingProvider] = None,
) -> GeocodingResult:
    provider = provider or get_geocoding_provider()
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, provider.reverse_geocode, latitude, longitude)
