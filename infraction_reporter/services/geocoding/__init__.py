"""
Reverse geocoding: coordinates to a street address.

Providers never raise; failures come back as GeocodingResult(error=...).
"""

from infraction_reporter.services.geocoding.base import (
    AddressShape,
    GeocodingProvider,
    parse_address_payload,
)
from infraction_reporter.services.geocoding.nominatim_provider import NominatimProvider
from infraction_reporter.services.geocoding.resolver import (
    get_geocoding_provider,
    reset_geocoding_provider,
    reverse_geocode_async,
)
from infraction_reporter.services.geocoding.usig_provider import USIGProvider

__all__ = [
    "AddressShape",
    "GeocodingProvider",
    "NominatimProvider",
    "USIGProvider",
    "get_geocoding_provider",
    "parse_address_payload",
    "reset_geocoding_provider",
    "reverse_geocode_async",
]
