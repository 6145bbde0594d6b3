from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Optional, Tuple
import logging

from infraction_reporter.models.geocoding import GeocodingResult

logger = logging.getLogger(__name__)

NOT_DETERMINED_ERROR = "Could not determine the address"
LOOKUP_FAILED_ERROR = "Error fetching the address"


class GeocodingProvider(ABC):
    """
    Abstract reverse-geocoding provider.

    Contract:
    - Input: latitude, longitude (decimal degrees)
    - Output: GeocodingResult with either `direccion` or `error`
    - MUST NEVER raise upstream exceptions.
    - Implementations should enforce a network timeout.
    """

    name: str = "base"

    @abstractmethod
    def reverse_geocode(self, latitude: float, longitude: float) -> GeocodingResult:
        raise NotImplementedError


class AddressShape(str, Enum):
    """The response layouts the street normalizer is known to return."""
    DIRECCION = "direccion"
    DIRECCION_NORMALIZADA = "direccionNormalizada"
    CALLE_ALTURA = "calle+altura"
    UNRECOGNIZED = "unrecognized"


def classify_address_payload(data: Any) -> AddressShape:
    if not isinstance(data, dict):
        return AddressShape.UNRECOGNIZED
    if data.get("direccion"):
        return AddressShape.DIRECCION
    if data.get("direccionNormalizada"):
        return AddressShape.DIRECCION_NORMALIZADA
    if data.get("calle"):
        return AddressShape.CALLE_ALTURA
    return AddressShape.UNRECOGNIZED


def parse_address_payload(data: Any) -> Tuple[AddressShape, Optional[str]]:
    """
    Tag the payload with its shape and pull out a single address string.

    The UNRECOGNIZED variant carries no address.
    """
    shape = classify_address_payload(data)

    if shape is AddressShape.DIRECCION:
        return shape, str(data["direccion"])
    if shape is AddressShape.DIRECCION_NORMALIZADA:
        return shape, str(data["direccionNormalizada"])
    if shape is AddressShape.CALLE_ALTURA:
        altura = data.get("altura") or ""
        return shape, f"{data['calle']} {altura}".strip()
    return shape, None


def result_from_payload(data: Any, provider: str) -> GeocodingResult:
    shape, address = parse_address_payload(data)
    if address is None:
        logger.warning(f"{provider}: unrecognized geocoding response shape")
        return GeocodingResult(error=NOT_DETERMINED_ERROR)
    logger.debug(f"{provider}: address parsed from '{shape.value}' shape")
    return GeocodingResult(direccion=address)
