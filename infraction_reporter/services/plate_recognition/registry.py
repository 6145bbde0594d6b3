"""
Plate Recognizer Registry.

Selects the recognizer configured in settings and exposes async helpers
for the pipeline.
"""

import asyncio
import logging
from typing import Optional

from infraction_reporter.core.settings import settings
from infraction_reporter.models.metadata import ImageArea
from infraction_reporter.models.plate import PlateRecognitionResult
from .base import PlateRecognizer
from .huggingface_provider import HuggingFacePlateRecognizer
from .simulated_provider import SimulatedPlateRecognizer

logger = logging.getLogger(__name__)

# Global recognizer instance (singleton)
_recognizer: Optional[PlateRecognizer] = None


def get_plate_recognizer() -> PlateRecognizer:
    """
    Get the configured plate recognizer.

    PLATE_RECOGNITION_PROVIDER:
    - "huggingface" (default): remote inference API
    - "simulated": random plates, for development without the API
    """
    global _recognizer
    if _recognizer is not None:
        return _recognizer

    provider_name = (settings.PLATE_RECOGNITION_PROVIDER or "huggingface").lower()

    if provider_name == "simulated":
        _recognizer = SimulatedPlateRecognizer()
    else:
        if provider_name != "huggingface":
            logger.warning(f"Unknown PLATE_RECOGNITION_PROVIDER '{provider_name}', using huggingface")
        _recognizer = HuggingFacePlateRecognizer(
            url=settings.PLATE_RECOGNITION_URL,
            api_key=settings.PLATE_RECOGNITION_API_KEY,
            timeout=settings.PLATE_RECOGNITION_TIMEOUT_SECONDS,
        )

    logger.info(f"✅ Plate recognizer registered: {_recognizer.name}")
    return _recognizer


def reset_plate_recognizer() -> None:
    global _recognizer
    _recognizer = None


async def recognize_plate_async(
    image: str,
    area: Optional[ImageArea] = None,
    recognizer: Optional[PlateRecognizer] = None,
) -> PlateRecognitionResult:
    """Run recognition in the default executor. Never raises."""
    recognizer = recognizer or get_plate_recognizer()
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, recognizer.recognize, image, area)
