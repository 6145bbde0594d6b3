"""
Simulated plate recognizer - development fallback when the inference API
is not available.

Generates a random plate (three letters, three digits) with 70-100%
confidence. Always succeeds, makes no network calls.
"""

import logging
import random
from typing import Optional

from infraction_reporter.models.plate import PlateRecognitionResult
from .base import PlateRecognizer

logger = logging.getLogger(__name__)

# I and O are left out to avoid confusion with 1 and 0
PLATE_LETTERS = "ABCDEFGHJKLMNPQRSTUVWXYZ"
PLATE_DIGITS = "0123456789"


class SimulatedPlateRecognizer(PlateRecognizer):

    name = "simulated"

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()
        logger.info("Simulated plate recognizer initialized (development only)")

    def recognize_bytes(self, image_bytes: bytes) -> PlateRecognitionResult:
        letters = "".join(self.rng.choice(PLATE_LETTERS) for _ in range(3))
        digits = "".join(self.rng.choice(PLATE_DIGITS) for _ in range(3))
        confidence = round(self.rng.random() * 30 + 70, 2)

        return PlateRecognitionResult(success=True, plate=letters + digits, confidence=confidence)
