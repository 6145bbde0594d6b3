"""
License plate recognition through an external inference service.

Recognizers never raise; failures come back as
PlateRecognitionResult(success=False, error=...).
"""

from infraction_reporter.services.plate_recognition.base import (
    DetectionShape,
    PlateRecognizer,
    normalize_plate_text,
    parse_detection_payload,
)
from infraction_reporter.services.plate_recognition.huggingface_provider import HuggingFacePlateRecognizer
from infraction_reporter.services.plate_recognition.simulated_provider import SimulatedPlateRecognizer
from infraction_reporter.services.plate_recognition.registry import (
    get_plate_recognizer,
    recognize_plate_async,
    reset_plate_recognizer,
)

__all__ = [
    "DetectionShape",
    "HuggingFacePlateRecognizer",
    "PlateRecognizer",
    "SimulatedPlateRecognizer",
    "get_plate_recognizer",
    "normalize_plate_text",
    "parse_detection_payload",
    "recognize_plate_async",
    "reset_plate_recognizer",
]
