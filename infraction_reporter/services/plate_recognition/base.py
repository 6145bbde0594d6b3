"""
License Plate Recognizer Base Interface.

Defines the contract for plate recognition providers and the parser for
inference responses. All providers must implement this interface.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Optional, Tuple
import logging
import re

import requests

from infraction_reporter.models.metadata import ImageArea
from infraction_reporter.models.plate import PlateRecognitionResult
from infraction_reporter.utils.images import crop_image, parse_data_url

logger = logging.getLogger(__name__)

NO_PLATE_ERROR = "No license plate could be detected in the image"
PROCESSING_ERROR = "Error processing the image for license plate recognition"

# Score assumed when a single detection comes back without one
DEFAULT_SINGLE_SCORE = 0.7

_WHITESPACE = re.compile(r"\s")


class DetectionShape(str, Enum):
    """Response layouts returned by the inference endpoint."""
    RANKED_LIST = "ranked_list"   # [{"text": ..., "score": ...}, ...]
    SINGLE = "single"             # {"text": ..., "score": ...}
    UNRECOGNIZED = "unrecognized"


def normalize_plate_text(text: str) -> str:
    """Remove every whitespace character and upper-case the rest."""
    return _WHITESPACE.sub("", text).upper()


def _is_candidate(item: Any) -> bool:
    return isinstance(item, dict) and isinstance(item.get("text"), str) and bool(item["text"])


def _score(item: dict, default: float = 0.0) -> float:
    score = item.get("score")
    if isinstance(score, (int, float)) and not isinstance(score, bool):
        return float(score)
    return default


def parse_detection_payload(data: Any) -> Tuple[DetectionShape, Optional[Tuple[str, float]]]:
    """
    Tag the payload with its shape and pick the best (text, score) candidate.

    RANKED_LIST selects the highest score; SINGLE falls back to
    DEFAULT_SINGLE_SCORE when the score is missing. UNRECOGNIZED carries no
    candidate (empty list, list without usable entries, or anything else).
    """
    if isinstance(data, list):
        candidates = [item for item in data if _is_candidate(item)]
        if not candidates:
            return DetectionShape.UNRECOGNIZED, None
        best = max(candidates, key=_score)
        return DetectionShape.RANKED_LIST, (best["text"], _score(best))

    if _is_candidate(data):
        return DetectionShape.SINGLE, (data["text"], _score(data, DEFAULT_SINGLE_SCORE))

    return DetectionShape.UNRECOGNIZED, None


def result_from_payload(data: Any) -> PlateRecognitionResult:
    shape, best = parse_detection_payload(data)
    if best is None:
        logger.info("Plate recognition returned no usable detection")
        return PlateRecognitionResult.failure(NO_PLATE_ERROR)

    text, score = best
    plate = normalize_plate_text(text)
    if not plate:
        return PlateRecognitionResult.failure(NO_PLATE_ERROR)

    confidence = min(max(round(score * 100, 2), 0.0), 100.0)
    logger.info(f"Plate detected ({shape.value}): {plate} at {confidence}%")
    return PlateRecognitionResult(success=True, plate=plate, confidence=confidence)


def load_image_bytes(image: str, timeout: float = 10.0) -> bytes:
    """
    Turn a data URL or a remote URL into raw bytes.

    Raises:
        ValueError: malformed data URL
        requests.RequestException: remote image could not be downloaded
    """
    if image.startswith("data:"):
        content, _ = parse_data_url(image)
        return content

    resp = requests.get(image, timeout=timeout)
    resp.raise_for_status()
    return resp.content


class PlateRecognizer(ABC):
    """
    Abstract base class for plate recognition providers.

    recognize() MUST:
    - Return a PlateRecognitionResult even on failure
    - Never raise exceptions (catch and return error in the result)
    - Respect the provider timeout
    """

    name: str = "base"

    @abstractmethod
    def recognize_bytes(self, image_bytes: bytes) -> PlateRecognitionResult:
        """Recognize a plate in raw image bytes."""
        pass

    def recognize(self, image: str, area: Optional[ImageArea] = None) -> PlateRecognitionResult:
        """
        Recognize a plate in an image given as a data URL or remote URL,
        optionally restricted to `area`.
        """
        try:
            image_bytes = load_image_bytes(image)
            if area is not None:
                image_bytes = crop_image(image_bytes, area)
        except (requests.RequestException, ValueError, OSError) as e:
            logger.warning(f"{self.name}: could not load image for recognition: {e}")
            return PlateRecognitionResult.failure(PROCESSING_ERROR)

        return self.recognize_bytes(image_bytes)
