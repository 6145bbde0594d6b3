"""
Hugging Face inference provider for plate OCR (fast-plate-ocr model).

POSTs raw image bytes to the inference endpoint and parses the detection
list. Fails gracefully: every fault comes back as success=False.
"""

from typing import Any, Dict, Optional
import logging

import requests

from infraction_reporter.models.plate import PlateRecognitionResult
from .base import PlateRecognizer, PROCESSING_ERROR, result_from_payload

logger = logging.getLogger(__name__)


class HuggingFacePlateRecognizer(PlateRecognizer):
    """
    Remote plate recognizer.

    PLATE_RECOGNITION_API_KEY is optional; when set it is sent as a bearer
    token.
    """

    name = "huggingface"
    DEFAULT_URL = "https://api-inference.huggingface.co/models/ankandrew/fast-plate-ocr"

    def __init__(self, url: str = DEFAULT_URL, api_key: Optional[str] = None, timeout: float = 10.0):
        self.url = url
        self.api_key = api_key.strip() if api_key and api_key.strip() else None
        self.timeout = timeout

    def _headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    def recognize_bytes(self, image_bytes: bytes) -> PlateRecognitionResult:
        try:
            logger.info(f"Starting plate recognition ({len(image_bytes)} bytes)")
            resp = requests.post(self.url, headers=self._headers(), data=image_bytes, timeout=self.timeout)
            if not resp.ok:
                logger.warning(f"Plate recognition failed with status {resp.status_code}")
                return PlateRecognitionResult.failure(PROCESSING_ERROR)

            data: Any = resp.json()
        except (requests.RequestException, ValueError) as e:
            logger.warning(f"Plate recognition error: {e}")
            return PlateRecognitionResult.failure(PROCESSING_ERROR)

        logger.debug(f"Plate model response: {data}")
        return result_from_payload(data)
