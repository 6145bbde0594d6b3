"""
Image helpers shared by the API layer and the plate recognizer.
"""

import base64
import binascii
import io
import logging
from typing import Optional, Tuple
from urllib.parse import unquote_to_bytes

from PIL import Image, UnidentifiedImageError

from infraction_reporter.core.exceptions import FileSizeError, InvalidImageError
from infraction_reporter.models.metadata import ImageArea

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = "image/jpeg"


def validate_image(file_content: bytes, content_type: Optional[str], max_bytes: int) -> None:
    """
    Check size, declared content type and that Pillow can identify the file.

    Raises:
        FileSizeError: content is larger than max_bytes
        InvalidImageError: empty, not an image, or corrupted
    """
    if not file_content:
        raise InvalidImageError("Empty image upload")

    if len(file_content) > max_bytes:
        raise FileSizeError(f"File size exceeds {max_bytes // (1024 * 1024)}MB limit")

    if content_type and not content_type.startswith("image/"):
        raise InvalidImageError(f"Unsupported content type: {content_type}")

    try:
        image = Image.open(io.BytesIO(file_content))
        image.verify()
    except (UnidentifiedImageError, OSError, SyntaxError):
        raise InvalidImageError("Invalid or corrupted image file")


def to_data_url(image_bytes: bytes, content_type: Optional[str] = None) -> str:
    encoded = base64.b64encode(image_bytes).decode("ascii")
    return f"data:{content_type or DEFAULT_CONTENT_TYPE};base64,{encoded}"


def parse_data_url(data_url: str) -> Tuple[bytes, str]:
    """
    Decode a `data:` URL into (bytes, content type).

    Raises:
        ValueError: not a data URL, or the payload is not valid base64
    """
    if not data_url.startswith("data:") or "," not in data_url:
        raise ValueError("Not a data URL")

    header, payload = data_url[len("data:"):].split(",", 1)
    content_type = header.split(";")[0] or DEFAULT_CONTENT_TYPE

    if ";base64" in header:
        try:
            return base64.b64decode(payload, validate=True), content_type
        except binascii.Error as e:
            raise ValueError(f"Invalid base64 payload: {e}")

    return unquote_to_bytes(payload), content_type


def crop_image(image_bytes: bytes, area: ImageArea) -> bytes:
    """
    Crop the image to `area` and re-encode it.

    The box is clamped to the image bounds; an area entirely outside the image
    raises ValueError.
    """
    image = Image.open(io.BytesIO(image_bytes))
    image_format = image.format or "JPEG"

    left, upper, right, lower = area.as_box()
    right = min(right, image.width)
    lower = min(lower, image.height)
    if left >= right or upper >= lower:
        raise ValueError(f"Selected area {area.as_box()} is outside the image ({image.width}x{image.height})")

    cropped = image.crop((left, upper, right, lower))
    if image_format == "JPEG" and cropped.mode not in ("RGB", "L"):
        cropped = cropped.convert("RGB")

    buffer = io.BytesIO()
    cropped.save(buffer, format=image_format)
    logger.info(f"Cropped image to {cropped.width}x{cropped.height} for plate recognition")
    return buffer.getvalue()
