"""
EXIF extraction - capture timestamp and GPS position from an uploaded photo.

DESIGN NOTE:
- A photo without EXIF (or without GPS) is normal, not an error
- Unreadable images also degrade to empty metadata; upload validation
  happens at the API boundary, not here
- Pillow parsing is blocking, so the async entry point runs it in the
  default executor
"""

import asyncio
import io
import logging
import math
import re
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from PIL import ExifTags, Image, UnidentifiedImageError

from infraction_reporter.models.metadata import ImageMetadata, Location
from infraction_reporter.utils.coordinates import dms_to_decimal, normalize_ref

logger = logging.getLogger(__name__)

# Sub-IFD pointers in the main EXIF directory
EXIF_IFD_POINTER = 0x8769
GPS_IFD_POINTER = 0x8825

# Tag inside the Exif sub-IFD
DATE_TIME_ORIGINAL = 0x9003

EXIF_DATETIME_PATTERN = re.compile(
    r"^(?P<year>\d{4}):(?P<month>\d{2}):(?P<day>\d{2}) (?P<hour>\d{2}):(?P<minute>\d{2})(?::(?P<second>\d{2}))?"
)


@dataclass
class RawExifData:
    """Tags as read from the file, before any conversion."""
    date_time_original: Optional[str] = None
    latitude: Optional[Sequence] = None
    latitude_ref: Optional[str] = None
    longitude: Optional[Sequence] = None
    longitude_ref: Optional[str] = None

    @property
    def has_gps(self) -> bool:
        # Both value and reference are required for each axis
        return bool(
            self.latitude and self.latitude_ref
            and self.longitude and self.longitude_ref
        )


def format_exif_datetime(value: Optional[str]) -> Tuple[Optional[str], Optional[str]]:
    """
    Split an EXIF timestamp into display date and time.

    "2023:07:04 15:30:00" -> ("04/07/2023", "15:30")

    Returns (None, None) when the value is absent or does not match the
    EXIF pattern.
    """
    if not value:
        return None, None

    if isinstance(value, bytes):
        value = value.decode("ascii", errors="ignore")

    match = EXIF_DATETIME_PATTERN.match(value.strip("\x00 "))
    if not match:
        logger.warning(f"Unrecognized EXIF timestamp: {value!r}")
        return None, None

    date = f"{match['day']}/{match['month']}/{match['year']}"
    time = f"{match['hour']}:{match['minute']}"
    return date, time


def read_exif(image_bytes: bytes) -> RawExifData:
    """Read the raw timestamp and GPS tags. Never raises."""
    try:
        image = Image.open(io.BytesIO(image_bytes))
        exif = image.getexif()
    except (UnidentifiedImageError, OSError, SyntaxError) as e:
        logger.warning(f"Could not read image for EXIF extraction: {e}")
        return RawExifData()

    if not exif:
        logger.info("Image carries no EXIF block")
        return RawExifData()

    exif_ifd = exif.get_ifd(EXIF_IFD_POINTER)
    gps = {ExifTags.GPSTAGS.get(k, k): v for k, v in exif.get_ifd(GPS_IFD_POINTER).items()}

    raw = RawExifData(
        date_time_original=exif_ifd.get(DATE_TIME_ORIGINAL),
        latitude=gps.get("GPSLatitude"),
        latitude_ref=normalize_ref(gps.get("GPSLatitudeRef")),
        longitude=gps.get("GPSLongitude"),
        longitude_ref=normalize_ref(gps.get("GPSLongitudeRef")),
    )
    logger.debug(f"EXIF tags read: {raw}")
    return raw


def build_image_metadata(raw: RawExifData) -> ImageMetadata:
    """Convert raw tags into the display record."""
    date, time = format_exif_datetime(raw.date_time_original)

    location = None
    if raw.has_gps:
        try:
            latitude = dms_to_decimal(raw.latitude, raw.latitude_ref)
            longitude = dms_to_decimal(raw.longitude, raw.longitude_ref)
        except (TypeError, ValueError, ZeroDivisionError) as e:
            logger.warning(f"Malformed GPS tags, ignoring location: {e}")
        else:
            if math.isnan(latitude) or math.isnan(longitude):
                logger.warning("Incomplete GPS coordinates, ignoring location")
            else:
                location = Location(latitude=latitude, longitude=longitude)
                logger.info(f"Converted coordinates: ({latitude}, {longitude})")

    return ImageMetadata(date=date, time=time, location=location)


def extract_metadata(image_bytes: bytes) -> ImageMetadata:
    return build_image_metadata(read_exif(image_bytes))


async def extract_metadata_async(image_bytes: bytes) -> ImageMetadata:
    """Run extraction off the event loop; completion gates geocoding and OCR."""
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, extract_metadata, image_bytes)
