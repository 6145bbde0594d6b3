"""
Image analysis endpoints - metadata extraction, reverse geocoding and
license plate recognition for the review form.
"""

import logging
from typing import Optional

from fastapi import APIRouter, File, Form, Query, UploadFile, status
from pydantic import ValidationError

from infraction_reporter.core.exceptions import APIException
from infraction_reporter.core.settings import settings
from infraction_reporter.models.geocoding import GeocodingResult
from infraction_reporter.models.metadata import ImageArea
from infraction_reporter.models.plate import PlateRecognitionResult
from infraction_reporter.services.geocoding import reverse_geocode_async
from infraction_reporter.services.plate_recognition import recognize_plate_async
from infraction_reporter.services.report_pipeline import ReportPipeline
from infraction_reporter.utils.images import to_data_url, validate_image

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Analysis"])


async def _read_image(image: UploadFile) -> bytes:
    content = await image.read()
    validate_image(content, image.content_type, settings.MAX_UPLOAD_BYTES)
    return content


@router.post("/image-metadata")
async def analyze_image(image: UploadFile = File(...)):
    """
    Run the pipeline up to the review step for an uploaded photo.

    Waits for geocoding and plate recognition so the response carries the
    backfilled address and plate (or their error fields).
    """
    content = await _read_image(image)
    logger.info(f"POST /api/image-metadata - {image.filename} ({len(content)} bytes)")

    pipeline = ReportPipeline()
    await pipeline.select_image(content, image.content_type)
    await pipeline.wait_for_enrichment()
    return pipeline.snapshot()


@router.get("/geocoding/reverse", response_model_exclude_none=True, response_model=GeocodingResult)
async def reverse_geocode(
    lat: float = Query(..., ge=-90, le=90),
    lng: float = Query(..., ge=-180, le=180),
):
    return await reverse_geocode_async(lat, lng)


@router.post("/license-plate", response_model_exclude_none=True, response_model=PlateRecognitionResult)
async def recognize_license_plate(
    image: UploadFile = File(...),
    x: Optional[int] = Form(None),
    y: Optional[int] = Form(None),
    width: Optional[int] = Form(None),
    height: Optional[int] = Form(None),
):
    """
    Recognize the plate in an uploaded photo, optionally restricted to the
    area the user selected (x, y, width, height must then all be given).
    """
    content = await _read_image(image)

    area = None
    fields = (x, y, width, height)
    if any(v is not None for v in fields) and None in fields:
        raise APIException("Area requires x, y, width and height together", status.HTTP_422_UNPROCESSABLE_ENTITY)
    if None not in fields:
        try:
            area = ImageArea(x=x, y=y, width=width, height=height)
        except ValidationError as e:
            raise APIException(f"Invalid area: {e.errors()[0]['msg']}", status.HTTP_422_UNPROCESSABLE_ENTITY)

    return await recognize_plate_async(to_data_url(content, image.content_type), area)
