"""
Report endpoints - infraction catalogue and report submission.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, File, Form, UploadFile, status
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from infraction_reporter.core.exceptions import APIException, ReportValidationError
from infraction_reporter.core.settings import settings
from infraction_reporter.models.infraction import InfractionType, list_infraction_types
from infraction_reporter.models.metadata import ImageMetadata
from infraction_reporter.models.report import InfractionReport, SubmissionResponse
from infraction_reporter.services.submission_service import FAILURE_MESSAGE, submit_report, validate_report_fields
from infraction_reporter.utils.images import validate_image

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Reports"])


@router.get("/infraction-types", response_model=List[InfractionType])
async def get_infraction_types():
    return list_infraction_types()


@router.post("/report-infraction", response_model=SubmissionResponse)
async def report_infraction(
    image: Optional[UploadFile] = File(None),
    metadata: Optional[str] = Form(None),
    infractionType: Optional[str] = Form(None),
    licensePlate: Optional[str] = Form(None),
    notes: str = Form(""),
):
    """
    Submit an infraction report.

    This endpoint:
    1. Validates that image, infraction type and license plate are present
    2. Simulates processing time
    3. Returns an acknowledgment with a generated report id

    Nothing is stored.
    """
    try:
        image_bytes = await image.read() if image is not None else b""
        validate_report_fields(image_bytes, infractionType, licensePlate)
        validate_image(image_bytes, image.content_type, settings.MAX_UPLOAD_BYTES)

        try:
            parsed_metadata = ImageMetadata.model_validate_json(metadata) if metadata else ImageMetadata()
        except ValidationError as e:
            raise ReportValidationError(message=f"Invalid metadata: {e.errors()[0].get('msg', 'malformed JSON')}")

        report = InfractionReport(
            image=image_bytes,
            image_content_type=image.content_type,
            metadata=parsed_metadata,
            infraction_type_id=infractionType,
            license_plate=licensePlate.strip(),
            notes=notes or "",
        )

        logger.info(f"📝 POST /api/report-infraction - type={infractionType}, plate={report.license_plate}")
        result = await submit_report(report)
        return result.to_dict()

    except APIException:
        # Rendered by the APIException handler
        raise
    except Exception as e:
        logger.error(f"❌ POST /api/report-infraction - processing failed: {e}", exc_info=True)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"success": False, "message": FAILURE_MESSAGE},
        )
