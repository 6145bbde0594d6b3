"""
Submission service - acknowledges infraction reports.

DESIGN NOTE:
- This is a mock boundary: the report is validated, a processing delay is
  simulated and a fresh report id is returned
- Nothing is stored; the payload is discarded after the response
"""

import asyncio
import logging
import random
from typing import List, Optional

from infraction_reporter.core.exceptions import ReportValidationError
from infraction_reporter.core.settings import settings
from infraction_reporter.models.infraction import get_infraction_type
from infraction_reporter.models.report import InfractionReport, SubmissionResponse

logger = logging.getLogger(__name__)

SUCCESS_MESSAGE = "Infraction report submitted successfully"
FAILURE_MESSAGE = "Error processing the infraction report"


def missing_report_fields(image: Optional[bytes], infraction_type_id: Optional[str], license_plate: Optional[str]) -> List[str]:
    """Names of the required fields that are empty, in form order."""
    missing = []
    if not image:
        missing.append("image")
    if not infraction_type_id:
        missing.append("infractionType")
    if not license_plate or not license_plate.strip():
        missing.append("licensePlate")
    return missing


def validate_report_fields(image: Optional[bytes], infraction_type_id: Optional[str], license_plate: Optional[str]) -> None:
    """
    Raises:
        ReportValidationError: a required field is empty, or the infraction
            type is not in the catalogue
    """
    missing = missing_report_fields(image, infraction_type_id, license_plate)
    if missing:
        raise ReportValidationError(missing)

    if get_infraction_type(infraction_type_id) is None:
        raise ReportValidationError(message=f"Unknown infraction type: {infraction_type_id}")


def generate_report_id() -> str:
    return f"REP{random.randint(0, 999999)}"


async def submit_report(report: InfractionReport, delay_seconds: Optional[float] = None) -> SubmissionResponse:
    """
    Accept a report and return an acknowledgment.

    Args:
        report: Assembled report payload
        delay_seconds: Simulated processing time (defaults to settings)

    Returns:
        SubmissionResponse with a freshly generated report id

    Raises:
        ReportValidationError: report is incomplete
    """
    validate_report_fields(report.image, report.infraction_type_id, report.license_plate)

    if delay_seconds is None:
        delay_seconds = settings.SUBMISSION_DELAY_SECONDS
    if delay_seconds > 0:
        await asyncio.sleep(delay_seconds)

    report_id = generate_report_id()
    logger.info(
        f"✅ Report {report_id} accepted: type={report.infraction_type_id}, "
        f"plate={report.license_plate}, image={len(report.image)} bytes"
    )
    return SubmissionResponse(success=True, message=SUCCESS_MESSAGE, report_id=report_id)
