"""
Report Pipeline - metadata-to-report state machine.

Flow:
1. select_image: load image, extract EXIF (awaited)
2. Move to REVIEWING_REPORT as soon as EXIF is done
3. Geocoding (only with a location) and plate recognition run as
   background tasks and backfill the record already on screen
4. The user edits plate / type / notes, then submit()

DESIGN PRINCIPLES:
- All state lives in one ReportContext, mutated only by the event methods
- Steps follow ALLOWED_TRANSITIONS; anything else raises
- External failures never abort the pipeline, they leave error fields
- Results from an older image (stale generation) are dropped
"""

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Awaitable, Callable, Dict, List, Optional, Set

from infraction_reporter.core.exceptions import InvalidTransitionError, ReportValidationError
from infraction_reporter.core.settings import settings
from infraction_reporter.models.infraction import get_infraction_type
from infraction_reporter.models.metadata import ImageArea, ImageMetadata
from infraction_reporter.models.plate import PlateRecognitionResult
from infraction_reporter.models.report import InfractionReport, SubmissionResponse
from infraction_reporter.services.exif_extractor import extract_metadata_async
from infraction_reporter.services.geocoding import GeocodingProvider, get_geocoding_provider, reverse_geocode_async
from infraction_reporter.services.plate_recognition import PlateRecognizer, get_plate_recognizer, recognize_plate_async
from infraction_reporter.services.submission_service import submit_report, validate_report_fields
from infraction_reporter.utils.images import to_data_url

logger = logging.getLogger(__name__)

Submitter = Callable[[InfractionReport], Awaitable[SubmissionResponse]]


class ReportStep(str, Enum):
    AWAITING_IMAGE = "AWAITING_IMAGE"
    EXTRACTING_METADATA = "EXTRACTING_METADATA"
    REVIEWING_REPORT = "REVIEWING_REPORT"
    SUBMITTING = "SUBMITTING"


# Allowed transitions map: {from_step: [to_step, ...]}
ALLOWED_TRANSITIONS: Dict[ReportStep, List[ReportStep]] = {
    ReportStep.AWAITING_IMAGE: [ReportStep.EXTRACTING_METADATA],
    ReportStep.EXTRACTING_METADATA: [ReportStep.REVIEWING_REPORT],
    ReportStep.REVIEWING_REPORT: [ReportStep.SUBMITTING, ReportStep.AWAITING_IMAGE],
    ReportStep.SUBMITTING: [ReportStep.AWAITING_IMAGE, ReportStep.REVIEWING_REPORT],
}


@dataclass
class ReportContext:
    """The single mutable record behind the form."""
    step: ReportStep = ReportStep.AWAITING_IMAGE
    generation: int = 0

    image: Optional[bytes] = field(default=None, repr=False)
    image_content_type: Optional[str] = None
    metadata: ImageMetadata = field(default_factory=ImageMetadata)

    infraction_type_id: Optional[str] = None
    license_plate: str = ""
    # True while license_plate holds a detected value the user has not edited
    plate_from_detection: bool = False
    notes: str = ""

    # Enrichment state, surfaced to the UI as loading indicators / hints
    is_geocoding: bool = False
    geocoding_error: Optional[str] = None
    plate_requests_pending: int = 0
    plate_confidence: Optional[float] = None
    plate_error: Optional[str] = None

    submission_error: Optional[str] = None

    @property
    def is_recognizing_plate(self) -> bool:
        return self.plate_requests_pending > 0

    def image_data_url(self) -> Optional[str]:
        if not self.image:
            return None
        return to_data_url(self.image, self.image_content_type)


class ReportPipeline:
    """
    Drives one report from image selection to submission.

    Collaborators are injectable; by default the configured geocoding
    provider, plate recognizer and the in-process submission service are
    used.
    """

    def __init__(
        self,
        geocoder: Optional[GeocodingProvider] = None,
        plate_recognizer: Optional[PlateRecognizer] = None,
        submitter: Optional[Submitter] = None,
    ):
        self.geocoder = geocoder or get_geocoding_provider()
        self.plate_recognizer = plate_recognizer or get_plate_recognizer()
        self.submitter = submitter or submit_report
        self.context = ReportContext()
        self._tasks: Set[asyncio.Task] = set()

    @property
    def step(self) -> ReportStep:
        return self.context.step

    # ------------------------------------------------------------------
    # State machine
    # ------------------------------------------------------------------

    def _transition(self, to_step: ReportStep) -> None:
        from_step = self.context.step
        allowed = ALLOWED_TRANSITIONS.get(from_step, [])
        if to_step not in allowed:
            raise InvalidTransitionError(from_step.value, to_step.value, [s.value for s in allowed])
        logger.debug(f"Pipeline step {from_step.value} → {to_step.value}")
        self.context.step = to_step

    def _require_step(self, *steps: ReportStep) -> None:
        if self.context.step not in steps:
            raise InvalidTransitionError(
                self.context.step.value,
                "/".join(s.value for s in steps),
                [s.value for s in ALLOWED_TRANSITIONS.get(self.context.step, [])],
            )

    def _is_current(self, generation: int) -> bool:
        if generation != self.context.generation:
            logger.info(f"Dropping stale result from generation {generation} (current {self.context.generation})")
            return False
        return True

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    async def select_image(self, image_bytes: bytes, content_type: Optional[str] = None) -> ImageMetadata:
        """
        Load a new image and extract its metadata.

        Returns once EXIF extraction is done and the pipeline is in
        REVIEWING_REPORT; geocoding and plate recognition keep running in
        the background (see wait_for_enrichment).
        """
        self._transition(ReportStep.EXTRACTING_METADATA)

        self.context.generation += 1
        generation = self.context.generation
        self.context.image = image_bytes
        self.context.image_content_type = content_type
        self.context.metadata = ImageMetadata()
        self.context.is_geocoding = False
        self.context.geocoding_error = None
        self.context.plate_confidence = None
        self.context.plate_requests_pending = 0
        self.context.plate_error = None
        self.context.submission_error = None
        if self.context.plate_from_detection:
            # Detected plate belongs to the previous photo
            self.context.license_plate = ""
            self.context.plate_from_detection = False
        logger.info(f"Image loaded into memory ({len(image_bytes)} bytes, {content_type})")

        try:
            metadata = await extract_metadata_async(image_bytes)
        except Exception as e:
            # Extraction must not block the review step
            logger.error(f"EXIF extraction failed unexpectedly: {e}", exc_info=True)
            metadata = ImageMetadata()

        self.context.metadata = metadata
        self._transition(ReportStep.REVIEWING_REPORT)

        location = metadata.location
        if location is not None:
            self.context.is_geocoding = True
            self._spawn(self._geocode(generation, location.latitude, location.longitude))

        self.context.plate_requests_pending += 1
        self._spawn(self._recognize_plate(generation, self.context.image_data_url(), None, overwrite=False))

        return metadata

    def go_back(self) -> None:
        """Return to the upload step. Image and metadata stay in memory."""
        self._transition(ReportStep.AWAITING_IMAGE)

    def select_infraction(self, type_id: str) -> None:
        self._require_step(ReportStep.REVIEWING_REPORT)
        if get_infraction_type(type_id) is None:
            raise ReportValidationError(message=f"Unknown infraction type: {type_id}")
        self.context.infraction_type_id = type_id

    def set_license_plate(self, text: str) -> None:
        self._require_step(ReportStep.REVIEWING_REPORT)
        self.context.license_plate = text or ""
        self.context.plate_from_detection = False

    def set_notes(self, text: str) -> None:
        self._require_step(ReportStep.REVIEWING_REPORT)
        self.context.notes = text or ""

    async def recognize_plate_area(self, area: ImageArea) -> PlateRecognitionResult:
        """Re-run plate recognition on the area the user marked."""
        self._require_step(ReportStep.REVIEWING_REPORT)
        self.context.plate_requests_pending += 1
        return await self._recognize_plate(self.context.generation, self.context.image_data_url(), area, overwrite=True)

    async def wait_for_enrichment(self) -> None:
        """Join point: wait for every pending geocoding / recognition task."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))

    async def submit(self) -> SubmissionResponse:
        """
        Submit the reviewed report.

        Raises:
            ReportValidationError: image, infraction type or plate missing;
                the pipeline stays in REVIEWING_REPORT and nothing is sent
            InvalidTransitionError: not in REVIEWING_REPORT
        """
        self._require_step(ReportStep.REVIEWING_REPORT)
        ctx = self.context
        validate_report_fields(ctx.image, ctx.infraction_type_id, ctx.license_plate)

        report = InfractionReport(
            image=ctx.image,
            image_content_type=ctx.image_content_type,
            metadata=ctx.metadata.model_copy(deep=True),
            infraction_type_id=ctx.infraction_type_id,
            license_plate=ctx.license_plate.strip(),
            notes=ctx.notes,
        )

        self._transition(ReportStep.SUBMITTING)
        ctx.submission_error = None
        try:
            response = await self.submitter(report)
        except Exception as e:
            logger.error(f"❌ Report submission failed: {e}", exc_info=True)
            ctx.submission_error = str(e)
            self._transition(ReportStep.REVIEWING_REPORT)
            return SubmissionResponse(success=False, message=f"Report submission failed: {e}")

        if not response.success:
            logger.warning(f"Report submission refused: {response.message}")
            ctx.submission_error = response.message
            self._transition(ReportStep.REVIEWING_REPORT)
            return response

        logger.info(f"✅ Report submitted: {response.report_id}")
        self._transition(ReportStep.AWAITING_IMAGE)
        self._reset()
        return response

    def snapshot(self) -> dict:
        """Serializable view of the context for the API layer."""
        ctx = self.context
        return {
            "step": ctx.step.value,
            "metadata": ctx.metadata.model_dump(),
            "license_plate": ctx.license_plate,
            "plate_confidence": ctx.plate_confidence,
            "plate_high_confidence": (
                ctx.plate_confidence is not None
                and ctx.plate_confidence > settings.PLATE_CONFIDENCE_THRESHOLD
            ),
            "plate_error": ctx.plate_error,
            "is_geocoding": ctx.is_geocoding,
            "geocoding_error": ctx.geocoding_error,
            "is_recognizing_plate": ctx.is_recognizing_plate,
            "infraction_type_id": ctx.infraction_type_id,
            "notes": ctx.notes,
        }

    # ------------------------------------------------------------------
    # Background work
    # ------------------------------------------------------------------

    def _spawn(self, coro) -> None:
        task = asyncio.ensure_future(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    def _reset(self) -> None:
        # Bump the generation so late results for the submitted image are dropped
        self.context = ReportContext(generation=self.context.generation + 1)

    async def _geocode(self, generation: int, latitude: float, longitude: float) -> None:
        try:
            result = await reverse_geocode_async(latitude, longitude, self.geocoder)
            error = result.error
            address = result.direccion
        except Exception as e:
            logger.error(f"Geocoding raised unexpectedly: {e}", exc_info=True)
            address, error = None, "Error fetching the address"

        if not self._is_current(generation):
            return

        self.context.is_geocoding = False
        location = self.context.metadata.location
        if address and location is not None:
            location.address = address
            logger.info(f"Address backfilled: {address}")
        else:
            self.context.geocoding_error = error
            logger.warning(f"Geocoding unavailable, falling back to coordinates: {error}")

    async def _recognize_plate(
        self,
        generation: int,
        image: Optional[str],
        area: Optional[ImageArea],
        overwrite: bool,
    ) -> PlateRecognitionResult:
        if image is None:
            result = PlateRecognitionResult.failure("No image loaded")
        else:
            try:
                result = await recognize_plate_async(image, area, self.plate_recognizer)
            except Exception as e:
                logger.error(f"Plate recognition raised unexpectedly: {e}", exc_info=True)
                result = PlateRecognitionResult.failure(str(e))

        if not self._is_current(generation):
            return result

        self.context.plate_requests_pending = max(0, self.context.plate_requests_pending - 1)
        if result.success:
            self.context.plate_error = None
            # Automatic detection never overwrites a plate the user already typed
            if overwrite or not self.context.license_plate:
                self.context.license_plate = result.plate
                self.context.plate_from_detection = True
                self.context.plate_confidence = result.confidence
        else:
            self.context.plate_error = result.error
        return result
