import io
import threading
from typing import Dict, List, Optional

import pytest
from PIL import Image
from PIL.TiffImagePlugin import IFDRational

from infraction_reporter.core.settings import settings
from infraction_reporter.models.geocoding import GeocodingResult
from infraction_reporter.models.plate import PlateRecognitionResult
from infraction_reporter.models.report import InfractionReport, SubmissionResponse
from infraction_reporter.services.geocoding import GeocodingProvider, reset_geocoding_provider
from infraction_reporter.services.plate_recognition import PlateRecognizer, reset_plate_recognizer

EXIF_IFD_POINTER = 0x8769
GPS_IFD_POINTER = 0x8825
DATE_TIME_ORIGINAL = 0x9003

# 40.7128 N, 74.0060 W as EXIF degrees/minutes/seconds
NYC_GPS = {
    1: "N",
    2: (IFDRational(40, 1), IFDRational(42, 1), IFDRational(4608, 100)),
    3: "W",
    4: (IFDRational(74, 1), IFDRational(0, 1), IFDRational(216, 10)),
}


def make_jpeg(
    date_time: Optional[str] = None,
    gps: Optional[Dict] = None,
    color=(200, 200, 200),
    size=(64, 48),
) -> bytes:
    """Encode a small JPEG, optionally with DateTimeOriginal and GPS tags."""
    image = Image.new("RGB", size, color=color)
    buffer = io.BytesIO()

    if date_time is None and gps is None:
        image.save(buffer, format="JPEG")
        return buffer.getvalue()

    exif = Image.Exif()
    if date_time is not None:
        exif[EXIF_IFD_POINTER] = {DATE_TIME_ORIGINAL: date_time}
    if gps is not None:
        exif[GPS_IFD_POINTER] = gps
    image.save(buffer, format="JPEG", exif=exif)
    return buffer.getvalue()


class FakeGeocoder(GeocodingProvider):
    name = "fake"

    def __init__(self, result: Optional[GeocodingResult] = None):
        self.result = result or GeocodingResult(direccion="Av. Callao 123")
        self.calls: List[tuple] = []

    def reverse_geocode(self, latitude, longitude):
        self.calls.append((latitude, longitude))
        return self.result


class FakeRecognizer(PlateRecognizer):
    """Returns a fixed result; optionally blocks on an event for given images."""
    name = "fake"

    def __init__(self, result: Optional[PlateRecognitionResult] = None):
        self.result = result or PlateRecognitionResult(success=True, plate="AB123", confidence=92.0)
        self.calls: List[bytes] = []
        self.slow_images: Dict[bytes, PlateRecognitionResult] = {}
        self.release = threading.Event()

    def recognize_bytes(self, image_bytes):
        self.calls.append(image_bytes)
        if image_bytes in self.slow_images:
            self.release.wait(timeout=5)
            return self.slow_images[image_bytes]
        return self.result


class RecordingSubmitter:
    def __init__(self, response: Optional[SubmissionResponse] = None, error: Optional[Exception] = None):
        self.response = response or SubmissionResponse(success=True, message="ok", report_id="REP1")
        self.error = error
        self.reports: List[InfractionReport] = []

    async def __call__(self, report: InfractionReport) -> SubmissionResponse:
        self.reports.append(report)
        if self.error is not None:
            raise self.error
        return self.response


@pytest.fixture(autouse=True)
def isolated_providers(monkeypatch):
    """No cached providers leak between tests; no real submission delay."""
    reset_geocoding_provider()
    reset_plate_recognizer()
    monkeypatch.setattr(settings, "SUBMISSION_DELAY_SECONDS", 0.0)
    yield
    reset_geocoding_provider()
    reset_plate_recognizer()


@pytest.fixture
def fake_geocoder():
    return FakeGeocoder()


@pytest.fixture
def fake_recognizer():
    return FakeRecognizer()


@pytest.fixture
def submitter():
    return RecordingSubmitter()


@pytest.fixture
def plain_jpeg():
    return make_jpeg()


@pytest.fixture
def gps_jpeg():
    return make_jpeg(date_time="2024:01:15 10:00:00", gps=NYC_GPS)
