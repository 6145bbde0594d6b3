import asyncio
import io
import random
from unittest.mock import MagicMock, patch

import pytest
import requests
from PIL import Image

from conftest import make_jpeg
from infraction_reporter.core.settings import settings
from infraction_reporter.models.metadata import ImageArea
from infraction_reporter.services.plate_recognition import (
    DetectionShape,
    HuggingFacePlateRecognizer,
    SimulatedPlateRecognizer,
    get_plate_recognizer,
    normalize_plate_text,
    parse_detection_payload,
    recognize_plate_async,
)
from infraction_reporter.utils.images import to_data_url

HF_POST = "infraction_reporter.services.plate_recognition.huggingface_provider.requests.post"
IMAGE_GET = "infraction_reporter.services.plate_recognition.base.requests.get"


def _response(status_code=200, payload=None, json_error=None):
    resp = MagicMock()
    resp.status_code = status_code
    resp.ok = 200 <= status_code < 300
    if json_error is not None:
        resp.json.side_effect = json_error
    else:
        resp.json.return_value = payload
    return resp


class TestParseDetectionPayload:

    def test_ranked_list_picks_highest_score(self):
        payload = [{"text": "xy000", "score": 0.5}, {"text": "ab 123", "score": 0.92}]
        assert parse_detection_payload(payload) == (DetectionShape.RANKED_LIST, ("ab 123", 0.92))

    def test_single_detection(self):
        assert parse_detection_payload({"text": "AB123", "score": 0.8}) == (DetectionShape.SINGLE, ("AB123", 0.8))

    def test_single_detection_without_score_defaults(self):
        assert parse_detection_payload({"text": "AB123"}) == (DetectionShape.SINGLE, ("AB123", 0.7))

    @pytest.mark.parametrize("payload", [[], [{"score": 0.9}], {"error": "loading"}, None, "AB123"])
    def test_unrecognized(self, payload):
        assert parse_detection_payload(payload) == (DetectionShape.UNRECOGNIZED, None)


def test_normalize_plate_text():
    assert normalize_plate_text(" ab 1\t23\n") == "AB123"


class TestHuggingFaceRecognizer:

    def test_selects_best_candidate(self, plain_jpeg):
        payload = [{"text": "ab 123", "score": 0.92}, {"text": "xy000", "score": 0.5}]
        with patch(HF_POST, return_value=_response(payload=payload)) as post:
            result = HuggingFacePlateRecognizer().recognize(to_data_url(plain_jpeg))

        assert result.to_dict() == {"success": True, "plate": "AB123", "confidence": 92}
        assert post.call_args.kwargs["data"] == plain_jpeg
        assert post.call_args.kwargs["headers"] == {"Accept": "application/json"}

    def test_empty_list_is_failure(self, plain_jpeg):
        with patch(HF_POST, return_value=_response(payload=[])):
            result = HuggingFacePlateRecognizer().recognize(to_data_url(plain_jpeg))

        assert result.success is False
        assert result.error
        assert result.plate is None

    def test_single_object_response(self, plain_jpeg):
        with patch(HF_POST, return_value=_response(payload={"text": "aa 001 bb"})):
            result = HuggingFacePlateRecognizer().recognize_bytes(plain_jpeg)
        assert (result.plate, result.confidence) == ("AA001BB", 70.0)

    def test_sends_bearer_token(self, plain_jpeg):
        with patch(HF_POST, return_value=_response(payload=[])) as post:
            HuggingFacePlateRecognizer(api_key="secret").recognize_bytes(plain_jpeg)
        assert post.call_args.kwargs["headers"]["Authorization"] == "Bearer secret"

    @pytest.mark.parametrize("response", [
        _response(status_code=503),
        _response(json_error=ValueError("not json")),
    ])
    def test_bad_responses_are_failures(self, plain_jpeg, response):
        with patch(HF_POST, return_value=response):
            result = HuggingFacePlateRecognizer().recognize_bytes(plain_jpeg)
        assert result.success is False

    def test_transport_failure(self, plain_jpeg):
        with patch(HF_POST, side_effect=requests.ConnectionError("down")):
            result = HuggingFacePlateRecognizer().recognize_bytes(plain_jpeg)
        assert result.success is False
        assert result.error

    def test_remote_url_is_downloaded(self, plain_jpeg):
        download = MagicMock(content=plain_jpeg)
        with patch(IMAGE_GET, return_value=download) as get, \
                patch(HF_POST, return_value=_response(payload={"text": "AB123", "score": 1.0})) as post:
            result = HuggingFacePlateRecognizer().recognize("https://example.com/car.jpg")

        assert result.plate == "AB123"
        assert get.call_args.args[0] == "https://example.com/car.jpg"
        assert post.call_args.kwargs["data"] == plain_jpeg

    def test_unreachable_remote_url(self):
        with patch(IMAGE_GET, side_effect=requests.ConnectionError("nope")), patch(HF_POST) as post:
            result = HuggingFacePlateRecognizer().recognize("https://example.com/car.jpg")
        assert result.success is False
        post.assert_not_called()

    def test_malformed_data_url(self):
        with patch(HF_POST) as post:
            result = HuggingFacePlateRecognizer().recognize("data:image/jpeg;base64,***")
        assert result.success is False
        post.assert_not_called()

    def test_area_crops_before_upload(self):
        jpeg = make_jpeg(size=(200, 100))
        with patch(HF_POST, return_value=_response(payload=[])) as post:
            HuggingFacePlateRecognizer().recognize(to_data_url(jpeg), ImageArea(x=10, y=20, width=50, height=30))

        sent = Image.open(io.BytesIO(post.call_args.kwargs["data"]))
        assert sent.size == (50, 30)

    def test_area_outside_image(self):
        jpeg = make_jpeg(size=(40, 40))
        with patch(HF_POST) as post:
            result = HuggingFacePlateRecognizer().recognize(to_data_url(jpeg), ImageArea(x=100, y=100, width=5, height=5))
        assert result.success is False
        post.assert_not_called()


def test_simulated_recognizer_is_plausible(plain_jpeg):
    result = SimulatedPlateRecognizer(rng=random.Random(7)).recognize_bytes(plain_jpeg)

    assert result.success
    assert len(result.plate) == 6
    assert result.plate[:3].isalpha() and result.plate[3:].isdigit()
    assert 70 <= result.confidence <= 100


class TestRegistry:

    def test_default_is_huggingface(self):
        assert isinstance(get_plate_recognizer(), HuggingFacePlateRecognizer)

    def test_simulated_by_setting(self, monkeypatch):
        monkeypatch.setattr(settings, "PLATE_RECOGNITION_PROVIDER", "simulated")
        assert isinstance(get_plate_recognizer(), SimulatedPlateRecognizer)

    def test_async_recognition(self, fake_recognizer, plain_jpeg):
        result = asyncio.run(recognize_plate_async(to_data_url(plain_jpeg), recognizer=fake_recognizer))
        assert result.plate == "AB123"
        assert fake_recognizer.calls == [plain_jpeg]
