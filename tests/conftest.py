"""
Pytest configuration and global fixtures.
"""
import sys
import uuid
from io import BytesIO
from pathlib import Path

import pytest
from PIL import Image

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from visionapi.config import Config
from visionapi.domain.errors import ServiceRequestError
from visionapi.domain.interfaces import VisionClientInterface
from visionapi.domain.models import (
    AnalysisResult,
    ImageHandle,
    OperationStatus,
    SubmitResponse,
    TextOperationResult,
)
from visionapi.infrastructure.image_loader import ImageLoader
from visionapi.application.vision_session import VisionSession


class FakeVisionClient(VisionClientInterface):
    """Scripted stand-in for the remote vision service.

    statuses is consumed one entry per status query; the last entry
    repeats once the script runs out. Entries may be OperationStatus
    values, TextOperationResult objects or exceptions to raise.
    """

    def __init__(self, statuses=None, analysis=None, location=None,
                 submit_error=None, analyze_error=None):
        self.statuses = list(statuses or [OperationStatus.SUCCEEDED])
        self.analysis = analysis or AnalysisResult()
        self.location = location
        self.submit_error = submit_error
        self.analyze_error = analyze_error
        self.on_analyze = None
        self.analyzed = []
        self.submitted = []
        self.status_queries = []

    def analyze(self, image_data, features):
        self.analyzed.append(list(features))
        if self.on_analyze is not None:
            self.on_analyze()
        if self.analyze_error is not None:
            raise self.analyze_error
        return self.analysis

    def submit_text_recognition(self, image_data, mode):
        self.submitted.append(mode)
        if self.submit_error is not None:
            raise self.submit_error
        location = self.location
        if location is None:
            location = f"https://example.test/vision/v2.0/textOperations/{uuid.uuid4()}"
        return SubmitResponse(operation_location=location)

    def get_operation_status(self, operation_id):
        self.status_queries.append(operation_id)
        index = min(len(self.status_queries), len(self.statuses)) - 1
        item = self.statuses[index]
        if isinstance(item, Exception):
            raise item
        if isinstance(item, TextOperationResult):
            return item
        return TextOperationResult(status=item)


class FastConfig(Config):
    """Deterministic configuration for tests"""
    DEBUG = True
    VISION_ENDPOINT = "https://example.test"
    VISION_API_KEY = ""
    REQUIRE_ENDPOINT = True
    POLL_MAX_ATTEMPTS = 10
    POLL_INTERVAL = 1.0
    OPERATION_ID_LENGTH = 36
    TARGET_DPI = 96.0
    DEFAULT_SOURCE_DPI = 96.0
    OVERLAY_COLOR = "#ff0000"
    OVERLAY_STROKE_WIDTH = 2


def encode_image(width=800, height=600, color="white", fmt="JPEG", dpi=None) -> bytes:
    img = Image.new("RGB", (width, height), color=color)
    buf = BytesIO()
    if dpi is None:
        img.save(buf, format=fmt)
    else:
        img.save(buf, format=fmt, dpi=(dpi, dpi))
    return buf.getvalue()


def make_handle(width=100, height=80, color="white", dpi=96.0, mode="RGB") -> ImageHandle:
    img = Image.new(mode, (width, height), color=color)
    return ImageHandle(data=b"", image=img, width=width, height=height, dpi=dpi)


@pytest.fixture
def test_config():
    return FastConfig()


@pytest.fixture
def sleeps():
    """Records requested sleep durations instead of sleeping"""
    return []


@pytest.fixture
def fake_sleep(sleeps):
    return sleeps.append


@pytest.fixture
def fake_client():
    return FakeVisionClient()


@pytest.fixture
def session(test_config, fake_client, fake_sleep):
    """Session wired to the fake client through its factory"""
    factory_calls = []

    def factory(api_key, endpoint):
        factory_calls.append((api_key, endpoint))
        return fake_client

    s = VisionSession(
        image_loader=ImageLoader(test_config),
        client_factory=factory,
        config=test_config,
        sleep=fake_sleep,
    )
    s.factory_calls = factory_calls
    return s


@pytest.fixture
def sample_image_path(tmp_path):
    """800x600 JPEG at 96 DPI"""
    path = tmp_path / "sample.jpg"
    path.write_bytes(encode_image(800, 600, dpi=96))
    return path


@pytest.fixture
def transport_error():
    return ServiceRequestError("Service unavailable", status_code=503)


@pytest.fixture
def handle_factory():
    """Builds in-memory ImageHandles"""
    return make_handle


@pytest.fixture
def image_bytes_factory():
    """Encodes solid-color images to bytes"""
    return encode_image


@pytest.fixture
def fake_client_class():
    return FakeVisionClient
