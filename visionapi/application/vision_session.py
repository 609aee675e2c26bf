"""
Vision session - application layer
"""
import logging
import threading
import time
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Tuple, Union

from visionapi.application.operation_poller import OperationPoller
from visionapi.application.overlay_renderer import render_overlay
from visionapi.application.result_formatter import (
    format_analysis,
    format_text_lines,
    format_text_result,
    render_report,
)
from visionapi.config import get_config
from visionapi.domain.errors import (
    ImageUnreadable,
    MissingCredential,
    MissingEndpoint,
    NoImageSelected,
    OperationInProgress,
    ServiceRequestError,
    SubmissionError,
)
from visionapi.domain.geometry import compute_scale_factor, to_display_rects
from visionapi.domain.interfaces import ImageLoaderInterface, VisionClientInterface
from visionapi.domain.models import (
    DEFAULT_FEATURES,
    AnalysisResult,
    HealthStatus,
    ImageHandle,
    OverlayStyle,
    Rect,
    ReportSection,
    TextLineReport,
    TextOperationResult,
    TextRecognitionMode,
    VisualFeature,
)

logger = logging.getLogger(__name__)

ClientFactory = Callable[[str, str], VisionClientInterface]


@dataclass(frozen=True)
class AnalysisOutcome:
    """Everything produced by one analysis call"""
    result: AnalysisResult
    sections: List[ReportSection]
    report: str
    face_rects: List[Rect]
    overlay: ImageHandle
    scale: float

    def to_dict(self) -> dict:
        return {
            "success": True,
            "sections": [s.to_dict() for s in self.sections],
            "report": self.report,
            "faces": [r.to_dict() for r in self.face_rects],
            "scale": self.scale,
        }


@dataclass(frozen=True)
class TextOutcome:
    """Everything produced by one text extraction"""
    result: TextOperationResult
    lines: List[TextLineReport]
    sections: List[ReportSection]
    report: str
    overlay: ImageHandle
    scale: float

    def to_dict(self) -> dict:
        return {
            "success": True,
            "status": self.result.status.value,
            "lines": [line.to_dict() for line in self.lines],
            "sections": [s.to_dict() for s in self.sections],
            "report": self.report,
            "scale": self.scale,
        }


class VisionSession:
    """Owns the current image, the connected client and the last results.

    Only one analysis or text extraction may run at a time; a second
    request raises OperationInProgress instead of racing the first.
    """

    def __init__(
        self,
        image_loader: ImageLoaderInterface,
        client_factory: ClientFactory,
        config=None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.config = config or get_config()
        self.image_loader = image_loader
        self.client_factory = client_factory
        self.sleep = sleep
        self.style = OverlayStyle(
            color=self.config.OVERLAY_COLOR,
            stroke_width=self.config.OVERLAY_STROKE_WIDTH,
        )

        self.client: Optional[VisionClientInterface] = None
        self.poller: Optional[OperationPoller] = None
        self.endpoint: Optional[str] = None
        self.current_image: Optional[ImageHandle] = None
        self.last_result: Optional[Union[AnalysisResult, TextOperationResult]] = None
        self.last_overlay: Optional[ImageHandle] = None

        self._busy = threading.Lock()
        self._cancel_event: Optional[threading.Event] = None

    # ---- Credentials ----
    def connect(self, api_key: Optional[str], endpoint: Optional[str] = None) -> None:
        """Create the remote client for this session"""
        api_key = (api_key or "").strip()
        if not api_key:
            raise MissingCredential("Please enter a Computer Vision API Key.")

        endpoint = (endpoint or "").strip() or self.config.VISION_ENDPOINT
        if not endpoint and self.config.REQUIRE_ENDPOINT:
            raise MissingEndpoint("Please enter a Computer Vision endpoint.")

        client = self.client_factory(api_key, endpoint)
        self.client = client
        self.endpoint = endpoint
        self.poller = OperationPoller(
            client,
            max_attempts=self.config.POLL_MAX_ATTEMPTS,
            interval=self.config.POLL_INTERVAL,
            operation_id_length=self.config.OPERATION_ID_LENGTH,
            sleep=self.sleep,
        )
        logger.info(f"Connected to vision service at {endpoint}")

    # ---- Image ----
    def load_image(self, path: Union[str, Path, None]) -> ImageHandle:
        """Make the image at path current; the previous one is kept on failure"""
        image = self.image_loader.load_from_path(path)
        self._set_image(image)
        return image

    def load_image_bytes(self, data: bytes) -> ImageHandle:
        image = self.image_loader.load_from_bytes(data)
        self._set_image(image)
        return image

    def _set_image(self, image: ImageHandle) -> None:
        self.current_image = image
        self.last_result = None
        self.last_overlay = None

    def display_scale(self, image: Optional[ImageHandle] = None) -> float:
        """Scale factor from the image's DPI to the display DPI"""
        image = image or self.current_image
        if image is None:
            raise NoImageSelected("Please upload an image.")
        return compute_scale_factor(image.dpi, self.config.TARGET_DPI)

    def current_display(self) -> Optional[ImageHandle]:
        """Image that should currently be shown"""
        return self.last_overlay or self.current_image

    # ---- Remote operations ----
    def analyze(self, features: Optional[Sequence[VisualFeature]] = None) -> AnalysisOutcome:
        """Analyze the current image and draw its face rectangles"""
        with self._exclusive():
            client, image = self._require_ready()
            features = list(features) if features else list(DEFAULT_FEATURES)

            logger.info(f"Analyzing image with features: {[f.value for f in features]}")
            try:
                result = client.analyze(image.data, features)
            except ServiceRequestError as e:
                raise SubmissionError(str(e)) from e

            return self._analysis_outcome(image, result)

    def extract_text(self, mode: TextRecognitionMode = TextRecognitionMode.PRINTED) -> TextOutcome:
        """Run text recognition on the current image and draw line boxes"""
        with self._exclusive() as cancel_event:
            _, image = self._require_ready()
            result = self.poller.run(image.data, mode, cancel_event=cancel_event)
            return self._text_outcome(image, result)

    def cancel(self) -> bool:
        """Cancel the in-flight operation before its next status query"""
        event = self._cancel_event
        if event is None:
            return False
        event.set()
        logger.info("Cancellation requested")
        return True

    @property
    def is_busy(self) -> bool:
        return self._busy.locked()

    def get_health(self) -> HealthStatus:
        return HealthStatus(
            status="ok",
            connected=self.client is not None,
            image_loaded=self.current_image is not None,
            busy=self.is_busy,
        )

    # ---- Helpers ----
    @contextmanager
    def _exclusive(self):
        if not self._busy.acquire(blocking=False):
            raise OperationInProgress("Another request is still running")
        self._cancel_event = threading.Event()
        try:
            yield self._cancel_event
        finally:
            self._cancel_event = None
            self._busy.release()

    def _require_ready(self) -> Tuple[VisionClientInterface, ImageHandle]:
        """Check preconditions before any remote call"""
        if self.client is None:
            raise MissingCredential("Please enter a Computer Vision API Key.")

        image = self.current_image
        if image is None:
            raise NoImageSelected("Please upload an image.")

        if image.source is not None and not image.source.is_file():
            raise ImageUnreadable(f"Unable to open or read Image Path: {image.source}")

        return self.client, image

    def _analysis_outcome(self, image: ImageHandle, result: AnalysisResult) -> AnalysisOutcome:
        scale = self.display_scale(image)
        face_rects = to_display_rects([face.region for face in result.faces or []], scale)
        overlay = render_overlay(image, face_rects, scale, self.style)
        sections = format_analysis(result)

        self._publish(image, result, overlay)
        return AnalysisOutcome(
            result=result,
            sections=sections,
            report=render_report(sections),
            face_rects=face_rects,
            overlay=overlay,
            scale=scale,
        )

    def _text_outcome(self, image: ImageHandle, result: TextOperationResult) -> TextOutcome:
        scale = self.display_scale(image)
        lines = format_text_lines(result, scale)
        overlay = render_overlay(image, [line.rect for line in lines], scale, self.style)
        sections = format_text_result(result)

        self._publish(image, result, overlay)
        return TextOutcome(
            result=result,
            lines=lines,
            sections=sections,
            report=render_report(sections),
            overlay=overlay,
            scale=scale,
        )

    def _publish(self, image: ImageHandle, result, overlay: ImageHandle) -> None:
        # A result for an image that is no longer current must not replace the display
        if self.current_image is not image:
            logger.info("Image changed during request; discarding overlay")
            return
        self.last_result = result
        self.last_overlay = overlay
