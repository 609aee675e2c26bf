"""
Computer Vision REST client implementation
"""
import logging
from typing import List, Optional, Sequence

import requests

from visionapi.domain.errors import ServiceRequestError
from visionapi.domain.interfaces import VisionClientInterface
from visionapi.domain.models import (
    AnalysisResult,
    AxisAlignedRect,
    Caption,
    Category,
    Celebrity,
    ColorInfo,
    FaceDescription,
    ImageDescription,
    ImageType,
    Landmark,
    OperationStatus,
    Polygon8,
    SubmitResponse,
    Tag,
    TextLine,
    TextOperationResult,
    TextRecognitionMode,
    TextWord,
    VisualFeature,
)

logger = logging.getLogger(__name__)

API_PATH = "/vision/v2.0"


class ComputerVisionClient(VisionClientInterface):
    """Thin requests-based adapter for the cloud vision service"""

    def __init__(self, api_key: str, endpoint: str, timeout: float = 30.0):
        self.endpoint = endpoint.rstrip("/")
        self.timeout = timeout
        self.session = requests.Session()
        self.session.headers.update({
            'Ocp-Apim-Subscription-Key': api_key,
            'User-Agent': 'VisionAPI/1.0',
        })

    def analyze(self, image_data: bytes, features: Sequence[VisualFeature]) -> AnalysisResult:
        """Analyze an image in a single round trip"""
        params = {"visualFeatures": ",".join(f.value for f in features)}
        if VisualFeature.CATEGORIES in features:
            params["details"] = "Celebrities,Landmarks"

        response = self._request("POST", "/analyze", params=params, data=image_data)
        return _parse_analysis(_json(response))

    def submit_text_recognition(self, image_data: bytes, mode: TextRecognitionMode) -> SubmitResponse:
        """Start a text recognition job and return its Operation-Location"""
        response = self._request(
            "POST",
            "/recognizeText",
            params={"mode": mode.value},
            data=image_data,
        )
        return SubmitResponse(operation_location=response.headers.get("Operation-Location"))

    def get_operation_status(self, operation_id: str) -> TextOperationResult:
        """Query a text recognition job"""
        response = self._request("GET", f"/textOperations/{operation_id}")
        return _parse_text_operation(_json(response))

    def _request(self, method: str, path: str, **kwargs) -> requests.Response:
        url = f"{self.endpoint}{API_PATH}{path}"
        headers = {}
        if "data" in kwargs:
            headers["Content-Type"] = "application/octet-stream"

        try:
            response = self.session.request(
                method,
                url,
                headers=headers,
                timeout=self.timeout,
                **kwargs,
            )
        except requests.RequestException as e:
            logger.error(f"Request to {url} failed: {e}")
            raise ServiceRequestError(f"Request to vision service failed: {e}") from e

        if not response.ok:
            message = _error_message(response)
            logger.error(f"Vision service returned {response.status_code}: {message}")
            raise ServiceRequestError(message, status_code=response.status_code)

        return response


def _json(response: requests.Response) -> dict:
    try:
        return response.json()
    except ValueError as e:
        raise ServiceRequestError(f"Invalid JSON from vision service: {e}") from e


def _error_message(response: requests.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return f"HTTP {response.status_code}"
    error = body.get("error", body) if isinstance(body, dict) else {}
    code = error.get("code") if isinstance(error, dict) else None
    message = error.get("message") if isinstance(error, dict) else None
    if code and message:
        return f"{code}: {message}"
    return message or f"HTTP {response.status_code}"


def _rect(data: Optional[dict]) -> Optional[AxisAlignedRect]:
    if not data:
        return None
    return AxisAlignedRect(
        left=data.get("left", 0),
        top=data.get("top", 0),
        width=data.get("width", 0),
        height=data.get("height", 0),
    )


def _parse_categories(items: List[dict]) -> List[Category]:
    categories = []
    for item in items:
        detail = item.get("detail") or {}
        celebrities = detail.get("celebrities")
        landmarks = detail.get("landmarks")
        categories.append(Category(
            name=item.get("name", ""),
            score=item.get("score") or 0.0,
            celebrities=None if celebrities is None else [
                Celebrity(
                    name=c.get("name", ""),
                    confidence=c.get("confidence") or 0.0,
                    region=_rect(c.get("faceRectangle")),
                )
                for c in celebrities
            ],
            landmarks=None if landmarks is None else [
                Landmark(name=lm.get("name", ""), confidence=lm.get("confidence") or 0.0)
                for lm in landmarks
            ],
        ))
    return categories


def _parse_analysis(body: dict) -> AnalysisResult:
    """Map the analyze response body to an AnalysisResult"""
    description = body.get("description")
    color = body.get("color")
    image_type = body.get("imageType")
    faces = body.get("faces")
    tags = body.get("tags")
    categories = body.get("categories")

    return AnalysisResult(
        categories=None if categories is None else _parse_categories(categories),
        description=None if description is None else ImageDescription(
            captions=[
                Caption(text=c.get("text", ""), confidence=c.get("confidence") or 0.0)
                for c in description.get("captions") or []
            ],
            tags=list(description.get("tags") or []),
        ),
        tags=None if tags is None else [
            Tag(name=t.get("name", ""), confidence=t.get("confidence") or 0.0) for t in tags
        ],
        color=None if color is None else ColorInfo(
            dominant_foreground=color.get("dominantColorForeground"),
            dominant_background=color.get("dominantColorBackground"),
            dominant_colors=list(color.get("dominantColors") or []),
            accent_color=color.get("accentColor"),
            is_bw=bool(color.get("isBWImg", False)),
        ),
        image_type=None if image_type is None else ImageType(
            clip_art_type=image_type.get("clipArtType", 0),
            line_drawing_type=image_type.get("lineDrawingType", 0),
        ),
        faces=None if faces is None else [
            FaceDescription(
                region=_rect(f.get("faceRectangle")) or AxisAlignedRect(0, 0, 0, 0),
                age=f.get("age"),
                gender=f.get("gender"),
            )
            for f in faces
        ],
        request_id=body.get("requestId"),
    )


def _parse_text_operation(body: dict) -> TextOperationResult:
    """Map a textOperations response body to a TextOperationResult"""
    try:
        status = OperationStatus.parse(body.get("status", ""))
    except ValueError as e:
        raise ServiceRequestError(str(e)) from e
    recognition = body.get("recognitionResult") or {}

    lines = []
    for line in recognition.get("lines") or []:
        lines.append(TextLine(
            text=line.get("text", ""),
            region=Polygon8.from_values(line.get("boundingBox")),
            words=[
                TextWord(text=w.get("text", ""), region=Polygon8.from_values(w.get("boundingBox")))
                for w in line.get("words") or []
            ],
        ))

    failure_reason = None
    if status == OperationStatus.FAILED:
        error = body.get("error") or {}
        failure_reason = error.get("message") or body.get("message")

    return TextOperationResult(status=status, lines=lines, failure_reason=failure_reason)
