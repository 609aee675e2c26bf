"""
Domain models/entities
"""
import math
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional, Sequence, Tuple, Union

from PIL import Image

from .errors import InvalidRegion


@dataclass(frozen=True)
class ImageHandle:
    """Decoded image plus the bytes that get uploaded"""
    data: bytes
    image: Image.Image
    width: int
    height: int
    dpi: float
    format: Optional[str] = None
    source: Optional[Path] = None


@dataclass(frozen=True)
class Rect:
    """Axis-aligned rectangle in display pixel space"""
    x: float
    y: float
    width: float
    height: float

    @property
    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0

    def to_dict(self) -> dict:
        return {
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
        }


@dataclass(frozen=True)
class AxisAlignedRect:
    """Rectangle in source image pixel space"""
    left: float
    top: float
    width: float
    height: float


@dataclass(frozen=True)
class Polygon8:
    """Four corner points, clockwise from top-left, flattened to 8 numbers"""
    values: Tuple[float, ...]

    @classmethod
    def from_values(cls, values: Sequence) -> "Polygon8":
        """Validate a raw bounding box list from the service"""
        if values is None or isinstance(values, (str, bytes)):
            raise InvalidRegion(f"Polygon needs 8 numbers, got {values!r}")
        try:
            numbers = tuple(float(v) for v in values)
        except (TypeError, ValueError) as e:
            raise InvalidRegion(f"Polygon has non-numeric values: {values!r}") from e
        if len(numbers) != 8 or not all(math.isfinite(n) for n in numbers):
            raise InvalidRegion(f"Polygon needs 8 finite numbers, got {len(numbers)}")
        return cls(values=numbers)

    def point(self, index: int) -> Tuple[float, float]:
        return self.values[2 * index], self.values[2 * index + 1]


DetectionRegion = Union[AxisAlignedRect, Polygon8]


class OperationStatus(Enum):
    """Status of a long-running remote job"""
    NOT_STARTED = "NotStarted"
    RUNNING = "Running"
    SUCCEEDED = "Succeeded"
    FAILED = "Failed"

    @property
    def is_terminal(self) -> bool:
        return self in (OperationStatus.SUCCEEDED, OperationStatus.FAILED)

    @classmethod
    def parse(cls, value: str) -> "OperationStatus":
        """Accept the service spellings, e.g. "Not Started" or "running" """
        key = (value or "").replace(" ", "").replace("_", "").lower()
        for status in cls:
            if status.value.lower() == key:
                return status
        raise ValueError(f"Unknown operation status: {value!r}")


class PollState(Enum):
    """States of the long-poll controller"""
    IDLE = "idle"
    SUBMITTED = "submitted"
    POLLING = "polling"
    COMPLETED = "completed"
    FAILED = "failed"
    TIMED_OUT = "timed_out"


class VisualFeature(Enum):
    """Independently requestable analysis facets"""
    CATEGORIES = "Categories"
    DESCRIPTION = "Description"
    FACES = "Faces"
    IMAGE_TYPE = "ImageType"
    TAGS = "Tags"
    COLOR = "Color"


DEFAULT_FEATURES = [
    VisualFeature.CATEGORIES,
    VisualFeature.DESCRIPTION,
    VisualFeature.FACES,
    VisualFeature.IMAGE_TYPE,
    VisualFeature.TAGS,
    VisualFeature.COLOR,
]


class TextRecognitionMode(Enum):
    PRINTED = "Printed"
    HANDWRITTEN = "Handwritten"


@dataclass(frozen=True)
class Caption:
    text: str
    confidence: float = 0.0


@dataclass(frozen=True)
class ImageDescription:
    captions: List[Caption] = field(default_factory=list)
    tags: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class Tag:
    name: str
    confidence: float = 0.0


@dataclass(frozen=True)
class Celebrity:
    name: str
    confidence: float = 0.0
    region: Optional[AxisAlignedRect] = None


@dataclass(frozen=True)
class Landmark:
    name: str
    confidence: float = 0.0


@dataclass(frozen=True)
class Category:
    """Category with optional celebrity/landmark detail (None when absent)"""
    name: str
    score: float = 0.0
    celebrities: Optional[List[Celebrity]] = None
    landmarks: Optional[List[Landmark]] = None


@dataclass(frozen=True)
class ColorInfo:
    dominant_foreground: Optional[str] = None
    dominant_background: Optional[str] = None
    dominant_colors: List[str] = field(default_factory=list)
    accent_color: Optional[str] = None
    is_bw: bool = False


@dataclass(frozen=True)
class ImageType:
    clip_art_type: int = 0
    line_drawing_type: int = 0


@dataclass(frozen=True)
class FaceDescription:
    region: AxisAlignedRect
    age: Optional[int] = None
    gender: Optional[str] = None


@dataclass(frozen=True)
class AnalysisResult:
    """Facets returned by a single analysis call; absent facets are None"""
    categories: Optional[List[Category]] = None
    description: Optional[ImageDescription] = None
    tags: Optional[List[Tag]] = None
    color: Optional[ColorInfo] = None
    image_type: Optional[ImageType] = None
    faces: Optional[List[FaceDescription]] = None
    request_id: Optional[str] = None


@dataclass(frozen=True)
class TextWord:
    text: str
    region: Polygon8


@dataclass(frozen=True)
class TextLine:
    text: str
    region: Polygon8
    words: List[TextWord] = field(default_factory=list)


@dataclass(frozen=True)
class TextOperationResult:
    """One status query of a text recognition job"""
    status: OperationStatus
    lines: List[TextLine] = field(default_factory=list)
    failure_reason: Optional[str] = None


@dataclass(frozen=True)
class SubmitResponse:
    operation_location: Optional[str]


@dataclass(frozen=True)
class OverlayStyle:
    color: str = "#ff0000"
    stroke_width: int = 2


@dataclass(frozen=True)
class ReportSection:
    """Titled block of report lines"""
    title: str
    lines: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {"title": self.title, "lines": list(self.lines)}


@dataclass(frozen=True)
class TextLineReport:
    """Recognized line with its display-space rectangle"""
    text: str
    rect: Rect

    def to_dict(self) -> dict:
        return {"text": self.text, "rect": self.rect.to_dict()}


@dataclass
class HealthStatus:
    """Service health status"""
    status: str
    connected: bool
    image_loaded: bool
    busy: bool

    def to_dict(self) -> dict:
        return {
            "status": self.status,
            "connected": self.connected,
            "image_loaded": self.image_loaded,
            "busy": self.busy,
        }
