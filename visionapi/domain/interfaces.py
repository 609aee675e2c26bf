"""
Domain interfaces (ports)
"""
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional, Sequence, Union

from .models import (
    AnalysisResult,
    ImageHandle,
    SubmitResponse,
    TextOperationResult,
    TextRecognitionMode,
    VisualFeature,
)


class VisionClientInterface(ABC):
    """Interface for the remote vision-analysis service"""

    @abstractmethod
    def analyze(self, image_data: bytes, features: Sequence[VisualFeature]) -> AnalysisResult:
        """Analyze an image in a single round trip"""
        pass

    @abstractmethod
    def submit_text_recognition(self, image_data: bytes, mode: TextRecognitionMode) -> SubmitResponse:
        """Start a long-running text recognition job"""
        pass

    @abstractmethod
    def get_operation_status(self, operation_id: str) -> TextOperationResult:
        """Query the status of a text recognition job"""
        pass


class ImageLoaderInterface(ABC):
    """Interface for image loading"""

    @abstractmethod
    def load_from_path(self, path: Union[str, Path]) -> ImageHandle:
        """Load image from a local file"""
        pass

    @abstractmethod
    def load_from_bytes(self, data: bytes, source: Optional[Path] = None) -> ImageHandle:
        """Load image from bytes"""
        pass
