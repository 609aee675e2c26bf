"""
Image loader implementation
"""
import logging
from io import BytesIO
from pathlib import Path
from typing import Optional, Union

import numpy as np
import cv2
from PIL import Image

from visionapi.config import get_config
from visionapi.domain.errors import ImageUnreadable, NoImageSelected
from visionapi.domain.interfaces import ImageLoaderInterface
from visionapi.domain.models import ImageHandle

logger = logging.getLogger(__name__)


class ImageLoader(ImageLoaderInterface):
    """Image loader for local files and uploaded bytes"""

    def __init__(self, config=None):
        self.config = config or get_config()

    def load_from_path(self, path: Union[str, Path]) -> ImageHandle:
        """Load image from a local file"""
        if path is None or not str(path).strip():
            raise NoImageSelected("Please upload an image.")

        file_path = Path(path)
        if not file_path.is_file():
            raise ImageUnreadable(f"Unable to open or read Image Path: {file_path}")

        try:
            data = file_path.read_bytes()
        except OSError as e:
            logger.error(f"Failed to read image file {file_path}: {e}")
            raise ImageUnreadable(f"Unable to open or read Image Path: {file_path}") from e

        return self.load_from_bytes(data, source=file_path)

    def load_from_bytes(self, data: bytes, source: Optional[Path] = None) -> ImageHandle:
        """Load image from bytes"""
        if not data:
            raise NoImageSelected("Please upload an image.")

        if len(data) > self.config.MAX_IMAGE_SIZE:
            logger.error(f"Image too large: {len(data)} bytes")
            raise ImageUnreadable(
                f"Image too large: {len(data)} bytes (limit {self.config.MAX_IMAGE_SIZE})"
            )

        image, image_format, dpi = self._decode_image(data)
        if image_format not in self.config.ALLOWED_FORMATS:
            raise ImageUnreadable(f"Unsupported image format: {image_format}")

        width, height = image.size
        logger.info(f"Loaded image {source or '<bytes>'}: {width}x{height} at {dpi} DPI")

        return ImageHandle(
            data=data,
            image=image,
            width=width,
            height=height,
            dpi=dpi,
            format=image_format,
            source=source,
        )

    def _decode_image(self, data: bytes):
        """Decode image bytes to a PIL image, its format and horizontal DPI"""
        try:
            # Try PIL first (keeps format and DPI metadata)
            pil_image = Image.open(BytesIO(data))
            pil_image.load()
            return pil_image, pil_image.format, self._read_dpi(pil_image)

        except Exception as e:
            logger.warning(f"PIL failed, trying OpenCV: {e}")

        # Fallback to OpenCV
        nparr = np.frombuffer(data, np.uint8)
        image = cv2.imdecode(nparr, cv2.IMREAD_COLOR)

        if image is None:
            logger.error("OpenCV failed to decode image")
            raise ImageUnreadable("Data is not a readable image")

        # OpenCV decodes to BGR
        rgb = cv2.cvtColor(image, cv2.COLOR_BGR2RGB)
        return Image.fromarray(rgb), _sniff_format(data), float(self.config.DEFAULT_SOURCE_DPI)

    def _read_dpi(self, pil_image: Image.Image) -> float:
        dpi = pil_image.info.get("dpi")
        try:
            horizontal = float(dpi[0]) if dpi else 0.0
        except (TypeError, ValueError, IndexError):
            horizontal = 0.0
        if not horizontal > 0:
            return float(self.config.DEFAULT_SOURCE_DPI)

        clamped = min(max(horizontal, self.config.MIN_SOURCE_DPI), self.config.MAX_SOURCE_DPI)
        if clamped != horizontal:
            logger.warning(f"Image DPI {horizontal} out of range, using {clamped}")
        return float(clamped)


# File signatures for the formats the service accepts
SIGNATURES = (
    (b"\xff\xd8\xff", "JPEG"),
    (b"\x89PNG\r\n\x1a\n", "PNG"),
    (b"GIF87a", "GIF"),
    (b"GIF89a", "GIF"),
    (b"BM", "BMP"),
)


def _sniff_format(data: bytes) -> Optional[str]:
    for signature, name in SIGNATURES:
        if data.startswith(signature):
            return name
    return None
