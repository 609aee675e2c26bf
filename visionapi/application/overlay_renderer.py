"""
Overlay renderer - strokes detection rectangles over a copy of the image
"""
import logging
from io import BytesIO
from typing import Optional, Sequence

from PIL import Image, ImageDraw

from visionapi.domain.errors import ImageUnreadable
from visionapi.domain.models import ImageHandle, OverlayStyle, Rect

logger = logging.getLogger(__name__)


def render_overlay(
    base: ImageHandle,
    rects: Sequence[Rect],
    scale: float = 1.0,
    style: Optional[OverlayStyle] = None,
    max_pixels: Optional[int] = None,
) -> ImageHandle:
    """Draw rects (already in display space) over base scaled by scale.

    Returns base itself when there is nothing to draw. Rectangles are
    stroked in input order with no fill; zero-area ones are skipped.
    max_pixels defaults to Pillow's decompression-bomb limit.
    """
    if not rects:
        return base
    if scale <= 0:
        raise ValueError(f"Scale factor must be positive, got {scale}")

    style = style or OverlayStyle()
    width = max(1, round(base.width * scale))
    height = max(1, round(base.height * scale))

    limit = Image.MAX_IMAGE_PIXELS if max_pixels is None else max_pixels
    if limit and width * height > limit:
        logger.error(f"Overlay canvas {width}x{height} exceeds {limit} pixels")
        raise ImageUnreadable(
            f"Display size {width}x{height} at scale {scale} is too large to render"
        )

    # convert() always returns a new image, so base is never drawn on
    canvas = base.image.convert("RGBA" if _has_alpha(base.image) else "RGB")
    if canvas.size != (width, height):
        canvas = canvas.resize((width, height), Image.BILINEAR)

    draw = ImageDraw.Draw(canvas)
    drawn = 0
    for rect in rects:
        if rect.is_empty:
            continue
        # PIL treats the end coordinate as inclusive; sub-pixel rects become a line
        draw.rectangle(
            [
                rect.x,
                rect.y,
                max(rect.x, rect.x + rect.width - 1),
                max(rect.y, rect.y + rect.height - 1),
            ],
            outline=style.color,
            width=style.stroke_width,
        )
        drawn += 1

    logger.debug(f"Rendered {drawn} of {len(rects)} rectangles at scale {scale}")

    return ImageHandle(
        data=encode_png(canvas),
        image=canvas,
        width=width,
        height=height,
        dpi=base.dpi * scale,
        format="PNG",
        source=None,
    )


def encode_png(image: Image.Image) -> bytes:
    buf = BytesIO()
    image.save(buf, format="PNG")
    return buf.getvalue()


def _has_alpha(image: Image.Image) -> bool:
    return image.mode in ("RGBA", "LA") or (image.mode == "P" and "transparency" in image.info)
