"""
Mapping of detection regions from source image space to display space
"""
from typing import Iterable, List

from .errors import InvalidRegion
from .models import AxisAlignedRect, DetectionRegion, Polygon8, Rect


def compute_scale_factor(source_dpi: float, target_dpi: float) -> float:
    """Scale factor for showing an image of source_dpi on a target_dpi surface"""
    if source_dpi <= 0 or target_dpi <= 0:
        raise ValueError(f"DPI must be positive, got source={source_dpi} target={target_dpi}")
    return target_dpi / source_dpi


def to_display_rect(region: DetectionRegion, scale: float) -> Rect:
    """Transform a detection region to a display-space rectangle.

    Polygons are read as 4 clockwise points from the top-left: the box
    starts at point 0, width spans point 0 to point 2 horizontally and
    height spans point 1 to point 2 vertically. Degenerate results are
    returned as-is.
    """
    if scale <= 0:
        raise ValueError(f"Scale factor must be positive, got {scale}")

    if isinstance(region, AxisAlignedRect):
        return Rect(
            x=region.left * scale,
            y=region.top * scale,
            width=region.width * scale,
            height=region.height * scale,
        )

    if isinstance(region, Polygon8):
        if len(region.values) != 8:
            raise InvalidRegion(f"Polygon needs 8 numbers, got {len(region.values)}")
        x0, y0 = region.point(0)
        _, y1 = region.point(1)
        x2, y2 = region.point(2)
        return Rect(
            x=x0 * scale,
            y=y0 * scale,
            width=(x2 - x0) * scale,
            height=(y2 - y1) * scale,
        )

    raise InvalidRegion(f"Unsupported region type: {type(region).__name__}")


def to_display_rects(regions: Iterable[DetectionRegion], scale: float) -> List[Rect]:
    return [to_display_rect(region, scale) for region in regions]
