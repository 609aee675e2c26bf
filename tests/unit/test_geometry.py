"""
Unit tests for visionapi.domain.geometry module.
"""
import pytest

from visionapi.domain.errors import InvalidRegion
from visionapi.domain.geometry import compute_scale_factor, to_display_rect, to_display_rects
from visionapi.domain.models import AxisAlignedRect, Polygon8, Rect


def polygon_for(left, top, width, height):
    """Clockwise polygon from the top-left for an unrotated rectangle"""
    right, bottom = left + width, top + height
    return Polygon8.from_values([left, top, right, top, right, bottom, left, bottom])


class TestAxisAlignedRect:
    """Tests for axis-aligned rectangle transforms."""

    @pytest.mark.parametrize("scale", [0.5, 1.0, 1.5, 2.0, 96 / 72])
    def test_every_field_scaled(self, scale):
        """Test all four values are multiplied by the scale factor."""
        region = AxisAlignedRect(left=100, top=50, width=120, height=140)

        rect = to_display_rect(region, scale)

        assert rect.x == 100 * scale
        assert rect.y == 50 * scale
        assert rect.width == region.width * scale
        assert rect.height == region.height * scale

    def test_identity_scale(self):
        """Test scale 1.0 leaves the rectangle unchanged."""
        rect = to_display_rect(AxisAlignedRect(100, 50, 120, 140), 1.0)

        assert rect == Rect(100, 50, 120, 140)

    def test_degenerate_preserved(self):
        """Test zero and negative sizes are not clamped."""
        rect = to_display_rect(AxisAlignedRect(10, 10, 0, -5), 2.0)

        assert rect.width == 0
        assert rect.height == -10
        assert rect.is_empty


class TestPolygon8:
    """Tests for 8-number polygon transforms."""

    @pytest.mark.parametrize("scale", [0.5, 1.0, 2.0, 96 / 72])
    def test_unrotated_matches_axis_aligned(self, scale):
        """Test an unrotated polygon gives the same box as the equivalent rect."""
        polygon = polygon_for(12, 34, 56, 78)
        rect = AxisAlignedRect(12, 34, 56, 78)

        assert to_display_rect(polygon, scale) == to_display_rect(rect, scale)

    def test_skewed_polygon_uses_corner_convention(self):
        """Test width comes from points 0 and 2, height from points 1 and 2."""
        polygon = Polygon8.from_values([10, 20, 110, 25, 115, 60, 12, 58])

        rect = to_display_rect(polygon, 2.0)

        assert rect == Rect(x=20, y=40, width=(115 - 10) * 2.0, height=(60 - 25) * 2.0)

    def test_too_few_numbers(self):
        """Test a polygon with 7 values is rejected."""
        with pytest.raises(InvalidRegion):
            Polygon8.from_values([1, 2, 3, 4, 5, 6, 7])

    def test_non_numeric_values(self):
        """Test non-numeric polygon values are rejected."""
        with pytest.raises(InvalidRegion):
            Polygon8.from_values([1, 2, 3, 4, 5, 6, 7, "x"])

    def test_missing_values(self):
        """Test a missing bounding box is rejected."""
        with pytest.raises(InvalidRegion):
            Polygon8.from_values(None)

    def test_malformed_polygon_in_transform(self):
        """Test a polygon built without validation still fails in the transform."""
        with pytest.raises(InvalidRegion):
            to_display_rect(Polygon8(values=(1.0, 2.0, 3.0)), 1.0)


class TestTransformErrors:
    """Tests for invalid transform input."""

    def test_unsupported_region_type(self):
        """Test plain tuples are not accepted as regions."""
        with pytest.raises(InvalidRegion):
            to_display_rect((1, 2, 3, 4), 1.0)

    @pytest.mark.parametrize("scale", [0, -1.0])
    def test_non_positive_scale(self, scale):
        """Test the scale factor must be positive."""
        with pytest.raises(ValueError):
            to_display_rect(AxisAlignedRect(0, 0, 1, 1), scale)

    def test_list_form_keeps_order(self):
        """Test to_display_rects preserves input order."""
        rects = to_display_rects([AxisAlignedRect(1, 1, 1, 1), polygon_for(5, 5, 2, 2)], 1.0)

        assert rects == [Rect(1, 1, 1, 1), Rect(5, 5, 2, 2)]


class TestComputeScaleFactor:
    """Tests for compute_scale_factor function."""

    def test_same_dpi(self):
        assert compute_scale_factor(96, 96) == 1.0

    def test_low_dpi_source_is_enlarged(self):
        assert compute_scale_factor(72, 96) == 96 / 72

    @pytest.mark.parametrize("source,target", [(0, 96), (96, 0), (-72, 96)])
    def test_invalid_dpi(self, source, target):
        with pytest.raises(ValueError):
            compute_scale_factor(source, target)
