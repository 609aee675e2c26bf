"""
Unit tests for visionapi.infrastructure.image_loader module.
"""
from io import BytesIO

import pytest
from PIL import Image

from visionapi.domain.errors import ImageUnreadable, NoImageSelected
from visionapi.infrastructure import image_loader
from visionapi.infrastructure.image_loader import ImageLoader


@pytest.fixture
def loader(test_config):
    return ImageLoader(test_config)


class TestLoadFromPath:
    """Tests for loading local files."""

    def test_jpeg_with_dpi(self, loader, sample_image_path):
        """Test dimensions, DPI and bytes are captured."""
        image = loader.load_from_path(sample_image_path)

        assert (image.width, image.height) == (800, 600)
        assert image.dpi == pytest.approx(96)
        assert image.format == "JPEG"
        assert image.source == sample_image_path
        assert image.data == sample_image_path.read_bytes()

    def test_missing_file(self, loader, tmp_path):
        with pytest.raises(ImageUnreadable):
            loader.load_from_path(tmp_path / "nope.jpg")

    def test_directory(self, loader, tmp_path):
        with pytest.raises(ImageUnreadable):
            loader.load_from_path(tmp_path)

    @pytest.mark.parametrize("path", [None, "", "  "])
    def test_no_path(self, loader, path):
        with pytest.raises(NoImageSelected):
            loader.load_from_path(path)


class TestLoadFromBytes:
    """Tests for decoding uploaded bytes."""

    def test_png_without_dpi_uses_default(self, loader, image_bytes_factory):
        image = loader.load_from_bytes(image_bytes_factory(20, 10, fmt="PNG"))

        assert image.dpi == 96.0
        assert image.source is None

    def test_png_with_dpi(self, loader, image_bytes_factory):
        image = loader.load_from_bytes(image_bytes_factory(20, 10, fmt="PNG", dpi=72))

        assert image.dpi == pytest.approx(72, abs=0.1)

    @pytest.mark.parametrize("fmt", ["BMP", "GIF"])
    def test_extended_formats(self, loader, image_bytes_factory, fmt):
        image = loader.load_from_bytes(image_bytes_factory(20, 10, fmt=fmt))

        assert image.format == fmt

    def test_unsupported_format(self, loader):
        buf = BytesIO()
        Image.new("RGB", (10, 10)).save(buf, format="TIFF")

        with pytest.raises(ImageUnreadable, match="Unsupported"):
            loader.load_from_bytes(buf.getvalue())

    def test_garbage(self, loader):
        with pytest.raises(ImageUnreadable):
            loader.load_from_bytes(b"definitely not an image")

    def test_empty(self, loader):
        with pytest.raises(NoImageSelected):
            loader.load_from_bytes(b"")

    def test_too_large(self, test_config, image_bytes_factory):
        test_config.MAX_IMAGE_SIZE = 10
        loader = ImageLoader(test_config)

        with pytest.raises(ImageUnreadable, match="too large"):
            loader.load_from_bytes(image_bytes_factory(20, 10))


class TestDpiMetadata:
    """Tests for clamping untrusted DPI metadata."""

    def test_tiny_dpi_clamped(self, loader, image_bytes_factory):
        """Test a DPI of 1 cannot blow the display scale up to 96x."""
        image = loader.load_from_bytes(image_bytes_factory(80, 60, dpi=1))

        assert image.dpi == 72.0

    def test_huge_dpi_clamped(self, loader, image_bytes_factory):
        image = loader.load_from_bytes(image_bytes_factory(80, 60, dpi=50000))

        assert image.dpi == 1200.0

    def test_in_range_dpi_kept(self, loader, image_bytes_factory):
        image = loader.load_from_bytes(image_bytes_factory(80, 60, dpi=300))

        assert image.dpi == pytest.approx(300)


def refuse_to_open(*args, **kwargs):
    raise OSError("cannot identify image file")


class TestOpenCVFallback:
    """Tests for bytes Pillow refuses and OpenCV decodes."""

    def test_allowed_format_from_signature(self, loader, image_bytes_factory, monkeypatch):
        data = image_bytes_factory(20, 10, fmt="PNG")
        monkeypatch.setattr(image_loader.Image, "open", refuse_to_open)

        image = loader.load_from_bytes(data)

        assert image.format == "PNG"
        assert (image.width, image.height) == (20, 10)
        assert image.dpi == 96.0

    def test_unknown_signature_rejected(self, loader, monkeypatch):
        """Test formats only OpenCV understands are not let through."""
        buf = BytesIO()
        Image.new("RGB", (10, 10)).save(buf, format="TIFF")
        monkeypatch.setattr(image_loader.Image, "open", refuse_to_open)

        with pytest.raises(ImageUnreadable, match="Unsupported"):
            loader.load_from_bytes(buf.getvalue())
