"""Tests for the Pillow codec."""

import io

import pytest
from PIL import Image

from conftest import image_bytes
from image_optimizer.core.codec import PillowCodec
from image_optimizer.core.models import TargetFormat
from image_optimizer.errors import CodecError, UnsupportedFormat


def decode(data: bytes) -> Image.Image:
    img = Image.open(io.BytesIO(data))
    img.load()
    return img


@pytest.fixture
def codec():
    return PillowCodec()


class TestReadMetadata:
    """Test header inspection."""

    def test_opaque_rgb(self, codec):
        meta = codec.read_metadata(image_bytes(size=(800, 600), fmt="JPEG"))
        assert (meta.width, meta.height, meta.has_alpha) == (800, 600, False)

    def test_rgba_has_alpha(self, codec):
        meta = codec.read_metadata(image_bytes(mode="RGBA", color=(0, 0, 0, 0)))
        assert meta.has_alpha

    def test_palette_transparency_has_alpha(self, codec):
        img = Image.new("P", (16, 16), color=0)
        buffer = io.BytesIO()
        img.save(buffer, format="PNG", transparency=0)

        assert codec.read_metadata(buffer.getvalue()).has_alpha

    def test_unsupported_bytes(self, codec):
        with pytest.raises(UnsupportedFormat):
            codec.read_metadata(b"definitely not an image")

    def test_unsupported_is_codec_error(self, codec):
        with pytest.raises(CodecError):
            codec.read_metadata(b"")


class TestResizeToBounds:
    """Test bounded resizing."""

    def test_preserves_aspect_ratio(self, codec):
        data = codec.resize_to_bounds(image_bytes(size=(4000, 2000)), 2048, 2048)
        assert decode(data).size == (2048, 1024)

    def test_fits_both_bounds(self, codec):
        data = codec.resize_to_bounds(image_bytes(size=(1000, 3000)), 2048, 600)
        assert decode(data).size == (200, 600)

    def test_within_bounds_is_noop(self, codec):
        original = image_bytes(size=(100, 50))
        assert codec.resize_to_bounds(original, 2048, 2048) == original

    def test_truncated_image(self, codec):
        data = image_bytes(size=(300, 300), color=(1, 2, 3), fmt="JPEG")
        with pytest.raises(CodecError):
            codec.resize_to_bounds(data[: len(data) // 3], 10, 10)

    def test_cmyk_jpeg_resizes_and_encodes(self, codec):
        data = image_bytes(size=(3000, 100), color=(0, 50, 100, 0), mode="CMYK", fmt="JPEG")

        resized = codec.resize_to_bounds(data, 2048, 2048)
        assert decode(resized).mode == "RGB"
        assert decode(resized).width == 2048

        encoded = codec.encode(resized, TargetFormat.JPEG, {"quality": 80})
        assert decode(encoded).format == "JPEG"


class TestEncode:
    """Test re-encoding."""

    def test_jpeg_from_rgba(self, codec):
        data = codec.encode(
            image_bytes(mode="RGBA", color=(255, 0, 0, 128)),
            TargetFormat.JPEG,
            {"quality": 70},
        )
        img = decode(data)
        assert img.format == "JPEG"
        assert img.mode == "RGB"

    def test_png_keeps_alpha(self, codec):
        data = codec.encode(
            image_bytes(mode="RGBA", color=(255, 0, 0, 128)),
            TargetFormat.PNG,
            {"compress_level": 9},
        )
        img = decode(data)
        assert img.format == "PNG"
        assert img.mode == "RGBA"

    def test_passthrough_not_encodable(self, codec):
        with pytest.raises(CodecError):
            codec.encode(image_bytes(), TargetFormat.GIF_PASSTHROUGH, {})


class TestSampleGrayscaleGrid:
    """Test hash sampling."""

    def test_grid_shape_and_range(self, codec):
        grid = codec.sample_grayscale_grid(image_bytes(size=(120, 80), color="blue"), 8)

        assert len(grid) == 8
        assert all(len(row) == 8 for row in grid)
        assert all(0 <= value <= 255 for row in grid for value in row)

    def test_white_image(self, codec):
        grid = codec.sample_grayscale_grid(image_bytes(color="white"), 4)
        assert grid == [[255] * 4 for _ in range(4)]

    def test_gif_first_frame(self, codec):
        data = image_bytes(mode="P", color=1, fmt="GIF")
        grid = codec.sample_grayscale_grid(data, 8)
        assert len(grid) == 8
