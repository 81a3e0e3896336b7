"""Shared fixtures for image-optimizer tests."""

import io
from pathlib import Path
from typing import Dict, Iterable, List

import pytest
from PIL import Image

from image_optimizer.core.models import ImageMetadata, TargetFormat
from image_optimizer.errors import CodecError, UnsupportedFormat
from image_optimizer.utils.config import PipelineConfig


class GridCodec:
    """
    Codec stub returning predefined grayscale grids.

    Encoding and resizing return the input unchanged, so processed bytes equal
    the original bytes and grids can be looked up by file content.
    """

    def __init__(self, size: int = 8):
        self.size = size
        self.grids: Dict[bytes, List[List[int]]] = {}
        self.calls: List[str] = []

    def register(self, data: bytes, bright_cells: Iterable[int]) -> None:
        """Map ``data`` to a grid that is 255 at ``bright_cells`` and 0 elsewhere."""
        bright = set(bright_cells)
        cells = [255 if i in bright else 0 for i in range(self.size * self.size)]
        self.grids[data] = [
            cells[row * self.size:(row + 1) * self.size] for row in range(self.size)
        ]

    def read_metadata(self, data: bytes) -> ImageMetadata:
        self.calls.append("read_metadata")
        if data not in self.grids:
            raise UnsupportedFormat("unknown test image")
        return ImageMetadata(width=100, height=100, has_alpha=False)

    def resize_to_bounds(self, data: bytes, max_width: int, max_height: int) -> bytes:
        self.calls.append("resize_to_bounds")
        return data

    def encode(self, data: bytes, target_format: TargetFormat, params: dict) -> bytes:
        self.calls.append(f"encode:{target_format.value}")
        return data

    def sample_grayscale_grid(self, data: bytes, size: int) -> List[List[int]]:
        self.calls.append("sample_grayscale_grid")
        if data not in self.grids:
            raise CodecError("cannot sample test image")
        return self.grids[data]


def image_bytes(size=(64, 64), color="red", mode="RGB", fmt="PNG") -> bytes:
    """Encode a solid-color Pillow image."""
    img = Image.new(mode, size, color=color)
    buffer = io.BytesIO()
    img.save(buffer, format=fmt)
    return buffer.getvalue()


@pytest.fixture
def grid_codec():
    """Fresh GridCodec with an 8x8 grid."""
    return GridCodec()


@pytest.fixture
def config():
    """Default configuration with a single ``images`` source."""
    return PipelineConfig()


@pytest.fixture
def project_root(tmp_path: Path) -> Path:
    """Project root with an empty ``images`` source directory."""
    (tmp_path / "images").mkdir()
    return tmp_path
