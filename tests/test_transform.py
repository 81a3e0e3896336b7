"""Tests for the transformation orchestrator."""

import io
from pathlib import Path

from PIL import Image

from conftest import image_bytes
from image_optimizer.core.codec import PillowCodec
from image_optimizer.core.models import ImageMetadata, SourceFile, TargetFormat
from image_optimizer.core.transform import TransformationOrchestrator
from image_optimizer.utils.config import PipelineConfig


def make_source(tmp_path: Path, name: str, data: bytes) -> SourceFile:
    path = tmp_path / name
    path.write_bytes(data)
    return SourceFile.read(path, tmp_path)


class TestTransformationOrchestrator:
    """Test codec sequencing per target format."""

    def test_large_photo_resized_and_converted(self, tmp_path):
        """Test that oversized images are shrunk and encoded as JPEG."""
        config = PipelineConfig(max_width=200, max_height=200)
        orchestrator = TransformationOrchestrator(config, PillowCodec())
        source = make_source(tmp_path, "photo.jpg", image_bytes(size=(800, 400), fmt="JPEG"))

        artifact = orchestrator.transform(source, tmp_path / "out" / "photo.jpg")

        assert artifact.format is TargetFormat.JPEG
        assert artifact.resized is True
        assert artifact.operations == ["resize", "convert:jpeg", "compress"]
        assert Image.open(io.BytesIO(artifact.data)).size == (200, 100)

    def test_small_png_stays_png(self, tmp_path):
        """Test that small PNGs are kept as PNG without resizing."""
        orchestrator = TransformationOrchestrator(PipelineConfig(), PillowCodec())
        source = make_source(tmp_path, "icon.png", image_bytes(size=(32, 32)))

        artifact = orchestrator.transform(source, tmp_path / "out" / "icon.png")

        assert artifact.format is TargetFormat.PNG
        assert artifact.resized is False
        assert artifact.operations == ["convert:png", "compress"]
        assert artifact.path.name == "icon.png"

    def test_webp_output_suffix(self, tmp_path):
        """Test that the output suffix follows the target format."""
        orchestrator = TransformationOrchestrator(PipelineConfig(), PillowCodec())
        source = make_source(tmp_path, "pic.webp", image_bytes(fmt="WEBP"))

        artifact = orchestrator.transform(source, tmp_path / "out" / "pic.webp")

        assert artifact.path == tmp_path / "out" / "pic.jpg"
        assert Image.open(io.BytesIO(artifact.data)).format == "JPEG"

    def test_gif_copied_verbatim_without_decoding(self, tmp_path, grid_codec):
        """Test that GIF bytes pass through untouched and the codec is not used."""
        orchestrator = TransformationOrchestrator(PipelineConfig(), grid_codec)
        data = b"GIF89a-not-really-decodable"
        source = make_source(tmp_path, "anim.gif", data)

        artifact = orchestrator.transform(source, tmp_path / "out" / "anim.gif")

        assert artifact.data == data
        assert artifact.format is TargetFormat.GIF_PASSTHROUGH
        assert artifact.operations == ["copy"]
        assert artifact.resized is False
        assert artifact.path.name == "anim.gif"
        assert artifact.checksum == source.checksum
        assert grid_codec.calls == []

    def test_oversized_image_codec_calls(self, tmp_path, grid_codec):
        """Test the order of codec calls for an oversized image."""
        grid_codec.read_metadata = lambda data: ImageMetadata(width=5000, height=10)
        orchestrator = TransformationOrchestrator(PipelineConfig(), grid_codec)
        source = make_source(tmp_path, "big.jpg", b"big")

        orchestrator.transform(source, tmp_path / "out" / "big.jpg")

        assert grid_codec.calls == ["resize_to_bounds", "encode:jpeg"]
