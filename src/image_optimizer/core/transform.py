"""Sequences codec calls to turn a source image into its processed artifact."""

from pathlib import Path
from typing import Any, Dict, List

from image_optimizer.core.classifier import PASSTHROUGH_EXTENSIONS, classify_format
from image_optimizer.core.codec import ImageCodec
from image_optimizer.core.models import ProcessedArtifact, SourceFile, TargetFormat
from image_optimizer.utils.config import PipelineConfig
from image_optimizer.utils.logger import setup_logger

logger = setup_logger(__name__)


class TransformationOrchestrator:
    """Resizes and re-encodes images through an ImageCodec."""

    def __init__(self, config: PipelineConfig, codec: ImageCodec):
        """
        Initialize the orchestrator.

        Args:
            config: Pipeline configuration (bounds and compression settings)
            codec: Codec performing the pixel work
        """
        self.config = config
        self.codec = codec

    def transform(self, source: SourceFile, output_path: Path) -> ProcessedArtifact:
        """
        Produce the processed bytes for one source file.

        Passthrough files are copied verbatim without being decoded. Other
        files are shrunk into the configured bounds if needed and encoded in
        the classifier's chosen format.

        Args:
            source: Original image
            output_path: Mirrored destination path; its suffix is adjusted to
                the target format

        Returns:
            ProcessedArtifact (not yet written to disk)

        Raises:
            CodecError: If the codec cannot decode or encode the image
        """
        if source.extension in PASSTHROUGH_EXTENSIONS:
            target = classify_format(source.extension, None, source.size)
            return ProcessedArtifact(
                path=output_path,
                data=source.data,
                format=target,
                resized=False,
                operations=["copy"],
            )

        metadata = self.codec.read_metadata(source.data)
        target = classify_format(source.extension, metadata, source.size)

        operations: List[str] = []
        data = source.data
        needs_resize = (
            metadata.width > self.config.max_width
            or metadata.height > self.config.max_height
        )
        if needs_resize:
            data = self.codec.resize_to_bounds(
                data, self.config.max_width, self.config.max_height
            )
            operations.append("resize")

        data = self.codec.encode(data, target, self._encode_params(target))
        operations.extend([f"convert:{target.value}", "compress"])

        logger.debug(
            f"{source.relative_path}: {metadata.width}x{metadata.height} -> "
            f"{target.value} ({source.size} -> {len(data)} bytes)"
        )

        return ProcessedArtifact(
            path=output_path.with_suffix(target.suffix),
            data=data,
            format=target,
            resized=needs_resize,
            operations=operations,
        )

    def _encode_params(self, target: TargetFormat) -> Dict[str, Any]:
        if target is TargetFormat.JPEG:
            return {"quality": self.config.jpeg_quality}
        return {"compress_level": self.config.png_compression_level}
