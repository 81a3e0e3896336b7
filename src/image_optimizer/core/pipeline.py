"""Sequential run loop tying the pipeline components together."""

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Iterator, Optional, Tuple

from tqdm import tqdm

from image_optimizer.core.clusterer import DuplicateClusterer
from image_optimizer.core.codec import ImageCodec, PillowCodec
from image_optimizer.core.fingerprint import PerceptualHashEngine
from image_optimizer.core.history import VersionHistoryStore, make_version_tag, write_json
from image_optimizer.core.manifest import ManifestBuilder
from image_optimizer.core.models import (
    FailedFile,
    FileResult,
    ProcessedFile,
    SourceFile,
    relative_posix,
)
from image_optimizer.core.review import DuplicateReviewStager
from image_optimizer.core.scanner import ImageScanner
from image_optimizer.core.transform import TransformationOrchestrator
from image_optimizer.errors import CodecError, FatalSetupError
from image_optimizer.utils.config import PipelineConfig
from image_optimizer.utils.logger import setup_logger

logger = setup_logger(__name__)

README_TEMPLATE = """Image Optimization Data Dump

What this contains:
- {processed}/: optimized images with mirrored directory structure (originals are untouched)
- {duplicates}/: groups of suspected duplicates for manual review (no deletions)
- {manifest}: per-file operations, SHA-256 checksums, and duplicate group IDs
- {history}: version history records for each optimization run
- versions/<version>/{manifest}: snapshot of the manifest for each run

Verification steps:
- Run `image-optimizer verify` or compare SHA-256 checksums in {manifest}
- Review {duplicates}/ folders; keep or remove manually as needed
- Compare original vs processed sizes and formats to validate optimization

Configuration:
- maxWidth={max_width}, maxHeight={max_height}
- jpegQuality={jpeg_quality}, pngCompressionLevel={png_compression_level}
- hashSize={hash_size}, duplicateHammingThreshold={duplicate_hamming_threshold}

Reversibility:
- Originals are preserved. Processed images exist only in {processed}/.
- No automatic deletions are performed.
"""


@dataclass(frozen=True)
class RunSummary:
    """Outcome of one pipeline run."""

    version: str
    items: int
    errors: int
    duplicate_groups: int
    output_root: Path
    manifest_path: Path


class ImagePipeline:
    """Processes every source image once, in a fixed order."""

    def __init__(
        self,
        config: PipelineConfig,
        root: Path,
        codec: Optional[ImageCodec] = None,
        show_progress: bool = True,
    ):
        """
        Initialize the pipeline.

        Args:
            config: Pipeline configuration
            root: Project root; sources and output are resolved against it
            codec: Image codec (default: PillowCodec)
            show_progress: Show a progress bar while processing
        """
        self.config = config
        self.root = root
        self.show_progress = show_progress
        codec = codec or PillowCodec()

        self.output_root = root / config.output_root
        self.processed_root = self.output_root / config.processed_dir
        self.duplicates_root = self.output_root / config.duplicates_dir
        self.manifest_path = self.output_root / config.manifest_file

        self.scanner = ImageScanner(config)
        self.orchestrator = TransformationOrchestrator(config, codec)
        self.hasher = PerceptualHashEngine(codec, config.hash_size)
        self.stager = DuplicateReviewStager(self.duplicates_root, root)
        self.history = VersionHistoryStore(
            self.output_root, config.history_file, config.manifest_file
        )

    def iter_sources(self) -> Iterator[Tuple[Path, Path]]:
        """
        Yield ``(file, source_root)`` for every eligible image.

        Sources are visited in configured order. Missing sources are skipped
        and files inside the output tree are never picked up.
        """
        output_root = self.output_root.resolve()

        for source in self.config.sources:
            source_root = self.root / source
            if not source_root.is_dir():
                logger.warning(f"Source directory not found, skipping: {source_root}")
                continue

            for path in self.scanner.iter_images(source_root):
                if output_root in path.resolve().parents:
                    continue
                yield path, source_root

    def run(self, now: Optional[datetime] = None) -> RunSummary:
        """
        Process all sources and write manifest, history and review folders.

        Args:
            now: Run timestamp used for the version tag (default: current time)

        Returns:
            RunSummary of the run

        Raises:
            FatalSetupError: If the output directories cannot be created
            OSError: If the manifest or history cannot be written
        """
        self._prepare_output()

        version = make_version_tag(now)
        manifest = ManifestBuilder(version, self.config)
        clusterer = DuplicateClusterer(self.config.duplicate_hamming_threshold)

        logger.info(f"Starting run {version} into {self.output_root}")

        files = tqdm(
            self.iter_sources(),
            desc="Processing images",
            unit="file",
            disable=not self.show_progress,
        )
        for path, source_root in files:
            manifest.add(self.process_file(path, source_root, clusterer))

        duplicates = manifest.finalize(clusterer.groups)
        failures = self.stager.stage(clusterer.duplicate_groups())
        if failures:
            logger.warning(f"{failures} duplicate files could not be staged for review")

        manifest_data = manifest.to_dict()
        write_json(self.manifest_path, manifest_data)
        self.history.record(manifest_data)
        self._write_readme()

        logger.info(
            f"Processed {manifest.item_count} items "
            f"({manifest.error_count} errors), {len(duplicates)} duplicate groups"
        )

        return RunSummary(
            version=version,
            items=manifest.item_count,
            errors=manifest.error_count,
            duplicate_groups=len(duplicates),
            output_root=self.output_root,
            manifest_path=self.manifest_path,
        )

    def process_file(
        self, path: Path, source_root: Path, clusterer: DuplicateClusterer
    ) -> FileResult:
        """
        Read, transform, write, fingerprint and cluster one file.

        Codec and I/O failures are returned as FailedFile; they never reach
        the clusterer.

        Args:
            path: Original image path
            source_root: Source directory the file was found in
            clusterer: Duplicate index of the current run

        Returns:
            ProcessedFile or FailedFile
        """
        relative = relative_posix(path, self.root)

        try:
            source = SourceFile.read(path, self.root)
            output_path = self._mirror_dir(source_root) / path.relative_to(source_root)
            artifact = self.orchestrator.transform(source, output_path)
            artifact.path.parent.mkdir(parents=True, exist_ok=True)
            artifact.path.write_bytes(artifact.data)
        except (CodecError, OSError) as e:
            logger.warning(f"Failed to process {relative}: {e}")
            return FailedFile(relative_path=relative, error=str(e))

        fingerprint = self.hasher.fingerprint(artifact.data)
        if fingerprint is None:
            logger.warning(f"No fingerprint for {relative}; excluded from duplicate detection")
        group_id = clusterer.assign(fingerprint, source.relative_path)

        return ProcessedFile(
            source=source,
            artifact=artifact,
            processed_path=relative_posix(artifact.path, self.root),
            fingerprint=fingerprint,
            duplicate_group=group_id,
        )

    def _mirror_dir(self, source_root: Path) -> Path:
        mirrored = relative_posix(source_root, self.root)
        if Path(mirrored).is_absolute() or mirrored == ".":
            mirrored = source_root.resolve().name
        return self.processed_root / mirrored

    def _prepare_output(self) -> None:
        try:
            for directory in (self.output_root, self.processed_root, self.duplicates_root):
                directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise FatalSetupError(f"Cannot create output directories in {self.output_root}: {e}") from e

    def _write_readme(self) -> None:
        config = self.config
        readme = README_TEMPLATE.format(
            processed=config.processed_dir,
            duplicates=config.duplicates_dir,
            manifest=config.manifest_file,
            history=config.history_file,
            max_width=config.max_width,
            max_height=config.max_height,
            jpeg_quality=config.jpeg_quality,
            png_compression_level=config.png_compression_level,
            hash_size=config.hash_size,
            duplicate_hamming_threshold=config.duplicate_hamming_threshold,
        )
        (self.output_root / "readme.txt").write_text(readme, encoding="utf-8")
