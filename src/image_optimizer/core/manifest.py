"""Per-run manifest of processing outcomes and duplicate groups."""

from typing import Any, Dict, Iterable, List

from image_optimizer.core.clusterer import DuplicateGroup
from image_optimizer.core.models import FailedFile, FileResult, ProcessedFile
from image_optimizer.utils.config import PipelineConfig


class ManifestBuilder:
    """Collects one record per file in processing order."""

    def __init__(self, version: str, config: PipelineConfig):
        """
        Initialize the builder.

        Args:
            version: Version tag of this run
            config: Configuration echoed into the manifest
        """
        self.version = version
        self.config = config
        self.items: List[Dict[str, Any]] = []
        self.duplicates: List[Dict[str, Any]] = []
        self.error_count = 0

    @property
    def item_count(self) -> int:
        return len(self.items)

    def add(self, result: FileResult) -> Dict[str, Any]:
        """
        Append the record for one file.

        Args:
            result: ProcessedFile or FailedFile

        Returns:
            The manifest record that was appended
        """
        if isinstance(result, FailedFile):
            record = {"original": result.relative_path, "error": result.error}
            self.error_count += 1
        elif isinstance(result, ProcessedFile):
            record = self._success_record(result)
        else:
            raise TypeError(f"Unexpected result type: {type(result).__name__}")

        self.items.append(record)
        return record

    def _success_record(self, result: ProcessedFile) -> Dict[str, Any]:
        source = result.source
        artifact = result.artifact
        return {
            "original": source.relative_path,
            "processed": result.processed_path,
            "operations": list(artifact.operations),
            "format": artifact.format.value,
            "resized": artifact.resized,
            "originalSize": source.size,
            "processedSize": artifact.size,
            "originalChecksum": source.checksum,
            "processedChecksum": artifact.checksum,
            "duplicateGroup": result.duplicate_group,
            "version": self.version,
        }

    def finalize(self, groups: Iterable[DuplicateGroup]) -> List[Dict[str, Any]]:
        """
        Publish groups with at least two members.

        Args:
            groups: All groups from the clusterer, singletons included

        Returns:
            The public duplicate list
        """
        self.duplicates = [group.to_dict() for group in groups if group.is_duplicate]
        return self.duplicates

    def to_dict(self) -> Dict[str, Any]:
        """The manifest in manifest.json layout."""
        return {
            "version": self.version,
            "config": self.config.manifest_snapshot(),
            "items": list(self.items),
            "duplicates": list(self.duplicates),
        }
