"""Data types shared by the pipeline components."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional, Union

from image_optimizer.utils.checksum import sha256_hex


class TargetFormat(Enum):
    """Encoding chosen for a processed image."""

    JPEG = "jpeg"
    PNG = "png"
    GIF_PASSTHROUGH = "gif"

    @property
    def suffix(self) -> Optional[str]:
        """File suffix of the encoded output, or None to keep the original one."""
        return {"jpeg": ".jpg", "png": ".png"}.get(self.value)


@dataclass(frozen=True)
class ImageMetadata:
    """Decoded image header information."""

    width: int
    height: int
    has_alpha: bool = False


@dataclass(frozen=True)
class SourceFile:
    """An original image as read from disk. Never modified."""

    path: Path
    relative_path: str  # POSIX path relative to the project root
    data: bytes = field(repr=False)
    checksum: str

    @classmethod
    def read(cls, path: Path, root: Path) -> "SourceFile":
        """
        Read an original file and checksum its bytes.

        Args:
            path: Absolute path of the original
            root: Project root used for manifest-relative paths

        Raises:
            OSError: If the file cannot be read
        """
        data = path.read_bytes()
        return cls(
            path=path,
            relative_path=relative_posix(path, root),
            data=data,
            checksum=sha256_hex(data),
        )

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def extension(self) -> str:
        return self.path.suffix.lower()


@dataclass(frozen=True)
class ProcessedArtifact:
    """Output of the transformation step for one source file."""

    path: Path
    data: bytes = field(repr=False)
    format: TargetFormat
    resized: bool
    operations: List[str]

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def checksum(self) -> str:
        return sha256_hex(self.data)


@dataclass(frozen=True)
class ProcessedFile:
    """Successful per-file result."""

    source: SourceFile
    artifact: ProcessedArtifact
    processed_path: str  # POSIX path relative to the project root
    fingerprint: Optional[str]
    duplicate_group: Optional[str]


@dataclass(frozen=True)
class FailedFile:
    """Per-file failure. Never clustered."""

    relative_path: str
    error: str


FileResult = Union[ProcessedFile, FailedFile]


def relative_posix(path: Path, root: Path) -> str:
    """Path relative to ``root`` with forward slashes, or the absolute path if outside it."""
    try:
        return path.resolve().relative_to(root.resolve()).as_posix()
    except ValueError:
        return path.as_posix()
