"""File scanner for discovering source images in directories."""

import os
from pathlib import Path
from typing import Iterator, List

from image_optimizer.utils.config import PipelineConfig
from image_optimizer.utils.logger import setup_logger

logger = setup_logger(__name__)


class ImageScanner:
    """Lists eligible image files in a deterministic order."""

    def __init__(self, config: PipelineConfig):
        """
        Initialize the image scanner.

        Args:
            config: Configuration instance (supplies eligible extensions)
        """
        self.config = config
        self.extensions = {ext.lower() for ext in config.include_extensions}

    def iter_images(
        self, directory: Path, recursive: bool = True, skip_hidden: bool = True
    ) -> Iterator[Path]:
        """
        Lazily yield image files below a directory.

        Directory and file names are visited in sorted order so repeated
        scans of an unchanged tree yield the same sequence. Each call starts
        a fresh walk.

        Args:
            directory: Directory path to scan
            recursive: Recursively scan subdirectories
            skip_hidden: Skip hidden files and folders

        Yields:
            Image file paths
        """
        if recursive:
            for root, dirs, filenames in os.walk(directory):
                root_path = Path(root)

                if skip_hidden:
                    dirs[:] = [d for d in dirs if not d.startswith(".")]

                # Skip symlinks to avoid loops
                dirs[:] = sorted(d for d in dirs if not (root_path / d).is_symlink())

                for filename in sorted(filenames):
                    file_path = root_path / filename
                    if self._is_candidate(file_path, skip_hidden):
                        yield file_path
        else:
            for item in sorted(directory.iterdir()):
                if item.is_file() and self._is_candidate(item, skip_hidden):
                    yield item

    def scan_directory(
        self, directory: Path, recursive: bool = True, skip_hidden: bool = True
    ) -> List[Path]:
        """
        Scan a directory for image files.

        Args:
            directory: Directory path to scan
            recursive: Recursively scan subdirectories
            skip_hidden: Skip hidden files and folders

        Returns:
            List of image file paths

        Raises:
            FileNotFoundError: If directory doesn't exist
            ValueError: If the path is not a directory
        """
        if not directory.exists():
            raise FileNotFoundError(f"Directory not found: {directory}")

        if not directory.is_dir():
            raise ValueError(f"Not a directory: {directory}")

        logger.info(f"Scanning directory: {directory}")
        images = list(self.iter_images(directory, recursive, skip_hidden))
        logger.info(f"Found {len(images)} image files")
        return images

    def _is_candidate(self, file_path: Path, skip_hidden: bool) -> bool:
        if skip_hidden and file_path.name.startswith("."):
            return False
        if file_path.is_symlink():
            return False
        return self._is_image_file(file_path)

    def _is_image_file(self, file_path: Path) -> bool:
        """
        Check if a file has an eligible image extension.

        Args:
            file_path: File path to check

        Returns:
            True if file is a supported image
        """
        return file_path.suffix.lower() in self.extensions
