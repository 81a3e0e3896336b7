"""Copies suspected duplicates into per-group folders for manual review."""

import shutil
from pathlib import Path
from typing import Iterable, List, Set

from image_optimizer.core.clusterer import DuplicateGroup
from image_optimizer.utils.logger import setup_logger

logger = setup_logger(__name__)


class DuplicateReviewStager:
    """
    Stages copies of duplicate originals under ``duplicates/<group id>/``.

    Originals are only read; nothing is moved or deleted.
    """

    def __init__(self, duplicates_root: Path, root: Path):
        """
        Initialize the stager.

        Args:
            duplicates_root: Directory receiving one folder per group
            root: Project root that group member paths are relative to
        """
        self.duplicates_root = duplicates_root
        self.root = root

    def stage(self, groups: Iterable[DuplicateGroup]) -> int:
        """
        Copy the members of each duplicate group.

        Args:
            groups: Groups to stage; singletons are skipped

        Returns:
            Number of files that could not be copied
        """
        failures = 0

        for group in groups:
            if not group.is_duplicate:
                continue

            group_dir = self.duplicates_root / group.id
            group_dir.mkdir(parents=True, exist_ok=True)

            staged: List[Path] = []
            used: Set[str] = set()
            for relative in group.files:
                source = self.root / relative
                target = group_dir / self._free_name(Path(relative).name, used)
                try:
                    shutil.copy2(source, target)
                    staged.append(target)
                except OSError as e:
                    logger.warning(f"Failed to stage {relative} for review: {e}")
                    failures += 1

            logger.debug(f"Staged {len(staged)}/{len(group.files)} files in {group_dir}")

        return failures

    @staticmethod
    def _free_name(name: str, used: Set[str]) -> str:
        # Members of one group may share a basename; earlier runs are overwritten
        candidate = name
        counter = 1
        while candidate in used:
            candidate = f"{Path(name).stem}_{counter}{Path(name).suffix}"
            counter += 1
        used.add(candidate)
        return candidate
