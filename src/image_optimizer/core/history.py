"""Version history of pipeline runs and manifest snapshots."""

import json
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from image_optimizer.utils.logger import setup_logger

logger = setup_logger(__name__)

VERSIONS_DIR = "versions"


def make_version_tag(now: Optional[datetime] = None) -> str:
    """
    Build a run version tag with one-second resolution.

    Two runs started within the same second get the same tag.

    Args:
        now: Timestamp to use (default: current local time)

    Returns:
        Tag like ``20240131-235959``
    """
    return (now or datetime.now()).strftime("%Y%m%d-%H%M%S")


def write_json(path: Path, data: Any) -> None:
    """Write ``data`` as indented JSON, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)


class VersionHistoryStore:
    """Append-only run history plus per-version manifest snapshots."""

    def __init__(
        self,
        output_root: Path,
        history_file: str = "history.json",
        manifest_file: str = "manifest.json",
    ):
        """
        Initialize the store.

        Args:
            output_root: Directory holding history.json and versions/
            history_file: History file name
            manifest_file: Manifest file name used for snapshots
        """
        self.output_root = output_root
        self.history_path = output_root / history_file
        self.manifest_file = manifest_file

    def snapshot_path(self, version: str) -> Path:
        return self.output_root / VERSIONS_DIR / version / self.manifest_file

    def load(self) -> List[Dict[str, Any]]:
        """
        Read the run history.

        Returns:
            History entries, or an empty list if the file is missing or unreadable
        """
        if not self.history_path.exists():
            return []

        try:
            with open(self.history_path, "r", encoding="utf-8") as f:
                history = json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.warning(f"Unreadable history file {self.history_path}: {e}. Starting fresh.")
            return []

        if not isinstance(history, list):
            logger.warning(f"History file {self.history_path} is not a list. Starting fresh.")
            return []

        return history

    def record(self, manifest: Dict[str, Any]) -> Dict[str, Any]:
        """
        Append a history entry for a run and snapshot its manifest.

        Args:
            manifest: Manifest dictionary with version, items and duplicates

        Returns:
            The appended history entry
        """
        version = manifest["version"]
        entry = {
            "version": version,
            "manifest": self.manifest_file,
            "items": len(manifest["items"]),
            "duplicates": len(manifest["duplicates"]),
        }

        history = self.load()
        history.append(entry)
        write_json(self.history_path, history)

        snapshot = self.snapshot_path(version)
        if snapshot.exists():
            logger.warning(f"Version {version} already has a snapshot; overwriting")
        write_json(snapshot, manifest)

        logger.debug(f"Recorded version {version} in {self.history_path}")
        return entry
