"""Greedy grouping of near-duplicate fingerprints."""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from image_optimizer.utils.logger import setup_logger

logger = setup_logger(__name__)

# Set bits in each value 0x0-0xf
NIBBLE_BITS = [0, 1, 1, 2, 1, 2, 2, 3, 1, 2, 2, 3, 2, 3, 3, 4]


def hamming_distance(a: str, b: str) -> int:
    """
    Count differing bits between two hex fingerprints.

    Args:
        a: Hex fingerprint
        b: Hex fingerprint of the same length

    Returns:
        Number of differing bits

    Raises:
        ValueError: If the fingerprints differ in length
    """
    if len(a) != len(b):
        raise ValueError(f"Fingerprint lengths differ: {len(a)} != {len(b)}")
    return sum(NIBBLE_BITS[int(x, 16) ^ int(y, 16)] for x, y in zip(a, b))


@dataclass
class DuplicateGroup:
    """Files whose fingerprints are within threshold of the representative."""

    id: str
    representative: str  # fingerprint of the first member
    files: List[str] = field(default_factory=list)

    @property
    def is_duplicate(self) -> bool:
        return len(self.files) > 1

    def to_dict(self) -> dict:
        return {"id": self.id, "files": list(self.files)}


class DuplicateClusterer:
    """
    Assigns fingerprints to groups in the order files are processed.

    The first existing group whose representative is within the threshold
    wins, not the closest one, so group ids and membership depend on
    processing order. Each assignment scans every group.
    """

    def __init__(self, threshold: int = 5):
        """
        Initialize the clusterer.

        Args:
            threshold: Maximum Hamming distance for joining a group
        """
        self.threshold = threshold
        self._groups: List[DuplicateGroup] = []

    @property
    def groups(self) -> Sequence[DuplicateGroup]:
        """All groups, singletons included, in creation order."""
        return tuple(self._groups)

    def assign(self, fingerprint: Optional[str], path: str) -> Optional[str]:
        """
        Add a file to the first matching group or start a new one.

        Args:
            fingerprint: Hex fingerprint, or None if the image could not be hashed
            path: Relative path of the original file

        Returns:
            Group id, or None when there is no fingerprint
        """
        if fingerprint is None:
            return None

        for group in self._groups:
            if hamming_distance(group.representative, fingerprint) <= self.threshold:
                group.files.append(path)
                logger.debug(f"{path} joined {group.id}")
                return group.id

        group = DuplicateGroup(
            id=f"dup-{len(self._groups) + 1}",
            representative=fingerprint,
            files=[path],
        )
        self._groups.append(group)
        return group.id

    def duplicate_groups(self) -> List[DuplicateGroup]:
        """Groups with two or more members, in creation order."""
        return [group for group in self._groups if group.is_duplicate]
