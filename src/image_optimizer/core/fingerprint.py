"""Average-hash (aHash) perceptual fingerprints."""

from typing import Optional

from image_optimizer.core.codec import ImageCodec
from image_optimizer.errors import CodecError
from image_optimizer.utils.logger import setup_logger

logger = setup_logger(__name__)


class PerceptualHashEngine:
    """Computes aHash fingerprints of processed image bytes."""

    def __init__(self, codec: ImageCodec, hash_size: int = 8):
        """
        Initialize the hash engine.

        Args:
            codec: Codec used to sample the grayscale grid
            hash_size: Grid edge length; the fingerprint has hash_size**2 bits
        """
        if (hash_size * hash_size) % 4:
            raise ValueError(f"hash_size**2 must be a multiple of 4, got {hash_size}")
        self.codec = codec
        self.hash_size = hash_size

    @property
    def fingerprint_length(self) -> int:
        """Number of hex digits in every fingerprint."""
        return self.hash_size * self.hash_size // 4

    def fingerprint(self, data: bytes) -> Optional[str]:
        """
        Fingerprint an image.

        Each grid sample at or above the grid mean becomes a 1 bit, row-major,
        packed four bits per hex digit with the most significant bit first.

        Args:
            data: Encoded image bytes (the processed artifact)

        Returns:
            Hex string of length hash_size**2 / 4, or None if the codec
            cannot sample the image
        """
        try:
            grid = self.codec.sample_grayscale_grid(data, self.hash_size)
        except CodecError as e:
            logger.debug(f"Cannot fingerprint image: {e}")
            return None

        return average_hash(grid)


def average_hash(grid) -> str:
    """Pack a grayscale grid into an aHash hex string."""
    samples = [value for row in grid for value in row]
    mean = sum(samples) / len(samples)
    bits = [1 if value >= mean else 0 for value in samples]

    digits = []
    for i in range(0, len(bits), 4):
        nibble = (bits[i] << 3) | (bits[i + 1] << 2) | (bits[i + 2] << 1) | bits[i + 3]
        digits.append(format(nibble, "x"))
    return "".join(digits)
