"""SHA-256 checksums for original and processed image bytes."""

import hashlib


def sha256_hex(data: bytes) -> str:
    """Return the lower-case hex SHA-256 digest of ``data``."""
    return hashlib.sha256(data).hexdigest()
