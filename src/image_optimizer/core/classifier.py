"""Target encoding heuristic: photos become JPEG, graphics stay PNG."""

from typing import Optional

from image_optimizer.core.models import ImageMetadata, TargetFormat

# GIFs (animated or not) are copied as-is
PASSTHROUGH_EXTENSIONS = {".gif"}

# PNGs below this size are assumed to be graphics rather than photos
SMALL_PNG_BYTES = 256 * 1024


def classify_format(
    extension: str,
    metadata: Optional[ImageMetadata],
    size_bytes: int,
) -> TargetFormat:
    """
    Decide the target encoding for a source image.

    Rules are checked in order and the first match wins:
    GIF passthrough, alpha channel to PNG, small PNG to PNG, everything else
    (photos, WebP, large PNGs, unknown extensions) to JPEG.

    Args:
        extension: Source file suffix including the dot
        metadata: Decoded header, or None when the file was not decoded
        size_bytes: Size of the original file

    Returns:
        The TargetFormat to produce
    """
    ext = extension.lower()

    if ext in PASSTHROUGH_EXTENSIONS:
        return TargetFormat.GIF_PASSTHROUGH
    if metadata is not None and metadata.has_alpha:
        return TargetFormat.PNG
    if ext == ".png" and size_bytes < SMALL_PNG_BYTES:
        return TargetFormat.PNG
    return TargetFormat.JPEG
