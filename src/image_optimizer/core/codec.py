"""Image codec capability used by the pipeline, with a Pillow implementation."""

import io
from typing import Any, Dict, List, Protocol

from PIL import Image, UnidentifiedImageError

from image_optimizer.core.models import ImageMetadata, TargetFormat
from image_optimizer.errors import CodecError, UnsupportedFormat
from image_optimizer.utils.logger import setup_logger

logger = setup_logger(__name__)

ALPHA_MODES = {"RGBA", "LA", "PA", "RGBa", "La"}
PNG_MODES = ("1", "L", "LA", "P", "RGB", "RGBA", "I", "I;16")


class ImageCodec(Protocol):
    """
    Pixel-level operations the pipeline depends on.

    Every method takes encoded image bytes. Implementations raise
    ``UnsupportedFormat`` when the bytes cannot be decoded and ``CodecError``
    for any other decode, resize, encode, or sampling failure.
    """

    def read_metadata(self, data: bytes) -> ImageMetadata:
        ...

    def resize_to_bounds(self, data: bytes, max_width: int, max_height: int) -> bytes:
        ...

    def encode(self, data: bytes, target_format: TargetFormat, params: Dict[str, Any]) -> bytes:
        ...

    def sample_grayscale_grid(self, data: bytes, size: int) -> List[List[int]]:
        ...


class PillowCodec:
    """ImageCodec backed by Pillow."""

    def __init__(self, resample: int = Image.Resampling.LANCZOS):
        """
        Initialize the codec.

        Args:
            resample: Pillow resampling filter for resizing and hash sampling
        """
        self.resample = resample

    def _open(self, data: bytes) -> Image.Image:
        try:
            img = Image.open(io.BytesIO(data))
        except UnidentifiedImageError as e:
            raise UnsupportedFormat(f"Cannot identify image data: {e}") from e
        except (OSError, ValueError) as e:
            raise CodecError(f"Cannot open image data: {e}") from e
        return img

    def _load(self, data: bytes) -> Image.Image:
        img = self._open(data)
        try:
            img.load()
        except (OSError, ValueError, SyntaxError) as e:
            raise CodecError(f"Cannot decode image ({img.format}): {e}") from e
        return img

    def read_metadata(self, data: bytes) -> ImageMetadata:
        """
        Read dimensions and transparency from the image header.

        Args:
            data: Encoded image bytes

        Returns:
            ImageMetadata for the first frame

        Raises:
            UnsupportedFormat: If the bytes are not a recognized image
        """
        with self._open(data) as img:
            has_alpha = img.mode in ALPHA_MODES or "transparency" in img.info
            return ImageMetadata(width=img.width, height=img.height, has_alpha=has_alpha)

    def resize_to_bounds(self, data: bytes, max_width: int, max_height: int) -> bytes:
        """
        Shrink an image to fit inside ``max_width`` x ``max_height``.

        Aspect ratio is preserved and images are never enlarged. Resized
        output is lossless PNG; images already in bounds are returned as-is.
        """
        img = self._load(data)
        if img.width <= max_width and img.height <= max_height:
            return data

        try:
            # CMYK, LAB and YCbCr cannot be written as PNG
            if img.mode not in PNG_MODES:
                has_alpha = img.mode in ALPHA_MODES or "transparency" in img.info
                img = img.convert("RGBA" if has_alpha else "RGB")
            img.thumbnail((max_width, max_height), self.resample)
            buffer = io.BytesIO()
            img.save(buffer, format="PNG", compress_level=1)
        except (OSError, ValueError) as e:
            raise CodecError(f"Cannot resize image: {e}") from e

        logger.debug(f"Resized image to {img.width}x{img.height}")
        return buffer.getvalue()

    def encode(self, data: bytes, target_format: TargetFormat, params: Dict[str, Any]) -> bytes:
        """
        Re-encode an image as JPEG or PNG.

        Args:
            data: Encoded image bytes
            target_format: TargetFormat.JPEG or TargetFormat.PNG
            params: ``quality`` for JPEG, ``compress_level`` for PNG

        Returns:
            Encoded bytes

        Raises:
            CodecError: If encoding fails or the format is not encodable
        """
        img = self._load(data)
        buffer = io.BytesIO()

        try:
            if target_format is TargetFormat.JPEG:
                if img.mode not in ("RGB", "L"):
                    img = img.convert("RGB")
                img.save(
                    buffer,
                    format="JPEG",
                    quality=params.get("quality", 80),
                    optimize=True,
                    progressive=True,
                )
            elif target_format is TargetFormat.PNG:
                if img.mode not in PNG_MODES:
                    img = img.convert("RGBA")
                img.save(buffer, format="PNG", compress_level=params.get("compress_level", 9))
            else:
                raise CodecError(f"Cannot encode to {target_format.value}")
        except (OSError, ValueError) as e:
            raise CodecError(f"Cannot encode image as {target_format.value}: {e}") from e

        return buffer.getvalue()

    def sample_grayscale_grid(self, data: bytes, size: int) -> List[List[int]]:
        """
        Downsample an image to a ``size`` x ``size`` grayscale grid.

        Returns:
            Rows of intensity values in 0..255
        """
        img = self._load(data)
        try:
            small = img.convert("L").resize((size, size), self.resample)
        except (OSError, ValueError) as e:
            raise CodecError(f"Cannot sample image: {e}") from e

        pixels = list(small.tobytes())
        return [pixels[row * size:(row + 1) * size] for row in range(size)]
