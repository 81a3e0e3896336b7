"""
Image Optimizer - Normalize, fingerprint, and deduplicate image collections.

Walks image folders, re-encodes each image into a compressed target format,
groups near-duplicates by perceptual hash, and records every transformation
in a checksummed, versioned manifest. Originals are never modified.
"""

__version__ = "0.1.0"
__author__ = "Image Optimizer Contributors"

from image_optimizer.core.pipeline import ImagePipeline
from image_optimizer.utils.config import PipelineConfig

__all__ = ["ImagePipeline", "PipelineConfig", "__version__"]
