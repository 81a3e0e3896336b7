"""Core functionality for image normalization and duplicate detection."""

from image_optimizer.core.classifier import classify_format
from image_optimizer.core.clusterer import DuplicateClusterer, DuplicateGroup, hamming_distance
from image_optimizer.core.codec import ImageCodec, PillowCodec
from image_optimizer.core.fingerprint import PerceptualHashEngine
from image_optimizer.core.history import VersionHistoryStore
from image_optimizer.core.manifest import ManifestBuilder
from image_optimizer.core.models import TargetFormat
from image_optimizer.core.pipeline import ImagePipeline, RunSummary
from image_optimizer.core.scanner import ImageScanner
from image_optimizer.core.transform import TransformationOrchestrator

__all__ = [
    "DuplicateClusterer",
    "DuplicateGroup",
    "ImageCodec",
    "ImagePipeline",
    "ImageScanner",
    "ManifestBuilder",
    "PerceptualHashEngine",
    "PillowCodec",
    "RunSummary",
    "TargetFormat",
    "TransformationOrchestrator",
    "VersionHistoryStore",
    "classify_format",
    "hamming_distance",
]
