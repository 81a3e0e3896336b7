"""Utility functions for configuration, logging, and checksums."""

from image_optimizer.utils.checksum import sha256_hex
from image_optimizer.utils.config import PipelineConfig
from image_optimizer.utils.logger import set_log_level, setup_logger

__all__ = ["PipelineConfig", "set_log_level", "setup_logger", "sha256_hex"]
