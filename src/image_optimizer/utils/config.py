"""Configuration management for image-optimizer."""

import json
from dataclasses import asdict, dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from image_optimizer.errors import ConfigError
from image_optimizer.utils.logger import setup_logger

logger = setup_logger(__name__)

INT_FIELDS = (
    "max_width",
    "max_height",
    "jpeg_quality",
    "png_compression_level",
    "hash_size",
    "duplicate_hamming_threshold",
)
STR_FIELDS = ("output_root", "processed_dir", "duplicates_dir", "manifest_file", "history_file")


@dataclass(frozen=True)
class PipelineConfig:
    """
    Immutable settings for one pipeline run.

    A single instance is built up front (defaults, then an optional JSON file,
    then command-line overrides) and handed to every component.
    """

    # Source directories to process, relative to the project root
    sources: Tuple[str, ...] = ("images",)
    output_root: str = "data_dump"
    processed_dir: str = "processed"
    duplicates_dir: str = "duplicates"
    manifest_file: str = "manifest.json"
    history_file: str = "history.json"
    max_width: int = 2048
    max_height: int = 2048
    jpeg_quality: int = 80
    png_compression_level: int = 9
    hash_size: int = 8  # 8x8 aHash
    duplicate_hamming_threshold: int = 5  # <=5 bits difference is a likely duplicate
    include_extensions: Tuple[str, ...] = (".jpg", ".jpeg", ".png", ".gif", ".webp")

    @classmethod
    def from_file(cls, config_file: Optional[Path]) -> "PipelineConfig":
        """
        Load configuration from a JSON file, falling back to defaults.

        Args:
            config_file: Path to a JSON object with PipelineConfig keys

        Returns:
            Validated configuration
        """
        if config_file is None:
            return cls()

        if not config_file.exists():
            logger.info(f"No config file found at {config_file}. Using defaults.")
            return cls()

        try:
            with open(config_file, "r", encoding="utf-8") as f:
                settings = json.load(f)
        except json.JSONDecodeError as e:
            logger.warning(f"Invalid config file: {e}. Using defaults.")
            return cls()

        if not isinstance(settings, dict):
            logger.warning(f"Config file {config_file} is not a JSON object. Using defaults.")
            return cls()

        logger.debug(f"Loaded configuration from {config_file}")
        return cls().with_overrides(**settings)

    def with_overrides(self, **overrides: Any) -> "PipelineConfig":
        """
        Return a copy with the given settings replaced.

        ``None`` values are skipped so unset command-line options keep the
        current value. Unknown keys are ignored with a warning.
        """
        known = {f.name for f in fields(self)}
        changes: Dict[str, Any] = {}
        for key, value in overrides.items():
            if key not in known:
                logger.warning(f"Ignoring unknown config key: {key}")
                continue
            if value is None:
                continue
            if key in ("sources", "include_extensions"):
                if isinstance(value, str):
                    value = [value]
                if not isinstance(value, (list, tuple)) or not all(
                    isinstance(item, str) for item in value
                ):
                    raise ConfigError(f"{key} must be a list of strings, got {value!r}")
            if key == "sources":
                value = tuple(value)
            elif key == "include_extensions":
                value = tuple(ext.lower() for ext in value)
            changes[key] = value

        config = replace(self, **changes)
        config.validate()
        return config

    def validate(self) -> None:
        """
        Check that every value is within range.

        Raises:
            ConfigError: If a setting is invalid
        """
        for name in INT_FIELDS:
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ConfigError(f"{name} must be an integer, got {value!r}")
        for name in STR_FIELDS:
            if not isinstance(getattr(self, name), str):
                raise ConfigError(f"{name} must be a string, got {getattr(self, name)!r}")

        if self.max_width <= 0 or self.max_height <= 0:
            raise ConfigError("max_width and max_height must be positive")
        if not 1 <= self.jpeg_quality <= 100:
            raise ConfigError(f"jpeg_quality must be 1-100, got {self.jpeg_quality}")
        if not 0 <= self.png_compression_level <= 9:
            raise ConfigError(
                f"png_compression_level must be 0-9, got {self.png_compression_level}"
            )
        if self.hash_size < 2 or self.hash_size % 2:
            raise ConfigError(f"hash_size must be an even number >= 2, got {self.hash_size}")
        if self.duplicate_hamming_threshold < 0:
            raise ConfigError("duplicate_hamming_threshold must not be negative")
        if not self.include_extensions:
            raise ConfigError("include_extensions must not be empty")

    def manifest_snapshot(self) -> Dict[str, int]:
        """Settings echoed into manifest.json under ``config``."""
        return {
            "maxWidth": self.max_width,
            "maxHeight": self.max_height,
            "jpegQuality": self.jpeg_quality,
            "pngCompressionLevel": self.png_compression_level,
            "duplicateHammingThreshold": self.duplicate_hamming_threshold,
        }

    def to_dict(self) -> Dict[str, Any]:
        """All settings as a JSON-serializable dictionary."""
        settings = asdict(self)
        settings["sources"] = list(self.sources)
        settings["include_extensions"] = list(self.include_extensions)
        return settings
