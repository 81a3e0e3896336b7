"""Exception hierarchy for the image optimization pipeline."""


class PipelineError(Exception):
    """Base class for errors raised by image-optimizer."""


class ConfigError(PipelineError):
    """Raised when configuration values are out of range."""


class CodecError(PipelineError):
    """Raised when an image cannot be decoded, encoded, or sampled."""


class UnsupportedFormat(CodecError):
    """Raised when image bytes are not in a format the codec can decode."""


class FatalSetupError(PipelineError):
    """Raised when the output tree cannot be created; aborts the whole run."""
