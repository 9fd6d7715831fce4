from __future__ import annotations

from pathlib import Path
from typing import Optional


class LblPipeError(Exception):
    """Base class for all lblpipe errors."""


# ---------- configuration (raised before any work starts) ----------

class ConfigError(LblPipeError, ValueError):
    pass


class MalformedRule(ConfigError):
    """A label mapping rule is not of the form old=new."""


class UnsupportedFilter(ConfigError):
    pass


class UnsupportedEncoding(ConfigError):
    pass


class InvalidSplit(ConfigError):
    pass


# ---------- per-image failures inside the ImagePipeline ----------

class ImageProcessingError(LblPipeError, RuntimeError):
    """Failure while processing the image at `path`."""

    def __init__(self, message: str, path: Optional[Path] = None) -> None:
        super().__init__(message)
        self.path = path


class ImageDecodeError(ImageProcessingError):
    pass


class ImageEncodeError(ImageProcessingError):
    pass


class ImageIOError(ImageProcessingError):
    pass


class UnsupportedImageType(ImageProcessingError):
    pass
