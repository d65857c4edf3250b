"""Error types raised by the gallery core."""

from pathlib import Path
from typing import Optional


class GalleryError(Exception):
    """Base class for all gallery errors."""

    def __init__(self, message: str, path: Optional[str | Path] = None):
        self.path = str(path) if path is not None else None
        if self.path:
            message = f"{message}: {self.path}"
        super().__init__(message)


class GalleryIOError(GalleryError):
    """Raised when a file cannot be read or written."""
    pass


class DecodeError(GalleryError):
    """Raised when image bytes are corrupt or in an unsupported format."""
    pass


class ConversionError(GalleryError):
    """Raised when the external converter fails or produces no output."""
    pass


class NotInCatalogError(GalleryError):
    """Raised when a path is not tracked by the catalog."""
    pass


class MetadataError(GalleryError):
    """Raised when embedded metadata cannot be read. Never leaves the loader."""
    pass


class ConfigError(GalleryError):
    """Raised for an invalid configuration file or setting."""
    pass
