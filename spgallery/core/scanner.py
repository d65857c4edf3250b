"""Image discovery and content hashing."""

import hashlib
import logging
import os
from pathlib import Path
from typing import Iterable, Iterator, Optional

from .errors import GalleryIOError

logger = logging.getLogger(__name__)


class ImageScanner:
    """Recognizes image files, walks directories and hashes file contents."""

    IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".heic"}

    def __init__(
        self,
        extensions: Optional[Iterable[str]] = None,
        exclude: Optional[Iterable[str | Path]] = None,
    ):
        """Initialize the scanner.

        Args:
            extensions: Recognized extensions (with leading dot, any case).
                Defaults to IMAGE_EXTENSIONS.
            exclude: Directories that are never descended into, such as the
                gallery's own data directory.
        """
        if extensions is None:
            extensions = self.IMAGE_EXTENSIONS
        self.extensions = {ext.lower() for ext in extensions}
        self.exclude = {Path(p).resolve() for p in exclude or ()}

    @staticmethod
    def compute_hash(filepath: str | Path) -> int:
        """Compute the 128-bit content identity of a file.

        The 16 MD5 digest bytes are assembled little-endian: byte i of the
        digest occupies bits 8i..8i+8 of the result.
        """
        md5 = hashlib.md5()
        try:
            with open(filepath, "rb") as f:
                for chunk in iter(lambda: f.read(1024 * 1024), b""):
                    md5.update(chunk)
        except OSError as e:
            raise GalleryIOError(f"Could not read file ({e.strerror})", filepath) from e
        return int.from_bytes(md5.digest(), "little")

    def is_image(self, filepath: str | Path) -> bool:
        """Check if a file is a recognized, non-hidden image."""
        path = Path(filepath)
        # Hidden files include AppleDouble sidecars such as ._IMG_0001.JPG
        if path.name.startswith("."):
            return False
        return path.suffix.lower() in self.extensions

    def iter_images(self, root: str | Path) -> Iterator[Path]:
        """Lazily yield recognized images under root in a stable order.

        Directories and files are visited in sorted order so that repeated
        walks over the same tree agree. Unreadable directories are logged and
        skipped.
        """
        def on_error(err: OSError) -> None:
            logger.warning("Skipping unreadable directory %s: %s", err.filename, err.strerror)

        for dirpath, dirnames, filenames in os.walk(root, onerror=on_error):
            current = Path(dirpath)
            dirnames[:] = sorted(
                d for d in dirnames if (current / d).resolve() not in self.exclude
            )
            for name in sorted(filenames):
                filepath = current / name
                if self.is_image(filepath) and filepath.is_file():
                    yield filepath
