"""Decoding of original images.

Pillow decodes JPEG directly but does not apply the EXIF orientation tag, so
the rotation is read separately and applied after decoding. HEIC files are
first converted to JPEG by an external program.
"""

import logging
import subprocess
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from PIL import Image, UnidentifiedImageError

from .errors import ConversionError, DecodeError, GalleryIOError, MetadataError

logger = logging.getLogger(__name__)

# Extensions Pillow cannot decode without help
CONVERT_EXTENSIONS = {".heic"}

DEFAULT_CONVERTER = "/usr/bin/heif-convert"

EXIF_ORIENTATION_TAG = 0x0112
IDENTITY_ORIENTATION = 1

# EXIF orientation code -> transpose that shows the image upright.
# Code 6 means the camera was rotated 90 degrees clockwise and code 8 the
# opposite; Pillow's ROTATE_* constants are counter-clockwise.
ORIENTATION_TRANSPOSE = {
    3: Image.Transpose.ROTATE_180,
    6: Image.Transpose.ROTATE_270,
    8: Image.Transpose.ROTATE_90,
}


def _exif_orientation(filepath: str | Path) -> int:
    try:
        with Image.open(filepath) as img:
            exif = img.getexif()
    except (OSError, UnidentifiedImageError, Image.DecompressionBombError, SyntaxError, ValueError) as e:
        raise MetadataError(f"Could not read EXIF data ({e})", filepath) from e
    value = exif.get(EXIF_ORIENTATION_TAG)
    if value is None:
        return IDENTITY_ORIENTATION
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise MetadataError(f"Malformed orientation tag {value!r}", filepath) from e


def read_orientation(filepath: str | Path) -> int:
    """Return the EXIF orientation code of an image, or 1 when unknown.

    Missing, corrupt or unreadable metadata never fails the caller.
    """
    try:
        return _exif_orientation(filepath)
    except MetadataError as e:
        logger.debug("Ignoring metadata: %s", e)
        return IDENTITY_ORIENTATION


def apply_orientation(img: Image.Image, orientation: int, source: str | Path = "") -> Image.Image:
    """Rotate a decoded image according to an EXIF orientation code."""
    if orientation == IDENTITY_ORIENTATION:
        return img
    method = ORIENTATION_TRANSPOSE.get(orientation)
    if method is None:
        logger.warning("Unknown EXIF orientation for %s (value is %s)", source, orientation)
        return img
    return img.transpose(method)


class Converter(ABC):
    """Converts a file Pillow cannot decode into a JPEG at a given path."""

    @abstractmethod
    def convert(self, source: Path, destination: Path) -> Path:
        """Write a JPEG rendition of source to destination, raising ConversionError on failure."""


class HeifConverter(Converter):
    """Runs an external HEIC-to-JPEG program: ``<executable> <input> <output>``."""

    def __init__(self, executable: str = DEFAULT_CONVERTER):
        self.executable = executable

    def convert(self, source: Path, destination: Path) -> Path:
        try:
            result = subprocess.run(
                [self.executable, str(source), str(destination)],
                stdin=subprocess.DEVNULL,
                capture_output=True,
            )
        except OSError as e:
            raise ConversionError(f"Could not run {self.executable} ({e})", source) from e
        if result.returncode != 0:
            raise ConversionError(
                f"{self.executable} exited with status {result.returncode}: "
                f"{result.stdout.decode(errors='replace')} {result.stderr.decode(errors='replace')}".rstrip(),
                source,
            )
        return destination


class OriginalLoader:
    """Produces an upright, decoded image from an original file."""

    def __init__(self, scratch_dir: str | Path, converter: Optional[Converter] = None):
        """Initialize the loader.

        Args:
            scratch_dir: Directory receiving converter output
            converter: Converter for CONVERT_EXTENSIONS files. Defaults to
                HeifConverter with the standard executable.
        """
        self.scratch_dir = Path(scratch_dir)
        self.converter = converter or HeifConverter()

    def converted_path(self, content_hash: int) -> Path:
        return self.scratch_dir / f"{content_hash:x}-converted.jpg"

    def needs_conversion(self, filepath: str | Path) -> bool:
        return Path(filepath).suffix.lower() in CONVERT_EXTENSIONS

    def convert(self, filepath: Path, content_hash: int) -> Path:
        """Convert filepath to a JPEG in the scratch directory.

        Any output left behind by an earlier run is removed first, because
        the converter is known to exit with status zero without writing
        anything; only a fresh output file counts as success.
        """
        output = self.converted_path(content_hash)
        try:
            self.scratch_dir.mkdir(parents=True, exist_ok=True)
            output.unlink(missing_ok=True)
        except OSError as e:
            raise GalleryIOError(f"Could not prepare conversion output ({e.strerror})", output) from e

        self.converter.convert(filepath, output)
        if not output.exists():
            raise ConversionError("Converter reported success but wrote no output", filepath)
        return output

    def load(self, filepath: str | Path, content_hash: int) -> Image.Image:
        """Decode filepath, converting it first if needed, and fix its orientation.

        Converter output is deleted once decoded, whether or not decoding
        succeeded.

        Raises:
            GalleryIOError: the file cannot be read
            ConversionError: external conversion failed
            DecodeError: the bytes are not a decodable image
        """
        filepath = Path(filepath)
        if not self.needs_conversion(filepath):
            return self._decode(filepath)

        converted = self.convert(filepath, content_hash)
        try:
            return self._decode(converted)
        finally:
            self._discard(converted)

    def _decode(self, filepath: Path) -> Image.Image:
        try:
            with Image.open(filepath) as img:
                img.load()
                decoded = img.copy() if img.mode in ("RGB", "L") else img.convert("RGB")
        except FileNotFoundError as e:
            raise GalleryIOError("File not found", filepath) from e
        except UnidentifiedImageError as e:
            raise DecodeError("Not a recognized image", filepath) from e
        except Image.DecompressionBombError as e:
            raise DecodeError(f"Image too large to decode ({e})", filepath) from e
        except (OSError, SyntaxError, ValueError) as e:
            if isinstance(e, OSError) and e.errno is not None:
                raise GalleryIOError(f"Could not read file ({e.strerror})", filepath) from e
            raise DecodeError(f"Could not decode image ({e})", filepath) from e

        return apply_orientation(decoded, read_orientation(filepath), filepath)

    @staticmethod
    def _discard(converted: Path) -> None:
        try:
            converted.unlink(missing_ok=True)
        except OSError as e:
            logger.warning("Could not remove conversion output %s: %s", converted, e.strerror)
