"""Thumbnail and web preview generation."""

import logging
import os
from contextlib import suppress
from pathlib import Path
from typing import Optional

from PIL import Image

from .errors import GalleryIOError
from .loader import OriginalLoader

logger = logging.getLogger(__name__)

THUMBNAIL_SIZE = (200, 150)
WEBVIEW_MAX_DIMENSION = 1024
JPEG_QUALITY = 90


def thumbnail_crop_box(width: int, height: int) -> Optional[tuple[int, int, int, int]]:
    """Compute the region of a width x height image to keep for a 4:3 thumbnail.

    Returns None when the image is already 4:3. Otherwise one edge is trimmed
    (the top-left corner stays fixed) by the smaller positive candidate of

        delta_w = w - 4h/3    (image too wide)
        delta_h = h - 3w/4    (image too tall)

    using floor division, preferring to trim the width on a tie. A negative
    candidate does not apply. Returns None if trimming would leave nothing.
    """
    if 3 * width == 4 * height:
        return None

    delta_w = max(0, width - 4 * height // 3)
    delta_h = max(0, height - 3 * width // 4)

    if delta_w > 0 and (delta_h == 0 or delta_w <= delta_h):
        box = (0, 0, width - delta_w, height)
    elif delta_h > 0:
        box = (0, 0, width, height - delta_h)
    else:
        return None

    if box[2] <= 0 or box[3] <= 0:
        return None
    return box


def generate_thumbnail(img: Image.Image) -> Image.Image:
    """Crop to 4:3 and downscale to exactly THUMBNAIL_SIZE."""
    box = thumbnail_crop_box(*img.size)
    if box is not None:
        img = img.crop(box)
    return img.resize(THUMBNAIL_SIZE, Image.Resampling.BOX)


def generate_webview(img: Image.Image, max_dimension: int = WEBVIEW_MAX_DIMENSION) -> Image.Image:
    """Scale so neither side exceeds max_dimension, keeping the aspect ratio.

    Only downscales; never upscales images.
    """
    width, height = img.size
    if width <= max_dimension and height <= max_dimension:
        return img.copy()

    scale = min(max_dimension / width, max_dimension / height)
    new_width = max(1, round(width * scale))
    new_height = max(1, round(height * scale))
    return img.resize((new_width, new_height), Image.Resampling.LANCZOS)


class DerivativeGenerator:
    """Writes the thumbnail and web preview JPEGs of an original image."""

    def __init__(
        self,
        output_dir: str | Path,
        loader: OriginalLoader,
        jpeg_quality: int = JPEG_QUALITY,
    ):
        self.output_dir = Path(output_dir)
        self.loader = loader
        self.jpeg_quality = jpeg_quality

    def path_for(self, name: str) -> Path:
        return self.output_dir / name

    def _write_jpeg(self, img: Image.Image, name: str) -> Path:
        target = self.path_for(name)
        tmp = target.with_name(f".{target.name}.tmp")
        if img.mode != "RGB":
            img = img.convert("RGB")
        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
            img.save(tmp, format="JPEG", quality=self.jpeg_quality)
            os.replace(tmp, target)
        except OSError as e:
            with suppress(OSError):
                tmp.unlink(missing_ok=True)
            raise GalleryIOError(f"Could not write derivative ({e})", target) from e
        return target

    def generate(
        self,
        original_path: str | Path,
        content_hash: int,
        thumbnail_name: str,
        webview_name: str,
    ) -> None:
        """Decode an original and write both derivatives.

        If the web preview cannot be written, a thumbnail created by this
        call is removed again so no half-finished pair is left behind.
        """
        img = self.loader.load(original_path, content_hash)

        thumbnail_existed = self.path_for(thumbnail_name).exists()
        self._write_jpeg(generate_thumbnail(img), thumbnail_name)
        try:
            self._write_jpeg(generate_webview(img), webview_name)
        except GalleryIOError:
            if not thumbnail_existed:
                with suppress(OSError):
                    self.path_for(thumbnail_name).unlink(missing_ok=True)
            raise
        logger.debug("Wrote derivatives for %s", original_path)

    def delete(self, *names: str) -> None:
        """Delete derivative files; missing files are ignored."""
        for name in names:
            target = self.path_for(name)
            try:
                target.unlink(missing_ok=True)
            except OSError as e:
                raise GalleryIOError(f"Could not delete derivative ({e.strerror})", target) from e
