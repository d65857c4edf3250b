"""Creation and refresh of catalog entries.

An entry is only returned once both of its derivatives are on disk, so a
caller that inserts the returned entry never references a missing file.
"""

import dataclasses
import logging
from pathlib import Path
from typing import Optional

from .derivatives import DerivativeGenerator
from .models import CatalogEntry, thumbnail_name_for, webview_name_for
from .scanner import ImageScanner

logger = logging.getLogger(__name__)


def describe_path(original_path: str | Path) -> tuple[str, str]:
    """Return (collection, title) for an original path."""
    path = Path(original_path)
    return path.parent.name, path.stem


def create_entry(original_path: str, generator: DerivativeGenerator) -> CatalogEntry:
    """Hash an original, write its derivatives and build its entry.

    Any failure propagates and nothing is returned.
    """
    content_hash = ImageScanner.compute_hash(original_path)
    collection, title = describe_path(original_path)
    entry = CatalogEntry(
        original_path=original_path,
        content_hash=content_hash,
        collection=collection,
        title=title,
        thumbnail_name=thumbnail_name_for(content_hash),
        webview_name=webview_name_for(content_hash),
    )
    generator.generate(original_path, content_hash, entry.thumbnail_name, entry.webview_name)
    return entry


def refresh_entry(entry: CatalogEntry, generator: DerivativeGenerator) -> Optional[CatalogEntry]:
    """Regenerate derivatives if the original's bytes changed.

    Returns the replacement entry, or None when the content hash is unchanged
    (no derivative is touched in that case). On failure the given entry is
    left as it was.
    """
    content_hash = ImageScanner.compute_hash(entry.original_path)
    if content_hash == entry.content_hash:
        return None

    updated = dataclasses.replace(
        entry,
        content_hash=content_hash,
        thumbnail_name=thumbnail_name_for(content_hash),
        webview_name=webview_name_for(content_hash),
    )
    generator.generate(entry.original_path, content_hash, updated.thumbnail_name, updated.webview_name)
    logger.info("%s updated", entry.original_path)
    return updated
