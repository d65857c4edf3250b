"""In-memory catalog of tracked images."""

import logging
from pathlib import Path
from typing import Iterator, Optional

from ..core.derivatives import DerivativeGenerator
from ..core.entries import create_entry, refresh_entry
from ..core.errors import GalleryIOError, NotInCatalogError
from ..core.models import CatalogEntry, EntryView
from ..core.scanner import ImageScanner
from .database import CatalogDatabase

logger = logging.getLogger(__name__)

DERIVATIVES_URL_PREFIX = "derivatives"


def canonical_path(path: str | Path) -> str:
    """Absolute path with symlinks resolved; the file must exist."""
    try:
        return str(Path(path).resolve(strict=True))
    except OSError as e:
        raise GalleryIOError(f"Could not resolve path ({e.strerror})", path) from e


class Catalog:
    """Ordered set of entries keyed by original path.

    The catalog never persists itself. Callers save it with
    ``catalog.save(database)`` after every mutation they want to keep.
    """

    def __init__(self, generator: DerivativeGenerator, entries: Optional[list[CatalogEntry]] = None):
        self.generator = generator
        self._entries: list[CatalogEntry] = []
        self._index: dict[str, int] = {}
        for entry in entries or []:
            if entry.original_path in self._index:
                raise ValueError(f"Duplicate catalog entry: {entry.original_path}")
            self._index[entry.original_path] = len(self._entries)
            self._entries.append(entry)

    @classmethod
    def load(cls, database: CatalogDatabase, generator: DerivativeGenerator) -> "Catalog":
        return cls(generator, database.load())

    def save(self, database: CatalogDatabase) -> None:
        database.save(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[CatalogEntry]:
        return iter(list(self._entries))

    def __contains__(self, original_path: str) -> bool:
        return original_path in self._index

    @property
    def entries(self) -> list[CatalogEntry]:
        return list(self._entries)

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def add(self, path: str | Path) -> str:
        """Track a file, or refresh it if it is already tracked.

        Returns 'added', 'updated' or 'unchanged'. On any error the catalog
        is left exactly as it was.
        """
        original_path = canonical_path(path)
        position = self._index.get(original_path)

        if position is None:
            entry = create_entry(original_path, self.generator)
            self._index[original_path] = len(self._entries)
            self._entries.append(entry)
            logger.info("%s added", original_path)
            return "added"

        previous = self._entries[position]
        updated = refresh_entry(previous, self.generator)
        if updated is None:
            return "unchanged"
        self._entries[position] = updated
        try:
            self._discard_derivatives(previous)
        except GalleryIOError as e:
            logger.warning("Stale derivatives left behind: %s", e)
        return "updated"

    def remove(self, path: str | Path) -> CatalogEntry:
        """Stop tracking a path and delete its derivatives.

        The path does not need to exist on disk any more. The entry stays
        removed even if deleting a derivative file fails; that failure is
        raised afterwards.
        """
        original_path = self._lookup_key(path)
        position = self._index.get(original_path)
        if position is None:
            raise NotInCatalogError("File is not in the catalog", path)

        entry = self._entries.pop(position)
        self._reindex()
        logger.info("%s removed", original_path)
        self._discard_derivatives(entry)
        return entry

    def _reindex(self) -> None:
        self._index = {entry.original_path: i for i, entry in enumerate(self._entries)}

    def _discard_derivatives(self, entry: CatalogEntry) -> None:
        # Identical copies elsewhere share derivative names
        in_use = {name for other in self._entries for name in other.derivative_names()}
        stale = [name for name in entry.derivative_names() if name not in in_use]
        self.generator.delete(*stale)

    @staticmethod
    def _lookup_key(path: str | Path) -> str:
        # Non-strict, so paths already deleted from disk still match
        return str(Path(path).resolve())

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def find_by_path(self, path: str | Path) -> Optional[CatalogEntry]:
        position = self._index.get(self._lookup_key(path))
        return None if position is None else self._entries[position]

    def find_by_hash(self, content_hash: int) -> Optional[CatalogEntry]:
        for entry in self._entries:
            if entry.content_hash == content_hash:
                return entry
        return None

    def list_collections(self) -> list[str]:
        """Distinct collection names, sorted."""
        return sorted({entry.collection for entry in self._entries})

    def contents_of(self, collection: str) -> list[EntryView]:
        """Entries of one collection, in insertion order."""
        return [
            EntryView(
                thumbnail_path=f"{DERIVATIVES_URL_PREFIX}/{entry.thumbnail_name}",
                webview_path=f"{DERIVATIVES_URL_PREFIX}/{entry.webview_name}",
                original_path=entry.original_path,
            )
            for entry in self._entries
            if entry.collection == collection
        ]

    def entries_under(self, root: str | Path) -> list[CatalogEntry]:
        """Entries whose original lies inside the directory root."""
        root = Path(root).resolve()
        return [entry for entry in self._entries if Path(entry.original_path).is_relative_to(root)]

    def stat(self, path: str | Path) -> str:
        """Compare a file on disk with the catalog.

        Returns 'missing' if the path is not tracked, 'modified' if its bytes
        no longer match the stored hash and 'current' otherwise.
        """
        entry = self.find_by_path(path)
        if entry is None:
            return "missing"
        if ImageScanner.compute_hash(entry.original_path) != entry.content_hash:
            return "modified"
        return "current"
