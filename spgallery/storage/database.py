"""SQLite snapshot storage for the catalog.

The whole catalog is written on every save: rows go into a fresh database
file next to the target, which then replaces the target in one rename. A
reader therefore sees either the previous snapshot or the new one.

There is no locking; concurrent writers against the same file can lose
updates and must be serialized by the caller.
"""

import os
import sqlite3
from contextlib import closing, suppress
from pathlib import Path
from typing import Iterable, Optional

from ..core.errors import GalleryIOError
from ..core.models import CatalogEntry

SCHEMA_VERSION = 1

COLUMNS = (
    "original_path",
    "content_hash",
    "collection",
    "title",
    "thumbnail_name",
    "webview_name",
)


class CatalogDatabase:
    """Loads and saves complete catalog snapshots."""

    def __init__(self, db_path: str | Path):
        self.db_path = Path(db_path)

    def exists(self) -> bool:
        return self.db_path.is_file()

    def version(self) -> Optional[tuple[int, int, int]]:
        """Modification stamp of the snapshot file, or None if it is absent."""
        try:
            stat = self.db_path.stat()
        except FileNotFoundError:
            return None
        return (stat.st_ino, stat.st_mtime_ns, stat.st_size)

    def _create_schema(self, conn: sqlite3.Connection) -> None:
        conn.execute("""
            CREATE TABLE entries (
                position INTEGER PRIMARY KEY,
                original_path TEXT NOT NULL UNIQUE,
                content_hash TEXT NOT NULL,
                collection TEXT NOT NULL,
                title TEXT NOT NULL,
                thumbnail_name TEXT NOT NULL,
                webview_name TEXT NOT NULL
            )
        """)
        conn.execute(f"PRAGMA user_version = {SCHEMA_VERSION}")

    def save(self, entries: Iterable[CatalogEntry]) -> None:
        """Replace the snapshot with the given entries, keeping their order."""
        tmp = self.db_path.with_name(self.db_path.name + ".tmp")
        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            tmp.unlink(missing_ok=True)
            with closing(sqlite3.connect(tmp)) as conn:
                with conn:
                    self._create_schema(conn)
                    conn.executemany(
                        f"INSERT INTO entries (position, {', '.join(COLUMNS)}) "
                        f"VALUES (?, {', '.join('?' for _ in COLUMNS)})",
                        (
                            (position, *(entry.to_dict()[column] for column in COLUMNS))
                            for position, entry in enumerate(entries)
                        ),
                    )
            os.replace(tmp, self.db_path)
        except (OSError, sqlite3.Error) as e:
            with suppress(OSError):
                tmp.unlink(missing_ok=True)
            raise GalleryIOError(f"Could not save catalog ({e})", self.db_path) from e

    def load(self) -> list[CatalogEntry]:
        """Read the snapshot in insertion order."""
        if not self.exists():
            raise GalleryIOError("Catalog not found (run 'spg init')", self.db_path)
        try:
            with closing(sqlite3.connect(self.db_path.resolve().as_uri() + "?mode=ro", uri=True)) as conn:
                conn.row_factory = sqlite3.Row
                rows = conn.execute(
                    f"SELECT {', '.join(COLUMNS)} FROM entries ORDER BY position"
                ).fetchall()
        except sqlite3.Error as e:
            raise GalleryIOError(f"Could not load catalog ({e})", self.db_path) from e
        return [CatalogEntry.from_dict(dict(row)) for row in rows]
