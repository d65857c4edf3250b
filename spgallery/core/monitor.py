"""Directory reconciliation: keep the catalog in step with a directory tree."""

import logging
from pathlib import Path
from typing import Optional

from tqdm import tqdm

from .errors import GalleryError, GalleryIOError
from .models import SyncReport
from .scanner import ImageScanner
from ..storage.catalog import Catalog, canonical_path
from ..storage.database import CatalogDatabase

logger = logging.getLogger(__name__)


class CatalogMonitor:
    """Adds new images under a directory and drops entries whose files vanished."""

    def __init__(
        self,
        catalog: Catalog,
        database: CatalogDatabase,
        scanner: Optional[ImageScanner] = None,
        progress: bool = False,
    ):
        """Initialize the monitor.

        Args:
            catalog: Catalog to reconcile
            database: Snapshot storage, written after every change
            scanner: Decides which files are images. Defaults to ImageScanner()
            progress: Show a tqdm progress bar while processing files
        """
        self.catalog = catalog
        self.database = database
        self.scanner = scanner or ImageScanner()
        self.progress = progress

    def _persist(self, report: SyncReport) -> None:
        try:
            self.catalog.save(self.database)
        except GalleryError as e:
            logger.error("%s", e)
            report.errors.append(str(e))

    def sync(self, root: str | Path) -> SyncReport:
        """Reconcile the catalog with the images currently under root.

        Every discovered image is added (or refreshed) and the snapshot is
        saved after each change, so a crash loses at most the file in flight.
        Entries under root whose files were not found are then removed.
        Per-file failures are logged and recorded; they never stop the walk.
        Raises GalleryIOError only when root is not a directory.

        An image that is still on disk but fails to refresh keeps its old
        entry.
        """
        root = Path(root).resolve()
        # A missing root (e.g. an unmounted drive) would otherwise empty the catalog
        if not root.is_dir():
            raise GalleryIOError("Not a directory", root)

        report = SyncReport()
        seen: set[str] = set()

        files = self.scanner.iter_images(root)
        if self.progress:
            files = tqdm(files, desc="Syncing", unit="img")

        for filepath in files:
            report.found += 1
            try:
                original_path = canonical_path(filepath)
                seen.add(original_path)
                outcome = self.catalog.add(original_path)
            except GalleryError as e:
                logger.warning("Could not process %s: %s", filepath, e)
                report.errors.append(str(e))
                continue

            getattr(report, outcome).append(original_path)
            if outcome != "unchanged":
                self._persist(report)

        for entry in self.catalog.entries_under(root):
            if entry.original_path in seen:
                continue
            try:
                self.catalog.remove(entry.original_path)
            except GalleryError as e:
                logger.warning("Could not remove %s: %s", entry.original_path, e)
                report.errors.append(str(e))
            report.removed.append(entry.original_path)
            self._persist(report)

        return report
