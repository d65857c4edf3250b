"""Read-only HTTP API and static file server for the gallery."""
import logging
import threading
from dataclasses import asdict
from pathlib import Path
from typing import Optional

import uvicorn
from fastapi import Body, FastAPI, HTTPException
from fastapi.responses import FileResponse
from fastapi.staticfiles import StaticFiles

from ..config import Settings
from ..resources import build_generator
from ..storage.catalog import Catalog
from ..storage.database import CatalogDatabase
from .schemas import EntryViewResponse, HealthResponse

logger = logging.getLogger(__name__)


class LiveCatalog:
    """Catalog snapshot that is reloaded whenever the file on disk changes.

    The snapshot file is replaced atomically by writers, so a change of its
    stamp (inode, mtime, size) signals a new version. Readers get a Catalog
    value and never modify it.
    """

    def __init__(self, settings: Settings):
        self.database = CatalogDatabase(settings.catalog_path)
        self.generator = build_generator(settings)
        self._lock = threading.Lock()
        self._version: Optional[tuple[int, int, int]] = None
        self._catalog: Optional[Catalog] = None

    def get(self) -> Catalog:
        with self._lock:
            version = self.database.version()
            if self._catalog is None or version != self._version:
                self._catalog = Catalog.load(self.database, self.generator)
                self._version = version
                logger.info("Loaded catalog with %d entries", len(self._catalog))
            return self._catalog


def create_app(settings: Settings) -> FastAPI:
    live = LiveCatalog(settings)

    app = FastAPI(title="Simple Photo Gallery", version="0.1.0")

    # -----------------------------------------------------------------------
    # Routes
    # -----------------------------------------------------------------------

    @app.get("/health", response_model=HealthResponse)
    def health():
        return HealthResponse(entries=len(live.get()))

    @app.get("/api/list_galleries", response_model=list[str])
    def list_galleries():
        return live.get().list_collections()

    @app.post("/api/gallery_contents", response_model=list[EntryViewResponse])
    def gallery_contents(gallery: str = Body(...)):
        return [EntryViewResponse(**asdict(view)) for view in live.get().contents_of(gallery)]

    @app.get("/api/original/{content_hash}")
    def original(content_hash: str):
        # Only files tracked by the catalog are served
        try:
            value = int(content_hash, 16)
        except ValueError:
            raise HTTPException(404, detail="Not found")
        entry = live.get().find_by_hash(value)
        if entry is None or not Path(entry.original_path).is_file():
            raise HTTPException(404, detail="Not found")
        return FileResponse(entry.original_path, filename=Path(entry.original_path).name)

    app.mount("/", StaticFiles(directory=settings.www_dir, html=True, check_dir=False), name="www")
    return app


def run_server(settings: Settings, host: str = "127.0.0.1", port: int = 8000) -> None:
    uvicorn.run(create_app(settings), host=host, port=port)
