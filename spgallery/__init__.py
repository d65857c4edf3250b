"""Simple Photo Gallery - thumbnails and web previews for a directory of photos.

Package structure:
    spgallery/
    ├── cli.py              # Command-line interface
    ├── config.py           # Settings (data directory, config.yaml, environment)
    ├── resources.py        # Data directory bootstrap and component wiring
    ├── core/               # Core business logic
    │   ├── errors.py       # Error types
    │   ├── models.py       # Data models (CatalogEntry, EntryView, SyncReport)
    │   ├── scanner.py      # Image discovery and content hashing
    │   ├── loader.py       # Decoding, HEIC conversion, EXIF orientation
    │   ├── derivatives.py  # Thumbnail and web preview generation
    │   ├── entries.py      # Entry creation and refresh
    │   └── monitor.py      # Directory reconciliation
    ├── storage/            # Data persistence
    │   ├── catalog.py      # In-memory catalog and queries
    │   └── database.py     # SQLite snapshot storage
    └── api/                # Read-only web API
        ├── schemas.py      # Response models
        └── server.py       # FastAPI app
"""

from .config import Settings, load_settings
from .core.errors import (
    ConfigError,
    ConversionError,
    DecodeError,
    GalleryError,
    GalleryIOError,
    MetadataError,
    NotInCatalogError,
)
from .core.models import CatalogEntry, EntryView, SyncReport
from .core.scanner import ImageScanner
from .core.loader import Converter, HeifConverter, OriginalLoader, read_orientation
from .core.derivatives import DerivativeGenerator, thumbnail_crop_box
from .core.monitor import CatalogMonitor
from .storage.catalog import Catalog
from .storage.database import CatalogDatabase

__all__ = [
    # Config
    "Settings",
    "load_settings",
    # Errors
    "GalleryError",
    "GalleryIOError",
    "DecodeError",
    "ConversionError",
    "NotInCatalogError",
    "MetadataError",
    "ConfigError",
    # Core
    "CatalogEntry",
    "EntryView",
    "SyncReport",
    "ImageScanner",
    "Converter",
    "HeifConverter",
    "OriginalLoader",
    "read_orientation",
    "DerivativeGenerator",
    "thumbnail_crop_box",
    "CatalogMonitor",
    # Storage
    "Catalog",
    "CatalogDatabase",
]
