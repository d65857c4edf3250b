"""Storage layers - in-memory catalog and SQLite snapshots."""

from .catalog import Catalog
from .database import CatalogDatabase

__all__ = ["Catalog", "CatalogDatabase"]
