"""Core business logic - hashing, decoding, derivatives and reconciliation."""

from .models import CatalogEntry, EntryView, SyncReport
from .scanner import ImageScanner

__all__ = ["CatalogEntry", "EntryView", "SyncReport", "ImageScanner"]
