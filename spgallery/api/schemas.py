"""Pydantic schemas for API responses."""
from pydantic import BaseModel


class EntryViewResponse(BaseModel):
    """One image of a gallery, as shown by the web front-end."""
    thumbnail_path: str
    webview_path: str
    original_path: str


class HealthResponse(BaseModel):
    status: str = "ok"
    entries: int
