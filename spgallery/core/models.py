"""Data models for catalog entries."""

from dataclasses import dataclass, field


def hash_hex(content_hash: int) -> str:
    """Lowercase hexadecimal form of a content hash, without padding."""
    return f"{content_hash:x}"


def thumbnail_name_for(content_hash: int) -> str:
    return f"{hash_hex(content_hash)}-thumbnail.jpg"


def webview_name_for(content_hash: int) -> str:
    return f"{hash_hex(content_hash)}-webview.jpg"


@dataclass(frozen=True)
class CatalogEntry:
    """One tracked original image and the names of its derivatives."""

    original_path: str  # absolute, canonical
    content_hash: int  # 128-bit MD5 identity
    collection: str  # name of the parent directory
    title: str  # file name without extension
    thumbnail_name: str
    webview_name: str

    @property
    def hash_hex(self) -> str:
        return hash_hex(self.content_hash)

    def derivative_names(self) -> tuple[str, str]:
        return (self.thumbnail_name, self.webview_name)

    def to_dict(self) -> dict:
        return {
            "original_path": self.original_path,
            "content_hash": self.hash_hex,
            "collection": self.collection,
            "title": self.title,
            "thumbnail_name": self.thumbnail_name,
            "webview_name": self.webview_name,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "CatalogEntry":
        return cls(
            original_path=data["original_path"],
            content_hash=int(data["content_hash"], 16),
            collection=data["collection"],
            title=data["title"],
            thumbnail_name=data["thumbnail_name"],
            webview_name=data["webview_name"],
        )


@dataclass(frozen=True)
class EntryView:
    """What the web front-end needs to show one image of a collection."""

    thumbnail_path: str
    webview_path: str
    original_path: str


@dataclass
class SyncReport:
    """Report of changes made while reconciling a directory."""

    found: int = 0
    added: list[str] = field(default_factory=list)  # original paths
    updated: list[str] = field(default_factory=list)
    unchanged: list[str] = field(default_factory=list)
    removed: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    def __str__(self) -> str:
        lines = [f"Images found: {self.found}"]
        if self.added:
            lines.append(f"Added: {len(self.added)}")
        if self.updated:
            lines.append(f"Updated: {len(self.updated)}")
        if self.unchanged:
            lines.append(f"Unchanged: {len(self.unchanged)}")
        if self.removed:
            lines.append(f"Removed: {len(self.removed)}")
        if self.errors:
            lines.append(f"Errors: {len(self.errors)}")
        return "\n".join(lines)
