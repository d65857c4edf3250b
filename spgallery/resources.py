"""Data directory bootstrap and wiring of the gallery components."""

import logging
from pathlib import Path

from .config import Settings
from .core.derivatives import DerivativeGenerator
from .core.errors import GalleryIOError
from .core.loader import HeifConverter, OriginalLoader
from .core.scanner import ImageScanner
from .storage.catalog import Catalog
from .storage.database import CatalogDatabase

logger = logging.getLogger(__name__)

INDEX_HTML = """<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
<title>Gallery</title>
<style>
  body { font-family: sans-serif; margin: 2em; }
  img.thumbnail { margin: 4px; cursor: pointer; }
  li { cursor: pointer; }
</style>
</head>
<body>
<div id="root"></div>
<script>
const root = document.getElementById('root');

function clear(title) {
  root.innerHTML = '';
  const h1 = document.createElement('h1');
  h1.textContent = title;
  root.appendChild(h1);
}

function link(text, onClick) {
  const a = document.createElement('a');
  a.href = '#';
  a.textContent = text;
  a.onclick = (e) => { e.preventDefault(); onClick(); };
  return a;
}

async function showHome() {
  const resp = await fetch('/api/list_galleries');
  const galleries = await resp.json();
  clear('Home');
  const ul = document.createElement('ul');
  for (const name of galleries) {
    const li = document.createElement('li');
    li.textContent = name;
    li.onclick = () => showGallery(name);
    ul.appendChild(li);
  }
  root.appendChild(ul);
}

async function showGallery(name) {
  const resp = await fetch('/api/gallery_contents', {
    method: 'POST',
    headers: { 'Content-Type': 'application/json' },
    body: JSON.stringify(name)
  });
  const images = await resp.json();
  clear(name);
  root.appendChild(link('Home', showHome));
  root.appendChild(document.createElement('br'));
  for (const image of images) {
    const img = document.createElement('img');
    img.className = 'thumbnail';
    img.src = image.thumbnail_path;
    img.onclick = () => showImage(name, image);
    root.appendChild(img);
  }
}

function showImage(gallery, image) {
  clear(gallery);
  root.appendChild(link('Back', () => showGallery(gallery)));
  const img = document.createElement('img');
  img.src = image.webview_path;
  root.appendChild(document.createElement('br'));
  root.appendChild(img);
}

showHome();
</script>
</body>
</html>
"""


def create_file_unless_exists(path: Path, data: str) -> bool:
    """Write data to path unless the file is already there. Returns True if written."""
    if path.exists():
        return False
    path.write_text(data, encoding="utf-8")
    return True


def init_data_dir(settings: Settings) -> None:
    """Create the data directory layout, an empty catalog and the web front-end.

    Existing files are left untouched, so running this twice is harmless.
    """
    try:
        for directory in (settings.data_dir, settings.www_dir, settings.derivatives_dir, settings.scratch_dir):
            directory.mkdir(parents=True, exist_ok=True)
        if create_file_unless_exists(settings.www_dir / "index.html", INDEX_HTML):
            logger.info("Created %s", settings.www_dir / "index.html")
    except OSError as e:
        raise GalleryIOError(f"Could not initialize data directory ({e})", settings.data_dir) from e

    database = CatalogDatabase(settings.catalog_path)
    if not database.exists():
        database.save([])
        logger.info("Created empty catalog %s", settings.catalog_path)


def build_generator(settings: Settings) -> DerivativeGenerator:
    loader = OriginalLoader(settings.scratch_dir, HeifConverter(settings.converter))
    return DerivativeGenerator(settings.derivatives_dir, loader, jpeg_quality=settings.jpeg_quality)


def build_scanner(settings: Settings) -> ImageScanner:
    return ImageScanner(settings.extensions, exclude=[settings.data_dir])


def open_catalog(settings: Settings) -> tuple[Catalog, CatalogDatabase]:
    """Load the persisted catalog of an initialized data directory."""
    database = CatalogDatabase(settings.catalog_path)
    return Catalog.load(database, build_generator(settings)), database
