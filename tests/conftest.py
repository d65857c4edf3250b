from __future__ import annotations

import shutil
from pathlib import Path

import pytest
from PIL import Image

from spgallery.config import Settings
from spgallery.core.derivatives import DerivativeGenerator
from spgallery.core.loader import Converter, OriginalLoader
from spgallery.resources import init_data_dir
from spgallery.storage.catalog import Catalog
from spgallery.storage.database import CatalogDatabase


def make_jpeg(
    path: Path,
    size: tuple[int, int] = (400, 300),
    color: tuple[int, int, int] = (200, 30, 30),
    orientation: int | None = None,
) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    img = Image.new("RGB", size, color)
    if orientation is None:
        img.save(path, format="JPEG")
    else:
        exif = Image.Exif()
        exif[0x0112] = orientation
        img.save(path, format="JPEG", exif=exif)
    return path


class CopyConverter(Converter):
    """Pretends to convert by copying a prepared JPEG to the destination."""

    def __init__(self, jpeg: Path):
        self.jpeg = jpeg
        self.calls: list[tuple[Path, Path]] = []

    def convert(self, source, destination):
        self.calls.append((source, destination))
        shutil.copyfile(self.jpeg, destination)
        return destination


class SilentConverter(Converter):
    """Reports success without writing anything."""

    def convert(self, source, destination):
        return destination


class CountingGenerator(DerivativeGenerator):
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.generated: list[str] = []

    def generate(self, original_path, content_hash, thumbnail_name, webview_name):
        super().generate(original_path, content_hash, thumbnail_name, webview_name)
        self.generated.append(str(original_path))


@pytest.fixture
def settings(tmp_path) -> Settings:
    settings = Settings(data_dir=tmp_path / "data")
    init_data_dir(settings)
    return settings


@pytest.fixture
def photos(tmp_path) -> Path:
    root = tmp_path / "photos"
    root.mkdir()
    return root


@pytest.fixture
def generator(settings, tmp_path) -> CountingGenerator:
    heic_source = make_jpeg(tmp_path / "heic-source.jpg", size=(320, 240))
    loader = OriginalLoader(settings.scratch_dir, CopyConverter(heic_source))
    return CountingGenerator(settings.derivatives_dir, loader)


@pytest.fixture
def database(settings) -> CatalogDatabase:
    return CatalogDatabase(settings.catalog_path)


@pytest.fixture
def catalog(generator) -> Catalog:
    return Catalog(generator)
