from __future__ import annotations

import errno
import hashlib
import logging
import os

import pytest

from spgallery.core.errors import GalleryIOError
from spgallery.core.scanner import ImageScanner

from conftest import make_jpeg


def test_compute_hash_places_digest_byte_i_at_bits_8i(tmp_path):
    path = tmp_path / "a.bin"
    path.write_bytes(b"hello gallery")
    digest = hashlib.md5(b"hello gallery").digest()

    value = ImageScanner.compute_hash(path)

    assert value == int.from_bytes(digest, "little")
    for i, byte in enumerate(digest):
        assert (value >> (8 * i)) & 0xFF == byte


def test_compute_hash_depends_only_on_bytes(tmp_path):
    a = tmp_path / "a.jpg"
    b = tmp_path / "sub" / "b.jpg"
    a.write_bytes(b"same bytes")
    b.parent.mkdir()
    b.write_bytes(b"same bytes")
    c = tmp_path / "c.jpg"
    c.write_bytes(b"other bytes")

    assert ImageScanner.compute_hash(a) == ImageScanner.compute_hash(b)
    assert ImageScanner.compute_hash(a) != ImageScanner.compute_hash(c)


def test_compute_hash_missing_file(tmp_path):
    with pytest.raises(GalleryIOError) as exc:
        ImageScanner.compute_hash(tmp_path / "missing.jpg")
    assert exc.value.path.endswith("missing.jpg")


@pytest.mark.parametrize(
    "name, expected",
    [
        ("IMG_0001.jpg", True),
        ("IMG_0001.JPG", True),
        ("photo.jpeg", True),
        ("photo.JPEG", True),
        ("IMG_0002.HEIC", True),
        ("IMG_0002.heic", True),
        ("notes.txt", False),
        ("picture.png", False),
        ("no_extension", False),
        ("._IMG_0001.JPG", False),
        (".hidden.jpg", False),
    ],
)
def test_is_image(name, expected):
    assert ImageScanner().is_image(name) is expected


def test_custom_extensions_are_case_insensitive():
    scanner = ImageScanner([".PNG"])
    assert scanner.is_image("a.png")
    assert not scanner.is_image("a.jpg")


def test_iter_images_is_sorted_and_filtered(tmp_path):
    make_jpeg(tmp_path / "b" / "2.jpg")
    make_jpeg(tmp_path / "b" / "1.jpg")
    make_jpeg(tmp_path / "a" / "3.JPG")
    make_jpeg(tmp_path / "a" / "._3.JPG")
    (tmp_path / "a" / "readme.txt").write_text("not an image")
    (tmp_path / "c.jpg").mkdir()

    found = list(ImageScanner().iter_images(tmp_path))

    assert [p.relative_to(tmp_path).as_posix() for p in found] == ["a/3.JPG", "b/1.jpg", "b/2.jpg"]


def test_iter_images_skips_excluded_directories(tmp_path):
    make_jpeg(tmp_path / "album" / "1.jpg")
    make_jpeg(tmp_path / ".spg" / "www" / "derivatives" / "abc-thumbnail.jpg")

    found = list(ImageScanner(exclude=[tmp_path / ".spg"]).iter_images(tmp_path))

    assert [p.name for p in found] == ["1.jpg"]


def test_iter_images_skips_unreadable_directories(tmp_path, monkeypatch, caplog):
    make_jpeg(tmp_path / "a" / "1.jpg")
    make_jpeg(tmp_path / "b" / "2.jpg")
    make_jpeg(tmp_path / "c" / "3.jpg")
    real_scandir = os.scandir

    def scandir(path="."):
        if os.path.basename(os.fspath(path)) == "b":
            raise PermissionError(errno.EACCES, "Permission denied", os.fspath(path))
        return real_scandir(path)

    monkeypatch.setattr(os, "scandir", scandir)
    with caplog.at_level(logging.WARNING):
        found = list(ImageScanner().iter_images(tmp_path))

    assert [p.relative_to(tmp_path).as_posix() for p in found] == ["a/1.jpg", "c/3.jpg"]
    assert "Skipping unreadable directory" in caplog.text
    assert str(tmp_path / "b") in caplog.text
