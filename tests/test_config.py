from __future__ import annotations

import pytest

from spgallery.config import load_settings
from spgallery.core.errors import ConfigError


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    monkeypatch.delenv("SPG_DATA_DIR", raising=False)
    monkeypatch.delenv("SPG_CONVERTER", raising=False)


def test_defaults(tmp_path):
    settings = load_settings(tmp_path)

    assert settings.data_dir == tmp_path.resolve()
    assert settings.catalog_path == tmp_path.resolve() / "catalog.db"
    assert settings.derivatives_dir == tmp_path.resolve() / "www" / "derivatives"
    assert settings.scratch_dir == tmp_path.resolve() / "converted"
    assert settings.converter == "/usr/bin/heif-convert"
    assert settings.extensions == {".jpg", ".jpeg", ".heic"}
    assert settings.jpeg_quality == 90


def test_data_dir_from_environment(tmp_path, monkeypatch):
    monkeypatch.setenv("SPG_DATA_DIR", str(tmp_path / "gallery"))
    assert load_settings().data_dir == (tmp_path / "gallery").resolve()


def test_yaml_overrides(tmp_path):
    (tmp_path / "config.yaml").write_text(
        "converter: /opt/bin/heif-convert\n"
        "extensions: [JPG, .Heic, png]\n"
        "jpeg_quality: 80\n"
    )

    settings = load_settings(tmp_path)

    assert settings.converter == "/opt/bin/heif-convert"
    assert settings.extensions == {".jpg", ".heic", ".png"}
    assert settings.jpeg_quality == 80


def test_environment_beats_yaml_for_converter(tmp_path, monkeypatch):
    (tmp_path / "config.yaml").write_text("converter: /opt/bin/heif-convert\n")
    monkeypatch.setenv("SPG_CONVERTER", "/usr/local/bin/heif-convert")

    assert load_settings(tmp_path).converter == "/usr/local/bin/heif-convert"


def test_empty_yaml_is_allowed(tmp_path):
    (tmp_path / "config.yaml").write_text("")
    assert load_settings(tmp_path).jpeg_quality == 90


@pytest.mark.parametrize(
    "content",
    [
        "- just\n- a list\n",
        "colour: blue\n",
        "extensions: []\n",
        "extensions: .jpg\n",
        "jpeg_quality: 200\n",
        "converter: 12\n",
        "key: [unclosed\n",
    ],
)
def test_invalid_yaml(tmp_path, content):
    (tmp_path / "config.yaml").write_text(content)
    with pytest.raises(ConfigError):
        load_settings(tmp_path)
