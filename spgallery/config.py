"""Gallery settings.

The data directory holds everything the gallery writes:

    <data_dir>/
    ├── catalog.db          # catalog snapshot
    ├── config.yaml         # optional settings
    ├── converted/          # external converter output
    └── www/                # static web root
        ├── index.html
        └── derivatives/    # thumbnails and web previews

Environment variables:
    SPG_DATA_DIR: Data directory (default: ~/.spg)
    SPG_CONVERTER: HEIC converter executable (default: /usr/bin/heif-convert)
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml

from .core.derivatives import JPEG_QUALITY
from .core.errors import ConfigError
from .core.loader import DEFAULT_CONVERTER
from .core.scanner import ImageScanner

DEFAULT_DATA_DIR = "~/.spg"
CONFIG_FILENAME = "config.yaml"
CONFIG_KEYS = {"converter", "extensions", "jpeg_quality"}


@dataclass
class Settings:
    """Locations and tunables shared by every gallery component."""

    data_dir: Path
    converter: str = DEFAULT_CONVERTER
    extensions: frozenset[str] = field(default_factory=lambda: frozenset(ImageScanner.IMAGE_EXTENSIONS))
    jpeg_quality: int = JPEG_QUALITY

    @property
    def catalog_path(self) -> Path:
        return self.data_dir / "catalog.db"

    @property
    def www_dir(self) -> Path:
        return self.data_dir / "www"

    @property
    def derivatives_dir(self) -> Path:
        return self.www_dir / "derivatives"

    @property
    def scratch_dir(self) -> Path:
        return self.data_dir / "converted"

    @property
    def config_path(self) -> Path:
        return self.data_dir / CONFIG_FILENAME


def _normalize_extension(ext) -> str:
    if not isinstance(ext, str) or not ext.strip("."):
        raise ConfigError(f"Invalid extension {ext!r}")
    return "." + ext.strip().lstrip(".").lower()


def load_config(config_path: str | Path) -> dict:
    """Load and validate a YAML settings file. A missing file means no overrides."""
    path = Path(config_path)
    if not path.exists():
        return {}

    try:
        with open(path) as f:
            config = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Could not read config file ({e})", path) from e

    if config is None:
        return {}
    if not isinstance(config, dict):
        raise ConfigError("Config file must contain a mapping", path)

    unknown = set(config) - CONFIG_KEYS
    if unknown:
        raise ConfigError(f"Unknown config keys {sorted(unknown)}", path)

    if "extensions" in config:
        if not isinstance(config["extensions"], list) or not config["extensions"]:
            raise ConfigError("'extensions' must be a non-empty list", path)
        config["extensions"] = frozenset(_normalize_extension(e) for e in config["extensions"])
    if "jpeg_quality" in config:
        quality = config["jpeg_quality"]
        if not isinstance(quality, int) or not 1 <= quality <= 95:
            raise ConfigError("'jpeg_quality' must be an integer between 1 and 95", path)
    if "converter" in config and not isinstance(config["converter"], str):
        raise ConfigError("'converter' must be a string", path)

    return config


def load_settings(data_dir: Optional[str | Path] = None) -> Settings:
    """Build settings from the data directory, its config.yaml and the environment.

    Precedence: explicit data_dir, then SPG_DATA_DIR, then ~/.spg. For the
    converter, SPG_CONVERTER wins over config.yaml.
    """
    if data_dir is None:
        data_dir = os.environ.get("SPG_DATA_DIR", DEFAULT_DATA_DIR)
    data_dir = Path(data_dir).expanduser().resolve()

    config = load_config(data_dir / CONFIG_FILENAME)
    settings = Settings(data_dir=data_dir, **config)

    converter = os.environ.get("SPG_CONVERTER")
    if converter:
        settings.converter = converter
    return settings
