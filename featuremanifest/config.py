"""Feature manifest configuration."""
from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import BaseModel, ValidationError

from featuremanifest.errors import ConfigError


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _env_path(name: str, default: Path) -> Path:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return Path(value.strip())


# Working directory the build runs from
PROJECT_ROOT = Path(os.getenv("FEATURE_MANIFEST_PROJECT_ROOT", ".")).resolve()

# Project names (first segment of a feature package string)
BASE_PROJECT = os.getenv("FEATURE_MANIFEST_BASE_PROJECT", "base")
BRAND_PROJECT = os.getenv("FEATURE_MANIFEST_BRAND_PROJECT", "brand")

# Source trees
BASE_ROOT = _env_path("FEATURE_MANIFEST_BASE_ROOT", PROJECT_ROOT / BASE_PROJECT)
BRAND_ROOT = _env_path("FEATURE_MANIFEST_BRAND_ROOT", PROJECT_ROOT / BRAND_PROJECT)
TEMP_ROOT = _env_path("FEATURE_MANIFEST_TEMP_ROOT", PROJECT_ROOT / ".tmp")
MANIFEST = _env_path("FEATURE_MANIFEST_PATH", PROJECT_ROOT / "manifest.json")

FEATURES_DIRNAME = "features"
ENTRY_FILE = "js/index.js"

# Bundles
COMMON_BUNDLE_NAME = "common"
COMMON_BUNDLE_FILENAME = "common.js"

# Keep manifest records whose feature directory disappeared
KEEP_STALE_FEATURES = _env_bool("FEATURE_MANIFEST_KEEP_STALE", False)

_PATH_FIELDS = ("base_root", "brand_root", "temp_root", "manifest_path")


class ManifestSettings(BaseModel):
    """Roots and naming conventions shared by every manifest component."""

    base_project: str = BASE_PROJECT
    brand_project: str = BRAND_PROJECT
    base_root: Path = BASE_ROOT
    brand_root: Path = BRAND_ROOT
    temp_root: Path = TEMP_ROOT
    manifest_path: Path = MANIFEST
    features_dirname: str = FEATURES_DIRNAME
    entry_file: str = ENTRY_FILE
    common_bundle_name: str = COMMON_BUNDLE_NAME
    common_bundle_filename: str = COMMON_BUNDLE_FILENAME
    keep_stale: bool = KEEP_STALE_FEATURES

    @property
    def base_features(self) -> Path:
        return self.base_root / self.features_dirname

    @property
    def brand_features(self) -> Path:
        return self.brand_root / self.features_dirname

    @property
    def temp_features(self) -> Path:
        return self.temp_root / self.features_dirname


def _load_settings_file(config_path: Path) -> dict[str, Any]:
    try:
        text = config_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(config_path, "Unable to read settings file") from exc
    try:
        data = yaml.safe_load(text) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(config_path, "Invalid YAML in settings file") from exc
    if not isinstance(data, dict):
        raise ConfigError(config_path, "Expected a mapping in settings file")

    # Relative paths are anchored to the settings file, not the cwd
    for field in _PATH_FIELDS:
        value = data.get(field)
        if isinstance(value, str) and value and not Path(value).is_absolute():
            data[field] = (config_path.parent / value).resolve()
    return data


def load_settings(config_path: Optional[Path | str] = None, **overrides: Any) -> ManifestSettings:
    """Build settings from env defaults, an optional YAML file, then overrides.

    Overrides whose value is ``None`` are ignored so argparse namespaces can be
    passed straight through.
    """
    values: dict[str, Any] = {}
    source: Path | str = "<overrides>"
    if config_path is not None:
        source = Path(config_path)
        values.update(_load_settings_file(source))
    values.update({key: value for key, value in overrides.items() if value is not None})
    try:
        return ManifestSettings(**values)
    except ValidationError as exc:
        raise ConfigError(source, f"Invalid settings ({exc.error_count()} errors)") from exc
