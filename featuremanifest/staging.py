"""Stage feature sources into the temp tree the bundler builds from.

Base files are copied first and then overwritten by their brand counterpart,
so the temp tree always holds the brand override where one exists.
"""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterable

from featuremanifest.config import ManifestSettings
from featuremanifest.paths import (
    base_to_brand_src,
    base_to_temp_src,
    brand_to_base_src,
    brand_to_temp_src,
    copy,
    is_base_src,
    is_brand_src,
    is_dir,
    is_file,
)

logger = logging.getLogger("featuremanifest")


def copy_brand_src_to_temp(src_path: Path | str, settings: ManifestSettings) -> bool:
    return copy(src_path, brand_to_temp_src(src_path, settings.brand_root, settings.temp_root))


def copy_merge_base_src_to_temp(src_path: Path | str, settings: ManifestSettings) -> bool:
    """Copy a base file to temp, then overlay the brand file if there is one."""
    temp_path = base_to_temp_src(src_path, settings.base_root, settings.temp_root)
    copied = copy(src_path, temp_path)
    brand_path = base_to_brand_src(src_path, settings.base_root, settings.brand_root)
    return copy(brand_path, temp_path) or copied


def stage_feature_file(src_path: Path | str, settings: ManifestSettings) -> bool:
    """Stage one changed source file. Paths outside both trees are ignored."""
    # Brand first: a brand root nested inside the base root would match both
    if is_brand_src(src_path, settings.brand_root):
        return copy_brand_src_to_temp(src_path, settings)
    if is_base_src(src_path, settings.base_root):
        return copy_merge_base_src_to_temp(src_path, settings)
    return False


def _remove_staged(temp_path: Path | str) -> bool:
    try:
        Path(temp_path).unlink()
    except FileNotFoundError:
        return False
    return True


def unstage_feature_file(src_path: Path | str, settings: ManifestSettings) -> bool:
    """Restage after ``src_path`` was deleted.

    A deleted brand override falls back to its base file; a file with no
    remaining source is removed from the temp tree.
    """
    if is_brand_src(src_path, settings.brand_root):
        base_path = brand_to_base_src(src_path, settings.brand_root, settings.base_root)
        if is_file(base_path):
            return copy_merge_base_src_to_temp(base_path, settings)
        return _remove_staged(brand_to_temp_src(src_path, settings.brand_root, settings.temp_root))
    if is_base_src(src_path, settings.base_root):
        brand_path = base_to_brand_src(src_path, settings.base_root, settings.brand_root)
        if is_file(brand_path):
            return copy_brand_src_to_temp(brand_path, settings)
        return _remove_staged(base_to_temp_src(src_path, settings.base_root, settings.temp_root))
    return False


def _walk_files(root: Path) -> list[Path]:
    files: list[Path] = []
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(d for d in dirnames if d != "__pycache__")
        files.extend(Path(dirpath) / name for name in sorted(filenames))
    return files


def stage_features(settings: ManifestSettings, names: Iterable[str]) -> int:
    """Stage every file of the named features. Returns the number of files copied."""
    count = 0
    for name in names:
        base_dir = settings.base_features / name
        brand_dir = settings.brand_features / name
        if is_dir(base_dir):
            count += sum(copy_merge_base_src_to_temp(path, settings) for path in _walk_files(base_dir))
        if is_dir(brand_dir):
            # Overlaid files were copied with their base counterpart already
            for path in _walk_files(brand_dir):
                base_path = settings.base_features / name / path.relative_to(brand_dir)
                if not base_path.is_file():
                    count += copy_brand_src_to_temp(path, settings)
        if not is_dir(base_dir) and not is_dir(brand_dir):
            logger.warning(f"Feature '{name}' has no source directory, nothing to stage")
    logger.info(f"Staged {count} files into {settings.temp_features}")
    return count
