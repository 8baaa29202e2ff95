"""Discover feature directories in a project tree."""
from __future__ import annotations

import logging
from pathlib import Path

from featuremanifest.paths import glob_for_sub_dirs, is_dir, parse_resource

logger = logging.getLogger("featuremanifest")

# Build artifacts and the synthesized core feature are never discovered
RESERVED_FEATURE_NAMES = frozenset({"__pycache__", "core"})


def discover_features(features_dir: Path | str) -> list[str]:
    """Return the sorted names of the feature directories one level below ``features_dir``."""
    if not is_dir(features_dir):
        logger.debug(f"Feature directory not found, nothing to discover: {features_dir}")
        return []

    names = [parse_resource(path) for path in glob_for_sub_dirs(features_dir)]
    discovered = [name for name in names if name not in RESERVED_FEATURE_NAMES]
    logger.debug(f"Discovered {len(discovered)} features in {features_dir}")
    return discovered
