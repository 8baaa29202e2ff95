"""Map bundle groups to bundler entry paths."""
from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

from featuremanifest.config import ManifestSettings
from featuremanifest.manifest.reader import FeatureManifest, bundle_groups, enabled_feature_set
from featuremanifest.models import BundlePlan

DEFAULT_ENTRY_FILE = "js/index.js"


def entry_path(entry_root: Path | str, name: str, entry_file: str = DEFAULT_ENTRY_FILE) -> str:
    return os.path.join(str(entry_root), name, entry_file)


def entry_mappings(
    groups: dict[str, list[str]],
    entry_root: Path | str,
    entry_file: str = DEFAULT_ENTRY_FILE,
) -> dict[str, list[str]]:
    """Bundle name to ordered entry paths of its member features."""
    return {
        bundle: [entry_path(entry_root, name, entry_file) for name in names]
        for bundle, names in groups.items()
    }


def bundle_entries(
    groups: dict[str, list[str]],
    bundle: str,
    entry_root: Path | str,
    entry_file: str = DEFAULT_ENTRY_FILE,
) -> dict[str, list[str]]:
    """Entry mapping for a single bundle; empty when the bundle is unknown."""
    if bundle not in groups:
        return {}
    return entry_mappings({bundle: groups[bundle]}, entry_root, entry_file)


def find_feature_bundle(groups: dict[str, list[str]], feature: str) -> Optional[str]:
    for bundle, names in groups.items():
        if feature in names:
            return bundle
    return None


def feature_entries(
    groups: dict[str, list[str]],
    feature: str,
    entry_root: Path | str,
    entry_file: str = DEFAULT_ENTRY_FILE,
) -> dict[str, list[str]]:
    """Entry mapping for one feature inside the bundle that owns it.

    Used for incremental rebuilds: only the changed feature's entry is
    resolved, not the rest of its bundle.
    """
    bundle = find_feature_bundle(groups, feature)
    if bundle is None:
        return {}
    return {bundle: [entry_path(entry_root, feature, entry_file)]}


def build_bundle_plan(
    manifest: FeatureManifest,
    settings: ManifestSettings,
    bundle: Optional[str] = None,
    feature: Optional[str] = None,
) -> BundlePlan:
    """Collect what the bundler config assembler needs, optionally narrowed."""
    features = manifest.features()
    groups = bundle_groups(features)
    root, entry_file = settings.temp_features, settings.entry_file

    if feature is not None:
        entries = feature_entries(groups, feature, root, entry_file)
    elif bundle is not None:
        entries = bundle_entries(groups, bundle, root, entry_file)
    else:
        entries = entry_mappings(groups, root, entry_file)

    return BundlePlan(
        entries=entries,
        enabled_features=enabled_feature_set(features, settings.base_project, settings.brand_project),
        common_bundle=settings.common_bundle_name,
        common_filename=settings.common_bundle_filename,
    )
