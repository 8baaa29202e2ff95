"""Read the feature manifest and derive enabled/legacy/bundle views.

Every view is a pure function of a parsed feature list. ``FeatureManifest``
re-reads the manifest file on each call so callers always see the state the
last reconciliation pass persisted.
"""
from __future__ import annotations

import json
import os
import re
from pathlib import Path
from typing import Any, Iterable, Optional

from pydantic import ValidationError

from featuremanifest.config import ManifestSettings
from featuremanifest.errors import ManifestParseError, ManifestReadError
from featuremanifest.models import Feature, FeatureClient
from featuremanifest.paths import glob_for_sub_dirs

CORE_FEATURE_NAME = "core"
CORE_BUNDLE_NAME = "common"
MISSING = "missing"

# Names that never take part in bundling
_NON_BUNDLED_RE = re.compile(r"core|legacy")


def core_feature(project: str) -> Feature:
    """The implicit core feature, synthesized on every read."""
    return Feature(
        package=f"{project}.features.{CORE_FEATURE_NAME}",
        enabled=True,
        client=FeatureClient(feature=CORE_FEATURE_NAME, bundle=CORE_BUNDLE_NAME),
    )


def is_core_feature(feature: Feature) -> bool:
    return feature.name == CORE_FEATURE_NAME


# ── Loading ─────────────────────────────────────────────────────────

def read_manifest(path: Path | str) -> bytes:
    """Load the raw manifest. Any I/O failure is fatal."""
    try:
        return Path(path).read_bytes()
    except OSError as exc:
        raise ManifestReadError(path, f"Unable to read manifest ({exc.strerror or exc})") from exc


def load_manifest_document(raw: bytes | str, path: Path | str = "<manifest>") -> dict[str, Any]:
    try:
        document = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise ManifestParseError(path, f"Invalid manifest JSON ({exc})") from exc
    if not isinstance(document, dict):
        raise ManifestParseError(path, "Manifest must be a JSON object")
    return document


def parse_feature_records(document: dict[str, Any], path: Path | str = "<manifest>") -> list[Feature]:
    """Parse the ``features`` array of a manifest document (absent means empty)."""
    records = document.get("features", [])
    if records is None:
        return []
    if not isinstance(records, list):
        raise ManifestParseError(path, "Manifest 'features' must be a list")
    try:
        # A record without an "enabled" key is disabled
        return [
            Feature.model_validate({"enabled": False, **record} if isinstance(record, dict) else record)
            for record in records
        ]
    except ValidationError as exc:
        raise ManifestParseError(path, f"Invalid feature record ({exc.error_count()} errors)") from exc


def parse_features(raw: bytes | str, core_project: str, path: Path | str = "<manifest>") -> list[Feature]:
    """Parse manifest JSON into features, with the core feature first.

    A core record present in the file is ignored; the synthesized one wins.
    """
    features = parse_feature_records(load_manifest_document(raw, path), path)
    return [core_feature(core_project)] + [f for f in features if not is_core_feature(f)]


# ── Views ───────────────────────────────────────────────────────────

def enabled_features(features: Iterable[Feature]) -> list[Feature]:
    return [f for f in features if f.enabled]


def disabled_features(features: Iterable[Feature]) -> list[Feature]:
    return [f for f in features if not f.enabled]


def legacy_features(features: Iterable[Feature]) -> list[Feature]:
    return [f for f in features if f.client.legacy]


def active_features(features: Iterable[Feature]) -> list[Feature]:
    return [f for f in features if not f.client.legacy]


def feature_names(features: Iterable[Feature]) -> list[str]:
    return [f.name for f in features]


def enabled_feature_names(features: Iterable[Feature]) -> list[str]:
    return feature_names(enabled_features(features))


def disabled_feature_names(features: Iterable[Feature]) -> list[str]:
    return feature_names(disabled_features(features))


def legacy_feature_names(features: Iterable[Feature]) -> list[str]:
    return feature_names(legacy_features(features))


def active_feature_names(features: Iterable[Feature]) -> list[str]:
    return feature_names(active_features(features))


def project_features(features: Iterable[Feature], project: str) -> list[Feature]:
    """Enabled features owned by ``project``."""
    return [f for f in enabled_features(features) if f.project == project]


def base_feature_names(features: Iterable[Feature], base_project: str) -> list[str]:
    return feature_names(project_features(features, base_project))


def brand_feature_names(features: Iterable[Feature], brand_project: str) -> list[str]:
    return feature_names(project_features(features, brand_project))


def _ordered_union(*groups: Iterable[str]) -> list[str]:
    result: list[str] = []
    seen: set[str] = set()
    for group in groups:
        for item in group:
            if item not in seen:
                seen.add(item)
                result.append(item)
    return result


def enabled_feature_set(features: Iterable[Feature], base_project: str, brand_project: str) -> list[str]:
    """Enabled base and brand feature names eligible for bundling."""
    features = list(features)
    names = _ordered_union(
        base_feature_names(features, base_project),
        brand_feature_names(features, brand_project),
    )
    return [name for name in names if not _NON_BUNDLED_RE.search(name)]


def bundle_groups(features: Iterable[Feature]) -> dict[str, list[str]]:
    """Group enabled feature names by bundle.

    Features without a bundle, and placeholders without a client feature
    name, are left out of every group.
    """
    groups: dict[str, list[str]] = {}
    for feature in enabled_features(features):
        bundle = feature.client.bundle or MISSING
        groups.setdefault(bundle, []).append(feature.client.feature or MISSING)
    groups.pop(MISSING, None)
    return {
        bundle: [name for name in names if name != MISSING]
        for bundle, names in groups.items()
    }


# ── Feature paths ───────────────────────────────────────────────────

def feature_path(feature: Feature, root: Path | str) -> str:
    """Filesystem path of a feature below a project root, e.g. ``<root>/features/homepage``."""
    return os.path.join(str(root), *feature.segments[1:])


def _join_glob(path: str, glob_str: Optional[str]) -> str:
    return os.path.join(path, glob_str) if glob_str else path


def glob_base_paths(features: Iterable[Feature], settings: ManifestSettings, glob_str: Optional[str] = None) -> list[str]:
    return [
        _join_glob(feature_path(f, settings.base_root), glob_str)
        for f in project_features(features, settings.base_project)
    ]


def glob_brand_paths(features: Iterable[Feature], settings: ManifestSettings, glob_str: Optional[str] = None) -> list[str]:
    return [
        _join_glob(feature_path(f, settings.brand_root), glob_str)
        for f in project_features(features, settings.brand_project)
    ]


def glob_complete_base_paths(
    features: Iterable[Feature],
    settings: ManifestSettings,
    glob_str: Optional[str] = None,
) -> list[str]:
    """Base feature paths plus brand features mapped into the base tree."""
    features = list(features)
    brand_in_base = [
        _join_glob(feature_path(f, settings.base_root), glob_str)
        for f in project_features(features, settings.brand_project)
    ]
    return _ordered_union(glob_base_paths(features, settings, glob_str), brand_in_base)


def glob_temp_paths(settings: ManifestSettings, glob_str: str) -> list[str]:
    """Every staged feature directory in the temp tree joined with ``glob_str``."""
    return [os.path.join(path, glob_str) for path in glob_for_sub_dirs(settings.temp_features)]


def glob_project_paths(features: Iterable[Feature], settings: ManifestSettings, glob_strs: Iterable[str]) -> list[str]:
    """Base (including brand-in-base) and brand feature paths for each glob."""
    features = list(features)
    paths: list[str] = []
    for glob_str in glob_strs:
        paths.extend(glob_complete_base_paths(features, settings, glob_str))
        paths.extend(glob_brand_paths(features, settings, glob_str))
    return paths


def take_until_inclusive(item: Any, items: list[Any]) -> list[Any]:
    """Items up to and including the last occurrence of ``item``; all items if absent."""
    if item not in items:
        return list(items)
    last = len(items) - 1 - items[::-1].index(item)
    return items[: last + 1]


# ── Facade ──────────────────────────────────────────────────────────

class FeatureManifest:
    """Views over the persisted manifest described by ``settings``."""

    def __init__(self, settings: ManifestSettings):
        self.settings = settings

    @property
    def path(self) -> Path:
        return self.settings.manifest_path

    def features(self) -> list[Feature]:
        raw = read_manifest(self.path)
        return parse_features(raw, self.settings.brand_project, self.path)

    def enabled(self) -> list[Feature]:
        return enabled_features(self.features())

    def disabled(self) -> list[Feature]:
        return disabled_features(self.features())

    def legacy(self) -> list[Feature]:
        return legacy_features(self.features())

    def active(self) -> list[Feature]:
        return active_features(self.features())

    def base_feature_names(self) -> list[str]:
        return base_feature_names(self.features(), self.settings.base_project)

    def brand_feature_names(self) -> list[str]:
        return brand_feature_names(self.features(), self.settings.brand_project)

    def enabled_feature_set(self) -> list[str]:
        return enabled_feature_set(
            self.features(),
            self.settings.base_project,
            self.settings.brand_project,
        )

    def bundle_groups(self) -> dict[str, list[str]]:
        return bundle_groups(self.features())
