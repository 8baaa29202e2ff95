"""Reconcile discovered base/brand features with the persisted manifest."""
from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Optional

from featuremanifest.config import ManifestSettings
from featuremanifest.errors import ManifestParseError, ManifestWriteError
from featuremanifest.manifest.discovery import discover_features
from featuremanifest.manifest.reader import (
    is_core_feature,
    load_manifest_document,
    parse_feature_records,
    read_manifest,
)
from featuremanifest.models import Feature, FeatureClient, ReconcileResult
from featuremanifest.resolver import DuplicateKeyError, resolve

logger = logging.getLogger("featuremanifest")


def build_feature_model(project: str, name: str) -> Feature:
    """A bare, enabled feature record for a freshly discovered feature."""
    return Feature(
        package=".".join([project, "features", name]),
        enabled=True,
        client=FeatureClient(),
    )


def reconcile_features(
    base_dir: Path | str,
    brand_dir: Path | str,
    base_project: str,
    brand_project: str,
) -> ReconcileResult:
    """Merge discovered base and brand features; brand replaces base on name collision."""
    brand_names = discover_features(brand_dir)
    base_names = discover_features(base_dir)

    shared = set(brand_names) & set(base_names)
    base_only_names = [name for name in base_names if name not in shared]

    brand_models = [build_feature_model(brand_project, name) for name in brand_names]
    base_models = [build_feature_model(base_project, name) for name in base_only_names]

    return ReconcileResult(
        models=brand_models + base_models,
        names=brand_names + base_only_names,
    )


def _carry_over(discovered: Feature, existing: Optional[Feature]) -> Feature:
    # Discovery decides ownership; the manifest keeps its toggles and client block.
    if existing is None:
        return discovered
    if existing.package != discovered.package:
        logger.info(f"Feature '{discovered.name}' moved from {existing.package} to {discovered.package}")
    return existing.model_copy(update={"package": discovered.package})


def merge_with_manifest(
    discovered: list[Feature],
    existing: list[Feature],
    keep_stale: bool = False,
) -> list[Feature]:
    """Resolve discovered models against prior manifest records by feature name."""
    existing = [f for f in existing if not is_core_feature(f)]
    if not keep_stale:
        discovered_names = {f.name for f in discovered}
        stale = [f for f in existing if f.name not in discovered_names]
        for feature in stale:
            logger.warning(f"Dropping stale manifest feature {feature.package}")
        existing = [f for f in existing if f.name in discovered_names]
    return resolve(lambda f: f.name, _carry_over, discovered, existing)


def _load_existing(path: Path) -> dict[str, Any]:
    if not path.exists():
        logger.info(f"No manifest at {path}, creating a new one")
        return {}
    return load_manifest_document(read_manifest(path), path)


def serialize_manifest(document: dict[str, Any], features: list[Feature]) -> str:
    payload = dict(document)
    payload["features"] = [f.to_manifest() for f in features if not is_core_feature(f)]
    return json.dumps(payload, indent=2) + "\n"


def atomic_write_text(path: Path, text: str) -> None:
    """Write to a sibling temp file, then replace ``path`` in one step."""
    tmp_path = path.with_name(path.name + ".tmp")
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path.write_text(text, encoding="utf-8")
        os.replace(tmp_path, path)
    except OSError as exc:
        try:
            tmp_path.unlink()
        except FileNotFoundError:
            pass
        raise ManifestWriteError(path, f"Unable to write manifest ({exc.strerror or exc})") from exc


def write_manifest(settings: ManifestSettings, keep_stale: Optional[bool] = None) -> ReconcileResult:
    """Recompute the feature registry from disk and persist it.

    Returns the persisted models and the discovered feature names.
    """
    if keep_stale is None:
        keep_stale = settings.keep_stale
    path = settings.manifest_path

    reconciled = reconcile_features(
        settings.base_features,
        settings.brand_features,
        settings.base_project,
        settings.brand_project,
    )
    document = _load_existing(path)
    existing = parse_feature_records(document, path)
    try:
        models = merge_with_manifest(reconciled.models, existing, keep_stale=keep_stale)
    except DuplicateKeyError as exc:
        raise ManifestParseError(path, f"Manifest lists feature {exc.key!r} more than once") from exc

    atomic_write_text(path, serialize_manifest(document, models))
    logger.info(f"Wrote {len(models)} features to {path}")
    return ReconcileResult(models=models, names=reconciled.names)
