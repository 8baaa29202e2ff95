#!/usr/bin/env python3
"""Build tasks for the feature manifest.

Usage:
  feature-manifest resolve-manifest
  feature-manifest features --view enabled
  feature-manifest bundles
  feature-manifest entries --feature homepage
  feature-manifest stage
  feature-manifest watch --feature checkout
  feature-manifest --config build/manifest.yaml --format yaml entries --bundle catalog
"""
from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from typing import Any, Callable

import yaml

from featuremanifest.bundles import build_bundle_plan
from featuremanifest.config import ManifestSettings, load_settings
from featuremanifest.errors import ManifestError
from featuremanifest.manifest import reader
from featuremanifest.manifest.writer import write_manifest
from featuremanifest.staging import stage_features
from featuremanifest.watcher import FeatureWatcher

logger = logging.getLogger("featuremanifest")

_VIEWS: dict[str, Callable[[list], list]] = {
    "all": list,
    "enabled": reader.enabled_features,
    "disabled": reader.disabled_features,
    "legacy": reader.legacy_features,
    "active": reader.active_features,
}


def _emit(data: Any, fmt: str) -> None:
    if fmt == "yaml":
        sys.stdout.write(yaml.safe_dump(data, default_flow_style=False, sort_keys=False))
    else:
        sys.stdout.write(json.dumps(data, indent=2) + "\n")


def resolve_manifest_task(settings: ManifestSettings, args: argparse.Namespace) -> int:
    result = write_manifest(settings, keep_stale=True if args.keep_stale else None)
    _emit({"manifest": str(settings.manifest_path), "features": result.names}, args.format)
    return 0


def features_task(settings: ManifestSettings, args: argparse.Namespace) -> int:
    features = _VIEWS[args.view](reader.FeatureManifest(settings).features())
    _emit([f.to_manifest() for f in features], args.format)
    return 0


def bundles_task(settings: ManifestSettings, args: argparse.Namespace) -> int:
    manifest = reader.FeatureManifest(settings)
    features = manifest.features()
    _emit(
        {
            "bundles": reader.bundle_groups(features),
            "enabled": reader.enabled_feature_set(features, settings.base_project, settings.brand_project),
        },
        args.format,
    )
    return 0


def entries_task(settings: ManifestSettings, args: argparse.Namespace) -> int:
    plan = build_bundle_plan(reader.FeatureManifest(settings), settings, bundle=args.bundle, feature=args.feature)
    _emit(plan.model_dump(), args.format)
    return 0


def stage_task(settings: ManifestSettings, args: argparse.Namespace) -> int:
    if args.feature:
        names = [args.feature]
    else:
        # Every enabled feature, core and legacy included, may be a bundle entry
        names = reader.enabled_feature_names(reader.FeatureManifest(settings).features())
    count = stage_features(settings, names)
    _emit({"staged": count, "features": names}, args.format)
    return 0


def watch_task(settings: ManifestSettings, args: argparse.Namespace) -> int:
    def report(feature: str, entries: dict[str, list[str]]) -> None:
        _emit({"feature": feature, "entries": entries}, args.format)
        sys.stdout.flush()

    async def run() -> None:
        watcher = FeatureWatcher(settings, report, only_feature=args.feature)
        await watcher.start()
        try:
            await watcher.wait()
        finally:
            await watcher.stop()

    try:
        asyncio.run(run())
    except KeyboardInterrupt:
        logger.info("Watch interrupted")
    return 0


TASKS: dict[str, Callable[[ManifestSettings, argparse.Namespace], int]] = {
    "resolve-manifest": resolve_manifest_task,
    "features": features_task,
    "bundles": bundles_task,
    "entries": entries_task,
    "stage": stage_task,
    "watch": watch_task,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="feature-manifest", description="Resolve and inspect the feature manifest.")
    parser.add_argument("--config", default=None, help="YAML settings file")
    parser.add_argument("--manifest", default=None, help="Manifest path (overrides settings)")
    parser.add_argument("--format", choices=("json", "yaml"), default="json")
    parser.add_argument("--verbose", action="store_true")
    sub = parser.add_subparsers(dest="task", required=True)

    resolve_parser = sub.add_parser("resolve-manifest", help="Reconcile discovered features into the manifest")
    resolve_parser.add_argument("--keep-stale", action="store_true", help="Keep records whose directory is gone")

    features_parser = sub.add_parser("features", help="List manifest features")
    features_parser.add_argument("--view", choices=sorted(_VIEWS), default="all")

    sub.add_parser("bundles", help="Show enabled features grouped by bundle")

    entries_parser = sub.add_parser("entries", help="Resolve bundle entry paths")
    target = entries_parser.add_mutually_exclusive_group()
    target.add_argument("--bundle", default=None)
    target.add_argument("--feature", default=None)

    stage_parser = sub.add_parser("stage", help="Copy enabled feature sources into the temp tree")
    stage_parser.add_argument("--feature", default=None)

    watch_parser = sub.add_parser("watch", help="Restage and report features as they change")
    watch_parser.add_argument("--feature", default=None)
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO, stream=sys.stderr)

    try:
        settings = load_settings(args.config, manifest_path=args.manifest)
        return TASKS[args.task](settings, args)
    except ManifestError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
