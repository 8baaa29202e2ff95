"""Feature source watcher using watchfiles.

Watches the base and brand feature trees, stages changed files into the temp
tree and reports the entry mapping of each changed feature so a bundler can
rebuild just that feature.
"""
from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Awaitable, Callable, Optional, Union

from watchfiles import Change, awatch

from featuremanifest.bundles import feature_entries
from featuremanifest.config import ManifestSettings
from featuremanifest.manifest.reader import FeatureManifest
from featuremanifest.staging import stage_feature_file, unstage_feature_file

logger = logging.getLogger("featuremanifest.watcher")

ChangeCallback = Callable[[str, dict[str, list[str]]], Union[Awaitable[None], None]]


class FeatureWatcher:
    """Background watcher that restages and reports changed features."""

    def __init__(self, settings: ManifestSettings, on_change: ChangeCallback, only_feature: Optional[str] = None):
        self.settings = settings
        self.on_change = on_change
        self.only_feature = only_feature
        self._task: Optional[asyncio.Task] = None
        self._stop_event: Optional[asyncio.Event] = None
        self._running = False

    async def start(self) -> None:
        if self._running:
            logger.warning("Feature watcher already running")
            return
        self._running = True
        self._stop_event = asyncio.Event()
        self._task = asyncio.create_task(self._watch_loop())
        logger.info("Feature watcher started")

    async def stop(self) -> None:
        self._running = False
        if self._stop_event:
            self._stop_event.set()
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        logger.info("Feature watcher stopped")

    async def wait(self) -> None:
        if self._task:
            await self._task

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def watch_paths(self) -> list[Path]:
        roots = [self.settings.base_features, self.settings.brand_features]
        return [p for p in roots if p.exists()]

    async def _watch_loop(self) -> None:
        watch_paths = self.watch_paths
        if not watch_paths:
            logger.warning("No feature directories exist, watcher has nothing to monitor")
            self._running = False
            return

        logger.info(f"Watching {len(watch_paths)} directories: {[str(p) for p in watch_paths]}")
        try:
            async for changes in awatch(*watch_paths, stop_event=self._stop_event):
                if not self._running:
                    break
                await self.handle_changes(changes)
        except asyncio.CancelledError:
            logger.info("Feature watcher task cancelled")
        finally:
            self._running = False

    async def handle_changes(self, changes: set[tuple[Change, str]]) -> list[str]:
        """Stage changed files and notify once per changed feature."""
        classified = self._classify_changes(changes)
        features: list[str] = []
        for change_type, path, feature in classified:
            if change_type == "modified":
                stage_feature_file(path, self.settings)
            else:
                unstage_feature_file(path, self.settings)
            if feature not in features:
                features.append(feature)

        if not features:
            return []

        groups = FeatureManifest(self.settings).bundle_groups()
        for feature in features:
            entries = feature_entries(groups, feature, self.settings.temp_features, self.settings.entry_file)
            if not entries:
                logger.info(f"Feature '{feature}' changed but belongs to no bundle")
            try:
                result = self.on_change(feature, entries)
                if asyncio.iscoroutine(result):
                    await result
            except Exception as e:
                logger.error(f"Error handling change for feature '{feature}': {e}")
        return features

    def _feature_for_path(self, path: Path) -> Optional[str]:
        for root in (self.settings.brand_features, self.settings.base_features):
            try:
                relative = path.relative_to(root)
            except ValueError:
                continue
            # Files directly under the features root belong to no feature
            if len(relative.parts) < 2:
                return None
            return relative.parts[0]
        return None

    def _classify_changes(self, changes: set[tuple[Change, str]]) -> list[tuple[str, Path, str]]:
        """Classify raw watchfiles changes into (change_type, path, feature) triples."""
        result = []
        for change_type, path_str in sorted(changes, key=lambda item: item[1]):
            path = Path(path_str)
            feature = self._feature_for_path(path)
            if feature is None or feature == "__pycache__":
                continue
            if self.only_feature and feature != self.only_feature:
                continue

            if change_type == Change.deleted:
                result.append(("deleted", path, feature))
            elif change_type in (Change.modified, Change.added):
                result.append(("modified", path, feature))
        return result
