import json
import tempfile
import unittest
from pathlib import Path

from watchfiles import Change

from featuremanifest.bundles import entry_path
from featuremanifest.config import ManifestSettings
from featuremanifest.watcher import FeatureWatcher


class FeatureWatcherTests(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self) -> None:
        self.tmpdir = tempfile.TemporaryDirectory()
        root = Path(self.tmpdir.name)
        self.settings = ManifestSettings(
            base_project="base",
            brand_project="brand",
            base_root=root / "base",
            brand_root=root / "brand",
            temp_root=root / ".tmp",
            manifest_path=root / "manifest.json",
        )
        self.base_file = self.settings.base_features / "homepage" / "js" / "index.js"
        self.brand_file = self.settings.brand_features / "checkout" / "js" / "index.js"
        for path in (self.base_file, self.brand_file):
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(path.parent.parent.name, encoding="utf-8")
        self.settings.manifest_path.write_text(
            json.dumps(
                {
                    "features": [
                        {"package": "base.features.homepage", "enabled": True, "client": {"feature": "homepage", "bundle": "catalog"}},
                        {"package": "brand.features.checkout", "enabled": True, "client": {"feature": "checkout", "bundle": "checkout"}},
                    ]
                }
            ),
            encoding="utf-8",
        )
        self.reports: list[tuple[str, dict]] = []

    async def asyncTearDown(self) -> None:
        self.tmpdir.cleanup()

    def _record(self, feature: str, entries: dict) -> None:
        self.reports.append((feature, entries))

    def test_classify_changes_maps_paths_to_features(self) -> None:
        watcher = FeatureWatcher(self.settings, self._record)
        changes = {
            (Change.modified, str(self.base_file)),
            (Change.deleted, str(self.brand_file)),
            (Change.added, str(self.settings.base_features / "README.md")),
            (Change.modified, str(Path(self.tmpdir.name) / "unrelated.js")),
        }
        classified = watcher._classify_changes(changes)
        self.assertEqual(
            classified,
            [
                ("modified", self.base_file, "homepage"),
                ("deleted", self.brand_file, "checkout"),
            ],
        )

    def test_only_feature_filter(self) -> None:
        watcher = FeatureWatcher(self.settings, self._record, only_feature="checkout")
        changes = {(Change.modified, str(self.base_file)), (Change.modified, str(self.brand_file))}
        self.assertEqual([item[2] for item in watcher._classify_changes(changes)], ["checkout"])

    async def test_handle_changes_stages_and_reports_feature_entries(self) -> None:
        watcher = FeatureWatcher(self.settings, self._record)
        features = await watcher.handle_changes({(Change.modified, str(self.base_file))})

        self.assertEqual(features, ["homepage"])
        staged = self.settings.temp_features / "homepage" / "js" / "index.js"
        self.assertEqual(staged.read_text(encoding="utf-8"), "homepage")
        self.assertEqual(
            self.reports,
            [("homepage", {"catalog": [entry_path(self.settings.temp_features, "homepage")]})],
        )

    async def test_deleted_brand_override_restages_base_file(self) -> None:
        override = self.settings.brand_features / "homepage" / "js" / "index.js"
        override.parent.mkdir(parents=True, exist_ok=True)
        override.write_text("brand homepage", encoding="utf-8")
        watcher = FeatureWatcher(self.settings, self._record)
        await watcher.handle_changes({(Change.added, str(override))})
        staged = self.settings.temp_features / "homepage" / "js" / "index.js"
        self.assertEqual(staged.read_text(encoding="utf-8"), "brand homepage")

        override.unlink()
        features = await watcher.handle_changes({(Change.deleted, str(override))})
        self.assertEqual(features, ["homepage"])
        self.assertEqual(staged.read_text(encoding="utf-8"), "homepage")

    async def test_deleted_base_only_file_leaves_temp_tree(self) -> None:
        watcher = FeatureWatcher(self.settings, self._record)
        await watcher.handle_changes({(Change.modified, str(self.base_file))})
        staged = self.settings.temp_features / "homepage" / "js" / "index.js"
        self.assertTrue(staged.exists())

        self.base_file.unlink()
        await watcher.handle_changes({(Change.deleted, str(self.base_file))})
        self.assertFalse(staged.exists())
        self.assertEqual([feature for feature, _ in self.reports], ["homepage", "homepage"])

    async def test_async_callbacks_are_awaited(self) -> None:
        async def on_change(feature: str, entries: dict) -> None:
            self.reports.append((feature, entries))

        watcher = FeatureWatcher(self.settings, on_change)
        await watcher.handle_changes({(Change.added, str(self.brand_file))})
        self.assertEqual([feature for feature, _ in self.reports], ["checkout"])

    async def test_watcher_without_feature_directories_stops(self) -> None:
        settings = self.settings.model_copy(
            update={
                "base_root": Path(self.tmpdir.name) / "nope-base",
                "brand_root": Path(self.tmpdir.name) / "nope-brand",
            }
        )
        watcher = FeatureWatcher(settings, self._record)
        await watcher.start()
        await watcher.wait()
        self.assertFalse(watcher.is_running)
        await watcher.stop()


if __name__ == "__main__":
    unittest.main()
