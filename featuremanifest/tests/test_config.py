import tempfile
import unittest
from pathlib import Path

from featuremanifest.config import ManifestSettings, load_settings
from featuremanifest.errors import ConfigError


class LoadSettingsTests(unittest.TestCase):
    def test_defaults_and_derived_feature_roots(self) -> None:
        settings = ManifestSettings(base_root=Path("/srv/base"), brand_root=Path("/srv/brand"), temp_root=Path("/srv/.tmp"))
        self.assertEqual(settings.base_features, Path("/srv/base/features"))
        self.assertEqual(settings.brand_features, Path("/srv/brand/features"))
        self.assertEqual(settings.temp_features, Path("/srv/.tmp/features"))
        self.assertEqual(settings.entry_file, "js/index.js")

    def test_yaml_file_paths_are_relative_to_the_file(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            config_path = root / "build" / "manifest.yaml"
            config_path.parent.mkdir()
            config_path.write_text(
                "base_project: urbn\n"
                "brand_project: anthro\n"
                "base_root: ../urbn\n"
                "manifest_path: /abs/manifest.json\n",
                encoding="utf-8",
            )
            settings = load_settings(config_path)
            self.assertEqual(settings.base_project, "urbn")
            self.assertEqual(settings.brand_project, "anthro")
            self.assertEqual(settings.base_root, (root / "urbn").resolve())
            self.assertEqual(settings.manifest_path, Path("/abs/manifest.json"))

    def test_overrides_win_and_none_is_ignored(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            config_path = Path(tmpdir) / "manifest.yaml"
            config_path.write_text("common_bundle_name: shared\n", encoding="utf-8")
            settings = load_settings(config_path, common_bundle_name="vendor", manifest_path=None)
            self.assertEqual(settings.common_bundle_name, "vendor")

    def test_invalid_files_raise_config_error(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            not_mapping = root / "list.yaml"
            not_mapping.write_text("- a\n- b\n", encoding="utf-8")
            broken = root / "broken.yaml"
            broken.write_text("base_root: [unterminated\n", encoding="utf-8")
            bad_value = root / "bad.yaml"
            bad_value.write_text("keep_stale: {nested: true}\n", encoding="utf-8")

            for path in (not_mapping, broken, bad_value, root / "absent.yaml"):
                with self.assertRaises(ConfigError):
                    load_settings(path)


if __name__ == "__main__":
    unittest.main()
