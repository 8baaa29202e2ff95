import os
import tempfile
import unittest
from pathlib import Path

from featuremanifest import paths
from featuremanifest.manifest.discovery import discover_features


class PathUtilityTests(unittest.TestCase):
    def setUp(self) -> None:
        self.tmpdir = tempfile.TemporaryDirectory()
        self.root = Path(self.tmpdir.name)
        (self.root / "alpha").mkdir()
        (self.root / "beta").mkdir()
        (self.root / "readme.md").write_text("x", encoding="utf-8")
        (self.root / "alpha" / "nested").mkdir()

    def tearDown(self) -> None:
        self.tmpdir.cleanup()

    def test_sub_dirs_and_files_are_one_level_deep(self) -> None:
        dirs = [paths.parse_resource(p) for p in paths.glob_for_sub_dirs(self.root)]
        files = [paths.parse_resource(p) for p in paths.glob_for_files(self.root)]
        self.assertEqual(dirs, ["alpha", "beta"])
        self.assertEqual(files, ["readme.md"])

    def test_missing_directory_yields_empty_results(self) -> None:
        missing = self.root / "nope"
        self.assertEqual(paths.glob_for_sub_dirs(missing), [])
        self.assertEqual(paths.glob_for_files(missing), [])
        self.assertFalse(paths.is_dir(missing))
        self.assertFalse(paths.is_file(missing))
        self.assertFalse(paths.exists(missing))

    def test_glob_strings(self) -> None:
        self.assertEqual(paths.glob_leaf("src"), os.path.join("src", "*"))
        self.assertEqual(paths.glob_js_str("src"), os.path.join("src", "**/*.js"))
        self.assertEqual(paths.glob_scss_str("src"), os.path.join("src", "**/*.scss"))
        self.assertEqual(len(paths.glob_all_str("src")), 3)
        self.assertIn(os.path.join("src", "**/*.j2"), paths.glob_html_str("src"))

    def test_parse_resource_takes_last_segment(self) -> None:
        self.assertEqual(paths.parse_resource("a/b/homepage"), "homepage")
        self.assertEqual(paths.parse_resource("a/b/homepage/"), "homepage")

    def test_root_rewrites_replace_first_occurrence(self) -> None:
        src = "/srv/base/features/homepage/js/index.js"
        self.assertEqual(
            paths.base_to_brand_src(src, "/srv/base", "/srv/brand"),
            "/srv/brand/features/homepage/js/index.js",
        )
        self.assertEqual(
            paths.base_to_temp_src(src, "/srv/base", "/srv/.tmp"),
            "/srv/.tmp/features/homepage/js/index.js",
        )
        brand = "/srv/brand/features/x/brand.js"
        self.assertEqual(paths.brand_to_base_src(brand, "/srv/brand", "/srv/base"), "/srv/base/features/x/brand.js")
        self.assertEqual(paths.brand_to_temp_src(brand, "/srv/brand", "/srv/.tmp"), "/srv/.tmp/features/x/brand.js")

    def test_source_classifiers(self) -> None:
        self.assertTrue(paths.is_base_src("/srv/base/a.js", "/srv/base"))
        self.assertFalse(paths.is_brand_src("/srv/base/a.js", "/srv/brand"))
        self.assertTrue(paths.is_js_src("a.js"))
        self.assertTrue(paths.is_partial_src("a.html"))
        self.assertTrue(paths.is_sass_src("a.scss"))
        self.assertTrue(paths.is_template_src("a.j2"))

    def test_classifiers_match_whole_path_components(self) -> None:
        self.assertFalse(paths.is_brand_src("/x/brand-base/a.js", "/x/brand"))
        self.assertFalse(paths.is_base_src("/x/base2/a.js", "/x/base"))
        self.assertTrue(paths.is_brand_src("/x/brand/features/a.js", "/x/brand"))

    def test_copy_creates_parents_and_skips_missing_sources(self) -> None:
        src = self.root / "readme.md"
        dest = self.root / "out" / "deep" / "readme.md"
        self.assertTrue(paths.copy(src, dest))
        self.assertEqual(dest.read_text(encoding="utf-8"), "x")
        self.assertFalse(paths.copy(self.root / "missing.md", self.root / "out" / "missing.md"))
        self.assertFalse((self.root / "out" / "missing.md").exists())


class FeatureDiscoveryTests(unittest.TestCase):
    def test_discovery_lists_directories_and_skips_reserved_names(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            for name in ("homepage", "core", "__pycache__", "category"):
                (root / name).mkdir()
            (root / "index.js").write_text("", encoding="utf-8")

            self.assertEqual(discover_features(root), ["category", "homepage"])

    def test_discovery_of_missing_directory_is_empty(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            self.assertEqual(discover_features(Path(tmpdir) / "brand" / "features"), [])


if __name__ == "__main__":
    unittest.main()
