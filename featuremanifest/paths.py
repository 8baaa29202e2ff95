"""Path classification, glob builders and base/brand/temp path rewrites."""
from __future__ import annotations

import os
import shutil
from glob import glob
from pathlib import Path
from typing import Union

PathLike = Union[str, Path]


# ── Classification ──────────────────────────────────────────────────

def exists(src_path: PathLike) -> bool:
    try:
        os.stat(src_path)
    except OSError:
        return False
    return True


def is_dir(src_path: PathLike) -> bool:
    try:
        return Path(src_path).is_dir()
    except OSError:
        return False


def is_file(src_path: PathLike) -> bool:
    try:
        return Path(src_path).is_file()
    except OSError:
        return False


def parse_resource(uri: PathLike) -> str:
    """Return the last ``/``-separated segment of a uri."""
    return str(uri).replace("\\", "/").rstrip("/").split("/")[-1]


# ── Glob strings ────────────────────────────────────────────────────

def glob_leaf(directory: PathLike) -> str:
    """Glob string matching the entries of a directory one level deep."""
    return os.path.join(str(directory), "*")


def glob_all_str(directory: PathLike) -> list[str]:
    """Globs for all HTML, template and JavaScript sources."""
    return [os.path.join(str(directory), f"**/*.{ext}") for ext in ("html", "j2", "js")]


def glob_css_str(directory: PathLike) -> str:
    return os.path.join(str(directory), "**/*.css")


def glob_html_str(directory: PathLike) -> list[str]:
    return [os.path.join(str(directory), f"**/*.{ext}") for ext in ("html", "j2")]


def glob_js_str(directory: PathLike) -> str:
    return os.path.join(str(directory), "**/*.js")


def glob_py_str(directory: PathLike) -> str:
    return os.path.join(str(directory), "**/*.py")


def glob_scss_str(directory: PathLike) -> str:
    return os.path.join(str(directory), "**/*.scss")


def glob_for_sub_dirs(directory: PathLike) -> list[str]:
    """Immediate child directories, sorted. Missing directories yield ``[]``."""
    return sorted(path for path in glob(glob_leaf(directory)) if is_dir(path))


def glob_for_files(directory: PathLike) -> list[str]:
    """Immediate child files, sorted. Missing directories yield ``[]``."""
    return sorted(path for path in glob(glob_leaf(directory)) if is_file(path))


# ── Source classifiers ──────────────────────────────────────────────

def _is_under(src_path: PathLike, root: PathLike) -> bool:
    # Component-wise, so "/x/brand" does not claim "/x/brand-base"
    return Path(src_path).is_relative_to(root)


def is_base_src(src_path: PathLike, base_root: PathLike) -> bool:
    return _is_under(src_path, base_root)


def is_brand_src(src_path: PathLike, brand_root: PathLike) -> bool:
    return _is_under(src_path, brand_root)


def is_js_src(src_path: PathLike) -> bool:
    return ".js" in str(src_path)


def is_partial_src(src_path: PathLike) -> bool:
    return ".html" in str(src_path)


def is_sass_src(src_path: PathLike) -> bool:
    return ".scss" in str(src_path)


def is_template_src(src_path: PathLike) -> bool:
    return ".j2" in str(src_path)


# ── Rewrites ────────────────────────────────────────────────────────
# First occurrence only; the roots are expected to prefix the path.

def _swap_root(src_path: PathLike, old_root: PathLike, new_root: PathLike) -> str:
    return str(src_path).replace(str(old_root), str(new_root), 1)


def base_to_brand_src(src_path: PathLike, base_root: PathLike, brand_root: PathLike) -> str:
    return _swap_root(src_path, base_root, brand_root)


def base_to_temp_src(src_path: PathLike, base_root: PathLike, temp_root: PathLike) -> str:
    return _swap_root(src_path, base_root, temp_root)


def brand_to_base_src(src_path: PathLike, brand_root: PathLike, base_root: PathLike) -> str:
    return _swap_root(src_path, brand_root, base_root)


def brand_to_temp_src(src_path: PathLike, brand_root: PathLike, temp_root: PathLike) -> str:
    return _swap_root(src_path, brand_root, temp_root)


# ── I/O primitives ──────────────────────────────────────────────────

def copy(src_path: PathLike, dest_path: PathLike) -> bool:
    """Copy a file if it exists. Returns True when something was copied."""
    if not is_file(src_path):
        return False
    dest = Path(dest_path)
    dest.parent.mkdir(parents=True, exist_ok=True)
    shutil.copyfile(src_path, dest)
    return True

