from __future__ import annotations

import re
from pathlib import Path

import pytest

from webext_manifest.errors import ResolutionError
from webext_manifest.filters import ScriptFilter
from webext_manifest.paths import (
    ProjectPaths,
    is_glob,
    is_single_html_filename,
    normalized_file_name,
    output_file_name,
)


def test_normalized_and_output_names_are_stable() -> None:
    assert normalized_file_name("./src/content.ts") == "src/content.ts"
    assert normalized_file_name("/src/content.ts") == "src/content.ts"
    assert normalized_file_name("src\\content.ts") == "src/content.ts"
    assert output_file_name("src/popup/index.html") == "src/popup/index"
    assert output_file_name("background.ts") == "background"


def test_html_and_glob_detection() -> None:
    assert is_single_html_filename("src/popup.html")
    assert not is_single_html_filename("pages/*.html")
    assert not is_single_html_filename("src/popup.ts")
    assert is_glob("icons/*.png")
    assert not is_glob("icons/logo.png")


def test_project_paths_resolve_existing_files(tmp_path: Path) -> None:
    (tmp_path / "src").mkdir()
    (tmp_path / "src" / "content.ts").write_text("", encoding="utf-8")
    paths = ProjectPaths(tmp_path)

    assert paths.input_file_name("src/content.ts") == (tmp_path.resolve() / "src/content.ts").as_posix()
    assert paths.output_file_name("src/content.ts") == "src/content"

    with pytest.raises(ResolutionError) as excinfo:
        paths.input_file_name("src/missing.ts")
    assert "src/missing.ts" in str(excinfo.value)


def test_default_filter_accepts_script_extensions() -> None:
    accept = ScriptFilter()

    for name in ("a.js", "b.mjs", "c.cjs", "src/d.ts"):
        assert accept(name), name
    for name in ("popup.html", "style.css", "logo.png", "types.d.tsx"):
        assert not accept(name), name


def test_filter_include_and_exclude_patterns() -> None:
    accept = ScriptFilter(include=["scripts/*.js", re.compile(r"\.ts$")], exclude=["*.min.js"])

    assert accept("scripts/inject.js")
    assert accept("src/inject.ts")
    assert not accept("scripts/vendor.min.js")
    assert not accept("other/inject.js")
