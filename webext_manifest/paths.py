"""Path helpers mapping manifest references to bundler inputs and outputs."""

from __future__ import annotations

import posixpath
import re
from pathlib import Path
from typing import Protocol

from .errors import ResolutionError

_SINGLE_HTML_RE = re.compile(r"[^*]+\.html$")


def normalized_file_name(file_name: str, include_ext: bool = True) -> str:
    """Normalize a manifest-relative reference to a POSIX path without a leading slash."""
    text = posixpath.normpath(file_name.replace("\\", "/"))
    text = text.lstrip("/")
    if text == ".":
        text = ""
    if include_ext:
        return text
    root, _ext = posixpath.splitext(text)
    return root


def output_file_name(file_name: str) -> str:
    """Deterministic output key for a manifest reference (extension stripped)."""
    return normalized_file_name(file_name, include_ext=False)


def is_single_html_filename(file_name: str) -> bool:
    return bool(_SINGLE_HTML_RE.fullmatch(file_name))


def is_glob(file_name: str) -> bool:
    return "*" in file_name


class PathResolver(Protocol):
    """Maps manifest references to absolute inputs and deterministic output names."""

    def input_file_name(self, file_name: str) -> str:
        ...

    def output_file_name(self, file_name: str) -> str:
        ...


class ProjectPaths:
    """Resolve manifest-relative references against the project root."""

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root).resolve()

    def input_file_name(self, file_name: str) -> str:
        candidate = self.root / normalized_file_name(file_name)
        if not candidate.is_file():
            raise ResolutionError(file_name, str(candidate))
        return candidate.as_posix()

    def output_file_name(self, file_name: str) -> str:
        return output_file_name(file_name)
