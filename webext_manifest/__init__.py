"""Turn a browser extension manifest and bundler output into a loadable build."""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version as load_pkg_version
from pathlib import Path
import tomllib

from .bundle import ChunkInfo, OutputBundle, load_vite_manifest
from .config import PluginOptions, load_options
from .errors import BuildConsistencyError, ManifestBuildError, ResolutionError
from .parser import ManifestParser, ParseResult, create_manifest_parser

__all__ = [
    "BuildConsistencyError",
    "ChunkInfo",
    "ManifestBuildError",
    "ManifestParser",
    "OutputBundle",
    "ParseResult",
    "PluginOptions",
    "ResolutionError",
    "__version__",
    "create_manifest_parser",
    "load_options",
    "load_vite_manifest",
]


def _read_local_project_version() -> str:
    """Read the project version from pyproject.toml when the package is uninstalled."""
    pyproject = Path(__file__).resolve().parent.parent / "pyproject.toml"
    try:
        data = tomllib.loads(pyproject.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return "0.0.0"
    return data.get("project", {}).get("version", "0.0.0")


try:
    __version__ = load_pkg_version("webext-manifest")
except PackageNotFoundError:
    __version__ = _read_local_project_version()
