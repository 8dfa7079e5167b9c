"""Manifest parsers for both extension manifest schema generations."""

from __future__ import annotations

from ..config import PluginOptions
from ..devbuilder import DevBuilderFactory
from ..paths import PathResolver
from .base import EmittedFile, ManifestParser, ParsedScript, ParseResult
from .v2 import ManifestV2Parser
from .v3 import ManifestV3Parser, generalize_match_pattern

PARSERS: dict[int, type[ManifestParser]] = {
    ManifestV2Parser.manifest_version: ManifestV2Parser,
    ManifestV3Parser.manifest_version: ManifestV3Parser,
}


def create_manifest_parser(
    options: PluginOptions,
    *,
    paths: PathResolver | None = None,
    dev_builder_factory: DevBuilderFactory | None = None,
) -> ManifestParser:
    """Pick the parser matching the manifest's declared ``manifest_version``."""
    version = options.manifest_version
    try:
        parser_cls = PARSERS[version]
    except KeyError:
        raise ValueError(f"Unsupported manifest_version: {version}") from None
    return parser_cls(options, paths=paths, dev_builder_factory=dev_builder_factory)


__all__ = [
    "EmittedFile",
    "ManifestParser",
    "ManifestV2Parser",
    "ManifestV3Parser",
    "ParseResult",
    "ParsedScript",
    "create_manifest_parser",
    "generalize_match_pattern",
]
