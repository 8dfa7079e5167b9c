from __future__ import annotations

import logging
from pathlib import Path
from typing import Sequence

import pytest

from webext_manifest.config import PluginOptions
from webext_manifest.parser import (
    ManifestParser,
    ManifestV2Parser,
    ManifestV3Parser,
    ParseResult,
    create_manifest_parser,
)


class RecordingDevBuilder:
    def __init__(self, parser: ManifestParser) -> None:
        self.parser = parser
        self.calls: list[tuple[str, object]] = []

    def enable(self, dev_server_port: int, manifest_html_files: Sequence[str]) -> None:
        self.calls.append(("enable", (dev_server_port, list(manifest_html_files))))

    def disable(self) -> None:
        self.calls.append(("disable", None))


def _options(version: int, **fields: object) -> PluginOptions:
    return PluginOptions(manifest={"manifest_version": version, **fields}, root=Path("."))


def test_parser_is_selected_by_manifest_version() -> None:
    assert isinstance(create_manifest_parser(_options(2)), ManifestV2Parser)
    assert isinstance(create_manifest_parser(_options(3)), ManifestV3Parser)


def test_unsupported_manifest_version_is_rejected() -> None:
    with pytest.raises(ValueError, match="Unsupported manifest_version: 4"):
        create_manifest_parser(_options(4))


def test_separate_parsers_do_not_share_manifest_state() -> None:
    options = _options(3, background={"service_worker": "sw.ts"})
    first = create_manifest_parser(options)
    second = create_manifest_parser(options)

    first.input_manifest["background"]["type"] = "module"

    assert "type" not in second.input_manifest["background"]
    assert "type" not in options.manifest["background"]


def test_parse_result_tracks_inputs_and_emitted_files() -> None:
    result = ParseResult(manifest={})
    result.add_input_script("src/content", "/project/src/content.ts")
    result.add_input_script("src/content", "/project/src/content.ts")
    result.add_emit_file("loader.js", "old")
    result.add_emit_file("loader.js", "new")

    assert result.rollup_input() == {"src/content": "/project/src/content.ts"}
    assert [(emitted.file_name, emitted.source) for emitted in result.emit_files] == [("loader.js", "new")]


def test_dev_builder_hooks_receive_manifest_html_files() -> None:
    builders: list[RecordingDevBuilder] = []

    def factory(parser: ManifestParser) -> RecordingDevBuilder:
        builder = RecordingDevBuilder(parser)
        builders.append(builder)
        return builder

    options = _options(3, action={"default_popup": "src/popup.html"})
    parser = create_manifest_parser(options, dev_builder_factory=factory)

    parser.start_dev_build(5173)
    parser.stop_dev_build()
    parser.stop_dev_build()

    assert len(builders) == 1
    assert builders[0].parser is parser
    assert builders[0].calls == [("enable", (5173, ["src/popup.html"])), ("disable", None)]


def test_dev_build_requires_a_factory() -> None:
    parser = create_manifest_parser(_options(2))

    with pytest.raises(RuntimeError):
        parser.start_dev_build(5173)


def test_parse_result_warns_when_inputs_share_an_output_name(caplog: pytest.LogCaptureFixture) -> None:
    result = ParseResult(manifest={})

    with caplog.at_level(logging.WARNING, logger="webext_manifest.parser.base"):
        result.add_input_script("src/content", "/project/src/content.ts")
        result.add_input_script("src/content", "/project/src/content.ts")
        assert not caplog.records
        result.add_input_script("src/content", "/project/src/content.css")

    assert len(result.input_scripts) == 2
    assert "src/content" in caplog.text
    assert "/project/src/content.css" in caplog.text
