"""Two-phase manifest parser shared by both manifest schema generations.

The input phase walks the manifest for every file the bundler has to
compile. The output phase runs after compilation and rewrites the manifest so
it references compiled file names, exposing split-out chunks as web
accessible resources where a content script or page-injected module needs
them.
"""

from __future__ import annotations

import copy
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, ClassVar, Iterable

from ..bundle import OutputBundle
from ..config import PluginOptions
from ..devbuilder import DevBuilder, DevBuilderFactory
from ..errors import BuildConsistencyError
from ..paths import PathResolver, ProjectPaths, is_glob
from ..resolver import collect_web_accessible_files

logger = logging.getLogger(__name__)

Manifest = dict[str, Any]


@dataclass(frozen=True, slots=True)
class EmittedFile:
    """Extra asset added to the build output."""

    file_name: str
    source: str


@dataclass
class ParseResult:
    """Accumulator threaded through every parse stage of one build."""

    manifest: Manifest
    input_scripts: list[tuple[str, str]] = field(default_factory=list)
    emit_files: list[EmittedFile] = field(default_factory=list)

    def add_input_script(self, output_file: str, input_file: str) -> None:
        entry = (output_file, input_file)
        if entry in self.input_scripts:
            return
        for existing_output, existing_input in self.input_scripts:
            if existing_output == output_file:
                logger.warning(
                    "Output name %s is shared by %s and %s; the bundler input map keeps only the last one",
                    output_file,
                    existing_input,
                    input_file,
                )
                break
        self.input_scripts.append(entry)

    def add_emit_file(self, file_name: str, source: str) -> None:
        self.emit_files = [emitted for emitted in self.emit_files if emitted.file_name != file_name]
        self.emit_files.append(EmittedFile(file_name=file_name, source=source))

    def rollup_input(self) -> dict[str, str]:
        """Compile inputs keyed by output name, in registration order."""
        return {output_file: input_file for output_file, input_file in self.input_scripts}


@dataclass(slots=True)
class ParsedScript:
    """Compiled name of a manifest script and the files it needs exposed."""

    script_file_name: str
    web_accessible_files: set[str] = field(default_factory=set)
    css_file_names: tuple[str, ...] = ()


InputStage = Callable[[ParseResult], ParseResult]
OutputStage = Callable[[ParseResult, OutputBundle], Awaitable[ParseResult]]


class ManifestParser(ABC):
    """Schema-independent driver for the input and output phases.

    Concrete parsers describe where their schema keeps HTML pages, which
    extra stages run in each phase, and how web accessible resources are
    shaped. A parser instance belongs to exactly one build.
    """

    manifest_version: ClassVar[int]

    def __init__(
        self,
        options: PluginOptions,
        *,
        paths: PathResolver | None = None,
        dev_builder_factory: DevBuilderFactory | None = None,
    ) -> None:
        self.options = options
        self.paths: PathResolver = paths or ProjectPaths(options.root)
        self.input_manifest: Manifest = copy.deepcopy(options.manifest)
        self.extra_content_scripts: list[dict[str, Any]] = [
            script.to_manifest() for script in options.extra_content_scripts
        ]
        self.web_accessible_scripts_filter = options.web_accessible_scripts.build_filter()
        self._dev_builder_factory = dev_builder_factory
        self._dev_builder: DevBuilder | None = None

    @abstractmethod
    def get_html_file_names(self, manifest: Manifest) -> list[str]:
        """HTML pages declared by ``manifest`` that must be compiled."""

    @abstractmethod
    def get_parse_input_methods(self) -> list[InputStage]:
        ...

    @abstractmethod
    def get_parse_output_methods(self) -> list[OutputStage]:
        ...

    @abstractmethod
    def expose_content_script_files(
        self,
        result: ParseResult,
        script: dict[str, Any],
        files: set[str],
    ) -> None:
        """Make ``files`` needed by ``script`` web accessible."""

    @abstractmethod
    async def parse_output_web_accessible_scripts(
        self,
        result: ParseResult,
        bundle: OutputBundle,
    ) -> ParseResult:
        ...

    def input_stages(self) -> list[InputStage]:
        return [
            self.parse_input_html_files,
            *self.get_parse_input_methods(),
            self.parse_input_content_scripts,
        ]

    def output_stages(self) -> list[OutputStage]:
        return [
            *self.get_parse_output_methods(),
            self.parse_output_content_scripts,
            self.parse_output_web_accessible_scripts,
        ]

    def parse_input(self) -> ParseResult:
        """Collect every file referenced by the manifest as a compile input."""
        result = ParseResult(manifest=self.input_manifest)
        for stage in self.input_stages():
            result = stage(result)
        logger.info(
            "Manifest V%s input: %d script(s) to compile",
            self.manifest_version,
            len(result.input_scripts),
        )
        return result

    async def parse_output(self, bundle: OutputBundle, result: ParseResult | None = None) -> ParseResult:
        """Rewrite the manifest against the compiled ``bundle``.

        Stages run strictly in order; later stages depend on file names
        rewritten by earlier ones. Passing ``result`` re-runs the stages on an
        existing accumulator.
        """
        if result is None:
            result = ParseResult(manifest=self.input_manifest)
        for stage in self.output_stages():
            result = await stage(result, bundle)
        logger.info(
            "Manifest V%s output: %d emitted file(s)",
            self.manifest_version,
            len(result.emit_files),
        )
        return result

    def manifest_html_files(self) -> list[str]:
        return self.get_html_file_names(self.input_manifest)

    def start_dev_build(self, dev_server_port: int) -> None:
        if self._dev_builder_factory is None:
            raise RuntimeError("No dev builder configured for this parser.")
        self._dev_builder = self._dev_builder_factory(self)
        self._dev_builder.enable(dev_server_port, self.manifest_html_files())

    def stop_dev_build(self) -> None:
        if self._dev_builder is None:
            return
        self._dev_builder.disable()
        self._dev_builder = None

    def parse_input_html_files(self, result: ParseResult) -> ParseResult:
        for file_name in self.get_html_file_names(result.manifest):
            self.add_input_script(result, file_name)
        return result

    def parse_input_content_scripts(self, result: ParseResult) -> ParseResult:
        for script in self.all_content_scripts(result):
            for file_name in script.get("js") or []:
                self.add_input_script(result, file_name)
            for file_name in script.get("css") or []:
                self.add_input_script(result, file_name)
        return result

    def add_input_script(self, result: ParseResult, file_name: str) -> None:
        input_file = self.paths.input_file_name(file_name)
        output_file = self.paths.output_file_name(file_name)
        result.add_input_script(output_file, input_file)

    def add_web_accessible_input(self, result: ParseResult, resource: str) -> None:
        if not self.is_web_accessible_script(resource):
            logger.debug("Not compiling web accessible resource %s", resource)
            return
        self.add_input_script(result, resource)

    def get_content_scripts(self, result: ParseResult) -> list[dict[str, Any]]:
        return list(result.manifest.get("content_scripts") or [])

    def all_content_scripts(self, result: ParseResult) -> list[dict[str, Any]]:
        """Manifest content scripts followed by configured extra content scripts."""
        return [*self.get_content_scripts(result), *self.extra_content_scripts]

    async def parse_output_content_scripts(self, result: ParseResult, bundle: OutputBundle) -> ParseResult:
        for script in self.all_content_scripts(result):
            css = script.get("css")
            if css:
                for index, file_name in enumerate(css):
                    css[index] = self._parse_output_style(file_name, bundle)

            js = script.get("js")
            if not js:
                continue
            for index, file_name in enumerate(js):
                parsed = self.parse_output_content_script(file_name, result, bundle)
                js[index] = parsed.script_file_name
                if parsed.css_file_names:
                    script["css"] = unique([*(script.get("css") or []), *parsed.css_file_names])
                if parsed.web_accessible_files:
                    self.expose_content_script_files(result, script, parsed.web_accessible_files)
        return result

    def parse_output_content_script(
        self,
        script_file_name: str,
        result: ParseResult,
        bundle: OutputBundle,
    ) -> ParsedScript:
        return self._parse_output_script(script_file_name, bundle, manifest_field="content_scripts")

    def parse_output_web_accessible_script(
        self,
        file_name: str,
        result: ParseResult,
        bundle: OutputBundle,
    ) -> ParsedScript:
        return self._parse_output_script(file_name, bundle, manifest_field="web_accessible_resources")

    def parse_output_web_accessible_resource(
        self,
        file_name: str,
        result: ParseResult,
        bundle: OutputBundle,
    ) -> ParsedScript | None:
        """Parse ``file_name`` if it is an eligible script; ``None`` leaves it untouched."""
        if not self.is_web_accessible_script(file_name):
            logger.debug("Passing web accessible resource %s through unchanged", file_name)
            return None
        return self.parse_output_web_accessible_script(file_name, result, bundle)

    def is_web_accessible_script(self, file_name: str) -> bool:
        return not is_glob(file_name) and self.web_accessible_scripts_filter(file_name)

    def _parse_output_script(self, file_name: str, bundle: OutputBundle, *, manifest_field: str) -> ParsedScript:
        chunk = bundle.find_chunk(file_name)
        if chunk is None:
            raise BuildConsistencyError(file_name, field=manifest_field)

        files = collect_web_accessible_files(bundle, chunk)
        files.update(chunk.imported_assets)
        if files:
            logger.debug("%s needs %d web accessible file(s)", chunk.file_name, len(files))
        return ParsedScript(
            script_file_name=chunk.file_name,
            web_accessible_files=files,
            css_file_names=chunk.imported_css,
        )

    def _parse_output_style(self, file_name: str, bundle: OutputBundle) -> str:
        """Compiled name of a content script stylesheet."""
        if any(file_name in chunk.imported_css for chunk in bundle.chunks()):
            return file_name
        asset = bundle.find_asset(file_name)
        if asset is None:
            raise BuildConsistencyError(file_name, field="content_scripts")
        return asset.file_name


def unique(items: Iterable[str]) -> list[str]:
    """Drop repeated entries, keeping first-seen order."""
    return list(dict.fromkeys(items))
