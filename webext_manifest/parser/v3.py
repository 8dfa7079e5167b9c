"""Manifest V3: structured web accessible resources and module service workers."""

from __future__ import annotations

import logging
import re
from typing import Any, Iterable, Sequence

from ..bundle import OutputBundle
from ..errors import BuildConsistencyError
from ..loader import service_worker_loader
from ..paths import is_single_html_filename
from .base import InputStage, Manifest, ManifestParser, OutputStage, ParseResult

logger = logging.getLogger(__name__)

ALL_URLS = "<all_urls>"

_PATH_START_RE = re.compile(r"[^:/]/")


def generalize_match_pattern(pattern: str) -> str:
    """Widen the path of a match pattern to ``/*``.

    Compiled chunks live at bundler-chosen paths, so a resource record scoped
    to the content script's page path would not authorize them.
    """
    match = _PATH_START_RE.search(pattern)
    if match is None:
        return pattern
    path = pattern[match.start() + 1 :]
    if path in ("/", "/*"):
        return pattern
    return f"{pattern[: match.start() + 1]}/*"


class ManifestV3Parser(ManifestParser):
    manifest_version = 3

    def get_html_file_names(self, manifest: Manifest) -> list[str]:
        action = manifest.get("action") or {}
        options_ui = manifest.get("options_ui") or {}
        overrides = manifest.get("chrome_url_overrides") or {}
        web_accessible_html = [
            resource
            for record in manifest.get("web_accessible_resources") or []
            for resource in record.get("resources") or []
            if isinstance(resource, str) and is_single_html_filename(resource)
        ]
        candidates = [
            action.get("default_popup"),
            options_ui.get("page"),
            manifest.get("devtools_page"),
            overrides.get("newtab"),
            overrides.get("history"),
            overrides.get("bookmarks"),
            *self.options.extra_html_pages,
            *web_accessible_html,
        ]
        return [file_name for file_name in candidates if isinstance(file_name, str)]

    def get_parse_input_methods(self) -> list[InputStage]:
        return [self.parse_input_background_service_worker, self.parse_input_web_accessible_scripts]

    def get_parse_output_methods(self) -> list[OutputStage]:
        return [self.parse_output_service_worker]

    def parse_input_background_service_worker(self, result: ParseResult) -> ParseResult:
        background = result.manifest.get("background")
        if not background or not background.get("service_worker"):
            return result

        self.add_input_script(result, background["service_worker"])
        background["type"] = "module"
        return result

    def parse_input_web_accessible_scripts(self, result: ParseResult) -> ParseResult:
        for record in result.manifest.get("web_accessible_resources") or []:
            for resource in record.get("resources") or []:
                self.add_web_accessible_input(result, resource)
        return result

    def expose_content_script_files(
        self,
        result: ParseResult,
        script: dict[str, Any],
        files: set[str],
    ) -> None:
        matches = script.get("matches")
        if not matches:
            logger.debug("Content script %s declares no matches; exposing to %s", script.get("js"), ALL_URLS)
            matches = [ALL_URLS]

        use_dynamic_url = True if self.options.use_dynamic_url_content_scripts else None
        self.append_web_accessible_resource(
            result,
            files,
            matches=[generalize_match_pattern(pattern) for pattern in matches],
            use_dynamic_url=use_dynamic_url,
        )

    async def parse_output_web_accessible_scripts(
        self,
        result: ParseResult,
        bundle: OutputBundle,
    ) -> ParseResult:
        records = result.manifest.get("web_accessible_resources")
        if not records:
            return result

        for record in list(records):
            resources = record.get("resources")
            if not resources:
                continue

            for index, file_name in enumerate(list(resources)):
                parsed = self.parse_output_web_accessible_resource(file_name, result, bundle)
                if parsed is None:
                    continue
                resources[index] = parsed.script_file_name
                if parsed.web_accessible_files:
                    self.append_web_accessible_resource(
                        result,
                        parsed.web_accessible_files,
                        matches=record.get("matches"),
                        extension_ids=record.get("extension_ids"),
                        use_dynamic_url=record.get("use_dynamic_url"),
                    )
        return result

    async def parse_output_service_worker(
        self,
        result: ParseResult,
        bundle: OutputBundle,
    ) -> ParseResult:
        background = result.manifest.get("background")
        service_worker = background.get("service_worker") if background else None
        if not service_worker:
            return result

        if any(emitted.file_name == service_worker for emitted in result.emit_files):
            return result

        chunk = bundle.find_chunk(service_worker)
        if chunk is None:
            raise BuildConsistencyError(service_worker, field="background.service_worker")

        loader = service_worker_loader(chunk.file_name)
        background["service_worker"] = loader.file_name
        result.add_emit_file(loader.file_name, loader.source)
        return result

    def append_web_accessible_resource(
        self,
        result: ParseResult,
        files: Iterable[str],
        *,
        matches: Sequence[str] | None = None,
        extension_ids: Sequence[str] | None = None,
        use_dynamic_url: bool | None = None,
    ) -> None:
        """Append a resource record for ``files`` not already exposed with the same scope."""
        records: list[dict[str, Any]] = result.manifest.setdefault("web_accessible_resources", [])

        scope = _scope(matches, extension_ids, use_dynamic_url)
        exposed: set[str] = set()
        for record in records:
            if _scope(record.get("matches"), record.get("extension_ids"), record.get("use_dynamic_url")) == scope:
                exposed.update(record.get("resources") or [])

        resources = sorted(set(files) - exposed)
        if not resources:
            return

        record: dict[str, Any] = {"resources": resources}
        if matches is not None:
            record["matches"] = list(matches)
        if extension_ids is not None:
            record["extension_ids"] = list(extension_ids)
        if use_dynamic_url is not None:
            record["use_dynamic_url"] = use_dynamic_url
        records.append(record)


def _scope(
    matches: Sequence[str] | None,
    extension_ids: Sequence[str] | None,
    use_dynamic_url: bool | None,
) -> tuple[tuple[str, ...], tuple[str, ...], bool]:
    return (tuple(matches or ()), tuple(extension_ids or ()), bool(use_dynamic_url))
