"""Manifest V2: flat web accessible resources and page-based backgrounds."""

from __future__ import annotations

from typing import Any

from ..bundle import OutputBundle
from ..paths import is_single_html_filename
from .base import InputStage, Manifest, ManifestParser, OutputStage, ParseResult, unique


class ManifestV2Parser(ManifestParser):
    manifest_version = 2

    def get_html_file_names(self, manifest: Manifest) -> list[str]:
        background = manifest.get("background") or {}
        browser_action = manifest.get("browser_action") or {}
        options_ui = manifest.get("options_ui") or {}
        overrides = manifest.get("chrome_url_overrides") or {}
        candidates = [
            background.get("page"),
            browser_action.get("default_popup"),
            options_ui.get("page"),
            manifest.get("devtools_page"),
            overrides.get("newtab"),
            overrides.get("history"),
            overrides.get("bookmarks"),
            *self.options.extra_html_pages,
            *(
                resource
                for resource in manifest.get("web_accessible_resources") or []
                if isinstance(resource, str) and is_single_html_filename(resource)
            ),
        ]
        return [file_name for file_name in candidates if isinstance(file_name, str)]

    def get_parse_input_methods(self) -> list[InputStage]:
        return [self.parse_input_web_accessible_scripts]

    def get_parse_output_methods(self) -> list[OutputStage]:
        return [self.parse_watch_mode_support]

    def parse_input_web_accessible_scripts(self, result: ParseResult) -> ParseResult:
        for resource in result.manifest.get("web_accessible_resources") or []:
            self.add_web_accessible_input(result, resource)
        return result

    def expose_content_script_files(
        self,
        result: ParseResult,
        script: dict[str, Any],
        files: set[str],
    ) -> None:
        resources = result.manifest.get("web_accessible_resources") or []
        result.manifest["web_accessible_resources"] = unique([*resources, *sorted(files)])

    async def parse_output_web_accessible_scripts(
        self,
        result: ParseResult,
        bundle: OutputBundle,
    ) -> ParseResult:
        resources = result.manifest.get("web_accessible_resources")
        if not resources:
            return result

        merged = list(resources)
        for index, resource in enumerate(resources):
            parsed = self.parse_output_web_accessible_resource(resource, result, bundle)
            if parsed is None:
                continue
            merged[index] = parsed.script_file_name
            merged.extend(sorted(parsed.web_accessible_files))

        result.manifest["web_accessible_resources"] = unique(merged)
        return result

    async def parse_watch_mode_support(
        self,
        result: ParseResult,
        bundle: OutputBundle,
    ) -> ParseResult:
        """Reserved hook for widening resource exposure during watch rebuilds.

        Browsers that do not re-read the manifest on reload (Firefox) would
        need every script exposed for live reload to keep working. No
        mutation happens here; the stage keeps its slot in the output phase.
        """
        return result
