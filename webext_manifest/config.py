"""Plugin options recognized by the manifest build."""

from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from .filters import ScriptFilter


class ContentScript(BaseModel):
    """Content script declaration using the manifest's own field names."""

    model_config = ConfigDict(extra="allow")

    matches: Optional[list[str]] = Field(default=None)
    exclude_matches: Optional[list[str]] = Field(default=None)
    css: Optional[list[str]] = Field(default=None)
    js: Optional[list[str]] = Field(default=None)
    run_at: Optional[str] = Field(default=None)
    all_frames: Optional[bool] = Field(default=None)
    match_about_blank: Optional[bool] = Field(default=None)
    include_globs: Optional[list[str]] = Field(default=None)
    exclude_globs: Optional[list[str]] = Field(default=None)

    def to_manifest(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


class WebAccessibleScriptsOptions(BaseModel):
    """Filter deciding which web-accessible resources are compiled and walked.

    Strings are glob patterns; compiled regular expressions are also accepted
    when options are built from Python.
    """

    include: Optional[list[Any]] = Field(
        default=None,
        description="Patterns a resource must match. Defaults to .js/.mjs/.cjs/.ts files.",
    )
    exclude: Optional[list[Any]] = Field(default=None)

    @field_validator("include", "exclude", mode="before")
    def _ensure_list(cls, value: Any) -> list[Any] | None:
        if value is None or value == "":
            return None
        if isinstance(value, (str, re.Pattern)):
            value = [value]
        patterns = list(value)
        for pattern in patterns:
            if not isinstance(pattern, (str, re.Pattern)):
                raise ValueError("Filter patterns must be glob strings or compiled regular expressions.")
        return patterns

    def build_filter(self) -> ScriptFilter:
        return ScriptFilter(self.include, self.exclude)


class PluginOptions(BaseModel):
    """Options for a single manifest build."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    manifest: dict[str, Any] = Field(description="Base manifest to transform.")
    root: Path = Field(default=Path("."), description="Directory manifest paths are relative to.")
    extra_content_scripts: list[ContentScript] = Field(
        default_factory=list,
        description="Scripts compiled like content scripts but injected programmatically.",
    )
    extra_html_pages: list[str] = Field(default_factory=list)
    use_dynamic_url_content_scripts: bool = Field(
        default=True,
        description="Set use_dynamic_url on web accessible resources generated for content scripts.",
    )
    web_accessible_scripts: WebAccessibleScriptsOptions = Field(default_factory=WebAccessibleScriptsOptions)

    @field_validator("root", mode="before")
    def _ensure_path(cls, value: Any) -> Path:
        return Path(value)

    @field_validator("manifest")
    def _require_version(cls, value: dict[str, Any]) -> dict[str, Any]:
        if "manifest_version" not in value:
            raise ValueError("manifest must declare manifest_version")
        return value

    @property
    def manifest_version(self) -> int:
        return int(self.manifest["manifest_version"])


def load_options(path: str | Path) -> PluginOptions:
    """Load plugin options from a YAML or JSON file.

    ``manifest`` may be an inline mapping or a path to a ``manifest.json``
    file. Relative paths (``root`` and a manifest path) are interpreted
    relative to the directory holding the options file; ``root`` defaults to
    that directory.
    """
    config_path = Path(path)
    if not config_path.is_file():
        raise FileNotFoundError(config_path)

    with config_path.open("r", encoding="utf-8") as handle:
        data: dict[str, Any] = yaml.safe_load(handle) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{config_path}: options must be a mapping")

    base_dir = config_path.parent.resolve()

    def _abs(value: str | Path) -> Path:
        candidate = Path(value)
        return candidate if candidate.is_absolute() else (base_dir / candidate).resolve()

    manifest = data.get("manifest")
    if isinstance(manifest, (str, Path)):
        manifest_path = _abs(manifest)
        with manifest_path.open("r", encoding="utf-8") as handle:
            data["manifest"] = json.load(handle)

    data["root"] = _abs(data.get("root") or ".")

    try:
        return PluginOptions.model_validate(data)
    except ValidationError as exc:
        raise ValueError(f"{config_path}: {exc}") from exc
