"""Read-only view over a bundler's completed output."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Iterable, Iterator, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field

from .paths import normalized_file_name

logger = logging.getLogger(__name__)

SCRIPT_SUFFIXES = (".js", ".mjs", ".cjs")


class ChunkInfo(BaseModel):
    """One compiled script chunk and its edges to other chunks."""

    model_config = ConfigDict(frozen=True)

    file_name: str = Field(description="Output path relative to the build directory.")
    name: Optional[str] = Field(default=None)
    facade_module_id: Optional[str] = Field(
        default=None, description="Input module the chunk was compiled from, for entry chunks."
    )
    modules: tuple[str, ...] = Field(default_factory=tuple)
    imports: tuple[str, ...] = Field(default_factory=tuple, description="Statically imported chunk file names.")
    dynamic_imports: tuple[str, ...] = Field(default_factory=tuple)
    imported_css: tuple[str, ...] = Field(default_factory=tuple)
    imported_assets: tuple[str, ...] = Field(default_factory=tuple)
    is_entry: bool = Field(default=False)
    is_dynamic_entry: bool = Field(default=False)

    @property
    def dependencies(self) -> tuple[str, ...]:
        return self.imports + self.dynamic_imports


class AssetInfo(BaseModel):
    """A non-script output file such as compiled CSS."""

    model_config = ConfigDict(frozen=True)

    file_name: str
    source_name: Optional[str] = Field(default=None)


class OutputBundle:
    """Index of compiled chunks and assets keyed by output file name."""

    def __init__(self, chunks: Iterable[ChunkInfo] = (), assets: Iterable[AssetInfo] = ()) -> None:
        self._chunks: dict[str, ChunkInfo] = {chunk.file_name: chunk for chunk in chunks}
        self._assets: dict[str, AssetInfo] = {asset.file_name: asset for asset in assets}

    def __len__(self) -> int:
        return len(self._chunks)

    def __contains__(self, file_name: object) -> bool:
        return file_name in self._chunks

    def chunks(self) -> Iterator[ChunkInfo]:
        return iter(self._chunks.values())

    def assets(self) -> Iterator[AssetInfo]:
        return iter(self._assets.values())

    def get(self, file_name: str) -> ChunkInfo | None:
        return self._chunks.get(file_name)

    def find_chunk(self, name: str) -> ChunkInfo | None:
        """Return the chunk compiled from, or written to, ``name``."""
        wanted = normalized_file_name(name)
        wanted_stem = normalized_file_name(name, include_ext=False)
        for chunk in self._chunks.values():
            if chunk.facade_module_id and _is_path_suffix(chunk.facade_module_id, wanted):
                return chunk
        for chunk in self._chunks.values():
            if _is_path_suffix(chunk.file_name, wanted):
                return chunk
        for chunk in self._chunks.values():
            if chunk.facade_module_id and _is_path_suffix(_strip_ext(chunk.facade_module_id), wanted_stem):
                return chunk
        return None

    def find_asset(self, name: str) -> AssetInfo | None:
        wanted = normalized_file_name(name)
        for asset in self._assets.values():
            if asset.source_name and _is_path_suffix(asset.source_name, wanted):
                return asset
            if _is_path_suffix(asset.file_name, wanted):
                return asset
        return None


def load_vite_manifest(path: str | Path, root: str | Path | None = None) -> OutputBundle:
    """Build an :class:`OutputBundle` from a Vite ``build.manifest`` file.

    Manifest keys are source paths relative to ``root`` (defaults to the
    directory above the build output). Import lists reference other keys and
    are translated to output file names.
    """
    manifest_path = Path(path)
    with manifest_path.open("r", encoding="utf-8") as handle:
        payload: Mapping[str, Mapping[str, Any]] = json.load(handle)

    if not isinstance(payload, Mapping):
        raise ValueError(f"{manifest_path}: expected a JSON object of chunks")

    base = Path(root).resolve() if root is not None else None
    key_to_file = {key: entry["file"] for key, entry in payload.items() if "file" in entry}

    def _files(keys: Iterable[str]) -> tuple[str, ...]:
        return tuple(key_to_file.get(key, key) for key in keys)

    chunks: list[ChunkInfo] = []
    assets: list[AssetInfo] = []
    for key, entry in payload.items():
        file_name = entry.get("file")
        if not file_name:
            continue
        source = entry.get("src")
        if not file_name.endswith(SCRIPT_SUFFIXES):
            assets.append(AssetInfo(file_name=file_name, source_name=source or key))
            continue

        facade = None
        if source and (entry.get("isEntry") or entry.get("isDynamicEntry")):
            facade = (base / source).as_posix() if base is not None else source
        chunks.append(
            ChunkInfo(
                file_name=file_name,
                name=entry.get("name"),
                facade_module_id=facade,
                modules=(source,) if source else (),
                imports=_files(entry.get("imports") or ()),
                dynamic_imports=_files(entry.get("dynamicImports") or ()),
                imported_css=tuple(entry.get("css") or ()),
                imported_assets=tuple(entry.get("assets") or ()),
                is_entry=bool(entry.get("isEntry")),
                is_dynamic_entry=bool(entry.get("isDynamicEntry")),
            )
        )

    logger.debug("Loaded %d chunk(s) and %d asset(s) from %s", len(chunks), len(assets), manifest_path)
    return OutputBundle(chunks, assets)


def _is_path_suffix(candidate: str, wanted: str) -> bool:
    if not wanted:
        return False
    candidate = candidate.replace("\\", "/")
    return candidate == wanted or candidate.endswith(f"/{wanted}")


def _strip_ext(file_name: str) -> str:
    head, dot, tail = file_name.rpartition(".")
    if not dot or "/" in tail:
        return file_name
    return head
