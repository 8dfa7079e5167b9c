"""Persist a parsed manifest and its emitted assets."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from .parser import ParseResult

logger = logging.getLogger(__name__)

MANIFEST_FILENAME = "manifest.json"


def render_manifest(result: ParseResult) -> str:
    return json.dumps(result.manifest, ensure_ascii=False, indent=2) + "\n"


def write_build(result: ParseResult, destination: Path) -> list[Path]:
    """Write ``manifest.json`` and every emitted file beneath ``destination``."""
    destination.mkdir(parents=True, exist_ok=True)
    written: list[Path] = []

    for emitted in result.emit_files:
        path = destination / emitted.file_name.lstrip("/")
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(emitted.source, encoding="utf-8")
        written.append(path)

    manifest_path = destination / MANIFEST_FILENAME
    manifest_path.write_text(render_manifest(result), encoding="utf-8")
    written.append(manifest_path)

    logger.info("Wrote %d file(s) to %s", len(written), destination)
    return written
