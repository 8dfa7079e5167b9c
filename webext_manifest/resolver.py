"""Compute which bundle outputs must be web accessible for a chunk to load."""

from __future__ import annotations

import logging

from .bundle import ChunkInfo, OutputBundle

logger = logging.getLogger(__name__)


def collect_web_accessible_files(bundle: OutputBundle, chunk: ChunkInfo) -> set[str]:
    """Return every file ``chunk`` transitively imports that is not an entry point.

    Static and dynamic imports are both followed. Entry chunks are already
    declared by the manifest, so they are walked through but never reported.
    The starting chunk is never part of the result, even when an import cycle
    leads back to it. CSS and assets pulled in by reported chunks are
    reported alongside them.
    """
    visited: set[str] = {chunk.file_name}
    files: set[str] = set()
    pending: list[ChunkInfo] = [chunk]

    while pending:
        current = pending.pop()
        for file_name in current.dependencies:
            if file_name in visited:
                continue
            visited.add(file_name)

            imported = bundle.get(file_name)
            if imported is None:
                logger.debug("Skipping %s imported by %s: not part of the bundle", file_name, current.file_name)
                continue

            if not imported.is_entry:
                files.add(imported.file_name)
                files.update(imported.imported_css)
                files.update(imported.imported_assets)
            pending.append(imported)

    return files
