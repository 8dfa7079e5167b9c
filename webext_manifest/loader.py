"""Loader module emitted in front of the compiled service worker."""

from __future__ import annotations

from dataclasses import dataclass

SERVICE_WORKER_LOADER_FILE_NAME = "serviceWorker.js"


@dataclass(frozen=True, slots=True)
class ServiceWorkerLoader:
    file_name: str
    source: str


def service_worker_loader(chunk_file_name: str) -> ServiceWorkerLoader:
    """Build a module whose only job is to import the compiled service worker chunk."""
    return ServiceWorkerLoader(
        file_name=SERVICE_WORKER_LOADER_FILE_NAME,
        source=f'import "/{chunk_file_name.lstrip("/")}";\n',
    )
