"""Boundary for the development-mode build collaborator."""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable, Protocol, Sequence

if TYPE_CHECKING:
    from .parser.base import ManifestParser


class DevBuilder(Protocol):
    """Lifecycle hooks for serving unbundled sources during development.

    One implementation exists per manifest schema generation; the parser only
    calls these hooks and never inspects the implementation.
    """

    def enable(self, dev_server_port: int, manifest_html_files: Sequence[str]) -> None:
        ...

    def disable(self) -> None:
        ...


DevBuilderFactory = Callable[["ManifestParser"], DevBuilder]
