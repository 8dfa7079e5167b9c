"""Errors raised while turning an extension manifest into a build."""

from __future__ import annotations


class ManifestBuildError(RuntimeError):
    """Base class for failures that abort a manifest build."""


class ResolutionError(ManifestBuildError):
    """Raised when a file referenced by the manifest does not exist on disk."""

    def __init__(self, file_name: str, path: str) -> None:
        super().__init__(f"Manifest references '{file_name}' but {path} does not exist.")
        self.file_name = file_name
        self.path = path


class BuildConsistencyError(ManifestBuildError):
    """Raised when a registered compile input produced no output chunk."""

    def __init__(self, file_name: str, *, field: str | None = None) -> None:
        message = f"Failed to find chunk info for {file_name}"
        if field:
            message += f" (referenced by {field})"
        super().__init__(message)
        self.file_name = file_name
        self.field = field
