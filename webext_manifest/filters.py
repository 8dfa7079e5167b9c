"""Include/exclude predicate deciding which web-accessible files are scripts."""

from __future__ import annotations

import re
from pathlib import PurePosixPath
from typing import Iterable, Pattern, Union

FilterPattern = Union[str, Pattern[str]]

DEFAULT_INCLUDE: tuple[FilterPattern, ...] = (re.compile(r"\.([cem]?js|ts)$"),)


class ScriptFilter:
    """Accept names matching any include pattern and no exclude pattern.

    String patterns are globs matched from the right of the path (``*.js``
    accepts ``scripts/inject.js``); compiled patterns are searched anywhere.
    """

    def __init__(
        self,
        include: Iterable[FilterPattern] | None = None,
        exclude: Iterable[FilterPattern] | None = None,
    ) -> None:
        self.include = tuple(include) if include else DEFAULT_INCLUDE
        self.exclude = tuple(exclude or ())

    def __call__(self, file_name: str) -> bool:
        path = file_name.replace("\\", "/")
        if any(_matches(pattern, path) for pattern in self.exclude):
            return False
        return any(_matches(pattern, path) for pattern in self.include)


def _matches(pattern: FilterPattern, path: str) -> bool:
    if isinstance(pattern, str):
        if not pattern:
            return False
        return PurePosixPath(path).match(pattern)
    return pattern.search(path) is not None
