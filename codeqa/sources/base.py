"""Shared source-provider types."""

from __future__ import annotations

from dataclasses import dataclass, field
from fnmatch import fnmatch

from codeqa.config import ALWAYS_EXCLUDED_SUFFIXES
from codeqa.models import SourceUnit


@dataclass(frozen=True)
class SourceSet:
    """Units to analyze plus the other project paths seen while gathering.

    `other_paths` holds files that are not analyzed (README.md, configs) but
    still inform project-level heuristics.
    """

    units: list[SourceUnit] = field(default_factory=list)
    other_paths: list[str] = field(default_factory=list)
    origin: str = ""


def is_excluded(rel_path: str, excluded: list[str]) -> bool:
    """True if any path component or glob in `excluded` matches `rel_path`."""
    rel_path = rel_path.replace("\\", "/")
    if rel_path.endswith(ALWAYS_EXCLUDED_SUFFIXES):
        return True
    parts = rel_path.split("/")
    for pattern in excluded:
        if pattern in parts or fnmatch(rel_path, pattern):
            return True
    return False
