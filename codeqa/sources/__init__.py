"""Source providers: turn a local path or a GitHub repository into SourceUnits."""

from __future__ import annotations

from codeqa.sources.base import SourceSet, is_excluded
from codeqa.sources.github import GitHubFetcher, GitHubRepo, is_github_url, parse_github_url
from codeqa.sources.local import gather_units, load_unit

__all__ = [
    "GitHubFetcher",
    "GitHubRepo",
    "SourceSet",
    "gather_units",
    "is_excluded",
    "is_github_url",
    "load_unit",
    "parse_github_url",
]
