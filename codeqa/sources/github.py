"""GitHub source provider over the REST contents API."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from datetime import datetime

import httpx

from codeqa.config import MAX_FILE_SIZE, CodeQAConfig
from codeqa.errors import SourceFetchError, UnsupportedFileError
from codeqa.logging import get_logger
from codeqa.models import SourceUnit, language_for_path
from codeqa.sources.base import SourceSet, is_excluded

logger = get_logger("sources.github")

API_URL = "https://api.github.com"
USER_AGENT = "codeqa"
DEFAULT_BRANCH = "main"
FALLBACK_BRANCH = "master"

_URL_PATTERNS = [
    re.compile(r"github\.com/([^/]+)/([^/]+)(?:/tree/([^/]+))?"),
    re.compile(r"github\.com/([^/]+)/([^/]+)\.git"),
    re.compile(r"^([^/\s]+)/([^/\s]+)$"),
]


@dataclass
class GitHubRepo:
    owner: str
    repo: str
    branch: str | None = None

    @property
    def slug(self) -> str:
        return f"{self.owner}/{self.repo}"


def parse_github_url(url: str) -> GitHubRepo:
    """Parse `https://github.com/o/r[/tree/branch]`, `....git` or `o/r`."""
    url = url.strip()
    for pattern in _URL_PATTERNS:
        match = pattern.search(url)
        if match:
            branch = match.group(3) if pattern.groups >= 3 else None
            return GitHubRepo(
                owner=match.group(1),
                repo=re.sub(r"\.git$", "", match.group(2)),
                branch=branch or None,
            )
    raise SourceFetchError(f"Invalid GitHub URL: {url}")


def is_github_url(target: str) -> bool:
    return "github.com/" in target


class _NotFound(SourceFetchError):
    pass


class GitHubFetcher:
    """Fetch a public (or token-accessible) repository's source files.

    Pass `client` to reuse an httpx.Client (tests use httpx.MockTransport);
    otherwise one is created and closed with the fetcher.
    """

    def __init__(
        self,
        token: str | None = None,
        client: httpx.Client | None = None,
        config: CodeQAConfig | None = None,
    ):
        self.token = token or os.environ.get("GITHUB_TOKEN")
        self.config = config or CodeQAConfig()
        self._owns_client = client is None
        self.client = client or httpx.Client(timeout=30, follow_redirects=True)

    def close(self) -> None:
        if self._owns_client:
            self.client.close()

    def __enter__(self) -> GitHubFetcher:
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def _headers(self, api: bool = True) -> dict[str, str]:
        headers = {"User-Agent": USER_AGENT}
        if api:
            headers["Accept"] = "application/vnd.github.v3+json"
        if self.token:
            headers["Authorization"] = f"token {self.token}"
        return headers

    def _get(self, url: str, params: dict | None = None, api: bool = True) -> httpx.Response:
        try:
            return self.client.get(url, params=params, headers=self._headers(api))
        except httpx.HTTPError as e:
            raise SourceFetchError(f"GitHub request failed: {e}") from e

    def get_default_branch(self, repo: GitHubRepo) -> str:
        try:
            resp = self._get(f"{API_URL}/repos/{repo.slug}")
        except SourceFetchError as e:
            logger.warning("Failed to get default branch, using %s: %s", DEFAULT_BRANCH, e)
            return DEFAULT_BRANCH
        if resp.status_code != 200:
            return DEFAULT_BRANCH
        return resp.json().get("default_branch") or DEFAULT_BRANCH

    def list_directory(self, repo: GitHubRepo, path: str, branch: str) -> list[dict]:
        url = f"{API_URL}/repos/{repo.slug}/contents"
        if path:
            url = f"{url}/{path}"
        resp = self._get(url, params={"ref": branch})

        if resp.status_code == 404:
            raise _NotFound(
                "Repository not found or is private. "
                "Make sure the repository exists and is public."
            )
        if resp.status_code == 403:
            reset = resp.headers.get("X-RateLimit-Reset")
            when = datetime.fromtimestamp(int(reset)).strftime("%H:%M:%S") if reset else "unknown"
            raise SourceFetchError(f"GitHub API rate limit exceeded. Try again after {when}")
        if resp.status_code != 200:
            raise SourceFetchError(f"GitHub API error: {resp.status_code} {resp.reason_phrase}")

        data = resp.json()
        return data if isinstance(data, list) else [data]

    def fetch_file(self, download_url: str) -> str:
        resp = self._get(download_url, api=False)
        if resp.status_code != 200:
            raise SourceFetchError(f"Failed to fetch file: {resp.status_code}")
        return resp.text

    def fetch(self, url: str) -> SourceSet:
        """Fetch every supported file of the repository at `url`."""
        repo = parse_github_url(url)
        branch = repo.branch or self.get_default_branch(repo)

        try:
            root = self.list_directory(repo, "", branch)
        except _NotFound:
            if branch != DEFAULT_BRANCH:
                raise
            logger.info("Branch %s not found, trying %s", branch, FALLBACK_BRANCH)
            branch = FALLBACK_BRANCH
            root = self.list_directory(repo, "", branch)

        units: list[SourceUnit] = []
        other: list[str] = []
        self._walk(repo, branch, root, units, other)

        units.sort(key=lambda u: u.path)
        logger.info("Fetched %d source file(s) from %s@%s", len(units), repo.slug, branch)
        return SourceSet(units=units, other_paths=sorted(other), origin=f"{repo.slug}@{branch}")

    def _walk(
        self,
        repo: GitHubRepo,
        branch: str,
        items: list[dict],
        units: list[SourceUnit],
        other: list[str],
    ) -> None:
        excluded = self.config.excluded
        max_size = self.config.max_file_size or MAX_FILE_SIZE

        for item in items:
            path = item.get("path") or item.get("name", "")
            name = item.get("name", "")
            kind = item.get("type")

            if kind == "dir":
                if name.startswith(".") or is_excluded(path, excluded):
                    continue
                self._walk(repo, branch, self.list_directory(repo, path, branch), units, other)
                continue
            if kind != "file" or is_excluded(path, excluded):
                continue

            try:
                language = language_for_path(path)
            except UnsupportedFileError:
                other.append(path)
                continue
            if (item.get("size") or 0) > max_size:
                logger.debug("Skipping oversized file %s", path)
                continue

            try:
                content = self.fetch_file(item["download_url"])
            except (SourceFetchError, KeyError) as e:
                logger.warning("Failed to fetch file %s: %s", path, e)
                continue
            units.append(
                SourceUnit(
                    path=path,
                    content=content,
                    language=language,
                    size_bytes=item.get("size") or len(content.encode("utf-8")),
                )
            )
