"""Model-assisted issue extraction.

Source units are sent to the model in small batches. Replies are untrusted
text: the first bracketed array is located, parsed, and every missing or
invalid field falls back to a default. A batch that cannot be analyzed yields
no issues instead of failing the pipeline; `BatchResult.status` records why.
"""

from __future__ import annotations

import itertools
import json
import re
import threading
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable

from codeqa.errors import ExternalServiceError, ParseError
from codeqa.logging import get_logger
from codeqa.models import Effort, Issue, IssueType, Severity, SourceUnit
from codeqa.parallel import check_cancelled, map_ordered
from codeqa.providers.base import BaseProvider

logger = get_logger("extractor")

BATCH_SIZE = 3
MAX_CHARS_PER_FILE = 2000
TRUNCATION_MARKER = "..."

# Greedy: from the first "[" to the last "]" in the reply.
_ARRAY_RE = re.compile(r"\[[\s\S]*\]")

DEFAULT_TYPE = IssueType.MAINTAINABILITY
DEFAULT_SEVERITY = Severity.MEDIUM
DEFAULT_EFFORT = Effort.MEDIUM
DEFAULT_TITLE = "Code Quality Issue"
DEFAULT_DESCRIPTION = "Issue detected by AI analysis"
DEFAULT_SUGGESTION = "Review and improve this code"
DEFAULT_IMPACT = "May affect code quality"

ANALYSIS_PROMPT = """You are a senior code reviewer analyzing the following code files for quality issues.

Please identify issues in these categories:
1. Security vulnerabilities
2. Performance problems
3. Code duplication
4. Complexity issues
5. Testing gaps
6. Documentation problems
7. Maintainability concerns

For each issue found, provide:
- type (security/performance/duplication/complexity/testing/documentation/maintainability)
- severity (low/medium/high/critical)
- title (brief description)
- description (detailed explanation)
- file and line number (if applicable)
- suggestion (how to fix)
- impact (why it matters)
- effort (low/medium/high to fix)

Format your response as a JSON array of issues:
[
  {{
    "type": "security",
    "severity": "high",
    "title": "Issue title",
    "description": "Detailed description",
    "file": "path/to/file.js",
    "line": 42,
    "suggestion": "How to fix this",
    "impact": "Why this matters",
    "effort": "medium"
  }}
]

Files to analyze:
{files}

Focus on real, actionable issues that would help developers improve their code quality.
Return ONLY the JSON array, no other text."""


class BatchStatus(str, Enum):
    OK = "ok"
    DISABLED = "disabled"  # No provider configured
    NO_ARRAY = "no_array"  # Reply held no JSON array: no result, no error
    PARSE_ERROR = "parse_error"
    SERVICE_ERROR = "service_error"
    CANCELLED = "cancelled"  # Skipped because the run was cancelled


@dataclass(frozen=True)
class ParseOutcome:
    issues: list[Issue] = field(default_factory=list)
    found_array: bool = False
    error: str | None = None


@dataclass(frozen=True)
class BatchResult:
    index: int
    paths: tuple[str, ...]
    status: BatchStatus
    issues: list[Issue] = field(default_factory=list)
    error: str | None = None


class IssueIdFactory:
    """Hands out `ai-<run start ms>-<n>` ids, unique across threads for one run."""

    def __init__(self, prefix: str = "ai"):
        self._stamp = int(time.time() * 1000)
        self._prefix = prefix
        self._counter = itertools.count()
        self._lock = threading.Lock()

    def __call__(self) -> str:
        with self._lock:
            n = next(self._counter)
        return f"{self._prefix}-{self._stamp}-{n}"


def make_batches(units: list[SourceUnit], size: int = BATCH_SIZE) -> list[list[SourceUnit]]:
    return [units[i : i + size] for i in range(0, len(units), size)]


def truncate_content(content: str, limit: int = MAX_CHARS_PER_FILE) -> str:
    if len(content) <= limit:
        return content
    return content[:limit] + TRUNCATION_MARKER


def build_analysis_prompt(batch: list[SourceUnit]) -> str:
    parts = []
    for unit in batch:
        lang = unit.language.value
        parts.append(f"File: {unit.path} ({lang})\n```{lang}\n{truncate_content(unit.content)}\n```")
    return ANALYSIS_PROMPT.format(files="\n\n".join(parts))


def _coerce_enum(enum_cls: type[Enum], value: Any, default: Enum) -> Any:
    if isinstance(value, str):
        try:
            return enum_cls(value.strip().lower())
        except ValueError:
            return default
    return default


def _text(value: Any, default: str) -> str:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return default


def _line(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value >= 1 else None
    if isinstance(value, str) and value.strip().isdigit():
        n = int(value.strip())
        return n if n >= 1 else None
    return None


def issue_from_raw(raw: dict[str, Any], batch_paths: list[str], issue_id: str) -> Issue:
    """Build an Issue from one model-supplied object, filling defaults.

    A file outside the batch is replaced by the batch's first file so every
    issue points at an analyzed path.
    """
    file = raw.get("file")
    if not isinstance(file, str) or file not in batch_paths:
        file = batch_paths[0] if batch_paths else "unknown"

    return Issue(
        id=issue_id,
        type=_coerce_enum(IssueType, raw.get("type"), DEFAULT_TYPE),
        severity=_coerce_enum(Severity, raw.get("severity"), DEFAULT_SEVERITY),
        title=_text(raw.get("title"), DEFAULT_TITLE),
        description=_text(raw.get("description"), DEFAULT_DESCRIPTION),
        file=file,
        line=_line(raw.get("line")),
        suggestion=_text(raw.get("suggestion"), DEFAULT_SUGGESTION),
        impact=_text(raw.get("impact"), DEFAULT_IMPACT),
        effort=_coerce_enum(Effort, raw.get("effort"), DEFAULT_EFFORT),
    )


def parse_model_response(
    text: str,
    batch_paths: list[str],
    next_id: Callable[[], str],
) -> ParseOutcome:
    """Turn a raw model reply into issues without ever raising."""
    match = _ARRAY_RE.search(text or "")
    if not match:
        return ParseOutcome()

    try:
        data = json.loads(match.group(0))
        if not isinstance(data, list):
            raise ParseError(f"expected a JSON array, got {type(data).__name__}")
    except (ValueError, RecursionError, ParseError) as e:
        return ParseOutcome(found_array=True, error=str(e))

    issues = [issue_from_raw(item, batch_paths, next_id()) for item in data if isinstance(item, dict)]
    return ParseOutcome(issues=issues, found_array=True)


class ModelExtractor:
    """Runs the model pass over batches of source units.

    Construct with `provider=None` when no credentials are available; every
    batch then reports DISABLED and the pipeline continues as static analysis.
    """

    def __init__(self, provider: BaseProvider | None = None, concurrency: int = 2):
        self.provider = provider
        self.concurrency = max(1, concurrency)

    @property
    def enabled(self) -> bool:
        return self.provider is not None

    def analyze_batch(
        self,
        index: int,
        batch: list[SourceUnit],
        next_id: Callable[[], str],
        cancel: threading.Event | None = None,
    ) -> BatchResult:
        paths = [u.path for u in batch]
        if self.provider is None:
            return BatchResult(index=index, paths=tuple(paths), status=BatchStatus.DISABLED)
        if cancel is not None and cancel.is_set():
            return BatchResult(index=index, paths=tuple(paths), status=BatchStatus.CANCELLED)

        prompt = build_analysis_prompt(batch)
        try:
            reply = self.provider.generate_text(prompt)
        except ExternalServiceError as e:
            logger.warning("AI analysis failed for batch %d (%s): %s", index, ", ".join(paths), e)
            return BatchResult(
                index=index, paths=tuple(paths), status=BatchStatus.SERVICE_ERROR, error=str(e)
            )
        except Exception as e:
            logger.exception("Unexpected provider failure for batch %d", index)
            return BatchResult(
                index=index, paths=tuple(paths), status=BatchStatus.SERVICE_ERROR, error=repr(e)
            )

        outcome = parse_model_response(reply, paths, next_id)
        if outcome.error:
            logger.warning("Failed to parse AI response for batch %d: %s", index, outcome.error)
            return BatchResult(
                index=index, paths=tuple(paths), status=BatchStatus.PARSE_ERROR, error=outcome.error
            )
        if not outcome.found_array:
            logger.warning("No JSON array found in AI response for batch %d", index)
            return BatchResult(index=index, paths=tuple(paths), status=BatchStatus.NO_ARRAY)

        return BatchResult(
            index=index, paths=tuple(paths), status=BatchStatus.OK, issues=outcome.issues
        )

    def run_batches(
        self,
        units: list[SourceUnit],
        cancel: threading.Event | None = None,
    ) -> list[BatchResult]:
        """Analyze every batch; results are in batch order."""
        check_cancelled(cancel)
        batches = list(enumerate(make_batches(units)))
        next_id = IssueIdFactory()

        if not self.enabled:
            return [self.analyze_batch(i, b, next_id) for i, b in batches]

        logger.info("Running AI analysis on %d file(s) in %d batch(es)", len(units), len(batches))
        return map_ordered(
            lambda item: self.analyze_batch(item[0], item[1], next_id, cancel),
            batches,
            max_workers=self.concurrency,
            cancel=cancel,
        )

    def extract_issues(
        self,
        units: list[SourceUnit],
        cancel: threading.Event | None = None,
    ) -> list[Issue]:
        issues: list[Issue] = []
        for result in self.run_batches(units, cancel):
            issues.extend(result.issues)
        return issues
