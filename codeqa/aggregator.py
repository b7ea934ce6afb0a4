"""Merge issue streams into a prioritized, immutable Report."""

from __future__ import annotations

import math
from collections import Counter
from dataclasses import replace
from datetime import datetime, timezone

from codeqa.errors import EmptyInputError, InputError
from codeqa.metrics import language_stats, total_lines
from codeqa.models import (
    PROJECT_FILE,
    Issue,
    IssueType,
    Metrics,
    Report,
    Severity,
    SourceUnit,
    Summary,
)

# Category-triggered recommendations, in the order they are emitted.
RECOMMENDATIONS: list[tuple[IssueType, str]] = [
    (IssueType.SECURITY, "🔒 Address security vulnerabilities immediately - they pose the highest risk"),
    (IssueType.PERFORMANCE, "⚡ Optimize performance bottlenecks to improve user experience"),
    (IssueType.TESTING, "🧪 Increase test coverage to catch bugs early and enable safe refactoring"),
    (IssueType.COMPLEXITY, "🔧 Refactor complex code to improve maintainability"),
    (IssueType.DOCUMENTATION, "📚 Improve documentation to help team members understand the codebase"),
]
ALL_CLEAR = "✅ Great job! Your code quality looks good overall"


def _round(value: float) -> int:
    """Round half up, so 2.5 → 3 (Python's round() would give 2)."""
    return math.floor(value + 0.5)


def severity_breakdown(issues: list[Issue]) -> dict[str, int]:
    breakdown = {s.value: 0 for s in (Severity.LOW, Severity.MEDIUM, Severity.HIGH, Severity.CRITICAL)}
    for issue in issues:
        breakdown[issue.severity.value] += 1
    return breakdown


def calculate_metrics(file_count: int, issues: list[Issue]) -> Metrics:
    """Derive the four headline metrics, each clamped to its range."""
    by_type = Counter(i.type for i in issues)
    return Metrics(
        code_complexity=min(10, _round(10 * by_type[IssueType.COMPLEXITY] / file_count)),
        test_coverage=max(0, _round(100 - 20 * by_type[IssueType.TESTING])),
        duplication_percentage=min(50, _round(5 * by_type[IssueType.DUPLICATION])),
        maintainability_index=max(0, _round(100 - 10 * len(issues) / file_count)),
    )


def prioritize(issues: list[Issue]) -> list[Issue]:
    """Severity first, then type priority; ties keep arrival order."""
    return sorted(issues, key=lambda i: (-i.severity.rank, -i.type.priority))


def generate_recommendations(issues: list[Issue]) -> list[str]:
    present = {i.type for i in issues}
    recommendations = [message for issue_type, message in RECOMMENDATIONS if issue_type in present]
    return recommendations or [ALL_CLEAR]


def _unique_ids(issues: list[Issue]) -> list[Issue]:
    seen: Counter[str] = Counter()
    taken = {i.id for i in issues}
    result = []
    for issue in issues:
        seen[issue.id] += 1
        if seen[issue.id] == 1:
            result.append(issue)
            continue
        n = seen[issue.id]
        candidate = f"{issue.id}-{n}"
        while candidate in taken:
            n += 1
            candidate = f"{issue.id}-{n}"
        taken.add(candidate)
        result.append(replace(issue, id=candidate))
    return result


def build_report(
    units: list[SourceUnit],
    issues: list[Issue],
    timestamp: str | None = None,
) -> Report:
    """Build the Report for one analysis run.

    Raises EmptyInputError for an empty unit set and InputError when an issue
    points at a file that was not analyzed.
    """
    if not units:
        raise EmptyInputError()

    known = {u.path for u in units}
    for issue in issues:
        if issue.file != PROJECT_FILE and issue.file not in known:
            raise InputError(f"Issue {issue.id} refers to unknown file: {issue.file}")

    issues = _unique_ids(list(issues))
    ordered = prioritize(issues)

    summary = Summary(
        total_files=len(units),
        total_lines=total_lines(units),
        languages=tuple(language_stats(units)),
        issue_count=len(ordered),
        severity_breakdown=severity_breakdown(ordered),
    )

    return Report(
        summary=summary,
        issues=tuple(ordered),
        metrics=calculate_metrics(len(units), ordered),
        recommendations=tuple(generate_recommendations(ordered)),
        timestamp=timestamp or datetime.now(timezone.utc).isoformat(),
    )
