"""Project-level heuristics for test coverage and documentation."""

from __future__ import annotations

from typing import Iterable

from codeqa.detectors.base import DECLARATION_RE
from codeqa.models import PROJECT_FILE, Effort, Issue, IssueType, Severity, SourceUnit

TEST_MARKERS = ("test", "spec")
LOW_COVERAGE_RATIO = 0.3
DOC_MARKERS = ("/**", '"""', "'''", "///", "#'")
DOC_LOOKBEHIND = 3


def is_test_file(path: str) -> bool:
    lowered = path.lower()
    return any(marker in lowered for marker in TEST_MARKERS)


def analyze_test_coverage(units: list[SourceUnit]) -> list[Issue]:
    """Estimate test coverage from the ratio of test files to source files."""
    test_files = [u for u in units if is_test_file(u.path)]
    source_files = [u for u in units if not is_test_file(u.path)]

    if not test_files:
        return [
            Issue(
                id="no-tests",
                type=IssueType.TESTING,
                severity=Severity.HIGH,
                title="No Test Files Found",
                description="No test files detected in the codebase.",
                file=PROJECT_FILE,
                line=None,
                suggestion="Add unit tests for your functions and components.",
                impact="Lack of tests makes it difficult to catch bugs and refactor safely.",
                effort=Effort.HIGH,
            )
        ]

    if not source_files:
        return []

    ratio = len(test_files) / len(source_files)
    if ratio >= LOW_COVERAGE_RATIO:
        return []

    return [
        Issue(
            id="low-test-coverage",
            type=IssueType.TESTING,
            severity=Severity.MEDIUM,
            title="Low Test Coverage",
            description=f"Only {round(ratio * 100)}% of source files have corresponding tests.",
            file=PROJECT_FILE,
            line=None,
            suggestion="Increase test coverage by adding tests for untested modules.",
            impact="Insufficient testing increases the risk of bugs in production.",
            effort=Effort.HIGH,
        )
    ]


def undocumented_declarations(unit: SourceUnit) -> list[int]:
    """0-based indexes of declarations with no doc marker in the 3 lines above."""
    lines = unit.lines
    undocumented = []
    for index, line in enumerate(lines):
        if not DECLARATION_RE.search(line):
            continue
        preceding = lines[max(0, index - DOC_LOOKBEHIND) : index]
        if not any(marker in prev for prev in preceding for marker in DOC_MARKERS):
            undocumented.append(index)
    return undocumented


def analyze_documentation(
    units: list[SourceUnit],
    project_paths: Iterable[str] = (),
) -> list[Issue]:
    """Flag a missing README and, per file, undocumented declarations.

    `project_paths` lists non-source files seen by the source provider, so a
    README.md that is not itself analyzed still counts.
    """
    issues: list[Issue] = []

    all_paths = [u.path for u in units] + list(project_paths)
    if not any("readme" in p.lower() for p in all_paths):
        issues.append(
            Issue(
                id="no-readme",
                type=IssueType.DOCUMENTATION,
                severity=Severity.MEDIUM,
                title="Missing README",
                description="No README file found in the project.",
                file=PROJECT_FILE,
                line=None,
                suggestion="Add a README.md file with project description, setup instructions, and usage examples.",
                impact="Makes it difficult for new developers to understand and contribute to the project.",
                effort=Effort.LOW,
            )
        )

    for unit in units:
        undocumented = undocumented_declarations(unit)
        if not undocumented:
            continue
        issues.append(
            Issue(
                id=f"undocumented-functions:{unit.path}",
                type=IssueType.DOCUMENTATION,
                severity=Severity.LOW,
                title="Undocumented Functions",
                description=f"{len(undocumented)} functions lack documentation in {unit.path}.",
                file=unit.path,
                line=undocumented[0] + 1,
                suggestion="Add JSDoc comments or docstrings to explain function purpose, parameters, and return values.",
                impact="Makes code harder to understand and maintain.",
                effort=Effort.LOW,
            )
        )

    return issues
