"""Base detector and rule table machinery."""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from itertools import count
from typing import Iterator

from codeqa.models import Effort, Issue, IssueType, Severity, SourceUnit

# A function/class declaration line; group 1 is the declared name.
DECLARATION_RE = re.compile(r"\b(?:function|def|class)\s+(\w+)")


@dataclass(frozen=True)
class Rule:
    """One row of a detector's rule table.

    Every pattern is tried against every line and each hit yields an Issue,
    unless `first_match_only` is set. `context` must also match the line, and
    the whole rule is skipped for files where `file_guard` matches.
    """

    key: str
    patterns: tuple[re.Pattern, ...]
    severity: Severity
    title: str
    description: str
    suggestion: str
    impact: str
    effort: Effort
    context: re.Pattern | None = None
    file_guard: re.Pattern | None = None
    first_match_only: bool = False

    def hits(self, line: str) -> Iterator[re.Pattern]:
        if self.context is not None and not self.context.search(line):
            return
        for pattern in self.patterns:
            if pattern.search(line):
                yield pattern
                if self.first_match_only:
                    return


def compile_all(*patterns: str, flags: int = re.IGNORECASE) -> tuple[re.Pattern, ...]:
    return tuple(re.compile(p, flags) for p in patterns)


@dataclass
class IssueFactory:
    """Builds issues for one detect() call with ids unique within the call."""

    unit: SourceUnit
    issue_type: IssueType
    _seq: Iterator[int] = field(default_factory=count)

    def make(
        self,
        key: str,
        *,
        severity: Severity,
        title: str,
        description: str,
        line: int | None,
        suggestion: str,
        impact: str,
        effort: Effort,
    ) -> Issue:
        return Issue(
            id=f"{key}:{self.unit.path}:{line or 0}:{next(self._seq)}",
            type=self.issue_type,
            severity=severity,
            title=title,
            description=description,
            file=self.unit.path,
            line=line,
            suggestion=suggestion,
            impact=impact,
            effort=effort,
        )

    def from_rule(self, rule: Rule, line: int) -> Issue:
        return self.make(
            rule.key,
            severity=rule.severity,
            title=rule.title,
            description=rule.description,
            line=line,
            suggestion=rule.suggestion,
            impact=rule.impact,
            effort=rule.effort,
        )


class BaseDetector(ABC):
    """Base class for per-file pattern detectors.

    Detectors hold no per-call state, so one instance can serve many threads.
    """

    name: str = "base"
    issue_type: IssueType = IssueType.MAINTAINABILITY
    rules: tuple[Rule, ...] = ()

    @abstractmethod
    def detect(self, unit: SourceUnit) -> list[Issue]:
        """Return the issues found in one source unit."""
        ...

    def scan_rules(self, unit: SourceUnit, factory: IssueFactory) -> list[Issue]:
        """Apply the rule table line by line. Line numbers are 1-based."""
        issues: list[Issue] = []
        lines = unit.lines
        for rule in self.rules:
            if rule.file_guard is not None and rule.file_guard.search(unit.content):
                continue
            for index, line in enumerate(lines):
                for _ in rule.hits(line):
                    issues.append(factory.from_rule(rule, index + 1))
        return issues
