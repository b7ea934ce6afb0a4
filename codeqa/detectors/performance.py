"""Performance pattern detector."""

from __future__ import annotations

import re

from codeqa.detectors.base import BaseDetector, IssueFactory, Rule, compile_all
from codeqa.models import Effort, Issue, IssueType, Severity, SourceUnit

LOOP_RE = re.compile(r"\b(for|while|forEach|map|filter|reduce)\b", re.IGNORECASE)
NESTED_LOOP_THRESHOLD = 3

PERFORMANCE_RULES: tuple[Rule, ...] = (
    Rule(
        key="inefficient-query",
        patterns=compile_all(
            r"SELECT\s+\*\s+FROM",
            r"\.find\s*\([^)]*\)\s*\.find\(",
            r"\.filter\s*\([^)]*\)\s*\.filter\(",
            r"for.*in.*for.*in",
            r"\bfor\b.*\b(?:await\s+)?\w+\.(?:query|execute|find|findOne|findById)\s*\(",
        ),
        severity=Severity.MEDIUM,
        title="Inefficient Query Pattern",
        description="Detected potentially inefficient data access pattern.",
        suggestion="Optimize queries by selecting specific fields, using indexes, or combining operations.",
        impact="Slower query execution and increased resource usage.",
        effort=Effort.MEDIUM,
    ),
    Rule(
        key="listener-leak",
        patterns=compile_all(r"addEventListener\s*\("),
        file_guard=re.compile(r"removeEventListener\s*\("),
        severity=Severity.MEDIUM,
        title="Event Listener Not Cleaned Up",
        description="Event listener registered without any corresponding removal in this file.",
        suggestion="Add corresponding removeEventListener calls when the listener is no longer needed.",
        impact="Gradual memory consumption increase, potential application crashes.",
        effort=Effort.LOW,
    ),
    Rule(
        key="timer-leak",
        patterns=compile_all(r"setInterval\s*\("),
        file_guard=re.compile(r"clearInterval\s*\("),
        severity=Severity.MEDIUM,
        title="Timer Not Cleaned Up",
        description="Interval timer started without any corresponding clearInterval in this file.",
        suggestion="Add corresponding clearInterval calls.",
        impact="Gradual memory consumption increase, potential application crashes.",
        effort=Effort.LOW,
    ),
    Rule(
        key="memory-leak",
        patterns=compile_all(r"new\s+Array\s*\(\s*\d{6,}\s*\)", r"\bglobal\."),
        severity=Severity.LOW,
        title="Potential Memory Leak",
        description="Code pattern that could lead to memory leaks detected.",
        suggestion="Ensure proper cleanup of resources.",
        impact="Gradual memory consumption increase, potential application crashes.",
        effort=Effort.LOW,
    ),
    Rule(
        key="sync-operation",
        patterns=compile_all(
            r"readFileSync\s*\(",
            r"writeFileSync\s*\(",
            r"execSync\s*\(",
            r"\.sync\s*\(\s*\)",
            r"\btime\.sleep\s*\(",
        ),
        severity=Severity.MEDIUM,
        title="Synchronous Operation",
        description="Blocking synchronous operation detected that could freeze the application.",
        suggestion="Replace with asynchronous alternatives using async/await or promises.",
        impact="Application blocking, poor user experience, reduced throughput.",
        effort=Effort.MEDIUM,
    ),
    Rule(
        key="large-data-structure",
        patterns=compile_all(r"\[([^\]]{200,})\]", r"\{([^}]{200,})\}", flags=0),
        first_match_only=True,
        severity=Severity.LOW,
        title="Large Data Structure",
        description="Large inline data structure detected that could impact performance.",
        suggestion="Consider loading data from external files or using lazy loading.",
        impact="Increased memory usage and slower initial load times.",
        effort=Effort.MEDIUM,
    ),
)


class PerformanceDetector(BaseDetector):
    name = "performance"
    issue_type = IssueType.PERFORMANCE
    rules = PERFORMANCE_RULES

    def detect(self, unit: SourceUnit) -> list[Issue]:
        factory = IssueFactory(unit, self.issue_type)
        issues = self._check_nested_loops(unit, factory)
        issues.extend(self.scan_rules(unit, factory))
        return issues

    def _check_nested_loops(self, unit: SourceUnit, factory: IssueFactory) -> list[Issue]:
        """Track loop depth with a stack that pops on a bare closing brace."""
        issues: list[Issue] = []
        depth = 0
        loop_stack: list[int] = []

        for index, line in enumerate(unit.lines):
            if LOOP_RE.search(line):
                depth += 1
                loop_stack.append(index)
                if depth >= NESTED_LOOP_THRESHOLD:
                    issues.append(
                        factory.make(
                            "nested-loops",
                            severity=Severity.MEDIUM,
                            title="Deeply Nested Loops",
                            description=(
                                f"Found {depth} levels of nested loops, which can cause "
                                f"O(n^{depth}) complexity."
                            ),
                            line=index + 1,
                            suggestion=(
                                "Consider optimizing with better algorithms, caching, "
                                "or breaking down into smaller functions."
                            ),
                            impact="Poor performance with large datasets, potential for exponential time complexity.",
                            effort=Effort.HIGH,
                        )
                    )

            if line.strip() == "}" and loop_stack:
                loop_stack.pop()
                depth = max(0, depth - 1)

        return issues
