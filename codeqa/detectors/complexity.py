"""Complexity detector: function length, cyclomatic count, nesting and parameters."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum

from codeqa.detectors.base import DECLARATION_RE, BaseDetector, IssueFactory
from codeqa.metrics import decision_count
from codeqa.models import (
    Effort,
    Issue,
    IssueType,
    Language,
    Severity,
    SourceUnit,
    require_all_languages,
)

LONG_FUNCTION_MEDIUM = 50
LONG_FUNCTION_HIGH = 100
COMPLEXITY_MEDIUM = 10
COMPLEXITY_HIGH = 20
NESTING_MEDIUM = 4
NESTING_HIGH = 6
PARAMS_MEDIUM = 5
PARAMS_HIGH = 8

NESTING_RE = re.compile(r"\{|\bif\b|\bfor\b|\bwhile\b|\btry\b")
SIGNATURE_RE = re.compile(r"\b(?:function|def)\s+(\w+)\s*\(([^)]*)\)")
# Parameter-list markers that are not parameters.
_NON_PARAMS = {"self", "cls", "*", "/"}


class BlockStyle(str, Enum):
    BRACES = "braces"  # Function ends when the brace balance returns to zero
    INDENT = "indent"  # Function ends at the first line dedented to its declaration


BLOCK_STYLES: dict[Language, BlockStyle] = {
    Language.JAVASCRIPT: BlockStyle.BRACES,
    Language.TYPESCRIPT: BlockStyle.BRACES,
    Language.PYTHON: BlockStyle.INDENT,
    Language.JAVA: BlockStyle.BRACES,
    Language.CPP: BlockStyle.BRACES,
    Language.CSHARP: BlockStyle.BRACES,
    Language.PHP: BlockStyle.BRACES,
    Language.RUBY: BlockStyle.INDENT,
    Language.GO: BlockStyle.BRACES,
    Language.RUST: BlockStyle.BRACES,
    Language.SWIFT: BlockStyle.BRACES,
    Language.KOTLIN: BlockStyle.BRACES,
}
require_all_languages(BLOCK_STYLES, "BLOCK_STYLES")


@dataclass
class _OpenFunction:
    name: str
    start: int  # 0-based index of the declaration line
    indent: int
    line_count: int = 0
    complexity: int = 1
    balance: int = 0
    opened: bool = False


def _indent_of(line: str) -> int:
    return len(line) - len(line.lstrip())


class ComplexityDetector(BaseDetector):
    name = "complexity"
    issue_type = IssueType.COMPLEXITY

    def detect(self, unit: SourceUnit) -> list[Issue]:
        factory = IssueFactory(unit, self.issue_type)
        issues = self._check_functions(unit, factory)
        issues.extend(self._check_nesting_depth(unit, factory))
        issues.extend(self._check_parameter_count(unit, factory))
        return issues

    def _check_functions(self, unit: SourceUnit, factory: IssueFactory) -> list[Issue]:
        """Delimit functions and report length/complexity when each one ends.

        Only the outermost declaration is tracked; nested ones are absorbed.
        """
        style = BLOCK_STYLES[unit.language]
        issues: list[Issue] = []
        current: _OpenFunction | None = None

        for index, line in enumerate(unit.lines):
            if current is not None and style is BlockStyle.INDENT and index > current.start:
                stripped = line.strip()
                if stripped and _indent_of(line) <= current.indent:
                    if stripped == "end":
                        current.line_count += 1
                        issues.extend(self._close(current, factory))
                        current = None
                        continue
                    issues.extend(self._close(current, factory))
                    current = None

            if current is None:
                match = DECLARATION_RE.search(line)
                if match:
                    current = _OpenFunction(name=match.group(1), start=index, indent=_indent_of(line))

            if current is None:
                continue

            current.line_count += 1
            current.complexity += decision_count(unit.language, line)

            if style is BlockStyle.BRACES:
                current.balance += line.count("{") - line.count("}")
                if current.balance > 0:
                    current.opened = True
                if current.opened and current.balance <= 0:
                    issues.extend(self._close(current, factory))
                    current = None

        if current is not None and style is BlockStyle.INDENT:
            issues.extend(self._close(current, factory))

        return issues

    def _close(self, fn: _OpenFunction, factory: IssueFactory) -> list[Issue]:
        issues = []
        line = fn.start + 1
        if fn.line_count > LONG_FUNCTION_MEDIUM:
            issues.append(
                factory.make(
                    "long-function",
                    severity=Severity.HIGH if fn.line_count > LONG_FUNCTION_HIGH else Severity.MEDIUM,
                    title="Long Function",
                    description=f"Function '{fn.name}' is {fn.line_count} lines long.",
                    line=line,
                    suggestion="Break down large functions into smaller, more focused functions.",
                    impact="Long functions are harder to understand, test, and maintain.",
                    effort=Effort.MEDIUM,
                )
            )
        if fn.complexity > COMPLEXITY_MEDIUM:
            issues.append(
                factory.make(
                    "high-complexity",
                    severity=Severity.HIGH if fn.complexity > COMPLEXITY_HIGH else Severity.MEDIUM,
                    title="High Cyclomatic Complexity",
                    description=f"Function '{fn.name}' has cyclomatic complexity of {fn.complexity}.",
                    line=line,
                    suggestion=(
                        "Reduce complexity by extracting methods, using early returns, "
                        "or simplifying conditional logic."
                    ),
                    impact="High complexity makes code harder to understand and test.",
                    effort=Effort.HIGH,
                )
            )
        return issues

    def _check_nesting_depth(self, unit: SourceUnit, factory: IssueFactory) -> list[Issue]:
        max_depth = 0
        depth = 0
        deepest = 0

        for index, line in enumerate(unit.lines):
            if NESTING_RE.search(line):
                depth += 1
                if depth > max_depth:
                    max_depth = depth
                    deepest = index
            if "}" in line:
                depth = max(0, depth - 1)

        if max_depth <= NESTING_MEDIUM:
            return []
        return [
            factory.make(
                "deep-nesting",
                severity=Severity.HIGH if max_depth > NESTING_HIGH else Severity.MEDIUM,
                title="Deep Nesting",
                description=f"Maximum nesting depth of {max_depth} detected.",
                line=deepest + 1,
                suggestion="Reduce nesting by using early returns, extracting functions, or guard clauses.",
                impact="Deep nesting makes code harder to read and understand.",
                effort=Effort.MEDIUM,
            )
        ]

    def _check_parameter_count(self, unit: SourceUnit, factory: IssueFactory) -> list[Issue]:
        issues = []
        for index, line in enumerate(unit.lines):
            match = SIGNATURE_RE.search(line)
            if not match:
                continue
            params = [p.strip() for p in match.group(2).split(",")]
            params = [p for p in params if p and p not in _NON_PARAMS]
            if len(params) <= PARAMS_MEDIUM:
                continue
            issues.append(
                factory.make(
                    "many-parameters",
                    severity=Severity.HIGH if len(params) > PARAMS_HIGH else Severity.MEDIUM,
                    title="Too Many Parameters",
                    description=f"Function '{match.group(1)}' has {len(params)} parameters.",
                    line=index + 1,
                    suggestion="Consider using an options object or breaking the function into smaller functions.",
                    impact="Functions with many parameters are harder to use and maintain.",
                    effort=Effort.MEDIUM,
                )
            )
        return issues
