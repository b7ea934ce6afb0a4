"""Per-file structural metrics and in-file duplicate block detection."""

from __future__ import annotations

import re
from collections import Counter
from dataclasses import dataclass, field

from codeqa.models import (
    Effort,
    Issue,
    IssueType,
    Language,
    Severity,
    SourceUnit,
    require_all_languages,
)

DUPLICATE_WINDOW = 5
MIN_DUPLICATE_CHARS = 50

_C_COMMENTS = ("//", "/*", "*")
_HASH_COMMENTS = ("#",)

COMMENT_PREFIXES: dict[Language, tuple[str, ...]] = {
    Language.JAVASCRIPT: _C_COMMENTS,
    Language.TYPESCRIPT: _C_COMMENTS,
    Language.PYTHON: _HASH_COMMENTS,
    Language.JAVA: _C_COMMENTS,
    Language.CPP: _C_COMMENTS,
    Language.CSHARP: _C_COMMENTS,
    Language.PHP: _C_COMMENTS + _HASH_COMMENTS,
    Language.RUBY: _HASH_COMMENTS,
    Language.GO: _C_COMMENTS,
    Language.RUST: _C_COMMENTS,
    Language.SWIFT: _C_COMMENTS,
    Language.KOTLIN: _C_COMMENTS,
}

_C_DECISIONS = re.compile(r"\b(?:if|else|while|for|switch|case|catch)\b|&&|\|\||\s\?\s")
_PY_DECISIONS = re.compile(r"\b(?:if|elif|else|while|for|try|except|and|or)\b")
_RB_DECISIONS = re.compile(r"\b(?:if|elsif|else|unless|while|until|for|case|when|rescue)\b|&&|\|\|")

COMPLEXITY_PATTERNS: dict[Language, re.Pattern] = {
    Language.JAVASCRIPT: _C_DECISIONS,
    Language.TYPESCRIPT: _C_DECISIONS,
    Language.PYTHON: _PY_DECISIONS,
    Language.JAVA: _C_DECISIONS,
    Language.CPP: _C_DECISIONS,
    Language.CSHARP: _C_DECISIONS,
    Language.PHP: _C_DECISIONS,
    Language.RUBY: _RB_DECISIONS,
    Language.GO: _C_DECISIONS,
    Language.RUST: re.compile(r"\b(?:if|else|while|for|loop|match)\b|&&|\|\||=>"),
    Language.SWIFT: _C_DECISIONS,
    Language.KOTLIN: re.compile(r"\b(?:if|else|while|for|when|catch)\b|&&|\|\|"),
}

_JS_FUNCTIONS = re.compile(
    r"\bfunction\s+\w+|\b(?:const|let|var)\s+\w+\s*=\s*(?:async\s*)?\([^)]*\)\s*=>"
    r"|\b\w+\s*:\s*function\b"
)
_CLASS_KEYWORD = re.compile(r"\bclass\s+\w+")

FUNCTION_PATTERNS: dict[Language, re.Pattern | None] = {
    Language.JAVASCRIPT: _JS_FUNCTIONS,
    Language.TYPESCRIPT: _JS_FUNCTIONS,
    Language.PYTHON: re.compile(r"\bdef\s+\w+\s*\("),
    Language.JAVA: re.compile(
        r"\b(?:public|private|protected|static)\s+(?:static\s+)?[\w<>\[\]]+\s+\w+\s*\([^)]*\)\s*\{"
    ),
    Language.CPP: re.compile(r"^\s*[\w:<>*&]+\s+[\w:]+\s*\([^;)]*\)\s*(?:const\s*)?\{", re.M),
    Language.CSHARP: re.compile(
        r"\b(?:public|private|protected|internal|static)\s+(?:static\s+)?[\w<>\[\]]+\s+\w+\s*\([^)]*\)"
    ),
    Language.PHP: re.compile(r"\bfunction\s+\w+\s*\("),
    Language.RUBY: re.compile(r"^\s*def\s+[\w.?!]+", re.M),
    Language.GO: re.compile(r"^func\s+", re.M),
    Language.RUST: re.compile(r"\bfn\s+\w+"),
    Language.SWIFT: re.compile(r"\bfunc\s+\w+"),
    Language.KOTLIN: re.compile(r"\bfun\s+\w+"),
}

CLASS_PATTERNS: dict[Language, re.Pattern | None] = {
    Language.JAVASCRIPT: _CLASS_KEYWORD,
    Language.TYPESCRIPT: _CLASS_KEYWORD,
    Language.PYTHON: _CLASS_KEYWORD,
    Language.JAVA: _CLASS_KEYWORD,
    Language.CPP: re.compile(r"\b(?:class|struct)\s+\w+\s*[:{]"),
    Language.CSHARP: _CLASS_KEYWORD,
    Language.PHP: _CLASS_KEYWORD,
    Language.RUBY: _CLASS_KEYWORD,
    Language.GO: re.compile(r"\btype\s+\w+\s+struct\b"),
    Language.RUST: re.compile(r"\b(?:struct|enum)\s+\w+"),
    Language.SWIFT: re.compile(r"\b(?:class|struct)\s+\w+"),
    Language.KOTLIN: _CLASS_KEYWORD,
}

_ES_IMPORTS = re.compile(r"import\s+.*?\s+from\s+['\"`]([^'\"`]+)['\"`]")

IMPORT_PATTERNS: dict[Language, re.Pattern | None] = {
    Language.JAVASCRIPT: _ES_IMPORTS,
    Language.TYPESCRIPT: _ES_IMPORTS,
    Language.PYTHON: re.compile(r"^\s*(?:from\s+(\S+)\s+import|import\s+(\S+))", re.M),
    Language.JAVA: re.compile(r"^\s*import\s+(?:static\s+)?([^;]+);", re.M),
    Language.CPP: re.compile(r"#include\s*[<\"]([^>\"]+)[>\"]"),
    Language.CSHARP: re.compile(r"^\s*using\s+([\w.]+)\s*;", re.M),
    Language.PHP: re.compile(r"^\s*use\s+([\w\\]+)", re.M),
    Language.RUBY: re.compile(r"^\s*require(?:_relative)?\s+['\"]([^'\"]+)['\"]", re.M),
    Language.GO: re.compile(r"^\s*import\s+\"([^\"]+)\"", re.M),
    Language.RUST: re.compile(r"^\s*use\s+([\w:]+)", re.M),
    Language.SWIFT: None,
    Language.KOTLIN: None,
}

EXPORT_PATTERNS: dict[Language, re.Pattern | None] = {
    Language.JAVASCRIPT: re.compile(r"export\s+(?:default\s+)?(?:class|function|const|let|var)?\s*(\w+)"),
    Language.TYPESCRIPT: re.compile(
        r"export\s+(?:default\s+)?(?:class|function|const|let|var|interface|type)?\s*(\w+)"
    ),
    Language.PYTHON: re.compile(r"^def\s+(\w+)|^class\s+(\w+)", re.M),
    Language.JAVA: re.compile(r"public\s+(?:class|interface)\s+(\w+)"),
    Language.CPP: re.compile(r"^(?:class|struct)\s+(\w+)", re.M),
    Language.CSHARP: re.compile(r"public\s+(?:class|interface|struct)\s+(\w+)"),
    Language.PHP: None,
    Language.RUBY: None,
    Language.GO: re.compile(r"^func\s+(?:\([^)]*\)\s*)?([A-Z]\w*)", re.M),
    Language.RUST: re.compile(r"\bpub\s+(?:fn|struct|enum|trait)\s+(\w+)"),
    Language.SWIFT: None,
    Language.KOTLIN: None,
}

for _name, _table in (
    ("COMMENT_PREFIXES", COMMENT_PREFIXES),
    ("COMPLEXITY_PATTERNS", COMPLEXITY_PATTERNS),
    ("FUNCTION_PATTERNS", FUNCTION_PATTERNS),
    ("CLASS_PATTERNS", CLASS_PATTERNS),
    ("IMPORT_PATTERNS", IMPORT_PATTERNS),
    ("EXPORT_PATTERNS", EXPORT_PATTERNS),
):
    require_all_languages(_table, _name)


@dataclass(frozen=True)
class DuplicateBlock:
    start_line: int
    end_line: int
    duplicate_start: int
    duplicate_end: int
    content: str


@dataclass(frozen=True)
class FileMetrics:
    path: str
    lines_of_code: int
    cyclomatic_complexity: int
    function_count: int
    class_count: int
    comment_lines: int
    duplicate_blocks: tuple[DuplicateBlock, ...] = ()
    imports: tuple[str, ...] = field(default=())
    exports: tuple[str, ...] = field(default=())


def _is_comment(stripped: str, prefixes: tuple[str, ...]) -> bool:
    return stripped.startswith(prefixes)


def count_lines_of_code(unit: SourceUnit) -> int:
    prefixes = COMMENT_PREFIXES[unit.language]
    count = 0
    for line in unit.lines:
        stripped = line.strip()
        if stripped and not _is_comment(stripped, prefixes):
            count += 1
    return count


def count_comment_lines(unit: SourceUnit) -> int:
    prefixes = COMMENT_PREFIXES[unit.language]
    return sum(1 for line in unit.lines if _is_comment(line.strip(), prefixes))


def decision_count(language: Language, text: str) -> int:
    """Number of decision keywords/operators in `text` for `language`."""
    return len(COMPLEXITY_PATTERNS[language].findall(text))


def calculate_complexity(unit: SourceUnit) -> int:
    return decision_count(unit.language, unit.content) + 1


def _count(table: dict[Language, re.Pattern | None], unit: SourceUnit) -> int:
    pattern = table[unit.language]
    if pattern is None:
        return 0
    return len(pattern.findall(unit.content))


def _extract(table: dict[Language, re.Pattern | None], unit: SourceUnit) -> list[str]:
    pattern = table[unit.language]
    if pattern is None:
        return []
    found = []
    for match in pattern.finditer(unit.content):
        groups = [g for g in match.groups() if g]
        found.append(groups[0].strip() if groups else match.group(0).strip())
    return found


def find_duplicate_blocks(
    lines: list[str],
    window: int = DUPLICATE_WINDOW,
    min_chars: int = MIN_DUPLICATE_CHARS,
) -> list[DuplicateBlock]:
    """Find identical windows of `window` lines inside one file.

    Every start `i` is compared to every start `j > i + window`, so the cost is
    quadratic in the line count. Windows shorter than `min_chars` once stripped
    are ignored.
    """
    starts = range(len(lines) - window + 1)
    blocks = ["\n".join(lines[s : s + window]).strip() for s in starts]
    duplicates: list[DuplicateBlock] = []

    for i in starts:
        text = blocks[i]
        if len(text) < min_chars:
            continue
        for j in range(i + window + 1, len(blocks)):
            if blocks[j] == text:
                duplicates.append(
                    DuplicateBlock(
                        start_line=i + 1,
                        end_line=i + window,
                        duplicate_start=j + 1,
                        duplicate_end=j + window,
                        content=text,
                    )
                )
    return duplicates


def scan_unit(unit: SourceUnit) -> FileMetrics:
    """Compute structural metrics for one source unit."""
    return FileMetrics(
        path=unit.path,
        lines_of_code=count_lines_of_code(unit),
        cyclomatic_complexity=calculate_complexity(unit),
        function_count=_count(FUNCTION_PATTERNS, unit),
        class_count=_count(CLASS_PATTERNS, unit),
        comment_lines=count_comment_lines(unit),
        duplicate_blocks=tuple(find_duplicate_blocks(unit.lines)),
        imports=tuple(_extract(IMPORT_PATTERNS, unit)),
        exports=tuple(_extract(EXPORT_PATTERNS, unit)),
    )


def duplication_issues(unit: SourceUnit, metrics: FileMetrics) -> list[Issue]:
    """One duplication issue per duplicate pairing found by the scanner."""
    issues = []
    for n, block in enumerate(metrics.duplicate_blocks):
        issues.append(
            Issue(
                id=f"duplicate-block:{unit.path}:{block.start_line}:{block.duplicate_start}:{n}",
                type=IssueType.DUPLICATION,
                severity=Severity.LOW,
                title="Duplicated Code Block",
                description=(
                    f"Lines {block.start_line}-{block.end_line} are repeated at lines "
                    f"{block.duplicate_start}-{block.duplicate_end}."
                ),
                file=unit.path,
                line=block.start_line,
                suggestion="Extract the repeated block into a shared function.",
                impact="Duplicated logic must be fixed in several places and drifts over time.",
                effort=Effort.LOW,
            )
        )
    return issues


def total_lines(units: list[SourceUnit]) -> int:
    return sum(len(u.lines) for u in units)


def language_stats(units: list[SourceUnit]) -> dict[str, int]:
    """Files per language, in first-seen order."""
    return dict(Counter(u.language.value for u in units))
