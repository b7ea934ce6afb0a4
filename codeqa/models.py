"""Core data models."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from pathlib import PurePosixPath
from typing import Any, Mapping

from codeqa.errors import UnsupportedFileError

# Sentinel file for issues that concern the whole project rather than one file.
PROJECT_FILE = "project"


class Language(str, Enum):
    JAVASCRIPT = "javascript"
    TYPESCRIPT = "typescript"
    PYTHON = "python"
    JAVA = "java"
    CPP = "cpp"
    CSHARP = "csharp"
    PHP = "php"
    RUBY = "ruby"
    GO = "go"
    RUST = "rust"
    SWIFT = "swift"
    KOTLIN = "kotlin"


LANGUAGE_EXTENSIONS: dict[str, Language] = {
    ".js": Language.JAVASCRIPT,
    ".jsx": Language.JAVASCRIPT,
    ".ts": Language.TYPESCRIPT,
    ".tsx": Language.TYPESCRIPT,
    ".py": Language.PYTHON,
    ".java": Language.JAVA,
    ".c": Language.CPP,
    ".cc": Language.CPP,
    ".cpp": Language.CPP,
    ".h": Language.CPP,
    ".hpp": Language.CPP,
    ".cs": Language.CSHARP,
    ".php": Language.PHP,
    ".rb": Language.RUBY,
    ".go": Language.GO,
    ".rs": Language.RUST,
    ".swift": Language.SWIFT,
    ".kt": Language.KOTLIN,
}


def language_for_path(path: str) -> Language:
    """Map a file path to its language, raising UnsupportedFileError if unknown."""
    suffix = PurePosixPath(path.replace("\\", "/")).suffix.lower()
    try:
        return LANGUAGE_EXTENSIONS[suffix]
    except KeyError:
        raise UnsupportedFileError(f"Unsupported file type: {path}") from None


def require_all_languages(table: Mapping[Language, Any], name: str) -> None:
    """Fail loudly when a per-language table misses a Language member.

    Tables map unsupported languages to None explicitly, so a new Language
    member without an entry is a programming error, not a silent gap.
    """
    missing = [lang.value for lang in Language if lang not in table]
    if missing:
        raise RuntimeError(f"{name} has no entry for: {', '.join(missing)}")


class IssueType(str, Enum):
    SECURITY = "security"
    PERFORMANCE = "performance"
    COMPLEXITY = "complexity"
    DUPLICATION = "duplication"
    TESTING = "testing"
    DOCUMENTATION = "documentation"
    MAINTAINABILITY = "maintainability"

    @property
    def priority(self) -> int:
        return _TYPE_PRIORITY.get(self, 0)


_TYPE_PRIORITY = {
    IssueType.SECURITY: 4,
    IssueType.PERFORMANCE: 3,
    IssueType.COMPLEXITY: 2,
    IssueType.TESTING: 1,
}


class Severity(str, Enum):
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]


_SEVERITY_RANK = {
    Severity.CRITICAL: 4,
    Severity.HIGH: 3,
    Severity.MEDIUM: 2,
    Severity.LOW: 1,
}


class Effort(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass(frozen=True)
class SourceUnit:
    path: str  # Relative to the analyzed root
    content: str
    language: Language
    size_bytes: int

    @classmethod
    def from_text(cls, path: str, content: str) -> SourceUnit:
        return cls(
            path=path,
            content=content,
            language=language_for_path(path),
            size_bytes=len(content.encode("utf-8")),
        )

    @property
    def lines(self) -> list[str]:
        return self.content.split("\n")


@dataclass(frozen=True)
class Issue:
    id: str
    type: IssueType
    severity: Severity
    title: str
    description: str
    file: str
    line: int | None
    suggestion: str
    impact: str
    effort: Effort

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type.value,
            "severity": self.severity.value,
            "title": self.title,
            "description": self.description,
            "file": self.file,
            "line": self.line,
            "suggestion": self.suggestion,
            "impact": self.impact,
            "effort": self.effort.value,
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> Issue:
        return cls(
            id=raw["id"],
            type=IssueType(raw["type"]),
            severity=Severity(raw["severity"]),
            title=raw["title"],
            description=raw["description"],
            file=raw["file"],
            line=raw.get("line"),
            suggestion=raw["suggestion"],
            impact=raw["impact"],
            effort=Effort(raw["effort"]),
        )


@dataclass(frozen=True)
class Metrics:
    code_complexity: int = 0  # 0..10
    test_coverage: int = 100  # 0..100
    duplication_percentage: int = 0  # 0..50
    maintainability_index: int = 100  # 0..100

    def to_dict(self) -> dict[str, int]:
        return asdict(self)


@dataclass(frozen=True)
class Summary:
    total_files: int
    total_lines: int
    languages: tuple[str, ...]
    issue_count: int
    severity_breakdown: dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_files": self.total_files,
            "total_lines": self.total_lines,
            "languages": list(self.languages),
            "issue_count": self.issue_count,
            "severity_breakdown": dict(self.severity_breakdown),
        }


@dataclass(frozen=True)
class Report:
    summary: Summary
    issues: tuple[Issue, ...]
    metrics: Metrics
    recommendations: tuple[str, ...]
    timestamp: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "summary": self.summary.to_dict(),
            "issues": [i.to_dict() for i in self.issues],
            "metrics": self.metrics.to_dict(),
            "recommendations": list(self.recommendations),
            "timestamp": self.timestamp,
        }

    def issues_of_type(self, issue_type: IssueType) -> list[Issue]:
        return [i for i in self.issues if i.type == issue_type]


@dataclass(frozen=True)
class QATurn:
    question: str
    answer: str

    def to_dict(self) -> dict[str, str]:
        return {"question": self.question, "answer": self.answer}
