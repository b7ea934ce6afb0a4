"""Tests for data models."""

from __future__ import annotations

import pytest

from codeqa.errors import UnsupportedFileError
from codeqa.models import (
    Effort,
    Issue,
    IssueType,
    Language,
    Metrics,
    QATurn,
    Severity,
    SourceUnit,
    language_for_path,
    require_all_languages,
)


class TestLanguageForPath:
    def test_known_extensions(self):
        assert language_for_path("src/app.js") == Language.JAVASCRIPT
        assert language_for_path("src/app.tsx") == Language.TYPESCRIPT
        assert language_for_path("lib/util.py") == Language.PYTHON
        assert language_for_path("include/vec.hpp") == Language.CPP
        assert language_for_path("Main.kt") == Language.KOTLIN

    def test_case_insensitive_suffix(self):
        assert language_for_path("LEGACY.PY") == Language.PYTHON

    def test_windows_separators(self):
        assert language_for_path("src\\app.go") == Language.GO

    def test_unknown_extension_raises(self):
        with pytest.raises(UnsupportedFileError):
            language_for_path("README.md")

    def test_no_extension_raises(self):
        with pytest.raises(UnsupportedFileError):
            language_for_path("Makefile")


class TestRequireAllLanguages:
    def test_complete_table_passes(self):
        require_all_languages({lang: None for lang in Language}, "T")

    def test_missing_entry_raises(self):
        table = {lang: None for lang in Language if lang != Language.RUST}
        with pytest.raises(RuntimeError, match="rust"):
            require_all_languages(table, "T")


class TestEnums:
    def test_severity_rank_order(self):
        ranks = [s.rank for s in (Severity.CRITICAL, Severity.HIGH, Severity.MEDIUM, Severity.LOW)]
        assert ranks == [4, 3, 2, 1]

    def test_type_priority(self):
        assert IssueType.SECURITY.priority == 4
        assert IssueType.PERFORMANCE.priority == 3
        assert IssueType.COMPLEXITY.priority == 2
        assert IssueType.TESTING.priority == 1
        assert IssueType.DOCUMENTATION.priority == 0
        assert IssueType.DUPLICATION.priority == 0
        assert IssueType.MAINTAINABILITY.priority == 0


class TestSourceUnit:
    def test_from_text(self):
        unit = SourceUnit.from_text("a.py", "x = 'é'\n")
        assert unit.language == Language.PYTHON
        assert unit.size_bytes == len("x = 'é'\n".encode("utf-8"))

    def test_lines_keep_trailing_empty_line(self):
        unit = SourceUnit.from_text("a.js", "a\nb\n")
        assert unit.lines == ["a", "b", ""]

    def test_frozen(self):
        unit = SourceUnit.from_text("a.js", "a")
        with pytest.raises(AttributeError):
            unit.content = "b"


class TestIssue:
    def _issue(self, **overrides):
        fields = dict(
            id="x",
            type=IssueType.SECURITY,
            severity=Severity.HIGH,
            title="t",
            description="d",
            file="a.js",
            line=3,
            suggestion="s",
            impact="i",
            effort=Effort.LOW,
        )
        fields.update(overrides)
        return Issue(**fields)

    def test_to_dict_uses_enum_values(self):
        d = self._issue().to_dict()
        assert d["type"] == "security"
        assert d["severity"] == "high"
        assert d["effort"] == "low"
        assert d["line"] == 3

    def test_dict_round_trip(self):
        issue = self._issue(line=None)
        assert Issue.from_dict(issue.to_dict()) == issue


class TestMetrics:
    def test_defaults(self):
        m = Metrics()
        assert m.to_dict() == {
            "code_complexity": 0,
            "test_coverage": 100,
            "duplication_percentage": 0,
            "maintainability_index": 100,
        }


class TestReport:
    def test_to_dict(self, sample_report):
        d = sample_report.to_dict()
        assert d["summary"]["total_files"] == 3
        assert [i["id"] for i in d["issues"]] == ["sec-1", "test-1", "perf-1"]
        assert d["timestamp"] == "2026-02-14T10:00:00+00:00"

    def test_issues_of_type(self, sample_report):
        assert [i.id for i in sample_report.issues_of_type(IssueType.TESTING)] == ["test-1"]


class TestQATurn:
    def test_to_dict(self):
        assert QATurn("q", "a").to_dict() == {"question": "q", "answer": "a"}
