"""Tests for report aggregation and prioritization."""

from __future__ import annotations

import pytest
from conftest import make_issue, make_unit

from codeqa.aggregator import (
    ALL_CLEAR,
    build_report,
    calculate_metrics,
    generate_recommendations,
    prioritize,
)
from codeqa.errors import EmptyInputError, InputError
from codeqa.models import IssueType, Severity


@pytest.fixture
def units():
    return [make_unit("src/app.js", "a\nb\n"), make_unit("lib/util.py", "x\n")]


class TestBuildReport:
    def test_empty_units_rejected(self):
        with pytest.raises(EmptyInputError, match="No supported code files provided"):
            build_report([], [])

    def test_issue_for_unknown_file_rejected(self, units):
        with pytest.raises(InputError):
            build_report(units, [make_issue(file="elsewhere.js")])

    def test_project_issues_allowed(self, units):
        report = build_report(units, [make_issue(file="project", line=None)])
        assert report.summary.issue_count == 1

    def test_summary(self, units):
        report = build_report(units, [], timestamp="2026-01-01T00:00:00+00:00")
        assert report.summary.total_files == 2
        assert report.summary.total_lines == 5
        assert report.summary.languages == ("javascript", "python")
        assert report.timestamp == "2026-01-01T00:00:00+00:00"

    def test_timestamp_defaults_to_now(self, units):
        assert build_report(units, []).timestamp

    def test_severity_breakdown_sums_to_issue_count(self, units):
        issues = [
            make_issue("a", severity=Severity.CRITICAL),
            make_issue("b", severity=Severity.LOW),
            make_issue("c", severity=Severity.LOW),
        ]
        report = build_report(units, issues)
        breakdown = report.summary.severity_breakdown
        assert breakdown == {"low": 2, "medium": 0, "high": 0, "critical": 1}
        assert sum(breakdown.values()) == report.summary.issue_count == len(report.issues)

    def test_duplicate_ids_made_unique(self, units):
        issues = [make_issue("x"), make_issue("x"), make_issue("x-2")]
        report = build_report(units, issues)
        ids = [i.id for i in report.issues]
        assert sorted(ids) == ["x", "x-2", "x-3"]

    def test_input_issues_not_mutated(self, units):
        first, second = make_issue("x"), make_issue("x")
        build_report(units, [first, second])
        assert second.id == "x"

    def test_clean_project(self, units):
        report = build_report(units, [])
        assert report.issues == ()
        assert report.recommendations == (ALL_CLEAR,)
        assert report.metrics.test_coverage == 100
        assert report.metrics.maintainability_index == 100


class TestPrioritize:
    def test_severity_then_type(self):
        issues = [
            make_issue("low-sec", IssueType.SECURITY, Severity.LOW),
            make_issue("high-test", IssueType.TESTING, Severity.HIGH),
            make_issue("high-sec", IssueType.SECURITY, Severity.HIGH),
            make_issue("crit-doc", IssueType.DOCUMENTATION, Severity.CRITICAL),
            make_issue("high-perf", IssueType.PERFORMANCE, Severity.HIGH),
        ]
        assert [i.id for i in prioritize(issues)] == [
            "crit-doc",
            "high-sec",
            "high-perf",
            "high-test",
            "low-sec",
        ]

    def test_ties_keep_arrival_order(self):
        issues = [make_issue(f"n{k}", IssueType.COMPLEXITY, Severity.MEDIUM) for k in range(5)]
        assert [i.id for i in prioritize(issues)] == ["n0", "n1", "n2", "n3", "n4"]

    def test_report_issues_are_ordered(self, units):
        issues = [
            make_issue("a", IssueType.DOCUMENTATION, Severity.LOW),
            make_issue("b", IssueType.SECURITY, Severity.CRITICAL),
            make_issue("c", IssueType.PERFORMANCE, Severity.MEDIUM),
        ]
        report = build_report(units, issues)
        keys = [(i.severity.rank, i.type.priority) for i in report.issues]
        assert keys == sorted(keys, reverse=True)


class TestCalculateMetrics:
    def test_formulas(self):
        issues = [
            make_issue("c1", IssueType.COMPLEXITY),
            make_issue("t1", IssueType.TESTING),
            make_issue("d1", IssueType.DUPLICATION),
            make_issue("d2", IssueType.DUPLICATION),
        ]
        m = calculate_metrics(2, issues)
        assert m.code_complexity == 5
        assert m.test_coverage == 80
        assert m.duplication_percentage == 10
        assert m.maintainability_index == 80

    def test_clamped(self):
        issues = (
            [make_issue(f"c{n}", IssueType.COMPLEXITY) for n in range(30)]
            + [make_issue(f"t{n}", IssueType.TESTING) for n in range(10)]
            + [make_issue(f"d{n}", IssueType.DUPLICATION) for n in range(20)]
        )
        m = calculate_metrics(1, issues)
        assert m.code_complexity == 10
        assert m.test_coverage == 0
        assert m.duplication_percentage == 50
        assert m.maintainability_index == 0

    def test_halves_round_up(self):
        m = calculate_metrics(4, [make_issue("c", IssueType.COMPLEXITY)])
        assert m.code_complexity == 3
        assert m.maintainability_index == 98


class TestRecommendations:
    def test_fixed_order(self):
        issues = [
            make_issue("d", IssueType.DOCUMENTATION),
            make_issue("c", IssueType.COMPLEXITY),
            make_issue("s", IssueType.SECURITY),
        ]
        recs = generate_recommendations(issues)
        assert len(recs) == 3
        assert recs[0].startswith("🔒")
        assert recs[1].startswith("🔧")
        assert recs[2].startswith("📚")

    def test_untracked_types_give_positive_message(self):
        issues = [make_issue("m", IssueType.MAINTAINABILITY), make_issue("d", IssueType.DUPLICATION)]
        assert generate_recommendations(issues) == [ALL_CLEAR]
