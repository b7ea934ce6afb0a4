"""Tests for SARIF output format."""

from __future__ import annotations

from conftest import make_issue, make_unit

from codeqa import __version__
from codeqa.aggregator import build_report
from codeqa.models import Severity
from codeqa.sarif import report_to_sarif


class TestReportToSarif:
    def test_clean_report(self):
        sarif = report_to_sarif(build_report([make_unit("a.js")], []))
        assert sarif["version"] == "2.1.0"
        assert "$schema" in sarif
        run = sarif["runs"][0]
        assert run["results"] == []
        assert run["tool"]["driver"]["rules"] == []
        assert run["tool"]["driver"]["name"] == "codeqa"
        assert run["tool"]["driver"]["version"] == __version__

    def test_single_issue(self, sample_report):
        result = report_to_sarif(sample_report)["runs"][0]["results"][0]
        assert result["ruleId"] == "codeqa/security"
        assert result["level"] == "error"
        assert result["message"]["text"] == "security issue: Something is wrong"
        location = result["locations"][0]["physicalLocation"]
        assert location["artifactLocation"]["uri"] == "src/db.js"
        assert location["region"] == {"startLine": 1}
        assert result["fingerprints"] == {"codeqaIssueId": "sec-1"}
        assert result["fixes"][0]["description"]["text"] == "Fix it"

    def test_project_issue_has_no_region(self, sample_report):
        results = report_to_sarif(sample_report)["runs"][0]["results"]
        project = next(r for r in results if r["fingerprints"]["codeqaIssueId"] == "test-1")
        location = project["locations"][0]["physicalLocation"]
        assert location["artifactLocation"]["uri"] == "project"
        assert "region" not in location

    def test_severity_levels(self):
        units = [make_unit("src/app.js")]
        issues = [
            make_issue("c", severity=Severity.CRITICAL),
            make_issue("h", severity=Severity.HIGH),
            make_issue("m", severity=Severity.MEDIUM),
            make_issue("l", severity=Severity.LOW),
        ]
        results = report_to_sarif(build_report(units, issues))["runs"][0]["results"]
        levels = {r["fingerprints"]["codeqaIssueId"]: r["level"] for r in results}
        assert levels == {"c": "error", "h": "error", "m": "warning", "l": "note"}

    def test_one_rule_per_present_type(self, sample_report):
        rules = report_to_sarif(sample_report)["runs"][0]["tool"]["driver"]["rules"]
        assert [r["id"] for r in rules] == [
            "codeqa/performance",
            "codeqa/security",
            "codeqa/testing",
        ]

    def test_run_properties(self, sample_report):
        props = report_to_sarif(sample_report)["runs"][0]["properties"]
        assert props["timestamp"] == "2026-02-14T10:00:00+00:00"
        assert props["metrics"]["test_coverage"] == 80
