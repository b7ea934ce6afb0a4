"""SARIF 2.1.0 output format for GitHub Code Scanning integration."""

from __future__ import annotations

from codeqa import __version__
from codeqa.models import Issue, IssueType, Report, Severity

SARIF_SCHEMA = "https://raw.githubusercontent.com/oasis-tcs/sarif-spec/master/Schemata/sarif-schema-2.1.0.json"

LEVELS = {
    Severity.CRITICAL: "error",
    Severity.HIGH: "error",
    Severity.MEDIUM: "warning",
    Severity.LOW: "note",
}


def _rule_id(issue_type: IssueType) -> str:
    return f"codeqa/{issue_type.value}"


def report_to_sarif(report: Report) -> dict:
    """Convert a Report to a SARIF 2.1.0 document.

    Rules are the issue types present in the report, one rule per type.
    Project-level issues are located at the repository root.
    """
    present = sorted({i.type for i in report.issues}, key=lambda t: t.value)
    rules = [
        {
            "id": _rule_id(t),
            "name": t.value.capitalize(),
            "shortDescription": {"text": f"{t.value.capitalize()} issue"},
            "defaultConfiguration": {"level": "warning"},
        }
        for t in present
    ]

    return {
        "version": "2.1.0",
        "$schema": SARIF_SCHEMA,
        "runs": [
            {
                "tool": {
                    "driver": {
                        "name": "codeqa",
                        "version": __version__,
                        "rules": rules,
                    }
                },
                "results": [_issue_to_sarif_result(i) for i in report.issues],
                "properties": {
                    "metrics": report.metrics.to_dict(),
                    "timestamp": report.timestamp,
                },
            }
        ],
    }


def _issue_to_sarif_result(issue: Issue) -> dict:
    message_text = issue.title
    if issue.description:
        message_text = f"{issue.title}: {issue.description}"

    location: dict = {
        "artifactLocation": {
            "uri": issue.file,
            "uriBaseId": "%SRCROOT%",
        },
    }
    if issue.line:
        location["region"] = {"startLine": issue.line}

    result: dict = {
        "ruleId": _rule_id(issue.type),
        "level": LEVELS[issue.severity],
        "message": {"text": message_text},
        "locations": [{"physicalLocation": location}],
        "fingerprints": {"codeqaIssueId": issue.id},
        "properties": {
            "severity": issue.severity.value,
            "effort": issue.effort.value,
            "impact": issue.impact,
        },
    }
    if issue.suggestion:
        result["fixes"] = [{"description": {"text": issue.suggestion}}]
    return result
