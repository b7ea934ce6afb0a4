"""Report generation."""

from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path

from codeqa.models import Issue, IssueType, Report
from codeqa.sarif import report_to_sarif

EXPORT_FORMATS = ["markdown", "json", "sarif", "all"]
ISSUES_PER_CATEGORY = 5

TYPE_ICONS = {
    IssueType.SECURITY: "🔒",
    IssueType.PERFORMANCE: "⚡",
    IssueType.COMPLEXITY: "🔧",
    IssueType.DUPLICATION: "📋",
    IssueType.TESTING: "🧪",
    IssueType.DOCUMENTATION: "📚",
    IssueType.MAINTAINABILITY: "🛠️",
}


def metric_status(value: int, lower_is_better: bool) -> str:
    """Traffic-light label for a metric value."""
    if lower_is_better:
        if value <= 4:
            return "✅ Good"
        if value <= 7:
            return "⚠️ Warning"
        return "❌ Poor"
    if value >= 70:
        return "✅ Good"
    if value >= 30:
        return "⚠️ Warning"
    return "❌ Poor"


def quality_score(report: Report) -> int:
    files = report.summary.total_files or 1
    return max(0, int(100 - report.summary.issue_count / files * 10 + 0.5))


def _group_by_type(issues: tuple[Issue, ...]) -> dict[IssueType, list[Issue]]:
    groups: dict[IssueType, list[Issue]] = {}
    for issue in issues:
        groups.setdefault(issue.type, []).append(issue)
    return groups


def generate_markdown(report: Report) -> str:
    """Generate a markdown report."""
    summary = report.summary
    breakdown = summary.severity_breakdown
    metrics = report.metrics
    lines = [
        "# 🔍 Code Quality Report",
        "",
        f"**Generated:** {report.timestamp}",
        "",
        "## 📊 Summary",
        "",
        "| Metric | Value |",
        "|--------|-------|",
        f"| Files Analyzed | {summary.total_files} |",
        f"| Total Lines | {summary.total_lines:,} |",
        f"| Languages | {', '.join(summary.languages)} |",
        f"| Issues Found | {summary.issue_count} |",
        "",
        "## ⚠️ Issue Severity Breakdown",
        "",
        "| Severity | Count |",
        "|----------|-------|",
        f"| 🔴 Critical | {breakdown.get('critical', 0)} |",
        f"| 🟠 High | {breakdown.get('high', 0)} |",
        f"| 🟡 Medium | {breakdown.get('medium', 0)} |",
        f"| 🟢 Low | {breakdown.get('low', 0)} |",
        "",
        "## 📈 Quality Metrics",
        "",
        "| Metric | Score | Status |",
        "|--------|-------|--------|",
        f"| Code Complexity | {metrics.code_complexity}/10 | {metric_status(metrics.code_complexity, True)} |",
        f"| Test Coverage | {metrics.test_coverage}% | {metric_status(metrics.test_coverage, False)} |",
        f"| Code Duplication | {metrics.duplication_percentage}% | "
        f"{metric_status(metrics.duplication_percentage, True)} |",
        f"| Maintainability Index | {metrics.maintainability_index}/100 | "
        f"{metric_status(metrics.maintainability_index, False)} |",
        "",
    ]

    groups = _group_by_type(report.issues)
    if groups:
        lines.append("## 🔍 Issues by Category")
        lines.append("")
    for issue_type, issues in groups.items():
        lines.append(f"### {TYPE_ICONS[issue_type]} {issue_type.value.capitalize()} ({len(issues)})")
        lines.append("")
        for issue in issues[:ISSUES_PER_CATEGORY]:
            loc = f"`{issue.file}`"
            if issue.line:
                loc += f" (Line {issue.line})"
            lines.append(f"**{issue.title}** ({issue.severity.value})")
            lines.append(f"- **File:** {loc}")
            lines.append(f"- **Description:** {issue.description}")
            lines.append(f"- **Suggestion:** {issue.suggestion}")
            lines.append(f"- **Impact:** {issue.impact}")
            lines.append(f"- **Effort:** {issue.effort.value}")
            lines.append("")
        if len(issues) > ISSUES_PER_CATEGORY:
            lines.append(f"*... and {len(issues) - ISSUES_PER_CATEGORY} more {issue_type.value} issues*")
            lines.append("")

    if report.recommendations:
        lines.append("## 💡 Recommendations")
        lines.append("")
        lines.extend(f"- {rec}" for rec in report.recommendations)
        lines.append("")

    if report.issues:
        lines.append("## 📋 All Issues")
        lines.append("")
        lines.append("| Priority | Type | Severity | Title | File | Line |")
        lines.append("|----------|------|----------|-------|------|------|")
        for n, issue in enumerate(report.issues, 1):
            lines.append(
                f"| {n} | {TYPE_ICONS[issue.type]} {issue.type.value} | {issue.severity.value} "
                f"| {issue.title} | `{issue.file}` | {issue.line or '-'} |"
            )
        lines.append("")

    return "\n".join(lines)


def generate_json(report: Report) -> str:
    return json.dumps(report.to_dict(), indent=2, ensure_ascii=False)


def format_summary(report: Report) -> str:
    """Format a short console summary."""
    summary = report.summary
    lines = [
        "📊 Analysis Summary:",
        f"• {summary.total_files} files analyzed",
        f"• {summary.total_lines:,} lines of code",
        f"• {summary.issue_count} issues found",
        f"• {len(summary.languages)} programming languages",
    ]

    critical = summary.severity_breakdown.get("critical", 0)
    high = summary.severity_breakdown.get("high", 0)
    if critical:
        lines.append(f"🚨 {critical} critical issues require immediate attention")
    if high:
        lines.append(f"⚠️ {high} high-priority issues found")

    lines.append(f"📈 Overall Quality Score: {quality_score(report)}/100")
    return "\n".join(lines)


def export_report(report: Report, reports_dir: str | Path, fmt: str = "markdown") -> list[Path]:
    """Write the report in `fmt` (or every format for "all"); return the paths."""
    if fmt not in EXPORT_FORMATS:
        raise ValueError(f"Unsupported format: {fmt}. Available: {', '.join(EXPORT_FORMATS)}")

    out = Path(reports_dir)
    out.mkdir(parents=True, exist_ok=True)
    base = f"code-quality-report-{datetime.now().strftime('%Y-%m-%d-%H%M%S')}"

    renderers = {
        "markdown": (".md", lambda: generate_markdown(report)),
        "json": (".json", lambda: generate_json(report)),
        "sarif": (".sarif", lambda: json.dumps(report_to_sarif(report), indent=2)),
    }
    selected = list(renderers) if fmt == "all" else [fmt]

    written = []
    for name in selected:
        suffix, render = renderers[name]
        path = out / f"{base}{suffix}"
        path.write_text(render(), encoding="utf-8")
        written.append(path)
    return written
