"""Shared fixtures for codeqa tests."""

from __future__ import annotations

import textwrap
from pathlib import Path

import pytest

from codeqa.aggregator import build_report
from codeqa.errors import ExternalServiceError
from codeqa.models import Effort, Issue, IssueType, Severity, SourceUnit
from codeqa.providers.base import BaseProvider


class FakeProvider(BaseProvider):
    """Provider returning canned replies and recording prompts."""

    name = "fake"
    model = "fake-model"

    def __init__(self, replies=None, error: Exception | None = None):
        self.replies = list(replies or [])
        self.error = error
        self.prompts: list[str] = []

    def generate_text(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        if not self.replies:
            return "[]"
        if len(self.replies) == 1:
            return self.replies[0]
        return self.replies.pop(0)


def make_unit(path: str, content: str = "const x = 1;\n") -> SourceUnit:
    return SourceUnit.from_text(path, content)


def make_issue(
    id: str = "issue-1",
    type: IssueType = IssueType.SECURITY,
    severity: Severity = Severity.HIGH,
    file: str = "src/app.js",
    line: int | None = 1,
) -> Issue:
    return Issue(
        id=id,
        type=type,
        severity=severity,
        title=f"{type.value} issue",
        description="Something is wrong",
        file=file,
        line=line,
        suggestion="Fix it",
        impact="It matters",
        effort=Effort.MEDIUM,
    )


@pytest.fixture
def fake_provider():
    return FakeProvider(replies=["Fix the SQL injection in src/db.js first."])


@pytest.fixture
def failing_provider():
    return FakeProvider(error=ExternalServiceError("quota exceeded"))


@pytest.fixture
def sample_units():
    return [
        make_unit("src/app.js", "function main() {\n  return 1;\n}\n"),
        make_unit("src/db.js", 'query("SELECT * FROM users WHERE id=" + id)\n'),
        make_unit("lib/util.py", "def helper():\n    return 2\n"),
    ]


@pytest.fixture
def sample_report(sample_units):
    issues = [
        make_issue("sec-1", IssueType.SECURITY, Severity.CRITICAL, "src/db.js", 1),
        make_issue("perf-1", IssueType.PERFORMANCE, Severity.MEDIUM, "src/db.js", 1),
        make_issue("test-1", IssueType.TESTING, Severity.HIGH, "project", None),
    ]
    return build_report(sample_units, issues, timestamp="2026-02-14T10:00:00+00:00")


@pytest.fixture
def tmp_repo(tmp_path):
    """Create a small project tree for gathering tests."""
    (tmp_path / "src").mkdir()
    (tmp_path / "src" / "app.py").write_text("def main():\n    print('hello')\n")
    (tmp_path / "src" / "utils.ts").write_text("export const x = 1;\n")
    (tmp_path / "README.md").write_text("# My App")
    (tmp_path / "config.yml").write_text("key: value")
    # Files that should be excluded
    (tmp_path / "node_modules").mkdir()
    (tmp_path / "node_modules" / "lib.js").write_text("module.exports = {}")
    (tmp_path / ".git").mkdir()
    (tmp_path / ".git" / "config").write_text("[core]")
    (tmp_path / "dist").mkdir()
    (tmp_path / "dist" / "bundle.js").write_text("var a = 1;")
    (tmp_path / "src" / "vendor.min.js").write_text("var b = 2;")
    return tmp_path


@pytest.fixture
def tmp_config(tmp_path):
    """Write a codeqa.yml and return its path."""

    def _write(content: str) -> Path:
        p = tmp_path / "codeqa.yml"
        p.write_text(textwrap.dedent(content))
        return p

    return _write
