"""Conversational Q&A over a finished Report.

A QASession owns its history; a SessionStore maps session ids to sessions for
the CLI and the MCP server and evicts the oldest ones when it grows too large.
"""

from __future__ import annotations

import threading
import uuid
from collections import OrderedDict
from typing import Callable

from codeqa.errors import CodeQAError, SessionNotFoundError
from codeqa.logging import get_logger
from codeqa.models import IssueType, QATurn, Report, SourceUnit
from codeqa.providers.base import BaseProvider

logger = get_logger("session")

APOLOGY_MESSAGE = (
    "I'm sorry, I encountered an error while processing your question. Please try again."
)

TOP_ISSUES = 10
MAX_ISSUE_FIELD = 300
FILES_PER_LANGUAGE = 5
HISTORY_TURNS = 3
MAX_HISTORY_FIELD = 200
MAX_SUGGESTIONS = 8

BASELINE_QUESTIONS = [
    "What are the most critical issues I should fix first?",
    "How can I improve the overall code quality?",
    "What files need the most attention?",
]

TYPE_QUESTIONS: list[tuple[IssueType, tuple[str, str]]] = [
    (
        IssueType.SECURITY,
        ("What security vulnerabilities were found?", "How can I make my code more secure?"),
    ),
    (
        IssueType.PERFORMANCE,
        (
            "What performance issues should I address?",
            "How can I optimize the slow parts of my code?",
        ),
    ),
    (
        IssueType.TESTING,
        ("How can I improve test coverage?", "What parts of the code need more testing?"),
    ),
    (
        IssueType.COMPLEXITY,
        ("Which functions are too complex?", "How can I reduce code complexity?"),
    ),
    (
        IssueType.DOCUMENTATION,
        ("What documentation is missing?", "How can I improve code documentation?"),
    ),
]

PROMPT_TEMPLATE = """Context: You are analyzing a codebase. Here's the relevant information:
{context}

Question: {question}

Please provide a clear, helpful answer based on the code context provided."""


def _clip(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    return text[:limit] + "..."


def build_context(
    report: Report,
    units: list[SourceUnit],
    history: list[QATurn],
) -> str:
    """Render the bounded text context sent with every question.

    Only the top issues, a few paths per language and the last turns are
    included, so the size does not grow with the report or the history.
    """
    summary = report.summary
    metrics = report.metrics
    lines = [
        "=== CODE ANALYSIS REPORT ===",
        f"Files analyzed: {summary.total_files}",
        f"Total lines: {summary.total_lines}",
        f"Languages: {', '.join(summary.languages)}",
        f"Issues found: {summary.issue_count}",
        "",
        "Issue Severity Breakdown:",
    ]
    lines.extend(f"- {severity}: {count}" for severity, count in summary.severity_breakdown.items())
    lines += [
        "",
        "Quality Metrics:",
        f"- Code Complexity: {metrics.code_complexity}/10",
        f"- Test Coverage: {metrics.test_coverage}%",
        f"- Code Duplication: {metrics.duplication_percentage}%",
        f"- Maintainability Index: {metrics.maintainability_index}/100",
        "",
        "Top Priority Issues:",
    ]

    for n, issue in enumerate(report.issues[:TOP_ISSUES], 1):
        location = f"{issue.file}:{issue.line}" if issue.line else issue.file
        lines += [
            f"{n}. [{issue.severity.value.upper()}] {_clip(issue.title, MAX_ISSUE_FIELD)}",
            f"   File: {_clip(location, MAX_ISSUE_FIELD)}",
            f"   Type: {issue.type.value}",
            f"   Description: {_clip(issue.description, MAX_ISSUE_FIELD)}",
            f"   Suggestion: {_clip(issue.suggestion, MAX_ISSUE_FIELD)}",
            "",
        ]

    lines.append("File Structure:")
    by_language: dict[str, list[str]] = {}
    for unit in units:
        by_language.setdefault(unit.language.value, []).append(unit.path)
    for language, paths in by_language.items():
        lines.append(f"{language}: {len(paths)} files")
        lines.extend(f"  - {_clip(p, MAX_ISSUE_FIELD)}" for p in paths[:FILES_PER_LANGUAGE])
        if len(paths) > FILES_PER_LANGUAGE:
            lines.append(f"  ... and {len(paths) - FILES_PER_LANGUAGE} more")
    lines.append("")

    if history:
        lines.append("Previous Conversation:")
        for turn in history[-HISTORY_TURNS:]:
            lines.append(f"Q: {_clip(turn.question, MAX_HISTORY_FIELD)}")
            lines.append(f"A: {_clip(turn.answer, MAX_HISTORY_FIELD)}")
            lines.append("")

    return "\n".join(lines)


def build_prompt(context: str, question: str) -> str:
    return PROMPT_TEMPLATE.format(context=context, question=question)


def suggested_questions(report: Report) -> list[str]:
    suggestions = list(BASELINE_QUESTIONS)

    present = {i.type for i in report.issues}
    for issue_type, questions in TYPE_QUESTIONS:
        if issue_type in present:
            suggestions.extend(questions)

    if report.metrics.test_coverage < 50:
        suggestions.append("Why is my test coverage so low?")
    if report.metrics.code_complexity > 7:
        suggestions.append("Why is my code complexity high?")
    if report.metrics.duplication_percentage > 20:
        suggestions.append("Where is the duplicated code?")

    return suggestions[:MAX_SUGGESTIONS]


class QASession:
    """One conversation about one Report.

    Failed turns (no provider, provider error) return APOLOGY_MESSAGE and are
    not added to the history.
    """

    def __init__(
        self,
        report: Report,
        units: list[SourceUnit],
        provider: BaseProvider | None = None,
        session_id: str | None = None,
    ):
        self.report = report
        self.units = list(units)
        self.provider = provider
        self.session_id = session_id or uuid.uuid4().hex
        self._history: list[QATurn] = []

    def ask(self, question: str) -> str:
        if self.provider is None:
            logger.warning("Session %s: no AI provider configured", self.session_id)
            return APOLOGY_MESSAGE

        prompt = build_prompt(build_context(self.report, self.units, self._history), question)
        try:
            answer = self.provider.generate_text(prompt)
        except CodeQAError as e:
            logger.warning("Session %s: question failed: %s", self.session_id, e)
            return APOLOGY_MESSAGE
        except Exception:
            logger.exception("Session %s: unexpected provider failure", self.session_id)
            return APOLOGY_MESSAGE

        self._history.append(QATurn(question=question, answer=answer))
        return answer

    def suggested_questions(self) -> list[str]:
        return suggested_questions(self.report)

    def history(self) -> list[QATurn]:
        return list(self._history)

    def clear_history(self) -> None:
        self._history = []


class SessionStore:
    """Thread-safe id → QASession map with oldest-first eviction."""

    def __init__(
        self,
        provider_factory: Callable[[], BaseProvider | None] | None = None,
        max_sessions: int = 100,
        evict_count: int = 50,
    ):
        self.provider_factory = provider_factory
        self.max_sessions = max_sessions
        self.evict_count = evict_count
        self._sessions: OrderedDict[str, QASession] = OrderedDict()
        self._lock = threading.Lock()

    def create(
        self,
        report: Report,
        units: list[SourceUnit],
        session_id: str | None = None,
    ) -> str:
        provider = self.provider_factory() if self.provider_factory else None
        session = QASession(report, units, provider, session_id)
        with self._lock:
            self._sessions[session.session_id] = session
            self._sessions.move_to_end(session.session_id)
            if len(self._sessions) > self.max_sessions:
                # The session just inserted is never evicted.
                for _ in range(min(self.evict_count, len(self._sessions) - 1)):
                    evicted, _ = self._sessions.popitem(last=False)
                    logger.debug("Evicted session %s", evicted)
        return session.session_id

    def get(self, session_id: str) -> QASession:
        with self._lock:
            try:
                return self._sessions[session_id]
            except KeyError:
                raise SessionNotFoundError(session_id) from None

    def ask(self, session_id: str, question: str) -> str:
        return self.get(session_id).ask(question)

    def suggested_questions(self, session_id: str) -> list[str]:
        return self.get(session_id).suggested_questions()

    def history(self, session_id: str) -> list[QATurn]:
        return self.get(session_id).history()

    def clear(self, session_id: str) -> None:
        self.get(session_id).clear_history()

    def delete(self, session_id: str) -> None:
        with self._lock:
            if self._sessions.pop(session_id, None) is None:
                raise SessionNotFoundError(session_id)

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        with self._lock:
            return session_id in self._sessions
