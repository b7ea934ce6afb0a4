"""MCP server for codeqa: analysis and Q&A sessions for AI coding tools."""

from __future__ import annotations

import asyncio

from mcp.server.fastmcp import FastMCP

from codeqa.config import load_config
from codeqa.errors import EmptyInputError, InputError, SessionNotFoundError, SourceFetchError
from codeqa.providers import create_provider
from codeqa.providers.base import BaseProvider
from codeqa.reporter import format_summary
from codeqa.runner import run_analysis
from codeqa.session import SessionStore

mcp = FastMCP("codeqa")


def _default_provider() -> BaseProvider | None:
    config = load_config()
    return create_provider(config.provider, config.model)


def _make_store() -> SessionStore:
    sessions = load_config().sessions
    return SessionStore(
        provider_factory=_default_provider,
        max_sessions=sessions.max_sessions,
        evict_count=sessions.evict_count,
    )


store = _make_store()


def _not_found(session_id: str) -> str:
    return f"Session not found: {session_id}. Run analyze_path first."


@mcp.tool()
async def analyze_path(path: str, use_ai: bool = True) -> str:
    """Analyze a local directory, file or GitHub repository.

    Starts a Q&A session for the results; pass the returned session id to
    ask_question.

    Args:
        path: Local path, GitHub URL or owner/repo
        use_ai: Run the AI pass in addition to static analysis (default True)
    """
    config = load_config()
    try:
        result = await asyncio.to_thread(run_analysis, path, config, use_ai)
    except EmptyInputError:
        return f"No supported code files found in {path}"
    except (SourceFetchError, InputError) as e:
        return f"Analysis failed: {e}"

    report = result.report
    session_id = store.create(report, result.source.units)

    lines = [format_summary(report), ""]
    for issue in report.issues[:10]:
        loc = f"{issue.file}:{issue.line}" if issue.line else issue.file
        lines.append(f"[{issue.severity.value.upper()}] {issue.title} @ {loc}")
    lines.append("")
    lines.append(f"Session ID: {session_id}")
    return "\n".join(lines)


@mcp.tool()
async def ask_question(session_id: str, question: str) -> str:
    """Ask a question about an analyzed codebase.

    Args:
        session_id: Id returned by analyze_path
        question: Natural-language question about the code or the report
    """
    try:
        session = store.get(session_id)
    except SessionNotFoundError:
        return _not_found(session_id)
    return await asyncio.to_thread(session.ask, question)


@mcp.tool()
async def get_suggested_questions(session_id: str) -> str:
    """Get suggested follow-up questions for a session."""
    try:
        questions = store.suggested_questions(session_id)
    except SessionNotFoundError:
        return _not_found(session_id)
    return "\n".join(f"{n}. {q}" for n, q in enumerate(questions, 1))


@mcp.tool()
async def get_history(session_id: str) -> str:
    """Get the question/answer history of a session."""
    try:
        history = store.history(session_id)
    except SessionNotFoundError:
        return _not_found(session_id)
    if not history:
        return "No conversation history yet."
    lines = []
    for n, turn in enumerate(history, 1):
        lines.append(f"Q{n}: {turn.question}")
        lines.append(f"A{n}: {turn.answer}")
        lines.append("")
    return "\n".join(lines)


@mcp.tool()
async def delete_session(session_id: str) -> str:
    """Delete a Q&A session and its history."""
    try:
        store.delete(session_id)
    except SessionNotFoundError:
        return _not_found(session_id)
    return f"Session {session_id} deleted."


def run_server() -> None:
    """Start the MCP server via stdio transport."""
    mcp.run(transport="stdio")
