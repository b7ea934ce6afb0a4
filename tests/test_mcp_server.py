"""Tests for MCP server tools."""

from __future__ import annotations

import asyncio

import pytest
from conftest import FakeProvider

from codeqa.mcp import server
from codeqa.mcp.server import (
    analyze_path,
    ask_question,
    delete_session,
    get_history,
    get_suggested_questions,
)
from codeqa.session import BASELINE_QUESTIONS, SessionStore


@pytest.fixture
def store(monkeypatch, tmp_path_factory):
    """Fresh session store with a canned provider; cwd without codeqa.yml."""
    monkeypatch.chdir(tmp_path_factory.mktemp("cwd"))
    fresh = SessionStore(provider_factory=lambda: FakeProvider(replies=["Look at src/app.py."]))
    monkeypatch.setattr(server, "store", fresh)
    return fresh


def _analyze(path) -> tuple[str, str]:
    output = asyncio.run(analyze_path(str(path), use_ai=False))
    session_id = output.rsplit("Session ID: ", 1)[1].strip()
    return output, session_id


class TestAnalyzePath:
    def test_creates_session(self, store, tmp_repo):
        output, session_id = _analyze(tmp_repo)
        assert "📊 Analysis Summary:" in output
        assert "• 2 files analyzed" in output
        assert session_id in store

    def test_no_supported_files(self, store, tmp_path):
        (tmp_path / "notes.txt").write_text("hello")
        output = asyncio.run(analyze_path(str(tmp_path), use_ai=False))
        assert output == f"No supported code files found in {tmp_path}"
        assert len(store) == 0

    def test_missing_path(self, store, tmp_path):
        output = asyncio.run(analyze_path(str(tmp_path / "missing"), use_ai=False))
        assert output.startswith("Analysis failed: Path does not exist")


class TestSessionTools:
    def test_ask_and_history(self, store, tmp_repo):
        _, session_id = _analyze(tmp_repo)
        assert asyncio.run(get_history(session_id)) == "No conversation history yet."

        answer = asyncio.run(ask_question(session_id, "Where do I start?"))
        assert answer == "Look at src/app.py."

        history = asyncio.run(get_history(session_id))
        assert "Q1: Where do I start?" in history
        assert "A1: Look at src/app.py." in history

    def test_suggested_questions(self, store, tmp_repo):
        _, session_id = _analyze(tmp_repo)
        output = asyncio.run(get_suggested_questions(session_id))
        assert output.splitlines()[0] == f"1. {BASELINE_QUESTIONS[0]}"

    def test_delete(self, store, tmp_repo):
        _, session_id = _analyze(tmp_repo)
        assert asyncio.run(delete_session(session_id)) == f"Session {session_id} deleted."
        assert session_id not in store
        assert "Session not found" in asyncio.run(ask_question(session_id, "still there?"))

    @pytest.mark.parametrize("tool", [get_history, get_suggested_questions, delete_session])
    def test_unknown_session(self, store, tool):
        output = asyncio.run(tool("nope"))
        assert output == "Session not found: nope. Run analyze_path first."

    def test_unknown_session_question(self, store):
        output = asyncio.run(ask_question("nope", "hello?"))
        assert output == "Session not found: nope. Run analyze_path first."
