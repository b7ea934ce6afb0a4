"""Error taxonomy."""

from __future__ import annotations


class CodeQAError(Exception):
    """Base class for codeqa errors."""


class InputError(CodeQAError):
    """The analysis input violates the pipeline contract."""


class EmptyInputError(InputError):
    """No supported source files were supplied."""

    def __init__(self, message: str = "No supported code files provided"):
        super().__init__(message)


class UnsupportedFileError(CodeQAError):
    """A file's extension has no registered language. Callers skip these."""


class ExternalServiceError(CodeQAError):
    """The generative model call failed (auth, quota, network, empty reply)."""


class MissingCredentialsError(ExternalServiceError, ValueError):
    """A provider was constructed without its API key."""


class ParseError(CodeQAError):
    """A model response could not be turned into issues."""


class SessionNotFoundError(CodeQAError, KeyError):
    """No Q&A session exists for the given id."""

    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__(f"Session not found: {session_id}")

    def __str__(self) -> str:
        return self.args[0]


class AnalysisCancelledError(CodeQAError):
    """The caller cancelled an in-flight analysis; no report was produced."""


class SourceFetchError(CodeQAError):
    """A source provider could not supply files (e.g. GitHub API failure)."""
