"""codeqa: AI-assisted code quality analysis with follow-up Q&A."""

__version__ = "0.3.0"
