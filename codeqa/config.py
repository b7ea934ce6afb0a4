"""Configuration loading and validation."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import yaml

from codeqa.models import LANGUAGE_EXTENSIONS

__all__ = [
    "ALWAYS_EXCLUDED",
    "ALWAYS_EXCLUDED_SUFFIXES",
    "CodeQAConfig",
    "LANGUAGE_EXTENSIONS",
    "MAX_FILE_SIZE",
    "PROVIDER_NAMES",
    "SessionConfig",
    "load_config",
]

MAX_FILE_SIZE = 1024 * 1024  # 1MB

ALWAYS_EXCLUDED = [
    "node_modules",
    ".git",
    "__pycache__",
    ".venv",
    "venv",
    "dist",
    "build",
    "coverage",
    ".next",
    ".nuxt",
    "vendor",
    ".idea",
    ".vscode",
]

ALWAYS_EXCLUDED_SUFFIXES = (".min.js", ".bundle.js", ".pyc")

PROVIDER_NAMES = ["gemini", "openai", "anthropic", "none"]

DEFAULT_MODELS = {
    "gemini": "gemini-2.0-flash",
    "openai": "gpt-4o-mini",
    "anthropic": "claude-sonnet-4-5-20250929",
}


@dataclass
class SessionConfig:
    max_sessions: int = 100
    evict_count: int = 50


@dataclass
class CodeQAConfig:
    provider: str = "gemini"
    model: str | None = None  # None → provider default
    max_file_size: int = MAX_FILE_SIZE
    exclude_patterns: list[str] = field(default_factory=list)
    concurrency: int = 8
    ai_concurrency: int = 2
    reports_dir: str = ".codeqa/reports"
    sessions: SessionConfig = field(default_factory=SessionConfig)

    @property
    def resolved_model(self) -> str | None:
        return self.model or DEFAULT_MODELS.get(self.provider)

    @property
    def excluded(self) -> list[str]:
        return ALWAYS_EXCLUDED + [p for p in self.exclude_patterns if p not in ALWAYS_EXCLUDED]


def load_config(config_path: str | Path | None = None) -> CodeQAConfig:
    """Load config from codeqa.yml, falling back to defaults."""
    if config_path is None:
        config_path = Path("codeqa.yml")
    else:
        config_path = Path(config_path)

    if not config_path.exists():
        return CodeQAConfig()

    with open(config_path) as f:
        raw = yaml.safe_load(f) or {}

    provider = str(raw.get("provider", "gemini")).lower()
    if provider not in PROVIDER_NAMES:
        raise ValueError(f"Unknown provider: {provider}. Available: {', '.join(PROVIDER_NAMES)}")

    concurrency = int(raw.get("concurrency", 8))
    ai_concurrency = int(raw.get("ai_concurrency", 2))
    if concurrency < 1 or ai_concurrency < 1:
        raise ValueError("concurrency and ai_concurrency must be at least 1")

    sessions_raw = raw.get("sessions", {})
    sessions = SessionConfig(
        max_sessions=sessions_raw.get("max_sessions", 100),
        evict_count=sessions_raw.get("evict_count", 50),
    )
    if sessions.max_sessions < 1 or sessions.evict_count < 1:
        raise ValueError("sessions.max_sessions and sessions.evict_count must be at least 1")

    return CodeQAConfig(
        provider=provider,
        model=raw.get("model"),
        max_file_size=raw.get("max_file_size", MAX_FILE_SIZE),
        exclude_patterns=raw.get("exclude", []),
        concurrency=concurrency,
        ai_concurrency=ai_concurrency,
        reports_dir=raw.get("reports_dir", ".codeqa/reports"),
        sessions=sessions,
    )
