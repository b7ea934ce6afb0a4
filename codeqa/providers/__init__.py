"""Generative model providers."""

from __future__ import annotations

from codeqa.errors import MissingCredentialsError
from codeqa.logging import get_logger
from codeqa.providers.anthropic import AnthropicProvider
from codeqa.providers.base import BaseProvider
from codeqa.providers.gemini import GeminiProvider
from codeqa.providers.openai import OpenAIProvider

logger = get_logger("providers")

PROVIDERS: dict[str, type[BaseProvider]] = {
    "gemini": GeminiProvider,
    "openai": OpenAIProvider,
    "anthropic": AnthropicProvider,
}


def create_provider(name: str, model: str | None = None) -> BaseProvider | None:
    """Build a provider, or return None when it cannot be used.

    Missing credentials or SDKs leave the pipeline in static-only mode instead
    of failing, so callers must handle a None provider.
    """
    if name == "none":
        return None
    if name not in PROVIDERS:
        raise ValueError(f"Unknown provider: {name}. Available: {', '.join(sorted(PROVIDERS))}")

    cls = PROVIDERS[name]
    try:
        return cls(model=model) if model else cls()
    except (MissingCredentialsError, ImportError) as e:
        logger.warning("AI analysis disabled: %s", e)
        return None


__all__ = [
    "PROVIDERS",
    "AnthropicProvider",
    "BaseProvider",
    "GeminiProvider",
    "OpenAIProvider",
    "create_provider",
]
