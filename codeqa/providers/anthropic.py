"""Anthropic (Claude) provider: Messages API."""

from __future__ import annotations

import os

import anthropic

from codeqa.errors import ExternalServiceError, MissingCredentialsError
from codeqa.providers.base import BaseProvider

MAX_TOKENS = 4096


class AnthropicProvider(BaseProvider):
    name = "anthropic"

    def __init__(self, model: str = "claude-sonnet-4-5-20250929"):
        api_key = os.environ.get("ANTHROPIC_API_KEY")
        if not api_key:
            raise MissingCredentialsError("ANTHROPIC_API_KEY environment variable is required")
        self.client = anthropic.Anthropic(api_key=api_key)
        self.model = model

    def generate_text(self, prompt: str) -> str:
        try:
            message = self.client.messages.create(
                model=self.model,
                max_tokens=MAX_TOKENS,
                messages=[{"role": "user", "content": prompt}],
            )
        except anthropic.APIError as e:
            raise ExternalServiceError(f"Anthropic API error: {e}") from e

        parts = [block.text for block in message.content if getattr(block, "type", "text") == "text"]
        text = "".join(parts)
        if not text:
            raise ExternalServiceError("Anthropic returned an empty response")
        return text
