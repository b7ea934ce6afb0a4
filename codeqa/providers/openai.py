"""OpenAI provider: chat completions API."""

from __future__ import annotations

import os

try:
    import openai
except ImportError:
    openai = None

from codeqa.errors import ExternalServiceError, MissingCredentialsError
from codeqa.providers.base import BaseProvider


class OpenAIProvider(BaseProvider):
    name = "openai"

    def __init__(self, model: str = "gpt-4o-mini"):
        if openai is None:
            raise ImportError("openai is not installed. Install with: pip install 'codeqa[openai]'")
        api_key = os.environ.get("OPENAI_API_KEY")
        if not api_key:
            raise MissingCredentialsError("OPENAI_API_KEY environment variable is required")
        self.client = openai.OpenAI(api_key=api_key)
        self.model = model

    def generate_text(self, prompt: str) -> str:
        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
            )
        except openai.OpenAIError as e:
            raise ExternalServiceError(f"OpenAI API error: {e}") from e

        if not response.choices:
            raise ExternalServiceError("OpenAI returned no choices")
        text = response.choices[0].message.content
        if not text:
            raise ExternalServiceError("OpenAI returned an empty response")
        return text
