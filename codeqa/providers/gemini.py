"""Google Gemini provider."""

from __future__ import annotations

import os

try:
    import google.genai as genai
except ImportError:
    genai = None

from codeqa.errors import ExternalServiceError, MissingCredentialsError
from codeqa.providers.base import BaseProvider


def _api_key() -> str | None:
    return os.environ.get("GEMINI_API_KEY") or os.environ.get("GOOGLE_API_KEY")


class GeminiProvider(BaseProvider):
    name = "gemini"

    def __init__(self, model: str = "gemini-2.0-flash"):
        if genai is None:
            raise ImportError(
                "google-genai is not installed. Install with: pip install google-genai"
            )
        api_key = _api_key()
        if not api_key:
            raise MissingCredentialsError(
                "GEMINI_API_KEY (or GOOGLE_API_KEY) environment variable is required"
            )
        self.model = model
        self.client = genai.Client(api_key=api_key)

    def generate_text(self, prompt: str) -> str:
        try:
            response = self.client.models.generate_content(model=self.model, contents=prompt)
        except Exception as e:
            raise ExternalServiceError(f"Gemini API error: {e}") from e

        text = getattr(response, "text", None)
        if not text:
            raise ExternalServiceError("Gemini returned an empty response")
        return text
