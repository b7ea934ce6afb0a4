"""Tests for the generative model providers (no API calls)."""

from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import MagicMock

import anthropic
import httpx
import pytest

from codeqa.errors import ExternalServiceError, MissingCredentialsError
from codeqa.providers import (
    AnthropicProvider,
    GeminiProvider,
    OpenAIProvider,
    create_provider,
)

REQUEST = httpx.Request("POST", "https://api.example.test/v1")


def _bare(cls, model="test-model"):
    provider = cls.__new__(cls)
    provider.client = MagicMock()
    provider.model = model
    return provider


class TestCreateProvider:
    def test_none_disables_ai(self):
        assert create_provider("none") is None

    def test_unknown_provider(self):
        with pytest.raises(ValueError, match="Unknown provider"):
            create_provider("watson")

    def test_missing_credentials_returns_none(self, monkeypatch):
        monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
        assert create_provider("anthropic") is None

    def test_gemini_missing_credentials(self, monkeypatch):
        monkeypatch.delenv("GEMINI_API_KEY", raising=False)
        monkeypatch.delenv("GOOGLE_API_KEY", raising=False)
        assert create_provider("gemini") is None

    def test_builds_with_model(self, monkeypatch):
        monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-test")
        provider = create_provider("anthropic", "claude-haiku-4-5")
        assert isinstance(provider, AnthropicProvider)
        assert provider.model == "claude-haiku-4-5"


class TestAnthropicProvider:
    def test_requires_api_key(self, monkeypatch):
        monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
        with pytest.raises(MissingCredentialsError):
            AnthropicProvider()

    def test_generate_text(self):
        provider = _bare(AnthropicProvider)
        provider.client.messages.create.return_value = SimpleNamespace(
            content=[SimpleNamespace(type="text", text="All good.")]
        )
        assert provider.generate_text("hi") == "All good."
        kwargs = provider.client.messages.create.call_args.kwargs
        assert kwargs["model"] == "test-model"
        assert kwargs["messages"] == [{"role": "user", "content": "hi"}]

    def test_api_error_wrapped(self):
        provider = _bare(AnthropicProvider)
        provider.client.messages.create.side_effect = anthropic.APIConnectionError(request=REQUEST)
        with pytest.raises(ExternalServiceError, match="Anthropic API error"):
            provider.generate_text("hi")

    def test_empty_response(self):
        provider = _bare(AnthropicProvider)
        provider.client.messages.create.return_value = SimpleNamespace(content=[])
        with pytest.raises(ExternalServiceError, match="empty response"):
            provider.generate_text("hi")


class TestGeminiProvider:
    def test_generate_text(self):
        provider = _bare(GeminiProvider)
        provider.client.models.generate_content.return_value = SimpleNamespace(text="Looks fine.")
        assert provider.generate_text("hi") == "Looks fine."
        provider.client.models.generate_content.assert_called_once_with(
            model="test-model", contents="hi"
        )

    def test_error_wrapped(self):
        provider = _bare(GeminiProvider)
        provider.client.models.generate_content.side_effect = RuntimeError("quota exceeded")
        with pytest.raises(ExternalServiceError, match="quota exceeded"):
            provider.generate_text("hi")

    def test_empty_response(self):
        provider = _bare(GeminiProvider)
        provider.client.models.generate_content.return_value = SimpleNamespace(text=None)
        with pytest.raises(ExternalServiceError):
            provider.generate_text("hi")


class TestOpenAIProvider:
    @pytest.fixture(autouse=True)
    def _openai(self):
        return pytest.importorskip("openai")

    def _response(self, text):
        message = SimpleNamespace(content=text)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])

    def test_generate_text(self):
        provider = _bare(OpenAIProvider)
        provider.client.chat.completions.create.return_value = self._response("Refactor it.")
        assert provider.generate_text("hi") == "Refactor it."

    def test_api_error_wrapped(self, _openai):
        provider = _bare(OpenAIProvider)
        provider.client.chat.completions.create.side_effect = _openai.APIConnectionError(
            request=REQUEST
        )
        with pytest.raises(ExternalServiceError, match="OpenAI API error"):
            provider.generate_text("hi")

    def test_no_choices(self):
        provider = _bare(OpenAIProvider)
        provider.client.chat.completions.create.return_value = SimpleNamespace(choices=[])
        with pytest.raises(ExternalServiceError, match="no choices"):
            provider.generate_text("hi")

    def test_requires_api_key(self, monkeypatch):
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)
        with pytest.raises(MissingCredentialsError):
            OpenAIProvider()
