"""Abstract base provider."""

from __future__ import annotations

from abc import ABC, abstractmethod


class BaseProvider(ABC):
    """Base class for generative model providers.

    Providers expose a single text-in/text-out call. Any transport, auth or
    quota failure surfaces as ExternalServiceError.
    """

    name: str = "base"
    model: str = ""

    @abstractmethod
    def generate_text(self, prompt: str) -> str:
        """Send a prompt and return the model's text reply."""
        ...
