"""Abstract base class for LLM providers."""

from abc import ABC, abstractmethod
from typing import Any


class LLMProvider(ABC):
    """Abstract base class for LLM providers.

    Agent tasks only need chat completion; providers that support a JSON
    response mode should honour `json_output`.
    """

    name: str = "llm"

    @abstractmethod
    def chat(
        self,
        messages: list[dict[str, str]],
        max_tokens: int | None = None,
        temperature: float | None = None,
        json_output: bool = False,
        **kwargs: Any,
    ) -> str:
        """Generate a chat completion from messages.

        Args:
            messages: List of message dicts with 'role' and 'content'.
            max_tokens: Maximum tokens to generate.
            temperature: Sampling temperature.
            json_output: Ask the backend to constrain the reply to a JSON object.
            **kwargs: Additional provider-specific parameters.

        Returns:
            The assistant message content.
        """
        pass
