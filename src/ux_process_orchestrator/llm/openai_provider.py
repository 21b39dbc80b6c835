"""OpenAI LLM provider implementation."""

import logging
from typing import Any

from openai import OpenAI

from ux_process_orchestrator.core.config import LLMConfig
from ux_process_orchestrator.llm.provider import LLMProvider

logger = logging.getLogger(__name__)


class OpenAIProvider(LLMProvider):
    """OpenAI chat completions provider."""

    name = "openai"

    def __init__(self, config: LLMConfig, client: OpenAI | None = None) -> None:
        """Initialize the OpenAI provider.

        Args:
            config: LLM configuration.
            client: Pre-built client (tests); built from the API key otherwise.

        Raises:
            ValueError: If no client is given and the API key is missing.
        """
        if client is None and not config.openai_api_key:
            raise ValueError("OpenAI API key is required")

        self.config = config
        self.client = client or OpenAI(api_key=config.openai_api_key)
        self.model = config.openai_model
        self.temperature = config.openai_temperature

        logger.info(f"OpenAI provider initialized with model: {self.model}")

    def chat(
        self,
        messages: list[dict[str, str]],
        max_tokens: int | None = None,
        temperature: float | None = None,
        json_output: bool = False,
        **kwargs: Any,
    ) -> str:
        temp = temperature if temperature is not None else self.temperature
        if json_output:
            kwargs.setdefault("response_format", {"type": "json_object"})

        logger.debug(f"Requesting chat completion with {len(messages)} messages")

        response = self.client.chat.completions.create(
            model=self.model,
            messages=messages,  # type: ignore
            max_tokens=max_tokens,
            temperature=temp,
            **kwargs,
        )

        content = response.choices[0].message.content or ""
        logger.debug(f"Received {len(content)} characters")

        return content
