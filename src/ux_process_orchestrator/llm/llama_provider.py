"""Local LLaMA LLM provider implementation."""

import logging
from typing import Any

from ux_process_orchestrator.core.config import LLMConfig
from ux_process_orchestrator.llm.provider import LLMProvider

logger = logging.getLogger(__name__)


class LLaMAProvider(LLMProvider):
    """Local LLaMA model provider.

    Requires the optional llama-cpp-python dependency:
        pip install "ux-process-orchestrator[llama]"
    """

    name = "llama"

    def __init__(self, config: LLMConfig) -> None:
        """Load the model.

        Raises:
            ValueError: If model path is not provided.
            ImportError: If llama-cpp-python is not installed.
        """
        if not config.llama_model_path:
            raise ValueError("LLaMA model path is required")

        try:
            from llama_cpp import Llama
        except ImportError as e:
            raise ImportError(
                "llama-cpp-python is required for the LLaMA provider. "
                'Install it with: pip install "ux-process-orchestrator[llama]"'
            ) from e

        self.config = config

        logger.info(f"Loading LLaMA model from: {config.llama_model_path}")

        self.llm = Llama(
            model_path=str(config.llama_model_path),
            n_ctx=config.llama_n_ctx,
            n_threads=config.llama_n_threads,
            verbose=False,
        )

    def chat(
        self,
        messages: list[dict[str, str]],
        max_tokens: int | None = None,
        temperature: float | None = None,
        json_output: bool = False,
        **kwargs: Any,
    ) -> str:
        if json_output:
            kwargs.setdefault("response_format", {"type": "json_object"})

        logger.debug(f"Requesting chat completion with {len(messages)} messages")

        result = self.llm.create_chat_completion(
            messages=messages,
            max_tokens=max_tokens or 2048,
            temperature=temperature if temperature is not None else 0.7,
            **kwargs,
        )

        content = result["choices"][0]["message"]["content"] or ""
        logger.debug(f"Received {len(content)} characters")

        return content
