"""Factory for creating LLM providers."""

import logging

from ux_process_orchestrator.core.config import LLMConfig
from ux_process_orchestrator.llm.provider import LLMProvider

logger = logging.getLogger(__name__)


class LLMFactory:
    """Factory for creating LLM provider instances."""

    @staticmethod
    def create(config: LLMConfig) -> LLMProvider:
        """Create an LLM provider based on configuration.

        Provider modules are imported lazily so that an installation without
        a given backend can still use the others.

        Raises:
            ValueError: If provider type is not supported.
        """
        logger.info(f"Creating LLM provider: {config.provider}")

        if config.provider == "openai":
            from ux_process_orchestrator.llm.openai_provider import OpenAIProvider

            return OpenAIProvider(config)
        elif config.provider == "llama":
            from ux_process_orchestrator.llm.llama_provider import LLaMAProvider

            return LLaMAProvider(config)
        else:
            raise ValueError(f"Unsupported LLM provider: {config.provider}")
