"""LLM package initialization."""

from ux_process_orchestrator.llm.factory import LLMFactory
from ux_process_orchestrator.llm.provider import LLMProvider
from ux_process_orchestrator.llm.task_runner import AgentTaskRunner

__all__ = [
    "AgentTaskRunner",
    "LLMFactory",
    "LLMProvider",
]
