"""Core package initialization."""

from ux_process_orchestrator.core.config import OrchestratorConfig
from ux_process_orchestrator.core.orchestrator import Orchestrator

__all__ = [
    "Orchestrator",
    "OrchestratorConfig",
]
