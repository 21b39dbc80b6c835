"""Registry of the UX design processes this package can run."""

from collections.abc import Callable

from ux_process_orchestrator.pipeline.steps import Pipeline
from ux_process_orchestrator.processes import information_architecture, wireframing

PipelineBuilder = Callable[..., Pipeline]

PROCESSES: dict[str, PipelineBuilder] = {
    information_architecture.PROCESS_ID: information_architecture.build_pipeline,
    wireframing.PROCESS_ID: wireframing.build_pipeline,
}


def get_process(process_id: str) -> PipelineBuilder:
    """Look up a pipeline builder.

    Raises:
        KeyError: If no process is registered under `process_id`.
    """
    try:
        return PROCESSES[process_id]
    except KeyError:
        raise KeyError(f"Unknown process: {process_id}") from None


__all__ = ["PROCESSES", "PipelineBuilder", "get_process"]
