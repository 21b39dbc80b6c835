"""Error taxonomy for pipeline execution.

All failures surface to the pipeline caller. The executor performs no local
recovery; retries belong to whatever wraps the task collaborator.
"""

from __future__ import annotations

from collections.abc import Sequence


class PipelineError(Exception):
    """Base class for pipeline errors."""


class DuplicateStepError(PipelineError):
    """A pipeline declares the same result slot more than once."""

    def __init__(self, slot: str) -> None:
        super().__init__(f"Duplicate step identifier in pipeline: {slot}")
        self.slot = slot


class SchemaViolation(PipelineError):
    """A task result is missing required fields (or has malformed artifacts)."""

    def __init__(self, task_id: str, missing: Sequence[str], message: str = "") -> None:
        detail = message or f"missing required field(s): {', '.join(missing)}"
        super().__init__(f"Task '{task_id}' violated its output schema: {detail}")
        self.task_id = task_id
        self.missing = tuple(missing)


class TaskExecutionFailure(PipelineError):
    """The task collaborator could not produce a result."""

    def __init__(self, task_id: str, message: str) -> None:
        super().__init__(f"Task '{task_id}' failed: {message}")
        self.task_id = task_id


class CheckpointRejected(PipelineError):
    """A reviewer declined to proceed.

    This is a defined terminal outcome of a run, not a crash: the executor
    converts it into a `rejected` status.
    """

    def __init__(self, title: str, response: str = "") -> None:
        message = f"Checkpoint rejected: {title}"
        if response:
            message = f"{message} ({response})"
        super().__init__(message)
        self.title = title
        self.response = response
