"""Task/checkpoint pipeline primitives.

This package provides first-class types for:
- Delegated tasks with declared output schemas
- Parallel groups joined before the pipeline proceeds
- Blocking human-review checkpoints
- Optional steps with an explicit absent value

Steps are declared data; `PipelineExecutor` is the only thing that runs them.
"""

from ux_process_orchestrator.pipeline.artifacts import Artifact
from ux_process_orchestrator.pipeline.checkpoints import (
    AutoApproveGate,
    BreakpointQueue,
    Checkpoint,
    CheckpointDecision,
    CheckpointGate,
    ConsoleGate,
)
from ux_process_orchestrator.pipeline.clock import FixedClock, SystemClock
from ux_process_orchestrator.pipeline.context import (
    ABSENT,
    ExecutionContext,
    PipelineContext,
    PipelineView,
    TaskRunner,
)
from ux_process_orchestrator.pipeline.errors import (
    CheckpointRejected,
    DuplicateStepError,
    PipelineError,
    SchemaViolation,
    TaskExecutionFailure,
)
from ux_process_orchestrator.pipeline.executor import (
    PipelineExecutor,
    PipelineOutcome,
    RunStatus,
)
from ux_process_orchestrator.pipeline.steps import (
    CheckpointStep,
    OptionalStep,
    ParallelGroup,
    Pipeline,
    TaskStep,
    flag,
    inputs_from,
)
from ux_process_orchestrator.pipeline.tasks import (
    TaskDefinition,
    TaskInvocation,
    TaskResult,
    define_task,
    validate_result,
)

__all__ = [
    "ABSENT",
    "Artifact",
    "AutoApproveGate",
    "BreakpointQueue",
    "Checkpoint",
    "CheckpointDecision",
    "CheckpointGate",
    "CheckpointRejected",
    "CheckpointStep",
    "ConsoleGate",
    "DuplicateStepError",
    "ExecutionContext",
    "FixedClock",
    "OptionalStep",
    "ParallelGroup",
    "Pipeline",
    "PipelineContext",
    "PipelineError",
    "PipelineExecutor",
    "PipelineOutcome",
    "PipelineView",
    "RunStatus",
    "SchemaViolation",
    "SystemClock",
    "TaskDefinition",
    "TaskExecutionFailure",
    "TaskInvocation",
    "TaskResult",
    "TaskRunner",
    "TaskStep",
    "define_task",
    "flag",
    "inputs_from",
    "validate_result",
]
