"""Main orchestrator implementation."""

import logging
import uuid
from collections.abc import Mapping
from typing import Any

from ux_process_orchestrator.core.config import OrchestratorConfig
from ux_process_orchestrator.orchestrator.logging import RunLogger
from ux_process_orchestrator.pipeline.checkpoints import (
    AutoApproveGate,
    BreakpointNotifier,
    BreakpointQueue,
    CheckpointGate,
    ConsoleGate,
)
from ux_process_orchestrator.pipeline.clock import Clock, SystemClock
from ux_process_orchestrator.pipeline.context import ExecutionContext, TaskRunner
from ux_process_orchestrator.pipeline.executor import PipelineExecutor, PipelineOutcome
from ux_process_orchestrator.pipeline.notifications import TelegramNotifier
from ux_process_orchestrator.processes import PROCESSES, PipelineBuilder
from ux_process_orchestrator.state.manager import RunRecord, RunStateManager

logger = logging.getLogger(__name__)


class Orchestrator:
    """Runs registered UX design processes and records their runs.

    The orchestrator wires the pipeline executor to its collaborators: an LLM
    backed task runner, a checkpoint gate chosen by `checkpoint_mode`, and the
    run state manager. Any collaborator can be injected instead.
    """

    def __init__(
        self,
        config: OrchestratorConfig | None = None,
        *,
        task_runner: TaskRunner | None = None,
        checkpoints: CheckpointGate | None = None,
        clock: Clock | None = None,
        processes: Mapping[str, PipelineBuilder] | None = None,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            config: Configuration object. If None, loads from environment.
            task_runner: Task collaborator. If None, an LLM-backed runner is
                created on first use.
            checkpoints: Checkpoint gate. If None, built from `checkpoint_mode`.
            clock: Clock collaborator. Defaults to the system clock.
            processes: Process registry. Defaults to the built-in processes.
        """
        self.config = config or OrchestratorConfig()
        self.config.setup_logging()

        logger.info("Initializing UX Process Orchestrator")

        self.processes: Mapping[str, PipelineBuilder] = (
            processes if processes is not None else PROCESSES
        )
        self.state = RunStateManager(self.config.state)
        self.clock: Clock = clock or SystemClock()
        self.breakpoints: BreakpointQueue | None = None
        self.telegram: TelegramNotifier | None = None
        self.checkpoints: CheckpointGate = checkpoints or self._build_gate()
        self._task_runner = task_runner

        logger.info("Orchestrator initialized successfully")

    def _build_gate(self) -> CheckpointGate:
        mode = self.config.pipeline.checkpoint_mode
        if mode == "auto":
            return AutoApproveGate()
        if mode == "console":
            return ConsoleGate()

        notifiers: list[BreakpointNotifier] = []
        notify = self.config.notify
        if notify.telegram_enabled:
            self.telegram = TelegramNotifier(
                token=notify.telegram_token or "",
                chat_id=notify.telegram_chat_id or "",
                api_base=notify.telegram_api_base,
            )
            notifiers.append(self.telegram)
        self.breakpoints = BreakpointQueue(notifiers)
        return self.breakpoints

    @property
    def task_runner(self) -> TaskRunner:
        if self._task_runner is None:
            # Deferred so that listing or inspecting runs needs no LLM credentials.
            from ux_process_orchestrator.llm.factory import LLMFactory
            from ux_process_orchestrator.llm.task_runner import AgentTaskRunner

            llm = self.config.llm
            self._task_runner = AgentTaskRunner(
                LLMFactory.create(llm),
                max_tokens=llm.max_tokens,
            )
        return self._task_runner

    def list_processes(self) -> list[dict[str, str]]:
        out = []
        for process_id, build in sorted(self.processes.items()):
            pipeline = build()
            out.append({"process_id": process_id, "title": pipeline.title})
        return out

    def submit(
        self,
        process_id: str,
        inputs: Mapping[str, Any],
        *,
        run_id: str | None = None,
    ) -> RunRecord:
        """Create a queued run record.

        Raises:
            KeyError: If the process is not registered.
            InvalidRunIdError: If `run_id` is not a plain directory name.
            FileExistsError: If `run_id` is already taken.
        """
        if process_id not in self.processes:
            raise KeyError(f"Unknown process: {process_id}")
        return self.state.create_run(
            run_id=run_id or uuid.uuid4().hex,
            process_id=process_id,
            inputs=dict(inputs),
        )

    def execute(self, record: RunRecord) -> PipelineOutcome:
        """Run a queued record to completion.

        The record ends `succeeded`, `rejected` or `failed`. Fatal errors are
        recorded and then re-raised.
        """
        build = self.processes[record.process_id]
        pipeline = build(quality_threshold=self.config.pipeline.quality_threshold)
        run_logger = RunLogger(record.run_id)

        self.state.update_run(record.run_id, status="running")
        try:
            ctx = ExecutionContext(
                run_id=record.run_id,
                task_runner=self.task_runner,
                checkpoints=self.checkpoints,
                logger=run_logger,
                clock=self.clock,
                store=self.state.task_store(record.run_id),
                max_parallel=self.config.pipeline.max_parallel_tasks,
            )
            outcome = PipelineExecutor(ctx).run(pipeline, record.inputs)
        except Exception as e:
            logger.exception("Run failed", extra={"run_id": record.run_id})
            self.state.update_run(
                record.run_id,
                status="failed",
                error=f"{e.__class__.__name__}: {e}",
                events=run_logger.events,
            )
            raise

        self.state.update_run(
            record.run_id,
            status=outcome.status.value,
            result=outcome.result,
            artifacts=[a.to_json() for a in outcome.artifacts],
            checkpoints=list(outcome.checkpoints),
            events=run_logger.events,
            duration=outcome.duration,
            rejected_at=outcome.rejected_at,
        )
        logger.info(
            "Run finished",
            extra={"run_id": record.run_id, "status": outcome.status.value},
        )
        return outcome

    def run_process(
        self,
        process_id: str,
        inputs: Mapping[str, Any],
        *,
        run_id: str | None = None,
    ) -> PipelineOutcome:
        """Create a run for `process_id` and execute it on the calling thread."""
        return self.execute(self.submit(process_id, inputs, run_id=run_id))
