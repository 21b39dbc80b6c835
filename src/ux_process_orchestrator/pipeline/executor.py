"""Pipeline executor: sequencing, fan-out/fan-in, checkpoints and aggregation.

The executor does not retry, time out or recover. Any task failure ends the
run and propagates to the caller; a checkpoint rejection ends the run with a
`rejected` outcome.
"""

from __future__ import annotations

from collections.abc import Mapping
from concurrent.futures import Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from .artifacts import Artifact
from .checkpoints import CheckpointDecision
from .context import ABSENT, ExecutionContext, PipelineContext, PipelineView, SlotValue
from .errors import CheckpointRejected
from .steps import CheckpointStep, OptionalStep, ParallelGroup, Pipeline, Step, TaskStep, task_slots
from .tasks import TaskInvocation, TaskResult, validate_result


class RunStatus(str, Enum):
    SUCCEEDED = "succeeded"
    REJECTED = "rejected"


@dataclass(frozen=True, slots=True)
class PipelineOutcome:
    run_id: str
    process_id: str
    status: RunStatus
    result: dict[str, object] | None
    artifacts: tuple[Artifact, ...]
    started_at: datetime
    duration: float
    rejected_at: str | None = None
    checkpoints: tuple[dict[str, object], ...] = field(default_factory=tuple)

    @property
    def ok(self) -> bool:
        return self.status == RunStatus.SUCCEEDED

    def to_json(self) -> dict[str, object]:
        return {
            "run_id": self.run_id,
            "process_id": self.process_id,
            "status": self.status.value,
            "result": self.result,
            "artifacts": [a.to_json() for a in self.artifacts],
            "started_at": self.started_at.isoformat(),
            "duration": self.duration,
            "rejected_at": self.rejected_at,
            "checkpoints": list(self.checkpoints),
        }


class PipelineExecutor:
    """Runs one pipeline instance against an explicit execution context."""

    def __init__(self, ctx: ExecutionContext) -> None:
        self.ctx = ctx
        self._checkpoint_log: list[dict[str, object]] = []

    def run(self, pipeline: Pipeline, inputs: Mapping[str, object]) -> PipelineOutcome:
        pipeline.validate()

        merged = {**pipeline.defaults, **inputs}
        state = PipelineContext(run_id=self.ctx.run_id, inputs=merged)
        self._checkpoint_log = []

        started_at = self.ctx.clock.utcnow()
        start = self.ctx.clock.now()
        self.ctx.logger.log("info", f"Starting {pipeline.title}")

        try:
            for step in pipeline.steps:
                self._execute(step, state)
        except CheckpointRejected as e:
            self.ctx.logger.log("warning", str(e))
            return PipelineOutcome(
                run_id=self.ctx.run_id,
                process_id=pipeline.process_id,
                status=RunStatus.REJECTED,
                result=None,
                artifacts=state.artifacts,
                started_at=started_at,
                duration=self.ctx.clock.now() - start,
                rejected_at=e.title,
                checkpoints=tuple(self._checkpoint_log),
            )

        result = pipeline.finalize(state.view())
        duration = self.ctx.clock.now() - start
        self.ctx.logger.log("info", f"Completed {pipeline.title}")

        return PipelineOutcome(
            run_id=self.ctx.run_id,
            process_id=pipeline.process_id,
            status=RunStatus.SUCCEEDED,
            result=result,
            artifacts=state.artifacts,
            started_at=started_at,
            duration=duration,
            checkpoints=tuple(self._checkpoint_log),
        )

    def _execute(self, step: Step, state: PipelineContext) -> None:
        if isinstance(step, OptionalStep):
            if not step.when(state.view()):
                for slot in task_slots(step.step):
                    state.mark_absent(slot)
                self.ctx.logger.log(
                    "info", f"Skipping {step.description or _describe(step.step)}"
                )
                return
            self._execute(step.step, state)
        elif isinstance(step, TaskStep):
            self.run_step(step, state)
        elif isinstance(step, ParallelGroup):
            self.run_parallel_group(step, state)
        elif isinstance(step, CheckpointStep):
            self.run_checkpoint(step, state)
        else:
            raise TypeError(f"Unsupported step type: {type(step).__name__}")

    def run_step(self, step: TaskStep, state: PipelineContext) -> TaskResult:
        """Invoke one task, validate it and merge it into the context."""

        self.ctx.logger.log("info", f"Running task {step.task.task_id} ({step.task.title})")
        result = self._invoke(step, state.view())
        state.record(step.slot, result)
        return result

    def run_parallel_group(
        self, group: ParallelGroup, state: PipelineContext
    ) -> list[SlotValue]:
        """Dispatch enabled members together and join on all of them.

        Every dispatched member is awaited even after a sibling fails. If any
        member failed, the first failure in submission order is raised and no
        member's result is merged. Otherwise results are merged in submission
        order, whatever order they completed in.
        """

        view = state.view()
        enabled: list[TaskStep] = []
        skipped: list[str] = []
        for member in group.members:
            if isinstance(member, OptionalStep):
                if not member.when(view):
                    skipped.extend(task_slots(member))
                    continue
                inner = member.step
                if not isinstance(inner, TaskStep):
                    raise TypeError("Parallel group members must be task steps")
                enabled.append(inner)
            else:
                enabled.append(member)

        if enabled:
            self.ctx.logger.log(
                "info",
                f"Running {len(enabled)} task(s) in parallel: "
                + ", ".join(s.task.task_id for s in enabled),
            )
            workers = self.ctx.max_parallel or len(enabled)
            with ThreadPoolExecutor(
                max_workers=workers, thread_name_prefix=f"group-{group.name}"
            ) as pool:
                futures: list[Future[TaskResult]] = [
                    pool.submit(self._invoke, member, view) for member in enabled
                ]
                wait(futures)

            for future in futures:
                exc = future.exception()
                if exc is not None:
                    raise exc

            for member, future in zip(enabled, futures):
                state.record(member.slot, future.result())

        for slot in skipped:
            state.mark_absent(slot)

        slots = [slot for member in group.members for slot in task_slots(member)]
        return [state.slots[slot] for slot in slots]

    def run_checkpoint(self, step: CheckpointStep, state: PipelineContext) -> CheckpointDecision:
        """Block on the checkpoint gate.

        Raises:
            CheckpointRejected: If the reviewer declines.
        """

        checkpoint = step.build(state.view())
        self.ctx.logger.log("info", f"Waiting for review: {checkpoint.title}")
        decision = self.ctx.checkpoints.request(checkpoint, run_id=self.ctx.run_id)
        self._checkpoint_log.append(
            {
                "name": step.name,
                "title": checkpoint.title,
                "approved": decision.approved,
                "response": decision.response,
                "reviewer": decision.reviewer,
            }
        )
        if not decision.approved:
            raise CheckpointRejected(checkpoint.title, decision.response)
        return decision

    def _invoke(self, step: TaskStep, view: PipelineView) -> TaskResult:
        invocation = TaskInvocation(
            task=step.task,
            effect_id=self.ctx.effect_ids(),
            payload=dict(step.inputs(view)),
            run_id=self.ctx.run_id,
        )
        if self.ctx.store is not None:
            self.ctx.store.save_input(invocation)

        raw = self.ctx.task_runner.run(invocation)
        result = validate_result(step.task, raw)

        if self.ctx.store is not None:
            self.ctx.store.save_result(invocation, result)
        return result


def _describe(step: TaskStep | ParallelGroup | CheckpointStep) -> str:
    if isinstance(step, TaskStep):
        return f"task {step.task.task_id}"
    if isinstance(step, ParallelGroup):
        return f"parallel group {step.name}"
    return f"checkpoint {step.name}"


__all__ = ["ABSENT", "PipelineExecutor", "PipelineOutcome", "RunStatus"]
