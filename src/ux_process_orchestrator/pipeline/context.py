"""Pipeline context (results accumulated so far) and the execution context.

The execution context is an explicit value threaded through the executor: it
carries the run id and every collaborator, so tests can swap any of them.
"""

from __future__ import annotations

import uuid
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Final, Protocol

from .artifacts import Artifact
from .checkpoints import CheckpointGate
from .clock import Clock, SystemClock
from .errors import DuplicateStepError
from .tasks import TaskInvocation, TaskResult


class _Absent:
    """Sentinel stored in the slot of a step that was skipped."""

    _instance: _Absent | None = None

    def __new__(cls) -> _Absent:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "ABSENT"


ABSENT: Final = _Absent()

SlotValue = TaskResult | _Absent


class PipelineContext:
    """Append-only accumulator of step results and artifacts.

    Only the executor writes to it. Steps read through `PipelineView`.
    """

    def __init__(self, *, run_id: str, inputs: Mapping[str, object]) -> None:
        self.run_id = run_id
        self._inputs = MappingProxyType(dict(inputs))
        self._slots: dict[str, SlotValue] = {}
        self._artifacts: list[Artifact] = []

    def record(self, slot: str, result: TaskResult) -> None:
        if slot in self._slots:
            raise DuplicateStepError(slot)
        self._slots[slot] = result
        self._artifacts.extend(result.artifacts)

    def mark_absent(self, slot: str) -> None:
        if slot in self._slots:
            raise DuplicateStepError(slot)
        self._slots[slot] = ABSENT

    @property
    def inputs(self) -> Mapping[str, object]:
        return self._inputs

    @property
    def artifacts(self) -> tuple[Artifact, ...]:
        return tuple(self._artifacts)

    @property
    def slots(self) -> Mapping[str, SlotValue]:
        return MappingProxyType(self._slots)

    def view(self) -> PipelineView:
        return PipelineView(self)


class PipelineView:
    """Read-only view of a `PipelineContext` handed to input builders."""

    def __init__(self, ctx: PipelineContext) -> None:
        self._ctx = ctx

    @property
    def run_id(self) -> str:
        return self._ctx.run_id

    @property
    def inputs(self) -> Mapping[str, object]:
        return self._ctx.inputs

    def input(self, name: str, default: object = None) -> object:
        return self._ctx.inputs.get(name, default)

    def __contains__(self, slot: str) -> bool:
        return slot in self._ctx.slots

    def __getitem__(self, slot: str) -> SlotValue:
        """Raises KeyError for a slot no step has reached yet."""

        return self._ctx.slots[slot]

    def executed(self, slot: str) -> bool:
        return isinstance(self._ctx.slots.get(slot), TaskResult)

    def result(self, slot: str) -> TaskResult | None:
        value = self[slot]
        return value if isinstance(value, TaskResult) else None

    def require(self, slot: str) -> TaskResult:
        """Result of a step that must have run.

        Raises:
            KeyError: If the slot was never reached or its step was skipped.
        """

        result = self.result(slot)
        if result is None:
            raise KeyError(f"Step '{slot}' was skipped")
        return result

    def value(self, slot: str, key: str, default: object = None) -> object:
        result = self.result(slot)
        if result is None:
            return default
        return result.get(key, default)

    def payload(self, slot: str) -> dict[str, object] | None:
        """Slot result as a JSON-ready object, or None when the step was skipped."""

        result = self.result(slot)
        return result.to_json() if result is not None else None

    @property
    def artifacts(self) -> tuple[Artifact, ...]:
        return self._ctx.artifacts

    def artifacts_of(self, *slots: str) -> list[Artifact]:
        out: list[Artifact] = []
        for slot in slots:
            result = self.result(slot)
            if result is not None:
                out.extend(result.artifacts)
        return out


class TaskRunner(Protocol):
    """Task collaborator: performs the delegated work for one invocation."""

    def run(self, invocation: TaskInvocation) -> Mapping[str, object]: ...


class PipelineLogger(Protocol):
    def log(self, level: str, message: str) -> None: ...


class TaskIOStore(Protocol):
    def save_input(self, invocation: TaskInvocation) -> None: ...

    def save_result(self, invocation: TaskInvocation, result: TaskResult) -> None: ...


def _new_effect_id() -> str:
    return uuid.uuid4().hex


@dataclass
class ExecutionContext:
    run_id: str
    task_runner: TaskRunner
    checkpoints: CheckpointGate
    logger: PipelineLogger
    clock: Clock = field(default_factory=SystemClock)
    store: TaskIOStore | None = None
    max_parallel: int | None = None
    effect_ids: Callable[[], str] = _new_effect_id
