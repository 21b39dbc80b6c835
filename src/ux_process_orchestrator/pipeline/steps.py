"""Step variants and the pipeline declaration.

A pipeline is an ordered tuple of steps:

- `TaskStep`: one delegated task bound to a result slot
- `ParallelGroup`: tasks dispatched together and joined
- `CheckpointStep`: a blocking human review
- `OptionalStep`: any of the above, guarded by a predicate over the context

Derived values (scores, thresholds) live in the pipeline's `finalize` and in
checkpoint builders, never in the executor.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from typing import Union

from .checkpoints import Checkpoint
from .context import PipelineView
from .errors import DuplicateStepError
from .tasks import TaskDefinition

InputBuilder = Callable[[PipelineView], Mapping[str, object]]
CheckpointBuilder = Callable[[PipelineView], Checkpoint]
Guard = Callable[[PipelineView], bool]


@dataclass(frozen=True, slots=True)
class TaskStep:
    slot: str
    task: TaskDefinition
    inputs: InputBuilder


@dataclass(frozen=True, slots=True)
class ParallelGroup:
    name: str
    members: tuple[TaskStep | OptionalStep, ...]


@dataclass(frozen=True, slots=True)
class CheckpointStep:
    name: str
    build: CheckpointBuilder


@dataclass(frozen=True, slots=True)
class OptionalStep:
    step: TaskStep | ParallelGroup | CheckpointStep
    when: Guard
    description: str = ""


Step = Union[TaskStep, ParallelGroup, CheckpointStep, OptionalStep]


def flag(name: str, default: bool = False) -> Guard:
    """Guard that reads a boolean pipeline input."""

    def _guard(view: PipelineView) -> bool:
        return bool(view.input(name, default))

    return _guard


def inputs_from(
    *input_names: str,
    results: Iterable[str] = (),
    **computed: Callable[[PipelineView], object],
) -> InputBuilder:
    """Build a task input from pipeline inputs, prior results and computed values.

    Prior results are passed under their slot name, as `None` when skipped.
    """

    result_slots = tuple(results)

    def _build(view: PipelineView) -> Mapping[str, object]:
        out: dict[str, object] = {name: view.input(name) for name in input_names}
        for slot in result_slots:
            out[slot] = view.payload(slot)
        for key, fn in computed.items():
            out[key] = fn(view)
        return out

    return _build


def task_slots(step: Step) -> Iterator[str]:
    """Result slots a step writes (checkpoints write none)."""

    if isinstance(step, TaskStep):
        yield step.slot
    elif isinstance(step, ParallelGroup):
        for member in step.members:
            yield from task_slots(member)
    elif isinstance(step, OptionalStep):
        yield from task_slots(step.step)


@dataclass(frozen=True)
class Pipeline:
    process_id: str
    title: str
    steps: tuple[Step, ...]
    finalize: Callable[[PipelineView], dict[str, object]]
    defaults: Mapping[str, object] = field(default_factory=dict)

    def slots(self) -> list[str]:
        return [slot for step in self.steps for slot in task_slots(step)]

    def validate(self) -> None:
        """Raises DuplicateStepError if two steps share a slot."""

        seen: set[str] = set()
        for slot in self.slots():
            if slot in seen:
                raise DuplicateStepError(slot)
            seen.add(slot)
