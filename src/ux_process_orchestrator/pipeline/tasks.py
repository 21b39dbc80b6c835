"""Task definitions, invocations and schema-checked results.

A task is a delegated unit of work: the definition carries the agent prompt
and the declared output schema, the collaborator does the work, and the
executor validates what comes back before anything downstream may read it.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from .artifacts import Artifact
from .errors import SchemaViolation

ARTIFACTS_FIELD = "artifacts"


@dataclass(frozen=True, slots=True)
class OutputSchema:
    """Declared output contract of a task.

    `artifacts` is always required, whether or not the definition lists it.
    A dotted name such as `componentScores.sitemap` requires a key inside an
    object-valued field.
    """

    required: tuple[str, ...]
    properties: Mapping[str, Mapping[str, Any]] = field(default_factory=dict)

    def missing_fields(self, data: Mapping[str, object]) -> list[str]:
        return [name for name in self.required if _lookup(data, name) is None]

    def to_json_schema(self) -> dict[str, object]:
        props = {name: dict(spec) for name, spec in self.properties.items()}
        props.setdefault(ARTIFACTS_FIELD, {"type": "array"})
        top: list[str] = []
        for name in self.required:
            head, _, rest = name.partition(".")
            if head not in top:
                top.append(head)
            if rest:
                nested = props.setdefault(head, {"type": "object"})
                nested["required"] = [*nested.get("required", ()), rest]
        return {"type": "object", "required": top, "properties": props}


def _lookup(data: Mapping[str, object], path: str) -> object:
    value: object = data
    for part in path.split("."):
        if not isinstance(value, Mapping):
            return None
        value = value.get(part)
    return value


@dataclass(frozen=True, slots=True)
class AgentPrompt:
    role: str
    task: str
    instructions: tuple[str, ...] = ()
    output_format: str = ""


@dataclass(frozen=True, slots=True)
class TaskDefinition:
    task_id: str
    title: str
    schema: OutputSchema
    prompt: AgentPrompt | None = None
    agent_name: str = ""
    kind: str = "agent"
    labels: tuple[str, ...] = ()


def _normalise_properties(
    properties: Mapping[str, str | Mapping[str, Any]] | None,
) -> dict[str, Mapping[str, Any]]:
    out: dict[str, Mapping[str, Any]] = {}
    for name, spec in (properties or {}).items():
        out[name] = {"type": spec} if isinstance(spec, str) else dict(spec)
    return out


def define_task(
    task_id: str,
    *,
    title: str,
    required: Iterable[str],
    properties: Mapping[str, str | Mapping[str, Any]] | None = None,
    agent: str = "",
    role: str = "",
    task: str = "",
    instructions: Iterable[str] = (),
    output_format: str = "",
    labels: Iterable[str] = (),
    kind: str = "agent",
) -> TaskDefinition:
    """Declare a task.

    Args:
        task_id: Stable identifier, also used to namespace persisted files.
        title: Human-readable title.
        required: Output fields that must be present before the result is used.
        properties: Optional JSON-schema hints per output field. A bare string is
            shorthand for `{"type": <string>}`.
        agent: Name of the agent persona that performs the task.
        role: Prompt role.
        task: Prompt task statement.
        instructions: Prompt instructions, in order.
        output_format: Free-text description of the expected JSON reply.
        labels: Free-form labels.
        kind: Task kind; agent tasks are the only kind the bundled runner handles.
    """

    req = [name for name in required]
    if ARTIFACTS_FIELD not in req:
        req.append(ARTIFACTS_FIELD)

    prompt = None
    if role or task or instructions:
        prompt = AgentPrompt(
            role=role,
            task=task,
            instructions=tuple(instructions),
            output_format=output_format,
        )

    return TaskDefinition(
        task_id=task_id,
        title=title,
        schema=OutputSchema(required=tuple(req), properties=_normalise_properties(properties)),
        prompt=prompt,
        agent_name=agent,
        kind=kind,
        labels=tuple(labels),
    )


@dataclass(frozen=True, slots=True)
class TaskInvocation:
    """One call of a task: the definition, the built input and its effect id."""

    task: TaskDefinition
    effect_id: str
    payload: Mapping[str, object]
    run_id: str = ""

    @property
    def input_json_path(self) -> str:
        return f"tasks/{self.effect_id}/input.json"

    @property
    def output_json_path(self) -> str:
        return f"tasks/{self.effect_id}/result.json"


@dataclass(frozen=True, slots=True)
class TaskResult:
    """Schema-conforming output of a task, tagged with the task id."""

    task_id: str
    data: Mapping[str, object]
    artifacts: tuple[Artifact, ...] = ()

    def __getitem__(self, key: str) -> object:
        if key == ARTIFACTS_FIELD:
            return [a.to_json() for a in self.artifacts]
        return self.data[key]

    def get(self, key: str, default: object = None) -> object:
        if key == ARTIFACTS_FIELD:
            return self[key]
        return self.data.get(key, default)

    def to_json(self) -> dict[str, object]:
        out = dict(self.data)
        out[ARTIFACTS_FIELD] = [a.to_json() for a in self.artifacts]
        return out


def validate_result(task: TaskDefinition, raw: object) -> TaskResult:
    """Check a collaborator's output against the task's declared schema.

    Raises:
        SchemaViolation: If the output is not an object, a required field is
            absent, or an artifact descriptor is malformed.
    """

    if not isinstance(raw, Mapping):
        raise SchemaViolation(
            task.task_id, [], message=f"result must be an object, got {type(raw).__name__}"
        )

    missing = task.schema.missing_fields(raw)
    if missing:
        raise SchemaViolation(task.task_id, missing)

    raw_artifacts = raw[ARTIFACTS_FIELD]
    if not isinstance(raw_artifacts, list):
        raise SchemaViolation(task.task_id, [], message="'artifacts' must be a list")
    try:
        artifacts = tuple(Artifact.from_json(item) for item in raw_artifacts)
    except ValueError as e:
        raise SchemaViolation(task.task_id, [], message=str(e)) from e

    data = {k: v for k, v in raw.items() if k != ARTIFACTS_FIELD}
    return TaskResult(task_id=task.task_id, data=data, artifacts=artifacts)
