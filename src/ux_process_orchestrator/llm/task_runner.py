"""Agent task collaborator backed by an LLM provider.

Renders a task's prompt, its input payload and its output schema into chat
messages, then parses the reply as a JSON object. Schema checking is left to
the executor.
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Mapping

from ux_process_orchestrator.llm.provider import LLMProvider
from ux_process_orchestrator.pipeline.errors import TaskExecutionFailure
from ux_process_orchestrator.pipeline.tasks import TaskInvocation

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"^```[a-zA-Z0-9_-]*\s*\n(?P<body>.*?)\n?```\s*$", re.DOTALL)


def render_messages(invocation: TaskInvocation) -> list[dict[str, str]]:
    task = invocation.task
    prompt = task.prompt

    role = prompt.role if prompt and prompt.role else "specialist"
    system = (
        f"You are acting as {role}"
        + (f" ({task.agent_name})" if task.agent_name else "")
        + ". Reply with a single JSON object and nothing else."
    )

    parts: list[str] = [f"# Task: {task.title}"]
    if prompt and prompt.task:
        parts.append(prompt.task)
    if prompt and prompt.instructions:
        parts.append("## Instructions")
        parts.extend(f"{i}. {line}" for i, line in enumerate(prompt.instructions, start=1))
    parts.append("## Context")
    parts.append(json.dumps(dict(invocation.payload), indent=2, ensure_ascii=False, default=str))
    if prompt and prompt.output_format:
        parts.append("## Output format")
        parts.append(prompt.output_format)
    parts.append("## Output JSON schema")
    parts.append(json.dumps(task.schema.to_json_schema(), indent=2))
    parts.append(
        "Every produced file must be listed in `artifacts` as "
        '{"path": ..., "format": ..., "label": ...}.'
    )

    return [
        {"role": "system", "content": system},
        {"role": "user", "content": "\n\n".join(parts)},
    ]


def parse_json_reply(task_id: str, text: str) -> dict[str, object]:
    """Parse an agent reply, tolerating a surrounding Markdown code fence.

    Raises:
        TaskExecutionFailure: If the reply is not a JSON object.
    """

    body = text.strip()
    match = _FENCE_RE.match(body)
    if match:
        body = match.group("body").strip()

    try:
        data = json.loads(body)
    except json.JSONDecodeError as e:
        raise TaskExecutionFailure(task_id, f"agent reply is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise TaskExecutionFailure(
            task_id, f"agent reply must be a JSON object, got {type(data).__name__}"
        )
    return data


class AgentTaskRunner:
    """Runs `agent` tasks through an `LLMProvider`."""

    def __init__(
        self,
        provider: LLMProvider,
        *,
        max_tokens: int | None = None,
        temperature: float | None = None,
    ) -> None:
        self.provider = provider
        self.max_tokens = max_tokens
        self.temperature = temperature

    def run(self, invocation: TaskInvocation) -> Mapping[str, object]:
        task = invocation.task
        if task.kind != "agent":
            raise TaskExecutionFailure(task.task_id, f"unsupported task kind '{task.kind}'")

        messages = render_messages(invocation)
        logger.info(
            "Dispatching agent task",
            extra={
                "task_id": task.task_id,
                "effect_id": invocation.effect_id,
                "run_id": invocation.run_id,
                "provider": self.provider.name,
            },
        )

        try:
            reply = self.provider.chat(
                messages,
                max_tokens=self.max_tokens,
                temperature=self.temperature,
                json_output=True,
            )
        except Exception as e:
            raise TaskExecutionFailure(task.task_id, str(e) or e.__class__.__name__) from e

        return parse_json_reply(task.task_id, reply)
