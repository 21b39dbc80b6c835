"""Human-review checkpoints and the gates that resolve them.

A gate receives `{question, title, context}` and returns a decision. How the
question reaches a human is the gate's business; the executor only blocks
until an answer exists.
"""

from __future__ import annotations

import json
import logging
import sys
import threading
import uuid
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Protocol, TextIO

from .artifacts import Artifact, describe_all

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Checkpoint:
    title: str
    question: str
    files: tuple[Artifact, ...] = ()
    summary: Mapping[str, object] = field(default_factory=dict)
    default_label: str | None = None

    def to_request(self, run_id: str) -> dict[str, object]:
        return {
            "question": self.question,
            "title": self.title,
            "context": {
                "runId": run_id,
                "files": describe_all(self.files, self.default_label),
                "summary": dict(self.summary),
            },
        }


@dataclass(frozen=True, slots=True)
class CheckpointDecision:
    approved: bool
    response: str = ""
    reviewer: str | None = None


class CheckpointGate(Protocol):
    def request(self, checkpoint: Checkpoint, *, run_id: str) -> CheckpointDecision: ...


class BreakpointNotifier(Protocol):
    def breakpoint_created(self, pending: PendingBreakpoint) -> None: ...

    def breakpoint_released(self, pending: PendingBreakpoint) -> None: ...


class AutoApproveGate:
    """Approves every checkpoint. Useful for unattended runs."""

    def request(self, checkpoint: Checkpoint, *, run_id: str) -> CheckpointDecision:
        logger.info(
            "Checkpoint auto-approved", extra={"run_id": run_id, "checkpoint": checkpoint.title}
        )
        return CheckpointDecision(approved=True, response="auto-approved", reviewer="auto")


_YES = {"y", "yes", "approve", "a"}
_NO = {"n", "no", "reject", "r"}


class ConsoleGate:
    """Asks on a terminal. End of input counts as a rejection."""

    def __init__(self, stdin: TextIO | None = None, stdout: TextIO | None = None) -> None:
        self._in = stdin or sys.stdin
        self._out = stdout or sys.stdout

    def request(self, checkpoint: Checkpoint, *, run_id: str) -> CheckpointDecision:
        files = describe_all(checkpoint.files, checkpoint.default_label)

        print(f"\n== {checkpoint.title} ==", file=self._out)
        for f in files:
            print(f"  - {f.get('label', '')} {f['path']} ({f['format']})", file=self._out)
        if checkpoint.summary:
            print(json.dumps(dict(checkpoint.summary), indent=2, default=str), file=self._out)

        while True:
            print(f"{checkpoint.question} [y/n] ", end="", file=self._out, flush=True)
            line = self._in.readline()
            if not line:
                return CheckpointDecision(approved=False, response="no input", reviewer="console")
            answer = line.strip().lower()
            if answer in _YES:
                return CheckpointDecision(approved=True, reviewer="console")
            if answer in _NO:
                return CheckpointDecision(approved=False, reviewer="console")


@dataclass
class PendingBreakpoint:
    breakpoint_id: str
    run_id: str
    checkpoint: Checkpoint
    created_at: datetime
    decision: CheckpointDecision | None = None
    _released: threading.Event = field(default_factory=threading.Event, repr=False)

    def to_json(self) -> dict[str, object]:
        out = {
            "breakpoint_id": self.breakpoint_id,
            "created_at": self.created_at.isoformat(),
            **self.checkpoint.to_request(self.run_id),
        }
        if self.decision is not None:
            out["decision"] = {
                "approved": self.decision.approved,
                "response": self.decision.response,
                "reviewer": self.decision.reviewer,
            }
        return out


def _new_breakpoint_id() -> str:
    return uuid.uuid4().hex


class BreakpointQueue:
    """In-process breakpoint service.

    `request` blocks the calling (pipeline) thread until another thread calls
    `resolve`. There is no timeout: a run waits for as long as its breakpoint
    stays open.
    """

    def __init__(
        self,
        notifiers: Sequence[BreakpointNotifier] = (),
        id_factory: Callable[[], str] = _new_breakpoint_id,
    ) -> None:
        self._lock = threading.Lock()
        self._pending: dict[str, PendingBreakpoint] = {}
        self._notifiers = list(notifiers)
        self._id_factory = id_factory

    def request(self, checkpoint: Checkpoint, *, run_id: str) -> CheckpointDecision:
        pending = PendingBreakpoint(
            breakpoint_id=self._id_factory(),
            run_id=run_id,
            checkpoint=checkpoint,
            created_at=datetime.now(tz=UTC),
        )
        with self._lock:
            self._pending[pending.breakpoint_id] = pending

        logger.info(
            "Breakpoint waiting",
            extra={"run_id": run_id, "breakpoint_id": pending.breakpoint_id},
        )
        for notifier in self._notifiers:
            notifier.breakpoint_created(pending)

        pending._released.wait()

        for notifier in self._notifiers:
            notifier.breakpoint_released(pending)

        if pending.decision is None:
            raise RuntimeError(f"Breakpoint {pending.breakpoint_id} released without a decision")
        return pending.decision

    def pending(self, run_id: str | None = None) -> list[PendingBreakpoint]:
        with self._lock:
            items = list(self._pending.values())
        if run_id is not None:
            items = [p for p in items if p.run_id == run_id]
        return sorted(items, key=lambda p: p.created_at)

    def get(self, breakpoint_id: str) -> PendingBreakpoint | None:
        with self._lock:
            return self._pending.get(breakpoint_id)

    def resolve(
        self,
        breakpoint_id: str,
        *,
        approved: bool,
        response: str = "",
        reviewer: str | None = None,
    ) -> CheckpointDecision:
        """Record a decision and release the waiting pipeline.

        Raises:
            KeyError: If the breakpoint is unknown or already released.
        """

        with self._lock:
            pending = self._pending.pop(breakpoint_id)
            pending.decision = CheckpointDecision(
                approved=approved, response=response, reviewer=reviewer
            )
        pending._released.set()

        logger.info(
            "Breakpoint released",
            extra={
                "run_id": pending.run_id,
                "breakpoint_id": breakpoint_id,
                "approved": approved,
            },
        )
        return pending.decision
