"""Run state persistence.

Layout under `storage_path`:

    runs/<run_id>/run.json
    runs/<run_id>/tasks/<effect_id>/input.json
    runs/<run_id>/tasks/<effect_id>/result.json
"""

from __future__ import annotations

import json
import logging
import threading
from datetime import UTC, datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any, Literal

from pydantic import BaseModel, Field

from ux_process_orchestrator.pipeline.tasks import TaskInvocation, TaskResult

if TYPE_CHECKING:
    from ux_process_orchestrator.core.config import StateConfig

logger = logging.getLogger(__name__)

RunState = Literal["queued", "running", "succeeded", "rejected", "failed"]


class InvalidRunIdError(ValueError):
    """Raised when a run id would not map to its own directory under `runs/`."""


class RunRecord(BaseModel):
    """Persistent record of one pipeline run."""

    version: str = Field(default="1.0.0", description="Record schema version")
    run_id: str
    process_id: str
    status: RunState = "queued"
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    inputs: dict[str, Any] = Field(default_factory=dict)
    result: dict[str, Any] | None = None
    artifacts: list[dict[str, Any]] = Field(default_factory=list)
    checkpoints: list[dict[str, Any]] = Field(default_factory=list)
    events: list[dict[str, Any]] = Field(default_factory=list)

    duration: float | None = None
    rejected_at: str | None = None
    error: str | None = None


def _write_json(path: Path, payload: object) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        json.dumps(payload, indent=2, ensure_ascii=False, default=str) + "\n",
        encoding="utf-8",
    )


class RunTaskStore:
    """Task input/result persistence for a single run."""

    def __init__(self, run_dir: Path) -> None:
        self.run_dir = run_dir

    def save_input(self, invocation: TaskInvocation) -> None:
        _write_json(
            self.run_dir / invocation.input_json_path,
            {
                "task_id": invocation.task.task_id,
                "effect_id": invocation.effect_id,
                "input": dict(invocation.payload),
            },
        )

    def save_result(self, invocation: TaskInvocation, result: TaskResult) -> None:
        _write_json(self.run_dir / invocation.output_json_path, result.to_json())

    def load_result(self, effect_id: str) -> dict[str, Any]:
        path = self.run_dir / "tasks" / effect_id / "result.json"
        return json.loads(path.read_text(encoding="utf-8"))


class RunStateManager:
    """Manager for persisting and loading run records.

    Safe to share between threads: the REST server updates records from
    background run threads while request handlers read them.
    """

    def __init__(self, config: StateConfig) -> None:
        self.config = config
        self.storage_path = config.storage_path
        self.runs_path = self.storage_path / "runs"
        self._lock = threading.Lock()

        self.runs_path.mkdir(parents=True, exist_ok=True)

        logger.info(f"Run state manager initialized at: {self.storage_path}")

    def run_dir(self, run_id: str) -> Path:
        return self.runs_path / run_id

    def is_valid_run_id(self, run_id: str) -> bool:
        if run_id in ("", ".", ".."):
            return False
        return self.run_dir(run_id).resolve().parent == self.runs_path.resolve()

    def _record_file(self, run_id: str) -> Path:
        return self.run_dir(run_id) / "run.json"

    def _load_unlocked(self, run_id: str) -> RunRecord | None:
        path = self._record_file(run_id)
        if not path.exists():
            return None
        data = json.loads(path.read_text(encoding="utf-8"))
        return RunRecord.model_validate(data)

    def _save_unlocked(self, record: RunRecord) -> None:
        _write_json(self._record_file(record.run_id), record.model_dump(mode="json"))

    def create_run(
        self, *, run_id: str, process_id: str, inputs: dict[str, Any]
    ) -> RunRecord:
        """Create a queued run record.

        Raises:
            InvalidRunIdError: If `run_id` does not name a directory directly
                under `runs/`.
            FileExistsError: If a record for `run_id` already exists.
        """
        if not self.is_valid_run_id(run_id):
            raise InvalidRunIdError(f"Invalid run id: {run_id!r}")
        with self._lock:
            if self._record_file(run_id).exists():
                raise FileExistsError(f"Run already exists: {run_id}")
            record = RunRecord(run_id=run_id, process_id=process_id, inputs=inputs)
            self._save_unlocked(record)
        logger.info(f"Run created: {run_id} ({process_id})")
        return record

    def load_run(self, run_id: str) -> RunRecord | None:
        if not self.is_valid_run_id(run_id):
            return None
        with self._lock:
            return self._load_unlocked(run_id)

    def update_run(self, run_id: str, **updates: Any) -> RunRecord:
        with self._lock:
            record = self._load_unlocked(run_id)
            if record is None:
                raise KeyError(run_id)
            merged = record.model_copy(update={"updated_at": datetime.now(UTC), **updates})
            self._save_unlocked(merged)
            return merged

    def list_runs(self) -> list[RunRecord]:
        with self._lock:
            records: list[RunRecord] = []
            for path in sorted(self.runs_path.glob("*/run.json")):
                try:
                    records.append(
                        RunRecord.model_validate(json.loads(path.read_text(encoding="utf-8")))
                    )
                except (json.JSONDecodeError, ValueError) as e:
                    logger.warning(f"Skipping unreadable run record {path}: {e}")
        return sorted(records, key=lambda r: r.created_at)

    def task_store(self, run_id: str) -> RunTaskStore:
        return RunTaskStore(self.run_dir(run_id))
