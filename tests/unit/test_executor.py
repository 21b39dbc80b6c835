"""Unit tests for pipeline execution semantics."""

from __future__ import annotations

import threading
import time

import pytest
from conftest import ScriptedRunner

from ux_process_orchestrator.pipeline import (
    ABSENT,
    CheckpointStep,
    DuplicateStepError,
    OptionalStep,
    ParallelGroup,
    Pipeline,
    PipelineExecutor,
    RunStatus,
    SchemaViolation,
    TaskExecutionFailure,
    TaskStep,
    define_task,
    flag,
    inputs_from,
)
from ux_process_orchestrator.pipeline.checkpoints import Checkpoint
from ux_process_orchestrator.pipeline.context import PipelineContext
from ux_process_orchestrator.pipeline.tasks import TaskResult

alpha = define_task("alpha", title="Alpha", required=["value"], task="produce alpha")
beta = define_task("beta", title="Beta", required=["value"], task="produce beta")
gamma = define_task("gamma", title="Gamma", required=["value"], task="produce gamma")


def _result(value: int, *paths: str) -> dict[str, object]:
    return {"value": value, "artifacts": [{"path": p} for p in paths]}


def _finalize(view) -> dict[str, object]:
    return {
        "slots": {
            slot: view.value(slot, "value") if slot in view else None
            for slot in ("a", "b", "c")
        }
    }


def _pipeline(*steps, defaults=None) -> Pipeline:
    return Pipeline(
        process_id="test/process",
        title="Test Process",
        steps=tuple(steps),
        finalize=_finalize,
        defaults=defaults or {},
    )


def _review(title: str = "Review") -> CheckpointStep:
    return CheckpointStep(
        "review",
        lambda view: Checkpoint(
            title=title, question="Approve?", files=view.artifacts, summary={"n": 1}
        ),
    )


def test_artifacts_concatenate_in_completion_order(make_ctx) -> None:
    runner = ScriptedRunner(
        {"alpha": _result(1, "a1.md", "a2.md"), "beta": _result(2), "gamma": _result(3, "c.md")}
    )
    pipeline = _pipeline(
        TaskStep("a", alpha, inputs_from()),
        TaskStep("b", beta, inputs_from()),
        TaskStep("c", gamma, inputs_from()),
    )

    outcome = PipelineExecutor(make_ctx(runner)).run(pipeline, {})

    assert outcome.status == RunStatus.SUCCEEDED
    assert [a.path for a in outcome.artifacts] == ["a1.md", "a2.md", "c.md"]
    assert outcome.result == {"slots": {"a": 1, "b": 2, "c": 3}}
    assert outcome.duration == 1.0


def test_parallel_results_are_positional_and_merged_in_submission_order(make_ctx) -> None:
    release_beta = threading.Event()

    def slow_alpha(_inv):
        # Finish after beta.
        assert release_beta.wait(timeout=5)
        return _result(1, "a.md")

    def fast_beta(_inv):
        release_beta.set()
        return _result(2, "b.md")

    runner = ScriptedRunner({"alpha": slow_alpha, "beta": fast_beta})
    group = ParallelGroup(
        "pair", (TaskStep("a", alpha, inputs_from()), TaskStep("b", beta, inputs_from()))
    )
    executor = PipelineExecutor(make_ctx(runner))
    state = PipelineContext(run_id="run-1", inputs={})

    results = executor.run_parallel_group(group, state)

    assert [r["value"] for r in results] == [1, 2]  # type: ignore[index]
    assert [a.path for a in state.artifacts] == ["a.md", "b.md"]


def test_parallel_members_see_the_same_context(make_ctx) -> None:
    seen: list[object] = []

    def capture(inv):
        seen.append(inv.payload["prior"])
        return _result(0)

    runner = ScriptedRunner({"alpha": _result(7), "beta": capture, "gamma": capture})
    pipeline = _pipeline(
        TaskStep("a", alpha, inputs_from()),
        ParallelGroup(
            "pair",
            (
                TaskStep("b", beta, inputs_from(prior=lambda v: v.value("a", "value"))),
                TaskStep("c", gamma, inputs_from(prior=lambda v: "b" in v)),
            ),
        ),
    )

    PipelineExecutor(make_ctx(runner)).run(pipeline, {})

    assert sorted(map(str, seen)) == ["7", "False"]


def test_schema_violation_stops_the_run(make_ctx) -> None:
    runner = ScriptedRunner(
        {"alpha": _result(1), "beta": {"artifacts": []}, "gamma": _result(3)}
    )
    pipeline = _pipeline(
        TaskStep("a", alpha, inputs_from()),
        TaskStep("b", beta, inputs_from()),
        TaskStep("c", gamma, inputs_from()),
    )

    with pytest.raises(SchemaViolation) as excinfo:
        PipelineExecutor(make_ctx(runner)).run(pipeline, {})

    assert excinfo.value.task_id == "beta"
    assert excinfo.value.missing == ("value",)
    assert runner.task_ids() == ["alpha", "beta"]


def test_missing_artifacts_field_is_a_schema_violation(make_ctx) -> None:
    runner = ScriptedRunner({"alpha": {"value": 1}})
    pipeline = _pipeline(TaskStep("a", alpha, inputs_from()))

    with pytest.raises(SchemaViolation) as excinfo:
        PipelineExecutor(make_ctx(runner)).run(pipeline, {})

    assert excinfo.value.missing == ("artifacts",)


def test_rejected_checkpoint_ends_the_run_without_result(make_ctx, gate) -> None:
    gate.reject = {"Review"}
    runner = ScriptedRunner({"alpha": _result(1, "a.md"), "beta": _result(2)})
    pipeline = _pipeline(
        TaskStep("a", alpha, inputs_from()),
        _review(),
        TaskStep("b", beta, inputs_from()),
    )

    outcome = PipelineExecutor(make_ctx(runner)).run(pipeline, {})

    assert outcome.status == RunStatus.REJECTED
    assert outcome.ok is False
    assert outcome.result is None
    assert outcome.rejected_at == "Review"
    assert runner.task_ids() == ["alpha"]
    assert outcome.checkpoints[0]["approved"] is False


def test_checkpoint_request_shape(make_ctx, gate) -> None:
    runner = ScriptedRunner({"alpha": _result(1, "a.md")})
    pipeline = _pipeline(TaskStep("a", alpha, inputs_from()), _review())

    PipelineExecutor(make_ctx(runner)).run(pipeline, {})

    assert gate.requests == [
        {
            "question": "Approve?",
            "title": "Review",
            "context": {
                "runId": "run-1",
                "files": [{"path": "a.md", "format": "markdown"}],
                "summary": {"n": 1},
            },
        }
    ]


def test_skipped_optional_step_reads_as_absent(make_ctx) -> None:
    runner = ScriptedRunner({"alpha": _result(1), "gamma": _result(3)})
    pipeline = _pipeline(
        TaskStep("a", alpha, inputs_from()),
        OptionalStep(TaskStep("b", beta, inputs_from()), when=flag("withBeta")),
        TaskStep("c", gamma, inputs_from(results=["b"])),
    )
    executor = PipelineExecutor(make_ctx(runner))

    outcome = executor.run(pipeline, {"withBeta": False})

    assert runner.task_ids() == ["alpha", "gamma"]
    assert runner.payload_of("gamma") == {"b": None}
    assert outcome.result == {"slots": {"a": 1, "b": None, "c": 3}}


def test_skipped_slot_holds_absent_sentinel(make_ctx) -> None:
    runner = ScriptedRunner({})
    executor = PipelineExecutor(make_ctx(runner))
    state = PipelineContext(run_id="run-1", inputs={})

    executor._execute(
        OptionalStep(TaskStep("b", beta, inputs_from()), when=lambda v: False), state
    )

    assert state.slots["b"] is ABSENT
    assert not state.view().executed("b")
    assert state.view().result("b") is None


def test_unreached_slot_raises_key_error() -> None:
    view = PipelineContext(run_id="run-1", inputs={}).view()

    with pytest.raises(KeyError):
        view["later"]


def test_optional_parallel_members(make_ctx) -> None:
    runner = ScriptedRunner({"alpha": _result(1), "beta": _result(2)})
    group = ParallelGroup(
        "validation",
        (
            OptionalStep(TaskStep("a", alpha, inputs_from()), when=flag("withAlpha", True)),
            OptionalStep(TaskStep("b", beta, inputs_from()), when=flag("withBeta", True)),
        ),
    )
    executor = PipelineExecutor(make_ctx(runner))
    state = PipelineContext(run_id="run-1", inputs={"withAlpha": False})

    results = executor.run_parallel_group(group, state)

    assert results[0] is ABSENT
    assert isinstance(results[1], TaskResult)
    assert runner.task_ids() == ["beta"]


def test_parallel_failure_prevents_later_steps(make_ctx) -> None:
    finished = threading.Event()

    def slow_success(_inv):
        time.sleep(0.05)
        finished.set()
        return _result(1, "a.md")

    runner = ScriptedRunner(
        {
            "alpha": slow_success,
            "beta": TaskExecutionFailure("beta", "agent crashed"),
            "gamma": _result(3),
        }
    )
    ctx = make_ctx(runner)
    pipeline = _pipeline(
        ParallelGroup(
            "pair", (TaskStep("a", alpha, inputs_from()), TaskStep("b", beta, inputs_from()))
        ),
        TaskStep("c", gamma, inputs_from()),
    )

    with pytest.raises(TaskExecutionFailure) as excinfo:
        PipelineExecutor(ctx).run(pipeline, {})

    assert excinfo.value.task_id == "beta"
    # Sibling was awaited before the failure surfaced.
    assert finished.is_set()
    assert "gamma" not in runner.task_ids()


def test_parallel_failure_merges_no_results(make_ctx) -> None:
    runner = ScriptedRunner(
        {"alpha": _result(1, "a.md"), "beta": TaskExecutionFailure("beta", "boom")}
    )
    group = ParallelGroup(
        "pair", (TaskStep("a", alpha, inputs_from()), TaskStep("b", beta, inputs_from()))
    )
    state = PipelineContext(run_id="run-1", inputs={})

    with pytest.raises(TaskExecutionFailure):
        PipelineExecutor(make_ctx(runner)).run_parallel_group(group, state)

    assert "a" not in state.slots
    assert state.artifacts == ()


def test_duplicate_slot_is_rejected_before_any_step_runs(make_ctx) -> None:
    runner = ScriptedRunner({"alpha": _result(1)})
    pipeline = _pipeline(
        TaskStep("a", alpha, inputs_from()),
        TaskStep("a", beta, inputs_from()),
    )

    with pytest.raises(DuplicateStepError):
        PipelineExecutor(make_ctx(runner)).run(pipeline, {})

    assert runner.calls == []


def test_same_task_may_back_two_slots(make_ctx) -> None:
    runner = ScriptedRunner({"alpha": lambda inv: _result(int(inv.payload["n"]))})
    pipeline = _pipeline(
        TaskStep("a", alpha, inputs_from(n=lambda v: 1)),
        TaskStep("b", alpha, inputs_from(n=lambda v: 2)),
    )

    outcome = PipelineExecutor(make_ctx(runner)).run(pipeline, {})

    assert outcome.result == {"slots": {"a": 1, "b": 2, "c": None}}


def test_defaults_are_merged_under_caller_inputs(make_ctx) -> None:
    runner = ScriptedRunner({"alpha": _result(1)})
    pipeline = _pipeline(
        TaskStep("a", alpha, inputs_from("name", "mode")),
        defaults={"name": "Default", "mode": "fast"},
    )

    PipelineExecutor(make_ctx(runner)).run(pipeline, {"name": "Caller"})

    assert runner.payload_of("alpha") == {"name": "Caller", "mode": "fast"}


def test_task_io_is_persisted_per_effect(make_ctx, tmp_path) -> None:
    from ux_process_orchestrator.state.manager import RunTaskStore

    store = RunTaskStore(tmp_path)
    runner = ScriptedRunner({"alpha": _result(1, "a.md")})
    pipeline = _pipeline(TaskStep("a", alpha, inputs_from(n=lambda v: 5)))

    PipelineExecutor(make_ctx(runner, store=store)).run(pipeline, {})

    assert (tmp_path / "tasks" / "effect-1" / "input.json").exists()
    assert store.load_result("effect-1") == {
        "value": 1,
        "artifacts": [{"path": "a.md", "format": "markdown"}],
    }


def test_progress_is_logged(make_ctx, run_log) -> None:
    runner = ScriptedRunner({"alpha": _result(1)})
    pipeline = _pipeline(
        TaskStep("a", alpha, inputs_from()),
        OptionalStep(TaskStep("b", beta, inputs_from()), when=flag("x"), description="beta"),
    )

    PipelineExecutor(make_ctx(runner)).run(pipeline, {})

    messages = [m for _level, m in run_log.entries]
    assert messages[0] == "Starting Test Process"
    assert "Skipping beta" in messages
    assert messages[-1] == "Completed Test Process"


def test_outcome_json_carries_checkpoint_history(make_ctx, gate) -> None:
    gate.reject = {"Review"}
    runner = ScriptedRunner({"alpha": _result(1, "a.md")})
    pipeline = _pipeline(TaskStep("a", alpha, inputs_from()), _review())

    payload = PipelineExecutor(make_ctx(runner)).run(pipeline, {}).to_json()

    assert payload["status"] == "rejected"
    assert payload["checkpoints"] == [
        {
            "name": "review",
            "title": "Review",
            "approved": False,
            "response": "needs work",
            "reviewer": "tester",
        }
    ]


def test_require_rejects_skipped_and_unreached_slots() -> None:
    state = PipelineContext(run_id="run-1", inputs={})
    state.mark_absent("b")
    view = state.view()

    with pytest.raises(KeyError, match="skipped"):
        view.require("b")
    with pytest.raises(KeyError):
        view.require("later")
