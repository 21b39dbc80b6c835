"""Unit tests for the REST API."""

from __future__ import annotations

import time

import pytest
from conftest import IA_RESULTS, ScriptedRunner
from fastapi.testclient import TestClient

from ux_process_orchestrator.core.config import OrchestratorConfig, PipelineConfig
from ux_process_orchestrator.core.orchestrator import Orchestrator
from ux_process_orchestrator.pipeline import FixedClock
from ux_process_orchestrator.server.app import create_app

IA = "ux-ui-design/information-architecture"


def _poll(fn, *, timeout: float = 10.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        value = fn()
        if value:
            return value
        time.sleep(0.02)
    raise AssertionError("condition not reached in time")


@pytest.fixture
def client(orchestrator_config: OrchestratorConfig) -> TestClient:
    config = orchestrator_config.model_copy(
        update={"pipeline": PipelineConfig(checkpoint_mode="queue")}
    )
    orchestrator = Orchestrator(
        config, task_runner=ScriptedRunner(IA_RESULTS), clock=FixedClock()
    )
    return TestClient(create_app(orchestrator))


def _next_breakpoint(client: TestClient, run_id: str) -> dict:
    pending = _poll(lambda: client.get("/api/breakpoints", params={"run_id": run_id}).json())
    return pending[0]


def test_health_and_processes(client: TestClient) -> None:
    assert client.get("/api/health").json() == {"status": "ok"}

    processes = client.get("/api/processes").json()
    assert [p["process_id"] for p in processes] == [IA, "ux-ui-design/wireframing"]


def test_run_is_driven_through_breakpoints(client: TestClient) -> None:
    created = client.post("/api/runs", json={"process_id": IA, "run_id": "api-run"})
    assert created.status_code == 202
    assert created.json()["run_id"] == "api-run"

    titles = []
    for _ in range(4):
        bp = _next_breakpoint(client, "api-run")
        titles.append(bp["title"])
        assert bp["context"]["runId"] == "api-run"
        resp = client.post(
            f"/api/breakpoints/{bp['breakpoint_id']}/approve",
            json={"response": "ok", "reviewer": "ana"},
        )
        assert resp.status_code == 200
        assert resp.json()["approved"] is True

    assert titles[0] == "IA Research Synthesis Review"
    assert titles[-1] == "Information Architecture Final Review"

    run = _poll(
        lambda: (r := client.get("/api/runs/api-run").json())["status"] == "succeeded" and r
    )
    assert run["result"]["qualityScore"] == 76.5
    assert run["inputs"] == {}
    assert [c["reviewer"] for c in run["checkpoints"]] == ["ana"] * 4
    assert [r["run_id"] for r in client.get("/api/runs").json()] == ["api-run"]


def test_rejecting_a_breakpoint_rejects_the_run(client: TestClient) -> None:
    client.post("/api/runs", json={"process_id": IA, "run_id": "api-rej"})

    bp = _next_breakpoint(client, "api-rej")
    resp = client.post(f"/api/breakpoints/{bp['breakpoint_id']}/reject")
    assert resp.status_code == 200
    assert resp.json()["approved"] is False

    run = _poll(
        lambda: (r := client.get("/api/runs/api-rej").json())["status"] == "rejected" and r
    )
    assert run["rejected_at"] == "IA Research Synthesis Review"
    assert run["result"] is None

    again = client.post(f"/api/breakpoints/{bp['breakpoint_id']}/approve")
    assert again.status_code == 404


def test_unknown_process_and_run(client: TestClient) -> None:
    assert client.post("/api/runs", json={"process_id": "nope"}).status_code == 404
    assert client.get("/api/runs/missing").status_code == 404


def test_duplicate_run_id_conflicts(client: TestClient) -> None:
    assert client.post("/api/runs", json={"process_id": IA, "run_id": "dup"}).status_code == 202
    assert client.post("/api/runs", json={"process_id": IA, "run_id": "dup"}).status_code == 409

    # Release the background run so it does not outlive the test.
    bp = _next_breakpoint(client, "dup")
    client.post(f"/api/breakpoints/{bp['breakpoint_id']}/reject")


def test_breakpoints_unavailable_without_queue(orchestrator_config: OrchestratorConfig) -> None:
    orchestrator = Orchestrator(orchestrator_config, task_runner=ScriptedRunner({}))
    client = TestClient(create_app(orchestrator))

    assert client.get("/api/breakpoints").json() == []
    assert client.post("/api/breakpoints/x/approve").status_code == 409


def test_run_id_cannot_escape_runs_dir(
    client: TestClient, orchestrator_config: OrchestratorConfig
) -> None:
    response = client.post("/api/runs", json={"process_id": IA, "run_id": ".."})

    assert response.status_code == 422
    assert not (orchestrator_config.state.storage_path / "run.json").exists()
    assert client.get("/api/runs").json() == []


def test_telegram_polling_needs_a_configured_bot(client: TestClient) -> None:
    assert client.app.state.telegram_stop is None  # type: ignore[attr-defined]
