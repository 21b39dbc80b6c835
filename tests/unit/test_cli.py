"""Unit tests for the command line entrypoint."""

from __future__ import annotations

import io
import json
from pathlib import Path

import pytest
from conftest import IA_RESULTS, ScriptedRunner

from ux_process_orchestrator.core.orchestrator import Orchestrator
from ux_process_orchestrator.orchestrator import main as cli


@pytest.fixture(autouse=True)
def isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("ORCHESTRATOR_STATE_STORAGE_PATH", str(tmp_path / ".state"))
    monkeypatch.setenv("ORCHESTRATOR_LOG_LEVEL", "ERROR")
    return tmp_path


@pytest.fixture
def scripted(monkeypatch: pytest.MonkeyPatch) -> ScriptedRunner:
    runner = ScriptedRunner(IA_RESULTS)
    original_init = Orchestrator.__init__

    def _init(self, config=None, **kwargs):
        kwargs.setdefault("task_runner", runner)
        original_init(self, config, **kwargs)

    monkeypatch.setattr(Orchestrator, "__init__", _init)
    return runner


def test_list_processes(capsys: pytest.CaptureFixture[str]) -> None:
    assert cli.main(["list-processes"]) == 0

    out = capsys.readouterr().out
    assert "ux-ui-design/information-architecture\tInformation Architecture Design" in out
    assert "ux-ui-design/wireframing\tWireframing" in out


def test_run_with_auto_approve_then_show(
    scripted: ScriptedRunner, tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    inputs = tmp_path / "inputs.json"
    inputs.write_text(json.dumps({"projectName": "Acme"}), encoding="utf-8")

    code = cli.main(
        [
            "run",
            "--process",
            "ux-ui-design/information-architecture",
            "--inputs",
            str(inputs),
            "--run-id",
            "cli-run",
            "--auto-approve",
        ]
    )

    assert code == 0
    assert '"status": "succeeded"' in capsys.readouterr().out

    assert cli.main(["show-run", "cli-run"]) == 0
    assert '"run_id": "cli-run"' in capsys.readouterr().out


def test_rejected_run_exits_3(
    scripted: ScriptedRunner, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setattr("sys.stdin", io.StringIO("n\n"))
    monkeypatch.setenv("ORCHESTRATOR_PIPELINE_CHECKPOINT_MODE", "console")

    code = cli.main(["run", "--process", "ux-ui-design/information-architecture"])

    assert code == 3


def test_failed_run_exits_1(scripted: ScriptedRunner) -> None:
    scripted.results["content-inventory-audit"] = {"artifacts": []}

    code = cli.main(
        ["run", "--process", "ux-ui-design/information-architecture", "--auto-approve"]
    )

    assert code == 1


def test_usage_errors_exit_2(tmp_path: Path) -> None:
    bad = tmp_path / "bad.json"
    bad.write_text("[1, 2]", encoding="utf-8")

    assert cli.main(["run", "--process", "nope"]) == 2
    assert cli.main(["run", "--process", "ux-ui-design/wireframing", "--inputs", str(bad)]) == 2
    assert cli.main(["show-run", "missing"]) == 2


def test_run_id_outside_runs_dir_exits_2(isolated_env: Path, scripted: ScriptedRunner) -> None:
    code = cli.main(
        [
            "run",
            "--process",
            "ux-ui-design/information-architecture",
            "--auto-approve",
            "--run-id",
            "..",
        ]
    )

    assert code == 2
    assert scripted.calls == []
    assert not (isolated_env / ".state" / "run.json").exists()
