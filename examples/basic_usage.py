#!/usr/bin/env python3
"""Programmatic process run example.

This demonstrates using the orchestrator directly:

* load settings from `.env`
* run a UX design process with every checkpoint auto-approved
* print where the run record and task files were persisted

The process id and input file are passed as arguments.
"""

from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Sequence

from ux_process_orchestrator.core import Orchestrator, OrchestratorConfig
from ux_process_orchestrator.pipeline import AutoApproveGate


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run a UX design process (programmatic example).")
    parser.add_argument(
        "--process",
        default="ux-ui-design/information-architecture",
        help="Process id to run",
    )
    parser.add_argument("--inputs", default=None, help="Path to a JSON file of process inputs")
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)

    inputs = {}
    if args.inputs:
        inputs = json.loads(Path(args.inputs).read_text(encoding="utf-8"))

    orchestrator = Orchestrator(OrchestratorConfig(), checkpoints=AutoApproveGate())
    outcome = orchestrator.run_process(args.process, inputs)

    print(f"Run {outcome.run_id}: {outcome.status.value} in {outcome.duration:.1f}s")
    if outcome.result is not None:
        print(f"Quality score: {outcome.result.get('qualityScore')}")
    print(f"Artifacts: {len(outcome.artifacts)}")
    print(f"Persisted to: {orchestrator.state.run_dir(outcome.run_id)}")
    return 0 if outcome.ok else 3


if __name__ == "__main__":
    raise SystemExit(main())
