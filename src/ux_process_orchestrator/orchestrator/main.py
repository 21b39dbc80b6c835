"""CLI entrypoint for the UX process orchestrator."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from ux_process_orchestrator import __version__
from ux_process_orchestrator.core.config import OrchestratorConfig
from ux_process_orchestrator.core.orchestrator import Orchestrator
from ux_process_orchestrator.pipeline.checkpoints import AutoApproveGate
from ux_process_orchestrator.pipeline.executor import RunStatus
from ux_process_orchestrator.state.manager import InvalidRunIdError

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_USAGE = 2
EXIT_REJECTED = 3


def _load_inputs(value: str | None) -> dict[str, Any]:
    """Read process inputs from a JSON file, or from stdin when `value` is '-'."""
    if value is None:
        return {}
    text = sys.stdin.read() if value == "-" else Path(value).read_text(encoding="utf-8")
    data = json.loads(text)
    if not isinstance(data, dict):
        raise ValueError("Process inputs must be a JSON object")
    return data


def _dump(payload: object) -> None:
    print(json.dumps(payload, indent=2, ensure_ascii=False, default=str))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ux-orchestrator",
        description="Run multi-phase UX design processes as agent pipelines",
    )
    parser.add_argument(
        "--version", action="version", version=f"ux-process-orchestrator {__version__}"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("list-processes", help="List the processes that can be run")

    run = subparsers.add_parser("run", help="Run a process to completion")
    run.add_argument(
        "--process",
        required=True,
        help="Process id, e.g. 'ux-ui-design/information-architecture'",
    )
    run.add_argument(
        "--inputs",
        default=None,
        help="Path to a JSON file with process inputs ('-' reads stdin)",
    )
    run.add_argument("--run-id", default=None, help="Run id (defaults to a random id)")
    run.add_argument(
        "--auto-approve",
        action="store_true",
        help="Approve every checkpoint without prompting",
    )

    show_run = subparsers.add_parser("show-run", help="Print a stored run record")
    show_run.add_argument("run_id", help="Run id")

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = OrchestratorConfig()
    except ValidationError as e:
        # Logging isn't configured yet; keep it simple and actionable.
        print("Configuration error (check your .env):", file=sys.stderr)
        print(e, file=sys.stderr)
        return EXIT_USAGE

    try:
        if args.command == "list-processes":
            orchestrator = Orchestrator(config)
            for process in orchestrator.list_processes():
                print(f"{process['process_id']}\t{process['title']}")
            return EXIT_OK

        if args.command == "show-run":
            orchestrator = Orchestrator(config)
            record = orchestrator.state.load_run(args.run_id)
            if record is None:
                print(f"No such run: {args.run_id}", file=sys.stderr)
                return EXIT_USAGE
            _dump(record.model_dump(mode="json"))
            return EXIT_OK

        if args.command == "run":
            try:
                inputs = _load_inputs(args.inputs)
            except (OSError, ValueError) as e:
                print(f"Invalid inputs: {e}", file=sys.stderr)
                return EXIT_USAGE

            orchestrator = Orchestrator(
                config,
                checkpoints=AutoApproveGate() if args.auto_approve else None,
            )
            if args.process not in orchestrator.processes:
                print(f"Unknown process: {args.process}", file=sys.stderr)
                return EXIT_USAGE

            outcome = orchestrator.run_process(args.process, inputs, run_id=args.run_id)
            _dump(outcome.to_json())
            if outcome.status == RunStatus.REJECTED:
                print(f"Run rejected at checkpoint: {outcome.rejected_at}", file=sys.stderr)
                return EXIT_REJECTED
            return EXIT_OK

        logger.error("Unknown command", extra={"command": args.command})
        return EXIT_USAGE

    except (FileExistsError, InvalidRunIdError) as e:
        print(str(e), file=sys.stderr)
        return EXIT_USAGE

    except Exception:
        logger.exception("Command failed")
        return EXIT_FAILED


if __name__ == "__main__":
    raise SystemExit(main())
