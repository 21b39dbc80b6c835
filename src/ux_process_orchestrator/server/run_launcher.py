"""Background runner for pipeline runs started over the REST API."""

from __future__ import annotations

import logging
import threading

from ux_process_orchestrator.core.orchestrator import Orchestrator
from ux_process_orchestrator.state.manager import RunRecord

logger = logging.getLogger(__name__)


def start_run(orchestrator: Orchestrator, record: RunRecord) -> threading.Thread:
    """Execute a queued run on its own daemon thread.

    Checkpoints block that thread until they are resolved through the
    orchestrator's breakpoint queue.
    """
    thread = threading.Thread(
        target=_run_job,
        name=f"run-{record.run_id}",
        daemon=True,
        kwargs={"orchestrator": orchestrator, "record": record},
    )
    thread.start()
    return thread


def _run_job(*, orchestrator: Orchestrator, record: RunRecord) -> None:
    try:
        outcome = orchestrator.execute(record)
    except Exception as e:
        # Already recorded as failed on the run record.
        logger.warning(
            "Background run ended with an error",
            extra={"run_id": record.run_id, "error": str(e)},
        )
        return
    logger.info(
        "Background run finished",
        extra={"run_id": record.run_id, "status": outcome.status.value},
    )


def start_telegram_polling(orchestrator: Orchestrator) -> threading.Event | None:
    """Poll Telegram for breakpoint replies on a daemon thread.

    Returns the event that stops the poller, or None when the orchestrator has
    no Telegram notifier, no breakpoint queue, or polling is switched off.
    """
    notifier = orchestrator.telegram
    queue = orchestrator.breakpoints
    notify = orchestrator.config.notify
    if notifier is None or queue is None or not notify.telegram_poll:
        return None

    stop = threading.Event()
    thread = threading.Thread(
        target=notifier.run_polling,
        name="telegram-poller",
        daemon=True,
        args=(queue, stop, notify.telegram_poll_interval),
    )
    thread.start()
    logger.info("Telegram reply polling started")
    return stop
