"""FastAPI app factory.

Endpoints are thin wrappers over `Orchestrator`: runs execute on background
threads and their checkpoints wait in the orchestrator's breakpoint queue
until a reviewer approves or rejects them here.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from ux_process_orchestrator import __version__
from ux_process_orchestrator.core.config import OrchestratorConfig
from ux_process_orchestrator.core.orchestrator import Orchestrator
from ux_process_orchestrator.pipeline.checkpoints import BreakpointQueue, PendingBreakpoint
from ux_process_orchestrator.server.models import (
    ApiBreakpoint,
    ApiDecision,
    ApiProcess,
    ApiRun,
    ApiRunDetail,
    DecisionRequest,
    RunRequest,
)
from ux_process_orchestrator.server.run_launcher import start_run, start_telegram_polling
from ux_process_orchestrator.state.manager import InvalidRunIdError, RunRecord

logger = logging.getLogger(__name__)


def _to_api_breakpoint(pending: PendingBreakpoint) -> ApiBreakpoint:
    return ApiBreakpoint.model_validate(
        {"run_id": pending.run_id, **pending.to_json()}
    )


def _default_orchestrator() -> Orchestrator:
    config = OrchestratorConfig()
    # Server runs always wait on the in-process breakpoint queue.
    config.pipeline = config.pipeline.model_copy(update={"checkpoint_mode": "queue"})
    return Orchestrator(config)


def create_app(orchestrator: Orchestrator | None = None) -> FastAPI:
    orchestrator = orchestrator or _default_orchestrator()
    settings = orchestrator.config.server

    app = FastAPI(
        title="UX Process Orchestrator",
        version=__version__,
        description="REST API for running UX design processes and reviewing their checkpoints.",
        openapi_url="/api/openapi.json",
        docs_url="/api/docs",
        redoc_url="/api/redoc",
    )

    # Expose the orchestrator for request handlers that want to read it.
    app.state.orchestrator = orchestrator
    app.state.telegram_stop = start_telegram_polling(orchestrator)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.parsed_cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    def _queue_or_fail() -> BreakpointQueue:
        if orchestrator.breakpoints is None:
            raise HTTPException(
                status_code=409,
                detail="Checkpoints are not resolved through the API in this configuration",
            )
        return orchestrator.breakpoints

    def _load_or_404(run_id: str) -> RunRecord:
        record = orchestrator.state.load_run(run_id)
        if record is None:
            raise HTTPException(status_code=404, detail="Run not found")
        return record

    def _decide(breakpoint_id: str, approved: bool, req: DecisionRequest) -> ApiDecision:
        queue = _queue_or_fail()
        try:
            decision = queue.resolve(
                breakpoint_id,
                approved=approved,
                response=req.response,
                reviewer=req.reviewer,
            )
        except KeyError:
            raise HTTPException(
                status_code=404, detail="Breakpoint not found or already released"
            ) from None
        return ApiDecision(
            breakpoint_id=breakpoint_id,
            approved=decision.approved,
            response=decision.response,
            reviewer=decision.reviewer,
        )

    @app.get("/api/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/api/processes", response_model=list[ApiProcess])
    def list_processes() -> list[ApiProcess]:
        return [ApiProcess.model_validate(p) for p in orchestrator.list_processes()]

    @app.post("/api/runs", response_model=ApiRun, status_code=202)
    def create_run(req: RunRequest) -> ApiRun:
        try:
            record = orchestrator.submit(req.process_id, req.inputs, run_id=req.run_id)
        except KeyError:
            raise HTTPException(status_code=404, detail="Unknown process") from None
        except InvalidRunIdError as e:
            raise HTTPException(status_code=422, detail=str(e)) from None
        except FileExistsError:
            raise HTTPException(status_code=409, detail="Run id already exists") from None

        start_run(orchestrator, record)
        logger.info(
            "Run started",
            extra={"run_id": record.run_id, "process_id": record.process_id},
        )
        return ApiRun.model_validate(record.model_dump())

    @app.get("/api/runs", response_model=list[ApiRun])
    def list_runs() -> list[ApiRun]:
        return [ApiRun.model_validate(r.model_dump()) for r in orchestrator.state.list_runs()]

    @app.get("/api/runs/{run_id}", response_model=ApiRunDetail)
    def get_run(run_id: str) -> ApiRunDetail:
        return ApiRunDetail.model_validate(_load_or_404(run_id).model_dump())

    @app.get("/api/breakpoints", response_model=list[ApiBreakpoint])
    def list_breakpoints(run_id: str | None = None) -> list[ApiBreakpoint]:
        if orchestrator.breakpoints is None:
            return []
        return [_to_api_breakpoint(p) for p in orchestrator.breakpoints.pending(run_id)]

    @app.post("/api/breakpoints/{breakpoint_id}/approve", response_model=ApiDecision)
    def approve_breakpoint(breakpoint_id: str, req: DecisionRequest | None = None) -> ApiDecision:
        return _decide(breakpoint_id, True, req or DecisionRequest())

    @app.post("/api/breakpoints/{breakpoint_id}/reject", response_model=ApiDecision)
    def reject_breakpoint(breakpoint_id: str, req: DecisionRequest | None = None) -> ApiDecision:
        return _decide(breakpoint_id, False, req or DecisionRequest())

    return app
