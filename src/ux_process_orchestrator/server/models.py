"""Pydantic models for the REST server."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from ux_process_orchestrator.state.manager import RunState


class ApiProcess(BaseModel):
    process_id: str
    title: str


class RunRequest(BaseModel):
    process_id: str
    inputs: dict[str, Any] = Field(default_factory=dict)
    run_id: str | None = Field(default=None, min_length=1, pattern=r"^[A-Za-z0-9_.-]+$")


class ApiRun(BaseModel):
    run_id: str
    process_id: str
    status: RunState

    created_at: datetime
    updated_at: datetime

    result: dict[str, Any] | None = None
    artifacts: list[dict[str, Any]] = Field(default_factory=list)
    checkpoints: list[dict[str, Any]] = Field(default_factory=list)

    duration: float | None = None
    rejected_at: str | None = None
    error: str | None = None


class ApiRunDetail(ApiRun):
    inputs: dict[str, Any] = Field(default_factory=dict)
    events: list[dict[str, Any]] = Field(default_factory=list)


class ApiBreakpoint(BaseModel):
    breakpoint_id: str
    run_id: str
    title: str
    question: str
    created_at: datetime
    context: dict[str, Any]


class DecisionRequest(BaseModel):
    response: str = ""
    reviewer: str | None = None


class ApiDecision(BaseModel):
    breakpoint_id: str
    approved: bool
    response: str
    reviewer: str | None = None
