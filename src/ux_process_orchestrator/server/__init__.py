"""FastAPI server adapter for ux-process-orchestrator.

This module exposes a REST API over the orchestrator.

Design intent:
- Keep business logic in `ux_process_orchestrator.core` and `.pipeline`
- Keep server-specific concerns (routing, CORS, background runs) here
"""

from __future__ import annotations

__all__ = ["create_app"]

from ux_process_orchestrator.server.app import create_app
