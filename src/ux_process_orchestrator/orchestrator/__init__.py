"""Process-facing entrypoints.

Provides:
- Structured logging and the run-scoped pipeline logger
- The `ux-orchestrator` command line interface
"""
