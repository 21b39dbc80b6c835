"""UX Process Orchestrator.

Runs multi-phase UX design processes (information architecture, wireframing)
as pipelines of LLM agent tasks with:
- declared output schemas validated on every task result
- parallel groups joined before the pipeline proceeds
- blocking human-review checkpoints
- per-run state persisted as local JSON
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
