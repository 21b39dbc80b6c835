"""Test configuration and fixtures."""

from __future__ import annotations

import threading
from collections.abc import Callable, Mapping
from pathlib import Path

import pytest

from ux_process_orchestrator.core.config import (
    LLMConfig,
    OrchestratorConfig,
    PipelineConfig,
    StateConfig,
)
from ux_process_orchestrator.pipeline.checkpoints import Checkpoint, CheckpointDecision
from ux_process_orchestrator.pipeline.clock import FixedClock
from ux_process_orchestrator.pipeline.context import ExecutionContext
from ux_process_orchestrator.pipeline.tasks import TaskInvocation

Canned = Mapping[str, object] | Exception | Callable[[TaskInvocation], object]


class ScriptedRunner:
    """Task runner that replays canned results keyed by task id."""

    def __init__(self, results: Mapping[str, Canned]) -> None:
        self.results = dict(results)
        self.calls: list[TaskInvocation] = []
        self._lock = threading.Lock()

    def run(self, invocation: TaskInvocation) -> Mapping[str, object]:
        with self._lock:
            self.calls.append(invocation)
        value = self.results[invocation.task.task_id]
        if callable(value):
            value = value(invocation)
        if isinstance(value, Exception):
            raise value
        assert isinstance(value, Mapping)
        return value

    def task_ids(self) -> list[str]:
        return [call.task.task_id for call in self.calls]

    def payload_of(self, task_id: str) -> Mapping[str, object]:
        return next(c.payload for c in self.calls if c.task.task_id == task_id)


class RecordingGate:
    """Checkpoint gate that records requests and rejects the titles it is told to."""

    def __init__(self, reject: tuple[str, ...] = ()) -> None:
        self.reject = set(reject)
        self.requests: list[dict[str, object]] = []

    def request(self, checkpoint: Checkpoint, *, run_id: str) -> CheckpointDecision:
        self.requests.append(checkpoint.to_request(run_id))
        if checkpoint.title in self.reject:
            return CheckpointDecision(approved=False, response="needs work", reviewer="tester")
        return CheckpointDecision(approved=True, reviewer="tester")

    @property
    def titles(self) -> list[str]:
        return [str(r["title"]) for r in self.requests]


class ListLogger:
    def __init__(self) -> None:
        self.entries: list[tuple[str, str]] = []

    def log(self, level: str, message: str) -> None:
        self.entries.append((level, message))


def artifact(path: str, **extra: object) -> dict[str, object]:
    return {"path": path, "format": "markdown", **extra}


IA_RESULTS: dict[str, Canned] = {
    "content-inventory-audit": {
        "totalItems": 42,
        "categories": ["Products", "Support", "Company"],
        "contentTypes": ["article", "faq"],
        "reportPath": "ia-design-output/inventory.md",
        "artifacts": [artifact("ia-design-output/inventory.md", label="Inventory")],
    },
    "ia-research-synthesis": {
        "mentalModels": ["shop by task"],
        "topTasks": ["find pricing", "contact support"],
        "userTaskCount": 2,
        "topInsight": "users search by task",
        "artifacts": [artifact("ia-design-output/research.md")],
    },
    "ia-strategy-definition": {
        "organizationSchemes": ["task-based"],
        "navigationModel": "hierarchical",
        "iaPrinciples": ["plain labels"],
        "documentPath": "ia-design-output/strategy.md",
        "artifacts": [artifact("ia-design-output/strategy.md")],
    },
    "sitemap-design": {
        "diagramPath": "ia-design-output/sitemap.mmd",
        "totalPages": 30,
        "topLevelCategories": 5,
        "maxDepth": 3,
        "artifacts": [artifact("ia-design-output/sitemap.mmd", format="mermaid")],
    },
    "navigation-structure-design": {
        "specificationPath": "ia-design-output/navigation.md",
        "navigationLevels": 2,
        "primaryNavItems": ["Products", "Pricing", "Support", "About", "Blog"],
        "navigationTypes": ["global", "breadcrumb"],
        "artifacts": [artifact("ia-design-output/navigation.md")],
    },
    "labeling-scheme-design": {
        "documentPath": "ia-design-output/labels.md",
        "totalLabels": 35,
        "approach": "user vocabulary",
        "taxonomyPath": "ia-design-output/taxonomy.json",
        "artifacts": [artifact("ia-design-output/labels.md")],
    },
    "card-sorting-validation": {
        "participantCount": 15,
        "sortType": "hybrid",
        "cardCount": 40,
        "agreementScore": 0.72,
        "recommendations": ["merge Company and About"],
        "artifacts": [artifact("ia-design-output/card-sort.md")],
    },
    "tree-testing-validation": {
        "participantCount": 20,
        "taskCount": 2,
        "averageSuccessRate": 0.85,
        "averageDirectness": 0.7,
        "problemAreas": ["Support"],
        "recommendations": ["rename Help"],
        "artifacts": [artifact("ia-design-output/tree-test.md")],
    },
    "ia-refinement": {
        "changesCount": 4,
        "criticalIssues": 1,
        "improvementAreas": ["support labels"],
        "validationSuccessRate": 0.85,
        "artifacts": [artifact("ia-design-output/refinement.md")],
    },
    "ia-documentation": {
        "masterDocumentPath": "ia-design-output/ia.md",
        "executiveSummary": "Task-based IA",
        "sectionsCompleted": ["strategy", "sitemap"],
        "artifacts": [artifact("ia-design-output/ia.md")],
    },
    "wireframe-prototype": {
        "prototypePath": "ia-design-output/prototype.html",
        "screenCount": 6,
        "flowsDocumented": ["pricing"],
        "artifacts": [artifact("ia-design-output/prototype.html", format="html")],
    },
    "ia-quality-assessment": {
        "componentScores": {
            "iaStrategy": 90,
            "sitemap": 80,
            "navigation": 70,
            "labeling": 100,
            "validation": 60,
            "documentation": 50,
        },
        "validationScore": 60,
        "recommendations": ["add search"],
        "artifacts": [artifact("ia-design-output/quality.md")],
    },
}

# 90*.15 + 80*.25 + 70*.20 + 100*.15 + 60*.15 + 50*.10
IA_EXPECTED_SCORE = 76.5


def _wireframe_review(invocation: TaskInvocation) -> dict[str, object]:
    iteration = invocation.payload["iteration"]
    return {
        "reviewScore": 70 if iteration == 1 else 85,
        "componentScores": {"requirementCoverage": 80},
        "strengths": ["clear hierarchy"],
        "criticalIssues": ["missing empty state"] if iteration == 1 else [],
        "recommendations": ["add empty states"],
        "artifacts": [artifact(f"wireframing-output/review-{iteration}.md")],
    }


WIREFRAMING_RESULTS: dict[str, Canned] = {
    "requirements-analysis": {
        "totalRequirements": 8,
        "screensIdentified": [{"screenName": "Home"}],
        "prioritizedScreens": {"critical": ["Home"]},
        "artifacts": [artifact("wireframing-output/requirements.md")],
    },
    "information-architecture": {
        "sitemap": {"root": "Home"},
        "navigationStructure": {"primary": ["Home"]},
        "contentHierarchy": {"Home": ["hero"]},
        "artifacts": [artifact("wireframing-output/ia.md")],
    },
    "user-flow-mapping": {
        "flowDiagrams": ["checkout.mmd"],
        "criticalPaths": ["checkout"],
        "artifacts": [artifact("wireframing-output/flows.md")],
    },
    "low-fidelity-wireframes": {
        "wireframes": ["home-lo"],
        "totalScreens": 4,
        "componentInventory": ["header"],
        "artifacts": [artifact("wireframing-output/lo/home.svg", phase="low-fidelity")],
    },
    "wireframe-review": _wireframe_review,
    "medium-fidelity-wireframes": {
        "wireframes": ["home-mid"],
        "totalScreens": 5,
        "refinedComponents": ["header"],
        "artifacts": [artifact("wireframing-output/mid/home.svg", phase="medium-fidelity")],
    },
    "annotation-generation": {
        "annotations": ["header is sticky"],
        "annotationIndex": {"Home": 1},
        "artifacts": [artifact("wireframing-output/annotations.md")],
    },
    "interactive-prototype": {
        "prototypeUrl": "https://proto.example/abc",
        "linkedScreens": 5,
        "implementedFlows": ["checkout"],
        "artifacts": [artifact("wireframing-output/prototype.md")],
    },
    "wireframe-package-generation": {
        "packagePath": "wireframing-output/package.md",
        "executiveSummary": "All screens wireframed",
        "deliverables": ["wireframes"],
        "artifacts": [artifact("wireframing-output/package.md")],
    },
    "quality-validation": {
        "overallScore": 84,
        "componentScores": {
            "requirementCoverage": 90,
            "userFlowCompleteness": 85,
            "informationArchitecture": 80,
            "usability": 90,
            "accessibility": 70,
            "consistency": 100,
        },
        "requirementsCoverage": 100,
        "usabilityScore": 90,
        "artifacts": [artifact("wireframing-output/quality.md")],
    },
}

WIREFRAMING_EXPECTED_SCORE = 86.5


@pytest.fixture
def temp_state_dir(tmp_path: Path) -> Path:
    """Provide a temporary state directory."""
    state_dir = tmp_path / ".state"
    state_dir.mkdir()
    return state_dir


@pytest.fixture
def llm_config() -> LLMConfig:
    """Provide a test LLM configuration."""
    return LLMConfig(
        provider="openai",
        openai_api_key="test-key",
        openai_model="gpt-4",
    )


@pytest.fixture
def state_config(temp_state_dir: Path) -> StateConfig:
    """Provide a test state configuration."""
    return StateConfig(storage_path=temp_state_dir)


@pytest.fixture
def orchestrator_config(llm_config: LLMConfig, state_config: StateConfig) -> OrchestratorConfig:
    """Provide a test orchestrator configuration."""
    return OrchestratorConfig(
        log_level="DEBUG",
        debug=True,
        llm=llm_config,
        state=state_config,
        pipeline=PipelineConfig(checkpoint_mode="auto"),
    )


@pytest.fixture
def gate() -> RecordingGate:
    return RecordingGate()


@pytest.fixture
def run_log() -> ListLogger:
    return ListLogger()


@pytest.fixture
def make_ctx(gate: RecordingGate, run_log: ListLogger) -> Callable[..., ExecutionContext]:
    """Build an execution context around a scripted runner."""

    def _make(runner: ScriptedRunner, **overrides: object) -> ExecutionContext:
        counter = iter(range(1, 10_000))
        fields: dict[str, object] = {
            "run_id": "run-1",
            "task_runner": runner,
            "checkpoints": gate,
            "logger": run_log,
            "clock": FixedClock(),
            "effect_ids": lambda: f"effect-{next(counter)}",
        }
        fields.update(overrides)
        return ExecutionContext(**fields)  # type: ignore[arg-type]

    return _make
