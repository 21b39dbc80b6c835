"""Wireframing and lo-fi prototyping process.

Requirements, IA and user flows feed low-fidelity wireframes that are
reviewed and, for medium and high fidelity, refined and reviewed again. High
fidelity adds a clickable prototype. The run ends with a documentation
package and a scored quality validation.
"""

from __future__ import annotations

from ux_process_orchestrator.pipeline.artifacts import Artifact
from ux_process_orchestrator.pipeline.checkpoints import Checkpoint
from ux_process_orchestrator.pipeline.context import PipelineView
from ux_process_orchestrator.pipeline.scoring import (
    DEFAULT_QUALITY_THRESHOLD,
    meets_threshold,
    weighted_score,
)
from ux_process_orchestrator.pipeline.steps import (
    CheckpointStep,
    Guard,
    OptionalStep,
    Pipeline,
    TaskStep,
    inputs_from,
)
from ux_process_orchestrator.pipeline.tasks import TaskResult, define_task

PROCESS_ID = "ux-ui-design/wireframing"

QUALITY_WEIGHTS: dict[str, float] = {
    "requirementCoverage": 25,
    "userFlowCompleteness": 20,
    "informationArchitecture": 15,
    "usability": 20,
    "accessibility": 10,
    "consistency": 10,
}

FIDELITY_LEVELS = ("low", "medium", "high")

DEFAULTS: dict[str, object] = {
    "projectName": "Project",
    "requirements": [],
    "userFlows": [],
    "contentInventory": {},
    "designPrinciples": [],
    "fidelityLevel": "medium",
    "targetScreens": [],
    "deviceTypes": ["desktop"],
    "outputDir": "wireframing-output",
}

_LABELS = ("agent", "wireframing")

requirements_analysis_task = define_task(
    "requirements-analysis",
    title="Analyze requirements and content structure",
    agent="ux-requirements-analyst",
    role="senior UX designer and information architect",
    task=(
        "Analyze project requirements, content inventory and user flows to identify "
        "wireframing scope and priorities"
    ),
    instructions=[
        "Map each requirement to the screens and interface elements it needs",
        "Identify interaction patterns and device-specific considerations",
        "Prioritize screens as critical, high, medium or low",
        "Flag ambiguous requirements needing clarification",
    ],
    output_format="JSON with totalRequirements, screensIdentified, contentTypes, interactionPatterns, prioritizedScreens, deviceConsiderations, ambiguousRequirements, artifacts",
    required=["totalRequirements", "screensIdentified", "prioritizedScreens"],
    properties={
        "totalRequirements": "number",
        "screensIdentified": "array",
        "contentTypes": "array",
        "interactionPatterns": "array",
        "prioritizedScreens": "object",
        "deviceConsiderations": "object",
        "ambiguousRequirements": "array",
    },
    labels=(*_LABELS, "requirements", "analysis"),
)

information_architecture_task = define_task(
    "information-architecture",
    title="Define information architecture and content hierarchy",
    agent="information-architect",
    role="information architect",
    task="Define the sitemap, navigation structure and per-screen content hierarchy",
    instructions=[
        "Build a sitemap covering every identified screen",
        "Define primary, secondary and utility navigation",
        "Order content on each screen by priority",
    ],
    output_format="JSON with sitemap, navigationStructure, contentHierarchy, artifacts",
    required=["sitemap", "navigationStructure", "contentHierarchy"],
    properties={
        "sitemap": "object",
        "navigationStructure": "object",
        "contentHierarchy": "object",
    },
    labels=(*_LABELS, "information-architecture"),
)

user_flow_mapping_task = define_task(
    "user-flow-mapping",
    title="Map user flows and interaction paths",
    agent="user-flow-designer",
    role="UX designer specializing in interaction design",
    task="Map user flows across screens, including decision points and error paths",
    instructions=[
        "Draw a flow diagram for each user flow",
        "Mark the critical paths that wireframes must cover",
        "Include error and empty states",
    ],
    output_format="JSON with flowDiagrams, criticalPaths, screenTransitions, artifacts",
    required=["flowDiagrams", "criticalPaths"],
    properties={
        "flowDiagrams": "array",
        "criticalPaths": "array",
        "screenTransitions": "array",
    },
    labels=(*_LABELS, "user-flows"),
)

low_fidelity_task = define_task(
    "low-fidelity-wireframes",
    title="Create low-fidelity wireframes",
    agent="wireframe-designer",
    role="UX designer specializing in wireframing",
    task="Create low-fidelity wireframes for every prioritized screen and device type",
    instructions=[
        "Use grayscale boxes and placeholder content only",
        "Cover every critical path screen",
        "Keep layout patterns consistent across screens",
        "Tag each artifact with phase 'low-fidelity'",
    ],
    output_format="JSON with wireframes, totalScreens, componentInventory, artifacts",
    required=["wireframes", "totalScreens", "componentInventory"],
    properties={
        "wireframes": "array",
        "totalScreens": "number",
        "componentInventory": "array",
    },
    labels=(*_LABELS, "low-fidelity"),
)

wireframe_review_task = define_task(
    "wireframe-review",
    title="Review wireframes",
    agent="wireframe-reviewer",
    role="senior UX design reviewer",
    task="Review the wireframes against requirements, IA and user flows",
    instructions=[
        "Evaluate requirement coverage (weight 25%)",
        "Assess information hierarchy clarity (weight 20%)",
        "Review navigation consistency (weight 20%)",
        "Evaluate user flow completeness (weight 15%)",
        "Check cross-screen consistency and responsive design (weight 10% each)",
        "When a previous review is given, report what improved",
    ],
    output_format="JSON with reviewScore, componentScores, strengths, improvementAreas, criticalIssues, recommendations, artifacts",
    required=["reviewScore", "componentScores", "recommendations"],
    properties={
        "reviewScore": {"type": "number", "minimum": 0, "maximum": 100},
        "componentScores": "object",
        "strengths": "array",
        "improvementAreas": "array",
        "criticalIssues": "array",
        "recommendations": "array",
    },
    labels=(*_LABELS, "review"),
)

medium_fidelity_task = define_task(
    "medium-fidelity-wireframes",
    title="Refine to medium-fidelity wireframes",
    agent="wireframe-designer",
    role="UX designer specializing in wireframing",
    task="Refine the low-fidelity wireframes using the initial review feedback",
    instructions=[
        "Address every critical issue from the initial review",
        "Replace placeholders with representative content",
        "Tag each artifact with phase 'medium-fidelity'",
    ],
    output_format="JSON with wireframes, totalScreens, refinedComponents, artifacts",
    required=["wireframes", "totalScreens", "refinedComponents"],
    properties={
        "wireframes": "array",
        "totalScreens": "number",
        "refinedComponents": "array",
    },
    labels=(*_LABELS, "medium-fidelity"),
)

annotation_task = define_task(
    "annotation-generation",
    title="Create wireframe annotations",
    agent="wireframe-annotator",
    role="UX designer and technical writer",
    task="Annotate the wireframes with behaviour, content and interaction notes for developers",
    instructions=[
        "Annotate interactive elements, states and validation rules",
        "Reference the user flow each screen belongs to",
        "Produce an index of annotations by screen",
    ],
    output_format="JSON with annotations, annotationIndex, artifacts",
    required=["annotations", "annotationIndex"],
    properties={"annotations": "array", "annotationIndex": "object"},
    labels=(*_LABELS, "annotations", "documentation"),
)

interactive_prototype_task = define_task(
    "interactive-prototype",
    title="Create interactive clickable prototype",
    agent="prototype-designer",
    role="UX prototyper",
    task="Link the wireframes into a clickable prototype implementing the critical flows",
    instructions=[
        "Link every screen that participates in a critical path",
        "Implement the mapped user flows end to end",
    ],
    output_format="JSON with prototypeUrl, linkedScreens, implementedFlows, artifacts",
    required=["prototypeUrl", "linkedScreens", "implementedFlows"],
    properties={
        "prototypeUrl": "string",
        "linkedScreens": "number",
        "implementedFlows": "array",
    },
    labels=(*_LABELS, "prototype", "interactive"),
)

package_task = define_task(
    "wireframe-package-generation",
    title="Generate wireframe documentation package",
    agent="ux-documentation-specialist",
    role="UX documentation specialist",
    task="Assemble all wireframing deliverables into a package for stakeholders and developers",
    instructions=[
        "Open with an executive summary",
        "List every deliverable with its path",
        "Include review outcomes and open questions",
    ],
    output_format="JSON with packagePath, executiveSummary, deliverables, artifacts",
    required=["packagePath", "executiveSummary", "deliverables"],
    properties={
        "packagePath": "string",
        "executiveSummary": "string",
        "deliverables": "array",
    },
    labels=(*_LABELS, "documentation", "package"),
)

quality_validation_task = define_task(
    "quality-validation",
    title="Validate wireframe quality and completeness",
    agent="ux-quality-validator",
    role="principal UX designer",
    task="Score the wireframes for quality and readiness for visual design",
    instructions=[
        "Score each component from 0 to 100: requirementCoverage, userFlowCompleteness, "
        "informationArchitecture, usability, accessibility, consistency",
        "Report requirementsCoverage and usabilityScore as percentages",
        "List blockers for the visual design phase with recommendations",
    ],
    output_format="JSON with overallScore, componentScores, requirementsCoverage, userFlowCompleteness, usabilityScore, accessibilityScore, blockers, recommendations, readiness, artifacts",
    required=[
        "overallScore",
        "componentScores",
        *(f"componentScores.{name}" for name in QUALITY_WEIGHTS),
        "requirementsCoverage",
        "usabilityScore",
    ],
    properties={
        "overallScore": {"type": "number", "minimum": 0, "maximum": 100},
        "componentScores": "object",
        "requirementsCoverage": {"type": "number", "minimum": 0, "maximum": 100},
        "userFlowCompleteness": {"type": "number", "minimum": 0, "maximum": 100},
        "usabilityScore": {"type": "number", "minimum": 0, "maximum": 100},
        "accessibilityScore": {"type": "number", "minimum": 0, "maximum": 100},
        "blockers": "array",
        "recommendations": "array",
        "readiness": {"type": "string", "enum": ["ready", "minor-issues", "major-issues"]},
    },
    labels=(*_LABELS, "validation", "quality-scoring"),
)


def fidelity_at_least(level: str) -> Guard:
    """Guard that passes when the requested fidelity is `level` or higher."""

    rank = FIDELITY_LEVELS.index(level)

    def _guard(view: PipelineView) -> bool:
        requested = str(view.input("fidelityLevel", "medium"))
        if requested not in FIDELITY_LEVELS:
            raise ValueError(f"Unknown fidelityLevel: {requested}")
        return FIDELITY_LEVELS.index(requested) >= rank

    return _guard


def _latest_wireframes(view: PipelineView) -> TaskResult:
    return view.result("mediumFidelityWireframes") or view.require("lowFidelityWireframes")


def _latest_review(view: PipelineView) -> TaskResult:
    return view.result("finalReview") or view.require("initialReview")


def _phase_files(view: PipelineView, *phases: str) -> tuple[Artifact, ...]:
    return tuple(a for a in view.artifacts if a.phase in phases)


def _count(value: object) -> int:
    return len(value) if isinstance(value, list) else 0


def _quality_score(view: PipelineView) -> float:
    scores = view.value("qualityValidation", "componentScores", {})
    if not isinstance(scores, dict):
        raise ValueError("componentScores must be an object")
    return weighted_score(scores, QUALITY_WEIGHTS)


def _low_fidelity_review(view: PipelineView) -> Checkpoint:
    wireframes = view.require("lowFidelityWireframes")
    review = view.require("initialReview")
    return Checkpoint(
        title="Low-Fidelity Wireframe Review",
        question=(
            f"Low-fidelity wireframes complete. Review score: {review['reviewScore']}/100. "
            "Review wireframes and provide feedback for refinement?"
        ),
        files=_phase_files(view, "low-fidelity", "wireframe"),
        summary={
            "projectName": view.input("projectName"),
            "totalScreens": wireframes["totalScreens"],
            "reviewScore": review["reviewScore"],
            "strengths": review.get("strengths", []),
            "improvementAreas": review.get("improvementAreas", []),
            "criticalIssues": _count(review.get("criticalIssues")),
        },
    )


def _medium_fidelity_review(view: PipelineView) -> Checkpoint:
    wireframes = view.require("mediumFidelityWireframes")
    initial = view.require("initialReview")
    final = view.require("finalReview")
    return Checkpoint(
        title="Medium-Fidelity Wireframe Review",
        question=(
            f"Medium-fidelity wireframes complete. Review score: {final['reviewScore']}/100. "
            "Approve or request further refinement?"
        ),
        files=_phase_files(view, "medium-fidelity", "wireframe-refined"),
        summary={
            "projectName": view.input("projectName"),
            "totalScreens": wireframes["totalScreens"],
            "reviewScore": final["reviewScore"],
            "improvement": final["reviewScore"] - initial["reviewScore"],  # type: ignore[operator]
            "strengths": final.get("strengths", []),
            "improvementAreas": final.get("improvementAreas", []),
            "criticalIssues": _count(final.get("criticalIssues")),
        },
    )


def build_pipeline(*, quality_threshold: float = DEFAULT_QUALITY_THRESHOLD) -> Pipeline:
    medium = fidelity_at_least("medium")
    high = fidelity_at_least("high")

    def final_approval(view: PipelineView) -> Checkpoint:
        score = _quality_score(view)
        met = meets_threshold(score, quality_threshold)
        verdict = (
            "Wireframes meet quality standards!"
            if met
            else "Wireframes may need additional refinement."
        )
        return Checkpoint(
            title="Final Wireframe Approval",
            question=(
                f"Wireframing complete. Quality score: {score}/100. {verdict} "
                "Approve for next phase?"
            ),
            files=view.artifacts,
            summary={
                "projectName": view.input("projectName"),
                "qualityScore": score,
                "qualityMet": met,
                "totalScreens": _latest_wireframes(view)["totalScreens"],
                "totalArtifacts": len(view.artifacts),
                "fidelityLevel": view.input("fidelityLevel"),
                "hasInteractivePrototype": view.executed("interactivePrototype"),
                "allRequirementsCovered": view.value(
                    "qualityValidation", "requirementsCoverage"
                )
                == 100,
            },
        )

    def finalize(view: PipelineView) -> dict[str, object]:
        score = _quality_score(view)
        low = view.require("lowFidelityWireframes")
        ia = view.require("informationArchitecture")
        flows = view.require("userFlowMapping")
        annotations = view.require("annotationGeneration")
        package = view.require("wireframePackage")
        validation = view.require("qualityValidation")

        return {
            "success": True,
            "projectName": view.input("projectName"),
            "qualityScore": score,
            "qualityMet": meets_threshold(score, quality_threshold),
            "fidelityLevel": view.input("fidelityLevel"),
            "wireframes": {
                "lowFidelity": low["wireframes"],
                "mediumFidelity": view.value("mediumFidelityWireframes", "wireframes"),
                "totalScreens": _latest_wireframes(view)["totalScreens"],
            },
            "userFlowDiagrams": flows["flowDiagrams"],
            "informationArchitecture": {
                "sitemap": ia["sitemap"],
                "navigationStructure": ia["navigationStructure"],
                "contentHierarchy": ia["contentHierarchy"],
            },
            "annotations": annotations["annotations"],
            "interactivePrototype": view.value("interactivePrototype", "prototypeUrl"),
            "reviewScore": _latest_review(view)["reviewScore"],
            "packagePath": package["packagePath"],
            "qualityMetrics": {
                "reportedScore": validation["overallScore"],
                "requirementsCoverage": validation["requirementsCoverage"],
                "userFlowCompleteness": validation.get("userFlowCompleteness"),
                "usabilityScore": validation["usabilityScore"],
                "accessibilityScore": validation.get("accessibilityScore"),
            },
            "metadata": {
                "processId": PROCESS_ID,
                "projectName": view.input("projectName"),
                "outputDir": view.input("outputDir"),
            },
        }

    steps = (
        TaskStep(
            "requirementsAnalysis",
            requirements_analysis_task,
            inputs_from(
                "projectName",
                "requirements",
                "contentInventory",
                "userFlows",
                "targetScreens",
                "deviceTypes",
                "outputDir",
            ),
        ),
        TaskStep(
            "informationArchitecture",
            information_architecture_task,
            inputs_from(
                "projectName",
                "requirements",
                "contentInventory",
                "userFlows",
                "outputDir",
                results=["requirementsAnalysis"],
            ),
        ),
        TaskStep(
            "userFlowMapping",
            user_flow_mapping_task,
            inputs_from(
                "projectName",
                "userFlows",
                "targetScreens",
                "outputDir",
                results=["requirementsAnalysis", "informationArchitecture"],
            ),
        ),
        TaskStep(
            "lowFidelityWireframes",
            low_fidelity_task,
            inputs_from(
                "projectName",
                "requirements",
                "designPrinciples",
                "deviceTypes",
                "targetScreens",
                "outputDir",
                results=["informationArchitecture", "userFlowMapping"],
            ),
        ),
        TaskStep(
            "initialReview",
            wireframe_review_task,
            inputs_from(
                "projectName",
                "requirements",
                "userFlows",
                "outputDir",
                results=["informationArchitecture"],
                wireframes=lambda v: v.value("lowFidelityWireframes", "wireframes"),
                iteration=lambda v: 1,
            ),
        ),
        CheckpointStep("low-fidelity-review", _low_fidelity_review),
        OptionalStep(
            TaskStep(
                "mediumFidelityWireframes",
                medium_fidelity_task,
                inputs_from(
                    "projectName",
                    "requirements",
                    "designPrinciples",
                    "deviceTypes",
                    "outputDir",
                    results=[
                        "lowFidelityWireframes",
                        "initialReview",
                        "informationArchitecture",
                        "userFlowMapping",
                    ],
                ),
            ),
            when=medium,
            description="medium-fidelity refinement",
        ),
        OptionalStep(
            TaskStep(
                "finalReview",
                wireframe_review_task,
                inputs_from(
                    "projectName",
                    "requirements",
                    "userFlows",
                    "outputDir",
                    results=["informationArchitecture"],
                    wireframes=lambda v: v.value("mediumFidelityWireframes", "wireframes"),
                    iteration=lambda v: 2,
                    previousReview=lambda v: v.payload("initialReview"),
                ),
            ),
            when=medium,
            description="medium-fidelity review",
        ),
        OptionalStep(
            CheckpointStep("medium-fidelity-review", _medium_fidelity_review),
            when=medium,
            description="medium-fidelity checkpoint",
        ),
        TaskStep(
            "annotationGeneration",
            annotation_task,
            inputs_from(
                "projectName",
                "requirements",
                "designPrinciples",
                "outputDir",
                results=["informationArchitecture", "userFlowMapping"],
                wireframes=lambda v: _latest_wireframes(v)["wireframes"],
            ),
        ),
        OptionalStep(
            TaskStep(
                "interactivePrototype",
                interactive_prototype_task,
                inputs_from(
                    "projectName",
                    "outputDir",
                    results=["userFlowMapping"],
                    wireframes=lambda v: v.value("mediumFidelityWireframes", "wireframes"),
                    annotations=lambda v: v.value("annotationGeneration", "annotations"),
                ),
            ),
            when=high,
            description="interactive prototype",
        ),
        TaskStep(
            "wireframePackage",
            package_task,
            inputs_from(
                "projectName",
                "outputDir",
                results=[
                    "requirementsAnalysis",
                    "informationArchitecture",
                    "userFlowMapping",
                    "lowFidelityWireframes",
                    "mediumFidelityWireframes",
                    "annotationGeneration",
                    "interactivePrototype",
                ],
                finalReview=lambda v: _latest_review(v).to_json(),
            ),
        ),
        TaskStep(
            "qualityValidation",
            quality_validation_task,
            inputs_from(
                "projectName",
                "requirements",
                "outputDir",
                results=["userFlowMapping", "informationArchitecture"],
                wireframes=lambda v: _latest_wireframes(v)["wireframes"],
                annotations=lambda v: v.value("annotationGeneration", "annotations"),
                finalReview=lambda v: _latest_review(v).to_json(),
            ),
        ),
        CheckpointStep("final-approval", final_approval),
    )

    return Pipeline(
        process_id=PROCESS_ID,
        title="Wireframing",
        steps=steps,
        finalize=finalize,
        defaults=DEFAULTS,
    )


__all__ = ["PROCESS_ID", "QUALITY_WEIGHTS", "build_pipeline", "fidelity_at_least"]
