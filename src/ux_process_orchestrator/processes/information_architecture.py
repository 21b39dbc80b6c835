"""Information architecture design process.

Content inventory and research synthesis feed an IA strategy; sitemap and
navigation are designed in parallel, then labeled, validated with optional
card sorting and tree testing, refined and documented. Four review
checkpoints gate the run.
"""

from __future__ import annotations

from ux_process_orchestrator.pipeline.checkpoints import Checkpoint
from ux_process_orchestrator.pipeline.context import PipelineView
from ux_process_orchestrator.pipeline.scoring import (
    DEFAULT_QUALITY_THRESHOLD,
    meets_threshold,
    weighted_score,
)
from ux_process_orchestrator.pipeline.steps import (
    CheckpointStep,
    OptionalStep,
    ParallelGroup,
    Pipeline,
    TaskStep,
    flag,
    inputs_from,
)
from ux_process_orchestrator.pipeline.tasks import define_task

PROCESS_ID = "ux-ui-design/information-architecture"

QUALITY_WEIGHTS: dict[str, float] = {
    "iaStrategy": 15,
    "sitemap": 25,
    "navigation": 20,
    "labeling": 15,
    "validation": 15,
    "documentation": 10,
}

DEFAULTS: dict[str, object] = {
    "projectName": "Project",
    "businessGoals": [],
    "userResearch": {},
    "existingContent": [],
    "contentTypes": [],
    "userTasks": [],
    "platformType": "website",
    "targetAudience": [],
    "navigationStyle": "hierarchical",
    "outputDir": "ia-design-output",
    "includeCardSorting": True,
    "includeTreeTesting": True,
    "generatePrototype": False,
}

_LABELS = ("agent", "information-architecture")

content_inventory_task = define_task(
    "content-inventory-audit",
    title="Conduct content inventory and audit",
    agent="content-inventory-specialist",
    role="information architect and content strategist",
    task=(
        "Catalog all existing content, identify content types, assess quality and "
        "categorize it for IA design"
    ),
    instructions=[
        "Catalog each item in existingContent with title, location, type, category and owner",
        "Identify content types, gaps against contentTypes, duplicates and outdated content",
        "Group content into logical categories and subcategories",
        "Write the inventory report under outputDir",
    ],
    output_format="JSON with totalItems, categories, contentTypes, contentQualityScore, gaps, duplicates, reportPath, artifacts",
    required=["totalItems", "categories", "contentTypes", "reportPath"],
    properties={
        "totalItems": "number",
        "categories": "array",
        "contentTypes": "array",
        "contentQualityScore": {"type": "number", "minimum": 0, "maximum": 100},
        "gaps": "array",
        "duplicates": "array",
        "reportPath": "string",
    },
    labels=(*_LABELS, "content-inventory"),
)

research_synthesis_task = define_task(
    "ia-research-synthesis",
    title="Synthesize user research for IA",
    agent="ia-research-analyst",
    role="UX researcher specializing in information architecture",
    task="Extract mental models, task flows, findability needs and vocabulary from user research",
    instructions=[
        "Identify the mental models users hold about the content domain",
        "Rank the top user tasks by frequency and importance",
        "Record user vocabulary that labels should reuse",
        "State the single most important insight as topInsight",
    ],
    output_format="JSON with mentalModels, topTasks, userTaskCount, topInsight, vocabulary, artifacts",
    required=["mentalModels", "topTasks", "userTaskCount", "topInsight"],
    properties={
        "mentalModels": "array",
        "topTasks": "array",
        "userTaskCount": "number",
        "topInsight": "string",
        "vocabulary": "array",
    },
    labels=(*_LABELS, "research-synthesis"),
)

strategy_task = define_task(
    "ia-strategy-definition",
    title="Define IA strategy",
    agent="ia-strategist",
    role="senior information architect",
    task="Define organization schemes, navigation model, search strategy and IA principles",
    instructions=[
        "Choose organization schemes that fit the content inventory and user mental models",
        "Select a navigation model consistent with navigationStyle and platformType",
        "State the IA principles that later design decisions must follow",
    ],
    output_format="JSON with organizationSchemes, navigationModel, iaPrinciples, documentPath, artifacts",
    required=["organizationSchemes", "navigationModel", "iaPrinciples", "documentPath"],
    properties={
        "organizationSchemes": "array",
        "navigationModel": "string",
        "iaPrinciples": "array",
        "documentPath": "string",
    },
    labels=(*_LABELS, "strategy"),
)

sitemap_task = define_task(
    "sitemap-design",
    title="Design sitemap",
    agent="sitemap-designer",
    role="information architect and sitemap specialist",
    task="Create a hierarchical sitemap of all pages or screens based on the IA strategy",
    instructions=[
        "Place every inventoried content item in the hierarchy",
        "Keep depth appropriate for the platform and avoid orphan pages",
        "Produce a sitemap diagram under outputDir",
    ],
    output_format="JSON with diagramPath, totalPages, topLevelCategories, maxDepth, artifacts",
    required=["diagramPath", "totalPages", "topLevelCategories", "maxDepth"],
    properties={
        "diagramPath": "string",
        "totalPages": "number",
        "topLevelCategories": "number",
        "maxDepth": "number",
    },
    labels=(*_LABELS, "sitemap"),
)

navigation_task = define_task(
    "navigation-structure-design",
    title="Design navigation structure",
    agent="navigation-designer",
    role="UX designer specializing in navigation systems",
    task="Design global, local, breadcrumb, utility and contextual navigation",
    instructions=[
        "Keep primary navigation between five and nine items",
        "Define mobile navigation behaviour",
        "Document navigation types and levels in a specification",
    ],
    output_format="JSON with specificationPath, navigationLevels, primaryNavItems, navigationTypes, artifacts",
    required=["specificationPath", "navigationLevels", "primaryNavItems", "navigationTypes"],
    properties={
        "specificationPath": "string",
        "navigationLevels": "number",
        "primaryNavItems": "array",
        "navigationTypes": "array",
    },
    labels=(*_LABELS, "navigation"),
)

labeling_task = define_task(
    "labeling-scheme-design",
    title="Design labeling scheme and taxonomy",
    agent="labeling-specialist",
    role="content strategist and taxonomy expert",
    task="Create a consistent labeling scheme and taxonomy using user vocabulary",
    instructions=[
        "Label every sitemap node and navigation item",
        "Prefer user vocabulary from the research synthesis over internal jargon",
        "Write labeling guidelines and a taxonomy document",
    ],
    output_format="JSON with documentPath, totalLabels, approach, taxonomyPath, artifacts",
    required=["documentPath", "totalLabels", "approach", "taxonomyPath"],
    properties={
        "documentPath": "string",
        "totalLabels": "number",
        "approach": "string",
        "taxonomyPath": "string",
    },
    labels=(*_LABELS, "labeling", "taxonomy"),
)

card_sorting_task = define_task(
    "card-sorting-validation",
    title="Validate categorization with card sorting",
    agent="card-sorting-facilitator",
    role="UX researcher specializing in card sorting methodology",
    task="Plan and analyse a card sorting study that validates categorization and labels",
    instructions=[
        "Pick open, closed or hybrid sorting and justify it",
        "Report participant count, card count and agreement score",
        "Recommend categorization changes",
    ],
    output_format="JSON with participantCount, sortType, cardCount, agreementScore, dendrogramPath, recommendations, artifacts",
    required=["participantCount", "sortType", "cardCount", "agreementScore", "recommendations"],
    properties={
        "participantCount": "number",
        "sortType": "string",
        "cardCount": "number",
        "agreementScore": "number",
        "dendrogramPath": "string",
        "recommendations": "array",
    },
    labels=(*_LABELS, "card-sorting", "validation"),
)

tree_testing_task = define_task(
    "tree-testing-validation",
    title="Validate findability with tree testing",
    agent="tree-testing-facilitator",
    role="UX researcher specializing in tree testing methodology",
    task="Plan and analyse a tree test of the navigation structure using the top user tasks",
    instructions=[
        "Write one findability task per top user task",
        "Report success rate and directness per task and on average",
        "List navigation problem areas with recommendations",
    ],
    output_format="JSON with participantCount, taskCount, averageSuccessRate, averageDirectness, problemAreas, recommendations, artifacts",
    required=[
        "participantCount",
        "taskCount",
        "averageSuccessRate",
        "problemAreas",
        "recommendations",
    ],
    properties={
        "participantCount": "number",
        "taskCount": "number",
        "averageSuccessRate": "number",
        "averageDirectness": "number",
        "problemAreas": "array",
        "recommendations": "array",
    },
    labels=(*_LABELS, "tree-testing", "validation"),
)

refinement_task = define_task(
    "ia-refinement",
    title="Refine IA from validation results",
    agent="ia-refinement-specialist",
    role="senior information architect",
    task="Refine sitemap, navigation and labels to address validation findings",
    instructions=[
        "Classify issues as critical, moderate or minor",
        "Change the structure only where validation evidence supports it",
        "When no validation ran, review the structure heuristically",
    ],
    output_format="JSON with changesCount, criticalIssues, moderateIssues, minorIssues, improvementAreas, validationSuccessRate, artifacts",
    required=["changesCount", "criticalIssues", "improvementAreas", "validationSuccessRate"],
    properties={
        "changesCount": "number",
        "criticalIssues": "number",
        "moderateIssues": "number",
        "minorIssues": "number",
        "improvementAreas": "array",
        "validationSuccessRate": "number",
    },
    labels=(*_LABELS, "refinement"),
)

documentation_task = define_task(
    "ia-documentation",
    title="Write IA documentation",
    agent="ia-documentation-specialist",
    role="technical writer and information architect",
    task="Compile actionable IA documentation covering strategy, structure, labels, validation and implementation",
    instructions=[
        "Open with an executive summary",
        "Include sitemap, navigation specification and labeling guidelines",
        "Summarize validation results and the changes made",
    ],
    output_format="JSON with masterDocumentPath, executiveSummary, sectionsCompleted, artifacts",
    required=["masterDocumentPath", "executiveSummary", "sectionsCompleted"],
    properties={
        "masterDocumentPath": "string",
        "executiveSummary": "string",
        "sectionsCompleted": "array",
    },
    labels=(*_LABELS, "documentation"),
)

wireframe_prototype_task = define_task(
    "wireframe-prototype",
    title="Create wireframe prototype of the IA",
    agent="ia-prototype-designer",
    role="UX designer specializing in wireframing and prototyping",
    task="Create a low to medium fidelity prototype demonstrating the IA structure and key flows",
    instructions=[
        "Show global navigation and the top-level categories",
        "Cover the key user flows end to end",
    ],
    output_format="JSON with prototypePath, screenCount, flowsDocumented, artifacts",
    required=["prototypePath", "screenCount", "flowsDocumented"],
    properties={"prototypePath": "string", "screenCount": "number", "flowsDocumented": "array"},
    labels=(*_LABELS, "prototype"),
)

quality_assessment_task = define_task(
    "ia-quality-assessment",
    title="Assess IA quality and completeness",
    agent="ia-quality-assessor",
    role="principal information architect and IA audit specialist",
    task="Score the IA deliverables against best practices",
    instructions=[
        "Score each component from 0 to 100: iaStrategy, sitemap, navigation, labeling, validation, documentation",
        "List strengths, weaknesses and concrete recommendations",
    ],
    output_format="JSON with componentScores, validationScore, strengths, weaknesses, recommendations, artifacts",
    required=[
        "componentScores",
        *(f"componentScores.{name}" for name in QUALITY_WEIGHTS),
        "recommendations",
    ],
    properties={
        "overallScore": {"type": "number", "minimum": 0, "maximum": 100},
        "componentScores": "object",
        "validationScore": "number",
        "strengths": "array",
        "weaknesses": "array",
        "recommendations": "array",
    },
    labels=(*_LABELS, "quality-assessment"),
)


def _quality_score(view: PipelineView) -> float:
    scores = view.value("qualityAssessment", "componentScores", {})
    if not isinstance(scores, dict):
        raise ValueError("componentScores must be an object")
    return weighted_score(scores, QUALITY_WEIGHTS)


def _count(value: object) -> int:
    return len(value) if isinstance(value, list) else 0


def _research_review(view: PipelineView) -> Checkpoint:
    inventory = view.require("contentInventory")
    research = view.require("researchSynthesis")
    return Checkpoint(
        title="IA Research Synthesis Review",
        question=(
            f"Content inventory complete ({inventory['totalItems']} items) and user research "
            f"synthesized. Key finding: {research['topInsight']}. "
            "Approve to proceed with IA strategy?"
        ),
        files=tuple(view.artifacts_of("contentInventory", "researchSynthesis")),
        default_label="Research Artifact",
        summary={
            "projectName": view.input("projectName"),
            "totalContentItems": inventory["totalItems"],
            "contentCategories": _count(inventory["categories"]),
            "userTasksIdentified": research["userTaskCount"],
            "mentalModelInsights": _count(research["mentalModels"]),
        },
    )


def _structure_review(view: PipelineView) -> Checkpoint:
    sitemap = view.require("sitemap")
    navigation = view.require("navigation")
    labeling = view.require("labeling")
    return Checkpoint(
        title="IA Structure Review",
        question=(
            f"IA structure complete with {sitemap['totalPages']} pages across "
            f"{sitemap['topLevelCategories']} top-level categories. Navigation has "
            f"{navigation['navigationLevels']} levels. Review structure before validation testing?"
        ),
        files=tuple(view.artifacts_of("sitemap", "navigation", "labeling")),
        default_label="IA Structure",
        summary={
            "projectName": view.input("projectName"),
            "totalPages": sitemap["totalPages"],
            "topLevelCategories": sitemap["topLevelCategories"],
            "navigationLevels": navigation["navigationLevels"],
            "primaryNavItems": navigation["primaryNavItems"],
            "labelingApproach": labeling["approach"],
            "totalLabels": labeling["totalLabels"],
        },
    )


def _refinement_review(view: PipelineView) -> Checkpoint:
    refinement = view.require("refinement")
    return Checkpoint(
        title="IA Refinement Review",
        question=(
            f"IA refinement complete. {refinement['changesCount']} changes recommended based on "
            f"validation. {refinement['criticalIssues']} critical issues identified. "
            "Review refinements?"
        ),
        files=refinement.artifacts,
        default_label="IA Refinement",
        summary={
            "projectName": view.input("projectName"),
            "changesCount": refinement["changesCount"],
            "criticalIssues": refinement["criticalIssues"],
            "moderateIssues": refinement.get("moderateIssues", 0),
            "minorIssues": refinement.get("minorIssues", 0),
            "improvementAreas": refinement["improvementAreas"],
            "validationSuccessRate": refinement["validationSuccessRate"],
        },
    )


def _validation_methods(view: PipelineView) -> list[str]:
    methods = []
    if view.executed("cardSorting"):
        methods.append("card-sorting")
    if view.executed("treeTesting"):
        methods.append("tree-testing")
    return methods


def build_pipeline(*, quality_threshold: float = DEFAULT_QUALITY_THRESHOLD) -> Pipeline:
    def final_review(view: PipelineView) -> Checkpoint:
        score = _quality_score(view)
        met = meets_threshold(score, quality_threshold)
        verdict = (
            "IA meets quality standards!" if met else "IA may benefit from additional refinement."
        )
        return Checkpoint(
            title="Information Architecture Final Review",
            question=(
                f"Information Architecture complete! Quality score: {score}/100. {verdict} "
                "Review and approve final deliverables?"
            ),
            files=view.artifacts,
            summary={
                "qualityScore": score,
                "qualityMet": met,
                "projectName": view.input("projectName"),
                "platformType": view.input("platformType"),
                "totalArtifacts": len(view.artifacts),
                "deliverables": {
                    "contentInventory": view.value("contentInventory", "totalItems"),
                    "sitemapPages": view.value("sitemap", "totalPages"),
                    "navigationLevels": view.value("navigation", "navigationLevels"),
                    "labelsCreated": view.value("labeling", "totalLabels"),
                    "validationTests": len(_validation_methods(view)),
                    "changesMade": view.value("refinement", "changesCount"),
                    "prototypeCreated": view.executed("wireframePrototype"),
                },
                "validationResults": {
                    "methods": _validation_methods(view),
                    "cardSortingParticipants": view.value("cardSorting", "participantCount", 0),
                    "treeTestingSuccessRate": view.value("treeTesting", "averageSuccessRate", 0),
                    "validationScore": view.value("qualityAssessment", "validationScore"),
                },
            },
        )

    def finalize(view: PipelineView) -> dict[str, object]:
        score = _quality_score(view)
        inventory = view.require("contentInventory")
        strategy = view.require("iaStrategy")
        sitemap = view.require("sitemap")
        navigation = view.require("navigation")
        labeling = view.require("labeling")
        refinement = view.require("refinement")
        documentation = view.require("documentation")

        card_sorting = view.result("cardSorting")
        tree_testing = view.result("treeTesting")
        prototype = view.result("wireframePrototype")

        return {
            "success": True,
            "projectName": view.input("projectName"),
            "platformType": view.input("platformType"),
            "qualityScore": score,
            "qualityMet": meets_threshold(score, quality_threshold),
            "contentInventory": {
                "totalItems": inventory["totalItems"],
                "categories": inventory["categories"],
                "contentTypes": inventory["contentTypes"],
                "reportPath": inventory["reportPath"],
            },
            "iaStrategy": {
                "organizationSchemes": strategy["organizationSchemes"],
                "navigationModel": strategy["navigationModel"],
                "strategyPath": strategy["documentPath"],
            },
            "sitemap": {
                "path": sitemap["diagramPath"],
                "totalPages": sitemap["totalPages"],
                "topLevelCategories": sitemap["topLevelCategories"],
                "maxDepth": sitemap["maxDepth"],
            },
            "navigationStructure": {
                "path": navigation["specificationPath"],
                "navigationLevels": navigation["navigationLevels"],
                "primaryNavItems": navigation["primaryNavItems"],
                "navigationTypes": navigation["navigationTypes"],
            },
            "labelingScheme": {
                "path": labeling["documentPath"],
                "totalLabels": labeling["totalLabels"],
                "approach": labeling["approach"],
                "taxonomyPath": labeling["taxonomyPath"],
            },
            "cardSortingResults": (
                {
                    "participantCount": card_sorting["participantCount"],
                    "agreementScore": card_sorting["agreementScore"],
                    "dendrogramPath": card_sorting.get("dendrogramPath"),
                    "recommendationsCount": _count(card_sorting["recommendations"]),
                }
                if card_sorting
                else None
            ),
            "treeTestingResults": (
                {
                    "participantCount": tree_testing["participantCount"],
                    "averageSuccessRate": tree_testing["averageSuccessRate"],
                    "averageDirectness": tree_testing.get("averageDirectness"),
                    "problemAreasCount": _count(tree_testing["problemAreas"]),
                }
                if tree_testing
                else None
            ),
            "iaDocumentation": documentation["masterDocumentPath"],
            "wireframePrototype": prototype["prototypePath"] if prototype else None,
            "metadata": {
                "processId": PROCESS_ID,
                "projectName": view.input("projectName"),
                "platformType": view.input("platformType"),
                "navigationStyle": view.input("navigationStyle"),
                "outputDir": view.input("outputDir"),
                "validationMethodsUsed": _validation_methods(view),
                "totalChangesFromValidation": refinement["changesCount"],
            },
        }

    steps = (
        TaskStep(
            "contentInventory",
            content_inventory_task,
            inputs_from("projectName", "existingContent", "contentTypes", "platformType", "outputDir"),
        ),
        TaskStep(
            "researchSynthesis",
            research_synthesis_task,
            inputs_from(
                "projectName",
                "userResearch",
                "userTasks",
                "targetAudience",
                "outputDir",
                results=["contentInventory"],
            ),
        ),
        CheckpointStep("research-review", _research_review),
        TaskStep(
            "iaStrategy",
            strategy_task,
            inputs_from(
                "projectName",
                "businessGoals",
                "navigationStyle",
                "platformType",
                "outputDir",
                results=["researchSynthesis", "contentInventory"],
            ),
        ),
        ParallelGroup(
            "structure",
            (
                TaskStep(
                    "sitemap",
                    sitemap_task,
                    inputs_from(
                        "projectName",
                        "platformType",
                        "outputDir",
                        results=["iaStrategy", "contentInventory"],
                    ),
                ),
                TaskStep(
                    "navigation",
                    navigation_task,
                    inputs_from(
                        "projectName",
                        "navigationStyle",
                        "platformType",
                        "outputDir",
                        results=["iaStrategy", "researchSynthesis"],
                    ),
                ),
            ),
        ),
        TaskStep(
            "labeling",
            labeling_task,
            inputs_from(
                "projectName",
                "platformType",
                "outputDir",
                results=["sitemap", "navigation", "researchSynthesis"],
            ),
        ),
        CheckpointStep("structure-review", _structure_review),
        ParallelGroup(
            "validation",
            (
                OptionalStep(
                    TaskStep(
                        "cardSorting",
                        card_sorting_task,
                        inputs_from(
                            "projectName",
                            "outputDir",
                            results=["labeling", "contentInventory", "iaStrategy"],
                        ),
                    ),
                    when=flag("includeCardSorting", True),
                    description="card sorting validation",
                ),
                OptionalStep(
                    TaskStep(
                        "treeTesting",
                        tree_testing_task,
                        inputs_from(
                            "projectName",
                            "outputDir",
                            results=["sitemap", "navigation"],
                            userTasks=lambda v: v.value("researchSynthesis", "topTasks", []),
                        ),
                    ),
                    when=flag("includeTreeTesting", True),
                    description="tree testing validation",
                ),
            ),
        ),
        TaskStep(
            "refinement",
            refinement_task,
            inputs_from(
                "projectName",
                "outputDir",
                results=["sitemap", "navigation", "labeling", "cardSorting", "treeTesting"],
            ),
        ),
        CheckpointStep("refinement-review", _refinement_review),
        TaskStep(
            "documentation",
            documentation_task,
            inputs_from(
                "projectName",
                "businessGoals",
                "platformType",
                "outputDir",
                results=[
                    "iaStrategy",
                    "sitemap",
                    "navigation",
                    "labeling",
                    "refinement",
                    "cardSorting",
                    "treeTesting",
                ],
            ),
        ),
        OptionalStep(
            TaskStep(
                "wireframePrototype",
                wireframe_prototype_task,
                inputs_from(
                    "projectName",
                    "platformType",
                    "outputDir",
                    results=["sitemap", "navigation", "labeling"],
                ),
            ),
            when=flag("generatePrototype"),
            description="wireframe prototype",
        ),
        TaskStep(
            "qualityAssessment",
            quality_assessment_task,
            inputs_from(
                "projectName",
                "outputDir",
                results=[
                    "iaStrategy",
                    "sitemap",
                    "navigation",
                    "labeling",
                    "cardSorting",
                    "treeTesting",
                    "documentation",
                    "wireframePrototype",
                ],
            ),
        ),
        CheckpointStep("final-review", final_review),
    )

    return Pipeline(
        process_id=PROCESS_ID,
        title="Information Architecture Design",
        steps=steps,
        finalize=finalize,
        defaults=DEFAULTS,
    )


__all__ = ["PROCESS_ID", "QUALITY_WEIGHTS", "build_pipeline"]
