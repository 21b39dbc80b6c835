"""Unit tests for weighted quality scoring."""

from __future__ import annotations

import pytest

from ux_process_orchestrator.pipeline.scoring import meets_threshold, weighted_score
from ux_process_orchestrator.processes import information_architecture, wireframing


def test_weighted_score_uses_percentage_weights() -> None:
    scores = {
        "iaStrategy": 100,
        "sitemap": 100,
        "navigation": 100,
        "labeling": 100,
        "validation": 0,
        "documentation": 0,
    }

    assert weighted_score(scores, information_architecture.QUALITY_WEIGHTS) == 75.0


def test_weighted_score_normalises_fractional_weights() -> None:
    assert weighted_score({"a": 90, "b": 60}, {"a": 0.5, "b": 0.5}) == 75.0


def test_weighted_score_ignores_unweighted_components() -> None:
    assert weighted_score({"a": 90, "extra": 0}, {"a": 1}) == 90.0


@pytest.mark.parametrize("scores", [{}, {"a": "high"}, {"a": True}, {"a": None}])
def test_weighted_score_rejects_missing_or_non_numeric(scores: dict[str, object]) -> None:
    with pytest.raises(ValueError):
        weighted_score(scores, {"a": 1})


def test_weighted_score_rejects_empty_weights() -> None:
    with pytest.raises(ValueError):
        weighted_score({"a": 1}, {})


def test_threshold_is_inclusive() -> None:
    assert meets_threshold(80.0)
    assert not meets_threshold(79.99)
    assert meets_threshold(60, threshold=60)


def test_process_weights_sum_to_one_hundred() -> None:
    assert sum(information_architecture.QUALITY_WEIGHTS.values()) == 100
    assert sum(wireframing.QUALITY_WEIGHTS.values()) == 100
