"""Aggregate quality metrics used by process definitions."""

from __future__ import annotations

from collections.abc import Mapping

DEFAULT_QUALITY_THRESHOLD = 80.0


def weighted_score(
    component_scores: Mapping[str, object], weights: Mapping[str, float]
) -> float:
    """Weighted average of component scores.

    Weights may be fractions or percentages; they are normalised by their sum.

    Raises:
        ValueError: If the weights do not sum to a positive number, or a weighted
            component is missing or not numeric.
    """

    total = sum(weights.values())
    if total <= 0:
        raise ValueError("Weights must sum to a positive number")

    score = 0.0
    for name, weight in weights.items():
        value = component_scores.get(name)
        if isinstance(value, bool) or not isinstance(value, int | float):
            raise ValueError(f"Component score '{name}' is missing or not numeric")
        score += float(value) * weight
    return round(score / total, 2)


def meets_threshold(score: float, threshold: float = DEFAULT_QUALITY_THRESHOLD) -> bool:
    return score >= threshold
