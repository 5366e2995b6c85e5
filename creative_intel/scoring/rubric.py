"""Category scoring rubrics for creative quality."""

from __future__ import annotations

from typing import Dict, Mapping

from ..io.models import CategoryRubric

DEFAULT_CATEGORY = "default"
METRICS = ("visual", "text", "messaging", "engagement")


def _rubric(
    category: str,
    weights: tuple[float, float, float, float],
    min_screenshots: int,
    thresholds: tuple[int, int, int],
) -> CategoryRubric:
    excellent, good, average = thresholds
    return CategoryRubric(
        category=category,
        weights=dict(zip(METRICS, weights)),
        min_screenshot_count=min_screenshots,
        thresholds={"excellent": excellent, "good": good, "average": average},
    )


RUBRICS: Dict[str, CategoryRubric] = {
    rubric.category: rubric
    for rubric in (
        _rubric("games", (0.45, 0.15, 0.20, 0.20), 8, (90, 78, 65)),
        _rubric("productivity", (0.25, 0.35, 0.30, 0.10), 6, (85, 75, 70)),
        _rubric("social networking", (0.40, 0.20, 0.25, 0.15), 8, (88, 77, 68)),
        _rubric("entertainment", (0.40, 0.20, 0.25, 0.15), 7, (87, 76, 67)),
        # education leans on clarity of instruction over polish
        _rubric("education", (0.30, 0.35, 0.25, 0.10), 7, (86, 76, 68)),
        _rubric("finance", (0.30, 0.30, 0.30, 0.10), 6, (86, 75, 68)),
        _rubric(DEFAULT_CATEGORY, (0.35, 0.25, 0.25, 0.15), 7, (85, 75, 65)),
    )
}


def get_scoring_rubric(category: str | None) -> CategoryRubric:
    """Return the rubric for *category*, falling back to the default one."""
    key = (category or DEFAULT_CATEGORY).strip().lower()
    return RUBRICS.get(key, RUBRICS[DEFAULT_CATEGORY])


def available_categories() -> list[str]:
    return [name for name in RUBRICS if name != DEFAULT_CATEGORY]


def calculate_weighted_score(category: str | None, scores: Mapping[str, float]) -> int:
    """Return the rubric-weighted 0-100 score for *scores*."""
    rubric = get_scoring_rubric(category)
    weighted = sum(float(scores.get(metric, 0.0)) * rubric.weights[metric] for metric in METRICS)
    return int(round(max(0.0, min(100.0, weighted))))


def get_performance_tier(category: str | None, score: float) -> str:
    """Return excellent, good, average or poor for *score*."""
    thresholds = get_scoring_rubric(category).thresholds
    if score >= thresholds["excellent"]:
        return "excellent"
    if score >= thresholds["good"]:
        return "good"
    if score >= thresholds["average"]:
        return "average"
    return "poor"
