"""Map screenshot analysis results onto a category rubric."""

from __future__ import annotations

from typing import Dict, Sequence

from ..io.models import CreativeScoreCard, ScreenshotAnalysisResult
from .rubric import (
    calculate_weighted_score,
    get_performance_tier,
    get_scoring_rubric,
)


def calculate_metric_scores(results: Sequence[ScreenshotAnalysisResult]) -> Dict[str, int]:
    """Average per-screenshot visual, text, messaging and engagement scores."""
    if not results:
        return {"visual": 0, "text": 0, "messaging": 0, "engagement": 0}

    total = len(results)
    return {
        "visual": round(sum(_visual_score(r) for r in results) / total),
        "text": round(sum(_text_score(r) for r in results) / total),
        "messaging": round(sum(_messaging_score(r) for r in results) / total),
        "engagement": round(sum(_engagement_score(r) for r in results) / total),
    }


def build_score_card(
    category: str | None,
    results: Sequence[ScreenshotAnalysisResult],
    screenshot_count: int | None = None,
) -> CreativeScoreCard:
    """Score *results* against the rubric for *category*."""
    rubric = get_scoring_rubric(category)
    metric_scores = calculate_metric_scores(results)
    overall = calculate_weighted_score(rubric.category, metric_scores)

    warnings: list[str] = []
    supplied = len(results) if screenshot_count is None else screenshot_count
    if supplied < rubric.min_screenshot_count:
        warnings.append(
            f"Only {supplied} screenshot(s) supplied; {rubric.category} listings "
            f"should show at least {rubric.min_screenshot_count}"
        )

    return CreativeScoreCard(
        category=rubric.category,
        metric_scores=metric_scores,
        overall_score=overall,
        tier=get_performance_tier(rubric.category, overall),
        warnings=warnings,
    )


def _visual_score(result: ScreenshotAnalysisResult) -> float:
    color_score = min(100.0, result.colors.color_count / 5 * 100)
    return color_score * 0.4 + result.layout.layout_score * 0.6


def _text_score(result: ScreenshotAnalysisResult) -> float:
    coverage = result.text.estimated_text_percentage
    if 20 <= coverage <= 40:
        return 90
    if 40 < coverage <= 60:
        return 75
    if coverage < 20:
        return 60
    return 50


def _engagement_score(result: ScreenshotAnalysisResult) -> float:
    colors = result.colors
    vibrant = colors.average_saturation > 0.6 and colors.average_brightness > 0.5
    if result.layout.has_cta and vibrant:
        return 85
    if result.layout.has_cta:
        return 70
    return 60


def _messaging_score(result: ScreenshotAnalysisResult) -> float:
    confidence = result.theme.confidence
    if confidence > 0.7:
        return 85
    if confidence > 0.5:
        return 70
    return 60
