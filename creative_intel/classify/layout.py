"""Layout classification, quality scoring and call-to-action detection."""

from __future__ import annotations

from ..io.models import (
    ColorExtractionResult,
    LayoutAnalysis,
    LayoutType,
    Position,
    TextEstimationResult,
)

TEXT_HEAVY_DENSITY = 0.4
IMAGE_HEAVY_DENSITY = 0.15
VIBRANT_SATURATION = 0.5
BASE_SCORE = 50
BASE_CONFIDENCE = 0.5
_MAX_INSIGHTS = 4


def analyze_layout(
    text: TextEstimationResult, colors: ColorExtractionResult
) -> LayoutAnalysis:
    """Combine text placement and color signals into a layout assessment."""
    layout_type = classify_layout(text)
    ratio = text.text_density
    visual_density = _clamp(0.6 * text.text_density + 0.4 * (colors.color_count / 10), 0.0, 1.0)
    cta_position = detect_cta(text, colors)
    has_cta = cta_position is not None

    score = layout_score(layout_type, ratio, visual_density, has_cta)

    confidence = BASE_CONFIDENCE
    if text.text_density > 0.3:
        confidence += 0.2
    if len(text.text_regions) >= 5:
        confidence += 0.15
    if colors.color_count >= 4:
        confidence += 0.15

    return LayoutAnalysis(
        layout_type=layout_type,
        confidence=_clamp(confidence, 0.0, 1.0),
        text_to_image_ratio=ratio,
        visual_density=visual_density,
        has_cta=has_cta,
        cta_position=cta_position,
        layout_score=score,
        insights=tuple(_insights(layout_type, text, score, visual_density, cta_position)),
    )


def classify_layout(text: TextEstimationResult) -> LayoutType:
    """Return the layout type; the first matching rule wins."""
    if text.text_density > TEXT_HEAVY_DENSITY:
        return "text-heavy"
    if text.text_density < IMAGE_HEAVY_DENSITY:
        return "image-heavy"

    bands = (text.has_top_text, text.has_bottom_text, text.has_center_text)
    if sum(bands) == 1:
        if text.has_top_text:
            return "top-heavy"
        if text.has_bottom_text:
            return "bottom-heavy"
        return "centered"
    return "balanced"


def detect_cta(
    text: TextEstimationResult, colors: ColorExtractionResult
) -> Position | None:
    """Return where a call-to-action most likely sits, or None."""
    vibrant = colors.average_saturation > VIBRANT_SATURATION
    if vibrant and text.has_bottom_text:
        return "bottom"
    if vibrant and text.has_center_text:
        return "center"
    if text.has_bottom_text:
        # bottom copy without vibrant colors is a weak signal
        return "bottom"
    return None


def layout_score(
    layout_type: LayoutType, ratio: float, visual_density: float, has_cta: bool
) -> int:
    """Return the 0-100 layout quality score."""
    score = BASE_SCORE

    if layout_type == "balanced":
        score += 20
    elif layout_type in {"text-heavy", "image-heavy"}:
        score += 10

    if 0.2 <= ratio <= 0.6:
        score += 15
    elif ratio < 0.1 or ratio > 0.8:
        score -= 10

    if visual_density > 0.8:
        score -= 15
    elif visual_density < 0.2:
        score -= 10
    elif 0.4 <= visual_density <= 0.6:
        score += 10

    if has_cta:
        score += 15

    return int(_clamp(score, 0, 100))


def _insights(
    layout_type: LayoutType,
    text: TextEstimationResult,
    score: int,
    visual_density: float,
    cta_position: Position | None,
) -> list[str]:
    coverage = text.estimated_text_percentage
    insights: list[str] = []

    if layout_type == "text-heavy":
        insights.append(f"Text-heavy layout ({coverage:.0f}% text coverage) leads with messaging")
    elif layout_type == "image-heavy":
        insights.append(f"Image-focused layout ({coverage:.0f}% text coverage) lets visuals lead")
    elif layout_type == "top-heavy":
        insights.append("Text is concentrated at the top of the screenshot")
    elif layout_type == "bottom-heavy":
        insights.append("Text is concentrated at the bottom of the screenshot")
    elif layout_type == "centered":
        insights.append("Text is concentrated in the center of the screenshot")
    else:
        insights.append("Balanced mix of text and imagery")

    if cta_position is not None:
        insights.append(f"Call-to-action detected in the {cta_position} area")

    if score > 75:
        insights.append("Layout is well-balanced for conversion")
    elif score < 50:
        insights.append("Layout may benefit from optimization")

    if visual_density > 0.7:
        insights.append("High visual density may feel cluttered")
    elif visual_density < 0.3:
        insights.append("Clean, spacious design")

    return insights[:_MAX_INSIGHTS]


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))
