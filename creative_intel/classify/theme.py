"""Rule-based visual theme classification from color statistics."""

from __future__ import annotations

from typing import Dict, List, Sequence

from ..features.color import color_distance
from ..io.models import ColorExtractionResult, ColorInfo, ThemeClassification, ThemeStyle

# Ties resolve in this order.
THEMES: tuple[ThemeStyle, ...] = (
    "dark",
    "light",
    "minimal",
    "vibrant",
    "gradient",
    "photo",
    "illustration",
)

SECONDARY_MIN_SCORE = 15
STRONG_CONFIDENCE = 0.7
MODERATE_CONFIDENCE = 0.4
_GRADIENT_STEP = (30.0, 150.0)
_GRADIENT_MIN_STEPS = 2
_MAX_REASONS = 3


def classify_theme(colors: ColorExtractionResult) -> ThemeClassification:
    """Return the visual style of a screenshot given its color statistics."""
    scores: Dict[str, int] = {theme: 0 for theme in THEMES}
    reasons: List[str] = []

    brightness = colors.average_brightness
    saturation = colors.average_saturation
    count = colors.color_count

    if brightness < 0.3:
        scores["dark"] += 40
        reasons.append(f"Very dark palette (brightness {brightness:.0%})")
    elif brightness < 0.4:
        scores["dark"] += 20
        reasons.append(f"Dark palette (brightness {brightness:.0%})")

    if brightness > 0.7:
        scores["light"] += 40
        reasons.append(f"Very bright palette (brightness {brightness:.0%})")
    elif brightness > 0.6:
        scores["light"] += 20
        reasons.append(f"Light palette (brightness {brightness:.0%})")

    if count <= 2:
        scores["minimal"] += 30
        reasons.append(f"Limited palette of {count} color{'s' if count != 1 else ''}")
    if saturation < 0.2:
        scores["minimal"] += 20
        reasons.append("Muted, low-saturation colors")

    if saturation > 0.6:
        scores["vibrant"] += 40
        reasons.append(f"Highly saturated colors (saturation {saturation:.0%})")
    elif saturation > 0.4:
        scores["vibrant"] += 20
        reasons.append(f"Moderately saturated colors (saturation {saturation:.0%})")
    if count >= 4:
        scores["vibrant"] += 15
        reasons.append(f"Rich palette of {count} colors")

    if count >= 3 and saturation > 0.3 and has_gradient_pattern(colors.dominant_colors):
        scores["gradient"] += 35
        reasons.append("Smooth transitions between dominant colors")

    if count >= 5:
        scores["photo"] += 25
        reasons.append("High color diversity typical of photography")
    if count <= 3 and saturation > 0.5:
        scores["illustration"] += 25
        reasons.append("Few saturated flat colors typical of illustration")

    ranked = sorted(THEMES, key=lambda theme: scores[theme], reverse=True)
    primary = ranked[0]
    primary_score = scores[primary]
    if primary_score == 0:
        # no rule fired: nothing stands out
        primary = "minimal"

    runner_up = next(theme for theme in ranked if theme != primary)
    secondary = runner_up if scores[runner_up] > SECONDARY_MIN_SCORE else None
    confidence = min(primary_score / 100.0, 1.0)

    summary = reasons[: _MAX_REASONS - 1]
    summary.append(f"{_strength(confidence)} {primary} theme detected")
    return ThemeClassification(
        primary=primary,
        secondary=secondary,
        confidence=confidence,
        reasons=tuple(summary),
    )


def has_gradient_pattern(colors: Sequence[ColorInfo]) -> bool:
    """True when rank-adjacent colors step smoothly from one to the next."""
    low, high = _GRADIENT_STEP
    smooth = 0
    for current, following in zip(colors, colors[1:]):
        distance = color_distance(current.rgb, following.rgb)
        if low < distance < high:
            smooth += 1
    return smooth >= _GRADIENT_MIN_STEPS


def _strength(confidence: float) -> str:
    if confidence > STRONG_CONFIDENCE:
        return "Strong"
    if confidence > MODERATE_CONFIDENCE:
        return "Moderate"
    return "Weak"
