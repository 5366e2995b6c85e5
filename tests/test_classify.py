"""Tests for theme classification and layout analysis."""

import itertools

import pytest

from creative_intel.classify.layout import analyze_layout, classify_layout, detect_cta
from creative_intel.classify.theme import classify_theme, has_gradient_pattern
from creative_intel.io.models import (
    RGB,
    ColorExtractionResult,
    ColorInfo,
    TextEstimationResult,
    TextRegion,
)


def _colors(rgbs, brightness=0.5, saturation=0.3):
    infos = [
        ColorInfo(hex="#%02x%02x%02x" % rgb, rgb=RGB(*rgb), percentage=100.0 / len(rgbs))
        for rgb in rgbs
    ]
    return ColorExtractionResult(
        dominant_colors=tuple(infos),
        average_brightness=brightness,
        average_saturation=saturation,
        color_count=len(infos),
    )


def _palette(count, brightness=0.5, saturation=0.3):
    return ColorExtractionResult(
        dominant_colors=(),
        average_brightness=brightness,
        average_saturation=saturation,
        color_count=count,
    )


def _text(density, top=False, center=False, bottom=False, regions=0):
    return TextEstimationResult(
        text_regions=(TextRegion(0.0, 0.0, 10.0, 10.0, 0.5),) * regions,
        text_density=density,
        estimated_text_percentage=density * 100,
        has_top_text=top,
        has_center_text=center,
        has_bottom_text=bottom,
    )


# Theme -----------------------------------------------------------------


def test_theme_is_deterministic():
    colors = _colors([(20, 30, 200), (60, 80, 220), (100, 130, 240)], 0.45, 0.55)

    results = [classify_theme(colors) for _ in range(5)]

    assert all(result == results[0] for result in results)


def test_dark_saturated_single_color_is_dark():
    theme = classify_theme(_colors([(10, 26, 79)], brightness=0.107, saturation=0.87))

    assert theme.primary == "dark"
    assert theme.secondary == "vibrant"
    assert theme.confidence == pytest.approx(0.4)
    assert theme.reasons[-1] == "Weak dark theme detected"


def test_bright_muted_palette_is_light():
    theme = classify_theme(_palette(3, brightness=0.85, saturation=0.1))

    assert theme.primary == "light"
    assert theme.secondary == "minimal"


def test_saturated_rich_palette_is_vibrant():
    theme = classify_theme(_palette(4, brightness=0.55, saturation=0.75))

    assert theme.primary == "vibrant"
    assert theme.confidence == pytest.approx(0.55)
    assert theme.reasons[-1] == "Moderate vibrant theme detected"


def test_gradient_requires_smooth_steps():
    smooth = _colors([(200, 40, 40), (200, 100, 60), (200, 160, 80)], 0.5, 0.35)
    harsh = _colors([(0, 0, 0), (255, 255, 255), (0, 0, 0)], 0.5, 0.35)

    assert has_gradient_pattern(smooth.dominant_colors)
    assert not has_gradient_pattern(harsh.dominant_colors)
    assert classify_theme(smooth).primary == "gradient"


def test_many_colors_score_photo():
    theme = classify_theme(_palette(6, brightness=0.5, saturation=0.35))

    assert theme.primary == "photo"
    # vibrant only reaches the 15 point cut-off
    assert theme.secondary is None


def test_weak_secondary_is_omitted():
    theme = classify_theme(_palette(3, brightness=0.35, saturation=0.3))

    assert theme.primary == "dark"
    assert theme.secondary is None


def test_no_signal_defaults_to_minimal():
    theme = classify_theme(_palette(3, brightness=0.5, saturation=0.3))

    assert theme.primary == "minimal"
    assert theme.confidence == 0.0
    assert theme.secondary is None


def test_reasons_are_capped_and_end_with_strength():
    theme = classify_theme(_palette(1, brightness=0.1, saturation=0.05))

    assert len(theme.reasons) <= 3
    assert theme.reasons[-1].endswith("theme detected")
    assert theme.reasons[-1].startswith(("Strong", "Moderate", "Weak"))


# Layout ----------------------------------------------------------------


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        (_text(0.5, top=True, bottom=True), "text-heavy"),
        (_text(0.1, top=True), "image-heavy"),
        (_text(0.2, top=True), "top-heavy"),
        (_text(0.2, bottom=True), "bottom-heavy"),
        (_text(0.2, center=True), "centered"),
        (_text(0.2, top=True, bottom=True), "balanced"),
        (_text(0.2), "balanced"),
    ],
)
def test_layout_type_priority(text, expected):
    assert classify_layout(text) == expected


@pytest.mark.parametrize(
    ("text", "saturation", "expected"),
    [
        (_text(0.2, bottom=True), 0.8, "bottom"),
        (_text(0.2, center=True), 0.8, "center"),
        (_text(0.2, center=True, bottom=True), 0.8, "bottom"),
        (_text(0.2, bottom=True), 0.2, "bottom"),
        (_text(0.2, center=True), 0.2, None),
        (_text(0.2, top=True), 0.8, None),
        (_text(0.0), 0.9, None),
    ],
)
def test_cta_detection(text, saturation, expected):
    assert detect_cta(text, _palette(3, saturation=saturation)) == expected


def test_layout_scores_stay_in_range_for_extremes():
    densities = (0.0, 0.05, 0.3, 0.5, 1.0)
    color_counts = (0, 2, 5, 10, 100)
    flags = (False, True)
    for density, count, top, center, bottom in itertools.product(
        densities, color_counts, flags, flags, flags
    ):
        layout = analyze_layout(
            _text(density, top, center, bottom, regions=8),
            _palette(count, saturation=0.9),
        )
        assert 0 <= layout.layout_score <= 100
        assert 0.0 <= layout.confidence <= 1.0
        assert 0.0 <= layout.visual_density <= 1.0
        assert len(layout.insights) <= 4


def test_balanced_layout_with_cta_scores_high():
    layout = analyze_layout(
        _text(0.3, top=True, bottom=True, regions=6), _palette(5, saturation=0.7)
    )

    assert layout.layout_type == "balanced"
    assert layout.has_cta and layout.cta_position == "bottom"
    # 50 + 20 balanced + 15 ratio + 15 cta
    assert layout.layout_score == 100
    assert layout.visual_density == pytest.approx(0.38)
    assert layout.confidence == pytest.approx(0.8)
    assert "Layout is well-balanced for conversion" in layout.insights


def test_image_heavy_layout_without_text():
    layout = analyze_layout(_text(0.0), _palette(1, saturation=0.87))

    assert layout.layout_type == "image-heavy"
    assert not layout.has_cta
    assert layout.cta_position is None
    assert layout.text_to_image_ratio == 0.0
    # 50 + 10 image-heavy - 10 ratio - 10 sparse
    assert layout.layout_score == 40
    assert "Layout may benefit from optimization" in layout.insights
    assert "Clean, spacious design" in layout.insights
