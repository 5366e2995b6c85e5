"""Human-readable digest of screenshot analysis results for prompting."""

from __future__ import annotations

from typing import Sequence

from ..io.models import BatchAnalysisResult, ScreenshotAnalysisResult
from ..pipeline.analysis import get_batch_summary

EMPTY_SUMMARY = "No screenshot analysis data available."
_OCR_EXCERPT = 100


def prepare_analysis_summary(results: Sequence[ScreenshotAnalysisResult]) -> str:
    """Render every field the insight prompt relies on as plain text."""
    if not results:
        return EMPTY_SUMMARY

    summary = get_batch_summary(
        BatchAnalysisResult(
            results=list(results),
            total_processing_time=0,
            success_count=len(results),
            error_count=0,
        )
    )
    total = len(results)

    lines = [f"Total Screenshots: {total}", "", "Visual Analysis:"]
    lines.append(f"- Average Text Density: {summary.average_text_density * 100:.1f}%")
    lines.append(f"- Average Color Count: {summary.average_color_count:.1f}")
    lines.append(f"- Average Layout Score: {summary.average_layout_score:.0f}/100")
    lines.append(f"- Dominant Theme: {summary.most_common_theme}")
    lines.append(f"- Dominant Layout: {summary.most_common_layout}")
    lines.append(f"- CTA Presence: {summary.cta_count}/{total} screenshots")
    if summary.cta_positions:
        lines.append(f"- CTA Positions: {', '.join(summary.cta_positions)}")
    lines.append(f"- Visual Consistency: {summary.visual_consistency * 100:.0f}%")
    lines.append(f"- Color Palette: {', '.join(summary.color_palette)}")
    lines.append("")
    lines.append("Individual Screenshot Insights:")

    for position, result in enumerate(results, start=1):
        lines.append("")
        lines.append(f"Screenshot {position}:")
        lines.extend(f"  - {entry}" for entry in _describe(result))

    return "\n".join(lines) + "\n"


def _describe(result: ScreenshotAnalysisResult) -> list[str]:
    theme, layout = result.theme, result.layout
    entries = [
        f"Theme: {theme.primary} ({theme.confidence * 100:.0f}% confidence)",
        f"Layout: {layout.layout_type} (score: {layout.layout_score}/100)",
        f"Text Coverage: {result.text.estimated_text_percentage:.0f}%",
        (
            f"Colors: {result.colors.color_count} "
            f"(brightness: {result.colors.average_brightness * 100:.0f}%)"
        ),
    ]
    if result.ocr is not None and result.ocr.text.strip():
        text = result.ocr.text
        preview = text[:_OCR_EXCERPT].replace("\n", " ")
        ellipsis = "..." if len(text) > _OCR_EXCERPT else ""
        entries.append(f'Extracted Text: "{preview}{ellipsis}"')
    if layout.has_cta:
        entries.append(f"CTA Position: {layout.cta_position}")
    return entries
