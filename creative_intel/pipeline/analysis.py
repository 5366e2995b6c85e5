"""Per-screenshot analysis and batch aggregation."""

from __future__ import annotations

import logging
import time
from collections import Counter
from datetime import datetime, timezone
from typing import Callable, Sequence

import numpy as np
from tqdm import tqdm

from ..classify.layout import analyze_layout
from ..classify.theme import classify_theme
from ..errors import AnalysisFailure
from ..extract.images import open_image
from ..features.color import extract_colors
from ..features.ocr import OcrService, get_ocr_service
from ..features.perceptual import compute_phash, visual_consistency
from ..features.text_density import estimate_text
from ..io.models import (
    BatchAnalysisResult,
    BatchError,
    BatchSummary,
    OcrResult,
    ScreenshotAnalysisResult,
)

logger = logging.getLogger(__name__)

CANCELLED_MESSAGE = "analysis cancelled"
_PALETTE_PER_SCREENSHOT = 3
_PALETTE_LIMIT = 10


def analyze_screenshot(
    url: str,
    index: int,
    use_advanced_ocr: bool = False,
    *,
    max_colors: int = 5,
    ocr_service: OcrService | None = None,
    rng: np.random.Generator | None = None,
) -> ScreenshotAnalysisResult:
    """Run every analysis stage on one screenshot.

    Stages run strictly in order: colors, text estimation (plus OCR when
    requested), theme, layout. Any failure is raised as
    :class:`AnalysisFailure` tagged with *index*.
    """
    started = time.perf_counter()
    try:
        image = open_image(url)
        colors = extract_colors(image, max_colors=max_colors, rng=rng)

        ocr: OcrResult | None = None
        if use_advanced_ocr:
            service = ocr_service or get_ocr_service()
            ocr = service.extract_text(image)
        text = estimate_text(image)

        theme = classify_theme(colors)
        layout = analyze_layout(text, colors)
    except Exception as exc:
        logger.debug("Analysis of screenshot %d failed", index, exc_info=True)
        raise AnalysisFailure(index, exc) from exc

    elapsed = int((time.perf_counter() - started) * 1000)
    logger.debug("Analysed screenshot %d in %d ms", index, elapsed)

    fingerprint = _fingerprint(image, index)
    return ScreenshotAnalysisResult(
        screenshot_url=url,
        screenshot_index=index,
        colors=colors,
        text=text,
        ocr=ocr,
        theme=theme,
        layout=layout,
        analyzed_at=datetime.now(timezone.utc),
        processing_time=elapsed,
        perceptual_hash=fingerprint,
    )


def analyze_batch(
    urls: Sequence[str],
    use_advanced_ocr: bool = False,
    *,
    max_colors: int = 5,
    ocr_service: OcrService | None = None,
    rng: np.random.Generator | None = None,
    should_cancel: Callable[[], bool] | None = None,
    progress: bool = False,
) -> BatchAnalysisResult:
    """Analyse *urls* one at a time, recording failures instead of raising.

    Screenshot ``i`` is finished before ``i + 1`` starts, which bounds peak
    memory and keeps the shared OCR engine single-tenant.
    """
    started = time.perf_counter()
    results: list[ScreenshotAnalysisResult] = []
    errors: list[BatchError] = []

    iterator = tqdm(
        enumerate(urls),
        total=len(urls),
        desc="Analysing screenshots",
        unit="screenshot",
        leave=False,
        disable=not progress,
    )
    for index, url in iterator:
        if should_cancel is not None and should_cancel():
            logger.info("Batch cancelled before screenshot %d", index)
            errors.extend(BatchError(i, CANCELLED_MESSAGE) for i in range(index, len(urls)))
            break
        try:
            result = analyze_screenshot(
                url,
                index,
                use_advanced_ocr,
                max_colors=max_colors,
                ocr_service=ocr_service,
                rng=rng,
            )
        except AnalysisFailure as exc:
            logger.warning("Screenshot %d could not be analysed: %s", index, exc.cause)
            errors.append(BatchError(index=index, error=str(exc.cause)))
            continue
        results.append(result)

    return BatchAnalysisResult(
        results=results,
        total_processing_time=int((time.perf_counter() - started) * 1000),
        success_count=len(results),
        error_count=len(errors),
        errors=errors,
    )


def get_batch_summary(batch: BatchAnalysisResult) -> BatchSummary:
    """Aggregate the successful results of *batch*."""
    results = batch.results
    if not results:
        return BatchSummary(
            average_text_density=0.0,
            most_common_theme="unknown",
            most_common_layout="unknown",
            average_color_count=0.0,
            average_layout_score=0.0,
        )

    total = len(results)
    palette: list[str] = []
    for result in results:
        for color in result.colors.dominant_colors[:_PALETTE_PER_SCREENSHOT]:
            if color.hex not in palette:
                palette.append(color.hex)

    cta_positions = [
        result.layout.cta_position
        for result in results
        if result.layout.has_cta and result.layout.cta_position
    ]

    return BatchSummary(
        average_text_density=sum(r.text.text_density for r in results) / total,
        most_common_theme=_mode(r.theme.primary for r in results),
        most_common_layout=_mode(r.layout.layout_type for r in results),
        average_color_count=sum(r.colors.color_count for r in results) / total,
        average_layout_score=sum(r.layout.layout_score for r in results) / total,
        cta_count=sum(1 for r in results if r.layout.has_cta),
        cta_positions=cta_positions,
        color_palette=palette[:_PALETTE_LIMIT],
        visual_consistency=visual_consistency(
            [r.perceptual_hash for r in results if r.perceptual_hash]
        ),
    )


def _fingerprint(image, index: int) -> str | None:
    # optional; only visual_consistency reads it
    try:
        return compute_phash(image)
    except (TypeError, ValueError, OSError) as exc:
        logger.warning("Could not fingerprint screenshot %d: %s", index, exc)
        return None


def _mode(values) -> str:
    # most_common keeps first-encountered order among equal counts
    return Counter(values).most_common(1)[0][0]
