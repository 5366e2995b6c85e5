"""Output helpers for persisting analysis session results."""

from __future__ import annotations

import json
from dataclasses import asdict
from datetime import datetime
from pathlib import Path
from typing import Any, Sequence

import pandas as pd

from .models import (
    BatchAnalysisResult,
    BatchSummary,
    CreativeInsights,
    CreativeScoreCard,
    ScreenshotAnalysisResult,
)


def write_batch(path: Path, batch: BatchAnalysisResult) -> Path:
    """Write *batch* to *path* as JSON and return the path."""
    return _write_json(path, asdict(batch))


def write_summary(path: Path, summary: BatchSummary) -> Path:
    return _write_json(path, asdict(summary))


def write_score_card(path: Path, card: CreativeScoreCard) -> Path:
    return _write_json(path, asdict(card))


def write_insights(path: Path, insights: CreativeInsights) -> Path:
    return _write_json(path, asdict(insights))


def feature_rows(results: Sequence[ScreenshotAnalysisResult]) -> list[dict[str, Any]]:
    """Flatten *results* into one tabular row per screenshot."""
    rows: list[dict[str, Any]] = []
    for result in results:
        rows.append(
            {
                "screenshot_url": result.screenshot_url,
                "screenshot_index": result.screenshot_index,
                "theme": result.theme.primary,
                "theme_confidence": result.theme.confidence,
                "layout_type": result.layout.layout_type,
                "layout_score": result.layout.layout_score,
                "text_density": result.text.text_density,
                "color_count": result.colors.color_count,
                "average_brightness": result.colors.average_brightness,
                "average_saturation": result.colors.average_saturation,
                "top_colors": [c.hex for c in result.colors.dominant_colors],
                "has_cta": result.layout.has_cta,
                "cta_position": result.layout.cta_position,
                "perceptual_hash": result.perceptual_hash,
                "ocr_confidence": result.ocr.confidence if result.ocr else None,
                "processing_time": result.processing_time,
            }
        )
    return rows


def write_feature_table(path: Path, results: Sequence[ScreenshotAnalysisResult]) -> Path | None:
    """Write per-screenshot features to *path* as Parquet; None when empty."""
    rows = feature_rows(results)
    if not rows:
        return None
    df = pd.DataFrame(rows)
    path.parent.mkdir(parents=True, exist_ok=True)
    df.to_parquet(path, index=False, engine="pyarrow")
    return path


def _write_json(path: Path, payload: Any) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, indent=2, default=_json_default), encoding="utf-8")
    return path


def _json_default(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")
