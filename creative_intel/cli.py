"""Command-line interface for the creative_intel project."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Iterable

import numpy as np

from .errors import InsightGenerationError, OcrInitializationError
from .features.ocr import get_ocr_service
from .insights.ai_insights import generate_creative_insights
from .io.models import AppContext, BatchAnalysisResult
from .io.outputs import (
    write_batch,
    write_feature_table,
    write_insights,
    write_score_card,
    write_summary,
)
from .pipeline.analysis import analyze_batch, get_batch_summary
from .scoring.rubric import DEFAULT_CATEGORY
from .scoring.score_card import build_score_card


def parse_args(argv: Iterable[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments for the screenshot analysis pipeline."""
    parser = argparse.ArgumentParser(
        description="Analyse app-store screenshots for color, text, theme and layout."
    )
    parser.add_argument(
        "--input",
        required=True,
        help="Path to a text file containing screenshot URLs or paths, one per line.",
    )
    parser.add_argument(
        "--out",
        required=True,
        help="Directory path where JSON and Parquet outputs will be written.",
    )
    parser.add_argument(
        "--advanced-ocr",
        action="store_true",
        help="Also run Tesseract OCR on every screenshot (slower).",
    )
    parser.add_argument(
        "--category",
        default=DEFAULT_CATEGORY,
        help="App category used to pick the scoring rubric (e.g. games, productivity).",
    )
    parser.add_argument(
        "--max-colors",
        type=int,
        default=5,
        help="Number of dominant colors to extract per screenshot.",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed for color clustering, for reproducible palettes.",
    )
    parser.add_argument(
        "--insights",
        action="store_true",
        help="Request AI creative insights (needs OPENAI_API_KEY).",
    )
    parser.add_argument("--app-name", default="Unknown app", help="App name for insights.")
    parser.add_argument("--developer", default="Unknown", help="Developer for insights.")
    parser.add_argument("--rating", type=float, default=None, help="Store rating for insights.")
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging.",
    )
    return parser.parse_args(list(argv) if argv is not None else None)


def read_input(path: Path) -> list[str]:
    """Read newline separated entries from *path* and return non-empty lines."""
    if not path.exists():
        raise FileNotFoundError(f"Input file does not exist: {path}")
    lines = [line.strip() for line in path.read_text(encoding="utf-8-sig").splitlines()]
    return [line for line in lines if line and not line.startswith("#")]


def _report_batch(batch: BatchAnalysisResult) -> None:
    for result in batch.results:
        print(
            f"[analyze] #{result.screenshot_index}: theme={result.theme.primary} "
            f"layout={result.layout.layout_type} score={result.layout.layout_score} "
            f"text={result.text.estimated_text_percentage:.0f}% ({result.processing_time} ms)"
        )
    if batch.error_count:
        print(f"[warn] {batch.error_count} screenshot(s) failed to analyze")
        for error in batch.errors:
            print(f"  #{error.index}: {error.error}")


def main(argv: Iterable[str] | None = None) -> int:
    """Entry point for the CLI."""
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    entries = read_input(Path(args.input))
    print(f"[analyze] {len(entries)} screenshot(s)")
    out_dir = Path(args.out)
    out_dir.mkdir(parents=True, exist_ok=True)
    rng = np.random.default_rng(args.seed)

    if args.advanced_ocr:
        try:
            get_ocr_service().initialize()
        except OcrInitializationError as exc:
            print(f"[error] OCR unavailable: {exc}")
            return 1

    try:
        batch = analyze_batch(
            entries,
            args.advanced_ocr,
            max_colors=args.max_colors,
            rng=rng,
            progress=True,
        )
    finally:
        if args.advanced_ocr:
            get_ocr_service().terminate()

    _report_batch(batch)
    write_batch(out_dir / "results.json", batch)

    summary = get_batch_summary(batch)
    write_summary(out_dir / "summary.json", summary)
    print(
        f"[summary] theme={summary.most_common_theme} layout={summary.most_common_layout} "
        f"text={summary.average_text_density * 100:.1f}% colors={summary.average_color_count:.1f} "
        f"score={summary.average_layout_score:.0f}"
    )

    features_path = write_feature_table(out_dir / "features.parquet", batch.results)
    if features_path:
        print(f"[saved] {features_path}")

    card = build_score_card(args.category, batch.results, screenshot_count=len(entries))
    write_score_card(out_dir / "score.json", card)
    print(f"[score] {card.category}: {card.overall_score}/100 ({card.tier})")
    for warning in card.warnings:
        print(f"[warn] {warning}")

    if args.insights and batch.results:
        app = AppContext(
            name=args.app_name,
            category=args.category,
            developer=args.developer,
            rating=args.rating,
        )
        try:
            insights = generate_creative_insights(app, batch.results)
        except InsightGenerationError as exc:
            print(f"[warn] insights unavailable: {exc}")
        else:
            path = write_insights(out_dir / "insights.json", insights)
            print(f"[insights] {len(insights.opportunities)} opportunities -> {path}")

    if entries and not batch.results:
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
