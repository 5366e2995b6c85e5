"""Data models shared across the screenshot analysis pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Literal, Optional, Tuple

ThemeStyle = Literal[
    "minimal", "vibrant", "dark", "light", "gradient", "photo", "illustration"
]
LayoutType = Literal[
    "text-heavy", "image-heavy", "balanced", "top-heavy", "bottom-heavy", "centered"
]
Position = Literal["top", "center", "bottom"]


@dataclass(slots=True, frozen=True)
class RGB:
    r: int
    g: int
    b: int


@dataclass(slots=True, frozen=True)
class ColorInfo:
    """One dominant color and its share of the sampled pixels."""

    hex: str
    rgb: RGB
    percentage: float


@dataclass(slots=True, frozen=True)
class ColorExtractionResult:
    """Palette and aggregate color statistics for a screenshot."""

    dominant_colors: Tuple[ColorInfo, ...]
    average_brightness: float
    average_saturation: float
    color_count: int


@dataclass(slots=True, frozen=True)
class TextRegion:
    """A grid cell flagged as text-like; coordinates are image percentages."""

    x: float
    y: float
    width: float
    height: float
    confidence: float


@dataclass(slots=True, frozen=True)
class TextEstimationResult:
    """Edge-based estimate of how much text a screenshot carries and where."""

    text_regions: Tuple[TextRegion, ...]
    text_density: float
    estimated_text_percentage: float
    has_top_text: bool = False
    has_center_text: bool = False
    has_bottom_text: bool = False


@dataclass(slots=True, frozen=True)
class BoundingBox:
    x0: int
    y0: int
    x1: int
    y1: int


@dataclass(slots=True, frozen=True)
class OcrWord:
    text: str
    confidence: float
    bbox: BoundingBox


@dataclass(slots=True, frozen=True)
class OcrLine:
    text: str
    confidence: float
    bbox: BoundingBox


@dataclass(slots=True, frozen=True)
class OcrResult:
    """Literal text recognised in a screenshot; confidences are in [0, 1]."""

    text: str
    confidence: float
    lines: Tuple[OcrLine, ...] = ()
    words: Tuple[OcrWord, ...] = ()
    processing_time: int = 0


@dataclass(slots=True, frozen=True)
class OcrProgress:
    status: str
    progress: float


@dataclass(slots=True, frozen=True)
class ThemeClassification:
    """Visual style label derived from color statistics."""

    primary: ThemeStyle
    confidence: float
    reasons: Tuple[str, ...]
    secondary: Optional[ThemeStyle] = None


@dataclass(slots=True, frozen=True)
class LayoutAnalysis:
    """Spatial text/image distribution, quality score and CTA detection."""

    layout_type: LayoutType
    confidence: float
    text_to_image_ratio: float
    visual_density: float
    has_cta: bool
    layout_score: int
    insights: Tuple[str, ...]
    cta_position: Optional[Position] = None


@dataclass(slots=True, frozen=True)
class ScreenshotAnalysisResult:
    """Everything learned about one screenshot during an analysis session."""

    screenshot_url: str
    screenshot_index: int
    colors: ColorExtractionResult
    text: TextEstimationResult
    theme: ThemeClassification
    layout: LayoutAnalysis
    analyzed_at: datetime
    processing_time: int
    ocr: Optional[OcrResult] = None
    perceptual_hash: Optional[str] = None


@dataclass(slots=True, frozen=True)
class BatchError:
    index: int
    error: str


@dataclass(slots=True, frozen=True)
class BatchAnalysisResult:
    """Outcome of analysing an ordered list of screenshots."""

    results: List[ScreenshotAnalysisResult]
    total_processing_time: int
    success_count: int
    error_count: int
    errors: List[BatchError] = field(default_factory=list)


@dataclass(slots=True, frozen=True)
class BatchSummary:
    """Aggregate statistics across the successful results of a batch."""

    average_text_density: float
    most_common_theme: str
    most_common_layout: str
    average_color_count: float
    average_layout_score: float
    cta_count: int = 0
    cta_positions: List[str] = field(default_factory=list)
    color_palette: List[str] = field(default_factory=list)
    visual_consistency: float = 0.0


@dataclass(slots=True, frozen=True)
class CategoryRubric:
    """Category-specific scoring weights and tier thresholds."""

    category: str
    weights: Dict[str, float]
    min_screenshot_count: int
    thresholds: Dict[str, int]


@dataclass(slots=True, frozen=True)
class CreativeScoreCard:
    category: str
    metric_scores: Dict[str, int]
    overall_score: int
    tier: str
    warnings: List[str] = field(default_factory=list)


@dataclass(slots=True, frozen=True)
class AppContext:
    """App details quoted in the AI insight prompt."""

    name: str
    category: str = "default"
    developer: str = "Unknown"
    rating: float | None = None


@dataclass(slots=True, frozen=True)
class CreativeInsights:
    """Structured creative strategy returned by the text-generation model."""

    opportunities: List[dict]
    test_plan: dict
    narratives: dict
    weaknesses: List[dict]
    screenshot_theme_summary: dict
    generated_at: datetime
    processing_time: int
