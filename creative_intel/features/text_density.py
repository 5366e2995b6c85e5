"""Edge-based text density estimation.

Rendered text has dense, high-contrast edges while photographs and flat fills
do not, so the Sobel gradient magnitude is a proxy for how much of a
screenshot is covered by copy. Nothing is actually read here; see
:mod:`creative_intel.features.ocr` for that.
"""

from __future__ import annotations

import cv2
import numpy as np
from PIL import Image

from ..extract.images import open_image, resize_image
from ..io.models import TextEstimationResult, TextRegion

_TARGET_WIDTH = 200
_GRID_SIZE = 10
_EDGE_THRESHOLD = 40.0
_TOP_BAND = 33.0
_BOTTOM_BAND = 66.0
_LUMA = np.array([0.299, 0.587, 0.114])


def estimate_text(source: str | Image.Image) -> TextEstimationResult:
    """Estimate text coverage and its vertical placement in *source*."""
    image = open_image(source)
    gray = _grayscale(_shrink_to_width(image, _TARGET_WIDTH))
    magnitude = edge_magnitude(gray)

    interior = magnitude[1:-1, 1:-1]
    if interior.size == 0:
        return TextEstimationResult(text_regions=(), text_density=0.0, estimated_text_percentage=0.0)

    text_density = float(np.count_nonzero(interior > _EDGE_THRESHOLD) / interior.size)
    regions = grid_regions(magnitude)

    positions = {vertical_band(region) for region in regions}
    return TextEstimationResult(
        text_regions=tuple(regions),
        text_density=text_density,
        estimated_text_percentage=text_density * 100.0,
        has_top_text="top" in positions,
        has_center_text="center" in positions,
        has_bottom_text="bottom" in positions,
    )


def edge_magnitude(gray: np.ndarray) -> np.ndarray:
    """Return the 3x3 Sobel gradient magnitude; border pixels are zero."""
    magnitude = np.zeros_like(gray, dtype=np.float64)
    if gray.shape[0] < 3 or gray.shape[1] < 3:
        return magnitude
    gx = cv2.Sobel(gray, cv2.CV_64F, 1, 0, ksize=3)
    gy = cv2.Sobel(gray, cv2.CV_64F, 0, 1, ksize=3)
    magnitude[1:-1, 1:-1] = np.hypot(gx, gy)[1:-1, 1:-1]
    return magnitude


def grid_regions(
    magnitude: np.ndarray,
    grid_size: int = _GRID_SIZE,
    threshold: float = _EDGE_THRESHOLD,
) -> list[TextRegion]:
    """Flag grid cells whose mean edge magnitude exceeds *threshold*."""
    height, width = magnitude.shape
    cell_w = width // grid_size
    cell_h = height // grid_size
    if cell_w == 0 or cell_h == 0:
        return []

    regions: list[TextRegion] = []
    for gy in range(grid_size):
        for gx in range(grid_size):
            cell = magnitude[gy * cell_h:(gy + 1) * cell_h, gx * cell_w:(gx + 1) * cell_w]
            mean_edge = float(cell.mean())
            if mean_edge <= threshold:
                continue
            regions.append(
                TextRegion(
                    x=gx * cell_w / width * 100.0,
                    y=gy * cell_h / height * 100.0,
                    width=cell_w / width * 100.0,
                    height=cell_h / height * 100.0,
                    confidence=min(mean_edge / 100.0, 1.0),
                )
            )
    return regions


def vertical_band(region: TextRegion) -> str:
    """Return 'top', 'center' or 'bottom' for the region's vertical center."""
    center = region.y + region.height / 2
    if center < _TOP_BAND:
        return "top"
    if center > _BOTTOM_BAND:
        return "bottom"
    return "center"


def _shrink_to_width(image: Image.Image, width: int) -> Image.Image:
    if image.width <= width:
        return image
    height = max(1, round(image.height * width / image.width))
    return resize_image(image, (width, height))


def _grayscale(image: Image.Image) -> np.ndarray:
    rgb = np.asarray(image.convert("RGB"), dtype=np.float64)
    return rgb @ _LUMA
