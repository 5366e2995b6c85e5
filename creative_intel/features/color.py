"""Dominant color extraction."""

from __future__ import annotations

import logging

import cv2
import numpy as np
from PIL import Image

from ..extract.images import open_image, resize_image
from ..io.models import RGB, ColorExtractionResult, ColorInfo

logger = logging.getLogger(__name__)

_SAMPLE_SIZE = (50, 50)
_ALPHA_CUTOFF = 128
_KMEANS_ITERATIONS = 5
_MEMBERSHIP_RADIUS = 50.0
_LUMA = np.array([0.299, 0.587, 0.114])


def extract_colors(
    source: str | Image.Image,
    max_colors: int = 5,
    rng: np.random.Generator | None = None,
) -> ColorExtractionResult:
    """Return the dominant palette and average brightness/saturation of *source*.

    The image is downsampled to 50x50 and clustered with a fixed five rounds of
    k-means. Pixels with alpha below 128 are ignored everywhere.
    """
    if max_colors < 1:
        raise ValueError("max_colors must be at least 1")

    image = open_image(source)
    sample = resize_image(image, _SAMPLE_SIZE)
    pixels = np.asarray(sample, dtype=np.float64).reshape(-1, 4)
    opaque = pixels[pixels[:, 3] >= _ALPHA_CUTOFF][:, :3]
    if opaque.size == 0:
        logger.debug("No opaque pixels to sample")
        return ColorExtractionResult(
            dominant_colors=(), average_brightness=0.0, average_saturation=0.0, color_count=0
        )

    centroids = kmeans(opaque, max_colors, rng or np.random.default_rng())
    dominant = _rank_centroids(opaque, centroids)

    return ColorExtractionResult(
        dominant_colors=tuple(dominant),
        average_brightness=average_brightness(opaque),
        average_saturation=average_saturation(opaque),
        color_count=len(dominant),
    )


def kmeans(
    pixels: np.ndarray,
    k: int,
    rng: np.random.Generator,
    iterations: int = _KMEANS_ITERATIONS,
) -> np.ndarray:
    """Cluster *pixels* (N x 3) into at most *k* centroids.

    Seeds are the first *k* distinct colors met in a random pixel order, so
    common colors are more likely to seed and no two seeds coincide.
    """
    shuffled = pixels[rng.permutation(len(pixels))]
    _, first_seen = np.unique(shuffled, axis=0, return_index=True)
    centroids = shuffled[np.sort(first_seen)[:k]].copy()

    for _ in range(iterations):
        labels = _nearest(pixels, centroids)
        for index in range(len(centroids)):
            members = pixels[labels == index]
            # empty clusters keep their previous centroid
            if len(members):
                centroids[index] = members.mean(axis=0)
    return centroids


def average_brightness(pixels: np.ndarray) -> float:
    """Mean perceived luminance of *pixels* in [0, 1]."""
    if pixels.size == 0:
        return 0.0
    return float(np.mean(pixels @ _LUMA) / 255.0)


def average_saturation(pixels: np.ndarray) -> float:
    """Mean HSV saturation ``(max - min) / max`` of *pixels* in [0, 1]."""
    if pixels.size == 0:
        return 0.0
    scaled = (pixels / 255.0).astype(np.float32).reshape(-1, 1, 3)
    hsv = cv2.cvtColor(scaled, cv2.COLOR_RGB2HSV)
    return float(np.clip(hsv[:, :, 1].mean(), 0.0, 1.0))


def rgb_to_hex(r: int, g: int, b: int) -> str:
    return f"#{r:02x}{g:02x}{b:02x}"


def color_distance(a: RGB, b: RGB) -> float:
    """Euclidean distance between two colors in RGB space."""
    return float(np.sqrt((a.r - b.r) ** 2 + (a.g - b.g) ** 2 + (a.b - b.b) ** 2))


def _nearest(pixels: np.ndarray, centroids: np.ndarray) -> np.ndarray:
    distances = np.linalg.norm(pixels[:, None, :] - centroids[None, :, :], axis=2)
    return np.argmin(distances, axis=1)


def _rank_centroids(pixels: np.ndarray, centroids: np.ndarray) -> list[ColorInfo]:
    total = len(pixels)
    ranked: list[ColorInfo] = []
    for centroid in centroids:
        distances = np.linalg.norm(pixels - centroid, axis=1)
        count = int(np.count_nonzero(distances < _MEMBERSHIP_RADIUS))
        if count == 0:
            continue
        r, g, b = (int(np.clip(round(channel), 0, 255)) for channel in centroid)
        ranked.append(
            ColorInfo(
                hex=rgb_to_hex(r, g, b),
                rgb=RGB(r, g, b),
                percentage=min(100.0, count / total * 100.0),
            )
        )

    ranked.sort(key=lambda info: info.percentage, reverse=True)

    # clusters that converge onto the same color are reported once
    unique: list[ColorInfo] = []
    seen: set[str] = set()
    for info in ranked:
        if info.hex in seen:
            continue
        seen.add(info.hex)
        unique.append(info)
    return unique
