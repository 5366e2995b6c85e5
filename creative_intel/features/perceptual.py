"""Perceptual fingerprints used to judge visual consistency across a set."""

from __future__ import annotations

from itertools import combinations
from typing import Sequence

import imagehash
from PIL import Image

_HASH_SIZE = 8
_HASH_BITS = _HASH_SIZE * _HASH_SIZE


def compute_phash(img: Image.Image) -> str:
    """Return the perceptual hash of *img* as a hex string."""
    if not isinstance(img, Image.Image):
        raise TypeError("compute_phash expects a PIL.Image.Image instance")
    rgb = img if img.mode in {"RGB", "L"} else img.convert("RGB")
    return str(imagehash.phash(rgb, hash_size=_HASH_SIZE))


def hash_similarity(h1: str, h2: str) -> float:
    """Return ``1 - distance / 64`` clamped to the unit interval."""
    try:
        distance = imagehash.hex_to_hash(_strip_prefix(h1)) - imagehash.hex_to_hash(
            _strip_prefix(h2)
        )
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Not comparable perceptual hashes: {h1!r}, {h2!r}") from exc
    return max(0.0, min(1.0, 1.0 - distance / _HASH_BITS))


def visual_consistency(hashes: Sequence[str]) -> float:
    """Mean pairwise hash similarity; 1.0 for a single image, 0.0 for none."""
    usable = [h for h in hashes if h]
    if not usable:
        return 0.0
    if len(usable) == 1:
        return 1.0
    scores = [hash_similarity(a, b) for a, b in combinations(usable, 2)]
    return sum(scores) / len(scores)


def _strip_prefix(value: str) -> str:
    value = value.strip().lower()
    return value[2:] if value.startswith("0x") else value
