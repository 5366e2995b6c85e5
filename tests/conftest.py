"""Shared fixtures: synthetic screenshots and fake engines."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Dict, List

import numpy as np
import pytest
from PIL import Image, ImageDraw

DARK_BLUE = (0x0A, 0x1A, 0x4F)


def striped_image(
    top: int, bottom: int, size: tuple[int, int] = (200, 300)
) -> Image.Image:
    """White canvas with 2px black bars between rows *top* and *bottom*.

    The dense vertical edges behave like rendered copy for the edge detector.
    """
    img = Image.new("RGB", size, "white")
    draw = ImageDraw.Draw(img)
    for x in range(0, size[0], 4):
        draw.rectangle([x, top, x + 1, bottom], fill="black")
    return img


@pytest.fixture
def save_png(tmp_path: Path) -> Callable[[Image.Image, str], str]:
    def _save(img: Image.Image, name: str) -> str:
        path = tmp_path / name
        img.save(path, format="PNG")
        return str(path)

    return _save


@pytest.fixture
def dark_blue_path(save_png) -> str:
    return save_png(Image.new("RGB", (50, 50), DARK_BLUE), "dark_blue.png")


@pytest.fixture
def rng() -> np.random.Generator:
    return np.random.default_rng(1234)


class FakeRecognizer:
    """In-memory stand-in for the Tesseract engine."""

    def __init__(self, data: Dict[str, List[Any]] | None = None, fail_on: int | None = None):
        self.data = data or word_data([("Hello", 87), ("World", 93)])
        self.fail_on = fail_on
        self.calls = 0
        self.started = 0
        self.stopped = 0

    def start(self) -> None:
        self.started += 1

    def recognize(self, image: Image.Image) -> Dict[str, List[Any]]:
        self.calls += 1
        if self.fail_on is not None and self.calls == self.fail_on:
            raise RuntimeError("engine crashed")
        return self.data

    def stop(self) -> None:
        self.stopped += 1


def word_data(words: list[tuple[str, float]], line_num: int = 1) -> Dict[str, List[Any]]:
    """Build ``image_to_data`` columns for one line of *words*."""
    count = len(words)
    return {
        "level": [5] * count,
        "block_num": [1] * count,
        "par_num": [1] * count,
        "line_num": [line_num] * count,
        "text": [text for text, _ in words],
        "conf": [conf for _, conf in words],
        "left": [i * 60 for i in range(count)],
        "top": [10] * count,
        "width": [50] * count,
        "height": [20] * count,
    }
