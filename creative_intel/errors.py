"""Exceptions raised by the screenshot analysis pipeline."""

from __future__ import annotations


class CreativeAnalysisError(Exception):
    """Base class for all pipeline errors."""


class ImageLoadError(CreativeAnalysisError):
    """Raised when a screenshot cannot be fetched or decoded."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"Failed to load image {_shorten(url)}: {reason}")
        self.url = url
        self.reason = reason


class OcrError(CreativeAnalysisError):
    """Raised when text recognition fails."""


class OcrInitializationError(OcrError):
    """Raised when the text recognition engine cannot be started."""


class AnalysisFailure(CreativeAnalysisError):
    """Raised when any stage of a single screenshot analysis fails."""

    def __init__(self, screenshot_index: int, cause: BaseException) -> None:
        super().__init__(f"Screenshot {screenshot_index} failed: {cause}")
        self.screenshot_index = screenshot_index
        self.cause = cause


class InsightGenerationError(CreativeAnalysisError):
    """Raised when creative insights cannot be generated."""


def _shorten(url: str, limit: int = 120) -> str:
    # data URIs can be megabytes long
    return url if len(url) <= limit else f"{url[:limit]}..."
