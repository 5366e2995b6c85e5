"""App-store screenshot creative analysis."""

from .pipeline.analysis import analyze_batch, analyze_screenshot, get_batch_summary

__all__ = ["analyze_batch", "analyze_screenshot", "get_batch_summary"]
