"""Creative strategy insights from a hosted text-generation model."""

from __future__ import annotations

import json
import logging
import os
import time
from datetime import datetime, timezone
from typing import Any, Sequence

import requests
from tenacity import (  # type: ignore[import-untyped]
    Retrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from ..errors import InsightGenerationError
from ..io.models import AppContext, CreativeInsights, ScreenshotAnalysisResult
from .summary import prepare_analysis_summary

logger = logging.getLogger(__name__)

_DEFAULT_MODEL = "gpt-4o-mini"
_DEFAULT_BASE_URL = "https://api.openai.com/v1"
_MAX_TOKENS = 2500
_TEMPERATURE = 0.7
_TIMEOUT = 60.0

_SYSTEM_PROMPT = (
    "You are an expert ASO creative strategist. "
    "Always return valid JSON only, no markdown formatting."
)

_RESPONSE_SHAPE = """{
  "opportunities": [{"text": "...", "severity": "major", "category": "messaging"}],
  "test_plan": {
    "variants": [{"name": "Variant A", "description": "...", "changes": ["..."], "expected_impact": "..."}],
    "hypotheses": ["..."],
    "metrics": ["..."],
    "duration_recommendation": "2-3 weeks",
    "confidence_level": "high"
  },
  "narratives": {
    "vertical_positioning": "...",
    "theme_summary": "...",
    "messaging_hierarchy": "...",
    "seasonality": "...",
    "competitive_angle": "..."
  },
  "weaknesses": [{"area": "...", "severity": "high", "description": "...", "recommendation": "..."}],
  "screenshot_theme_summary": {
    "dominant_themes": ["modern", "vibrant"],
    "color_strategy": "...",
    "text_density_assessment": "...",
    "visual_consistency": "...",
    "brand_coherence": "..."
  }
}"""

_SECTIONS = (
    "opportunities",
    "test_plan",
    "narratives",
    "weaknesses",
    "screenshot_theme_summary",
)


class RetryableHTTPStatusError(Exception):
    """Raised for HTTP status codes that should trigger a retry."""

    def __init__(self, status_code: int) -> None:
        super().__init__(f"Server returned status {status_code}")
        self.status_code = status_code


_retryer = Retrying(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=1, max=8),
    retry=retry_if_exception_type(
        (requests.Timeout, requests.ConnectionError, RetryableHTTPStatusError)
    ),
    before_sleep=before_sleep_log(logger, logging.DEBUG),
    reraise=True,
)


def build_prompt(app: AppContext, results: Sequence[ScreenshotAnalysisResult]) -> str:
    """Return the user prompt describing *app* and its screenshot analysis."""
    rating = f"{app.rating:.1f}/5.0" if app.rating is not None else "n/a"
    return f"""You are an expert App Store Optimization (ASO) creative strategist analyzing app screenshots and visual assets.

App Details:
- Name: {app.name}
- Category: {app.category}
- Developer: {app.developer}
- Current Rating: {rating}

Screenshot Analysis Summary:
{prepare_analysis_summary(results)}
Provide strategic creative intelligence with:
1. Opportunities (5-8 items), each with text, severity (minor/moderate/major/critical) and category (messaging/visual/layout/theme/cta).
2. A test plan: 2-3 variants, 3-4 hypotheses, 4-6 metrics, a duration recommendation and a confidence level (low/medium/high).
3. Narratives: vertical positioning, theme summary, messaging hierarchy, seasonality and competitive angle.
4. Weaknesses (3-5 items), each with area, severity (low/medium/high), description and recommendation.
5. A screenshot theme summary: dominant themes (3-5 tags), color strategy, text density assessment, visual consistency and brand coherence.

Write in a professional, data-driven consulting tone. Be specific and actionable.

Return ONLY a valid JSON object with this exact structure:
{_RESPONSE_SHAPE}"""


def generate_creative_insights(
    app: AppContext,
    results: Sequence[ScreenshotAnalysisResult],
    api_key: str | None = None,
    model: str | None = None,
) -> CreativeInsights:
    """Ask the text-generation model for creative insights on *results*."""
    started = time.perf_counter()
    key = api_key or os.environ.get("OPENAI_API_KEY")
    if not key:
        raise InsightGenerationError("OPENAI_API_KEY is not set")

    payload = {
        "model": model or os.environ.get("OPENAI_MODEL", _DEFAULT_MODEL),
        "messages": [
            {"role": "system", "content": _SYSTEM_PROMPT},
            {"role": "user", "content": build_prompt(app, results)},
        ],
        "max_tokens": _MAX_TOKENS,
        "temperature": _TEMPERATURE,
        "response_format": {"type": "json_object"},
    }
    logger.info("Requesting creative insights for %s (%d screenshots)", app.name, len(results))

    try:
        data = _retryer(lambda: _post_completion(payload, key))
    except RetryableHTTPStatusError as exc:
        raise InsightGenerationError(f"Failed to generate creative insights: {exc}") from exc
    except requests.RequestException as exc:
        raise InsightGenerationError(f"Failed to generate creative insights: {exc}") from exc

    parsed = parse_insights_content(_message_content(data))
    elapsed = int((time.perf_counter() - started) * 1000)
    logger.info("Generated creative insights in %d ms", elapsed)
    return CreativeInsights(
        opportunities=list(parsed.get("opportunities") or []),
        test_plan=dict(parsed.get("test_plan") or {}),
        narratives=dict(parsed.get("narratives") or {}),
        weaknesses=list(parsed.get("weaknesses") or []),
        screenshot_theme_summary=dict(parsed.get("screenshot_theme_summary") or {}),
        generated_at=datetime.now(timezone.utc),
        processing_time=elapsed,
    )


def parse_insights_content(content: str | None) -> dict[str, Any]:
    """Decode the model's JSON reply, rejecting empty or malformed output."""
    if not content or not content.strip():
        raise InsightGenerationError("Empty response from the text-generation model")
    try:
        parsed = json.loads(content)
    except json.JSONDecodeError as exc:
        raise InsightGenerationError(f"Model returned invalid JSON: {exc}") from exc
    if not isinstance(parsed, dict):
        raise InsightGenerationError("Model returned JSON that is not an object")
    missing = [section for section in _SECTIONS if section not in parsed]
    if missing:
        logger.warning("Insight response is missing sections: %s", ", ".join(missing))
    return parsed


def _post_completion(payload: dict[str, Any], api_key: str) -> dict[str, Any]:
    base_url = os.environ.get("OPENAI_BASE_URL", _DEFAULT_BASE_URL).rstrip("/")
    response = requests.post(
        f"{base_url}/chat/completions",
        json=payload,
        headers={"Authorization": f"Bearer {api_key}", "Content-Type": "application/json"},
        timeout=_TIMEOUT,
    )
    if response.status_code == 429 or 500 <= response.status_code < 600:
        raise RetryableHTTPStatusError(response.status_code)
    response.raise_for_status()
    return response.json()


def _message_content(data: dict[str, Any]) -> str | None:
    try:
        return data["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError):
        return None
