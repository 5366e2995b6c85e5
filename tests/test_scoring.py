"""Tests for category rubrics and the creative score card."""

import dataclasses

import pytest

from creative_intel.pipeline.analysis import analyze_screenshot
from creative_intel.scoring.rubric import (
    available_categories,
    calculate_weighted_score,
    get_performance_tier,
    get_scoring_rubric,
)
from creative_intel.scoring.score_card import build_score_card, calculate_metric_scores


@pytest.fixture
def dark_result(dark_blue_path, rng):
    return analyze_screenshot(dark_blue_path, 0, rng=rng)


def test_rubric_lookup_is_case_insensitive_with_fallback():
    assert get_scoring_rubric("Games").category == "games"
    assert get_scoring_rubric("unknown genre").category == "default"
    assert get_scoring_rubric(None).category == "default"
    assert "default" not in available_categories()


def test_rubric_weights_sum_to_one():
    for category in available_categories() + ["default"]:
        weights = get_scoring_rubric(category).weights
        assert sum(weights.values()) == pytest.approx(1.0)


def test_weighted_score_uses_category_weights():
    scores = {"visual": 100, "text": 0, "messaging": 0, "engagement": 0}

    assert calculate_weighted_score("games", scores) == 45
    assert calculate_weighted_score("productivity", scores) == 25


def test_weighted_score_is_clamped():
    scores = {"visual": 500, "text": 500, "messaging": 500, "engagement": 500}

    assert calculate_weighted_score("default", scores) == 100


@pytest.mark.parametrize(
    ("score", "tier"), [(95, "excellent"), (80, "good"), (66, "average"), (10, "poor")]
)
def test_performance_tiers(score, tier):
    assert get_performance_tier("games", score) == tier


def test_metric_scores_for_dark_screenshot(dark_result):
    scores = calculate_metric_scores([dark_result])

    # one color (20) and a layout score of 40
    assert scores["visual"] == round(20 * 0.4 + 40 * 0.6)
    assert scores["text"] == 60
    assert scores["engagement"] == 60
    assert scores["messaging"] == 60


def test_metric_scores_empty():
    assert calculate_metric_scores([]) == {
        "visual": 0,
        "text": 0,
        "messaging": 0,
        "engagement": 0,
    }


def test_engagement_rewards_vibrant_cta(dark_result):
    vivid = dataclasses.replace(
        dark_result,
        colors=dataclasses.replace(
            dark_result.colors, average_saturation=0.8, average_brightness=0.7
        ),
        layout=dataclasses.replace(dark_result.layout, has_cta=True, cta_position="bottom"),
    )

    assert calculate_metric_scores([vivid])["engagement"] == 85


def test_score_card_warns_about_short_listings(dark_result):
    card = build_score_card("Games", [dark_result])

    assert card.category == "games"
    assert 0 <= card.overall_score <= 100
    assert card.tier == get_performance_tier("games", card.overall_score)
    assert card.warnings and "at least 8" in card.warnings[0]
