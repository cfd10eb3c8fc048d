"""
Tests for confidence scoring and currency formatting.
"""

import pytest

from valuation_client.scoring import confidence_label, format_currency, score_confidence


def test_empty_wizard_scores_base():
    assert score_confidence({}) == 30


def test_step1_only():
    assert score_confidence({"step1": {"businessName": "Acme"}}) == 50


def test_zero_values_still_count_as_provided():
    wizard = {
        "step1": {},
        "step2": {"revenue": 0, "monthlyBurnRate": 0, "fundingRaised": 0},
    }
    assert score_confidence(wizard) == 30 + 20 + 15 + 10 + 5


def test_skipped_steps_do_not_score():
    wizard = {
        "step1": {},
        "step2": {"revenue": 100, "skipFinancials": True},
        "step3": {"customerCount": 5, "skipTraction": True},
        "step4": {"websiteUrl": "https://x.example", "skipExtras": True},
    }
    assert score_confidence(wizard) == 50


def test_full_wizard_is_capped_at_100():
    wizard = {
        "step1": {"businessName": "Acme"},
        "step2": {"revenue": 1, "monthlyBurnRate": 1, "fundingRaised": 1},
        "step3": {"customerCount": 1, "growthRate": 1, "uniqueValue": "x"},
        "step4": {"uploadedFiles": ["deck.pdf"], "linkedinUrl": "l", "websiteUrl": "w"},
    }
    # 30 + 20 + 30 + 25 + 15 = 120 before the cap
    assert score_confidence(wizard) == 100


def test_empty_strings_and_lists_do_not_score():
    wizard = {"step3": {"uniqueValue": ""}, "step4": {"uploadedFiles": [], "linkedinUrl": ""}}
    assert score_confidence(wizard) == 30


@pytest.mark.parametrize(
    "score, label",
    [(100, "High Confidence"), (80, "High Confidence"), (79, "Good Confidence"), (60, "Good Confidence"),
     (45, "Moderate Confidence"), (39, "Initial Estimate")],
)
def test_confidence_label(score, label):
    assert confidence_label(score) == label


@pytest.mark.parametrize(
    "amount, text",
    [
        (2_340_000_000, "$2.34B"),
        (12_000_000, "$12.00M"),
        (950_000, "$950K"),
        (999, "$999"),
        (0, "$0"),
    ],
)
def test_format_currency(amount, text):
    assert format_currency(amount) == text
