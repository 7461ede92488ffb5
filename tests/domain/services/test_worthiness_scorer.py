"""Tests for the worthiness scorer."""

import pytest

from claim_overlay.domain.models.settings import ExtractionMode, ScoringWeights
from claim_overlay.domain.services.worthiness_scorer import JUNK_PATTERNS, WorthinessScorer

# Boilerplate that must never become a claim
JUNK_CORPUS = [
    "Click here to read the full report on vaccine safety.",
    "Subscribe to our newsletter for more!",
    "Sign up today and get 20% off your first order.",
    "© 2024 Example Media Group. All rights reserved.",
    "This site uses cookies to improve your experience. Accept all cookies to continue.",
    "Sponsored: These 5 foods doctors say you should never eat.",
    "You won't believe what this study found about coffee drinkers.",
    "Photo: Getty Images",
    "By John Smith, Senior Health Reporter",
    "Updated: March 3, 2024 at 10:45 AM",
    "5 min read",
    "Read our privacy policy and terms of service before continuing.",
    "Email address *",
    "const total = items.reduce((a, b) => a + b, 0);",
    "Limited-time offer: 50% off all supplements, use promo code HEALTH50.",
    "This article contains affiliate links; we may earn a commission.",
    "Share this article on Facebook and help spread the word.",
]

ACCEPTED = [
    "A new study shows the drug reduces risk by 45% in adults.",
    "According to the CDC, about 38 million Americans have diabetes, roughly 11 percent of the population.",
    "Researchers found that regular exercise reduces the risk of heart disease by 30 percent.",
    "The vaccine has been shown to prevent severe illness in most adults.",
]

REJECTED = [
    "I think this is the best coffee shop in town, honestly.",
    "Why do so many people still believe the earth is flat?",
    "The weather was pleasant and the streets were quiet that evening.",
    "Don't miss our exclusive interview with the lead researcher next week.",
]


@pytest.fixture
def scorer() -> WorthinessScorer:
    """Create a scorer with default weights."""
    return WorthinessScorer()


def test_scenario_a_statistic_with_trigger_is_accepted(scorer):
    """A statistic, a trigger phrase and an authority clear the threshold."""
    result = scorer.score("A new study shows the drug reduces risk by 45% in adults.")

    assert result.passed
    assert result.score >= 40
    assert result.score == 110
    assert {"statistic", "trigger", "authority", "verb_structure"} <= set(result.signals)


def test_scenario_b_newsletter_prompt_is_junk(scorer):
    """Junk patterns reject immediately with a zero score."""
    result = scorer.score("Subscribe to our newsletter for more!")

    assert not result.passed
    assert result.score == 0
    assert result.reasons[0].startswith("junk pattern")


@pytest.mark.parametrize("text", JUNK_CORPUS)
def test_junk_corpus_always_rejected(scorer, text):
    """Every boilerplate string matches a junk pattern and scores zero."""
    assert any(pattern.search(text) for pattern in JUNK_PATTERNS)
    result = scorer.score(text)
    assert not result.passed
    assert result.score == 0


@pytest.mark.parametrize("text", ACCEPTED)
def test_calibration_accepted(scorer, text):
    """Calibration sentences that must be accepted at the default threshold."""
    result = scorer.score(text)
    assert result.passed, result.reasons
    assert not scorer.is_junk(text)


@pytest.mark.parametrize("text", REJECTED)
def test_calibration_rejected(scorer, text):
    """Calibration sentences that must be rejected at the default threshold."""
    assert not scorer.score(text).passed


@pytest.mark.parametrize("text", ACCEPTED + REJECTED + JUNK_CORPUS)
def test_scoring_is_deterministic(text):
    """Identical input always yields the identical result."""
    first = WorthinessScorer().score(text)
    second = WorthinessScorer().score(text)
    assert first == second


def test_content_signal_is_required(scorer):
    """Verb structure and length alone never pass, whatever the threshold."""
    text = "The weather was pleasant and the streets were quiet that evening."
    permissive = WorthinessScorer(ScoringWeights(threshold=-100))

    result = permissive.score(text)
    assert not result.passed
    assert "no content signal" in result.reasons


def test_digit_heavy_text_is_tabular(scorer):
    """Spans dominated by digits are rejected as table data."""
    result = scorer.score("Totals: 1234 5678 9012 3456 7890 1234 5678.")
    assert not result.passed
    assert result.score == 0


def test_penalties_apply(scorer):
    """Questions and first-person openings are penalized."""
    question = scorer.score("Did the study show the drug reduces risk by 45% in adults?")
    statement = scorer.score("The study showed the drug reduces risk by 45% in adults.")
    assert question.score < statement.score
    assert any("question" in reason for reason in question.reasons)


def test_extraction_mode_shifts_threshold():
    """Minimal raises and aggressive lowers the acceptance threshold."""
    borderline = "The vaccine has been shown to prevent severe illness in most adults."

    assert WorthinessScorer(mode=ExtractionMode.MODERATE).score(borderline).passed
    assert not WorthinessScorer(mode=ExtractionMode.MINIMAL).score(borderline).passed
    assert WorthinessScorer(mode=ExtractionMode.AGGRESSIVE).threshold == 25


def test_mode_can_change_at_runtime(scorer):
    """The mode setter takes effect on the next score."""
    borderline = "The vaccine has been shown to prevent severe illness in most adults."
    scorer.mode = ExtractionMode.MINIMAL
    assert scorer.threshold == 55
    assert not scorer.score(borderline).passed


def test_custom_weights():
    """Weights are configuration, not constants."""
    weights = ScoringWeights(threshold=200)
    assert not WorthinessScorer(weights).score(ACCEPTED[0]).passed
