"""Tests for the toolbar badge notification sink."""

from claim_overlay.domain.models.verification import Rating
from claim_overlay.infrastructure.notifications.badge_sink import BADGE_COLOR, BADGE_ISSUE_COLOR


def test_empty_badge(sink):
    assert sink.badge_text == ""
    assert sink.badge_color == BADGE_COLOR


def test_scan_sets_count(sink):
    sink.page_scanned(4, "https://news.example.com/a")

    assert sink.badge_text == "4"
    assert sink.url == "https://news.example.com/a"


def test_problem_ratings_turn_badge_red(sink):
    """Any false, mostly false or outdated claim flags the page."""
    sink.claim_verified("c1", Rating.VERIFIED)
    assert not sink.has_issues

    sink.claim_verified("c2", Rating.OUTDATED)
    assert sink.has_issues
    assert sink.badge_color == BADGE_ISSUE_COLOR


def test_reverification_replaces_rating(sink):
    sink.claim_verified("c1", Rating.FALSE)
    sink.claim_verified("c1", Rating.VERIFIED)

    assert not sink.has_issues
    assert sink.summary() == {"verified": 1}
