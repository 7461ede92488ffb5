"""Notification sink that keeps toolbar badge state for a page."""

import logging
from typing import Dict, Optional

from ...domain.models.verification import PROBLEM_RATINGS, Rating

logger = logging.getLogger(__name__)

BADGE_COLOR = "#6366f1"  # indigo
BADGE_ISSUE_COLOR = "#ef4444"  # red


class BadgeNotificationSink:
    """Tracks claim counts and ratings the way the toolbar badge shows them."""

    def __init__(self):
        self.claim_count = 0
        self.url: Optional[str] = None
        self.ratings: Dict[str, Rating] = {}

    @property
    def badge_text(self) -> str:
        return str(self.claim_count) if self.claim_count > 0 else ""

    @property
    def has_issues(self) -> bool:
        return any(rating in PROBLEM_RATINGS for rating in self.ratings.values())

    @property
    def badge_color(self) -> str:
        return BADGE_ISSUE_COLOR if self.has_issues else BADGE_COLOR

    def page_scanned(self, claim_count: int, url: str) -> None:
        self.claim_count = claim_count
        self.url = url
        logger.info(f"🏷️ Page scanned: {claim_count} claims on {url or 'page'}")

    def claim_verified(self, claim_id: str, rating: Rating) -> None:
        self.ratings[claim_id] = rating
        logger.debug(f"Badge update: {claim_id} -> {rating.value}")

    def summary(self) -> Dict[str, int]:
        """Count of claims per rating."""
        counts: Dict[str, int] = {}
        for rating in self.ratings.values():
            counts[rating.value] = counts.get(rating.value, 0) + 1
        return counts
