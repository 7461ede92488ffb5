"""Protocol for outbound notifications to the toolbar and popup surfaces."""

from typing import Protocol

from ..models.verification import Rating


class NotificationSink(Protocol):
    """Receives page-level events for badge and summary display."""

    def page_scanned(self, claim_count: int, url: str) -> None:
        """A scan finished with claim_count claims."""
        ...

    def claim_verified(self, claim_id: str, rating: Rating) -> None:
        """A claim was (re)verified."""
        ...
