"""Single owner of the tracked-claim map and the pending verification set."""

import logging
from typing import Callable, Dict, Iterator, List, Optional

from bs4 import Tag

from ..models.geometry import Rect, TextRange
from ..models.tracked_claim import TrackedClaim
from ..models.verification import Verification

logger = logging.getLogger(__name__)

RegistrationListener = Callable[[TrackedClaim], None]


class ClaimRegistry:
    """Holds every TrackedClaim of a page session.

    All reads and writes go through this object. Verifications that arrive
    for unknown ids wait in the pending set until the claim registers.
    """

    def __init__(self):
        self._claims: Dict[str, TrackedClaim] = {}
        self._pending: Dict[str, Verification] = {}
        self._listeners: List[RegistrationListener] = []

    def __contains__(self, claim_id: str) -> bool:
        return claim_id in self._claims

    def __len__(self) -> int:
        return len(self._claims)

    def __iter__(self) -> Iterator[TrackedClaim]:
        return iter(list(self._claims.values()))

    def get(self, claim_id: str) -> Optional[TrackedClaim]:
        return self._claims.get(claim_id)

    def register(
        self,
        claim_id: str,
        claim_text: str,
        source_range: Optional[TextRange] = None,
    ) -> TrackedClaim:
        """Track a claim, or return the existing entry for the same id."""
        tracked = self._claims.get(claim_id)
        if tracked is not None:
            if source_range is not None:
                tracked.source_range = source_range
            return tracked

        tracked = TrackedClaim(claim_id=claim_id, claim_text=claim_text, source_range=source_range)
        self._claims[claim_id] = tracked
        logger.debug(f"Registered claim {claim_id}")
        for listener in list(self._listeners):
            listener(tracked)
        return tracked

    def remove(self, claim_id: str) -> Optional[TrackedClaim]:
        return self._claims.pop(claim_id, None)

    def clear(self) -> List[TrackedClaim]:
        """Forget every claim; returns what was tracked. Pending results are kept."""
        removed = list(self._claims.values())
        self._claims.clear()
        return removed

    def set_overlays(self, claim_id: str, overlays: List[Tag]) -> None:
        self._require(claim_id).overlays = list(overlays)

    def set_source_range(self, claim_id: str, source_range: Optional[TextRange]) -> None:
        self._require(claim_id).source_range = source_range

    def set_snapshot(self, claim_id: str, rects: List[Rect]) -> None:
        self._require(claim_id).snapshot = list(rects)

    def set_verification(self, claim_id: str, verification: Verification) -> TrackedClaim:
        tracked = self._require(claim_id)
        tracked.verification = verification
        return tracked

    # Pending verifications

    def hold_pending(self, verification: Verification) -> None:
        """Hold a verification for an id that is not tracked yet; newest wins."""
        self._pending[verification.claim_id] = verification

    def take_pending(self, claim_id: str) -> Optional[Verification]:
        return self._pending.pop(claim_id, None)

    def peek_pending(self, claim_id: str) -> Optional[Verification]:
        return self._pending.get(claim_id)

    def pending_ids(self) -> List[str]:
        return list(self._pending)

    # Listeners

    def add_registration_listener(self, listener: RegistrationListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    def _require(self, claim_id: str) -> TrackedClaim:
        tracked = self._claims.get(claim_id)
        if tracked is None:
            raise KeyError(f"Claim {claim_id} is not tracked")
        return tracked
