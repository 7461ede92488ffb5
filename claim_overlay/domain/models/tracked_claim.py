"""Domain model for the live session record of a highlighted claim."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from bs4 import Tag

from .geometry import Rect, TextRange
from .verification import Rating, Verification


@dataclass
class TrackedClaim:
    """Links a claim to its current overlays and verification state."""

    claim_id: str
    claim_text: str

    overlays: List[Tag] = field(default_factory=list)
    verification: Optional[Verification] = None
    # Last successful location, in document coordinates
    snapshot: List[Rect] = field(default_factory=list)
    source_range: Optional[TextRange] = None

    @property
    def rating(self) -> Rating:
        """Current rating; unverified until a verification lands."""
        return self.verification.rating if self.verification else Rating.UNVERIFIED

    @property
    def has_visual(self) -> bool:
        """Whether the claim has ever been drawn."""
        return bool(self.overlays) or bool(self.snapshot)

    @property
    def is_verified(self) -> bool:
        return self.verification is not None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a dictionary for API responses."""
        return {
            "claim_id": self.claim_id,
            "claim_text": self.claim_text,
            "rating": self.rating.value,
            "overlay_count": len(self.overlays),
            "rects": [rect.to_dict() for rect in self.snapshot],
            "verification": self.verification.model_dump(mode="json") if self.verification else None,
        }
