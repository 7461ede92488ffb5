"""Domain models for verification results and their visual vocabulary."""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

SERVICE_UNAVAILABLE_CAVEAT = "Backend service unavailable"


class Rating(str, Enum):
    """Possible verification outcomes, shared with collaborators and UI."""

    VERIFIED = "verified"  # Confirmed by authoritative sources
    MOSTLY_TRUE = "mostly_true"  # Accurate with minor issues
    MIXED = "mixed"  # Evidence points both ways
    UNVERIFIED = "unverified"  # Not (yet) checked, or cannot be
    MOSTLY_FALSE = "mostly_false"  # Largely contradicted
    FALSE = "false"  # Contradicted by evidence
    OPINION = "opinion"  # Not a factual claim
    OUTDATED = "outdated"  # Was true, superseded by newer evidence

    @classmethod
    def parse(cls, value: Optional[str]) -> "Rating":
        """Map a collaborator's rating string onto the vocabulary."""
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.UNVERIFIED


RATING_COLORS: Dict[Rating, str] = {
    Rating.VERIFIED: "#22c55e",  # green
    Rating.MOSTLY_TRUE: "#84cc16",  # lime
    Rating.MIXED: "#eab308",  # yellow
    Rating.UNVERIFIED: "#9ca3af",  # gray
    Rating.MOSTLY_FALSE: "#f97316",  # orange
    Rating.FALSE: "#ef4444",  # red
    Rating.OPINION: "#8b5cf6",  # purple
    Rating.OUTDATED: "#6b7280",  # dark gray
}

RATING_LABELS: Dict[Rating, str] = {
    Rating.VERIFIED: "Verified",
    Rating.MOSTLY_TRUE: "Mostly True",
    Rating.MIXED: "Mixed Evidence",
    Rating.UNVERIFIED: "Unverified",
    Rating.MOSTLY_FALSE: "Mostly False",
    Rating.FALSE: "False",
    Rating.OPINION: "Opinion",
    Rating.OUTDATED: "Outdated",
}

PROBLEM_RATINGS = frozenset({Rating.MOSTLY_FALSE, Rating.FALSE, Rating.OUTDATED})


def border_style_for(rating: Rating) -> str:
    """Only the not-yet-verified state is drawn dotted."""
    return "dotted" if rating == Rating.UNVERIFIED else "solid"


class Evidence(BaseModel):
    """A source the collaborator used for its judgment."""

    source_name: str = Field(..., description="Display name of the source")
    url: str = Field(default="", description="Link to the source")
    excerpt: str = Field(default="", description="Quoted passage, if any")
    published_at: Optional[datetime] = Field(None, description="Publication date")
    peer_reviewed: bool = Field(default=False, description="Whether the source is peer reviewed")
    supports: bool = Field(default=True, description="Whether the source supports the claim")

    class Config:
        frozen = True


class Verification(BaseModel):
    """The collaborator's judgment on a claim. Replaced, never mutated."""

    claim_id: str = Field(..., description="Identifier of the verified claim")
    rating: Rating = Field(..., description="Verification rating")
    confidence: float = Field(..., ge=0.0, le=1.0, description="Confidence between 0 and 1")
    summary: str = Field(default="", description="Short explanation of the rating")
    evidence: List[Evidence] = Field(default_factory=list, description="Evidence consulted")
    caveats: List[str] = Field(default_factory=list, description="Notes qualifying the rating")
    checked_at: datetime = Field(default_factory=datetime.utcnow, description="When the check completed")
    human_reviewed: bool = Field(default=False, description="Whether a human reviewed the rating")

    class Config:
        """Pydantic model configuration."""
        frozen = True  # Immutable model
        json_schema_extra = {
            "example": {
                "claim_id": "claim_1700000000000_1",
                "rating": "mostly_true",
                "confidence": 0.82,
                "summary": "Trial data support a reduction, though the effect size varies by cohort.",
                "evidence": [{"source_name": "The Lancet", "url": "https://www.thelancet.com", "peer_reviewed": True}],
                "caveats": ["Single trial"],
            }
        }

    @classmethod
    def unavailable(cls, claim_id: str, summary: Optional[str] = None) -> "Verification":
        """Result synthesized when the collaborator cannot be reached."""
        return cls(
            claim_id=claim_id,
            rating=Rating.UNVERIFIED,
            confidence=0.0,
            summary=summary or (
                "Unable to verify - backend service unavailable. "
                "Please ensure the backend server is running."
            ),
            caveats=[SERVICE_UNAVAILABLE_CAVEAT],
        )

    @property
    def is_problem(self) -> bool:
        """Ratings the badge flags as problematic."""
        return self.rating in PROBLEM_RATINGS

    @classmethod
    def from_wire(cls, data: Dict[str, Any]) -> "Verification":
        """Build a verification from the collaborator's camelCase payload."""
        rating = Rating.parse(data.get("rating"))
        supports = rating not in (Rating.FALSE, Rating.MOSTLY_FALSE)
        evidence = [
            Evidence(
                source_name=item.get("sourceName") or item.get("source_name") or "Unknown source",
                url=item.get("url") or "",
                excerpt=item.get("quote") or item.get("excerpt") or "",
                published_at=item.get("datePublished") or None,
                peer_reviewed=bool(item.get("peerReviewed", False)),
                supports=supports,
            )
            for item in data.get("evidence") or []
        ]
        fields: Dict[str, Any] = {
            "claim_id": data.get("claimId") or data.get("claim_id"),
            "rating": rating,
            "confidence": min(1.0, max(0.0, float(data.get("confidence") or 0.0))),
            "summary": data.get("summary") or "",
            "evidence": evidence,
            "caveats": data.get("caveats") or [],
            "human_reviewed": bool(data.get("humanReviewed", False)),
        }
        checked_at = data.get("checkedAt") or data.get("checked_at")
        if checked_at:
            fields["checked_at"] = checked_at
        return cls(**fields)

    def to_wire(self) -> Dict[str, Any]:
        """Serialize in the collaborator's camelCase shape."""
        return {
            "claimId": self.claim_id,
            "rating": self.rating.value,
            "confidence": self.confidence,
            "summary": self.summary,
            "evidence": [
                {
                    "sourceName": item.source_name,
                    "url": item.url,
                    "quote": item.excerpt,
                    "datePublished": item.published_at.isoformat() if item.published_at else None,
                    "peerReviewed": item.peer_reviewed,
                }
                for item in self.evidence
            ],
            "caveats": list(self.caveats),
            "checkedAt": self.checked_at.isoformat(),
        }
