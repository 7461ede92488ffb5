"""Domain model for claims detected in page text."""

import itertools
import time
from datetime import datetime
from enum import Enum
from typing import Any, List, Optional
from urllib.parse import urlparse

from pydantic import BaseModel, Field, model_validator

from .geometry import TextRange
from .worthiness import WorthinessResult

_claim_counter = itertools.count(1)


def generate_claim_id(prefix: str = "claim") -> str:
    """Generate a session-unique claim identifier."""
    return f"{prefix}_{int(time.time() * 1000)}_{next(_claim_counter)}"


def normalize_claim_text(text: str) -> str:
    """Normalize claim text for deduplication."""
    return " ".join(text.lower().split())


class ClaimCategory(str, Enum):
    """Kinds of claims the extractor recognises."""

    STATISTIC = "statistic"
    ASSERTION = "assertion"
    QUOTED_ATTRIBUTION = "quoted_attribution"
    OTHER = "other"


class EntityType(str, Enum):
    """Entity kinds recognised inside a claim."""

    STATISTIC = "statistic"
    ORGANIZATION = "organization"


class Entity(BaseModel):
    """A statistic or organization mentioned by a claim."""

    text: str = Field(..., description="Matched entity text")
    type: EntityType = Field(..., description="Entity kind")

    class Config:
        frozen = True


class ClaimOrigin(BaseModel):
    """Where and when a claim was captured."""

    url: str = Field(default="", description="Page URL the claim came from")
    host: str = Field(default="", description="Host name of the page")
    captured_at: datetime = Field(default_factory=datetime.utcnow, description="Capture time")

    class Config:
        frozen = True

    @classmethod
    def from_url(cls, url: str) -> "ClaimOrigin":
        """Build an origin from a page URL."""
        return cls(url=url, host=urlparse(url).hostname or "")


class Claim(BaseModel):
    """Represents a span of page text flagged as a verifiable assertion."""

    id: str = Field(default_factory=generate_claim_id, description="Opaque unique identifier")
    text: str = Field(..., min_length=1, description="Raw claim text")
    normalized_text: str = Field(default="", description="Lower-cased, whitespace-collapsed text")
    category: ClaimCategory = Field(default=ClaimCategory.OTHER, description="Claim category")
    entities: List[Entity] = Field(default_factory=list, description="Entities found in the text")
    origin: ClaimOrigin = Field(default_factory=ClaimOrigin, description="Capture origin")

    class Config:
        """Pydantic model configuration."""
        frozen = True  # Immutable model
        json_schema_extra = {
            "example": {
                "id": "claim_1700000000000_1",
                "text": "A new study shows the drug reduces risk by 45% in adults.",
                "normalized_text": "a new study shows the drug reduces risk by 45% in adults.",
                "category": "statistic",
                "origin": {"url": "https://example.com/health", "host": "example.com"},
            }
        }

    @model_validator(mode="before")
    @classmethod
    def _fill_normalized_text(cls, data: Any) -> Any:
        if isinstance(data, dict) and not data.get("normalized_text") and data.get("text"):
            data = {**data, "normalized_text": normalize_claim_text(data["text"])}
        return data


class CandidateSpan(BaseModel):
    """Raw span produced by the candidate extractor, before scoring."""

    text: str = Field(..., description="Sentence text of the span")
    unit_index: int = Field(..., description="Index of the text unit in scan order")
    start: int = Field(..., ge=0, description="Start offset inside the text unit")
    end: int = Field(..., ge=0, description="End offset inside the text unit")
    category: ClaimCategory = Field(..., description="Category implied by the pattern family")
    pattern: str = Field(default="", description="Pattern that produced the match")

    class Config:
        frozen = True


class DetectedClaim:
    """A claim together with its capture-time range and score.

    Ranges point at live document nodes, so this pairs the immutable claim with
    them instead of serialising them into it.
    """

    def __init__(
        self,
        claim: Claim,
        source_range: Optional[TextRange] = None,
        worthiness: Optional[WorthinessResult] = None,
    ):
        self.claim = claim
        self.source_range = source_range
        self.worthiness = worthiness

    def __repr__(self) -> str:
        return f"DetectedClaim(id={self.claim.id!r}, text={self.claim.text[:40]!r})"
