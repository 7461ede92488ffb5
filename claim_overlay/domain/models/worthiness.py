"""Domain model for claim-worthiness scoring results."""

from typing import List

from pydantic import BaseModel, Field


class WorthinessResult(BaseModel):
    """Outcome of scoring one candidate span. Transient, never stored."""

    score: int = Field(..., description="Signed heuristic score")
    passed: bool = Field(..., description="Whether the span is accepted as a claim")
    reasons: List[str] = Field(default_factory=list, description="Human-readable scoring reasons")
    signals: List[str] = Field(default_factory=list, description="Positive signal categories that fired")

    class Config:
        frozen = True

    @classmethod
    def rejected(cls, reason: str) -> "WorthinessResult":
        """Build an immediate rejection with score 0."""
        return cls(score=0, passed=False, reasons=[reason])
