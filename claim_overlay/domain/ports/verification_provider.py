"""Protocol for the external verification collaborator."""

from typing import Dict, List, Optional, Protocol

from pydantic import BaseModel, ConfigDict, Field

from ..models.claim import Claim
from ..models.verification import Verification


class ClaimPayload(BaseModel):
    """Wire form of one claim sent for verification."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., description="Claim identifier")
    text: str = Field(..., description="Claim text")
    context: str = Field(default="", description="Context for the verifier")
    source_url: Optional[str] = Field(None, alias="sourceUrl", description="Page URL")

    @classmethod
    def from_claim(cls, claim: Claim, url: Optional[str] = None) -> "ClaimPayload":
        return cls(id=claim.id, text=claim.text, context=claim.normalized_text, source_url=url)


class ProviderHealth(BaseModel):
    """Availability report of a verification provider."""

    available: bool = Field(..., description="Whether the provider answered")
    services: Dict[str, bool] = Field(default_factory=dict, description="Per-service availability")


class VerificationProvider(Protocol):
    """Protocol defining the interface for verification collaborators."""

    async def initialize(self) -> None:
        """Initialize the provider."""
        ...

    async def shutdown(self) -> None:
        """Clean up resources."""
        ...

    async def verify_claims(self, claims: List[Claim], url: Optional[str] = None) -> Dict[str, Verification]:
        """Verify a batch of claims, returning one result per claim id.

        Never raises on transport failure: unreachable collaborators yield a
        synthesized unverified result for every claim in the batch.
        """
        ...

    async def verify_claim(self, claim: Claim, url: Optional[str] = None) -> Verification:
        """Verify a single claim."""
        ...

    async def health(self) -> ProviderHealth:
        """Report whether the collaborator is reachable."""
        ...

    @property
    def provider_name(self) -> str:
        """Get the provider name."""
        ...
