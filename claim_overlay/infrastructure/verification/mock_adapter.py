"""Offline verification provider with deterministic, keyword-driven ratings."""

import asyncio
import hashlib
import logging
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, Field

from ...domain.models.claim import Claim
from ...domain.models.verification import Evidence, Rating, Verification
from ...domain.ports.verification_provider import ProviderHealth, VerificationProvider

logger = logging.getLogger(__name__)

# (name, url, peer reviewed)
MOCK_SOURCES: List[Tuple[str, str, bool]] = [
    ("Centers for Disease Control and Prevention", "https://www.cdc.gov", False),
    ("World Health Organization", "https://www.who.int", False),
    ("PubMed / National Library of Medicine", "https://pubmed.ncbi.nlm.nih.gov", False),
    ("New England Journal of Medicine", "https://www.nejm.org", True),
    ("The Lancet", "https://www.thelancet.com", True),
    ("U.S. Food and Drug Administration", "https://www.fda.gov", False),
    ("Cochrane Library", "https://www.cochranelibrary.com", False),
]

RATING_KEYWORDS: List[Tuple[str, Rating, float]] = [
    ("vaccine effective", Rating.VERIFIED, 0.9),
    ("cdc recommends", Rating.VERIFIED, 0.88),
    ("fda approved", Rating.VERIFIED, 0.92),
    ("clinical trial", Rating.MOSTLY_TRUE, 0.75),
    ("peer reviewed", Rating.MOSTLY_TRUE, 0.8),
    ("meta-analysis", Rating.VERIFIED, 0.85),
    ("cure cancer", Rating.MOSTLY_FALSE, 0.85),
    ("miracle cure", Rating.FALSE, 0.9),
    ("100% effective", Rating.MOSTLY_FALSE, 0.8),
    ("doctors don't want", Rating.FALSE, 0.88),
    ("big pharma", Rating.OPINION, 0.7),
    ("some studies", Rating.MIXED, 0.6),
    ("may help", Rating.UNVERIFIED, 0.5),
    ("could prevent", Rating.UNVERIFIED, 0.55),
    ("research suggests", Rating.MIXED, 0.65),
]

# Fallback distribution, weighted toward the middle ratings
DEFAULT_WEIGHTS: List[Tuple[Rating, int]] = [
    (Rating.VERIFIED, 15),
    (Rating.MOSTLY_TRUE, 25),
    (Rating.MIXED, 20),
    (Rating.UNVERIFIED, 20),
    (Rating.MOSTLY_FALSE, 10),
    (Rating.FALSE, 5),
    (Rating.OPINION, 5),
]

SUMMARIES: Dict[Rating, str] = {
    Rating.VERIFIED: "This claim is supported by official health authority data and peer-reviewed research.",
    Rating.MOSTLY_TRUE: "This claim is largely accurate but may lack some nuance or context.",
    Rating.MIXED: "Evidence on this claim is mixed, with studies showing varying results.",
    Rating.UNVERIFIED: "We could not find sufficient evidence to verify this claim.",
    Rating.MOSTLY_FALSE: "This claim is mostly inaccurate based on available evidence.",
    Rating.FALSE: "This claim is false according to scientific consensus and official data.",
    Rating.OPINION: "This appears to be an opinion or value judgment rather than a verifiable fact.",
    Rating.OUTDATED: "Newer research has superseded the data in this claim.",
}

SUPPORTING_EXCERPT = "Current evidence supports this finding, with multiple studies confirming the reported statistics."
REFUTING_EXCERPT = "The evidence does not support this claim. Studies show significantly different results."
NUANCE_CAVEAT = "Individual results may vary based on health conditions."


class MockVerificationConfig(BaseModel):
    """Configuration for the mock provider."""

    delay: float = Field(default=0.0, description="Simulated latency per batch in seconds")


def _digest(text: str) -> int:
    return int(hashlib.sha256(text.encode("utf-8")).hexdigest(), 16)


def determine_rating(text: str) -> Tuple[Rating, float]:
    """Rating and confidence for a claim; the same text always gets the same answer."""
    normalized = text.lower()
    for keyword, rating, confidence in RATING_KEYWORDS:
        if keyword in normalized:
            return rating, confidence

    digest = _digest(normalized)
    total = sum(weight for _, weight in DEFAULT_WEIGHTS)
    point = digest % total
    for rating, weight in DEFAULT_WEIGHTS:
        if point < weight:
            return rating, 0.5 + (digest % 40) / 100
        point -= weight
    return Rating.UNVERIFIED, 0.5


class MockVerificationAdapter(VerificationProvider):
    """Verification provider for development and offline runs."""

    def __init__(self, config: Optional[MockVerificationConfig] = None, provider_name: str = "mock"):
        self._config = config or MockVerificationConfig()
        self._name = provider_name
        self._initialized = False

    @property
    def provider_name(self) -> str:
        return self._name

    async def initialize(self) -> None:
        self._initialized = True

    async def shutdown(self) -> None:
        self._initialized = False

    async def verify_claims(self, claims: List[Claim], url: Optional[str] = None) -> Dict[str, Verification]:
        if not self._initialized:
            raise RuntimeError("Provider not initialized")
        if self._config.delay:
            await asyncio.sleep(self._config.delay)
        results = {claim.id: self._verify(claim) for claim in claims}
        logger.info(f"🎭 Mock-verified {len(results)} claims")
        return results

    async def verify_claim(self, claim: Claim, url: Optional[str] = None) -> Verification:
        results = await self.verify_claims([claim], url)
        return results[claim.id]

    async def health(self) -> ProviderHealth:
        return ProviderHealth(available=self._initialized, services={"mock": self._initialized})

    def _verify(self, claim: Claim) -> Verification:
        rating, confidence = determine_rating(claim.text)
        supports = rating in (Rating.VERIFIED, Rating.MOSTLY_TRUE)
        digest = _digest(claim.normalized_text)
        count = 1 + digest % 3
        start = digest % len(MOCK_SOURCES)
        evidence = []
        for offset in range(count):
            name, url, peer_reviewed = MOCK_SOURCES[(start + offset) % len(MOCK_SOURCES)]
            evidence.append(Evidence(
                source_name=name,
                url=url,
                excerpt=SUPPORTING_EXCERPT if supports else REFUTING_EXCERPT,
                peer_reviewed=peer_reviewed,
                supports=supports,
            ))
        caveats = [NUANCE_CAVEAT] if rating in (Rating.MIXED, Rating.MOSTLY_TRUE) else []
        return Verification(
            claim_id=claim.id,
            rating=rating,
            confidence=confidence,
            summary=SUMMARIES[rating],
            evidence=evidence,
            caveats=caveats,
        )
