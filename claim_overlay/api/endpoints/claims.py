"""Claim extraction, scoring and verification endpoints."""

import logging
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from ...domain.models.claim import Claim, ClaimOrigin
from ...domain.models.settings import ExtractionMode
from ...domain.models.worthiness import WorthinessResult
from ...domain.ports.verification_provider import ClaimPayload, VerificationProvider
from ...domain.services.claim_extractor import ClaimExtractor
from ...domain.services.span_locator import SpanLocator
from ...domain.services.text_scanner import TextScanner
from ...domain.services.worthiness_scorer import WorthinessScorer
from ...infrastructure.dependencies import get_scorer, get_verification_provider
from ...infrastructure.host.soup_page import SoupHostPage

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/claims", tags=["claims"])


class ExtractRequest(BaseModel):
    """Request model for claim extraction."""

    html: str = Field(..., description="Page HTML")
    url: str = Field(default="", description="Page URL")
    mode: Optional[ExtractionMode] = Field(None, description="Extraction mode override")


class ExtractedClaim(BaseModel):
    """A claim with its score and document rects."""

    claim: Claim = Field(..., description="Extracted claim")
    score: int = Field(..., description="Worthiness score")
    reasons: List[str] = Field(default_factory=list, description="Scoring reasons")
    rects: List[Dict[str, float]] = Field(default_factory=list, description="Document-relative rects")


class ExtractResponse(BaseModel):
    """Response model for claim extraction."""

    claims: List[ExtractedClaim] = Field(..., description="Accepted claims, best first")


class ScoreRequest(BaseModel):
    """Request model for scoring a single span."""

    text: str = Field(..., description="Candidate text")
    mode: Optional[ExtractionMode] = Field(None, description="Extraction mode override")


class VerifyRequest(BaseModel):
    """Request model for verification, in the collaborator's wire shape."""

    claims: List[ClaimPayload] = Field(..., description="Claims to verify")
    url: Optional[str] = Field(None, description="Page URL")


def _scorer_for(base: WorthinessScorer, mode: Optional[ExtractionMode]) -> WorthinessScorer:
    if mode is None or mode == base.mode:
        return base
    return WorthinessScorer(base.weights, mode)


@router.post("/extract", response_model=ExtractResponse)
async def extract_claims(
    request: ExtractRequest,
    scorer: WorthinessScorer = Depends(get_scorer),
) -> ExtractResponse:
    """Extract claims from an HTML document.

    Args:
        request: HTML and page URL

    Returns:
        Accepted claims with their rects in a headless layout
    """
    page = SoupHostPage(request.html, url=request.url)
    extractor = ClaimExtractor(TextScanner(page.layout), _scorer_for(scorer, request.mode))
    locator = SpanLocator(page.layout, page.body)

    claims = []
    for detected in extractor.extract(page.body, request.url):
        result = locator.locate(detected.claim.text, detected.source_range)
        claims.append(ExtractedClaim(
            claim=detected.claim,
            score=detected.worthiness.score,
            reasons=detected.worthiness.reasons,
            rects=[rect.to_dict() for rect in result.rects],
        ))
    logger.info(f"🔍 Extracted {len(claims)} claims from {request.url or 'document'}")
    return ExtractResponse(claims=claims)


@router.post("/score", response_model=WorthinessResult)
async def score_text(
    request: ScoreRequest,
    scorer: WorthinessScorer = Depends(get_scorer),
) -> WorthinessResult:
    """Score a candidate span for claim-worthiness."""
    return _scorer_for(scorer, request.mode).score(request.text)


@router.post("/verify")
async def verify_claims(
    request: VerifyRequest,
    provider: VerificationProvider = Depends(get_verification_provider),
) -> Dict[str, List[Dict]]:
    """Verify claims through the configured provider.

    Raises:
        HTTPException: If the request is empty or the provider fails
    """
    if not request.claims:
        raise HTTPException(status_code=400, detail="No claims provided")
    blank = [item.id for item in request.claims if not item.text.strip()]
    if blank:
        raise HTTPException(status_code=400, detail=f"Claims without text: {', '.join(blank)}")

    origin = ClaimOrigin.from_url(request.url or "")
    claims = [Claim(id=item.id, text=item.text, origin=origin) for item in request.claims]
    try:
        results = await provider.verify_claims(claims, request.url)
    except Exception as e:
        logger.error(f"❌ Verification failed: {e}")
        raise HTTPException(status_code=500, detail=f"Verification failed: {str(e)}")

    return {"verifications": [results[claim.id].to_wire() for claim in claims if claim.id in results]}
