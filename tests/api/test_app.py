"""Tests for the FastAPI application."""

from typing import Dict, List, Optional

import pytest
from fastapi.testclient import TestClient

from claim_overlay.api.app import app
from claim_overlay.domain.models.claim import Claim
from claim_overlay.domain.models.verification import Rating, Verification
from claim_overlay.domain.services.worthiness_scorer import WorthinessScorer
from claim_overlay.infrastructure.dependencies import (
    ServiceContainer,
    get_scorer,
    get_service_container,
    get_verification_provider,
)
from claim_overlay.infrastructure.settings.env_settings import AppConfig

SCENARIO_A = "A new study shows the drug reduces risk by 45% in adults."
PAGE_HTML = f"""
<html><body>
<nav>Subscribe to our newsletter for more!</nav>
<h1>Trial results</h1>
<p>{SCENARIO_A}</p>
</body></html>
"""


class StubProvider:
    """Test provider implementation."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.calls: List[List[Claim]] = []

    @property
    def provider_name(self) -> str:
        return "stub"

    async def verify_claims(self, claims: List[Claim], url: Optional[str] = None) -> Dict[str, Verification]:
        if self.fail:
            raise RuntimeError("provider exploded")
        self.calls.append(list(claims))
        return {
            claim.id: Verification(claim_id=claim.id, rating=Rating.VERIFIED, confidence=0.9, summary="Confirmed.")
            for claim in claims
        }


@pytest.fixture
def stub_provider() -> StubProvider:
    return StubProvider()


@pytest.fixture
def client(stub_provider):
    """Create a test client with test dependencies."""

    async def provider_override():
        return stub_provider

    container = ServiceContainer(AppConfig())
    app.dependency_overrides[get_verification_provider] = provider_override
    app.dependency_overrides[get_scorer] = lambda: WorthinessScorer()
    app.dependency_overrides[get_service_container] = lambda: container
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_health_check(client):
    """Test health check endpoint."""
    response = client.get("/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["provider"] == "mock"
    assert data["providers"] == {"api": False, "mock": True}
    assert data["provider_health"]["available"] is True


def test_extract_claims(client):
    """Extraction returns accepted claims with their layout rects."""
    response = client.post("/claims/extract", json={"html": PAGE_HTML, "url": "https://news.example.com/a"})

    assert response.status_code == 200
    claims = response.json()["claims"]
    assert len(claims) == 1
    assert claims[0]["claim"]["text"] == SCENARIO_A
    assert claims[0]["claim"]["origin"]["host"] == "news.example.com"
    assert claims[0]["score"] == 110
    assert claims[0]["rects"] == [{"top": 40.0, "left": 0.0, "width": 456.0, "height": 20.0}]


def test_extract_with_mode_override(client):
    """A stricter mode can drop borderline claims."""
    borderline = "The vaccine has been shown to prevent severe illness in most adults."
    html = f"<body><p>{borderline}</p></body>"

    moderate = client.post("/claims/extract", json={"html": html})
    minimal = client.post("/claims/extract", json={"html": html, "mode": "minimal"})

    assert len(moderate.json()["claims"]) == 1
    assert minimal.json()["claims"] == []


def test_score_text(client):
    response = client.post("/claims/score", json={"text": "Subscribe to our newsletter for more!"})

    assert response.status_code == 200
    assert response.json()["passed"] is False
    assert response.json()["score"] == 0


def test_verify_claims(client, stub_provider):
    """Verification responses use the collaborator's wire shape."""
    response = client.post(
        "/claims/verify",
        json={"claims": [{"id": "c1", "text": SCENARIO_A, "sourceUrl": "https://news.example.com/a"}]},
    )

    assert response.status_code == 200
    verifications = response.json()["verifications"]
    assert verifications[0]["claimId"] == "c1"
    assert verifications[0]["rating"] == "verified"
    assert stub_provider.calls[0][0].text == SCENARIO_A


def test_verify_without_claims(client):
    response = client.post("/claims/verify", json={"claims": []})
    assert response.status_code == 400


def test_verify_provider_failure(client, stub_provider):
    stub_provider.fail = True

    response = client.post("/claims/verify", json={"claims": [{"id": "c1", "text": SCENARIO_A}]})

    assert response.status_code == 500
    assert "provider exploded" in response.json()["detail"]


@pytest.mark.parametrize("text", ["", "   "])
def test_verify_claim_without_text(client, stub_provider, text):
    response = client.post("/claims/verify", json={"claims": [{"id": "c1", "text": text}]})

    assert response.status_code == 400
    assert "c1" in response.json()["detail"]
    assert stub_provider.calls == []
