"""HTTP implementation of the verification provider interface."""

import logging
from typing import Dict, List, Optional

import httpx
from cachetools import TTLCache
from pydantic import BaseModel, Field

from ...domain.models.claim import Claim
from ...domain.models.verification import Verification
from ...domain.ports.verification_provider import ClaimPayload, ProviderHealth, VerificationProvider

logger = logging.getLogger(__name__)


class ApiVerificationConfig(BaseModel):
    """Configuration for the verification backend adapter."""

    base_url: str = Field(default="http://localhost:3001", description="Backend base URL")
    timeout: float = Field(default=30.0, description="Request timeout in seconds")
    health_timeout: float = Field(default=5.0, description="Health check timeout in seconds")
    cache_ttl: int = Field(default=3600, description="Cache TTL in seconds")
    cache_maxsize: int = Field(default=1000, description="Maximum cache size")


class ApiVerificationAdapter(VerificationProvider):
    """Verification backend reached over HTTP.

    Results are cached by normalized claim text. Any transport or HTTP failure
    turns into an unverified result per claim so nothing is left unresolved.
    """

    def __init__(
        self,
        config: Optional[ApiVerificationConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        provider_name: str = "api",
    ):
        """Initialize the adapter.

        Args:
            config: Adapter configuration
            transport: Custom httpx transport, used by tests
            provider_name: Name of the provider
        """
        self._config = config or ApiVerificationConfig()
        self._transport = transport
        self._name = provider_name
        self._client: Optional[httpx.AsyncClient] = None
        self._cache = TTLCache(maxsize=self._config.cache_maxsize, ttl=self._config.cache_ttl)

    @property
    def provider_name(self) -> str:
        return self._name

    async def initialize(self) -> None:
        """Create the HTTP client."""
        if self._client is not None:
            return
        try:
            self._client = httpx.AsyncClient(
                base_url=self._config.base_url,
                timeout=self._config.timeout,
                headers={"Content-Type": "application/json"},
                transport=self._transport,
            )
        except Exception as e:
            self._client = None
            raise ConnectionError(f"Failed to initialize verification provider: {e}")

    async def shutdown(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def verify_claims(self, claims: List[Claim], url: Optional[str] = None) -> Dict[str, Verification]:
        """Verify a batch of claims.

        Args:
            claims: Claims to verify
            url: Page the claims came from

        Returns:
            One verification per claim id
        """
        if not self._client:
            raise RuntimeError("Provider not initialized")

        results: Dict[str, Verification] = {}
        uncached: List[Claim] = []
        for claim in claims:
            cached = self._cache.get(claim.normalized_text)
            if cached is not None:
                results[claim.id] = cached.model_copy(update={"claim_id": claim.id})
            else:
                uncached.append(claim)
        if not uncached:
            return results

        try:
            response = await self._client.post(
                "/api/verify",
                json={
                    "claims": [ClaimPayload.from_claim(claim, url).model_dump(by_alias=True) for claim in uncached],
                    "url": url,
                },
            )
            response.raise_for_status()
            data = response.json()
        except Exception as e:
            logger.error(f"❌ Verification backend request failed: {e}")
            for claim in uncached:
                results[claim.id] = Verification.unavailable(claim.id)
            return results

        by_id = {claim.id: claim for claim in uncached}
        for item in data.get("verifications", []):
            try:
                verification = Verification.from_wire(item)
            except Exception as e:
                logger.warning(f"⚠️ Skipping malformed verification: {e}")
                continue
            results[verification.claim_id] = verification
            claim = by_id.get(verification.claim_id)
            if claim is not None:
                self._cache[claim.normalized_text] = verification

        missing = [claim for claim in uncached if claim.id not in results]
        for claim in missing:
            results[claim.id] = Verification.unavailable(claim.id)
        meta = data.get("meta") or {}
        logger.info(
            f"✅ Verified {len(uncached) - len(missing)} of {len(uncached)} claims, "
            f"{meta.get('fromCache', 0)} from backend cache"
        )
        return results

    async def verify_claim(self, claim: Claim, url: Optional[str] = None) -> Verification:
        results = await self.verify_claims([claim], url)
        return results.get(claim.id) or Verification.unavailable(claim.id, summary="Verification failed")

    async def health(self) -> ProviderHealth:
        """Check if the backend is available."""
        if not self._client:
            raise RuntimeError("Provider not initialized")
        try:
            response = await self._client.get("/api/health", timeout=self._config.health_timeout)
            if response.status_code != 200:
                return ProviderHealth(available=False, services={"googleFactCheck": False})
            data = response.json()
            return ProviderHealth(available=True, services=data.get("services") or {"googleFactCheck": False})
        except Exception as e:
            logger.warning(f"⚠️ Verification backend health check failed: {e}")
            return ProviderHealth(available=False, services={"googleFactCheck": False})

