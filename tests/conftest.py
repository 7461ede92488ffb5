"""Test configuration and common fixtures."""

import heapq
import itertools
from typing import Callable, Dict, List, Optional

import pytest

from claim_overlay.domain.models.claim import Claim
from claim_overlay.domain.models.settings import ExtensionSettings
from claim_overlay.domain.models.verification import Rating, Verification
from claim_overlay.domain.ports.verification_provider import ProviderHealth
from claim_overlay.domain.services.page_session import PageSession
from claim_overlay.infrastructure.host.soup_page import SoupHostPage
from claim_overlay.infrastructure.host.static_layout import LayoutConfig
from claim_overlay.infrastructure.notifications.badge_sink import BadgeNotificationSink

PAGE_URL = "https://news.example.com/health/drug-trial"

SCENARIO_A = "A new study shows the drug reduces risk by 45% in adults."
RESEARCH_CLAIM = "Researchers found that regular exercise reduces the risk of heart disease by 30 percent."

ARTICLE_HTML = f"""
<html>
<head><title>Health News</title><script>var teaser = "{SCENARIO_A}";</script></head>
<body>
<nav>Home | Health | Subscribe to our newsletter for more!</nav>
<article>
<h1>New drug trial results</h1>
<p>{SCENARIO_A} The weather was pleasant and the streets were quiet that evening.</p>
<p>{RESEARCH_CLAIM}</p>
<div class="ad-slot"><p>Scientists say 9 out of 10 dentists recommend this toothpaste brand for whitening.</p></div>
<p style="display:none">Experts say 80% of hidden claims are never seen by readers at all.</p>
</article>
<footer>&copy; 2024 Example Media Group. All rights reserved.</footer>
</body>
</html>
"""


class ManualHandle:
    """Timer handle driven by ManualScheduler."""

    def __init__(self, when: float, callback: Callable[[], None]):
        self.when = when
        self.callback = callback
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    def cancelled(self) -> bool:
        return self._cancelled


class ManualScheduler:
    """Deterministic scheduler; time only moves when a test advances it."""

    def __init__(self):
        self.now = 0.0
        self._queue: List = []
        self._counter = itertools.count()

    def time(self) -> float:
        return self.now

    def call_later(self, delay: float, callback: Callable[[], None]) -> ManualHandle:
        handle = ManualHandle(self.now + max(0.0, delay), callback)
        heapq.heappush(self._queue, (handle.when, next(self._counter), handle))
        return handle

    @property
    def pending(self) -> int:
        return sum(1 for _, _, handle in self._queue if not handle.cancelled())

    def advance(self, seconds: float) -> None:
        """Run every callback due within the next `seconds`, in order."""
        target = self.now + seconds
        while self._queue and self._queue[0][0] <= target + 1e-9:
            when, _, handle = heapq.heappop(self._queue)
            if handle.cancelled():
                continue
            self.now = max(self.now, when)
            handle.callback()
        self.now = target


class FakeVerificationProvider:
    """Provider returning canned ratings and recording every batch."""

    def __init__(self, ratings: Optional[Dict[str, Rating]] = None, default: Rating = Rating.MOSTLY_TRUE):
        self.ratings = ratings or {}
        self.default = default
        self.batches: List[List[Claim]] = []

    @property
    def provider_name(self) -> str:
        return "fake"

    async def initialize(self) -> None:
        pass

    async def shutdown(self) -> None:
        pass

    async def verify_claims(self, claims: List[Claim], url: Optional[str] = None) -> Dict[str, Verification]:
        self.batches.append(list(claims))
        return {
            claim.id: Verification(
                claim_id=claim.id,
                rating=self.ratings.get(claim.text, self.default),
                confidence=0.8,
                summary="Canned result",
            )
            for claim in claims
        }

    async def verify_claim(self, claim: Claim, url: Optional[str] = None) -> Verification:
        return (await self.verify_claims([claim], url))[claim.id]

    async def health(self) -> ProviderHealth:
        return ProviderHealth(available=True, services={"fake": True})


@pytest.fixture
def scheduler() -> ManualScheduler:
    """Provide a manual scheduler."""
    return ManualScheduler()


@pytest.fixture
def make_page() -> Callable[..., SoupHostPage]:
    """Provide a factory for host pages."""

    def factory(html: str, url: str = PAGE_URL, **layout: float) -> SoupHostPage:
        return SoupHostPage(html, url=url, layout_config=LayoutConfig(**layout))

    return factory


@pytest.fixture
def article_page(make_page) -> SoupHostPage:
    """Provide the sample article page."""
    return make_page(ARTICLE_HTML)


@pytest.fixture
def provider() -> FakeVerificationProvider:
    """Provide a fake verification provider."""
    return FakeVerificationProvider()


@pytest.fixture
def sink() -> BadgeNotificationSink:
    """Provide a badge notification sink."""
    return BadgeNotificationSink()


@pytest.fixture
def make_session(scheduler, provider, sink) -> Callable[..., PageSession]:
    """Provide a factory for page sessions on the manual scheduler."""

    def factory(page: SoupHostPage, settings: Optional[ExtensionSettings] = None) -> PageSession:
        return PageSession(page, provider, scheduler, settings=settings, sink=sink)

    return factory
