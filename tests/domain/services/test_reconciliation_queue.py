"""Tests for out-of-order verification reconciliation."""

import pytest

from claim_overlay.domain.models.geometry import Rect
from claim_overlay.domain.models.verification import Rating, Verification
from claim_overlay.domain.services.claim_registry import ClaimRegistry
from claim_overlay.domain.services.overlay_renderer import OverlayRenderer
from claim_overlay.domain.services.reconciliation_queue import RetryPolicy, VerificationReconciler
from claim_overlay.domain.services.tooltip import TooltipController

SCENARIO_A = "A new study shows the drug reduces risk by 45% in adults."
RECT = Rect(top=0, left=0, width=456, height=20)


@pytest.fixture
def page(make_page):
    return make_page(f"<body><p>{SCENARIO_A}</p></body>")


@pytest.fixture
def registry() -> ClaimRegistry:
    return ClaimRegistry()


@pytest.fixture
def renderer(page, registry) -> OverlayRenderer:
    return OverlayRenderer(page, registry)


@pytest.fixture
def tooltip(page, registry, renderer, scheduler) -> TooltipController:
    return TooltipController(page, registry, renderer, scheduler)


@pytest.fixture
def verified():
    """Record of on_verified callbacks."""
    return []


@pytest.fixture
def reconciler(registry, renderer, tooltip, scheduler, verified) -> VerificationReconciler:
    return VerificationReconciler(
        registry,
        renderer,
        tooltip,
        scheduler,
        RetryPolicy(max_attempts=5, base_delay=0.1),
        on_verified=lambda claim_id, rating: verified.append((claim_id, rating)),
    )


def _result(claim_id: str, rating: Rating) -> Verification:
    return Verification(claim_id=claim_id, rating=rating, confidence=0.9, summary="Checked.")


def test_retry_policy_is_linear():
    """Delays grow linearly with the attempt number."""
    policy = RetryPolicy(base_delay=0.1)
    assert [round(policy.delay_for(n), 2) for n in range(1, 6)] == [0.1, 0.2, 0.3, 0.4, 0.5]


def test_apply_to_known_claim_restyles_markers(registry, renderer, reconciler, verified):
    """A verification for a tracked claim restyles its markers immediately."""
    tracked = registry.register("c1", SCENARIO_A)
    renderer.draw(tracked, [RECT])

    assert reconciler.apply(_result("c1", Rating.VERIFIED))

    assert tracked.rating == Rating.VERIFIED
    assert tracked.overlays[0]["data-rating"] == "verified"
    assert verified == [("c1", Rating.VERIFIED)]


def test_verification_before_registration(registry, renderer, reconciler, scheduler, verified):
    """A result that beats its claim is applied once the claim registers."""
    assert not reconciler.apply(_result("c9", Rating.FALSE))
    scheduler.advance(0.25)

    assert reconciler.is_pending("c9")
    assert reconciler.pending_attempts("c9") == 1

    tracked = registry.register("c9", SCENARIO_A)
    markers = renderer.draw(tracked, [RECT])

    assert markers[0]["data-rating"] == "false"
    assert not reconciler.is_pending("c9")
    assert verified == [("c9", Rating.FALSE)]


def test_exhausted_retries_keep_result_pending(registry, reconciler, scheduler, verified):
    """After the last attempt the result stays held for a late registration."""
    reconciler.apply(_result("c1", Rating.MIXED))
    scheduler.advance(2.0)

    assert reconciler.is_exhausted("c1")
    assert scheduler.pending == 0
    assert reconciler.held_ids() == ["c1"]

    tracked = registry.register("c1", SCENARIO_A)

    assert tracked.rating == Rating.MIXED
    assert not reconciler.is_pending("c1")
    assert reconciler.held_ids() == []
    assert verified == [("c1", Rating.MIXED)]


def test_newer_result_replaces_held_one(registry, reconciler, scheduler):
    """A newer held verification wins and restarts the retries."""
    reconciler.apply(_result("c1", Rating.MIXED))
    scheduler.advance(0.35)
    assert reconciler.pending_attempts("c1") == 2

    reconciler.apply(_result("c1", Rating.FALSE))

    assert reconciler.pending_attempts("c1") == 0
    assert registry.peek_pending("c1").rating == Rating.FALSE
    assert registry.register("c1", SCENARIO_A).rating == Rating.FALSE


def test_reverification_hides_tooltip(registry, renderer, tooltip, reconciler):
    """A replaced verification closes the tooltip showing the old one."""
    tracked = registry.register("c1", SCENARIO_A)
    renderer.draw(tracked, [RECT])
    reconciler.apply(_result("c1", Rating.MOSTLY_TRUE))
    tooltip.enter_overlay("c1")
    assert tooltip.is_showing

    reconciler.apply(_result("c1", Rating.FALSE))

    assert not tooltip.is_showing
    assert tracked.overlays[0]["data-rating"] == "false"


def test_close_cancels_timers(reconciler, scheduler):
    """Closing stops every retry timer."""
    reconciler.apply(_result("c1", Rating.MIXED))
    reconciler.close()

    assert scheduler.pending == 0
    assert reconciler.is_pending("c1")
