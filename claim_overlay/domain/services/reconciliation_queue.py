"""Applies verifications to tracked claims, tolerating out-of-order delivery."""

import logging
from typing import Callable, Dict, List, Optional

from pydantic import BaseModel, Field

from ..models.tracked_claim import TrackedClaim
from ..models.verification import Rating, Verification
from ..ports.scheduler import Scheduler, TimerHandle
from .claim_registry import ClaimRegistry
from .overlay_renderer import OverlayRenderer
from .tooltip import TooltipController

logger = logging.getLogger(__name__)

VerifiedCallback = Callable[[str, Rating], None]


class RetryPolicy(BaseModel):
    """Bounded retry schedule for verifications that beat their claim."""

    max_attempts: int = Field(default=5, ge=0, description="Retries before giving up")
    base_delay: float = Field(default=0.1, ge=0.0, description="Delay step in seconds")

    def delay_for(self, attempt: int) -> float:
        """Delay before the given 1-based attempt."""
        return self.base_delay * attempt


class VerificationReconciler:
    """Single authority for attaching verifications to claims.

    A verification for an unknown claim is held and retried on the policy's
    schedule. After the last attempt it stays held, so a late registration
    still picks it up; registration always drains the held result.
    """

    def __init__(
        self,
        registry: ClaimRegistry,
        renderer: OverlayRenderer,
        tooltip: TooltipController,
        scheduler: Scheduler,
        policy: Optional[RetryPolicy] = None,
        on_verified: Optional[VerifiedCallback] = None,
    ):
        self._registry = registry
        self._renderer = renderer
        self._tooltip = tooltip
        self._scheduler = scheduler
        self._policy = policy or RetryPolicy()
        self._on_verified = on_verified
        self._attempts: Dict[str, int] = {}
        self._timers: Dict[str, TimerHandle] = {}
        self._unsubscribe = registry.add_registration_listener(self._on_registered)

    @property
    def policy(self) -> RetryPolicy:
        return self._policy

    def apply(self, verification: Verification) -> bool:
        """Apply a verification now, or hold it for later.

        Returns:
            True if the claim was tracked and the verification applied
        """
        tracked = self._registry.get(verification.claim_id)
        if tracked is not None:
            self._apply_to(tracked, verification)
            return True

        claim_id = verification.claim_id
        logger.info(f"⏳ Verification for unknown claim {claim_id}, holding for retry")
        self._registry.hold_pending(verification)
        self._cancel_timer(claim_id)
        self._attempts[claim_id] = 0
        self._schedule(claim_id, 1)
        return False

    def pending_attempts(self, claim_id: str) -> int:
        """Retry attempts made so far for a held verification."""
        return self._attempts.get(claim_id, 0)

    def is_pending(self, claim_id: str) -> bool:
        return self._registry.peek_pending(claim_id) is not None

    def held_ids(self) -> List[str]:
        """Claim ids whose verification is waiting for registration."""
        return self._registry.pending_ids()

    def is_exhausted(self, claim_id: str) -> bool:
        """Held verification whose retries are exhausted."""
        return self.is_pending(claim_id) and claim_id not in self._timers and (
            self.pending_attempts(claim_id) >= self._policy.max_attempts
        )

    def close(self) -> None:
        """Stop retrying; held verifications stay in the registry."""
        for claim_id in list(self._timers):
            self._cancel_timer(claim_id)
        self._unsubscribe()

    def _apply_to(self, tracked: TrackedClaim, verification: Verification) -> None:
        self._registry.set_verification(tracked.claim_id, verification)
        self._renderer.restyle(tracked)
        if self._tooltip.claim_id == tracked.claim_id:
            self._tooltip.hide_now()
        logger.info(f"✅ Claim {tracked.claim_id} rated {verification.rating.value}")
        if self._on_verified is not None:
            self._on_verified(tracked.claim_id, verification.rating)

    def _schedule(self, claim_id: str, attempt: int) -> None:
        if attempt > self._policy.max_attempts:
            logger.warning(
                f"⚠️ Claim {claim_id} still unknown after {self._policy.max_attempts} attempts, "
                f"keeping verification pending"
            )
            return
        self._timers[claim_id] = self._scheduler.call_later(
            self._policy.delay_for(attempt),
            lambda: self._retry(claim_id, attempt),
        )

    def _retry(self, claim_id: str, attempt: int) -> None:
        self._timers.pop(claim_id, None)
        self._attempts[claim_id] = attempt
        tracked = self._registry.get(claim_id)
        if tracked is None:
            self._schedule(claim_id, attempt + 1)
            return
        verification = self._registry.take_pending(claim_id)
        if verification is not None:
            self._apply_to(tracked, verification)
        self._attempts.pop(claim_id, None)

    def _on_registered(self, tracked: TrackedClaim) -> None:
        verification = self._registry.take_pending(tracked.claim_id)
        if verification is None:
            return
        self._cancel_timer(tracked.claim_id)
        self._attempts.pop(tracked.claim_id, None)
        logger.debug(f"Draining held verification for {tracked.claim_id}")
        self._apply_to(tracked, verification)

    def _cancel_timer(self, claim_id: str) -> None:
        timer = self._timers.pop(claim_id, None)
        if timer is not None:
            timer.cancel()
