"""Keeps overlays aligned with their text as the page changes shape."""

import logging
from typing import List, Optional

from ..models.settings import TimingConfig
from ..models.tracked_claim import TrackedClaim
from ..ports.host_page import HostEvent, HostPage, MutationRecord, Unsubscribe
from ..ports.scheduler import Scheduler
from .claim_registry import ClaimRegistry
from .overlay_renderer import OverlayRenderer, is_overlay_node
from .span_locator import LocateStrategy, SpanLocator
from .timing import Debouncer, Throttle
from .tooltip import TooltipController

logger = logging.getLogger(__name__)


def is_overlay_record(record: MutationRecord) -> bool:
    """Whether a mutation only touched the overlay's own elements."""
    if is_overlay_node(record.target):
        return True
    touched = list(record.added) + list(record.removed)
    return bool(touched) and all(is_overlay_node(node) for node in touched)


class MutationReconciler:
    """Re-locates every drawn claim after mutations, scrolls and resizes.

    Mutation bursts are debounced, scrolls throttled with a trailing pass and
    resizes debounced. A pass requested while the tooltip shows waits until it
    hides so the tooltip's anchor never moves under the pointer.
    """

    def __init__(
        self,
        host: HostPage,
        registry: ClaimRegistry,
        locator: SpanLocator,
        renderer: OverlayRenderer,
        tooltip: TooltipController,
        scheduler: Scheduler,
        timing: Optional[TimingConfig] = None,
    ):
        self._host = host
        self._registry = registry
        self._locator = locator
        self._renderer = renderer
        self._tooltip = tooltip
        timing = timing or TimingConfig()

        self._mutations = Debouncer(scheduler, timing.mutation_debounce, self.request_pass)
        self._scroll = Throttle(scheduler, timing.scroll_throttle, self.request_pass)
        self._resize = Debouncer(scheduler, timing.resize_debounce, self.request_pass)
        self._unsubscribes: List[Unsubscribe] = []
        self._deferred = False
        self._passes = 0

        tooltip.on_hidden(self._on_tooltip_hidden)

    @property
    def passes(self) -> int:
        """Number of reconciliation passes run so far."""
        return self._passes

    @property
    def deferred(self) -> bool:
        return self._deferred

    def start(self) -> None:
        if self._unsubscribes:
            return
        self._unsubscribes = [
            self._host.subscribe(HostEvent.MUTATION, self._on_mutation),
            self._host.subscribe(HostEvent.SCROLL, self._scroll.trigger),
            self._host.subscribe(HostEvent.RESIZE, self._resize.trigger),
        ]

    def stop(self) -> None:
        for unsubscribe in self._unsubscribes:
            unsubscribe()
        self._unsubscribes = []
        self._mutations.cancel()
        self._scroll.cancel()
        self._resize.cancel()
        self._deferred = False

    def request_pass(self) -> None:
        if self._tooltip.is_showing:
            self._deferred = True
            return
        self.run_pass()

    def run_pass(self) -> None:
        """Recompute geometry for every claim that has been drawn."""
        self._passes += 1
        self._host.layout.invalidate()
        redrawn = 0
        for tracked in self._registry:
            if not tracked.has_visual:
                continue
            try:
                self._reconcile(tracked)
                redrawn += 1
            except Exception as e:
                logger.warning(f"⚠️ Reconciliation failed for {tracked.claim_id}: {e}")
        logger.debug(f"🔄 Reconciliation pass {self._passes}: {redrawn} claims redrawn")

    def _reconcile(self, tracked: TrackedClaim) -> None:
        result = self._locator.locate(tracked.claim_text, tracked.source_range, tracked.snapshot)
        if result.is_live:
            self._registry.set_source_range(tracked.claim_id, result.text_range)
            self._registry.set_snapshot(tracked.claim_id, result.rects)
        elif result.strategy == LocateStrategy.NONE:
            logger.debug(f"Claim {tracked.claim_id} lost its text, keeping it without visual")
        self._renderer.draw(tracked, result.rects)

    def _on_mutation(self, records: List[MutationRecord]) -> None:
        if any(not is_overlay_record(record) for record in records):
            self._mutations.trigger()

    def _on_tooltip_hidden(self) -> None:
        if self._deferred:
            self._deferred = False
            self.request_pass()
