"""One overlay session per page: wiring, command handling and lifecycle."""

import asyncio
import logging
from enum import Enum
from typing import Any, Dict, List, Optional, Set
from urllib.parse import urlparse

from bs4 import Tag
from pydantic import BaseModel, Field, ValidationError

from ..models.claim import Claim, DetectedClaim, normalize_claim_text
from ..models.geometry import TextRange, is_inside
from ..models.markers import CLAIM_ID_ATTR, HIGHLIGHT_CLASS, class_list
from ..models.settings import ExtensionSettings, ScoringWeights, TimingConfig
from ..models.tracked_claim import TrackedClaim
from ..models.verification import Rating, Verification
from ..ports.host_page import HostEvent, HostPage, Unsubscribe
from ..ports.notification_sink import NotificationSink
from ..ports.scheduler import Scheduler, TimerHandle
from ..ports.verification_provider import VerificationProvider
from .claim_extractor import ClaimExtractor, claim_from_selection
from .claim_registry import ClaimRegistry
from .mutation_reconciler import MutationReconciler
from .overlay_renderer import OverlayRenderer
from .reconciliation_queue import RetryPolicy, VerificationReconciler
from .span_locator import SpanLocator
from .text_scanner import TextScanner
from .tooltip import TooltipController
from .worthiness_scorer import WorthinessScorer

logger = logging.getLogger(__name__)


class MessageType(str, Enum):
    """Inbound commands from the popup, background worker and context menu."""

    SCAN_PAGE = "SCAN_PAGE"
    RESCAN_PAGE = "RESCAN_PAGE"
    VERIFY_SELECTION = "VERIFY_SELECTION"
    UPDATE_SETTINGS = "UPDATE_SETTINGS"
    CLAIM_VERIFIED = "CLAIM_VERIFIED"
    GET_PAGE_CLAIMS = "GET_PAGE_CLAIMS"


class SessionMessage(BaseModel):
    """Envelope of an inbound command."""

    type: MessageType = Field(..., description="Command type")
    payload: Dict[str, Any] = Field(default_factory=dict, description="Command arguments")


class PageSession:
    """Runs extraction, highlighting and verification for one page.

    The session owns every collaborator it builds and tears them all down
    together; nothing outlives a page.
    """

    def __init__(
        self,
        host: HostPage,
        provider: VerificationProvider,
        scheduler: Scheduler,
        settings: Optional[ExtensionSettings] = None,
        sink: Optional[NotificationSink] = None,
        timing: Optional[TimingConfig] = None,
        weights: Optional[ScoringWeights] = None,
    ):
        self.host = host
        self.provider = provider
        self.settings = settings or ExtensionSettings()
        self._scheduler = scheduler
        self._sink = sink
        self._timing = timing or TimingConfig()

        self.scorer = WorthinessScorer(weights, self.settings.highlight_aggressiveness)
        self.extractor = ClaimExtractor(TextScanner(host.layout), self.scorer)
        self.registry = ClaimRegistry()
        self.renderer = OverlayRenderer(host, self.registry)
        self.locator = SpanLocator(host.layout, host.body)
        self.tooltip = TooltipController(
            host,
            self.registry,
            self.renderer,
            scheduler,
            grace_delay=self._timing.tooltip_grace,
            enabled=self.settings.show_tooltips,
        )
        self.reconciler = VerificationReconciler(
            self.registry,
            self.renderer,
            self.tooltip,
            scheduler,
            RetryPolicy(
                max_attempts=self._timing.retry_max_attempts,
                base_delay=self._timing.retry_base_delay,
            ),
            on_verified=self._claim_verified,
        )
        self.mutations = MutationReconciler(
            host, self.registry, self.locator, self.renderer, self.tooltip, scheduler, self._timing
        )

        self._active = False
        self._unsubscribes: List[Unsubscribe] = []
        self._initial_scan: Optional[TimerHandle] = None
        self._tasks: Set[asyncio.Task] = set()

    @property
    def sink(self) -> Optional[NotificationSink]:
        return self._sink

    @property
    def active(self) -> bool:
        return self._active

    @property
    def host_name(self) -> str:
        return urlparse(self.host.url).hostname or ""

    def start(self, auto_scan: bool = True) -> bool:
        """Attach to the page unless settings exclude it.

        Args:
            auto_scan: Schedule the first scan after the initial delay

        Returns:
            True if the session attached
        """
        if not self.settings.allows_host(self.host_name):
            logger.info(f"⏸️ Overlay disabled for {self.host_name or 'this page'}")
            return False
        if self._active:
            return True

        self._active = True
        self._unsubscribes = [
            self.host.subscribe(HostEvent.POINTER_ENTER, self._on_pointer_enter),
            self.host.subscribe(HostEvent.POINTER_LEAVE, self._on_pointer_leave),
        ]
        self.mutations.start()
        if auto_scan:
            self._initial_scan = self._scheduler.call_later(self._timing.initial_scan_delay, self._run_initial_scan)
        logger.info(f"🚀 Session started for {self.host.url or 'page'}")
        return True

    def scan_page(self, verify: bool = True) -> List[TrackedClaim]:
        """Extract claims from the page and highlight them.

        Args:
            verify: Send the new claims to the verification collaborator

        Returns:
            Tracked claims for this scan, best score first
        """
        detected = self.extractor.extract(self.host.body, self.host.url)
        # A repeated scan keeps claims already on the page instead of tracking them twice
        known = {normalize_claim_text(existing.claim_text): existing for existing in self.registry}
        tracked = []
        fresh: List[Claim] = []
        for item in detected:
            existing = known.get(item.claim.normalized_text)
            if existing is not None:
                tracked.append(existing)
                continue
            try:
                tracked.append(self.highlight(item))
                fresh.append(item.claim)
            except Exception as e:
                logger.warning(f"⚠️ Failed to highlight claim {item.claim.id}: {e}")

        if self._sink is not None:
            self._sink.page_scanned(len(tracked), self.host.url)
        if verify and fresh:
            self._spawn_verification(fresh)
        return tracked

    def rescan_page(self, verify: bool = True) -> List[TrackedClaim]:
        """Drop every highlight and scan again."""
        self.clear_highlights()
        return self.scan_page(verify)

    def highlight(self, detected: DetectedClaim) -> TrackedClaim:
        """Track a claim and draw it; repeated calls update the same entry."""
        claim = detected.claim
        tracked = self.registry.register(claim.id, claim.text, detected.source_range)
        result = self.locator.locate(claim.text, tracked.source_range, tracked.snapshot)
        if result.is_live:
            self.registry.set_source_range(tracked.claim_id, result.text_range)
            self.registry.set_snapshot(tracked.claim_id, result.rects)
        self.renderer.draw(tracked, result.rects)
        if not result.found:
            logger.debug(f"Claim {claim.id} registered without visual")
        return tracked

    def verify_selection(self, selection: TextRange, verify: bool = True) -> Optional[TrackedClaim]:
        """Highlight and verify text the user selected."""
        detected = claim_from_selection(selection, self.host.url)
        if detected is None:
            logger.info("Selection too short to verify")
            return None
        tracked = self.highlight(detected)
        if verify:
            self._spawn_verification([detected.claim])
        return tracked

    def update_settings(self, settings: ExtensionSettings) -> None:
        """Apply a new settings snapshot; disabling removes every highlight."""
        was_allowed = self._active
        self.settings = settings
        self.scorer.mode = settings.highlight_aggressiveness
        self.tooltip.set_enabled(settings.show_tooltips)

        if not settings.allows_host(self.host_name):
            if was_allowed:
                logger.info("⏸️ Overlay disabled by settings, removing highlights")
                self._detach()
            return
        if not was_allowed:
            self.start(auto_scan=False)
            self.scan_page()

    def remove_highlight(self, claim_id: str) -> bool:
        """Stop tracking one claim and detach its markers.

        Returns:
            True if the claim was tracked
        """
        tracked = self.registry.get(claim_id)
        if tracked is None:
            return False
        if self.tooltip.claim_id == claim_id:
            self.tooltip.hide_now()
        self.renderer.remove_overlays(tracked)
        self.registry.remove(claim_id)
        logger.debug(f"🗑️ Removed claim {claim_id}")
        return True

    def clear_highlights(self) -> None:
        self.tooltip.hide_now()
        for tracked in self.registry.clear():
            self.renderer.remove_overlays(tracked, prune=False)
        self.renderer.remove_all()

    def page_claims(self) -> List[Dict[str, Any]]:
        return [tracked.to_dict() for tracked in self.registry]

    async def verify(self, claims: List[Claim]) -> Dict[str, Verification]:
        """Send claims to the collaborator and apply whatever comes back."""
        results = await self.provider.verify_claims(claims, self.host.url)
        for verification in results.values():
            try:
                self.reconciler.apply(verification)
            except Exception as e:
                logger.warning(f"⚠️ Failed to apply verification for {verification.claim_id}: {e}")
        return results

    async def wait_for_verifications(self) -> None:
        """Wait for every verification request in flight."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def handle_message(self, message: Any) -> Dict[str, Any]:
        """Handle one inbound command and build its response.

        Args:
            message: SessionMessage or its dict form

        Returns:
            Response dict with at least a success flag
        """
        try:
            if not isinstance(message, SessionMessage):
                message = SessionMessage.model_validate(message)
        except ValidationError as e:
            return {"success": False, "error": f"Invalid message: {e.errors()[0]['msg']}"}

        payload = message.payload
        try:
            if message.type in (MessageType.SCAN_PAGE, MessageType.RESCAN_PAGE):
                if not self._active:
                    return {"success": False, "error": "Overlay is disabled for this page"}
                if message.type == MessageType.RESCAN_PAGE:
                    tracked = self.rescan_page()
                else:
                    tracked = self.scan_page()
                return {"success": True, "claimCount": len(tracked)}

            if message.type == MessageType.VERIFY_SELECTION:
                selection = self.locator.search(str(payload.get("text", "")))
                if selection is None:
                    return {"success": False, "error": "Selection not found on page"}
                tracked = self.verify_selection(selection)
                if tracked is None:
                    return {"success": False, "error": "Selection too short to verify"}
                return {"success": True, "claimId": tracked.claim_id}

            if message.type == MessageType.UPDATE_SETTINGS:
                self.update_settings(ExtensionSettings.model_validate(payload.get("settings", payload)))
                return {"success": True}

            if message.type == MessageType.CLAIM_VERIFIED:
                verification = Verification.from_wire(payload.get("verification", payload))
                applied = self.reconciler.apply(verification)
                return {"success": True, "applied": applied}

            return {"success": True, "claims": self.page_claims()}
        except (ValidationError, ValueError) as e:
            logger.warning(f"⚠️ Rejected {message.type.value} command: {e}")
            return {"success": False, "error": str(e)}

    def teardown(self) -> None:
        """End the session and remove everything it added to the page."""
        self._detach()
        self.reconciler.close()
        for task in list(self._tasks):
            task.cancel()
        logger.info("👋 Session torn down")

    # Internals

    def _detach(self) -> None:
        if self._initial_scan is not None:
            self._initial_scan.cancel()
            self._initial_scan = None
        for unsubscribe in self._unsubscribes:
            unsubscribe()
        self._unsubscribes = []
        self.mutations.stop()
        self.clear_highlights()
        self._active = False

    def _run_initial_scan(self) -> None:
        self._initial_scan = None
        self.scan_page()

    def _spawn_verification(self, claims: List[Claim]) -> None:
        task = asyncio.get_running_loop().create_task(self.verify(claims))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    def _claim_verified(self, claim_id: str, rating: Rating) -> None:
        if self._sink is not None:
            self._sink.claim_verified(claim_id, rating)

    def _on_pointer_enter(self, element: Tag) -> None:
        if HIGHLIGHT_CLASS in class_list(element):
            self.tooltip.enter_overlay(element.get(CLAIM_ID_ATTR, ""))
        elif is_inside(element, self.tooltip.element):
            self.tooltip.enter_tooltip()

    def _on_pointer_leave(self, element: Tag) -> None:
        if HIGHLIGHT_CLASS in class_list(element):
            self.tooltip.leave_overlay(element.get(CLAIM_ID_ATTR, ""))
        elif is_inside(element, self.tooltip.element):
            self.tooltip.leave_tooltip()
