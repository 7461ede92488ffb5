"""Single detail popup shown while the pointer rests on a verified claim."""

import logging
from enum import Enum
from typing import Callable, List, Optional, Tuple

from bs4 import Tag

from ..models.geometry import Rect
from ..models.markers import CLAIM_ID_ATTR, TOOLTIP_CLASS
from ..models.tracked_claim import TrackedClaim
from ..models.verification import RATING_COLORS, RATING_LABELS, Verification
from ..ports.host_page import HostPage
from ..ports.scheduler import Scheduler, TimerHandle
from .claim_registry import ClaimRegistry
from .overlay_renderer import OverlayRenderer

logger = logging.getLogger(__name__)

TOOLTIP_GAP = 8.0
VIEWPORT_MARGIN = 16.0
MIN_LEFT = 8.0
MAX_SOURCES = 3


class TooltipState(str, Enum):
    HIDDEN = "hidden"
    SHOWING = "showing"


def tooltip_position(
    anchor: Rect,
    size: Tuple[float, float],
    scroll: Tuple[float, float],
    viewport: Tuple[float, float],
) -> Tuple[float, float]:
    """Document (top, left) for a popup anchored to a document-relative rect.

    Below the anchor by default, flipped above when it would overflow the
    viewport bottom, and clamped to stay inside the viewport horizontally.
    """
    width, height = size
    scroll_x, scroll_y = scroll
    viewport_width, viewport_height = viewport

    top = anchor.bottom + TOOLTIP_GAP
    if top - scroll_y + height > viewport_height:
        top = anchor.top - height - TOOLTIP_GAP

    left = anchor.left
    if left - scroll_x + width > viewport_width:
        left = scroll_x + viewport_width - width - VIEWPORT_MARGIN
    left = max(scroll_x + MIN_LEFT, left)
    return top, left


class TooltipController:
    """State machine for the page's only tooltip.

    hidden -> showing(id) when the pointer enters a verified claim's marker.
    Entering the tooltip or another marker of the same claim cancels a pending
    hide; entering a different verified claim rebuilds synchronously. Leaving
    both marker and tooltip hides after the grace delay.
    """

    def __init__(
        self,
        host: HostPage,
        registry: ClaimRegistry,
        renderer: OverlayRenderer,
        scheduler: Scheduler,
        grace_delay: float = 0.3,
        enabled: bool = True,
    ):
        self._host = host
        self._registry = registry
        self._renderer = renderer
        self._scheduler = scheduler
        self._grace_delay = grace_delay
        self._enabled = enabled

        self._claim_id: Optional[str] = None
        self._element: Optional[Tag] = None
        self._hide_timer: Optional[TimerHandle] = None
        self._over_overlay = False
        self._over_tooltip = False
        self._hidden_listeners: List[Callable[[], None]] = []

    @property
    def state(self) -> TooltipState:
        return TooltipState.SHOWING if self._claim_id is not None else TooltipState.HIDDEN

    @property
    def is_showing(self) -> bool:
        return self._claim_id is not None

    @property
    def claim_id(self) -> Optional[str]:
        return self._claim_id

    @property
    def element(self) -> Optional[Tag]:
        return self._element

    @property
    def hide_pending(self) -> bool:
        return self._hide_timer is not None

    def set_enabled(self, enabled: bool) -> None:
        self._enabled = enabled
        if not enabled:
            self.hide_now()

    def on_hidden(self, listener: Callable[[], None]) -> None:
        self._hidden_listeners.append(listener)

    # Pointer transitions

    def enter_overlay(self, claim_id: str) -> None:
        if not self._enabled:
            return
        if claim_id == self._claim_id:
            self._over_overlay = True
            self._cancel_hide()
            return

        tracked = self._registry.get(claim_id)
        if tracked is None or tracked.verification is None:
            return

        if self._claim_id is not None:
            self._teardown()
        self._show(tracked)
        self._over_overlay = True

    def leave_overlay(self, claim_id: str) -> None:
        if claim_id != self._claim_id:
            return
        self._over_overlay = False
        self._schedule_hide()

    def enter_tooltip(self) -> None:
        if self._claim_id is None:
            return
        self._over_tooltip = True
        self._cancel_hide()

    def leave_tooltip(self) -> None:
        if self._claim_id is None:
            return
        self._over_tooltip = False
        self._schedule_hide()

    def hide_now(self) -> None:
        """Hide immediately, e.g. because the shown verification was replaced."""
        if self._claim_id is None:
            return
        self._teardown()
        for listener in list(self._hidden_listeners):
            listener()

    # Internals

    def _schedule_hide(self) -> None:
        if self._over_overlay or self._over_tooltip:
            return
        self._cancel_hide()
        self._hide_timer = self._scheduler.call_later(self._grace_delay, self._grace_expired)

    def _cancel_hide(self) -> None:
        if self._hide_timer is not None:
            self._hide_timer.cancel()
            self._hide_timer = None

    def _grace_expired(self) -> None:
        self._hide_timer = None
        self.hide_now()

    def _teardown(self) -> None:
        self._cancel_hide()
        if self._element is not None and self._element.parent is not None:
            self._host.remove(self._element)
        self._element = None
        self._claim_id = None
        self._over_overlay = False
        self._over_tooltip = False

    def _show(self, tracked: TrackedClaim) -> None:
        container = self._renderer.ensure_container()
        for stray in container.find_all(class_=TOOLTIP_CLASS):
            self._host.remove(stray)

        element = self._build(tracked.claim_id, tracked.verification)
        element["style"] = self._style_for(element, tracked)
        self._host.append(container, element)
        self._element = element
        self._claim_id = tracked.claim_id
        logger.debug(f"💬 Tooltip showing {tracked.claim_id}")

    def _build(self, claim_id: str, verification: Verification) -> Tag:
        new_tag = self._host.new_tag
        tooltip = new_tag("div", {"class": TOOLTIP_CLASS, CLAIM_ID_ATTR: claim_id, "role": "tooltip"})

        header = new_tag("div", {"class": "claim-overlay-tooltip-header"})
        label = new_tag("span", {
            "class": "claim-overlay-tooltip-rating",
            "style": f"color:{RATING_COLORS[verification.rating]}",
        })
        label.string = RATING_LABELS[verification.rating]
        confidence = new_tag("span", {"class": "claim-overlay-tooltip-confidence"})
        confidence.string = f"{round(verification.confidence * 100)}% confidence"
        header.append(label)
        header.append(confidence)
        tooltip.append(header)

        if verification.summary:
            summary = new_tag("p", {"class": "claim-overlay-tooltip-summary"})
            summary.string = verification.summary
            tooltip.append(summary)

        if verification.evidence:
            sources = new_tag("ul", {"class": "claim-overlay-tooltip-sources"})
            for evidence in verification.evidence[:MAX_SOURCES]:
                item = new_tag("li")
                link = new_tag("a", {"href": evidence.url, "target": "_blank", "rel": "noopener noreferrer"})
                link.string = evidence.source_name
                item.append(link)
                if evidence.peer_reviewed:
                    mark = new_tag("span", {"class": "claim-overlay-peer-reviewed"})
                    mark.string = "✓ Peer-reviewed"
                    item.append(mark)
                sources.append(item)
            tooltip.append(sources)

        if verification.caveats:
            caveat = new_tag("p", {"class": "claim-overlay-tooltip-caveat"})
            caveat.string = f"⚠️ {verification.caveats[0]}"
            tooltip.append(caveat)

        return tooltip

    def _style_for(self, element: Tag, tracked: TrackedClaim) -> str:
        layout = self._host.layout
        width, height = layout.measure(element)
        scroll = layout.scroll_offset()
        if tracked.snapshot:
            anchor = tracked.snapshot[0]
        else:
            anchor = Rect(top=scroll[1], left=scroll[0], width=0, height=0)
        top, left = tooltip_position(anchor, (width, height), scroll, layout.viewport_size())
        return (
            f"position:absolute;top:{top:g}px;left:{left:g}px;width:{width:g}px;"
            "pointer-events:auto;z-index:2147483647"
        )
