"""Draws rating-styled markers over claim text without touching host content."""

import logging
from typing import Dict, List, Optional, Sequence

from bs4 import Tag

from ..models.geometry import Rect
from ..models.markers import (
    CLAIM_ID_ATTR,
    HIGHLIGHT_CLASS,
    OVERLAY_CLASSES,
    OVERLAY_CONTAINER_ID,
    RATING_ATTR,
    class_list,
)
from ..models.tracked_claim import TrackedClaim
from ..models.verification import RATING_COLORS, Rating, border_style_for
from ..ports.host_page import HostPage
from .claim_registry import ClaimRegistry

logger = logging.getLogger(__name__)

CONTAINER_STYLE = (
    "position:absolute;top:0;left:0;width:0;height:0;"
    "pointer-events:none;z-index:2147483646"
)


def marker_style(rect: Rect, rating: Rating) -> str:
    """Inline style of one marker: document position plus rating colors."""
    color = RATING_COLORS[rating]
    return (
        f"position:absolute;top:{rect.top:g}px;left:{rect.left:g}px;"
        f"width:{rect.width:g}px;height:{rect.height:g}px;"
        f"background-color:{color}22;border-bottom:2px {border_style_for(rating)} {color};"
        "pointer-events:auto;cursor:pointer;box-sizing:border-box"
    )


def parse_marker_style(marker: Tag) -> Dict[str, str]:
    """Read a marker's inline style back into a property map."""
    declarations = {}
    for chunk in (marker.get("style") or "").split(";"):
        name, sep, value = chunk.partition(":")
        if sep:
            declarations[name.strip()] = value.strip()
    return declarations


def is_overlay_node(node) -> bool:
    """Whether a node is the container, one of its descendants, or a marker or tooltip."""
    if isinstance(node, Tag):
        if node.get("id") == OVERLAY_CONTAINER_ID:
            return True
        if any(cls in OVERLAY_CLASSES for cls in class_list(node)):
            return True
    return node is not None and node.find_parent(id=OVERLAY_CONTAINER_ID) is not None


class OverlayRenderer:
    """Owns the overlay container and the markers inside it."""

    def __init__(self, host: HostPage, registry: ClaimRegistry):
        self._host = host
        self._registry = registry
        self._container: Optional[Tag] = None

    @property
    def container(self) -> Optional[Tag]:
        return self._container

    def ensure_container(self) -> Tag:
        """Create the overlay container on first use."""
        if self._container is None or self._container.parent is None:
            container = self._host.new_tag("div", {"id": OVERLAY_CONTAINER_ID, "style": CONTAINER_STYLE})
            self._host.append(self._host.body, container)
            self._container = container
        return self._container

    def draw(self, tracked: TrackedClaim, rects: Sequence[Rect]) -> List[Tag]:
        """Replace a claim's markers with one marker per rect.

        Args:
            tracked: Claim whose overlays are redrawn
            rects: Document-relative rects

        Returns:
            The new markers, also recorded in the registry
        """
        self.remove_overlays(tracked, prune=False)
        if not rects:
            self._prune()
            return []

        container = self.ensure_container()
        markers: List[Tag] = []
        for rect in rects:
            try:
                marker = self._host.new_tag("div", {
                    "class": HIGHLIGHT_CLASS,
                    CLAIM_ID_ATTR: tracked.claim_id,
                    RATING_ATTR: tracked.rating.value,
                    "style": marker_style(rect, tracked.rating),
                })
                self._host.append(container, marker)
                markers.append(marker)
            except Exception as e:
                logger.warning(f"⚠️ Failed to draw marker for {tracked.claim_id}: {e}")
        self._registry.set_overlays(tracked.claim_id, markers)
        return markers

    def restyle(self, tracked: TrackedClaim) -> None:
        """Apply the claim's current rating to its markers in place."""
        rating = tracked.rating
        color = RATING_COLORS[rating]
        for marker in tracked.overlays:
            style = parse_marker_style(marker)
            style["background-color"] = f"{color}22"
            style["border-bottom"] = f"2px {border_style_for(rating)} {color}"
            self._host.set_attribute(marker, RATING_ATTR, rating.value)
            self._host.set_attribute(marker, "style", ";".join(f"{k}:{v}" for k, v in style.items()))

    def remove_overlays(self, tracked: TrackedClaim, prune: bool = True) -> None:
        """Detach a claim's markers."""
        for marker in tracked.overlays:
            if marker.parent is not None:
                self._host.remove(marker)
        if tracked.claim_id in self._registry:
            self._registry.set_overlays(tracked.claim_id, [])
        if prune:
            self._prune()

    def remove_all(self) -> None:
        """Detach the container and everything in it."""
        if self._container is not None and self._container.parent is not None:
            self._host.remove(self._container)
        self._container = None

    def markers_for(self, claim_id: str) -> List[Tag]:
        """Markers in the document that belong to a claim."""
        if self._container is None:
            return []
        return self._container.find_all("div", attrs={"class": HIGHLIGHT_CLASS, CLAIM_ID_ATTR: claim_id})

    def _prune(self) -> None:
        if self._container is not None and not self._container.find(True):
            self.remove_all()
