"""Finds the on-screen rectangles of a claim's text."""

import logging
from enum import Enum
from typing import Iterator, List, Optional, Sequence

from bs4 import Comment, Declaration, Doctype, NavigableString, ProcessingInstruction, Tag

from ..models.geometry import Rect, TextRange
from ..models.markers import OVERLAY_CONTAINER_ID
from ..ports.layout import LayoutEngine

logger = logging.getLogger(__name__)

SEARCH_PREFIX_LENGTHS = (80, 50, 30)

_NON_TEXT_STRINGS = (Comment, Declaration, Doctype, ProcessingInstruction)


class LocateStrategy(str, Enum):
    """Which strategy produced the rects."""

    RANGE = "range"
    SEARCH = "search"
    SNAPSHOT = "snapshot"
    NONE = "none"


class LocateResult:
    """Document-coordinate rects for a claim and how they were found."""

    def __init__(self, rects: List[Rect], strategy: LocateStrategy, text_range: Optional[TextRange] = None):
        self.rects = rects
        self.strategy = strategy
        self.text_range = text_range

    @property
    def found(self) -> bool:
        return bool(self.rects)

    @property
    def is_live(self) -> bool:
        """Rects come from the current document, not a stored snapshot."""
        return self.strategy in (LocateStrategy.RANGE, LocateStrategy.SEARCH)

    def __repr__(self) -> str:
        return f"LocateResult(strategy={self.strategy.value}, rects={len(self.rects)})"


class SpanLocator:
    """Locates claim text with the captured range, a text search, then a snapshot."""

    def __init__(self, layout: LayoutEngine, root: Tag):
        self._layout = layout
        self._root = root

    def locate(
        self,
        text: str,
        source_range: Optional[TextRange] = None,
        snapshot: Optional[Sequence[Rect]] = None,
    ) -> LocateResult:
        """Find document-relative rects for a claim.

        Args:
            text: Claim text
            source_range: Range captured when the claim was extracted
            snapshot: Last successfully located rects

        Returns:
            Rects in document coordinates, possibly empty
        """
        if source_range is not None and source_range.is_valid(self._root) and not source_range.is_collapsed:
            rects = self.rects_for(source_range)
            if rects:
                return LocateResult(rects, LocateStrategy.RANGE, source_range)

        for found in self.candidates(text):
            rects = self.rects_for(found)
            if rects:
                return LocateResult(rects, LocateStrategy.SEARCH, found)

        if snapshot:
            logger.debug(f"📌 Falling back to snapshot for: {text[:50]}")
            return LocateResult(list(snapshot), LocateStrategy.SNAPSHOT)

        return LocateResult([], LocateStrategy.NONE)

    def search(self, text: str) -> Optional[TextRange]:
        """Re-find a claim on the page; the first occurrence that renders wins."""
        for found in self.candidates(text):
            if self.rects_for(found):
                return found
        return None

    def candidates(self, text: str) -> Iterator[TextRange]:
        """Ranges containing the claim by progressively shorter prefixes, in document order."""
        text = text.strip()
        for length in SEARCH_PREFIX_LENGTHS:
            prefix = text[:length]
            if not prefix:
                continue
            for node in self._text_nodes(self._root):
                index = str(node).find(prefix)
                if index < 0:
                    continue
                end = min(index + len(text), len(node))
                try:
                    yield TextRange.over(node, index, end)
                except ValueError as e:
                    logger.warning(f"⚠️ Could not build range from search hit: {e}")

    def rects_for(self, text_range: TextRange) -> List[Rect]:
        """Client rects of a range, filtered and converted to document coordinates."""
        try:
            client_rects = self._layout.client_rects(text_range)
        except Exception as e:
            logger.warning(f"⚠️ Geometry construction failed: {e}")
            return []
        scroll_x, scroll_y = self._layout.scroll_offset()
        return [rect.translate(scroll_x, scroll_y) for rect in client_rects if rect.at_least()]

    def _text_nodes(self, element: Tag) -> Iterator[NavigableString]:
        for node in element.descendants:
            if not isinstance(node, NavigableString) or isinstance(node, _NON_TEXT_STRINGS):
                continue
            if node.find_parent(id=OVERLAY_CONTAINER_ID) is not None:
                continue
            yield node
