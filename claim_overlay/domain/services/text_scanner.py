"""Walks visible page text, skipping non-content regions."""

import logging
import re
from dataclasses import dataclass
from typing import Iterator, Optional

from bs4 import Comment, Declaration, Doctype, NavigableString, ProcessingInstruction, Tag

from ..models.markers import OVERLAY_CLASSES, OVERLAY_CONTAINER_ID, class_list
from ..ports.layout import LayoutEngine

logger = logging.getLogger(__name__)

SKIP_TAGS = frozenset({
    "script", "style", "noscript", "iframe", "frame", "object", "embed", "svg", "canvas",
    "code", "pre", "template", "textarea", "select", "option", "button", "input", "form",
    "nav", "header", "footer", "aside", "head", "title",
})

SKIP_ROLES = frozenset({"navigation", "banner", "contentinfo", "complementary", "search", "form"})

AD_SIGNATURE = re.compile(
    r"(?:^|[-_\s])(?:ad|ads|advert|advertisement|adslot|ad-slot|adunit|banner-ad|dfp|"
    r"sponsor|sponsored|promo|promoted|promotion|outbrain|taboola)(?:$|[-_\s\d])",
    re.IGNORECASE,
)

_NON_TEXT_STRINGS = (Comment, Declaration, Doctype, ProcessingInstruction)


@dataclass(frozen=True)
class TextUnit:
    """One text node of visible content, in document order."""

    index: int
    node: NavigableString

    @property
    def text(self) -> str:
        return str(self.node)

    @property
    def element(self) -> Optional[Tag]:
        return self.node.parent


def has_ad_signature(element: Tag) -> bool:
    """Check class and id of an element against the ad/sponsor/promo signature."""
    candidates = class_list(element)
    element_id = element.get("id")
    if element_id:
        candidates.append(element_id)
    return any(AD_SIGNATURE.search(value) for value in candidates)


class TextScanner:
    """Produces the visible text units under a root element.

    Iteration is lazy and read-only; every call to iter_text_units starts a
    fresh walk, so a scan can be restarted after the page changes.
    """

    def __init__(self, layout: LayoutEngine, ancestor_depth: int = 5):
        self._layout = layout
        self._ancestor_depth = ancestor_depth

    def iter_text_units(self, root: Tag) -> Iterator[TextUnit]:
        """Yield visible, non-empty text units in document order."""
        index = 0
        for node in self._walk(root):
            if not node.strip():
                continue
            parent = node.parent
            if parent is not None and self._under_ad_container(parent):
                continue
            yield TextUnit(index=index, node=node)
            index += 1

    def _walk(self, element: Tag) -> Iterator[NavigableString]:
        for child in element.children:
            if isinstance(child, _NON_TEXT_STRINGS):
                continue
            if isinstance(child, NavigableString):
                yield child
            elif isinstance(child, Tag) and not self.should_skip(child):
                yield from self._walk(child)

    def should_skip(self, element: Tag) -> bool:
        """Whether an element and its subtree are excluded from scanning."""
        if element.name in SKIP_TAGS:
            return True
        if element.get("id") == OVERLAY_CONTAINER_ID:
            return True
        if any(cls in OVERLAY_CLASSES for cls in class_list(element)):
            return True
        role = (element.get("role") or "").strip().lower()
        if role in SKIP_ROLES:
            return True
        try:
            if not self._layout.computed_style(element).is_visible:
                return True
        except Exception as e:
            logger.debug(f"Could not resolve style for <{element.name}>: {e}")
        return False

    def _under_ad_container(self, element: Tag) -> bool:
        """Check the element and a bounded number of ancestors for ad markers."""
        current: Optional[Tag] = element
        depth = 0
        while current is not None and isinstance(current, Tag) and depth <= self._ancestor_depth:
            if current.name in ("body", "html", "[document]"):
                break
            if has_ad_signature(current):
                return True
            current = current.parent
            depth += 1
        return False
