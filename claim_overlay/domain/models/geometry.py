"""Geometry primitives: rectangles and text ranges over the host document."""

from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Tuple

from bs4 import BeautifulSoup, NavigableString, Tag

# Rects smaller than this in either dimension are whitespace slivers.
MIN_RECT_SIZE = 5.0


@dataclass(frozen=True)
class Rect:
    """Axis-aligned rectangle.

    Whether it is viewport-relative (a client rect) or document-relative
    depends on where it came from; the locator converts client rects to
    document coordinates before anything stores them.
    """

    top: float
    left: float
    width: float
    height: float

    @property
    def bottom(self) -> float:
        return self.top + self.height

    @property
    def right(self) -> float:
        return self.left + self.width

    @property
    def is_degenerate(self) -> bool:
        """True for rects with no area."""
        return self.width <= 0 or self.height <= 0

    def at_least(self, min_width: float = MIN_RECT_SIZE, min_height: float = MIN_RECT_SIZE) -> bool:
        """Check the rect is large enough to be a real glyph run."""
        return self.width >= min_width and self.height >= min_height

    def translate(self, dx: float, dy: float) -> "Rect":
        """Return the rect shifted by (dx, dy)."""
        return Rect(top=self.top + dy, left=self.left + dx, width=self.width, height=self.height)

    def to_dict(self) -> dict:
        return {"top": self.top, "left": self.left, "width": self.width, "height": self.height}


def is_attached(node, root: Optional[Tag] = None) -> bool:
    """Check that a node is still reachable from the document root."""
    current = node
    while current is not None:
        if root is not None and current is root:
            return True
        if isinstance(current, BeautifulSoup):
            return root is None
        current = current.parent
    return False


def is_inside(node, ancestor: Optional[Tag]) -> bool:
    """Identity-based ancestor test (bs4 compares strings by value)."""
    if ancestor is None:
        return False
    current = node
    while current is not None:
        if current is ancestor:
            return True
        current = current.parent
    return False


@dataclass(frozen=True)
class RangeSegment:
    """A slice of one text node."""

    node: NavigableString
    start: int
    end: int

    @property
    def text(self) -> str:
        return str(self.node)[self.start:self.end]


@dataclass
class TextRange:
    """A document range made of one or more text-node slices.

    Mirrors a DOM Range: a span may cross element boundaries, in which case it
    holds one segment per text node in document order.
    """

    segments: List[RangeSegment] = field(default_factory=list)

    @classmethod
    def over(cls, node: NavigableString, start: int, end: int) -> "TextRange":
        """Build a single-node range, validating the offsets."""
        length = len(node)
        if start < 0 or end > length or start > end:
            raise ValueError(f"Invalid range offsets {start}..{end} for node of length {length}")
        return cls(segments=[RangeSegment(node=node, start=start, end=end)])

    def __iter__(self) -> Iterator[RangeSegment]:
        return iter(self.segments)

    def __len__(self) -> int:
        return len(self.segments)

    @property
    def text(self) -> str:
        return "".join(segment.text for segment in self.segments)

    @property
    def is_collapsed(self) -> bool:
        return all(segment.start == segment.end for segment in self.segments)

    def is_valid(self, root: Optional[Tag] = None) -> bool:
        """A range stays valid while every node is attached and offsets fit."""
        if not self.segments:
            return False
        for segment in self.segments:
            if not is_attached(segment.node, root):
                return False
            if segment.end > len(segment.node) or segment.start > segment.end:
                return False
        return True

    def bounds(self) -> Tuple[RangeSegment, RangeSegment]:
        return self.segments[0], self.segments[-1]
