"""Deterministic headless layout engine for parsed HTML documents."""

import logging
from typing import Dict, List, Optional, Tuple

from bs4 import BeautifulSoup, Comment, Declaration, Doctype, NavigableString, ProcessingInstruction, Tag
from pydantic import BaseModel, Field

from ...domain.models.geometry import Rect, TextRange, is_attached
from ...domain.ports.layout import ComputedStyle

logger = logging.getLogger(__name__)

BLOCK_TAGS = frozenset({
    "html", "body", "div", "p", "h1", "h2", "h3", "h4", "h5", "h6", "ul", "ol", "li",
    "section", "article", "header", "footer", "nav", "aside", "main", "blockquote",
    "figure", "figcaption", "table", "thead", "tbody", "tr", "td", "th", "form",
    "pre", "address", "dl", "dt", "dd", "hr", "fieldset",
})

NON_RENDERED_TAGS = frozenset({"head", "script", "style", "noscript", "template", "title", "meta", "link"})

_NON_TEXT_STRINGS = (Comment, Declaration, Doctype, ProcessingInstruction)


class LayoutConfig(BaseModel):
    """Metrics of the headless layout."""

    viewport_width: float = Field(default=1024.0, description="Viewport width in px")
    viewport_height: float = Field(default=768.0, description="Viewport height in px")
    char_width: float = Field(default=8.0, description="Advance of one character cell")
    line_height: float = Field(default=20.0, description="Height of one line box")
    tooltip_width: float = Field(default=320.0, description="Width of floating popups")
    tooltip_padding: float = Field(default=24.0, description="Vertical padding of floating popups")


def parse_inline_style(value: Optional[str]) -> Dict[str, str]:
    """Parse a style attribute into a property map."""
    declarations = {}
    for chunk in (value or "").split(";"):
        name, sep, prop = chunk.partition(":")
        if sep:
            declarations[name.strip().lower()] = prop.strip().lower()
    return declarations


class StaticLayout:
    """Lays text out in fixed-width character cells.

    Block elements stack vertically, inline text flows left to right and wraps
    at the viewport width, and runs of whitespace collapse. Absolutely
    positioned elements are out of flow, so overlays drawn on top never move
    the text underneath. The layout is computed lazily and cached until
    invalidate() is called.
    """

    def __init__(self, soup: BeautifulSoup, config: Optional[LayoutConfig] = None):
        self._soup = soup
        self._config = config or LayoutConfig()
        self._viewport = (self._config.viewport_width, self._config.viewport_height)
        self._scroll = (0.0, 0.0)
        # id(node) -> (node, per-character (x, y) or None when collapsed)
        self._positions: Optional[Dict[int, Tuple[NavigableString, List[Optional[Tuple[float, float]]]]]] = None
        self._document_height = 0.0

    @property
    def config(self) -> LayoutConfig:
        return self._config

    # Style

    def computed_style(self, element: Tag) -> ComputedStyle:
        """Resolve display, visibility, opacity and position of an element."""
        declared = parse_inline_style(element.get("style"))
        if element.name in NON_RENDERED_TAGS:
            display = "none"
        else:
            display = declared.get("display", "block" if element.name in BLOCK_TAGS else "inline")
        if element.has_attr("hidden"):
            display = "none"
        try:
            opacity = float(declared.get("opacity", "1"))
        except ValueError:
            opacity = 1.0
        return ComputedStyle(
            display=display,
            visibility=declared.get("visibility", "visible"),
            opacity=opacity,
            position=declared.get("position", "static"),
        )

    # Viewport

    def scroll_offset(self) -> Tuple[float, float]:
        return self._scroll

    def viewport_size(self) -> Tuple[float, float]:
        return self._viewport

    def scroll_to(self, x: float, y: float) -> None:
        self._scroll = (max(0.0, x), max(0.0, y))

    def resize(self, width: float, height: float) -> None:
        self._viewport = (width, height)
        self.invalidate()

    @property
    def document_height(self) -> float:
        self._ensure_layout()
        return self._document_height

    def invalidate(self) -> None:
        self._positions = None

    # Geometry

    def client_rects(self, text_range: TextRange) -> List[Rect]:
        """One viewport-relative rect per line box covered by the range."""
        if not text_range.is_valid():
            raise ValueError("Range no longer points into the document")
        positions = self._ensure_layout()
        scroll_x, scroll_y = self._scroll
        cell, line = self._config.char_width, self._config.line_height

        rects: List[Rect] = []
        for segment in text_range:
            entry = positions.get(id(segment.node))
            if entry is None or entry[0] is not segment.node:
                continue  # not rendered
            cells = entry[1]
            lines: Dict[float, List[float]] = {}
            for index in range(segment.start, min(segment.end, len(cells))):
                point = cells[index]
                if point is not None:
                    lines.setdefault(point[1], []).append(point[0])
            for y in sorted(lines):
                xs = lines[y]
                left = min(xs)
                rects.append(Rect(
                    top=y - scroll_y,
                    left=left - scroll_x,
                    width=max(xs) + cell - left,
                    height=line,
                ))
        return rects

    def measure(self, element: Tag) -> Tuple[float, float]:
        """Size of a floating element: fixed width, height from wrapped text."""
        width = min(self._config.tooltip_width, self._viewport[0] - 16)
        per_line = max(1, int(width // self._config.char_width))
        text = " ".join(element.get_text(" ").split())
        lines = max(1, -(-len(text) // per_line))
        return width, lines * self._config.line_height + self._config.tooltip_padding

    # Internals

    def _ensure_layout(self) -> Dict[int, Tuple[NavigableString, List[Optional[Tuple[float, float]]]]]:
        if self._positions is None:
            self._positions = {}
            root = self._soup.body or self._soup
            flow = _Flow(self._config, self._viewport[0])
            self._lay_out(root, flow)
            flow.break_line()
            self._document_height = flow.y
            logger.debug(f"📐 Laid out {len(self._positions)} text nodes, height={flow.y:.0f}px")
        return self._positions

    def _lay_out(self, node, flow: "_Flow") -> None:
        for child in node.children:
            if isinstance(child, _NON_TEXT_STRINGS):
                continue
            if isinstance(child, NavigableString):
                self._positions[id(child)] = (child, flow.place_text(str(child)))
                continue
            if not isinstance(child, Tag):
                continue
            if child.name == "br":
                flow.break_line(force=True)
                continue
            style = self.computed_style(child)
            if not style.is_visible or style.position in ("absolute", "fixed"):
                continue
            block = style.display in ("block", "list-item", "flex", "grid", "table")
            if block:
                flow.break_line()
            self._lay_out(child, flow)
            if block:
                flow.break_line()


class _Flow:
    """Cursor state of one layout pass."""

    def __init__(self, config: LayoutConfig, width: float):
        self.cell = config.char_width
        self.line = config.line_height
        self.width = max(width, self.cell)
        self.x = 0.0
        self.y = 0.0
        self.last_was_space = True

    def break_line(self, force: bool = False) -> None:
        if self.x > 0 or force:
            self.y += self.line
            self.x = 0.0
        self.last_was_space = True

    def place_text(self, text: str) -> List[Optional[Tuple[float, float]]]:
        cells: List[Optional[Tuple[float, float]]] = []
        for char in text:
            space = char.isspace()
            if space and self.last_was_space:
                cells.append(None)
                continue
            if self.x + self.cell > self.width:
                self.break_line()
                if space:
                    cells.append(None)
                    continue
            cells.append((self.x, self.y))
            self.x += self.cell
            self.last_was_space = space
        return cells
