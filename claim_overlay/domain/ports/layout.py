"""Protocol for layout engines that answer geometry questions about a page."""

from typing import List, Protocol, Tuple

from bs4 import Tag
from pydantic import BaseModel, Field

from ..models.geometry import Rect, TextRange


class ComputedStyle(BaseModel):
    """The subset of computed style the overlay cares about."""

    display: str = Field(default="inline", description="CSS display value")
    visibility: str = Field(default="visible", description="CSS visibility value")
    opacity: float = Field(default=1.0, description="CSS opacity value")
    position: str = Field(default="static", description="CSS position value")

    @property
    def is_visible(self) -> bool:
        return self.display != "none" and self.visibility != "hidden" and self.opacity != 0


class LayoutEngine(Protocol):
    """Geometry oracle for a host document.

    Client rects are viewport-relative, exactly as a browser reports them;
    callers add the scroll offset to obtain document coordinates.
    """

    def computed_style(self, element: Tag) -> ComputedStyle:
        """Resolve the computed style of an element."""
        ...

    def client_rects(self, text_range: TextRange) -> List[Rect]:
        """Return one rect per line box covered by the range.

        Raises:
            ValueError: If the range no longer maps onto laid-out text
        """
        ...

    def measure(self, element: Tag) -> Tuple[float, float]:
        """Return (width, height) of a floating element such as a tooltip."""
        ...

    def scroll_offset(self) -> Tuple[float, float]:
        """Return the current (scroll_x, scroll_y)."""
        ...

    def viewport_size(self) -> Tuple[float, float]:
        """Return the current (width, height) of the viewport."""
        ...

    def invalidate(self) -> None:
        """Drop any cached layout after the document changed."""
        ...
