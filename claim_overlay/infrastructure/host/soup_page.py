"""BeautifulSoup-backed host page with a headless layout."""

import logging
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from bs4 import BeautifulSoup, NavigableString, Tag

from ...domain.ports.host_page import HostEvent, MutationKind, MutationRecord, Unsubscribe
from .static_layout import LayoutConfig, StaticLayout

logger = logging.getLogger(__name__)


class SoupHostPage:
    """Host page over a parsed HTML document.

    Every change made through this object, by the page's own "scripts" or by
    the overlay, is reported to mutation observers, and viewport changes are
    reported to scroll and resize listeners, the way a browser would.
    """

    def __init__(
        self,
        html: str,
        url: str = "",
        layout_config: Optional[LayoutConfig] = None,
        parser: str = "lxml",
    ):
        self._soup = BeautifulSoup(html, parser)
        if self._soup.body is None:
            body = self._soup.new_tag("body")
            if self._soup.html is not None:
                self._soup.html.append(body)
            else:
                self._soup.append(body)
        self._url = url
        self._layout = StaticLayout(self._soup, layout_config)
        self._listeners: Dict[HostEvent, List[Callable[..., None]]] = {event: [] for event in HostEvent}

    @classmethod
    def from_file(cls, path: str, url: Optional[str] = None, **kwargs: Any) -> "SoupHostPage":
        """Load a page from an HTML file on disk."""
        file_path = Path(path)
        html = file_path.read_text(encoding="utf-8")
        return cls(html, url=url or file_path.resolve().as_uri(), **kwargs)

    @property
    def soup(self) -> BeautifulSoup:
        return self._soup

    @property
    def body(self) -> Tag:
        return self._soup.body

    @property
    def url(self) -> str:
        return self._url

    @property
    def layout(self) -> StaticLayout:
        return self._layout

    # Subscriptions

    def subscribe(self, event: HostEvent, callback: Callable[..., None]) -> Unsubscribe:
        self._listeners[event].append(callback)

        def unsubscribe() -> None:
            if callback in self._listeners[event]:
                self._listeners[event].remove(callback)

        return unsubscribe

    def _emit(self, event: HostEvent, *args: Any) -> None:
        for callback in list(self._listeners[event]):
            try:
                callback(*args)
            except Exception as e:
                logger.error(f"❌ {event.value} listener failed: {e}", exc_info=True)

    # Tree mutations

    def new_tag(self, name: str, attrs: Optional[Dict[str, str]] = None) -> Tag:
        return self._soup.new_tag(name, attrs=attrs or {})

    def append(self, parent: Tag, child: Any) -> None:
        if isinstance(child, str) and not isinstance(child, NavigableString):
            child = NavigableString(child)
        parent.append(child)
        self._mutated(MutationRecord(kind=MutationKind.CHILD_LIST, target=parent, added=[child]))

    def insert_before(self, reference: Any, node: Any) -> None:
        parent = reference.parent
        reference.insert_before(node)
        self._mutated(MutationRecord(kind=MutationKind.CHILD_LIST, target=parent, added=[node]))

    def remove(self, node: Any) -> None:
        parent = node.parent
        if parent is None:
            return
        node.extract()
        self._mutated(MutationRecord(kind=MutationKind.CHILD_LIST, target=parent, removed=[node]))

    def replace_with(self, old: Any, new: Any) -> None:
        """Swap a node for another, as framework re-renders do."""
        parent = old.parent
        old.replace_with(new)
        self._mutated(MutationRecord(kind=MutationKind.CHILD_LIST, target=parent, added=[new], removed=[old]))

    def replace_text(self, node: NavigableString, text: str) -> NavigableString:
        """Replace a text node's data; returns the new node."""
        parent = node.parent
        fresh = NavigableString(text)
        node.replace_with(fresh)
        self._mutated(MutationRecord(kind=MutationKind.CHARACTER_DATA, target=parent, added=[fresh], removed=[node]))
        return fresh

    def set_attribute(self, element: Tag, name: str, value: str) -> None:
        element[name] = value
        self._mutated(MutationRecord(kind=MutationKind.ATTRIBUTES, target=element, attribute=name))

    def _mutated(self, record: MutationRecord) -> None:
        self._layout.invalidate()
        self._emit(HostEvent.MUTATION, [record])

    # Viewport

    def scroll_to(self, x: float, y: float) -> None:
        self._layout.scroll_to(x, y)
        self._emit(HostEvent.SCROLL)

    def scroll_by(self, dx: float, dy: float) -> None:
        x, y = self._layout.scroll_offset()
        self.scroll_to(x + dx, y + dy)

    def resize(self, width: float, height: float) -> None:
        self._layout.resize(width, height)
        self._emit(HostEvent.RESIZE)

    # Pointer

    def pointer_enter(self, element: Tag) -> None:
        self._emit(HostEvent.POINTER_ENTER, element)

    def pointer_leave(self, element: Tag) -> None:
        self._emit(HostEvent.POINTER_LEAVE, element)
