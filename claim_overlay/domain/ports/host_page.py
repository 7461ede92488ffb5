"""Protocol for the host page the overlay is drawn on."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Protocol

from bs4 import BeautifulSoup, Tag

from .layout import LayoutEngine


class HostEvent(str, Enum):
    """Events a host page delivers to subscribers."""

    MUTATION = "mutation"  # callback(records: List[MutationRecord])
    SCROLL = "scroll"  # callback()
    RESIZE = "resize"  # callback()
    POINTER_ENTER = "pointer_enter"  # callback(element: Tag)
    POINTER_LEAVE = "pointer_leave"  # callback(element: Tag)


class MutationKind(str, Enum):
    CHILD_LIST = "childList"
    CHARACTER_DATA = "characterData"
    ATTRIBUTES = "attributes"


@dataclass
class MutationRecord:
    """One observed change to the document tree."""

    kind: MutationKind
    target: Any
    added: List[Any] = field(default_factory=list)
    removed: List[Any] = field(default_factory=list)
    attribute: Optional[str] = None


Unsubscribe = Callable[[], None]


class HostPage(Protocol):
    """A live document: tree, geometry, mutation and event source."""

    @property
    def soup(self) -> BeautifulSoup:
        """The document tree."""
        ...

    @property
    def body(self) -> Tag:
        """The document body."""
        ...

    @property
    def url(self) -> str:
        """URL of the page."""
        ...

    @property
    def layout(self) -> LayoutEngine:
        """Geometry oracle for the document."""
        ...

    def subscribe(self, event: HostEvent, callback: Callable[..., None]) -> Unsubscribe:
        """Register a listener; returns a callable removing it."""
        ...

    def new_tag(self, name: str, attrs: Optional[Dict[str, str]] = None) -> Tag:
        """Create a detached element owned by this document."""
        ...

    def append(self, parent: Tag, child: Any) -> None:
        """Append a node and notify mutation observers."""
        ...

    def remove(self, node: Any) -> None:
        """Detach a node and notify mutation observers."""
        ...

    def set_attribute(self, element: Tag, name: str, value: str) -> None:
        """Set an attribute and notify mutation observers."""
        ...
