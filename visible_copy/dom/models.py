from dataclasses import dataclass, field
from enum import StrEnum
from typing import Optional, TypedDict


class NodeKind(StrEnum):
    COMMENT = "comment"
    ELEMENT = "element"
    TEXT = "text"


class Position(TypedDict):
    """Represents an element's page position and rendered dimensions."""
    height: float
    width: float
    x: float
    y: float


class ComputedStyle(TypedDict, total=False):
    """Represents the computed style properties the picker reads."""
    display: str
    opacity: str
    pointer_events: str
    visibility: str


class NodeRecord(TypedDict, total=False):
    """A node of a page snapshot as returned by the snapshot script."""
    attributes: list[list[str]]
    children: list["NodeRecord"]
    id: int
    kind: str
    position: Position
    style: ComputedStyle
    tag: str
    text: str


class SelectionRecord(TypedDict):
    """Start/end container ids of the first range of the page selection."""
    end: int
    start: int


class SnapshotRecord(TypedDict, total=False):
    """The complete snapshot of a rendered page."""
    root: NodeRecord
    scroll: dict[str, float]
    selection: Optional[SelectionRecord]
    target: Optional[int]
    viewport: dict[str, float]


@dataclass
class Node:
    """
    A node of a document tree.

    Attributes:
        attributes: Ordered (name, value) pairs, elements only
        children: Ordered child node ids
        kind: Element, text or comment
        node_id: Arena id, never reused within a tree
        parent: Parent node id, None for detached roots
        tag: Lower-case tag name, elements only
        text: Character data of text and comment nodes
    """
    kind: NodeKind
    node_id: int
    attributes: list[tuple[str, str]] = field(default_factory=list)
    children: list[int] = field(default_factory=list)
    parent: Optional[int] = None
    tag: str = ""
    text: str = ""

    @property
    def is_element(self) -> bool:
        return self.kind == NodeKind.ELEMENT

    @property
    def is_text(self) -> bool:
        return self.kind == NodeKind.TEXT


@dataclass
class SelectionRange:
    """A document text selection reduced to its boundary containers."""
    end_container: int
    start_container: int
    collapsed: bool = False
