"""
Element boxes in page or viewport coordinates.
"""

from dataclasses import dataclass, replace

from visible_copy.dom.models import Position


@dataclass(frozen=True)
class BoundingBox:
    """
    Rendered box of an element.

    Attributes:
        left: X-coordinate of the left edge
        top: Y-coordinate of the top edge
        width: Rendered width (offsetWidth for snapshot nodes)
        height: Rendered height (offsetHeight for snapshot nodes)
    """
    left: float
    top: float
    width: float = 0.0
    height: float = 0.0

    @property
    def right(self) -> float:
        return self.left + self.width

    @property
    def bottom(self) -> float:
        return self.top + self.height

    @property
    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0

    def contains_point(self, x: float, y: float) -> bool:
        """Edges count as inside; an empty box contains nothing."""
        if self.is_empty:
            return False
        return self.left <= x <= self.right and self.top <= y <= self.bottom

    @classmethod
    def from_position(cls, position: Position) -> "BoundingBox":
        """Box of a snapshot position record (page coordinates)."""
        return cls(
            left=float(position.get("x", 0)),
            top=float(position.get("y", 0)),
            width=float(position.get("width", 0)),
            height=float(position.get("height", 0)),
        )

    def translate(self, dx: float, dy: float) -> "BoundingBox":
        """The same box moved by an offset, e.g. from page to viewport coordinates."""
        return replace(self, left=self.left + dx, top=self.top + dy)
