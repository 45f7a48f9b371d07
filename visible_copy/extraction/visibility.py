"""Visibility checks against a rendered document."""

from visible_copy.dom.document import Document


def parse_opacity(value: str) -> float:
    """
    Parse a computed opacity value.

    Returns:
        float: Opacity clamped to [0, 1], or 1.0 if the value does not parse
    """
    try:
        return max(0.0, min(1.0, float(value)))
    except (ValueError, TypeError):
        return 1.0


def is_visible(document: Document, node_id: int) -> bool:
    """
    Check if a node is visible.

    Excludes display:none, visibility:hidden, opacity 0 and elements whose
    rendered width and height are both zero. Elements scrolled out of view or
    covered by other elements still count as visible. Text and comment nodes
    are always visible; they are filtered through their parent element.

    Args:
        document: Live document holding the node's layout
        node_id: Node to check

    Returns:
        bool indicating if the node is visible
    """
    if not document.node(node_id).is_element:
        return True

    style = document.computed_style(node_id)
    if style.get("display") == "none":
        return False
    if style.get("visibility") == "hidden":
        return False
    if parse_opacity(style.get("opacity", "1")) == 0:
        return False

    width, height = document.offset_size(node_id)
    if width == 0 and height == 0:
        return False

    return True
