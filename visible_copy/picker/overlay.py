"""Highlight overlay and breadcrumb trail."""

from typing import Optional

from visible_copy.dom.document import Document
from visible_copy.dom.tree import NodeTree

CRUMB_SEPARATOR = "›"
LOCKED_CLASS = "vc-highlight-locked"


def element_label(tree: NodeTree, node_id: int) -> str:
    """
    Generate a short label for an element.

    Returns:
        str: tag#id, or tag followed by up to two classes (class part capped
        at 20 characters)
    """
    label = tree.tag(node_id)
    element_id = tree.get_attribute(node_id, "id")
    if element_id:
        return f"{label}#{element_id}"

    classes = tree.class_list(node_id)[:2]
    if classes:
        label += ("." + ".".join(classes))[:20]
    return label


class HighlightOverlay:
    """Positioned box drawn over the element of interest."""

    def __init__(self, document: Document, token: str) -> None:
        self.document = document
        self.node: Optional[int] = document.create_element(
            "div", {"id": "vc-highlight", token: "", "style": "display: none"}
        )
        document.append_child(document.document_element, self.node)

    def position(self, node_id: int) -> None:
        if self.node is None or node_id not in self.document:
            return

        rect = self.document.bounding_client_rect(node_id)
        top = rect.top + self.document.scroll_y
        left = rect.left + self.document.scroll_x
        self.document.set_attribute(
            self.node,
            "style",
            f"top: {top:g}px; left: {left:g}px; width: {rect.width:g}px; "
            f"height: {rect.height:g}px; display: block",
        )

    def lock(self) -> None:
        if self.node is not None:
            self.document.add_class(self.node, LOCKED_CLASS)

    def remove(self) -> None:
        if self.node is not None:
            self.document.remove(self.node)
            self.node = None


class BreadcrumbBar:
    """Trail of the nearest ancestors of the element of interest."""

    def __init__(self, document: Document, token: str, depth: int = 5) -> None:
        self.depth = depth
        self.document = document
        self.node: Optional[int] = document.create_element(
            "div", {"id": "vc-breadcrumb", token: "", "style": "display: none"}
        )
        document.append_child(document.document_element, self.node)

    def chain(self, node_id: int) -> list[int]:
        """Ancestor chain ending at node_id, stopping below body."""
        body = self.document.body
        chain: list[int] = []
        current: Optional[int] = node_id
        while current is not None and current != body and len(chain) < self.depth:
            chain.insert(0, current)
            current = self.document.parent(current)
        return chain

    def labels(self) -> list[str]:
        """Labels currently shown, innermost last."""
        if self.node is None:
            return []
        return [
            self.document.text_content(crumb)
            for crumb in self.document.element_children(self.node)
            if "vc-crumb" in self.document.class_list(crumb)
        ]

    def update(self, node_id: int) -> None:
        if self.node is None or node_id not in self.document:
            return

        for child in self.document.children(self.node):
            self.document.remove(child)

        chain = self.chain(node_id)
        for index, element in enumerate(chain):
            if index > 0:
                separator = self.document.create_element(
                    "span", {"class": "vc-crumb-sep"}, text=CRUMB_SEPARATOR
                )
                self.document.append_child(self.node, separator)

            is_last = index == len(chain) - 1
            crumb = self.document.create_element(
                "span",
                {"class": "vc-crumb vc-crumb-active" if is_last else "vc-crumb"},
                text=element_label(self.document, element),
            )
            self.document.append_child(self.node, crumb)

        self.document.set_attribute(self.node, "style", "display: block")

    def remove(self) -> None:
        if self.node is not None:
            self.document.remove(self.node)
            self.node = None
