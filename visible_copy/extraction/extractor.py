"""
Visible-content extraction.

The target subtree is cloned and the clone is walked in lock-step with the
live original: visibility is always judged on the original (the clone has no
layout), while pruning happens on the clone. The pruned clone is then either
serialized as HTML or flattened to block-aware text.
"""

import logging
from dataclasses import dataclass

from visible_copy.dom.document import Document
from visible_copy.dom.models import NodeKind
from visible_copy.dom.serializer import outer_html
from visible_copy.dom.tree import NodeTree
from visible_copy.extraction.visibility import is_visible
from visible_copy.utils.text import NEWLINE, join_fragments

logger = logging.getLogger(__name__)

# Attributes to preserve (semantic/content-relevant)
KEEP_ATTRIBUTES = frozenset({
    "href", "src", "alt", "title", "type", "name", "value", "placeholder",
    "for", "action", "method", "target", "rel", "colspan", "rowspan",
    "headers", "scope", "datetime", "cite", "lang", "dir",
})

# Elements to strip entirely
STRIP_ELEMENTS = frozenset({
    "script", "style", "noscript", "svg", "canvas", "template",
    "iframe", "object", "embed", "applet",
})

# Block-level elements that get line breaks in text output
BLOCK_ELEMENTS = frozenset({
    "address", "article", "aside", "blockquote", "br", "dd", "div", "dl", "dt",
    "fieldset", "figcaption", "figure", "footer", "form", "h1", "h2", "h3",
    "h4", "h5", "h6", "header", "hr", "li", "main", "nav", "ol", "p", "pre",
    "section", "table", "tbody", "td", "tfoot", "th", "thead", "tr", "ul",
})


@dataclass
class PrunedTree:
    """
    Result of pruning a cloned subtree.

    Attributes:
        origins: Maps every surviving clone node to its live original
        root: Id of the clone root
        tree: The pruned clone
    """
    origins: dict[int, int]
    root: int
    tree: NodeTree


def is_kept_attribute(name: str) -> bool:
    """Match an attribute's local name (case-insensitive) against the keep set."""
    local_name = name.rpartition(":")[2]
    return local_name.lower() in KEEP_ATTRIBUTES


def strip_attributes(tree: NodeTree, node_id: int) -> None:
    """Remove every attribute outside the keep set from an element."""
    node = tree.node(node_id)
    for name, _ in list(node.attributes):
        if not is_kept_attribute(name):
            tree.remove_attribute(node_id, name)


def prune(document: Document, node_id: int) -> PrunedTree:
    """
    Clone a subtree and remove everything that is hidden or non-semantic.

    The root itself is always kept: it is the user's explicit selection, so
    only its attributes and descendants are filtered.

    Args:
        document: Live document
        node_id: Root of the subtree to extract

    Returns:
        PrunedTree holding the clone and its mapping back to live nodes
    """
    tree, origins = document.clone(node_id)
    root = tree.root

    if tree.node(root).is_element:
        _keep_element(tree, root, document, node_id)

    origins = {clone_id: origin for clone_id, origin in origins.items() if clone_id in tree}
    return PrunedTree(origins=origins, root=root, tree=tree)


def _process_node(tree: NodeTree, clone_id: int, document: Document, original_id: int) -> bool:
    """
    Decide whether a cloned node survives, pruning its subtree if it does.

    Returns:
        bool: Whether this node should be kept
    """
    node = tree.node(clone_id)

    if node.kind == NodeKind.TEXT:
        return bool(node.text.strip())

    if node.kind == NodeKind.COMMENT:
        return False

    if node.tag in STRIP_ELEMENTS:
        return False

    if not is_visible(document, original_id):
        return False

    _keep_element(tree, clone_id, document, original_id)
    return True


def _keep_element(tree: NodeTree, clone_id: int, document: Document, original_id: int) -> None:
    strip_attributes(tree, clone_id)

    clone_children = tree.children(clone_id)
    original_children = document.children(original_id) if original_id in document else []

    # Walk backwards so removals never shift positions still to be visited.
    for index in range(len(clone_children) - 1, -1, -1):
        clone_child = clone_children[index]
        if index >= len(original_children):
            logger.debug(f"Dropping clone node {clone_child}: live tree changed during extraction")
            tree.remove(clone_child)
        elif not _process_node(tree, clone_child, document, original_children[index]):
            tree.remove(clone_child)


def extract_html(document: Document, node_id: int) -> str:
    """
    Extract visible, stripped HTML from an element.

    Args:
        document: Live document
        node_id: Element to extract from

    Returns:
        Cleaned HTML string, including the element's own tag
    """
    pruned = prune(document, node_id)
    return outer_html(pruned.tree, pruned.root)


def extract_text(document: Document, node_id: int) -> str:
    """
    Extract visible text with line breaks between block-level elements.

    Args:
        document: Live document
        node_id: Element to extract from

    Returns:
        Text content with spacing normalised
    """
    pruned = prune(document, node_id)
    return collect_text(pruned.tree, pruned.root)


def collect_text(tree: NodeTree, node_id: int) -> str:
    """Flatten an already pruned tree to text."""
    parts: list[str] = []

    def add_break() -> None:
        if parts and parts[-1] != NEWLINE:
            parts.append(NEWLINE)

    def walk(current: int) -> None:
        node = tree.node(current)
        if node.kind == NodeKind.TEXT:
            text = node.text.strip()
            if text:
                parts.append(text)
            return

        if node.kind != NodeKind.ELEMENT:
            return

        is_block = node.tag in BLOCK_ELEMENTS
        if is_block:
            add_break()
        for child in node.children:
            walk(child)
        if is_block:
            add_break()

    walk(node_id)
    return join_fragments(parts)
