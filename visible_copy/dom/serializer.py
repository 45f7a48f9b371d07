"""HTML serialization of document trees."""

from typing import Optional

from visible_copy.dom.models import NodeKind
from visible_copy.dom.tree import NodeTree

VOID_ELEMENTS = frozenset({
    "area", "base", "br", "col", "embed", "hr", "img", "input", "link",
    "meta", "source", "track", "wbr",
})

# Elements whose text children are emitted verbatim.
RAW_TEXT_ELEMENTS = frozenset({"script", "style"})


def escape_text(text: str) -> str:
    return (
        text.replace("&", "&amp;").replace("\xa0", "&nbsp;").replace("<", "&lt;").replace(">", "&gt;")
    )


def escape_attribute(value: str) -> str:
    return value.replace("&", "&amp;").replace("\xa0", "&nbsp;").replace('"', "&quot;")


def outer_html(tree: NodeTree, node_id: int, id_attribute: Optional[str] = None) -> str:
    """
    Serialize a node and its descendants.

    Args:
        tree: Tree owning the node
        node_id: Node to serialize, including its own tag
        id_attribute: When given, every element is emitted with an extra
            attribute of this name carrying its node id

    Returns:
        HTML markup equivalent to the browser's outerHTML
    """
    parts: list[str] = []
    _write(tree, node_id, parts, id_attribute)
    return "".join(parts)


def _write(tree: NodeTree, node_id: int, parts: list[str], id_attribute: Optional[str]) -> None:
    node = tree.node(node_id)

    if node.kind == NodeKind.TEXT:
        parent = tree.get(node.parent)
        raw = parent is not None and parent.tag in RAW_TEXT_ELEMENTS
        parts.append(node.text if raw else escape_text(node.text))
        return

    if node.kind == NodeKind.COMMENT:
        parts.append(f"<!--{node.text}-->")
        return

    parts.append(f"<{node.tag}")
    for name, value in node.attributes:
        parts.append(f' {name}="{escape_attribute(value)}"')
    if id_attribute:
        parts.append(f' {id_attribute}="{node_id}"')
    parts.append(">")

    if node.tag in VOID_ELEMENTS:
        return

    for child in node.children:
        _write(tree, child, parts, id_attribute)
    parts.append(f"</{node.tag}>")
