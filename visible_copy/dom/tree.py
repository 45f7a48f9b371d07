"""Arena-indexed document tree."""

from typing import Callable, Iterator, Optional

from visible_copy.dom.models import Node, NodeKind


class NodeTree:
    """
    Owns a set of nodes addressed by integer ids.

    Ids are handed out monotonically and never reused, so a reference to a
    removed node simply stops resolving instead of pointing at a new node.
    """

    def __init__(self) -> None:
        self._nodes: dict[int, Node] = {}
        self._next_id: int = 0
        self.root: Optional[int] = None
        self.version: int = 0

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    def create_node(
        self,
        kind: NodeKind,
        tag: str = "",
        text: str = "",
        attributes: Optional[list[tuple[str, str]]] = None,
        node_id: Optional[int] = None,
    ) -> int:
        """
        Create a detached node and return its id.

        Args:
            kind: Node kind
            tag: Tag name for elements, stored lower-case
            text: Character data for text and comment nodes
            attributes: Initial attribute pairs
            node_id: Explicit id, used when mirroring an external numbering

        Raises:
            ValueError: If node_id is already taken
        """
        if node_id is None:
            node_id = self._next_id
        elif node_id in self._nodes:
            raise ValueError(f"Node id {node_id} already in use")
        self._next_id = max(self._next_id, node_id + 1)

        self._nodes[node_id] = Node(
            kind=kind,
            node_id=node_id,
            tag=tag.lower(),
            text=text,
            attributes=list(attributes or []),
        )
        return node_id

    def create_element(
        self,
        tag: str,
        attributes: Optional[dict[str, str]] = None,
        text: Optional[str] = None,
    ) -> int:
        """Create a detached element, optionally with a single text child."""
        element = self.create_node(
            NodeKind.ELEMENT, tag=tag, attributes=list((attributes or {}).items())
        )
        if text:
            self.append_child(element, self.create_text_node(text))
        return element

    def create_text_node(self, text: str) -> int:
        return self.create_node(NodeKind.TEXT, text=text)

    def get(self, node_id: Optional[int]) -> Optional[Node]:
        """Resolve a node id, returning None for ids that no longer exist."""
        if node_id is None:
            return None
        return self._nodes.get(node_id)

    def node(self, node_id: int) -> Node:
        """Resolve a node id that must exist."""
        return self._nodes[node_id]

    def children(self, node_id: int) -> list[int]:
        return list(self._nodes[node_id].children)

    def element_children(self, node_id: int) -> list[int]:
        return [
            child for child in self._nodes[node_id].children
            if self._nodes[child].is_element
        ]

    def parent(self, node_id: int) -> Optional[int]:
        return self._nodes[node_id].parent

    def tag(self, node_id: int) -> str:
        return self._nodes[node_id].tag

    # Mutation

    def append_child(self, parent_id: int, child_id: int) -> int:
        """Append a node to a parent, detaching it from any previous parent."""
        child = self._nodes[child_id]
        if child.parent is not None:
            self._detach(child_id)
        self._nodes[parent_id].children.append(child_id)
        child.parent = parent_id
        self.version += 1
        return child_id

    def remove_child(self, parent_id: int, child_id: int) -> None:
        """
        Remove a child from its parent and discard its subtree.

        Raises:
            ValueError: If child_id is not a child of parent_id
        """
        if self._nodes[child_id].parent != parent_id:
            raise ValueError(f"Node {child_id} is not a child of {parent_id}")
        self.remove(child_id)

    def remove(self, node_id: int) -> None:
        """Detach a node and discard it with all its descendants."""
        if node_id not in self._nodes:
            return
        if self._nodes[node_id].parent is not None:
            self._detach(node_id)
        if self.root == node_id:
            self.root = None
        for discarded in list(self.iter_subtree(node_id)):
            self._forget(discarded)
            del self._nodes[discarded]
        self.version += 1

    def _detach(self, node_id: int) -> None:
        node = self._nodes[node_id]
        siblings = self._nodes[node.parent].children
        siblings.remove(node_id)
        node.parent = None

    def _forget(self, node_id: int) -> None:
        """Hook for subclasses keeping per-node side tables."""

    # Attributes

    def get_attribute(self, node_id: int, name: str) -> Optional[str]:
        name = name.lower()
        for attr_name, value in self._nodes[node_id].attributes:
            if attr_name.lower() == name:
                return value
        return None

    def has_attribute(self, node_id: int, name: str) -> bool:
        return self.get_attribute(node_id, name) is not None

    def set_attribute(self, node_id: int, name: str, value: str) -> None:
        attributes = self._nodes[node_id].attributes
        for index, (attr_name, _) in enumerate(attributes):
            if attr_name.lower() == name.lower():
                attributes[index] = (attr_name, value)
                self.version += 1
                return
        attributes.append((name, value))
        self.version += 1

    def remove_attribute(self, node_id: int, name: str) -> None:
        node = self._nodes[node_id]
        node.attributes = [
            (attr_name, value) for attr_name, value in node.attributes
            if attr_name.lower() != name.lower()
        ]
        self.version += 1

    def class_list(self, node_id: int) -> list[str]:
        return (self.get_attribute(node_id, "class") or "").split()

    def add_class(self, node_id: int, class_name: str) -> None:
        classes = self.class_list(node_id)
        if class_name not in classes:
            self.set_attribute(node_id, "class", " ".join(classes + [class_name]))

    def remove_class(self, node_id: int, class_name: str) -> None:
        classes = self.class_list(node_id)
        if class_name in classes:
            classes.remove(class_name)
            self.set_attribute(node_id, "class", " ".join(classes))

    def set_text(self, node_id: int, text: str) -> None:
        """Replace an element's children with a single text node."""
        for child in self.children(node_id):
            self.remove(child)
        if text:
            self.append_child(node_id, self.create_text_node(text))

    # Traversal

    def ancestors(self, node_id: int) -> Iterator[int]:
        """Yield ancestors, closest first."""
        parent = self._nodes[node_id].parent
        while parent is not None:
            yield parent
            parent = self._nodes[parent].parent

    def closest(self, node_id: int, predicate: Callable[[Node], bool]) -> Optional[int]:
        """Return the node itself or its closest ancestor matching predicate."""
        if predicate(self._nodes[node_id]):
            return node_id
        for ancestor in self.ancestors(node_id):
            if predicate(self._nodes[ancestor]):
                return ancestor
        return None

    def contains(self, ancestor_id: int, node_id: int) -> bool:
        """Check whether node_id is ancestor_id or one of its descendants."""
        return node_id == ancestor_id or ancestor_id in self.ancestors(node_id)

    def iter_subtree(self, node_id: int) -> Iterator[int]:
        """Yield node ids of a subtree in document (pre-)order."""
        stack = [node_id]
        while stack:
            current = stack.pop()
            yield current
            stack.extend(reversed(self._nodes[current].children))

    def find_element(self, tag: str, start: Optional[int] = None) -> Optional[int]:
        """Return the first element with the given tag in document order."""
        start = self.root if start is None else start
        if start is None:
            return None
        for node_id in self.iter_subtree(start):
            node = self._nodes[node_id]
            if node.is_element and node.tag == tag:
                return node_id
        return None

    def get_element_by_id(self, element_id: str) -> Optional[int]:
        if self.root is None:
            return None
        for node_id in self.iter_subtree(self.root):
            if self._nodes[node_id].is_element and self.get_attribute(node_id, "id") == element_id:
                return node_id
        return None

    def text_content(self, node_id: int) -> str:
        """Concatenate the character data of all text descendants."""
        return "".join(
            self._nodes[current].text
            for current in self.iter_subtree(node_id)
            if self._nodes[current].is_text
        )

    # Cloning

    def clone(self, node_id: int) -> tuple["NodeTree", dict[int, int]]:
        """
        Deep-clone a subtree into a new detached tree.

        Returns:
            The clone tree (its root set to the cloned node) and a mapping
            from clone ids to the ids they were copied from
        """
        clone = NodeTree()
        origins: dict[int, int] = {}

        def copy(source_id: int) -> int:
            source = self._nodes[source_id]
            copied = clone.create_node(
                source.kind,
                tag=source.tag,
                text=source.text,
                attributes=source.attributes,
            )
            origins[copied] = source_id
            for child in source.children:
                clone.append_child(copied, copy(child))
            return copied

        clone.root = copy(node_id)
        return clone, origins
