"""Interactive, collapsible tree preview of the extracted HTML."""

import itertools
import logging
from typing import Callable, Optional

from visible_copy.config import PickerConfig
from visible_copy.dom.document import Document
from visible_copy.dom.events import DOMEvent
from visible_copy.dom.serializer import VOID_ELEMENTS
from visible_copy.extraction.extractor import PrunedTree, prune
from visible_copy.utils.text import truncate

logger = logging.getLogger(__name__)

EXPANDED_MARKER = "▼"
COLLAPSED_MARKER = "▶"
HOVER_CLASS = "vc-tag-hover"


class ElementRegistry:
    """
    Maps generated element ids to live document nodes.

    Ids come from a counter that is never reset, so an id handed out before
    a rebuild cannot resolve to anything afterwards.
    """

    def __init__(self, prefix: str) -> None:
        self.prefix = prefix
        self._counter = itertools.count(1)
        self._entries: dict[str, int] = {}

    def __contains__(self, element_id: object) -> bool:
        return element_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def clear(self) -> None:
        self._entries.clear()

    def ids(self) -> list[str]:
        return list(self._entries)

    def register(self, node_id: int) -> str:
        element_id = f"{self.prefix}-{next(self._counter)}"
        self._entries[element_id] = node_id
        return element_id

    def resolve(self, element_id: str) -> Optional[int]:
        return self._entries.get(element_id)


class TreeView:
    """
    Renders the pruned clone of the selected element as clickable markup.

    Every opening tag maps, through the registry, back to the live node it
    was cloned from, so clicking reselects and hovering highlights the real
    element.
    """

    def __init__(
        self,
        document: Document,
        registry: ElementRegistry,
        config: PickerConfig,
        on_select: Callable[[int], None],
        on_highlight: Callable[[int], None],
        current_element: Callable[[], Optional[int]],
    ) -> None:
        self.config = config
        self.document = document
        self.registry = registry
        self._current_element = current_element
        self._on_highlight = on_highlight
        self._on_select = on_select

    def render(self, container: int, node_id: int) -> int:
        """
        Build the tree for node_id inside container.

        The registry is expected to have been cleared by the caller.

        Returns:
            int: The <pre> element holding the tree
        """
        pruned = prune(self.document, node_id)
        pre = self.document.create_element("pre", {"class": "vc-code"})
        self._build(pre, pruned, pruned.root, depth=0)
        self.document.append_child(container, pre)
        logger.debug(f"Rendered tree view with {len(self.registry)} clickable tags")
        return pre

    def _build(self, parent: int, pruned: PrunedTree, clone_id: int, depth: int) -> None:
        if depth > self.config.tree_max_depth:
            return

        tree = pruned.tree
        element_id = self.registry.register(pruned.origins[clone_id])
        tag = tree.tag(clone_id)
        indent = "  " * depth
        children = tree.element_children(clone_id)
        text = truncate(self._direct_text(pruned, clone_id), self.config.text_preview_limit)

        if tag in VOID_ELEMENTS:
            self._text(parent, indent)
            self._append(parent, self._opening_tag(pruned, clone_id, element_id, self_closing=True))
            self._text(parent, "\n")
        elif not children:
            self._text(parent, indent)
            self._append(parent, self._opening_tag(pruned, clone_id, element_id))
            if text:
                self._span(parent, "vc-text", text)
            self._span(parent, "vc-tag", f"</{tag}>")
            self._text(parent, "\n")
        else:
            self._text(parent, indent)
            toggle = self._span(parent, "vc-collapse", EXPANDED_MARKER, {"data-el-id": element_id})
            self._append(parent, self._opening_tag(pruned, clone_id, element_id))
            self._text(parent, "\n")

            group = self._span(parent, "vc-children", None, {"data-parent-id": element_id})
            if text:
                self._text(group, indent + "  ")
                self._span(group, "vc-text", text)
                self._text(group, "\n")
            for child in children:
                self._build(group, pruned, child, depth + 1)

            self._text(parent, indent)
            self._span(parent, "vc-tag", f"</{tag}>")
            self._text(parent, "\n")
            self.document.add_event_listener(
                "click", self._make_toggle_handler(toggle, group), target=toggle
            )

    def _direct_text(self, pruned: PrunedTree, clone_id: int) -> str:
        tree = pruned.tree
        fragments = [
            tree.node(child).text.strip()
            for child in tree.children(clone_id)
            if tree.node(child).is_text
        ]
        return " ".join(fragment for fragment in fragments if fragment)

    def _opening_tag(
        self,
        pruned: PrunedTree,
        clone_id: int,
        element_id: str,
        self_closing: bool = False,
    ) -> int:
        tree = pruned.tree
        span = self.document.create_element(
            "span", {"class": "vc-tag vc-tag-clickable", "data-el-id": element_id}
        )
        self._text(span, f"<{tree.tag(clone_id)}")
        for name, value in tree.node(clone_id).attributes:
            self._text(span, " ")
            self._span(span, "vc-attr-name", name)
            self._text(span, "=")
            value = truncate(value, self.config.attribute_preview_limit)
            self._span(span, "vc-attr-value", f'"{value}"')
        self._text(span, " />" if self_closing else ">")

        self.document.add_event_listener("click", self._make_select_handler(element_id), target=span)
        self.document.add_event_listener(
            "mouseenter", self._make_enter_handler(span, element_id), target=span
        )
        self.document.add_event_listener("mouseleave", self._make_leave_handler(span), target=span)
        return span

    # Node helpers

    def _append(self, parent: int, child: int) -> int:
        return self.document.append_child(parent, child)

    def _text(self, parent: int, text: str) -> None:
        if text:
            self.document.append_child(parent, self.document.create_text_node(text))

    def _span(
        self,
        parent: int,
        class_name: str,
        text: Optional[str],
        attributes: Optional[dict[str, str]] = None,
    ) -> int:
        span = self.document.create_element("span", {"class": class_name, **(attributes or {})}, text=text)
        return self.document.append_child(parent, span)

    # Handlers

    def _make_select_handler(self, element_id: str):
        def handle_click(event: DOMEvent) -> None:
            event.stop_propagation()
            node_id = self.registry.resolve(element_id)
            if node_id is not None and node_id in self.document:
                self._on_select(node_id)
        return handle_click

    def _make_enter_handler(self, span: int, element_id: str):
        def handle_enter(event: DOMEvent) -> None:
            node_id = self.registry.resolve(element_id)
            if node_id is not None and node_id in self.document:
                self._on_highlight(node_id)
            if span in self.document:
                self.document.add_class(span, HOVER_CLASS)
        return handle_enter

    def _make_leave_handler(self, span: int):
        def handle_leave(event: DOMEvent) -> None:
            if span in self.document:
                self.document.remove_class(span, HOVER_CLASS)
            current = self._current_element()
            if current is not None and current in self.document:
                self._on_highlight(current)
        return handle_leave

    def _make_toggle_handler(self, toggle: int, group: int):
        def handle_toggle(event: DOMEvent) -> None:
            event.stop_propagation()
            if group not in self.document or toggle not in self.document:
                return
            collapsed = self.document.computed_style(group).get("display") == "none"
            self.document.set_attribute(group, "style", f"display: {'inline' if collapsed else 'none'}")
            self.document.set_text(toggle, EXPANDED_MARKER if collapsed else COLLAPSED_MARKER)
        return handle_toggle
