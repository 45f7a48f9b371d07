"""
In-memory model of a rendered page.

The Document is the host environment the picker runs against: it owns the
node tree together with the layout captured from the browser, and provides
the capabilities the picker consumes (computed style, geometry, hit-testing,
input listeners, timers, text selection and the legacy copy command).
"""

import heapq
import itertools
import logging
import re
from dataclasses import dataclass, field
from typing import Callable, Optional

from visible_copy.dom.bounding_box import BoundingBox
from visible_copy.dom.events import WINDOW, DOMEvent, Listener, ListenerRegistry
from visible_copy.dom.models import ComputedStyle, SelectionRange
from visible_copy.dom.tree import NodeTree

logger = logging.getLogger(__name__)

DEFAULT_STYLE: ComputedStyle = {
    "display": "inline",
    "opacity": "1",
    "visibility": "visible",
}

ATTRIBUTE_RULE_PATTERN = re.compile(r"\[([^\]\s=]+)\]\s*\{([^}]*)\}")

# CSS property names mapped to ComputedStyle keys.
STYLE_PROPERTIES = {
    "display": "display",
    "opacity": "opacity",
    "pointer-events": "pointer_events",
    "visibility": "visibility",
}


@dataclass
class Layout:
    """Geometry and computed style captured for a rendered element."""
    box: BoundingBox
    style: ComputedStyle


@dataclass(order=True)
class _Timer:
    due: float
    timer_id: int
    callback: Callable[[], None] = field(compare=False)


def parse_declarations(declarations: str) -> ComputedStyle:
    """
    Parse a CSS declaration block into the style properties we track.

    Args:
        declarations: Text such as "display: none; opacity: 0 !important"

    Returns:
        ComputedStyle containing only the recognised properties
    """
    style: ComputedStyle = {}
    for declaration in declarations.split(";"):
        name, _, value = declaration.partition(":")
        key = STYLE_PROPERTIES.get(name.strip().lower())
        if key and value.strip():
            style[key] = value.replace("!important", "").strip()
    return style


class Document(NodeTree):
    """A rendered document: node tree plus layout and host capabilities."""

    def __init__(self, viewport_width: float = 1280, viewport_height: float = 800) -> None:
        super().__init__()
        self.clock: float = 0.0
        self.legacy_copy_handler: Optional[Callable[[str], bool]] = None
        self.navigation_requests: list[str] = []
        self.scroll_x: float = 0.0
        self.scroll_y: float = 0.0
        self.viewport_height: float = viewport_height
        self.viewport_width: float = viewport_width
        self._layout: dict[int, Layout] = {}
        self._listeners = ListenerRegistry()
        self._rules_cache: tuple[int, list[tuple[str, ComputedStyle]]] = (-1, [])
        self._selection: Optional[SelectionRange] = None
        self._timer_ids = itertools.count(1)
        self._timers: list[_Timer] = []

    # Structure

    @property
    def document_element(self) -> Optional[int]:
        return self.root

    @property
    def body(self) -> Optional[int]:
        return self._top_level("body")

    @property
    def head(self) -> Optional[int]:
        return self._top_level("head")

    def _top_level(self, tag: str) -> Optional[int]:
        if self.root is None:
            return None
        for child in self.element_children(self.root):
            if self.tag(child) == tag:
                return child
        return None

    def _forget(self, node_id: int) -> None:
        self._layout.pop(node_id, None)
        self._listeners.drop_scope(node_id)
        selection = self._selection
        if selection and node_id in (selection.start_container, selection.end_container):
            self._selection = None

    # Layout and style

    def set_layout(self, node_id: int, position: dict, style: ComputedStyle) -> None:
        """Attach snapshot geometry (page coordinates) and computed style to a node."""
        self._layout[node_id] = Layout(
            box=BoundingBox.from_position(position),
            style=dict(style),
        )

    def has_layout(self, node_id: int) -> bool:
        return node_id in self._layout

    def computed_style(self, node_id: int) -> ComputedStyle:
        """
        Resolve the style of an element.

        Captured style wins for snapshot nodes; nodes inserted afterwards use
        defaults plus their inline style attribute. Attribute-selector rules
        from inserted stylesheets apply on top of both, and pointer-events is
        inherited when nothing sets it.
        """
        return self._resolve_style(node_id, self._style_rules())

    def _resolve_style(
        self,
        node_id: int,
        rules: list[tuple[str, ComputedStyle]],
    ) -> ComputedStyle:
        layout = self._layout.get(node_id)
        if layout:
            style: ComputedStyle = {**DEFAULT_STYLE, **layout.style}
        else:
            style = dict(DEFAULT_STYLE)
            style.update(parse_declarations(self.get_attribute(node_id, "style") or ""))

        for attribute, declarations in rules:
            if self.has_attribute(node_id, attribute):
                style.update(declarations)

        if "pointer_events" not in style:
            parent = self.parent(node_id)
            style["pointer_events"] = (
                self._resolve_style(parent, rules)["pointer_events"]
                if parent is not None else "auto"
            )
        return style

    def _style_rules(self) -> list[tuple[str, ComputedStyle]]:
        """Collect attribute rules from stylesheets inserted after the snapshot."""
        version, rules = self._rules_cache
        if version == self.version:
            return rules

        rules = []
        if self.root is not None:
            for node_id in self.iter_subtree(self.root):
                node = self.node(node_id)
                if not node.is_element or node.tag != "style" or self.has_layout(node_id):
                    continue
                for attribute, declarations in ATTRIBUTE_RULE_PATTERN.findall(
                    self.text_content(node_id)
                ):
                    rules.append((attribute.lower(), parse_declarations(declarations)))
        self._rules_cache = (self.version, rules)
        return rules

    def offset_size(self, node_id: int) -> tuple[float, float]:
        """Rendered (width, height); zero for nodes without layout."""
        layout = self._layout.get(node_id)
        if not layout:
            return (0.0, 0.0)
        return (layout.box.width, layout.box.height)

    def bounding_client_rect(self, node_id: int) -> BoundingBox:
        """Element box relative to the viewport at the current scroll offset."""
        layout = self._layout.get(node_id)
        if not layout:
            return BoundingBox(left=0.0, top=0.0)
        return layout.box.translate(-self.scroll_x, -self.scroll_y)

    def elements_from_point(self, x: float, y: float) -> list[int]:
        """
        Hit-test a viewport point.

        Returns:
            Every element under the point that accepts pointer events,
            topmost first (later in document order paints on top)
        """
        if self.root is None:
            return []

        rules = self._style_rules()
        page_x, page_y = x + self.scroll_x, y + self.scroll_y
        hits = []
        for node_id in self.iter_subtree(self.root):
            layout = self._layout.get(node_id)
            if not layout or not layout.box.contains_point(page_x, page_y):
                continue
            style = self._resolve_style(node_id, rules)
            if style.get("pointer_events") == "none" or style.get("visibility") == "hidden":
                continue
            hits.append(node_id)
        hits.reverse()
        return hits

    # Events

    def add_event_listener(
        self,
        event_type: str,
        listener: Listener,
        capture: bool = False,
        target: Optional[int] = None,
    ) -> None:
        """Attach a listener to a node, or to the window when target is None."""
        self._listeners.add(WINDOW if target is None else target, event_type, listener, capture)

    def remove_event_listener(
        self,
        event_type: str,
        listener: Listener,
        capture: bool = False,
        target: Optional[int] = None,
    ) -> None:
        self._listeners.remove(WINDOW if target is None else target, event_type, listener, capture)

    def listener_count(self, target: Optional[int] = None) -> int:
        """Number of registered listeners, for the window only when target is None."""
        return self._listeners.count(WINDOW if target is None else target)

    def dispatch_event(self, event: DOMEvent) -> bool:
        """
        Deliver an event through the capture and bubble phases.

        Returns:
            False if a listener prevented the default action
        """
        path: list[int] = []
        if event.target is not None and event.target in self:
            path = list(reversed(list(self.ancestors(event.target)))) + [event.target]
        else:
            event.target = None

        self._listeners.dispatch(event, path)

        if not event.default_prevented:
            self._run_default_action(event)
        return not event.default_prevented

    def _run_default_action(self, event: DOMEvent) -> None:
        if event.type != "click" or event.target is None or event.target not in self:
            return
        link = self.closest(
            event.target,
            lambda node: node.is_element and node.tag == "a",
        )
        if link is not None and self.has_attribute(link, "href"):
            self.navigation_requests.append(self.get_attribute(link, "href"))

    # Timers

    def set_timeout(self, callback: Callable[[], None], delay: float) -> int:
        """Schedule a callback on the virtual clock and return its timer id."""
        timer = _Timer(due=self.clock + max(0.0, delay), timer_id=next(self._timer_ids), callback=callback)
        heapq.heappush(self._timers, timer)
        return timer.timer_id

    def clear_timeout(self, timer_id: Optional[int]) -> None:
        self._timers = [timer for timer in self._timers if timer.timer_id != timer_id]
        heapq.heapify(self._timers)

    @property
    def pending_timers(self) -> int:
        return len(self._timers)

    def advance_time(self, seconds: float) -> None:
        """Move the virtual clock forward, running every timer that falls due."""
        target = self.clock + max(0.0, seconds)
        while self._timers and self._timers[0].due <= target:
            timer = heapq.heappop(self._timers)
            self.clock = timer.due
            timer.callback()
        self.clock = target

    # Selection

    def get_selection(self) -> Optional[SelectionRange]:
        return self._selection

    def set_selection(self, start: int, end: Optional[int] = None, collapsed: bool = False) -> None:
        self._selection = SelectionRange(
            start_container=start,
            end_container=start if end is None else end,
            collapsed=collapsed,
        )

    def select_node_contents(self, node_id: int) -> None:
        self.set_selection(node_id, node_id)

    def remove_all_ranges(self) -> None:
        self._selection = None

    def common_ancestor(self, first: int, second: int) -> int:
        """Deepest node containing both nodes (either may be the answer)."""
        first_chain = {first, *self.ancestors(first)}
        if second in first_chain:
            return second
        for ancestor in self.ancestors(second):
            if ancestor in first_chain:
                return ancestor
        raise ValueError(f"Nodes {first} and {second} share no ancestor")

    def selected_text(self) -> str:
        selection = self._selection
        if not selection or selection.collapsed:
            return ""
        container = self.common_ancestor(selection.start_container, selection.end_container)
        return self.text_content(container)

    def exec_command(self, command: str) -> bool:
        """
        Run a legacy editing command against the current selection.

        Only "copy" is supported; it hands the selected text to the
        legacy copy handler installed by the host.
        """
        if command != "copy":
            logger.warning(f"Unsupported document command: {command}")
            return False
        if self.legacy_copy_handler is None:
            logger.warning("No legacy copy handler installed")
            return False
        return bool(self.legacy_copy_handler(self.selected_text()))
