"""
Element picker session.

A session takes over input on a document, highlights the element under the
pointer, locks onto it on click, previews the visible content in the
confirmation panel and copies it on request. Every way out of a session
(copy, cancel button, cancel key) ends in teardown(), which removes all
picker UI and input handlers.
"""

import logging
import uuid
from typing import Callable, Optional

from visible_copy.config import PickerConfig
from visible_copy.dom.document import Document
from visible_copy.dom.events import DOMEvent
from visible_copy.extraction.extractor import extract_html, extract_text
from visible_copy.picker.clipboard import Clipboard, ClipboardError, legacy_copy
from visible_copy.picker.interception import EventInterceptor
from visible_copy.picker.overlay import BreadcrumbBar, HighlightOverlay
from visible_copy.picker.panel import ConfirmationPanel, PanelCallbacks
from visible_copy.types import CopyMode, PickerState

logger = logging.getLogger(__name__)

NOTIFICATION_TEXT = "Copied!"


class PickerSession:
    """State of one picker run over a document."""

    def __init__(
        self,
        document: Document,
        clipboard: Clipboard,
        config: Optional[PickerConfig] = None,
        on_teardown: Optional[Callable[["PickerSession"], None]] = None,
    ) -> None:
        self.active: bool = False
        self.clipboard = clipboard
        self.config = config or PickerConfig()
        self.document = document
        self.hovered: Optional[int] = None
        self.is_selection_locked: bool = False
        self.last_copied: Optional[str] = None
        self.selected: Optional[int] = None
        self.state: PickerState = PickerState.IDLE
        self.token: str = f"vc-{uuid.uuid4().hex[:6]}"

        self.breadcrumb: Optional[BreadcrumbBar] = None
        self.notification: Optional[int] = None
        self.overlay: Optional[HighlightOverlay] = None
        self.panel = ConfirmationPanel(document, self.config, self.token)
        self.interceptor = EventInterceptor(
            document,
            is_picker_ui=self.is_picker_ui,
            is_locked=lambda: self.is_selection_locked,
            on_lock=self.lock_selection,
            on_cancel=self.cancel,
            on_move=self.handle_mouse_move,
            cancel_key=self.config.cancel_key,
        )
        self._on_teardown = on_teardown
        self._style_node: Optional[int] = None
        self._timers: list[int] = []
        self._torn_down: bool = False

    @property
    def clickblind_attribute(self) -> str:
        return f"{self.token}-clickblind"

    @property
    def element_of_interest(self) -> Optional[int]:
        return self.selected if self.is_selection_locked else self.hovered

    @property
    def ui_nodes(self) -> list[int]:
        """Top-level nodes of the visible picker UI, in paint order."""
        nodes = [
            self.overlay.node if self.overlay else None,
            self.breadcrumb.node if self.breadcrumb else None,
            self.panel.node,
            self.notification,
        ]
        return [node for node in nodes if node is not None and node in self.document]

    def start(self) -> None:
        """
        Install the picker on the document.

        If text is already selected, the session locks straight onto the
        element containing the selection.
        """
        if self.active or self._torn_down:
            return
        self.active = True

        container = self._selection_container()
        if container is not None:
            self.document.remove_all_ranges()
            self.hovered = container
            self.selected = container
            self.is_selection_locked = True

        self._inject_clickblind_style()
        self.overlay = HighlightOverlay(self.document, self.token)
        self.breadcrumb = BreadcrumbBar(self.document, self.token, self.config.breadcrumb_depth)

        if self.is_selection_locked:
            self.overlay.lock()
            self._focus(self.selected)
            self.panel.show(self.selected, self._panel_callbacks())
            self._set_state(PickerState.LOCKED)
        else:
            self._set_state(PickerState.IDLE)

        self.interceptor.install()

    # Hover and hit-testing

    def is_picker_ui(self, node_id: Optional[int]) -> bool:
        """Check whether a node belongs to the picker's own UI."""
        if node_id is None or node_id not in self.document:
            return False
        if self.panel.contains(node_id):
            return True
        marked = self.document.closest(
            node_id,
            lambda node: node.is_element and any(name == self.token for name, _ in node.attributes),
        )
        return marked is not None

    def element_from_point(self, x: float, y: float) -> Optional[int]:
        """
        Get the page element at a viewport point, looking through picker UI.

        The picker's own elements are made transparent to hit-testing for the
        duration of the query; body and html are never returned.
        """
        blinded = [
            node for node in (
                self.overlay.node if self.overlay else None,
                self.breadcrumb.node if self.breadcrumb else None,
                self.panel.node,
            )
            if node is not None
        ]
        for node in blinded:
            self.document.set_attribute(node, self.clickblind_attribute, "")
        try:
            hits = self.document.elements_from_point(x, y)
        finally:
            for node in blinded:
                if node in self.document:
                    self.document.remove_attribute(node, self.clickblind_attribute)

        return self._first_page_element(hits)

    def hovered_element(self, event: DOMEvent) -> Optional[int]:
        """
        Resolve the page element a mouse move points at.

        A host that hit-tests for itself (a real browser honours z-index,
        fixed positioning and clipping) reports its hits with the event and
        those win. Otherwise the event's own page target is used, and only a
        move aimed at body, html or picker UI falls back to hit-testing the
        document's layout.
        """
        if event.hits is not None:
            return self._first_page_element(event.hits)

        target = self._first_page_element([event.target] if event.target is not None else [])
        if target is not None:
            return target
        return self.element_from_point(event.client_x, event.client_y)

    def handle_mouse_move(self, event: DOMEvent) -> None:
        if self.is_selection_locked:
            return

        element = self.hovered_element(event)
        if element is None:
            return

        self.hovered = element
        self._focus(element)
        self._set_state(PickerState.HOVERING)

    # Selection

    def lock_selection(self) -> None:
        """Fix the hovered element as the selection and open the panel."""
        if self.hovered is None or self.hovered not in self.document:
            return

        self.selected = self.hovered
        self.is_selection_locked = True
        self.overlay.lock()
        self.panel.show(self.selected, self._panel_callbacks())
        self._set_state(PickerState.LOCKED)

    def select_element(self, node_id: int) -> None:
        """Reselect, e.g. from a click in the tree view."""
        if node_id not in self.document:
            return
        self.selected = node_id
        self._focus(node_id)
        self.panel.update(node_id)

    def select_parent(self) -> None:
        """Move the selection one level up, never above body."""
        if self.selected is None or self.selected not in self.document:
            return

        parent = self.document.parent(self.selected)
        if parent is None or parent == self.document.document_element:
            logger.debug("Already at the topmost selectable element")
            return

        self.select_element(parent)

    def highlight(self, node_id: int) -> None:
        """Move the overlay without changing the selection."""
        self._focus(node_id)

    # Copy and exit

    def copy(self, mode: Optional[CopyMode] = None) -> Optional[str]:
        """
        Copy the visible content of the selected element.

        The content is always recomputed from the live document. If the
        clipboard rejects the write, the legacy copy path is used instead.

        Args:
            mode: html or text, defaults to the panel's current mode

        Returns:
            The copied content, or None if there was nothing to copy
        """
        if not self.active or self.state == PickerState.COPIED:
            return None
        if self.selected is None or self.selected not in self.document:
            return None

        mode = CopyMode(mode or self.panel.mode)
        if mode == CopyMode.HTML:
            content = extract_html(self.document, self.selected)
        else:
            content = extract_text(self.document, self.selected)

        try:
            self.clipboard.write_text(content)
        except ClipboardError as e:
            logger.warning(f"Clipboard write failed, falling back to legacy copy: {e}")
            legacy_copy(self.document, content)

        self.last_copied = content
        logger.info(f"Copied {len(content)} characters as {mode}")
        self._acknowledge()
        return content

    def cancel(self) -> None:
        if not self.active:
            return
        if self.state != PickerState.COPIED:
            self._set_state(PickerState.CANCELLED)
        self.teardown()

    def teardown(self) -> None:
        """Remove every trace of the picker from the document."""
        if self._torn_down:
            return
        self._torn_down = True

        self.interceptor.uninstall()
        for timer_id in self._timers:
            self.document.clear_timeout(timer_id)
        self._timers = []

        if self.overlay:
            self.overlay.remove()
        if self.breadcrumb:
            self.breadcrumb.remove()
        self.panel.hide()
        for node in (self.notification, self._style_node):
            if node is not None:
                self.document.remove(node)
        self.notification = None
        self._style_node = None

        self.hovered = None
        self.selected = None
        self.is_selection_locked = False
        self.active = False
        logger.debug(f"Picker session {self.token} torn down in state {self.state}")

        if self._on_teardown:
            self._on_teardown(self)

    # Internals

    def _acknowledge(self) -> None:
        self._set_state(PickerState.COPIED)
        parent = self.document.body if self.document.body is not None else self.document.document_element
        self.notification = self.document.create_element(
            "div", {"class": "vc-notification", self.token: ""}, text=NOTIFICATION_TEXT
        )
        self.document.append_child(parent, self.notification)

        def fade() -> None:
            if self.notification is not None:
                self.document.add_class(self.notification, "vc-notification-fade")
            self._timers.append(self.document.set_timeout(self.teardown, self.config.notification_fade))

        self._timers.append(self.document.set_timeout(fade, self.config.acknowledgment_delay))

    def _first_page_element(self, hits: list[int]) -> Optional[int]:
        excluded = (self.document.body, self.document.document_element)
        for hit in hits:
            if hit not in self.document or hit in excluded or self.is_picker_ui(hit):
                continue
            if not self.document.node(hit).is_element:
                continue
            return hit
        return None

    def _focus(self, node_id: int) -> None:
        if self.overlay:
            self.overlay.position(node_id)
        if self.breadcrumb:
            self.breadcrumb.update(node_id)

    def _inject_clickblind_style(self) -> None:
        parent = self.document.head if self.document.head is not None else self.document.document_element
        self._style_node = self.document.create_element(
            "style",
            {"id": "vc-clickblind-style"},
            text=f"[{self.clickblind_attribute}] {{ pointer-events: none !important; }}",
        )
        self.document.append_child(parent, self._style_node)

    def _panel_callbacks(self) -> PanelCallbacks:
        return PanelCallbacks(
            on_cancel=self.cancel,
            on_copy=self.copy,
            on_highlight=self.highlight,
            on_parent=self.select_parent,
            on_select_element=self.select_element,
        )

    def _selection_container(self) -> Optional[int]:
        """Element enclosing a pre-existing text selection, if usable."""
        selection = self.document.get_selection()
        if not selection or selection.collapsed:
            return None
        if selection.start_container not in self.document or selection.end_container not in self.document:
            return None

        container: Optional[int] = self.document.common_ancestor(
            selection.start_container, selection.end_container
        )
        if not self.document.node(container).is_element:
            container = self.document.parent(container)

        if container is None or container in (self.document.body, self.document.document_element):
            return None
        return container

    def _set_state(self, state: PickerState) -> None:
        if state != self.state:
            logger.debug(f"Picker session {self.token}: {self.state} -> {state}")
        self.state = state
