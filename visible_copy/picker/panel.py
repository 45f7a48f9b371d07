"""Confirmation panel: header controls, info line and live preview."""

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from visible_copy.config import PickerConfig
from visible_copy.dom.document import Document
from visible_copy.dom.events import DOMEvent
from visible_copy.extraction.extractor import extract_html, extract_text
from visible_copy.picker.tree_view import ElementRegistry, TreeView
from visible_copy.types import CopyMode

logger = logging.getLogger(__name__)

PANEL_ID = "vc-panel"
ACTIVE_BUTTON_CLASS = "vc-btn-active"
VISIBLE_CLASS = "vc-panel-visible"

# Events that must not leave the panel.
CONTAINED_EVENTS = ("click", "mousedown", "mousemove", "pointerdown")


@dataclass
class PanelCallbacks:
    """Actions the panel delegates to the picker session."""
    on_cancel: Callable[[], None]
    on_copy: Callable[[CopyMode], None]
    on_highlight: Callable[[int], None]
    on_parent: Callable[[], None]
    on_select_element: Callable[[int], None]


class ConfirmationPanel:
    """Preview of the would-be-copied content for the selected element."""

    def __init__(self, document: Document, config: PickerConfig, token: str) -> None:
        self.config = config
        self.current_element: Optional[int] = None
        self.document = document
        self.mode: CopyMode = config.default_mode
        self.node: Optional[int] = None
        self.registry = ElementRegistry(token)
        self.token = token
        self._buttons: dict[str, int] = {}
        self._callbacks: Optional[PanelCallbacks] = None
        self._info: Optional[int] = None
        self._preview: Optional[int] = None

    @property
    def visible(self) -> bool:
        return self.node is not None

    @property
    def info_text(self) -> str:
        if self._info is None:
            return ""
        return self.document.text_content(self._info)

    def contains(self, node_id: Optional[int]) -> bool:
        """Check whether a node is part of the panel."""
        return (
            self.node is not None
            and node_id is not None
            and node_id in self.document
            and self.document.contains(self.node, node_id)
        )

    def button(self, name: str) -> Optional[int]:
        """Node of a header button: parent, html, text, copy or cancel."""
        return self._buttons.get(name)

    def show(self, node_id: int, callbacks: PanelCallbacks) -> None:
        """Show the panel for a selected element, resetting the mode."""
        self.current_element = node_id
        self._callbacks = callbacks
        if self.node is None:
            self._create()

        self.mode = self.config.default_mode
        self._mark_active_mode()
        self.update_preview()
        self.document.add_class(self.node, VISIBLE_CLASS)

    def update(self, node_id: int) -> None:
        """Switch the panel to a new element."""
        self.current_element = node_id
        self.update_preview()

    def set_mode(self, mode: CopyMode) -> None:
        self.mode = CopyMode(mode)
        self._mark_active_mode()
        self.update_preview()

    def hide(self) -> None:
        """Remove the panel and forget the element, callbacks and registry."""
        if self.node is not None:
            self.document.remove(self.node)
        self.node = None
        self.current_element = None
        self._buttons = {}
        self._callbacks = None
        self._info = None
        self._preview = None
        self.registry.clear()

    def update_preview(self) -> None:
        """Rebuild the preview and info line for the current element and mode."""
        if self.node is None or self.current_element is None:
            return
        if self.current_element not in self.document:
            logger.warning(f"Selected element {self.current_element} is no longer in the document")
            return

        self.registry.clear()
        for child in self.document.children(self._preview):
            self.document.remove(child)

        if self.mode == CopyMode.HTML:
            tree_view = TreeView(
                self.document,
                self.registry,
                self.config,
                on_select=self._select_element,
                on_highlight=self._highlight,
                current_element=lambda: self.current_element,
            )
            tree_view.render(self._preview, self.current_element)
            self.document.add_class(self._preview, "vc-interactive")
            content = extract_html(self.document, self.current_element)
        else:
            content = extract_text(self.document, self.current_element)
            pre = self.document.create_element("pre", {"class": "vc-code"})
            self.document.append_child(pre, self.document.create_element("code", text=content))
            self.document.append_child(self._preview, pre)
            self.document.remove_class(self._preview, "vc-interactive")

        tag = self.document.tag(self.current_element)
        self.document.set_text(self._info, f"<{tag}> · {len(content):,} chars")

    # Construction

    def _create(self) -> None:
        document = self.document
        self.node = document.create_element("div", {"id": PANEL_ID, self.token: ""})

        header = document.create_element("div", {"class": "vc-panel-header"})
        self._buttons["parent"] = self._add_button(
            header, "↑ Parent", "vc-btn vc-btn-parent", self._handle_parent, {"title": "Select parent element"}
        )
        group = document.create_element("div", {"class": "vc-btn-group"})
        for mode, label in ((CopyMode.HTML, "HTML"), (CopyMode.TEXT, "Text")):
            self._buttons[mode.value] = self._add_button(
                group, label, "vc-btn vc-btn-mode", self._make_mode_handler(mode), {"data-mode": mode.value}
            )
        document.append_child(header, group)
        self._buttons["copy"] = self._add_button(header, "Copy", "vc-btn vc-btn-copy", self._handle_copy)
        self._buttons["cancel"] = self._add_button(header, "Cancel", "vc-btn vc-btn-cancel", self._handle_cancel)

        self._info = document.create_element("div", {"class": "vc-panel-info"})
        self._preview = document.create_element("div", {"class": "vc-panel-preview"})
        for part in (header, self._info, self._preview):
            document.append_child(self.node, part)

        for event_type in CONTAINED_EVENTS:
            document.add_event_listener(event_type, _stop, target=self.node)

        parent = document.body if document.body is not None else document.document_element
        document.append_child(parent, self.node)

    def _add_button(self, parent: int, label: str, class_name: str, handler, attributes=None) -> int:
        button = self.document.create_element("button", {"class": class_name, **(attributes or {})}, text=label)
        self.document.add_event_listener("click", handler, target=button)
        return self.document.append_child(parent, button)

    def _mark_active_mode(self) -> None:
        for mode in CopyMode:
            button = self._buttons.get(mode.value)
            if button is None:
                continue
            if mode == self.mode:
                self.document.add_class(button, ACTIVE_BUTTON_CLASS)
            else:
                self.document.remove_class(button, ACTIVE_BUTTON_CLASS)

    # Handlers

    def _handle_parent(self, event: DOMEvent) -> None:
        event.stop_propagation()
        if self._callbacks:
            self._callbacks.on_parent()

    def _handle_copy(self, event: DOMEvent) -> None:
        event.stop_propagation()
        if self._callbacks:
            self._callbacks.on_copy(self.mode)

    def _handle_cancel(self, event: DOMEvent) -> None:
        event.stop_propagation()
        if self._callbacks:
            self._callbacks.on_cancel()

    def _make_mode_handler(self, mode: CopyMode):
        def handle_mode(event: DOMEvent) -> None:
            event.stop_propagation()
            self.set_mode(mode)
        return handle_mode

    def _select_element(self, node_id: int) -> None:
        if self._callbacks:
            self._callbacks.on_select_element(node_id)

    def _highlight(self, node_id: int) -> None:
        if self._callbacks:
            self._callbacks.on_highlight(node_id)


def _stop(event: DOMEvent) -> None:
    event.stop_propagation()
