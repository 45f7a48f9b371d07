"""
Bridge between a picker session and a page open in a real browser.

The session runs against the Python Document built from a page snapshot.
The bridge feeds it the input recorded in the browser and mirrors the
picker UI it builds back into the page.
"""

import logging
import time
from typing import Any, Optional

from selenium.common.exceptions import WebDriverException
from selenium.webdriver.remote.webdriver import WebDriver

from visible_copy.config import PickerConfig
from visible_copy.dom.document import Document
from visible_copy.dom.events import DOMEvent
from visible_copy.dom.js_scripts import (CLEAR_SELECTION_SCRIPT,
                                         CLIPBOARD_WRITE_SCRIPT,
                                         DRAIN_EVENTS_SCRIPT,
                                         EVENT_RECORDER_SCRIPT,
                                         INSTALL_STYLE_SCRIPT,
                                         LEGACY_COPY_SCRIPT, PICKER_CSS,
                                         RENDER_UI_SCRIPT, UI_ID_ATTRIBUTE,
                                         UNINSTALL_SCRIPT)
from visible_copy.dom.serializer import outer_html
from visible_copy.picker.clipboard import ClipboardError
from visible_copy.picker.session import PickerSession
from visible_copy.utils.decorators import error_handler

logger = logging.getLogger(__name__)


class BrowserClipboard:
    """System clipboard reached through the page's async Clipboard API."""

    def __init__(self, driver: WebDriver) -> None:
        self.driver = driver

    def write_text(self, text: str) -> None:
        try:
            error = self.driver.execute_async_script(CLIPBOARD_WRITE_SCRIPT, text)
        except WebDriverException as e:
            raise ClipboardError(f"Clipboard write failed: {str(e)}")
        if error:
            raise ClipboardError(str(error))


class LivePageBridge:
    """Pumps browser input into a document and mirrors the picker UI back."""

    def __init__(self, driver: WebDriver, document: Document, config: Optional[PickerConfig] = None) -> None:
        self.config = config or PickerConfig()
        self.document = document
        self.driver = driver
        self.installed: bool = False
        self._hover_path: list[int] = []
        self._last_tick: float = 0.0
        self._page_has_selection: bool = document.get_selection() is not None
        self._rendered_version: Optional[int] = None

    def install(self) -> None:
        """
        Inject the picker stylesheet, the UI mount point and the input recorder.

        Raises:
            WebDriverException: If the page rejects the scripts
        """
        if self.installed:
            return
        try:
            self.driver.execute_script(INSTALL_STYLE_SCRIPT, PICKER_CSS)
            self.driver.execute_script(EVENT_RECORDER_SCRIPT)
        except WebDriverException as e:
            raise WebDriverException(f"Failed to install picker bridge: {str(e)}")

        self.document.legacy_copy_handler = self._legacy_copy
        self._last_tick = time.monotonic()
        self._rendered_version = None
        self.installed = True

    def uninstall(self) -> None:
        if not self.installed:
            return
        self.installed = False
        self.document.legacy_copy_handler = None
        self._hover_path = []
        try:
            self.driver.execute_script(UNINSTALL_SCRIPT)
        except WebDriverException as e:
            logger.error(f"Failed to remove picker bridge from page: {str(e)}")

    def pump(self, session: PickerSession) -> int:
        """
        Deliver recorded input, run due timers and refresh the mirrored UI.

        Returns:
            int: Number of recorded events delivered
        """
        entries = self.driver.execute_script(DRAIN_EVENTS_SCRIPT)
        if entries is None:
            logger.warning("Input recorder is gone, the page probably navigated away")
            session.cancel()
            return 0

        for entry in entries:
            self._deliver(entry)

        now = time.monotonic()
        self.document.advance_time(now - self._last_tick)
        self._last_tick = now

        self._sync_selection()
        if session.active and self.document.version != self._rendered_version:
            self.render_ui(session)
        return len(entries)

    def run(self, session: PickerSession) -> Optional[str]:
        """
        Pump until the session ends.

        Returns:
            The copied content, or None if nothing was copied
        """
        self.install()
        try:
            while session.active:
                self.pump(session)
                if session.active:
                    time.sleep(self.config.poll_interval)
        except WebDriverException as e:
            logger.error(f"Lost connection to the page: {str(e)}")
            session.teardown()
        finally:
            self.uninstall()
        return session.last_copied

    @error_handler
    def render_ui(self, session: PickerSession) -> bool:
        """Replace the page's copy of the picker UI with the current one."""
        markup = "".join(
            outer_html(self.document, node, id_attribute=UI_ID_ATTRIBUTE)
            for node in session.ui_nodes
        )
        rendered = self.driver.execute_script(RENDER_UI_SCRIPT, markup)
        self._rendered_version = self.document.version
        return bool(rendered)

    def _deliver(self, entry: dict[str, Any]) -> None:
        self.document.scroll_x = float(entry.get("scrollX", self.document.scroll_x))
        self.document.scroll_y = float(entry.get("scrollY", self.document.scroll_y))

        event_type = str(entry.get("type", ""))
        ui_target = entry.get("uiTarget")
        if ui_target is not None and ui_target not in self.document:
            # Markup from an older render; the node it mirrored is gone.
            if event_type == "mouseover":
                self._update_hover(None)
            logger.debug(f"Dropping {event_type} aimed at stale picker UI node {ui_target}")
            return

        if event_type == "mouseover":
            self._update_hover(ui_target)
            return

        hits = entry.get("hits")
        self.document.dispatch_event(DOMEvent(
            type=event_type,
            target=ui_target if ui_target is not None else entry.get("target"),
            button=int(entry.get("button", 0)),
            client_x=float(entry.get("x", 0)),
            client_y=float(entry.get("y", 0)),
            key=str(entry.get("key", "")),
            hits=[int(hit) for hit in hits] if hits is not None else None,
        ))

    def _sync_selection(self) -> None:
        """Clear the page's text selection once the document's is gone."""
        has_selection = self.document.get_selection() is not None
        if self._page_has_selection and not has_selection:
            self.driver.execute_script(CLEAR_SELECTION_SCRIPT)
            logger.debug("Cleared text selection in page")
        self._page_has_selection = has_selection

    def _update_hover(self, node_id: Optional[int]) -> None:
        """Turn mouseover transitions into mouseenter/mouseleave on picker UI."""
        path = [] if node_id is None else [node_id, *self.document.ancestors(node_id)]

        for left in self._hover_path:
            if left not in path and left in self.document:
                self.document.dispatch_event(DOMEvent(type="mouseleave", target=left))
        for entered in reversed(path):
            if entered not in self._hover_path:
                self.document.dispatch_event(DOMEvent(type="mouseenter", target=entered))

        self._hover_path = path

    def _legacy_copy(self, text: str) -> bool:
        try:
            return bool(self.driver.execute_script(LEGACY_COPY_SCRIPT, text))
        except WebDriverException as e:
            logger.error(f"Legacy copy failed in page: {str(e)}")
            return False
