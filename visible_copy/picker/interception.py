"""Exclusive input capture for the duration of a picker session."""

import logging
from typing import Callable, Optional

from visible_copy.dom.document import Document
from visible_copy.dom.events import POINTER_EVENT_TYPES, DOMEvent, Listener

logger = logging.getLogger(__name__)

PRIMARY_PRESS_EVENTS = frozenset({"mousedown", "pointerdown"})


class EventInterceptor:
    """
    Window-level capture handlers that keep page content from reacting to input.

    Pointer events aimed at picker UI pass through untouched. Everything else
    is suppressed; a primary press while unlocked locks the selection, and the
    cancel key tears the session down. All handlers are registered and
    removed as one set.
    """

    def __init__(
        self,
        document: Document,
        is_picker_ui: Callable[[Optional[int]], bool],
        is_locked: Callable[[], bool],
        on_lock: Callable[[], None],
        on_cancel: Callable[[], None],
        on_move: Optional[Listener] = None,
        cancel_key: str = "Escape",
    ) -> None:
        self.document = document
        self.cancel_key = cancel_key
        self._is_locked = is_locked
        self._is_picker_ui = is_picker_ui
        self._on_cancel = on_cancel
        self._on_lock = on_lock
        self._on_move = on_move
        self._registrations: list[tuple[str, Listener]] = []

    @property
    def installed(self) -> bool:
        return bool(self._registrations)

    def install(self) -> None:
        if self.installed:
            return

        registrations: list[tuple[str, Listener]] = [
            (event_type, self._kill) for event_type in POINTER_EVENT_TYPES
        ]
        if self._on_move:
            registrations.append(("mousemove", self._on_move))
        registrations.append(("keydown", self._handle_key_down))

        for event_type, listener in registrations:
            self.document.add_event_listener(event_type, listener, capture=True)
        self._registrations = registrations
        logger.debug(f"Installed {len(registrations)} capture handlers")

    def uninstall(self) -> None:
        """Remove every registered handler; safe to call repeatedly."""
        registrations, self._registrations = self._registrations, []
        for event_type, listener in registrations:
            self.document.remove_event_listener(event_type, listener, capture=True)
        if registrations:
            logger.debug(f"Removed {len(registrations)} capture handlers")

    def _kill(self, event: DOMEvent) -> None:
        if self._is_picker_ui(event.target):
            return

        event.prevent_default()
        event.stop_propagation()
        event.stop_immediate_propagation()

        if event.type in PRIMARY_PRESS_EVENTS and event.button == 0 and not self._is_locked():
            self._on_lock()

    def _handle_key_down(self, event: DOMEvent) -> None:
        if event.key == self.cancel_key:
            event.prevent_default()
            event.stop_propagation()
            self._on_cancel()
