"""Event objects and capture/bubble listener dispatch."""

from dataclasses import dataclass
from typing import Callable, Optional


# Listener scope used for handlers attached to the outermost (window) level.
WINDOW = -1

NON_BUBBLING_EVENTS = frozenset({"mouseenter", "mouseleave"})

POINTER_EVENT_TYPES = (
    "mousedown", "mouseup", "click", "pointerdown", "pointerup",
    "touchstart", "touchend",
)


@dataclass
class DOMEvent:
    """
    An input event delivered to the document.

    Attributes:
        type: Event type, e.g. "mousedown" or "keydown"
        target: Node id the event is aimed at, None for the window itself
        button: Pressed mouse button, 0 is the primary button
        client_x: Pointer x coordinate relative to the viewport
        client_y: Pointer y coordinate relative to the viewport
        key: Key value for keyboard events
        hits: Elements under the pointer as reported by the host, topmost
            first; None when the host did not hit-test
    """
    type: str
    target: Optional[int] = None
    button: int = 0
    client_x: float = 0.0
    client_y: float = 0.0
    key: str = ""
    hits: Optional[list[int]] = None
    default_prevented: bool = False
    immediate_propagation_stopped: bool = False
    propagation_stopped: bool = False

    @property
    def bubbles(self) -> bool:
        return self.type not in NON_BUBBLING_EVENTS

    def prevent_default(self) -> None:
        self.default_prevented = True

    def stop_propagation(self) -> None:
        self.propagation_stopped = True

    def stop_immediate_propagation(self) -> None:
        self.propagation_stopped = True
        self.immediate_propagation_stopped = True


Listener = Callable[[DOMEvent], None]


class ListenerRegistry:
    """Stores listeners per (scope, event type, phase) in registration order."""

    def __init__(self) -> None:
        self._listeners: dict[tuple[int, str, bool], list[Listener]] = {}

    def add(self, scope: int, event_type: str, listener: Listener, capture: bool) -> None:
        listeners = self._listeners.setdefault((scope, event_type, capture), [])
        # Re-adding an identical listener is a no-op.
        if listener not in listeners:
            listeners.append(listener)

    def remove(self, scope: int, event_type: str, listener: Listener, capture: bool) -> None:
        listeners = self._listeners.get((scope, event_type, capture))
        if listeners and listener in listeners:
            listeners.remove(listener)

    def drop_scope(self, scope: int) -> None:
        for key in [key for key in self._listeners if key[0] == scope]:
            del self._listeners[key]

    def count(self, scope: Optional[int] = None) -> int:
        return sum(
            len(listeners) for key, listeners in self._listeners.items()
            if scope is None or key[0] == scope
        )

    def dispatch(self, event: DOMEvent, path: list[int]) -> None:
        """
        Run listeners along a propagation path.

        Args:
            event: Event to deliver
            path: Node ids from the root down to the target
        """
        capture_scopes = [WINDOW] + path
        for scope in capture_scopes:
            if self._invoke(scope, event, capture=True):
                return

        if not event.bubbles:
            # Non-bubbling events still reach listeners on the target itself.
            if path:
                self._invoke(path[-1], event, capture=False)
            return

        for scope in list(reversed(path)) + [WINDOW]:
            if self._invoke(scope, event, capture=False):
                return

    def _invoke(self, scope: int, event: DOMEvent, capture: bool) -> bool:
        """Run one scope's listeners; return True when propagation stopped."""
        for listener in list(self._listeners.get((scope, event.type, capture), [])):
            listener(event)
            if event.immediate_propagation_stopped:
                break
        return event.propagation_stopped
