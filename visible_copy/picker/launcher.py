import logging
from typing import Optional

from visible_copy.config import PickerConfig
from visible_copy.dom.document import Document
from visible_copy.picker.clipboard import Clipboard
from visible_copy.picker.session import PickerSession

logger = logging.getLogger(__name__)


class PickerLauncher:
    """Starts picker sessions, at most one active session per document."""

    def __init__(self, clipboard: Clipboard, config: Optional[PickerConfig] = None) -> None:
        self.clipboard = clipboard
        self.config = config or PickerConfig()
        self._sessions: dict[int, PickerSession] = {}

    def active_session(self, document: Document) -> Optional[PickerSession]:
        return self._sessions.get(id(document))

    def trigger(self, document: Document) -> PickerSession:
        """
        Start a picker session on a document.

        Returns:
            The new session, or the session already running on the document
        """
        existing = self.active_session(document)
        if existing is not None and existing.active:
            logger.debug("Picker already active, ignoring trigger")
            return existing

        session = PickerSession(
            document,
            self.clipboard,
            self.config,
            on_teardown=self._forget,
        )
        self._sessions[id(document)] = session
        session.start()
        return session

    def _forget(self, session: PickerSession) -> None:
        if self._sessions.get(id(session.document)) is session:
            del self._sessions[id(session.document)]
