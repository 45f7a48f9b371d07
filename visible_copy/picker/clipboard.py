"""Clipboard collaborator and the legacy copy fallback."""

import logging
from typing import Optional, Protocol

from visible_copy.dom.document import Document

logger = logging.getLogger(__name__)


class ClipboardError(Exception):
    """Raised when the clipboard refuses a write."""


class Clipboard(Protocol):
    def write_text(self, text: str) -> None:
        """
        Place text on the clipboard.

        Raises:
            ClipboardError: If the write was rejected
        """


class MemoryClipboard:
    """Clipboard kept in process memory, for headless use and tests."""

    def __init__(self, fail: bool = False) -> None:
        self.fail: bool = fail
        self.history: list[str] = []

    @property
    def text(self) -> Optional[str]:
        return self.history[-1] if self.history else None

    def write_text(self, text: str) -> None:
        if self.fail:
            raise ClipboardError("Clipboard write rejected")
        self.history.append(text)


def legacy_copy(document: Document, text: str) -> bool:
    """
    Copy text through an off-screen textarea and the document copy command.

    The textarea is always removed again, even if the command fails.

    Returns:
        bool: Result of the copy command
    """
    parent = document.body if document.body is not None else document.document_element
    textarea = document.create_element(
        "textarea",
        {"style": "position: fixed; opacity: 0"},
        text=text,
    )
    document.append_child(parent, textarea)
    try:
        document.select_node_contents(textarea)
        copied = document.exec_command("copy")
    finally:
        document.remove_all_ranges()
        document.remove(textarea)

    if not copied:
        logger.error("Legacy copy command failed")
    return copied
