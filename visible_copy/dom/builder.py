import logging
from typing import Optional

from selenium.common.exceptions import WebDriverException
from selenium.webdriver.remote.webdriver import WebDriver

from visible_copy.dom.document import Document
from visible_copy.dom.js_scripts import SNAPSHOT_SCRIPT
from visible_copy.dom.models import ComputedStyle, NodeKind, NodeRecord, Position, SnapshotRecord

logger = logging.getLogger(__name__)


class DocumentBuilder:
    """Builds a Document from a snapshot of the rendered page."""

    def __init__(self, driver: WebDriver) -> None:
        self.driver = driver

    @classmethod
    def from_driver(cls, driver: WebDriver, selector: Optional[str] = None) -> tuple[Document, Optional[int]]:
        return cls(driver).build_document(selector)

    def build_document(self, selector: Optional[str] = None) -> tuple[Document, Optional[int]]:
        """
        Snapshot the current page.

        Args:
            selector: Optional CSS selector; the id of its first match is
                returned alongside the document

        Returns:
            The document and the matched node id (None without a match)

        Raises:
            WebDriverException: If browser automation fails
        """
        try:
            snapshot = self.driver.execute_script(SNAPSHOT_SCRIPT, selector)
        except WebDriverException as e:
            raise WebDriverException(f"Failed to snapshot document: {str(e)}")

        if not snapshot or not snapshot.get("root"):
            raise WebDriverException("Failed to snapshot document: page returned no root element")
        return self.from_records(snapshot)

    @classmethod
    def from_records(cls, snapshot: SnapshotRecord) -> tuple[Document, Optional[int]]:
        """
        Build a document from snapshot records.

        Missing fields fall back to defaults, so hand-written records only
        need what a test cares about.

        Returns:
            The document and the snapshot's target node id, if any
        """
        viewport = snapshot.get("viewport") or {}
        scroll = snapshot.get("scroll") or {}

        document = Document(
            viewport_width=float(viewport.get("width", 1280)),
            viewport_height=float(viewport.get("height", 800)),
        )
        document.scroll_x = float(scroll.get("x", 0))
        document.scroll_y = float(scroll.get("y", 0))
        document.root = cls._add_record(document, snapshot["root"], parent=None)

        selection = snapshot.get("selection")
        if selection:
            start, end = selection.get("start"), selection.get("end")
            if start in document and end in document:
                document.set_selection(start, end)

        target = snapshot.get("target")
        if target is not None and target not in document:
            logger.warning(f"Snapshot target {target} is not part of the document")
            target = None

        logger.debug(f"Built document with {len(document)} nodes")
        return document, target

    @classmethod
    def _add_record(cls, document: Document, record: NodeRecord, parent: Optional[int]) -> int:
        kind = NodeKind(str(record.get("kind", NodeKind.ELEMENT)))
        node_id = document.create_node(
            kind,
            tag=str(record.get("tag", "")),
            text=str(record.get("text", "")),
            attributes=[(str(name), str(value)) for name, value in record.get("attributes", [])],
            node_id=int(record["id"]) if record.get("id") is not None else None,
        )
        if parent is not None:
            document.append_child(parent, node_id)

        if kind == NodeKind.ELEMENT and "position" in record:
            document.set_layout(node_id, cls._position(record), cls._style(record))

        for child in record.get("children", []):
            cls._add_record(document, child, node_id)
        return node_id

    @staticmethod
    def _position(record: NodeRecord) -> Position:
        position = record.get("position", {})
        return {
            "x": float(position.get("x", 0)),
            "y": float(position.get("y", 0)),
            "width": float(position.get("width", 0)),
            "height": float(position.get("height", 0)),
        }

    @staticmethod
    def _style(record: NodeRecord) -> ComputedStyle:
        # The snapshot script reports pointerEvents in its CSSOM spelling.
        style = record.get("style", {})
        return {
            "display": str(style.get("display", "inline")),
            "opacity": str(style.get("opacity", "1")),
            "pointer_events": str(style.get("pointerEvents", style.get("pointer_events", "auto"))),
            "visibility": str(style.get("visibility", "visible")),
        }
