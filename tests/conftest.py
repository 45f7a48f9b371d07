"""Snapshot record builders shared by the test modules."""

from typing import Optional

import pytest

from visible_copy.config import PickerConfig
from visible_copy.dom.builder import DocumentBuilder
from visible_copy.dom.document import Document
from visible_copy.picker.clipboard import MemoryClipboard

VIEWPORT = (1280, 800)


def element(
    tag: str,
    *children: dict,
    attrs: Optional[dict[str, str]] = None,
    style: Optional[dict[str, str]] = None,
    box: Optional[tuple[float, float, float, float]] = (0, 0, 100, 20),
) -> dict:
    """
    Element record. box is (x, y, width, height) in page coordinates; pass
    None for an element that was never laid out.
    """
    record = {
        "kind": "element",
        "tag": tag,
        "attributes": [[name, value] for name, value in (attrs or {}).items()],
        "children": list(children),
    }
    if box is not None:
        x, y, width, height = box
        record["position"] = {"x": x, "y": y, "width": width, "height": height}
        record["style"] = {"display": "block", "opacity": "1", "visibility": "visible",
                           "pointerEvents": "auto", **(style or {})}
    return record


def text(value: str) -> dict:
    return {"kind": "text", "text": value}


def comment(value: str) -> dict:
    return {"kind": "comment", "text": value}


def hidden(tag: str, *children: dict, attrs: Optional[dict[str, str]] = None) -> dict:
    """Element rendered with display:none (zero-sized, like a real snapshot)."""
    return element(tag, *children, attrs=attrs, style={"display": "none"}, box=(0, 0, 0, 0))


def page(*body_children: dict, head_children: tuple = (), **snapshot) -> dict:
    """Full snapshot: html > head + body filling the viewport."""
    width, height = VIEWPORT
    root = element(
        "html",
        hidden("head", *head_children),
        element("body", *body_children, box=(0, 0, width, height)),
        box=(0, 0, width, height),
    )
    return {"root": root, "viewport": {"width": width, "height": height}, **snapshot}


def build(snapshot: dict) -> Document:
    document, _ = DocumentBuilder.from_records(snapshot)
    return document


def by_id(document: Document, element_id: str) -> int:
    node_id = document.get_element_by_id(element_id)
    assert node_id is not None, f"no element #{element_id}"
    return node_id


@pytest.fixture
def config():
    return PickerConfig()


@pytest.fixture
def clipboard():
    return MemoryClipboard()


@pytest.fixture
def failing_clipboard():
    return MemoryClipboard(fail=True)
