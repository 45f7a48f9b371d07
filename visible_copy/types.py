from enum import StrEnum


class CopyMode(StrEnum):
    HTML = "html"
    TEXT = "text"


class PickerState(StrEnum):
    IDLE = "idle"
    HOVERING = "hovering"
    LOCKED = "locked"
    COPIED = "copied"
    CANCELLED = "cancelled"
