"""
Text processing utilities for extraction and previews.
"""

import re

NEWLINE = "\n"
ELLIPSIS = "…"

_SPACES_AROUND_NEWLINE = re.compile(r" *\n *")
_EXCESS_NEWLINES = re.compile(r"\n{3,}")
_REPEATED_SPACES = re.compile(r" {2,}")


def join_fragments(parts: list[str]) -> str:
    """
    Join text fragments and newline markers into readable text.

    Fragments are joined with single spaces, spaces around line breaks are
    dropped, runs of three or more line breaks collapse to a blank line and
    repeated spaces collapse to one.

    Args:
        parts: Text fragments interleaved with NEWLINE markers

    Returns:
        Normalised text with no leading or trailing whitespace
    """
    text = " ".join(parts)
    text = _SPACES_AROUND_NEWLINE.sub(NEWLINE, text)
    text = _EXCESS_NEWLINES.sub(NEWLINE * 2, text)
    text = _REPEATED_SPACES.sub(" ", text)
    return text.strip()


def truncate(text: str, limit: int) -> str:
    """Cut text to limit characters, marking the cut with an ellipsis."""
    if len(text) > limit:
        return text[:limit] + ELLIPSIS
    return text
