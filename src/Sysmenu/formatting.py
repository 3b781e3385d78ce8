"""Small text helpers for menu output."""

from __future__ import annotations

import logging
from collections.abc import Iterable

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 256


def render_bounded(
    items: Iterable[object],
    prefix: str = "",
    capacity: int = DEFAULT_CAPACITY,
    separator: str = ", ",
) -> str:
    """Render ``prefix[a, b, c]`` within ``capacity`` characters.

    Items that do not fit are dropped, a warning is logged and the list is
    closed with ``...`` so the cut is visible to the reader.
    """
    opening = f"{prefix}["
    budget = capacity - len(opening) - len("]")
    rendered: list[str] = []
    used = 0
    truncated = False
    for item in items:
        piece = str(item)
        cost = len(piece) + (len(separator) if rendered else 0)
        if used + cost > budget:
            truncated = True
            break
        rendered.append(piece)
        used += cost

    body = separator.join(rendered)
    if truncated:
        logger.warning("List truncated at %d characters (%d items shown)", capacity, len(rendered))
        body = f"{body}{separator}..." if body else "..."
    return f"{opening}{body}]"


def printable(text: str) -> str:
    """Replace undecodable bytes (surrogate escapes) with U+FFFD for display."""
    return text.encode("utf-8", "surrogateescape").decode("utf-8", "replace")
