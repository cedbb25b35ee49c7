"""
Block segmentation.

Splits a flat item stream into independent `[Create]` sections. Each section
keeps its marker line so the optional `[Deck: <value>]` tag can be read from
it. Items before the first marker are not part of any section.
"""

from __future__ import annotations

import logging
import re

from cardbridge.parsing.models import FlatItem, Section

logger = logging.getLogger(__name__)

CREATE_MARKER = "[Create]"

# [Deck: Backlog] or [Deck: Space/Backlog]
DECK_TAG_PATTERN = re.compile(r"\[\s*deck\s*:\s*([^\]]*)\]", re.IGNORECASE)


def has_create_marker(text: str | None) -> bool:
    """True if the text contains the `[Create]` token."""
    if not text:
        return False
    return CREATE_MARKER in text


def extract_deck_path(line: str) -> str | None:
    """Read the raw deck path from a `[Deck: ...]` tag, if any."""
    match = DECK_TAG_PATTERN.search(line)
    if not match:
        return None
    value = match.group(1).strip()
    return value or None


def strip_deck_tag(line: str) -> str:
    """Remove any `[Deck: ...]` tag from a line."""
    return DECK_TAG_PATTERN.sub("", line)


def marker_remainder(line: str) -> str:
    """Text left on a marker line after removing the marker and deck tag."""
    remainder = strip_deck_tag(line.replace(CREATE_MARKER, ""))
    return " ".join(remainder.split())


def segment(items: list[FlatItem]) -> list[Section]:
    """Split items into sections at every `[Create]` marker.

    Args:
        items: Flat items for one message

    Returns:
        One Section per marker, in message order. A message without markers
        yields an empty list.
    """
    sections: list[Section] = []
    current: Section | None = None
    skipped = 0

    for item in items:
        if has_create_marker(item.text):
            current = Section(
                marker_line=item.text,
                deck_path=extract_deck_path(item.text),
            )
            sections.append(current)
            continue

        if current is None:
            skipped += 1
            continue

        current.items.append(item)

    if skipped:
        logger.debug(f"Ignored {skipped} item(s) before the first {CREATE_MARKER} marker")

    return sections
