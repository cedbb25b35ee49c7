"""
Plain-text fallback parser.

Used when a message has no structured rich text. Rebuilds the FlatItem
stream from the flattened text:

- bulleted lines become list items, levelled by leading whitespace
  (see cardbridge.parsing.indent for the thresholds)
- `[Create]` lines are passed through so the segmenter can split on them;
  any other text on the marker line is dropped
- lines ending in ":" are passed through as owner-header candidates
- other unindented lines become plain titles

A bullet with at most one leading space is always a title. A plain title has
no bullet of its own, so the indented bullets under it are measured from the
first one that follows: that indentation is the body level and anything
deeper is nested.

This path is lower fidelity than the structured one. Body and nested levels
are inferred from whitespace that the plain-text rendering does not keep
consistently.
"""

from __future__ import annotations

import logging
import re

from cardbridge.parsing.builder import build_section_tasks, is_owner_header
from cardbridge.parsing.indent import (
    TITLE_MAX_WHITESPACE,
    classify_whitespace,
    leading_whitespace,
)
from cardbridge.parsing.models import BODY, NESTED, NON_LIST, TITLE, FlatItem, ParseResult
from cardbridge.parsing.segmenter import (
    CREATE_MARKER,
    has_create_marker,
    marker_remainder,
    segment,
)

logger = logging.getLogger(__name__)

BULLET_CHARS = "-*+•◦▪▫‣∙·●○■□–"

BULLET_PATTERN = re.compile(rf"^(\s*)[{re.escape(BULLET_CHARS)}]\s+(.*\S)\s*$")


def _bullet(line: str) -> tuple[int, str] | None:
    """Return (indent, text) for a bulleted line, else None."""
    match = BULLET_PATTERN.match(line)
    if not match:
        return None
    return leading_whitespace(match.group(1)), match.group(2).strip()


def text_to_items(text: str | None) -> list[FlatItem]:
    """Rebuild a FlatItem stream from plain message text.

    Args:
        text: Plain-text rendering of the message

    Returns:
        FlatItems in message order
    """
    items: list[FlatItem] = []
    if not text:
        return items

    # True while bullets hang under a plain (unbulleted) title
    anchored = False
    anchor_indent: int | None = None

    for raw_line in text.splitlines():
        line = raw_line.rstrip()
        if not line.strip():
            continue

        if has_create_marker(line):
            items.append(FlatItem(text=line.strip(), indent_level=NON_LIST, is_list_item=False))
            remainder = marker_remainder(line)
            if remainder:
                logger.debug(f"Ignoring text on the {CREATE_MARKER} line: {remainder!r}")
            anchored = False
            anchor_indent = None
            continue

        bullet = _bullet(line)
        if bullet is not None:
            indent, content = bullet
            if indent <= TITLE_MAX_WHITESPACE:
                level = TITLE
                anchored = False
                anchor_indent = None
            elif anchored:
                if anchor_indent is None:
                    anchor_indent = indent
                level = BODY if indent <= anchor_indent else NESTED
            else:
                level = classify_whitespace(indent)
            items.append(FlatItem(text=content, indent_level=level, is_list_item=True))
            continue

        content = line.strip()

        if content.endswith(":"):
            items.append(FlatItem(text=content, indent_level=NON_LIST, is_list_item=False))
            if is_owner_header(content) is not None:
                anchored = False
                anchor_indent = None
            continue

        if leading_whitespace(line) <= TITLE_MAX_WHITESPACE:
            items.append(FlatItem(text=content, indent_level=TITLE, is_list_item=True))
            anchored = True
            anchor_indent = None
            continue

        logger.debug(f"Dropping indented plain text: {content!r}")

    return items


def parse_text(text: str | None) -> ParseResult:
    """Parse a plain-text message into tasks.

    A message without a `[Create]` marker yields an empty result.
    """
    sections = segment(text_to_items(text))
    return ParseResult(tasks=build_section_tasks(sections), sections=sections, source="text")
