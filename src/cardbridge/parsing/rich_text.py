"""
Rich text extraction.

Converts Slack-style `rich_text` block documents into plain strings and
flat items:

- extract_text: concatenate inline nodes (text, link, emoji, mentions)
- flatten_blocks: walk sections, lists, quotes and preformatted blocks into
  FlatItems with list depth already classified

Malformed nodes never raise; they contribute an empty string.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from cardbridge.parsing.indent import classify_depth
from cardbridge.parsing.models import NON_LIST, FlatItem

logger = logging.getLogger(__name__)

# Container elements rendered as non-list paragraphs
PARAGRAPH_ELEMENTS = {"rich_text_section", "rich_text_preformatted", "rich_text_quote"}


def _decode_emoji(unicode_hex: str) -> str:
    """Decode a hyphen-separated code point string such as "1f1f5-1f1f1"."""
    return "".join(chr(int(part, 16)) for part in unicode_hex.split("-") if part)


def render_element(element: Any) -> str:
    """Render a single inline node to text."""
    if not isinstance(element, dict):
        return ""

    kind = element.get("type")

    if kind == "text":
        return str(element.get("text") or "")

    if kind == "link":
        return str(element.get("text") or element.get("url") or "")

    if kind == "emoji":
        unicode_hex = element.get("unicode")
        if unicode_hex:
            try:
                return _decode_emoji(str(unicode_hex))
            except (ValueError, OverflowError):
                logger.debug(f"Invalid emoji code point {unicode_hex!r}")
        name = element.get("name")
        return f":{name}:" if name else ""

    if kind == "user":
        user_id = element.get("user_id")
        return f"<@{user_id}>" if user_id else ""

    if kind == "channel":
        channel_id = element.get("channel_id")
        return f"<#{channel_id}>" if channel_id else ""

    if kind == "usergroup":
        group_id = element.get("usergroup_id")
        return f"<!subteam^{group_id}>" if group_id else ""

    if kind == "broadcast":
        scope = element.get("range")
        return f"<!{scope}>" if scope else ""

    text = element.get("text")
    return text if isinstance(text, str) else ""


def extract_text(elements: Iterable[Any] | None) -> str:
    """Concatenate a sequence of inline nodes into one string."""
    if not elements:
        return ""
    return "".join(render_element(element) for element in elements)


def _paragraph_items(element: dict[str, Any]) -> list[FlatItem]:
    text = extract_text(element.get("elements"))
    return [
        FlatItem(text=line.strip(), indent_level=NON_LIST, is_list_item=False)
        for line in text.split("\n")
        if line.strip()
    ]


def _list_items(element: dict[str, Any]) -> list[FlatItem]:
    try:
        depth = int(element.get("indent") or 0)
    except (TypeError, ValueError):
        depth = 0
    level = classify_depth(depth)

    items: list[FlatItem] = []
    for entry in element.get("elements") or []:
        if not isinstance(entry, dict):
            continue
        text = extract_text(entry.get("elements"))
        # A soft line break inside a bullet continues the same item
        lines = [line.strip() for line in text.split("\n") if line.strip()]
        if not lines:
            continue
        items.append(FlatItem(text=lines[0], indent_level=level, is_list_item=True))
        items.extend(
            FlatItem(text=line, indent_level=NON_LIST, is_list_item=False) for line in lines[1:]
        )
    return items


def flatten_blocks(blocks: Iterable[Any] | None) -> list[FlatItem]:
    """Flatten a rich text document into FlatItems in reading order.

    Args:
        blocks: Top-level message blocks; only `rich_text` blocks are read

    Returns:
        FlatItems; paragraphs produce NON_LIST items (one per line) and list
        entries produce list items at their classified depth
    """
    items: list[FlatItem] = []
    for block in blocks or []:
        if not isinstance(block, dict) or block.get("type") != "rich_text":
            continue
        for element in block.get("elements") or []:
            if not isinstance(element, dict):
                continue
            kind = element.get("type")
            if kind in PARAGRAPH_ELEMENTS:
                items.extend(_paragraph_items(element))
            elif kind == "rich_text_list":
                items.extend(_list_items(element))
            else:
                logger.debug(f"Skipping unsupported rich text element: {kind}")
    return items


def has_rich_text(blocks: Iterable[Any] | None) -> bool:
    """True if the blocks contain at least one non-empty `rich_text` block."""
    for block in blocks or []:
        if isinstance(block, dict) and block.get("type") == "rich_text" and block.get("elements"):
            return True
    return False
