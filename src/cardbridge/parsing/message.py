"""
Message entry point.

Chooses between the structured rich-text path and the plain-text fallback,
and answers the `!help` / `!commands` chat commands.
"""

from __future__ import annotations

import logging
from typing import Any

from cardbridge.parsing.builder import build_section_tasks
from cardbridge.parsing.fallback import parse_text
from cardbridge.parsing.models import ParseResult
from cardbridge.parsing.rich_text import flatten_blocks, has_rich_text
from cardbridge.parsing.segmenter import CREATE_MARKER, segment

logger = logging.getLogger(__name__)

HELP_COMMAND = "!help"
COMMANDS_COMMAND = "!commands"

COMMANDS_TEXT = f"""*Available commands:*
• `{COMMANDS_COMMAND}` - show this list
• `{HELP_COMMAND}` - show a usage example

*Task attributes:*
• `{CREATE_MARKER}` - create the tasks that follow as cards
• `[Deck: Name]` or `[Deck: Space/Name]` - target deck for the section or a single task"""

HELP_TEXT = f"""*Creating cards:*
```
{CREATE_MARKER} [Deck: Space/Backlog]
Ana:
• Task title (Owner)
    • Description line
        • Nested description line
        • [ ] Open checklist item
        • [x] Done checklist item
```

*Structure:*
• *Owner header* (a name on its own line, optional colon) - default owner for the tasks below it
• *Level 1* (no indent) - task title, optionally ending with (Owner)
• *Level 2* (one indent) - description line or checkbox
• *Level 3* (two indents) - nested description line or checkbox

*Tips:*
• `-`, `*` and `•` all work as bullets
• An (Owner) on the title beats the owner header for that task only
• Checkboxes: `[ ]` or `[]` = open, `[x]` = done"""


def parse_blocks(blocks: list[dict[str, Any]] | None) -> ParseResult:
    """Parse a structured rich-text document into tasks."""
    sections = segment(flatten_blocks(blocks))
    return ParseResult(tasks=build_section_tasks(sections), sections=sections, source="blocks")


def parse_message(text: str | None, blocks: list[dict[str, Any]] | None = None) -> ParseResult:
    """Parse a chat message into tasks.

    Args:
        text: Plain-text rendering of the message
        blocks: Structured rich-text blocks, when the message has them

    Returns:
        ParseResult; empty when the message has no `[Create]` marker
    """
    if has_rich_text(blocks):
        result = parse_blocks(blocks)
    else:
        result = parse_text(text)

    if result.sections:
        logger.debug(
            f"Parsed {len(result.tasks)} task(s) from {len(result.sections)} section(s) "
            f"via {result.source}"
        )
    return result


def is_command(text: str | None) -> bool:
    """True if the message is one of the chat commands."""
    if not text:
        return False
    return text.strip().lower() in (HELP_COMMAND, COMMANDS_COMMAND)


def command_response(text: str | None) -> str | None:
    """Reply text for a chat command, or None if the text is not a command."""
    if not text:
        return None
    command = text.strip().lower()
    if command == COMMANDS_COMMAND:
        return COMMANDS_TEXT
    if command == HELP_COMMAND:
        return HELP_TEXT
    return None
