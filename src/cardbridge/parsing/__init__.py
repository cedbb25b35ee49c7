"""Message parsing: rich text and plain text to ParsedTask records."""

from cardbridge.parsing.builder import build_tasks, is_owner_header, parse_checkbox
from cardbridge.parsing.fallback import parse_text
from cardbridge.parsing.message import command_response, is_command, parse_blocks, parse_message
from cardbridge.parsing.models import Checkbox, FlatItem, ParsedTask, ParseResult, Section

__all__ = [
    "Checkbox",
    "FlatItem",
    "ParseResult",
    "ParsedTask",
    "Section",
    "build_tasks",
    "command_response",
    "is_command",
    "is_owner_header",
    "parse_blocks",
    "parse_checkbox",
    "parse_message",
    "parse_text",
]
