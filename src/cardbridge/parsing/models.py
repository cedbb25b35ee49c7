"""
Data types shared by the message parsers.

- FlatItem: normalized (text, level, is_list_item) unit both parsers produce
- Section: one `[Create]` directive and the items that follow it
- Checkbox / ParsedTask: the task records the builder emits
- ParseResult: tasks plus the sections they came from
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

# Indent levels carried by FlatItem.indent_level
NON_LIST = -1
TITLE = 0
BODY = 1
NESTED = 2


@dataclass(frozen=True)
class FlatItem:
    """A single line of a message after source-specific parsing.

    Attributes:
        text: Line text without bullet marker or leading whitespace
        indent_level: NON_LIST (-1), TITLE (0), BODY (1) or NESTED (2)
        is_list_item: True if the line was a list item in the source
    """

    text: str
    indent_level: int = NON_LIST
    is_list_item: bool = False


@dataclass
class Section:
    """A `[Create]` directive and the items up to the next one."""

    marker_line: str
    items: list[FlatItem] = field(default_factory=list)
    deck_path: str | None = None


@dataclass(frozen=True)
class Checkbox:
    """A checklist entry on a card."""

    text: str
    checked: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {"text": self.text, "checked": self.checked}


@dataclass
class ParsedTask:
    """A task parsed from a message, before any name resolution.

    Attributes:
        title: Card title (non-empty)
        assignee_name: Raw assignee name from an inline tag or owner header
        description: Description lines; "" entries are paragraph breaks
        checkboxes: Checklist entries in message order
        deck_path: Raw "Deck" or "Space/Deck" path
    """

    title: str
    assignee_name: str | None = None
    description: list[str] = field(default_factory=list)
    checkboxes: list[Checkbox] = field(default_factory=list)
    deck_path: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "title": self.title,
            "assignee_name": self.assignee_name,
            "description": list(self.description),
            "checkboxes": [checkbox.to_dict() for checkbox in self.checkboxes],
            "deck_path": self.deck_path,
        }


@dataclass
class ParseResult:
    """Result of parsing one message."""

    tasks: list[ParsedTask] = field(default_factory=list)
    sections: list[Section] = field(default_factory=list)
    source: Literal["blocks", "text"] = "text"

    @property
    def has_tasks(self) -> bool:
        return bool(self.tasks)

    def to_dict(self) -> dict[str, Any]:
        return {
            "source": self.source,
            "section_count": len(self.sections),
            "tasks": [task.to_dict() for task in self.tasks],
        }
