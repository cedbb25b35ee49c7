"""
Card body formatting.

Layout of a card body:

    Title
    <blank>
    description line 1
    description line 2
    <blank>
    - [ ] open checkbox
    - [x] done checkbox

The description block and the checkbox block are each omitted when empty,
without leaving stray blank lines. Blank lines inside the description are
kept as paragraph breaks.

Known limitation of parse_card_body: a description whose last paragraph is
made of literal "- [ ] text" / "- [x] text" lines cannot be told apart from
the checkbox block and is read back as checkboxes.
"""

from __future__ import annotations

import re

from cardbridge.parsing.models import Checkbox, ParsedTask

CHECKBOX_LINE_PATTERN = re.compile(r"^- \[([ x])\] (.*)$")


def format_checkbox(checkbox: Checkbox) -> str:
    mark = "x" if checkbox.checked else " "
    return f"- [{mark}] {checkbox.text}"


def _trim_blank_edges(lines: list[str]) -> list[str]:
    start = 0
    end = len(lines)
    while start < end and not lines[start].strip():
        start += 1
    while end > start and not lines[end - 1].strip():
        end -= 1
    return lines[start:end]


def format_card_body(task: ParsedTask) -> str:
    """Serialize a task into a card body.

    Args:
        task: Sealed task record

    Returns:
        Card content with the title on the first line
    """
    segments = [task.title.strip()]

    description = _trim_blank_edges(list(task.description))
    if description:
        segments.append("\n".join(description))

    if task.checkboxes:
        segments.append("\n".join(format_checkbox(checkbox) for checkbox in task.checkboxes))

    return "\n\n".join(segments)


def parse_card_body(body: str) -> ParsedTask:
    """Read a card body produced by format_card_body back into a task.

    Only title, description and checkboxes are recovered; assignee and deck
    are not part of the body.
    """
    lines = body.split("\n")
    title = lines[0].strip() if lines else ""
    rest = lines[1:]

    checkboxes: list[Checkbox] = []
    checkbox_start = len(rest)
    while checkbox_start > 0 and CHECKBOX_LINE_PATTERN.match(rest[checkbox_start - 1]):
        checkbox_start -= 1

    # A checkbox block always follows a blank separator line
    if checkbox_start < len(rest) and (checkbox_start == 0 or not rest[checkbox_start - 1]):
        for line in rest[checkbox_start:]:
            match = CHECKBOX_LINE_PATTERN.match(line)
            if match:
                checkboxes.append(Checkbox(text=match.group(2), checked=match.group(1) == "x"))
        rest = rest[: max(checkbox_start - 1, 0)]

    description = _trim_blank_edges(rest)
    return ParsedTask(title=title, description=description, checkboxes=checkboxes)
