"""
Task tree builder.

Consumes the flat item stream of one section and produces ParsedTask records.
The builder is a fold over the items: `step` takes the current BuilderState
and one FlatItem and returns the next state, so every transition can be
tested in isolation.

Transitions:
- non-list owner header ("Ana:") -> seal current task, switch owner
- other non-list text -> discarded
- level 0 -> seal current task, open a new one; an inline "(Name)" beats
  the owner header for that task only
- level 1 -> checkbox or description line; returning from level 2 inserts
  one blank description line first, unless the description is still empty
- level 2 -> checkbox or "- " prefixed description line
- end of input -> seal current task
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field, replace
from functools import reduce

from cardbridge.parsing.models import (
    BODY,
    NESTED,
    TITLE,
    Checkbox,
    FlatItem,
    ParsedTask,
    Section,
)
from cardbridge.parsing.segmenter import extract_deck_path, strip_deck_tag

logger = logging.getLogger(__name__)

NESTED_PREFIX = "- "

OWNER_HEADER_MAX_LENGTH = 40
OWNER_HEADER_FORBIDDEN = set("[](){}<>")

# One to three words of letters, apostrophes, dots or hyphens
OWNER_NAME_PATTERN = re.compile(
    r"^[^\W\d_](?:[^\W\d_]|['.\-])*(?:\s+[^\W\d_](?:[^\W\d_]|['.\-])*){0,2}$"
)

# Trailing "(Name)" on a title line
ASSIGNEE_PATTERN = re.compile(r"\(([^()]*)\)\s*$")

# [ ], [], [x] or [X] followed by the label
CHECKBOX_PATTERN = re.compile(r"^\[([ xX]?)\]\s*(\S.*)$")


@dataclass(frozen=True)
class BuilderState:
    """Immutable builder state threaded through `step`.

    Attributes:
        tasks: Sealed tasks in order
        current: Task still receiving body lines
        owner: Name from the latest owner header
        last_level: Level of the last list item applied, None after a header
    """

    tasks: tuple[ParsedTask, ...] = field(default_factory=tuple)
    current: ParsedTask | None = None
    owner: str | None = None
    last_level: int | None = None


def is_owner_header(text: str) -> str | None:
    """Return the owner name if the line is an owner header, else None."""
    candidate = text.strip()
    if not candidate or len(candidate) > OWNER_HEADER_MAX_LENGTH:
        return None
    if any(char in OWNER_HEADER_FORBIDDEN for char in candidate):
        return None
    if candidate.endswith(":"):
        candidate = candidate[:-1].rstrip()
    if not OWNER_NAME_PATTERN.match(candidate):
        return None
    return candidate


def split_assignee(text: str) -> tuple[str, str | None]:
    """Split a trailing "(Name)" off a title.

    Returns:
        (title, name) where name is None if there was no non-empty tag
    """
    match = ASSIGNEE_PATTERN.search(text)
    if not match:
        return text.strip(), None
    name = match.group(1).strip()
    if not name:
        return text.strip(), None
    return text[: match.start()].strip(), name


def parse_checkbox(text: str) -> Checkbox | None:
    """Parse a checkbox line; anything but [ ], [], [x], [X] is not one."""
    match = CHECKBOX_PATTERN.match(text.strip())
    if not match:
        return None
    marker, label = match.groups()
    return Checkbox(text=label.strip(), checked=marker.lower() == "x")


def _seal(state: BuilderState) -> BuilderState:
    if state.current is None:
        return state
    return replace(state, tasks=(*state.tasks, state.current), current=None)


def _open_task(state: BuilderState, text: str, deck_path: str | None) -> BuilderState:
    state = _seal(state)

    task_deck = extract_deck_path(text) or deck_path
    title, inline_assignee = split_assignee(strip_deck_tag(text))
    title = " ".join(title.split())
    if not title:
        logger.debug(f"Discarding title item with no title text: {text!r}")
        return replace(state, last_level=None)

    task = ParsedTask(
        title=title,
        assignee_name=inline_assignee or state.owner,
        deck_path=task_deck,
    )
    return replace(state, current=task, last_level=TITLE)


def _append_body(state: BuilderState, text: str, level: int) -> BuilderState:
    task = state.current
    if task is None:
        logger.debug(f"Discarding body item with no open task: {text!r}")
        return state

    description = list(task.description)
    checkboxes = list(task.checkboxes)

    returning = state.last_level is not None and state.last_level >= NESTED
    if level == BODY and returning and description:
        description.append("")

    checkbox = parse_checkbox(text)
    if checkbox is not None:
        checkboxes.append(checkbox)
    elif level >= NESTED:
        description.append(f"{NESTED_PREFIX}{text.strip()}")
    else:
        description.append(text.strip())

    task = replace(task, description=description, checkboxes=checkboxes)
    return replace(state, current=task, last_level=level)


def step(state: BuilderState, item: FlatItem, deck_path: str | None = None) -> BuilderState:
    """Apply one item to the builder state.

    Args:
        state: State before the item
        item: Item to apply
        deck_path: Section deck path given to tasks opened by this item

    Returns:
        The next state (the input state is never modified)
    """
    if not item.is_list_item:
        owner = is_owner_header(item.text)
        if owner is None:
            logger.debug(f"Discarding text outside the task list: {item.text!r}")
            return state
        return replace(_seal(state), owner=owner, last_level=None)

    if not item.text.strip():
        return state

    if item.indent_level <= TITLE:
        return _open_task(state, item.text, deck_path)

    return _append_body(state, item.text, min(item.indent_level, NESTED))


def finish(state: BuilderState) -> list[ParsedTask]:
    """Seal any open task and return all tasks."""
    return list(_seal(state).tasks)


def build_tasks(items: list[FlatItem], deck_path: str | None = None) -> list[ParsedTask]:
    """Build tasks from one section's items.

    Args:
        items: Flat items of the section, in order
        deck_path: Deck path from the section marker, inherited by every task
            without its own `[Deck: ...]` tag

    Returns:
        Tasks in message order
    """
    state = reduce(lambda acc, item: step(acc, item, deck_path), items, BuilderState())
    return finish(state)


def build_section_tasks(sections: list[Section]) -> list[ParsedTask]:
    """Build tasks for every section; owner state does not cross sections."""
    tasks: list[ParsedTask] = []
    for section in sections:
        section_tasks = build_tasks(section.items, section.deck_path)
        if not section_tasks:
            logger.debug(f"Section {section.marker_line!r} produced no tasks")
        tasks.extend(section_tasks)
    return tasks
