"""Tests for the task tree builder."""

import pytest

from cardbridge.parsing.builder import (
    BuilderState,
    build_section_tasks,
    build_tasks,
    finish,
    is_owner_header,
    parse_checkbox,
    split_assignee,
    step,
)
from cardbridge.parsing.models import BODY, NESTED, NON_LIST, TITLE, Checkbox, FlatItem, Section

pytestmark = pytest.mark.unit


def title(text: str) -> FlatItem:
    return FlatItem(text=text, indent_level=TITLE, is_list_item=True)


def body(text: str) -> FlatItem:
    return FlatItem(text=text, indent_level=BODY, is_list_item=True)


def nested(text: str) -> FlatItem:
    return FlatItem(text=text, indent_level=NESTED, is_list_item=True)


def plain(text: str) -> FlatItem:
    return FlatItem(text=text, indent_level=NON_LIST, is_list_item=False)


class TestIsOwnerHeader:
    """Tests for owner header detection."""

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("Ana:", "Ana"),
            ("Ana", "Ana"),
            ("  Ana Maria :", "Ana Maria"),
            ("Łukasz:", "Łukasz"),
            ("O'Neil:", "O'Neil"),
            ("Jean-Luc Picard:", "Jean-Luc Picard"),
        ],
    )
    def test_names(self, text, expected):
        assert is_owner_header(text) == expected

    @pytest.mark.parametrize(
        "text",
        [
            "",
            "[Create]",
            "Ana (lead):",
            "Please handle these four things:",
            "Sprint 12:",
            "x" * 41 + ":",
            ":",
        ],
    )
    def test_not_headers(self, text):
        assert is_owner_header(text) is None


class TestSplitAssignee:
    """Tests for inline assignee tags."""

    def test_trailing_tag(self):
        assert split_assignee("Fix login (Bob)") == ("Fix login", "Bob")

    def test_trailing_whitespace_after_tag(self):
        assert split_assignee("Fix login (Bob Smith)  ") == ("Fix login", "Bob Smith")

    def test_no_tag(self):
        assert split_assignee("Fix login") == ("Fix login", None)

    def test_empty_tag_is_kept_in_title(self):
        assert split_assignee("Fix login ()") == ("Fix login ()", None)

    def test_tag_not_at_end(self):
        """Only a trailing tag is an assignee."""
        assert split_assignee("Fix (urgent) login") == ("Fix (urgent) login", None)


class TestParseCheckbox:
    """Tests for checkbox markup."""

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("[ ] open", Checkbox("open", False)),
            ("[] open", Checkbox("open", False)),
            ("[x] done", Checkbox("done", True)),
            ("[X] done", Checkbox("done", True)),
            ("[ ]tight", Checkbox("tight", False)),
        ],
    )
    def test_checkboxes(self, text, expected):
        assert parse_checkbox(text) == expected

    @pytest.mark.parametrize("text", ["[y] maybe", "[ ]", "plain text", "[Deck: Art]"])
    def test_not_checkboxes(self, text):
        assert parse_checkbox(text) is None


class TestStep:
    """Tests for individual builder transitions."""

    def test_step_does_not_mutate_input_state(self):
        state = BuilderState()
        next_state = step(state, title("Task A"))

        assert state.current is None
        assert next_state.current is not None
        assert next_state.current.title == "Task A"

    def test_owner_header_seals_current_task(self):
        state = step(BuilderState(), title("Task A"))
        state = step(state, plain("Ana:"))

        assert state.current is None
        assert [task.title for task in state.tasks] == ["Task A"]
        assert state.owner == "Ana"
        assert state.last_level is None

    def test_non_header_text_is_discarded(self):
        state = step(BuilderState(), title("Task A"))
        after = step(state, plain("Some remark about (things)"))
        assert after == state

    def test_body_without_task_is_discarded(self):
        state = step(BuilderState(), body("orphan"))
        assert state == BuilderState()

    def test_title_without_text_is_discarded(self):
        state = step(BuilderState(), title("(Bob)"))
        assert state.current is None
        assert finish(state) == []


class TestBuildTasks:
    """Tests for building tasks from a section's items."""

    def test_owner_header_assigns_following_tasks(self):
        tasks = build_tasks([plain("Ana:"), title("Task A"), title("Task B")])

        assert [(task.title, task.assignee_name) for task in tasks] == [
            ("Task A", "Ana"),
            ("Task B", "Ana"),
        ]

    def test_inline_assignee_overrides_owner_for_one_task(self):
        tasks = build_tasks([plain("Ana:"), title("Task A (Bob)"), title("Task B")])

        assert tasks[0].assignee_name == "Bob"
        assert tasks[1].assignee_name == "Ana"

    def test_owner_switch(self):
        tasks = build_tasks([plain("Ana:"), title("A1"), plain("Bob:"), title("B1")])
        assert [task.assignee_name for task in tasks] == ["Ana", "Bob"]

    def test_description_and_nested_lines(self):
        tasks = build_tasks(
            [title("Task A"), body("desc1"), nested("nested1"), body("desc2")],
        )

        assert tasks[0].description == ["desc1", "- nested1", "", "desc2"]

    def test_no_blank_line_between_body_lines(self):
        tasks = build_tasks([title("Task A"), body("one"), body("two")])
        assert tasks[0].description == ["one", "two"]

    def test_nested_directly_under_title(self):
        tasks = build_tasks([title("Task A"), nested("deep")])
        assert tasks[0].description == ["- deep"]

    def test_checkboxes_at_body_and_nested_level(self):
        tasks = build_tasks(
            [title("Task A"), body("[ ] first"), nested("[x] second"), body("note")],
        )

        assert tasks[0].checkboxes == [Checkbox("first", False), Checkbox("second", True)]
        # No paragraph break before the first description line
        assert tasks[0].description == ["note"]

    def test_paragraph_break_after_nested_checkbox_with_description(self):
        tasks = build_tasks(
            [title("Task A"), body("intro"), nested("[ ] step"), body("outro")],
        )

        assert tasks[0].description == ["intro", "", "outro"]
        assert tasks[0].checkboxes == [Checkbox("step", False)]

    def test_section_deck_is_inherited(self):
        tasks = build_tasks([title("Task A"), title("Task B")], deck_path="Art")
        assert [task.deck_path for task in tasks] == ["Art", "Art"]

    def test_task_deck_tag_overrides_section_deck(self):
        tasks = build_tasks(
            [title("Fix crash [Deck: Code/Bugs] (Bob)"), title("Task B")],
            deck_path="Art",
        )

        assert tasks[0].title == "Fix crash"
        assert tasks[0].deck_path == "Code/Bugs"
        assert tasks[0].assignee_name == "Bob"
        assert tasks[1].deck_path == "Art"

    def test_title_whitespace_is_collapsed(self):
        tasks = build_tasks([title("  Fix    login  ")])
        assert tasks[0].title == "Fix login"

    def test_body_after_owner_header_is_discarded(self):
        """A header seals the task, so following body lines have no owner task."""
        tasks = build_tasks([title("Task A"), plain("Ana:"), body("lost")])

        assert tasks[0].description == []
        assert len(tasks) == 1

    def test_blank_list_items_are_ignored(self):
        tasks = build_tasks([title("Task A"), body("   "), body("kept")])
        assert tasks[0].description == ["kept"]

    def test_empty_input(self):
        assert build_tasks([]) == []


class TestBuildSectionTasks:
    """Tests for building tasks across sections."""

    def test_owner_does_not_cross_sections(self):
        sections = [
            Section(marker_line="[Create]", items=[plain("Ana:"), title("A1")]),
            Section(marker_line="[Create] [Deck: Art]", items=[title("B1")], deck_path="Art"),
        ]

        tasks = build_section_tasks(sections)

        assert [(t.title, t.assignee_name, t.deck_path) for t in tasks] == [
            ("A1", "Ana", None),
            ("B1", None, "Art"),
        ]

    def test_empty_section(self):
        assert build_section_tasks([Section(marker_line="[Create]")]) == []
