"""
Indentation classification.

Maps a raw nesting signal to one of the three semantic levels used by the
task builder (TITLE, BODY, NESTED).

Structured input carries an explicit list depth, which maps directly.
Plain-text input only carries leading whitespace, which is mapped through
fixed thresholds. The thresholds are coarse: the plain-text rendering of a
nested list does not preserve exact depth, so inconsistent indentation can
land on the wrong level. Use the structured path when precise nesting matters.
"""

from __future__ import annotations

from cardbridge.parsing.models import BODY, NESTED, TITLE

# Whitespace thresholds for plain-text input (inclusive upper bounds)
TITLE_MAX_WHITESPACE = 1
BODY_MAX_WHITESPACE = 4

TAB_WIDTH = 4

# Plain space plus the non-breaking and fixed-width spaces chat clients emit
WHITESPACE_CHARS = frozenset(" \u00a0\u2002\u2003\u2007\u2009\u202f")


def classify_depth(depth: int) -> int:
    """Map an explicit list depth to a level.

    Depth 0 is a title, depth 1 a body line, and anything deeper collapses
    into the single nested level.
    """
    if depth <= 0:
        return TITLE
    if depth == 1:
        return BODY
    return NESTED


def classify_whitespace(count: int) -> int:
    """Map a leading-whitespace count to a level.

    0-1 characters -> TITLE, 2-4 -> BODY, 5 or more -> NESTED.
    """
    if count <= TITLE_MAX_WHITESPACE:
        return TITLE
    if count <= BODY_MAX_WHITESPACE:
        return BODY
    return NESTED


def leading_whitespace(line: str) -> int:
    """Count leading whitespace columns (tabs count as TAB_WIDTH)."""
    count = 0
    for char in line:
        if char == "\t":
            count += TAB_WIDTH
        elif char in WHITESPACE_CHARS:
            count += 1
        else:
            break
    return count
