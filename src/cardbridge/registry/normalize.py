"""
Name normalization and alias tables.

Names from chat and names from the registry are compared after
normalize_name: lowercase, accents removed, letters without a Unicode
decomposition folded explicitly (Polish ł, Danish ø, ...), whitespace trimmed
and collapsed.
"""

from __future__ import annotations

import unicodedata
from collections.abc import Mapping

# Letters NFD does not decompose into base + combining mark
LETTER_FOLDS = str.maketrans(
    {
        "ł": "l",
        "Ł": "l",
        "ø": "o",
        "Ø": "o",
        "đ": "d",
        "Đ": "d",
        "ß": "ss",
        "æ": "ae",
        "Æ": "ae",
    }
)


def normalize_name(value: str | None) -> str:
    """Normalize a name for lookup.

    Example:
        normalize_name("  Zażółć  Gęślą ") == "zazolc gesla"
    """
    if not value:
        return ""
    folded = value.translate(LETTER_FOLDS)
    decomposed = unicodedata.normalize("NFD", folded)
    stripped = "".join(char for char in decomposed if not unicodedata.combining(char))
    return " ".join(stripped.lower().split())


class AliasMap:
    """Alias table (short code -> full registry name) keyed by normalized alias.

    Aliases are normalized once on construction so lookups are a single dict
    access. When two aliases normalize to the same key, the later one wins.
    """

    def __init__(self, aliases: Mapping[str, str] | None = None) -> None:
        self._aliases: dict[str, str] = {}
        for alias, full_name in (aliases or {}).items():
            key = normalize_name(alias)
            if key and full_name:
                self._aliases[key] = full_name

    def lookup(self, value: str) -> str:
        """Return the full name for an alias, or the value unchanged."""
        return self._aliases.get(normalize_name(value), value)

    def __contains__(self, value: object) -> bool:
        return isinstance(value, str) and normalize_name(value) in self._aliases

    def __len__(self) -> int:
        return len(self._aliases)

    @classmethod
    def coerce(cls, aliases: AliasMap | Mapping[str, str] | None) -> AliasMap:
        """Accept an AliasMap, a plain mapping or None."""
        if isinstance(aliases, AliasMap):
            return aliases
        return cls(aliases)


class NameAliases:
    """Alias tables for the three entity kinds, normalized once."""

    def __init__(
        self,
        spaces: Mapping[str, str] | None = None,
        decks: Mapping[str, str] | None = None,
        users: Mapping[str, str] | None = None,
    ) -> None:
        self.spaces = AliasMap(spaces)
        self.decks = AliasMap(decks)
        self.users = AliasMap(users)
