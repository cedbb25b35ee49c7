"""
In-memory name resolution cache.

Maps normalized space, deck and user names to registry ids. All maps are
built together into an immutable CacheSnapshot and published by swapping a
single reference, so a resolution call sees either the old snapshot or the
new one, never a mix. A failed refresh leaves the previous snapshot in place.

Resolution steps (same shape for all three kinds):
1. Alias substitution (case and accent insensitive)
2. Normalization
3. Direct lookup
4. Decks: "Space/Deck" paths try the compound map first, then the deck name
   alone (ambiguous when two spaces share a deck name: the first deck
   registered under that name wins)
5. Users: substring match in either direction, in registry order
"""

from __future__ import annotations

import asyncio
import logging
import threading
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from cardbridge.registry.base import (
    RegistryDeck,
    RegistrySource,
    RegistrySpace,
    RegistryUser,
)
from cardbridge.registry.errors import (
    CacheNotReadyError,
    RegistryConnectionError,
    RegistryError,
)
from cardbridge.registry.normalize import AliasMap, normalize_name

logger = logging.getLogger(__name__)

PATH_SEPARATOR = "/"

AliasInput = AliasMap | Mapping[str, str] | None


@dataclass(frozen=True)
class DeckEntry:
    """Cached deck with its owning space."""

    id: str
    space_id: str | None = None
    space_name: str | None = None


@dataclass(frozen=True)
class CacheSnapshot:
    """All lookup maps built from one registry fetch.

    Attributes:
        spaces: normalized space name -> space id
        decks: normalized deck name -> DeckEntry (first deck per name)
        deck_paths: "space/deck" (both normalized) -> deck id
        users: normalized user name or username -> user id, registry order
        space_names / deck_names / user_names: id -> display name
        refreshed_at: When the snapshot was built (UTC)
    """

    spaces: dict[str, str] = field(default_factory=dict)
    decks: dict[str, DeckEntry] = field(default_factory=dict)
    deck_paths: dict[str, str] = field(default_factory=dict)
    users: dict[str, str] = field(default_factory=dict)
    space_names: dict[str, str] = field(default_factory=dict)
    deck_names: dict[str, str] = field(default_factory=dict)
    user_names: dict[str, str] = field(default_factory=dict)
    refreshed_at: datetime = field(default_factory=lambda: datetime.now(UTC))


def compound_key(space: str, deck: str) -> str:
    """Key of the compound "space/deck" map."""
    return f"{normalize_name(space)}{PATH_SEPARATOR}{normalize_name(deck)}"


def build_snapshot(
    spaces: Iterable[RegistrySpace],
    decks: Iterable[RegistryDeck],
    users: Iterable[RegistryUser],
) -> CacheSnapshot:
    """Build a complete snapshot from registry records.

    Records without an id or a name are skipped.
    """
    snapshot = CacheSnapshot()

    for space in spaces:
        key = normalize_name(space.name)
        if not key or not space.id:
            continue
        snapshot.spaces[key] = space.id
        snapshot.space_names[space.id] = space.name

    for deck in decks:
        key = normalize_name(deck.name)
        if not key or not deck.id:
            continue
        space_name = deck.space_name
        if not space_name and deck.space_id:
            space_name = snapshot.space_names.get(deck.space_id)

        if key in snapshot.decks:
            logger.debug(
                f"Deck name {deck.name!r} already cached; "
                f"{deck.id} is reachable only by its space path"
            )
        else:
            snapshot.decks[key] = DeckEntry(id=deck.id, space_id=deck.space_id, space_name=space_name)

        snapshot.deck_names[deck.id] = deck.name
        if space_name:
            snapshot.deck_paths[compound_key(space_name, deck.name)] = deck.id

    for user in users:
        key = normalize_name(user.name)
        if not key or not user.id:
            continue
        snapshot.users.setdefault(key, user.id)
        snapshot.user_names[user.id] = user.name
        username_key = normalize_name(user.username)
        if username_key:
            snapshot.users.setdefault(username_key, user.id)

    return snapshot


class NameCache:
    """Refreshable name -> id cache for spaces, decks and users.

    Resolution methods return an id or None when the name is not found. They
    raise CacheNotReadyError when no snapshot has been loaded yet, so callers
    can tell "never initialized" apart from "no such name".

    Example:
        cache = NameCache()
        await cache.refresh(client)
        deck_id = cache.resolve_deck("MT/Backlog", deck_aliases, space_aliases)
    """

    def __init__(self) -> None:
        self._snapshot: CacheSnapshot | None = None
        self._lock = threading.Lock()

    @property
    def is_ready(self) -> bool:
        return self._snapshot is not None

    @property
    def last_refresh(self) -> datetime | None:
        snapshot = self._snapshot
        return snapshot.refreshed_at if snapshot else None

    @property
    def snapshot(self) -> CacheSnapshot | None:
        """The currently published snapshot."""
        return self._snapshot

    def _require_snapshot(self) -> CacheSnapshot:
        snapshot = self._snapshot
        if snapshot is None:
            raise CacheNotReadyError("Name cache has not been loaded; run a refresh first")
        return snapshot

    def load(
        self,
        spaces: Iterable[RegistrySpace],
        decks: Iterable[RegistryDeck],
        users: Iterable[RegistryUser],
    ) -> CacheSnapshot:
        """Build a snapshot from records and publish it.

        Returns:
            The published snapshot
        """
        snapshot = build_snapshot(spaces, decks, users)
        with self._lock:
            self._snapshot = snapshot
        logger.info(
            f"Name cache loaded: {len(snapshot.spaces)} spaces, {len(snapshot.decks)} decks "
            f"({len(snapshot.deck_paths)} paths), {len(snapshot.users)} user names"
        )
        return snapshot

    async def refresh(self, source: RegistrySource, timeout: float | None = None) -> CacheSnapshot:
        """Fetch all records from a registry source and publish a new snapshot.

        Args:
            source: Registry to fetch from
            timeout: Overall limit in seconds for the three fetches

        Returns:
            The new snapshot

        Raises:
            RegistryError: If any fetch fails; the previous snapshot stays in effect
        """
        logger.info("Refreshing name cache")
        try:
            spaces, decks, users = await asyncio.wait_for(
                self._fetch_all(source),
                timeout=timeout,
            )
        except TimeoutError as e:
            logger.error(f"Name cache refresh timed out after {timeout}s; keeping previous data")
            raise RegistryConnectionError(f"Registry refresh timed out after {timeout}s") from e
        except RegistryError as e:
            logger.error(f"Name cache refresh failed: {e}; keeping previous data")
            raise
        except Exception as e:
            logger.error(f"Name cache refresh failed: {e!r}; keeping previous data")
            raise RegistryError(f"Registry refresh failed: {e!r}") from e

        return self.load(spaces, decks, users)

    async def _fetch_all(
        self, source: RegistrySource
    ) -> tuple[list[RegistrySpace], list[RegistryDeck], list[RegistryUser]]:
        spaces = await source.list_spaces()
        decks = await source.list_decks()
        users = await source.list_users()
        return spaces, decks, users

    # ==================== Resolution ====================

    def resolve_space(self, value: str | None, aliases: AliasInput = None) -> str | None:
        """Resolve a space name or alias to its id."""
        if not value or not value.strip():
            return None
        snapshot = self._require_snapshot()

        name = AliasMap.coerce(aliases).lookup(value)
        space_id = snapshot.spaces.get(normalize_name(name))
        if space_id:
            logger.debug(f"Space {value!r} -> {name!r} -> {space_id}")
            return space_id

        logger.info(f"Space not found: {value!r}")
        return None

    def resolve_deck(
        self,
        value: str | None,
        aliases: AliasInput = None,
        space_aliases: AliasInput = None,
    ) -> str | None:
        """Resolve a deck name, alias or "Space/Deck" path to its id."""
        if not value or not value.strip():
            return None
        snapshot = self._require_snapshot()

        path = AliasMap.coerce(aliases).lookup(value)

        if PATH_SEPARATOR in path:
            space_part, deck_part = (part.strip() for part in path.split(PATH_SEPARATOR, 1))
            space_name = AliasMap.coerce(space_aliases).lookup(space_part)

            deck_id = snapshot.deck_paths.get(compound_key(space_name, deck_part))
            if deck_id:
                logger.debug(f"Deck {value!r} -> {space_name}/{deck_part} -> {deck_id}")
                return deck_id

            entry = snapshot.decks.get(normalize_name(deck_part))
            if entry:
                logger.debug(f"Deck {value!r} -> {deck_part!r} (name only) -> {entry.id}")
                return entry.id
        else:
            entry = snapshot.decks.get(normalize_name(path))
            if entry:
                logger.debug(f"Deck {value!r} -> {path!r} -> {entry.id}")
                return entry.id

        logger.info(f"Deck not found: {value!r}")
        return None

    def resolve_user(self, value: str | None, aliases: AliasInput = None) -> str | None:
        """Resolve a user name or alias to its id, with substring fallback."""
        if not value or not value.strip():
            return None
        snapshot = self._require_snapshot()

        name = AliasMap.coerce(aliases).lookup(value)
        normalized = normalize_name(name)

        user_id = snapshot.users.get(normalized)
        if user_id:
            logger.debug(f"User {value!r} -> {name!r} -> {user_id}")
            return user_id

        for cached_name, cached_id in snapshot.users.items():
            if normalized in cached_name or cached_name in normalized:
                logger.debug(f"User {value!r} fuzzy-matched {cached_name!r} -> {cached_id}")
                return cached_id

        logger.info(f"User not found: {value!r}")
        return None

    # ==================== Introspection ====================

    def stats(self) -> dict[str, Any]:
        """Counts per map and refresh status."""
        snapshot = self._snapshot
        if snapshot is None:
            return {
                "initialized": False,
                "last_refresh": None,
                "spaces": 0,
                "decks": 0,
                "deck_paths": 0,
                "users": 0,
            }
        return {
            "initialized": True,
            "last_refresh": snapshot.refreshed_at.isoformat(),
            "spaces": len(snapshot.spaces),
            "decks": len(snapshot.decks),
            "deck_paths": len(snapshot.deck_paths),
            "users": len(snapshot.users),
        }

    def list_spaces(self) -> list[dict[str, str]]:
        snapshot = self._require_snapshot()
        return [
            {"name": snapshot.space_names.get(space_id, ""), "id": space_id}
            for space_id in snapshot.spaces.values()
        ]

    def list_decks(self) -> list[dict[str, str | None]]:
        snapshot = self._require_snapshot()
        return [
            {
                "name": snapshot.deck_names.get(entry.id, ""),
                "id": entry.id,
                "space": entry.space_name,
            }
            for entry in snapshot.decks.values()
        ]

    def list_users(self) -> list[dict[str, str]]:
        snapshot = self._require_snapshot()
        seen: set[str] = set()
        result: list[dict[str, str]] = []
        for user_id in snapshot.users.values():
            if user_id in seen:
                continue
            seen.add(user_id)
            result.append({"name": snapshot.user_names.get(user_id, ""), "id": user_id})
        return result


# Global singleton instance
_default_cache: NameCache | None = None
_cache_lock = threading.Lock()


def get_name_cache() -> NameCache:
    """
    Get the process-wide name cache.

    Returns:
        The shared NameCache instance.
    """
    global _default_cache
    if _default_cache is None:
        with _cache_lock:
            if _default_cache is None:
                _default_cache = NameCache()
    return _default_cache
