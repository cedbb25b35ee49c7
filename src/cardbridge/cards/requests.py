"""
Card request assembly.

Turns parsed tasks into CardRequests for the card-creation client: the card
body plus a Resolution for the deck and one for the assignee. A Resolution
always says why an id is missing (not requested, not found, cache not
loaded) so the caller can choose a fallback per task. Tasks are never
dropped because a name did not resolve.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from enum import Enum
from typing import Any

from cardbridge.cards.formatter import format_card_body
from cardbridge.parsing.models import ParsedTask
from cardbridge.registry.cache import NameCache
from cardbridge.registry.errors import CacheNotReadyError
from cardbridge.registry.normalize import NameAliases

logger = logging.getLogger(__name__)


class ResolutionStatus(str, Enum):
    """Outcome of resolving one name."""

    RESOLVED = "resolved"
    NOT_FOUND = "not_found"
    CACHE_UNAVAILABLE = "cache_unavailable"
    NOT_REQUESTED = "not_requested"


@dataclass(frozen=True)
class Resolution:
    """Result of resolving a deck or assignee name.

    Attributes:
        status: Outcome
        id: Resolved id when status is RESOLVED
        query: The raw name that was looked up
        from_default: True if the name came from configuration, not the message
    """

    status: ResolutionStatus
    id: str | None = None
    query: str | None = None
    from_default: bool = False

    @property
    def resolved(self) -> bool:
        return self.status == ResolutionStatus.RESOLVED

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status.value,
            "id": self.id,
            "query": self.query,
            "from_default": self.from_default,
        }


@dataclass(frozen=True)
class CardRequest:
    """Everything needed to create one card."""

    title: str
    body: str
    deck: Resolution
    assignee: Resolution
    priority: str = "b"

    @property
    def put_on_hand(self) -> bool:
        """Cards go on the assignee's hand only when the assignee resolved."""
        return self.assignee.resolved

    @property
    def unresolved(self) -> list[str]:
        """Names of the fields that were requested but did not resolve."""
        fields = []
        if self.deck.status not in (ResolutionStatus.RESOLVED, ResolutionStatus.NOT_REQUESTED):
            fields.append("deck")
        if self.assignee.status not in (ResolutionStatus.RESOLVED, ResolutionStatus.NOT_REQUESTED):
            fields.append("assignee")
        return fields

    def to_payload(self) -> dict[str, Any]:
        """Card creation payload (ids are None when unresolved)."""
        return {
            "content": self.body,
            "deckId": self.deck.id,
            "assigneeId": self.assignee.id,
            "priority": self.priority,
            "putOnHand": self.put_on_hand,
        }

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "body": self.body,
            "deck": self.deck.to_dict(),
            "assignee": self.assignee.to_dict(),
            "priority": self.priority,
            "put_on_hand": self.put_on_hand,
        }


def _resolve(
    query: str | None,
    resolver: Callable[[str], str | None],
    from_default: bool = False,
) -> Resolution:
    if not query:
        return Resolution(status=ResolutionStatus.NOT_REQUESTED)
    try:
        resolved_id = resolver(query)
    except CacheNotReadyError:
        return Resolution(
            status=ResolutionStatus.CACHE_UNAVAILABLE, query=query, from_default=from_default
        )
    if resolved_id is None:
        return Resolution(status=ResolutionStatus.NOT_FOUND, query=query, from_default=from_default)
    return Resolution(
        status=ResolutionStatus.RESOLVED, id=resolved_id, query=query, from_default=from_default
    )


def build_card_request(
    task: ParsedTask,
    cache: NameCache,
    aliases: NameAliases | None = None,
    default_deck: str | None = None,
    default_priority: str = "b",
) -> CardRequest:
    """Build the card request for one task.

    Args:
        task: Parsed task
        cache: Name cache used for deck and assignee lookup
        aliases: Operator alias tables
        default_deck: Deck name used only when the task names no deck
        default_priority: Card priority (a, b or c)
    """
    aliases = aliases or NameAliases()

    deck_query = task.deck_path or default_deck
    deck = _resolve(
        deck_query,
        lambda name: cache.resolve_deck(name, aliases.decks, aliases.spaces),
        from_default=not task.deck_path and bool(default_deck),
    )
    assignee = _resolve(
        task.assignee_name,
        lambda name: cache.resolve_user(name, aliases.users),
    )

    return CardRequest(
        title=task.title,
        body=format_card_body(task),
        deck=deck,
        assignee=assignee,
        priority=default_priority,
    )


def build_card_requests(
    tasks: Iterable[ParsedTask],
    cache: NameCache,
    aliases: NameAliases | None = None,
    default_deck: str | None = None,
    default_priority: str = "b",
) -> list[CardRequest]:
    """Build card requests for tasks, in order."""
    aliases = aliases or NameAliases()
    requests = [
        build_card_request(task, cache, aliases, default_deck, default_priority) for task in tasks
    ]

    unresolved = [request for request in requests if request.unresolved]
    if unresolved:
        logger.info(
            f"{len(unresolved)} of {len(requests)} card request(s) have unresolved names: "
            + ", ".join(f"{r.title!r} ({'/'.join(r.unresolved)})" for r in unresolved)
        )
    return requests
