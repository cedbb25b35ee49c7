"""Base classes for name registry sources.

This module defines the abstract base class for registry sources and the
records a source returns. The name cache is rebuilt from one complete set
of these records on every refresh.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class RegistrySpace:
    """A space (project) in the tracker."""

    id: str
    name: str

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name}


@dataclass(frozen=True)
class RegistryDeck:
    """A deck and the space it belongs to.

    Attributes:
        id: Deck id
        name: Deck display name
        space_id: Id of the owning space, if known
        space_name: Display name of the owning space, if the source knows it
    """

    id: str
    name: str
    space_id: str | None = None
    space_name: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "space_id": self.space_id,
            "space_name": self.space_name,
        }


@dataclass(frozen=True)
class RegistryUser:
    """A tracker user.

    Attributes:
        id: User id
        name: Display name (nickname or full name)
        username: Login name, registered as a second key when it differs
    """

    id: str
    name: str
    username: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "username": self.username}


class RegistrySource(ABC):
    """Abstract source of space, deck and user records.

    Subclasses fetch the complete current list for each entity kind. Any
    failure must raise RegistryError so the cache can keep its previous
    snapshot.
    """

    @abstractmethod
    async def list_spaces(self) -> list[RegistrySpace]:
        """Fetch all spaces."""

    @abstractmethod
    async def list_decks(self) -> list[RegistryDeck]:
        """Fetch all decks with their owning space."""

    @abstractmethod
    async def list_users(self) -> list[RegistryUser]:
        """Fetch all users."""
