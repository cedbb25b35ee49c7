"""Pytest configuration and shared fixtures for cardbridge tests."""

import pytest

from cardbridge.registry.base import RegistryDeck, RegistrySpace, RegistryUser
from cardbridge.registry.cache import NameCache
from cardbridge.registry.normalize import NameAliases


@pytest.fixture
def sample_spaces() -> list[RegistrySpace]:
    """Spaces as returned by the registry."""
    return [
        RegistrySpace(id="space-ma-txa", name="MA TXA"),
        RegistrySpace(id="space-art", name="Art Team"),
    ]


@pytest.fixture
def sample_decks() -> list[RegistryDeck]:
    """Decks, including a deck name shared by two spaces."""
    return [
        RegistryDeck(id="deck-backlog-mt", name="Backlog", space_id="space-ma-txa"),
        RegistryDeck(id="deck-backlog-art", name="Backlog", space_id="space-art"),
        RegistryDeck(id="deck-art", name="Art", space_id="space-art"),
        RegistryDeck(
            id="deck-bugs",
            name="Bugs",
            space_id="space-ma-txa",
            space_name="MA TXA",
        ),
    ]


@pytest.fixture
def sample_users() -> list[RegistryUser]:
    """Users in registry order."""
    return [
        RegistryUser(id="user-tobiasz", name="Tobiasz Nowak", username="tnowak"),
        RegistryUser(id="user-anna", name="Anna", username="anna.k"),
        RegistryUser(id="user-lukasz", name="Łukasz"),
    ]


@pytest.fixture
def loaded_cache(sample_spaces, sample_decks, sample_users) -> NameCache:
    """A NameCache loaded with the sample registry records."""
    cache = NameCache()
    cache.load(sample_spaces, sample_decks, sample_users)
    return cache


@pytest.fixture
def aliases() -> NameAliases:
    """Operator aliases used in chat."""
    return NameAliases(
        spaces={"MT": "MA TXA"},
        decks={"BL": "MT/Backlog"},
        users={"Tobi": "Tobiasz Nowak"},
    )
