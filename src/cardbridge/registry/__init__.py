"""Name registry: normalization, alias tables, the name cache and its sources."""

from cardbridge.registry.base import RegistryDeck, RegistrySource, RegistrySpace, RegistryUser
from cardbridge.registry.cache import CacheSnapshot, DeckEntry, NameCache, get_name_cache
from cardbridge.registry.errors import (
    CacheNotReadyError,
    RegistryAPIError,
    RegistryConnectionError,
    RegistryError,
)
from cardbridge.registry.normalize import AliasMap, NameAliases, normalize_name

__all__ = [
    "AliasMap",
    "CacheNotReadyError",
    "CacheSnapshot",
    "DeckEntry",
    "NameAliases",
    "NameCache",
    "RegistryAPIError",
    "RegistryConnectionError",
    "RegistryDeck",
    "RegistryError",
    "RegistrySource",
    "RegistrySpace",
    "RegistryUser",
    "get_name_cache",
    "normalize_name",
]
