"""Registry and name cache errors."""

from __future__ import annotations

from typing import Any


class RegistryError(Exception):
    """Raised when registry data cannot be fetched."""


class RegistryConnectionError(RegistryError):
    """Raised when unable to connect to the registry API."""


class RegistryAPIError(RegistryError):
    """Raised when the registry API returns an error response (4xx/5xx)."""

    def __init__(self, message: str, status_code: int, response_body: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.response_body = response_body


class CacheNotReadyError(Exception):
    """Raised when a name is resolved before the cache was ever loaded."""
