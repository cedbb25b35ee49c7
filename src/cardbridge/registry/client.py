"""Async Codecks registry client.

Fetches spaces (projects), decks and users from the Codecks query API using
httpx. Only reads; card creation is handled elsewhere.

Query responses are normalized relation maps keyed by the singular relation
name, for example:

    {"_root": {...}, "deck": {"<id>": {"id": "<id>", "title": "Backlog", ...}}}
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from cardbridge.registry.base import (
    RegistryDeck,
    RegistrySource,
    RegistrySpace,
    RegistryUser,
)
from cardbridge.registry.errors import (
    RegistryAPIError,
    RegistryConnectionError,
    RegistryError,
)

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.codecks.io"

SPACES_QUERY = {"_root": [{"account": [{"projects": ["id", "name"]}]}]}
DECKS_QUERY = {"_root": [{"account": [{"decks": ["id", "title", "projectId"]}]}]}
USERS_QUERY = {"_root": [{"account": [{"roles": ["userId", {"user": ["id", "name", "fullName"]}]}]}]}


def _relation_records(payload: Any, relation: str, plural: str) -> list[dict[str, Any]]:
    """Pull the records of one relation out of a query response.

    Accepts the normalized form (`{"deck": {id: record}}`) and the nested
    form (`{"_root": {"account": {"decks": [record, ...]}}}`).
    """
    if not isinstance(payload, dict):
        return []

    value = payload.get(relation)
    if value is None:
        root = payload.get("_root")
        account = root.get("account") if isinstance(root, dict) else None
        value = account.get(plural) if isinstance(account, dict) else None

    if isinstance(value, dict):
        records = []
        for key, record in value.items():
            if isinstance(record, dict):
                records.append({"id": key, **record})
        return records
    if isinstance(value, list):
        return [record for record in value if isinstance(record, dict)]
    return []


def _deck_from_record(record: dict[str, Any]) -> RegistryDeck | None:
    deck_id = record.get("id")
    name = record.get("title") or record.get("name")
    if not deck_id or not name:
        return None

    space_id = record.get("projectId") or record.get("project_id")
    space_name = None
    project = record.get("project")
    if isinstance(project, dict):
        space_id = project.get("id") or space_id
        space_name = project.get("name") or project.get("title")
    elif isinstance(project, str):
        space_id = project

    return RegistryDeck(id=str(deck_id), name=str(name), space_id=space_id, space_name=space_name)


def _user_from_record(record: dict[str, Any]) -> RegistryUser | None:
    user_id = record.get("id")
    username = record.get("name") or record.get("username")
    display = record.get("nickname") or record.get("fullName") or username
    if not user_id or not display:
        return None
    return RegistryUser(id=str(user_id), name=str(display), username=username)


class CodecksRegistryClient(RegistrySource):
    """Async HTTP client for the Codecks query API.

    Args:
        account: Account subdomain (sent as X-Account)
        token: Session token (sent as X-Auth-Token)
        base_url: API base URL (default: https://api.codecks.io)
        timeout: Request timeout in seconds (default: 10.0)
    """

    def __init__(
        self,
        account: str,
        token: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 10.0,
    ):
        if not account:
            raise ValueError("Codecks account is required")
        if not token:
            raise ValueError("Codecks token is required")

        self._base_url = base_url.rstrip("/")
        self._account = account
        self._timeout = timeout

        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            headers={
                "X-Auth-Token": token,
                "X-Account": account,
                "Content-Type": "application/json",
            },
            timeout=timeout,
        )

    async def __aenter__(self) -> CodecksRegistryClient:
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    async def query(self, query: dict[str, Any]) -> dict[str, Any]:
        """Run a read query.

        Args:
            query: Query object (the value of the "query" body field)

        Returns:
            Parsed JSON response

        Raises:
            RegistryConnectionError: On connection or timeout errors
            RegistryAPIError: On HTTP 4xx/5xx responses
            RegistryError: On a response that is not a JSON object
        """
        try:
            response = await self._client.request("POST", "/", json={"query": query})
        except (httpx.ConnectError, httpx.ConnectTimeout) as e:
            raise RegistryConnectionError(f"Connection refused: {e}") from e
        except httpx.TimeoutException as e:
            raise RegistryConnectionError(f"Request timed out: {e}") from e
        except httpx.RequestError as e:
            raise RegistryConnectionError(f"Request failed: {e}") from e

        if not response.is_success:
            try:
                body = response.json()
            except Exception:
                body = response.text
            raise RegistryAPIError(
                f"Codecks API error: HTTP {response.status_code}",
                status_code=response.status_code,
                response_body=body,
            )

        try:
            result = response.json()
        except ValueError as e:
            raise RegistryError(f"Codecks API returned invalid JSON: {e}") from e
        if not isinstance(result, dict):
            raise RegistryError("Codecks API returned an unexpected payload")
        return result

    async def list_spaces(self) -> list[RegistrySpace]:
        payload = await self.query(SPACES_QUERY)
        spaces = []
        for record in _relation_records(payload, "project", "projects"):
            name = record.get("name") or record.get("title")
            if record.get("id") and name:
                spaces.append(RegistrySpace(id=str(record["id"]), name=str(name)))
        self._warn_if_empty(spaces, "space")
        return spaces

    async def list_decks(self) -> list[RegistryDeck]:
        payload = await self.query(DECKS_QUERY)
        decks = [
            deck
            for deck in map(_deck_from_record, _relation_records(payload, "deck", "decks"))
            if deck is not None
        ]
        self._warn_if_empty(decks, "deck")
        return decks

    async def list_users(self) -> list[RegistryUser]:
        payload = await self.query(USERS_QUERY)
        users = [
            user
            for user in map(_user_from_record, _relation_records(payload, "user", "users"))
            if user is not None
        ]
        self._warn_if_empty(users, "user")
        return users

    def _warn_if_empty(self, records: list[Any], kind: str) -> None:
        # The API answers an expired token with empty data rather than a 401
        if not records:
            logger.warning(
                f"Codecks returned no {kind} records for account {self._account!r}; "
                "the token may have expired"
            )
