"""Tests for the async Codecks registry client."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from cardbridge.registry.client import (
    DECKS_QUERY,
    SPACES_QUERY,
    CodecksRegistryClient,
)
from cardbridge.registry.errors import (
    RegistryAPIError,
    RegistryConnectionError,
    RegistryError,
)

pytestmark = pytest.mark.unit


def _mock_response(status_code: int = 200, json_data: dict | list | None = None) -> MagicMock:
    """Create a mock httpx.Response."""
    resp = MagicMock(spec=httpx.Response)
    resp.status_code = status_code
    resp.json.return_value = json_data if json_data is not None else {}
    resp.is_success = 200 <= status_code < 300
    resp.text = str(json_data)
    return resp


@pytest.fixture
def client() -> CodecksRegistryClient:
    return CodecksRegistryClient(account="studio", token="secret")


# =============================================================================
# Initialization
# =============================================================================


class TestClientInit:
    """Test CodecksRegistryClient initialization."""

    def test_init_with_defaults(self, client) -> None:
        """Client uses the public API URL and a 10s timeout."""
        assert client._base_url == "https://api.codecks.io"
        assert client._account == "studio"
        assert client._timeout == 10.0

    def test_auth_headers(self, client) -> None:
        """Token and account are sent on every request."""
        assert client._client.headers["X-Auth-Token"] == "secret"
        assert client._client.headers["X-Account"] == "studio"

    def test_custom_base_url_is_normalized(self) -> None:
        client = CodecksRegistryClient(
            account="studio", token="secret", base_url="http://localhost:9000/", timeout=3.0
        )
        assert client._base_url == "http://localhost:9000"
        assert client._timeout == 3.0

    @pytest.mark.parametrize("account,token", [("", "secret"), ("studio", "")])
    def test_missing_credentials(self, account, token) -> None:
        with pytest.raises(ValueError):
            CodecksRegistryClient(account=account, token=token)


class TestClientClose:
    """Test closing the client."""

    @pytest.mark.asyncio
    async def test_close(self, client) -> None:
        """close() should close the underlying httpx client."""
        client._client.aclose = AsyncMock()

        await client.close()

        client._client.aclose.assert_called_once()

    @pytest.mark.asyncio
    async def test_context_manager_closes(self, client) -> None:
        client._client.aclose = AsyncMock()

        async with client as entered:
            assert entered is client

        client._client.aclose.assert_called_once()


# =============================================================================
# Query
# =============================================================================


class TestQuery:
    """Test the raw query call and its error mapping."""

    @pytest.mark.asyncio
    async def test_query_posts_query_body(self, client) -> None:
        client._client.request = AsyncMock(return_value=_mock_response(200, {"_root": {}}))

        result = await client.query(SPACES_QUERY)

        args, kwargs = client._client.request.call_args
        assert args == ("POST", "/")
        assert kwargs["json"] == {"query": SPACES_QUERY}
        assert result == {"_root": {}}

    @pytest.mark.asyncio
    async def test_connect_error(self, client) -> None:
        client._client.request = AsyncMock(side_effect=httpx.ConnectError("refused"))

        with pytest.raises(RegistryConnectionError, match="Connection refused"):
            await client.query(SPACES_QUERY)

    @pytest.mark.asyncio
    async def test_timeout(self, client) -> None:
        client._client.request = AsyncMock(side_effect=httpx.ReadTimeout("slow"))

        with pytest.raises(RegistryConnectionError, match="timed out"):
            await client.query(SPACES_QUERY)

    @pytest.mark.asyncio
    async def test_api_error(self, client) -> None:
        client._client.request = AsyncMock(
            return_value=_mock_response(401, {"message": "invalid token"})
        )

        with pytest.raises(RegistryAPIError) as exc_info:
            await client.query(SPACES_QUERY)

        assert exc_info.value.status_code == 401
        assert exc_info.value.response_body == {"message": "invalid token"}

    @pytest.mark.asyncio
    async def test_invalid_json(self, client) -> None:
        resp = _mock_response(200)
        resp.json.side_effect = ValueError("not json")
        client._client.request = AsyncMock(return_value=resp)

        with pytest.raises(RegistryError, match="invalid JSON"):
            await client.query(SPACES_QUERY)

    @pytest.mark.asyncio
    async def test_non_object_payload(self, client) -> None:
        client._client.request = AsyncMock(return_value=_mock_response(200, [1, 2]))

        with pytest.raises(RegistryError, match="unexpected payload"):
            await client.query(SPACES_QUERY)


# =============================================================================
# Listing
# =============================================================================


class TestListSpaces:
    """Test fetching spaces."""

    @pytest.mark.asyncio
    async def test_normalized_relation_map(self, client) -> None:
        payload = {
            "_root": {"account": "acc-1"},
            "project": {
                "p1": {"name": "MA TXA"},
                "p2": {"name": "Art Team"},
                "p3": {},
            },
        }
        client._client.request = AsyncMock(return_value=_mock_response(200, payload))

        spaces = await client.list_spaces()

        assert [(s.id, s.name) for s in spaces] == [("p1", "MA TXA"), ("p2", "Art Team")]

    @pytest.mark.asyncio
    async def test_empty_result_logs_warning(self, client, caplog) -> None:
        client._client.request = AsyncMock(return_value=_mock_response(200, {"_root": {}}))

        spaces = await client.list_spaces()

        assert spaces == []
        assert "token may have expired" in caplog.text


class TestListDecks:
    """Test fetching decks."""

    @pytest.mark.asyncio
    async def test_decks_with_project_ids(self, client) -> None:
        payload = {
            "deck": {
                "d1": {"title": "Backlog", "projectId": "p1"},
                "d2": {"title": "Art", "project": {"id": "p2", "name": "Art Team"}},
                "d3": {"projectId": "p1"},
            }
        }
        client._client.request = AsyncMock(return_value=_mock_response(200, payload))

        decks = await client.list_decks()

        assert [(d.id, d.name, d.space_id, d.space_name) for d in decks] == [
            ("d1", "Backlog", "p1", None),
            ("d2", "Art", "p2", "Art Team"),
        ]
        assert client._client.request.call_args.kwargs["json"] == {"query": DECKS_QUERY}

    @pytest.mark.asyncio
    async def test_nested_account_form(self, client) -> None:
        payload = {
            "_root": {
                "account": {
                    "decks": [{"id": "d1", "title": "Bugs", "project": "p1"}, "junk"],
                }
            }
        }
        client._client.request = AsyncMock(return_value=_mock_response(200, payload))

        decks = await client.list_decks()

        assert [(d.id, d.name, d.space_id) for d in decks] == [("d1", "Bugs", "p1")]


class TestListUsers:
    """Test fetching users."""

    @pytest.mark.asyncio
    async def test_users(self, client) -> None:
        payload = {
            "user": {
                "u1": {"name": "tnowak", "fullName": "Tobiasz Nowak"},
                "u2": {"name": "anna"},
                "u3": {},
            }
        }
        client._client.request = AsyncMock(return_value=_mock_response(200, payload))

        users = await client.list_users()

        assert [(u.id, u.name, u.username) for u in users] == [
            ("u1", "Tobiasz Nowak", "tnowak"),
            ("u2", "anna", "anna"),
        ]
