"""Tests for storydesk.identity: IdentityClient against a mocked backend API."""

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from storydesk.identity import IdentityClient, IdentityError, user_from_payload


def _mock_response(body: dict | None, status: int = 200) -> MagicMock:
    resp = MagicMock()
    resp.status_code = status
    resp.json.return_value = body
    resp.raise_for_status = MagicMock(
        side_effect=None if status < 400 else httpx.HTTPStatusError(
            "", request=MagicMock(), response=resp
        )
    )
    return resp


@pytest.fixture
def client() -> IdentityClient:
    return IdentityClient("sk_test", api_url="https://idp.test/v1/")


def test_user_from_payload():
    user = user_from_payload({
        "id": "user_1",
        "email_addresses": [{"email_address": "a@x.com"}, {"email_address": "b@x.com"}],
        "first_name": "Ada",
        "public_metadata": {"subscription": "pro"},
    })
    assert user.email == "a@x.com"
    assert user.first_name == "Ada"
    assert user.last_name is None
    assert user.public_metadata == {"subscription": "pro"}


def test_user_from_payload_without_email_or_metadata():
    user = user_from_payload({"id": "user_1", "public_metadata": None})
    assert user.email == ""
    assert user.public_metadata == {}


async def test_active_session_resolves_user(client: IdentityClient) -> None:
    mock = AsyncMock(return_value=_mock_response({"user_id": "user_1", "status": "active"}))
    with patch("httpx.AsyncClient.request", mock):
        assert await client.get_session_user_id("sess_1") == "user_1"
    method, url = mock.call_args[0]
    assert method == "GET"
    assert url == "https://idp.test/v1/sessions/sess_1"
    assert mock.call_args.kwargs["headers"]["Authorization"] == "Bearer sk_test"


async def test_ended_session_is_anonymous(client: IdentityClient) -> None:
    mock = AsyncMock(return_value=_mock_response({"user_id": "user_1", "status": "ended"}))
    with patch("httpx.AsyncClient.request", mock):
        assert await client.get_session_user_id("sess_1") is None


async def test_unknown_user_is_none(client: IdentityClient) -> None:
    mock = AsyncMock(return_value=_mock_response(None, status=404))
    with patch("httpx.AsyncClient.request", mock):
        assert await client.get_user("nobody") is None


async def test_update_metadata_sends_patch(client: IdentityClient) -> None:
    body = {"id": "user_1", "public_metadata": {"subscription": "pro"}}
    mock = AsyncMock(return_value=_mock_response(body))
    with patch("httpx.AsyncClient.request", mock):
        user = await client.update_user_metadata("user_1", {"subscription": "pro"})
    assert user.public_metadata == {"subscription": "pro"}
    assert mock.call_args[0][0] == "PATCH"
    assert mock.call_args[0][1] == "https://idp.test/v1/users/user_1/metadata"
    assert mock.call_args.kwargs["json"] == {"public_metadata": {"subscription": "pro"}}


async def test_server_error_raises(client: IdentityClient) -> None:
    mock = AsyncMock(return_value=_mock_response({}, status=500))
    with patch("httpx.AsyncClient.request", mock):
        with pytest.raises(IdentityError, match="HTTP 500"):
            await client.get_user("user_1")


async def test_connect_error_raises(client: IdentityClient) -> None:
    mock = AsyncMock(side_effect=httpx.ConnectError("refused"))
    with patch("httpx.AsyncClient.request", mock):
        with pytest.raises(IdentityError, match="Cannot connect"):
            await client.get_user("user_1")


async def test_list_users_sends_paging(client: IdentityClient) -> None:
    body = [{"id": "user_1"}, {"id": "user_2", "public_metadata": {"subscription": "pro"}}]
    mock = AsyncMock(return_value=_mock_response(body))
    with patch("httpx.AsyncClient.request", mock):
        users = await client.list_users(limit=2, offset=4)
    assert [u.id for u in users] == ["user_1", "user_2"]
    assert users[1].public_metadata == {"subscription": "pro"}
    assert mock.call_args[0][1] == "https://idp.test/v1/users"
    assert mock.call_args.kwargs["params"] == {"limit": 2, "offset": 4}


async def test_other_transport_error_raises(client: IdentityClient) -> None:
    mock = AsyncMock(side_effect=httpx.RemoteProtocolError("connection dropped"))
    with patch("httpx.AsyncClient.request", mock):
        with pytest.raises(IdentityError, match="request failed"):
            await client.get_user("user_1")


async def test_non_json_body_raises(client: IdentityClient) -> None:
    resp = _mock_response(None)
    resp.json.side_effect = ValueError("Expecting value")
    mock = AsyncMock(return_value=resp)
    with patch("httpx.AsyncClient.request", mock):
        with pytest.raises(IdentityError, match="non-JSON"):
            await client.get_user("user_1")
