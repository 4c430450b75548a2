"""Identity provider client: the backend API behind sign-in.

Only what the data layer and the admin routes need: resolve a session to
its user, list users, read a user's public metadata, and write it back.

    GET   /sessions/{id}            {"user_id": ..., "status": "active"}
    GET   /users?limit=&offset=     one page of user records
    GET   /users/{id}               user record with public_metadata
    PATCH /users/{id}/metadata      {"public_metadata": {...}} (merged)

A 404 means "no such session/user" and yields None. Every other failure
raises IdentityError.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from storydesk.models import AuthUser

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.clerk.com/v1"


def user_from_payload(data: dict[str, Any]) -> AuthUser:
    """Build an AuthUser from an API or webhook user record."""
    emails = data.get("email_addresses") or []
    metadata = data.get("public_metadata")
    return AuthUser(
        id=data["id"],
        email=emails[0].get("email_address", "") if emails else "",
        first_name=data.get("first_name"),
        last_name=data.get("last_name"),
        image_url=data.get("image_url"),
        public_metadata=metadata if isinstance(metadata, dict) else {},
    )


class IdentityClient:
    """Async HTTP client for the identity provider's backend API.

    Args:
        secret_key: Backend secret, sent as a bearer token.
        api_url:    Base URL of the API. Defaults to the hosted service.
        timeout:    HTTP timeout in seconds. Defaults to 10.
    """

    def __init__(
        self, secret_key: str, api_url: str = DEFAULT_API_URL, timeout: float = 10.0
    ) -> None:
        self._base_url = api_url.rstrip("/")
        self._secret_key = secret_key
        self._timeout = timeout

    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self._secret_key}"}

    async def _request(
        self, method: str, path: str, json: Any = None, params: dict[str, Any] | None = None
    ) -> Any:
        url = f"{self._base_url}{path}"
        logger.debug("identity %s %s", method, url)
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                resp = await client.request(
                    method, url, json=json, params=params, headers=self._headers()
                )
                if resp.status_code == 404:
                    return None
                resp.raise_for_status()
        except httpx.ConnectError as e:
            raise IdentityError(f"Cannot connect to identity provider at {self._base_url}") from e
        except httpx.TimeoutException as e:
            raise IdentityError(f"Identity provider timed out after {self._timeout}s") from e
        except httpx.HTTPStatusError as e:
            raise IdentityError(
                f"Identity provider returned HTTP {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            raise IdentityError(f"Identity provider request failed: {e}") from e
        try:
            return resp.json()
        except ValueError as e:
            raise IdentityError("Identity provider returned a non-JSON body") from e

    async def get_session_user_id(self, session_id: str) -> str | None:
        """User id of an active session, or None if unknown or ended."""
        data = await self._request("GET", f"/sessions/{session_id}")
        if not data or data.get("status") != "active":
            return None
        return data.get("user_id")

    async def get_user(self, user_id: str) -> AuthUser | None:
        data = await self._request("GET", f"/users/{user_id}")
        return user_from_payload(data) if data else None

    async def list_users(self, limit: int = 100, offset: int = 0) -> list[AuthUser]:
        data = await self._request("GET", "/users", params={"limit": limit, "offset": offset})
        return [user_from_payload(u) for u in data or []]

    async def update_user_metadata(
        self, user_id: str, public_metadata: dict[str, Any]
    ) -> AuthUser | None:
        data = await self._request(
            "PATCH",
            f"/users/{user_id}/metadata",
            json={"public_metadata": public_metadata},
        )
        return user_from_payload(data) if data else None


class IdentityError(RuntimeError):
    """Raised when the identity provider cannot be reached or returns an error."""
