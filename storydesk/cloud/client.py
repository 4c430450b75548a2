"""Hosted database client: PostgREST tables plus the Storage object API.

Every cloud store function goes through one shared SupabaseClient handle.
The handle holds no connection state: each call opens its own
httpx.AsyncClient, so there is no pooling, locking or transaction
discipline here. Whatever consistency exists comes from the service.

Filters are passed as a dict of column → value:

    {"story_id": "abc"}                     story_id=eq.abc
    {"chapter_id": ("in", ["a", "b"])}      chapter_id=in.(a,b)
    {"tags": ("ov", ["dark", "castle"])}    tags=ov.{dark,castle}
    {"connected_characters": ("cs", ["john"])}
                                            connected_characters=cs.{john}

Any transport or HTTP failure raises PersistenceError. Store functions
catch it, log it, and turn it into a None/False/[] return.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

logger = logging.getLogger(__name__)

Filters = dict[str, Any]

_RESERVED = set(',(){}"\\ ')


class SupabaseClient:
    """Async REST client for a Supabase project.

    Args:
        url:      Project URL, e.g. "https://xyz.supabase.co".
        key:      Service or anon key; sent as both apikey and bearer token.
        timeout:  HTTP timeout in seconds. Defaults to 30.
    """

    def __init__(self, url: str, key: str, timeout: float = 30.0) -> None:
        self._base_url = url.rstrip("/")
        self._key = key
        self._timeout = timeout

    def _headers(self, extra: dict[str, str] | None = None) -> dict[str, str]:
        headers = {
            "apikey": self._key,
            "Authorization": f"Bearer {self._key}",
        }
        if extra:
            headers.update(extra)
        return headers

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: list[tuple[str, str]] | None = None,
        json: Any = None,
        content: bytes | None = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        url = f"{self._base_url}{path}"
        logger.debug("supabase %s %s params=%s", method, url, params)
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                resp = await client.request(
                    method,
                    url,
                    params=params,
                    json=json,
                    content=content,
                    headers=self._headers(headers),
                )
                resp.raise_for_status()
        except httpx.ConnectError as e:
            raise PersistenceError(f"Cannot connect to database at {self._base_url}") from e
        except httpx.TimeoutException as e:
            raise PersistenceError(f"Database timed out after {self._timeout}s") from e
        except httpx.HTTPStatusError as e:
            raise PersistenceError(
                f"Database returned HTTP {e.response.status_code}: {e.response.text}"
            ) from e
        except httpx.HTTPError as e:
            raise PersistenceError(f"Database request failed: {e}") from e
        return resp

    # ------------------------------------------------------------------
    # Tables
    # ------------------------------------------------------------------

    async def select(
        self,
        table: str,
        *,
        filters: Filters | None = None,
        order: str | None = None,
        descending: bool = False,
        limit: int | None = None,
        columns: str = "*",
    ) -> list[dict[str, Any]]:
        params = [("select", columns)] + _filter_params(filters)
        if order:
            params.append(("order", f"{order}.{'desc' if descending else 'asc'}"))
        if limit is not None:
            params.append(("limit", str(limit)))
        resp = await self._request("GET", f"/rest/v1/{table}", params=params)
        return resp.json()

    async def insert(self, table: str, row: dict[str, Any]) -> dict[str, Any]:
        """Insert one row and return it as stored (ids, timestamps populated)."""
        resp = await self._request(
            "POST",
            f"/rest/v1/{table}",
            json=row,
            headers={"Prefer": "return=representation"},
        )
        rows = resp.json()
        if not rows:
            raise PersistenceError(f"Insert into {table} returned no row")
        return rows[0]

    async def update(
        self, table: str, values: dict[str, Any], *, filters: Filters
    ) -> list[dict[str, Any]]:
        """Update matching rows and return them as stored."""
        resp = await self._request(
            "PATCH",
            f"/rest/v1/{table}",
            params=_filter_params(filters),
            json=values,
            headers={"Prefer": "return=representation"},
        )
        return resp.json()

    async def delete(self, table: str, *, filters: Filters) -> list[dict[str, Any]]:
        """Delete matching rows and return what was removed."""
        resp = await self._request(
            "DELETE",
            f"/rest/v1/{table}",
            params=_filter_params(filters),
            headers={"Prefer": "return=representation"},
        )
        return resp.json()

    async def count(self, table: str, *, filters: Filters | None = None) -> int:
        resp = await self._request(
            "HEAD",
            f"/rest/v1/{table}",
            params=[("select", "*")] + _filter_params(filters),
            headers={"Prefer": "count=exact"},
        )
        return _parse_count(resp.headers.get("content-range", ""))

    # ------------------------------------------------------------------
    # Storage
    # ------------------------------------------------------------------

    async def upload(
        self, bucket: str, path: str, content: bytes, content_type: str
    ) -> str:
        """Store an object and return its path inside the bucket."""
        await self._request(
            "POST",
            f"/storage/v1/object/{bucket}/{path}",
            content=content,
            headers={"Content-Type": content_type, "x-upsert": "false"},
        )
        return path

    async def remove(self, bucket: str, paths: list[str]) -> None:
        await self._request(
            "DELETE",
            f"/storage/v1/object/{bucket}",
            json={"prefixes": paths},
        )

    def public_url(self, bucket: str, path: str) -> str:
        return f"{self._base_url}/storage/v1/object/public/{bucket}/{path}"


# ---------------------------------------------------------------------------
# Query string encoding
# ---------------------------------------------------------------------------

def _quote(value: Any) -> str:
    text = str(value)
    if any(ch in _RESERVED for ch in text):
        escaped = text.replace("\\", "\\\\").replace('"', '\\"')
        return f'"{escaped}"'
    return text


def _encode_filter(value: Any) -> str:
    if isinstance(value, tuple):
        op, operand = value
        items = ",".join(_quote(v) for v in operand)
        if op == "in":
            return f"in.({items})"
        if op in ("cs", "ov"):
            return f"{op}.{{{items}}}"
        raise ValueError(f"Unsupported filter operator: {op!r}")
    if value is None:
        return "is.null"
    if isinstance(value, bool):
        return f"eq.{str(value).lower()}"
    return f"eq.{value}"


def _filter_params(filters: Filters | None) -> list[tuple[str, str]]:
    if not filters:
        return []
    return [(column, _encode_filter(value)) for column, value in filters.items()]


def _parse_count(content_range: str) -> int:
    """Total from a Content-Range header: "0-24/25" → 25, "*/0" → 0."""
    _, _, total = content_range.partition("/")
    if not total or total == "*":
        return 0
    return int(total)


# ---------------------------------------------------------------------------
# PersistenceError: raised for all connection and protocol failures
# ---------------------------------------------------------------------------

class PersistenceError(RuntimeError):
    """Raised when the database or object store rejects or drops a request."""
