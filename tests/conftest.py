"""In-memory stand-ins for the hosted database and the identity provider."""

import uuid
from datetime import datetime, timedelta, timezone
from typing import Any

import pytest

from storydesk import cloud
from storydesk.cloud import PersistenceError
from storydesk.identity import IdentityError, user_from_payload
from storydesk.models import AuthUser


def _matches(row: dict[str, Any], filters: dict[str, Any] | None) -> bool:
    for column, value in (filters or {}).items():
        actual = row.get(column)
        if isinstance(value, tuple):
            op, operand = value
            if op == "in" and actual not in operand:
                return False
            if op == "cs" and not set(operand) <= set(actual or []):
                return False
            if op == "ov" and not set(operand) & set(actual or []):
                return False
        elif value is None:
            if actual is not None:
                return False
        elif actual != value:
            return False
    return True


class FakeSupabase:
    """Same interface as SupabaseClient, backed by dicts.

    `fail` holds operations that should raise PersistenceError, written as
    "insert:story_images", "update:scenes", "upload", "remove" and so on.
    """

    def __init__(self) -> None:
        self.tables: dict[str, list[dict[str, Any]]] = {}
        self.objects: dict[tuple[str, str], tuple[bytes, str]] = {}
        self.fail: set[str] = set()
        self.calls: list[tuple[str, str]] = []
        self._base = datetime(2024, 1, 1, tzinfo=timezone.utc)
        self._tick = 0

    def _stamp(self) -> str:
        self._tick += 1
        return (self._base + timedelta(seconds=self._tick)).isoformat()

    def _check(self, op: str, target: str = "") -> None:
        self.calls.append((op, target))
        if op in self.fail or f"{op}:{target}" in self.fail:
            raise PersistenceError(f"{op} {target} failed")

    def rows(self, table: str) -> list[dict[str, Any]]:
        return self.tables.setdefault(table, [])

    async def select(
        self,
        table: str,
        *,
        filters=None,
        order=None,
        descending=False,
        limit=None,
        columns="*",
    ) -> list[dict[str, Any]]:
        self._check("select", table)
        found = [dict(r) for r in self.rows(table) if _matches(r, filters)]
        if order:
            found.sort(
                key=lambda r: (r.get(order) is None, r[order] if r.get(order) is not None else 0),
                reverse=descending,
            )
        if limit is not None:
            found = found[:limit]
        if columns != "*":
            wanted = [c.strip() for c in columns.split(",")]
            found = [{c: r.get(c) for c in wanted} for r in found]
        return found

    async def insert(self, table: str, row: dict[str, Any]) -> dict[str, Any]:
        self._check("insert", table)
        stamp = self._stamp()
        stored = {"id": str(uuid.uuid4()), "created_at": stamp, "updated_at": stamp, **row}
        self.rows(table).append(stored)
        return dict(stored)

    async def update(self, table: str, values: dict[str, Any], *, filters) -> list[dict[str, Any]]:
        self._check("update", table)
        changed = []
        for row in self.rows(table):
            if _matches(row, filters):
                row.update(values)
                if "updated_at" not in values:
                    row["updated_at"] = self._stamp()
                changed.append(dict(row))
        return changed

    async def delete(self, table: str, *, filters) -> list[dict[str, Any]]:
        self._check("delete", table)
        removed = [r for r in self.rows(table) if _matches(r, filters)]
        self.tables[table] = [r for r in self.rows(table) if not _matches(r, filters)]
        return removed

    async def count(self, table: str, *, filters=None) -> int:
        self._check("count", table)
        return sum(1 for r in self.rows(table) if _matches(r, filters))

    async def upload(self, bucket: str, path: str, content: bytes, content_type: str) -> str:
        self._check("upload", bucket)
        self.objects[(bucket, path)] = (content, content_type)
        return path

    async def remove(self, bucket: str, paths: list[str]) -> None:
        self._check("remove", bucket)
        for path in paths:
            self.objects.pop((bucket, path), None)

    def public_url(self, bucket: str, path: str) -> str:
        return f"https://db.test/storage/v1/object/public/{bucket}/{path}"


class FakeIdentity:
    """Same interface as IdentityClient: sessions map to users by id.

    Metadata updates for the user ids in `fail` raise IdentityError.
    """

    def __init__(self) -> None:
        self.sessions: dict[str, str] = {}
        self.users: dict[str, AuthUser] = {}
        self.fail: set[str] = set()

    def add_user(self, user_id: str, session_id: str | None = None, **metadata) -> AuthUser:
        user = AuthUser(id=user_id, email=f"{user_id}@example.com", public_metadata=metadata)
        self.users[user_id] = user
        if session_id:
            self.sessions[session_id] = user_id
        return user

    async def get_session_user_id(self, session_id: str) -> str | None:
        return self.sessions.get(session_id)

    async def get_user(self, user_id: str) -> AuthUser | None:
        return self.users.get(user_id)

    async def list_users(self, limit: int = 100, offset: int = 0) -> list[AuthUser]:
        return list(self.users.values())[offset : offset + limit]

    async def update_user_metadata(
        self, user_id: str, public_metadata: dict[str, Any]
    ) -> AuthUser | None:
        if user_id in self.fail:
            raise IdentityError(f"update {user_id} failed")
        user = self.users.get(user_id)
        if user is None:
            return None
        updated = user_from_payload(
            {"id": user_id, "public_metadata": public_metadata}
        ).model_copy(update={"email": user.email})
        self.users[user_id] = updated
        return updated


@pytest.fixture
def db() -> FakeSupabase:
    """A fresh fake database installed as the cloud client."""
    fake = FakeSupabase()
    cloud.init_cloud(fake)
    return fake


@pytest.fixture
def identity() -> FakeIdentity:
    return FakeIdentity()
