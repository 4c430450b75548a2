"""Tests for identity account events mirrored into profiles."""

import pytest

from storydesk import cloud, webhooks


def _user_payload(user_id: str = "user_1", **extra) -> dict:
    return {
        "id": user_id,
        "email_addresses": [{"email_address": "ada@example.com"}],
        "first_name": "Ada",
        "last_name": "Lovelace",
        "image_url": "https://img.test/ada.png",
        "created_at": 1704067200000,
        "updated_at": 1704067200000,
        **extra,
    }


async def test_user_created_inserts_profile(db):
    handled = await webhooks.handle_event({"type": "user.created", "data": _user_payload()})
    assert handled is True
    row = db.rows("profiles")[0]
    assert row["id"] == "user_1"
    assert row["email"] == "ada@example.com"
    assert row["full_name"] == "Ada Lovelace"
    assert row["subscription_tier"] == "free"
    assert row["created_at"].startswith("2024-01-01T00:00:00")


async def test_user_updated_changes_profile(db):
    await webhooks.handle_event({"type": "user.created", "data": _user_payload()})
    await webhooks.handle_event(
        {"type": "user.updated", "data": _user_payload(first_name="Augusta", last_name=None)}
    )
    profile = await cloud.get_profile("user_1")
    assert profile.full_name == "Augusta"


async def test_user_deleted_removes_stories_then_profile(db):
    await webhooks.handle_event({"type": "user.created", "data": _user_payload()})
    db.rows("stories").append({"id": "s1", "user_id": "user_1"})
    await webhooks.handle_event({"type": "user.deleted", "data": {"id": "user_1"}})
    assert db.rows("profiles") == []
    assert db.rows("stories") == []


async def test_story_delete_failure_still_removes_profile(db, caplog):
    await webhooks.handle_event({"type": "user.created", "data": _user_payload()})
    db.fail.add("delete:stories")
    await webhooks.handle_event({"type": "user.deleted", "data": {"id": "user_1"}})
    assert db.rows("profiles") == []
    assert "Error deleting stories" in caplog.text


async def test_profile_delete_failure_propagates(db):
    db.fail.add("delete:profiles")
    with pytest.raises(cloud.PersistenceError):
        await webhooks.handle_event({"type": "user.deleted", "data": {"id": "user_1"}})


async def test_unhandled_event(db):
    assert await webhooks.handle_event({"type": "session.created", "data": {}}) is False
    assert db.calls == []
