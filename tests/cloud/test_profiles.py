"""Tests for profiles and public author pages."""

from storydesk import cloud
from storydesk.models import NewCharacter, NewScene, NewStory


async def test_upsert_creates_free_profile(db):
    profile = await cloud.upsert_profile("user-1", {"bio": "Writes fantasy."})
    assert profile.id == "user-1"
    assert profile.bio == "Writes fantasy."
    assert profile.subscription_tier == "free"
    assert profile.public_profile is False


async def test_upsert_updates_existing(db):
    await cloud.upsert_profile("user-1", {"bio": "Old"})
    profile = await cloud.upsert_profile("user-1", {"bio": "New", "public_profile": True})
    assert profile.bio == "New"
    assert profile.public_profile is True
    assert len(db.rows("profiles")) == 1


async def test_upsert_ignores_tier(db):
    profile = await cloud.upsert_profile("user-1", {"subscription_tier": "pro"})
    assert profile.subscription_tier == "free"


async def test_get_missing_profile(db):
    assert await cloud.get_profile("nobody") is None


async def _featured_content(user_id: str) -> None:
    story = await cloud.create_story(NewStory(title="Shown", featured=True), user_id)
    await cloud.create_story(NewStory(title="Hidden"), user_id)
    await cloud.create_character(NewCharacter(name="John", featured=True), story.id, user_id)
    await cloud.create_character(NewCharacter(name="Mary"), story.id, user_id)
    await cloud.create_scene(NewScene(title="Duel", featured=True), "ch-1", user_id)


async def test_public_profile_shows_featured_only(db):
    await cloud.upsert_profile("user-1", {"public_profile": True})
    await _featured_content("user-1")

    page = await cloud.get_public_profile("user-1")
    assert page.profile.id == "user-1"
    assert [s.title for s in page.stories] == ["Shown"]
    assert [c.name for c in page.characters] == ["John"]
    assert [s.title for s in page.scenes] == ["Duel"]
    assert page.locations == []


async def test_private_profile_hidden_from_others(db):
    await cloud.upsert_profile("user-1", {"public_profile": False})
    assert await cloud.get_public_profile("user-1") is None
    assert await cloud.get_public_profile("user-1", viewer_id="user-2") is None


async def test_owner_always_sees_own_profile(db):
    await cloud.upsert_profile("user-1", {"public_profile": False})
    page = await cloud.get_public_profile("user-1", viewer_id="user-1")
    assert page is not None
    assert page.stories == []


async def test_public_profile_missing(db):
    assert await cloud.get_public_profile("nobody") is None
