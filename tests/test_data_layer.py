"""Tests for the data layer facade: selection and per-mode behaviour."""

import pytest

from storydesk import cloud, storage
from storydesk.data_layer import CloudDataLayer, LocalDataLayer, resolve_data_layer
from storydesk.models import (
    AuthUser,
    NewChapter,
    NewCharacter,
    NewImage,
    NewLocation,
    NewScene,
    NewStory,
    SceneOrder,
)


def _user(**metadata) -> AuthUser:
    return AuthUser(id="user_1", public_metadata=metadata)


# ── Selection ───────────────────────────────────────────


def test_anonymous_gets_local():
    state = resolve_data_layer(None)
    assert isinstance(state.data_layer, LocalDataLayer)
    assert state.is_local is True
    assert state.is_pro is False


def test_free_user_gets_local():
    state = resolve_data_layer(_user(subscription="free", subscriptionStatus="cancelled"))
    assert isinstance(state.data_layer, LocalDataLayer)


def test_pro_user_gets_cloud_bound_to_user():
    state = resolve_data_layer(_user(subscription="pro"))
    assert isinstance(state.data_layer, CloudDataLayer)
    assert state.data_layer.user_id == "user_1"
    assert state.is_local is False
    assert state.is_pro is True


def test_loading_flag():
    assert resolve_data_layer(None, is_loaded=False).is_loading is True
    assert resolve_data_layer(None).is_loading is False


def test_reselected_when_user_changes():
    assert resolve_data_layer(_user()).is_local
    assert not resolve_data_layer(_user(subscription="pro")).is_local


# ── Local mode ──────────────────────────────────────────


async def test_local_chapters_round_trip():
    dl = LocalDataLayer()
    created = await dl.create_chapter(NewChapter(title="The Beginning", chapter_number=1))
    assert created.slug == "the-beginning"
    assert [c.slug for c in await dl.get_all_chapters("ignored-story")] == ["the-beginning"]
    assert (await dl.update_chapter("the-beginning", {"status": "review"})).status == "review"
    assert await dl.delete_chapter("the-beginning") is True


async def test_local_story_operations_are_unavailable():
    dl = LocalDataLayer()
    assert await dl.get_all_stories() == []
    assert await dl.get_story("s") is None
    assert await dl.create_story(NewStory(title="A")) is None
    assert await dl.update_story("s", {"title": "B"}) is None
    assert await dl.delete_story("s") is False
    assert await dl.get_story_stats("s") is None
    assert await dl.default_story_id() is None


async def test_local_scene_operations_are_unavailable():
    dl = LocalDataLayer()
    assert await dl.get_all_scenes("ch") == []
    assert await dl.get_story_scenes("s") == []
    assert await dl.get_scene("a", "ch") is None
    assert await dl.create_scene(NewScene(title="A"), "ch") is None
    assert await dl.update_scene("a", {"order": 2}, "ch") is None
    assert await dl.delete_scene("a", "ch") is False
    assert await dl.reorder_scenes("ch", [SceneOrder(slug="a", order=1)]) is False


async def test_local_upload_unavailable_but_metadata_works():
    dl = LocalDataLayer()
    assert await dl.upload_image(b"x", "a.png", "image/png", "s", NewImage()) is None
    image = storage.create_image(NewImage(alt="a", tags=["t"]), "a.png", "/a.png")
    assert [i.id for i in await dl.get_images_by_tags(["t"])] == [image.id]
    assert (await dl.update_image(image.id, {"alt": "b"})).alt == "b"
    assert await dl.delete_image(image.id) is True


# ── Cloud mode ──────────────────────────────────────────


async def test_cloud_requires_story_for_creates(db):
    dl = CloudDataLayer("user_1")
    with pytest.raises(ValueError, match="Story ID is required"):
        await dl.create_chapter(NewChapter(title="A", chapter_number=1))
    with pytest.raises(ValueError, match="Story ID is required"):
        await dl.create_character(NewCharacter(name="A"))
    with pytest.raises(ValueError, match="Chapter ID is required"):
        await dl.create_scene(NewScene(title="A"))


async def test_cloud_stories_scoped_to_user(db):
    mine = CloudDataLayer("user_1")
    theirs = CloudDataLayer("user_2")
    story = await mine.create_story(NewStory(title="Mine"))
    assert [s.title for s in await mine.get_all_stories()] == ["Mine"]
    assert await theirs.get_all_stories() == []
    assert await theirs.get_story_stats(story.id) is None
    assert (await mine.get_story_stats(story.id)).chapter_count == 0


async def test_cloud_default_story_and_content(db):
    dl = CloudDataLayer("user_1")
    story_id = await dl.default_story_id()
    await dl.create_character(NewCharacter(name="John"), story_id)
    assert db.rows("characters")[0]["user_id"] == "user_1"
    assert [c.name for c in await dl.get_all_characters(story_id)] == ["John"]


async def test_cloud_scene_reorder_through_facade(db):
    dl = CloudDataLayer("user_1")
    chapter = await dl.create_chapter(
        NewChapter(title="One", chapter_number=1), await dl.default_story_id()
    )
    await dl.create_scene(NewScene(title="A", order=1), chapter.id)
    await dl.create_scene(NewScene(title="B", order=2), chapter.id)
    assert await dl.reorder_scenes(
        chapter.id, [SceneOrder(slug="b", order=1), SceneOrder(slug="a", order=2)]
    )
    assert [s.slug for s in await dl.get_all_scenes(chapter.id)] == ["b", "a"]


async def test_cloud_story_scenes_span_chapters(db):
    dl = CloudDataLayer("user_1")
    story_id = await dl.default_story_id()
    one = await dl.create_chapter(NewChapter(title="One", chapter_number=1), story_id)
    two = await dl.create_chapter(NewChapter(title="Two", chapter_number=2), story_id)
    await dl.create_scene(NewScene(title="A"), one.id)
    await dl.create_scene(NewScene(title="B"), two.id)
    assert sorted(s.slug for s in await dl.get_story_scenes(story_id)) == ["a", "b"]
    assert await dl.get_all_scenes() == []


async def test_cloud_other_users_story_is_invisible(db):
    owner = CloudDataLayer("user_1")
    other = CloudDataLayer("user_2")
    story_id = await owner.default_story_id()
    await owner.create_chapter(NewChapter(title="Secret", chapter_number=1), story_id)
    await owner.create_location(NewLocation(name="Keep"), story_id)

    assert await other.get_all_chapters(story_id) == []
    assert await other.get_chapter("secret", story_id) is None
    assert await other.update_chapter("secret", {"content": "x"}, story_id) is None
    assert await other.delete_chapter("secret", story_id) is False
    assert await other.create_character(NewCharacter(name="Spy"), story_id) is None
    assert await other.delete_location("keep", story_id) is False
    assert await other.get_story_scenes(story_id) == []
    assert await other.get_all_chapters() == []

    assert len(db.rows("chapters")) == 1
    assert db.rows("chapters")[0]["content"] == ""
    assert db.rows("characters") == []
    assert len(db.rows("locations")) == 1


async def test_cloud_other_users_chapter_scenes_are_invisible(db):
    owner = CloudDataLayer("user_1")
    other = CloudDataLayer("user_2")
    chapter = await owner.create_chapter(
        NewChapter(title="One", chapter_number=1), await owner.default_story_id()
    )
    await owner.create_scene(NewScene(title="A", order=1), chapter.id)

    assert await other.get_all_scenes(chapter.id) == []
    assert await other.get_scene("a", chapter.id) is None
    assert await other.create_scene(NewScene(title="B"), chapter.id) is None
    assert await other.update_scene("a", {"order": 5}, chapter.id) is None
    assert await other.reorder_scenes(chapter.id, [SceneOrder(slug="a", order=5)]) is False
    assert await other.delete_scene("a", chapter.id) is False
    assert await other.get_all_scenes("missing-chapter") == []
    assert [s.order for s in await owner.get_all_scenes(chapter.id)] == [1]


async def test_cloud_other_users_images_are_invisible(db):
    owner = CloudDataLayer("user_1")
    other = CloudDataLayer("user_2")
    story_id = await owner.default_story_id()
    image = await owner.upload_image(b"png", "a.png", "image/png", story_id, NewImage(alt="a"))

    assert await other.get_all_images(story_id) == []
    assert await other.get_images_by_type("reference", story_id) == []
    assert await other.update_image(image.id, {"alt": "b"}) is None
    assert await other.delete_image(image.id) is False
    assert await other.upload_image(b"x", "b.png", "image/png", story_id, NewImage()) is None
    assert await other.update_image("missing", {"alt": "b"}) is None

    assert len(db.objects) == 1
    assert (await owner.update_image(image.id, {"alt": "b"})).alt == "b"
    assert await owner.delete_image(image.id) is True


async def test_cloud_failures_are_falsy(db):
    db.fail.add("select")
    dl = CloudDataLayer("user_1")
    assert await dl.get_all_chapters("s") == []
    assert await dl.get_chapter("a", "s") is None
    assert cloud.is_configured()
