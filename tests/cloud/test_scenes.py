"""Tests for cloud scene storage and reordering."""

from unittest.mock import AsyncMock

import pytest

from storydesk import cloud
from storydesk.models import NewScene, SceneOrder


async def _scene(title: str, order: int, chapter_id: str = "ch-1", **extra):
    return await cloud.create_scene(
        NewScene(title=title, order=order, **extra), chapter_id, "user-1"
    )


async def test_create_scene(db):
    scene = await _scene("Opening Shot", 1, location="Village Square")
    assert scene.slug == "opening-shot"
    assert scene.chapter_id == "ch-1"
    assert scene.order == 1
    row = db.rows("scenes")[0]
    assert row["order_index"] == 1
    assert "order" not in row


async def test_scenes_in_manual_order(db):
    await _scene("Second", 2)
    await _scene("First", 1)
    await _scene("Other Chapter", 0, chapter_id="ch-2")
    assert [s.title for s in await cloud.get_all_scenes("ch-1")] == ["First", "Second"]


async def test_scenes_for_several_chapters(db):
    await _scene("A", 2)
    await _scene("B", 1, chapter_id="ch-2")
    await _scene("C", 1, chapter_id="ch-3")
    scenes = await cloud.get_scenes_for_chapters(["ch-1", "ch-2"])
    assert [s.title for s in scenes] == ["B", "A"]
    assert await cloud.get_scenes_for_chapters([]) == []


async def test_scenes_by_location(db):
    await _scene("A", 1, location="Dark Castle")
    await _scene("B", 2, location="Village Square")
    assert [s.title for s in await cloud.get_scenes_by_location("Dark Castle")] == ["A"]


async def test_update_scene_order_maps_column(db):
    await _scene("A", 1)
    updated = await cloud.update_scene("a", {"order": 5}, "ch-1")
    assert updated.order == 5
    assert db.rows("scenes")[0]["order_index"] == 5


async def test_delete_scene(db):
    await _scene("A", 1)
    assert await cloud.delete_scene("a", "ch-1") is True
    assert await cloud.delete_scene("a", "ch-1") is False


# ── Reorder ─────────────────────────────────────────────


async def test_reorder_scenes(db):
    await _scene("A", 1)
    await _scene("B", 2)
    ok = await cloud.reorder_scenes(
        "ch-1", [SceneOrder(slug="b", order=1), SceneOrder(slug="a", order=2)]
    )
    assert ok is True
    assert [s.slug for s in await cloud.get_all_scenes("ch-1")] == ["b", "a"]


async def test_reorder_only_touches_named_chapter(db):
    await _scene("A", 1)
    await _scene("A", 1, chapter_id="ch-2")
    await cloud.reorder_scenes("ch-1", [SceneOrder(slug="a", order=9)])
    assert (await cloud.get_scene_by_slug("a", "ch-2")).order == 1


async def test_reorder_failure_returns_false(db, caplog):
    await _scene("A", 1)
    db.fail.add("update:scenes")
    ok = await cloud.reorder_scenes("ch-1", [SceneOrder(slug="a", order=2)])
    assert ok is False
    assert "Error reordering scenes" in caplog.text


async def test_reorder_partial_failure_keeps_successful_updates(db):
    await _scene("A", 1)
    await _scene("B", 2)
    real_update = db.update

    async def flaky_update(table, values, *, filters):
        if filters["slug"] == "b":
            raise cloud.PersistenceError("boom")
        return await real_update(table, values, filters=filters)

    db.update = flaky_update
    ok = await cloud.reorder_scenes(
        "ch-1", [SceneOrder(slug="a", order=3), SceneOrder(slug="b", order=1)]
    )
    assert ok is False
    assert (await cloud.get_scene_by_slug("a", "ch-1")).order == 3


async def test_reorder_reraises_unexpected_errors(db):
    db.update = AsyncMock(side_effect=KeyError("bug"))
    with pytest.raises(KeyError):
        await cloud.reorder_scenes("ch-1", [SceneOrder(slug="a", order=1)])
