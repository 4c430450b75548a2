"""Story CRUD scoped by owning user, plus story statistics."""

import asyncio
import logging
from typing import Any

from storydesk.models import NewStory, Story, StoryStats, StoryStatus

from .client import PersistenceError
from .core import client

logger = logging.getLogger(__name__)

_UPDATABLE = {
    "title", "author", "genre", "status", "word_count_goal",
    "current_word_count", "description", "featured",
}

DEFAULT_STORY_TITLE = "My First Story"


def row_to_story(row: dict[str, Any]) -> Story:
    return Story(
        id=row["id"],
        title=row["title"],
        author=row.get("author") or "",
        genre=row.get("genre") or "",
        status=row.get("status") or "planning",
        word_count_goal=row.get("word_count_goal"),
        current_word_count=row.get("current_word_count") or 0,
        description=row.get("description") or "",
        featured=bool(row.get("featured")),
        created_at=row.get("created_at"),
        updated_at=row.get("updated_at"),
    )


async def get_all_stories(user_id: str) -> list[Story]:
    """A user's stories, most recently updated first."""
    try:
        rows = await client().select(
            "stories", filters={"user_id": user_id}, order="updated_at", descending=True
        )
    except PersistenceError as e:
        logger.error("Error fetching stories: %s", e)
        return []
    return [row_to_story(r) for r in rows]


async def get_story_by_id(story_id: str, user_id: str) -> Story | None:
    try:
        rows = await client().select(
            "stories", filters={"id": story_id, "user_id": user_id}, limit=1
        )
    except PersistenceError as e:
        logger.error("Error fetching story: %s", e)
        return None
    return row_to_story(rows[0]) if rows else None


async def get_stories_by_status(status: StoryStatus, user_id: str) -> list[Story]:
    try:
        rows = await client().select(
            "stories",
            filters={"user_id": user_id, "status": status},
            order="updated_at",
            descending=True,
        )
    except PersistenceError as e:
        logger.error("Error fetching stories by status: %s", e)
        return []
    return [row_to_story(r) for r in rows]


async def create_story(new: NewStory, user_id: str) -> Story | None:
    try:
        row = await client().insert("stories", {"user_id": user_id, **new.model_dump()})
    except PersistenceError as e:
        logger.error("Error creating story: %s", e)
        return None
    return row_to_story(row)


async def update_story(story_id: str, fields: dict[str, Any], user_id: str) -> Story | None:
    """Write the present fields. An empty update returns the story unchanged."""
    changes = {k: v for k, v in fields.items() if k in _UPDATABLE}
    if not changes:
        return await get_story_by_id(story_id, user_id)
    try:
        rows = await client().update(
            "stories", changes, filters={"id": story_id, "user_id": user_id}
        )
    except PersistenceError as e:
        logger.error("Error updating story: %s", e)
        return None
    return row_to_story(rows[0]) if rows else None


async def delete_story(story_id: str, user_id: str) -> bool:
    try:
        rows = await client().delete("stories", filters={"id": story_id, "user_id": user_id})
    except PersistenceError as e:
        logger.error("Error deleting story: %s", e)
        return False
    return bool(rows)


async def update_word_count(story_id: str, word_count: int, user_id: str) -> bool:
    try:
        rows = await client().update(
            "stories",
            {"current_word_count": word_count},
            filters={"id": story_id, "user_id": user_id},
        )
    except PersistenceError as e:
        logger.error("Error updating word count: %s", e)
        return False
    return bool(rows)


async def get_or_create_story_id(user_id: str) -> str | None:
    """Id of the user's latest story, creating a default one if they have none."""
    db = client()
    try:
        rows = await db.select(
            "stories",
            filters={"user_id": user_id},
            order="created_at",
            descending=True,
            limit=1,
            columns="id",
        )
        if rows:
            return rows[0]["id"]
        row = await db.insert(
            "stories",
            {"user_id": user_id, "title": DEFAULT_STORY_TITLE, "status": "planning"},
        )
    except PersistenceError as e:
        logger.error("Error resolving default story: %s", e)
        return None
    return row["id"]


async def get_story_stats(story_id: str) -> StoryStats | None:
    """Entity counts for one story. Scenes are counted through its chapters."""
    db = client()
    try:
        chapter_count, character_count, location_count, image_count, chapters = (
            await asyncio.gather(
                db.count("chapters", filters={"story_id": story_id}),
                db.count("characters", filters={"story_id": story_id}),
                db.count("locations", filters={"story_id": story_id}),
                db.count("story_images", filters={"story_id": story_id}),
                db.select("chapters", filters={"story_id": story_id}, columns="id"),
            )
        )
        chapter_ids = [c["id"] for c in chapters]
        scene_count = 0
        if chapter_ids:
            scene_count = await db.count("scenes", filters={"chapter_id": ("in", chapter_ids)})
    except PersistenceError as e:
        logger.error("Error computing story stats: %s", e)
        return None
    return StoryStats(
        chapter_count=chapter_count,
        character_count=character_count,
        location_count=location_count,
        scene_count=scene_count,
        image_count=image_count,
    )
