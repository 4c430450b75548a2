"""Chapter CRUD scoped by owning story."""

import logging
from typing import Any

from storydesk.models import Chapter, NewChapter
from storydesk.storage import slugify

from .client import Filters, PersistenceError
from .core import client

logger = logging.getLogger(__name__)

_UPDATABLE = {
    "title", "chapter_number", "status", "word_count", "pov", "location",
    "timeline", "summary", "content", "featured",
}


def row_to_chapter(row: dict[str, Any]) -> Chapter:
    return Chapter(
        id=row["id"],
        slug=row["slug"],
        title=row["title"],
        chapter_number=row["chapter_number"],
        status=row.get("status") or "draft",
        word_count=row.get("word_count") or 0,
        pov=row.get("pov") or "",
        location=row.get("location") or "",
        timeline=row.get("timeline") or "",
        summary=row.get("summary") or "",
        content=row.get("content") or "",
        featured=bool(row.get("featured")),
        created_at=row.get("created_at"),
        updated_at=row.get("updated_at"),
    )


def _scope(slug: str, story_id: str | None) -> Filters:
    filters: Filters = {"slug": slug}
    if story_id:
        filters["story_id"] = story_id
    return filters


async def get_all_chapters(story_id: str | None = None) -> list[Chapter]:
    """Chapters ordered by chapter number; every story's if story_id is None."""
    try:
        rows = await client().select(
            "chapters",
            filters={"story_id": story_id} if story_id else None,
            order="chapter_number",
        )
    except PersistenceError as e:
        logger.error("Error fetching chapters: %s", e)
        return []
    return [row_to_chapter(r) for r in rows]


async def get_chapter_by_slug(slug: str, story_id: str | None = None) -> Chapter | None:
    try:
        rows = await client().select("chapters", filters=_scope(slug, story_id), limit=1)
    except PersistenceError as e:
        logger.error("Error fetching chapter: %s", e)
        return None
    return row_to_chapter(rows[0]) if rows else None


async def create_chapter(new: NewChapter, story_id: str) -> Chapter | None:
    row = {"story_id": story_id, "slug": slugify(new.title), **new.model_dump()}
    try:
        stored = await client().insert("chapters", row)
    except PersistenceError as e:
        logger.error("Error creating chapter: %s", e)
        return None
    return row_to_chapter(stored)


async def update_chapter(
    slug: str, fields: dict[str, Any], story_id: str | None = None
) -> Chapter | None:
    """Write the present fields. An empty update returns the chapter unchanged."""
    changes = {k: v for k, v in fields.items() if k in _UPDATABLE}
    if not changes:
        return await get_chapter_by_slug(slug, story_id)
    try:
        rows = await client().update("chapters", changes, filters=_scope(slug, story_id))
    except PersistenceError as e:
        logger.error("Error updating chapter: %s", e)
        return None
    return row_to_chapter(rows[0]) if rows else None


async def delete_chapter(slug: str, story_id: str | None = None) -> bool:
    try:
        rows = await client().delete("chapters", filters=_scope(slug, story_id))
    except PersistenceError as e:
        logger.error("Error deleting chapter: %s", e)
        return False
    return bool(rows)


async def get_chapter_story_id(chapter_id: str) -> str | None:
    """Id of the story a chapter belongs to, or None if there is no such chapter."""
    try:
        rows = await client().select(
            "chapters", filters={"id": chapter_id}, limit=1, columns="story_id"
        )
    except PersistenceError as e:
        logger.error("Error fetching chapter: %s", e)
        return None
    return rows[0]["story_id"] if rows else None
