"""Character CRUD scoped by owning story."""

import logging
from typing import Any

from storydesk.models import Character, NewCharacter
from storydesk.storage import slugify

from .client import Filters, PersistenceError
from .core import client

logger = logging.getLogger(__name__)

_UPDATABLE = {
    "name", "role", "age", "status", "location", "affiliations",
    "relationships", "first_appearance", "description", "backstory",
    "images", "featured",
}


def row_to_character(row: dict[str, Any]) -> Character:
    return Character(
        id=row["id"],
        slug=row["slug"],
        name=row["name"],
        role=row.get("role") or "",
        age=row.get("age"),
        status=row.get("status") or "alive",
        location=row.get("location") or "",
        affiliations=row.get("affiliations") or [],
        relationships=row.get("relationships") or [],
        first_appearance=row.get("first_appearance") or "",
        description=row.get("description") or "",
        backstory=row.get("backstory") or "",
        images=row.get("images") or [],
        featured=bool(row.get("featured")),
        created_at=row.get("created_at"),
        updated_at=row.get("updated_at"),
    )


def _scope(slug: str, story_id: str | None) -> Filters:
    filters: Filters = {"slug": slug}
    if story_id:
        filters["story_id"] = story_id
    return filters


async def get_all_characters(story_id: str | None = None) -> list[Character]:
    """Characters ordered by name; every story's if story_id is None."""
    try:
        rows = await client().select(
            "characters",
            filters={"story_id": story_id} if story_id else None,
            order="name",
        )
    except PersistenceError as e:
        logger.error("Error fetching characters: %s", e)
        return []
    return [row_to_character(r) for r in rows]


async def get_character_by_slug(slug: str, story_id: str | None = None) -> Character | None:
    try:
        rows = await client().select("characters", filters=_scope(slug, story_id), limit=1)
    except PersistenceError as e:
        logger.error("Error fetching character: %s", e)
        return None
    return row_to_character(rows[0]) if rows else None


async def create_character(new: NewCharacter, story_id: str, user_id: str) -> Character | None:
    row = {
        "story_id": story_id,
        "user_id": user_id,
        "slug": slugify(new.name),
        **new.model_dump(),
    }
    try:
        stored = await client().insert("characters", row)
    except PersistenceError as e:
        logger.error("Error creating character: %s", e)
        return None
    return row_to_character(stored)


async def update_character(
    slug: str, fields: dict[str, Any], story_id: str | None = None
) -> Character | None:
    changes = {k: v for k, v in fields.items() if k in _UPDATABLE}
    if not changes:
        return await get_character_by_slug(slug, story_id)
    try:
        rows = await client().update("characters", changes, filters=_scope(slug, story_id))
    except PersistenceError as e:
        logger.error("Error updating character: %s", e)
        return None
    return row_to_character(rows[0]) if rows else None


async def delete_character(slug: str, story_id: str | None = None) -> bool:
    try:
        rows = await client().delete("characters", filters=_scope(slug, story_id))
    except PersistenceError as e:
        logger.error("Error deleting character: %s", e)
        return False
    return bool(rows)
