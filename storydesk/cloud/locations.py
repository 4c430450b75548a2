"""Location CRUD scoped by owning story."""

import logging
from typing import Any

from storydesk.models import Location, NewLocation
from storydesk.storage import slugify

from .client import Filters, PersistenceError
from .core import client

logger = logging.getLogger(__name__)

_UPDATABLE = {
    "name", "type", "description", "significance", "parent_location",
    "climate", "population", "connected_chapters", "connected_characters",
    "images", "featured",
}


def row_to_location(row: dict[str, Any]) -> Location:
    return Location(
        id=row["id"],
        slug=row["slug"],
        name=row["name"],
        type=row.get("type") or "other",
        description=row.get("description") or "",
        significance=row.get("significance") or "",
        parent_location=row.get("parent_location") or "",
        climate=row.get("climate") or "",
        population=row.get("population") or "",
        connected_chapters=row.get("connected_chapters") or [],
        connected_characters=row.get("connected_characters") or [],
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


async def get_all_locations(story_id: str | None = None) -> list[Location]:
    """Locations ordered by name; every story's if story_id is None."""
    try:
        rows = await client().select(
            "locations",
            filters={"story_id": story_id} if story_id else None,
            order="name",
        )
    except PersistenceError as e:
        logger.error("Error fetching locations: %s", e)
        return []
    return [row_to_location(r) for r in rows]


async def get_location_by_slug(slug: str, story_id: str | None = None) -> Location | None:
    try:
        rows = await client().select("locations", filters=_scope(slug, story_id), limit=1)
    except PersistenceError as e:
        logger.error("Error fetching location: %s", e)
        return None
    return row_to_location(rows[0]) if rows else None


async def create_location(new: NewLocation, story_id: str, user_id: str) -> Location | None:
    row = {
        "story_id": story_id,
        "user_id": user_id,
        "slug": slugify(new.name),
        **new.model_dump(),
    }
    try:
        stored = await client().insert("locations", row)
    except PersistenceError as e:
        logger.error("Error creating location: %s", e)
        return None
    return row_to_location(stored)


async def update_location(
    slug: str, fields: dict[str, Any], story_id: str | None = None
) -> Location | None:
    changes = {k: v for k, v in fields.items() if k in _UPDATABLE}
    if not changes:
        return await get_location_by_slug(slug, story_id)
    try:
        rows = await client().update("locations", changes, filters=_scope(slug, story_id))
    except PersistenceError as e:
        logger.error("Error updating location: %s", e)
        return None
    return row_to_location(rows[0]) if rows else None


async def delete_location(slug: str, story_id: str | None = None) -> bool:
    try:
        rows = await client().delete("locations", filters=_scope(slug, story_id))
    except PersistenceError as e:
        logger.error("Error deleting location: %s", e)
        return False
    return bool(rows)
