"""Scene CRUD scoped by owning chapter, plus manual reordering.

The model's `order` is stored in the `order_index` column.
"""

import asyncio
import logging
from typing import Any

from storydesk.models import NewScene, Scene, SceneOrder
from storydesk.storage import slugify

from .client import Filters, PersistenceError
from .core import client

logger = logging.getLogger(__name__)

_UPDATABLE = {
    "title", "order", "summary", "content", "characters", "location",
    "timeline", "featured",
}


def row_to_scene(row: dict[str, Any]) -> Scene:
    return Scene(
        id=row["id"],
        slug=row["slug"],
        title=row["title"],
        order=row.get("order_index") or 0,
        chapter_id=row["chapter_id"],
        summary=row.get("summary") or "",
        content=row.get("content") or "",
        characters=row.get("characters") or [],
        location=row.get("location") or "",
        timeline=row.get("timeline") or "",
        featured=bool(row.get("featured")),
        created_at=row.get("created_at"),
        updated_at=row.get("updated_at"),
    )


def _to_columns(fields: dict[str, Any]) -> dict[str, Any]:
    columns = dict(fields)
    if "order" in columns:
        columns["order_index"] = columns.pop("order")
    return columns


def _scope(slug: str, chapter_id: str | None) -> Filters:
    filters: Filters = {"slug": slug}
    if chapter_id:
        filters["chapter_id"] = chapter_id
    return filters


async def get_all_scenes(chapter_id: str | None = None) -> list[Scene]:
    """Scenes in manual order; every chapter's if chapter_id is None."""
    try:
        rows = await client().select(
            "scenes",
            filters={"chapter_id": chapter_id} if chapter_id else None,
            order="order_index",
        )
    except PersistenceError as e:
        logger.error("Error fetching scenes: %s", e)
        return []
    return [row_to_scene(r) for r in rows]


async def get_scenes_for_chapters(chapter_ids: list[str]) -> list[Scene]:
    """Scenes of several chapters at once, in manual order."""
    if not chapter_ids:
        return []
    try:
        rows = await client().select(
            "scenes", filters={"chapter_id": ("in", chapter_ids)}, order="order_index"
        )
    except PersistenceError as e:
        logger.error("Error fetching scenes: %s", e)
        return []
    return [row_to_scene(r) for r in rows]


async def get_scene_by_slug(slug: str, chapter_id: str | None = None) -> Scene | None:
    try:
        rows = await client().select("scenes", filters=_scope(slug, chapter_id), limit=1)
    except PersistenceError as e:
        logger.error("Error fetching scene: %s", e)
        return None
    return row_to_scene(rows[0]) if rows else None


async def get_scenes_by_location(location: str, chapter_id: str | None = None) -> list[Scene]:
    filters: Filters = {"location": location}
    if chapter_id:
        filters["chapter_id"] = chapter_id
    try:
        rows = await client().select("scenes", filters=filters, order="order_index")
    except PersistenceError as e:
        logger.error("Error fetching scenes by location: %s", e)
        return []
    return [row_to_scene(r) for r in rows]


async def create_scene(new: NewScene, chapter_id: str, user_id: str) -> Scene | None:
    row = {
        "chapter_id": chapter_id,
        "user_id": user_id,
        "slug": slugify(new.title),
        **_to_columns(new.model_dump()),
    }
    try:
        stored = await client().insert("scenes", row)
    except PersistenceError as e:
        logger.error("Error creating scene: %s", e)
        return None
    return row_to_scene(stored)


async def update_scene(
    slug: str, fields: dict[str, Any], chapter_id: str | None = None
) -> Scene | None:
    changes = {k: v for k, v in fields.items() if k in _UPDATABLE}
    if not changes:
        return await get_scene_by_slug(slug, chapter_id)
    try:
        rows = await client().update(
            "scenes", _to_columns(changes), filters=_scope(slug, chapter_id)
        )
    except PersistenceError as e:
        logger.error("Error updating scene: %s", e)
        return None
    return row_to_scene(rows[0]) if rows else None


async def delete_scene(slug: str, chapter_id: str | None = None) -> bool:
    try:
        rows = await client().delete("scenes", filters=_scope(slug, chapter_id))
    except PersistenceError as e:
        logger.error("Error deleting scene: %s", e)
        return False
    return bool(rows)


async def reorder_scenes(chapter_id: str, orders: list[SceneOrder]) -> bool:
    """Assign new order indices to a chapter's scenes.

    The updates are issued concurrently and independently; if any of them
    fails the others are not undone, and False is returned.
    """
    db = client()
    results = await asyncio.gather(
        *(
            db.update(
                "scenes",
                {"order_index": o.order},
                filters={"slug": o.slug, "chapter_id": chapter_id},
            )
            for o in orders
        ),
        return_exceptions=True,
    )
    failures = []
    for result in results:
        if isinstance(result, PersistenceError):
            failures.append(result)
        elif isinstance(result, BaseException):
            raise result
    for failure in failures:
        logger.error("Error reordering scenes: %s", failure)
    return not failures
