"""Story image uploads and metadata.

An image is two things: an object in the `story-images` bucket, keyed
`{story_id}/{millis}-{random}.{ext}`, and a `story_images` row pointing at
it. upload_image() writes the object first; if the row insert then fails,
the object is removed again so no orphan is left behind. That rollback is
best effort: a failed removal is logged, not retried.
"""

import logging
import random
import string
import time
from typing import Any

from storydesk.models import ImageType, NewImage, StoryImage

from .client import Filters, PersistenceError
from .core import IMAGE_BUCKET, client

logger = logging.getLogger(__name__)

_CONNECTION_COLUMNS = {
    "characters": "connected_characters",
    "locations": "connected_locations",
    "chapters": "connected_chapters",
    "scenes": "connected_scenes",
}


def row_to_image(row: dict[str, Any]) -> StoryImage:
    return StoryImage(
        id=row["id"],
        filename=row["filename"],
        url=client().public_url(IMAGE_BUCKET, row["storage_path"]),
        alt=row.get("alt_text") or "",
        type=row.get("image_type") or "reference",
        connected_to={
            key: row.get(column) or [] for key, column in _CONNECTION_COLUMNS.items()
        },
        tags=row.get("tags") or [],
        created_at=row.get("created_at"),
    )


def storage_path_for(story_id: str, filename: str) -> str:
    ext = filename.rsplit(".", 1)[-1]
    token = "".join(random.choices(string.ascii_lowercase + string.digits, k=11))
    return f"{story_id}/{int(time.time() * 1000)}-{token}.{ext}"


def _story_filter(story_id: str | None, filters: Filters | None = None) -> Filters:
    filters = dict(filters or {})
    if story_id:
        filters["story_id"] = story_id
    return filters


async def _select_images(what: str, filters: Filters) -> list[StoryImage]:
    try:
        rows = await client().select(
            "story_images", filters=filters, order="created_at", descending=True
        )
    except PersistenceError as e:
        logger.error("Error fetching %s: %s", what, e)
        return []
    return [row_to_image(r) for r in rows]


async def get_all_images(story_id: str | None = None) -> list[StoryImage]:
    """Images newest first; every story's if story_id is None."""
    return await _select_images("images", _story_filter(story_id))


async def get_images_by_type(
    image_type: ImageType, story_id: str | None = None
) -> list[StoryImage]:
    return await _select_images(
        "images by type", _story_filter(story_id, {"image_type": image_type})
    )


async def get_images_by_tags(tags: list[str], story_id: str | None = None) -> list[StoryImage]:
    """Images sharing at least one tag with `tags`."""
    return await _select_images(
        "images by tags", _story_filter(story_id, {"tags": ("ov", tags)})
    )


async def get_images_for_character(
    character_slug: str, story_id: str | None = None
) -> list[StoryImage]:
    return await _select_images(
        "images for character",
        _story_filter(story_id, {"connected_characters": ("cs", [character_slug])}),
    )


async def get_images_for_location(
    location_slug: str, story_id: str | None = None
) -> list[StoryImage]:
    return await _select_images(
        "images for location",
        _story_filter(story_id, {"connected_locations": ("cs", [location_slug])}),
    )


async def get_image_by_id(image_id: str) -> StoryImage | None:
    try:
        rows = await client().select("story_images", filters={"id": image_id}, limit=1)
    except PersistenceError as e:
        logger.error("Error fetching image: %s", e)
        return None
    return row_to_image(rows[0]) if rows else None


async def upload_image(
    content: bytes,
    filename: str,
    content_type: str,
    story_id: str,
    new: NewImage,
) -> StoryImage | None:
    """Store the bytes, then the metadata row. Returns None on any failure."""
    db = client()
    try:
        path = await db.upload(
            IMAGE_BUCKET, storage_path_for(story_id, filename), content, content_type
        )
    except PersistenceError as e:
        logger.error("Error uploading file: %s", e)
        return None

    row = {
        "story_id": story_id,
        "filename": filename,
        "storage_path": path,
        "alt_text": new.alt,
        "image_type": new.type,
        "tags": new.tags,
    }
    for key, column in _CONNECTION_COLUMNS.items():
        row[column] = getattr(new.connected_to, key)

    try:
        stored = await db.insert("story_images", row)
    except PersistenceError as e:
        logger.error("Error creating image record, removing %s: %s", path, e)
        try:
            await db.remove(IMAGE_BUCKET, [path])
        except PersistenceError as cleanup_error:
            logger.error("Error removing orphaned upload %s: %s", path, cleanup_error)
        return None
    return row_to_image(stored)


async def update_image_metadata(image_id: str, fields: dict[str, Any]) -> StoryImage | None:
    """Update alt text, type, tags, or connections.

    `connected_to` only replaces the entity lists it contains.
    """
    changes: dict[str, Any] = {}
    if "alt" in fields:
        changes["alt_text"] = fields["alt"]
    if "type" in fields:
        changes["image_type"] = fields["type"]
    if "tags" in fields:
        changes["tags"] = fields["tags"]
    for key, value in (fields.get("connected_to") or {}).items():
        if key in _CONNECTION_COLUMNS:
            changes[_CONNECTION_COLUMNS[key]] = value
    if not changes:
        return await get_image_by_id(image_id)
    try:
        rows = await client().update("story_images", changes, filters={"id": image_id})
    except PersistenceError as e:
        logger.error("Error updating image metadata: %s", e)
        return None
    return row_to_image(rows[0]) if rows else None


async def delete_image(image_id: str) -> bool:
    """Remove the stored object, then the row.

    A failed object removal is logged and the row is deleted anyway.
    """
    db = client()
    try:
        rows = await db.select(
            "story_images", filters={"id": image_id}, limit=1, columns="storage_path"
        )
    except PersistenceError as e:
        logger.error("Error fetching image for deletion: %s", e)
        return False
    if not rows:
        return False

    try:
        await db.remove(IMAGE_BUCKET, [rows[0]["storage_path"]])
    except PersistenceError as e:
        logger.error("Error deleting from storage: %s", e)

    try:
        deleted = await db.delete("story_images", filters={"id": image_id})
    except PersistenceError as e:
        logger.error("Error deleting image record: %s", e)
        return False
    return bool(deleted)


async def get_image_story_id(image_id: str) -> str | None:
    try:
        rows = await client().select(
            "story_images", filters={"id": image_id}, limit=1, columns="story_id"
        )
    except PersistenceError as e:
        logger.error("Error fetching image: %s", e)
        return None
    return rows[0]["story_id"] if rows else None
