"""Story image metadata storage for the single local story.

Local mode has no object store, so records only point at URLs that already
exist somewhere (placeholders, external links).
"""

import time
from datetime import datetime, timezone
from typing import Any

from storydesk.models import ImageType, NewImage, StoryImage

from .core import now, read_list, write_list

_UPDATABLE = {"alt", "type", "connected_to", "tags"}
_EPOCH = datetime.fromtimestamp(0, tz=timezone.utc)


def _load() -> list[StoryImage]:
    return [StoryImage.model_validate(img) for img in read_list("images")]


def _save(images: list[StoryImage]) -> None:
    write_list("images", [img.model_dump(mode="json") for img in images])


def get_all_images() -> list[StoryImage]:
    """All images, newest first."""
    images = _load()
    return sorted(
        images,
        key=lambda img: img.created_at or _EPOCH,
        reverse=True,
    )


def get_image_by_id(image_id: str) -> StoryImage | None:
    for image in _load():
        if image.id == image_id:
            return image
    return None


def get_images_by_type(image_type: ImageType) -> list[StoryImage]:
    return [img for img in get_all_images() if img.type == image_type]


def get_images_by_tags(tags: list[str]) -> list[StoryImage]:
    """Images sharing at least one tag with `tags`."""
    wanted = set(tags)
    return [img for img in get_all_images() if wanted & set(img.tags)]


def create_image(new: NewImage, filename: str, url: str) -> StoryImage:
    images = _load()
    taken = {img.id for img in images}
    stamp = int(time.time() * 1000)
    while str(stamp) in taken:
        stamp += 1
    image = StoryImage(
        **new.model_dump(),
        id=str(stamp),
        filename=filename,
        url=url,
        created_at=now(),
    )
    images.append(image)
    _save(images)
    return image


def update_image(image_id: str, fields: dict[str, Any]) -> StoryImage | None:
    """Update alt text, type, tags, or connections. Returns None if not found.

    `connected_to` is merged key-by-key: only the entity lists present in the
    update are replaced.
    """
    images = _load()
    for i, image in enumerate(images):
        if image.id != image_id:
            continue
        changes = {k: v for k, v in fields.items() if k in _UPDATABLE}
        if not changes:
            return image
        data = image.model_dump()
        connected = changes.pop("connected_to", None)
        data.update(changes)
        if connected:
            data["connected_to"].update(connected)
        images[i] = StoryImage.model_validate(data)
        _save(images)
        return images[i]
    return None


def delete_image(image_id: str) -> bool:
    images = _load()
    remaining = [img for img in images if img.id != image_id]
    if len(remaining) == len(images):
        return False
    _save(remaining)
    return True
