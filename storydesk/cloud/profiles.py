"""Author profiles and the public showcase of featured content."""

import asyncio
import logging
from typing import Any

from storydesk.models import Profile, PublicProfile

from .characters import row_to_character
from .client import PersistenceError
from .core import client
from .locations import row_to_location
from .scenes import row_to_scene
from .stories import row_to_story

logger = logging.getLogger(__name__)

_UPDATABLE = {"email", "full_name", "avatar_url", "bio", "public_profile"}


def row_to_profile(row: dict[str, Any]) -> Profile:
    return Profile(
        id=row["id"],
        email=row.get("email") or "",
        full_name=row.get("full_name"),
        avatar_url=row.get("avatar_url"),
        bio=row.get("bio"),
        public_profile=bool(row.get("public_profile")),
        subscription_tier=row.get("subscription_tier") or "free",
        subscription_status=row.get("subscription_status") or "active",
        created_at=row.get("created_at"),
        updated_at=row.get("updated_at"),
    )


async def get_profile(user_id: str) -> Profile | None:
    try:
        rows = await client().select("profiles", filters={"id": user_id}, limit=1)
    except PersistenceError as e:
        logger.error("Error fetching profile: %s", e)
        return None
    return row_to_profile(rows[0]) if rows else None


async def upsert_profile(user_id: str, fields: dict[str, Any]) -> Profile | None:
    """Update the user's profile, creating a free-tier one if none exists."""
    changes = {k: v for k, v in fields.items() if k in _UPDATABLE}
    db = client()
    try:
        existing = await db.select("profiles", filters={"id": user_id}, limit=1, columns="id")
        if existing:
            if not changes:
                return await get_profile(user_id)
            rows = await db.update("profiles", changes, filters={"id": user_id})
            return row_to_profile(rows[0]) if rows else None
        row = await db.insert(
            "profiles",
            {"id": user_id, "email": "", "subscription_tier": "free", **changes},
        )
    except PersistenceError as e:
        logger.error("Error saving profile: %s", e)
        return None
    return row_to_profile(row)


async def get_public_profile(user_id: str, viewer_id: str | None = None) -> PublicProfile | None:
    """A profile plus its featured content.

    The owner always sees their own profile; anyone else only when the
    profile is public. Returns None when hidden or missing.
    """
    profile = await get_profile(user_id)
    if profile is None:
        return None
    if viewer_id != user_id and not profile.public_profile:
        return None

    db = client()
    featured = {"user_id": user_id, "featured": True}
    try:
        stories, characters, locations, scenes = await asyncio.gather(
            db.select("stories", filters=featured, order="created_at", descending=True),
            db.select("characters", filters=featured, order="updated_at", descending=True),
            db.select("locations", filters=featured, order="updated_at", descending=True),
            db.select("scenes", filters=featured, order="updated_at", descending=True),
        )
    except PersistenceError as e:
        logger.error("Error fetching featured content: %s", e)
        return None

    return PublicProfile(
        profile=profile,
        stories=[row_to_story(r) for r in stories],
        characters=[row_to_character(r) for r in characters],
        locations=[row_to_location(r) for r in locations],
        scenes=[row_to_scene(r) for r in scenes],
    )
