"""Account lifecycle events from the identity provider.

user.created / user.updated mirror the provider's user record into the
`profiles` table; user.deleted removes the user's stories and then their
profile. The two deletes are independent calls: a failure deleting stories
is logged and the profile is still removed.

Unlike the content stores, these handlers let PersistenceError propagate so
the receiver can answer 5xx and the provider retries delivery.
"""

import logging
from datetime import datetime, timezone
from typing import Any

from storydesk import cloud
from storydesk.identity import user_from_payload

logger = logging.getLogger(__name__)


def _iso(millis: int | None) -> str:
    if millis is None:
        return datetime.now(timezone.utc).isoformat()
    return datetime.fromtimestamp(millis / 1000, tz=timezone.utc).isoformat()


def _full_name(first: str | None, last: str | None) -> str | None:
    return " ".join(part for part in (first, last) if part) or None


async def handle_user_created(data: dict[str, Any]) -> None:
    user = user_from_payload(data)
    await cloud.client().insert(
        "profiles",
        {
            "id": user.id,
            "email": user.email,
            "full_name": _full_name(user.first_name, user.last_name),
            "avatar_url": user.image_url,
            "subscription_tier": "free",
            "created_at": _iso(data.get("created_at")),
        },
    )
    logger.info("Profile created for user %s", user.id)


async def handle_user_updated(data: dict[str, Any]) -> None:
    user = user_from_payload(data)
    await cloud.client().update(
        "profiles",
        {
            "email": user.email,
            "full_name": _full_name(user.first_name, user.last_name),
            "avatar_url": user.image_url,
            "updated_at": _iso(data.get("updated_at")),
        },
        filters={"id": user.id},
    )
    logger.info("Profile updated for user %s", user.id)


async def handle_user_deleted(user_id: str) -> None:
    db = cloud.client()
    try:
        await db.delete("stories", filters={"user_id": user_id})
    except cloud.PersistenceError as e:
        logger.error("Error deleting stories of user %s: %s", user_id, e)
    await db.delete("profiles", filters={"id": user_id})
    logger.info("Profile and data deleted for user %s", user_id)


async def handle_event(event: dict[str, Any]) -> bool:
    """Dispatch one verified event. Returns False for event types we ignore."""
    event_type = event.get("type")
    data = event.get("data") or {}
    logger.info("Webhook received: %s", event_type)
    if event_type == "user.created":
        await handle_user_created(data)
    elif event_type == "user.updated":
        await handle_user_updated(data)
    elif event_type == "user.deleted":
        await handle_user_deleted(data["id"])
    else:
        logger.info("Unhandled event type: %s", event_type)
        return False
    return True
