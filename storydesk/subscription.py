"""Subscription tier: classifying users and editing their plan metadata.

The plan lives in the identity provider's public metadata bag:

    {"subscription": "free" | "pro",
     "subscriptionStatus": "active" | "cancelled" | "past_due",
     "subscriptionTier": "free" | "pro"}
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from typing import Any

from storydesk.identity import IdentityClient, IdentityError
from storydesk.models import AuthUser, SubscriptionStatus, SubscriptionTier

logger = logging.getLogger(__name__)

_METADATA_KEYS = ("subscription", "subscriptionStatus", "subscriptionTier")


def is_pro_user(user: AuthUser | None) -> bool:
    """True if the user is on the pro plan.

    Either `subscription == "pro"` or `subscriptionStatus == "active"` is
    enough, so a free user whose status reads "active" also counts as pro.
    Absent users and missing or malformed metadata are free.
    """
    if user is None:
        return False
    metadata = user.public_metadata
    if not isinstance(metadata, Mapping):
        return False
    return (
        metadata.get("subscription") == "pro"
        or metadata.get("subscriptionStatus") == "active"
    )


async def get_user_metadata(identity: IdentityClient, user_id: str) -> dict[str, Any] | None:
    """The user's plan metadata, or None if they have never had a plan set."""
    user = await identity.get_user(user_id)
    if user is None:
        return None
    metadata = user.public_metadata
    if not metadata.get("subscription"):
        return None
    return {
        "subscription": metadata["subscription"],
        "subscriptionStatus": metadata.get("subscriptionStatus") or "active",
        "subscriptionTier": metadata.get("subscriptionTier") or metadata["subscription"],
    }


async def update_user_metadata(
    identity: IdentityClient, user_id: str, fields: Mapping[str, Any]
) -> AuthUser | None:
    """Write all three plan keys, defaulting whatever `fields` leaves out."""
    subscription = fields.get("subscription") or "free"
    metadata = {
        "subscription": subscription,
        "subscriptionStatus": fields.get("subscriptionStatus") or "active",
        "subscriptionTier": fields.get("subscriptionTier") or subscription,
    }
    return await identity.update_user_metadata(user_id, metadata)


async def upgrade_user_to_pro(identity: IdentityClient, user_id: str) -> AuthUser | None:
    return await update_user_metadata(
        identity,
        user_id,
        {"subscription": "pro", "subscriptionStatus": "active", "subscriptionTier": "pro"},
    )


async def downgrade_user_to_free(identity: IdentityClient, user_id: str) -> AuthUser | None:
    return await update_user_metadata(
        identity,
        user_id,
        {"subscription": "free", "subscriptionStatus": "active", "subscriptionTier": "free"},
    )


async def set_subscription_status(
    identity: IdentityClient, user_id: str, status: SubscriptionStatus
) -> AuthUser | None:
    """Change only the status (e.g. after a failed payment), keeping the plan."""
    current = await get_user_metadata(identity, user_id) or {}
    return await update_user_metadata(
        identity, user_id, {**current, "subscriptionStatus": status}
    )


async def _backfill_user(
    identity: IdentityClient,
    user: AuthUser,
    subscription: SubscriptionTier,
    status: SubscriptionStatus,
) -> dict[str, Any]:
    if user.public_metadata.get("subscription"):
        return {"user_id": user.id, "success": True, "skipped": True}
    metadata = {
        **user.public_metadata,
        "subscription": subscription,
        "subscriptionStatus": status,
        "subscriptionTier": subscription,
    }
    try:
        updated = await identity.update_user_metadata(user.id, metadata)
    except IdentityError as e:
        logger.error("Failed to update user %s: %s", user.id, e)
        return {"user_id": user.id, "success": False, "error": str(e)}
    if updated is None:
        return {"user_id": user.id, "success": False, "error": "User not found"}
    return {"user_id": user.id, "success": True, "skipped": False}


async def bulk_update_metadata(
    identity: IdentityClient,
    default_subscription: SubscriptionTier = "free",
    default_status: SubscriptionStatus = "active",
    page_size: int = 100,
) -> dict[str, Any]:
    """Give every user without a plan the default one.

    Pages through all users, then updates those lacking a `subscription`
    key concurrently, keeping their other metadata. Users that already have
    a plan are skipped. A failed update is counted, not raised; a failure
    to list users raises IdentityError.
    """
    users: list[AuthUser] = []
    offset = 0
    while True:
        page = await identity.list_users(limit=page_size, offset=offset)
        users.extend(page)
        if len(page) < page_size:
            break
        offset += page_size
    logger.info("Found %d users for metadata backfill", len(users))

    results = await asyncio.gather(
        *(_backfill_user(identity, u, default_subscription, default_status) for u in users)
    )
    return {
        "stats": {
            "total": len(users),
            "updated": sum(1 for r in results if r["success"] and not r["skipped"]),
            "skipped": sum(1 for r in results if r.get("skipped")),
            "failed": sum(1 for r in results if not r["success"]),
        },
        "results": list(results),
    }
