"""Health check, the caller's account, and admin plan management."""

from fastapi import APIRouter, Depends, HTTPException

from storydesk import subscription
from storydesk.data_layer import resolve_data_layer
from storydesk.identity import IdentityClient, IdentityError
from storydesk.models import AuthUser

from .deps import current_user, require_admin, require_identity
from .models import BulkUpdateMetadata, UpdateSubscription

router = APIRouter()


@router.get("/health")
async def health():
    """Health check."""
    return {"status": "ok"}


@router.get("/account")
async def account(user: AuthUser | None = Depends(current_user)):
    """Who is calling and which store serves them."""
    state = resolve_data_layer(user)
    return {
        "user": user,
        "is_pro": state.is_pro,
        "is_local": state.is_local,
    }


@router.get("/admin/users/{user_id}/metadata")
async def get_user_metadata(
    user_id: str,
    _admin: AuthUser = Depends(require_admin),
    identity: IdentityClient = Depends(require_identity),
):
    """A user's subscription metadata."""
    try:
        metadata = await subscription.get_user_metadata(identity, user_id)
    except IdentityError as e:
        raise HTTPException(502, str(e))
    if metadata is None:
        raise HTTPException(404, "No subscription metadata for user")
    return metadata


@router.patch("/admin/users/{user_id}/metadata")
async def update_user_metadata(
    user_id: str,
    body: UpdateSubscription,
    _admin: AuthUser = Depends(require_admin),
    identity: IdentityClient = Depends(require_identity),
):
    """Set a user's plan. Keys left out fall back to free / active."""
    try:
        user = await subscription.update_user_metadata(
            identity, user_id, body.model_dump(exclude_none=True)
        )
    except IdentityError as e:
        raise HTTPException(502, str(e))
    if user is None:
        raise HTTPException(404, "User not found")
    return user.public_metadata


@router.post("/admin/users/metadata/bulk")
async def bulk_update_metadata(
    body: BulkUpdateMetadata,
    _admin: AuthUser = Depends(require_admin),
    identity: IdentityClient = Depends(require_identity),
):
    """Give every user without a plan the default one."""
    try:
        outcome = await subscription.bulk_update_metadata(
            identity, body.default_subscription, body.default_status
        )
    except IdentityError as e:
        raise HTTPException(502, str(e))
    return {"message": "Bulk metadata update completed", **outcome}
