"""The caller's profile and public author pages."""

from fastapi import APIRouter, Depends, HTTPException

from storydesk import cloud
from storydesk.models import AuthUser

from .deps import current_user, require_cloud, require_user
from .models import UpdateProfile

router = APIRouter()


@router.get("/profile", dependencies=[Depends(require_cloud)])
async def get_profile(user: AuthUser = Depends(require_user)):
    """Get the signed-in user's profile."""
    profile = await cloud.get_profile(user.id)
    if not profile:
        raise HTTPException(404, "Profile not found")
    return profile


@router.put("/profile", dependencies=[Depends(require_cloud)])
async def put_profile(body: UpdateProfile, user: AuthUser = Depends(require_user)):
    """Create or update the signed-in user's profile."""
    profile = await cloud.upsert_profile(user.id, body.changes())
    if not profile:
        raise HTTPException(502, "Could not save profile")
    return profile


@router.get("/profiles/{user_id}", dependencies=[Depends(require_cloud)])
async def public_profile(user_id: str, viewer: AuthUser | None = Depends(current_user)):
    """A public author page: profile plus featured stories and content."""
    page = await cloud.get_public_profile(user_id, viewer.id if viewer else None)
    if not page:
        raise HTTPException(404, "Profile not found")
    return page
